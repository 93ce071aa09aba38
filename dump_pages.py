"""
gol.gg Page Dumper
Saves the raw responses of each source the scraper reads so selectors
can be checked offline.

Saves files:
  - dump_listing_<season>.json   (tournament listing for one season)
  - dump_matchlist.html          (match list of one tournament)
  - dump_game_<id>.html          (one page-game page)

Usage:
    python dump_pages.py S14 "LEC Winter 2024" 57321
"""

import argparse
from pathlib import Path

from golgg import GolGGClient, FetchError


def save(out: Path, filename: str, content: str) -> Path:
    path = out / filename
    path.write_text(content, encoding="utf-8")
    size = len(content) // 1024
    print(f"  Saved {filename} ({size} KB)")
    return path


def dump_pages(client: GolGGClient, season: str, tournament: str,
               game_id: int, out: Path = Path(".")) -> list[Path]:
    out.mkdir(parents=True, exist_ok=True)
    targets = [
        (f"dump_listing_{season.lower()}.json", client.LISTING_URL,
         [("season", season)] + [("league[]", code) for code in client.DEFAULT_LEAGUES]),
        ("dump_matchlist.html", client.MATCHLIST_URL.format(tournament=tournament), None),
        (f"dump_game_{game_id}.html", client.GAME_URL.format(game_id=game_id), None),
    ]

    saved = []
    for filename, url, form in targets:
        print(f"  Fetching: {url}")
        page = client.fetch(url, form=form)
        if not page.ok:
            print(f"  FAIL: {FetchError(url, page.status)}")
            continue
        saved.append(save(out, filename, page.text))
    return saved


def main(argv: list[str] = None):
    p = argparse.ArgumentParser(description="Dump raw gol.gg pages")
    p.add_argument("season", help='e.g. "S14"')
    p.add_argument("tournament", help="Tournament name as in the listing")
    p.add_argument("game_id", type=int)
    p.add_argument("--out", type=Path, default=Path("."))
    args = p.parse_args(argv)

    saved = dump_pages(GolGGClient(), args.season, args.tournament, args.game_id, args.out)
    print(f"Done: {len(saved)}/3 pages saved")


if __name__ == "__main__":
    main()
