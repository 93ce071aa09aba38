"""
gol.gg scrape pipeline
======================
listing (per season) → tournaments_data.csv → match lists (per tournament)
→ per-game rosters → <season>_data.csv

Usage:
    python pipeline.py
    python pipeline.py --seasons 12-14 --leagues LCK,LEC --output-dir out
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import shutil
from dataclasses import dataclass, field
from itertools import groupby
from pathlib import Path

import pandas as pd
import requests

from golgg import GolGGClient, MatchRecord, ScrapeError, TournamentSummary

log = logging.getLogger(__name__)

TOURNAMENTS_FILE = "tournaments_data.csv"

TOURNAMENT_CSV_FIELDS = [
    "Season", "AvgTime", "FirstGame", "LastGame", "NbGames", "Region", "TournamentName",
]
SEASON_CSV_FIELDS = [
    "tournament_name", "game_name", "first_team_name", "score",
    "second_team_name", "first_team_players", "second_team_players",
]


@dataclass
class ScrapeConfig:
    output_dir: str = "tournaments_data"
    seasons: range = range(3, 15)
    leagues: list[str] = field(default_factory=lambda: list(GolGGClient.DEFAULT_LEAGUES))
    rate_limit: float = 0.0
    timeout: float = 30.0
    strict: bool = False


# ---------------------------------------------------------------------------
# Output directory + CSV encoding
# ---------------------------------------------------------------------------

def create_output_dir(root_dir: str) -> Path:
    """Start every run from an empty output directory."""
    root = Path(root_dir)
    if root.exists():
        shutil.rmtree(root)
    root.mkdir(parents=True)
    return root


def encode_rosters(rosters) -> str:
    """[["p1", "p2"], ["p3", "p4"]] — one inner list per game."""
    return json.dumps([list(players) for players in rosters], ensure_ascii=False)


def decode_rosters(text: str) -> list[list[str]]:
    return [list(players) for players in json.loads(text)]


def write_tournaments_csv(tournaments: list[TournamentSummary], filepath: Path):
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(TOURNAMENT_CSV_FIELDS)
        for t in tournaments:
            writer.writerow([
                t.season, t.average_game_duration, t.first_game_date, t.last_game_date,
                t.game_count, t.region, t.tournament_name,
            ])
    log.info("Wrote %d tournaments to %s", len(tournaments), filepath)


def load_tournament_summaries(filepath: Path) -> list[TournamentSummary]:
    """Read tournaments_data.csv back, keeping the file's row order."""
    df = pd.read_csv(filepath, dtype=str, keep_default_na=False)
    return [
        TournamentSummary(
            season=row["Season"],
            average_game_duration=row["AvgTime"],
            first_game_date=row["FirstGame"],
            last_game_date=row["LastGame"],
            game_count=row["NbGames"],
            region=row["Region"],
            tournament_name=row["TournamentName"],
        )
        for _, row in df.iterrows()
    ]


def season_file(root_dir: Path, season: str) -> Path:
    return Path(root_dir) / f"{season.lower()}_data.csv"


def write_season_csv(matches: list[MatchRecord], filepath: Path):
    with open(filepath, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=SEASON_CSV_FIELDS)
        writer.writeheader()
        for m in matches:
            writer.writerow({
                "tournament_name": m.tournament_name,
                "game_name": m.game_label,
                "first_team_name": m.first_team_name,
                "score": m.score,
                "second_team_name": m.second_team_name,
                "first_team_players": encode_rosters(m.first_team_rosters),
                "second_team_players": encode_rosters(m.second_team_rosters),
            })
    log.info("Wrote %d matches to %s", len(matches), filepath)


def group_by_season(tournaments: list[TournamentSummary]) -> list[tuple[str, list[TournamentSummary]]]:
    """Split on every change of season between consecutive rows."""
    return [(season, list(grp)) for season, grp in groupby(tournaments, key=lambda t: t.season)]


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def scrape_season(client: GolGGClient, tournaments: list[TournamentSummary],
                  strict: bool = False) -> list[MatchRecord]:
    """Match records of every tournament of one season, in listing order."""
    matches: list[MatchRecord] = []
    for t in tournaments:
        print(f"----- {t.tournament_name} -----", flush=True)
        try:
            matches.extend(client.get_tournament_matches(t.tournament_name, strict=strict))
        except (ScrapeError, requests.RequestException) as e:
            if strict:
                raise
            log.error("Failed to fetch matches for '%s': %s", t.tournament_name, e)
    return matches


def scrape_all_seasons(config: ScrapeConfig, client: GolGGClient = None) -> dict[str, int]:
    """Full run. Returns {season: number of match records written}."""
    if client is None:
        client = GolGGClient(rate_limit=config.rate_limit, timeout=config.timeout)
    root = create_output_dir(config.output_dir)

    print(f"[1/2] Fetching tournament listings for {len(config.seasons)} seasons ...")
    tournaments = client.get_tournaments(config.seasons, config.leagues)
    summary_path = root / TOURNAMENTS_FILE
    try:
        write_tournaments_csv(tournaments, summary_path)
        tournaments = load_tournament_summaries(summary_path)
    except (OSError, pd.errors.ParserError) as e:
        log.error("Error writing all tournaments data to csv: %s", e)
    print(f"      Found {len(tournaments)} tournaments")

    print("\n[2/2] Scraping match lists ...\n")
    written: dict[str, int] = {}
    for season, season_tournaments in group_by_season(tournaments):
        print(f"---------- {season} ----------", flush=True)
        matches = scrape_season(client, season_tournaments, strict=config.strict)
        try:
            write_season_csv(matches, season_file(root, season))
            written[season] = len(matches)
        except OSError as e:
            log.error("Error writing season %s tournaments data: %s", season, e)

    print(f"\n{'='*70}")
    print(f"  Tournaments   : {len(tournaments)}")
    print(f"  Season files  : {len(written)}")
    print(f"  Match records : {sum(written.values())}")
    print(f"  Output dir    : {root}")
    print(f"{'='*70}")
    return written


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_season_range(text: str) -> range:
    """'3-14' → range(3, 15); '7' → range(7, 8)"""
    lo, _, hi = text.partition("-")
    try:
        first, last = int(lo), int(hi or lo)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid season range: '{text}'") from None
    if last < first:
        raise argparse.ArgumentTypeError(f"empty season range: '{text}'")
    return range(first, last + 1)


def parse_leagues(text: str) -> list[str]:
    return [code.strip().upper() for code in text.split(",") if code.strip()]


def build_parser() -> argparse.ArgumentParser:
    defaults = ScrapeConfig()
    p = argparse.ArgumentParser(description="gol.gg tournament / match / roster scraper")
    p.add_argument("--output-dir", default=defaults.output_dir)
    p.add_argument("--seasons", type=parse_season_range, default=defaults.seasons,
                   help="Inclusive numeric range, e.g. 3-14")
    p.add_argument("--leagues", type=parse_leagues, default=defaults.leagues,
                   help="Comma-separated league codes; empty string for no filter")
    p.add_argument("--rate-limit", type=float, default=defaults.rate_limit,
                   help="Minimum seconds between requests")
    p.add_argument("--timeout", type=float, default=defaults.timeout)
    p.add_argument("--strict", action="store_true",
                   help="Abort on the first failing match instead of skipping it")
    p.add_argument("--log-level", default="INFO")
    return p


def main(argv: list[str] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s [%(levelname)s] %(message)s")

    config = ScrapeConfig(
        output_dir=args.output_dir,
        seasons=args.seasons,
        leagues=args.leagues,
        rate_limit=args.rate_limit,
        timeout=args.timeout,
        strict=args.strict,
    )
    try:
        scrape_all_seasons(config)
    except KeyboardInterrupt:
        log.warning("Interrupted, files of finished seasons are kept in %s", config.output_dir)
        return 130
    except (ScrapeError, requests.RequestException) as e:
        log.critical("Aborting (--strict): %s", e)
        return 1
    except OSError as e:
        log.critical("Cannot recreate output directory %s: %s", config.output_dir, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
