"""
gol.gg League of Legends Data Gatherer
======================================
Scrapes tournament, match and per-game roster data from gol.gg.

Data sources:
  1. Tournament listing endpoint  (ajax.trlist.php, form POST) → JSON per season
  2. Tournament match-list page   → "results" table, one row per series
  3. Per-game page (page-game)    → two roster tables, one per team

The match-list row only links to the *summary* page of the first game; the
remaining games of the series live at consecutive numeric ids.

Install:
    pip install requests beautifulsoup4 lxml
"""

import json
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Optional

import requests
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
FORFEIT = "FF"
SCORE_SEPARATOR = " - "
_OPERAND_RE = re.compile(r"[+-]?\d+", re.ASCII)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ScrapeError(Exception):
    """Base class for everything the scraper treats as a skippable unit failure."""


class ScoreFormatError(ScrapeError, ValueError):
    pass


class FetchError(ScrapeError):
    def __init__(self, url: str, status: int):
        super().__init__(f"HTTP {status} for {url}")
        self.url = url
        self.status = status


class RosterResolutionError(ScrapeError):
    pass


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TournamentSummary:
    """One row of the tournament listing for a season."""
    season: str                     # "S7"
    average_game_duration: str      # "32:15"
    first_game_date: str
    last_game_date: str
    game_count: str
    region: str
    tournament_name: str            # also the match-list URL slug

    @classmethod
    def from_listing(cls, season: str, payload: dict) -> "TournamentSummary":
        def value(key: str) -> str:
            raw = payload.get(key)
            if raw is None:
                return NOT_AVAILABLE
            return raw if isinstance(raw, str) else str(raw)

        return cls(
            season=season,
            average_game_duration=value("avgtime"),
            first_game_date=value("firstgame"),
            last_game_date=value("lastgame"),
            game_count=value("nbgames"),
            region=value("region"),
            tournament_name=value("trname"),
        )


@dataclass(frozen=True)
class MatchRecord:
    """A best-of-N series with the roster each team fielded in every game."""
    tournament_name: str
    game_label: str
    first_team_name: str
    score: str                      # raw "X - Y"
    second_team_name: str
    match_date: str
    first_team_rosters: tuple = ()  # tuple[tuple[str, ...], ...], index = game number - 1
    second_team_rosters: tuple = ()
    unresolved_games: tuple = ()    # 1-based game numbers with no team attribution

    @property
    def games_resolved(self) -> int:
        return len(self.first_team_rosters) - len(self.unresolved_games)


@dataclass
class SeriesRosters:
    by_team: dict = field(default_factory=dict)   # team -> list[list[str]]
    unresolved_games: list = field(default_factory=list)

    def rosters_for(self, team: str) -> tuple:
        return tuple(tuple(players) for players in self.by_team.get(team, []))


@dataclass(frozen=True)
class PageResponse:
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self):
        return json.loads(self.text)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def parse_score(score: str) -> int:
    """
    Total number of games played in a series, from a "X - Y" score.
    Either side being "FF" (forfeit) means no game was played: returns 0.
    """
    parts = score.split(SCORE_SEPARATOR)
    if len(parts) != 2:
        raise ScoreFormatError(f"Invalid score format: '{score}'. Expected format 'X - Y'.")

    left, right = parts[0].strip(), parts[1].strip()
    if left == FORFEIT or right == FORFEIT:
        return 0
    # int() alone would also take "1_0" and non-ASCII digits
    if not (_OPERAND_RE.fullmatch(left) and _OPERAND_RE.fullmatch(right)):
        raise ScoreFormatError(f"Non-numeric operand in score '{score}'")
    return int(left) + int(right)


def cell_text(cell: Tag) -> str:
    return cell.get_text().strip()


def row_cells(row: Tag) -> list[str]:
    return [cell_text(td) for td in row.find_all("td")]


def find_captioned_table(soup: BeautifulSoup, caption: str) -> Optional[Tag]:
    """First <table> whose <caption> contains `caption` (case-insensitive)."""
    needle = caption.lower()
    for table in soup.find_all("table"):
        cap = table.find("caption")
        if cap and needle in cap.get_text().lower():
            return table
    return None


def table_body_rows(table: Tag) -> list[Tag]:
    """All <tr> of a table except the header row."""
    return table.find_all("tr")[1:]


def extract_table(soup: BeautifulSoup, caption: str) -> list[list[str]]:
    table = find_captioned_table(soup, caption)
    if table is None:
        return []
    return [row_cells(row) for row in table_body_rows(table)]


def extract_roster_tables(soup: BeautifulSoup) -> Optional[tuple[list[str], list[str]]]:
    """
    The two positional roster tables of a game page, as player names.
    None if the page has fewer than two tables.

    Structure (per team):
      <table>
        <tr><th>...team header...</th></tr>
        <tr><td>Player</td><td>Kills</td>...</tr>     (skipped)
        <tr><td> Faker </td><td>3</td>...</tr>
      </table>
    """
    tables = soup.find_all("table")[:2]
    if len(tables) < 2:
        return None

    rosters: list[list[str]] = []
    for table in tables:
        players = []
        for row in table_body_rows(table):
            cells = row_cells(row)
            if not cells or not cells[0] or cells[0] == "Player":
                continue
            players.append(cells[0])
        rosters.append(players)
    return rosters[0], rosters[1]


def team_anchor_order(soup: BeautifulSoup, team_names: tuple[str, str]) -> list[str]:
    """Team names in the order their "<team> stats" anchors first appear."""
    titles = {f"{name} stats": name for name in team_names}
    order: list[str] = []
    for a in soup.find_all("a", title=True):
        team = titles.get(a["title"])
        if team is not None and team not in order:
            order.append(team)
    return order


def bind_rosters(soup: BeautifulSoup, tables: tuple[list[str], list[str]],
                 team_names: tuple[str, str]) -> Optional[dict[str, list[str]]]:
    """
    Attribute the two roster tables to the two teams.

    Table order on the page does not follow the match-list's first/second
    team order; the "<team> stats" anchors do. The first team anchor in
    document order owns the first table. If only one team is found, the
    other team takes the remaining table. Returns None if neither is found.
    """
    order = team_anchor_order(soup, team_names)
    if not order:
        return None
    if len(order) == 1:
        other = team_names[1] if order[0] == team_names[0] else team_names[0]
        logger.debug(f"Only '{order[0]}' found by anchor, binding '{other}' to the remaining table")
        order.append(other)
    return {order[0]: tables[0], order[1]: tables[1]}


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class GolGGClient:
    BASE_URL = "https://gol.gg"
    LISTING_URL = BASE_URL + "/tournament/ajax.trlist.php"
    MATCHLIST_URL = BASE_URL + "/tournament/tournament-matchlist/{tournament}/"
    GAME_URL = BASE_URL + "/game/stats/{game_id}/page-game/"
    USER_AGENT = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36")

    DEFAULT_LEAGUES = [
        "WORLDS", "IEM", "LCK", "LCS", "LEC", "LMS", "LPL", "MSC", "MSI", "AC",
        "CBLOL", "IWC", "LCL", "LCO", "LJL", "LLA", "LST", "MSS", "PCS", "VCS",
    ]
    RESULTS_CAPTION = "results"
    MATCH_ROW_COLUMNS = 7

    _GAME_ID_RE = re.compile(r"/game/stats/(\d+)/")

    def __init__(self, session=None, rate_limit: float = 0.0, timeout: float = 30):
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.USER_AGENT})
        self.rate_limit = rate_limit
        self.timeout = timeout
        self._last: float = 0.0

    # ------------------------------------------------------------------ #
    # Core HTTP helpers                                                    #
    # ------------------------------------------------------------------ #

    def _wait(self):
        wait = self.rate_limit - (time.time() - self._last)
        if wait > 0:
            logger.debug(f"Rate limit: waiting {wait:.1f}s ...")
            time.sleep(wait)

    def fetch(self, url: str, form: list = None) -> PageResponse:
        """One GET (or form POST when `form` is given). No retries."""
        self._wait()
        if form is None:
            logger.info(f"Fetching: {url}")
            resp = self.session.request("GET", url, timeout=self.timeout)
        else:
            logger.info(f"Posting: {url}")
            resp = self.session.request("POST", url, data=form, timeout=self.timeout)
        self._last = time.time()
        return PageResponse(resp.status_code, resp.text)

    def _fetch_html(self, url: str) -> BeautifulSoup:
        page = self.fetch(url)
        if not page.ok:
            raise FetchError(url, page.status)
        return BeautifulSoup(page.text, "lxml")

    # ================================================================== #
    # 1. TOURNAMENT LISTING                                               #
    # ================================================================== #

    def get_season_tournaments(self, season: str,
                               leagues: list[str] = None) -> list[TournamentSummary]:
        """
        Tournaments of one season ("S7"). A failed request or an undecodable
        body is logged and yields no rows.
        """
        if leagues is None:
            leagues = self.DEFAULT_LEAGUES
        form = [("season", season)] + [("league[]", code) for code in leagues]

        try:
            page = self.fetch(self.LISTING_URL, form=form)
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch data for season {season}: {e}")
            return []
        if not page.ok:
            logger.warning(f"Failed to fetch data for season {season}: HTTP {page.status}")
            return []

        try:
            payload = page.json()
        except ValueError as e:
            logger.warning(f"Undecodable listing for season {season}: {e}")
            return []
        if not isinstance(payload, list):
            logger.warning(f"Unexpected listing payload for season {season}: {type(payload).__name__}")
            return []

        tournaments = [TournamentSummary.from_listing(season, item)
                       for item in payload if isinstance(item, dict)]
        logger.info(f"Found {len(tournaments)} tournaments for {season}")
        return tournaments

    def get_tournaments(self, seasons, leagues: list[str] = None) -> list[TournamentSummary]:
        """Listing for each numeric season, in order: 3 → "S3", ..."""
        all_t: list[TournamentSummary] = []
        for num in seasons:
            all_t.extend(self.get_season_tournaments(f"S{num}", leagues))
        return all_t

    # ================================================================== #
    # 2. MATCH LIST                                                       #
    #    Cols: Game|Team1|Score|Team2|Date|(unused)|(unused)              #
    # ================================================================== #

    def get_tournament_matches(self, tournament: str,
                               strict: bool = False) -> list[MatchRecord]:
        """
        Every series in a tournament's "results" table, rosters included.
        Raises FetchError if the match-list page itself cannot be fetched.
        A failing row is logged and skipped, unless `strict`.
        """
        soup = self._fetch_html(self.MATCHLIST_URL.format(tournament=tournament))
        table = find_captioned_table(soup, self.RESULTS_CAPTION)
        if table is None:
            logger.warning(f"No results table on '{tournament}'")
            return []

        matches: list[MatchRecord] = []
        for row in table_body_rows(table):
            cells = row_cells(row)
            if len(cells) != self.MATCH_ROW_COLUMNS:
                continue
            try:
                matches.append(self._parse_match_row(tournament, row, cells))
            except (ScrapeError, requests.RequestException) as e:
                if strict:
                    raise
                logger.error(f"Skipping '{cells[0]}' ({cells[1]} vs {cells[3]}) in '{tournament}': {e}")

        logger.info(f"Found {len(matches)} matches on '{tournament}'")
        return matches

    def _parse_match_row(self, tournament: str, row: Tag, cells: list[str]) -> MatchRecord:
        game_label, team1, score, team2, date = cells[:5]
        n_games = parse_score(score)

        rosters = SeriesRosters()
        if n_games > 0:
            link = (row.find("a", href=lambda h: h and "page-summary" in h)
                    or row.find("a", href=True))
            if link is None:
                raise RosterResolutionError(f"No game link for {team1} vs {team2}")
            rosters = self.resolve_rosters(n_games, link["href"], team1, team2)

        return MatchRecord(
            tournament_name=tournament,
            game_label=game_label,
            first_team_name=team1,
            score=score,
            second_team_name=team2,
            match_date=date,
            first_team_rosters=rosters.rosters_for(team1),
            second_team_rosters=rosters.rosters_for(team2),
            unresolved_games=tuple(rosters.unresolved_games),
        )

    # ================================================================== #
    # 3. ROSTERS                                                          #
    # ================================================================== #

    def game_id_from_link(self, href: str) -> int:
        """
        '../game/stats/12345/page-summary/' → 12345
        The link is first rewritten to its absolute page-game form.
        """
        link = href.replace("..", self.BASE_URL, 1).replace("page-summary", "page-game")
        m = self._GAME_ID_RE.search(link)
        if not m:
            raise RosterResolutionError(f"No game id in link '{href}'")
        return int(m.group(1))

    def resolve_rosters(self, total_games: int, summary_href: str,
                        first_team: str, second_team: str) -> SeriesRosters:
        """
        Visit the page-game page of each game in the series (consecutive ids
        starting at the linked game) and collect each team's roster.
        Any failing game page fails the whole series.
        """
        if first_team == second_team:
            raise RosterResolutionError(f"Both sides are named '{first_team}', rosters cannot be told apart")
        base_id = self.game_id_from_link(summary_href)
        teams = (first_team, second_team)
        result = SeriesRosters(by_team={first_team: [], second_team: []})

        for offset in range(total_games):
            url = self.GAME_URL.format(game_id=base_id + offset)
            try:
                soup = self._fetch_html(url)
            except FetchError as e:
                raise RosterResolutionError(f"Game {offset + 1} of {first_team} vs {second_team}: {e}") from e

            tables = extract_roster_tables(soup)
            if tables is None:
                logger.warning(f"Game {offset + 1} ({url}): fewer than two roster tables, roster left empty")
                bound = None
            else:
                bound = bind_rosters(soup, tables, teams)
                if bound is None:
                    logger.warning(f"Game {offset + 1} ({url}): no anchor for "
                                   f"'{first_team}' or '{second_team}', roster left empty")
            if bound is None:
                result.unresolved_games.append(offset + 1)
                bound = {first_team: [], second_team: []}

            for team in teams:
                result.by_team[team].append(bound[team])

        return result
