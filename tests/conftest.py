import json

import pytest

from golgg import GolGGClient


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text


class FakeSession:
    """
    Stands in for requests.Session. `routes` maps URL to a FakeResponse, an
    exception instance to raise, or a callable taking the form data.
    Unknown URLs answer 404. Every request is recorded.
    """

    def __init__(self, routes: dict = None):
        self.routes = routes or {}
        self.headers = {}
        self.requests = []

    def request(self, method, url, data=None, timeout=None):
        self.requests.append((method, url, data))
        target = self.routes.get(url)
        if target is None:
            return FakeResponse(404, "not found")
        if isinstance(target, Exception):
            raise target
        if callable(target):
            return target(data)
        return target

    def urls(self) -> list[str]:
        return [url for _, url, _ in self.requests]


def game_page(first: tuple, second: tuple, anchor_order: list = None) -> str:
    """
    A page-game page: two roster tables (document order = `first`, `second`),
    each a (team, [players]) pair, and "<team> stats" anchors in `anchor_order`
    (defaults to table order).
    """
    if anchor_order is None:
        anchor_order = [first[0], second[0]]
    anchors = "".join(f'<a href="../teams/team-stats/1/" title="{team} stats">{team}</a>'
                      for team in anchor_order)
    tables = ""
    for team, players in (first, second):
        rows = "".join(f"<tr><td> {p} </td><td>3</td><td>1</td></tr>" for p in players)
        tables += (f"<table><tr><th colspan='3'>{team}</th></tr>"
                   f"<tr><td>Player</td><td>Kills</td><td>Deaths</td></tr>{rows}</table>")
    return f"<html><body><div>{anchors}</div>{tables}</body></html>"


def matchlist_page(rows: list[tuple]) -> str:
    """
    A tournament-matchlist page. Each row is
    (game_id, label, team1, score, team2, date); game_id None means no link.
    """
    body = ""
    for game_id, label, team1, score, team2, date in rows:
        if game_id is None:
            first = f"<td>{label}</td>"
        else:
            first = f'<td><a href="../game/stats/{game_id}/page-summary/">{label}</a></td>'
        body += (f"<tr>{first}<td>{team1}</td><td>{score}</td><td>{team2}</td>"
                 f"<td>{date}</td><td></td><td></td></tr>")
    return ("<html><body>"
            "<table><caption>Standings</caption><tr><th>Team</th></tr>"
            "<tr><td>x</td><td>x</td><td>x</td><td>x</td><td>x</td><td>x</td><td>x</td></tr></table>"
            "<table class='table_list'><caption>Tournament Results</caption>"
            "<tr><th>Game</th><th></th><th></th><th></th><th>Date</th><th></th><th></th></tr>"
            f"{body}</table></body></html>")


def listing_response(by_season: dict):
    """Route callable answering the listing POST per posted season."""
    def respond(data):
        season = dict(data)["season"]
        if season not in by_season:
            return FakeResponse(200, "[]")
        payload = by_season[season]
        if isinstance(payload, FakeResponse):
            return payload
        return FakeResponse(200, json.dumps(payload))
    return respond


def matchlist_url(tournament: str) -> str:
    return GolGGClient.MATCHLIST_URL.format(tournament=tournament)


def game_url(game_id: int) -> str:
    return GolGGClient.GAME_URL.format(game_id=game_id)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return GolGGClient(session=session)
