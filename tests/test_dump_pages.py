from conftest import FakeResponse, FakeSession, game_url, matchlist_url
from dump_pages import dump_pages
from golgg import GolGGClient


def test_dump_pages_saves_each_source(tmp_path):
    session = FakeSession({
        GolGGClient.LISTING_URL: lambda data: FakeResponse(200, '[{"trname": "LEC 2024"}]'),
        matchlist_url("LEC 2024"): FakeResponse(200, "<html>matchlist</html>"),
        game_url(57321): FakeResponse(200, "<html>game</html>"),
    })
    saved = dump_pages(GolGGClient(session=session), "S14", "LEC 2024", 57321, tmp_path / "dumps")

    assert [p.name for p in saved] == [
        "dump_listing_s14.json", "dump_matchlist.html", "dump_game_57321.html"]
    assert (tmp_path / "dumps" / "dump_game_57321.html").read_text(encoding="utf-8") == "<html>game</html>"
    assert dict(session.requests[0][2])["season"] == "S14"


def test_dump_pages_skips_failed_pages(tmp_path, capsys):
    session = FakeSession({matchlist_url("x"): FakeResponse(200, "<html></html>")})
    saved = dump_pages(GolGGClient(session=session), "S3", "x", 1, tmp_path)

    assert [p.name for p in saved] == ["dump_matchlist.html"]
    assert "FAIL: HTTP 404" in capsys.readouterr().out
