"""Tests for the interactive driver."""
from datetime import date

import pytest
from lxml import etree as ET

from conftest import FakeClient, FakeFetcher, make_extended, make_season, write_file
from trakt2kodi import cli
from trakt2kodi.config import Settings
from trakt2kodi.models import ShowIds, Translation, TraktShow

MB = 1024 * 1024
TODAY = date(2026, 10, 19)


def feed_input(monkeypatch, answers):
    answers = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))


def read_nfo(path):
    return ET.fromstring(path.read_bytes())


def test_ask_uses_default(monkeypatch):
    feed_input(monkeypatch, ["", "  typed  "])

    assert cli.ask("Show name", "The Expanse") == "The Expanse"
    assert cli.ask("Show name", "The Expanse") == "typed"


def test_ask_yes_no_repeats_until_valid(monkeypatch, capsys):
    feed_input(monkeypatch, ["maybe", "N"])

    assert cli.ask_yes_no("Continue?") is False
    assert "Please enter 'y' or 'n'." in capsys.readouterr().out


def test_should_overwrite_file(monkeypatch, tmp_path):
    path = write_file(tmp_path / "tvshow.nfo")

    feed_input(monkeypatch, ["n"])
    assert cli.should_overwrite_file(path) is False
    assert path.exists()

    feed_input(monkeypatch, ["y"])
    assert cli.should_overwrite_file(path) is True
    assert not path.exists()

    assert cli.should_overwrite_file(tmp_path / "missing.nfo") is True


def test_confirm_show_walks_results(monkeypatch, show):
    other = TraktShow(title="Other", year=None, ids=ShowIds(trakt=1, slug="other"))
    feed_input(monkeypatch, ["n", "y"])

    assert cli.confirm_show_from_search_results([other, show]) is show


def test_write_episode_nfos_end_to_end(tmp_path, show):
    season_dir = tmp_path / "Season 01"
    write_file(season_dir / "MyShow.S01E01.mkv", size=2 * MB)
    write_file(season_dir / "MyShow.S01E02.mkv", size=2 * MB)
    write_file(season_dir / "MyShow.S01E03.mkv", size=2 * MB)
    client = FakeClient(
        episodes={
            (1, 1): make_extended(1, 1),
            (1, 3): make_extended(1, 3, title="Third", screenshot=None),
        },
        translations={(1, 1): Translation(language="pt", country="br",
                                          title="Título Traduzido", overview="...")},
    )
    fetcher = FakeFetcher()
    settings = Settings(fetch_episode_translation=True, language="pt", country="br",
                        min_file_size_kb=1024)

    written, skipped, image_errors = cli.write_episode_nfos(
        show, [make_season(1, [1, 2, 3])], tmp_path, client, fetcher, settings, today=TODAY
    )

    assert (written, skipped, image_errors) == (2, 1, 0)

    first = read_nfo(season_dir / "MyShow.S01E01.nfo")
    assert first.findtext("title") == "Título Traduzido"
    assert first.findtext("thumb") == "MyShow.S01E01.jpg"
    assert first.findtext("dateadded") == "2026-10-19"
    assert first.findtext("showtitle") == "the expanse"

    assert not (season_dir / "MyShow.S01E02.nfo").exists()

    third = read_nfo(season_dir / "MyShow.S01E03.nfo")
    assert third.findtext("title") == "Third"
    assert third.findtext("thumb") == ""

    assert [call[1] for call in fetcher.calls] == [season_dir / "MyShow.S01E01.jpg"]
    assert (season_dir / "MyShow.S01E01.jpg").exists()


def test_write_episode_nfos_counts_image_errors(tmp_path, show, settings):
    write_file(tmp_path / "Season 01" / "MyShow.S01E01.mkv")
    client = FakeClient(episodes={(1, 1): make_extended(1, 1)})

    result = cli.write_episode_nfos(
        show, [make_season(1, [1])], tmp_path, client, FakeFetcher(fail=True), settings, today=TODAY
    )

    assert result == (1, 0, 1)
    assert (tmp_path / "Season 01" / "MyShow.S01E01.nfo").exists()


def test_write_episode_nfos_respects_image_toggle(tmp_path, show):
    write_file(tmp_path / "Season 01" / "MyShow.S01E01.mkv")
    client = FakeClient(episodes={(1, 1): make_extended(1, 1)})
    fetcher = FakeFetcher()

    cli.write_episode_nfos(
        show, [make_season(1, [1])], tmp_path, client, fetcher,
        Settings(download_episode_images=False), today=TODAY,
    )

    assert fetcher.calls == []
    assert read_nfo(tmp_path / "Season 01" / "MyShow.S01E01.nfo").findtext("thumb") == "MyShow.S01E01.jpg"


def test_write_episode_nfos_without_files(tmp_path, show, settings):
    (tmp_path / "Season 01").mkdir()
    client = FakeClient()

    assert cli.write_episode_nfos(show, [], tmp_path, client, FakeFetcher(), settings) == (0, 0, 0)
    assert client.calls == []


def test_write_show_nfo(tmp_path, show):
    (tmp_path / "poster.jpg").write_bytes(b"x")
    seasons = [make_season(0, [1], poster="media.trakt.tv/s0.jpg.webp"), make_season(1, [1, 2])]
    client = FakeClient(studios=["Alcon Television Group"])
    fetcher = FakeFetcher()
    settings = Settings(download_season_images=True)

    path = cli.write_show_nfo(show, seasons, tmp_path, client, fetcher, settings)

    root = read_nfo(path)
    assert path == tmp_path / "tvshow.nfo"
    assert root.findtext("title") == "The Expanse"
    assert [s.text for s in root.findall("studio")] == ["Alcon Television Group"]
    thumbs = [(t.get("aspect"), t.get("season"), t.text) for t in root.findall("thumb")]
    assert thumbs == [
        ("poster", None, "poster.jpg"),
        ("poster", "0", "season-specials-poster.jpg"),
    ]
    assert [(n.get("number"), n.text) for n in root.findall("namedseason")] == [
        ("0", "Season 0"),
        ("1", "Season 1"),
    ]
    assert fetcher.calls == [
        ("media.trakt.tv/s0.jpg.webp", tmp_path / "season-specials-poster.jpg", True),
    ]


def test_named_seasons_use_translation(tmp_path, show):
    class TranslatingClient(FakeClient):
        def get_season_translation(self, slug, season, language, country=None):
            if season == 1:
                return Translation(language=language, country=country, title="Primeira Temporada")
            return None

    settings = Settings(fetch_season_translation=True, language="pt", country="br")

    named = cli.build_named_seasons(
        [make_season(1, [1]), make_season(2, [1])], "the-expanse", tmp_path,
        TranslatingClient(), FakeFetcher(), settings,
    )

    assert [(s.number, s.name, s.poster) for s in named] == [
        (1, "Primeira Temporada", None),
        (2, "Season 2", None),
    ]


def test_main_requires_api_key(monkeypatch, capsys):
    monkeypatch.setattr(cli, "load_settings", lambda env_file=None: Settings())

    assert cli.main([]) == 1
    assert "TRAKT_API_KEY" in capsys.readouterr().out


class ScriptedClient(FakeClient):
    def __init__(self, show, seasons, **kwargs):
        super().__init__(**kwargs)
        self.show = show
        self.seasons = seasons
        self.queries = []

    def search_show(self, query):
        self.queries.append(query)
        return [self.show]

    def get_seasons(self, slug):
        return self.seasons


def test_main_full_run(monkeypatch, tmp_path, show, capsys):
    folder = tmp_path / "The Expanse"
    write_file(folder / "Season 01" / "The.Expanse.S01E01.mkv")
    client = ScriptedClient(show, [make_season(1, [1])], episodes={(1, 1): make_extended(1, 1)})

    monkeypatch.setattr(cli, "load_settings", lambda env_file=None: Settings(api_key="key"))
    monkeypatch.setattr(cli, "TraktClient", lambda api_key, delay: client)
    monkeypatch.setattr(cli, "ImageFetcher", lambda delay: FakeFetcher())
    feed_input(monkeypatch, [str(folder), "", "y"])

    assert cli.main([]) == 0

    assert client.queries == ["The Expanse"]
    assert (folder / "tvshow.nfo").exists()
    assert (folder / "Season 01" / "The.Expanse.S01E01.nfo").exists()
    assert "Episode NFOs: 1 | Skipped: 0 | Image errors: 0" in capsys.readouterr().out


def test_main_keeps_declined_tvshow_nfo_and_writes_episodes(monkeypatch, tmp_path, show, capsys):
    folder = tmp_path / "The Expanse"
    write_file(folder / "Season 01" / "The.Expanse.S01E01.mkv")
    (folder / "tvshow.nfo").write_text("old", encoding="utf-8")
    client = ScriptedClient(show, [make_season(1, [1])], episodes={(1, 1): make_extended(1, 1)})

    monkeypatch.setattr(cli, "load_settings", lambda env_file=None: Settings(api_key="key"))
    monkeypatch.setattr(cli, "TraktClient", lambda api_key, delay: client)
    monkeypatch.setattr(cli, "ImageFetcher", lambda delay: FakeFetcher())
    feed_input(monkeypatch, [str(folder), "", "y", "n"])

    assert cli.main([]) == 0

    assert (folder / "tvshow.nfo").read_text(encoding="utf-8") == "old"
    assert (folder / "Season 01" / "The.Expanse.S01E01.nfo").exists()
    assert "Episode NFOs: 1 | Skipped: 0" in capsys.readouterr().out

def test_main_missing_folder(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(cli, "load_settings", lambda env_file=None: Settings(api_key="key"))
    feed_input(monkeypatch, [str(tmp_path / "missing")])

    assert cli.main([]) == 1
    assert "Folder not found" in capsys.readouterr().out


def test_main_no_search_results(monkeypatch, tmp_path, show):
    class EmptySearch(ScriptedClient):
        def search_show(self, query):
            return []

    monkeypatch.setattr(cli, "load_settings", lambda env_file=None: Settings(api_key="key"))
    monkeypatch.setattr(cli, "TraktClient", lambda api_key, delay: EmptySearch(show, []))
    feed_input(monkeypatch, [str(tmp_path), "nothing"])

    assert cli.main([]) == 1


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "trakt2kodi" in capsys.readouterr().out
