"""Shared fakes for the trakt2kodi tests."""
import json
from pathlib import Path

import pytest

from trakt2kodi.config import Settings
from trakt2kodi.images import ImageDownloadError
from trakt2kodi.models import (
    EpisodeIds,
    ExtendedEpisode,
    ListingEpisode,
    Season,
    ShowIds,
    TraktShow,
)


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code=200, payload=None, body=b"", chunks=None, reason=""):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload
        self._body = body
        self._chunks = chunks
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, (dict, list)):
            return self._payload
        if self._payload is None:
            return json.loads(self._body.decode() or "null")
        raise ValueError("No JSON object could be decoded")

    def iter_content(self, chunk_size=1):
        if self._chunks is not None:
            for chunk in self._chunks:
                if isinstance(chunk, Exception):
                    raise chunk
                yield chunk
        else:
            yield self._body

    def close(self):
        self.closed = True


class FakeSession:
    """Routes GET requests to canned responses by URL (prefix) match."""

    def __init__(self, routes=None):
        self.headers = {}
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, stream=False):
        self.calls.append((url, params))
        for prefix, response in self.routes.items():
            if url == prefix or url.startswith(prefix + "?"):
                if isinstance(response, Exception):
                    raise response
                return response
        return FakeResponse(status_code=404, reason="Not Found")


class FakeClient:
    """Stands in for TraktClient in merge and CLI tests."""

    def __init__(self, episodes=None, translations=None, studios=None):
        self.episodes = episodes or {}
        self.translations = translations or {}
        self.studios = studios or []
        self.calls = []

    def get_episode(self, slug, season, episode):
        self.calls.append(("episode", slug, season, episode))
        return self.episodes.get((season, episode))

    def get_episode_translation(self, slug, season, episode, language, country=None):
        self.calls.append(("translation", slug, season, episode, language, country))
        return self.translations.get((season, episode))

    def get_studios(self, slug):
        return self.studios

    def get_show_translation(self, slug, language, country=None):
        return None

    def get_season_translation(self, slug, season, language, country=None):
        return None


class FakeFetcher:
    """Records image downloads and writes placeholder bytes."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def fetch(self, url, dest, strip_webp=False):
        self.calls.append((url, Path(dest), strip_webp))
        if self.fail:
            raise ImageDownloadError(f"Error 500 while downloading {url}")
        Path(dest).write_bytes(b"image")
        return Path(dest)


@pytest.fixture
def settings():
    return Settings(api_key="test-key", request_delay_ms=0)


@pytest.fixture
def show():
    return TraktShow(
        title="The Expanse",
        year=2015,
        ids=ShowIds(trakt=77199, slug="the-expanse", imdb="tt3230854", tmdb=63639, tvdb=280619),
        overview="Humanity has colonized the solar system.",
        rating=8.4567,
        votes=25000,
        certification="TV-14",
        genres=["drama", "science-fiction"],
        first_aired="2015-12-15T02:00:00.000Z",
        status="ended",
        language="en",
        network="Prime Video",
        tagline="",
        runtime=45,
        trailer="https://youtube.com/watch?v=abc",
        aired_episodes=62,
        country="us",
    )


def make_listing(season, number, title="", trakt=None):
    return ListingEpisode(
        season=season,
        number=number,
        title=title or f"Episode {number}",
        ids=EpisodeIds(trakt=trakt or season * 1000 + number),
    )


def make_extended(season, number, title="Original Title", overview="orig",
                  screenshot="media.trakt.tv/images/episodes/1/screenshots/thumb/x.jpg.webp",
                  first_aired="2015-12-15T02:00:00.000Z", runtime=44):
    return ExtendedEpisode(
        season=season,
        number=number,
        title=title,
        ids=EpisodeIds(trakt=season * 1000 + number, tvdb=5000 + number),
        overview=overview,
        runtime=runtime,
        first_aired=first_aired,
        screenshot=screenshot,
    )


def make_season(number, episode_numbers, poster=None):
    return Season(
        number=number,
        episodes=[make_listing(number, n) for n in episode_numbers],
        poster=poster,
    )


def write_file(path: Path, size: int = 16) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\0" * size)
    return path

