"""Trakt API client module."""
import logging
import time
from typing import Any

import requests

from .models import (
    EpisodeIds,
    ExtendedEpisode,
    ListingEpisode,
    Season,
    ShowIds,
    Translation,
    TraktShow,
)


log = logging.getLogger(__name__)

TRAKT_BASE_URL = "https://api.trakt.tv"
TRAKT_API_VERSION = "2"
DEFAULT_DELAY = 1.5  # seconds slept before every request


class TraktError(Exception):
    """Exception raised when a required Trakt lookup fails."""
    pass


def select_translation(
    translations: list[Translation],
    language: str,
    country: str | None = None
) -> Translation | None:
    """
    Pick the best translation for a language/country pair.

    An exact language+country match wins; otherwise the first entry for the
    language is used.

    Returns:
        Matching Translation or None
    """
    language = language.lower()
    country = country.lower() if country else None

    same_language = [t for t in translations if (t.language or "").lower() == language]
    if country:
        for translation in same_language:
            if (translation.country or "").lower() == country:
                return translation
    return same_language[0] if same_language else None


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _first_image(images: Any, aspect: str) -> str | None:
    if not isinstance(images, dict):
        return None
    urls = images.get(aspect)
    if isinstance(urls, list) and urls and isinstance(urls[0], str):
        return urls[0]
    return None


def parse_show(data: dict) -> TraktShow | None:
    """Convert a Trakt show object into a :class:`TraktShow`."""
    ids = _dict(data.get("ids"))
    if _int(ids.get("trakt")) is None or not _text(ids.get("slug")):
        return None

    images = _dict(data.get("images"))
    rating = data.get("rating")

    return TraktShow(
        title=_text(data.get("title")),
        year=_int(data.get("year")),
        ids=ShowIds(
            trakt=_int(ids["trakt"]),
            slug=ids["slug"],
            imdb=_text(ids.get("imdb")) or None,
            tmdb=_int(ids.get("tmdb")),
            tvdb=_int(ids.get("tvdb")),
        ),
        overview=_text(data.get("overview")),
        rating=float(rating) if isinstance(rating, (int, float)) else None,
        votes=_int(data.get("votes")),
        certification=_text(data.get("certification")),
        genres=[g for g in _list(data.get("genres")) if isinstance(g, str)],
        first_aired=_text(data.get("first_aired")) or None,
        status=_text(data.get("status")),
        language=_text(data.get("language")),
        network=_text(data.get("network")),
        original_title=_text(data.get("original_title")),
        tagline=_text(data.get("tagline")),
        runtime=_int(data.get("runtime")),
        trailer=_text(data.get("trailer")),
        aired_episodes=_int(data.get("aired_episodes")),
        country=_text(data.get("country")),
        images={
            aspect: [u for u in urls if isinstance(u, str)]
            for aspect, urls in images.items()
            if isinstance(urls, list)
        },
    )


def parse_episode_ids(ids: Any) -> EpisodeIds:
    ids = _dict(ids)
    return EpisodeIds(
        trakt=_int(ids.get("trakt")) or 0,
        tvdb=_int(ids.get("tvdb")),
        imdb=_text(ids.get("imdb")) or None,
        tmdb=_int(ids.get("tmdb")),
    )


def parse_season(data: dict) -> Season | None:
    """Convert a Trakt season object (with ``extended=episodes``)."""
    number = _int(data.get("number"))
    if number is None:
        return None

    episodes = []
    for item in _list(data.get("episodes")):
        if not isinstance(item, dict):
            continue
        episode_number = _int(item.get("number"))
        if episode_number is None:
            continue
        episode_season = _int(item.get("season"))
        episodes.append(ListingEpisode(
            season=number if episode_season is None else episode_season,
            number=episode_number,
            title=_text(item.get("title")),
            ids=parse_episode_ids(item.get("ids")),
        ))

    return Season(
        number=number,
        episodes=episodes,
        poster=_first_image(data.get("images"), "poster"),
    )


def parse_extended_episode(data: dict) -> ExtendedEpisode | None:
    """Convert a full Trakt episode object into an :class:`ExtendedEpisode`."""
    season = _int(data.get("season"))
    number = _int(data.get("number"))
    if season is None or number is None:
        return None

    return ExtendedEpisode(
        season=season,
        number=number,
        title=_text(data.get("title")),
        ids=parse_episode_ids(data.get("ids")),
        overview=_text(data.get("overview")),
        runtime=_int(data.get("runtime")),
        first_aired=_text(data.get("first_aired")) or None,
        original_title=_text(data.get("original_title")),
        screenshot=_first_image(data.get("images"), "screenshot"),
    )


def parse_translations(data: list) -> list[Translation]:
    return [
        Translation(
            language=_text(item.get("language")),
            country=_text(item.get("country")) or None,
            title=_text(item.get("title")),
            overview=_text(item.get("overview")),
            tagline=_text(item.get("tagline")),
        )
        for item in data
        if isinstance(item, dict)
    ]


class TraktClient:
    """Client for the Trakt API.

    Every request is preceded by a fixed delay and requests are never
    retried. Lookups that are optional for a run return ``None`` (or an
    empty list) on failure; the search and season listing, which a run
    cannot continue without, raise :class:`TraktError`.
    """

    def __init__(
        self,
        api_key: str,
        delay: float = DEFAULT_DELAY,
        session: requests.Session | None = None
    ):
        """
        Initialize the Trakt client.

        Args:
            api_key: Trakt API key (client id). An empty key turns every
                     lookup into an absent result.
            delay: Seconds to sleep before each request.
            session: Optional requests session (shared connection pool).
        """
        self.api_key = api_key
        self.delay = delay
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "trakt-api-version": TRAKT_API_VERSION,
            "trakt-api-key": api_key,
        })

    def _wait(self) -> None:
        if self.delay > 0:
            time.sleep(self.delay)

    def _request(
        self,
        endpoint: str,
        params: dict | None = None,
        required: bool = False
    ) -> Any:
        """
        Make a GET request to the Trakt API.

        Args:
            endpoint: API endpoint (e.g., '/shows/breaking-bad')
            params: Query parameters
            required: Raise TraktError instead of returning None on failure

        Returns:
            Decoded JSON response or None on error
        """
        if not self.api_key:
            log.error("Missing TRAKT_API_KEY, skipping GET %s", endpoint)
            return None

        self._wait()

        url = f"{TRAKT_BASE_URL}{endpoint}"
        log.debug("GET %s params=%s", endpoint, params or {})

        try:
            response = self.session.get(url, params=params)
        except requests.exceptions.RequestException as e:
            if required:
                raise TraktError(f"Request to {endpoint} failed: {e}") from e
            log.warning("Request to %s failed: %s", endpoint, e)
            return None

        log.debug("Response status: %s", response.status_code)

        if not response.ok:
            message = f"{endpoint} returned HTTP {response.status_code} {response.reason or ''}".strip()
            if required:
                raise TraktError(f"Failed to fetch {message}")
            log.warning("Failed to fetch %s", message)
            return None

        try:
            return response.json()
        except ValueError:
            if required:
                raise TraktError(f"Malformed JSON from {endpoint}") from None
            log.warning("Malformed JSON from %s", endpoint)
            return None

    def search_show(self, query: str) -> list[TraktShow]:
        """
        Search Trakt for shows by name.

        Args:
            query: Show name to search for

        Returns:
            Candidate shows in Trakt's relevance order

        Raises:
            TraktError: If the search request fails
        """
        log.info('Searching for "%s" on Trakt...', query)
        data = self._request(
            "/search/show",
            {"query": query, "extended": "full,images"},
            required=True,
        )
        if not isinstance(data, list):
            return []

        shows = []
        for result in data:
            show = parse_show(_dict(result.get("show"))) if isinstance(result, dict) else None
            if show:
                shows.append(show)
        return shows

    def get_show(self, slug: str) -> TraktShow | None:
        """Look a show up directly by its slug."""
        data = self._request(f"/shows/{slug}", {"extended": "full,images"})
        if not isinstance(data, dict):
            return None
        return parse_show(data)

    def get_seasons(self, slug: str) -> list[Season]:
        """
        Fetch every season of a show together with its episode listing.

        Raises:
            TraktError: If the request fails
        """
        log.info("Downloading seasons and episodes from Trakt...")
        data = self._request(
            f"/shows/{slug}/seasons",
            {"extended": "episodes,images"},
            required=True,
        )
        if not isinstance(data, list):
            return []

        seasons = []
        for item in data:
            season = parse_season(item) if isinstance(item, dict) else None
            if season:
                seasons.append(season)
        return seasons

    def get_season_translation(
        self,
        slug: str,
        season: int,
        language: str,
        country: str | None = None
    ) -> Translation | None:
        """Fetch the translated title of a season."""
        log.info("Fetching translation for Season %s...", season)
        data = self._request(f"/shows/{slug}/seasons/{season}/translations/{language}")
        if not isinstance(data, list):
            return None
        return select_translation(parse_translations(data), language, country)

    def get_studios(self, slug: str) -> list[str]:
        """Return the studio names of a show (empty on failure)."""
        data = self._request(f"/shows/{slug}/studios")
        if not isinstance(data, list):
            log.warning('No studios available for "%s"', slug)
            return []
        return [
            item["name"] for item in data
            if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"]
        ]

    def get_show_translation(
        self,
        slug: str,
        language: str,
        country: str | None = None
    ) -> Translation | None:
        """Fetch translated show title, overview and tagline."""
        if not language:
            log.info("No LANGUAGE defined. Skipping translation and using the original title.")
            return None

        data = self._request(f"/shows/{slug}/translations/{language}")
        if not isinstance(data, list):
            return None
        return select_translation(parse_translations(data), language, country)

    def get_episode(self, slug: str, season: int, episode: int) -> ExtendedEpisode | None:
        """
        Fetch the extended record of one episode.

        Args:
            slug: Trakt show slug
            season: Season number
            episode: Episode number

        Returns:
            ExtendedEpisode if found, None otherwise
        """
        log.info("Fetching extended metadata for S%02dE%02d...", season, episode)
        data = self._request(
            f"/shows/{slug}/seasons/{season}/episodes/{episode}",
            {"extended": "full,images"},
        )
        if not isinstance(data, dict):
            return None
        return parse_extended_episode(data)

    def get_episode_translation(
        self,
        slug: str,
        season: int,
        episode: int,
        language: str,
        country: str | None = None
    ) -> Translation | None:
        """Fetch the translated title and overview of one episode."""
        log.info("Fetching translation for S%02dE%02d (%s-%s)...", season, episode, language, country or "")
        data = self._request(f"/shows/{slug}/seasons/{season}/episodes/{episode}/translations/{language}")
        if not isinstance(data, list):
            return None
        return select_translation(parse_translations(data), language, country)
