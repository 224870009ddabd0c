"""Episode metadata merge engine.

Combines the season listing, the extended per-episode record and the
optional translation into one :class:`NormalizedEpisode` per local file.
Episodes are processed strictly one after another; an episode whose
listing entry or extended record is missing is skipped, never written
with partial data.
"""
import logging
from datetime import date, datetime, timezone
from typing import Iterator

from .config import Settings
from .models import (
    ExtendedEpisode,
    ListingEpisode,
    LocalEpisodeFile,
    NormalizedEpisode,
    Season,
    Translation,
    TraktShow,
)
from .scanner import SeasonMap, season_key
from .trakt import TraktClient


log = logging.getLogger(__name__)

ListingIndex = dict[str, list[ListingEpisode]]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a Trakt ISO-8601 timestamp into an aware UTC datetime."""
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        log.debug("Unparseable timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_day(value: str | None) -> str:
    """Truncate a timestamp to ``YYYY-MM-DD`` (UTC), or ``""``."""
    parsed = parse_timestamp(value)
    return parsed.date().isoformat() if parsed else ""


def show_title_from_slug(slug: str) -> str:
    return slug.replace("-", " ")


def index_season_listing(seasons: list[Season]) -> ListingIndex:
    """Index season listings by two-digit season key."""
    index: ListingIndex = {}
    for season in seasons:
        if not season.episodes:
            continue
        index[season_key(season.number)] = season.episodes
    return index


def find_listing_episode(
    index: ListingIndex,
    season: int,
    episode: int
) -> ListingEpisode | None:
    for listed in index.get(season_key(season), []):
        if listed.number == episode:
            return listed
    return None


def merge_episode(
    local: LocalEpisodeFile,
    listing: ListingEpisode,
    extended: ExtendedEpisode,
    translation: Translation | None,
    genres: list[str],
    slug: str,
    today: date
) -> NormalizedEpisode:
    """
    Merge the three metadata sources of one episode.

    Text fields: translation > extended record > listing title.
    Numbers and dates come from the extended record only. Season and
    episode are always those of the local file.
    """
    title = (
        (translation.title if translation else "")
        or extended.title
        or listing.title
        or ""
    )
    plot = (translation.overview if translation else "") or extended.overview or ""

    aired_at = parse_timestamp(extended.first_aired)
    aired = aired_at.date().isoformat() if aired_at else ""

    return NormalizedEpisode(
        title=title,
        original_title=extended.original_title or title,
        show_title=show_title_from_slug(slug),
        season=local.season_number,
        episode=local.episode_number,
        trakt_id=extended.ids.trakt or listing.ids.trakt,
        plot=plot,
        runtime=extended.runtime,
        genre=" / ".join(genres),
        premiered=aired,
        aired=aired,
        year=aired_at.year if aired_at else None,
        thumb=local.thumb_name if extended.screenshot else "",
        date_added=today.isoformat(),
        screenshot_url=extended.screenshot,
    )


def iter_episode_records(
    local_map: SeasonMap,
    listing_index: ListingIndex,
    client: TraktClient,
    show: TraktShow,
    settings: Settings,
    today: date | None = None
) -> Iterator[tuple[LocalEpisodeFile, NormalizedEpisode]]:
    """
    Yield a merged record for every local episode file that can be resolved.

    Each episode is fetched and merged completely before the next one is
    looked at, so remote requests never overlap.

    Args:
        local_map: Scanner output
        listing_index: Output of :func:`index_season_listing`
        client: Trakt client for extended records and translations
        show: The confirmed show (slug and genres)
        settings: Run settings (translation flag, language, country)
        today: Day stamped into ``dateadded``; defaults to the current UTC day
    """
    if today is None:
        today = datetime.now(timezone.utc).date()

    slug = show.ids.slug

    for season, episodes in local_map.items():
        for episode_number, local in episodes.items():
            label = f"S{season}E{episode_number:02d}"

            listing = find_listing_episode(listing_index, local.season_number, episode_number)
            if listing is None:
                log.warning("Episode metadata not found for %s (%s)", local.filename, label)
                continue

            extended = client.get_episode(slug, local.season_number, episode_number)
            if extended is None:
                log.warning("Skipping %s: extended metadata unavailable for %s", local.filename, label)
                continue

            translation = None
            if settings.fetch_episode_translation:
                translation = client.get_episode_translation(
                    slug, local.season_number, episode_number,
                    settings.language, settings.country,
                )
                if translation is None:
                    log.debug("No %s translation for %s", settings.language, label)

            yield local, merge_episode(
                local, listing, extended, translation, show.genres, slug, today
            )
