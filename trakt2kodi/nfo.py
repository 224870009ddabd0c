"""Builders for Kodi NFO documents (``tvshow.nfo`` and episode NFOs)."""
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from lxml import etree as ET

from .episodes import to_day
from .models import NamedSeason, NormalizedEpisode, Translation, TraktShow


XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
GENERATOR = "trakt2kodi"

SORT_ARTICLES = re.compile(r'^(A |An |The )', re.IGNORECASE)

# Characters XML 1.0 cannot carry, not even escaped
INVALID_XML_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]')


def sort_title(title: str) -> str:
    """Strip a leading English article for sorting."""
    return SORT_ARTICLES.sub('', title)


def season_poster_name(season_number: int) -> str:
    """Local filename Kodi expects for a season poster."""
    if season_number == 0:
        return "season-specials-poster.jpg"
    return f"season{season_number:02d}-poster.jpg"


def _value(value: Any) -> str:
    if value is None:
        return ""
    return INVALID_XML_CHARS.sub('', str(value))


def add_child(parent: ET._Element, tag: str, value: Any = None, **attrib: str) -> ET._Element:
    """Append ``<tag attrib>value</tag>``; ``None`` renders as an empty element."""
    child = ET.SubElement(parent, tag, attrib)
    child.text = _value(value)
    return child


def build_tvshow_nfo(
    show: TraktShow,
    translation: Translation | None = None,
    studios: list[str] | None = None,
    local_artwork: dict[str, str] | None = None,
    named_seasons: list[NamedSeason] | None = None
) -> ET._Element:
    """
    Build the ``<tvshow>`` document.

    Args:
        show: Show record from Trakt
        translation: Optional translation; its title, overview and tagline
                     take precedence over the show's own
        studios: Studio names (falls back to the network when empty)
        local_artwork: Aspect to filename of artwork present in the show folder
        named_seasons: Season display names and poster files

    Returns:
        The root element
    """
    studios = studios or []
    title = (translation.title if translation else "") or show.title
    plot = (translation.overview if translation else "") or show.overview
    tagline = (translation.tagline if translation else "") or show.tagline

    root = ET.Element("tvshow")
    add_child(root, "title", title)
    add_child(root, "originaltitle", show.original_title or show.title)
    add_child(root, "showtitle", title)
    add_child(root, "sorttitle", sort_title(title))
    add_child(root, "year", show.year)
    add_child(root, "userrating", f"{show.rating:.1f}" if show.rating is not None else "")
    add_child(root, "votes", show.votes)
    add_child(root, "plot", plot)
    add_child(root, "tagline", tagline)
    add_child(root, "runtime", show.runtime)
    add_child(root, "genre", " / ".join(show.genres))
    add_child(root, "premiered", to_day(show.first_aired))
    add_child(root, "status", show.status)
    add_child(root, "mpaa", show.certification)
    add_child(root, "certification", show.certification)
    add_child(root, "trailer", show.trailer)
    add_child(root, "country", show.country)
    add_child(root, "episode", show.aired_episodes)
    add_child(root, "language", show.language)

    ids = show.ids
    add_child(root, "uniqueid", ids.trakt, type="trakt", default="true")
    for id_type, value in (("imdb", ids.imdb), ("tmdb", ids.tmdb), ("tvdb", ids.tvdb)):
        if value:
            add_child(root, "uniqueid", value, type=id_type, default="false")

    for studio in studios or ([show.network] if show.network else []):
        add_child(root, "studio", studio)

    for aspect, filename in (local_artwork or {}).items():
        add_child(root, "thumb", filename, aspect=aspect, preview=filename)

    named_seasons = named_seasons or []
    for season in named_seasons:
        if season.poster:
            add_child(root, "thumb", season.poster,
                      aspect="poster", season=str(season.number), type="season")

    for season in named_seasons:
        add_child(root, "namedseason", season.name, number=str(season.number))

    return root


def build_episode_nfo(record: NormalizedEpisode) -> ET._Element:
    """Build the ``<episodedetails>`` document for one merged episode."""
    root = ET.Element("episodedetails")
    add_child(root, "title", record.title)
    add_child(root, "originaltitle", record.original_title)
    add_child(root, "showtitle", record.show_title)
    add_child(root, "season", record.season)
    add_child(root, "episode", record.episode)
    add_child(root, "uniqueid", record.trakt_id, type="trakt", default="true")
    add_child(root, "plot", record.plot)
    add_child(root, "runtime", record.runtime)
    add_child(root, "genre", record.genre)
    add_child(root, "premiered", record.premiered)
    add_child(root, "aired", record.aired)
    add_child(root, "studio", record.studio)
    add_child(root, "thumb", record.thumb)
    add_child(root, "dateadded", record.date_added)
    return root


def render_nfo(root: ET._Element, created_at: datetime | None = None) -> str:
    """Serialize a document with the declaration and generator comment."""
    if created_at is None:
        created_at = datetime.now(timezone.utc)
    stamp = created_at.isoformat(timespec="milliseconds")
    body = ET.tostring(root, encoding="unicode", pretty_print=True)
    return (
        f"{XML_DECLARATION}\n"
        f"<!-- Created on {stamp} by {GENERATOR} -->\n"
        f"{body}"
    )


def write_nfo(root: ET._Element, path: Path, created_at: datetime | None = None) -> Path:
    """Render a document and write it as UTF-8."""
    path.write_text(render_nfo(root, created_at), encoding="utf-8")
    return path
