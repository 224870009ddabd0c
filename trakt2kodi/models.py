"""Data models for the trakt2kodi package."""
from dataclasses import dataclass, field
from pathlib import Path


NFO_EXTENSION = ".nfo"
THUMB_EXTENSION = ".jpg"


@dataclass
class ShowIds:
    """Identifiers of a show across metadata providers."""
    trakt: int
    slug: str
    imdb: str | None = None
    tmdb: int | None = None
    tvdb: int | None = None


@dataclass
class EpisodeIds:
    """Identifiers of a single episode."""
    trakt: int
    tvdb: int | None = None
    imdb: str | None = None
    tmdb: int | None = None


@dataclass
class TraktShow:
    """Represents a TV show from Trakt (``extended=full,images``)."""
    title: str
    year: int | None
    ids: ShowIds
    overview: str = ""
    rating: float | None = None
    votes: int | None = None
    certification: str = ""
    genres: list[str] = field(default_factory=list)
    first_aired: str | None = None
    status: str = ""
    language: str = ""
    network: str = ""
    original_title: str = ""
    tagline: str = ""
    runtime: int | None = None
    trailer: str = ""
    aired_episodes: int | None = None
    country: str = ""
    images: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class Translation:
    """A translated title/overview for a show, season or episode."""
    language: str
    country: str | None = None
    title: str = ""
    overview: str = ""
    tagline: str = ""


@dataclass
class ListingEpisode:
    """Summary episode record included in a season listing."""
    season: int
    number: int
    title: str
    ids: EpisodeIds


@dataclass
class Season:
    """A season with its episode listing."""
    number: int
    episodes: list[ListingEpisode] = field(default_factory=list)
    poster: str | None = None


@dataclass
class ExtendedEpisode:
    """Full per-episode record (``extended=full,images``)."""
    season: int
    number: int
    title: str
    ids: EpisodeIds
    overview: str = ""
    runtime: int | None = None
    first_aired: str | None = None
    original_title: str = ""
    screenshot: str | None = None


@dataclass(frozen=True)
class LocalEpisodeFile:
    """A video file on disk matched to a season/episode number."""
    season_number: int
    episode_number: int
    directory: Path
    filename: str

    @property
    def path(self) -> Path:
        return self.directory / self.filename

    @property
    def nfo_path(self) -> Path:
        return self.path.with_suffix(NFO_EXTENSION)

    @property
    def thumb_path(self) -> Path:
        return self.path.with_suffix(THUMB_EXTENSION)

    @property
    def thumb_name(self) -> str:
        return self.thumb_path.name


@dataclass
class NormalizedEpisode:
    """Merged episode metadata, ready to be rendered as ``episodedetails``."""
    title: str
    original_title: str
    show_title: str
    season: int
    episode: int
    trakt_id: int
    plot: str = ""
    runtime: int | None = None
    genre: str = ""
    premiered: str = ""
    aired: str = ""
    year: int | None = None
    studio: str = ""
    thumb: str = ""
    date_added: str = ""
    screenshot_url: str | None = None


@dataclass
class NamedSeason:
    """Display name and local poster of one season for ``tvshow.nfo``."""
    number: int
    name: str
    poster: str | None = None
