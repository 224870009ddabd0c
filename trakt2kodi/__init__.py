"""
trakt2kodi - Kodi NFO Generator

A CLI tool that writes Kodi .nfo files and artwork for a TV show folder
using Trakt metadata.
"""
__version__ = "1.0.0"

from .models import (
    ShowIds,
    EpisodeIds,
    TraktShow,
    Translation,
    ListingEpisode,
    Season,
    ExtendedEpisode,
    LocalEpisodeFile,
    NormalizedEpisode,
    NamedSeason
)
from .config import Settings, ConfigError, load_settings
from .scanner import scan_seasons, ShowFolderError
from .episodes import (
    index_season_listing,
    merge_episode,
    iter_episode_records
)
from .trakt import TraktClient, TraktError, select_translation
from .nfo import build_tvshow_nfo, build_episode_nfo, render_nfo, write_nfo
from .images import ImageFetcher, ImageDownloadError

__all__ = [
    "ShowIds",
    "EpisodeIds",
    "TraktShow",
    "Translation",
    "ListingEpisode",
    "Season",
    "ExtendedEpisode",
    "LocalEpisodeFile",
    "NormalizedEpisode",
    "NamedSeason",
    "Settings",
    "ConfigError",
    "load_settings",
    "scan_seasons",
    "ShowFolderError",
    "index_season_listing",
    "merge_episode",
    "iter_episode_records",
    "TraktClient",
    "TraktError",
    "select_translation",
    "build_tvshow_nfo",
    "build_episode_nfo",
    "render_nfo",
    "write_nfo",
    "ImageFetcher",
    "ImageDownloadError",
]
