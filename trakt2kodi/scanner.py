"""Local media scanner: season folders and episode video files."""
import logging
import re
from pathlib import Path

from .config import Settings
from .models import LocalEpisodeFile, NFO_EXTENSION


log = logging.getLogger(__name__)

SEASON_DIR_PATTERN = re.compile(r'^season[\s._-]*(\d+)', re.IGNORECASE)
EPISODE_PATTERN = re.compile(r's(\d{2})e(\d{2})', re.IGNORECASE)

# Artifacts of previous runs, never source video
IGNORED_EXTENSIONS = {'.nfo', '.jpg', '.png', '.gif', '.bmp'}

SeasonMap = dict[str, dict[int, LocalEpisodeFile]]


class ShowFolderError(Exception):
    """Exception raised when the show folder is missing or not a directory."""
    pass


def season_key(number: int | str) -> str:
    """Two-digit season key, e.g. ``1`` -> ``"01"``."""
    return str(int(number)).zfill(2)


def ensure_show_folder(path: Path) -> Path:
    """
    Check that the show folder exists and is a directory.

    Raises:
        ShowFolderError: If the folder cannot be used
    """
    if not path.exists():
        raise ShowFolderError(f"Folder not found: {path}")
    if not path.is_dir():
        raise ShowFolderError(f"Not a directory: {path}")
    return path


def find_season_dirs(base_path: Path) -> list[tuple[str, Path]]:
    """
    Find season subfolders of a show folder.

    Returns:
        ``(season_key, path)`` pairs sorted by season number
    """
    found = []
    for item in base_path.iterdir():
        if not item.is_dir():
            continue
        match = SEASON_DIR_PATTERN.match(item.name)
        if match:
            found.append((int(match.group(1)), item.name, item))

    found.sort()
    return [(season_key(number), path) for number, _, path in found]


def match_episode_file(
    file_path: Path,
    season: str,
    settings: Settings
) -> LocalEpisodeFile | None:
    """
    Apply the skip rules to one file of a season folder.

    Args:
        file_path: Candidate file
        season: Two-digit season key of the containing folder
        settings: Run settings (size floor, skip-existing flag)

    Returns:
        LocalEpisodeFile if the file should be described, None otherwise
    """
    if file_path.suffix.lower() in IGNORED_EXTENSIONS:
        return None

    match = EPISODE_PATTERN.search(file_path.stem)
    if not match:
        return None

    file_season, episode = match.group(1), match.group(2)
    if file_season != season:
        log.debug("Skipping %s: season %s does not match folder season %s",
                  file_path.name, file_season, season)
        return None

    if settings.min_file_size_kb > 0:
        size_kb = file_path.stat().st_size / 1024
        if size_kb < settings.min_file_size_kb:
            log.debug("Skipping %s: %.1f KB is below the size floor", file_path.name, size_kb)
            return None

    if settings.skip_existing_nfo and file_path.with_suffix(NFO_EXTENSION).exists():
        log.debug("Skipping %s: NFO already exists", file_path.name)
        return None

    return LocalEpisodeFile(
        season_number=int(season),
        episode_number=int(episode),
        directory=file_path.parent,
        filename=file_path.name,
    )


def scan_seasons(base_path: Path, settings: Settings) -> SeasonMap:
    """
    Scan a show folder for episode files that need an NFO.

    Args:
        base_path: The show folder containing ``Season NN`` subfolders
        settings: Run settings

    Returns:
        Mapping of two-digit season key to ``{episode_number: LocalEpisodeFile}``.
        Seasons without any matching file are omitted.

    Raises:
        ShowFolderError: If ``base_path`` is not an existing directory
    """
    ensure_show_folder(base_path)

    if settings.skip_existing_nfo:
        log.info("Skipping episodes with existing NFO files.")
    if settings.min_file_size_kb > 0:
        log.info("Ignoring files smaller than %s KB.", settings.min_file_size_kb)

    log.info("Scanning seasons in folder: %s", base_path)

    episodes_by_season: SeasonMap = {}

    for season, season_path in find_season_dirs(base_path):
        # "Season 1" and "Season 01" share one key
        episodes = episodes_by_season.setdefault(season, {})

        for file_path in sorted(season_path.iterdir()):
            if not file_path.is_file():
                continue
            local = match_episode_file(file_path, season, settings)
            if local is None:
                continue
            if local.episode_number in episodes:
                log.warning("Duplicate file for S%sE%02d: %s replaces %s",
                            season, local.episode_number, local.filename,
                            episodes[local.episode_number].filename)
            episodes[local.episode_number] = local

    return {
        season: dict(sorted(episodes.items()))
        for season, episodes in episodes_by_season.items()
        if episodes
    }
