#!/usr/bin/env python3
"""
trakt2kodi - Kodi NFO generator

Interactive CLI that fetches TV show metadata from Trakt and writes
Kodi-compatible .nfo files and artwork into a local show folder.
"""
import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from . import __version__
from .config import ConfigError, Settings, load_settings
from .episodes import index_season_listing, iter_episode_records
from .images import (
    ImageFetcher,
    download_episode_thumb,
    download_season_poster,
    download_show_images,
    find_local_artwork,
)
from .models import NamedSeason, Season, TraktShow
from .nfo import build_episode_nfo, build_tvshow_nfo, season_poster_name, write_nfo
from .scanner import ShowFolderError, ensure_show_folder, scan_seasons
from .trakt import TraktClient, TraktError


log = logging.getLogger(__name__)

TVSHOW_NFO = "tvshow.nfo"

INTRO = """
  trakt2kodi - TV Show Metadata Generator

  This script will:
    - Fetch metadata from Trakt.tv about a TV show
    - Create Kodi-compatible .nfo files (tvshow.nfo + episodes)
    - Download season and show images (poster, fanart, etc.)
    - Translate titles and overviews (if configured)

  Folder requirements:
    - Folder name should match the show title
    - Season folders must follow: "Season 01", "Season 02", ...
      Use "Season 00" for specials

  Configuration:
    - Set language, country, image options, etc. in your .env file

  WARNING: existing .nfo files and images in the folder will be overwritten.
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure console logging for a run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
    # urllib3 connection chatter is only useful when debugging
    logging.getLogger("urllib3").setLevel(logging.DEBUG if verbose else logging.WARNING)


def ask(question: str, default: str | None = None) -> str:
    """Prompt for a line of input, returning ``default`` on an empty answer."""
    prompt = f"{question} [{default}]: " if default else f"{question}: "
    answer = input(prompt).strip()
    return answer or (default or "")


def ask_yes_no(question: str, default: bool = True) -> bool:
    """Ask a y/n question until a valid answer is given."""
    hint = "Y/n" if default else "y/N"
    while True:
        response = input(f"{question} ({hint}): ").strip().lower()
        if not response:
            return default
        if response in ('y', 'yes'):
            return True
        if response in ('n', 'no'):
            return False
        print("Please enter 'y' or 'n'.")


def get_valid_folder_path() -> Path:
    """
    Ask for the show folder.

    Raises:
        ShowFolderError: If the folder does not exist
    """
    folder = Path(ask("Enter the full path to the show folder")).expanduser()
    return ensure_show_folder(folder)


def confirm_show_from_search_results(results: list[TraktShow]) -> TraktShow | None:
    """Walk the search results until the operator confirms one."""
    for show in results:
        overview = f"{show.overview[:200]}..." if show.overview else "No description available."

        print("\nPotential match found:")
        print(f"  Title:    {show.title} ({show.year or '????'})")
        print(f"  Slug:     {show.ids.slug}")
        print(f"  Overview: {overview}")

        if ask_yes_no("Is this the correct show?"):
            return show

    return None


def ask_for_manual_slug(client: TraktClient) -> TraktShow | None:
    """Let the operator type a Trakt slug when no search result fit."""
    slug = ask("Enter the Trakt slug of the show (leave empty to quit)")
    if not slug:
        return None

    show = client.get_show(slug)
    if show is None:
        log.error('No show found for slug "%s"', slug)
    return show


def should_overwrite_file(path: Path) -> bool:
    """
    Ask before replacing an existing file.

    Returns:
        True if the file does not exist or was removed after confirmation
    """
    if not path.exists():
        return True
    if not ask_yes_no(f"The file {path} already exists. Overwrite it?"):
        return False
    path.unlink()
    log.info("Old file removed.")
    return True


def build_named_seasons(
    seasons: list[Season],
    slug: str,
    folder: Path,
    client: TraktClient,
    fetcher: ImageFetcher,
    settings: Settings
) -> list[NamedSeason]:
    """Resolve season names and poster files, downloading posters if enabled."""
    if not settings.download_season_images:
        log.warning("Skipping season image download (DOWNLOAD_SEASON_IMAGES is disabled).")
    if not settings.fetch_season_translation:
        log.warning("Skipping season translations (FETCH_SEASON_TRANSLATION is disabled).")

    named = []
    for season in seasons:
        name = ""
        if settings.fetch_season_translation:
            translation = client.get_season_translation(
                slug, season.number, settings.language, settings.country
            )
            name = translation.title if translation else ""

        poster = None
        if season.poster:
            poster = season_poster_name(season.number)
            if settings.download_season_images:
                download_season_poster(season.poster, folder / poster, fetcher)

        named.append(NamedSeason(
            number=season.number,
            name=name or f"Season {season.number}",
            poster=poster,
        ))
    return named


def write_show_nfo(
    show: TraktShow,
    seasons: list[Season],
    folder: Path,
    client: TraktClient,
    fetcher: ImageFetcher,
    settings: Settings
) -> Path:
    """Download show artwork and write ``tvshow.nfo``."""
    slug = show.ids.slug

    if settings.download_show_images:
        download_show_images(show, folder, fetcher)
    else:
        log.warning("DOWNLOAD_SHOW_IMAGES is disabled. Skipping image downloads.")

    studios = client.get_studios(slug)
    translation = client.get_show_translation(slug, settings.language, settings.country)
    named_seasons = build_named_seasons(seasons, slug, folder, client, fetcher, settings)

    root = build_tvshow_nfo(
        show,
        translation=translation,
        studios=studios,
        local_artwork=find_local_artwork(folder),
        named_seasons=named_seasons,
    )
    nfo_path = write_nfo(root, folder / TVSHOW_NFO)
    log.info("tvshow.nfo file created at: %s", nfo_path)
    return nfo_path


def write_episode_nfos(
    show: TraktShow,
    seasons: list[Season],
    folder: Path,
    client: TraktClient,
    fetcher: ImageFetcher,
    settings: Settings,
    today: date | None = None
) -> tuple[int, int, int]:
    """
    Scan the folder and write one NFO per resolvable episode file.

    Returns:
        ``(written, skipped, image_errors)``
    """
    local_map = scan_seasons(folder, settings)
    found = sum(len(episodes) for episodes in local_map.values())
    if not found:
        log.warning("No episode files found to generate NFOs.")
        return 0, 0, 0

    if not settings.fetch_episode_translation:
        log.warning("FETCH_EPISODES_TRANSLATION is disabled. Skipping translations for episodes.")

    written = 0
    image_errors = 0
    records = iter_episode_records(
        local_map, index_season_listing(seasons), client, show, settings, today
    )
    for local, record in records:
        write_nfo(build_episode_nfo(record), local.nfo_path)
        written += 1
        log.info("S%02dE%02d %s -> %s", record.season, record.episode, record.title, local.nfo_path.name)

        if record.screenshot_url and settings.download_episode_images:
            if not download_episode_thumb(record.screenshot_url, local.thumb_path, fetcher):
                image_errors += 1

    return written, found - written, image_errors


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="trakt2kodi",
        description="Generate Kodi .nfo files for a TV show folder from Trakt metadata."
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read settings from this .env file (default: ./.env, then ~/.env)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed debug information"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parsed_args = parser.parse_args(args)
    setup_logging(parsed_args.verbose)

    try:
        settings = load_settings(parsed_args.env_file)
        api_key = settings.require_api_key()
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    print(INTRO)

    client = TraktClient(api_key, delay=settings.request_delay)
    fetcher = ImageFetcher(delay=settings.request_delay)

    try:
        folder = get_valid_folder_path()

        query = ask("Enter the TV show name to search on Trakt", folder.name)
        results = client.search_show(query)
        if not results:
            print("Error: No TV show found with that name.")
            return 1

        show = confirm_show_from_search_results(results) or ask_for_manual_slug(client)
        if show is None:
            print("No show selected. Exiting.")
            return 0

        print(f"\nShow confirmed: {show.title} ({show.year or '????'})")
        print(f"Slug: {show.ids.slug}\n")

        seasons = client.get_seasons(show.ids.slug)

        if should_overwrite_file(folder / TVSHOW_NFO):
            write_show_nfo(show, seasons, folder, client, fetcher, settings)
        else:
            log.info("Keeping existing %s", TVSHOW_NFO)

        written, skipped, image_errors = write_episode_nfos(
            show, seasons, folder, client, fetcher, settings
        )
    except (ShowFolderError, TraktError) as e:
        print(f"Error: {e}")
        return 1

    print()
    print("-" * 50)
    print(f"Episode NFOs: {written} | Skipped: {skipped} | Image errors: {image_errors}")
    print("Done! Enjoy your show!")

    return 0


if __name__ == "__main__":
    sys.exit(main())
