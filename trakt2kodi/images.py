"""Artwork download and discovery."""
import logging
import time
from pathlib import Path

import requests

from .models import TraktShow


log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# Kodi artwork aspect -> filename in the show folder
IMAGE_MAP = {
    "poster": "poster.jpg",
    "fanart": "fanart.jpg",
    "clearlogo": "clearlogo.png",
    "clearart": "clearart.png",
    "banner": "banner.jpg",
    "thumb": "thumb.jpg",
    "landscape": "landscape.jpg",
    "keyart": "keyart.jpg",
}


class ImageDownloadError(Exception):
    """Exception raised when an image cannot be downloaded."""
    pass


def normalize_image_url(url: str, strip_webp: bool = False) -> str:
    """
    Prepare a Trakt image URL for download.

    Trakt serves artwork as ``media.trakt.tv/...jpg.webp`` without a scheme.
    Stripping the ``.webp`` suffix yields the original JPEG/PNG.
    """
    if strip_webp and url.endswith(".webp"):
        url = url[:-len(".webp")]
    if not url.startswith("https"):
        url = f"https://{url}"
    return url


class ImageFetcher:
    """Downloads images to disk, one request at a time."""

    def __init__(self, session: requests.Session | None = None, delay: float = 0.0):
        """
        Args:
            session: Optional requests session
            delay: Seconds to sleep before each download
        """
        self.session = session or requests.Session()
        self.delay = delay

    def fetch(self, url: str, dest: Path, strip_webp: bool = False) -> Path:
        """
        Download ``url`` to ``dest``, overwriting any existing file.

        Raises:
            ImageDownloadError: On a non-200 status or any transport/write
                error. A partially written ``dest`` is removed.
        """
        if self.delay > 0:
            time.sleep(self.delay)

        final_url = normalize_image_url(url, strip_webp)

        try:
            response = self.session.get(final_url, stream=True)
        except requests.exceptions.RequestException as e:
            raise ImageDownloadError(f"Error downloading {final_url}: {e}") from e

        try:
            if response.status_code != 200:
                raise ImageDownloadError(
                    f"Error {response.status_code} while downloading {final_url}"
                )
            try:
                with open(dest, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
            except (requests.exceptions.RequestException, OSError) as e:
                dest.unlink(missing_ok=True)
                raise ImageDownloadError(f"Error downloading {final_url}: {e}") from e
        finally:
            response.close()

        log.info("Image saved to %s", dest)
        return dest


def download_show_images(show: TraktShow, folder: Path, fetcher: ImageFetcher) -> list[Path]:
    """
    Download every known artwork aspect of a show into its folder.

    Failures are logged and do not stop the remaining downloads.

    Returns:
        Paths of the images that were saved
    """
    saved = []
    for aspect, filename in IMAGE_MAP.items():
        urls = show.images.get(aspect) or []
        if not urls:
            continue

        dest = folder / filename
        dest.unlink(missing_ok=True)
        try:
            saved.append(fetcher.fetch(urls[0], dest, strip_webp=True))
        except ImageDownloadError as e:
            log.warning('Failed to download image for "%s": %s', aspect, e)
    return saved


def download_season_poster(url: str, dest: Path, fetcher: ImageFetcher) -> bool:
    """Download a season poster; returns False (and logs) on failure."""
    try:
        fetcher.fetch(url, dest, strip_webp=True)
    except ImageDownloadError as e:
        log.warning("Failed to download season image %s: %s", dest.name, e)
        return False
    return True


def download_episode_thumb(url: str, dest: Path, fetcher: ImageFetcher) -> bool:
    """Download an episode screenshot; returns False (and logs) on failure."""
    try:
        fetcher.fetch(url, dest)
    except ImageDownloadError as e:
        log.warning("Failed to download episode image %s: %s", dest.name, e)
        return False
    return True


def find_local_artwork(folder: Path) -> dict[str, str]:
    """Return the artwork aspects whose file exists in ``folder``."""
    return {
        aspect: filename
        for aspect, filename in IMAGE_MAP.items()
        if (folder / filename).is_file()
    }
