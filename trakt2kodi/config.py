"""Runtime configuration loaded from the environment and ``.env`` files."""
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv


log = logging.getLogger(__name__)

TRUE_VALUES = {"true", "1", "yes", "on"}

# gettext locale lists such as "en_US:en" or "pt_BR.UTF-8"
LOCALE_SEPARATORS = re.compile(r"[:_.@]")


class ConfigError(Exception):
    """Exception raised for missing or invalid configuration."""
    pass


@dataclass
class Settings:
    """Every tunable of a run, resolved once at startup."""
    api_key: str = ""
    language: str = "en"
    country: str = "us"
    download_show_images: bool = False
    download_season_images: bool = False
    download_episode_images: bool = True
    fetch_season_translation: bool = False
    fetch_episode_translation: bool = False
    request_delay_ms: int = 1500
    min_file_size_kb: int = 0
    skip_existing_nfo: bool = False

    @property
    def request_delay(self) -> float:
        """Delay before each outbound request, in seconds."""
        return self.request_delay_ms / 1000

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigError: If a numeric option is not an integer
        """
        if env is None:
            env = os.environ
        defaults = cls()

        return cls(
            api_key=env.get("TRAKT_API_KEY", "").strip(),
            language=_env_language(env, defaults.language),
            country=env.get("COUNTRY", defaults.country).strip(),
            download_show_images=_env_bool(env, "DOWNLOAD_SHOW_IMAGES", defaults.download_show_images),
            download_season_images=_env_bool(env, "DOWNLOAD_SEASON_IMAGES", defaults.download_season_images),
            download_episode_images=_env_bool(env, "DOWNLOAD_EPISODE_IMAGES", defaults.download_episode_images),
            fetch_season_translation=_env_bool(env, "FETCH_SEASON_TRANSLATION", defaults.fetch_season_translation),
            fetch_episode_translation=_env_bool(env, "FETCH_EPISODES_TRANSLATION", defaults.fetch_episode_translation),
            request_delay_ms=_env_int(env, "DELAY_BETWEEN_REQUESTS_MS", defaults.request_delay_ms),
            min_file_size_kb=_env_int(env, "IGNORE_FILES_SMALLER_THAN_KB", defaults.min_file_size_kb),
            skip_existing_nfo=_env_bool(env, "SKIP_EPISODES_WITH_NFO", defaults.skip_existing_nfo),
        )

    def require_api_key(self) -> str:
        """Return the Trakt API key or raise if it is not configured."""
        if not self.api_key:
            raise ConfigError(
                "Trakt API key not found.\n"
                "Set it using one of these methods:\n"
                "  1. Environment variable: export TRAKT_API_KEY=your_key\n"
                "  2. Create a .env file with: TRAKT_API_KEY=your_key\n"
                "Register an API app at: https://trakt.tv/oauth/applications/new"
            )
        return self.api_key


def _env_language(env: Mapping[str, str], default: str) -> str:
    """
    Resolve the translation language.

    ``TRAKT_LANGUAGE`` wins over ``LANGUAGE``, which desktop sessions often
    set to a gettext locale list; such a value is cut down to its language.
    """
    name = "TRAKT_LANGUAGE" if (env.get("TRAKT_LANGUAGE") or "").strip() else "LANGUAGE"
    value = (env.get(name) or "").strip()
    if not value:
        return default

    language = LOCALE_SEPARATORS.split(value, 1)[0]
    if language != value:
        log.warning("%s=%s looks like a locale, using \"%s\" (set TRAKT_LANGUAGE to override)",
                    name, value, language)
    return language or default


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        number = int(value.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None
    if number < 0:
        raise ConfigError(f"{name} must not be negative, got {number}")
    return number


def load_env_files(env_file: Path | None = None) -> list[Path]:
    """
    Load ``.env`` files into the process environment.

    Priority (variables already set are never overridden):
    1. ``env_file`` if given
    2. .env file in current directory
    3. .env file in user home directory

    Returns:
        The files that were found and loaded
    """
    candidates = [env_file] if env_file else []
    candidates += [Path.cwd() / ".env", Path.home() / ".env"]

    loaded = []
    for path in candidates:
        if path.is_file():
            load_dotenv(path, override=False)
            loaded.append(path)
    return loaded


def load_settings(env_file: Path | None = None) -> Settings:
    """Load ``.env`` files, then build :class:`Settings` from the environment."""
    if env_file is not None and not env_file.is_file():
        raise ConfigError(f"Environment file not found: {env_file}")
    load_env_files(env_file)
    return Settings.from_env()
