"""
Launcher configuration.

Defaults live in LAUNCHER_CONFIG; a user file at ~/.config/lumen.toml can
override the flat keys understood by Config.from_dict.
"""

import locale
import logging
import os
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger("Config")

APPNAME = "lumen"

CONFIG_PATH = os.path.expanduser("~/.config/lumen.toml")

LAUNCHER_CONFIG = {
    # Search and Filtering
    "search": {
        "max_results": 50,  # Maximum number of ranked candidates to return
        "search_cache_size": 100,  # Queries whose base matches are memoised
        "slow_search_ms": 50,  # Log searches slower than this
    },
    # Desktop Application Loading
    "desktop_apps": {
        "scan_user_dir": True,  # Scan $XDG_DATA_HOME/applications
        "scan_system_dirs": True,  # Scan $XDG_DATA_DIRS/*/applications
        "custom_dirs": [],  # Additional directories to scan (lowest precedence)
        "show_hidden_apps": False,  # Show NoDisplay=true / Hidden=true apps
    },
    # Smart Content
    "smart_content": {
        "urls": "none",  # none | http | all
        "dynamic_conversions": True,  # Allow conversions needing fetched rates
    },
    # History
    "history": {
        "max_entries": 100,
        "history_file": "history.json",
    },
    # Currency Rates
    "currency": {
        "fallback": "eur",  # Used when LC_MONETARY gives nothing usable
        "cache_file": "currency.json",
        "fetch_timeout": 10,  # seconds
    },
    # Cache File Locations
    "cache": {
        "cache_dir": "~/.cache/lumen",
    },
}


class UrlMode(Enum):
    """Which inputs are offered as URLs to open."""

    NONE = "none"
    HTTP = "http"
    ALL = "all"

    @classmethod
    def parse(cls, value: Optional[str]) -> "UrlMode":
        if value is None:
            return cls(LAUNCHER_CONFIG["smart_content"]["urls"])
        value = value.strip().lower()
        if value == "loose":
            return cls.ALL
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Invalid URL mode: {value}")
            return cls(LAUNCHER_CONFIG["smart_content"]["urls"])


def user_currency() -> str:
    """Get the default currency code from the LC_MONETARY locale."""
    fallback = LAUNCHER_CONFIG["currency"]["fallback"]
    try:
        previous = locale.setlocale(locale.LC_MONETARY)
        try:
            locale.setlocale(locale.LC_MONETARY, "")
            code = locale.localeconv().get("int_curr_symbol", "")
        finally:
            locale.setlocale(locale.LC_MONETARY, previous)
    except locale.Error as e:
        logger.debug(f"Could not read monetary locale: {e}")
        return fallback

    # glibc pads the international symbol with a trailing space
    code = (code or "").strip().lower()
    if len(code) != 3 or not code.isalpha():
        return fallback
    return code


def default_desktop_dirs() -> List[Path]:
    """Desktop entry directories in XDG precedence order."""
    dirs = []
    desktop_config = LAUNCHER_CONFIG["desktop_apps"]

    if desktop_config["scan_user_dir"]:
        xdg_data_home = os.environ.get("XDG_DATA_HOME") or "~/.local/share"
        dirs.append(Path(xdg_data_home).expanduser() / "applications")

    if desktop_config["scan_system_dirs"]:
        xdg_data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
        for data_dir in xdg_data_dirs.split(":"):
            if data_dir:
                dirs.append(Path(data_dir) / "applications")

    for custom_dir in desktop_config["custom_dirs"]:
        dirs.append(Path(custom_dir).expanduser())

    return dirs


def path_dirs() -> List[Path]:
    """Directories listed in PATH, in order."""
    return [Path(p) for p in os.environ.get("PATH", "").split(os.pathsep) if p]


@dataclass
class Config:
    """Options read by the search engine and smart content interpreter."""

    locale: Optional[str] = None
    default_currency: str = field(default_factory=user_currency)
    smart_content_urls: UrlMode = UrlMode.NONE
    smart_content_dynamic_conversions: bool = True
    history_entries: int = LAUNCHER_CONFIG["history"]["max_entries"]
    max_results: int = LAUNCHER_CONFIG["search"]["max_results"]
    show_hidden_apps: bool = LAUNCHER_CONFIG["desktop_apps"]["show_hidden_apps"]
    desktop_dirs: Optional[List[Path]] = None
    cache_dir: Path = field(
        default_factory=lambda: Path(LAUNCHER_CONFIG["cache"]["cache_dir"]).expanduser()
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a config from a parsed mapping, ignoring unknown keys."""
        kwargs: Dict[str, Any] = {}

        if "locale" in data:
            kwargs["locale"] = str(data["locale"])
        if data.get("default_currency"):
            kwargs["default_currency"] = str(data["default_currency"]).strip().lower()
        if "smart_content_urls" in data:
            kwargs["smart_content_urls"] = UrlMode.parse(str(data["smart_content_urls"]))
        if "smart_content_dynamic_conversions" in data:
            kwargs["smart_content_dynamic_conversions"] = bool(
                data["smart_content_dynamic_conversions"]
            )
        if "history_entries" in data:
            kwargs["history_entries"] = max(0, int(data["history_entries"]))
        if "max_results" in data:
            kwargs["max_results"] = max(1, int(data["max_results"]))
        if "show_hidden_apps" in data:
            kwargs["show_hidden_apps"] = bool(data["show_hidden_apps"])
        if "desktop_dirs" in data:
            kwargs["desktop_dirs"] = [Path(d).expanduser() for d in data["desktop_dirs"]]
        if "cache_dir" in data:
            kwargs["cache_dir"] = Path(str(data["cache_dir"])).expanduser()

        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")

        return cls(**kwargs)

    def get_desktop_dirs(self) -> List[Path]:
        if self.desktop_dirs is not None:
            return list(self.desktop_dirs)
        return default_desktop_dirs()

    @property
    def history_file(self) -> Path:
        return self.cache_dir / LAUNCHER_CONFIG["history"]["history_file"]

    @property
    def currency_cache_file(self) -> Path:
        return self.cache_dir / LAUNCHER_CONFIG["currency"]["cache_file"]


def load_config(path: Optional[str] = None) -> Config:
    """Load the user config file; any problem yields the defaults."""
    path = path or CONFIG_PATH
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug(f"No config file at {path}, using defaults")
        return Config()
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.error(f"Config loading error: {e}")
        return Config()

    try:
        return Config.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid config value in {path}: {e}")
        return Config()
