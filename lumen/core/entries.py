"""
Launchable entries: parsed .desktop files and executables found in PATH.
"""

import configparser
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger("Entries")

DESKTOP_GROUP = "Desktop Entry"

# Name[de_DE@euro]=...
_LOCALIZED_KEY_RE = re.compile(r"^(?P<key>[A-Za-z0-9-]+)\[(?P<tag>[^\]]+)\]$")

_FIELD_CODE_RE = re.compile(r"%[uUfFdDnNickvm]")


def strip_field_codes(exec_line: str) -> str:
    """Remove desktop entry field codes (%f, %U, ...) from an Exec line."""
    exec_line = _FIELD_CODE_RE.sub("", exec_line)
    return " ".join(exec_line.replace("%%", "%").split())


@dataclass(frozen=True)
class DesktopEntry:
    """An application described by a .desktop file. Identity is the file path."""

    path: Path
    name: str = field(compare=False)
    exec: str = field(compare=False)
    generic_name: Optional[str] = field(default=None, compare=False)
    icon: Optional[str] = field(default=None, compare=False)
    localized_names: Mapping[str, str] = field(default_factory=dict, compare=False)
    localized_generic_names: Mapping[str, str] = field(default_factory=dict, compare=False)

    @property
    def id(self) -> str:
        return str(self.path)

    @property
    def file_name(self) -> str:
        """The desktop file name without the .desktop suffix."""
        name = self.path.name
        if name.endswith(".desktop"):
            name = name[: -len(".desktop")]
        return name

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def command(self) -> str:
        """Exec line ready to hand to a shell."""
        return strip_field_codes(self.exec)


@dataclass(frozen=True)
class ExecutableEntry:
    """An executable file found in a PATH directory. Identity is the path."""

    name: str = field(compare=False)
    path: Path = field()

    @property
    def id(self) -> str:
        return str(self.path)

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def command(self) -> str:
        return str(self.path)


def parse_desktop_file(file_path: Path, show_hidden: bool = False) -> Optional[DesktopEntry]:
    """
    Parse a .desktop file.

    Returns None for files that are unreadable, malformed, hidden, or lack a
    Name or Exec key.
    """
    config = configparser.ConfigParser(interpolation=None, strict=False)
    # Keys are case sensitive (Name vs name, de_DE vs de_de)
    config.optionxform = str

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            config.read_file(f)
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        logger.debug(f"Skipping {file_path}: {e}")
        return None

    if not config.has_section(DESKTOP_GROUP):
        return None
    group = config[DESKTOP_GROUP]

    if not show_hidden:
        if group.get("NoDisplay", "false").strip().lower() == "true":
            return None
        if group.get("Hidden", "false").strip().lower() == "true":
            return None

    name = group.get("Name", "").strip()
    exec_line = group.get("Exec", "").strip()
    if not name or not exec_line:
        logger.debug(f"Skipping {file_path}: missing Name or Exec")
        return None

    localized_names = {}
    localized_generic_names = {}
    for key, value in group.items():
        match = _LOCALIZED_KEY_RE.match(key)
        if not match or not value.strip():
            continue
        if match.group("key") == "Name":
            localized_names[match.group("tag")] = value.strip()
        elif match.group("key") == "GenericName":
            localized_generic_names[match.group("tag")] = value.strip()

    return DesktopEntry(
        path=Path(file_path),
        name=name,
        exec=exec_line,
        generic_name=group.get("GenericName", "").strip() or None,
        icon=group.get("Icon", "").strip() or None,
        localized_names=MappingProxyType(localized_names),
        localized_generic_names=MappingProxyType(localized_generic_names),
    )
