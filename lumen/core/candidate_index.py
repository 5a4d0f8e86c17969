"""
Candidate index: the immutable corpus of desktop entries and PATH executables.

Built once at startup, before any query is served, and only read afterwards.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .entries import DesktopEntry, ExecutableEntry, parse_desktop_file
from .locale_resolution import LocaleResolution

logger = logging.getLogger("CandidateIndex")

Entry = Union[DesktopEntry, ExecutableEntry]


@dataclass(frozen=True)
class Corpus:
    """All searchable entries, desktop entries first, in scan order."""

    desktop_entries: Tuple[DesktopEntry, ...] = ()
    executables: Tuple[ExecutableEntry, ...] = ()
    locale: LocaleResolution = field(default_factory=LocaleResolution)

    def __post_init__(self):
        by_id = {}
        for entry in self.entries:
            by_id.setdefault(entry.id, entry)
        object.__setattr__(self, "_by_id", by_id)

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return self.desktop_entries + self.executables

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.desktop_entries) + len(self.executables)

    def get(self, entry_id: str) -> Optional[Entry]:
        return self._by_id.get(entry_id)

    def __contains__(self, entry_id: str) -> bool:
        return entry_id in self._by_id


def _desktop_files(source: Path) -> List[Path]:
    if source.is_file():
        return [source]
    try:
        return sorted(p for p in source.iterdir() if p.name.endswith(".desktop"))
    except OSError as e:
        logger.debug(f"Could not read {source}: {e}")
        return []


def scan_desktop_entries(
    sources: Iterable[Union[str, Path]], show_hidden: bool = False
) -> List[DesktopEntry]:
    """
    Parse every .desktop file in the given directories (or files).

    A file name seen in an earlier source shadows later ones.
    """
    entries = []
    seen_names = set()
    for source in sources:
        for file_path in _desktop_files(Path(source)):
            if file_path.name in seen_names:
                continue
            entry = parse_desktop_file(file_path, show_hidden=show_hidden)
            if entry is None:
                continue
            seen_names.add(file_path.name)
            entries.append(entry)
    return entries


def _is_executable_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file() and os.access(entry.path, os.X_OK)
    except OSError:
        return False


def scan_path(dirs: Iterable[Union[str, Path]]) -> List[ExecutableEntry]:
    """
    List executables in PATH order.

    The first executable with a given name wins; later ones are discarded.
    """
    executables: Dict[str, ExecutableEntry] = {}
    visited = set()
    for directory in dirs:
        directory = os.path.abspath(os.path.expanduser(str(directory)))
        if directory in visited:
            continue
        visited.add(directory)

        try:
            with os.scandir(directory) as it:
                names = sorted((e for e in it if _is_executable_file(e)), key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"Could not read PATH directory {directory}: {e}")
            continue

        for dir_entry in names:
            if dir_entry.name not in executables:
                executables[dir_entry.name] = ExecutableEntry(
                    name=dir_entry.name, path=Path(directory) / dir_entry.name
                )
    return list(executables.values())


def build(
    desktop_entry_sources: Iterable[Union[str, Path]],
    path_dirs: Iterable[Union[str, Path]],
    locale: Optional[LocaleResolution] = None,
    show_hidden: bool = False,
) -> Corpus:
    """Scan desktop entry sources and PATH directories into a corpus."""
    start_time = time.time()

    desktop_entries = scan_desktop_entries(desktop_entry_sources, show_hidden=show_hidden)
    executables = scan_path(path_dirs)

    corpus = Corpus(
        desktop_entries=tuple(desktop_entries),
        executables=tuple(executables),
        locale=locale or LocaleResolution(),
    )

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Indexed {len(desktop_entries)} desktop entries and "
        f"{len(executables)} executables in {duration_ms:.1f}ms"
    )
    return corpus
