"""Unit tests for desktop entry parsing and corpus building"""

import sys
import os
import stat

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lumen.core.candidate_index import build, scan_desktop_entries, scan_path
from lumen.core.entries import DesktopEntry, parse_desktop_file, strip_field_codes
from lumen.core.locale_resolution import LocaleResolution


def write_desktop(directory, file_name, body):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / file_name
    path.write_text(body, encoding="utf-8")
    return path


def write_executable(directory, name, executable=True):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n")
    mode = stat.S_IRUSR | stat.S_IWUSR
    if executable:
        mode |= stat.S_IXUSR
    path.chmod(mode)
    return path


FIREFOX = """[Desktop Entry]
Type=Application
Name=Firefox
Name[de]=Feuerfuchs
GenericName=Web Browser
GenericName[de]=Webbrowser
Exec=firefox %u
Icon=firefox
"""


class TestStripFieldCodes:
    """Test Exec field code removal"""

    def test_strip(self):
        """Test field codes are removed and %% is unescaped"""
        assert strip_field_codes("firefox %u") == "firefox"
        assert strip_field_codes("app --file %F --name %c") == "app --file --name"
        assert strip_field_codes("printf 100%%") == "printf 100%"


class TestParseDesktopFile:
    """Test .desktop file parsing"""

    def test_parse(self, tmp_path):
        """Test every field the index needs is read"""
        path = write_desktop(tmp_path, "firefox.desktop", FIREFOX)
        entry = parse_desktop_file(path)

        assert entry.name == "Firefox"
        assert entry.generic_name == "Web Browser"
        assert entry.icon == "firefox"
        assert entry.command == "firefox"
        assert entry.localized_names["de"] == "Feuerfuchs"
        assert entry.localized_generic_names["de"] == "Webbrowser"
        assert entry.file_name == "firefox"
        assert entry.id == str(path)

    def test_missing_name(self, tmp_path):
        """Test entries without Name are skipped"""
        path = write_desktop(tmp_path, "x.desktop", "[Desktop Entry]\nExec=x\n")
        assert parse_desktop_file(path) is None

    def test_missing_exec(self, tmp_path):
        """Test entries without Exec are skipped"""
        path = write_desktop(tmp_path, "x.desktop", "[Desktop Entry]\nName=X\n")
        assert parse_desktop_file(path) is None

    def test_hidden(self, tmp_path):
        """Test NoDisplay and Hidden entries unless requested"""
        body = "[Desktop Entry]\nName=X\nExec=x\nNoDisplay=true\n"
        path = write_desktop(tmp_path, "x.desktop", body)
        assert parse_desktop_file(path) is None
        assert parse_desktop_file(path, show_hidden=True).name == "X"

    def test_malformed(self, tmp_path):
        """Test malformed files are skipped, not fatal"""
        path = write_desktop(tmp_path, "bad.desktop", "this is not an ini file")
        assert parse_desktop_file(path) is None

        path = write_desktop(tmp_path, "nogroup.desktop", "[Other]\nName=X\nExec=x\n")
        assert parse_desktop_file(path) is None

    def test_unreadable(self, tmp_path):
        """Test missing files are skipped"""
        assert parse_desktop_file(tmp_path / "missing.desktop") is None

    def test_identity_is_path(self, tmp_path):
        """Test entries compare by source path only"""
        path = tmp_path / "a.desktop"
        assert DesktopEntry(path=path, name="A", exec="a") == DesktopEntry(
            path=path, name="B", exec="b"
        )


class TestScanDesktopEntries:
    """Test desktop entry directory scanning"""

    def test_first_source_wins(self, tmp_path):
        """Test a user entry shadows the system entry with the same file name"""
        user = tmp_path / "user"
        system = tmp_path / "system"
        write_desktop(user, "firefox.desktop", FIREFOX.replace("Name=Firefox", "Name=My Firefox"))
        write_desktop(system, "firefox.desktop", FIREFOX)
        write_desktop(system, "gimp.desktop", "[Desktop Entry]\nName=GIMP\nExec=gimp\n")

        entries = scan_desktop_entries([user, system])

        assert [e.name for e in entries] == ["My Firefox", "GIMP"]

    def test_missing_directory(self, tmp_path):
        """Test missing directories are skipped"""
        assert scan_desktop_entries([tmp_path / "nope"]) == []

    def test_non_desktop_files_ignored(self, tmp_path):
        """Test only .desktop files are read"""
        write_desktop(tmp_path, "readme.txt", "[Desktop Entry]\nName=X\nExec=x\n")
        assert scan_desktop_entries([tmp_path]) == []


class TestScanPath:
    """Test PATH executable scanning"""

    def test_first_in_path_wins(self, tmp_path):
        """Test later duplicates do not overwrite earlier ones"""
        first = tmp_path / "first"
        second = tmp_path / "second"
        write_executable(first, "tool")
        write_executable(second, "tool")
        write_executable(second, "other")

        executables = scan_path([first, second])
        by_name = {e.name: e for e in executables}

        assert set(by_name) == {"tool", "other"}
        assert by_name["tool"].path == first / "tool"

    def test_non_executable_skipped(self, tmp_path):
        """Test files without the execute bit are skipped"""
        write_executable(tmp_path, "script", executable=False)
        assert scan_path([tmp_path]) == []

    def test_missing_directory(self, tmp_path):
        """Test missing PATH directories are skipped silently"""
        write_executable(tmp_path / "bin", "tool")
        executables = scan_path([tmp_path / "missing", tmp_path / "bin"])
        assert [e.name for e in executables] == ["tool"]

    def test_subdirectories_skipped(self, tmp_path):
        """Test directories in PATH directories are not executables"""
        (tmp_path / "subdir").mkdir()
        assert scan_path([tmp_path]) == []


class TestBuild:
    """Test building the corpus"""

    def test_build(self, tmp_path):
        """Test desktop entries come before executables"""
        write_desktop(tmp_path / "apps", "firefox.desktop", FIREFOX)
        write_executable(tmp_path / "bin", "firefox")
        locale = LocaleResolution(tags=("de",), source="config")

        corpus = build([tmp_path / "apps"], [tmp_path / "bin"], locale=locale)

        assert len(corpus) == 2
        assert isinstance(corpus.entries[0], DesktopEntry)
        assert corpus.locale is locale
        assert str(tmp_path / "bin" / "firefox") in corpus
        assert corpus.get(str(tmp_path / "apps" / "firefox.desktop")).name == "Firefox"

    def test_empty_corpus(self, tmp_path):
        """Test an empty corpus is valid"""
        corpus = build([tmp_path / "none"], [])
        assert len(corpus) == 0
        assert list(corpus) == []
        assert not corpus.locale.enabled
