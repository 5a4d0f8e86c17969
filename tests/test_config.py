"""Unit tests for configuration loading"""

import sys
import os
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lumen.core.config import (
    LAUNCHER_CONFIG,
    Config,
    UrlMode,
    default_desktop_dirs,
    load_config,
    path_dirs,
)


class TestUrlMode:
    """Test URL mode parsing"""

    def test_parse(self):
        """Test known modes, the loose alias and bad values"""
        assert UrlMode.parse("none") is UrlMode.NONE
        assert UrlMode.parse("HTTP") is UrlMode.HTTP
        assert UrlMode.parse("all") is UrlMode.ALL
        assert UrlMode.parse("loose") is UrlMode.ALL
        assert UrlMode.parse("sometimes") is UrlMode.NONE
        assert UrlMode.parse(None) is UrlMode.NONE


class TestConfig:
    """Test building configs"""

    def test_defaults(self):
        """Test the documented defaults"""
        config = Config(default_currency="eur")
        assert config.locale is None
        assert config.smart_content_urls is UrlMode.NONE
        assert config.smart_content_dynamic_conversions is True
        assert config.history_entries == 100
        assert config.max_results == LAUNCHER_CONFIG["search"]["max_results"]

    def test_from_dict(self, tmp_path):
        """Test every option is read"""
        config = Config.from_dict(
            {
                "locale": "de_DE",
                "default_currency": " USD ",
                "smart_content_urls": "http",
                "smart_content_dynamic_conversions": False,
                "history_entries": 5,
                "max_results": 10,
                "show_hidden_apps": True,
                "desktop_dirs": [str(tmp_path)],
                "cache_dir": str(tmp_path / "cache"),
            }
        )
        assert config.locale == "de_DE"
        assert config.default_currency == "usd"
        assert config.smart_content_urls is UrlMode.HTTP
        assert config.smart_content_dynamic_conversions is False
        assert config.history_entries == 5
        assert config.max_results == 10
        assert config.show_hidden_apps is True
        assert config.get_desktop_dirs() == [tmp_path]
        assert config.history_file == tmp_path / "cache" / "history.json"
        assert config.currency_cache_file == tmp_path / "cache" / "currency.json"

    def test_unknown_keys_ignored(self):
        """Test unknown keys do not fail"""
        config = Config.from_dict({"default_currency": "gbp", "theme": "dark"})
        assert config.default_currency == "gbp"

    @patch("lumen.core.config.user_currency", return_value="chf")
    def test_currency_from_locale(self, mock_currency):
        """Test the default currency comes from LC_MONETARY"""
        assert Config().default_currency == "chf"


class TestLoadConfig:
    """Test reading the TOML file"""

    def test_load(self, tmp_path):
        """Test a valid file"""
        path = tmp_path / "lumen.toml"
        path.write_text('locale = "fr"\nsmart_content_urls = "all"\nhistory_entries = 3\n')
        config = load_config(str(path))
        assert config.locale == "fr"
        assert config.smart_content_urls is UrlMode.ALL
        assert config.history_entries == 3

    def test_missing_file(self, tmp_path):
        """Test a missing file gives defaults"""
        config = load_config(str(tmp_path / "missing.toml"))
        assert config.locale is None

    def test_malformed_file(self, tmp_path):
        """Test a malformed file gives defaults"""
        path = tmp_path / "lumen.toml"
        path.write_text("locale = = broken")
        assert load_config(str(path)).locale is None

    def test_invalid_value(self, tmp_path):
        """Test a wrongly typed value gives defaults"""
        path = tmp_path / "lumen.toml"
        path.write_text('history_entries = "many"\n')
        assert load_config(str(path)).history_entries == 100


class TestDirectories:
    """Test search directories"""

    def test_xdg_dirs(self, monkeypatch):
        """Test user data comes before system data"""
        monkeypatch.setenv("XDG_DATA_HOME", "/home/u/.local/share")
        monkeypatch.setenv("XDG_DATA_DIRS", "/usr/local/share:/usr/share")
        assert default_desktop_dirs()[:3] == [
            Path("/home/u/.local/share/applications"),
            Path("/usr/local/share/applications"),
            Path("/usr/share/applications"),
        ]

    def test_path_dirs(self, monkeypatch):
        """Test PATH is split in order, skipping empty parts"""
        monkeypatch.setenv("PATH", os.pathsep.join(["/usr/local/bin", "", "/usr/bin"]))
        assert path_dirs() == [Path("/usr/local/bin"), Path("/usr/bin")]
