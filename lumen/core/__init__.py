"""Core launcher components."""

from .exceptions import (
    LumenError,
    InterpretationError,
    ExpressionError,
    ConversionError,
    CurrencyUnavailableError,
    CurrencyFetchError,
)
from .config import LAUNCHER_CONFIG, Config, UrlMode, load_config
from .locale_resolution import LocaleResolution, resolve_locale
from .entries import DesktopEntry, ExecutableEntry, parse_desktop_file
from .candidate_index import Corpus, build
from .history import HistoryStore
from .scorer import Scorer
from .search_models import Candidate, MatchField

__all__ = [
    "LumenError",
    "InterpretationError",
    "ExpressionError",
    "ConversionError",
    "CurrencyUnavailableError",
    "CurrencyFetchError",
    "LAUNCHER_CONFIG",
    "Config",
    "UrlMode",
    "load_config",
    "LocaleResolution",
    "resolve_locale",
    "DesktopEntry",
    "ExecutableEntry",
    "parse_desktop_file",
    "Corpus",
    "build",
    "HistoryStore",
    "Scorer",
    "Candidate",
    "MatchField",
]
