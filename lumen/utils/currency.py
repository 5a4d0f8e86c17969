"""
Currency exchange rates.

Rates come from the free currency API hosted on jsDelivr and are cached on
disk. A cached snapshot is refreshed in a background thread at most once per
calendar day; a failed refresh keeps the old snapshot so conversions keep
working with yesterday's rates.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

import requests

from ..core.config import LAUNCHER_CONFIG
from ..core.exceptions import ConversionError, CurrencyFetchError, CurrencyUnavailableError

logger = logging.getLogger("CurrencyCache")

API_ROOT = "https://cdn.jsdelivr.net/npm/@fawazahmed0/currency-api@latest/v1"
NAMES_URL = f"{API_ROOT}/currencies.min.json"
RATES_URL = API_ROOT + "/currencies/{base}.min.json"

# Rates are stored relative to this currency
DEFAULT_BASE = "eur"

# Recognised as currencies even before any rates have been fetched
COMMON_CURRENCY_CODES = frozenset(
    {
        "aud", "brl", "btc", "cad", "chf", "cny", "czk", "dkk", "eur", "gbp",
        "hkd", "huf", "idr", "ils", "inr", "isk", "jpy", "krw", "mxn", "myr",
        "nok", "nzd", "php", "pln", "ron", "rub", "sek", "sgd", "thb", "try",
        "twd", "uah", "usd", "zar",
    }
)

CURRENCY_SYMBOLS: Dict[str, str] = {
    "€": "eur",
    "£": "gbp",
    "¥": "jpy",
    "₹": "inr",
    "₽": "rub",
    "₩": "krw",
}


@dataclass(frozen=True)
class CurrencySnapshot:
    """Rates relative to `base`, as fetched on `fetched_on`."""

    base: str
    rates: Mapping[str, float]
    names: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    fetched_on: date = field(default_factory=date.today)

    def __post_init__(self):
        rates = {code.lower(): float(rate) for code, rate in self.rates.items()}
        rates.setdefault(self.base, 1.0)
        object.__setattr__(self, "rates", MappingProxyType(rates))
        object.__setattr__(
            self, "names", MappingProxyType({c.lower(): n for c, n in self.names.items()})
        )
        # Full names are matched case-insensitively as single words
        by_name = {n.casefold(): c for c, n in self.names.items() if n and " " not in n}
        object.__setattr__(self, "_by_name", by_name)

    def is_current(self, today: date) -> bool:
        return self.fetched_on == today

    def resolve(self, token: str) -> Optional[str]:
        """Currency code for a code or full name, if known."""
        token = token.casefold()
        if token in self.rates:
            return token
        return self._by_name.get(token)

    def rate(self, code: str) -> float:
        try:
            return self.rates[code.lower()]
        except KeyError:
            raise ConversionError(f"No exchange rate for {code.upper()}")

    def convert(self, amount: float, source: str, target: str) -> float:
        return amount * self.rate(target) / self.rate(source)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base": self.base,
            "fetched_on": self.fetched_on.isoformat(),
            "rates": dict(self.rates),
            "names": dict(self.names),
            "version": "1.0",
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CurrencySnapshot":
        """Rebuild a snapshot from `to_dict` output. Raises ValueError on a bad shape."""
        if not isinstance(data, dict):
            raise ValueError("currency cache is not an object")
        rates = data.get("rates")
        names = data.get("names", {})
        if not isinstance(rates, dict) or not isinstance(names, dict):
            raise ValueError("currency cache rates and names must be objects")
        return cls(
            base=str(data["base"]),
            rates=rates,
            names={c: n for c, n in names.items() if isinstance(n, str)},
            fetched_on=date.fromisoformat(data["fetched_on"]),
        )


class CurrencyFetcher:
    """Downloads currency names and rates."""

    def __init__(self, timeout: float = LAUNCHER_CONFIG["currency"]["fetch_timeout"]):
        self.timeout = timeout

    def _get_json(self, url: str) -> Any:
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            raise CurrencyFetchError(f"Fetching {url} failed: {e}") from e

    def fetch(self, base: str = DEFAULT_BASE) -> CurrencySnapshot:
        logger.info(f"Fetching currency rates for {base}")
        names = self._get_json(NAMES_URL)
        document = self._get_json(RATES_URL.format(base=base))

        rates = document.get(base) if isinstance(document, dict) else None
        if not isinstance(rates, dict) or not isinstance(names, dict):
            raise CurrencyFetchError("Unexpected currency data format")

        return CurrencySnapshot(
            base=base,
            rates={
                code: rate
                for code, rate in rates.items()
                if isinstance(rate, (int, float)) and rate > 0
            },
            names={code: name for code, name in names.items() if isinstance(name, str)},
            fetched_on=date.today(),
        )


class CurrencyRateCache:
    """
    Holds the current rate snapshot.

    Readers get whichever snapshot is current; a refresh replaces the whole
    snapshot reference at once, so a half-updated table is never visible.
    """

    def __init__(
        self,
        cache_file: Optional[Path] = None,
        fetcher: Optional[CurrencyFetcher] = None,
        base: str = DEFAULT_BASE,
        today: Callable[[], date] = date.today,
    ):
        self.cache_file = Path(cache_file) if cache_file else None
        self.fetcher = fetcher or CurrencyFetcher()
        self.base = base
        self.today = today

        self._snapshot: Optional[CurrencySnapshot] = None
        self._loaded = False
        self._last_attempt: Optional[date] = None
        self._refresh_thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _load(self) -> Optional[CurrencySnapshot]:
        if self.cache_file is None or not self.cache_file.exists():
            return None
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                snapshot = CurrencySnapshot.from_dict(json.load(f))
            logger.debug(f"Loaded {len(snapshot.rates)} currency rates from {snapshot.fetched_on}")
            return snapshot
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Corrupted currency cache, ignoring: {e}")
            return None

    def _save(self, snapshot: CurrencySnapshot):
        if self.cache_file is None:
            return
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            # Write to temporary file first, then rename to avoid corruption
            temp_file = self.cache_file.with_suffix(".tmp")
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_dict(), f)
            temp_file.replace(self.cache_file)
            logger.debug(f"Currency cache saved to {self.cache_file}")
        except OSError as e:
            logger.warning(f"Failed to save currency cache: {e}")

    def peek(self) -> Optional[CurrencySnapshot]:
        """Current snapshot without any network access."""
        if not self._loaded:
            with self._lock:
                if not self._loaded:
                    self._snapshot = self._load()
                    self._loaded = True
        return self._snapshot

    def _fetch(self) -> Optional[CurrencySnapshot]:
        try:
            snapshot = self.fetcher.fetch(self.base)
        except CurrencyFetchError as e:
            logger.warning(f"Currency refresh failed: {e}")
            return None
        self._snapshot = snapshot
        self._save(snapshot)
        logger.info(f"Currency rates updated ({len(snapshot.rates)} currencies)")
        return snapshot

    def _start_refresh(self):
        today = self.today()
        with self._lock:
            if self._last_attempt == today:
                return
            self._last_attempt = today
            self._refresh_thread = threading.Thread(target=self._fetch, daemon=True)
            self._refresh_thread.start()

    def get_snapshot(self) -> CurrencySnapshot:
        """
        Snapshot to convert with.

        With nothing cached this fetches synchronously, once per day; a stale
        snapshot is returned as-is while a background refresh runs.
        """
        snapshot = self.peek()
        today = self.today()

        if snapshot is None:
            with self._lock:
                if self._snapshot is None and self._last_attempt != today:
                    self._last_attempt = today
                    self._fetch()
                snapshot = self._snapshot
            if snapshot is None:
                raise CurrencyUnavailableError()
            return snapshot

        if not snapshot.is_current(today):
            self._start_refresh()
        return snapshot

    def wait_for_refresh(self, timeout: Optional[float] = None) -> bool:
        """Wait for a running background refresh. Returns False on timeout."""
        thread = self._refresh_thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()
