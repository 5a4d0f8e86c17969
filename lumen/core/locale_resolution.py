"""
Locale resolution for localized desktop entry keys.

Resolved once at startup and handed to the candidate index; nothing in the
search path reads the environment afterwards.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

logger = logging.getLogger("LocaleResolution")

# lang_COUNTRY.ENCODING@MODIFIER
_LOCALE_RE = re.compile(
    r"^(?P<lang>[A-Za-z]{2,3})"
    r"(?:_(?P<country>[A-Za-z0-9]{2,3}))?"
    r"(?:\.(?P<encoding>[\w-]+))?"
    r"(?:@(?P<modifier>\w+))?$"
)

# Locales that carry no language
_NEUTRAL = {"C", "POSIX"}


@dataclass(frozen=True)
class LocaleResolution:
    """Ordered locale tags to try for `Name[tag]` style keys.

    An empty tuple means localized fields are not used at all.
    """

    tags: Tuple[str, ...] = ()
    source: str = "none"

    @property
    def enabled(self) -> bool:
        return bool(self.tags)

    def lookup(self, localized: Mapping[str, str]) -> Optional[str]:
        """Pick the best localized value for these tags."""
        for tag in self.tags:
            value = localized.get(tag)
            if value:
                return value
        return None


def split_locale(value: str) -> Optional[Tuple[str, Optional[str], Optional[str]]]:
    """Split a POSIX locale into (lang, country, modifier)."""
    if not value or value in _NEUTRAL:
        return None
    match = _LOCALE_RE.match(value.strip())
    if not match:
        return None
    return match.group("lang"), match.group("country"), match.group("modifier")


def locale_tags(value: str) -> Tuple[str, ...]:
    """
    Candidate tags for a locale, most specific first.

    lang_COUNTRY@MODIFIER, lang_COUNTRY, lang@MODIFIER, lang
    """
    parts = split_locale(value)
    if parts is None:
        return ()
    lang, country, modifier = parts

    tags = []
    if country:
        if modifier:
            tags.append(f"{lang}_{country}@{modifier}")
        tags.append(f"{lang}_{country}")
    if modifier:
        tags.append(f"{lang}@{modifier}")
    tags.append(lang)
    return tuple(tags)


def resolve_locale(
    override: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> LocaleResolution:
    """
    Resolve which locale tags to use.

    A configured override is expanded like an environment locale, so
    `de_DE.UTF-8` matches `Name[de_DE]` and `Name[de]`; when it
    is configured but empty or unrecognised, localized matching is disabled.
    Without an override LC_MESSAGES is used, then LANG.
    """
    if environ is None:
        environ = os.environ

    if override is not None:
        override = override.strip()
        tags = locale_tags(override)
        if not tags:
            logger.info(f"Locale override {override!r} unusable, localized names disabled")
            return LocaleResolution()
        return LocaleResolution(tags=tags, source="config")

    for var in ("LC_MESSAGES", "LANG"):
        value = environ.get(var)
        if not value:
            continue
        tags = locale_tags(value)
        if tags:
            return LocaleResolution(tags=tags, source=var)

    return LocaleResolution()
