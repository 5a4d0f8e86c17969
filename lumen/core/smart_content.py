"""
Smart content: input that is not an application name.

The router tries, in order: forced arithmetic (`=`), automatic arithmetic,
unit/currency conversion, shell commands (`$`), existing paths and URLs. The
first interpretation that applies wins; anything else is left to search.
"""

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern, Union

from ..utils.calculator import ArithmeticEvaluator
from ..utils.currency import CurrencyRateCache
from ..utils.unit_converter import Conversion, UnitConverter
from ..utils.units import format_value
from .config import Config, UrlMode
from .exceptions import ConversionError

logger = logging.getLogger("SmartContent")

LOOSE_URL_REGEX = (
    r"[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_\+.~#?&//=]*)"
)
HTTP_URL_REGEX = (
    r"https?:\/\/(www\.)?[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_\+.~#?&//=]*)"
)


class ContentKind(Enum):
    EXPRESSION = "expression"
    CONVERSION = "conversion"
    ACTION = "action"
    ERROR = "error"


class ActionKind(Enum):
    RUN = "run"
    OPEN_PATH = "open_path"
    OPEN_URL = "open_url"


class CommitKind(Enum):
    COPY = "copy"
    RUN = "run"
    OPEN_PATH = "open_path"
    OPEN_URL = "open_url"


@dataclass(frozen=True)
class CommitAction:
    """What the UI should do when smart content is activated."""

    kind: CommitKind
    value: str


@dataclass(frozen=True)
class ExpressionContent:
    value: float
    display: str

    kind = ContentKind.EXPRESSION

    @property
    def title(self) -> str:
        return self.display

    def commit(self) -> Optional[CommitAction]:
        return CommitAction(CommitKind.COPY, self.display)


@dataclass(frozen=True)
class ConversionContent:
    conversion: Conversion

    kind = ContentKind.CONVERSION

    @property
    def title(self) -> str:
        return self.conversion.display

    def commit(self) -> Optional[CommitAction]:
        return CommitAction(CommitKind.COPY, format_value(self.conversion.value))


_ACTION_VERBS = {
    ActionKind.RUN: "Run",
    ActionKind.OPEN_PATH: "Open",
    ActionKind.OPEN_URL: "Open",
}

_ACTION_COMMITS = {
    ActionKind.RUN: CommitKind.RUN,
    ActionKind.OPEN_PATH: CommitKind.OPEN_PATH,
    ActionKind.OPEN_URL: CommitKind.OPEN_URL,
}


@dataclass(frozen=True)
class ActionContent:
    action: ActionKind
    target: str

    kind = ContentKind.ACTION

    @property
    def title(self) -> str:
        return f"{_ACTION_VERBS[self.action]} {self.target}"

    def commit(self) -> Optional[CommitAction]:
        return CommitAction(_ACTION_COMMITS[self.action], self.target)


@dataclass(frozen=True)
class ErrorContent:
    message: str

    kind = ContentKind.ERROR

    @property
    def title(self) -> str:
        return self.message

    def commit(self) -> Optional[CommitAction]:
        return None


SmartContent = Union[ExpressionContent, ConversionContent, ActionContent, ErrorContent]


def url_pattern(mode: UrlMode) -> Optional[Pattern]:
    if mode is UrlMode.HTTP:
        return re.compile(HTTP_URL_REGEX)
    if mode is UrlMode.ALL:
        return re.compile(f"(?:{HTTP_URL_REGEX})|(?:{LOOSE_URL_REGEX})")
    return None


class SmartContentRouter:
    """Classifies raw input into at most one smart content result."""

    def __init__(
        self,
        config: Optional[Config] = None,
        converter: Optional[UnitConverter] = None,
        evaluator: Optional[ArithmeticEvaluator] = None,
    ):
        config = config if config is not None else Config()
        self.url_mode = config.smart_content_urls
        self._url_re = url_pattern(self.url_mode)
        self.converter = converter or UnitConverter(
            CurrencyRateCache(config.currency_cache_file),
            default_currency=config.default_currency,
            dynamic_conversions=config.smart_content_dynamic_conversions,
        )
        self.evaluator = evaluator or ArithmeticEvaluator()

    def _forced_expression(self, expr: str) -> SmartContent:
        result = self.evaluator.evaluate(expr)
        if result.is_error:
            return ErrorContent(result.error)
        return ExpressionContent(result.value, result.display)

    def _expression(self, text: str) -> Optional[SmartContent]:
        result = self.evaluator.evaluate(text)
        if result.is_error or result.trivial:
            return None
        return ExpressionContent(result.value, result.display)

    def _conversion(self, text: str) -> Optional[SmartContent]:
        try:
            conversion = self.converter.interpret(text)
        except ConversionError as e:
            logger.debug(f"Conversion error for '{text}': {e.message}")
            return ErrorContent(e.message)
        if conversion is None:
            return None
        return ConversionContent(conversion)

    def _command(self, text: str) -> Optional[SmartContent]:
        command = text[1:].strip()
        if not command:
            return None
        return ActionContent(ActionKind.RUN, command)

    def _path(self, text: str) -> Optional[SmartContent]:
        path = os.path.expanduser(text)
        if os.path.isabs(path) and os.path.exists(path):
            return ActionContent(ActionKind.OPEN_PATH, path)
        return None

    def _url(self, text: str) -> Optional[SmartContent]:
        if self._url_re is None or not self._url_re.fullmatch(text):
            return None
        if "://" not in text:
            text = f"https://{text}"
        return ActionContent(ActionKind.OPEN_URL, text)

    def interpret(self, query: str) -> Optional[SmartContent]:
        """Smart content for `query`, or None to show search results only."""
        text = query.strip()
        if not text:
            return None

        if text.startswith("="):
            return self._forced_expression(text[1:])

        content = self._expression(text) or self._conversion(text)
        if content is not None:
            return content

        if text.startswith("$"):
            return self._command(text)

        return self._path(text) or self._url(text)
