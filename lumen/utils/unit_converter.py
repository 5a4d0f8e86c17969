"""
Unit and currency conversion phrases.

Recognised shapes:

    <number><unit>                 convert to the unit's default counterpart
    <number><unit> <unit>
    <number><unit> to|in|as <unit>
    <number> to|as <unit>          convert from the target's counterpart
    <feet>'<inches>"               a single length in inches
    <feet>'                        feet

`in` after the source unit is the connector only when another token follows
it; as the last token it is the inch unit ("123cm in").
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..core.exceptions import ConversionError, CurrencyUnavailableError
from .currency import COMMON_CURRENCY_CODES, CURRENCY_SYMBOLS, CurrencyRateCache
from .units import (
    Unit,
    convert_static,
    currency_unit,
    default_currency_target,
    default_target,
    format_quantity,
    lookup_unit,
)

logger = logging.getLogger("UnitConverter")

CONNECTORS = ("to", "in", "as")

INCH = lookup_unit("in")
FOOT = lookup_unit("ft")


class TokenKind(Enum):
    NUMBER = "number"
    TEXT = "text"
    SYMBOL = "symbol"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    value: float = 0.0


def _is_text_char(c: str) -> bool:
    # Any non-ASCII character counts as a letter (°, ², €, µ)
    return c.isalpha() or c == "/" or not c.isascii()


def lex(text: str) -> List[Token]:
    """
    Split input into numbers, text runs and single-character symbols.

    Numbers accept one `.` or `,` as the decimal point and `_` as a digit
    separator. Text runs may contain `/` (km/h) and digits after the first
    letter (m2).
    """
    tokens = []
    i = 0
    while i < len(text):
        c = text[i]
        if c.isascii() and c.isdigit():
            digits = []
            saw_point = False
            j = i
            while j < len(text):
                ch = text[j]
                if ch.isascii() and ch.isdigit():
                    digits.append(ch)
                elif ch in ".," and not saw_point:
                    saw_point = True
                    digits.append(".")
                elif ch != "_":
                    break
                j += 1
            tokens.append(Token(TokenKind.NUMBER, text[i:j], float("".join(digits))))
            i = j
        elif _is_text_char(c):
            j = i + 1
            while j < len(text) and (
                _is_text_char(text[j]) or (text[j].isascii() and text[j].isdigit())
            ):
                j += 1
            tokens.append(Token(TokenKind.TEXT, text[i:j]))
            i = j
        elif c.isspace():
            i += 1
        else:
            tokens.append(Token(TokenKind.SYMBOL, c))
            i += 1
    return tokens


@dataclass(frozen=True)
class ConversionRequest:
    """A parsed phrase; either unit may be left for the default rules."""

    amount: float
    source: Optional[Unit] = None
    target: Optional[Unit] = None


@dataclass(frozen=True)
class Conversion:
    """A completed conversion."""

    amount: float
    source: Unit
    value: float
    target: Unit

    @property
    def display(self) -> str:
        return format_quantity(self.value, self.target)


def _is_connector(token: Token) -> bool:
    return token.kind is TokenKind.TEXT and token.text.casefold() in CONNECTORS


def _missing_target() -> ConversionError:
    return ConversionError("Missing or invalid target unit")


def parse_conversion(
    tokens: List[Token], resolve: Callable[[str], Optional[Unit]]
) -> Optional[ConversionRequest]:
    """
    Match tokens against the conversion shapes.

    Returns None when the input is not a conversion phrase, and raises
    ConversionError when it clearly is one but the target is missing.
    """
    sign = 1.0
    if len(tokens) > 1 and tokens[0].text == "-":
        # Negative temperatures
        sign = -1.0
        tokens = tokens[1:]
    if not tokens or tokens[0].kind is not TokenKind.NUMBER:
        return None

    amount = sign * tokens[0].value
    source = None
    index = 1

    if index < len(tokens):
        token = tokens[index]
        if token.kind is TokenKind.SYMBOL and token.text == "'":
            source = FOOT
            index += 1
            if (
                index + 1 < len(tokens)
                and tokens[index].kind is TokenKind.NUMBER
                and tokens[index + 1].text == '"'
            ):
                amount = amount * 12 + sign * tokens[index].value
                source = INCH
                index += 2
        elif token.kind is TokenKind.SYMBOL and token.text == '"':
            source = INCH
            index += 1
        elif _is_connector(token) and token.text.casefold() != "in":
            # "<number> to <unit>", right after the number "in" is the inch
            pass
        elif token.kind is TokenKind.TEXT:
            source = resolve(token.text)
            if source is None:
                return None
            index += 1
        else:
            return None

    if source is None and index == len(tokens):
        # A bare number
        return None

    if index == len(tokens):
        return ConversionRequest(amount, source, None)

    token = tokens[index]
    if _is_connector(token):
        if token.text.casefold() == "in" and index + 1 == len(tokens) and source is not None:
            return ConversionRequest(amount, source, INCH)
        index += 1
        if index == len(tokens):
            raise _missing_target()
        token = tokens[index]
        target = resolve(token.text) if token.kind is TokenKind.TEXT else None
        if target is None:
            raise _missing_target()
    elif token.kind is TokenKind.TEXT and source is not None:
        target = resolve(token.text)
        if target is None:
            return None
    else:
        return None

    if index + 1 != len(tokens):
        return None
    return ConversionRequest(amount, source, target)


class UnitConverter:
    """Parses conversion phrases and converts quantities."""

    def __init__(
        self,
        currency_cache: Optional[CurrencyRateCache] = None,
        default_currency: str = "eur",
        dynamic_conversions: bool = True,
    ):
        self.currency_cache = currency_cache
        self.default_currency = default_currency.lower()
        self.dynamic_conversions = dynamic_conversions

    def resolve(self, token: str) -> Optional[Unit]:
        """Unit for a token; currencies only when dynamic conversions are enabled."""
        unit = lookup_unit(token)
        if unit is not None:
            return unit
        if not self.dynamic_conversions:
            return None

        code = CURRENCY_SYMBOLS.get(token)
        if code is None and token.casefold() in COMMON_CURRENCY_CODES:
            code = token.casefold()
        if code is None and self.currency_cache is not None:
            snapshot = self.currency_cache.peek()
            if snapshot is not None:
                code = snapshot.resolve(token)
        return currency_unit(code) if code else None

    def parse(self, text: str) -> Optional[ConversionRequest]:
        return parse_conversion(lex(text.strip()), self.resolve)

    def _counterpart(self, unit: Unit) -> Optional[Unit]:
        if unit.is_currency:
            return currency_unit(default_currency_target(unit.code, self.default_currency))
        return default_target(unit)

    def convert(self, amount: float, source: Unit, target: Unit) -> float:
        """Convert `amount`; both units must share a category."""
        if source.category is not target.category:
            raise ConversionError(f"Invalid conversion: {source} to {target}")

        if not source.is_currency:
            return convert_static(amount, source, target)

        if self.currency_cache is None:
            raise CurrencyUnavailableError()
        # One snapshot for both rates, even if a refresh lands meanwhile
        snapshot = self.currency_cache.get_snapshot()
        return snapshot.convert(amount, source.code, target.code)

    def interpret(self, text: str) -> Optional[Conversion]:
        """
        Convert a phrase.

        Returns None if `text` is not a conversion or has no default target,
        raises ConversionError for a recognised but impossible conversion.
        """
        request = self.parse(text)
        if request is None:
            return None

        source, target = request.source, request.target
        if target is None:
            target = self._counterpart(source)
            if target is None:
                logger.debug(f"No default target for {source}")
                return None
        elif source is None:
            source = self._counterpart(target)
            if source is None:
                raise ConversionError(f"No default unit to convert to {target}")

        value = self.convert(request.amount, source, target)
        return Conversion(amount=request.amount, source=source, value=value, target=target)
