"""
Static measurement units.

Every unit belongs to a category and converts through that category's base
unit: metre, gram, square metre, litre, kelvin and metre per second. Currency
units carry no factor; their rates come from the currency cache.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class Category(Enum):
    LENGTH = "length"
    MASS = "mass"
    AREA = "area"
    VOLUME = "volume"
    TEMPERATURE = "temperature"
    SPEED = "speed"
    CURRENCY = "currency"


@dataclass(frozen=True)
class Unit:
    """A unit with an affine transform to its category's base unit.

    base = value * factor + offset
    """

    symbol: str
    category: Category
    factor: float = 1.0
    offset: float = 0.0

    @property
    def is_currency(self) -> bool:
        return self.category is Category.CURRENCY

    @property
    def code(self) -> str:
        """Lower-case currency code."""
        return self.symbol.lower()

    def to_base(self, value: float) -> float:
        return value * self.factor + self.offset

    def from_base(self, value: float) -> float:
        return (value - self.offset) / self.factor

    def __str__(self) -> str:
        return self.symbol


def currency_unit(code: str) -> Unit:
    return Unit(code.upper(), Category.CURRENCY, factor=0.0)


# (long name, symbol, factor)
SI_PREFIXES: List[Tuple[str, str, float]] = [
    ("yotta", "Y", 1e24),
    ("zetta", "Z", 1e21),
    ("exa", "E", 1e18),
    ("peta", "P", 1e15),
    ("tera", "T", 1e12),
    ("giga", "G", 1e9),
    ("mega", "M", 1e6),
    ("kilo", "k", 1e3),
    ("hecto", "h", 1e2),
    ("deka", "da", 1e1),
    ("deci", "d", 1e-1),
    ("centi", "c", 1e-2),
    ("milli", "m", 1e-3),
    ("micro", "µ", 1e-6),
    ("nano", "n", 1e-9),
    ("pico", "p", 1e-12),
    ("femto", "f", 1e-15),
    ("atto", "a", 1e-18),
    ("zepto", "z", 1e-21),
    ("yocto", "y", 1e-24),
]

# Extra spellings of a prefix symbol
PREFIX_SYMBOL_ALIASES = {"µ": ("u",)}

# alias -> unit, exact case
UNITS: Dict[str, Unit] = {}


def _register(unit: Unit, aliases: Iterable[str]):
    UNITS.setdefault(unit.symbol, unit)
    for alias in aliases:
        UNITS.setdefault(alias, unit)


def _register_prefixed(
    symbol: str,
    category: Category,
    symbol_aliases: Iterable[str],
    long_aliases: Iterable[str],
    power: int = 1,
    scale: float = 1.0,
):
    """Register a base unit and every SI-prefixed form of it.

    `power` raises the prefix factor (2 for area, 3 for volume) and `scale`
    converts the unprefixed unit into the category base unit.
    """
    symbol_aliases = list(symbol_aliases)
    long_aliases = list(long_aliases)
    _register(Unit(symbol, category, scale), symbol_aliases + long_aliases)

    for long_prefix, prefix, prefix_factor in SI_PREFIXES:
        unit = Unit(prefix + symbol, category, scale * prefix_factor**power)
        prefix_symbols = (prefix,) + PREFIX_SYMBOL_ALIASES.get(prefix, ())
        aliases = [p + s for p in prefix_symbols for s in [symbol] + symbol_aliases]
        aliases += [long_prefix + name for name in long_aliases]
        _register(unit, aliases)


# Length, base metre
_register_prefixed("m", Category.LENGTH, [], ["meter", "meters", "metre", "metres"])
_register(Unit("in", Category.LENGTH, 0.0254), ["inch", "inches"])
_register(Unit("ft", Category.LENGTH, 0.3048), ["foot", "feet"])
_register(Unit("yd", Category.LENGTH, 0.9144), ["yard", "yards"])
_register(Unit("mi", Category.LENGTH, 1609.344), ["mile", "miles"])

# Mass, base gram
_register(Unit("t", Category.MASS, 1e6), ["ton", "tons", "tonne", "tonnes"])
_register_prefixed("g", Category.MASS, [], ["gram", "grams", "gramme", "grammes"])
_register(Unit("oz", Category.MASS, 28.349523125), ["ounce", "ounces"])
_register(Unit("lb", Category.MASS, 453.59237), ["lbs", "pound", "pounds"])
_register(Unit("st", Category.MASS, 6350.29318), ["stone", "stones"])

# Area, base square metre
_register_prefixed(
    "m²",
    Category.AREA,
    ["m2", "sqm"],
    ["meter2", "meters2", "squaremeter", "squaremeters", "squaremetre", "squaremetres"],
    power=2,
)
_register(Unit("in²", Category.AREA, 0.00064516), ["in2", "sqin", "inch2", "squareinch", "squareinches"])
_register(Unit("ft²", Category.AREA, 0.09290304), ["ft2", "sqft", "feet2", "squarefoot", "squarefeet"])
_register(Unit("yd²", Category.AREA, 0.83612736), ["yd2", "sqyd", "yard2", "squareyard", "squareyards"])
_register(Unit("mi²", Category.AREA, 2589988.110336), ["mi2", "sqmi", "mile2", "miles2", "squaremile", "squaremiles"])
_register(Unit("ha", Category.AREA, 10000.0), ["hectare", "hectares"])
_register(Unit("ac", Category.AREA, 4046.8564224), ["acre", "acres"])

# Volume, base litre
_register_prefixed("L", Category.VOLUME, ["l"], ["liter", "liters", "litre", "litres"])
_register_prefixed(
    "m³",
    Category.VOLUME,
    ["m3"],
    ["meter3", "meters3", "cubicmeter", "cubicmeters", "cubicmetre", "cubicmetres"],
    power=3,
    scale=1000.0,
)
_register(Unit("gal", Category.VOLUME, 3.785411784), ["gallon", "gallons"])
_register(Unit("qt", Category.VOLUME, 0.946352946), ["quart", "quarts"])
_register(Unit("pt", Category.VOLUME, 0.473176473), ["pint", "pints"])
_register(Unit("cup", Category.VOLUME, 0.2365882365), ["cups"])
_register(Unit("floz", Category.VOLUME, 0.0295735295625), ["fluidounce", "fluidounces"])
_register(Unit("tbsp", Category.VOLUME, 0.01478676478125), ["tablespoon", "tablespoons"])
_register(Unit("tsp", Category.VOLUME, 0.00492892159375), ["teaspoon", "teaspoons"])

# Temperature, base kelvin
_register(Unit("K", Category.TEMPERATURE), ["kelvin", "kelvins"])
_register(Unit("°C", Category.TEMPERATURE, 1.0, 273.15), ["C", "degC", "celsius"])
_register(
    Unit("°F", Category.TEMPERATURE, 5.0 / 9.0, 459.67 * 5.0 / 9.0),
    ["F", "degF", "fahrenheit"],
)

# Time denominators for speed, in seconds
TIME_UNITS: Dict[str, Tuple[str, float]] = {
    "s": ("s", 1.0),
    "sec": ("s", 1.0),
    "min": ("min", 60.0),
    "h": ("h", 3600.0),
    "hr": ("h", 3600.0),
}


def _speed(distance: Unit, time_symbol: str) -> Unit:
    symbol, seconds = TIME_UNITS[time_symbol]
    return Unit(f"{distance.symbol}/{symbol}", Category.SPEED, distance.factor / seconds)


KPH = _speed(UNITS["km"], "h")
MPH = _speed(UNITS["mi"], "h")
MPS = _speed(UNITS["m"], "s")
_register(KPH, ["kph", "kmh"])
_register(MPH, ["mph"])
_register(MPS, ["mps"])


def _build_folded() -> Dict[str, Unit]:
    # Lower-case spellings win, so "MM" folds to millimetre rather than megametre
    folded: Dict[str, Unit] = {}
    for alias, unit in UNITS.items():
        if alias == alias.casefold():
            folded.setdefault(alias, unit)
    for alias, unit in UNITS.items():
        folded.setdefault(alias.casefold(), unit)
    return folded


_FOLDED_UNITS = _build_folded()


def lookup_unit(token: str) -> Optional[Unit]:
    """Resolve a unit name: exact case first, then case-insensitively.

    Speeds are also accepted as `<length>/<time>` (km/h, m/s, mi/h).
    """
    if not token:
        return None
    unit = UNITS.get(token) or _FOLDED_UNITS.get(token.casefold())
    if unit is not None:
        return unit

    if token.count("/") == 1:
        distance_token, time_token = token.split("/")
        distance = lookup_unit(distance_token)
        time_token = time_token.casefold()
        if distance is not None and distance.category is Category.LENGTH and time_token in TIME_UNITS:
            return _speed(distance, time_token)
    return None


# Bidirectional default targets: a unit given without a target converts to its
# counterpart. The first pair listing a unit decides its default.
DEFAULT_PAIRS: List[Tuple[str, str]] = [
    ("in", "cm"),
    ("ft", "m"),
    ("yd", "m"),
    ("mi", "km"),
    ("oz", "g"),
    ("lb", "kg"),
    ("in²", "cm²"),
    ("ft²", "m²"),
    ("mi²", "km²"),
    ("gal", "L"),
    ("tbsp", "mL"),
    ("°F", "°C"),
    ("km/h", "mi/h"),
]

# (from, to)
DEFAULT_ONE_WAY: List[Tuple[str, str]] = [
    ("mm", "in"),
    ("st", "kg"),
    ("t", "lb"),
    ("yd²", "m²"),
    ("ha", "km²"),
    ("ac", "km²"),
    ("qt", "L"),
    ("pt", "L"),
    ("cup", "mL"),
    ("floz", "mL"),
    ("tsp", "mL"),
    ("K", "°C"),
    ("m/s", "km/h"),
]


def _build_defaults() -> Dict[Unit, Unit]:
    defaults: Dict[Unit, Unit] = {}
    for source, target in DEFAULT_PAIRS:
        defaults.setdefault(lookup_unit(source), lookup_unit(target))
    for source, target in DEFAULT_PAIRS:
        defaults.setdefault(lookup_unit(target), lookup_unit(source))
    for source, target in DEFAULT_ONE_WAY:
        defaults.setdefault(lookup_unit(source), lookup_unit(target))
    return defaults


DEFAULT_TARGETS: Dict[Unit, Unit] = _build_defaults()


def default_target(unit: Unit) -> Optional[Unit]:
    """The unit `unit` converts to when no target is given."""
    return DEFAULT_TARGETS.get(unit)


def default_currency_target(code: str, default_currency: str) -> str:
    """Currencies convert to the default currency, which itself goes to USD (or EUR)."""
    code = code.lower()
    default_currency = default_currency.lower()
    if code != default_currency:
        return default_currency
    return "eur" if default_currency == "usd" else "usd"


def convert_static(value: float, source: Unit, target: Unit) -> float:
    """Convert between two non-currency units of the same category."""
    return target.from_base(source.to_base(value))


def format_value(value: float) -> str:
    """Up to 6 decimals with trailing zeros trimmed."""
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_quantity(value: float, unit: Unit) -> str:
    return f"{format_value(value)} {unit.symbol}"
