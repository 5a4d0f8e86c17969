"""Utility modules for lumen functionality."""

from .calculator import ArithmeticEvaluator, Evaluation, evaluate_calculator
from .fuzzy_search import SearchCache, fuzzy_score
from .units import Category, Unit, lookup_unit
from .currency import CurrencyFetcher, CurrencyRateCache, CurrencySnapshot
from .unit_converter import Conversion, UnitConverter

__all__ = [
    "ArithmeticEvaluator",
    "Evaluation",
    "evaluate_calculator",
    "SearchCache",
    "fuzzy_score",
    "Category",
    "Unit",
    "lookup_unit",
    "CurrencyFetcher",
    "CurrencyRateCache",
    "CurrencySnapshot",
    "Conversion",
    "UnitConverter",
]
