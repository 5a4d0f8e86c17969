"""Unit tests for calculator functionality"""

import sys
import os

# Add the parent directory to the path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from lumen.utils.calculator import (
    ArithmeticEvaluator,
    evaluate,
    evaluate_calculator,
    format_number,
    tokenize,
)
from lumen.core.exceptions import ExpressionError


class TestTokenize:
    """Test expression tokenizer"""

    def test_tokenize_basic(self):
        """Test numbers, names and operators are split"""
        assert tokenize("2 + sqrt(4)") == [
            ("number", "2"),
            ("op", "+"),
            ("name", "sqrt"),
            ("op", "("),
            ("number", "4"),
            ("op", ")"),
        ]

    def test_tokenize_double_star_is_power(self):
        """Test ** is read as ^"""
        assert tokenize("2**3") == [("number", "2"), ("op", "^"), ("number", "3")]

    def test_tokenize_invalid_characters(self):
        """Test unknown characters raise"""
        with pytest.raises(ExpressionError):
            tokenize("2+@")


class TestEvaluate:
    """Test expression evaluation"""

    def test_basic_arithmetic(self):
        """Test the four operations and modulo"""
        assert evaluate("2+2").value == 4
        assert evaluate("10-3").value == 7
        assert evaluate("3*4").value == 12
        assert evaluate("15/3").value == 5
        assert evaluate("7%3").value == 1

    def test_power(self):
        """Test exponentiation"""
        assert evaluate("2^3").value == 8
        assert evaluate("2**3").value == 8

    def test_power_is_right_associative(self):
        """Test 2^3^2 is 2^(3^2)"""
        assert evaluate("2^3^2").value == 512

    def test_power_binds_tighter_than_unary_minus(self):
        """Test -2^2 is -(2^2)"""
        assert evaluate("-2^2").value == -4
        assert evaluate("(-2)^2").value == 4

    def test_negative_exponent(self):
        """Test unary minus in an exponent"""
        assert evaluate("2^-1").value == 0.5

    def test_precedence(self):
        """Test operator precedence and parentheses"""
        assert evaluate("2+3*4").value == 14
        assert evaluate("(2+3)*4").value == 20
        assert evaluate("2*3^2").value == 18
        assert evaluate("123 + 456 * 789 / (1 + 2)").value == 120051

    def test_left_associative(self):
        """Test subtraction and division group left to right"""
        assert evaluate("10-4-3").value == 3
        assert evaluate("64/4/2").value == 8

    def test_constants(self):
        """Test mathematical constants"""
        assert evaluate("pi").value == pytest.approx(3.141592653589793)
        assert evaluate("e").value == pytest.approx(2.718281828459045)
        assert evaluate("tau").value == pytest.approx(6.283185307179586)

    def test_functions(self):
        """Test mathematical functions"""
        assert evaluate("cos(0)").value == 1
        assert evaluate("sin(0)").value == 0
        assert evaluate("sqrt(16)").value == 4
        assert evaluate("log(10)").value == pytest.approx(2.302585092994046)
        assert evaluate("lg(100)").value == 2
        assert evaluate("log2(8)").value == 3
        assert evaluate("floor(2.7)").value == 2
        assert evaluate("ceil(2.1)").value == 3
        assert evaluate("abs(-3)").value == 3
        assert evaluate("cbrt(-27)").value == pytest.approx(-3)

    def test_implicit_multiplication(self):
        """Test implicit multiplication"""
        assert evaluate("2(3+4)").value == 14
        assert evaluate("(3+4)5").value == 35
        assert evaluate("2pi").value == pytest.approx(6.283185307179586)
        assert evaluate("3cos(0)").value == 3

    def test_division_by_zero(self):
        """Test division by zero is an error, not infinity"""
        result = evaluate("10/0")
        assert result.is_error
        assert result.error == "Division by zero"
        assert result.value is None
        assert evaluate("5%0").error == "Division by zero"

    def test_math_domain_error(self):
        """Test invalid function domains"""
        result = evaluate("sqrt(-1)")
        assert result.is_error
        assert result.error == "Math domain error"
        assert evaluate("ln(0)").error == "Math domain error"

    def test_result_too_large(self):
        """Test overflow is reported"""
        assert evaluate("10^400").error == "Result too large"

    def test_invalid_syntax(self):
        """Test syntax errors"""
        assert evaluate("2+").error == "Invalid syntax"
        assert evaluate("(2+3").error == "Invalid syntax"
        assert evaluate("sqrt 4").error == "Invalid syntax"
        assert evaluate("2)").error == "Invalid syntax"

    def test_unknown_name(self):
        """Test unknown identifiers"""
        assert evaluate("unknown(2)").error == "Unknown function or variable: unknown"
        assert evaluate("5 kg").is_error

    def test_trivial(self):
        """Test lone numbers and constants are flagged trivial"""
        assert evaluate("123").trivial
        assert evaluate("pi").trivial
        assert not evaluate("1+2").trivial
        assert not evaluate("-5").trivial
        assert not evaluate("sqrt(4)").trivial
        assert not evaluate("2pi").trivial

    def test_max_length(self):
        """Test overly long expressions are rejected"""
        evaluator = ArithmeticEvaluator(max_length=10)
        assert evaluator.evaluate("1" * 11).error == "Expression too long"


class TestFormatNumber:
    """Test result formatting"""

    def test_integral_values(self):
        """Test integral floats print without a fraction"""
        assert format_number(4.0) == "4"
        assert format_number(-12.0) == "-12"
        assert format_number(-0.0) == "0"

    def test_fractional_values(self):
        """Test floating point noise is hidden"""
        assert format_number(0.1 + 0.2) == "0.3"
        assert format_number(2.5) == "2.5"


class TestEvaluateCalculator:
    """Test the (result, error) wrapper"""

    def test_success(self):
        """Test a result string and no error"""
        assert evaluate_calculator("2+2") == ("4", None)
        assert evaluate_calculator("15/3") == ("5", None)

    def test_error(self):
        """Test no result and an error message"""
        assert evaluate_calculator("") == (None, "Empty expression")
        assert evaluate_calculator("1/0") == (None, "Division by zero")
        assert evaluate_calculator("2+@") == (None, "Invalid characters in expression")


class TestLimits:
    """Test inputs that stress the parser"""

    def test_deep_nesting(self):
        """Test deeply nested parentheses are an error, not a crash"""
        assert evaluate("(" * 255 + "1").error == "Expression too deeply nested"
        assert evaluate("(" * 100 + "1" + ")" * 100).error == "Expression too deeply nested"
        assert evaluate("sqrt(" * 70 + "1" + ")" * 70).error == "Expression too deeply nested"

    def test_nesting_within_limit(self):
        """Test ordinary nesting still evaluates"""
        assert evaluate("(" * 20 + "1+1" + ")" * 20).value == 2
        assert evaluate("sqrt(sqrt(16))").value == 2

    def test_long_unary_chain(self):
        """Test a long run of signs stays within the stack"""
        assert evaluate("-" * 200 + "1").value == 1

    def test_intermediate_overflow(self):
        """Test an infinite intermediate result is reported as too large"""
        assert evaluate("10^300*10^300 - 10^300*10^300").error == "Result too large"
