import math

import pytest

from bytecalc.compiler import compile_expression
from bytecalc.parser import ExpectedAtom, ExpectedCloseParen, UnexpectedEndOfInput, UnexpectedToken, parse
from bytecalc.pipeline import evaluate, evaluate_line
from bytecalc.runtime import DivisionByZero, IntegerOverflow, NegativeIntegerExponent, run
from bytecalc.tokenizer import InvalidFloat, InvalidInteger, TooManyDecimalPoints, UnexpectedCharacter, tokenize
from bytecalc.utils import CalculatorError
from bytecalc.value import Float, Int, Value


@pytest.mark.parametrize(
    "code, expected_ret_val",
    [
        pytest.param("1", Int(1)),
        pytest.param("-1", Int(-1)),
        pytest.param("1+2", Int(3)),
        pytest.param("(1+2)", Int(3)),
        pytest.param("-(1+2)", Int(-3)),
        pytest.param("(((1)))", Int(1)),
        pytest.param("1 * 4 + 5", Int(9)),
        pytest.param("1 + 4 * 5", Int(21)),
        pytest.param("2+3*4", Int(14)),
        pytest.param("(2+3)*4", Int(20)),
        pytest.param("10 - 4 - 3", Int(3)),
        pytest.param("100 / 5 / 2", Int(10)),
        pytest.param("10 + 2 * (5 + 3 - 1)", Int(24)),
        # power
        pytest.param("2^10", Int(1024)),
        pytest.param("2^3^2", Int(512)),
        pytest.param("(2^3)^2", Int(64)),
        pytest.param("-2^2", Int(-4)),
        pytest.param("(-2)^3", Int(-8)),
        pytest.param("7^0", Int(1)),
        pytest.param("0^0", Int(1)),
        pytest.param("2.25^0.5", Float(1.5)),
        pytest.param("4^0.5", Float(2.0)),
        # promotion
        pytest.param("1+2.0", Float(3.0)),
        pytest.param("2.5*2", Float(5.0)),
        pytest.param("4/2", Int(2)),
        pytest.param("5/2", Int(2)),
        pytest.param("5.0/2", Float(2.5)),
        pytest.param("5/2.0", Float(2.5)),
        pytest.param("-7/2", Int(-3)),
        pytest.param("7/-2", Int(-3)),
        pytest.param("-7/-2", Int(3)),
        pytest.param("10 / 5 / 2.0 / 2", Float(0.5)),
        # unary
        pytest.param("--5", Int(5)),
        pytest.param("-+-5", Int(5)),
        pytest.param("+5", Int(5)),
        pytest.param("-2.5", Float(-2.5)),
        pytest.param("2*-3", Int(-6)),
        pytest.param("1--1", Int(2)),
        # whitespace
        pytest.param(" 1 +\t2\n", Int(3)),
    ],
)
def test_eval_arithmetic(code: str, expected_ret_val: Value) -> None:
    tokens = tokenize(code)
    ast = parse(tokens)
    results = run(compile_expression(ast))
    assert results[-1] == expected_ret_val
    assert type(results[-1]) is type(expected_ret_val)


@pytest.mark.parametrize(
    "code, error_type",
    [
        pytest.param("1.2.3", TooManyDecimalPoints),
        pytest.param("3.", InvalidFloat),
        pytest.param("9223372036854775808", InvalidInteger),
        pytest.param("@", UnexpectedCharacter),
        pytest.param("1 + x", UnexpectedCharacter),
        pytest.param(".5", UnexpectedCharacter),
        pytest.param("1+", UnexpectedEndOfInput),
        pytest.param("", UnexpectedEndOfInput),
        pytest.param("(1+2", ExpectedCloseParen),
        pytest.param("()", ExpectedAtom),
        pytest.param("*2", ExpectedAtom),
        pytest.param("2^-1", ExpectedAtom),
        pytest.param("1 2", UnexpectedToken),
        pytest.param("(1))", UnexpectedToken),
        pytest.param("1/0", DivisionByZero),
        pytest.param("1/(2-2)", DivisionByZero),
        pytest.param("2^(0-1)", NegativeIntegerExponent),
        pytest.param("9223372036854775807 + 1", IntegerOverflow),
        pytest.param("2^63", IntegerOverflow),
    ],
)
def test_eval_errors(code: str, error_type: type[CalculatorError]) -> None:
    with pytest.raises(error_type):
        evaluate(code)


def test_int64_bounds() -> None:
    assert evaluate("9223372036854775807") == Int(2**63 - 1)
    assert evaluate("-9223372036854775807 - 1") == Int(-(2**63))
    assert evaluate("2^62") == Int(2**62)
    with pytest.raises(IntegerOverflow):
        evaluate("-(-9223372036854775807 - 1)")


def test_float_division_by_zero_follows_ieee() -> None:
    assert evaluate("1.0/0") == Float(math.inf)
    assert evaluate("-1/0.0") == Float(-math.inf)
    result = evaluate("0.0/0")
    assert isinstance(result, Float) and math.isnan(result.v)


@pytest.mark.parametrize(
    "line, output",
    [
        pytest.param("2+3*4", "14"),
        pytest.param("  1+2.0 \n", "3.0"),
        pytest.param("5.0/2", "2.5"),
        pytest.param("1.0/0", "inf"),
        pytest.param("-1/0.0", "-inf"),
        pytest.param("@", "Error: Unexpected character: '@'"),
        pytest.param("1.2.3", "Error: Too many decimal points in '1.2.3'"),
        pytest.param("1+", "Error: Unexpected end of input"),
        pytest.param("(1+2", "Error: Expected ')', found EOF"),
        pytest.param("1/0", "Error: Division by zero"),
    ],
)
def test_evaluate_line(line: str, output: str) -> None:
    assert evaluate_line(line) == output


def test_lines_are_independent() -> None:
    assert evaluate_line("1/0").startswith("Error: ")
    assert evaluate_line("1+1") == "2"
    assert evaluate_line("(") == "Error: Unexpected end of input"
    assert evaluate_line("2*3") == "6"


@pytest.mark.parametrize(
    "line, output",
    [
        pytest.param("+".join(["1"] * 1500), "1500", id="long-sum"),
        pytest.param("*".join(["1"] * 1500), "1", id="long-product"),
        pytest.param("1" * 5000, "Error: Invalid integer", id="5000-digit-integer"),
        pytest.param("(" * 300 + "1" + ")" * 300, "Error: Expression nested deeper", id="deep-brackets"),
        pytest.param("-" * 5000 + "1", "Error: Expression nested deeper", id="deep-unary-signs"),
    ],
)
def test_evaluate_line_extreme_input(line: str, output: str) -> None:
    assert evaluate_line(line).startswith(output)


@pytest.mark.parametrize(
    "line, output",
    [
        pytest.param("10000000000000000.0", "10000000000000000.0"),
        pytest.param("100000000.0 * 100000000.0 * 100000000.0", "1000000000000000000000000.0"),
        pytest.param("1.5 / 10000000", "0.00000015"),
        pytest.param("0.1 + 0.2", "0.30000000000000004"),
    ],
)
def test_float_output_has_no_exponent(line: str, output: str) -> None:
    assert evaluate_line(line) == output
