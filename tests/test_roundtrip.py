import random

import pytest

from bytecalc.compiler import compile_expression
from bytecalc.parser import (
    BinaryOperation,
    BinaryOperator,
    Expression,
    FloatLiteral,
    IntLiteral,
    UnaryOperation,
    UnaryOperator,
    parse,
    unparse,
)
from bytecalc.tokenizer import tokenize
from bytecalc.utils import CalculatorError


def generate_expression(rng: random.Random, depth: int) -> Expression:
    if depth == 0 or rng.random() < 0.3:
        if rng.random() < 0.5:
            return IntLiteral(str(rng.randint(0, 99)))
        return FloatLiteral(f"{rng.randint(0, 99)}.{rng.randint(0, 99)}")
    if rng.random() < 0.25:
        return UnaryOperation(rng.choice(list(UnaryOperator)), generate_expression(rng, depth - 1))
    return BinaryOperation(
        left=generate_expression(rng, depth - 1),
        operator=rng.choice(list(BinaryOperator)),
        right=generate_expression(rng, depth - 1),
    )


def generate_code(rng: random.Random, length: int) -> str:
    alphabet = "0123456789.()+-*/^ "
    return "".join(rng.choices(alphabet, k=length))


@pytest.mark.parametrize("seed", range(200))
def test_unparse_roundtrip(seed: int) -> None:
    expr = generate_expression(random.Random(seed), depth=5)
    assert parse(tokenize(unparse(expr))) == expr


@pytest.mark.parametrize("seed", range(200))
def test_reparse_random_code(seed: int) -> None:
    code = generate_code(random.Random(seed), length=12)
    try:
        expr = parse(tokenize(code))
    except CalculatorError:
        return
    canonical = unparse(expr)
    assert parse(tokenize(canonical)) == expr
    assert unparse(parse(tokenize(canonical))) == canonical
    assert compile_expression(parse(tokenize(canonical))) == compile_expression(expr)
