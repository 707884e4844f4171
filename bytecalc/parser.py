import enum
import logging
from dataclasses import dataclass

from bytecalc.tokenizer import Token, TokenType
from bytecalc.utils import CalculatorError, PrintableEnum

logger = logging.getLogger(__name__)


@dataclass
class ParserError(CalculatorError):
    token: Token


@dataclass
class UnexpectedEndOfInput(ParserError):
    pass


@dataclass
class ExpectedAtom(ParserError):
    pass


@dataclass
class ExpectedCloseParen(ParserError):
    pass


@dataclass
class UnexpectedToken(ParserError):
    pass


@dataclass
class NestingTooDeep(ParserError):
    pass


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    POW = enum.auto()


class UnaryOperator(PrintableEnum):
    POS = enum.auto()
    NEG = enum.auto()


@dataclass(frozen=True)
class IntLiteral:
    text: str


@dataclass(frozen=True)
class FloatLiteral:
    text: str


@dataclass(frozen=True)
class BinaryOperation:
    left: "Expression"
    operator: BinaryOperator
    right: "Expression"


@dataclass(frozen=True)
class UnaryOperation:
    operator: UnaryOperator
    operand: "Expression"


Operator = BinaryOperator | UnaryOperator
Expression = IntLiteral | FloatLiteral | BinaryOperation | UnaryOperation

EXPR_OPERATORS = {TokenType.PLUS: BinaryOperator.ADD, TokenType.MINUS: BinaryOperator.SUB}
TERM_OPERATORS = {TokenType.STAR: BinaryOperator.MUL, TokenType.SLASH: BinaryOperator.DIV}
UNARY_OPERATORS = {TokenType.PLUS: UnaryOperator.POS, TokenType.MINUS: UnaryOperator.NEG}

OPERATOR_SYMBOLS: dict[Operator, str] = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.MUL: "*",
    BinaryOperator.DIV: "/",
    BinaryOperator.POW: "^",
    UnaryOperator.POS: "+",
    UnaryOperator.NEG: "-",
}

_EOF = Token(type=TokenType.EOF, lexeme="")

# brackets, unary signs and powers each nest up to five parser frames
MAX_NESTING_DEPTH = 100


def parse(tokens: list[Token]) -> Expression:
    """Parses a whole token sequence into a single expression tree

    Grammar, from the lowest precedence to the highest:
        expr   := term (('+'|'-') term)*
        term   := factor (('*'|'/') factor)*
        factor := ('+'|'-') factor | power
        power  := atom ['^' power]
        atom   := INT | FLOAT | '(' expr ')'
    """
    expr, i = _consume_expression(tokens, 0, depth=0)
    trailing = _peek(tokens, i)
    if trailing.type is not TokenType.EOF:
        raise UnexpectedToken(f"Unexpected token after expression: {trailing.lexeme!r}", token=trailing)
    logger.debug("Parsed %d tokens", len(tokens))
    return expr


def _peek(tokens: list[Token], i: int) -> Token:
    return tokens[i] if i < len(tokens) else _EOF


def _nested(tokens: list[Token], i: int, depth: int) -> int:
    if depth >= MAX_NESTING_DEPTH:
        token = _peek(tokens, i)
        raise NestingTooDeep(f"Expression nested deeper than {MAX_NESTING_DEPTH} levels", token=token)
    return depth + 1


def _consume_expression(tokens: list[Token], i: int, depth: int) -> tuple[Expression, int]:
    result, i = _consume_term(tokens, i, depth)
    while True:
        operator = EXPR_OPERATORS.get(_peek(tokens, i).type)
        if operator is None:
            break
        right, i = _consume_term(tokens, i + 1, depth)
        result = BinaryOperation(left=result, operator=operator, right=right)
    return result, i


def _consume_term(tokens: list[Token], i: int, depth: int) -> tuple[Expression, int]:
    result, i = _consume_factor(tokens, i, depth)
    while True:
        operator = TERM_OPERATORS.get(_peek(tokens, i).type)
        if operator is None:
            break
        right, i = _consume_factor(tokens, i + 1, depth)
        result = BinaryOperation(left=result, operator=operator, right=right)
    return result, i


def _consume_factor(tokens: list[Token], i: int, depth: int) -> tuple[Expression, int]:
    unary_operator = UNARY_OPERATORS.get(_peek(tokens, i).type)
    if unary_operator is None:
        return _consume_power(tokens, i, depth)
    operand, i = _consume_factor(tokens, i + 1, _nested(tokens, i, depth))
    return UnaryOperation(operator=unary_operator, operand=operand), i


def _consume_power(tokens: list[Token], i: int, depth: int) -> tuple[Expression, int]:
    base, i = _consume_atom(tokens, i, depth)
    if _peek(tokens, i).type is not TokenType.CARET:
        return base, i
    exponent, i = _consume_power(tokens, i + 1, _nested(tokens, i, depth))
    return BinaryOperation(left=base, operator=BinaryOperator.POW, right=exponent), i


def _consume_atom(tokens: list[Token], i: int, depth: int) -> tuple[Expression, int]:
    first = _peek(tokens, i)
    if first.type is TokenType.INT:
        return IntLiteral(first.lexeme), i + 1
    elif first.type is TokenType.FLOAT:
        return FloatLiteral(first.lexeme), i + 1
    elif first.type is TokenType.BRACKET_OPEN:
        expr, i = _consume_expression(tokens, i + 1, _nested(tokens, i, depth))
        closing = _peek(tokens, i)
        if closing.type is not TokenType.BRACKET_CLOSE:
            raise ExpectedCloseParen(f"Expected ')', found {closing.type}", token=closing)
        return expr, i + 1
    elif first.type is TokenType.EOF:
        raise UnexpectedEndOfInput("Unexpected end of input", token=first)
    else:
        raise ExpectedAtom(f"Expected atom, found {first.type}", token=first)


def _precedence(expr: Expression) -> int:
    if isinstance(expr, BinaryOperation):
        return {
            BinaryOperator.ADD: 1,
            BinaryOperator.SUB: 1,
            BinaryOperator.MUL: 2,
            BinaryOperator.DIV: 2,
            BinaryOperator.POW: 4,
        }[expr.operator]
    elif isinstance(expr, UnaryOperation):
        return 3
    return 5


def is_rtl_op(op: BinaryOperator) -> bool:
    return op is BinaryOperator.POW


def unparse(expr: Expression) -> str:
    """Canonical text for an expression tree, parenthesized only where needed"""
    pending: list[tuple[Expression, bool]] = [(expr, False)]
    rendered: list[str] = []
    while pending:
        node, children_rendered = pending.pop()
        if isinstance(node, (IntLiteral, FloatLiteral)):
            rendered.append(node.text)
        elif not children_rendered:
            if isinstance(node, UnaryOperation):
                pending.extend([(node, True), (node.operand, False)])
            elif isinstance(node, BinaryOperation):
                pending.extend([(node, True), (node.right, False), (node.left, False)])
            else:
                raise TypeError(f"Unexpected expression type: {node!r}")
        elif isinstance(node, UnaryOperation):
            operand = rendered.pop()
            if _precedence(node.operand) < _precedence(node):
                operand = f"({operand})"
            rendered.append(OPERATOR_SYMBOLS[node.operator] + operand)
        else:
            right = rendered.pop()
            left = rendered.pop()
            precedence = _precedence(node)
            rtl = is_rtl_op(node.operator)

            left_precedence = _precedence(node.left)
            if left_precedence < precedence or (left_precedence == precedence and rtl):
                left = f"({left})"

            right_precedence = _precedence(node.right)
            if right_precedence < precedence or (right_precedence == precedence and not rtl):
                right = f"({right})"

            if rtl:
                rendered.append(f"{left}^{right}")
            else:
                rendered.append(f"{left} {OPERATOR_SYMBOLS[node.operator]} {right}")
    return rendered.pop()
