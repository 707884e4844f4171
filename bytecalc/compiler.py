import enum
import logging
from dataclasses import dataclass

from bytecalc.parser import (
    BinaryOperation,
    BinaryOperator,
    Expression,
    FloatLiteral,
    IntLiteral,
    UnaryOperation,
    UnaryOperator,
)
from bytecalc.tokenizer import int_literal_value
from bytecalc.utils import CalculatorError

logger = logging.getLogger(__name__)


@dataclass
class CompilerError(CalculatorError):
    pass


class BinaryOpCode(enum.IntEnum):
    ADD = 0
    SUB = 1
    MUL = 2
    DIV = 3
    POW = 4


class UnaryOpCode(enum.IntEnum):
    IDENTITY = 0
    NEGATE = 1


@dataclass(frozen=True)
class PushInt:
    value: int


@dataclass(frozen=True)
class PushFloat:
    value: float


@dataclass(frozen=True)
class BinaryOp:
    code: BinaryOpCode


@dataclass(frozen=True)
class UnaryOp:
    code: UnaryOpCode


Instruction = PushInt | PushFloat | BinaryOp | UnaryOp

BINARY_OP_CODES = {
    BinaryOperator.ADD: BinaryOpCode.ADD,
    BinaryOperator.SUB: BinaryOpCode.SUB,
    BinaryOperator.MUL: BinaryOpCode.MUL,
    BinaryOperator.DIV: BinaryOpCode.DIV,
    BinaryOperator.POW: BinaryOpCode.POW,
}

UNARY_OP_CODES = {
    UnaryOperator.POS: UnaryOpCode.IDENTITY,
    UnaryOperator.NEG: UnaryOpCode.NEGATE,
}


def compile_expression(expression: Expression) -> list[Instruction]:
    """Emits stack machine code for the tree, operands always before their operator

    The walk keeps its own stack, so left-leaning chains like 1+1+...+1 compile
    no matter how long they are. Pending operator instructions share that stack
    with the subtrees still to visit.
    """
    instructions: list[Instruction] = []
    pending: list[Expression | BinaryOp | UnaryOp] = [expression]
    while pending:
        item = pending.pop()
        if isinstance(item, IntLiteral):
            instructions.append(PushInt(int_literal_value(item.text)))
        elif isinstance(item, FloatLiteral):
            instructions.append(PushFloat(float(item.text)))
        elif isinstance(item, BinaryOperation):
            pending.extend([BinaryOp(BINARY_OP_CODES[item.operator]), item.right, item.left])
        elif isinstance(item, UnaryOperation):
            pending.extend([UnaryOp(UNARY_OP_CODES[item.operator]), item.operand])
        elif isinstance(item, (BinaryOp, UnaryOp)):
            instructions.append(item)
        else:
            raise CompilerError(f"Unexpected expression type: {item!r}")
    logger.debug("Compiled %d instructions", len(instructions))
    return instructions


def disassemble(instructions: list[Instruction]) -> str:
    lines = []
    for instruction in instructions:
        if isinstance(instruction, PushInt):
            lines.append(f"PUSHI {instruction.value}")
        elif isinstance(instruction, PushFloat):
            lines.append(f"PUSHF {instruction.value!r}")
        elif isinstance(instruction, BinaryOp):
            lines.append(f"BINOP {_code_name(BinaryOpCode, instruction.code)}")
        elif isinstance(instruction, UnaryOp):
            lines.append(f"UNARYOP {_code_name(UnaryOpCode, instruction.code)}")
        else:
            raise CompilerError(f"Unexpected instruction: {instruction!r}")
    return "\n".join(lines)


def _code_name(codes: type[enum.IntEnum], code: int) -> str:
    try:
        return codes(code).name
    except ValueError:
        return str(int(code))
