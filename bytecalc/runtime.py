import logging
import math
from dataclasses import dataclass
from typing import Type

from bytecalc.compiler import BinaryOp, BinaryOpCode, Instruction, PushFloat, PushInt, UnaryOp, UnaryOpCode
from bytecalc.utils import CalculatorError
from bytecalc.value import BinaryOperationImpl, Float, Int, UnaryOperationImpl, Value

logger = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass
class CalcRuntimeError(CalculatorError):
    pass


@dataclass
class DivisionByZero(CalcRuntimeError):
    pass


@dataclass
class NegativeIntegerExponent(CalcRuntimeError):
    pass


@dataclass
class StackUnderflow(CalcRuntimeError):
    pass


@dataclass
class InvalidOperatorCode(CalcRuntimeError):
    code: int


@dataclass
class IntegerOverflow(CalcRuntimeError):
    pass


@dataclass
class EmptyProgram(CalcRuntimeError):
    pass


class VirtualMachine:
    """Executes compiled instructions against a single stack of tagged values

    Every pushed value and every operation result is recorded in `history`,
    the last entry of which is the value of the whole expression.
    """

    def __init__(self) -> None:
        self.stack: list[Value] = []
        self.history: list[Value] = []

    def run(self, instructions: list[Instruction]) -> list[Value]:
        for instruction in instructions:
            self.execute(instruction)
        return self.history

    def result(self) -> Value:
        if not self.history:
            raise EmptyProgram("Nothing was evaluated")
        return self.history[-1]

    def execute(self, instruction: Instruction) -> None:
        logger.debug("Executing %s, stack depth %d", instruction, len(self.stack))
        if isinstance(instruction, PushInt):
            self._push(_checked_int(instruction.value))
        elif isinstance(instruction, PushFloat):
            self._push(Float(float(instruction.value)))
        elif isinstance(instruction, BinaryOp):
            table, op_name = _binary_impls(instruction.code)
            b = self._pop()
            a = self._pop()
            self._push(eval_binary_operation(table=table, a=a, b=b, op_name=op_name))
        elif isinstance(instruction, UnaryOp):
            unary_table, op_name = _unary_impls(instruction.code)
            operand = self._pop()
            self._push(eval_unary_operation(table=unary_table, operand=operand, op_name=op_name))
        else:
            raise CalcRuntimeError(f"Unexpected instruction: {instruction!r}")

    def _push(self, value: Value) -> None:
        self.stack.append(value)
        self.history.append(value)

    def _pop(self) -> Value:
        if not self.stack:
            raise StackUnderflow("Operand stack is empty")
        return self.stack.pop()


def run(instructions: list[Instruction]) -> list[Value]:
    return VirtualMachine().run(instructions)


BinaryOperationImplTable = list[tuple[tuple[Type[Value], Type[Value]], BinaryOperationImpl]]


def eval_binary_operation(table: BinaryOperationImplTable, a: Value, b: Value, op_name: str) -> Value:
    for (type_a, type_b), impl in table:
        if isinstance(a, type_a) and isinstance(b, type_b):
            return impl(a, b)
    else:
        raise CalcRuntimeError(f"{op_name} is not defined for {a.type_name()} and {b.type_name()}")


def _checked_int(v: int) -> Int:
    if not INT64_MIN <= v <= INT64_MAX:
        raise IntegerOverflow(f"Integer overflow: {v} does not fit in 64 bits")
    return Int(v)


def _promoted(fn):
    def impl(a: Value, b: Value) -> Value:
        return Float(fn(float(a.v), float(b.v)))  # type: ignore

    return impl


def _int_div(a: int, b: int) -> Int:
    if b == 0:
        raise DivisionByZero("Division by zero")
    quotient = abs(a) // abs(b)
    # truncate toward zero, // floors
    if (a < 0) != (b < 0):
        quotient = -quotient
    return _checked_int(quotient)


def _int_pow(a: int, b: int) -> Int:
    if b < 0:
        raise NegativeIntegerExponent(f"Negative integer exponent: {a}^{b}")
    result = 1
    base = a
    while b:
        if b & 1:
            result = _checked_int(result * base).v
        b >>= 1
        if b:
            base = _checked_int(base * base).v
    return Int(result)


def _is_odd_integer(x: float) -> bool:
    return x.is_integer() and x % 2 == 1


def _float_div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _float_pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _is_odd_integer(b) else math.inf
    except ValueError:
        # zero to a negative power, or a negative base with a fractional exponent
        if a == 0.0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


add_impls: BinaryOperationImplTable = [
    ((Int, Int), lambda a, b: _checked_int(a.v + b.v)),  # type: ignore
    ((Value, Value), _promoted(lambda a, b: a + b)),
]
sub_impls: BinaryOperationImplTable = [
    ((Int, Int), lambda a, b: _checked_int(a.v - b.v)),  # type: ignore
    ((Value, Value), _promoted(lambda a, b: a - b)),
]
mul_impls: BinaryOperationImplTable = [
    ((Int, Int), lambda a, b: _checked_int(a.v * b.v)),  # type: ignore
    ((Value, Value), _promoted(lambda a, b: a * b)),
]
div_impls: BinaryOperationImplTable = [
    ((Int, Int), lambda a, b: _int_div(a.v, b.v)),  # type: ignore
    ((Value, Value), _promoted(_float_div)),
]
pow_impls: BinaryOperationImplTable = [
    ((Int, Int), lambda a, b: _int_pow(a.v, b.v)),  # type: ignore
    ((Value, Value), _promoted(_float_pow)),
]

BINARY_IMPLS: dict[BinaryOpCode, tuple[BinaryOperationImplTable, str]] = {
    BinaryOpCode.ADD: (add_impls, "Addition"),
    BinaryOpCode.SUB: (sub_impls, "Subtraction"),
    BinaryOpCode.MUL: (mul_impls, "Multiplication"),
    BinaryOpCode.DIV: (div_impls, "Division"),
    BinaryOpCode.POW: (pow_impls, "Power"),
}


def _binary_impls(code: int) -> tuple[BinaryOperationImplTable, str]:
    if code not in BINARY_IMPLS:
        raise InvalidOperatorCode(f"Invalid binary operator code: {code}", code=code)
    return BINARY_IMPLS[code]  # type: ignore


UnaryOperationImplTable = list[tuple[Type[Value], UnaryOperationImpl]]


def eval_unary_operation(table: UnaryOperationImplTable, operand: Value, op_name: str) -> Value:
    for operand_type, impl in table:
        if isinstance(operand, operand_type):
            return impl(operand)
    else:
        raise CalcRuntimeError(f"{op_name} is not defined for {operand.type_name()}")


identity_impls: UnaryOperationImplTable = [(Value, lambda a: a)]
neg_impls: UnaryOperationImplTable = [
    (Int, lambda a: _checked_int(-a.v)),  # type: ignore
    (Float, lambda a: Float(-a.v)),  # type: ignore
]

UNARY_IMPLS: dict[UnaryOpCode, tuple[UnaryOperationImplTable, str]] = {
    UnaryOpCode.IDENTITY: (identity_impls, "Identity"),
    UnaryOpCode.NEGATE: (neg_impls, "Negation"),
}


def _unary_impls(code: int) -> tuple[UnaryOperationImplTable, str]:
    if code not in UNARY_IMPLS:
        raise InvalidOperatorCode(f"Invalid unary operator code: {code}", code=code)
    return UNARY_IMPLS[code]  # type: ignore
