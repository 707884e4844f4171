import abc
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable


class Value(abc.ABC):
    @classmethod
    @abc.abstractmethod
    def type_name(cls) -> str:
        ...


UnaryOperationImpl = Callable[[Value], Value]
BinaryOperationImpl = Callable[[Value, Value], Value]


@dataclass(frozen=True)
class Int(Value):
    v: int

    @classmethod
    def type_name(cls) -> str:
        return "Int"

    def __str__(self) -> str:
        return str(self.v)


@dataclass(frozen=True)
class Float(Value):
    v: float

    @classmethod
    def type_name(cls) -> str:
        return "Float"

    def __str__(self) -> str:
        # shortest round-tripping digits, written out without an exponent
        text = repr(self.v)
        if "e" not in text:
            return text
        text = format(Decimal(text), "f")
        return text if "." in text else text + ".0"
