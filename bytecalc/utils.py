import enum
from dataclasses import dataclass


class PrintableEnum(enum.Enum):
    def __str__(self) -> str:
        return self.name

    __repr__ = __str__


@dataclass
class CalculatorError(Exception):
    """Base for every error the evaluation pipeline raises"""

    errmsg: str

    def __str__(self) -> str:
        return self.errmsg
