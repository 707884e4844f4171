import enum
import logging
from dataclasses import dataclass

from bytecalc.utils import CalculatorError, PrintableEnum

logger = logging.getLogger(__name__)

INT64_MAX = 2**63 - 1
INT64_MAX_DIGITS = len(str(INT64_MAX))


@dataclass
class TokenizerError(CalculatorError):
    pass


@dataclass
class UnexpectedCharacter(TokenizerError):
    char: str


@dataclass
class TooManyDecimalPoints(TokenizerError):
    lexeme: str


@dataclass
class InvalidInteger(TokenizerError):
    lexeme: str


@dataclass
class InvalidFloat(TokenizerError):
    lexeme: str


class TokenType(PrintableEnum):
    EOF = enum.auto()
    INT = enum.auto()
    FLOAT = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    CARET = enum.auto()
    BRACKET_OPEN = enum.auto()
    BRACKET_CLOSE = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "^": TokenType.CARET,
    "(": TokenType.BRACKET_OPEN,
    ")": TokenType.BRACKET_CLOSE,
}

WHITESPACE = {" ", "\t", "\n"}


def _is_digit(s: str) -> bool:
    # str.isdigit accepts superscripts and other unicode digits
    return "0" <= s <= "9"


def _is_valid_in_number(s: str) -> bool:
    return _is_digit(s) or s == "."


def int_literal_value(lexeme: str) -> int:
    digits = lexeme.lstrip("0")
    # int() refuses very long digit strings, so those never reach it
    value = int(digits or "0") if len(digits) <= INT64_MAX_DIGITS else None
    if value is None or value > INT64_MAX:
        raise InvalidInteger(f"Invalid integer {lexeme!r}: out of 64-bit range", lexeme=lexeme)
    return value


def _number_token(lexeme: str) -> Token:
    decimal_points = lexeme.count(".")
    if decimal_points > 1:
        raise TooManyDecimalPoints(f"Too many decimal points in {lexeme!r}", lexeme=lexeme)
    if decimal_points == 0:
        int_literal_value(lexeme)
        return Token(type=TokenType.INT, lexeme=lexeme)
    if lexeme.endswith("."):
        raise InvalidFloat(f"Invalid floating point {lexeme!r}", lexeme=lexeme)
    return Token(type=TokenType.FLOAT, lexeme=lexeme)


def tokenize(code: str) -> list[Token]:
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        if _is_digit(code[i]):
            number_end_idx = i + 1
            while number_end_idx < len(code) and _is_valid_in_number(code[number_end_idx]):
                number_end_idx += 1
            tokens.append(_number_token(code[i:number_end_idx]))
            i = number_end_idx - 1  # to account for += 1 later
        elif code[i] in SINGLE_CHAR_TOKENS:
            tokens.append(Token(type=SINGLE_CHAR_TOKENS[code[i]], lexeme=code[i]))
        elif code[i] in WHITESPACE:
            pass
        else:
            raise UnexpectedCharacter(f"Unexpected character: {code[i]!r}", char=code[i])
        i += 1

    tokens.append(Token(type=TokenType.EOF, lexeme=""))
    logger.debug("Tokenized %r into %d tokens", code, len(tokens))
    return tokens

