import enum
import logging
from dataclasses import dataclass
from typing import Optional

from exprcalc.utils import CalcError, PrintableEnum

logger = logging.getLogger(__name__)


class ScanError(CalcError):
    label = "Scanner error"


class TokenKind(PrintableEnum):
    NUMBER = enum.auto()
    IDENTIFIER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    MULTIPLY = enum.auto()
    DIVIDE = enum.auto()
    MODULO = enum.auto()
    POWER = enum.auto()
    FACTORIAL = enum.auto()
    COMMA = enum.auto()
    LPAREN = enum.auto()
    RPAREN = enum.auto()
    EQUALS = enum.auto()
    BAR = enum.auto()
    END = enum.auto()
    # no token produced, never part of a scanned sequence
    NONE = enum.auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    position: int
    lexeme: str = ""
    value: Optional[float] = None

    def __str__(self) -> str:
        if self.kind is TokenKind.IDENTIFIER:
            return f"{self.kind} {self.lexeme!r}"
        return str(self.kind)


SINGLE_CHAR_TOKENS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "/": TokenKind.DIVIDE,
    "%": TokenKind.MODULO,
    "^": TokenKind.POWER,
    "!": TokenKind.FACTORIAL,
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LPAREN,
    "]": TokenKind.RPAREN,
    "=": TokenKind.EQUALS,
    "|": TokenKind.BAR,
}


def _is_valid_in_number(s: str) -> bool:
    # only uppercase E is an exponent marker
    return s.isnumeric() or s == "." or s == "E"


def _take_while(code: str, start: int, predicate) -> int:
    end = start + 1
    while end < len(code) and predicate(code[end]):
        end += 1
    return end


def _next_token(code: str, i: int) -> tuple[Token, int]:
    """Scans one token starting at ``code[i]``, returns it with the index after it"""
    char = code[i]
    if char in SINGLE_CHAR_TOKENS:
        return Token(kind=SINGLE_CHAR_TOKENS[char], position=i, lexeme=char), i + 1
    elif char == "*":
        if code[i + 1 : i + 2] == "*":
            return Token(kind=TokenKind.POWER, position=i, lexeme="**"), i + 2
        return Token(kind=TokenKind.MULTIPLY, position=i, lexeme=char), i + 1
    elif char.isnumeric() or char == ".":
        number_end_idx = _take_while(code, i, _is_valid_in_number)
        lexeme = code[i:number_end_idx]
        try:
            value = float(lexeme)
        except ValueError:
            raise ScanError(f"Malformed number {lexeme!r} at position {i}", position=i) from None
        return Token(kind=TokenKind.NUMBER, position=i, lexeme=lexeme, value=value), number_end_idx
    elif char.isalpha():
        ident_end_idx = _take_while(code, i, str.isalpha)
        return Token(kind=TokenKind.IDENTIFIER, position=i, lexeme=code[i:ident_end_idx]), ident_end_idx
    else:
        if not char.isspace():
            logger.debug("Dropping unrecognized character %r at position %d", char, i)
        return Token(kind=TokenKind.NONE, position=i, lexeme=char), i + 1


def scan(code: str) -> list[Token]:
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        token, i = _next_token(code, i)
        if token.kind is not TokenKind.NONE:
            tokens.append(token)
    tokens.append(Token(kind=TokenKind.END, position=len(code)))
    return tokens


class TokenStream:
    """Read cursor over a scanned token sequence.

    Reading past the last token keeps yielding END tokens, so a parser loop
    waiting for END always terminates.
    """

    def __init__(self, tokens: list[Token]):
        self._tokens = tuple(tokens)
        self._index = 0
        self._end_position = tokens[-1].position if tokens else 0

    def peek(self) -> Token:
        if self._index >= len(self._tokens):
            return Token(kind=TokenKind.END, position=self._end_position)
        return self._tokens[self._index]

    def advance(self) -> Token:
        token = self.peek()
        if self._index < len(self._tokens):
            self._index += 1
        return token
