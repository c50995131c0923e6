"""Token kinds produced by the scanner."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from loxwalk.reporting import Position


def _format_number(x: float) -> str:
    """Render a float the way the language prints numbers."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "inf" if x > 0 else "-inf"
    if x.is_integer():
        if x == 0 and math.copysign(1.0, x) < 0:
            return "-0"
        return str(int(x))
    text = repr(x)
    if "e" in text or "E" in text:
        return format(Decimal(text), "f")
    return text


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"


class Delim(Enum):
    PAREN = "paren"
    BRACE = "brace"


class Op(Enum):
    MINUS = "-"
    PLUS = "+"
    STAR = "*"
    SLASH = "/"
    BANG = "!"
    ASSIGN = "="
    PUSH = ":"
    EQUAL = "=="
    NOT_EQUAL = "!="
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"

    def __str__(self) -> str:
        return f"OP {self.value}"


class Keyword(Enum):
    AND = "and"
    CLASS = "class"
    ELSE = "else"
    FALSE = "false"
    FUN = "fun"
    FOR = "for"
    IF = "if"
    NIL = "nil"
    OR = "or"
    PRINT = "print"
    RETURN = "return"
    SUPER = "super"
    THIS = "this"
    TRUE = "true"
    VAR = "var"
    WHILE = "while"
    BREAK = "break"
    CONTINUE = "continue"

    def __str__(self) -> str:
        return f"KEYWORD {self.value}"


class Punct(Enum):
    COMMA = "COMMA"
    DOT = "DOT"
    SEMICOLON = "SEMICOLON"
    EOF = "EOF"

    def __str__(self) -> str:
        return self.value


_DELIM_CHARS = {
    (Side.LEFT, Delim.PAREN): "(",
    (Side.LEFT, Delim.BRACE): "{",
    (Side.RIGHT, Delim.PAREN): ")",
    (Side.RIGHT, Delim.BRACE): "}",
}


@dataclass(frozen=True)
class Delimiter:
    """An opening or closing parenthesis or brace."""

    side: Side
    delim: Delim

    def __str__(self) -> str:
        return f"DELIM {_DELIM_CHARS[(self.side, self.delim)]}"


LP = Delimiter(Side.LEFT, Delim.PAREN)
RP = Delimiter(Side.RIGHT, Delim.PAREN)
LB = Delimiter(Side.LEFT, Delim.BRACE)
RB = Delimiter(Side.RIGHT, Delim.BRACE)


@dataclass(frozen=True)
class Ident:
    name: str

    def __str__(self) -> str:
        return f"IDENT {self.name}"


@dataclass(frozen=True)
class StringLit:
    value: str

    def __str__(self) -> str:
        return f"STRING {self.value}"


@dataclass(frozen=True)
class Number:
    value: float

    def __str__(self) -> str:
        return f"NUMBER {_format_number(self.value)}"


Grammar = Union[Delimiter, Punct, Op, Keyword]
Payload = Union[Delimiter, Punct, Op, Keyword, Ident, StringLit, Number]


@dataclass(frozen=True)
class Token:
    """A scanned token and where it came from."""

    pos: Position
    load: Payload

    def __str__(self) -> str:
        return f"[{self.pos}] {self.load}"


_KEYWORDS = {k.value: k for k in Keyword}


def keyword_from_text(text: str) -> Keyword | None:
    """Return the keyword spelled by ``text`` (case-insensitively), or None."""
    return _KEYWORDS.get(text.lower())