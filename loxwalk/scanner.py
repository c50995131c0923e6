"""Turns source text into tokens."""

from __future__ import annotations

from loxwalk.reporting import ErrorManager, Position
from loxwalk.tokens import (
    LB,
    LP,
    RB,
    RP,
    Grammar,
    Ident,
    Number,
    Op,
    Payload,
    Punct,
    StringLit,
    Token,
    keyword_from_text,
)

_DIGITS = frozenset("0123456789")
_WHITESPACE = frozenset(" \r\t\n")
_SINGLE: dict[str, Grammar] = {
    "(": LP,
    ")": RP,
    "{": LB,
    "}": RB,
    ",": Punct.COMMA,
    ".": Punct.DOT,
    ";": Punct.SEMICOLON,
    ":": Op.PUSH,
    "-": Op.MINUS,
    "+": Op.PLUS,
    "*": Op.STAR,
}
# first character -> (token when followed by "=", token otherwise)
_PAIRED: dict[str, tuple[Op, Op]] = {
    "!": (Op.NOT_EQUAL, Op.BANG),
    "=": (Op.EQUAL, Op.ASSIGN),
    ">": (Op.GE, Op.GT),
    "<": (Op.LE, Op.LT),
}
_NUL = "\0"


class Scanner:
    """Scans a source string into a list of tokens ending with EOF."""

    def __init__(self, errors: ErrorManager, source: str) -> None:
        self._errors = errors.client()
        self._source = source
        self._idx = 0
        self._pos = Position()
        self._tokens: list[Token] = []

    def tokens(self) -> list[Token]:
        """Scan the whole source and return its tokens."""
        self._idx = 0
        self._pos = Position()
        self._tokens = []
        while not self._at_end():
            self._add_token()
        self._pos = self._pos.step(" ").sync()
        self._place(Punct.EOF)
        return list(self._tokens)

    def _at_end(self) -> bool:
        return self._idx >= len(self._source)

    def _advance(self) -> str:
        c = self._source[self._idx]
        self._pos = self._pos.step(c)
        self._idx += 1
        return c

    def _peek(self) -> str:
        return _NUL if self._at_end() else self._source[self._idx]

    def _peek2(self) -> str:
        nxt = self._idx + 1
        return self._source[nxt] if nxt < len(self._source) else _NUL

    def _match(self, c: str) -> bool:
        # Consumes without moving the position, as the reference scanner does.
        if self._at_end() or self._source[self._idx] != c:
            return False
        self._idx += 1
        return True

    def _report(self, msg: str) -> None:
        self._errors.error(self._pos, msg)

    def _place(self, load: Payload) -> None:
        self._tokens.append(Token(self._pos, load))

    def _add_token(self) -> None:
        c = self._advance()
        self._pos = self._pos.sync()
        if c in _SINGLE:
            self._place(_SINGLE[c])
        elif c in _PAIRED:
            paired, single = _PAIRED[c]
            self._place(paired if self._match("=") else single)
        elif c == "/":
            if self._match("/"):
                while self._peek() != "\n" and not self._at_end():
                    self._advance()
            else:
                self._place(Op.SLASH)
        elif c in _WHITESPACE:
            pass
        elif c == '"':
            self._string()
        elif c in _DIGITS:
            self._number()
        elif c.isalpha() or c == "_":
            self._identifier()
        else:
            self._report("Unexpected character")

    def _string(self) -> None:
        start = self._idx
        while self._peek() != '"' and not self._at_end():
            self._advance()
        if self._at_end():
            self._report("Unterminated string")
            return
        value = self._source[start:self._idx]
        self._advance()
        self._place(StringLit(value))

    def _number(self) -> None:
        start = self._idx - 1
        while self._peek() in _DIGITS:
            self._advance()
        if self._peek() == "." and self._peek2() in _DIGITS:
            self._advance()
            while self._peek() in _DIGITS:
                self._advance()
        self._place(Number(float(self._source[start:self._idx])))

    def _identifier(self) -> None:
        start = self._idx - 1
        while self._peek().isalnum() or self._peek() == "_":
            self._advance()
        text = self._source[start:self._idx]
        keyword = keyword_from_text(text)
        self._place(keyword if keyword is not None else Ident(text))


def scan(errors: ErrorManager, source: str) -> list[Token]:
    """Scan ``source`` and return its tokens, reporting problems to ``errors``."""
    return Scanner(errors, source).tokens()