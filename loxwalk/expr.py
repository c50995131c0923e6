"""Expression trees and the runtime values they evaluate to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Sequence, Union

from loxwalk.reporting import Position
from loxwalk.tokens import _format_number

if TYPE_CHECKING:
    from loxwalk.interpreter import Interpreter


class BinOp(Enum):
    EQL = "=="
    NEQ = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    AND = "and"
    OR = "or"

    def __str__(self) -> str:
        return self.value


class UnOp(Enum):
    NOT = "not"
    NEG = "negate"

    def __str__(self) -> str:
        return self.value


class LoxCallable(ABC):
    """Anything that can be called from a script."""

    @abstractmethod
    def arity(self) -> int:
        """Number of arguments the callable takes."""

    @abstractmethod
    def call(self, interpreter: Interpreter, args: Sequence[Value]) -> Value:
        """Run the callable with already evaluated arguments."""

    @abstractmethod
    def name(self) -> str:
        """Name the callable was declared with."""

    @abstractmethod
    def is_native(self) -> bool:
        """Whether the callable is built into the interpreter."""

    def __repr__(self) -> str:
        return "<function>"

    def __str__(self) -> str:
        return stringify(self)


Value = Union[float, str, bool, None, LoxCallable]

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\0": "\\0",
}


def _quote(text: str) -> str:
    parts = []
    for c in text:
        if c in _ESCAPES:
            parts.append(_ESCAPES[c])
        elif not c.isprintable():
            parts.append(f"\\u{{{ord(c):x}}}")
        else:
            parts.append(c)
    return '"' + "".join(parts) + '"'


def is_truthy(value: Value) -> bool:
    """Return the truth of a value: zero and the empty string are true, nil is false."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 0.0
    if isinstance(value, str):
        return value == ""
    return True


def values_equal(left: Value, right: Value) -> bool:
    """Compare two values; values of different kinds are never equal."""
    if isinstance(left, LoxCallable) or isinstance(right, LoxCallable):
        return left is right
    return type(left) is type(right) and left == right


def stringify(value: Value) -> str:
    """Render a value for display; strings come out quoted."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(float(value))
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, LoxCallable):
        if value.is_native():
            return f"<native function '{value.name()}'>"
        return f"<function '{value.name()}'>"
    raise TypeError(f"not a script value: {value!r}")


class Expr(ABC):
    """An expression node."""

    @abstractmethod
    def pos(self) -> Position:
        """The span of source the expression covers."""


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    at: Position
    op: BinOp
    right: Expr

    def pos(self) -> Position:
        return Position.span(self.left.pos(), self.right.pos())

    def __str__(self) -> str:
        return f"({self.op} {self.left} {self.right})"


@dataclass(frozen=True)
class Unary(Expr):
    at: Position
    op: UnOp
    operand: Expr

    def pos(self) -> Position:
        return Position.span(self.at, self.operand.pos())

    def __str__(self) -> str:
        return f"({self.op} {self.operand})"


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    at: Position
    args: tuple[Expr, ...] = ()

    def pos(self) -> Position:
        return Position.span(self.callee.pos(), self.at)

    def __str__(self) -> str:
        if not self.args:
            return f"{self.callee}()"
        return f"{self.callee}(" + ", ".join(str(arg) for arg in self.args)


@dataclass(frozen=True)
class Grouping(Expr):
    at: Position
    inner: Expr

    def pos(self) -> Position:
        return self.at

    def __str__(self) -> str:
        return f"[group {self.inner}]"


@dataclass(frozen=True)
class Literal(Expr):
    at: Position
    value: Value

    def pos(self) -> Position:
        return self.at

    def __str__(self) -> str:
        return f"[literal {stringify(self.value)}]"


@dataclass(frozen=True)
class Variable(Expr):
    at: Position
    name: str

    def pos(self) -> Position:
        return self.at

    def __str__(self) -> str:
        return f"[ident {self.name}]"


@dataclass(frozen=True)
class Assign(Expr):
    at: Position
    name: str
    value: Expr

    def pos(self) -> Position:
        return Position.span(self.at, self.value.pos())

    def __str__(self) -> str:
        return f"[assign {self.name} = {self.value}]"


@dataclass(frozen=True)
class Push(Expr):
    at: Position
    name: str
    value: Expr

    def pos(self) -> Position:
        return Position.span(self.at, self.value.pos())

    def __str__(self) -> str:
        return f"[push {self.name} : {self.value}]"