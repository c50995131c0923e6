"""Static pass that records how far up the scope chain each variable lives."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from loxwalk.expr import (
    Assign,
    Binary,
    Call,
    Expr,
    Grouping,
    Literal,
    Push,
    Unary,
    Variable,
)
from loxwalk.interpreter import Interpreter
from loxwalk.reporting import ErrorManager, Position
from loxwalk.stmt import (
    Block,
    Decl,
    ExprStmt,
    Fun,
    If,
    Print,
    Return,
    Stmt,
    While,
)


class Resolver:
    """Resolves variable references of one top-level statement.

    Distances are written into the interpreter's ``locals`` map, keyed by the
    position of the reference.
    """

    def __init__(self, errors: ErrorManager, interpreter: Interpreter) -> None:
        self._errors = errors.client()
        self._interpreter = interpreter
        # name -> whether its initialiser has been fully resolved
        self._scopes: list[dict[str, bool]] = [{}]

    def resolve(self, stmt: Stmt) -> None:
        """Resolve every reference inside ``stmt``."""
        match stmt:
            case Decl(at, name, init):
                self._declare(at, name)
                if init is not None:
                    self._resolve_expr(init)
                self._define(name)
            case Fun(at, name, params, body):
                self._declare(at, name)
                self._define(name)
                self._resolve_function(params, body)
            case ExprStmt(expr) | Print(expr):
                self._resolve_expr(expr)
            case Return(value):
                if value is not None:
                    self._resolve_expr(value)
            case Block(stmts):
                with self._scope():
                    for inner in stmts:
                        self.resolve(inner)
            case While(condition, body):
                self._resolve_expr(condition)
                self.resolve(body)
            case If(condition, then, otherwise):
                self._resolve_expr(condition)
                self.resolve(then)
                if otherwise is not None:
                    self.resolve(otherwise)
            case _:
                pass

    def _resolve_expr(self, expr: Expr) -> None:
        match expr:
            case Binary(left, _, _, right):
                self._resolve_expr(left)
                self._resolve_expr(right)
            case Unary(_, _, operand):
                self._resolve_expr(operand)
            case Grouping(_, inner):
                self._resolve_expr(inner)
            case Call(callee, _, args):
                self._resolve_expr(callee)
                for arg in args:
                    self._resolve_expr(arg)
            case Literal():
                pass
            case Variable(at, name):
                if self._scopes and self._scopes[0].get(name) is False:
                    self._errors.error(at, "Cannot access variable in its initialization")
                self._resolve_local(at, name)
            case Assign(at, name, value) | Push(at, name, value):
                self._resolve_expr(value)
                self._resolve_local(at, name)
            case _:
                raise TypeError(f"unknown expression: {expr!r}")

    @contextmanager
    def _scope(self) -> Iterator[None]:
        self._scopes.append({})
        try:
            yield
        finally:
            self._scopes.pop()

    def _declare(self, at: Position, name: str) -> None:
        if not self._scopes:
            return
        scope = self._scopes[-1]
        if name in scope:
            self._errors.error(at, "Cannot redeclare variable")
        scope[name] = False

    def _define(self, name: str) -> None:
        if self._scopes:
            self._scopes[-1][name] = True

    def _resolve_local(self, at: Position, name: str) -> None:
        # The outermost scope holding the name wins.
        depth = len(self._scopes)
        for index, scope in enumerate(self._scopes):
            if name in scope:
                self._interpreter.locals[at] = depth - index - 1
                return

    def _resolve_function(self, params: tuple[str, ...], body: Stmt) -> None:
        with self._scope():
            for param in params:
                self._define(param)
            self.resolve(body)