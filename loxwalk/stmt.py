"""Statement trees."""

from __future__ import annotations

from dataclasses import dataclass

from loxwalk.expr import Expr
from loxwalk.reporting import Position


class Stmt:
    """A statement node."""


@dataclass(frozen=True)
class Decl(Stmt):
    at: Position
    name: str
    init: Expr | None = None


@dataclass(frozen=True)
class Fun(Stmt):
    at: Position
    name: str
    params: tuple[str, ...]
    body: Stmt


@dataclass(frozen=True)
class ExprStmt(Stmt):
    expr: Expr


@dataclass(frozen=True)
class Print(Stmt):
    expr: Expr


@dataclass(frozen=True)
class Block(Stmt):
    stmts: tuple[Stmt, ...] = ()


@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then: Stmt
    otherwise: Stmt | None = None


@dataclass(frozen=True)
class Return(Stmt):
    value: Expr | None = None


@dataclass(frozen=True)
class Nop(Stmt):
    pass


@dataclass(frozen=True)
class Break(Stmt):
    pass


@dataclass(frozen=True)
class Continue(Stmt):
    pass