"""Recursive-descent parser turning tokens into statements."""

from __future__ import annotations

from typing import Callable, Mapping, Sequence

from loxwalk.expr import (
    Assign,
    Binary,
    BinOp,
    Call,
    Expr,
    Grouping,
    Literal,
    Push,
    Unary,
    UnOp,
    Variable,
)
from loxwalk.reporting import ErrorManager, Position
from loxwalk.stmt import (
    Block,
    Break,
    Continue,
    Decl,
    ExprStmt,
    Fun,
    If,
    Nop,
    Print,
    Return,
    Stmt,
    While,
)
from loxwalk.tokens import (
    LB,
    LP,
    RB,
    RP,
    Grammar,
    Ident,
    Keyword,
    Number,
    Op,
    Punct,
    StringLit,
    Token,
)

MAX_ARGS = 255

_OR: Mapping[object, BinOp] = {Keyword.OR: BinOp.OR}
_AND: Mapping[object, BinOp] = {Keyword.AND: BinOp.AND}
_EQUALITY: Mapping[object, BinOp] = {Op.EQUAL: BinOp.EQL, Op.NOT_EQUAL: BinOp.NEQ}
_COMPARISON: Mapping[object, BinOp] = {
    Op.LE: BinOp.LE,
    Op.LT: BinOp.LT,
    Op.GE: BinOp.GE,
    Op.GT: BinOp.GT,
}
_TERM: Mapping[object, BinOp] = {Op.PLUS: BinOp.ADD, Op.MINUS: BinOp.SUB}
_FACTOR: Mapping[object, BinOp] = {Op.STAR: BinOp.MUL, Op.SLASH: BinOp.DIV}
_UNARY: Mapping[object, UnOp] = {Op.BANG: UnOp.NOT, Op.MINUS: UnOp.NEG}
_CONSTANTS: Mapping[object, object] = {
    Keyword.TRUE: True,
    Keyword.FALSE: False,
    Keyword.NIL: None,
}


class _ParseFailed(Exception):
    """Parsing cannot go on; any message has already been reported."""


class Parser:
    """Builds statements from a token list, reporting syntax errors."""

    def __init__(self, errors: ErrorManager, tokens: Sequence[Token]) -> None:
        self._errors = errors.client()
        self._tokens = list(tokens)
        self._current = 0

    # ------------------------------------------------------------------ helpers

    def _peek(self) -> Token:
        return self._tokens[min(self._current, len(self._tokens) - 1)]

    def _advance(self) -> Token:
        token = self._peek()
        self._current += 1
        return token

    def _at_end(self) -> bool:
        return (
            self._current >= len(self._tokens)
            or self._tokens[self._current].load is Punct.EOF
        )

    def _match(self, g: Grammar) -> Position | None:
        """Consume the next token if it is ``g`` and return its position."""
        token = self._peek()
        if token.load == g:
            self._current += 1
            return token.pos
        return None

    def _consume(self, g: Grammar, msg: str) -> bool:
        if self._match(g) is None:
            self._errors.error(self._peek().pos, msg)
            return False
        return True

    def _require(self, g: Grammar, msg: str) -> None:
        if not self._consume(g, msg):
            raise _ParseFailed()

    def _semicolon(self) -> None:
        self._require(Punct.SEMICOLON, "Expected semicolon")

    def _fail(self, pos: Position, msg: str) -> _ParseFailed:
        self._errors.error(pos, msg)
        return _ParseFailed()

    # --------------------------------------------------------------- statements

    def parse(self) -> list[Stmt]:
        """Parse declarations until the end or the first one that fails."""
        stmts: list[Stmt] = []
        while not self._at_end():
            stmt = self.declaration()
            if stmt is None:
                break
            stmts.append(stmt)
        return stmts

    def declaration(self) -> Stmt | None:
        """Parse one declaration, or return None once an error has been reported."""
        try:
            return self._declaration()
        except _ParseFailed:
            return None

    def _declaration(self) -> Stmt:
        load = self._peek().load
        if load is Keyword.VAR:
            self._advance()
            return self._decl_stmt()
        if load is Keyword.FUN:
            self._advance()
            return self._fun_decl()
        return self._statement()

    def _statement(self) -> Stmt:
        load = self._advance().load
        if load is Keyword.PRINT:
            return self._print_stmt()
        if load == LB:
            return Block(tuple(self._block()))
        if load is Keyword.IF:
            return self._if_stmt()
        if load is Keyword.WHILE:
            return self._while_stmt()
        if load is Keyword.FOR:
            return self._for_stmt()
        if load is Keyword.BREAK:
            self._semicolon()
            return Break()
        if load is Keyword.CONTINUE:
            self._semicolon()
            return Continue()
        if load is Keyword.RETURN:
            if self._match(Punct.SEMICOLON) is not None:
                return Return(None)
            value = self._expression()
            self._semicolon()
            return Return(value)
        if load is Punct.SEMICOLON:
            return Nop()
        self._current -= 1
        return self._expr_stmt()

    def _block(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while not self._at_end() and self._match(RB) is None:
            stmts.append(self._declaration())
        return stmts

    def _expr_stmt(self) -> Stmt:
        expr = self._expression()
        self._semicolon()
        return ExprStmt(expr)

    def _print_stmt(self) -> Stmt:
        expr = self._expression()
        self._semicolon()
        return Print(expr)

    def _get_name(self, msg: str) -> tuple[Position, str]:
        token = self._peek()
        if not isinstance(token.load, Ident):
            raise self._fail(token.pos, msg)
        self._current += 1
        return token.pos, token.load.name

    def _decl_stmt(self) -> Stmt:
        pos, name = self._get_name("Expected variable name")
        init = self._expression() if self._match(Op.ASSIGN) is not None else None
        self._consume(Punct.SEMICOLON, "Expected semicolon")
        return Decl(pos, name, init)

    def _fun_decl(self) -> Stmt:
        pos, name = self._get_name("Expected function name")
        self._require(LP, "Expected argument list")
        params: list[str] = []
        if self._match(RP) is None:
            params.append(self._get_name("Expected function argument")[1])
            while not self._at_end() and self._match(Punct.COMMA) is not None:
                params.append(self._get_name("Expected function argument")[1])
            self._require(RP, "Argument list must end")
        body = self._statement()
        return Fun(pos, name, tuple(params), body)

    def _if_stmt(self) -> Stmt:
        condition = self._expression()
        then = self._statement()
        if self._match(Keyword.ELSE) is not None:
            return If(condition, then, self._statement())
        return If(condition, then, None)

    def _while_stmt(self) -> Stmt:
        condition = self._expression()
        return While(condition, self._statement())

    def _for_stmt(self) -> Stmt:
        self._require(LP, "For loops must have parentheses")
        init: Stmt
        if self._match(Punct.SEMICOLON) is not None:
            init = Nop()
        elif self._match(Keyword.VAR) is not None:
            init = self._decl_stmt()
        else:
            init = self._expr_stmt()
        condition = self._expression()
        self._semicolon()
        close = self._match(RP)
        update: Expr
        if close is not None:
            update = Literal(close, None)
        else:
            update = self._expression()
            if self._match(RP) is None:
                raise _ParseFailed()
        body = self._statement()
        return Block((init, While(condition, Block((body, ExprStmt(update))))))

    # -------------------------------------------------------------- expressions

    def _expression(self) -> Expr:
        return self._assignment()

    def _assignment(self) -> Expr:
        target = self._or()
        for op, node in ((Op.ASSIGN, Assign), (Op.PUSH, Push)):
            if self._match(op) is not None:
                value = self._assignment()
                if isinstance(target, Variable):
                    return node(target.at, target.name, value)
                raise self._fail(target.pos(), "Cannot assign to expression")
        return target

    def _left_assoc(
        self, operand: Callable[[], Expr], ops: Mapping[object, BinOp]
    ) -> Expr:
        running = operand()
        while True:
            token = self._peek()
            op = ops.get(token.load)
            if op is None:
                return running
            self._current += 1
            try:
                rhs = operand()
            except _ParseFailed:
                return running
            running = Binary(running, token.pos, op, rhs)

    def _or(self) -> Expr:
        return self._left_assoc(self._and, _OR)

    def _and(self) -> Expr:
        return self._left_assoc(self._equality, _AND)

    def _equality(self) -> Expr:
        return self._left_assoc(self._comparison, _EQUALITY)

    def _comparison(self) -> Expr:
        return self._left_assoc(self._term, _COMPARISON)

    def _term(self) -> Expr:
        return self._left_assoc(self._factor, _TERM)

    def _factor(self) -> Expr:
        return self._left_assoc(self._unary, _FACTOR)

    def _unary(self) -> Expr:
        token = self._peek()
        op = _UNARY.get(token.load)
        if op is None:
            return self._call()
        self._current += 1
        return Unary(token.pos, op, self._unary())

    def _call(self) -> Expr:
        function = self._primary()
        while (begin := self._match(LP)) is not None:
            args: list[Expr] = []
            end = begin
            if self._match(RP) is None:
                end = self._peek().pos
                args.append(self._expression())
                while self._match(RP) is None:
                    self._consume(
                        Punct.COMMA,
                        "Function argument must be followed by paren or comma",
                    )
                    args.append(self._expression())
            span = Position.span(begin, end)
            if len(args) > MAX_ARGS:
                self._errors.error(span, "Cannot have more than 255 arguments")
            function = Call(function, span, tuple(args))
        return function

    def _primary(self) -> Expr:
        token = self._advance()
        pos, load = token.pos, token.load
        if load in _CONSTANTS:
            return Literal(pos, _CONSTANTS[load])
        if isinstance(load, StringLit):
            return Literal(pos, load.value)
        if isinstance(load, Number):
            return Literal(pos, load.value)
        if isinstance(load, Ident):
            return Variable(pos, load.name)
        if load == LP:
            inner = self._expression()
            close = self._peek()
            if close.load == RP:
                self._current += 1
                return Grouping(Position.span(pos, close.pos), inner)
            raise self._fail(close.pos, "Unclosed parenthetical")
        raise self._fail(pos, f"Unexpected {load}")