"""Tree-walking evaluation of statements and expressions."""

from __future__ import annotations

import math
import sys
import time
from typing import Callable, Sequence, TextIO

from loxwalk.expr import (
    Assign,
    Binary,
    BinOp,
    Call,
    Expr,
    Grouping,
    Literal,
    LoxCallable,
    Push,
    Unary,
    UnOp,
    Value,
    Variable,
    is_truthy,
    stringify,
    values_equal,
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


class FlowControl(Exception):
    """A non-local exit out of a statement."""


class BreakSignal(FlowControl):
    pass


class ContinueSignal(FlowControl):
    pass


class ReturnSignal(FlowControl):
    def __init__(self, value: Value = None) -> None:
        super().__init__(value)
        self.value = value


class _EvaluationFailed(Exception):
    """An expression could not produce a value; any message was already reported."""


class Environment:
    """A scope of variable bindings with an optional enclosing scope."""

    def __init__(
        self,
        parent: Environment | None = None,
        values: dict[str, Value] | None = None,
    ) -> None:
        self.parent = parent
        self.values: dict[str, Value] = dict(values or {})

    def declare(self, name: str, value: Value) -> None:
        self.values[name] = value

    def _ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.parent is None:
                raise LookupError("Resolved distance was too high")
            env = env.parent
        return env

    def get_at(self, distance: int, name: str) -> Value:
        """Read ``name`` from the scope ``distance`` levels up."""
        return self._ancestor(distance).values[name]

    def assign_at(self, distance: int, name: str, value: Value) -> Value:
        """Bind ``name`` in the scope ``distance`` levels up and return the old value.

        Raises KeyError when there was no old value; the binding is made anyway.
        """
        scope = self._ancestor(distance).values
        existed = name in scope
        previous = scope.get(name)
        scope[name] = value
        if not existed:
            raise KeyError(name)
        return previous

    def root(self) -> Environment:
        env = self
        while env.parent is not None:
            env = env.parent
        return env


class NativeFunction(LoxCallable):
    """A function implemented by the interpreter itself."""

    def __init__(self, name: str, arity: int, func: Callable[[list[Value]], Value]) -> None:
        self._name = name
        self._arity = arity
        self._func = func

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, args: Sequence[Value]) -> Value:
        return self._func(list(args))

    def name(self) -> str:
        return self._name

    def is_native(self) -> bool:
        return True


class LoxFunction(LoxCallable):
    """A function declared in a script."""

    def __init__(
        self,
        name: str,
        params: Sequence[str],
        body: Stmt,
        closure: Environment,
    ) -> None:
        self._name = name
        self._params = tuple(params)
        self._body = body
        self._closure = closure

    def arity(self) -> int:
        return len(self._params)

    def call(self, interpreter: Interpreter, args: Sequence[Value]) -> Value:
        previous = interpreter.swap_env(self._closure)
        try:
            for param, arg in zip(self._params, args):
                interpreter.env.declare(param, arg)
            interpreter.interpret(self._body)
        except ReturnSignal as signal:
            return signal.value
        except BreakSignal:
            print("top-level break in function", file=sys.stderr)
        except ContinueSignal:
            print("top-level continue in function", file=sys.stderr)
        finally:
            interpreter.swap_env(previous)
        return None

    def name(self) -> str:
        return self._name

    def is_native(self) -> bool:
        return False


def clock() -> NativeFunction:
    """Return the native ``clock`` function: seconds since the Unix epoch."""
    return NativeFunction("clock", 0, lambda _args: time.time())


def _divide(x: float, y: float) -> float:
    try:
        return x / y
    except ZeroDivisionError:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)


def _is_number(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Interpreter:
    """Executes statements against a chain of environments."""

    def __init__(self, errors: ErrorManager, out: TextIO | None = None) -> None:
        self.errors = errors.client()
        self.env = Environment(values={"clock": clock()})
        self.locals: dict[Position, int] = {}
        self._out = out

    def swap_env(self, env: Environment) -> Environment:
        """Make ``env`` current and return the environment it replaces."""
        previous = self.env
        self.env = env
        return previous

    def _print(self, text: str) -> None:
        print(text, file=self._out if self._out is not None else sys.stdout)

    def _evaluate_or_nil(self, expr: Expr) -> Value:
        try:
            return self.evaluate(expr)
        except _EvaluationFailed:
            return None

    def interpret(self, stmt: Stmt) -> None:
        """Execute a statement; break, continue and return escape as FlowControl."""
        match stmt:
            case ExprStmt(expr):
                try:
                    self.evaluate(expr)
                except _EvaluationFailed:
                    pass
            case Print(expr):
                try:
                    value = self.evaluate(expr)
                except _EvaluationFailed:
                    return
                self._print(value if isinstance(value, str) else stringify(value))
            case Decl(_, name, init):
                value = None if init is None else self._evaluate_or_nil(init)
                self.env.declare(name, value)
            case Block(stmts):
                previous = self.env
                self.env = Environment(previous)
                try:
                    for inner in stmts:
                        self.interpret(inner)
                finally:
                    self.env = previous
            case If(condition, then, otherwise):
                if is_truthy(self._evaluate_or_nil(condition)):
                    self.interpret(then)
                elif otherwise is not None:
                    self.interpret(otherwise)
            case While(condition, body):
                while is_truthy(self._evaluate_or_nil(condition)):
                    try:
                        self.interpret(body)
                    except BreakSignal:
                        break
                    except ContinueSignal:
                        continue
            case Fun(_, name, params, body):
                closure = Environment(self.env)
                self.env.declare(name, LoxFunction(name, params, body, closure))
            case Nop():
                pass
            case Break():
                raise BreakSignal()
            case Continue():
                raise ContinueSignal()
            case Return(value):
                raise ReturnSignal(None if value is None else self._evaluate_or_nil(value))
            case _:
                raise TypeError(f"unknown statement: {stmt!r}")

    def evaluate(self, expr: Expr) -> Value:
        """Evaluate an expression.

        Raises an internal failure, after reporting any message, when no value results.
        """
        match expr:
            case Binary(left, _, BinOp.AND, right):
                value = self.evaluate(left)
                return self.evaluate(right) if is_truthy(value) else value
            case Binary(left, _, BinOp.OR, right):
                value = self.evaluate(left)
                return value if is_truthy(value) else self.evaluate(right)
            case Binary(left, at, op, right):
                return self._binary(at, op, self.evaluate(left), self.evaluate(right))
            case Unary(at, UnOp.NEG, operand):
                value = self.evaluate(operand)
                if _is_number(value):
                    return -value
                self.errors.error(at, f"Cannot negate {stringify(value)}")
                raise _EvaluationFailed()
            case Unary(_, UnOp.NOT, operand):
                return not is_truthy(self.evaluate(operand))
            case Grouping(_, inner):
                return self.evaluate(inner)
            case Literal(_, value):
                return value
            case Variable(at, name):
                return self._lookup(at, name)
            case Push(at, name, value_expr):
                return self._assign(at, name, self._evaluate_or_nil(value_expr))
            case Assign(at, name, value_expr):
                value = self._evaluate_or_nil(value_expr)
                self._assign(at, name, value)
                return value
            case Call(callee_expr, at, args):
                return self._call(callee_expr, at, args)
            case _:
                raise TypeError(f"unknown expression: {expr!r}")

    def _binary(self, at: Position, op: BinOp, left: Value, right: Value) -> Value:
        if op is BinOp.EQL:
            return values_equal(left, right)
        if op is BinOp.NEQ:
            return not values_equal(left, right)
        if _is_number(left) and _is_number(right):
            match op:
                case BinOp.GT:
                    return left > right
                case BinOp.GE:
                    return left >= right
                case BinOp.LT:
                    return left < right
                case BinOp.LE:
                    return left <= right
                case BinOp.ADD:
                    return left + right
                case BinOp.SUB:
                    return left - right
                case BinOp.MUL:
                    return left * right
                case BinOp.DIV:
                    return _divide(left, right)
        if op is BinOp.ADD:
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            if isinstance(left, str):
                return left + stringify(right)
            if isinstance(right, str):
                return stringify(left) + right
        self.errors.error(
            at,
            f"Operator {op} cannot be applied to values {stringify(left)} and "
            f"{stringify(right)} due to incompatible types.",
        )
        raise _EvaluationFailed()

    def _call(self, callee_expr: Expr, at: Position, args: Sequence[Expr]) -> Value:
        callee = self.evaluate(callee_expr)
        if not isinstance(callee, LoxCallable):
            self.errors.error(at, "Cannot use function call syntax with non-function")
            raise _EvaluationFailed()
        values = [self.evaluate(arg) for arg in args]
        if len(values) != callee.arity():
            self.errors.error(at, f"Expected {callee.arity()} arguments")
            raise _EvaluationFailed()
        return callee.call(self, values)

    def _lookup(self, at: Position, name: str) -> Value:
        distance = self.locals.get(at)
        if distance is not None:
            return self.env.get_at(distance, name)
        globals_ = self.env.root().values
        if name not in globals_:
            raise _EvaluationFailed()
        return globals_[name]

    def _assign(self, at: Position, name: str, value: Value) -> Value:
        distance = self.locals.get(at)
        try:
            if distance is not None:
                return self.env.assign_at(distance, name, value)
            return self.env.root().assign_at(0, name, value)
        except KeyError:
            raise _EvaluationFailed() from None