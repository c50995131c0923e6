import io
import math
import time

import pytest

from loxwalk.expr import (
    Assign,
    Binary,
    BinOp,
    Call,
    Literal,
    Push,
    Unary,
    UnOp,
    Variable,
)
from loxwalk.interpreter import (
    Environment,
    Interpreter,
    LoxFunction,
    ReturnSignal,
    clock,
)
from loxwalk.reporting import ErrorManager, Loc, Position
from loxwalk.stmt import (
    Block,
    Break,
    Continue,
    Decl,
    ExprStmt,
    Fun,
    If,
    Print,
    Return,
    While,
)


def at(col, line=1):
    return Position(Loc(line, col), Loc(line, col))


def make():
    out = io.StringIO()
    err = io.StringIO()
    mgr = ErrorManager(stream=err)
    return Interpreter(mgr, out), mgr, out, err


def lit(value, col=1):
    return Literal(at(col), value)


def test_print_number():
    interp, _, out, _ = make()
    interp.interpret(Print(lit(3.0)))
    assert out.getvalue() == "3\n"


def test_print_string_is_unquoted():
    interp, _, out, _ = make()
    interp.interpret(Print(lit("hi there")))
    assert out.getvalue() == "hi there\n"


def test_string_plus_number_concatenates():
    interp, _, _, _ = make()
    e = Binary(lit("n="), at(2), BinOp.ADD, lit(2.0, 3))
    assert interp.evaluate(e) == "n=2"


def test_incompatible_operands_are_reported():
    interp, mgr, _, err = make()
    e = Binary(lit(1.0), at(2), BinOp.SUB, lit("x", 3))
    interp.interpret(ExprStmt(e))
    assert mgr.errored is True
    assert (
        'Operator - cannot be applied to values 1 and "x" due to incompatible types.'
        in err.getvalue()
    )


def test_zero_is_truthy():
    interp, _, out, _ = make()
    interp.interpret(If(lit(0.0), Print(lit("yes")), Print(lit("no"))))
    assert out.getvalue() == "yes\n"


def test_undefined_global_fails_silently():
    interp, mgr, out, err = make()
    interp.interpret(Print(Variable(at(1), "ghost")))
    assert out.getvalue() == ""
    assert mgr.errored is False
    assert err.getvalue() == ""


def test_assign_returns_value_and_push_returns_previous():
    interp, _, _, _ = make()
    interp.interpret(Decl(at(1), "x", lit(1.0)))
    assert interp.evaluate(Assign(at(2), "x", lit(2.0))) == 2.0
    assert interp.evaluate(Push(at(3), "x", lit(3.0))) == 2.0
    assert interp.evaluate(Variable(at(4), "x")) == 3.0


def test_assigning_undefined_global_still_binds_it():
    interp, mgr, _, _ = make()
    interp.interpret(ExprStmt(Assign(at(1), "y", lit(5.0))))
    assert interp.evaluate(Variable(at(2), "y")) == 5.0
    assert mgr.errored is False


def test_while_loop_counts():
    interp, _, out, _ = make()
    interp.interpret(Decl(at(1), "i", lit(0.0)))
    cond = Binary(Variable(at(2), "i"), at(3), BinOp.LT, lit(3.0))
    step = Assign(at(4), "i", Binary(Variable(at(5), "i"), at(6), BinOp.ADD, lit(1.0)))
    body = Block((Print(Variable(at(7), "i")), ExprStmt(step)))
    interp.interpret(While(cond, body))
    assert out.getvalue() == "0\n1\n2\n"


def test_break_leaves_loop():
    interp, _, out, _ = make()
    interp.interpret(While(lit(True), Block((Print(lit("once")), Break()))))
    assert out.getvalue() == "once\n"


def test_continue_skips_rest_of_body():
    interp, _, out, _ = make()
    interp.interpret(Decl(at(1), "i", lit(0.0)))
    cond = Binary(Variable(at(2), "i"), at(3), BinOp.LT, lit(2.0))
    step = Assign(at(4), "i", Binary(Variable(at(5), "i"), at(6), BinOp.ADD, lit(1.0)))
    body = Block((ExprStmt(step), Continue(), Print(lit("never"))))
    interp.interpret(While(cond, body))
    assert out.getvalue() == ""
    assert interp.evaluate(Variable(at(7), "i")) == 2.0


def test_return_outside_function_escapes():
    interp, _, _, _ = make()
    with pytest.raises(ReturnSignal) as info:
        interp.interpret(Return(lit(7.0)))
    assert info.value.value == 7.0


def _declare_identity(interp):
    body = Block((Return(Variable(at(5), "a")),))
    interp.interpret(Fun(at(1), "ident", ("a",), body))
    interp.locals[at(5)] = 1


def test_function_returns_argument():
    interp, _, _, _ = make()
    _declare_identity(interp)
    call = Call(Variable(at(7), "ident"), at(8), (lit(5.0, 9),))
    assert interp.evaluate(call) == 5.0
    assert interp.env is interp.env.root()


def test_function_without_return_gives_nil():
    interp, _, _, _ = make()
    interp.interpret(Fun(at(1), "noop", (), Block()))
    assert interp.evaluate(Call(Variable(at(2), "noop"), at(3))) is None


def test_wrong_arity_is_reported():
    interp, mgr, out, err = make()
    _declare_identity(interp)
    interp.interpret(Print(Call(Variable(at(7), "ident"), at(8))))
    assert mgr.errored is True
    assert "Expected 1 arguments" in err.getvalue()
    assert out.getvalue() == ""


def test_calling_non_function_is_reported():
    interp, mgr, _, err = make()
    interp.interpret(ExprStmt(Call(lit(1.0), at(2))))
    assert mgr.errored is True
    assert "Cannot use function call syntax with non-function" in err.getvalue()


def test_negating_string_is_reported():
    interp, mgr, _, err = make()
    interp.interpret(ExprStmt(Unary(at(1), UnOp.NEG, lit("s", 2))))
    assert mgr.errored is True
    assert 'Cannot negate "s"' in err.getvalue()


def test_division_by_zero_follows_ieee():
    interp, mgr, _, _ = make()
    assert interp.evaluate(Binary(lit(1.0), at(2), BinOp.DIV, lit(0.0, 3))) == math.inf
    assert math.isnan(interp.evaluate(Binary(lit(0.0), at(2), BinOp.DIV, lit(0.0, 3))))
    assert mgr.errored is False


def test_mixed_kinds_are_unequal():
    interp, _, _, _ = make()
    assert interp.evaluate(Binary(lit(1.0), at(2), BinOp.EQL, lit(True, 3))) is False
    assert interp.evaluate(Binary(lit(None), at(2), BinOp.EQL, lit(None, 3))) is True


def test_functions_equal_only_themselves():
    interp, _, _, _ = make()
    e = Binary(Variable(at(1), "clock"), at(2), BinOp.EQL, Variable(at(3), "clock"))
    assert interp.evaluate(e) is True


def test_and_short_circuits_on_falsy_left():
    interp, mgr, _, _ = make()
    e = Binary(lit(1.0), at(2), BinOp.AND, Variable(at(3), "ghost"))
    assert interp.evaluate(e) == 1.0
    assert mgr.errored is False


def test_block_scope_is_discarded():
    interp, _, out, _ = make()
    interp.locals[at(2)] = 0
    interp.interpret(Block((Decl(at(1), "a", lit(1.0)), Print(Variable(at(2), "a")))))
    assert out.getvalue() == "1\n"
    assert "a" not in interp.env.values
    assert interp.env.parent is None


def test_clock_reports_current_time():
    interp, _, _, _ = make()
    before = time.time()
    value = interp.evaluate(Call(Variable(at(1), "clock"), at(2)))
    after = time.time()
    assert before <= value <= after


def test_clock_is_native():
    fn = clock()
    assert fn.is_native() is True
    assert fn.arity() == 0
    assert fn.name() == "clock"
    assert str(fn) == "<native function 'clock'>"


def test_break_inside_function_is_reported_and_gives_nil(capsys):
    interp, _, _, _ = make()
    fn = LoxFunction("f", (), Break(), Environment(interp.env))
    assert fn.call(interp, []) is None
    assert "top-level break in function" in capsys.readouterr().err
    assert fn.is_native() is False


def test_environment_get_at_walks_parents():
    root = Environment()
    root.declare("x", 1.0)
    child = Environment(Environment(root))
    assert child.get_at(2, "x") == 1.0
    assert child.root() is root


def test_environment_distance_too_high():
    with pytest.raises(LookupError):
        Environment().get_at(1, "x")


def test_environment_assign_at_returns_previous():
    env = Environment()
    env.declare("x", 1.0)
    assert env.assign_at(0, "x", 2.0) == 1.0
    assert env.get_at(0, "x") == 2.0


def test_environment_assign_at_missing_binds_then_raises():
    env = Environment()
    with pytest.raises(KeyError):
        env.assign_at(0, "y", 3.0)
    assert env.get_at(0, "y") == 3.0


def test_swap_env_returns_previous():
    interp, _, _, _ = make()
    original = interp.env
    other = Environment()
    assert interp.swap_env(other) is original
    assert interp.env is other