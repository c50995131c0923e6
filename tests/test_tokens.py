import pytest

from loxwalk.reporting import Loc, Position
from loxwalk.tokens import (
    LB,
    LP,
    RB,
    RP,
    Delim,
    Delimiter,
    Ident,
    Keyword,
    Number,
    Op,
    Punct,
    Side,
    StringLit,
    Token,
    keyword_from_text,
)


def _shown(load):
    pos = Position(Loc(1, 1), Loc(1, 1))
    text = str(Token(pos, load))
    prefix = f"[{pos}] "
    assert text.startswith(prefix)
    return text[len(prefix):]


@pytest.mark.parametrize("kw", list(Keyword))
def test_keyword_round_trip(kw):
    assert keyword_from_text(kw.value) is kw


@pytest.mark.parametrize("kw", list(Keyword))
def test_keyword_lookup_ignores_case(kw):
    assert keyword_from_text(kw.value.upper()) is kw


@pytest.mark.parametrize("text", ["name", "orr", "", "_while"])
def test_non_keyword_gives_none(text):
    assert keyword_from_text(text) is None


def test_delimiter_constants():
    assert LP == Delimiter(Side.LEFT, Delim.PAREN)
    assert RP == Delimiter(Side.RIGHT, Delim.PAREN)
    assert LB == Delimiter(Side.LEFT, Delim.BRACE)
    assert RB == Delimiter(Side.RIGHT, Delim.BRACE)


def test_delimiter_display():
    assert str(Delimiter(Side.LEFT, Delim.PAREN)) == "DELIM ("
    shown = {
        str(Delimiter(side, delim)) for side in Side for delim in Delim
    }
    assert len(shown) == 4
    assert all(s.startswith("DELIM ") for s in shown)


def test_punct_display_uses_names():
    assert _shown(Punct.EOF) == "EOF"
    assert _shown(Punct.COMMA) == "COMMA"
    assert _shown(Punct.SEMICOLON) == "SEMICOLON"


def test_op_display_is_distinct_and_prefixed():
    shown = [_shown(op) for op in Op]
    assert len(set(shown)) == len(Op)
    assert all(s.startswith("OP ") for s in shown)
    assert _shown(Op.GE) == "OP >="


def test_keyword_display_contains_word():
    for kw in Keyword:
        found = keyword_from_text(kw.value)
        assert str(found) == f"KEYWORD {kw.value}"


def test_ident_and_string_display():
    assert str(Ident("abc")).endswith("abc")
    assert str(Ident("abc")).startswith("IDENT")
    assert str(StringLit("hi there")).startswith("STRING")
    assert str(StringLit("hi there")).endswith("hi there")


def test_number_display_drops_integral_fraction():
    assert str(Number(4.0)) == "NUMBER 4"


def test_number_display_keeps_fraction():
    assert str(Number(1.5)).endswith(" 1.5")


def test_number_display_avoids_exponent():
    text = str(Number(1e-7))
    assert "e" not in text
    assert float(text.split(" ", 1)[1]) == 1e-7


def test_token_display_prefixes_position():
    pos = Position(Loc(2, 3), Loc(2, 5))
    tok = Token(pos, Ident("xyz"))
    assert str(tok) == f"[{pos}] {Ident('xyz')}"


def test_token_equality():
    pos = Position(Loc(1, 1), Loc(1, 1))
    assert Token(pos, LP) == Token(pos, LP)
    assert Token(pos, LP) != Token(pos, RP)
    assert Token(pos, Number(1.0)) == Token(pos, Number(1.0))