import pytest

from quill.lang import (
    Add,
    Apply,
    Assign,
    Bool,
    Dict,
    Do,
    ErrorKind,
    EvalError,
    Float,
    Fn,
    Get,
    Group,
    If,
    Int,
    Let,
    List,
    Macro,
    Mul,
    Neg,
    NONE,
    Not,
    Or,
    And,
    Pow,
    Quote,
    String,
    Sub,
    Symbol,
    To,
    parse,
)


def parse_one(source: str):
    program = parse(source)
    assert isinstance(program, Do)
    assert len(program.exprs) == 1
    return program.exprs[0]


def test_program_is_a_do_of_statements() -> None:
    assert parse("") == Do(())
    assert parse("x = 1; x;") == Do((Assign(Symbol("x"), Int(1)), Symbol("x")))


def test_literals() -> None:
    assert parse_one("42") == Int(42)
    assert parse_one("1.5") == Float.of(1.5)
    assert parse_one('"a\\n\\"b\\""') == String('a\n"b"')
    assert parse_one("true") == Bool(True)
    assert parse_one("none") == NONE
    assert parse_one("[1, 2]") == List((Int(1), Int(2)))
    assert parse_one("{}") == Dict()
    assert parse_one('{a: 1, "b": 2, 3: 4}') == Dict.of(
        {Symbol("a"): Int(1), String("b"): Int(2), Int(3): Int(4)}
    )


def test_symbols_may_contain_dashes() -> None:
    assert parse_one("get-select-len") == Symbol("get-select-len")
    assert parse_one("x - 1") == Sub(Symbol("x"), Int(1))


def test_operator_precedence() -> None:
    assert parse_one("1 + 2 * 3") == Add(Int(1), Mul(Int(2), Int(3)))
    assert parse_one("2 ^ 3 ^ 2") == Pow(Int(2), Pow(Int(3), Int(2)))
    assert parse_one("-x ^ 2") == Neg(Pow(Symbol("x"), Int(2)))
    assert parse_one("!a & b | c") == Or(And(Not(Symbol("a")), Symbol("b")), Symbol("c"))
    assert parse_one("0 to n + 1") == To(Int(0), Add(Symbol("n"), Int(1)))
    assert parse_one("(1 + 2) * 3") == Mul(Group(Add(Int(1), Int(2))), Int(3))


def test_application_forms() -> None:
    assert parse_one('insert "a" "b"') == Apply(Symbol("insert"), (String("a"), String("b")))
    assert parse_one("goto(1, 2)") == Apply(Symbol("goto"), (Int(1), Int(2)))
    assert parse_one("get-cursor ()") == Apply(Symbol("get-cursor"), ())
    assert parse_one("f x + 1") == Add(Apply(Symbol("f"), (Symbol("x"),)), Int(1))
    assert parse_one("f -1") == Sub(Symbol("f"), Int(1))


def test_get_and_quote() -> None:
    assert parse_one("xs@0") == Get(Symbol("xs"), Int(0))
    assert parse_one("e@kind") == Get(Symbol("e"), Symbol("kind"))
    assert parse_one("'x") == Quote(Symbol("x"))


def test_special_forms() -> None:
    assert parse_one("let x = 1 in x + 1") == Let(Symbol("x"), Int(1), Add(Symbol("x"), Int(1)))
    assert parse_one("if a then 1 else 2") == If(Symbol("a"), Int(1), Int(2))
    assert parse_one("macro n -> n") == Macro((Symbol("n"),), Symbol("n"))

    closure = parse_one("fn(a, b) -> a + b")
    assert isinstance(closure, Fn)
    assert closure.params == (Symbol("a"), Symbol("b"))
    assert closure.body == Add(Symbol("a"), Symbol("b"))


def test_blocks() -> None:
    assert parse_one("{ 1 }") == Int(1)
    assert parse_one("{ x = 1; x }") == Do((Assign(Symbol("x"), Int(1)), Symbol("x")))


def test_comments_are_ignored() -> None:
    assert parse("# setup\nx = 1 # trailing\n") == Do((Assign(Symbol("x"), Int(1)),))


@pytest.mark.parametrize("source", ["1 +", "let = 2", "{a: }", '"open'])
def test_syntax_errors(source: str) -> None:
    with pytest.raises(EvalError) as info:
        parse(source)

    assert info.value.kind == ErrorKind.INVALID_SYNTAX.value
    assert info.value.expr == String(source)
