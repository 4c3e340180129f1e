import pytest
from sexpcheck.parser import parse_one
from sexpcheck.types import (
    AtomExpr, Integer, ListExpr, Quoted, Symbol, TokInfo, get_decoration, untag,
)


def test_get_decoration():
    expr = parse_one("(a b)")
    assert get_decoration(expr) == TokInfo("(a b)", (1, 1), (1, 6))
    assert get_decoration(expr.items[0].atom).string == "a"


def test_untag_erases_all_decorations():
    tree = untag(parse_one("(1 '(a \"s\") #t 2.5)"))

    def walk(node):
        assert get_decoration(node) is None
        if isinstance(node, ListExpr):
            for item in node.items:
                walk(item)
        elif isinstance(node, AtomExpr):
            walk(node.atom)
        elif isinstance(node, Quoted):
            walk(node.expr)

    walk(tree)


def test_untag_is_idempotent():
    tree = untag(parse_one("`(1 ,(f x) {y})"))
    assert untag(tree) == tree


def test_untag_does_not_mutate():
    expr = parse_one("(a)")
    untag(expr)
    assert expr.deco is not None
    assert expr.items[0].deco is not None


def test_untag_rejects_foreign_values():
    with pytest.raises(TypeError):
        untag([1, 2])


def test_decorations_differ_but_structure_equal():
    a = parse_one("(1 2 3)")
    b = parse_one("(1   2\n 3)")
    assert a != b
    assert untag(a) == untag(b)


def test_display():
    src = "[define (f x) {list \"s\" #true 'a `(b ,c) 0x10 .5}]"
    assert str(parse_one(src)) == "(define (f x) (list \"s\" #t 'a `(b ,c) 16 0.5))"


def test_display_untagged():
    assert str(ListExpr([AtomExpr(Symbol("a")), AtomExpr(Integer(-1))])) == "(a -1)"
    assert str(ListExpr([])) == "()"


def test_display_keeps_escapes():
    assert str(parse_one(r'"a\nb"')) == r'"a\nb"'


def test_tokinfo_display():
    info = TokInfo("(bla\n bla)", (1, 1), (2, 6))
    assert str(info) == (
        "token starting at line 1, column 1 and ending at line 2, column 6:\n"
        "(bla\n bla)"
    )


@pytest.mark.parametrize("src,text", [
    ("10000000000000000.0", "10000000000000000.0"),
    ("20f", "20.0"),
    (".555", "0.555"),
    ("-3.25", "-3.25"),
    ("0.00000000000000000001", "0.00000000000000000001"),
])
def test_float_display_reads_back_as_float(src, text):
    expr = parse_one(src)
    assert str(expr) == text
    assert untag(parse_one(str(expr))) == untag(expr)


def test_display_reads_back():
    src = "[define (f x) {list \"s\" #true '(a . b) `(b ,c) 1e5 2.5 -7}]"
    tree = untag(parse_one(src))
    assert untag(parse_one(str(tree))) == tree
