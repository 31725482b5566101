import pytest

from ebnfrr.ebnfast import *
from ebnfrr.errors import EBNFSyntaxError


def test_yacc_rules():
    p = EBNFParser()
    rules = p.parse("""stmt : 'DROP' drop_target ;
drop_target : 'TABLE' name | 'DATABASE' name ;
name : IDENT ;""")

    assert [r.lhs.value for r in rules] == ['stmt', 'drop_target', 'name']
    assert isinstance(rules[1].rhs, Alternation)
    assert str(rules[1]) == "drop_target ::= 'TABLE' name | 'DATABASE' name"
    assert str(rules[2].rhs) == "IDENT"


def test_w3_rules_with_continuations_and_comments():
    p = EBNFParser()
    g = p.parse("""
a ::= b 'x'
    | c
b ::= 'y'+ ( c | 'z' )?

/* a comment
   over two lines */
c ::= // trailing comment
    'w'*
""", as_dict=True)

    assert list(g) == ['a', 'b', 'c']
    assert str(g['a']) == "b 'x' | c"
    assert str(g['b']) == "'y'+ ( c | 'z' )?"
    assert str(g['c']) == "'w'*"


def test_one_line_rules():
    g = EBNFParser().parse("a ::= 'A' b c ::= 'C' ; d : e", as_dict=True)

    assert str(g['a']) == "'A' b"
    assert str(g['c']) == "'C'"
    assert str(g['d']) == "e"


def test_empty_alternative():
    g = EBNFParser().parse("opt_x : /* EMPTY */ | 'X' ;\nnothing : ;", as_dict=True)

    assert isinstance(g['opt_x'], Alternation)
    assert is_empty(g['opt_x'].expr[0])
    assert is_empty(g['nothing'])


def test_group_is_kept():
    g = EBNFParser().parse("a ::= ( b ) ( c d )*", as_dict=True)

    assert isinstance(g['a'].expr[0], Group)
    assert str(g['a']) == "( b ) ( c d )*"


def test_quotes():
    g = EBNFParser().parse('a ::= "it\'s" \'"\'', as_dict=True)

    assert g['a'].expr[0].value == "it's"
    assert g['a'].expr[1].value == '"'
    assert str(g['a']) == '"it\'s" \'"\''


@pytest.mark.parametrize("grammar", [
    "a ::= 'x",
    "a ::= ( b",
    "a ::= b )",
    "::= b",
    "a ::= b $ c",
    "a ::= b /* never closed",
])
def test_syntax_errors(grammar):
    with pytest.raises(EBNFSyntaxError):
        EBNFParser().parse(grammar)


def test_syntax_error_location():
    with pytest.raises(EBNFSyntaxError) as e:
        EBNFParser().parse("a ::= b\nc ::= 'd' $")

    assert e.value.line == 2
    assert isinstance(e.value, ValueError)
    assert "'$'" in str(e.value)


def test_duplicate_rule():
    with pytest.raises(EBNFSyntaxError, match="Duplicate rule 'a'"):
        EBNFParser().parse("a ::= b\na ::= c")


def test_separated_repetition():
    g = EBNFParser().parse("""
l ::= x ( ',' x )*
k ::= x ( 'AND' x )*
o ::= ( ',' x )?
""", as_dict=True)

    assert g['l'].expr[1].separated
    assert not g['k'].expr[1].separated
    assert not g['o'].separated


def test_repetition_suffixes():
    assert str(Optional(Symbol('a'))) == "a?"
    assert str(ZeroOrMore(Sequence([String(','), Symbol('a')]))) == "( ',' a )*"
    assert str(OneOrMore(Alternation([Symbol('a'), Symbol('b')]))) == "( a | b )+"


def test_flattener():
    e = Sequence([String('P'), Sequence([Symbol('a'), Symbol('b')]), Sequence([])])
    assert str(Flattener().visit(e)) == "'P' a b"

    e = Alternation([Symbol('a'), Alternation([Symbol('b'), Symbol('c')])])
    out = Flattener().visit(e)
    assert len(out.expr) == 3

    assert isinstance(Flattener().visit(Sequence([Symbol('a')])), Symbol)


def test_recursive_grammar_walks():
    g = EBNFParser().parse("""
expr ::= expr '+' term | term
term ::= '(' expr ')' | num
""", as_dict=True)

    assert reachable(g, 'expr') == ['expr', 'term']
    assert reachable(g, 'expr', Symbol('num')) == ['expr']
    assert reachable(g, 'term') == ['term', 'expr']


def test_dotted_names():
    rules = EBNFParser().parse("a ::= b.c 'x'\nb.c ::= 'y'")

    assert [r.lhs.value for r in rules] == ['a', 'b.c']
    assert str(rules[0]) == "a ::= b.c 'x'"
