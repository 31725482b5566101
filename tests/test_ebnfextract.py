import re

import pytest

from ebnfrr import parse_grammar
from ebnfrr.ebnfast import Symbol, alternatives
from ebnfrr.ebnfextract import display_name, expand, extract
from ebnfrr.errors import EmptyExtractionError, PatternError, UnknownProductionError

DROP = """stmt : 'DROP' drop_target ;
drop_target : 'TABLE' name | 'DATABASE' name ;
name : IDENT ;
"""

DROP_STMT = """
drop_stmt ::= 'DROP' 'DATABASE' name
    | 'DROP' 'DATABASE' 'IF' 'EXISTS' name
    | 'DROP' 'TABLE' name
    | 'DROP' 'INDEX' name
name ::= IDENT
"""


def test_drop_table_scenario():
    g = parse_grammar(DROP).inline(['drop_target'])
    frag = extract(g, 'stmt', descend=True, nosplit=False, match=["'DROP' 'TABLE'"])

    assert str(frag) == "stmt ::=\n\t'DROP' 'TABLE' name\n\nname ::=\n\tidentifier\n"
    assert frag.names == ['stmt', 'name']
    assert frag.references == ['identifier']


def test_drop_table_through_reference():
    frag = extract(parse_grammar(DROP), 'stmt', descend=True, nosplit=False, match=["'DROP' 'TABLE'"])

    assert str(frag) == "stmt ::=\n\t'DROP' 'TABLE' name\n\nname ::=\n\tidentifier\n"
    assert frag.names == ['stmt', 'name']


def test_references_are_split_only_when_needed():
    g = parse_grammar(DROP)

    frag = extract(g, 'stmt', descend=False, nosplit=False)
    assert str(frag) == "stmt ::=\n\t'DROP' drop_target\n"

    with pytest.raises(EmptyExtractionError):
        extract(g, 'stmt', descend=False, nosplit=True, match=["'DROP' 'TABLE'"])


def test_split_through_recursive_reference():
    g = parse_grammar("""
stmt ::= 'SELECT' expr
expr ::= expr '+' term | term
term ::= '(' expr ')' | num
""")
    frag = extract(g, 'stmt', descend=False, nosplit=False, match=["num"])

    assert [str(a) for a in alternatives(frag.rules[0].rhs)] == [
        "'SELECT' expr '+' num",
        "'SELECT' num",
    ]


def test_bad_pattern():
    with pytest.raises(PatternError) as e:
        extract(parse_grammar(DROP), 'stmt', match=["'DROP' ("])

    assert isinstance(e.value, ValueError)
    assert e.value.pattern == "'DROP' ("


def test_nosplit_keeps_alternation_merged():
    g = parse_grammar(DROP).inline(['drop_target'])
    frag = extract(g, 'stmt', descend=False, nosplit=True)

    assert str(frag) == "stmt ::=\n\t'DROP' ( 'TABLE' name | 'DATABASE' name )\n"
    assert frag.references == ['name']


def test_split_lists_each_branch():
    g = parse_grammar(DROP).inline(['drop_target'])
    frag = extract(g, 'stmt', descend=False, nosplit=False)

    assert str(frag) == "stmt ::=\n\t'DROP' 'TABLE' name\n\t| 'DROP' 'DATABASE' name\n"


def test_match_and_exclude():
    g = parse_grammar(DROP_STMT)
    match = ["'DROP'"]
    exclude = ["'TABLE'", re.compile("'INDEX'")]
    frag = extract(g, 'drop_stmt', descend=False, nosplit=False, match=match, exclude=exclude)

    alts = [str(a) for a in alternatives(frag.rules[0].rhs)]
    assert alts == ["'DROP' 'DATABASE' name", "'DROP' 'DATABASE' 'IF' 'EXISTS' name"]

    for a in alts:
        assert all(re.search(m, a) for m in match)
        assert not any(re.search(e, a) for e in exclude)


def test_everything_filtered_out():
    g = parse_grammar(DROP_STMT)

    with pytest.raises(EmptyExtractionError, match="drop_stmt"):
        extract(g, 'drop_stmt', match=["'CREATE'"])

    with pytest.raises(EmptyExtractionError):
        extract(g, 'drop_stmt', exclude=["'DROP'"])


def test_unknown_root():
    with pytest.raises(UnknownProductionError) as e:
        extract(parse_grammar(DROP_STMT), 'no_such_stmt')

    assert e.value.name == 'no_such_stmt'


def test_extract_is_deterministic():
    g = parse_grammar(DROP_STMT)
    a = extract(g, 'drop_stmt', descend=True, nosplit=False, match=["'DROP'"])
    b = extract(g, 'drop_stmt', descend=True, nosplit=False, match=["'DROP'"])

    assert a.encode() == b.encode()


def test_extract_does_not_modify_grammar():
    g = parse_grammar(DROP)
    before = str(g)
    extract(g, 'stmt', descend=True)

    assert str(g) == before
    assert isinstance(g['name'], Symbol) and g['name'].value == 'IDENT'


def test_duplicate_alternatives_are_dropped():
    frag = extract(parse_grammar("a ::= 'X' b | 'X' b | 'Y'"), 'a', descend=False)
    assert str(frag) == "a ::=\n\t'X' b\n\t| 'Y'\n"


def test_lookahead_suffix_and_display_names():
    frag = extract(parse_grammar("s ::= 'NOT_LA' 'NULL' | WITH_LA x | IDENT"), 's', descend=False)

    assert str(frag) == "s ::=\n\t'NOT' 'NULL'\n\t| WITH x\n\t| identifier\n"
    assert frag.references == ['WITH', 'x', 'identifier']

    assert display_name('_LA') == '_LA'
    assert display_name('IDENT') == 'identifier'


def test_descend_handles_recursion():
    g = parse_grammar("""
expr ::= expr '+' term | term
term ::= '(' expr ')' | num
""")
    frag = extract(g, 'expr', descend=True)

    assert frag.names == ['expr', 'term']
    assert frag.references == ['num']


def test_descend_follows_filtered_root_only():
    g = parse_grammar("""
s ::= 'A' a | 'B' b
a ::= 'x'
b ::= 'y'
""")
    frag = extract(g, 's', descend=True, match=["'A'"])

    assert frag.names == ['s', 'a']


def test_empty_alternative_is_printed():
    frag = extract(parse_grammar("opt ::= | 'X'"), 'opt', descend=False)
    assert str(frag) == "opt ::=\n\t\n\t| 'X'\n"


def test_expand():
    g = parse_grammar("s ::= 'A' ( 'B' | 'C' ) ( d | e ) f*")
    assert [str(x) for x in expand(g['s'])] == [
        "'A' 'B' d f*",
        "'A' 'B' e f*",
        "'A' 'C' d f*",
        "'A' 'C' e f*",
    ]
