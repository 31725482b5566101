import pytest

from ebnfrr import generate

GRAMMAR = """
stmt_block ::= stmt
stmt ::= drop_stmt
drop_stmt ::= 'DROP' 'DATABASE' name
    | 'DROP' 'TABLE' name
name ::= IDENT
"""


@pytest.fixture
def grammar_file(tmp_path):
    p = tmp_path / "sql.bnf"
    p.write_text(GRAMMAR)
    return p


def test_generate_one_statement(grammar_file, tmp_path):
    out = tmp_path / "diagrams"
    rc = generate.main(["--addr", str(grammar_file), "--base", str(out), "--filter", "drop_table"])

    assert rc == 0
    assert (out / "drop_table.html").read_text().startswith("<svg")
    assert not (out / "grammar.html").exists()


def test_generate_reports_failures(grammar_file, tmp_path, capsys):
    rc = generate.main(["--addr", str(grammar_file), "--base", str(tmp_path), "--filter", "show_tables"])

    assert rc == 1
    assert "show_tables" in capsys.readouterr().err


def test_print_bnf(grammar_file, capsys):
    rc = generate.main(["--addr", str(grammar_file), "--bnf", "--filter", "drop_database"])

    out = capsys.readouterr().out
    assert rc == 0
    assert "drop_database: (PRE REPLACE)" in out
    assert "'DROP' 'DATABASE' name" in out
    assert "'TABLE'" not in out


def test_reduce(grammar_file, tmp_path):
    out = tmp_path / "reduced.bnf"
    rc = generate.main(["--in", str(grammar_file), "--out", str(out),
                        "reduce", "--stmt", "stmt", "--inline", "drop_stmt"])

    assert rc == 0
    assert out.read_text() == ("stmt ::=\n\t'DROP' 'DATABASE' name\n\t| 'DROP' 'TABLE' name\n\n"
                               "name ::=\n\tidentifier\n")


def test_reduce_unknown_statement(grammar_file, tmp_path, capsys):
    rc = generate.main(["--in", str(grammar_file), "--out", str(tmp_path / "x"),
                        "reduce", "--stmt", "nope", "--no-descend"])

    assert rc == 1
    assert "nope" in capsys.readouterr().err


def test_bad_grammar(tmp_path, capsys):
    p = tmp_path / "bad.bnf"
    p.write_text("stmt ::= ( 'DROP'")

    assert generate.main(["--addr", str(p), "--base", str(tmp_path)]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_missing_grammar(tmp_path):
    assert generate.main(["--addr", str(tmp_path / "missing.bnf")]) == 1


def test_body(tmp_path):
    page = tmp_path / "page.html"
    page.write_text("<html><body><p>x</p></body></html>")
    out = tmp_path / "body.html"

    assert generate.main(["--in", str(page), "--out", str(out), "body"]) == 0
    assert out.read_text() == "<p>x</p>"


def test_rr(grammar_file, tmp_path):
    out = tmp_path / "rr.html"

    assert generate.main(["--in", str(grammar_file), "--out", str(out), "rr"]) == 0
    assert out.read_text().count("<svg") == 4
