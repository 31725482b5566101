#!/usr/bin/env python3
#
# ebnfast.py
#
# An AST for EBNF grammars of SQL dialects, modeled on the W3 XML
# Formal Grammar (https://www.w3.org/TR/xml/#sec-notation), extended
# with yacc-style `name : body ;' rules.

import bisect
import re

from .errors import EBNFSyntaxError

class Expression(object):
    # lower precedence value binds tighter
    precedence = 0
    children = []

    def paren(self, expr):
        if expr.precedence <= self.precedence:
            return str(expr)
        else:
            return f"( {expr} )"

class Symbol(Expression):
    """A reference to another production, by name."""

    precedence = 0
    def __init__(self, v):
        self.value = v

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"Symbol({repr(self.value)})"

class String(Expression):
    """A terminal: quoted keyword or punctuation."""

    precedence = 0
    def __init__(self, v):
        self.value = v

    def __str__(self):
        if "'" in self.value:
            return '"' + self.value + '"'

        return "'" + self.value + "'"

    def __repr__(self):
        return f"String({repr(self.value)})"

class Group(Expression):
    """Explicit parentheses, kept so re-serialization stays readable."""

    precedence = 0

    def __init__(self, expr):
        self.expr = expr

    @property
    def children(self):
        return [self.expr]

    def __str__(self):
        return f"( {self.expr} )"

    def __repr__(self):
        return f"Group({repr(self.expr)})"

class NaryOp(Expression):
    op = None

    def __init__(self, exprs):
        self.expr = list(exprs)

    @property
    def children(self):
        return self.expr

    def __str__(self):
        return self.op.join([self.paren(x) for x in self.expr])

    def __repr__(self):
        return f"{self.__class__.__name__}([{', '.join([repr(x) for x in self.expr])}])"

class Sequence(NaryOp):
    precedence = 1
    op = ' '

    def __str__(self):
        # empty sequences (epsilon) contribute nothing
        return ' '.join([s for s in (self.paren(x) for x in self.expr) if s])

class Alternation(NaryOp):
    precedence = 2
    op = ' | '

# handles zero or one, zero or more, one or more
class Repetition(Expression):
    precedence = 0

    def __init__(self, expr, minimum: int = 0, maximum = None):
        assert minimum in (0, 1), f"Unsupported minimum {minimum}"
        assert maximum in (1, None), f"Unsupported maximum {maximum}"
        assert not (minimum == 1 and maximum == 1), "x{1,1} is not a repetition"

        self.expr = expr
        self.minimum = minimum
        self.maximum = maximum

    @property
    def children(self):
        return [self.expr]

    @property
    def suffix(self):
        if self.maximum == 1:
            return '?'

        return '*' if self.minimum == 0 else '+'

    @property
    def separated(self):
        """True for lists like `( ',' x )*`: a repeated sequence led by punctuation."""
        body = self.expr.expr if isinstance(self.expr, Group) else self.expr

        return (self.maximum is None
                and isinstance(body, Sequence)
                and len(body.expr) > 1
                and isinstance(body.expr[0], String)
                and body.expr[0].value != ''
                and not any(c.isalnum() for c in body.expr[0].value))

    def __str__(self):
        return f"{self.paren(self.expr)}{self.suffix}"

    def __repr__(self):
        return f"Repetition({repr(self.expr)}, {self.minimum}, {self.maximum})"

def Optional(expr):
    return Repetition(expr, 0, 1)

def ZeroOrMore(expr):
    return Repetition(expr, 0, None)

def OneOrMore(expr):
    return Repetition(expr, 1, None)

class Rule(object):
    def __init__(self, lhs, rhs):
        self.lhs = lhs
        self.rhs = rhs

    @property
    def children(self):
        return [self.lhs, self.rhs]

    def __str__(self):
        return f"{self.lhs} ::= {self.rhs}"

    def __repr__(self):
        return f"Rule({repr(self.lhs)}, {repr(self.rhs)})"

def alternatives(expr):
    """Top-level alternatives of expr; a non-alternation is its own only alternative."""
    if isinstance(expr, Alternation):
        return list(expr.expr)

    return [expr]

def is_empty(expr):
    return isinstance(expr, Sequence) and all(is_empty(x) for x in expr.expr)

def iter_symbols(node):
    """Yield Symbol nodes under node in pre-order, without following them."""
    if isinstance(node, Symbol):
        yield node
    else:
        for c in node.children:
            yield from iter_symbols(c)

def reachable(grammar, start, body = None):
    """Names of the productions reachable from start, breadth-first, in
       order of first appearance. Undefined names are skipped.

       body, if given, is walked in place of the body of start.
    """

    order = [start]
    seen = {start}
    i = 0
    while i < len(order):
        expr = body if i == 0 and body is not None else grammar[order[i]]
        for s in iter_symbols(expr):
            if s.value not in seen and s.value in grammar:
                seen.add(s.value)
                order.append(s.value)
        i += 1

    return order

# this is a bit more verbose than ASTNodeTransformer, but that's okay
class EBNFTransformer(object):
    def visit_Rule(self, node):
        node.lhs = self.visit(node.lhs)
        node.rhs = self.visit(node.rhs)

        return node

    def visit_Repetition(self, node):
        node.expr = self.visit(node.expr)
        return node

    def visit_Group(self, node):
        node.expr = self.visit(node.expr)
        return node

    def visit_NaryOp(self, node):
        node.expr = [self.visit(x) for x in node.expr]
        return node

    def visit_String(self, node):
        return node

    def visit_Symbol(self, node):
        return node

    def visit_Alternation(self, node):
        return self.visit_NaryOp(node)

    def visit_Sequence(self, node):
        return self.visit_NaryOp(node)

    def visit(self, node):
        if isinstance(node, Rule):
            return self.visit_Rule(node)
        elif isinstance(node, Repetition):
            return self.visit_Repetition(node)
        elif isinstance(node, Group):
            return self.visit_Group(node)
        elif isinstance(node, NaryOp):
            if isinstance(node, Alternation):
                return self.visit_Alternation(node)
            elif isinstance(node, Sequence):
                return self.visit_Sequence(node)
            else:
                raise NotImplementedError(f"Unknown NaryOp node {node}")
        elif isinstance(node, Symbol):
            return self.visit_Symbol(node)
        elif isinstance(node, String):
            return self.visit_String(node)
        else:
            raise NotImplementedError(f"Unimplemented visit for node {type(node)}")

class Flattener(EBNFTransformer):
    """Splices nested sequences and alternations into their parents and
       unwraps single-item sequences. Groups are left alone."""

    def visit_Sequence(self, node):
        node = super().visit_Sequence(node)

        out = []
        for x in node.expr:
            if isinstance(x, Sequence):
                out.extend(x.expr)
            else:
                out.append(x)

        if len(out) == 1:
            return out[0]

        node.expr = out
        return node

    def visit_Alternation(self, node):
        node = super().visit_Alternation(node)

        out = []
        for x in node.expr:
            if isinstance(x, Alternation):
                out.extend(x.expr)
            else:
                out.append(x)

        if len(out) == 1:
            return out[0]

        node.expr = out
        return node

class ParseError(object):
    def error(self, tok, message):
        caret = " " * (tok.err_coord[1][0] + 4) + "^" * max(1, tok.err_coord[1][1] - tok.err_coord[1][0])
        raise EBNFSyntaxError(f"{tok.err_scoord}: {message}\n    {tok.err_line}\n{caret}",
                              line = tok.err_coord[0], col = tok.err_coord[1][0])

class EBNFTokenizer(object):
    token = None
    match = None

    def __init__(self, strdata, err):
        self.data = strdata
        self.err = err
        self._lines = strdata.split('\n')
        self._line_starts = [0] + [m.end() for m in re.finditer('\n', strdata)]
        self._tokens = list(self.tokenize())
        self._pos = 0
        self.coord = (1, (0, 0))
        self.token, self.match = self._peek(0)

    # convenience
    def error(self, message):
        self.err.error(self, message)

    def _locate(self, offset):
        # 0-based line number and column of offset
        lno = bisect.bisect_right(self._line_starts, offset) - 1
        return lno, offset - self._line_starts[lno]

    def tokenize(self):
        # based on the example in the re docs
        tokens = [('COMMENT', r'/\*.*?\*/'),
                  ('BADCOMMENT', r'/\*'),
                  ('LINECOMMENT', r'//[^\n]*'),
                  ('SYMBOL', r'[A-Za-z_][A-Za-z0-9_.]*'),
                  ('RULEDEF', r'::=|:'),
                  ('STRING', r"'(?:[^'\\\n]|\\.)*'|\"(?:[^\"\\\n]|\\.)*\""),
                  ('BADSTRING', r"['\"]"),
                  ('LPAREN', r'\('),
                  ('RPAREN', r'\)'),
                  ('STAR', r'\*'),
                  ('PLUS', r'\+'),
                  ('OPT', r'\?'),
                  ('ALT', r'\|'),
                  ('SEMI', r';'),
                  ('EOL', r'\n'),
                  ('WHITESPACE', r'[ \t\r\f]+'),
                  ('MISMATCH', r'.'),
        ]

        tok_regex = '|'.join('(?P<%s>%s)' % pair for pair in tokens)

        for m in re.finditer(tok_regex, self.data, flags=re.S):
            token = m.lastgroup
            match = m.group()
            lno, col = self._locate(m.start())
            coord = (lno + 1, (col, col + len(match.split('\n')[0])))

            if token in ('COMMENT', 'LINECOMMENT', 'EOL', 'WHITESPACE'):
                continue
            elif token == 'MISMATCH':
                self._set_err_pos(coord)
                self.error(f"Unrecognized token '{match}'")
            elif token == 'BADCOMMENT':
                self._set_err_pos(coord)
                self.error("Unterminated comment")
            elif token == 'BADSTRING':
                self._set_err_pos(coord)
                self.error("Encountered end-of-line when scanning string")
            elif token == 'STRING':
                yield ('STRING', match[1:-1], coord)
            else:
                yield (token, match, coord)

    def _set_err_pos(self, coord):
        self.err_coord = coord
        self.err_line = self._lines[coord[0] - 1] if coord[0] - 1 < len(self._lines) else ''
        self.err_scoord = f'{coord[0]}:{coord[1][0]}-{coord[1][1]}'

    def _update_err_pos(self):
        self._set_err_pos(self.coord)

    def _peek(self, k):
        if self._pos + k < len(self._tokens):
            tkn, match, _ = self._tokens[self._pos + k]
            return tkn, match

        return None, None

    def lookahead(self, k = 0):
        return self._peek(k)[0]

    def at_rule_head(self):
        return self.lookahead(0) == 'SYMBOL' and self.lookahead(1) == 'RULEDEF'

    def consume(self):
        tkn, match = self.token, self.match

        if self._pos < len(self._tokens):
            self.coord = self._tokens[self._pos][2]
            self._pos += 1
        else:
            # report errors at end of input against the last line
            self.coord = (len(self._lines), (len(self._lines[-1]), len(self._lines[-1]) + 1))

        self._update_err_pos()
        self.token, self.match = self._peek(0)

        return tkn, match

    def expect(self, token):
        tkn, match = self.consume()
        if tkn == token:
            return match
        else:
            self.error(f"Expecting {token}, found {tkn}")

# Grammar ::= Rule*

# Rule ::= Symbol ( '::=' | ':' ) Expression ';'?

# Expression ::= SequenceTerm ( '|' SequenceTerm )*

# SequenceTerm ::= PostfixTerm*   /* ends at '|', ')', ';', EOF or the next rule head */

# PostfixTerm ::= Term ( '*' | '+' | '?' )*

# Term ::= Symbol | StringLiteral | '(' Expression ')'

class EBNFParser(object):
    def parse(self, ebnf, token_stream = None, as_dict = False):
        if token_stream is None:
            err = ParseError()
            token_stream = EBNFTokenizer(ebnf, err)

        rule_lines = {}
        out = []
        while True:
            tkn, match = token_stream.consume()
            sline = token_stream.coord[0]

            if tkn is None:
                break
            elif tkn == 'SYMBOL':
                lhs = match

                if lhs in rule_lines:
                    token_stream.error(f"Duplicate rule '{lhs}' (first defined on line {rule_lines[lhs]})")
                else:
                    rule_lines[lhs] = sline

                token_stream.expect('RULEDEF')
                rhs = self.parse_expr(token_stream)
                if token_stream.lookahead() == 'SEMI':
                    token_stream.consume()
                elif not (token_stream.lookahead() is None or token_stream.at_rule_head()):
                    etkn, ematch = token_stream.consume()
                    token_stream.error(f"Unexpected token {etkn} ({ematch}) at end of rule '{lhs}'")

                out.append(Rule(Symbol(lhs), rhs))
            elif tkn == 'SEMI':
                continue # stray terminators are harmless
            else:
                token_stream.error(f"Unexpected token {tkn} ({match}) when parsing rules")

        if as_dict:
            dout = dict([(r.lhs.value, r.rhs) for r in out])
            return dout
        else:
            return out

    def parse_expr(self, token_stream):
        alts = [self.parse_sequence(token_stream)]
        while token_stream.lookahead() == 'ALT':
            token_stream.consume()
            alts.append(self.parse_sequence(token_stream))

        if len(alts) == 1:
            return alts[0]

        return Alternation(alts)

    def parse_sequence(self, token_stream):
        items = []
        while token_stream.lookahead() not in ('ALT', 'RPAREN', 'SEMI', None):
            if token_stream.at_rule_head():
                break

            items.append(self.parse_postfix(token_stream))

        if len(items) == 1:
            return items[0]

        return Sequence(items)

    def parse_postfix(self, token_stream):
        term = self.parse_term(token_stream)

        # this currently allows whitespace between term and */+/?
        while True:
            tkn = token_stream.lookahead()
            if tkn == 'OPT':
                token_stream.consume()
                term = Repetition(term, 0, 1)
            elif tkn == 'STAR':
                token_stream.consume()
                term = Repetition(term, 0, None)
            elif tkn == 'PLUS':
                token_stream.consume()
                term = Repetition(term, 1, None)
            else:
                return term

    def parse_term(self, token_stream):
        tkn, match = token_stream.consume()

        if tkn == 'STRING':
            return String(match)
        elif tkn == 'SYMBOL':
            return Symbol(match)
        elif tkn == 'LPAREN':
            expr = self.parse_expr(token_stream)
            token_stream.expect('RPAREN')
            return Group(expr)
        else:
            token_stream.error(f"Unexpected token {tkn} when parsing term")
