# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# ebnfinline.py
#
# Replace references to productions with the productions themselves.
#
# Inlining x into its users works on a copy of the grammar:
#
#   x ::= a b           y ::= 'P' x 'Q'     =>  y ::= 'P' a b 'Q'
#   x ::= a | b         y ::= 'P' x         =>  y ::= 'P' ( a | b )
#   x ::= | a | b       y ::= 'P' x         =>  y ::= 'P' ( a | b )?
#
# and x itself is removed afterwards.

import copy
import logging

from .ebnfast import *
from .errors import InlineCycleError, UnknownProductionError

logger = logging.getLogger(__name__)

class SymbolInliner(EBNFTransformer):
    def __init__(self, name, replacement):
        self.name = name
        self.replacement = replacement
        self.count = 0

    def visit_Symbol(self, node):
        if node.value == self.name:
            self.count += 1
            return copy.deepcopy(self.replacement)

        return node

def inline_form(body):
    """The expression that replaces a reference to a production with this body."""
    body = copy.deepcopy(body)

    if not isinstance(body, Alternation):
        return body

    rest = [a for a in body.expr if not is_empty(a)]
    if len(rest) == len(body.expr):
        return Group(body)

    # x ::= '' | ... is optional
    if len(rest) == 0:
        return Sequence([])
    elif len(rest) == 1:
        inner = rest[0]
    else:
        inner = Group(Alternation(rest))

    if isinstance(inner, Repetition):
        if inner.minimum == 0:
            return inner # already optional

        # (x+)? => x*
        return Repetition(inner.expr, 0, inner.maximum)

    return Repetition(inner, 0, 1)

def tidy(rhs):
    rhs = Flattener().visit(rhs)

    # a rule body does not need parentheses of its own
    if isinstance(rhs, Group):
        return tidy(rhs.expr)

    return rhs

def find_cycle(ruledict, name, pending):
    """Return a path from name back to name through productions that are
       also about to be inlined, or None if there is none."""

    stack = [(name, [name])]
    seen = set()

    while stack:
        cur, path = stack.pop()
        for s in iter_symbols(ruledict[cur]):
            if s.value == name:
                return path + [name]

            if s.value in pending and s.value in ruledict and s.value not in seen:
                seen.add(s.value)
                stack.append((s.value, path + [s.value]))

    return None

def inline(grammar, names):
    """Return a copy of grammar with every production in names inlined.

       Names are processed in the given order. A production that would
       have to be substituted into itself raises InlineCycleError, and a
       name the grammar does not define raises UnknownProductionError. The
       input grammar is never modified.
    """

    if isinstance(names, str):
        names = [names]
    elif isinstance(names, (set, frozenset)):
        names = sorted(names)

    order = []
    for n in names:
        if n not in order:
            order.append(n)

    out = grammar.copy()
    rd = out.ruledict

    for i, name in enumerate(order):
        if name not in rd:
            raise UnknownProductionError(name, "inline")

        cycle = find_cycle(rd, name, set(order[i:]))
        if cycle is not None:
            raise InlineCycleError(name, cycle)

        xf = SymbolInliner(name, inline_form(rd.pop(name)))
        for k in rd:
            before = xf.count
            rhs = xf.visit(rd[k])
            rd[k] = tidy(rhs) if xf.count != before else rhs

        logger.debug("inlined %s at %d site(s)", name, xf.count)

    return out
