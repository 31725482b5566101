# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# ebnfextract.py
#
# Cut a small, self-contained grammar out of a large one, starting at a
# single production. This is what turns a full SQL grammar into one
# diagram per statement.

import copy
import itertools
import logging
import re

from .ebnfast import *
from .errors import EmptyExtractionError, PatternError, UnknownProductionError

logger = logging.getLogger(__name__)

# token names shown differently in diagrams
DISPLAY_NAMES = {'IDENT': 'identifier'}

# the lexer disambiguates some keywords with one-token lookahead and
# marks them with this suffix (NOT_LA, WITH_LA, ...)
LOOKAHEAD_SUFFIX = '_LA'

# refuse to distribute a sequence into more alternatives than this
MAX_SPLIT = 256

def display_name(name):
    name = DISPLAY_NAMES.get(name, name)
    if name.endswith(LOOKAHEAD_SUFFIX) and len(name) > len(LOOKAHEAD_SUFFIX):
        name = name[:-len(LOOKAHEAD_SUFFIX)]

    return name

class DisplayNamer(EBNFTransformer):
    def visit_Symbol(self, node):
        return Symbol(display_name(node.value))

    def visit_String(self, node):
        return String(display_name(node.value))

def format_rule(rule):
    alts = alternatives(rule.rhs)
    lines = [f"{rule.lhs} ::="]
    for i, a in enumerate(alts):
        s = str(a)
        if i == 0:
            lines.append(f"\t{s}" if s else "\t")
        else:
            lines.append(f"\t| {s}" if s else "\t|")

    return '\n'.join(lines)

class Fragment(object):
    """The result of an extraction.

       rules are the emitted productions (root first) and references the
       names they use without defining them.
    """

    def __init__(self, rules, references):
        self.rules = rules
        self.references = references

    @property
    def root(self):
        return self.rules[0].lhs.value

    @property
    def names(self):
        return [r.lhs.value for r in self.rules]

    def __str__(self):
        return '\n\n'.join([format_rule(r) for r in self.rules]) + '\n'

    def encode(self, encoding = 'utf-8'):
        return str(self).encode(encoding)

    def __repr__(self):
        return f"Fragment({self.names}, references={self.references})"

class Splitter(object):
    """Distribute sequences over the alternations nested in them, so
       that `'A' ( 'B' | 'C' ) d' becomes [`'A' 'B' d', `'A' 'C' d'].
       Repetitions are not looked into.

       Given a ruledict, a reference to a production whose body is an
       alternation is split through as well, so `'DROP' drop_target'
       yields one alternative per branch of drop_target. Productions
       already being split are left as references.
    """

    def __init__(self, ruledict = None, resolving = ()):
        self.ruledict = ruledict or {}
        self._resolving = set(resolving)
        self._memo = {}

    def split(self, expr):
        if isinstance(expr, Alternation):
            out = []
            for a in expr.expr:
                out.extend(self.split(a))

            if len(out) > MAX_SPLIT:
                logger.debug("not splitting %s: %d alternatives", expr, len(out))
                return [expr]

            return out
        elif isinstance(expr, Group):
            return self.split(expr.expr)
        elif isinstance(expr, Sequence):
            parts = [self.split(x) for x in expr.expr]

            total = 1
            for p in parts:
                total *= len(p)

            if total > MAX_SPLIT:
                logger.debug("not splitting %s: %d alternatives", expr, total)
                return [expr]

            return [Sequence([copy.deepcopy(x) for x in combo]) for combo in itertools.product(*parts)]
        elif isinstance(expr, Symbol):
            return self.resolve(expr)
        else:
            return [expr]

    def resolve(self, sym):
        name = sym.value
        if name in self._resolving or name not in self.ruledict:
            return [sym]

        if len(alternatives(self.ruledict[name])) < 2:
            return [sym]

        if name not in self._memo:
            self._resolving.add(name)
            try:
                branches = self.split(self.ruledict[name])
            finally:
                self._resolving.discard(name)

            # a body too large to split stays a reference
            self._memo[name] = branches if len(branches) > 1 else None

        branches = self._memo[name]
        if branches is None:
            return [sym]

        return [copy.deepcopy(b) for b in branches]

def expand(expr, ruledict = None):
    return Splitter(ruledict).split(expr)

def _compile(patterns):
    out = []
    for p in patterns:
        if hasattr(p, 'search'):
            out.append(p)
        else:
            try:
                out.append(re.compile(p))
            except re.error as e:
                raise PatternError(p, e)

    return out

def _keep(text, match, exclude):
    return all(m.search(text) for m in match) and not any(e.search(text) for e in exclude)

def select_alternatives(body, nosplit, match, exclude, splitter = None):
    if nosplit:
        alts = alternatives(body)
    else:
        alts = (splitter or Splitter()).split(body)

    flt = Flattener()
    seen = set()
    out = []
    for a in alts:
        a = flt.visit(a)
        s = str(a)
        if s in seen:
            continue

        seen.add(s)

        if _keep(s, match, exclude):
            out.append(a)

    return out

def extract(grammar, root, descend = True, nosplit = True, match = (), exclude = ()):
    """Extract the production root from grammar.

       The top-level alternatives of root are kept only if they match
       every pattern in match and none in exclude. Unless nosplit is set,
       alternations grouped inside those alternatives are first
       distributed so each branch can be selected on its own; if that
       still leaves nothing, alternations behind references are split
       too. With descend, every production reachable from the (filtered)
       root is included after it.
    """

    rd = grammar.ruledict if hasattr(grammar, 'ruledict') else grammar

    if root not in rd:
        raise UnknownProductionError(root, "extract")

    match = _compile(match)
    exclude = _compile(exclude)

    kept = select_alternatives(copy.deepcopy(rd[root]), nosplit, match, exclude)
    if len(kept) == 0 and not nosplit:
        logger.debug("%s: nothing left after filtering, splitting through references", root)
        kept = select_alternatives(copy.deepcopy(rd[root]), nosplit, match, exclude,
                                   Splitter(rd, [root]))

    if len(kept) == 0:
        raise EmptyExtractionError(f"no alternative of '{root}' is left after filtering "
                                   f"(match: {[m.pattern for m in match]}, exclude: {[e.pattern for e in exclude]})")

    rules = [Rule(Symbol(root), kept[0] if len(kept) == 1 else Alternation(kept))]

    if descend:
        for name in reachable(rd, root, rules[0].rhs)[1:]:
            rules.append(Rule(Symbol(name), copy.deepcopy(rd[name])))

    dn = DisplayNamer()
    rules = [dn.visit(r) for r in rules]

    defined = set([r.lhs.value for r in rules])
    references = []
    for r in rules:
        for s in iter_symbols(r.rhs):
            if s.value not in defined and s.value not in references:
                references.append(s.value)

    logger.debug("extracted %s: %d rule(s), %d alternative(s)", root, len(rules), len(kept))

    return Fragment(rules, references)
