# SPDX-FileCopyrightText: 2020,2021,2023 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# ebnfgrammar.py
#
# Expose grammars as objects, to simplify the API

import copy

from . import ebnfast
from .errors import UnknownProductionError

class EBNFGrammar(object):
    """A mapping from production name to production body.

       Symbols inside bodies refer to other productions by name only, so
       a grammar may be recursive and may mention productions it does
       not define. Declaration order is kept for printing but lookup is
       always by name.
    """

    def __init__(self, ruledict = None):
        self._set_raw(dict(ruledict) if ruledict else {})

    @property
    def rules(self):
        for name, rhs in self._rd.items():
            yield ebnfast.Rule(ebnfast.Symbol(name), rhs)

    @property
    def ruledict(self):
        return self._rd

    @property
    def names(self):
        return list(self._rd)

    def _set_raw(self, new_rd):
        self._rd = new_rd

    def __getitem__(self, name):
        try:
            return self._rd[name]
        except KeyError:
            raise UnknownProductionError(name) from None

    def __contains__(self, name):
        return name in self._rd

    def __iter__(self):
        return iter(self._rd)

    def __len__(self):
        return len(self._rd)

    def get(self, name, default = None):
        return self._rd.get(name, default)

    def references(self, name):
        """Names referenced by the body of name, in order of first appearance."""
        out = []
        for s in ebnfast.iter_symbols(self[name]):
            if s.value not in out:
                out.append(s.value)

        return out

    def copy(self):
        return EBNFGrammar(copy.deepcopy(self._rd))

    def parse(self, grammar: str):
        parser = ebnfast.EBNFParser()
        p = parser.parse(grammar, as_dict = True)

        self._set_raw(p)
        return self

    def inline(self, names):
        from .ebnfinline import inline
        return inline(self, names)

    def extract(self, root, descend = True, nosplit = True, match = (), exclude = ()):
        from .ebnfextract import extract
        return extract(self, root, descend, nosplit, match, exclude)

    def __str__(self):
        return '\n'.join([str(r) for r in self.rules])

    def __repr__(self):
        return f"EBNFGrammar({len(self._rd)} rules)"

def parse_grammar(source):
    """Parse grammar source (str or bytes) into an EBNFGrammar."""
    if isinstance(source, (bytes, bytearray)):
        source = source.decode('utf-8')

    return EBNFGrammar().parse(source)
