# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# batch.py
#
# Run every statement spec against one grammar. The grammar is parsed
# once and shared read-only; each spec inlines into its own copy, so
# specs run side by side without locking and a failure in one spec
# never stops the others.

import enum
import logging
import pathlib
from concurrent.futures import ThreadPoolExecutor

from .ebnfgrammar import EBNFGrammar, parse_grammar
from .errors import GrammarError
from .render import (GRAMMAR_PAGE, RailroadRenderer, overview_markup, render,
                     statement_markup)
from .stmtspec import GRAMMAR_SPEC, SQL_STATEMENTS

logger = logging.getLogger(__name__)

class SpecState(enum.Enum):
    PARSED = 1
    INLINED = 2
    EXTRACTED = 3
    RENDERED = 4

class SpecResult(object):
    def __init__(self, spec):
        self.spec = spec
        self.state = SpecState.PARSED
        self.bnf = None      # extracted EBNF, before replacements
        self.ebnf = None     # after replacements; what the renderer sees
        self.references = []
        self.markup = None
        self.error = None

    @property
    def name(self):
        return self.spec.name

    @property
    def ok(self):
        return self.error is None

    def __repr__(self):
        status = "ok" if self.ok else f"failed: {self.error}"
        return f"SpecResult({self.name}, {self.state.name}, {status})"

def run_spec(base, spec, renderer = None, print_bnf = False, page = GRAMMAR_PAGE):
    """Take one spec from the parsed base grammar to finished markup.

       Errors are recorded on the result rather than raised.
    """

    result = SpecResult(spec)

    try:
        logger.info("parse: %s, inline: %s, descend: %s", spec.root, list(spec.inline), spec.descend)

        g = base.inline(spec.inline)
        result.state = SpecState.INLINED

        frag = g.extract(spec.root, spec.descend, spec.nosplit, spec.match, spec.exclude)
        result.bnf = str(frag)
        result.references = frag.references
        result.ebnf = spec.apply_replacements(result.bnf)
        result.state = SpecState.EXTRACTED

        if print_bnf:
            return result

        markup = render(renderer, spec.name, result.ebnf)
        if spec.overview:
            result.markup = overview_markup(markup, getattr(renderer, 'credit', ''))
        else:
            result.markup = statement_markup(markup, spec.unlink, page)

        result.state = SpecState.RENDERED
    except GrammarError as e:
        logger.error("%s: %s", spec.name, e)
        result.error = e

    return result

def run_specs(grammar_source, specs = SQL_STATEMENTS, filter = None, print_bnf = False,
              renderer = None, max_workers = None, overview = True, page = GRAMMAR_PAGE):
    """Run specs (plus the whole-grammar overview) against grammar_source.

       grammar_source is the raw grammar (bytes or str) or an already
       parsed EBNFGrammar. A grammar that does not parse raises
       EBNFSyntaxError before any spec runs. filter restricts the run to
       the spec with that name. Results come back in spec order.
    """

    if isinstance(grammar_source, EBNFGrammar):
        base = grammar_source
    else:
        base = parse_grammar(grammar_source)

    todo = ([GRAMMAR_SPEC] if overview else []) + list(specs)
    if filter:
        todo = [s for s in todo if s.name == filter]
        if not todo:
            logger.warning("no statement named %s", filter)

    if renderer is None and not print_bnf:
        renderer = RailroadRenderer()

    with ThreadPoolExecutor(max_workers = max_workers) as pool:
        futures = [pool.submit(run_spec, base, s, renderer, print_bnf, page) for s in todo]
        return [f.result() for f in futures]

def write_results(results, base_dir):
    """Write the markup of each successful result; return the paths written."""
    base_dir = pathlib.Path(base_dir)
    base_dir.mkdir(parents = True, exist_ok = True)

    out = []
    for r in results:
        if not r.ok or r.markup is None:
            continue

        path = base_dir / f"{r.spec.output_name}.html"
        path.write_text(r.markup, encoding = 'utf-8')
        out.append(path)

    return out

def failed(results):
    return [r for r in results if not r.ok]
