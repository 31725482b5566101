# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# render.py
#
# Turn extracted EBNF into railroad diagrams, and clean up the markup
# that comes back.
#
# A renderer is any callable taking EBNF text (str or bytes) and
# returning HTML that contains a <body> and one <svg> per rule.

import html
import io
import logging
import re

import railroad
import requests

from .ebnfast import *
from .errors import EBNFSyntaxError, RenderError

logger = logging.getLogger(__name__)

# page that the cross-reference links in diagrams point to
GRAMMAR_PAGE = "sql-grammar.html"

RR_ADDR = "https://www.bottlecaps.de/rr/ui"

CREDIT = '<p>generated by <a href="https://github.com/tabatkins/railroad-diagrams">railroad-diagrams</a></p>'

RR_CREDIT = '<p>generated by <a href="http://www.bottlecaps.de/rr/ui">Railroad Diagram Generator</a></p>'

STYLE = """
.railroad-diagram path { stroke: #333; stroke-width: 2; fill: none; }
.railroad-diagram text { fill: #111; font: 14px monospace; text-anchor: middle; }
.railroad-diagram rect { fill: #fdfdfd; stroke: #333; }
.railroad-diagram .terminal rect { fill: #e8f2ea; }
.railroad-diagram .non-terminal rect { fill: #f2f2f2; }
"""

HTML_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8"/>
<style>{css}</style>
</head>
<body>
{body}
<hr/>
<p>generated by ebnfrr</p>
</body>
</html>
"""

def _text(ebnf):
    if isinstance(ebnf, (bytes, bytearray)):
        return ebnf.decode('utf-8')

    return ebnf

class RailroadRenderer(object):
    """Draws every rule of an EBNF text with railroad-diagrams."""

    credit = CREDIT

    def __init__(self, css = STYLE):
        self.css = css

    def convert(self, expr):
        if isinstance(expr, String):
            return railroad.Terminal(expr.value)
        elif isinstance(expr, Symbol):
            return railroad.NonTerminal(expr.value, href = "#" + expr.value)
        elif isinstance(expr, Group):
            return self.convert(expr.expr)
        elif isinstance(expr, Alternation):
            return railroad.Choice(0, *[self.convert(x) for x in expr.expr])
        elif isinstance(expr, Repetition):
            if expr.maximum == 1:
                return railroad.Optional(self.convert(expr.expr))
            elif expr.minimum == 0:
                return railroad.ZeroOrMore(self.convert(expr.expr))
            else:
                return railroad.OneOrMore(self.convert(expr.expr))
        elif isinstance(expr, Sequence):
            items = self.convert_sequence(expr.expr)
            if len(items) == 0:
                return railroad.Skip()
            elif len(items) == 1:
                return items[0]

            return railroad.Sequence(*items)
        else:
            raise NotImplementedError(f"Can't draw {expr} ({type(expr)})")

    def convert_sequence(self, exprs):
        # x ( ',' x )* is drawn as a single loop over x with ',' on the way back
        out = []
        prev = None
        for x in exprs:
            if (isinstance(x, Repetition) and x.separated and x.minimum == 0
                and prev is not None and str(prev) == _repeated_tail(x)):
                body = x.expr.expr if isinstance(x.expr, Group) else x.expr
                out[-1] = railroad.OneOrMore(self.convert(prev),
                                             self.convert(body.expr[0]))
                prev = None
                continue

            if is_empty(x):
                continue

            out.append(self.convert(x))
            prev = x

        return out

    def diagram(self, rule):
        d = railroad.Diagram(self.convert(rule.rhs))
        buf = io.StringIO()
        d.writeSvg(buf.write)
        return buf.getvalue()

    def __call__(self, ebnf):
        try:
            rules = EBNFParser().parse(_text(ebnf))
        except EBNFSyntaxError as e:
            raise RenderError(f"renderer could not read the grammar: {e}") from e

        parts = []
        for r in rules:
            name = html.escape(r.lhs.value)
            parts.append(f'<p><a name="{name}">{name}:</a></p>\n{self.diagram(r)}')

        return HTML_PAGE.format(css = self.css, body = '\n<br/>\n'.join(parts))

def _repeated_tail(rep):
    body = rep.expr.expr if isinstance(rep.expr, Group) else rep.expr
    tail = body.expr[1:]
    if len(tail) == 1:
        return str(tail[0])

    return str(Sequence(tail))

class RemoteRenderer(object):
    """Posts the grammar to the Railroad Diagram Generator web service."""

    credit = RR_CREDIT

    def __init__(self, addr = RR_ADDR, width = 620, timeout = 60, session = None):
        self.addr = addr
        self.width = width
        self.timeout = timeout
        self.session = session or requests.Session()

    def __call__(self, ebnf):
        data = [('frame', 'diagram'),
                ('text', _text(ebnf)),
                ('width', str(self.width)),
                ('options', 'eliminaterecursion'),
                ('options', 'factoring'),
                ('options', 'inline')]

        try:
            resp = self.session.post(self.addr, data = data, timeout = self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise RenderError(f"{self.addr}: {e}") from e

        return xhtml_to_html(resp.text)

def xhtml_to_html(markup):
    # the service answers with XHTML; drop the declarations browsers choke on
    markup = re.sub(r'<\?xml[^>]*\?>\s*', '', markup)
    return re.sub(r'\s+xmlns="http://www.w3.org/1999/xhtml"', '', markup)

def render(renderer, name, ebnf):
    """Call renderer, turning any failure into RenderError."""
    try:
        markup = renderer(ebnf)
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"renderer failed: {e}") from e

    if not markup:
        raise RenderError("renderer returned no markup")

    logger.info("%s: generated railroad diagram", name)
    return markup

def inner_tag(markup, tag):
    """Contents of the first <tag> element."""
    m = re.search(rf'<{tag}\b[^>]*>(.*)</{tag}>', markup, flags = re.S | re.I)
    if m is None:
        raise RenderError(f"no <{tag}> element in renderer output")

    return m.group(1)

def extract_tag(markup, tag):
    """The first <tag> element, including the tag itself."""
    m = re.search(rf'<{tag}\b.*?</{tag}>', markup, flags = re.S | re.I)
    if m is None:
        raise RenderError(f"no <{tag}> element in renderer output")

    return m.group(0)

def rewrite_links(markup, page = GRAMMAR_PAGE):
    """Point in-page rule links at the grammar page."""
    return re.sub(r'((?:xlink:)?href=")#', rf'\g<1>{page}#', markup)

def unlink(markup, names, page = GRAMMAR_PAGE):
    """Strip links to names, keeping the linked content."""
    for name in names:
        link = re.compile(rf'<a\b[^>]*?\s(?:xlink:)?href="{re.escape(page)}#{re.escape(name)}"[^>]*>(.*?)</a>', flags = re.S)
        markup = link.sub(r'\1', markup)

    return markup

def statement_markup(markup, unlink_names = (), page = GRAMMAR_PAGE):
    """Finished diagram for one statement: its <svg>, links fixed up."""
    body = extract_tag(markup, "svg")
    body = rewrite_links(body, page)
    return unlink(body, unlink_names, page)

def overview_markup(markup, credit = CREDIT):
    """Finished diagram page for the whole grammar."""
    body = inner_tag(markup, "body")
    body = body.split("<hr/>", 1)[0]
    body += credit
    return f"<div>{body}</div>"
