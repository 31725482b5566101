#!/usr/bin/env python3

# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

from ebnfrr.batch import run_specs, write_results, failed
from ebnfrr.ebnfgrammar import parse_grammar
from ebnfrr.errors import GrammarError
from ebnfrr.render import RailroadRenderer, RemoteRenderer, render, inner_tag
from ebnfrr.source import DEFAULT_ADDR, load_grammar_source
import argparse
import logging
import os
import sys

import requests

logger = logging.getLogger("ebnfrr.generate")

DEFAULT_BASE_DIR = os.path.join("..", "_includes", "sql", "diagrams")

def _read(args):
    if args.input:
        with open(args.input, "rb") as f:
            return f.read()

    return sys.stdin.buffer.read()

def _write(args, data):
    if isinstance(data, str):
        data = data.encode('utf-8')

    if args.output:
        with open(args.output, "wb") as f:
            f.write(data)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()

def _renderer(args):
    return RemoteRenderer() if args.remote else RailroadRenderer()

def cmd_generate(args):
    bnf = load_grammar_source(args.addr)
    results = run_specs(bnf, filter = args.filter, print_bnf = args.bnf,
                        renderer = None if args.bnf else _renderer(args),
                        max_workers = args.jobs)

    if args.bnf:
        for r in results:
            if r.ok and r.spec.overview:
                print(f"{r.name}:\n\n{r.bnf}")
            elif r.ok:
                print(f"{r.name}: (PRE REPLACE)\n\n{r.bnf}")
                print(f"{r.name}: (POST REPLACE)\n\n{r.ebnf}")
    else:
        for p in write_results(results, args.base):
            logger.debug("wrote %s", p)

    bad = failed(results)
    for r in bad:
        print(f"{r.name}: {r.error}", file=sys.stderr)

    return 1 if bad else 0

def cmd_bnf(args):
    _write(args, load_grammar_source(args.addr))
    return 0

def cmd_reduce(args):
    g = parse_grammar(_read(args))
    inl = [n for s in args.inline for n in s.split(',') if n]
    logger.info("parse: %s, inline: %s, descend: %s", args.stmt, inl, args.descend)
    frag = g.inline(inl).extract(args.stmt, args.descend, True)
    _write(args, str(frag))
    return 0

def cmd_rr(args):
    _write(args, render(_renderer(args), "", _read(args)))
    return 0

def cmd_body(args):
    _write(args, inner_tag(_read(args).decode('utf-8'), "body"))
    return 0

def main(argv = None):
    p = argparse.ArgumentParser(description="Generate railroad diagrams from a SQL grammar. "
                                "With no command, generates diagrams for all statements.")
    p.add_argument("--addr", default=DEFAULT_ADDR,
                   help="Location of the EBNF grammar: a URL, a local file, or - for stdin")
    p.add_argument("--in", dest="input", help="Input path; stdin if empty")
    p.add_argument("--out", dest="output", help="Output path; stdout if empty")
    p.add_argument("--base", default=DEFAULT_BASE_DIR, help="Base directory for html output")
    p.add_argument("--filter", default="", help="Only generate the statement with this name")
    p.add_argument("--bnf", action="store_true", help="Print BNF only; don't generate railroad diagrams")
    p.add_argument("--remote", action="store_true",
                   help="Render with the Railroad Diagram Generator web service")
    p.add_argument("--jobs", type=int, default=None, help="Number of statements rendered in parallel")
    p.add_argument("--debug", action="store_true", help="Enable debug output")

    sub = p.add_subparsers(dest="cmd")
    sub.add_parser("bnf", help="Write the grammar source to the output")

    rp = sub.add_parser("reduce", help="Reduce and simplify an EBNF file to a smaller grammar")
    rp.add_argument("--stmt", default="stmt_block", help="Name of top-level statement")
    rp.add_argument("--no-descend", dest="descend", action="store_false",
                    help="Don't descend past --stmt")
    rp.add_argument("--inline", action="append", default=[],
                    help="Statements to inline (comma-separated, may be repeated)")

    sub.add_parser("rr", help="Generate railroad diagram from the input")
    sub.add_parser("body", help="Extract HTML <body> contents from the input")

    args = p.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(name)s: %(message)s")

    commands = {None: cmd_generate, "bnf": cmd_bnf, "reduce": cmd_reduce,
                "rr": cmd_rr, "body": cmd_body}

    try:
        return commands[args.cmd](args)
    except GrammarError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except (OSError, requests.RequestException) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
