# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# source.py
#
# Where the grammar comes from: a URL, a local file, or stdin.

import logging
import pathlib
import sys

import requests

logger = logging.getLogger(__name__)

DEFAULT_ADDR = "sql.bnf"

def load_grammar_source(addr = DEFAULT_ADDR, timeout = 30):
    """Return the raw grammar source at addr as bytes.

       addr may be an http(s) URL, '-' for stdin, or a path.
    """

    logger.info("generate BNF: %s", addr)

    if addr.startswith(("http://", "https://")):
        resp = requests.get(addr, timeout = timeout)
        resp.raise_for_status()
        return resp.content
    elif addr == "-":
        return sys.stdin.buffer.read()
    else:
        return pathlib.Path(addr).read_bytes()
