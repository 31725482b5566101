# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

from .errors import (GrammarError, EBNFSyntaxError, UnknownProductionError,
                     InlineCycleError, EmptyExtractionError, PatternError, RenderError)
from .ebnfgrammar import EBNFGrammar, parse_grammar
from .ebnfinline import inline
from .ebnfextract import extract, Fragment
from .stmtspec import StatementSpec, SQL_STATEMENTS, GRAMMAR_SPEC
from .batch import run_specs, write_results
