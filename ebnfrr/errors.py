# SPDX-FileCopyrightText: 2020,2021 University of Rochester
#
# SPDX-License-Identifier: MIT

#
# errors.py
#
# Everything the pipeline raises derives from GrammarError so that the
# batch runner can scope a failure to the statement that caused it.

class GrammarError(Exception):
    pass

class EBNFSyntaxError(GrammarError, ValueError):
    """The grammar source is not in the expected `name ::= body` form."""

    def __init__(self, message, line = None, col = None):
        super().__init__(message)
        self.line = line
        self.col = col

class UnknownProductionError(GrammarError, KeyError):
    def __init__(self, name, context = None):
        super().__init__(name)
        self.name = name
        self.context = context

    def __str__(self):
        if self.context:
            return f"unknown production '{self.name}' ({self.context})"

        return f"unknown production '{self.name}'"

class InlineCycleError(GrammarError):
    def __init__(self, name, path = None):
        self.name = name
        self.path = path or [name]
        super().__init__(f"cannot inline '{name}': it refers to itself via {' -> '.join(self.path)}")

class EmptyExtractionError(GrammarError):
    pass

class RenderError(GrammarError):
    pass

class PatternError(GrammarError, ValueError):
    """A match, exclude or regreplace pattern is not a valid regular expression."""

    def __init__(self, pattern, reason):
        self.pattern = pattern
        super().__init__(f"bad pattern {pattern!r}: {reason}")
