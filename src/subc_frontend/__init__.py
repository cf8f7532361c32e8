"""
subc Front End - Grammar Model for a C Subset
=============================================

This package provides the front end of a compiler for a restricted
subset of C: a scanner, a precedence-climbing parser and the immutable
tree it produces.

Main Components
---------------
- **grammar**: operator resolution, type model, trees, lexer, parser
- **cli**: the ``cparse`` command-line tool

Quick Start
-----------
    >>> from subc_frontend.grammar import parse_c, ASTPrinter
    >>> program = parse_c('int main() { return 1 + 2 * 3; }')
    >>> print(ASTPrinter().print(program))
    Program
      Function: main() -> int
        Block
          Return (1 + (2 * 3))

Or use the command-line tool:
    $ cparse hello.c --ast
"""

__version__ = "0.1.0"
__author__ = "subc contributors"

from subc_frontend.errors import FrontendError, SourceLocation

__all__ = [
    "__version__",
    "FrontendError",
    "SourceLocation",
]
