"""
subc Front End Error Base
=========================

This module defines the root of the exception hierarchy for the whole
front end. All exceptions inherit from FrontendError, allowing callers
to catch every front-end failure with a single except clause.

Exception Hierarchy
-------------------
FrontendError (base)
└── GrammarError (see subc_frontend.grammar.errors)
    ├── CSyntaxError - scanner and parser syntax errors
    ├── MalformedCompositionError - invalid tree shape at construction
    └── UnsupportedConstructError - construct outside the C subset

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class FrontendError(Exception):
    """
    Base exception for all front-end errors.

        try:
            program = parse_c(source)
        except FrontendError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Locations are owned by the scanner and the parser driver; tree nodes
    never carry them.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
