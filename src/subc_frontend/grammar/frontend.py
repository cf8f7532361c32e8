"""
subc Front End
==============

This module provides the main front-end interface. It runs the two
stages that turn source text into a tree:

    Source → Lex → Parse → Program

Usage
-----
Command line:
    $ cparse hello.c --ast

Programmatic:
    >>> from subc_frontend.grammar import parse_c
    >>> program = parse_c('int main() { return 0; }')
    >>> len(program.functions)
    1

Semantic analysis and code generation are later phases and consume the
Program produced here.

Error Handling
--------------
The first error stops the front end. Every error is a FrontendError
carrying the file, line and column where it was detected.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from subc_frontend.grammar.ast import Program
from subc_frontend.grammar.interner import StringInterner
from subc_frontend.grammar.lexer import CLexer, CToken
from subc_frontend.grammar.parser import CParser, FrontendOptions


logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """
    Output of a front-end run.

    Attributes:
        program: The parsed tree
        filename: Source filename
        token_count: Number of tokens scanned (including EOF)
    """
    program: Program
    filename: str = "<input>"
    token_count: int = 0


class CFrontend:
    """
    Front end for the C subset.

    Example:
        frontend = CFrontend(FrontendOptions(allow_prototypes=False))
        result = frontend.parse_file("hello.c")
        print(ASTPrinter().print(result.program))

    Attributes:
        options: Front-end configuration options
        interner: Name interner shared by every parse run through this front end
    """

    def __init__(
        self,
        options: Optional[FrontendOptions] = None,
        interner: Optional[StringInterner] = None,
    ):
        self.options = options or FrontendOptions()
        self.interner = interner

    def parse_source(self, source: str, filename: str = "<input>") -> ParseResult:
        """
        Parse C source code.

        Args:
            source: C source code string
            filename: Source filename for error messages

        Returns:
            ParseResult with the tree and token count

        Raises:
            FrontendError: If lexing or parsing fails
        """
        tokens = self.tokenize(source, filename)
        logger.debug(f"Tokenized {filename}: {len(tokens)} tokens")

        parser = CParser(
            tokens,
            filename,
            source.splitlines(),
            options=self.options,
            interner=self.interner,
        )
        program = parser.parse()
        logger.debug(f"Parsed {filename}: {len(program.units)} top-level units")

        return ParseResult(program=program, filename=filename, token_count=len(tokens))

    def parse_file(self, filepath: str | Path) -> ParseResult:
        """
        Parse a C source file.

        Raises:
            FrontendError: If lexing or parsing fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.parse_source(source, str(filepath))

    def tokenize(self, source: str, filename: str = "<input>") -> list[CToken]:
        """Scan source into a token list ending with EOF."""
        lexer = CLexer(source, filename)
        return list(lexer.tokenize())


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_c(
    source: str,
    filename: str = "<input>",
    options: Optional[FrontendOptions] = None,
) -> Program:
    """
    Parse C source code into a Program.

    This is the primary high-level interface of the front end.

    Raises:
        FrontendError: If lexing or parsing fails

    Example:
        >>> program = parse_c('''
        ... struct Point { int x; int y; };
        ... int origin(struct Point *p) { return p->x == 0 && p->y == 0; }
        ... ''')
        >>> [str(s.name) for s in program.structs]
        ['Point']
    """
    return CFrontend(options).parse_source(source, filename).program
