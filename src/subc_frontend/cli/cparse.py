"""
cparse - C Subset Front End Command-Line Interface
==================================================

This module implements the command-line interface for the front end.
It checks a C source file against the subset and can dump the tokens
or the parsed tree.

Usage Examples
--------------
Check a file:
    $ cparse hello.c

Print the tree:
    $ cparse hello.c --ast

Print the token stream:
    $ cparse hello.c --tokens

Reject prototypes and empty structs:
    $ cparse --no-prototypes --no-empty-structs hello.c

Verbose mode (debug logging):
    $ cparse -v hello.c
"""

import logging
import sys
from pathlib import Path

import click

from subc_frontend import __version__
from subc_frontend.errors import FrontendError
from subc_frontend.grammar.ast import ASTPrinter
from subc_frontend.grammar.frontend import CFrontend
from subc_frontend.grammar.parser import FrontendOptions


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the parsed tree",
)
@click.option(
    "--no-prototypes",
    is_flag=True,
    help="Reject function declarations without a body",
)
@click.option(
    "--no-empty-structs",
    is_flag=True,
    help="Reject struct definitions with no members",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="cparse")
def main(
    input_file: Path,
    tokens: bool,
    ast: bool,
    no_prototypes: bool,
    no_empty_structs: bool,
    verbose: bool,
) -> None:
    """
    Parse a C subset source file.

    INPUT_FILE is the C source file (.c) to check.

    \b
    Examples:
        cparse hello.c               # Check only
        cparse hello.c --ast         # Print the tree
        cparse hello.c --tokens      # Print the tokens
        cparse -v hello.c            # Debug logging

    \b
    Supported C features:
        - void, char, int, long, double, signed, unsigned, struct
        - Pointers and arrays, static and const
        - if/else, while, for, break, continue, return
        - Calls by name, member access, single-word casts
    """
    setup_logging(verbose)

    options = FrontendOptions(
        allow_prototypes=not no_prototypes,
        allow_empty_structs=not no_empty_structs,
    )
    frontend = CFrontend(options)

    try:
        if verbose:
            click.echo(f"Parsing {input_file}...")

        source = input_file.read_text(encoding="utf-8")

        # Token dump mode
        if tokens:
            for token in frontend.tokenize(source, str(input_file)):
                click.echo(repr(token))
            return

        result = frontend.parse_source(source, str(input_file))

        if ast:
            printer = ASTPrinter()
            click.echo(printer.print(result.program))

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens")
            click.echo(f"Parsed: {len(result.program.units)} top-level declarations")

        click.echo(f"OK {input_file}")

    except FrontendError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    except UnicodeDecodeError as e:
        click.echo(f"Error: {input_file} is not valid UTF-8 ({e.reason} at byte {e.start})", err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
