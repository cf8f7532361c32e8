"""
subc Grammar Model
==================

The grammar layer of the front end for a restricted subset of C:

- **operators**: token-to-operator resolution and the precedence table
- **types**: declaration specifiers and declarator shapes
- **ast**: expression, statement and declaration trees
- **lexer** / **parser**: the scanner and the precedence-climbing driver
- **frontend**: the facade and its options

Supported subset:
- Types: void, char, int, long, double, signed, unsigned, struct
- Pointers (any depth) and arrays (optionally sized)
- static storage and const qualification
- if/else, while, for, break, continue, return
- Named function calls, member access (. and ->), single-word casts

Not modeled: function pointers, varargs, unions, enums, typedefs,
bitfields, initializer lists and the preprocessor.
"""

from subc_frontend.grammar.errors import (
    GrammarError,
    CSyntaxError,
    UnterminatedStringError,
    InvalidCharacterError,
    UnexpectedTokenError,
    MissingTokenError,
    MalformedCompositionError,
    UnsupportedConstructError,
)
from subc_frontend.grammar.interner import Symbol, StringInterner, intern
from subc_frontend.grammar.lexer import CLexer, CToken, CTokenType
from subc_frontend.grammar.operators import (
    PostfixOp,
    UnaryOp,
    BinaryOperator,
    AssignOp,
    Assign,
    postfix_op_from_token,
    unary_op_from_token,
    binary_op_from_token,
    assign_op_from_token,
    precedence,
    is_right_associative,
)
from subc_frontend.grammar.types import (
    StorageSpecifier,
    TypeQualifier,
    TypeSpecifierKind,
    TypeSpecifier,
    DeclarationSpecifier,
    DeclaratorType,
    TerminalDeclarator,
    PointerDeclarator,
    ArrayDeclarator,
    NO_DECLARATOR,
    build_declarator,
    resolve_type_specifiers,
    describe_type,
)
from subc_frontend.grammar.ast import ASTPrinter, ASTVisitor, Program
from subc_frontend.grammar.parser import (
    CParser,
    FrontendOptions,
    parse_source,
    parse_expression_source,
)
from subc_frontend.grammar.frontend import CFrontend, ParseResult, parse_c

__all__ = [
    # Errors
    "GrammarError",
    "CSyntaxError",
    "UnterminatedStringError",
    "InvalidCharacterError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "MalformedCompositionError",
    "UnsupportedConstructError",
    # Interning
    "Symbol",
    "StringInterner",
    "intern",
    # Lexing
    "CLexer",
    "CToken",
    "CTokenType",
    # Operators
    "PostfixOp",
    "UnaryOp",
    "BinaryOperator",
    "AssignOp",
    "Assign",
    "postfix_op_from_token",
    "unary_op_from_token",
    "binary_op_from_token",
    "assign_op_from_token",
    "precedence",
    "is_right_associative",
    # Types
    "StorageSpecifier",
    "TypeQualifier",
    "TypeSpecifierKind",
    "TypeSpecifier",
    "DeclarationSpecifier",
    "DeclaratorType",
    "TerminalDeclarator",
    "PointerDeclarator",
    "ArrayDeclarator",
    "NO_DECLARATOR",
    "build_declarator",
    "resolve_type_specifiers",
    "describe_type",
    # Trees
    "ASTPrinter",
    "ASTVisitor",
    "Program",
    # Driver
    "CParser",
    "FrontendOptions",
    "parse_source",
    "parse_expression_source",
    "CFrontend",
    "ParseResult",
    "parse_c",
]
