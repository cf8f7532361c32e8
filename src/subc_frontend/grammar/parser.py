"""
subc Recursive Descent Parser
=============================

This module implements the parser driver for the C subset. It takes a
stream of tokens from the lexer and builds the tree defined in
``subc_frontend.grammar.ast``.

Grammar (Simplified EBNF)
-------------------------
program         ::= unit*
unit            ::= struct_def | specifiers declarator (function_rest | var_rest)
struct_def      ::= 'struct' IDENTIFIER '{' member_decl* '}' ';'
function_rest   ::= block | ';'
var_rest        ::= ('=' expr)? (',' init_declarator)* ';'
specifiers      ::= ('static' | 'const' | type_word | 'struct' IDENTIFIER)+
declarator      ::= '*'* direct ('[' NUMBER? ']')*
direct          ::= IDENTIFIER | '(' declarator ')'

block           ::= '{' (declaration | statement)* '}'
statement       ::= if_stmt | while_stmt | for_stmt | return_stmt
                  | break_stmt | continue_stmt | block | expr_stmt
for_stmt        ::= 'for' '(' declaration? ';' expr? ';' expr? ')' statement

expr            ::= unary (binary_op unary)*      (precedence climbing)
unary           ::= unary_op unary | 'sizeof' unary | 'sizeof' '(' type ')'
                  | '(' type_word ')' unary | postfix
postfix         ::= primary ('(' args ')' | '[' expr ']' | '.' IDENTIFIER
                  | '->' IDENTIFIER | '++' | '--')*
primary         ::= IDENTIFIER | NUMBER | FLOAT | CHAR | STRING | '(' expr ')'

Binary operators are resolved through ``operators.binary_op_from_token``
and ordered only by ``precedence`` and ``is_right_associative``; there is
no per-level parse method.

Declarator Composition
----------------------
Declarator shapes are collected outermost first and composed with
``build_declarator``:

| Source          | Shape                               |
|-----------------|-------------------------------------|
| ``int *x[3]``   | array[3] of pointer to int          |
| ``int (*p)[3]`` | pointer to array[3] of int          |
| ``int m[2][3]`` | array[2] of array[3] of int         |

Function declarators are only accepted at the outermost level of a
top-level declaration; anywhere else they would describe a function
pointer and are rejected as unsupported.

Example Usage
-------------
>>> from subc_frontend.grammar.parser import parse_source
>>> program = parse_source('int main() { return 42; }', "test.c")
>>> program.functions[0].name
Symbol('main')
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from subc_frontend.grammar.errors import (
    GrammarError,
    MalformedCompositionError,
    MissingTokenError,
    UnexpectedTokenError,
    UnsupportedConstructError,
)
from subc_frontend.grammar.interner import DEFAULT_INTERNER, StringInterner, Symbol
from subc_frontend.grammar.lexer import CLexer, CToken, CTokenType
from subc_frontend.grammar.operators import (
    ASSIGNMENT_PRECEDENCE,
    binary_op_from_token,
    is_right_associative,
    postfix_op_from_token,
    precedence,
    unary_op_from_token,
)
from subc_frontend.grammar.types import (
    DeclarationSpecifier,
    DeclaratorKind,
    DeclaratorLayer,
    TypeSpecifier,
    build_declarator,
    storage_specifier_from_token,
    type_qualifier_from_token,
    type_specifier_from_token,
)
from subc_frontend.grammar.ast import (
    Binary,
    Block,
    BlockStatement,
    Break,
    Cast,
    Continue,
    Declaration,
    DeclarationStatement,
    Expression,
    ExpressionStatement,
    ExternalDeclaration,
    For,
    FunctionCall,
    FunctionDeclaration,
    If,
    Index,
    Literal,
    LiteralKind,
    Member,
    Parenthesized,
    PointerMember,
    Postfix,
    Program,
    Return,
    Statement,
    StructDeclaration,
    Unary,
    Variable,
    VariableDeclaration,
    While,
    make_sizeof,
)


logger = logging.getLogger(__name__)


@dataclass
class FrontendOptions:
    """
    Front-end configuration options.

    Attributes:
        allow_prototypes: Accept function declarations without a body.
                          When False a prototype raises
                          UnsupportedConstructError.
        allow_empty_structs: Accept ``struct S { };``
        wrap_bodies: Wrap a single-statement body of if/else/while/for
                     in a BlockStatement so later phases always see a
                     block. An empty body ``;`` is an empty block either way.
    """
    allow_prototypes: bool = True
    allow_empty_structs: bool = True
    wrap_bodies: bool = True


@dataclass
class _ParsedDeclarator:
    """A declarator before it is attached to its specifiers."""
    ident: Optional[CToken]
    layers: list[DeclaratorLayer] = field(default_factory=list)
    # Parameter declarations when the declarator declares a function
    parameters: Optional[list[Declaration]] = None

    @property
    def is_function(self) -> bool:
        return self.parameters is not None


_LITERAL_KINDS = {
    CTokenType.NUMBER: LiteralKind.INT,
    CTokenType.FLOAT: LiteralKind.DOUBLE,
    CTokenType.CHAR_LITERAL: LiteralKind.CHAR,
    CTokenType.STRING: LiteralKind.STRING,
}


class CParser:
    """
    Recursive descent parser for the C subset.

    Parses a stream of tokens into a Program tree. The first error stops
    parsing; there is no error recovery.

    Attributes:
        tokens: List of tokens to parse
        filename: Source filename for error reporting
        options: Front-end options
        interner: Interner used for every name in the tree
    """

    def __init__(
        self,
        tokens: list[CToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        options: Optional[FrontendOptions] = None,
        interner: Optional[StringInterner] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer (ending with EOF)
            filename: Source filename for error messages
            source_lines: Original source lines for error context
            options: Front-end options (defaults if None)
            interner: Name interner (the process-wide one if None)
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self.options = options or FrontendOptions()
        self.interner = interner if interner is not None else DEFAULT_INTERNER

        # Current position in token stream
        self._pos = 0

    def parse(self) -> Program:
        """
        Parse the token stream into a Program.

        Returns:
            Program holding every top-level unit in source order

        Raises:
            GrammarError: On the first syntax, composition or
                unsupported-construct error
        """
        units: list[ExternalDeclaration] = []

        while not self._at_end():
            token = self._peek()
            with self._at(token):
                units.extend(self._parse_top_level_declaration())

        logger.debug(f"Parsed {len(units)} top-level units from {self.filename}")
        return Program(tuple(units))

    def parse_expression(self) -> Expression:
        """Parse the whole token stream as one expression."""
        expr = self._parse_expression()
        self._expect_end()
        return expr

    def parse_statement(self) -> Statement:
        """
        Parse the whole token stream as one statement.

        A local declaration such as ``int x = 1;`` becomes a
        DeclarationStatement; it must declare exactly one variable.
        """
        token = self._peek()
        if token.is_declaration_start():
            with self._at(token):
                declarations = self._parse_local_declaration()
                if len(declarations) > 1:
                    raise self._unsupported(
                        "multiple declarators in a single statement",
                        token,
                        hint="declare one variable per statement",
                    )
            stmt: Statement = DeclarationStatement(declarations[0])
        else:
            stmt = self._parse_statement()
        self._expect_end()
        return stmt

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self._peek().type == CTokenType.EOF

    def _peek(self, offset: int = 0) -> CToken:
        """Look at token at current position + offset."""
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[pos]

    def _advance(self) -> CToken:
        """Consume and return the current token."""
        if not self._at_end():
            token = self.tokens[self._pos]
            self._pos += 1
            return token
        return self.tokens[-1]

    def _check(self, *types: CTokenType) -> bool:
        """Check if current token is one of the given types."""
        return self._peek().type in types

    def _match(self, *types: CTokenType) -> Optional[CToken]:
        """
        Consume current token if it matches one of the types.

        Returns:
            The consumed token, or None if no match
        """
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: CTokenType, message: Optional[str] = None) -> CToken:
        """
        Expect and consume a specific token type.

        Raises:
            MissingTokenError: If the expected token is not found
        """
        if self._check(token_type):
            return self._advance()

        current = self._peek()
        if message is None:
            message = token_type.name.lower()

        raise MissingTokenError(
            message,
            current.location,
            self._get_source_line(current.line),
        )

    def _expect_end(self) -> None:
        if not self._at_end():
            token = self._peek()
            raise UnexpectedTokenError(
                token.text,
                expected="end of input",
                location=token.location,
                source_line=self._get_source_line(token.line),
            )

    def _get_source_line(self, line: int) -> Optional[str]:
        """Get source line for error reporting."""
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    @contextmanager
    def _at(self, token: CToken) -> Iterator[None]:
        """Attach token's position to grammar errors raised without one."""
        try:
            yield
        except GrammarError as error:
            error.with_location(token.location, self._get_source_line(token.line))
            raise

    def _unsupported(
        self,
        construct: str,
        token: CToken,
        hint: Optional[str] = None,
    ) -> UnsupportedConstructError:
        return UnsupportedConstructError(
            construct,
            token.location,
            hint=hint,
            source_line=self._get_source_line(token.line),
        )

    def _unexpected(self, expected: str) -> UnexpectedTokenError:
        token = self._peek()
        return UnexpectedTokenError(
            token.text,
            expected=expected,
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    def _symbol(self, token: CToken) -> Symbol:
        return self.interner.intern(token.value)

    # =========================================================================
    # Top-Level Declaration Parsing
    # =========================================================================

    def _parse_top_level_declaration(self) -> list[ExternalDeclaration]:
        """
        Parse one top-level declaration.

        Returns:
            A single struct or function, or one VariableDeclaration per
            declarator for ``int a, b = 1;``.
        """
        if (
            self._check(CTokenType.STRUCT)
            and self._peek(1).type == CTokenType.IDENTIFIER
            and self._peek(2).type == CTokenType.LBRACE
        ):
            return [self._parse_struct_definition()]

        start = self._peek()
        specifier = self._parse_declaration_specifiers()

        if self._check(CTokenType.SEMICOLON):
            raise self._unsupported(
                "declaration that declares nothing",
                start,
                hint="forward declarations are not needed",
            )

        first = self._parse_declarator(allow_abstract=False, allow_function=True)
        if first.is_function:
            return [self._finish_function(specifier, first)]

        units: list[ExternalDeclaration] = [self._finish_variable(specifier, first)]
        while self._match(CTokenType.COMMA):
            declarator = self._parse_declarator(allow_abstract=False, allow_function=False)
            units.append(self._finish_variable(specifier, declarator))

        self._expect(CTokenType.SEMICOLON, "';'")
        return units

    def _finish_function(
        self,
        specifier: DeclarationSpecifier,
        declarator: _ParsedDeclarator,
    ) -> FunctionDeclaration:
        """Parse the body (or ';') after a function declarator."""
        name_token = declarator.ident
        declaration = Declaration(
            specifier,
            build_declarator(declarator.layers),
            self._symbol(name_token),
        )

        body = None
        if self._check(CTokenType.LBRACE):
            for index, param in enumerate(declarator.parameters, start=1):
                if param.is_abstract:
                    raise MalformedCompositionError(
                        f"parameter {index} of '{name_token.value}' has no name",
                        name_token.location,
                        source_line=self._get_source_line(name_token.line),
                    )
            body = self._parse_block()
        else:
            semicolon = self._peek()
            self._expect(CTokenType.SEMICOLON, "';' or function body")
            if not self.options.allow_prototypes:
                raise self._unsupported(
                    "function prototype",
                    semicolon,
                    hint="define the function before it is used",
                )

        logger.debug(
            f"Parsed function '{name_token.value}' "
            f"({len(declarator.parameters)} parameters, "
            f"{'prototype' if body is None else 'definition'})"
        )
        return FunctionDeclaration(
            declaration,
            tuple(declarator.parameters),
            False,
            body,
        )

    def _finish_variable(
        self,
        specifier: DeclarationSpecifier,
        declarator: _ParsedDeclarator,
    ) -> VariableDeclaration:
        """Parse the optional initializer after a variable declarator."""
        declaration = Declaration(
            specifier,
            build_declarator(declarator.layers),
            self._symbol(declarator.ident),
        )

        initializer = None
        if self._match(CTokenType.ASSIGN):
            if self._check(CTokenType.LBRACE):
                raise self._unsupported(
                    "initializer list",
                    self._peek(),
                    hint="assign the elements one at a time",
                )
            initializer = self._parse_expression()

        return VariableDeclaration(declaration, initializer)

    # =========================================================================
    # Struct Definitions
    # =========================================================================

    def _parse_struct_definition(self) -> StructDeclaration:
        """
        Parse a struct definition.

            struct Point { int x; int y; };
        """
        struct_token = self._expect(CTokenType.STRUCT, "'struct'")
        name_token = self._expect(CTokenType.IDENTIFIER, "struct name")
        self._expect(CTokenType.LBRACE, "'{'")

        members: list[Declaration] = []
        while not self._check(CTokenType.RBRACE) and not self._at_end():
            members.extend(self._parse_struct_members(name_token))

        self._expect(CTokenType.RBRACE, "'}'")

        if self._check(CTokenType.IDENTIFIER, CTokenType.STAR):
            raise self._unsupported(
                "struct definition combined with a declarator",
                self._peek(),
                hint=f"declare variables of struct {name_token.value} separately",
            )
        self._expect(CTokenType.SEMICOLON, "';' after struct definition")

        if not members and not self.options.allow_empty_structs:
            raise self._unsupported("empty struct", struct_token)

        logger.debug(f"Parsed struct '{name_token.value}' with {len(members)} members")
        return StructDeclaration(self._symbol(name_token), tuple(members))

    def _parse_struct_members(self, name_token: CToken) -> list[Declaration]:
        """Parse one member line: ``int x, *next;``."""
        start = self._peek()
        specifier = self._parse_declaration_specifiers()
        if specifier.is_static:
            raise self._unsupported(
                f"static member in struct {name_token.value}",
                start,
            )

        members = []
        while True:
            declarator = self._parse_declarator(allow_abstract=False, allow_function=False)
            members.append(
                Declaration(
                    specifier,
                    build_declarator(declarator.layers),
                    self._symbol(declarator.ident),
                )
            )
            if not self._match(CTokenType.COMMA):
                break

        self._expect(CTokenType.SEMICOLON, "';'")
        return members

    # =========================================================================
    # Declaration Specifiers and Declarators
    # =========================================================================

    def _parse_declaration_specifiers(self) -> DeclarationSpecifier:
        """
        Parse storage, qualifiers and base type words in any order.

            static const unsigned int
            struct Point

        Raises:
            MissingTokenError: If no base type word is present
            UnsupportedConstructError: For combinations the subset does
                not model (``long long``, ``signed double``, ...)
        """
        start = self._peek()
        storage = set()
        qualifiers = set()
        type_specifiers: list[TypeSpecifier] = []

        while True:
            token = self._peek()

            storage_spec = storage_specifier_from_token(token)
            if storage_spec is not None:
                self._advance()
                storage.add(storage_spec)
                continue

            qualifier = type_qualifier_from_token(token)
            if qualifier is not None:
                self._advance()
                qualifiers.add(qualifier)
                continue

            type_spec = type_specifier_from_token(token)
            if type_spec is not None:
                self._advance()
                type_specifiers.append(type_spec)
                continue

            if token.type == CTokenType.STRUCT:
                self._advance()
                name_token = self._expect(CTokenType.IDENTIFIER, "struct name")
                if self._check(CTokenType.LBRACE):
                    raise self._unsupported(
                        "struct definition in this position",
                        token,
                        hint="define structs at file scope on their own",
                    )
                type_specifiers.append(TypeSpecifier.struct(self._symbol(name_token)))
                continue

            break

        if not type_specifiers:
            raise MissingTokenError(
                "type specifier",
                self._peek().location,
                self._get_source_line(self._peek().line),
            )

        with self._at(start):
            specifier = DeclarationSpecifier(
                frozenset(storage), frozenset(qualifiers), tuple(type_specifiers)
            )
            # Reject word combinations up front, where the position is known
            specifier.resolve()
        return specifier

    def _parse_declarator(
        self,
        allow_abstract: bool,
        allow_function: bool,
    ) -> _ParsedDeclarator:
        """
        Parse a declarator into outermost-first layers.

        Args:
            allow_abstract: Accept a declarator with no name (sizeof
                operands and prototype parameters)
            allow_function: Accept a parameter list after the name; only
                true at the outermost level of a top-level declaration
        """
        pointers = []
        while self._match(CTokenType.STAR):
            if self._check(CTokenType.CONST):
                raise self._unsupported("const-qualified pointer", self._peek())
            pointers.append(DeclaratorLayer(DeclaratorKind.POINTER))

        ident = None
        inner: list[DeclaratorLayer] = []
        nested = False

        if self._check(CTokenType.IDENTIFIER):
            ident = self._advance()
        elif self._check(CTokenType.LPAREN) and self._starts_nested_declarator():
            self._advance()
            inner_declarator = self._parse_declarator(allow_abstract, allow_function=False)
            self._expect(CTokenType.RPAREN, "')'")
            ident = inner_declarator.ident
            inner = inner_declarator.layers
            nested = True
        elif not allow_abstract:
            raise MissingTokenError(
                "identifier",
                self._peek().location,
                self._get_source_line(self._peek().line),
            )

        suffixes: list[DeclaratorLayer] = []
        parameters = None

        while True:
            token = self._peek()
            if self._match(CTokenType.LBRACKET):
                if parameters is not None:
                    raise self._unsupported("function returning an array", token)
                suffixes.append(self._parse_array_suffix())
            elif self._check(CTokenType.LPAREN):
                if nested:
                    raise self._unsupported(
                        "function pointer",
                        token,
                        hint="call the function by name instead",
                    )
                if not allow_function or suffixes or parameters is not None or ident is None:
                    raise self._unsupported("function declarator in this position", token)
                self._advance()
                parameters = self._parse_parameter_list()
            else:
                break

        return _ParsedDeclarator(
            ident=ident,
            layers=inner + suffixes + pointers,
            parameters=parameters,
        )

    def _starts_nested_declarator(self) -> bool:
        """
        Decide whether '(' opens a nested declarator.

        In an abstract declarator ``int (int)`` is a parameter list, while
        ``int (*)[3]`` is a nested one.
        """
        following = self._peek(1)
        return following.type in (
            CTokenType.STAR,
            CTokenType.LPAREN,
            CTokenType.IDENTIFIER,
        )

    def _parse_array_suffix(self) -> DeclaratorLayer:
        """Parse the rest of ``[N]`` or ``[]`` after the '['."""
        size = None
        if not self._check(CTokenType.RBRACKET):
            size_token = self._peek()
            if size_token.type != CTokenType.NUMBER:
                raise self._unsupported(
                    "non-literal array size",
                    size_token,
                    hint="use an integer literal",
                )
            self._advance()
            size = size_token.value
        self._expect(CTokenType.RBRACKET, "']'")
        return DeclaratorLayer(DeclaratorKind.ARRAY, size)

    def _parse_parameter_list(self) -> list[Declaration]:
        """Parse parameters after '(' up to and including ')'."""
        if self._match(CTokenType.RPAREN):
            return []

        # (void) means no parameters
        if self._check(CTokenType.VOID) and self._peek(1).type == CTokenType.RPAREN:
            self._advance()
            self._advance()
            return []

        parameters = []
        while True:
            if self._check(CTokenType.ELLIPSIS):
                raise self._unsupported(
                    "variadic function",
                    self._peek(),
                    hint="declare a fixed parameter list",
                )
            parameters.append(self._parse_parameter())
            if not self._match(CTokenType.COMMA):
                break

        self._expect(CTokenType.RPAREN, "')'")
        return parameters

    def _parse_parameter(self) -> Declaration:
        """Parse a single parameter; the name may be omitted."""
        specifier = self._parse_declaration_specifiers()
        declarator = self._parse_declarator(allow_abstract=True, allow_function=False)
        ident = self._symbol(declarator.ident) if declarator.ident is not None else None
        return Declaration(specifier, build_declarator(declarator.layers), ident)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_block(self) -> Block:
        """Parse a block { ... }; declarations and statements may mix."""
        self._expect(CTokenType.LBRACE, "'{'")

        statements: list[Statement] = []
        while not self._check(CTokenType.RBRACE) and not self._at_end():
            token = self._peek()
            with self._at(token):
                if token.is_declaration_start():
                    statements.extend(
                        DeclarationStatement(decl)
                        for decl in self._parse_local_declaration()
                    )
                elif self._match(CTokenType.SEMICOLON):
                    # Empty statement
                    continue
                else:
                    statements.append(self._parse_statement())

        self._expect(CTokenType.RBRACE, "'}'")
        return Block(tuple(statements))

    def _parse_local_declaration(self) -> list[VariableDeclaration]:
        """
        Parse local variable declaration(s).

            int a, b = 2;
            char *p, buf[10];
        """
        specifier = self._parse_declaration_specifiers()
        declarations = []
        while True:
            declarator = self._parse_declarator(allow_abstract=False, allow_function=False)
            declarations.append(self._finish_variable(specifier, declarator))
            if not self._match(CTokenType.COMMA):
                break

        self._expect(CTokenType.SEMICOLON, "';'")
        return declarations

    def _parse_statement(self) -> Statement:
        """Parse any statement other than a declaration."""
        token = self._peek()

        with self._at(token):
            if token.type == CTokenType.IF:
                return self._parse_if_statement()
            if token.type == CTokenType.WHILE:
                return self._parse_while_statement()
            if token.type == CTokenType.FOR:
                return self._parse_for_statement()
            if token.type == CTokenType.RETURN:
                return self._parse_return_statement()
            if token.type == CTokenType.BREAK:
                self._advance()
                self._expect(CTokenType.SEMICOLON, "';' after 'break'")
                return Break()
            if token.type == CTokenType.CONTINUE:
                self._advance()
                self._expect(CTokenType.SEMICOLON, "';' after 'continue'")
                return Continue()
            if token.type == CTokenType.LBRACE:
                return BlockStatement(self._parse_block())
            if token.type == CTokenType.SEMICOLON:
                self._advance()
                return BlockStatement(Block())
            if token.is_declaration_start():
                raise self._unexpected("statement")

            expr = self._parse_expression()
            self._expect(CTokenType.SEMICOLON, "';'")
            return ExpressionStatement(expr)

    def _parse_body(self) -> Statement:
        """Parse the body of if/else/while/for."""
        stmt = self._parse_statement()
        if self.options.wrap_bodies and not isinstance(stmt, BlockStatement):
            stmt = BlockStatement(Block((stmt,)))
        return stmt

    def _parse_if_statement(self) -> If:
        """Parse if statement."""
        self._expect(CTokenType.IF, "'if'")
        self._expect(CTokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")

        then_branch = self._parse_body()

        else_branch = None
        if self._match(CTokenType.ELSE):
            else_branch = self._parse_body()

        return If(condition, then_branch, else_branch)

    def _parse_while_statement(self) -> While:
        """Parse while statement."""
        self._expect(CTokenType.WHILE, "'while'")
        self._expect(CTokenType.LPAREN, "'('")
        condition = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")

        return While(condition, self._parse_body())

    def _parse_for_statement(self) -> For:
        """
        Parse for statement.

        The initializer, when present, must declare exactly one variable.
        """
        self._expect(CTokenType.FOR, "'for'")
        self._expect(CTokenType.LPAREN, "'('")

        init = None
        if not self._check(CTokenType.SEMICOLON):
            token = self._peek()
            if not token.is_declaration_start():
                raise self._unsupported(
                    "expression as for initializer",
                    token,
                    hint="declare the loop variable, e.g. 'for (int i = 0; ...)'",
                )
            specifier = self._parse_declaration_specifiers()
            declarator = self._parse_declarator(allow_abstract=False, allow_function=False)
            init = self._finish_variable(specifier, declarator)
            if self._check(CTokenType.COMMA):
                raise self._unsupported(
                    "multiple declarations in for initializer",
                    self._peek(),
                )
        self._expect(CTokenType.SEMICOLON, "';'")

        condition = None
        if not self._check(CTokenType.SEMICOLON):
            condition = self._parse_expression()
        self._expect(CTokenType.SEMICOLON, "';'")

        step = None
        if not self._check(CTokenType.RPAREN):
            step = self._parse_expression()
        self._expect(CTokenType.RPAREN, "')'")

        return For(init, condition, step, self._parse_body())

    def _parse_return_statement(self) -> Return:
        """Parse return statement."""
        self._expect(CTokenType.RETURN, "'return'")

        value = None
        if not self._check(CTokenType.SEMICOLON):
            value = self._parse_expression()

        self._expect(CTokenType.SEMICOLON, "';' after return")
        return Return(value)

    # =========================================================================
    # Expression Parsing (Precedence Climbing)
    # =========================================================================

    def _parse_expression(self, min_precedence: int = ASSIGNMENT_PRECEDENCE) -> Expression:
        """
        Parse a binary expression whose operators bind at least as tightly
        as min_precedence.

        A left-associative operator parses its right operand one level
        tighter; a right-associative one (assignment) at its own level, so
        ``a = b = c`` groups as ``a = (b = c)``.
        """
        left = self._parse_unary()

        while True:
            token = self._peek()
            op = binary_op_from_token(token)
            if op is None:
                break

            op_precedence = precedence(op)
            if op_precedence < min_precedence:
                break

            self._advance()
            if is_right_associative(op):
                next_min = op_precedence
            else:
                next_min = op_precedence + 1
            right = self._parse_expression(next_min)
            left = Binary(op, left, right)

        return left

    def _parse_unary(self) -> Expression:
        """Parse unary expression (+ - ! ~ & * ++ --, sizeof, casts)."""
        token = self._peek()

        op = unary_op_from_token(token)
        if op is not None:
            self._advance()
            operand = self._parse_unary()  # Right-associative
            return Unary(op, operand)

        if token.type == CTokenType.SIZEOF:
            return self._parse_sizeof()

        # Cast: '(' followed by a type word
        if token.type == CTokenType.LPAREN and self._peek(1).is_declaration_start():
            return self._parse_cast()

        return self._parse_postfix()

    def _parse_sizeof(self) -> Expression:
        """
        Parse sizeof.

            sizeof(int *)   -> type operand
            sizeof x        -> expression operand
            sizeof(x)       -> expression operand (parenthesized)
        """
        sizeof_token = self._expect(CTokenType.SIZEOF, "'sizeof'")

        with self._at(sizeof_token):
            if self._check(CTokenType.LPAREN) and self._peek(1).is_declaration_start():
                self._advance()
                specifier = self._parse_declaration_specifiers()
                declarator = self._parse_declarator(allow_abstract=True, allow_function=False)
                if declarator.ident is not None:
                    raise UnexpectedTokenError(
                        declarator.ident.text,
                        expected="')'",
                        location=declarator.ident.location,
                        source_line=self._get_source_line(declarator.ident.line),
                    )
                self._expect(CTokenType.RPAREN, "')'")
                return make_sizeof(
                    declaration=Declaration(specifier, build_declarator(declarator.layers))
                )

            return make_sizeof(expression=self._parse_unary())

    def _parse_cast(self) -> Expression:
        """Parse cast expression (type)expr; only single-word types."""
        lparen = self._expect(CTokenType.LPAREN, "'('")

        specifier = self._parse_declaration_specifiers()
        if specifier.storage or specifier.qualifiers or len(specifier.type_specifiers) != 1:
            raise self._unsupported(
                f"cast to '{specifier}'",
                lparen,
                hint="cast to a single base type such as (int) or (char)",
            )
        if self._check(CTokenType.STAR):
            raise self._unsupported("pointer cast", self._peek())

        self._expect(CTokenType.RPAREN, "')'")
        operand = self._parse_unary()

        return Cast(specifier.type_specifiers[0], operand)

    def _parse_postfix(self) -> Expression:
        """Parse postfix expression (calls, subscripts, members, ++, --)."""
        expr = self._parse_primary()

        while True:
            token = self._peek()

            if self._match(CTokenType.LPAREN):
                expr = self._parse_call(expr, token)

            elif self._match(CTokenType.LBRACKET):
                index = self._parse_expression()
                self._expect(CTokenType.RBRACKET, "']'")
                expr = Index(expr, index)

            elif self._match(CTokenType.DOT):
                member_token = self._expect(CTokenType.IDENTIFIER, "member name")
                expr = Member(expr, self._symbol(member_token))

            elif self._match(CTokenType.ARROW):
                member_token = self._expect(CTokenType.IDENTIFIER, "member name")
                expr = PointerMember(expr, self._symbol(member_token))

            else:
                op = postfix_op_from_token(token)
                if op is None:
                    break
                self._advance()
                expr = Postfix(op, expr)

        return expr

    def _parse_call(self, callee: Expression, lparen: CToken) -> FunctionCall:
        """Parse function call arguments after '('."""
        if not isinstance(callee, Variable):
            raise self._unsupported(
                "call through an expression",
                lparen,
                hint="call functions by name",
            )

        arguments = []
        if not self._check(CTokenType.RPAREN):
            while True:
                arguments.append(self._parse_expression())
                if not self._match(CTokenType.COMMA):
                    break

        self._expect(CTokenType.RPAREN, "')'")
        return FunctionCall(callee.name, tuple(arguments))

    def _parse_primary(self) -> Expression:
        """Parse primary expression (literals, identifiers, parenthesized)."""
        token = self._peek()

        if token.type in _LITERAL_KINDS:
            self._advance()
            return Literal(_LITERAL_KINDS[token.type], token.value)

        if token.type == CTokenType.IDENTIFIER:
            self._advance()
            return Variable(self._symbol(token))

        if token.type == CTokenType.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(CTokenType.RPAREN, "')'")
            return Parenthesized(expr)

        raise self._unexpected("expression")


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    options: Optional[FrontendOptions] = None,
    interner: Optional[StringInterner] = None,
) -> Program:
    """
    Parse C source code into a Program.

    This is a convenience function that combines lexing and parsing.

    Raises:
        GrammarError: If lexing or parsing fails
    """
    lexer = CLexer(source, filename)
    tokens = list(lexer.tokenize())
    parser = CParser(tokens, filename, source.splitlines(), options, interner)
    return parser.parse()


def parse_expression_source(
    text: str,
    interner: Optional[StringInterner] = None,
) -> Expression:
    """
    Parse a standalone expression such as ``a = b + c * 2``.

    Raises:
        GrammarError: If the text is not exactly one expression
    """
    tokens = list(CLexer(text, "<expression>").tokenize())
    parser = CParser(tokens, "<expression>", text.splitlines(), interner=interner)
    return parser.parse_expression()
