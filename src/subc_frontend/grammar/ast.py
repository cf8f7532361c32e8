"""
subc Abstract Syntax Tree (AST) Definitions
===========================================

This module defines the node types built by the parser driver and read
by semantic analysis and code generation.

Node Hierarchy
--------------
ASTNode (base)
├── Program - ordered top-level units (translation-unit order)
├── Declaration - (specifier, declarator shape, optional name)
├── ExternalDeclaration
│   ├── VariableDeclaration - declaration + optional initializer
│   ├── FunctionDeclaration - return declaration, parameters, body
│   └── StructDeclaration - struct tag + ordered members
├── Block - ordered statements
├── Statement
│   ├── ExpressionStatement
│   ├── DeclarationStatement
│   ├── If - condition, then branch, optional else branch
│   ├── While
│   ├── For - optional init declaration, condition, step
│   ├── Break / Continue
│   ├── Return - optional value
│   └── BlockStatement - nested block
├── TypeOrExpression (sizeof operand)
│   ├── SizeofType
│   └── SizeofExpression
└── Expression
    ├── Literal / Variable
    ├── Sizeof / Parenthesized
    ├── Postfix / Unary / Binary
    ├── FunctionCall / Index
    ├── Member / PointerMember
    └── Cast

Design Notes
------------
- Nodes are frozen dataclasses; sequences are tuples. Lists passed to a
  constructor are converted, so a built tree cannot be edited in place.
- Every child is owned by exactly one parent.
- Nodes carry no source positions; the parser driver owns those.
- Constructors check the shape of their children and raise
  MalformedCompositionError (or UnsupportedConstructError) rather than
  return a partially valid node.
- Assignment is a Binary node whose operator is Assign(AssignOp).
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional, Union

from subc_frontend.grammar.errors import (
    MalformedCompositionError,
    UnsupportedConstructError,
)
from subc_frontend.grammar.interner import Symbol
from subc_frontend.grammar.operators import (
    Assign,
    BinaryOp,
    BinaryOperator,
    PostfixOp,
    UnaryOp,
)
from subc_frontend.grammar.types import (
    DeclarationSpecifier,
    DeclaratorType,
    NO_DECLARATOR,
    TypeSpecifier,
    describe_type,
)


def _require(value: Any, expected: Union[type, tuple], role: str) -> None:
    """Raise MalformedCompositionError unless value is an instance of expected."""
    if not isinstance(value, expected):
        raise MalformedCompositionError(
            f"{role} cannot be {type(value).__name__}"
        )


def _require_optional(value: Any, expected: Union[type, tuple], role: str) -> None:
    if value is not None:
        _require(value, expected, role)


def _freeze_sequence(node: "ASTNode", name: str, expected: type, role: str) -> None:
    """Convert a list field to a tuple and check every element."""
    items = tuple(getattr(node, name))
    for item in items:
        _require(item, expected, role)
    object.__setattr__(node, name, items)


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""


@dataclass(frozen=True)
class Expression(ASTNode):
    """Base class for all expression nodes."""


@dataclass(frozen=True)
class Statement(ASTNode):
    """Base class for all statement nodes."""


@dataclass(frozen=True)
class ExternalDeclaration(ASTNode):
    """Base class for top-level program units."""


# =============================================================================
# Declarations
# =============================================================================

@dataclass(frozen=True)
class Declaration(ASTNode):
    """
    A name (or no name) with its declared type.

    Attributes:
        specifier: Storage, qualifiers and base type words
        declarator: Pointer/array shape applied to the base type
        ident: The declared name; None only in type-only contexts such as
               the operand of sizeof or an unnamed prototype parameter
    """
    specifier: DeclarationSpecifier
    declarator: DeclaratorType = NO_DECLARATOR
    ident: Optional[Symbol] = None

    def __post_init__(self):
        _require(self.specifier, DeclarationSpecifier, "declaration specifier")
        _require(self.declarator, DeclaratorType, "declarator")
        _require_optional(self.ident, Symbol, "declared name")

    @property
    def is_abstract(self) -> bool:
        """True for a type-only declaration (no name)."""
        return self.ident is None

    def describe(self) -> str:
        return describe_type(self.specifier, self.declarator)


@dataclass(frozen=True)
class VariableDeclaration(ExternalDeclaration):
    """
    Variable declaration (global, local, or for-loop init).

        int x;
        static const int *x[3];
        char c = 'a';

    Attributes:
        declaration: The declared name and type (must be named)
        initializer: Optional initializing expression
    """
    declaration: Declaration
    initializer: Optional[Expression] = None

    def __post_init__(self):
        _require(self.declaration, Declaration, "variable declaration")
        if self.declaration.is_abstract:
            raise MalformedCompositionError("variable declaration requires a name")
        _require_optional(self.initializer, Expression, "initializer")

    @property
    def name(self) -> Symbol:
        return self.declaration.ident


@dataclass(frozen=True)
class FunctionDeclaration(ExternalDeclaration):
    """
    Function definition, or prototype when body is None.

    Attributes:
        declaration: Return type and function name
        parameters: Parameter declarations in order
        varargs: Always False; varargs are not part of the subset
        body: Function body, None for a prototype
    """
    declaration: Declaration
    parameters: tuple[Declaration, ...] = ()
    varargs: bool = False
    body: Optional["Block"] = None

    def __post_init__(self):
        _require(self.declaration, Declaration, "function declaration")
        if self.declaration.is_abstract:
            raise MalformedCompositionError("function declaration requires a name")
        _freeze_sequence(self, "parameters", Declaration, "function parameter")
        if self.varargs:
            raise UnsupportedConstructError(
                "variadic function",
                hint="declare a fixed parameter list",
            )
        _require_optional(self.body, Block, "function body")

    @property
    def name(self) -> Symbol:
        return self.declaration.ident

    @property
    def is_prototype(self) -> bool:
        return self.body is None


@dataclass(frozen=True)
class StructDeclaration(ExternalDeclaration):
    """
    Struct layout. Member order determines layout in later phases.

    Attributes:
        name: The struct tag
        members: Member declarations in order (may be empty)
    """
    name: Symbol
    members: tuple[Declaration, ...] = ()

    def __post_init__(self):
        _require(self.name, Symbol, "struct name")
        _freeze_sequence(self, "members", Declaration, "struct member")
        for member in self.members:
            if member.is_abstract:
                raise MalformedCompositionError(
                    f"member of struct {self.name} requires a name"
                )


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass(frozen=True)
class Program(ASTNode):
    """
    Root node: all top-level units in translation-unit order.

    Attributes:
        units: Variable, function and struct declarations
    """
    units: tuple[ExternalDeclaration, ...] = ()

    def __post_init__(self):
        _freeze_sequence(self, "units", ExternalDeclaration, "top-level unit")

    @property
    def functions(self) -> tuple[FunctionDeclaration, ...]:
        return tuple(u for u in self.units if isinstance(u, FunctionDeclaration))

    @property
    def variables(self) -> tuple[VariableDeclaration, ...]:
        return tuple(u for u in self.units if isinstance(u, VariableDeclaration))

    @property
    def structs(self) -> tuple[StructDeclaration, ...]:
        return tuple(u for u in self.units if isinstance(u, StructDeclaration))


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass(frozen=True)
class Block(ASTNode):
    """
    Ordered statements; order is execution order.

    Attributes:
        statements: The statements in the block
    """
    statements: tuple[Statement, ...] = ()

    def __post_init__(self):
        _freeze_sequence(self, "statements", Statement, "block statement")


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """Expression used as a statement: ``f(x);`` or ``x = 5;``."""
    expression: Expression

    def __post_init__(self):
        _require(self.expression, Expression, "expression statement")


@dataclass(frozen=True)
class DeclarationStatement(Statement):
    """Local variable declaration in a block."""
    declaration: VariableDeclaration

    def __post_init__(self):
        _require(self.declaration, VariableDeclaration, "declaration statement")


@dataclass(frozen=True)
class If(Statement):
    """
    If statement; else_branch is None when there is no else.

    Attributes:
        condition: The condition expression
        then_branch: Statement executed if condition is true
        else_branch: Optional statement executed if condition is false
    """
    condition: Expression
    then_branch: Statement
    else_branch: Optional[Statement] = None

    def __post_init__(self):
        _require(self.condition, Expression, "if condition")
        _require(self.then_branch, Statement, "if branch")
        _require_optional(self.else_branch, Statement, "else branch")


@dataclass(frozen=True)
class While(Statement):
    """While loop."""
    condition: Expression
    body: Statement

    def __post_init__(self):
        _require(self.condition, Expression, "while condition")
        _require(self.body, Statement, "while body")


@dataclass(frozen=True)
class For(Statement):
    """
    For loop. Each clause is independent and may be absent; with all
    three absent the loop runs until a break.

    Attributes:
        init: Optional loop variable declaration
        condition: Optional loop condition
        step: Optional expression evaluated after each iteration
        body: Loop body
    """
    init: Optional[VariableDeclaration]
    condition: Optional[Expression]
    step: Optional[Expression]
    body: Statement

    def __post_init__(self):
        _require_optional(self.init, VariableDeclaration, "for initializer")
        _require_optional(self.condition, Expression, "for condition")
        _require_optional(self.step, Expression, "for step")
        _require(self.body, Statement, "for body")


@dataclass(frozen=True)
class Break(Statement):
    """Break out of the innermost loop."""


@dataclass(frozen=True)
class Continue(Statement):
    """Skip to the next iteration of the innermost loop."""


@dataclass(frozen=True)
class Return(Statement):
    """Return statement with optional value."""
    value: Optional[Expression] = None

    def __post_init__(self):
        _require_optional(self.value, Expression, "return value")


@dataclass(frozen=True)
class BlockStatement(Statement):
    """Nested block used as a statement."""
    block: Block

    def __post_init__(self):
        _require(self.block, Block, "nested block")


# =============================================================================
# Expression Nodes
# =============================================================================

class LiteralKind(Enum):
    """Kinds of literal value."""
    INT = auto()     # 42, 0x2A
    DOUBLE = auto()  # 1.5
    CHAR = auto()    # 'a' (value is the character code)
    STRING = auto()  # "text"


_LITERAL_VALUE_TYPES = {
    LiteralKind.INT: int,
    LiteralKind.DOUBLE: float,
    LiteralKind.CHAR: int,
    LiteralKind.STRING: str,
}


@dataclass(frozen=True)
class Literal(Expression):
    """
    Literal value.

    Attributes:
        kind: What sort of literal
        value: int for INT and CHAR, float for DOUBLE, str for STRING
    """
    kind: LiteralKind
    value: int | float | str

    def __post_init__(self):
        _require(self.kind, LiteralKind, "literal kind")
        expected = _LITERAL_VALUE_TYPES[self.kind]
        if isinstance(self.value, bool) or not isinstance(self.value, expected):
            raise MalformedCompositionError(
                f"{self.kind.name.lower()} literal cannot hold {self.value!r}"
            )


@dataclass(frozen=True)
class Variable(Expression):
    """Reference to a named variable."""
    name: Symbol

    def __post_init__(self):
        _require(self.name, Symbol, "variable name")


@dataclass(frozen=True)
class TypeOrExpression(ASTNode):
    """Operand of sizeof: exactly one of a type or an expression."""


@dataclass(frozen=True)
class SizeofType(TypeOrExpression):
    """``sizeof(int)``: a type-only declaration."""
    declaration: Declaration

    def __post_init__(self):
        _require(self.declaration, Declaration, "sizeof type")


@dataclass(frozen=True)
class SizeofExpression(TypeOrExpression):
    """``sizeof x``: an expression operand."""
    expression: Expression

    def __post_init__(self):
        _require(self.expression, Expression, "sizeof expression")


@dataclass(frozen=True)
class Sizeof(Expression):
    """sizeof over a type or an expression."""
    operand: TypeOrExpression

    def __post_init__(self):
        _require(self.operand, (SizeofType, SizeofExpression), "sizeof operand")


def make_sizeof(
    declaration: Optional[Declaration] = None,
    expression: Optional[Expression] = None,
) -> Sizeof:
    """
    Build a sizeof node from whichever operand the parser found.

    Raises:
        MalformedCompositionError: Unless exactly one operand is given
    """
    if (declaration is None) == (expression is None):
        raise MalformedCompositionError(
            "sizeof requires exactly one of a type or an expression"
        )
    if declaration is not None:
        return Sizeof(SizeofType(declaration))
    return Sizeof(SizeofExpression(expression))


@dataclass(frozen=True)
class Parenthesized(Expression):
    """Expression written in parentheses."""
    inner: Expression

    def __post_init__(self):
        _require(self.inner, Expression, "parenthesized expression")


@dataclass(frozen=True)
class Postfix(Expression):
    """Postfix increment or decrement: ``x++``."""
    op: PostfixOp
    operand: Expression

    def __post_init__(self):
        _require(self.op, PostfixOp, "postfix operator")
        _require(self.operand, Expression, "postfix operand")


@dataclass(frozen=True)
class Unary(Expression):
    """Prefix unary operation: ``-x``, ``*p``, ``&x``, ``++x``."""
    op: UnaryOp
    operand: Expression

    def __post_init__(self):
        _require(self.op, UnaryOp, "unary operator")
        _require(self.operand, Expression, "unary operand")


@dataclass(frozen=True)
class Binary(Expression):
    """
    Binary operation, including every form of assignment.

    Attributes:
        op: BinaryOperator, or Assign(AssignOp) for =, +=, ...
        left: Left operand (the target for assignments)
        right: Right operand
    """
    op: BinaryOp
    left: Expression
    right: Expression

    def __post_init__(self):
        _require(self.op, (BinaryOperator, Assign), "binary operator")
        _require(self.left, Expression, "left operand")
        _require(self.right, Expression, "right operand")

    @property
    def is_assignment(self) -> bool:
        return isinstance(self.op, Assign)


@dataclass(frozen=True)
class FunctionCall(Expression):
    """
    Call of a named function; calls through pointers are not modeled.

    Attributes:
        callee: Function name
        arguments: Argument expressions in order (may be empty)
    """
    callee: Symbol
    arguments: tuple[Expression, ...] = ()

    def __post_init__(self):
        _require(self.callee, Symbol, "callee")
        _freeze_sequence(self, "arguments", Expression, "call argument")


@dataclass(frozen=True)
class Index(Expression):
    """Subscript: ``target[index]``."""
    target: Expression
    index: Expression

    def __post_init__(self):
        _require(self.target, Expression, "subscripted expression")
        _require(self.index, Expression, "subscript")


@dataclass(frozen=True)
class Member(Expression):
    """Member access: ``target.member``."""
    target: Expression
    member: Symbol

    def __post_init__(self):
        _require(self.target, Expression, "member access target")
        _require(self.member, Symbol, "member name")


@dataclass(frozen=True)
class PointerMember(Expression):
    """Member access through a pointer: ``target->member``."""
    target: Expression
    member: Symbol

    def __post_init__(self):
        _require(self.target, Expression, "member access target")
        _require(self.member, Symbol, "member name")


@dataclass(frozen=True)
class Cast(Expression):
    """
    Cast to a single base type word: ``(int) x``.

    Attributes:
        target: The type specifier cast to
        operand: The expression being cast
    """
    target: TypeSpecifier
    operand: Expression

    def __post_init__(self):
        _require(self.target, TypeSpecifier, "cast type")
        _require(self.operand, Expression, "cast operand")


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches on node class name. Unhandled nodes fall through to
    generic_visit, which visits child nodes in field order.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_FunctionCall(self, node):
                self.calls += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode) -> Any:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, tuple):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(program))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def _nested(self, node: ASTNode) -> None:
        self._indent()
        self.visit(node)
        self._dedent()

    def visit_Program(self, node: Program):
        self._emit("Program")
        self._indent()
        for unit in node.units:
            self.visit(unit)
        self._dedent()

    def visit_StructDeclaration(self, node: StructDeclaration):
        self._emit(f"Struct: {node.name}")
        self._indent()
        for member in node.members:
            self._emit(f"Member: {self._decl_str(member)}")
        self._dedent()

    def visit_FunctionDeclaration(self, node: FunctionDeclaration):
        params = ", ".join(self._decl_str(p) for p in node.parameters)
        kind = "Prototype" if node.is_prototype else "Function"
        self._emit(f"{kind}: {node.name}({params}) -> {node.declaration.describe()}")
        if node.body is not None:
            self._nested(node.body)

    def visit_VariableDeclaration(self, node: VariableDeclaration):
        self._emit(f"Variable: {self._var_str(node)}")

    def visit_Block(self, node: Block):
        self._emit("Block")
        self._indent()
        for stmt in node.statements:
            self.visit(stmt)
        self._dedent()

    def visit_BlockStatement(self, node: BlockStatement):
        self.visit(node.block)

    def visit_DeclarationStatement(self, node: DeclarationStatement):
        self._emit(f"Decl: {self._var_str(node.declaration)}")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self._expr_str(node.expression)}")

    def visit_If(self, node: If):
        self._emit(f"If ({self._expr_str(node.condition)})")
        self._indent()
        self._emit("Then:")
        self._nested(node.then_branch)
        if node.else_branch is not None:
            self._emit("Else:")
            self._nested(node.else_branch)
        self._dedent()

    def visit_While(self, node: While):
        self._emit(f"While ({self._expr_str(node.condition)})")
        self._nested(node.body)

    def visit_For(self, node: For):
        init = self._var_str(node.init) if node.init is not None else ""
        cond = self._expr_str(node.condition)
        step = self._expr_str(node.step)
        self._emit(f"For ({init}; {cond}; {step})")
        self._nested(node.body)

    def visit_Return(self, node: Return):
        if node.value is not None:
            self._emit(f"Return {self._expr_str(node.value)}")
        else:
            self._emit("Return")

    def visit_Break(self, node: Break):
        self._emit("Break")

    def visit_Continue(self, node: Continue):
        self._emit("Continue")

    def _decl_str(self, decl: Declaration) -> str:
        if decl.ident is None:
            return decl.describe()
        return f"{decl.ident}: {decl.describe()}"

    def _var_str(self, node: VariableDeclaration) -> str:
        text = self._decl_str(node.declaration)
        if node.initializer is not None:
            text += f" = {self._expr_str(node.initializer)}"
        return text

    def _expr_str(self, expr: Optional[Expression]) -> str:
        """Convert expression to string representation."""
        if expr is None:
            return ""
        if isinstance(expr, Literal):
            if expr.kind is LiteralKind.CHAR:
                return repr(chr(expr.value))
            if expr.kind is LiteralKind.STRING:
                return f'"{expr.value}"'
            return str(expr.value)
        if isinstance(expr, Variable):
            return str(expr.name)
        if isinstance(expr, Sizeof):
            if isinstance(expr.operand, SizeofType):
                return f"sizeof({expr.operand.declaration.describe()})"
            return f"sizeof {self._expr_str(expr.operand.expression)}"
        if isinstance(expr, Parenthesized):
            return f"({self._expr_str(expr.inner)})"
        if isinstance(expr, Postfix):
            return f"({self._expr_str(expr.operand)}{expr.op})"
        if isinstance(expr, Unary):
            return f"({expr.op}{self._expr_str(expr.operand)})"
        if isinstance(expr, Binary):
            return f"({self._expr_str(expr.left)} {expr.op} {self._expr_str(expr.right)})"
        if isinstance(expr, FunctionCall):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.callee}({args})"
        if isinstance(expr, Index):
            return f"{self._expr_str(expr.target)}[{self._expr_str(expr.index)}]"
        if isinstance(expr, Member):
            return f"{self._expr_str(expr.target)}.{expr.member}"
        if isinstance(expr, PointerMember):
            return f"{self._expr_str(expr.target)}->{expr.member}"
        if isinstance(expr, Cast):
            return f"(({expr.target}) {self._expr_str(expr.operand)})"
        raise TypeError(f"unknown expression node {type(expr).__name__}")
