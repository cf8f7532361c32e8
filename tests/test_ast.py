"""
Tree Construction Tests
=======================

Tests for direct construction of expression, statement and declaration
nodes, plus the visitor and printer.

Test Organization
-----------------
- TestExpressions: leaves, sizeof, casts, calls, member access
- TestStatements: if/for optionality, blocks
- TestDeclarations: variables, functions, structs, program order
- TestImmutability: frozen nodes and tuple children
- TestVisitor / TestPrinter: traversal helpers
"""

import dataclasses

import pytest
from subc_frontend.grammar.errors import (
    MalformedCompositionError,
    UnsupportedConstructError,
)
from subc_frontend.grammar.interner import intern
from subc_frontend.grammar.operators import (
    Assign,
    AssignOp,
    BinaryOperator,
    PostfixOp,
    UnaryOp,
)
from subc_frontend.grammar.types import (
    ArrayDeclarator,
    DeclarationSpecifier,
    NO_DECLARATOR,
    PointerDeclarator,
    SPEC_CHAR,
    SPEC_INT,
    SPEC_VOID,
)
from subc_frontend.grammar.ast import (
    ASTPrinter,
    ASTVisitor,
    Binary,
    Block,
    BlockStatement,
    Break,
    Cast,
    Continue,
    Declaration,
    DeclarationStatement,
    ExpressionStatement,
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
    Sizeof,
    SizeofExpression,
    SizeofType,
    StructDeclaration,
    Unary,
    Variable,
    VariableDeclaration,
    While,
    make_sizeof,
)


INT = DeclarationSpecifier(type_specifiers=(SPEC_INT,))


def var(name: str) -> Variable:
    return Variable(intern(name))


def num(value: int) -> Literal:
    return Literal(LiteralKind.INT, value)


# =============================================================================
# Expression Tests
# =============================================================================

class TestExpressions:
    """Tests for expression node construction."""

    def test_literals(self):
        assert Literal(LiteralKind.INT, 42).value == 42
        assert Literal(LiteralKind.DOUBLE, 1.5).value == 1.5
        assert Literal(LiteralKind.CHAR, ord("a")).value == 97
        assert Literal(LiteralKind.STRING, "hi").value == "hi"

    @pytest.mark.parametrize("kind,value", [
        (LiteralKind.INT, "42"),
        (LiteralKind.INT, True),
        (LiteralKind.DOUBLE, 1),
        (LiteralKind.STRING, 5),
    ])
    def test_literal_value_must_match_kind(self, kind, value):
        with pytest.raises(MalformedCompositionError):
            Literal(kind, value)

    def test_sizeof_type(self):
        node = make_sizeof(declaration=Declaration(INT))
        assert isinstance(node, Sizeof)
        assert isinstance(node.operand, SizeofType)
        assert node.operand.declaration.is_abstract

    def test_sizeof_expression(self):
        node = make_sizeof(expression=var("x"))
        assert isinstance(node.operand, SizeofExpression)
        assert node.operand.expression == var("x")

    def test_sizeof_forms_are_distinct(self):
        by_type = make_sizeof(declaration=Declaration(INT))
        by_expr = make_sizeof(expression=var("x"))
        assert type(by_type.operand) is not type(by_expr.operand)

    def test_sizeof_needs_exactly_one_operand(self):
        with pytest.raises(MalformedCompositionError):
            make_sizeof()
        with pytest.raises(MalformedCompositionError):
            make_sizeof(declaration=Declaration(INT), expression=var("x"))

    def test_sizeof_rejects_bare_expression(self):
        with pytest.raises(MalformedCompositionError):
            Sizeof(var("x"))

    def test_cast(self):
        node = Cast(SPEC_CHAR, var("x"))
        assert node.target == SPEC_CHAR
        with pytest.raises(MalformedCompositionError):
            Cast(INT, var("x"))

    def test_function_call(self):
        call = FunctionCall(intern("f"), [num(1), var("y")])
        assert call.arguments == (num(1), var("y"))
        assert FunctionCall(intern("g")).arguments == ()

    def test_call_needs_name(self):
        with pytest.raises(MalformedCompositionError):
            FunctionCall(var("f"), ())

    def test_member_kinds_are_distinct(self):
        dot = Member(var("p"), intern("x"))
        arrow = PointerMember(var("p"), intern("x"))
        assert dot != arrow
        assert not isinstance(arrow, Member)

    def test_assignment_is_binary(self):
        node = Binary(Assign(AssignOp.PLUS), var("x"), num(1))
        assert node.is_assignment
        assert not Binary(BinaryOperator.ADD, var("x"), num(1)).is_assignment

    def test_binary_rejects_unary_operator(self):
        with pytest.raises(MalformedCompositionError):
            Binary(UnaryOp.NEGATE, var("x"), num(1))

    def test_children_must_be_expressions(self):
        with pytest.raises(MalformedCompositionError):
            Unary(UnaryOp.NEGATE, 5)
        with pytest.raises(MalformedCompositionError):
            Postfix(PostfixOp.INCREMENT, Break())
        with pytest.raises(MalformedCompositionError):
            Index(var("a"), None)


# =============================================================================
# Statement Tests
# =============================================================================

class TestStatements:
    """Tests for statement node construction."""

    def test_if_without_else(self):
        node = If(var("c"), ExpressionStatement(var("x")))
        assert node.else_branch is None

    def test_for_all_clauses_absent(self):
        body = BlockStatement(Block((Break(),)))
        node = For(None, None, None, body)
        assert (node.init, node.condition, node.step) == (None, None, None)

    def test_for_init_must_be_declaration(self):
        with pytest.raises(MalformedCompositionError):
            For(var("i"), None, None, Break())

    def test_block_statement_order(self):
        block = Block([Break(), Continue(), Return(num(0))])
        assert block.statements == (Break(), Continue(), Return(num(0)))

    def test_block_rejects_expression(self):
        with pytest.raises(MalformedCompositionError):
            Block([var("x")])

    def test_while_body_must_be_statement(self):
        with pytest.raises(MalformedCompositionError):
            While(var("c"), var("x"))


# =============================================================================
# Declaration Tests
# =============================================================================

class TestDeclarations:
    """Tests for declaration node construction."""

    def test_variable(self):
        decl = VariableDeclaration(Declaration(INT, NO_DECLARATOR, intern("x")), num(1))
        assert decl.name == intern("x")
        assert decl.initializer == num(1)

    def test_variable_needs_name(self):
        with pytest.raises(MalformedCompositionError, match="requires a name"):
            VariableDeclaration(Declaration(INT))

    def test_function_prototype(self):
        func = FunctionDeclaration(
            Declaration(INT, NO_DECLARATOR, intern("f")),
            [Declaration(INT)],
        )
        assert func.is_prototype
        assert func.parameters == (Declaration(INT),)

    def test_function_definition(self):
        func = FunctionDeclaration(
            Declaration(DeclarationSpecifier(type_specifiers=(SPEC_VOID,)), NO_DECLARATOR, intern("f")),
            (),
            False,
            Block(),
        )
        assert not func.is_prototype

    def test_varargs_unsupported(self):
        with pytest.raises(UnsupportedConstructError, match="variadic"):
            FunctionDeclaration(
                Declaration(INT, NO_DECLARATOR, intern("printf")),
                (),
                True,
            )

    def test_empty_struct_representable(self):
        node = StructDeclaration(intern("Empty"))
        assert node.members == ()

    def test_struct_members_need_names(self):
        with pytest.raises(MalformedCompositionError):
            StructDeclaration(intern("S"), [Declaration(INT)])

    def test_program_keeps_order(self):
        units = [
            StructDeclaration(intern("S")),
            VariableDeclaration(Declaration(INT, NO_DECLARATOR, intern("g"))),
            FunctionDeclaration(Declaration(INT, NO_DECLARATOR, intern("main")), body=Block()),
        ]
        program = Program(units)
        assert program.units == tuple(units)
        assert [str(f.name) for f in program.functions] == ["main"]
        assert [str(v.name) for v in program.variables] == ["g"]
        assert [str(s.name) for s in program.structs] == ["S"]

    def test_program_rejects_statements(self):
        with pytest.raises(MalformedCompositionError):
            Program([Break()])


# =============================================================================
# Immutability Tests
# =============================================================================

class TestImmutability:
    """Nodes cannot change after construction."""

    def test_frozen(self):
        node = Binary(BinaryOperator.ADD, var("a"), var("b"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.left = var("c")

    def test_lists_become_tuples(self):
        args = [num(1)]
        call = FunctionCall(intern("f"), args)
        args.append(num(2))
        assert call.arguments == (num(1),)

    def test_equal_trees_compare_equal(self):
        a = Binary(BinaryOperator.ADD, var("x"), Parenthesized(num(1)))
        b = Binary(BinaryOperator.ADD, var("x"), Parenthesized(num(1)))
        assert a == b
        assert hash(a) == hash(b)


# =============================================================================
# Visitor and Printer Tests
# =============================================================================

class TestVisitor:
    """Tests for generic traversal."""

    def test_counts_variables(self):
        class VariableCounter(ASTVisitor):
            def __init__(self):
                self.names = []

            def visit_Variable(self, node):
                self.names.append(str(node.name))

        tree = Block([
            ExpressionStatement(Binary(Assign(), var("x"), FunctionCall(intern("f"), [var("y")]))),
            Return(Index(var("a"), var("i"))),
        ])
        counter = VariableCounter()
        counter.visit(tree)
        assert counter.names == ["x", "y", "a", "i"]

    def test_visits_sizeof_declaration(self):
        seen = []

        class DeclarationCollector(ASTVisitor):
            def visit_Declaration(self, node):
                seen.append(node)

        DeclarationCollector().visit(make_sizeof(declaration=Declaration(INT)))
        assert seen == [Declaration(INT)]


class TestPrinter:
    """Tests for ASTPrinter output."""

    def test_program(self):
        program = Program([
            StructDeclaration(intern("P"), [Declaration(INT, NO_DECLARATOR, intern("x"))]),
            VariableDeclaration(
                Declaration(INT, ArrayDeclarator(PointerDeclarator(), 3), intern("t"))
            ),
            FunctionDeclaration(
                Declaration(INT, NO_DECLARATOR, intern("main")),
                body=Block([
                    DeclarationStatement(
                        VariableDeclaration(Declaration(INT, NO_DECLARATOR, intern("i")), num(0))
                    ),
                    While(
                        Binary(BinaryOperator.LESS_THAN, var("i"), num(3)),
                        BlockStatement(Block([ExpressionStatement(Postfix(PostfixOp.INCREMENT, var("i")))])),
                    ),
                    Return(var("i")),
                ]),
            ),
        ])
        assert ASTPrinter().print(program) == "\n".join([
            "Program",
            "  Struct: P",
            "    Member: x: int",
            "  Variable: t: array[3] of pointer to int",
            "  Function: main() -> int",
            "    Block",
            "      Decl: i: int = 0",
            "      While ((i < 3))",
            "        Block",
            "          Expr: (i++)",
            "      Return i",
        ])

    def test_expression_forms(self):
        printer = ASTPrinter()
        assert printer._expr_str(Cast(SPEC_CHAR, var("x"))) == "((char) x)"
        assert printer._expr_str(PointerMember(var("p"), intern("next"))) == "p->next"
        assert printer._expr_str(Literal(LiteralKind.CHAR, ord("a"))) == "'a'"
        assert printer._expr_str(make_sizeof(declaration=Declaration(INT))) == "sizeof(int)"
