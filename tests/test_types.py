"""
Type Model Tests
================

Tests for type specifiers, declaration specifiers, declarator shapes and
specifier resolution.

Test Organization
-----------------
- TestTypeSpecifier: base type words and struct names
- TestDeclarationSpecifier: storage/qualifier/type grouping
- TestDeclaratorShapes: pointer/array nesting and round trips
- TestResolveTypeSpecifiers: word combinations to concrete types
- TestDescribeType: readable rendering
"""

import dataclasses

import pytest
from subc_frontend.grammar.errors import (
    MalformedCompositionError,
    UnsupportedConstructError,
)
from subc_frontend.grammar.interner import intern
from subc_frontend.grammar.lexer import CLexer
from subc_frontend.grammar.types import (
    ArrayDeclarator,
    BaseType,
    DeclarationSpecifier,
    DeclaratorKind,
    DeclaratorLayer,
    NO_DECLARATOR,
    PointerDeclarator,
    ResolvedType,
    SPEC_CHAR,
    SPEC_DOUBLE,
    SPEC_INT,
    SPEC_LONG,
    SPEC_SIGNED,
    SPEC_UNSIGNED,
    SPEC_VOID,
    StorageSpecifier,
    TerminalDeclarator,
    TypeQualifier,
    TypeSpecifier,
    TypeSpecifierKind,
    build_declarator,
    describe_type,
    resolve_type_specifiers,
    storage_specifier_from_token,
    type_qualifier_from_token,
    type_specifier_from_token,
)


def token(text: str):
    return next(iter(CLexer(text, "test.c").tokenize()))


# =============================================================================
# Specifier Tests
# =============================================================================

class TestTypeSpecifier:
    """Tests for single base type words."""

    @pytest.mark.parametrize("text,expected", [
        ("void", SPEC_VOID),
        ("char", SPEC_CHAR),
        ("int", SPEC_INT),
        ("long", SPEC_LONG),
        ("double", SPEC_DOUBLE),
        ("signed", SPEC_SIGNED),
        ("unsigned", SPEC_UNSIGNED),
    ])
    def test_from_token(self, text, expected):
        assert type_specifier_from_token(token(text)) == expected

    @pytest.mark.parametrize("text", ["static", "const", "struct", "x", "+"])
    def test_not_a_type_word(self, text):
        assert type_specifier_from_token(token(text)) is None

    def test_storage_and_qualifier_from_token(self):
        assert storage_specifier_from_token(token("static")) is StorageSpecifier.STATIC
        assert storage_specifier_from_token(token("const")) is None
        assert type_qualifier_from_token(token("const")) is TypeQualifier.CONST
        assert type_qualifier_from_token(token("static")) is None

    def test_struct_specifier(self):
        spec = TypeSpecifier.struct(intern("Point"))
        assert spec.is_struct
        assert spec.struct_name == intern("Point")
        assert str(spec) == "struct Point"

    def test_struct_requires_name(self):
        with pytest.raises(MalformedCompositionError):
            TypeSpecifier(TypeSpecifierKind.STRUCT)

    def test_name_only_for_struct(self):
        with pytest.raises(MalformedCompositionError):
            TypeSpecifier(TypeSpecifierKind.INT, intern("Point"))


class TestDeclarationSpecifier:
    """Tests for the specifier group written before a declarator."""

    def test_groups(self):
        spec = DeclarationSpecifier(
            {StorageSpecifier.STATIC}, {TypeQualifier.CONST}, [SPEC_UNSIGNED, SPEC_INT]
        )
        assert spec.is_static
        assert spec.is_const
        assert spec.storage == frozenset({StorageSpecifier.STATIC})
        assert spec.type_specifiers == (SPEC_UNSIGNED, SPEC_INT)
        assert str(spec) == "static const unsigned int"

    def test_type_words_keep_order(self):
        a = DeclarationSpecifier(type_specifiers=(SPEC_UNSIGNED, SPEC_INT))
        b = DeclarationSpecifier(type_specifiers=(SPEC_INT, SPEC_UNSIGNED))
        assert a != b
        assert a.resolve() == b.resolve()

    def test_requires_type_word(self):
        with pytest.raises(MalformedCompositionError, match="no type specifier"):
            DeclarationSpecifier({StorageSpecifier.STATIC}, {TypeQualifier.CONST}, ())

    def test_rejects_non_specifier(self):
        with pytest.raises(MalformedCompositionError):
            DeclarationSpecifier(type_specifiers=("int",))

    def test_rejects_foreign_storage_and_qualifiers(self):
        with pytest.raises(MalformedCompositionError, match="storage specifier"):
            DeclarationSpecifier(storage={"static"}, type_specifiers=(SPEC_INT,))
        with pytest.raises(MalformedCompositionError, match="type qualifier"):
            DeclarationSpecifier(qualifiers={StorageSpecifier.STATIC}, type_specifiers=(SPEC_INT,))

    def test_immutable(self):
        spec = DeclarationSpecifier(type_specifiers=(SPEC_INT,))
        with pytest.raises(dataclasses.FrozenInstanceError):
            spec.storage = frozenset()


# =============================================================================
# Declarator Shape Tests
# =============================================================================

class TestDeclaratorShapes:
    """Tests for pointer and array nesting."""

    def test_terminal(self):
        assert NO_DECLARATOR == TerminalDeclarator()
        assert NO_DECLARATOR.is_terminal
        assert NO_DECLARATOR.layers() == ()
        assert NO_DECLARATOR.depth == 0

    def test_unbounded_pointer_depth(self):
        shape = NO_DECLARATOR
        for _ in range(50):
            shape = PointerDeclarator(shape)
        assert shape.depth == 50
        assert all(layer.kind is DeclaratorKind.POINTER for layer in shape.layers())

    def test_pointer_to_array_is_not_array_of_pointer(self):
        pointer_to_array = PointerDeclarator(ArrayDeclarator(NO_DECLARATOR, 4))
        array_of_pointer = ArrayDeclarator(PointerDeclarator(NO_DECLARATOR), 4)
        assert pointer_to_array != array_of_pointer
        assert str(pointer_to_array) == "pointer to array[4] of"
        assert str(array_of_pointer) == "array[4] of pointer to"

    def test_round_trip(self):
        shape = PointerDeclarator(ArrayDeclarator(NO_DECLARATOR, 4))
        layers = shape.layers()
        assert layers == (
            DeclaratorLayer(DeclaratorKind.POINTER),
            DeclaratorLayer(DeclaratorKind.ARRAY, 4),
        )
        assert build_declarator(layers) == shape

    def test_round_trip_mixed(self):
        shape = ArrayDeclarator(
            PointerDeclarator(PointerDeclarator(ArrayDeclarator(NO_DECLARATOR))), 2
        )
        assert build_declarator(shape.layers()) == shape

    def test_array_size_optional(self):
        assert ArrayDeclarator().size is None
        assert str(ArrayDeclarator()) == "array of"

    def test_negative_array_size(self):
        with pytest.raises(MalformedCompositionError, match="negative"):
            ArrayDeclarator(NO_DECLARATOR, -1)

    @pytest.mark.parametrize("size", [1.5, "3", True])
    def test_non_integer_array_size(self, size):
        with pytest.raises(MalformedCompositionError):
            ArrayDeclarator(NO_DECLARATOR, size)

    def test_inner_must_be_shape(self):
        with pytest.raises(MalformedCompositionError):
            PointerDeclarator(SPEC_INT)
        with pytest.raises(MalformedCompositionError):
            ArrayDeclarator(None, 3)

    def test_pointer_layer_cannot_have_size(self):
        with pytest.raises(MalformedCompositionError):
            build_declarator([DeclaratorLayer(DeclaratorKind.POINTER, 3)])


# =============================================================================
# Specifier Resolution Tests
# =============================================================================

class TestResolveTypeSpecifiers:
    """Tests for combining base type words into one concrete type."""

    @pytest.mark.parametrize("words,expected", [
        ([SPEC_VOID], "void"),
        ([SPEC_CHAR], "char"),
        ([SPEC_SIGNED, SPEC_CHAR], "signed char"),
        ([SPEC_UNSIGNED, SPEC_CHAR], "unsigned char"),
        ([SPEC_INT], "int"),
        ([SPEC_SIGNED], "int"),
        ([SPEC_UNSIGNED], "unsigned int"),
        ([SPEC_INT, SPEC_UNSIGNED], "unsigned int"),
        ([SPEC_LONG], "long"),
        ([SPEC_LONG, SPEC_INT], "long"),
        ([SPEC_UNSIGNED, SPEC_LONG, SPEC_INT], "unsigned long"),
        ([SPEC_DOUBLE], "double"),
    ])
    def test_resolves(self, words, expected):
        assert str(resolve_type_specifiers(words)) == expected

    def test_struct(self):
        resolved = resolve_type_specifiers([TypeSpecifier.struct(intern("Node"))])
        assert resolved == ResolvedType(BaseType.STRUCT, struct_name=intern("Node"))
        assert not resolved.is_integer

    def test_integer_flag(self):
        assert resolve_type_specifiers([SPEC_UNSIGNED, SPEC_CHAR]).is_integer
        assert not resolve_type_specifiers([SPEC_DOUBLE]).is_integer

    def test_empty_is_malformed(self):
        with pytest.raises(MalformedCompositionError):
            resolve_type_specifiers([])

    @pytest.mark.parametrize("words", [
        [SPEC_LONG, SPEC_LONG],
        [SPEC_LONG, SPEC_DOUBLE],
        [SPEC_UNSIGNED, SPEC_DOUBLE],
        [SPEC_SIGNED, SPEC_UNSIGNED],
        [SPEC_CHAR, SPEC_INT],
        [SPEC_SIGNED, SPEC_VOID],
        [SPEC_INT, TypeSpecifier.struct(intern("S"))],
    ])
    def test_unsupported_combinations(self, words):
        with pytest.raises(UnsupportedConstructError):
            resolve_type_specifiers(words)


class TestDescribeType:
    """Tests for readable type rendering."""

    def test_full_declaration(self):
        spec = DeclarationSpecifier(
            {StorageSpecifier.STATIC}, {TypeQualifier.CONST}, (SPEC_INT,)
        )
        shape = ArrayDeclarator(PointerDeclarator(NO_DECLARATOR), 3)
        assert describe_type(spec, shape) == "static array[3] of pointer to const int"

    def test_plain(self):
        spec = DeclarationSpecifier(type_specifiers=(SPEC_CHAR,))
        assert describe_type(spec, NO_DECLARATOR) == "char"
