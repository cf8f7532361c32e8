"""
subc Type Model
===============

This module implements declaration specifiers and declarator shapes,
the two halves that combine into the declared type of a name.

Specifiers
----------
A DeclarationSpecifier gathers everything written before the declarator:

- storage specifiers: static
- type qualifiers: const
- base type words, in source order: void, char, int, long, double,
  signed, unsigned, struct NAME

The base words stay as written (e.g. ``unsigned long``) and are only
combined into one concrete type by resolve_type_specifiers().

Declarator Shapes
-----------------
A declarator shape is a nested description applied to the base type:

| C declarator | Shape                                         |
|--------------|-----------------------------------------------|
| x            | TerminalDeclarator()                          |
| *x           | PointerDeclarator(TerminalDeclarator())       |
| x[3]         | ArrayDeclarator(TerminalDeclarator(), 3)      |
| *x[3]        | ArrayDeclarator(PointerDeclarator(...), 3)    |
| (*x)[3]      | PointerDeclarator(ArrayDeclarator(..., 3))    |
| **x          | PointerDeclarator(PointerDeclarator(...))     |

The outermost shape is the one that applies to the name first, so
``*x[3]`` is an array of three pointers and ``(*x)[3]`` is a pointer to
an array of three. There is no function declarator: function pointers
cannot be expressed.

Array sizes are optional; whether an unsized array is legal in a given
position is decided by semantic analysis.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Optional

from subc_frontend.grammar.errors import (
    MalformedCompositionError,
    UnsupportedConstructError,
)
from subc_frontend.grammar.interner import Symbol
from subc_frontend.grammar.lexer import CToken, CTokenType


# =============================================================================
# Specifier Enumerations
# =============================================================================

class StorageSpecifier(Enum):
    """Storage class specifiers."""
    STATIC = auto()

    def __str__(self) -> str:
        return self.name.lower()


class TypeQualifier(Enum):
    """Type qualifiers."""
    CONST = auto()

    def __str__(self) -> str:
        return self.name.lower()


class TypeSpecifierKind(Enum):
    """Base type words."""
    VOID = auto()
    CHAR = auto()
    INT = auto()
    LONG = auto()
    DOUBLE = auto()
    SIGNED = auto()
    UNSIGNED = auto()
    STRUCT = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class TypeSpecifier:
    """
    One base type word, or ``struct NAME``.

    Attributes:
        kind: Which word this is
        struct_name: The struct tag (only for STRUCT)
    """
    kind: TypeSpecifierKind
    struct_name: Optional[Symbol] = None

    def __post_init__(self):
        if self.kind is TypeSpecifierKind.STRUCT and self.struct_name is None:
            raise MalformedCompositionError("struct type specifier requires a name")
        if self.kind is not TypeSpecifierKind.STRUCT and self.struct_name is not None:
            raise MalformedCompositionError(
                f"'{self.kind}' type specifier cannot carry a struct name"
            )

    @classmethod
    def struct(cls, name: Symbol) -> "TypeSpecifier":
        return cls(TypeSpecifierKind.STRUCT, name)

    @property
    def is_struct(self) -> bool:
        return self.kind is TypeSpecifierKind.STRUCT

    def __str__(self) -> str:
        if self.is_struct:
            return f"struct {self.struct_name}"
        return str(self.kind)


# Predefined specifiers
SPEC_VOID = TypeSpecifier(TypeSpecifierKind.VOID)
SPEC_CHAR = TypeSpecifier(TypeSpecifierKind.CHAR)
SPEC_INT = TypeSpecifier(TypeSpecifierKind.INT)
SPEC_LONG = TypeSpecifier(TypeSpecifierKind.LONG)
SPEC_DOUBLE = TypeSpecifier(TypeSpecifierKind.DOUBLE)
SPEC_SIGNED = TypeSpecifier(TypeSpecifierKind.SIGNED)
SPEC_UNSIGNED = TypeSpecifier(TypeSpecifierKind.UNSIGNED)


# =============================================================================
# Token Classification
# =============================================================================

TYPE_SPECIFIER_TOKENS: dict[CTokenType, TypeSpecifier] = {
    CTokenType.VOID: SPEC_VOID,
    CTokenType.CHAR: SPEC_CHAR,
    CTokenType.INT: SPEC_INT,
    CTokenType.LONG: SPEC_LONG,
    CTokenType.DOUBLE: SPEC_DOUBLE,
    CTokenType.SIGNED: SPEC_SIGNED,
    CTokenType.UNSIGNED: SPEC_UNSIGNED,
}


def type_specifier_from_token(token: CToken) -> Optional[TypeSpecifier]:
    """
    Classify a single-word type specifier, or None.

    ``struct NAME`` spans two tokens and is assembled by the parser.
    """
    return TYPE_SPECIFIER_TOKENS.get(token.type)


def storage_specifier_from_token(token: CToken) -> Optional[StorageSpecifier]:
    if token.type == CTokenType.STATIC:
        return StorageSpecifier.STATIC
    return None


def type_qualifier_from_token(token: CToken) -> Optional[TypeQualifier]:
    if token.type == CTokenType.CONST:
        return TypeQualifier.CONST
    return None


# =============================================================================
# Declaration Specifier
# =============================================================================

@dataclass(frozen=True)
class DeclarationSpecifier:
    """
    Everything written before the declarator.

    Lists and sets passed in are normalized to tuples and frozensets so
    the specifier stays immutable.

    Attributes:
        storage: Storage specifiers (unordered)
        qualifiers: Type qualifiers (unordered)
        type_specifiers: Base type words in source order (non-empty)

    Raises:
        MalformedCompositionError: If there are no base type words, or a
            group holds something other than its own specifier kind
    """
    storage: frozenset[StorageSpecifier] = frozenset()
    qualifiers: frozenset[TypeQualifier] = frozenset()
    type_specifiers: tuple[TypeSpecifier, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "storage", frozenset(self.storage))
        object.__setattr__(self, "qualifiers", frozenset(self.qualifiers))
        object.__setattr__(self, "type_specifiers", tuple(self.type_specifiers))
        if not self.type_specifiers:
            raise MalformedCompositionError(
                "declaration specifier has no type specifier"
            )
        for group, members, kind in (
            ("storage specifier", self.storage, StorageSpecifier),
            ("type qualifier", self.qualifiers, TypeQualifier),
            ("type specifier", self.type_specifiers, TypeSpecifier),
        ):
            for member in members:
                if not isinstance(member, kind):
                    raise MalformedCompositionError(
                        f"expected a {group}, got {type(member).__name__}"
                    )

    @property
    def is_static(self) -> bool:
        return StorageSpecifier.STATIC in self.storage

    @property
    def is_const(self) -> bool:
        return TypeQualifier.CONST in self.qualifiers

    def resolve(self) -> "ResolvedType":
        """Combine the base type words into one concrete type."""
        return resolve_type_specifiers(self.type_specifiers)

    def __str__(self) -> str:
        words = [str(s) for s in sorted(self.storage, key=lambda s: s.value)]
        words += [str(q) for q in sorted(self.qualifiers, key=lambda q: q.value)]
        words += [str(t) for t in self.type_specifiers]
        return " ".join(words)


# =============================================================================
# Declarator Shapes
# =============================================================================

class DeclaratorKind(Enum):
    """One level of declarator shape."""
    POINTER = auto()
    ARRAY = auto()


@dataclass(frozen=True)
class DeclaratorLayer:
    """
    A single shape level, used to decompose and rebuild shapes.

    Attributes:
        kind: POINTER or ARRAY
        size: Element count for arrays (None = unspecified)
    """
    kind: DeclaratorKind
    size: Optional[int] = None


@dataclass(frozen=True)
class DeclaratorType:
    """Base class for declarator shapes."""

    def layers(self) -> tuple[DeclaratorLayer, ...]:
        """Decompose into layers, outermost first."""
        return tuple(self._iter_layers())

    def _iter_layers(self) -> Iterator[DeclaratorLayer]:
        return iter(())

    @property
    def depth(self) -> int:
        """Number of pointer/array levels."""
        return len(self.layers())

    @property
    def is_terminal(self) -> bool:
        return False

    def __str__(self) -> str:
        parts = []
        for layer in self.layers():
            if layer.kind is DeclaratorKind.POINTER:
                parts.append("pointer to")
            elif layer.size is None:
                parts.append("array of")
            else:
                parts.append(f"array[{layer.size}] of")
        return " ".join(parts)


@dataclass(frozen=True)
class TerminalDeclarator(DeclaratorType):
    """No further shape: the name has the base type itself."""

    @property
    def is_terminal(self) -> bool:
        return True


NO_DECLARATOR = TerminalDeclarator()


def _require_declarator(value, role: str) -> None:
    if not isinstance(value, DeclaratorType):
        raise MalformedCompositionError(
            f"{role} must be a declarator shape, got {type(value).__name__}"
        )


@dataclass(frozen=True)
class PointerDeclarator(DeclaratorType):
    """Pointer to the inner shape."""
    to: DeclaratorType = NO_DECLARATOR

    def __post_init__(self):
        _require_declarator(self.to, "pointer target")

    def _iter_layers(self) -> Iterator[DeclaratorLayer]:
        yield DeclaratorLayer(DeclaratorKind.POINTER)
        yield from self.to._iter_layers()


@dataclass(frozen=True)
class ArrayDeclarator(DeclaratorType):
    """Array of the inner shape, with an optional element count."""
    of: DeclaratorType = NO_DECLARATOR
    size: Optional[int] = None

    def __post_init__(self):
        _require_declarator(self.of, "array element")
        if self.size is not None:
            if isinstance(self.size, bool) or not isinstance(self.size, int):
                raise MalformedCompositionError(
                    f"array size must be an integer, got {self.size!r}"
                )
            if self.size < 0:
                raise MalformedCompositionError(
                    f"array size cannot be negative ({self.size})"
                )

    def _iter_layers(self) -> Iterator[DeclaratorLayer]:
        yield DeclaratorLayer(DeclaratorKind.ARRAY, self.size)
        yield from self.of._iter_layers()


def build_declarator(layers: Iterable[DeclaratorLayer]) -> DeclaratorType:
    """
    Compose layers (outermost first) into a declarator shape.

    build_declarator(shape.layers()) == shape for every shape.
    """
    shape: DeclaratorType = NO_DECLARATOR
    for layer in reversed(tuple(layers)):
        if layer.kind is DeclaratorKind.POINTER:
            if layer.size is not None:
                raise MalformedCompositionError("pointer layer cannot carry a size")
            shape = PointerDeclarator(shape)
        else:
            shape = ArrayDeclarator(shape, layer.size)
    return shape


# =============================================================================
# Resolved Types
# =============================================================================

class BaseType(Enum):
    """Concrete base types after specifier resolution."""
    VOID = auto()
    CHAR = auto()
    INT = auto()
    LONG = auto()
    DOUBLE = auto()
    STRUCT = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class ResolvedType:
    """
    One concrete primitive or struct type.

    Attributes:
        base_type: The fundamental type
        is_unsigned: True for unsigned integer types
        is_signed_explicit: True when 'signed' was written (signed char)
        struct_name: The struct tag for STRUCT
    """
    base_type: BaseType
    is_unsigned: bool = False
    is_signed_explicit: bool = False
    struct_name: Optional[Symbol] = None

    @property
    def is_integer(self) -> bool:
        return self.base_type in (BaseType.CHAR, BaseType.INT, BaseType.LONG)

    def __str__(self) -> str:
        if self.base_type is BaseType.STRUCT:
            return f"struct {self.struct_name}"
        if self.is_unsigned:
            return f"unsigned {self.base_type}"
        if self.is_signed_explicit and self.base_type is BaseType.CHAR:
            return "signed char"
        return str(self.base_type)


def resolve_type_specifiers(specifiers: Iterable[TypeSpecifier]) -> ResolvedType:
    """
    Resolve base type words into one concrete type.

    Word order does not matter; each word may appear once.

    Examples:
        [int]                 -> int
        [unsigned]            -> unsigned int
        [unsigned, char]      -> unsigned char
        [long, unsigned, int] -> unsigned long
        [struct Point]        -> struct Point

    Raises:
        MalformedCompositionError: If there are no words
        UnsupportedConstructError: For combinations the subset does not
            have (long long, long double, unsigned double, ...)
    """
    specifiers = tuple(specifiers)
    if not specifiers:
        raise MalformedCompositionError("no type specifier to resolve")

    spelled = " ".join(str(s) for s in specifiers)
    counts = Counter(s.kind for s in specifiers)

    for kind, count in counts.items():
        if count > 1:
            raise UnsupportedConstructError(
                f"repeated type specifier '{kind}' in '{spelled}'"
            )

    if TypeSpecifierKind.STRUCT in counts:
        if len(specifiers) > 1:
            raise UnsupportedConstructError(
                f"struct combined with other type specifiers in '{spelled}'"
            )
        return ResolvedType(BaseType.STRUCT, struct_name=specifiers[0].struct_name)

    is_unsigned = TypeSpecifierKind.UNSIGNED in counts
    is_signed = TypeSpecifierKind.SIGNED in counts
    if is_unsigned and is_signed:
        raise UnsupportedConstructError(f"both signed and unsigned in '{spelled}'")

    words = set(counts) - {TypeSpecifierKind.SIGNED, TypeSpecifierKind.UNSIGNED}
    has_sign = is_unsigned or is_signed

    if words == {TypeSpecifierKind.VOID} and not has_sign:
        return ResolvedType(BaseType.VOID)
    if words == {TypeSpecifierKind.DOUBLE} and not has_sign:
        return ResolvedType(BaseType.DOUBLE)
    if words == {TypeSpecifierKind.CHAR}:
        return ResolvedType(BaseType.CHAR, is_unsigned, is_signed)
    if words in ({TypeSpecifierKind.LONG}, {TypeSpecifierKind.LONG, TypeSpecifierKind.INT}):
        return ResolvedType(BaseType.LONG, is_unsigned, is_signed)
    if words in (set(), {TypeSpecifierKind.INT}):
        return ResolvedType(BaseType.INT, is_unsigned, is_signed)

    raise UnsupportedConstructError(f"type '{spelled}'")


def describe_type(
    specifier: DeclarationSpecifier,
    declarator: DeclaratorType,
) -> str:
    """
    Render a declared type in words.

        static const int *x[3]  ->  "static array[3] of pointer to const int"
    """
    parts = []
    if specifier.is_static:
        parts.append("static")
    shape = str(declarator)
    if shape:
        parts.append(shape)
    if specifier.is_const:
        parts.append("const")
    parts.extend(str(t) for t in specifier.type_specifiers)
    return " ".join(parts)
