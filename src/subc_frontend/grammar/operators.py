"""
Operator Resolution
===================

This module is the single source of truth for how tokens become
operators and how tightly those operators bind.

Token-to-Operator Resolution
----------------------------
Each resolver takes one token and returns the operator it introduces in
that family, or None when the token is not a member of the family. None
is not an error: the parser tries the next family, and a token that
matches no family ends the expression.

| Token | postfix   | unary      | binary                   |
|-------|-----------|------------|--------------------------|
| ++ -- | INCREMENT | INCREMENT  | -                        |
| + -   | -         | PLUS/NEGATE| ADD/SUBTRACT             |
| * &   | -         | DEREF/ADDR | MULTIPLY/BITWISE_AND     |
| ! ~   | -         | NOT        | -                        |
| = += …| -         | -          | Assign(AssignOp.…)       |

'*' and '&' resolve in both the unary and binary families. The parser
picks one by position: in prefix position the token is unary.

Precedence Table
----------------
Higher binds tighter. Every level is left-associative except assignment.

| Level | Operators              |
|-------|------------------------|
| 11    | * / %                  |
| 10    | + -                    |
| 9     | << >>                  |
| 8     | < <= > >=              |
| 7     | == !=                  |
| 6     | &                      |
| 5     | ^                      |
| 4     | |                      |
| 3     | &&                     |
| 2     | ||                     |
| 1     | = += -= *= /= %= &= |= ^= <<= >>= |
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from subc_frontend.grammar.lexer import CToken, CTokenType


# =============================================================================
# Operator Enumerations
# =============================================================================

class PostfixOp(Enum):
    """Postfix operators. Calls, subscripts and member access are nodes."""
    INCREMENT = auto()  # x++
    DECREMENT = auto()  # x--

    def __str__(self) -> str:
        return _POSTFIX_SPELLING[self]


class UnaryOp(Enum):
    """Prefix unary operators."""
    INCREMENT = auto()   # ++x
    DECREMENT = auto()   # --x
    PLUS = auto()        # +x
    NEGATE = auto()      # -x
    LOGICAL_NOT = auto() # !x
    BITWISE_NOT = auto() # ~x
    DEREF = auto()       # *p
    ADDRESS_OF = auto()  # &x

    def __str__(self) -> str:
        return _UNARY_SPELLING[self]


class BinaryOperator(Enum):
    """Non-assignment binary operators."""
    # Arithmetic
    ADD = auto()        # +
    SUBTRACT = auto()   # -
    MULTIPLY = auto()   # *
    DIVIDE = auto()     # /
    MODULO = auto()     # %

    # Comparison
    EQUAL = auto()             # ==
    NOT_EQUAL = auto()         # !=
    GREATER_THAN = auto()      # >
    GREATER_THAN_EQUAL = auto()# >=
    LESS_THAN = auto()         # <
    LESS_THAN_EQUAL = auto()   # <=

    # Logical
    LOGICAL_AND = auto()  # &&
    LOGICAL_OR = auto()   # ||

    # Bitwise
    BITWISE_AND = auto()  # &
    BITWISE_OR = auto()   # |
    BITWISE_XOR = auto()  # ^
    LEFT_SHIFT = auto()   # <<
    RIGHT_SHIFT = auto()  # >>

    def __str__(self) -> str:
        return _BINARY_SPELLING[self]


class AssignOp(Enum):
    """
    Assignment operators.

    Compound forms remember the operation they fuse with the store,
    available through the fused property.
    """
    ASSIGN = auto()       # =
    PLUS = auto()         # +=
    MINUS = auto()        # -=
    MULTIPLY = auto()     # *=
    DIVIDE = auto()       # /=
    MODULO = auto()       # %=
    BITWISE_AND = auto()  # &=
    BITWISE_OR = auto()   # |=
    BITWISE_XOR = auto()  # ^=
    LEFT_SHIFT = auto()   # <<=
    RIGHT_SHIFT = auto()  # >>=

    @property
    def fused(self) -> Optional[BinaryOperator]:
        """The arithmetic or bitwise operation applied before storing."""
        return _FUSED_OPERATION.get(self)

    @property
    def is_compound(self) -> bool:
        return self is not AssignOp.ASSIGN

    def __str__(self) -> str:
        return _ASSIGN_SPELLING[self]


@dataclass(frozen=True)
class Assign:
    """
    Binary operator tag for assignment.

    Assignment is a binary operator so that it takes part in precedence
    climbing like any other; this tag wraps which assignment it is.
    """
    op: AssignOp = AssignOp.ASSIGN

    def __str__(self) -> str:
        return str(self.op)


# Everything that can appear as the operator of a Binary node
BinaryOp = Union[BinaryOperator, Assign]


# =============================================================================
# Token Tables
# =============================================================================

POSTFIX_OPERATORS: dict[CTokenType, PostfixOp] = {
    CTokenType.INCREMENT: PostfixOp.INCREMENT,
    CTokenType.DECREMENT: PostfixOp.DECREMENT,
}

UNARY_OPERATORS: dict[CTokenType, UnaryOp] = {
    CTokenType.PLUS: UnaryOp.PLUS,
    CTokenType.MINUS: UnaryOp.NEGATE,
    CTokenType.NOT: UnaryOp.LOGICAL_NOT,
    CTokenType.TILDE: UnaryOp.BITWISE_NOT,
    CTokenType.INCREMENT: UnaryOp.INCREMENT,
    CTokenType.DECREMENT: UnaryOp.DECREMENT,
    CTokenType.STAR: UnaryOp.DEREF,
    CTokenType.AMPERSAND: UnaryOp.ADDRESS_OF,
}

ASSIGN_OPERATORS: dict[CTokenType, AssignOp] = {
    CTokenType.ASSIGN: AssignOp.ASSIGN,
    CTokenType.PLUS_ASSIGN: AssignOp.PLUS,
    CTokenType.MINUS_ASSIGN: AssignOp.MINUS,
    CTokenType.STAR_ASSIGN: AssignOp.MULTIPLY,
    CTokenType.SLASH_ASSIGN: AssignOp.DIVIDE,
    CTokenType.PERCENT_ASSIGN: AssignOp.MODULO,
    CTokenType.AND_ASSIGN: AssignOp.BITWISE_AND,
    CTokenType.OR_ASSIGN: AssignOp.BITWISE_OR,
    CTokenType.XOR_ASSIGN: AssignOp.BITWISE_XOR,
    CTokenType.LSHIFT_ASSIGN: AssignOp.LEFT_SHIFT,
    CTokenType.RSHIFT_ASSIGN: AssignOp.RIGHT_SHIFT,
}

BINARY_OPERATORS: dict[CTokenType, BinaryOp] = {
    CTokenType.PLUS: BinaryOperator.ADD,
    CTokenType.MINUS: BinaryOperator.SUBTRACT,
    CTokenType.STAR: BinaryOperator.MULTIPLY,
    CTokenType.SLASH: BinaryOperator.DIVIDE,
    CTokenType.PERCENT: BinaryOperator.MODULO,

    CTokenType.EQ: BinaryOperator.EQUAL,
    CTokenType.NE: BinaryOperator.NOT_EQUAL,
    CTokenType.GT: BinaryOperator.GREATER_THAN,
    CTokenType.GE: BinaryOperator.GREATER_THAN_EQUAL,
    CTokenType.LT: BinaryOperator.LESS_THAN,
    CTokenType.LE: BinaryOperator.LESS_THAN_EQUAL,

    CTokenType.AND: BinaryOperator.LOGICAL_AND,
    CTokenType.OR: BinaryOperator.LOGICAL_OR,

    CTokenType.AMPERSAND: BinaryOperator.BITWISE_AND,
    CTokenType.PIPE: BinaryOperator.BITWISE_OR,
    CTokenType.CARET: BinaryOperator.BITWISE_XOR,
    CTokenType.LSHIFT: BinaryOperator.LEFT_SHIFT,
    CTokenType.RSHIFT: BinaryOperator.RIGHT_SHIFT,

    **{token_type: Assign(op) for token_type, op in ASSIGN_OPERATORS.items()},
}


# =============================================================================
# Resolvers
# =============================================================================

def postfix_op_from_token(token: CToken) -> Optional[PostfixOp]:
    """Classify token as a postfix operator, or None."""
    return POSTFIX_OPERATORS.get(token.type)


def unary_op_from_token(token: CToken) -> Optional[UnaryOp]:
    """Classify token as a prefix unary operator, or None."""
    return UNARY_OPERATORS.get(token.type)


def binary_op_from_token(token: CToken) -> Optional[BinaryOp]:
    """Classify token as a binary or assignment operator, or None."""
    return BINARY_OPERATORS.get(token.type)


def assign_op_from_token(token: CToken) -> Optional[AssignOp]:
    """Classify token as an assignment operator, or None."""
    return ASSIGN_OPERATORS.get(token.type)


# =============================================================================
# Precedence Table
# =============================================================================

ASSIGNMENT_PRECEDENCE = 1

PRECEDENCE: dict[BinaryOperator, int] = {
    BinaryOperator.MULTIPLY: 11,
    BinaryOperator.DIVIDE: 11,
    BinaryOperator.MODULO: 11,
    BinaryOperator.ADD: 10,
    BinaryOperator.SUBTRACT: 10,
    BinaryOperator.LEFT_SHIFT: 9,
    BinaryOperator.RIGHT_SHIFT: 9,
    BinaryOperator.GREATER_THAN: 8,
    BinaryOperator.GREATER_THAN_EQUAL: 8,
    BinaryOperator.LESS_THAN: 8,
    BinaryOperator.LESS_THAN_EQUAL: 8,
    BinaryOperator.EQUAL: 7,
    BinaryOperator.NOT_EQUAL: 7,
    BinaryOperator.BITWISE_AND: 6,
    BinaryOperator.BITWISE_XOR: 5,
    BinaryOperator.BITWISE_OR: 4,
    BinaryOperator.LOGICAL_AND: 3,
    BinaryOperator.LOGICAL_OR: 2,
}


def precedence(op: BinaryOp) -> int:
    """Binding strength of a binary operator; higher binds tighter."""
    if isinstance(op, Assign):
        return ASSIGNMENT_PRECEDENCE
    return PRECEDENCE[op]


def is_right_associative(op: BinaryOp) -> bool:
    """Only assignment groups to the right: a = b = c is a = (b = c)."""
    return isinstance(op, Assign)


# =============================================================================
# Spellings (for printing)
# =============================================================================

_POSTFIX_SPELLING = {
    PostfixOp.INCREMENT: "++",
    PostfixOp.DECREMENT: "--",
}

_UNARY_SPELLING = {
    UnaryOp.INCREMENT: "++",
    UnaryOp.DECREMENT: "--",
    UnaryOp.PLUS: "+",
    UnaryOp.NEGATE: "-",
    UnaryOp.LOGICAL_NOT: "!",
    UnaryOp.BITWISE_NOT: "~",
    UnaryOp.DEREF: "*",
    UnaryOp.ADDRESS_OF: "&",
}

_BINARY_SPELLING = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
    BinaryOperator.MODULO: "%",
    BinaryOperator.EQUAL: "==",
    BinaryOperator.NOT_EQUAL: "!=",
    BinaryOperator.GREATER_THAN: ">",
    BinaryOperator.GREATER_THAN_EQUAL: ">=",
    BinaryOperator.LESS_THAN: "<",
    BinaryOperator.LESS_THAN_EQUAL: "<=",
    BinaryOperator.LOGICAL_AND: "&&",
    BinaryOperator.LOGICAL_OR: "||",
    BinaryOperator.BITWISE_AND: "&",
    BinaryOperator.BITWISE_OR: "|",
    BinaryOperator.BITWISE_XOR: "^",
    BinaryOperator.LEFT_SHIFT: "<<",
    BinaryOperator.RIGHT_SHIFT: ">>",
}

_ASSIGN_SPELLING = {
    AssignOp.ASSIGN: "=",
    AssignOp.PLUS: "+=",
    AssignOp.MINUS: "-=",
    AssignOp.MULTIPLY: "*=",
    AssignOp.DIVIDE: "/=",
    AssignOp.MODULO: "%=",
    AssignOp.BITWISE_AND: "&=",
    AssignOp.BITWISE_OR: "|=",
    AssignOp.BITWISE_XOR: "^=",
    AssignOp.LEFT_SHIFT: "<<=",
    AssignOp.RIGHT_SHIFT: ">>=",
}

_FUSED_OPERATION = {
    AssignOp.PLUS: BinaryOperator.ADD,
    AssignOp.MINUS: BinaryOperator.SUBTRACT,
    AssignOp.MULTIPLY: BinaryOperator.MULTIPLY,
    AssignOp.DIVIDE: BinaryOperator.DIVIDE,
    AssignOp.MODULO: BinaryOperator.MODULO,
    AssignOp.BITWISE_AND: BinaryOperator.BITWISE_AND,
    AssignOp.BITWISE_OR: BinaryOperator.BITWISE_OR,
    AssignOp.BITWISE_XOR: BinaryOperator.BITWISE_XOR,
    AssignOp.LEFT_SHIFT: BinaryOperator.LEFT_SHIFT,
    AssignOp.RIGHT_SHIFT: BinaryOperator.RIGHT_SHIFT,
}
