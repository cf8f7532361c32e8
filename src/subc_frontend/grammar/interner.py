"""
Identifier Interning
====================

Identifiers in the tree are interned Symbol handles rather than raw
strings. A Symbol is small, hashable and compares by the identity of the
interner that issued it plus its table index, so equality checks in later
phases are integer comparisons.

Within one interner, two handles are equal exactly when their texts are
equal. Handles issued by different interners never compare equal.

>>> from subc_frontend.grammar.interner import intern
>>> intern("count") == intern("count")
True
>>> str(intern("count"))
'count'

The interner is the only state shared between independent parses, so
lookups are serialized with a lock.
"""

import itertools
import threading
from dataclasses import dataclass, field
from typing import Optional


_interner_ids = itertools.count()


@dataclass(frozen=True)
class Symbol:
    """
    Interned identifier handle.

    Attributes:
        owner: Id of the issuing StringInterner
        index: Position in the owning interner's table
        text: The identifier text, kept for printing only
    """
    owner: int
    index: int
    text: str = field(compare=False)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Symbol({self.text!r})"


class StringInterner:
    """
    Thread-safe table mapping identifier text to Symbol handles.

    Usage:
        interner = StringInterner()
        a = interner.intern("x")
        b = interner.intern("x")
        assert a == b and a.index == b.index
    """

    def __init__(self):
        self.id = next(_interner_ids)
        self._symbols: dict[str, Symbol] = {}
        self._texts: list[str] = []
        self._lock = threading.Lock()

    def intern(self, text: str) -> Symbol:
        """Return the handle for text, creating it on first use."""
        with self._lock:
            symbol = self._symbols.get(text)
            if symbol is None:
                symbol = Symbol(self.id, len(self._texts), text)
                self._texts.append(text)
                self._symbols[text] = symbol
            return symbol

    def lookup(self, text: str) -> Optional[Symbol]:
        """Return the handle for text if it has been interned."""
        with self._lock:
            return self._symbols.get(text)

    def resolve(self, symbol: Symbol) -> str:
        """
        Return the text for a handle issued by this interner.

        Raises:
            KeyError: If the handle came from another interner
        """
        if symbol.owner != self.id:
            raise KeyError(f"{symbol!r} was not issued by this interner")
        with self._lock:
            return self._texts[symbol.index]

    def __len__(self) -> int:
        with self._lock:
            return len(self._texts)

    def __contains__(self, text: str) -> bool:
        with self._lock:
            return text in self._symbols


# Process-wide default table used when no interner is passed explicitly
DEFAULT_INTERNER = StringInterner()


def intern(text: str) -> Symbol:
    """Intern text in the default interner."""
    return DEFAULT_INTERNER.intern(text)
