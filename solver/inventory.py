# solver/inventory.py
"""
Multiset of remaining slices with cheap branching.

Every inventory holds a shared, read-only *base* layer plus a private
*overlay* of entries that differ from it.  Branches share the base by
reference and copy only the overlay; once an overlay grows past
``CFG.FOLD_RATIO`` of the base, the next ``branch_copy`` folds it into a
fresh base first.
"""
from __future__ import annotations

import uuid
from collections import Counter
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from config import CFG
from models import Piece


class AccountingError(RuntimeError):
    """Piece accounting broke: more slices were used than the inventory held."""


class Inventory:
    __slots__ = ("_base", "base_id", "_overlay")

    def __init__(
        self,
        base: Optional[Mapping[Piece, int]] = None,
        *,
        base_id: Optional[uuid.UUID] = None,
        overlay: Optional[Dict[Piece, int]] = None,
    ):
        if isinstance(base, MappingProxyType):
            self._base = base
        else:
            self._base = MappingProxyType({p: int(n) for p, n in (base or {}).items() if n > 0})
        # identifies the base layer so siblings can compare overlays only
        self.base_id = base_id or uuid.uuid4()
        self._overlay: Dict[Piece, int] = overlay if overlay is not None else {}

    @classmethod
    def from_pieces(cls, pieces: Iterable[Piece]) -> "Inventory":
        return cls(dict(Counter(pieces)))

    # ---------- lookups ----------

    def lookup(self, piece: Piece) -> int:
        if piece in self._overlay:
            return self._overlay[piece]
        return self._base.get(piece, 0)

    def __contains__(self, piece: Piece) -> bool:
        return self.lookup(piece) > 0

    def merged(self) -> Dict[Piece, int]:
        """Base reconciled with overlay; pieces at count zero are left out."""
        out: Dict[Piece, int] = {}
        for piece, n in self._base.items():
            n = self._overlay.get(piece, n)
            if n > 0:
                out[piece] = n
        for piece, n in self._overlay.items():
            if n > 0 and piece not in self._base:
                out[piece] = n
        return out

    def pieces(self) -> List[Piece]:
        """Distinct pieces still available, in base order."""
        return list(self.merged().keys())

    def total(self) -> int:
        return sum(self.merged().values())

    @property
    def overlay_size(self) -> int:
        return len(self._overlay)

    @property
    def base_size(self) -> int:
        return len(self._base)

    def same_base(self, other: "Inventory") -> bool:
        return self.base_id == other.base_id

    def __eq__(self, other):
        if not isinstance(other, Inventory):
            return NotImplemented
        if self.same_base(other):
            keys = set(self._overlay) | set(other._overlay)
            return all(self.lookup(k) == other.lookup(k) for k in keys)
        return self.merged() == other.merged()

    __hash__ = None

    def __repr__(self):
        return f"Inventory(base={len(self._base)}, overlay={len(self._overlay)})"

    # ---------- mutation (overlay only) ----------

    def put(self, piece: Piece, count: int) -> None:
        if count < 0:
            raise AccountingError(f"negative count for {piece.label()}: {count}")
        self._overlay[piece] = int(count)

    def take(self, piece: Piece) -> None:
        """Consume one unit of ``piece``."""
        n = self.lookup(piece)
        if n <= 0:
            raise AccountingError(f"no {piece.label()} slice left to consume")
        self.put(piece, n - 1)

    def fold(self) -> None:
        """Reconcile the overlay into a new base layer and clear it."""
        self._base = MappingProxyType(self.merged())
        self.base_id = uuid.uuid4()
        self._overlay = {}

    # ---------- branching ----------

    def branch_copy(self) -> "Inventory":
        if len(self._overlay) > int(len(self._base) * CFG.FOLD_RATIO):
            self.fold()
        return Inventory(self._base, base_id=self.base_id, overlay=dict(self._overlay))

    def remove_consumed(self, pieces: Iterable[Piece]) -> "Inventory":
        """New inventory with one unit removed per listed piece."""
        counts = self.merged()
        for piece in pieces:
            n = counts.get(piece, 0)
            if n <= 0:
                raise AccountingError(f"cannot remove {piece.label()}: none left")
            if n == 1:
                del counts[piece]
            else:
                counts[piece] = n - 1
        return Inventory(counts)

    def stats(self) -> Dict[str, int]:
        counts = self.merged()
        total = sum(counts.values())
        return {
            "max_count": max(counts.values(), default=0),
            "duplicates": total - len(counts),
            "distinct": len(counts),
            "total": total,
        }


__all__ = ["AccountingError", "Inventory"]
