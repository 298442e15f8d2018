# solver/history.py
"""
Persistent, tree-shaped log of the slices a branch has used.

Each ``History`` is a handle on the tail node of a chain.  Extending a
history never touches existing nodes, so sibling branches share their common
prefix and only own their private tail.  Nodes keep an explicit holder count
(handles plus successor nodes pointing at them); when a handle goes away the
chain it solely owns is unlinked node by node instead of through a recursive
release of ``prev`` references.
"""
from __future__ import annotations

from typing import Iterator, List, Optional

from models import Piece


class _Node:
    __slots__ = ("prev", "piece", "is_added", "holders")

    def __init__(self, prev: Optional["_Node"], piece: Piece, is_added: bool):
        self.prev = prev
        self.piece = piece
        self.is_added = is_added
        self.holders = 0
        if prev is not None:
            prev.holders += 1


class History:
    """Slices appended to one branch, oldest first when read back.

    ``length`` counts real slices only, ``n_added`` counts hypothesised ones.
    """

    __slots__ = ("_tail", "start_piece", "length", "n_added")

    def __init__(self, start_piece: Piece, _tail: Optional[_Node] = None, length: int = 0, n_added: int = 0):
        self.start_piece = start_piece
        self.length = length
        self.n_added = n_added
        self._tail = _tail
        if _tail is not None:
            _tail.holders += 1

    def extend_real(self, piece: Piece) -> "History":
        return History(self.start_piece, _Node(self._tail, piece, False), self.length + 1, self.n_added)

    def extend_added(self, piece: Piece) -> "History":
        return History(self.start_piece, _Node(self._tail, piece, True), self.length, self.n_added + 1)

    def _walk(self) -> Iterator[_Node]:
        node = self._tail
        while node is not None:
            yield node
            node = node.prev

    def entries(self) -> List[tuple]:
        """(piece, is_added) pairs from first to last."""
        out = [(n.piece, n.is_added) for n in self._walk()]
        out.reverse()
        return out

    def pieces(self) -> List[Piece]:
        return [p for p, _ in self.entries()]

    def real_pieces(self) -> List[Piece]:
        return [p for p, added in self.entries() if not added]

    def added_pieces(self) -> List[Piece]:
        return [p for p, added in self.entries() if added]

    def __len__(self):
        return self.length

    def __repr__(self):
        return f"History(start={self.start_piece!r}, len={self.length}, added={self.n_added})"

    def release(self) -> None:
        """Drop this handle's claim on the chain without recursing."""
        node = self._tail
        self._tail = None
        while node is not None:
            node.holders -= 1
            if node.holders > 0:
                break
            node.prev, node = None, node.prev

    def __del__(self):
        try:
            self.release()
        except AttributeError:
            # partially constructed handle
            pass


__all__ = ["History"]
