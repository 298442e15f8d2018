from dataclasses import dataclass
from typing import List, Tuple

# Block dimensions that span each face, indexed by the axis the face grows.
FACE_AXES: Tuple[Tuple[int, int], ...] = ((1, 2), (0, 2), (0, 1))


@dataclass(frozen=True, order=True)
class Piece:
    """A rectangular slice, stored as (major, minor) with major >= minor.

    ``Piece(2, 3) == Piece(3, 2)``; a rotated rectangle is the same piece.
    Faces of a degenerate block may have a zero side, inventory pieces never do.
    """
    major: int
    minor: int

    def __post_init__(self):
        a, b = int(self.major), int(self.minor)
        if b > a:
            a, b = b, a
        if b < 0:
            raise ValueError(f"negative piece dimension: {self.major}x{self.minor}")
        object.__setattr__(self, "major", a)
        object.__setattr__(self, "minor", b)

    @property
    def area(self) -> int:
        return self.major * self.minor

    def label(self) -> str:
        return f"{self.major}x{self.minor}"

    def __repr__(self):
        return f"Piece({self.major}, {self.minor})"


@dataclass(frozen=True)
class Block:
    """The growing cuboid; ``size`` is always sorted descending."""
    size: Tuple[int, int, int]

    def __post_init__(self):
        object.__setattr__(self, "size", tuple(sorted((int(s) for s in self.size), reverse=True)))

    @classmethod
    def seed(cls, piece: Piece) -> "Block":
        # zero-thick block; the first growth step consumes the seed slice itself
        return cls((piece.major, piece.minor, 0))

    def faces(self) -> Tuple[Piece, Piece, Piece]:
        s = self.size
        return tuple(Piece(s[a], s[b]) for a, b in FACE_AXES)

    def distinct_faces(self) -> List[Tuple[int, Piece]]:
        """(axis, face) pairs, keeping only the first of structurally equal faces."""
        seen: List[Piece] = []
        out: List[Tuple[int, Piece]] = []
        for axis, face in enumerate(self.faces()):
            if face in seen:
                continue
            seen.append(face)
            out.append((axis, face))
        return out

    def grow(self, axis: int) -> "Block":
        size = list(self.size)
        size[axis] += 1
        return Block(tuple(size))

    @property
    def volume(self) -> int:
        a, b, c = self.size
        return a * b * c

    def label(self) -> str:
        return " × ".join(str(s) for s in self.size)
