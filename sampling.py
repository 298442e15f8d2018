# sampling.py: shuffle and "eat" slices to prepare test data
import random
from typing import List, Optional, Sequence, Tuple

from models import Piece


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


def shuffle_pieces(pieces: Sequence[Piece], rng: random.Random) -> List[Piece]:
    out = list(pieces)
    rng.shuffle(out)
    return out


def eat_pieces(pieces: Sequence[Piece], prob: float, rng: random.Random) -> Tuple[List[Piece], int]:
    """Drop each slice with probability ``prob``; never two in a row.

    Returns (kept, n_eaten).
    """
    if not 0.0 <= prob <= 1.0:
        raise ValueError(f"eat probability must be within [0, 1], got {prob}")
    kept: List[Piece] = []
    last_eaten = False
    n_eaten = 0
    for piece in pieces:
        if last_eaten or rng.random() >= prob:
            kept.append(piece)
            last_eaten = False
        else:
            last_eaten = True
            n_eaten += 1
    return kept, n_eaten
