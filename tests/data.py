"""Slice piles with known decompositions."""

from models import Piece

# 2×2 seed plus one more 2×2 slice -> 2×2×2
CUBE_2 = [Piece(2, 2), Piece(2, 2)]

# 1×1 seed grown to 2×2×2 with the 2×1 slice eaten
CUBE_2_EATEN = [Piece(1, 1), Piece(1, 1), Piece(2, 2)]

# 4×3 seed, then 3×1, 5×3, 5×2 -> 5×4×2; no other seed gets three slices deep
BLOCK_542 = [Piece(4, 3), Piece(1, 3), Piece(5, 3), Piece(2, 5)]

# both of the above in one pile
TWO_BLOCKS = BLOCK_542 + CUBE_2
