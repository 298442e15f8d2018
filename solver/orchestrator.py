# Orchestrator: repeatedly extract one block from the shared inventory
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import CFG
from models import Block, Piece
from progress import (
    set_block, set_threshold, set_blocks_found, set_pieces_used,
    set_piece_count, set_coverage_pct, set_added_count, set_status,
    set_elapsed, set_message, log_attempt_detail,
)
from solver.engine import construct_block, seed_groups
from solver.history import History
from solver.inventory import AccountingError, Inventory


# ---------- results ----------

@dataclass
class BlockResult:
    block: Block
    history: History

    @property
    def size(self):
        return self.block.size

    @property
    def n_added(self) -> int:
        return self.history.n_added

    @property
    def slices(self) -> List[Piece]:
        return self.history.pieces()

    @property
    def real_pieces(self) -> List[Piece]:
        return self.history.real_pieces()

    @property
    def added_pieces(self) -> List[Piece]:
        return self.history.added_pieces()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": list(self.block.size),
            "n_added": self.n_added,
            "slices": [
                {"major": p.major, "minor": p.minor, "added": added}
                for p, added in self.history.entries()
            ],
        }


@dataclass
class BuildOutcome:
    blocks: List[BlockResult] = field(default_factory=list)
    total: int = 0
    used: int = 0
    remaining: Optional[Inventory] = None

    @property
    def complete(self) -> bool:
        return bool(self.blocks) and self.used == self.total

    @property
    def partial(self) -> bool:
        return bool(self.blocks) and self.used < self.total

    @property
    def empty(self) -> bool:
        return not self.blocks

    @property
    def n_added(self) -> int:
        return sum(b.n_added for b in self.blocks)

    @property
    def left_over(self) -> int:
        return self.total - self.used

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "total": self.total,
            "used": self.used,
            "complete": self.complete,
            "partial": self.partial,
        }


# ---------- helpers ----------

def _min_path_len(remaining: int) -> int:
    return int(max(0, remaining) * CFG.MIN_PATH_RATIO)


def _keep_searching(min_path_len: int, remaining: int) -> bool:
    return min_path_len > max(0, remaining) // max(1, int(CFG.STOP_DIVISOR))


def _coverage(used: int, total: int) -> float:
    return 100.0 * used / total if total else 0.0


# ---------- public entrypoint ----------

def construct_blocks(
    inventory: Inventory,
    n_pieces: Optional[int] = None,
    find_missing: Optional[bool] = None,
) -> BuildOutcome:
    """Extract blocks one at a time until the threshold guard gives up.

    ``n_pieces`` is the number of slices the inventory was built from (it
    defaults to the inventory total).  Raises ``AccountingError`` when the
    completed blocks used more real slices than existed.
    """
    t0 = time.time()
    if n_pieces is None:
        n_pieces = inventory.total()
    if find_missing is None:
        find_missing = bool(CFG.FIND_MISSING)

    stats = inventory.stats()
    log_attempt_detail(
        "Run setup",
        pieces=n_pieces,
        distinct=stats["distinct"],
        duplicates=stats["duplicates"],
        max_count=stats["max_count"],
        find_missing=int(find_missing),
    )
    set_status("Solving")
    set_piece_count(n_pieces)
    set_pieces_used(0)
    set_blocks_found(0)
    set_coverage_pct(0.0)
    set_added_count(0)

    outcome = BuildOutcome(total=n_pieces)
    used: List[Piece] = []
    min_path_len = _min_path_len(n_pieces)
    set_block(0)

    while _keep_searching(min_path_len, n_pieces - len(used)):
        set_threshold(min_path_len)
        found = construct_block(seed_groups(inventory), min_path_len, find_missing)
        if found is None:
            # nothing this long; try again with a shorter minimum
            min_path_len //= 2
            continue

        block, history = found
        consumed = history.real_pieces()
        inventory = inventory.remove_consumed(consumed)
        used.extend(consumed)
        outcome.blocks.append(BlockResult(block, history))
        min_path_len = _min_path_len(n_pieces - len(used))

        log_attempt_detail(
            "Block completed",
            index=len(outcome.blocks) - 1,
            size=block.label(),
            real=len(consumed),
            added=history.n_added,
            remaining=n_pieces - len(used),
        )
        set_blocks_found(len(outcome.blocks))
        set_pieces_used(len(used))
        set_coverage_pct(_coverage(len(used), n_pieces))
        set_added_count(outcome.n_added)
        set_block(len(outcome.blocks))

    outcome.used = len(used)
    outcome.remaining = inventory
    set_elapsed(time.time() - t0)

    if outcome.used > n_pieces:
        set_status("Error")
        raise AccountingError(f"used {outcome.used} out of {n_pieces} pieces")

    if outcome.complete:
        set_status("Solved")
        set_message(f"{len(outcome.blocks)} block(s), all pieces used")
    elif outcome.partial:
        set_status("Partial")
        set_message(f"{outcome.left_over} pieces left over")
        log_attempt_detail("Partial decomposition", used=outcome.used, total=n_pieces, left=outcome.left_over)
    else:
        set_status("No block")
        set_message("No block found")

    return outcome


__all__ = ["BlockResult", "BuildOutcome", "construct_blocks"]
