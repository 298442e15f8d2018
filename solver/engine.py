# solver/engine.py
"""
Branch expansion for one block.

A branch is a partial block plus the slices that built it and its own view
of the inventory.  Branches are grouped by the piece they started from and
advanced in lockstep rounds; inside a group only the branches with the fewest
hypothesised (added) slices survive a round.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from config import CFG
from models import FACE_AXES, Block, Piece
from progress import log_attempt_detail, set_round
from solver.history import History
from solver.inventory import Inventory

Group = List["Branch"]


@dataclass
class Growth:
    """One way to add a slice: grow ``axis`` using ``piece``."""
    axis: int
    piece: Piece
    is_added: bool = False


@dataclass
class Branch:
    block: Block
    history: History
    inventory: Inventory

    @property
    def n_added(self) -> int:
        return self.history.n_added


# ---------- candidate discovery ----------

def find_real_growths(block: Block, inventory: Inventory) -> Tuple[List[bool], List[Growth]]:
    """Growths backed by a slice that is actually in the inventory.

    Returns the per-axis "updated" mask alongside the growths.  Equal faces
    are only tried once.
    """
    updated = [False, False, False]
    growths: List[Growth] = []
    for axis, face in block.distinct_faces():
        if inventory.lookup(face) > 0:
            updated[axis] = True
            growths.append(Growth(axis, face))
    return updated, growths


def find_missing_growths(block: Block, updated: Sequence[bool], inventory: Inventory) -> List[Growth]:
    """Growths whose slice is assumed lost.

    For every face we look one step ahead: if growing along one of the two
    other axes would make a slice that *is* present fit that face next, the
    slice for the growth itself is taken as eaten.
    """
    size = block.size
    growths: List[Growth] = []
    seen = set()
    for searched, (other_a, other_b) in enumerate(FACE_AXES):
        if updated[other_a] and updated[other_b]:
            continue
        len_x, len_y, len_z = size[other_a], size[other_b], size[searched]
        probes = []
        if not updated[other_a]:
            probes.append((other_a, Piece(len_y, len_z), Piece(len_x + 1, len_y)))
        if not updated[other_b]:
            probes.append((other_b, Piece(len_x, len_z), Piece(len_x, len_y + 1)))
        for axis, missing, following in probes:
            if inventory.lookup(following) <= 0:
                continue
            key = (block.grow(axis), missing)
            if key in seen:
                continue
            seen.add(key)
            growths.append(Growth(axis, missing, is_added=True))
    return growths


# ---------- expansion ----------

def _fan_out(branch: Branch, growths: List[Growth]) -> List[Branch]:
    out: List[Branch] = []
    last = len(growths) - 1
    for i, growth in enumerate(growths):
        # the final successor takes over the parent's inventory, the rest copy it
        inventory = branch.inventory if i == last else branch.inventory.branch_copy()
        if growth.is_added:
            history = branch.history.extend_added(growth.piece)
        else:
            inventory.take(growth.piece)
            history = branch.history.extend_real(growth.piece)
        out.append(Branch(branch.block.grow(growth.axis), history, inventory))
    return out


def expand_branch(branch: Branch, find_missing: bool) -> List[Branch]:
    """All successors of ``branch`` one slice further on.

    The parent's inventory is handed to the last successor, so the parent
    must not be expanded again.
    """
    updated, growths = find_real_growths(branch.block, branch.inventory)
    if not growths and find_missing:
        growths = find_missing_growths(branch.block, updated, branch.inventory)
    if not growths:
        return []
    return _fan_out(branch, growths)


def prune_branches(branches: List[Branch]) -> List[Branch]:
    """Keep only the branches with the fewest added slices."""
    if not branches:
        return branches
    least = min(b.n_added for b in branches)
    return [b for b in branches if b.n_added <= least]


def select_best_group(groups: List[Group]) -> Group:
    """The group holding the branch with the fewest added slices (first wins ties)."""
    return min(groups, key=lambda group: min(b.n_added for b in group))


def seed_groups(inventory: Inventory) -> List[Group]:
    """One single-branch group per distinct piece in the inventory."""
    groups: List[Group] = []
    for piece in inventory.pieces():
        groups.append([Branch(Block.seed(piece), History(piece), inventory.branch_copy())])
    return groups


# ---------- per-block driver ----------

def construct_block(
    groups: List[Group],
    min_path_len: int,
    find_missing: bool,
) -> Optional[Tuple[Block, History]]:
    """Grow all groups until one stops at or beyond ``min_path_len`` rounds.

    Returns the block and history the stopping group had before its last,
    fruitless round, or ``None`` when every group stops too early.
    """
    rounds = 0
    while groups:
        set_round(rounds)
        if (
            find_missing
            and rounds == min_path_len // 2
            and rounds > CFG.COLLAPSE_AFTER_ROUNDS
            and len(groups) > 1
        ):
            best = select_best_group(groups)
            log_attempt_detail(
                "Groups collapsed",
                round=rounds,
                groups=len(groups),
                start=best[0].history.start_piece.label(),
                added=min(b.n_added for b in best),
            )
            groups = [best]

        next_groups: List[Group] = []
        for group in groups:
            head = group[0]
            current = (head.block, head.history)
            successors: List[Branch] = []
            for branch in group:
                successors.extend(expand_branch(branch, find_missing))
            if len(successors) > 1:
                successors = prune_branches(successors)
            if successors:
                next_groups.append(successors)
            elif rounds >= min_path_len:
                return current
        groups = next_groups
        rounds += 1
    return None


__all__ = [
    "Branch",
    "Growth",
    "construct_block",
    "expand_branch",
    "find_missing_growths",
    "find_real_growths",
    "prune_branches",
    "seed_groups",
    "select_best_group",
]
