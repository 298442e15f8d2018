#!/usr/bin/env python3
"""
Rebuild blocks from a pile of slices.

Usage:
  block-rebuilder FILE [FILE ...] [--eat-prob P] [--find-missing] [--seed N] [--out-dir DIR]
"""
import argparse
import os
import sys
import time
from typing import List, Optional

from config import CFG
from models import Piece
from pieces_io import PieceFileError, load_pieces, write_solutions
from progress import reset as progress_reset, start_timer, set_done
from sampling import eat_pieces, make_rng, shuffle_pieces
from solver.inventory import Inventory
from solver.orchestrator import BuildOutcome, construct_blocks


def prepare_pieces(args) -> List[Piece]:
    print("Loading slices...")
    pieces: List[Piece] = []
    for path in args.files:
        loaded = load_pieces(path)
        print(f"\t{len(loaded)} slices read from {path}")
        pieces.extend(loaded)
    print()

    rng = make_rng(args.seed)
    print("Shuffling slices...\n")
    pieces = shuffle_pieces(pieces, rng)
    if args.eat_prob is not None:
        pieces, n_eaten = eat_pieces(pieces, args.eat_prob, rng)
        print(f"{n_eaten} slices were eaten\n")
    return pieces


def print_stats(inventory: Inventory) -> None:
    stats = inventory.stats()
    print("Slice statistics:")
    print(f"\tLargest count of a single slice: {stats['max_count']}")
    print(f"\tDuplicate slices: {stats['duplicates']}")
    print(f"\tDistinct slices: {stats['distinct']}")
    print()


def report(outcome: BuildOutcome, paths: List[str], find_missing: bool) -> None:
    if outcome.empty:
        print("No block found")
    else:
        print(f"{len(outcome.blocks)} block(s) found:")
    many = len(outcome.blocks) > 1
    for i, (result, path) in enumerate(zip(outcome.blocks, paths)):
        if many:
            print(f"   {i}:")
        print(f"\tBlock: {list(result.size)}")
        if find_missing:
            print(f"\t{result.n_added} slices were added")
        slices = result.slices
        print(f"\tFirst slice: {slices[0].label()}")
        print(f"\tLast slice: {slices[-1].label()}")
        print(f"\tSlice order saved to {path}")
        print()
    if outcome.partial:
        print(f"Not all slices used: {outcome.left_over} of {outcome.total} left over")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="block-rebuilder",
        description="Reconstruct blocks from their slices")
    ap.add_argument("files", nargs="+", help="Piece files to load")
    ap.add_argument("--eat-prob", type=float, default=CFG.EAT_PROB,
                    help="Probability with which slices are removed (implies --find-missing)")
    ap.add_argument("--find-missing", action="store_true", default=CFG.FIND_MISSING,
                    help="Infer slices that were eaten")
    ap.add_argument("--seed", type=int, default=CFG.SEED,
                    help="Seed for shuffling and eating")
    ap.add_argument("--out-dir", default=os.getcwd(),
                    help="Directory for solution files (default: current directory)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    find_missing = bool(args.find_missing or args.eat_prob is not None)

    try:
        pieces = prepare_pieces(args)
    except (OSError, PieceFileError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    inventory = Inventory.from_pieces(pieces)
    print_stats(inventory)

    progress_reset()
    start_timer()
    t0 = time.perf_counter()
    outcome = construct_blocks(inventory, len(pieces), find_missing)
    elapsed = time.perf_counter() - t0
    set_done()

    paths = write_solutions(outcome.blocks, args.out_dir)
    report(outcome, paths, find_missing)
    print(f"Search took {elapsed:.3f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
