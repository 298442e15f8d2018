"""Helpers for reading piece lists and writing solutions to disk."""

from __future__ import annotations

import os
from typing import Iterable, List, Sequence

from config import CFG
from models import Piece


class PieceFileError(ValueError):
    """A piece file could not be parsed."""


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def parse_piece_line(line: str, where: str = "") -> Piece:
    parts = line.split()
    if len(parts) != 2:
        raise PieceFileError(f"{where}expected two dimensions, got {line!r}")
    try:
        a, b = int(parts[0]), int(parts[1])
    except ValueError:
        raise PieceFileError(f"{where}couldn't parse {line!r}") from None
    if a <= 0 or b <= 0:
        raise PieceFileError(f"{where}dimensions must be positive, got {line!r}")
    return Piece(a, b)


def parse_piece_file(text: str, source: str = "<string>") -> List[Piece]:
    """Parse the ``count`` header plus one ``a b`` record per line."""

    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise PieceFileError(f"{source}: empty data file")
    try:
        declared = int(lines[0].strip())
    except ValueError:
        raise PieceFileError(f"{source}: couldn't extract number of pieces from {lines[0]!r}") from None

    pieces: List[Piece] = []
    for lineno, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        pieces.append(parse_piece_line(line, where=f"{source}:{lineno}: "))

    if declared != len(pieces):
        raise PieceFileError(f"{source}: header declares {declared} pieces, found {len(pieces)}")
    return pieces


def load_pieces(path: str) -> List[Piece]:
    with open(path, "r", encoding="utf-8") as fh:
        return parse_piece_file(fh.read(), source=path)


def load_many(paths: Iterable[str]) -> List[Piece]:
    pieces: List[Piece] = []
    for path in paths:
        pieces.extend(load_pieces(path))
    return pieces


def write_pieces(path: str, pieces: Sequence[Piece]) -> str:
    """Write ``pieces`` in load order using the same format ``load_pieces`` reads."""

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"{len(pieces)}\n")
        for p in pieces:
            f.write(f"{p.major} {p.minor}\n")
    return path


def solution_paths(n_results: int, base_dir: str) -> List[str]:
    """One path per block: ``solution.txt`` alone, ``solution_<i>.txt`` for several."""

    path = _resolve_output_path(base_dir, CFG.SOLUTION_OUT, "solution.txt")
    if n_results <= 1:
        return [path][:n_results]
    stem, ext = os.path.splitext(path)
    return [f"{stem}_{i}{ext}" for i in range(n_results)]


def write_solutions(results, base_dir: str) -> List[str]:
    """Write each block's slice order (first to last, added slices included)."""

    paths = solution_paths(len(results), base_dir)
    for result, path in zip(results, paths):
        write_pieces(path, result.slices)
    return paths


__all__ = [
    "PieceFileError",
    "load_many",
    "load_pieces",
    "parse_piece_file",
    "parse_piece_line",
    "solution_paths",
    "write_pieces",
    "write_solutions",
]
