# config.py
import os


def _opt_float(name: str):
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


def _opt_int(name: str):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "on", "yes")


# ======= Inventory =======
# Overlay entries allowed (as a fraction of the base layer) before a branch
# copy folds the overlay back into a fresh base.
FOLD_RATIO = float(os.getenv("BR_FOLD_RATIO", "0.1"))

# ======= Search heuristics =======
# min_path_len = int(remaining_pieces * MIN_PATH_RATIO)
MIN_PATH_RATIO = float(os.getenv("BR_MIN_PATH_RATIO", "0.75"))
# The outer loop keeps going while min_path_len > remaining // STOP_DIVISOR
STOP_DIVISOR = int(os.getenv("BR_STOP_DIVISOR", "5"))
# Groups are collapsed to the best one at round min_path_len // 2, but only
# once more than this many rounds have elapsed.
COLLAPSE_AFTER_ROUNDS = int(os.getenv("BR_COLLAPSE_AFTER_ROUNDS", "3"))
FIND_MISSING = _flag("BR_FIND_MISSING")

# ======= Test data preparation =======
EAT_PROB = _opt_float("BR_EAT_PROB")
SEED = _opt_int("BR_SEED")

# ======= Web front end guards =======
MAX_PIECES = int(os.getenv("BR_MAX_PIECES", "200000"))

# ======= Output names =======
SOLUTION_OUT = os.getenv("BR_SOLUTION_OUT", "solution.txt")


class CFG:
    FOLD_RATIO = FOLD_RATIO

    MIN_PATH_RATIO        = MIN_PATH_RATIO
    STOP_DIVISOR          = STOP_DIVISOR
    COLLAPSE_AFTER_ROUNDS = COLLAPSE_AFTER_ROUNDS
    FIND_MISSING          = FIND_MISSING

    EAT_PROB = EAT_PROB
    SEED     = SEED

    MAX_PIECES = MAX_PIECES

    SOLUTION_OUT = SOLUTION_OUT


__all__ = ["CFG"]
