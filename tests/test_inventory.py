import pytest

from config import CFG
from models import Piece
from solver.inventory import AccountingError, Inventory


def _pile(n_kinds=20):
    return Inventory({Piece(i + 1, 1): i + 1 for i in range(n_kinds)})


def test_lookup_prefers_overlay_and_defaults_to_zero():
    inv = Inventory({Piece(2, 1): 3})
    assert inv.lookup(Piece(1, 2)) == 3
    assert inv.lookup(Piece(9, 9)) == 0
    inv.put(Piece(2, 1), 1)
    assert inv.lookup(Piece(2, 1)) == 1
    assert inv.overlay_size == 1


def test_put_rejects_negative_counts():
    inv = Inventory({Piece(2, 1): 1})
    with pytest.raises(AccountingError):
        inv.put(Piece(2, 1), -1)


def test_take_consumes_one_and_refuses_when_empty():
    inv = Inventory({Piece(2, 1): 1})
    inv.take(Piece(2, 1))
    assert inv.lookup(Piece(2, 1)) == 0
    assert Piece(2, 1) not in inv
    with pytest.raises(AccountingError):
        inv.take(Piece(2, 1))


def test_branch_copy_shares_base_and_isolates_overlay():
    inv = _pile()
    copy = inv.branch_copy()
    assert copy.same_base(inv)
    copy.take(Piece(5, 1))
    assert inv.lookup(Piece(5, 1)) == 5
    assert copy.lookup(Piece(5, 1)) == 4
    assert copy != inv


def test_branch_copy_folds_large_overlay(monkeypatch):
    monkeypatch.setattr(CFG, "FOLD_RATIO", 0.1)
    inv = _pile(20)
    before = inv.total()
    old_id = inv.base_id
    for i in range(3):
        inv.take(Piece(i + 1, 1))
    copy = inv.branch_copy()
    assert inv.overlay_size == 0
    assert inv.base_id != old_id
    assert copy.same_base(inv)
    assert inv.total() == before - 3
    assert copy.total() == inv.total()


def test_fold_conserves_counts():
    inv = _pile(10)
    inv.take(Piece(1, 1))
    inv.take(Piece(4, 1))
    inv.put(Piece(7, 7), 2)
    before = inv.merged()
    total = inv.total()
    inv.fold()
    assert inv.merged() == before
    assert inv.total() == total
    # the piece at zero is gone from the new base
    assert Piece(1, 1) not in inv.merged()


def test_small_overlay_is_not_folded(monkeypatch):
    monkeypatch.setattr(CFG, "FOLD_RATIO", 0.5)
    inv = _pile(10)
    inv.take(Piece(3, 1))
    old_id = inv.base_id
    inv.branch_copy()
    assert inv.base_id == old_id
    assert inv.overlay_size == 1


def test_equality_fast_path_and_full_compare():
    a = _pile(5)
    b = a.branch_copy()
    assert a == b
    b.take(Piece(2, 1))
    assert a != b
    c = Inventory(b.merged())
    assert not c.same_base(b)
    assert c == b


def test_remove_consumed_drops_emptied_entries():
    inv = Inventory({Piece(2, 2): 2, Piece(3, 1): 1})
    inv.take(Piece(3, 1))
    out = inv.remove_consumed([Piece(2, 2)])
    assert out.merged() == {Piece(2, 2): 1}
    assert not out.same_base(inv)
    # source untouched
    assert inv.lookup(Piece(2, 2)) == 2


def test_remove_consumed_refuses_to_overdraw():
    inv = Inventory({Piece(2, 2): 1})
    with pytest.raises(AccountingError):
        inv.remove_consumed([Piece(2, 2), Piece(2, 2)])


def test_from_pieces_counts_and_stats():
    inv = Inventory.from_pieces([Piece(2, 1), Piece(1, 2), Piece(3, 3)])
    assert inv.lookup(Piece(2, 1)) == 2
    assert inv.pieces() == [Piece(2, 1), Piece(3, 3)]
    assert inv.stats() == {"max_count": 2, "duplicates": 1, "distinct": 2, "total": 3}
