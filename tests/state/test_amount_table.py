"""Tests for yieldledger/state/ledger.py: sparse amount tables."""

import pytest

from yieldledger.state.ledger import AmountTable


class TestAmountTable:
    def test_missing_key_is_zero(self):
        assert AmountTable().get("alice") == 0

    def test_zero_rows_are_dropped(self):
        t = AmountTable({"alice": 5})
        t.set("alice", 0)
        assert len(t) == 0
        assert t.get_all() == {}

    def test_initial_zeros_not_stored(self):
        assert len(AmountTable({"alice": 0, "bob": 3})) == 1

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            AmountTable().set("alice", -1)

    def test_non_int_rejected(self):
        with pytest.raises(TypeError):
            AmountTable().set("alice", 1.5)  # type: ignore[arg-type]

    def test_add_and_subtract(self):
        t = AmountTable()
        t.add("alice", 10)
        t.subtract("alice", 4)
        assert t.get("alice") == 6
        with pytest.raises(ValueError):
            t.subtract("alice", 7)
        assert t.get("alice") == 6

    def test_tuple_keys_and_total(self):
        t = AmountTable({("alice", "s1"): 3, ("alice", "s2"): 4})
        assert t.total() == 7
        assert sorted(t.items()) == [(("alice", "s1"), 3), (("alice", "s2"), 4)]

    def test_copy_is_independent(self):
        t = AmountTable({"alice": 1})
        c = t.copy()
        c.set("alice", 2)
        assert t.get("alice") == 1
        assert t != c
        assert t == AmountTable({"alice": 1})
