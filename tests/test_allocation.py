"""Tests for allocation editing and rebalancing.

Covers:
- Proportional redistribution on weight edits
- Rejected edits
- Add / remove / rename
- Template application
- Weight bounds across random edit sequences
"""
from __future__ import annotations

import math
import random

import pytest

from portfolio.allocation import AllocationSet, from_template
from portfolio.entry import AssetEntry


def make_allocation(weights: dict[str, float]) -> AllocationSet:
    """Create an allocation from {id: weight} in insertion order."""
    return from_template(list(weights.items()))


class TestSetWeight:
    """Tests for single-entry weight edits."""

    def test_excess_taken_proportionally_from_others(self):
        """A=50, B=30, C=20; A -> 70 should give B=18, C=12."""
        a = make_allocation({"A": 50, "B": 30, "C": 20})

        b = a.set_weight("A", 70)

        w = b.weights()
        assert w["A"] == 70
        assert w["B"] == pytest.approx(18)
        assert w["C"] == pytest.approx(12)
        assert b.total == pytest.approx(100)

    def test_under_100_applied_as_is(self):
        """Lowering a weight leaves the others alone and the total under 100."""
        a = make_allocation({"A": 50, "B": 30, "C": 20})

        b = a.set_weight("A", 20)

        assert b.weights() == {"A": 20, "B": 30, "C": 20}
        assert b.total == pytest.approx(70)

    def test_edit_from_under_allocated_state(self):
        """Excess is computed against 100, not against the previous total."""
        a = make_allocation({"A": 20, "B": 20})

        b = a.set_weight("A", 100)

        assert b.weights()["A"] == 100
        assert b.weights()["B"] == pytest.approx(0)

    def test_zero_weight_entries_absorb_nothing(self):
        """Entries at 0 stay at 0 when others absorb the excess."""
        a = make_allocation({"A": 10, "B": 90, "C": 0, "D": 0})

        b = a.set_weight("C", 50)

        w = b.weights()
        assert w["C"] == 50
        assert w["D"] == 0
        assert w["A"] == pytest.approx(5)
        assert w["B"] == pytest.approx(45)

    @pytest.mark.parametrize("value", [-1, 100.5, "abc", None, float("nan"), float("inf"), True])
    def test_invalid_weight_is_noop(self, value):
        """Non-numeric or out-of-range weights leave the snapshot unchanged."""
        a = make_allocation({"A": 50, "B": 50})

        assert a.set_weight("A", value) is a

    def test_numeric_string_accepted(self):
        """Text input that parses as a number is applied."""
        a = make_allocation({"A": 50, "B": 50})

        assert a.set_weight("A", "25.5").weights()["A"] == 25.5

    def test_unknown_id_is_noop(self):
        """Editing a missing entry changes nothing."""
        a = make_allocation({"A": 50, "B": 50})

        assert a.set_weight("Z", 10) is a

    def test_original_snapshot_untouched(self):
        """Edits return a new snapshot."""
        a = make_allocation({"A": 50, "B": 30, "C": 20})

        a.set_weight("A", 70)

        assert a.weights() == {"A": 50, "B": 30, "C": 20}


class TestAddEntry:
    """Tests for adding entries."""

    def test_add_starts_at_zero(self):
        """New entries default to 0 and do not disturb the total."""
        a = make_allocation({"stocks": 60, "cash": 40})

        b = a.add_entry("Bonds")

        assert len(b.entries) == 3
        new = b.entries[-1]
        assert new.label == "Bonds"
        assert new.weight == 0
        assert new.slot == 2
        assert b.total == pytest.approx(100)

    def test_generated_ids_unique(self):
        """Each added entry gets a fresh id."""
        a = AllocationSet()
        for i in range(20):
            a = a.add_entry(f"New Asset {i + 1}")

        ids = a.ids()
        assert len(set(ids)) == len(ids)
        assert all(i.startswith("asset-") for i in ids)

    def test_requested_id_collision_replaced(self):
        """A requested id already in use is replaced with a generated one."""
        a = make_allocation({"stocks": 100})

        b = a.add_entry("Stocks again", entry_id="stocks")

        assert b.entries[-1].id != "stocks"
        assert len(set(b.ids())) == 2

    def test_add_does_not_rebalance(self):
        """A non-zero initial weight is appended without compensation."""
        a = make_allocation({"stocks": 100})

        b = a.add_entry("Gold", 10)

        assert b.weights()["stocks"] == 100
        assert b.total == pytest.approx(110)

    def test_invalid_initial_weight_becomes_zero(self):
        """Out-of-range initial weights are coerced to 0."""
        b = AllocationSet().add_entry("X", 250)

        assert b.entries[0].weight == 0


class TestRemoveEntry:
    """Tests for removing entries."""

    def test_weight_redistributed_proportionally(self):
        """Removing C=20 from A=50, B=30 gives A=62.5, B=37.5."""
        a = make_allocation({"A": 50, "B": 30, "C": 20})

        b = a.remove_entry("C")

        assert b.weights() == pytest.approx({"A": 62.5, "B": 37.5})
        assert b.total == pytest.approx(100)

    def test_total_conserved_when_under_100(self):
        """New total equals remaining total plus the removed weight."""
        a = make_allocation({"A": 40, "B": 20, "C": 10})

        b = a.remove_entry("C")

        assert b.total == pytest.approx(70)

    def test_all_zero_no_redistribution(self):
        """Nothing to share when everything is zero."""
        a = make_allocation({"A": 0, "B": 0, "C": 0})

        b = a.remove_entry("B")

        assert b.weights() == {"A": 0, "C": 0}

    def test_remaining_zero_keeps_zeros(self):
        """Removed weight cannot be shared among zero-weight entries."""
        a = make_allocation({"A": 0, "B": 0, "C": 100})

        b = a.remove_entry("C")

        assert b.weights() == {"A": 0, "B": 0}
        assert not any(math.isnan(w) for w in b.weights().values())

    def test_remove_last_entry_empties_set(self):
        """An emptied set has total 0."""
        a = make_allocation({"A": 100})

        b = a.remove_entry("A")

        assert b.entries == ()
        assert b.total == 0

    def test_remove_unknown_is_noop(self):
        """Removing a missing id changes nothing."""
        a = make_allocation({"A": 100})

        assert a.remove_entry("Z") is a


class TestRenameAndTemplate:
    """Tests for metadata edits and template application."""

    def test_rename_changes_label_only(self):
        """Renaming keeps id and weight."""
        a = make_allocation({"stocks": 60, "cash": 40})

        b = a.rename_entry("stocks", "Global Equities")

        assert b.get("stocks") == AssetEntry("stocks", "Global Equities", 60.0, 0)
        assert b.total == a.total

    def test_template_labels_and_slots(self):
        """Labels come from the name table, else the capitalised id."""
        a = from_template([("stocks", 60), ("realEstate", 40)], {"realEstate": "Real Estate"})

        assert [e.label for e in a.entries] == ["Stocks", "Real Estate"]
        assert [e.slot for e in a.entries] == [0, 1]

    def test_apply_template_replaces_everything(self):
        """Applying a template discards prior entries and edits."""
        a = make_allocation({"A": 50, "B": 50}).add_entry("X")

        b = a.apply_template([("stocks", 85), ("cash", 15)])

        assert b.ids() == ["stocks", "cash"]
        assert b.total == pytest.approx(100)

    def test_apply_template_idempotent(self):
        """Applying the same template twice yields identical snapshots."""
        template = [("stocks", 60), ("realEstate", 15), ("commodities", 10), ("cash", 15)]
        a = make_allocation({"A": 10}).apply_template(template)

        b = a.set_weight("stocks", 90).apply_template(template)

        assert a == b


class TestInvariants:
    """Bounds and fidelity across random edit sequences."""

    def test_random_edit_sequences_stay_in_bounds(self):
        """Every weight stays in [0, 100] and ids stay unique."""
        rng = random.Random(7)
        a = from_template([("stocks", 60), ("realEstate", 15), ("commodities", 10), ("cash", 15)])

        for _ in range(500):
            op = rng.random()
            if op < 0.6 and a.entries:
                target = rng.choice(a.ids())
                value = round(rng.uniform(0, 100), 2)
                a = a.set_weight(target, value)
                assert a.weights()[target] == value
            elif op < 0.8:
                a = a.add_entry("New", rng.choice([0, 5, 10]))
            elif a.entries:
                a = a.remove_entry(rng.choice(a.ids()))

            for e in a.entries:
                assert 0 <= e.weight <= 100
            assert a.total >= 0
            assert len(set(a.ids())) == len(a.ids())
