"""
Tests for the counter ledger.

These tests verify:
    - Values are replayed from attributed operations
    - Reverting an owner removes exactly its operations
    - Lazy creation and default handling in CounterSet
    - Source inference from the questionnaire's current item
"""

import pytest

from qflow.counters import Counter, CounterSet
from qflow.errors import ConstructionError, NoSourceError, NotFoundError
from qflow.items import Item
from qflow.questionnaire import Questionnaire


@pytest.fixture
def owners():
    return Item(id="a", question="A"), Item(id="b", question="B"), Item(id="c", question="C")


class TestCounter:
    """Test a single Counter."""

    def test_requires_name(self):
        """Should refuse an empty name."""
        with pytest.raises(ConstructionError):
            Counter("")

    def test_initial_content(self):
        """Should report initial content with no operations."""
        counter = Counter("score", initial_content=4)
        assert counter.content == 4
        assert counter.operations == []

    def test_replay_in_order(self, owners):
        """Should fold operations over the initial content in insertion order."""
        a, b, c = owners
        counter = Counter("score")
        counter.increment_content(2, a)
        counter.set_content(10, b)
        counter.increment_content(-3, c)
        assert counter.content == 7

    def test_read_is_idempotent(self, owners):
        """Reading the value repeatedly should not change it."""
        a, _, _ = owners
        counter = Counter("score")
        counter.increment_content(5, a)
        assert counter.content == counter.content == 5

    def test_revert_set_replays_remaining(self, owners):
        """Reverting a set should restore what earlier operations produced."""
        a, b, c = owners
        counter = Counter("score")
        counter.increment_content(2, a)
        counter.set_content(10, b)
        counter.increment_content(1, c)
        removed = counter.revert(b)
        assert removed == 1
        assert counter.content == 3

    def test_revert_unknown_owner_is_noop(self, owners):
        """Reverting an owner with no operations should change nothing."""
        a, b, _ = owners
        counter = Counter("score")
        counter.increment_content(2, a)
        assert counter.revert(b) == 0
        assert counter.content == 2


class TestCounterSet:
    """Test CounterSet lookups, lazy creation and revert."""

    def test_increment_and_revert_scenario(self, owners):
        """Creating by increment then reverting the creator keeps later work."""
        a, b, _ = owners
        counters = CounterSet()
        counters.increment("score", 5, source=a)
        assert counters.get("score") == 5
        counters.increment("score", 3, source=b)
        assert counters.get("score") == 8
        counters.revert(a)
        assert counters.get("score") == 3

    def test_revert_every_writer_returns_to_zero(self, owners):
        """A lazily created counter starts at zero once all writers are reverted."""
        a, b, _ = owners
        counters = CounterSet()
        counters.set("level", 4, source=a)
        counters.increment("level", source=b)
        assert counters.get("level") == 5
        counters.revert(b)
        counters.revert(a)
        assert counters.get("level") == 0
        assert "level" in counters

    def test_default_increment_is_one(self, owners):
        """increment without a value should add one."""
        a, _, _ = owners
        counters = CounterSet()
        counters.increment("visits", source=a)
        counters.increment("visits", source=a)
        assert counters.get("visits") == 2

    def test_get_missing_without_default(self):
        """Should raise NotFoundError when no default is supplied."""
        with pytest.raises(NotFoundError):
            CounterSet().get("missing")

    def test_get_missing_with_zero_default(self):
        """A default of zero should be returned, not treated as missing."""
        assert CounterSet().get("missing", 0) == 0

    def test_revert_spans_counters(self, owners):
        """Revert should touch every counter the owner wrote to."""
        a, b, _ = owners
        counters = CounterSet()
        counters.increment("x", 1, source=a)
        counters.increment("y", 2, source=a)
        counters.increment("y", 5, source=b)
        counters.revert(a)
        assert counters.as_dict() == {"x": 0, "y": 5}

    def test_no_source_without_questionnaire(self):
        """Should raise NoSourceError when the source cannot be inferred."""
        with pytest.raises(NoSourceError):
            CounterSet().increment("score", 1)

    def test_source_defaults_to_current_item(self):
        """Operations without a source should belong to the current item."""
        first = Item(id="first", question="First")
        q = Questionnaire([first, Item(id="second", question="Second")], on_complete=lambda q: None)
        q.counters.set("score", 9)
        assert q.counters.counters[0].operations[0].owner is first

    def test_no_source_when_complete(self):
        """A completed questionnaire has no current item to attribute to."""
        q = Questionnaire([Item(id="only", question="Only")], on_complete=lambda q: None)
        q.next_q()
        with pytest.raises(NoSourceError):
            q.counters.increment("score")

    def test_names_and_len(self, owners):
        """Should expose counter names in creation order."""
        a, _, _ = owners
        counters = CounterSet()
        counters.set("b", 1, source=a)
        counters.set("a", 1, source=a)
        assert counters.names == ["b", "a"]
        assert len(counters) == 2
