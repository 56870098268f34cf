"""
Counter ledger.

A Counter's value is never stored directly. It is replayed from an ordered
list of operations, each attributed to the Item that performed it:

    content = fold(transform, operations, initial_content)

This makes undo exact. Reverting an Item physically removes its operations
and the value is replayed from what remains, so a `set` made by a later
Item is undone just as cleanly as an `increment`.

ARCHITECTURAL RULE:
    Counters are created lazily on first write and never destroyed
    except with their CounterSet. A newly created counter starts at 0
    and the first write is an ordinary, revertible operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from qflow.errors import ConstructionError, NoSourceError, NotFoundError

if TYPE_CHECKING:
    from qflow.items import Item
    from qflow.questionnaire import Questionnaire

logger = logging.getLogger(__name__)

Number = float


@dataclass(frozen=True)
class CounterOperation:
    """
    A single attributed change to a counter.

    Properties:
        owner: the Item that performed the operation
        transform: maps the running value to the new value
        description: short human-readable label, e.g. "+2" or "=5"
    """

    owner: "Item"
    transform: Callable[[Number], Number]
    description: str = ""


class Counter:
    """
    Named numeric accumulator replayed from attributed operations.

    Name uniqueness is enforced by the owning CounterSet, not here.
    """

    def __init__(self, name: str, initial_content: Number = 0):
        if not name:
            raise ConstructionError("A Counter must have a name")
        self.name = name
        self._initial_content = initial_content
        self._operations: List[CounterOperation] = []

    @property
    def initial_content(self) -> Number:
        return self._initial_content

    @property
    def operations(self) -> List[CounterOperation]:
        return list(self._operations)

    @property
    def content(self) -> Number:
        value = self._initial_content
        for operation in self._operations:
            value = operation.transform(value)
        return value

    def set_content(self, value: Number, source: "Item") -> None:
        """Register source setting the counter to value."""
        self._operations.append(
            CounterOperation(owner=source, transform=lambda _: value, description=f"={value}")
        )

    def increment_content(self, delta: Number, source: "Item") -> None:
        """Register source incrementing the counter by delta."""
        self._operations.append(
            CounterOperation(owner=source, transform=lambda x: x + delta, description=f"{delta:+}")
        )

    def revert(self, source: "Item") -> int:
        """Remove every operation owned by source. Returns how many were removed."""
        kept = [o for o in self._operations if o.owner is not source]
        removed = len(self._operations) - len(kept)
        self._operations = kept
        return removed

    def __repr__(self) -> str:
        return f"Counter(name={self.name!r}, content={self.content!r}, operations={len(self._operations)})"


class CounterSet:
    """
    All Counters belonging to one Questionnaire.

    Operations default their source to the Questionnaire's current item.
    If there is no current item and no explicit source, NoSourceError
    is raised.
    """

    def __init__(self, questionnaire: Optional["Questionnaire"] = None):
        self._questionnaire = questionnaire
        self._counters: Dict[str, Counter] = {}

    @property
    def counters(self) -> List[Counter]:
        return list(self._counters.values())

    @property
    def names(self) -> List[str]:
        return list(self._counters.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._counters

    def __len__(self) -> int:
        return len(self._counters)

    def _find_counter(self, name: str) -> Counter:
        try:
            return self._counters[name]
        except KeyError:
            raise NotFoundError(f"No counter found named {name}") from None

    def _create_counter(self, name: str) -> Counter:
        counter = Counter(name)
        self._counters[name] = counter
        logger.debug(f"Created counter {name}")
        return counter

    def _resolve_source(self, source: Optional["Item"]) -> "Item":
        if source is not None:
            return source
        current = self._questionnaire.current_item if self._questionnaire is not None else None
        if current is None:
            raise NoSourceError("Cannot determine counter operation source")
        return current

    def get(self, name: str, default: Optional[Number] = None) -> Number:
        """
        Return the replayed value of a counter.

        If the counter does not exist, return default. A default of None
        means "no default": NotFoundError is raised instead, so a default
        of 0 stays distinguishable from no default at all.
        """
        try:
            return self._find_counter(name).content
        except NotFoundError:
            if default is not None:
                return default
            raise

    def set(self, name: str, value: Number, source: Optional["Item"] = None) -> None:
        """Register source setting counter name to value."""
        owner = self._resolve_source(source)
        counter = self._counters.get(name) or self._create_counter(name)
        counter.set_content(value, owner)
        logger.debug(f"Counter {name} set to {value} by {owner.id}")

    def increment(self, name: str, value: Number = 1, source: Optional["Item"] = None) -> None:
        """Register source incrementing counter name by value."""
        owner = self._resolve_source(source)
        counter = self._counters.get(name) or self._create_counter(name)
        counter.increment_content(value, owner)
        logger.debug(f"Counter {name} incremented by {value} by {owner.id}")

    def revert(self, source: "Item") -> None:
        """Remove all of source's operations from every counter."""
        removed = sum(c.revert(source) for c in self._counters.values())
        if removed:
            logger.debug(f"Reverted {removed} counter operation(s) owned by {source.id}")

    def as_dict(self) -> Dict[str, Number]:
        """Snapshot of every counter's current value."""
        return {name: counter.content for name, counter in self._counters.items()}
