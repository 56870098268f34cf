"""
Questionnaire navigation state machine.

States:
    Active(current_item)  ->  next_q()  ->  Active(next) | Complete
    any, with history     ->  last_q()  ->  Active(popped)

next_q():
    1. run the current item's process_answer hook (counters change here)
    2. push the current item onto item_history
    3. validate the current item; a blocking issue stops here, leaving
       steps 1-2 applied
    4. resolve the next item; None means Complete and fires on_complete

last_q():
    1. optionally reset the current item's answers (reset_items_on_back)
    2. pop item_history (empty history is a NO_HISTORY no-op)
    3. revert every counter operation owned by the popped item
    4. make the popped item current

Going back only undoes what the item being returned to contributed.
Stepping back several items takes several last_q() calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from qflow.clock import Clock
from qflow.config import QuestionnaireSettings
from qflow.counters import CounterSet
from qflow.errors import ConstructionError, NoCurrentItemError, UnknownItemIdError
from qflow.items import Item
from qflow.validation import ValidationIssue, has_blocking

logger = logging.getLogger(__name__)


class NavigationStatus(Enum):
    ADVANCED = "advanced"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    WENT_BACK = "went_back"
    NO_HISTORY = "no_history"


@dataclass(frozen=True)
class NavigationOutcome:
    """
    Result of a next_q() or last_q() call.

    Properties:
        status: what happened
        item: the current item after the call (None once complete)
        issues: issues found while validating (BLOCKED carries the blockers)
    """

    status: NavigationStatus
    item: Optional[Item]
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def moved(self) -> bool:
        return self.status in (
            NavigationStatus.ADVANCED,
            NavigationStatus.COMPLETED,
            NavigationStatus.WENT_BACK,
        )


class Questionnaire:
    """One run through a fixed, ordered list of Items."""

    def __init__(
        self,
        items: Sequence[Item],
        on_complete: Callable[["Questionnaire"], Any],
        name: Optional[str] = None,
        introduction: Optional[str] = None,
        citation: Optional[str] = None,
        version: Optional[str] = None,
        reset_items_on_back: bool = False,
        clock: Optional[Clock] = None,
    ):
        if not items:
            raise ConstructionError("Questionnaire requires at least one item")
        if on_complete is None or not callable(on_complete):
            raise ConstructionError("Questionnaire requires an on_complete callback")
        seen = set()
        for item in items:
            if not isinstance(item, Item):
                raise ConstructionError(f"Questionnaire items must be Item objects, got {item!r}")
            if item.id in seen:
                raise ConstructionError(f"Duplicate item id {item.id}")
            seen.add(item.id)

        self.settings = QuestionnaireSettings(
            name=name,
            introduction=introduction,
            citation=citation,
            version=version,
            reset_items_on_back=reset_items_on_back,
        )
        self.items: List[Item] = list(items)
        self.on_complete = on_complete
        self.counters = CounterSet(self)
        self.current_item: Optional[Item] = self.items[0]
        self.item_history: List[Item] = []
        # free-form caller state, carried along untouched
        self.data: Any = None

        if clock is not None:
            for item in self.items:
                item.bind_clock(clock)

    @classmethod
    def from_settings(
        cls,
        items: Sequence[Item],
        on_complete: Callable[["Questionnaire"], Any],
        settings: QuestionnaireSettings,
        clock: Optional[Clock] = None,
    ) -> "Questionnaire":
        return cls(items, on_complete, clock=clock, **settings.as_kwargs())

    @property
    def name(self) -> Optional[str]:
        return self.settings.name

    @property
    def introduction(self) -> Optional[str]:
        return self.settings.introduction

    @property
    def citation(self) -> Optional[str]:
        return self.settings.citation

    @property
    def version(self) -> Optional[str]:
        return self.settings.version

    @property
    def reset_items_on_back(self) -> bool:
        return self.settings.reset_items_on_back

    @property
    def completed(self) -> bool:
        return self.current_item is None

    def next_q(self) -> NavigationOutcome:
        """Advance from the current item. See the module docstring."""
        item = self.current_item
        if item is None:
            history = [i.id for i in self.item_history]
            raise NoCurrentItemError(f"Cannot process next_q for undefined current_item {history}")

        answer = item.last_changed_answer
        item.process_answer(answer, item, self)
        self.item_history.append(item)

        issues = item.check_validation(self)
        if has_blocking(issues):
            blockers = [i for i in issues if i.blocking]
            logger.warning(
                f"Item {item.id} blocked by validation: "
                + "; ".join(f"{i.owner_id}: {i.message}" for i in blockers)
            )
            return NavigationOutcome(NavigationStatus.BLOCKED, item, issues)

        self.current_item = item.next_item(answer, item, self)
        if self.current_item is None:
            logger.info(f"Questionnaire complete after {item.id}")
            self.on_complete(self)
            return NavigationOutcome(NavigationStatus.COMPLETED, None, issues)

        logger.info(f"Moved from {item.id} to {self.current_item.id}")
        return NavigationOutcome(NavigationStatus.ADVANCED, self.current_item, issues)

    def last_q(self) -> NavigationOutcome:
        """Step back one item. See the module docstring."""
        if self.reset_items_on_back and self.current_item is not None:
            self.current_item.reset_answers()

        if not self.item_history:
            logger.warning("No history to go back to")
            return NavigationOutcome(NavigationStatus.NO_HISTORY, self.current_item)

        previous = self.item_history.pop()
        self.counters.revert(previous)
        left = self.current_item.id if self.current_item is not None else "end"
        self.current_item = previous
        logger.info(f"Went back from {left} to {previous.id}")
        return NavigationOutcome(NavigationStatus.WENT_BACK, previous)

    def get_item_by_id(self, item_id: str) -> Item:
        for item in self.items:
            if item.id == item_id:
                return item
        current = self.current_item.id if self.current_item is not None else None
        raise UnknownItemIdError(f"[{current}] Cannot find item with id {item_id}")

    @property
    def validation_issues(self) -> List[ValidationIssue]:
        """Last recorded issues across every item, computed by walking the tree."""
        issues = []
        for item in self.items:
            issues.extend(item.validation_issues)
        return issues

    def check_validation(self) -> List[ValidationIssue]:
        """Re-validate every item, visited or not."""
        issues = []
        for item in self.items:
            issues.extend(item.check_validation(self))
        return issues

    def __repr__(self) -> str:
        current = self.current_item.id if self.current_item is not None else None
        return f"Questionnaire(name={self.name!r}, items={len(self.items)}, current_item={current!r})"
