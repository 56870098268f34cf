"""
Next-item routing strategies.

Every Item carries exactly one strategy, chosen once at construction:

    Conditional(resolver)  -> resolver(answer, item, questionnaire)
    FixedTarget(item_id)   -> item_id
    SequentialOrEnd()      -> the following item, or END if last
    ImmediateEnd()         -> END

Precedence when building from Item arguments:
    next_item_fun  >  explicit next_item  >  sequential

A resolution of None (or False, from a resolver) means END.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Union

from qflow.errors import ConstructionError

if TYPE_CHECKING:
    from qflow.answers import Answer
    from qflow.items import Item
    from qflow.questionnaire import Questionnaire

NextItemFun = Callable[["Optional[Answer]", "Item", "Questionnaire"], Union[str, None, bool]]


@dataclass(frozen=True)
class Conditional:
    resolver: NextItemFun


@dataclass(frozen=True)
class FixedTarget:
    item_id: str


@dataclass(frozen=True)
class SequentialOrEnd:
    pass


@dataclass(frozen=True)
class ImmediateEnd:
    pass


RoutingStrategy = Union[Conditional, FixedTarget, SequentialOrEnd, ImmediateEnd]


def build_strategy(
    item_id: str,
    next_item: Union[str, None, bool] = None,
    next_item_fun: Optional[NextItemFun] = None,
) -> RoutingStrategy:
    """Select the routing strategy for an item."""
    if next_item_fun is not None:
        if not callable(next_item_fun):
            raise ConstructionError(f"next_item_fun for item {item_id} is not callable")
        return Conditional(next_item_fun)
    if next_item is False:
        return ImmediateEnd()
    if next_item is None:
        return SequentialOrEnd()
    if isinstance(next_item, str) and next_item:
        return FixedTarget(next_item)
    raise ConstructionError(f"Invalid next_item {next_item!r} for item {item_id}")


def resolve_next_id(
    strategy: RoutingStrategy,
    answer: Optional["Answer"],
    item: "Item",
    questionnaire: "Questionnaire",
) -> Optional[str]:
    """Return the id of the next item, or None for END."""
    if isinstance(strategy, Conditional):
        result = strategy.resolver(answer, item, questionnaire)
        if result is None or result is False:
            return None
        return result
    if isinstance(strategy, ImmediateEnd):
        return None
    if isinstance(strategy, FixedTarget):
        return strategy.item_id
    if isinstance(strategy, SequentialOrEnd):
        position = questionnaire.items.index(item)
        if position + 1 >= len(questionnaire.items):
            return None
        return questionnaire.items[position + 1].id
    raise TypeError(f"Unsupported routing strategy: {type(strategy)}")
