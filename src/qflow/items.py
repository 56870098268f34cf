"""
Items (questions).

An Item owns its Answers, an optional answer-processing hook, item-level
validators and one routing strategy (see qflow.routing).

Item ids must be unique across a Questionnaire. The Questionnaire checks
this; an Item on its own does not.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, Union

from qflow.answers import Answer, AnswerDefinition, AnswerRow, AnswerType, as_answers
from qflow.clock import Clock, utc_now
from qflow.errors import ConstructionError, InvalidAccessError, UnknownItemIdError
from qflow.routing import Conditional, NextItemFun, RoutingStrategy, build_strategy, resolve_next_id
from qflow.validation import ValidationIssue, Validator, as_validators

if TYPE_CHECKING:
    from qflow.questionnaire import Questionnaire

logger = logging.getLogger(__name__)

ProcessAnswerFun = Callable[[Optional[Answer], "Item", "Questionnaire"], None]


def _no_processing(answer, item, questionnaire) -> None:
    return None


class Item:
    """
    A single question.

    Properties:
        id: unique id within the questionnaire
        question: question text
        answers: owned Answers (possibly empty)
        process_answer: hook run by Questionnaire.next_q before validation;
            the sanctioned place to mutate counters
        validators: item-level Validators (called with answer=None)
        routing: the RoutingStrategy chosen at construction
        conditional_routing: True iff a next_item_fun was supplied
    """

    def __init__(
        self,
        id: str,
        question: str,
        answers: Optional[Union[AnswerDefinition, Sequence[AnswerDefinition]]] = None,
        process_answer_fun: Optional[ProcessAnswerFun] = None,
        validators: Optional[Sequence[Any]] = None,
        next_item: Union[str, None, bool] = None,
        next_item_fun: Optional[NextItemFun] = None,
        clock: Optional[Clock] = None,
    ):
        if not id:
            raise ConstructionError("An Item must have an id")
        if not question:
            raise ConstructionError(f"Item {id} must have a question")
        self.id = id
        self.question = question
        self.answers: List[Answer] = as_answers(answers, id, clock=clock)
        self.process_answer: ProcessAnswerFun = process_answer_fun or _no_processing
        self.validators: List[Validator] = as_validators(validators)
        self.routing: RoutingStrategy = build_strategy(id, next_item, next_item_fun)
        self.clock: Clock = clock or utc_now
        self._issues: List[ValidationIssue] = []

    @property
    def conditional_routing(self) -> bool:
        return isinstance(self.routing, Conditional)

    @property
    def answer(self) -> Answer:
        """The sole answer. Only valid when the item has exactly one."""
        if len(self.answers) != 1:
            raise InvalidAccessError(
                f"Item {self.id} has {len(self.answers)} answers; .answer requires exactly one"
            )
        return self.answers[0]

    @property
    def last_changed_answer(self) -> Optional[Answer]:
        """The answer changed most recently; ties go to the later answer."""
        latest = None
        for answer in self.answers:
            if not answer.content_changed:
                continue
            if latest is None or answer.last_changed_time >= latest.last_changed_time:
                latest = answer
        return latest

    @property
    def answer_type(self) -> Optional[AnswerType]:
        """The AnswerType shared by every answer, or None if mixed or empty."""
        types = {a.type for a in self.answers}
        if len(types) == 1:
            return types.pop()
        return None

    def bind_clock(self, clock: Clock) -> None:
        self.clock = clock
        for answer in self.answers:
            answer.bind_clock(clock)

    def reset_answers(self) -> None:
        for answer in self.answers:
            answer.reset_content()

    def next_item(
        self,
        last_changed_answer: Optional[Answer],
        current_item: "Item",
        questionnaire: "Questionnaire",
    ) -> Optional["Item"]:
        """
        Resolve the item that follows this one.

        Returns None when the questionnaire should end. Raises
        UnknownItemIdError if the strategy names an id that is not in
        questionnaire.items.
        """
        item_id = resolve_next_id(self.routing, last_changed_answer, current_item, questionnaire)
        if item_id is None:
            return None
        for item in questionnaire.items:
            if item.id == item_id:
                return item
        raise UnknownItemIdError(f"[{self.id}] Cannot find next_item with id {item_id}")

    @property
    def issues(self) -> List[ValidationIssue]:
        """Issues from item-level validators at their last run."""
        return list(self._issues)

    @property
    def validation_issues(self) -> List[ValidationIssue]:
        """Last recorded issues for this item and all of its answers."""
        issues = list(self._issues)
        for answer in self.answers:
            issues.extend(answer.validation_issues)
        return issues

    def check_validation(
        self, questionnaire: Optional["Questionnaire"] = None, include_children: bool = True
    ) -> List[ValidationIssue]:
        """Re-run item-level validators, then (optionally) every answer's."""
        now = self.clock()
        fresh = []
        for validator in self.validators:
            message = validator.evaluate(None, self, questionnaire)
            if message is not None:
                fresh.append(ValidationIssue(self.id, message, validator.level, now))
        self._issues = fresh

        issues = list(fresh)
        if include_children:
            for answer in self.answers:
                issues.extend(answer.check_validation(self, questionnaire, True))
        logger.debug(f"Validated item {self.id}: {len(issues)} issue(s)")
        return issues

    @property
    def as_rows(self) -> List[AnswerRow]:
        rows = []
        for answer in self.answers:
            rows.extend(answer.to_row(True))
        return rows

    def __repr__(self) -> str:
        return f"Item(id={self.id!r}, answers={len(self.answers)})"
