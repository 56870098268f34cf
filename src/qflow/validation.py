"""
Validation rules for Answers and Items.

A Validator inspects an Answer (answer-level rule) or an Item
(item-level rule, called with answer=None) and returns a failure
message, or None when the rule passes. The owner wraps each message
in a ValidationIssue carrying its own id, the validator's level and
a timestamp.

ARCHITECTURAL RULE:
    Validation never raises. Issues are data.
    Only IssueLevel.ERROR blocks forward navigation.

Each owner keeps only its own issues. Aggregate views (an Item with
its Answers, a whole Questionnaire) are computed by walking the tree.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, Tuple, Type, Union

from qflow.errors import ConstructionError

if TYPE_CHECKING:
    from qflow.answers import Answer
    from qflow.items import Item
    from qflow.questionnaire import Questionnaire


class IssueLevel(Enum):
    """Severity of a validation issue."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def blocking(self) -> bool:
        return self is IssueLevel.ERROR


@dataclass(frozen=True)
class ValidationIssue:
    """
    A validation failure attributed to one Answer or Item.

    Properties:
        owner_id: id of the Answer or Item that failed
        message: human-readable description
        level: IssueLevel
        timestamp: when the issue was detected
    """

    owner_id: str
    message: str
    level: IssueLevel
    timestamp: datetime

    @property
    def blocking(self) -> bool:
        return self.level.blocking


def _is_empty(content: Any) -> bool:
    if content is None:
        return True
    if isinstance(content, str):
        return content.strip() == ""
    if isinstance(content, (list, tuple, set, dict)):
        return len(content) == 0
    return False


class Validator(ABC):
    """
    Base class for validation rules.

    Subclasses implement evaluate(). Answer-level rules receive the
    Answer being checked; item-level rules receive answer=None.

    Rules other than Required and NotBlank pass on empty content:
    presence is Required's concern.
    """

    level: IssueLevel = IssueLevel.ERROR

    def __init__(self, message: Optional[str] = None, level: Optional[IssueLevel] = None):
        self.message = message
        if level is not None:
            self.level = level

    @abstractmethod
    def evaluate(
        self,
        answer: Optional["Answer"],
        item: Optional["Item"],
        questionnaire: Optional["Questionnaire"],
    ) -> Optional[str]:
        """Return a failure message, or None if the rule passes."""

    def _fail(self, default: str) -> str:
        return self.message or default

    def __repr__(self) -> str:
        return f"{type(self).__name__}(level={self.level.name})"


class Required(Validator):
    """Answer must have been given a non-empty value."""

    def evaluate(self, answer, item, questionnaire):
        if answer is None:
            return None
        if not answer.content_changed or _is_empty(answer.content):
            return self._fail("An answer is required")
        return None


class NotBlank(Validator):
    """Text content, if any, must contain more than whitespace."""

    def evaluate(self, answer, item, questionnaire):
        if answer is None:
            return None
        content = answer.content
        if isinstance(content, str) and content.strip() == "":
            return self._fail("Answer must not be blank")
        return None


class OfType(Validator):
    """Content must be an instance of one of the given Python types."""

    def __init__(self, types: Union[Type, Tuple[Type, ...]], **kwargs):
        super().__init__(**kwargs)
        self.types = types if isinstance(types, tuple) else (types,)

    def evaluate(self, answer, item, questionnaire):
        if answer is None or _is_empty(answer.content):
            return None
        content = answer.content
        # bool is an int subclass; only accept it when asked for explicitly
        if isinstance(content, bool) and bool not in self.types:
            ok = False
        else:
            ok = isinstance(content, self.types)
        if not ok:
            names = ", ".join(t.__name__ for t in self.types)
            return self._fail(f"Answer must be of type {names}, got {type(content).__name__}")
        return None


class GreaterThan(Validator):
    """Numeric content must exceed a threshold (or equal it with inclusive=True)."""

    def __init__(self, threshold: float, inclusive: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.threshold = threshold
        self.inclusive = inclusive

    def evaluate(self, answer, item, questionnaire):
        if answer is None or _is_empty(answer.content):
            return None
        try:
            value = float(answer.content)
        except (TypeError, ValueError):
            return self._fail(f"Answer must be a number, got {answer.content!r}")
        ok = value >= self.threshold if self.inclusive else value > self.threshold
        if not ok:
            op = ">=" if self.inclusive else ">"
            return self._fail(f"Answer must be {op} {self.threshold}")
        return None


class LessThan(Validator):
    """Numeric content must be below a threshold (or equal it with inclusive=True)."""

    def __init__(self, threshold: float, inclusive: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.threshold = threshold
        self.inclusive = inclusive

    def evaluate(self, answer, item, questionnaire):
        if answer is None or _is_empty(answer.content):
            return None
        try:
            value = float(answer.content)
        except (TypeError, ValueError):
            return self._fail(f"Answer must be a number, got {answer.content!r}")
        ok = value <= self.threshold if self.inclusive else value < self.threshold
        if not ok:
            op = "<=" if self.inclusive else "<"
            return self._fail(f"Answer must be {op} {self.threshold}")
        return None


class MatchesPattern(Validator):
    """Text content must fully match a regular expression."""

    def __init__(self, pattern: str, **kwargs):
        super().__init__(**kwargs)
        self.pattern = re.compile(pattern)

    def evaluate(self, answer, item, questionnaire):
        if answer is None or _is_empty(answer.content):
            return None
        if not self.pattern.fullmatch(str(answer.content)):
            return self._fail(f"Answer does not match {self.pattern.pattern}")
        return None


class AllAnswered(Validator):
    """Item-level rule: every answer on the item must have been given content."""

    def evaluate(self, answer, item, questionnaire):
        if item is None:
            return None
        missing = [a.id for a in item.answers if not a.content_changed]
        if missing:
            return self._fail(f"Unanswered: {', '.join(missing)}")
        return None


class FunctionValidator(Validator):
    """
    Wraps a plain callable as a validator.

    The callable takes (answer, item, questionnaire) and returns a
    failure message or None.
    """

    def __init__(self, fun: Callable[..., Optional[str]], **kwargs):
        super().__init__(**kwargs)
        self.fun = fun

    def evaluate(self, answer, item, questionnaire):
        return self.fun(answer, item, questionnaire)

    def __repr__(self) -> str:
        name = getattr(self.fun, "__name__", "fun")
        return f"FunctionValidator({name}, level={self.level.name})"


def as_validators(rules: Optional[Sequence[Union[Validator, Callable]]]) -> list:
    """Normalise a list of Validators and/or plain callables."""
    validators = []
    for rule in rules or []:
        if isinstance(rule, Validator):
            validators.append(rule)
        elif callable(rule):
            validators.append(FunctionValidator(rule))
        else:
            raise ConstructionError(f"Not a validator: {rule!r}")
    return validators


def has_blocking(issues: Sequence[ValidationIssue]) -> bool:
    return any(issue.blocking for issue in issues)
