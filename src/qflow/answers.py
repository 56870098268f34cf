"""
Answers and Options.

An Answer holds one logical response: its type, its default content and
an append-only history of content changes. Current content is derived
from that history, never stored separately.

    Answer
      ├── content_history   [ContentChange(timestamp, content, source), ...]
      ├── options           [Option, ...]          (enumerated types only)
      │     └── extra_answers [Answer, ...]        ("other, please specify")
      └── extra_answers     [Answer, ...]

ARCHITECTURAL RULE:
    History is append-only. A reset appends a RESET entry restoring
    default_content; it never truncates. len(content_history) never
    decreases for the lifetime of an Answer.

Ids are generated from the parent when a definition does not supply one:
    answers:  {parent_id}_a{index}
    options:  {parent_id}_o{index}
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from qflow.clock import Clock, utc_now
from qflow.errors import ConstructionError
from qflow.validation import ValidationIssue, Validator, as_validators

if TYPE_CHECKING:
    from qflow.items import Item
    from qflow.questionnaire import Questionnaire

logger = logging.getLogger(__name__)


class AnswerType(Enum):
    """Kinds of answer a question can take."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    RADIO = "radio"
    SELECT = "select"
    CHECKBOX = "checkbox"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    RANGE = "range"

    @property
    def enumerated(self) -> bool:
        return self in (AnswerType.RADIO, AnswerType.SELECT, AnswerType.CHECKBOX)


class ContentSource(Enum):
    """Provenance of a content history entry."""

    USER = "user"
    RESET = "reset"


@dataclass(frozen=True)
class ContentChange:
    """One entry in an Answer's content history."""

    timestamp: datetime
    content: Any
    source: ContentSource


@dataclass(frozen=True)
class AnswerRow:
    """
    Flat tabular projection of one Answer, for export.

    Properties:
        id: machine id of the answer
        data_id: human-facing id (may be None)
        type: AnswerType name, e.g. "RADIO"
        content: resolved content (option content for radio/select,
                 JSON list for checkbox)
        label: resolved label
        answer_utc_time: ISO-8601 time of the last change, or None
    """

    id: str
    data_id: Optional[str]
    type: str
    content: Any
    label: Optional[str]
    answer_utc_time: Optional[str]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


ANSWER_KEYS = frozenset({
    "id", "data_id", "type", "label", "default_content", "content",
    "validators", "extra_answers", "options",
})
OPTION_KEYS = frozenset({"id", "content", "label", "extra_answers"})

AnswerDefinition = Union["Answer", Mapping[str, Any]]
OptionDefinition = Union["Option", Mapping[str, Any]]


def _split_definition(definition: Mapping[str, Any], reserved: frozenset) -> tuple:
    known = {k: v for k, v in definition.items() if k in reserved}
    extras = {k: v for k, v in definition.items() if k not in reserved}
    return known, extras


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class Option:
    """
    One selectable choice of an enumerated Answer.

    content defaults to label. Supplying neither is a ConstructionError.
    """

    def __init__(
        self,
        id: str,
        content: Any = None,
        label: Optional[str] = None,
        extra_answers: Optional[Union[AnswerDefinition, Sequence[AnswerDefinition]]] = None,
        extras: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None,
    ):
        if not id:
            raise ConstructionError("An Option must have an id")
        if content is None and label is None:
            raise ConstructionError(f"Option {id} must have content or a label")
        self.id = id
        self.label = label
        self.content = label if content is None else content
        self.extras = MappingProxyType(dict(extras or {}))
        self.extra_answers: List[Answer] = as_answers(extra_answers, id, clock=clock)

    def __repr__(self) -> str:
        return f"Option(id={self.id!r}, content={self.content!r}, label={self.label!r})"


class Answer:
    """
    A single logical answer with full content history.

    Properties:
        id: machine id, unique within the owning Item's subtree
        data_id: optional human-facing id used in exports
        type: AnswerType
        label: optional label used in exports
        default_content: content reported until the user supplies some
        validators: answer-level Validators
        options: Options (enumerated types only)
        extra_answers: nested Answers
        extras: read-only side-table of non-reserved definition keys
        clock: timestamp source for history entries and issues
    """

    def __init__(
        self,
        id: str,
        type: Union[AnswerType, str],
        data_id: Optional[str] = None,
        label: Optional[str] = None,
        default_content: Any = None,
        validators: Optional[Sequence[Any]] = None,
        extra_answers: Optional[Union[AnswerDefinition, Sequence[AnswerDefinition]]] = None,
        options: Optional[Sequence[OptionDefinition]] = None,
        extras: Optional[Mapping[str, Any]] = None,
        clock: Optional[Clock] = None,
    ):
        if not id:
            raise ConstructionError("An Answer must have an id")
        if type is None:
            raise ConstructionError(f"Answer {id} must have a type")
        try:
            self.type = AnswerType(type)
        except ValueError:
            raise ConstructionError(f"Answer {id} has unknown type {type!r}") from None
        if options and not self.type.enumerated:
            raise ConstructionError(f"Answer {id} of type {self.type.name} cannot have options")

        self.id = id
        self.data_id = data_id
        self.label = label
        self.default_content = default_content
        self.validators: List[Validator] = as_validators(validators)
        self.extras = MappingProxyType(dict(extras or {}))
        self.clock: Clock = clock or utc_now

        self.options: List[Option] = as_options(options, id, clock=clock)
        self.extra_answers: List[Answer] = as_answers(extra_answers, id, clock=clock)

        self._history: List[ContentChange] = []
        self._issues: List[ValidationIssue] = []

    @classmethod
    def from_definition(
        cls, definition: Mapping[str, Any], default_id: str, clock: Optional[Clock] = None
    ) -> "Answer":
        """
        Build an Answer from a mapping.

        "content" is accepted as an alias for "default_content".
        Keys outside ANSWER_KEYS go to the extras side-table.
        """
        known, extras = _split_definition(definition, ANSWER_KEYS)
        if "type" not in known:
            raise ConstructionError(f"Answer {known.get('id') or default_id} must have a type")
        explicit_id = known.get("id")
        default_content = known.get("default_content", known.get("content"))
        return cls(
            id=explicit_id or default_id,
            type=known["type"],
            data_id=known.get("data_id", explicit_id),
            label=known.get("label"),
            default_content=default_content,
            validators=known.get("validators"),
            extra_answers=known.get("extra_answers"),
            options=known.get("options"),
            extras=extras,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @property
    def content(self) -> Any:
        if not self._history:
            return self.default_content
        return self._history[-1].content

    @content.setter
    def content(self, value: Any) -> None:
        self._history.append(ContentChange(self.clock(), value, ContentSource.USER))
        logger.debug(f"Answer {self.id} set to {value!r}")

    @property
    def content_history(self) -> List[ContentChange]:
        return list(self._history)

    @property
    def content_changed(self) -> bool:
        return len(self._history) > 0

    @property
    def last_changed_time(self) -> Optional[datetime]:
        if not self._history:
            return None
        return self._history[-1].timestamp

    def reset_content(self) -> None:
        """Restore default_content on this answer and everything nested below it."""
        for answer in self.walk():
            answer._history.append(
                ContentChange(answer.clock(), answer.default_content, ContentSource.RESET)
            )
        logger.debug(f"Answer {self.id} reset")

    @property
    def selected_options(self) -> List[Option]:
        """
        Options picked by the current content.

        Radio/select content is an option index; checkbox content is a
        collection of option indices. Out-of-range indices are ignored.
        """
        if not self.type.enumerated or self.content is None:
            return []
        if self.type is AnswerType.CHECKBOX:
            indices = self.content if isinstance(self.content, (list, tuple, set)) else [self.content]
        else:
            indices = [self.content]
        selected = []
        for index in indices:
            if isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(self.options):
                selected.append(self.options[index])
        return selected

    # ------------------------------------------------------------------
    # Tree helpers
    # ------------------------------------------------------------------

    def children(self) -> List["Answer"]:
        """Directly nested answers: extra answers, then each option's extra answers."""
        nested = list(self.extra_answers)
        for option in self.options:
            nested.extend(option.extra_answers)
        return nested

    def walk(self) -> Iterator["Answer"]:
        """Yield this answer and every answer nested below it, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    def bind_clock(self, clock: Clock) -> None:
        for answer in self.walk():
            answer.clock = clock

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @property
    def issues(self) -> List[ValidationIssue]:
        """Issues from this answer's own validators at their last run."""
        return list(self._issues)

    @property
    def validation_issues(self) -> List[ValidationIssue]:
        """Last recorded issues for this answer and every nested answer."""
        issues = []
        for answer in self.walk():
            issues.extend(answer._issues)
        return issues

    def check_validation(
        self,
        item: Optional["Item"] = None,
        questionnaire: Optional["Questionnaire"] = None,
        include_children: bool = True,
    ) -> List[ValidationIssue]:
        """
        Re-run validators and replace this answer's recorded issues.

        Extra answers are always checked when include_children is True.
        An option's extra answers are only checked while that option is
        selected; answers under unselected options have their issues
        cleared.
        """
        now = self.clock()
        fresh = []
        for validator in self.validators:
            message = validator.evaluate(self, item, questionnaire)
            if message is not None:
                fresh.append(ValidationIssue(self.id, message, validator.level, now))
        self._issues = fresh

        issues = list(fresh)
        if include_children:
            for child in self.extra_answers:
                issues.extend(child.check_validation(item, questionnaire, True))
            selected = self.selected_options
            for option in self.options:
                for child in option.extra_answers:
                    if any(option is s for s in selected):
                        issues.extend(child.check_validation(item, questionnaire, True))
                    else:
                        for answer in child.walk():
                            answer._issues = []
        return issues

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_row(self, include_children: bool = True) -> List[AnswerRow]:
        """Flatten this answer (and, optionally, nested answers) into rows."""
        content = self.content
        label = self.label
        selected = self.selected_options
        if self.type is AnswerType.CHECKBOX:
            content = json.dumps([o.content for o in selected], default=str)
            label = json.dumps([o.label for o in selected], default=str)
        elif self.type.enumerated and selected:
            content = selected[0].content
            label = selected[0].label

        changed = self.last_changed_time
        rows = [
            AnswerRow(
                id=self.id,
                data_id=self.data_id,
                type=self.type.name,
                content=content,
                label=label,
                answer_utc_time=changed.isoformat() if changed else None,
            )
        ]
        if include_children:
            for child in self.children():
                rows.extend(child.to_row(True))
        return rows

    def __repr__(self) -> str:
        return f"Answer(id={self.id!r}, type={self.type.name}, content={self.content!r})"


def as_answers(
    definitions: Optional[Union[AnswerDefinition, Sequence[AnswerDefinition]]],
    parent_id: str,
    clock: Optional[Clock] = None,
) -> List[Answer]:
    """
    Normalise one definition or a list of them into Answers.

    Ready-made Answer objects are kept as they are.
    """
    answers = []
    for index, definition in enumerate(_as_list(definitions)):
        if isinstance(definition, Answer):
            answers.append(definition)
        elif isinstance(definition, Mapping):
            answers.append(Answer.from_definition(definition, f"{parent_id}_a{index}", clock=clock))
        else:
            raise ConstructionError(f"Cannot build an Answer for {parent_id} from {definition!r}")
    return answers


def as_options(
    definitions: Optional[Sequence[OptionDefinition]],
    parent_id: str,
    clock: Optional[Clock] = None,
) -> List[Option]:
    """Normalise option definitions into Options."""
    options = []
    for index, definition in enumerate(_as_list(definitions)):
        if isinstance(definition, Option):
            options.append(definition)
        elif isinstance(definition, Mapping):
            known, extras = _split_definition(definition, OPTION_KEYS)
            options.append(
                Option(
                    id=known.get("id") or f"{parent_id}_o{index}",
                    content=known.get("content"),
                    label=known.get("label"),
                    extra_answers=known.get("extra_answers"),
                    extras=extras,
                    clock=clock,
                )
            )
        else:
            raise ConstructionError(f"Cannot build an Option for {parent_id} from {definition!r}")
    return options
