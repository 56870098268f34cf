"""
Example questionnaires for demos and tests.

build_routing_example exercises every routing strategy:
    item_0 (sequential) -> item_1 (fixed "item_3") -> item_3 (resolver) -> item_2 (end)

build_scored_example accumulates a "score" counter from radio answers and
routes on its value, with an "other, please specify" option.
"""
from typing import Callable, Optional

from qflow.answers import AnswerType
from qflow.items import Item
from qflow.questionnaire import Questionnaire
from qflow.validation import GreaterThan, IssueLevel, NotBlank, OfType, Required


def _ignore(questionnaire: Questionnaire) -> None:
    return None


def build_routing_example(on_complete: Optional[Callable] = None, **kwargs) -> Questionnaire:
    items = [
        Item(id="item_0", question="Welcome", next_item=None),
        Item(
            id="item_1",
            question="What is your name?",
            answers=[{"id": "item_1_answer", "type": AnswerType.TEXT, "validators": [Required(), NotBlank()]}],
            next_item="item_3",
        ),
        Item(id="item_2", question="Skipped once, then the last item", next_item=False),
        Item(id="item_3", question="Reached by fixed target", next_item_fun=lambda answer, item, q: "item_2"),
        Item(id="item_4", question="Never shown", next_item=False),
    ]
    return Questionnaire(items, on_complete or _ignore, name="Routing example", **kwargs)


FREQUENCY_OPTIONS = [
    {"label": "Not at all", "content": 0},
    {"label": "Several days", "content": 1},
    {"label": "More than half the days", "content": 2},
    {"label": "Nearly every day", "content": 3},
]


def _score_answer(answer, item, questionnaire: Questionnaire) -> None:
    if answer is None:
        return
    for option in answer.selected_options:
        questionnaire.counters.increment("score", option.content, source=item)


def _route_on_score(answer, item, questionnaire: Questionnaire) -> str:
    if questionnaire.counters.get("score", 0) >= 3:
        return "follow_up"
    return "support"


def build_scored_example(on_complete: Optional[Callable] = None, **kwargs) -> Questionnaire:
    items = [
        Item(
            id="interest",
            question="Little interest or pleasure in doing things?",
            answers={"type": AnswerType.RADIO, "options": FREQUENCY_OPTIONS, "validators": [Required()]},
            process_answer_fun=_score_answer,
        ),
        Item(
            id="mood",
            question="Feeling down, depressed, or hopeless?",
            answers={"type": AnswerType.RADIO, "options": FREQUENCY_OPTIONS, "validators": [Required()]},
            process_answer_fun=_score_answer,
            next_item_fun=_route_on_score,
        ),
        Item(
            id="follow_up",
            question="How many days in the last two weeks?",
            answers={
                "type": AnswerType.NUMBER,
                "validators": [Required(), OfType((int, float)), GreaterThan(0, inclusive=True)],
            },
        ),
        Item(
            id="support",
            question="Who do you talk to when you feel down?",
            answers={
                "type": AnswerType.RADIO,
                "options": [
                    {"label": "Family"},
                    {"label": "Friends"},
                    {
                        "label": "Other",
                        "extra_answers": [{
                            "type": AnswerType.TEXT,
                            "label": "Please specify",
                            "validators": [Required(level=IssueLevel.WARNING)],
                        }],
                    },
                ],
            },
            next_item=False,
        ),
    ]
    return Questionnaire(items, on_complete or _ignore, name="Scored example", **kwargs)
