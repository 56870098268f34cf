"""
Tests for the Route Analyzer.

Tests verify that the analyzer correctly:
    - Inventories items, answers and validators
    - Follows static routing and flags unknown targets
    - Finds reachability and cycles
    - Defers to conditional routing where it cannot see
"""

from qflow.analyzer import END, analyze_questionnaire
from qflow.examples import build_routing_example
from qflow.items import Item
from qflow.questionnaire import Questionnaire
from qflow.validation import Required


def build(*items):
    return Questionnaire(list(items), on_complete=lambda q: None, name="Test")


def test_simple_linear_questionnaire():
    """Analyze a simple linear questionnaire: A -> B -> END."""
    q = build(
        Item(id="A", question="Q1", answers={"type": "text", "validators": [Required()]}),
        Item(id="B", question="Q2", answers={"type": "text", "validators": [Required()]}),
    )
    report = analyze_questionnaire(q)

    assert report.questionnaire_name == "Test"
    assert report.total_items == 2
    assert report.total_answers == 2
    assert report.total_validators == 2
    assert report.edges == {"A": ["B"], "B": [END]}
    assert report.can_end
    assert not report.has_cycles
    assert report.unreachable_items == set()
    assert report.validation_coverage_percent == 100.0
    assert report.warnings == []


def test_unknown_target():
    """Should flag fixed targets that are not in the item list."""
    report = analyze_questionnaire(build(Item(id="A", question="Q", next_item="ZZZ")))
    assert report.unknown_targets == {"A": "ZZZ"}
    assert any("unknown item ZZZ" in w for w in report.warnings)


def test_unreachable_items():
    """Items skipped by a fixed target and never routed to are unreachable."""
    report = analyze_questionnaire(build(
        Item(id="A", question="Q1", next_item="C"),
        Item(id="B", question="Q2"),
        Item(id="C", question="Q3"),
    ))
    assert report.unreachable_items == {"B"}
    assert report.may_be_unreachable == set()
    assert any("Unreachable items: B" in w for w in report.warnings)


def test_cycle_detection():
    """Should detect a static routing loop."""
    report = analyze_questionnaire(build(
        Item(id="A", question="Q1"),
        Item(id="B", question="Q2", next_item="A"),
    ))
    assert report.has_cycles
    assert report.cycle_example == ["A", "B", "A"]
    assert not report.can_end
    assert any("No static route reaches the end" in w for w in report.warnings)


def test_item_named_end_is_an_ordinary_item():
    """An item whose id is "END" is a graph node like any other."""
    report = analyze_questionnaire(build(
        Item(id="A", question="Q1", next_item="END"),
        Item(id="END", question="Q2", next_item="A"),
    ))
    assert report.edges == {"A": ["END"], "END": ["A"]}
    assert report.edges["A"][0] is not END
    assert not report.can_end
    assert report.has_cycles
    assert report.unknown_targets == {}


def test_conditional_routing_is_deferred():
    """Reachability behind a resolver is reported as uncertain, not definite."""
    report = analyze_questionnaire(build_routing_example())

    assert report.conditional_items == ["item_3"]
    assert report.unreachable_items == set()
    assert report.may_be_unreachable == {"item_2", "item_4"}
    assert report.total_validators == 2
    assert report.items_with_validation == 1
    assert report.validation_coverage_percent == 20.0
    assert any("Low validation coverage" in w for w in report.warnings)


def test_nested_answers_counted():
    q = build(Item(
        id="A",
        question="Q",
        answers={
            "type": "radio",
            "options": [{"label": "Other", "extra_answers": {"type": "text", "validators": [Required()]}}],
        },
    ))
    report = analyze_questionnaire(q)
    assert report.total_answers == 2
    assert report.items_with_validation == 1
