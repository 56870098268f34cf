"""
Test the example questionnaires end to end.
"""

from unittest import mock

from qflow.examples import build_routing_example, build_scored_example
from qflow.questionnaire import NavigationStatus


def test_routing_example_structure():
    q = build_routing_example()
    assert [i.id for i in q.items] == ["item_0", "item_1", "item_2", "item_3", "item_4"]
    assert q.get_item_by_id("item_3").conditional_routing
    assert not q.get_item_by_id("item_1").conditional_routing


def test_scored_example_high_score_path():
    on_complete = mock.Mock()
    q = build_scored_example(on_complete=on_complete)
    q.current_item.answer.content = 3
    q.next_q()
    q.current_item.answer.content = 0
    q.next_q()
    assert q.current_item.id == "follow_up"
    assert q.counters.get("score") == 3

    q.current_item.answer.content = 4
    q.next_q()
    assert q.current_item.id == "support"
    q.current_item.answer.content = 0
    assert q.next_q().status is NavigationStatus.COMPLETED
    on_complete.assert_called_once_with(q)


def test_scored_example_low_score_path():
    q = build_scored_example()
    q.current_item.answer.content = 1
    q.next_q()
    q.current_item.answer.content = 0
    q.next_q()
    assert q.current_item.id == "support"
    assert q.counters.get("score") == 1


def test_scored_example_back_undoes_score():
    q = build_scored_example()
    q.current_item.answer.content = 3
    q.next_q()
    q.current_item.answer.content = 2
    q.next_q()
    assert q.counters.get("score") == 5
    q.last_q()
    assert q.current_item.id == "mood"
    assert q.counters.get("score") == 3
    q.current_item.answer.content = 0
    q.next_q()
    assert q.counters.get("score") == 3
    assert q.current_item.id == "follow_up"


def test_other_option_warning_does_not_block():
    """Choosing "Other" without specifying only warns."""
    q = build_scored_example()
    q.current_item.answer.content = 0
    q.next_q()
    q.current_item.answer.content = 0
    q.next_q()
    assert q.current_item.id == "support"
    q.current_item.answer.content = 2
    outcome = q.next_q()
    assert outcome.status is NavigationStatus.COMPLETED
    assert [i.owner_id for i in outcome.issues] == ["support_a0_o2_a0"]
    assert not outcome.issues[0].blocking
