"""
Tests for session export.

These tests ensure the snapshot of a running questionnaire is stable and
renders to JSON and YAML.
"""

import json

import yaml

from qflow.clock import ManualClock
from qflow.examples import build_routing_example, build_scored_example
from qflow.serialization import session_to_dict, session_to_json, session_to_yaml


def run_scored():
    q = build_scored_example(clock=ManualClock())
    q.current_item.answer.content = 2
    q.next_q()
    q.current_item.answer.content = 1
    q.next_q()
    return q


def test_session_dict_shape():
    q = run_scored()
    d = session_to_dict(q)
    assert d["name"] == "Scored example"
    assert d["completed"] is False
    assert d["current_item"] == "follow_up"
    assert d["item_history"] == ["interest", "mood"]
    assert d["counters"] == {"score": 3}
    assert d["rows"][0]["id"] == "interest_a0"
    assert d["rows"][0]["label"] == "More than half the days"
    assert d["rows"][0]["content"] == 2


def test_issues_exported():
    q = build_routing_example(clock=ManualClock())
    q.next_q()
    q.next_q()
    issues = session_to_dict(q)["issues"]
    assert issues == [
        {
            "owner_id": "item_1_answer",
            "message": "An answer is required",
            "level": "error",
            "timestamp": issues[0]["timestamp"],
        }
    ]


def test_json_and_yaml_agree():
    q = run_scored()
    from_json = json.loads(session_to_json(q))
    from_yaml = yaml.safe_load(session_to_yaml(q))
    assert from_json == from_yaml
    assert from_json["counters"]["score"] == 3
