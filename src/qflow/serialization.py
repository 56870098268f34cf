"""
Export helpers for questionnaire runtime state.

Produces a stable dict snapshot of a running (or finished) Questionnaire:
answer rows, counter values, navigation history and validation issues.
JSON and YAML renderings are built from that same dict.

This covers runtime state only. Questionnaire definitions are built in
code and are not serialized.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

import yaml

from qflow.answers import AnswerRow
from qflow.questionnaire import Questionnaire
from qflow.validation import ValidationIssue


def row_to_dict(row: AnswerRow) -> Dict[str, Any]:
    return row.as_dict()


def rows_to_dicts(rows: Sequence[AnswerRow]) -> List[Dict[str, Any]]:
    return [row_to_dict(r) for r in rows]


def issue_to_dict(issue: ValidationIssue) -> Dict[str, Any]:
    return {
        "owner_id": issue.owner_id,
        "message": issue.message,
        "level": issue.level.value,
        "timestamp": issue.timestamp.isoformat(),
    }


def session_to_dict(q: Questionnaire) -> Dict[str, Any]:
    rows: List[AnswerRow] = []
    for item in q.items:
        rows.extend(item.as_rows)
    return {
        "name": q.name,
        "version": q.version,
        "completed": q.completed,
        "current_item": q.current_item.id if q.current_item is not None else None,
        "item_history": [i.id for i in q.item_history],
        "counters": q.counters.as_dict(),
        "rows": rows_to_dicts(rows),
        "issues": [issue_to_dict(i) for i in q.validation_issues],
    }


def session_to_json(q: Questionnaire) -> str:
    return json.dumps(session_to_dict(q), sort_keys=True, default=str)


def session_to_yaml(q: Questionnaire) -> str:
    # round-trip through JSON so arbitrary answer content becomes plain data
    return yaml.safe_dump(json.loads(session_to_json(q)))
