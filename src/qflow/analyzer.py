"""
Route Analyzer — static diagnostics for questionnaire definitions.

This module inspects a Questionnaire without running it:
    - Item, answer and validator inventory
    - Static route graph (sequential, fixed-target and end routing)
    - Unknown targets, reachability and cycles
    - Validation coverage
    - Warning flags for definition risk

Conditional routing (next_item_fun) cannot be followed statically.
Items using it are listed, and reachability findings that depend on
them are reported as "may be unreachable" rather than definite.

IMPORTANT: This does NOT modify the questionnaire or navigate it.
It only produces read-only reports.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Union

from qflow.items import Item
from qflow.questionnaire import Questionnaire
from qflow.routing import Conditional, FixedTarget, ImmediateEnd, SequentialOrEnd


class _End:
    """Route graph node for the end of the questionnaire. Never equal to an item id."""

    def __repr__(self) -> str:
        return "END"

    __str__ = __repr__


END = _End()

Node = Union[str, _End]


def _static_targets(item: Item, position: int, items: List[Item]) -> Optional[List[Node]]:
    """Outgoing edges for an item, or None if they depend on a resolver."""
    routing = item.routing
    if isinstance(routing, Conditional):
        return None
    if isinstance(routing, ImmediateEnd):
        return [END]
    if isinstance(routing, FixedTarget):
        return [routing.item_id]
    if isinstance(routing, SequentialOrEnd):
        if position + 1 < len(items):
            return [items[position + 1].id]
        return [END]
    raise TypeError(f"Unsupported routing strategy: {type(routing)}")


def _find_cycles_dfs(graph: Dict[str, List[Node]], start: Node, visited: Set[Node],
                     rec_stack: Set[Node], path: List[Node]) -> Optional[List[Node]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycles_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class RouteReport:
    """Analysis report for a questionnaire definition."""

    questionnaire_name: Optional[str]
    total_items: int = 0
    total_answers: int = 0
    total_validators: int = 0

    # Routing
    conditional_items: List[str] = field(default_factory=list)
    edges: Dict[str, List[Node]] = field(default_factory=dict)
    unknown_targets: Dict[str, str] = field(default_factory=dict)  # item id -> missing target
    unreachable_items: Set[str] = field(default_factory=set)
    may_be_unreachable: Set[str] = field(default_factory=set)
    can_end: bool = False
    has_cycles: bool = False
    cycle_example: Optional[List[str]] = None

    # Coverage
    items_with_validation: int = 0
    validation_coverage_percent: float = 0.0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_questionnaire(questionnaire: Questionnaire) -> RouteReport:
    """
    Analyze a Questionnaire's static structure.

    Returns a RouteReport with counts, routing findings and warnings.
    """
    items = questionnaire.items
    report = RouteReport(questionnaire_name=questionnaire.name)
    report.total_items = len(items)
    item_ids = {i.id for i in items}

    # =========================================================================
    # 1. INVENTORY AND COVERAGE
    # =========================================================================

    for item in items:
        answers = [a for top in item.answers for a in top.walk()]
        report.total_answers += len(answers)
        validator_count = len(item.validators) + sum(len(a.validators) for a in answers)
        report.total_validators += validator_count
        if validator_count:
            report.items_with_validation += 1

    if report.total_items:
        report.validation_coverage_percent = report.items_with_validation / report.total_items * 100

    # =========================================================================
    # 2. STATIC ROUTE GRAPH
    # =========================================================================

    outgoing: Dict[str, List[Node]] = defaultdict(list)
    for position, item in enumerate(items):
        targets = _static_targets(item, position, items)
        if targets is None:
            report.conditional_items.append(item.id)
            continue
        for target in targets:
            if target is not END and target not in item_ids:
                report.unknown_targets[item.id] = target
                continue
            outgoing[item.id].append(target)
    report.edges = dict(outgoing)

    # =========================================================================
    # 3. REACHABILITY FROM THE FIRST ITEM
    # =========================================================================

    reachable: Set[Node] = set()
    stack = [items[0].id]
    while stack:
        node = stack.pop()
        if node in reachable:
            continue
        reachable.add(node)
        for neighbor in outgoing.get(node, []):
            if neighbor not in reachable:
                stack.append(neighbor)

    report.can_end = END in reachable
    unreached = item_ids - reachable
    if any(i in reachable for i in report.conditional_items):
        report.may_be_unreachable = unreached
    else:
        report.unreachable_items = unreached

    # =========================================================================
    # 4. CYCLES
    # =========================================================================

    visited: Set[Node] = set()
    for item_id in list(outgoing.keys()):
        if item_id not in visited:
            cycle = _find_cycles_dfs(outgoing, item_id, visited, set(), [])
            if cycle:
                report.has_cycles = True
                report.cycle_example = cycle
                break

    # =========================================================================
    # 5. WARNING FLAGS
    # =========================================================================

    for item_id, target in sorted(report.unknown_targets.items()):
        report.add_warning(f"Item {item_id} routes to unknown item {target}")

    if report.unreachable_items:
        report.add_warning(f"Unreachable items: {', '.join(sorted(report.unreachable_items))}")

    if report.may_be_unreachable:
        report.add_warning(
            f"Items only reachable through conditional routing: {', '.join(sorted(report.may_be_unreachable))}"
        )

    if not report.can_end and not report.conditional_items:
        report.add_warning("No static route reaches the end of the questionnaire")

    if report.has_cycles:
        report.add_warning(f"Cycle detected: {' -> '.join(report.cycle_example)}")

    if report.validation_coverage_percent < 50:
        report.add_warning(
            f"Low validation coverage: {report.validation_coverage_percent:.1f}% of items have validation"
        )

    return report
