"""
Demo: Run the scored example questionnaire, step back once, and print
the route analysis and the exported session.
"""

import logging

from qflow.analyzer import analyze_questionnaire
from qflow.examples import build_scored_example
from qflow.serialization import session_to_yaml


def print_report(report):
    """Pretty-print a RouteReport."""
    print()
    print("=" * 70)
    print(f"ROUTE ANALYSIS: {report.questionnaire_name}")
    print("=" * 70)
    print(f"  Items:                 {report.total_items}")
    print(f"  Answers:               {report.total_answers}")
    print(f"  Validators:            {report.total_validators}")
    print(f"  Conditional Items:     {report.conditional_items or 'None'}")
    print(f"  Static Edges:          {report.edges}")
    print(f"  Can Reach End:         {'YES' if report.can_end else 'NO'}")
    print(f"  Validation Coverage:   {report.validation_coverage_percent:.1f}%")
    print()
    if report.warnings:
        print("WARNINGS")
        for i, warning in enumerate(report.warnings, 1):
            print(f"  {i}. {warning}")
    else:
        print("NO WARNINGS")
    print()


def on_complete(questionnaire):
    print(f"Completed with score {questionnaire.counters.get('score', 0)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    q = build_scored_example(on_complete=on_complete)
    print_report(analyze_questionnaire(q))

    q.current_item.answer.content = 2      # interest: more than half the days
    q.next_q()
    q.current_item.answer.content = 3      # mood: nearly every day
    q.next_q()
    q.last_q()                             # change our mind about mood
    q.current_item.answer.content = 0
    q.next_q()
    q.current_item.answer.content = 1      # support: friends
    q.next_q()

    print(session_to_yaml(q))
