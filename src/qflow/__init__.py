"""
qflow — questionnaire execution engine.

Drives a respondent through a declarative list of Items one at a time:
    - Answers keep an append-only content history with provenance
    - Counters are replayed from attributed operations, so going back
      undoes exactly what an item contributed
    - Routing picks the next item by position, fixed target or resolver
    - Validators gate forward navigation with structured issues

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering questions or options
    - Parsing definitions from files
    - Storage engines or network I/O

Everything operates on an in-memory object graph, single-threaded.
"""

__version__ = "0.1.0"
