"""
flowscope - heuristic analysis of process flow diagrams.

Validation, complexity scoring, flow/dependency/performance analysis and
improvement recommendations over a node/edge diagram snapshot.
"""

__version__ = "1.0.0"
