from flowscope.analysis.complexity import ComplexityAnalyzer, ComplexityReport, node_complexity
from flowscope.analysis.parser import DiagramParser, ParsedDiagram
from flowscope.analysis.policy import DEFAULT_POLICY, POLICY_VERSION, ScoringPolicy
from flowscope.analysis.process import (
    DependencyReport,
    FlowReport,
    PerformanceReport,
    ProcessAnalyzer,
)

__all__ = [
    "ComplexityAnalyzer",
    "ComplexityReport",
    "node_complexity",
    "DiagramParser",
    "ParsedDiagram",
    "DEFAULT_POLICY",
    "POLICY_VERSION",
    "ScoringPolicy",
    "DependencyReport",
    "FlowReport",
    "PerformanceReport",
    "ProcessAnalyzer",
]
