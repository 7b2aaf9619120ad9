"""
Scoring Policy - every heuristic constant the analyzers use, in one place.

The weights and breakpoints are policy decisions, not measured quantities.
Bump POLICY_VERSION whenever a value changes so reports can be traced back
to the table that produced them.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from flowscope.graph.traversal import TraversalLimits


POLICY_VERSION = "2024.2"


# ============================================================
# SUB-SCORE COEFFICIENTS
# ============================================================

STRUCTURAL_WEIGHTS = {
    "node_count": 0.1,
    "edge_count": 0.15,
    "cyclomatic_complexity": 2.0,
    "branching_factor": 1.5,
    "depth": 0.5,
    "width": 0.3,
}

COGNITIVE_WEIGHTS = {
    "decision_points": 3.0,
    "external_dependencies": 2.0,
    "user_interactions": 1.5,
    "data_operations": 1.0,
    "path_diversity": 2.0,
    "label_unclarity": 0.5,  # applied to (10 - label_clarity)
}

COMPUTATIONAL_WEIGHTS = {
    "computational_nodes": 1.5,
    "io_operations": 2.0,
    "network_calls": 3.0,
    "database_operations": 2.5,
    "sequentiality": 0.5,  # applied to (10 - parallelizability)
    "resource_intensity": 1.0,
}

MAINTENANCE_WEIGHTS = {
    "coupling": 2.0,
    "incohesion": 1.5,  # applied to (10 - cohesion)
    "change_impact": 1.5,
    "untestability": 1.0,  # applied to (10 - testability)
    "unmodularity": 1.0,  # applied to (10 - modularity)
    "undocumented": 0.5,  # applied to (10 - documentation)
}

OVERALL_WEIGHTS = {
    "structural": 0.3,
    "cognitive": 0.3,
    "computational": 0.2,
    "maintenance": 0.2,
}


# ============================================================
# LEVELS AND INTERPRETATIONS
# ============================================================

# Upper bounds, inclusive; anything above the last is "Very High".
COMPLEXITY_LEVELS: Tuple[Tuple[float, str], ...] = (
    (10, "Very Low"),
    (20, "Low"),
    (35, "Medium"),
    (50, "High"),
)

INTERPRETATION_BREAKPOINTS = (5, 15, 25)

INTERPRETATIONS = {
    "structural": (
        "Simple structure with clear flow",
        "Moderate structure complexity",
        "Complex structure requiring attention",
        "Highly complex structure needing simplification",
    ),
    "cognitive": (
        "Easy to understand and follow",
        "Moderate cognitive load",
        "Requires significant mental effort",
        "Very difficult to understand without documentation",
    ),
    "computational": (
        "Low computational requirements",
        "Moderate resource usage",
        "High resource requirements",
        "Very resource intensive",
    ),
    "maintenance": (
        "Easy to maintain and modify",
        "Moderate maintenance effort",
        "Difficult to maintain",
        "Very difficult to maintain and modify",
    ),
}


# ============================================================
# PER-NODE TABLES
# ============================================================

BASE_COMPLEXITY = {
    "start": 0.5,
    "end": 0.5,
    "html-element": 1.0,
    "database": 2.0,
    "api-call": 2.5,
    "decision": 3.0,
    "user-action": 1.5,
    "external-service": 2.5,
}
DEFAULT_BASE_COMPLEXITY = 1.0

DATA_COMPLEXITY = {
    "condition": 1.0,
    "operation": 0.5,
    "method": 0.5,
}
FIELD_COMPLEXITY = 0.1

RESOURCE_INTENSITY = {
    "database": 3,
    "api-call": 2,
    "external-service": 3,
    "html-element": 1,
    "user-action": 1,
    "decision": 1,
    "start": 0,
    "end": 0,
}
DEFAULT_RESOURCE_INTENSITY = 1

# Milliseconds.
BASE_PROCESSING_TIME = {
    "start": 1,
    "end": 1,
    "html-element": 100,
    "database": 50,
    "api-call": 200,
    "decision": 5,
    "user-action": 1000,
    "external-service": 300,
}
DEFAULT_PROCESSING_TIME = 10

DATA_LOAD_MULTIPLIERS = {
    "low": 0.5,
    "medium": 1.0,
    "high": 2.0,
    "very_high": 5.0,
}

CRITICALITY_BY_TYPE = {
    "database": 3.0,
    "external-service": 2.5,
    "api-call": 2.0,
    "decision": 1.5,
}
DEFAULT_CRITICALITY = 1.0

HEAVY_NODE_TYPES = ("database", "api-call", "external-service", "decision")

# Applied to a node's base processing time when its data asks for the
# expensive variant of the operation.
OPERATION_MULTIPLIERS = {
    "decision_with_condition": 1.5,
    "database_write": 2.0,
    "api_post": 1.8,
}

# Fractions of the slowest node's time.
PERFORMANCE_BOTTLENECK_SHARES = {
    "include": 0.3,
    "high": 0.8,
}

# Incoming edges above which a node is a convergence bottleneck.
CONVERGENCE_THRESHOLDS = {
    "medium": 2,
    "high": 4,
}

BRANCH_SPEEDUP = 0.8
MAX_SPEEDUP = 3


# ============================================================
# COMPLEXITY DETAILS
# ============================================================

TESTABILITY_PENALTIES = {
    "decision": 0.5,
    "external-service": 0.3,
}

# Overall scores above which the analyzer advises a rework.
ADVICE_THRESHOLDS = {
    "break_down": 50,
    "document": 35,
}

BREAKDOWN_WEIGHTS = {
    "edge": 1.0,
    "edge_label": 0.5,
    "edge_animated": 0.2,
    "cycle": 3.0,
    "branch": 1.5,
    "user_interaction": 1.5,
    "external_call": 2.0,
}


# ============================================================
# VALIDATION SCORE
# ============================================================

VALIDATION_PENALTIES = {
    "error": 20,
    "warning": 5,
    "suggestion": 1,
}


# ============================================================
# RECOMMENDATION RANKING
# ============================================================

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}
IMPACT_RANK = {"high": 3, "medium": 2, "low": 1}
EFFORT_RANK = {"low": 1, "medium": 2, "high": 3}


def _table(source):
    return field(default_factory=lambda: dict(source))


@dataclass(frozen=True)
class ScoringPolicy:
    version: str = POLICY_VERSION

    structural_weights: Dict[str, float] = _table(STRUCTURAL_WEIGHTS)
    cognitive_weights: Dict[str, float] = _table(COGNITIVE_WEIGHTS)
    computational_weights: Dict[str, float] = _table(COMPUTATIONAL_WEIGHTS)
    maintenance_weights: Dict[str, float] = _table(MAINTENANCE_WEIGHTS)
    overall_weights: Dict[str, float] = _table(OVERALL_WEIGHTS)
    complexity_levels: Tuple[Tuple[float, str], ...] = COMPLEXITY_LEVELS
    top_level: str = "Very High"

    base_complexity: Dict[str, float] = _table(BASE_COMPLEXITY)
    default_base_complexity: float = DEFAULT_BASE_COMPLEXITY
    data_complexity: Dict[str, float] = _table(DATA_COMPLEXITY)
    field_complexity: float = FIELD_COMPLEXITY
    resource_intensity: Dict[str, float] = _table(RESOURCE_INTENSITY)
    default_resource_intensity: float = DEFAULT_RESOURCE_INTENSITY
    testability_penalties: Dict[str, float] = _table(TESTABILITY_PENALTIES)
    advice_thresholds: Dict[str, float] = _table(ADVICE_THRESHOLDS)
    breakdown_weights: Dict[str, float] = _table(BREAKDOWN_WEIGHTS)

    processing_time: Dict[str, float] = _table(BASE_PROCESSING_TIME)
    default_processing_time: float = DEFAULT_PROCESSING_TIME
    data_load_multipliers: Dict[str, float] = _table(DATA_LOAD_MULTIPLIERS)
    operation_multipliers: Dict[str, float] = _table(OPERATION_MULTIPLIERS)
    bottleneck_shares: Dict[str, float] = _table(PERFORMANCE_BOTTLENECK_SHARES)
    convergence_thresholds: Dict[str, int] = _table(CONVERGENCE_THRESHOLDS)
    criticality: Dict[str, float] = _table(CRITICALITY_BY_TYPE)
    default_criticality: float = DEFAULT_CRITICALITY
    heavy_node_types: Tuple[str, ...] = HEAVY_NODE_TYPES
    branch_speedup: float = BRANCH_SPEEDUP
    max_speedup: float = MAX_SPEEDUP

    validation_penalties: Dict[str, int] = _table(VALIDATION_PENALTIES)
    priority_rank: Dict[str, int] = _table(PRIORITY_RANK)
    impact_rank: Dict[str, int] = _table(IMPACT_RANK)
    effort_rank: Dict[str, int] = _table(EFFORT_RANK)

    path_diversity_cap: int = 10
    hotspot_threshold: int = 3
    complex_node_threshold: int = 4
    limits: TraversalLimits = field(default_factory=TraversalLimits)

    def level_for(self, score: float) -> str:
        for bound, level in self.complexity_levels:
            if score <= bound:
                return level
        return self.top_level

    def base_complexity_for(self, node_type) -> float:
        return self.base_complexity.get(node_type, self.default_base_complexity)

    def processing_time_for(self, node_type) -> float:
        return self.processing_time.get(node_type, self.default_processing_time)

    def resource_intensity_for(self, node_type) -> float:
        return self.resource_intensity.get(node_type, self.default_resource_intensity)

    def criticality_for(self, node_type) -> float:
        return self.criticality.get(node_type, self.default_criticality)

    def with_limits(self, limits: TraversalLimits) -> "ScoringPolicy":
        return replace(self, limits=limits)


def interpret(kind: str, score: float) -> str:
    texts = INTERPRETATIONS[kind]
    for bound, text in zip(INTERPRETATION_BREAKPOINTS, texts):
        if score <= bound:
            return text
    return texts[-1]


def round_half_up(value: float) -> int:
    """Nearest integer with .5 rounded up, as the score tables assume.

    Python's round() sends 10.5 to 10, which lands on the other side of a
    level breakpoint.
    """
    return int(math.floor(value + 0.5))


DEFAULT_POLICY = ScoringPolicy()
