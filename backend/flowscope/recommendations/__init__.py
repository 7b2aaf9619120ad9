"""
Recommendation rules, their registry and the engine that applies them.
"""

from flowscope.recommendations.engine import (
    ANALYSIS_TYPES,
    RecommendationEngine,
    prioritize,
)
from flowscope.recommendations.facts import DiagramFacts
from flowscope.recommendations.registry import (
    Implementation,
    Recommendation,
    RecommendationCategory,
    RecommendationRegistry,
    RecommendationRule,
    get_recommendation_registry,
)

__all__ = [
    "ANALYSIS_TYPES",
    "RecommendationEngine",
    "prioritize",
    "DiagramFacts",
    "Implementation",
    "Recommendation",
    "RecommendationCategory",
    "RecommendationRegistry",
    "RecommendationRule",
    "get_recommendation_registry",
]
