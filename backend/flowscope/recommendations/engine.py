"""
Recommendation Engine - evaluates the rule catalog against a diagram and
returns the triggered advice in priority order.
"""

from dataclasses import replace
from typing import List, Optional

from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy
from flowscope.graph.model import Diagram
from flowscope.graph.traversal import TraversalEngine
from flowscope.observers import AnalysisObserver, NullObserver
from flowscope.recommendations.facts import DiagramFacts
from flowscope.recommendations.registry import (
    Recommendation,
    RecommendationCategory,
    RecommendationRegistry,
    get_recommendation_registry,
)


ANALYSIS_TYPES = ("all",) + tuple(c.value for c in RecommendationCategory)


def sort_key(rec: Recommendation, policy: ScoringPolicy = DEFAULT_POLICY):
    return (
        -policy.priority_rank.get(rec.priority, 0),
        -policy.impact_rank.get(rec.impact, 0),
        policy.effort_rank.get(rec.effort, 0),
    )


def prioritize(
    recommendations: List[Recommendation], policy: ScoringPolicy = DEFAULT_POLICY
) -> List[Recommendation]:
    """Stable sort: priority desc, impact desc, effort asc; ties keep generation order."""
    ranked = sorted(recommendations, key=lambda rec: sort_key(rec, policy))
    return [replace(rec, id=f"rec-{i}", rank=i) for i, rec in enumerate(ranked, start=1)]


class RecommendationEngine:
    """
    Usage:
        engine = RecommendationEngine()
        for rec in engine.generate(diagram, analysis_type="security"):
            print(rec.rank, rec.title)
    """

    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        observer: Optional[AnalysisObserver] = None,
        registry: Optional[RecommendationRegistry] = None,
    ):
        self.policy = policy
        self.observer = observer or NullObserver()
        self.registry = registry or get_recommendation_registry()

    def categories_for(self, analysis_type: str) -> List[RecommendationCategory]:
        if analysis_type == "all":
            return list(RecommendationCategory)
        return [c for c in RecommendationCategory if c.value == analysis_type]

    def generate(self, diagram: Diagram, analysis_type: str = "all") -> List[Recommendation]:
        engine = TraversalEngine(diagram, limits=self.policy.limits, observer=self.observer)
        facts = DiagramFacts.collect(diagram, engine, self.policy)

        triggered = []
        for category in self.categories_for(analysis_type):
            for rule in self.registry.get_by_category(category):
                rec = rule.evaluate(facts)
                if rec is not None:
                    triggered.append(rec)

        ranked = prioritize(triggered, self.policy)
        self.observer.notify(
            "recommendations.generated",
            analysis_type=analysis_type,
            count=len(ranked),
        )
        return ranked
