"""
Recommendation Registry - Central store for improvement rules
"""

import copy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class RecommendationCategory(Enum):
    """Areas a recommendation can improve"""
    PERFORMANCE = "performance"
    STRUCTURE = "structure"
    USABILITY = "usability"
    SECURITY = "security"
    MAINTAINABILITY = "maintainability"
    SCALABILITY = "scalability"


@dataclass
class Implementation:
    """How to carry a recommendation out"""
    steps: List[str]
    estimated_time: str
    technologies: List[str] = field(default_factory=list)


@dataclass
class Recommendation:
    """
    A single piece of improvement advice.

    Catalog entries are templates; the engine copies them, attaches any
    diagram-specific details and finally the id and rank.
    """
    category: RecommendationCategory
    priority: str  # high | medium | low
    title: str
    description: str
    impact: str
    effort: str
    implementation: Implementation
    metrics: Optional[Dict[str, Any]] = None
    details: Optional[Dict[str, Any]] = None
    id: Optional[str] = None
    rank: Optional[int] = None

    def to_dict(self) -> dict:
        result = {
            "category": self.category.value,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "effort": self.effort,
            "implementation": {
                "steps": list(self.implementation.steps),
                "estimatedTime": self.implementation.estimated_time,
                "technologies": list(self.implementation.technologies),
            },
        }
        if self.id is not None:
            result = {"id": self.id, **result}
        if self.metrics is not None:
            result["metrics"] = copy.deepcopy(self.metrics)
        if self.details is not None:
            result["details"] = copy.deepcopy(self.details)
        if self.rank is not None:
            result["rank"] = self.rank
        return result


@dataclass
class RecommendationRule:
    """
    A recommendation together with the predicate that triggers it.

    `condition` and `details` both receive the DiagramFacts for the diagram
    under analysis.
    """
    id: str
    recommendation: Recommendation
    condition: Callable[[Any], bool]
    details: Optional[Callable[[Any], Dict[str, Any]]] = None

    @property
    def category(self) -> RecommendationCategory:
        return self.recommendation.category

    def evaluate(self, facts) -> Optional[Recommendation]:
        if not self.condition(facts):
            return None
        template = self.recommendation
        return replace(
            template,
            implementation=copy.deepcopy(template.implementation),
            metrics=copy.deepcopy(template.metrics),
            details=self.details(facts) if self.details is not None else copy.deepcopy(template.details),
        )


class RecommendationRegistry:
    """
    Central registry for recommendation rules

    Rules are kept in registration order, which is also the order in which
    the engine evaluates them.
    """

    def __init__(self):
        self.rules: Dict[str, RecommendationRule] = {}
        self._category_index: Dict[RecommendationCategory, List[str]] = {
            cat: [] for cat in RecommendationCategory
        }

    def register(self, rule: RecommendationRule) -> None:
        """Register a rule in the registry"""
        if rule.id in self.rules:
            raise ValueError(f"Rule '{rule.id}' is already registered")
        self.rules[rule.id] = rule
        self._category_index[rule.category].append(rule.id)

    def get(self, rule_id: str) -> Optional[RecommendationRule]:
        return self.rules.get(rule_id)

    def get_by_category(self, category: RecommendationCategory) -> List[RecommendationRule]:
        """Get all rules in a category"""
        rule_ids = self._category_index.get(category, [])
        return [self.rules[rid] for rid in rule_ids if rid in self.rules]

    def list_all(self) -> List[RecommendationRule]:
        """List all registered rules"""
        return list(self.rules.values())


# Global registry instance
_global_registry: Optional[RecommendationRegistry] = None


def get_recommendation_registry() -> RecommendationRegistry:
    """Get or create the global recommendation registry"""
    global _global_registry
    if _global_registry is None:
        registry = RecommendationRegistry()
        from flowscope.recommendations.catalog import register_all_rules
        register_all_rules(registry)
        _global_registry = registry
    return _global_registry
