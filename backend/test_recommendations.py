"""Recommendation engine: rule triggers, ordering and categories"""

from dataclasses import replace

import pytest

from conftest import build_diagram
from flowscope.analysis.policy import DEFAULT_POLICY
from flowscope.graph.model import Diagram
from flowscope.observers import RecordingObserver
from flowscope.recommendations import (
    RecommendationCategory,
    RecommendationEngine,
    RecommendationRegistry,
    get_recommendation_registry,
)
from flowscope.recommendations.catalog import RULE_CATALOG, register_all_rules
from flowscope.recommendations.engine import prioritize, sort_key
from flowscope.recommendations.registry import Implementation, Recommendation


def titles(recs):
    return [r.title for r in recs]


def make_rec(title, priority="medium", impact="medium", effort="medium"):
    return Recommendation(
        category=RecommendationCategory.STRUCTURE,
        priority=priority,
        title=title,
        description=title,
        impact=impact,
        effort=effort,
        implementation=Implementation(steps=[], estimated_time="1 day"),
    )


def test_four_databases_trigger_database_optimization():
    diagram = build_diagram([(f"db{i}", "database") for i in range(4)])
    recs = RecommendationEngine().generate(diagram)

    rec = next(r for r in recs if r.title == "Optimize Database Operations")
    assert rec.priority == "high"
    assert rec.category == RecommendationCategory.PERFORMANCE
    assert rec.rank == 1
    assert rec.id == "rec-1"


def test_three_databases_do_not():
    diagram = build_diagram([(f"db{i}", "database") for i in range(3)])
    assert "Optimize Database Operations" not in titles(RecommendationEngine().generate(diagram))


def test_empty_diagram_gets_the_unconditional_rules():
    recs = RecommendationEngine().generate(Diagram())
    assert titles(recs) == [
        "Add Error Handling Paths",
        "Implement Comprehensive Testing",
        "Add Monitoring and Logging",
        "Implement Caching Strategy",
    ]
    assert [r.rank for r in recs] == [1, 2, 3, 4]
    assert [r.id for r in recs] == ["rec-1", "rec-2", "rec-3", "rec-4"]


def test_output_is_sorted_by_priority_impact_effort(branching_payload):
    recs = RecommendationEngine().generate(Diagram.from_dict(branching_payload))
    keys = [sort_key(r) for r in recs]
    assert keys == sorted(keys)


def test_sort_is_stable_for_ties():
    recs = [make_rec("first"), make_rec("second"), make_rec("urgent", priority="high"), make_rec("third")]
    assert titles(prioritize(recs)) == ["urgent", "first", "second", "third"]


def test_lower_effort_wins_a_tie():
    recs = [make_rec("hard", effort="high"), make_rec("easy", effort="low")]
    assert titles(prioritize(recs)) == ["easy", "hard"]


def test_rank_tables_come_from_the_policy():
    effort_first = replace(DEFAULT_POLICY, effort_rank={"low": 3, "medium": 2, "high": 1})
    recs = [make_rec("easy", effort="low"), make_rec("hard", effort="high")]

    assert titles(prioritize(recs)) == ["easy", "hard"]
    assert titles(prioritize(recs, effort_first)) == ["hard", "easy"]


def test_engine_ranks_with_its_policy():
    recs = [make_rec("low", priority="low"), make_rec("high", priority="high")]
    inverted = replace(DEFAULT_POLICY, priority_rank={"high": 1, "medium": 2, "low": 3})
    assert titles(prioritize(recs, inverted)) == ["low", "high"]

    diagram = build_diagram([(f"db{i}", "database") for i in range(4)])
    generated = RecommendationEngine(policy=inverted).generate(diagram)
    priorities = [r.priority for r in generated]
    assert "high" in priorities
    assert priorities[-1] == "high"
    assert priorities.index("high") > max(i for i, p in enumerate(priorities) if p != "high")


def test_security_only():
    diagram = build_diagram(
        [("start", "start"), ("form", "html-element", {"label": "Signup form", "elementType": "form"})],
        [("start", "form")],
    )
    recs = RecommendationEngine().generate(diagram, analysis_type="security")

    assert {r.category for r in recs} == {RecommendationCategory.SECURITY}
    assert titles(recs) == ["Implement Input Validation", "Implement User Authentication"]


def test_unknown_analysis_type_yields_nothing(branching_payload):
    recs = RecommendationEngine().generate(Diagram.from_dict(branching_payload), analysis_type="bogus")
    assert recs == []


def test_parallel_processing_details(branching_payload):
    recs = RecommendationEngine().generate(Diagram.from_dict(branching_payload), analysis_type="performance")
    rec = next(r for r in recs if r.title == "Implement Parallel Processing")
    [opportunity] = rec.details["opportunities"]
    assert opportunity["forkNode"] == "check"
    assert opportunity["parallelBranches"] == 2
    assert opportunity["potentialSpeedup"] == pytest.approx(1.6)


def test_parallel_speedup_comes_from_the_policy(branching_payload):
    policy = replace(DEFAULT_POLICY, branch_speedup=2.0)
    recs = RecommendationEngine(policy=policy).generate(
        Diagram.from_dict(branching_payload), analysis_type="performance"
    )
    rec = next(r for r in recs if r.title == "Implement Parallel Processing")
    # 2 branches at 2.0 each, capped
    assert rec.details["opportunities"][0]["potentialSpeedup"] == 3


def test_circular_dependencies_are_reported():
    diagram = build_diagram(
        [("a", "database"), ("b", "database")],
        [("a", "b"), ("b", "a")],
    )
    recs = RecommendationEngine().generate(diagram, analysis_type="structure")
    rec = next(r for r in recs if r.title == "Resolve Circular Dependencies")
    assert rec.details == {"circularDependencies": [["a", "b", "a"]]}


def test_to_dict_shape():
    recs = RecommendationEngine().generate(Diagram())
    data = recs[0].to_dict()
    assert list(data)[0] == "id"
    assert list(data)[-1] == "rank"
    assert data["category"] == "structure"
    assert data["implementation"]["estimatedTime"] == "1 week"


def test_generated_event():
    observer = RecordingObserver()
    RecommendationEngine(observer=observer).generate(Diagram(), analysis_type="all")
    assert observer.events == [("recommendations.generated", {"analysis_type": "all", "count": 4})]


class TestRegistry:
    def test_global_registry_holds_the_catalog(self):
        registry = get_recommendation_registry()
        assert len(registry.list_all()) == len(RULE_CATALOG) == 18
        assert registry.get("optimize_database_operations").category == RecommendationCategory.PERFORMANCE

    def test_every_category_has_rules(self):
        registry = get_recommendation_registry()
        for category in RecommendationCategory:
            assert registry.get_by_category(category)

    def test_duplicate_registration_fails(self):
        registry = RecommendationRegistry()
        register_all_rules(registry)
        with pytest.raises(ValueError):
            registry.register(RULE_CATALOG[0])

    def test_templates_are_not_mutated(self):
        RecommendationEngine().generate(Diagram())
        assert all(rule.recommendation.rank is None for rule in RULE_CATALOG)

    def test_results_do_not_share_state_with_templates(self):
        template = get_recommendation_registry().get("optimize_database_operations").recommendation
        steps = list(template.implementation.steps)
        measurable = list(template.metrics["measurableBy"])
        diagram = build_diagram([(f"db{i}", "database") for i in range(4)])

        rec = next(
            r for r in RecommendationEngine().generate(diagram) if r.title == "Optimize Database Operations"
        )
        rec.metrics["measurableBy"].append("Throughput")
        rec.metrics["expectedImprovement"] = "none"
        rec.implementation.steps.clear()
        rec.to_dict()["metrics"]["measurableBy"].clear()

        assert template.implementation.steps == steps
        assert template.metrics["measurableBy"] == measurable
        assert template.metrics["expectedImprovement"] == "30-50% reduction in response time"

        again = next(
            r for r in RecommendationEngine().generate(diagram) if r.title == "Optimize Database Operations"
        )
        assert again.implementation.steps == steps
