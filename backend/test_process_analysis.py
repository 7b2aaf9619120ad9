"""Process analyzer and diagram parser"""

from dataclasses import replace

import pytest

from conftest import build_diagram
from flowscope.analysis import DEFAULT_POLICY, DiagramParser, ProcessAnalyzer
from flowscope.graph.model import Diagram
from flowscope.graph.traversal import TraversalLimits


@pytest.fixture
def diagram(branching_payload):
    return Diagram.from_dict(branching_payload)


class TestFlow:
    def test_paths_and_critical_path(self, diagram):
        report = ProcessAnalyzer().analyze_flow(diagram)

        assert [p.nodes for p in report.paths] == [
            ["start", "check", "db", "end"],
            ["start", "check", "api", "end"],
        ]
        assert [p.id for p in report.paths] == ["path-0", "path-1"]
        assert [p.complexity for p in report.paths] == [6, 6]
        assert [p.estimated_duration for p in report.paths] == [57, 207]
        # equal complexity keeps the first path
        assert report.critical_path.id == "path-0"
        assert report.critical_path.is_critical
        assert not report.paths_truncated

    def test_bottlenecks(self, diagram):
        report = ProcessAnalyzer().analyze_flow(diagram)
        assert [(b.node_id, b.type) for b in report.bottlenecks] == [
            ("check", "complexity"),
            ("db", "complexity"),
            ("api", "complexity"),
            ("api", "external_dependency"),
        ]

    def test_convergence_bottleneck(self):
        sources = [(f"s{i}", "html-element") for i in range(5)]
        report = ProcessAnalyzer().analyze_flow(build_diagram(
            sources + [("end", "end")],
            [(s[0], "end") for s in sources],
        ))
        [bottleneck] = report.bottlenecks
        assert bottleneck.type == "convergence"
        assert bottleneck.severity == "high"
        assert bottleneck.description == "5 processes converge at this point"

    def test_parallel_processes(self, diagram):
        [group] = ProcessAnalyzer().analyze_flow(diagram).parallel_processes
        assert group.fork_node == "check"
        assert group.paths == [["db", "end"], ["api", "end"]]
        assert group.estimated_speedup == 2.0

    def test_patterns_and_summary(self, diagram):
        report = ProcessAnalyzer().analyze_flow(diagram)

        assert not report.patterns.sequential
        assert report.patterns.branching
        assert not report.patterns.loops
        assert not report.patterns.pipeline

        assert report.flow_analysis.total_nodes == 5
        assert report.flow_analysis.total_connections == 5
        assert report.flow_analysis.complexity == 9  # 5 nodes + 2.5 + 1 extra branch, 8.5 rounds up
        assert report.flow_analysis.efficiency == 80

    def test_metrics(self, diagram):
        metrics = ProcessAnalyzer().analyze_flow(diagram).metrics

        assert metrics.cyclomatic_complexity == 3
        assert metrics.fan_in_out.max_fan_in == 2
        assert metrics.fan_in_out.max_fan_out == 2
        assert metrics.fan_in_out.avg_fan_in == 1.0
        assert metrics.depth == 3
        assert metrics.width == 2
        assert metrics.coupling == 0.25
        assert metrics.cohesion == 0.0

    def test_options(self, diagram):
        report = ProcessAnalyzer().analyze_flow(diagram, include_metrics=False, analyze_paths=False)
        assert report.metrics is None
        assert report.paths == []
        assert report.critical_path is None
        assert report.flow_analysis.efficiency == 0

    def test_path_budget(self, diagram):
        policy = DEFAULT_POLICY.with_limits(TraversalLimits(max_paths=1))
        report = ProcessAnalyzer(policy).analyze_flow(diagram)
        assert len(report.paths) == 1
        assert report.paths_truncated

    def test_linear_flow_is_a_pipeline(self):
        report = ProcessAnalyzer().analyze_flow(build_diagram(
            [("start", "start"), ("a", "html-element"), ("end", "end")],
            [("start", "a"), ("a", "end")],
        ))
        assert report.patterns.sequential
        assert report.patterns.pipeline
        assert report.flow_analysis.efficiency == 100

    def test_empty_diagram(self):
        report = ProcessAnalyzer().analyze_flow(Diagram())
        assert report.paths == []
        assert report.critical_path is None
        assert report.metrics.fan_in_out.avg_fan_in == 0.0


class TestDependencies:
    def test_dependency_records(self, diagram):
        report = ProcessAnalyzer().analyze_dependencies(diagram)

        assert [(d.id, d.type, d.strength, d.critical) for d in report.dependencies] == [
            ("start-check", "sequential_dependency", "weak", True),
            ("check-db", "conditional_dependency", "weak", True),
            ("check-api", "conditional_dependency", "weak", True),
            ("db-end", "data_dependency", "strong", False),
            ("api-end", "sequential_dependency", "weak", False),
        ]
        assert report.dependencies[0].source.label == "start step"

    def test_critical_components(self, diagram):
        report = ProcessAnalyzer().analyze_dependencies(diagram)
        assert [(c.node_id, c.criticality_score) for c in report.critical_components] == [
            ("check", 6.5),
            ("db", 6.5),
            ("api", 5.5),
            ("end", 5.0),
            ("start", 2.5),
        ]

    def test_insights_and_matrix(self, diagram):
        report = ProcessAnalyzer().analyze_dependencies(diagram)

        assert report.insights.strong_dependencies == 1
        assert report.insights.weak_dependencies == 4
        assert report.insights.circular_count == 0
        assert report.insights.most_dependent_component.node_id == "check"
        assert report.insights.most_dependent_component.dependency_count == 3

        assert report.dependency_matrix["start"]["check"] is True
        assert report.dependency_matrix["check"]["start"] is False
        assert set(report.dependency_matrix) == {"start", "check", "db", "api", "end"}

    def test_circular_dependencies(self):
        report = ProcessAnalyzer().analyze_dependencies(build_diagram(
            [("a", "database"), ("b", "external-service")],
            [("a", "b"), ("b", "a")],
        ))
        assert report.circular_dependencies == [["a", "b", "a"]]
        assert report.insights.circular_count == 1
        assert report.insights.strong_dependencies == 2

    def test_dangling_edges_are_skipped(self):
        report = ProcessAnalyzer().analyze_dependencies(build_diagram(
            [("a", "database")], [("a", "ghost")]
        ))
        assert report.dependencies == []
        assert report.insights.most_dependent_component is None


class TestPerformance:
    def test_node_times_and_bottlenecks(self, diagram):
        report = ProcessAnalyzer().analyze_performance(diagram)

        times = {p.node_id: p.estimated_time for p in report.node_performance}
        assert times == {"start": 1.0, "check": 5.0, "db": 50.0, "api": 200.0, "end": 1.0}

        assert [(b.node_id, b.severity) for b in report.bottlenecks] == [("api", "high")]
        assert [(o.type, o.target) for o in report.suggested_optimizations] == [("caching", "api")]

    def test_paths_and_overall(self, diagram):
        report = ProcessAnalyzer().analyze_performance(diagram)

        assert [p.total_execution_time for p in report.path_performance] == [57.0, 207.0]
        assert report.overall.estimated_total_time == 207.0
        assert report.overall.critical_path_time == 207.0
        [parallel] = report.overall.parallelizable
        assert parallel.node_id == "check"
        assert parallel.potential_speedup == 1.6
        assert [f.factor for f in report.overall.scalability_factors] == [
            "database_operations",
            "external_api_calls",
        ]

    def test_data_load_and_operation_multipliers(self):
        diagram = build_diagram([
            ("save", "database", {"label": "Save", "operation": "write"}),
            ("post", "api-call", {"label": "Send", "method": "POST"}),
        ])
        report = ProcessAnalyzer().analyze_performance(diagram, expected_data_load="high")
        times = {p.node_id: p.estimated_time for p in report.node_performance}
        assert times["save"] == 200.0
        assert times["post"] == pytest.approx(720.0)

    def test_unknown_data_load_is_medium(self, diagram):
        report = ProcessAnalyzer().analyze_performance(diagram, expected_data_load="extreme")
        assert all(p.factors.data_load == 1.0 for p in report.node_performance)

    def test_empty_diagram(self):
        report = ProcessAnalyzer().analyze_performance(Diagram())
        assert report.bottlenecks == []
        assert report.overall.estimated_total_time == 0


class TestParser:
    def test_nodes_and_edges(self, diagram):
        parsed = DiagramParser().parse(diagram)

        check = parsed.nodes[1]
        assert check.category == "logic"
        assert check.semantic_role == "conditional_logic"
        assert check.description == "Decision point: conditional logic"
        assert [e.semantic_type for e in parsed.edges] == [
            "default_flow",
            "positive_condition",
            "negative_condition",
            "default_flow",
            "default_flow",
        ]

    def test_missing_label_and_position_defaults(self):
        parsed = DiagramParser().parse(Diagram.from_dict({"nodes": [{"id": "x", "type": "user-action"}]}))
        node = parsed.nodes[0]
        assert node.label == "Untitled Node"
        assert node.position == {"x": 0, "y": 0}
        assert node.data == {}

    def test_process_steps_follow_the_flow(self, diagram):
        steps = DiagramParser().parse(diagram).process_steps
        assert [s.id for s in steps] == ["start", "check", "db", "end", "api"]
        assert [s.step_number for s in steps] == [1, 2, 3, 4, 5]
        assert steps[2].estimated_duration == "1-3 minutes"
        assert steps[3].estimated_duration == "1-2 minutes"

    def test_step_dependencies_share_a_role(self):
        diagram = build_diagram(
            [("start", "start"), ("db1", "database"), ("db2", "database")],
            [("start", "db1"), ("db1", "db2")],
        )
        steps = DiagramParser().parse(diagram).process_steps
        assert steps[2].dependencies == ["db1"]
        assert steps[1].dependencies == []

    def test_complexity_summary(self, diagram):
        summary = DiagramParser().parse(diagram).complexity
        assert summary.overall_score == 2
        assert summary.level == "Low"
        assert summary.factors.branching_factor == 2
        assert summary.factors.max_depth == 3

    def test_optional_sections(self, diagram):
        parsed = DiagramParser().parse(
            diagram, include_metadata=False, analyze_flow=False, extract_patterns=False
        )
        assert parsed.metadata is None
        assert parsed.flow_analysis is None
        assert parsed.patterns == []

        full = DiagramParser().parse(diagram)
        assert full.metadata.total_nodes == 5
        assert full.flow_analysis.entry_points == 1
        assert full.flow_analysis.average_connections_per_node == 1.0

    def test_decision_pattern(self, diagram):
        patterns = DiagramParser().extract_patterns(diagram)
        assert [p.type for p in patterns] == ["decision"]
        assert patterns[0].instances == [{
            "nodeId": "check",
            "label": "check step",
            "condition": None,
            "outgoingPaths": 2,
        }]

    def test_parallel_sequential_and_loop_patterns(self):
        diagram = build_diagram(
            [
                ("start", "start"),
                ("a", "html-element"),
                ("b", "html-element"),
                ("c", "html-element"),
                ("d", "html-element"),
                ("e", "html-element"),
            ],
            [("start", "a"), ("start", "e"), ("a", "b"), ("b", "c"), ("c", "d"), ("e", "e")],
        )
        patterns = {p.type: p for p in DiagramParser().extract_patterns(diagram)}

        assert patterns["parallel"].instances == [{"forkNode": "start", "branches": ["a", "e"]}]
        assert patterns["sequential"].instances == [["a", "b", "c"]]
        assert patterns["loop"].instances == [["e", "e"]]


class TestPolicyOverrides:
    def analyzer(self, **overrides):
        return ProcessAnalyzer(replace(DEFAULT_POLICY, **overrides))

    def test_processing_times(self, diagram):
        times = {**DEFAULT_POLICY.processing_time, "api-call": 500}
        analyzer = self.analyzer(processing_time=times)

        flow = analyzer.analyze_flow(diagram)
        assert [p.estimated_duration for p in flow.paths] == [57, 507]

        perf = analyzer.analyze_performance(diagram)
        assert {p.node_id: p.estimated_time for p in perf.node_performance}["api"] == 500.0
        assert perf.overall.estimated_total_time == 507.0

    def test_heavy_node_types(self, diagram):
        report = self.analyzer(heavy_node_types=()).analyze_flow(diagram)
        assert [p.complexity for p in report.paths] == [4, 4]
        assert all(b.type != "complexity" for b in report.bottlenecks)

    def test_convergence_thresholds(self, diagram):
        report = self.analyzer(convergence_thresholds={"medium": 1, "high": 1}).analyze_flow(diagram)
        convergence = [(b.node_id, b.severity) for b in report.bottlenecks if b.type == "convergence"]
        assert convergence == [("end", "high")]

    def test_criticality_table(self, diagram):
        report = self.analyzer(criticality={"api-call": 10.0}).analyze_dependencies(diagram)
        assert (report.critical_components[0].node_id, report.critical_components[0].criticality_score) == (
            "api",
            13.5,
        )

    def test_load_and_operation_multipliers(self):
        diagram = build_diagram([("save", "database", {"label": "Save", "operation": "write"})])
        analyzer = self.analyzer(
            data_load_multipliers={"high": 10.0},
            operation_multipliers={**DEFAULT_POLICY.operation_multipliers, "database_write": 3.0},
        )

        [high] = analyzer.analyze_performance(diagram, expected_data_load="high").node_performance
        assert high.estimated_time == 1500.0
        [medium] = analyzer.analyze_performance(diagram, expected_data_load="medium").node_performance
        assert medium.factors.data_load == 1.0

    def test_bottleneck_shares_and_speedup(self, diagram):
        analyzer = self.analyzer(bottleneck_shares={"include": 0.2, "high": 0.8}, branch_speedup=1.0)
        report = analyzer.analyze_performance(diagram)

        assert [(b.node_id, b.severity) for b in report.bottlenecks] == [("api", "high"), ("db", "medium")]
        assert report.overall.parallelizable[0].potential_speedup == 2.0
