"""
Process Analyzer - execution paths, dependencies and rough performance
characteristics of a process diagram.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy, round_half_up
from flowscope.graph.model import Diagram, Node
from flowscope.graph.traversal import TraversalEngine
from flowscope.observers import AnalysisObserver, NullObserver


# ============================================================
# FLOW
# ============================================================

@dataclass
class FlowPath:
    id: str
    nodes: List[str]
    length: int
    complexity: int
    estimated_duration: int


@dataclass
class CriticalPath(FlowPath):
    is_critical: bool = True
    reason: str = "Highest complexity path"
    optimization_priority: str = "high"


@dataclass
class Bottleneck:
    node_id: str
    type: str  # convergence | complexity | external_dependency
    severity: str
    description: str
    recommendation: str


@dataclass
class ParallelProcess:
    fork_node: str
    paths: List[List[str]]
    can_optimize: bool
    estimated_speedup: float


@dataclass
class FlowPatterns:
    sequential: bool
    branching: bool
    loops: bool
    pipeline: bool


@dataclass
class FanInOut:
    max_fan_in: int
    max_fan_out: int
    avg_fan_in: float
    avg_fan_out: float


@dataclass
class FlowMetrics:
    cyclomatic_complexity: int
    fan_in_out: FanInOut
    depth: int
    width: int
    coupling: float
    cohesion: float


@dataclass
class FlowSummary:
    total_nodes: int
    total_connections: int
    complexity: int
    efficiency: int


@dataclass
class FlowReport:
    paths: List[FlowPath]
    critical_path: Optional[CriticalPath]
    bottlenecks: List[Bottleneck]
    parallel_processes: List[ParallelProcess]
    patterns: FlowPatterns
    flow_analysis: FlowSummary
    metrics: Optional[FlowMetrics] = None
    paths_truncated: bool = False


# ============================================================
# DEPENDENCIES
# ============================================================

@dataclass
class DependencyEnd:
    id: str
    label: str
    type: Optional[str]


@dataclass
class Dependency:
    id: str
    source: DependencyEnd
    target: DependencyEnd
    type: str
    strength: str
    critical: bool


@dataclass
class CriticalComponent:
    node_id: str
    label: str
    type: Optional[str]
    incoming_count: int
    outgoing_count: int
    total_connections: int
    criticality_score: float


@dataclass
class MostDependentComponent:
    node_id: str
    label: str
    dependency_count: int


@dataclass
class DependencyInsights:
    strong_dependencies: int
    weak_dependencies: int
    circular_count: int
    most_dependent_component: Optional[MostDependentComponent]


@dataclass
class DependencyReport:
    dependencies: List[Dependency]
    circular_dependencies: List[List[str]]
    critical_components: List[CriticalComponent]
    dependency_matrix: Dict[str, Dict[str, bool]]
    insights: DependencyInsights


# ============================================================
# PERFORMANCE
# ============================================================

@dataclass
class PerformanceFactors:
    base_time: float
    complexity: float
    data_load: float


@dataclass
class NodePerformance:
    node_id: str
    estimated_time: float
    factors: PerformanceFactors
    time_unit: str = "ms"


@dataclass
class PerformanceBottleneck:
    node_id: str
    estimated_time: float
    severity: str
    bottleneck_type: str = "performance"


@dataclass
class PathPerformance:
    id: str
    nodes: List[str]
    total_execution_time: float
    average_node_time: float


@dataclass
class Optimization:
    type: str
    target: str
    description: str
    expected_improvement: str


@dataclass
class ParallelizableComponent:
    node_id: str
    parallel_branches: int
    potential_speedup: float


@dataclass
class ScalabilityFactor:
    factor: str
    impact: str
    description: str


@dataclass
class PerformanceOverall:
    estimated_total_time: float
    critical_path_time: float
    parallelizable: List[ParallelizableComponent] = field(default_factory=list)
    scalability_factors: List[ScalabilityFactor] = field(default_factory=list)


@dataclass
class PerformanceReport:
    node_performance: List[NodePerformance]
    bottlenecks: List[PerformanceBottleneck]
    path_performance: List[PathPerformance]
    suggested_optimizations: List[Optimization]
    overall: PerformanceOverall


def processing_time(node_type: Optional[str], policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    return policy.processing_time_for(node_type)


def is_heavy(node: Optional[Node], policy: ScoringPolicy = DEFAULT_POLICY) -> bool:
    return node is not None and node.type in policy.heavy_node_types


class ProcessAnalyzer:
    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        observer: Optional[AnalysisObserver] = None,
    ):
        self.policy = policy
        self.observer = observer or NullObserver()

    def _engine(self, diagram: Diagram) -> TraversalEngine:
        return TraversalEngine(diagram, limits=self.policy.limits, observer=self.observer)

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    def analyze_flow(
        self,
        diagram: Diagram,
        include_metrics: bool = True,
        analyze_paths: bool = True,
    ) -> FlowReport:
        engine = self._engine(diagram)

        paths, truncated = self.find_all_paths(diagram, engine) if analyze_paths else ([], False)

        report = FlowReport(
            paths=paths,
            critical_path=self.critical_path(paths),
            bottlenecks=self.bottlenecks(diagram, engine),
            parallel_processes=self.parallel_processes(diagram, engine),
            patterns=self.patterns(diagram, engine),
            flow_analysis=FlowSummary(
                total_nodes=len(diagram.nodes),
                total_connections=len(diagram.edges),
                complexity=self.flow_complexity(diagram, engine),
                efficiency=self.flow_efficiency(diagram, paths),
            ),
            paths_truncated=truncated,
        )
        if include_metrics:
            report.metrics = self.flow_metrics(diagram, engine)
        return report

    def find_all_paths(self, diagram: Diagram, engine: TraversalEngine):
        """Every simple start-to-end path, up to the policy's path budget."""
        by_id = {n.id: n for n in diagram.nodes if n.id}
        starts = [n.id for n in diagram.nodes_of_type("start") if n.id]
        ends = [n.id for n in diagram.nodes_of_type("end") if n.id]
        budget = self.policy.limits.max_paths

        raw: List[List[str]] = []
        truncated = False
        for start in starts:
            for end in ends:
                if len(raw) >= budget:
                    truncated = True
                    break
                found = engine.all_simple_paths(start, end)
                raw.extend(found.paths[: budget - len(raw)])
                truncated = truncated or found.truncated

        paths = []
        for i, nodes in enumerate(raw):
            paths.append(FlowPath(
                id=f"path-{i}",
                nodes=nodes,
                length=len(nodes),
                complexity=sum(2 if is_heavy(by_id.get(n), self.policy) else 1 for n in nodes),
                estimated_duration=sum(
                    processing_time(by_id[n].type if n in by_id else None, self.policy) for n in nodes
                ),
            ))
        return paths, truncated

    def critical_path(self, paths: List[FlowPath]) -> Optional[CriticalPath]:
        if not paths:
            return None
        chosen = paths[0]
        for path in paths[1:]:
            if path.complexity > chosen.complexity:
                chosen = path
        return CriticalPath(
            id=chosen.id,
            nodes=list(chosen.nodes),
            length=chosen.length,
            complexity=chosen.complexity,
            estimated_duration=chosen.estimated_duration,
        )

    def bottlenecks(self, diagram: Diagram, engine: TraversalEngine) -> List[Bottleneck]:
        convergence = self.policy.convergence_thresholds
        found = []
        for node in diagram.nodes:
            if not node.id:
                continue
            incoming = engine.in_degree(node.id)
            if incoming > convergence["medium"]:
                found.append(Bottleneck(
                    node_id=node.id,
                    type="convergence",
                    severity="high" if incoming > convergence["high"] else "medium",
                    description=f"{incoming} processes converge at this point",
                    recommendation="Consider parallel processing or load balancing",
                ))
            if is_heavy(node, self.policy):
                found.append(Bottleneck(
                    node_id=node.id,
                    type="complexity",
                    severity="high",
                    description="High complexity operation",
                    recommendation="Consider breaking into smaller components",
                ))
            if node.type in ("external-service", "api-call"):
                found.append(Bottleneck(
                    node_id=node.id,
                    type="external_dependency",
                    severity="medium",
                    description="External dependency may cause delays",
                    recommendation="Implement caching and error handling",
                ))
        return found

    def parallel_processes(self, diagram: Diagram, engine: TraversalEngine) -> List[ParallelProcess]:
        groups = []
        for fork in engine.forks():
            branches = [engine.trace_chain(target) for target in engine.successors(fork)]
            groups.append(ParallelProcess(
                fork_node=fork,
                paths=branches,
                can_optimize=True,
                estimated_speedup=parallel_speedup(branches),
            ))
        return groups

    def patterns(self, diagram: Diagram, engine: TraversalEngine) -> FlowPatterns:
        node_ids = diagram.node_ids()
        pipeline_nodes = 0
        for node in diagram.nodes:
            if not node.id:
                continue
            incoming, outgoing = engine.in_degree(node.id), engine.out_degree(node.id)
            if (
                (incoming == 1 and outgoing == 1)
                or (node.type == "start" and outgoing == 1)
                or (node.type == "end" and incoming == 1)
            ):
                pipeline_nodes += 1

        return FlowPatterns(
            sequential=bool(diagram.edges) and len(diagram.edges) == len(diagram.nodes) - 1,
            branching=bool(engine.forks()),
            loops=engine.has_cycle(),
            pipeline=bool(node_ids) and pipeline_nodes / len(diagram.nodes) > 0.7,
        )

    def flow_metrics(self, diagram: Diagram, engine: TraversalEngine) -> FlowMetrics:
        node_ids = diagram.node_ids()
        fan_in = [engine.in_degree(n) for n in node_ids]
        fan_out = [engine.out_degree(n) for n in node_ids]
        components = len(engine.connected_components())
        decisions = len(diagram.nodes_of_type("decision"))

        return FlowMetrics(
            cyclomatic_complexity=len(diagram.edges) - len(diagram.nodes) + 2 * components + decisions,
            fan_in_out=FanInOut(
                max_fan_in=max(fan_in, default=0),
                max_fan_out=max(fan_out, default=0),
                avg_fan_in=round(sum(fan_in) / len(fan_in), 2) if fan_in else 0.0,
                avg_fan_out=round(sum(fan_out) / len(fan_out), 2) if fan_out else 0.0,
            ),
            depth=engine.max_depth(),
            width=engine.max_width(),
            coupling=edge_density(diagram),
            cohesion=same_type_edge_ratio(diagram),
        )

    def flow_complexity(self, diagram: Diagram, engine: TraversalEngine) -> int:
        branching = sum(
            engine.out_degree(n) - 1 for n in diagram.node_ids() if engine.out_degree(n) > 1
        )
        return round_half_up(len(diagram.nodes) + len(diagram.edges) * 0.5 + branching)

    def flow_efficiency(self, diagram: Diagram, paths: List[FlowPath]) -> int:
        if not paths or not diagram.nodes:
            return 0
        average = sum(p.length for p in paths) / len(paths)
        return round_half_up(average / len(diagram.nodes) * 100)

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def analyze_dependencies(self, diagram: Diagram) -> DependencyReport:
        engine = self._engine(diagram)
        by_id = {}
        for node in diagram.nodes:
            if node.id and node.id not in by_id:
                by_id[node.id] = node

        dependencies = []
        for edge in diagram.edges:
            source, target = by_id.get(edge.source), by_id.get(edge.target)
            if source is None or target is None:
                continue
            dependencies.append(Dependency(
                id=f"{source.id}-{target.id}",
                source=DependencyEnd(source.id, source.label or "Untitled", source.type),
                target=DependencyEnd(target.id, target.label or "Untitled", target.type),
                type=dependency_type(source),
                strength=dependency_strength(source),
                critical=engine.in_degree(target.id) == 1,
            ))

        components = self.critical_components(list(by_id.values()), dependencies)
        cycles = engine.detect_cycles()

        return DependencyReport(
            dependencies=dependencies,
            circular_dependencies=cycles,
            critical_components=components,
            dependency_matrix=dependency_matrix(list(by_id), dependencies),
            insights=DependencyInsights(
                strong_dependencies=sum(1 for d in dependencies if d.strength == "strong"),
                weak_dependencies=sum(1 for d in dependencies if d.strength == "weak"),
                circular_count=len(cycles),
                most_dependent_component=most_dependent(list(by_id.values()), dependencies),
            ),
        )

    def critical_components(self, nodes: List[Node], dependencies: List[Dependency]) -> List[CriticalComponent]:
        ranked = []
        for node in nodes:
            incoming = sum(1 for d in dependencies if d.target.id == node.id)
            outgoing = sum(1 for d in dependencies if d.source.id == node.id)
            score = incoming * 2 + outgoing * 1.5 + self.policy.criticality_for(node.type)
            ranked.append(CriticalComponent(
                node_id=node.id,
                label=node.label,
                type=node.type,
                incoming_count=incoming,
                outgoing_count=outgoing,
                total_connections=incoming + outgoing,
                criticality_score=round(score, 1),
            ))
        ranked.sort(key=lambda c: c.criticality_score, reverse=True)
        return ranked[:5]

    # ------------------------------------------------------------------
    # Performance
    # ------------------------------------------------------------------

    def analyze_performance(self, diagram: Diagram, expected_data_load: str = "medium") -> PerformanceReport:
        engine = self._engine(diagram)
        data_load = self.policy.data_load_multipliers.get(expected_data_load, 1.0)

        node_perf = []
        for node in diagram.nodes:
            if not node.id:
                continue
            base = processing_time(node.type, self.policy)
            multiplier = complexity_multiplier(node, self.policy)
            node_perf.append(NodePerformance(
                node_id=node.id,
                estimated_time=base * multiplier * data_load,
                factors=PerformanceFactors(base_time=base, complexity=multiplier, data_load=data_load),
            ))

        paths, _ = self.find_all_paths(diagram, engine)
        times = {p.node_id: p.estimated_time for p in node_perf}
        path_perf = []
        for path in paths:
            total = sum(times.get(n, 0) for n in path.nodes)
            path_perf.append(PathPerformance(
                id=path.id,
                nodes=path.nodes,
                total_execution_time=total,
                average_node_time=total / len(path.nodes),
            ))

        bottlenecks = performance_bottlenecks(node_perf, self.policy)
        optimizations = [
            Optimization(
                type="caching",
                target=b.node_id,
                description="Implement caching to reduce processing time",
                expected_improvement="30-50%",
            )
            for b in bottlenecks
            if b.severity == "high"
        ]

        longest = max((p.total_execution_time for p in path_perf), default=0)
        return PerformanceReport(
            node_performance=node_perf,
            bottlenecks=bottlenecks,
            path_performance=path_perf,
            suggested_optimizations=optimizations,
            overall=PerformanceOverall(
                estimated_total_time=longest,
                critical_path_time=longest,
                parallelizable=[
                    ParallelizableComponent(
                        node_id=fork,
                        parallel_branches=engine.out_degree(fork),
                        potential_speedup=round(engine.out_degree(fork) * self.policy.branch_speedup, 2),
                    )
                    for fork in engine.forks()
                ],
                scalability_factors=scalability_factors(diagram),
            ),
        )


def parallel_speedup(branches: List[List[str]]) -> float:
    if len(branches) <= 1:
        return 1.0
    longest = max(len(b) for b in branches)
    return round(sum(len(b) for b in branches) / longest, 1)


def edge_density(diagram: Diagram) -> float:
    n = len(diagram.nodes)
    if n <= 1:
        return 0.0
    return round(len(diagram.edges) / (n * (n - 1)), 4)


def same_type_edge_ratio(diagram: Diagram) -> float:
    types = {n.id: n.type for n in diagram.nodes if n.id}
    linked = [e for e in diagram.edges if e.source in types and e.target in types]
    if not linked:
        return 0.0
    same = sum(1 for e in linked if types[e.source] == types[e.target])
    return round(same / len(linked), 4)


def dependency_type(source: Node) -> str:
    if source.type == "database":
        return "data_dependency"
    if source.type == "decision":
        return "conditional_dependency"
    if source.type == "user-action":
        return "user_dependency"
    return "sequential_dependency"


def dependency_strength(source: Node) -> str:
    if source.type in ("database", "external-service"):
        return "strong"
    if source.type in ("html-element", "user-action"):
        return "medium"
    return "weak"


def dependency_matrix(node_ids: List[str], dependencies: List[Dependency]) -> Dict[str, Dict[str, bool]]:
    links = {(d.source.id, d.target.id) for d in dependencies}
    return {a: {b: (a, b) in links for b in node_ids} for a in node_ids}


def most_dependent(nodes: List[Node], dependencies: List[Dependency]) -> Optional[MostDependentComponent]:
    best = None
    for node in nodes:
        count = sum(1 for d in dependencies if node.id in (d.source.id, d.target.id))
        if count > (best.dependency_count if best else 0):
            best = MostDependentComponent(node.id, node.label, count)
    return best


def complexity_multiplier(node: Node, policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    multipliers = policy.operation_multipliers
    if node.type == "decision" and node.get("condition"):
        return multipliers["decision_with_condition"]
    if node.type == "database" and node.get("operation") == "write":
        return multipliers["database_write"]
    if node.type == "api-call" and node.get("method") == "POST":
        return multipliers["api_post"]
    return 1.0


def performance_bottlenecks(
    node_perf: List[NodePerformance], policy: ScoringPolicy = DEFAULT_POLICY
) -> List[PerformanceBottleneck]:
    if not node_perf:
        return []
    shares = policy.bottleneck_shares
    ranked = sorted(node_perf, key=lambda p: p.estimated_time, reverse=True)
    slowest = ranked[0].estimated_time
    return [
        PerformanceBottleneck(
            node_id=p.node_id,
            estimated_time=p.estimated_time,
            severity="high" if p.estimated_time >= slowest * shares["high"] else "medium",
        )
        for p in ranked
        if p.estimated_time >= slowest * shares["include"]
    ]


def scalability_factors(diagram: Diagram) -> List[ScalabilityFactor]:
    factors = []
    if diagram.nodes_of_type("database"):
        factors.append(ScalabilityFactor(
            factor="database_operations",
            impact="high",
            description="Database operations may become bottlenecks at scale",
        ))
    if diagram.nodes_of_type("api-call"):
        factors.append(ScalabilityFactor(
            factor="external_api_calls",
            impact="medium",
            description="External API calls may limit scalability",
        ))
    return factors
