"""
Complexity Analyzer - quantifies how hard a process diagram is to follow,
run and maintain.

Four independent sub-scores (structural, cognitive, computational,
maintenance) are linear combinations of named metrics; the overall score is
their weighted sum. All coefficients come from the ScoringPolicy.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy, interpret, round_half_up
from flowscope.graph.model import Diagram, Node
from flowscope.graph.traversal import TraversalEngine
from flowscope.observers import AnalysisObserver, NullObserver


@dataclass
class StructuralMetrics:
    node_count: int
    edge_count: int
    cyclomatic_complexity: int
    branching_factor: int
    depth: int
    width: int


@dataclass
class CognitiveMetrics:
    decision_points: int
    external_dependencies: int
    user_interactions: int
    data_operations: int
    path_diversity: int
    label_clarity: float


@dataclass
class ComputationalMetrics:
    computational_nodes: int
    io_operations: int
    network_calls: int
    database_operations: int
    parallelizability: float
    resource_intensity: float


@dataclass
class MaintenanceMetrics:
    coupling: float
    cohesion: float
    change_impact: float
    testability: float
    modularity: float
    documentation: float


@dataclass
class SubScore:
    score: float
    metrics: object
    interpretation: str


@dataclass
class ComplexityMetrics:
    structural: SubScore
    cognitive: SubScore
    computational: SubScore
    maintenance: SubScore


@dataclass
class NodeDistribution:
    type_count: int
    distribution: Dict[str, int]
    dominant_type: Optional[str]


@dataclass
class ConnectionPatterns:
    fan_out: int = 0
    fan_in: int = 0
    sequential: int = 0
    parallel: int = 0


@dataclass
class Hotspot:
    node_id: str
    label: str
    type: Optional[str]
    complexity: int


@dataclass
class SimplificationOpportunity:
    type: str
    description: str
    items: List[List[str]] = field(default_factory=list)


@dataclass
class ComplexityFactors:
    node_distribution: NodeDistribution
    connection_patterns: ConnectionPatterns
    complexity_hotspots: List[Hotspot]
    simplification_opportunities: List[SimplificationOpportunity]


@dataclass
class ComplexityAdvice:
    priority: str
    category: str
    title: str
    description: str
    expected_impact: str


@dataclass
class ComplexityBreakdown:
    node_complexity: float
    edge_complexity: float
    flow_complexity: float
    interaction_complexity: float


@dataclass
class ComplexityReport:
    overall_score: int
    level: str
    metrics: ComplexityMetrics
    factors: ComplexityFactors
    recommendations: List[ComplexityAdvice]
    breakdown: ComplexityBreakdown
    policy_version: str
    truncated: bool = False


def data_complexity(data: Optional[dict], policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    if not data:
        return 0.0
    total = 0.0
    for key, increment in policy.data_complexity.items():
        if data.get(key):
            total += increment
    fields = data.get("fields")
    if isinstance(fields, list):
        total += len(fields) * policy.field_complexity
    return total


def node_complexity(node: Node, policy: ScoringPolicy = DEFAULT_POLICY) -> float:
    return policy.base_complexity_for(node.type) + data_complexity(node.data, policy)


class ComplexityAnalyzer:
    """
    Usage:
        report = ComplexityAnalyzer().analyze(diagram)
        print(report.overall_score, report.level)
    """

    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        observer: Optional[AnalysisObserver] = None,
    ):
        self.policy = policy
        self.observer = observer or NullObserver()

    def analyze(self, diagram: Diagram) -> ComplexityReport:
        engine = TraversalEngine(diagram, limits=self.policy.limits, observer=self.observer)

        structural = self.structural(diagram, engine)
        cognitive = self.cognitive(diagram, engine)
        computational = self.computational(diagram, engine)
        maintenance = self.maintenance(diagram, engine)

        overall = self.overall_score(structural, cognitive, computational, maintenance)
        factors = self.factors(diagram, engine)

        report = ComplexityReport(
            overall_score=overall,
            level=self.policy.level_for(overall),
            metrics=ComplexityMetrics(structural, cognitive, computational, maintenance),
            factors=factors,
            recommendations=self.recommendations(overall, factors),
            breakdown=self.breakdown(diagram, engine),
            policy_version=self.policy.version,
            truncated=engine.truncated,
        )
        self.observer.notify(
            "complexity.completed",
            overall_score=report.overall_score,
            level=report.level,
            nodes=len(diagram.nodes),
        )
        return report

    # ------------------------------------------------------------------
    # Sub-scores
    # ------------------------------------------------------------------

    def structural(self, diagram: Diagram, engine: TraversalEngine) -> SubScore:
        metrics = StructuralMetrics(
            node_count=len(diagram.nodes),
            edge_count=len(diagram.edges),
            cyclomatic_complexity=self.cyclomatic_complexity(diagram, engine),
            branching_factor=self.branching_factor(diagram, engine),
            depth=engine.max_depth(),
            width=engine.max_width(),
        )
        w = self.policy.structural_weights
        score = (
            metrics.node_count * w["node_count"]
            + metrics.edge_count * w["edge_count"]
            + metrics.cyclomatic_complexity * w["cyclomatic_complexity"]
            + metrics.branching_factor * w["branching_factor"]
            + metrics.depth * w["depth"]
            + metrics.width * w["width"]
        )
        return SubScore(round(score, 1), metrics, interpret("structural", score))

    def cognitive(self, diagram: Diagram, engine: TraversalEngine) -> SubScore:
        metrics = CognitiveMetrics(
            decision_points=len(diagram.nodes_of_type("decision")),
            external_dependencies=len(diagram.nodes_of_type("external-service", "api-call")),
            user_interactions=len(diagram.nodes_of_type("user-action", "html-element")),
            data_operations=len(diagram.nodes_of_type("database")),
            path_diversity=self.path_diversity(diagram, engine),
            label_clarity=self.label_clarity(diagram),
        )
        w = self.policy.cognitive_weights
        score = (
            metrics.decision_points * w["decision_points"]
            + metrics.external_dependencies * w["external_dependencies"]
            + metrics.user_interactions * w["user_interactions"]
            + metrics.data_operations * w["data_operations"]
            + metrics.path_diversity * w["path_diversity"]
            + (10 - metrics.label_clarity) * w["label_unclarity"]
        )
        return SubScore(round(score, 1), metrics, interpret("cognitive", score))

    def computational(self, diagram: Diagram, engine: TraversalEngine) -> SubScore:
        metrics = ComputationalMetrics(
            computational_nodes=len(
                diagram.nodes_of_type("decision", "database", "api-call", "external-service")
            ),
            io_operations=len(diagram.nodes_of_type("database", "html-element", "user-action")),
            network_calls=len(diagram.nodes_of_type("api-call", "external-service")),
            database_operations=len(diagram.nodes_of_type("database")),
            parallelizability=self.parallelizability(diagram, engine),
            resource_intensity=self.resource_intensity(diagram),
        )
        w = self.policy.computational_weights
        score = (
            metrics.computational_nodes * w["computational_nodes"]
            + metrics.io_operations * w["io_operations"]
            + metrics.network_calls * w["network_calls"]
            + metrics.database_operations * w["database_operations"]
            + (10 - metrics.parallelizability) * w["sequentiality"]
            + metrics.resource_intensity * w["resource_intensity"]
        )
        return SubScore(round(score, 1), metrics, interpret("computational", score))

    def maintenance(self, diagram: Diagram, engine: TraversalEngine) -> SubScore:
        metrics = MaintenanceMetrics(
            coupling=self.coupling(diagram),
            cohesion=self.cohesion(diagram, engine),
            change_impact=self.change_impact(diagram),
            testability=self.testability(diagram),
            modularity=self.modularity(diagram),
            documentation=self.documentation(diagram),
        )
        w = self.policy.maintenance_weights
        score = (
            metrics.coupling * w["coupling"]
            + (10 - metrics.cohesion) * w["incohesion"]
            + metrics.change_impact * w["change_impact"]
            + (10 - metrics.testability) * w["untestability"]
            + (10 - metrics.modularity) * w["unmodularity"]
            + (10 - metrics.documentation) * w["undocumented"]
        )
        return SubScore(round(score, 1), metrics, interpret("maintenance", score))

    def overall_score(self, structural, cognitive, computational, maintenance) -> int:
        w = self.policy.overall_weights
        total = (
            structural.score * w["structural"]
            + cognitive.score * w["cognitive"]
            + computational.score * w["computational"]
            + maintenance.score * w["maintenance"]
        )
        return round_half_up(total)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def cyclomatic_complexity(self, diagram: Diagram, engine: TraversalEngine) -> int:
        decisions = len(diagram.nodes_of_type("decision"))
        components = len(engine.connected_components())
        return len(diagram.edges) - len(diagram.nodes) + 2 * components + decisions

    def branching_factor(self, diagram: Diagram, engine: TraversalEngine) -> int:
        return max([engine.out_degree(n) for n in diagram.node_ids()] + [1])

    def path_diversity(self, diagram: Diagram, engine: TraversalEngine) -> int:
        cap = self.policy.path_diversity_cap
        starts = [n.id for n in diagram.nodes_of_type("start") if n.id]
        ends = [n.id for n in diagram.nodes_of_type("end") if n.id]
        if not starts or not ends:
            return 1

        total = 0
        for start in starts:
            for end in ends:
                total += engine.count_paths(start, end, cap=cap - total)
                if total >= cap:
                    return cap
        return total

    def label_clarity(self, diagram: Diagram) -> float:
        if not diagram.nodes:
            return 10.0
        clarity = 0
        for node in diagram.nodes:
            length = len(node.label)
            if length == 0:
                pass
            elif length < 5:
                clarity += 3
            elif length > 50:
                clarity += 5
            else:
                clarity += 8
            if node.description:
                clarity += 2
        return min(clarity / len(diagram.nodes), 10.0)

    def parallelizability(self, diagram: Diagram, engine: TraversalEngine) -> float:
        if not diagram.nodes:
            return 10.0
        points = len(engine.forks()) + len(engine.joins())
        return min(points / len(diagram.nodes) * 10, 10.0)

    def resource_intensity(self, diagram: Diagram) -> float:
        if not diagram.nodes:
            return 0.0
        total = sum(self.policy.resource_intensity_for(node.type) for node in diagram.nodes)
        return min(total / len(diagram.nodes), 10.0)

    def coupling(self, diagram: Diagram) -> float:
        n = len(diagram.nodes)
        if n <= 1:
            return 0.0
        return min(len(diagram.edges) / (n * (n - 1)) * 10, 10.0)

    def cohesion(self, diagram: Diagram, engine: TraversalEngine) -> float:
        if not diagram.nodes:
            return 10.0

        groups: Dict[str, set] = {}
        for node in diagram.nodes:
            if node.id:
                groups.setdefault(node.type or "unknown", set()).add(node.id)

        total, counted = 0.0, 0
        for members in groups.values():
            if len(members) < 2:
                continue
            internal = sum(
                1 for e in diagram.edges if e.source in members and e.target in members
            )
            total += internal / (len(members) * (len(members) - 1))
            counted += 1

        return (total / counted) * 10 if counted else 5.0

    def change_impact(self, diagram: Diagram) -> float:
        if not diagram.nodes:
            return 0.0
        return min(len(diagram.edges) / len(diagram.nodes) * 2, 10.0)

    def testability(self, diagram: Diagram) -> float:
        decisions = len(diagram.nodes_of_type("decision"))
        external = len(diagram.nodes_of_type("external-service"))
        penalty = self.policy.testability_penalties
        return max(10 - (decisions * penalty["decision"] + external * penalty["external-service"]), 0.0)

    def modularity(self, diagram: Diagram) -> float:
        if not diagram.nodes:
            return 10.0
        return min(len(diagram.count_by_type()) * 2, 10.0)

    def documentation(self, diagram: Diagram) -> float:
        if not diagram.nodes:
            return 10.0
        documented = sum(1 for n in diagram.nodes if len(n.description) > 10)
        return documented / len(diagram.nodes) * 10

    # ------------------------------------------------------------------
    # Factors, advice and breakdown
    # ------------------------------------------------------------------

    def factors(self, diagram: Diagram, engine: TraversalEngine) -> ComplexityFactors:
        distribution = diagram.count_by_type()
        dominant = max(distribution, key=distribution.get) if distribution else None

        patterns = ConnectionPatterns()
        for node_id in diagram.node_ids():
            out_deg, in_deg = engine.out_degree(node_id), engine.in_degree(node_id)
            if out_deg > 1:
                patterns.fan_out += 1
            if in_deg > 1:
                patterns.fan_in += 1
            if out_deg == 1 and in_deg == 1:
                patterns.sequential += 1
            if out_deg > 1 or in_deg > 1:
                patterns.parallel += 1

        return ComplexityFactors(
            node_distribution=NodeDistribution(
                type_count=len(distribution),
                distribution=distribution,
                dominant_type=dominant,
            ),
            connection_patterns=patterns,
            complexity_hotspots=self.hotspots(diagram, engine),
            simplification_opportunities=self.simplification_opportunities(diagram, engine),
        )

    def hotspots(self, diagram: Diagram, engine: TraversalEngine) -> List[Hotspot]:
        found = []
        for node in diagram.nodes:
            if not node.id:
                continue
            score = engine.in_degree(node.id) + engine.out_degree(node.id)
            if node.type == "decision":
                score += 2
            if score > self.policy.hotspot_threshold:
                found.append(Hotspot(node.id, node.label, node.type, score))
        found.sort(key=lambda h: h.complexity, reverse=True)
        return found

    def simplification_opportunities(
        self, diagram: Diagram, engine: TraversalEngine
    ) -> List[SimplificationOpportunity]:
        opportunities = []

        chains = sequential_chains(diagram, engine)
        if chains:
            opportunities.append(SimplificationOpportunity(
                type="sequential_simplification",
                description="Sequential node chains could be consolidated",
                items=chains,
            ))

        redundant = parallel_edges(diagram, engine)
        if redundant:
            opportunities.append(SimplificationOpportunity(
                type="path_simplification",
                description="Redundant paths could be consolidated",
                items=redundant,
            ))

        return opportunities

    def recommendations(self, score: int, factors: ComplexityFactors) -> List[ComplexityAdvice]:
        thresholds = self.policy.advice_thresholds
        advice = []
        if score > thresholds["break_down"]:
            advice.append(ComplexityAdvice(
                priority="high",
                category="architecture",
                title="Consider breaking down the process",
                description="The process is very complex. Consider splitting it into smaller, manageable sub-processes.",
                expected_impact="significant",
            ))
        if score > thresholds["document"]:
            advice.append(ComplexityAdvice(
                priority="medium",
                category="documentation",
                title="Enhance documentation",
                description="Add detailed descriptions and comments to improve understanding.",
                expected_impact="moderate",
            ))
        if factors.complexity_hotspots:
            advice.append(ComplexityAdvice(
                priority="medium",
                category="refactoring",
                title="Address complexity hotspots",
                description="Focus on simplifying the most complex nodes and connections.",
                expected_impact="moderate",
            ))
        return advice

    def breakdown(self, diagram: Diagram, engine: TraversalEngine) -> ComplexityBreakdown:
        w = self.policy.breakdown_weights
        nodes = sum(node_complexity(n, self.policy) for n in diagram.nodes)

        edges = 0.0
        for edge in diagram.edges:
            edges += w["edge"]
            if edge.label:
                edges += w["edge_label"]
            if edge.animated:
                edges += w["edge_animated"]

        branches = sum(max(0, engine.out_degree(n) - 1) for n in diagram.node_ids())
        flow = len(engine.detect_cycles()) * w["cycle"] + branches * w["branch"]

        users = len(diagram.nodes_of_type("user-action", "html-element"))
        external = len(diagram.nodes_of_type("external-service", "api-call"))

        return ComplexityBreakdown(
            node_complexity=round(nodes, 2),
            edge_complexity=round(edges, 2),
            flow_complexity=flow,
            interaction_complexity=users * w["user_interaction"] + external * w["external_call"],
        )


def sequential_chains(diagram: Diagram, engine: TraversalEngine, min_length: int = 3) -> List[List[str]]:
    """Maximal runs of pass-through nodes (exactly one edge in, one out)."""

    def passes_through(node_id: str) -> bool:
        return engine.in_degree(node_id) == 1 and engine.out_degree(node_id) == 1

    chains, seen = [], set()
    for node_id in diagram.node_ids():
        if node_id in seen or not passes_through(node_id):
            continue
        if passes_through(engine.predecessors(node_id)[0]):
            continue
        chain = []
        current = node_id
        while passes_through(current) and current not in seen:
            seen.add(current)
            chain.append(current)
            current = engine.successors(current)[0]
        if len(chain) >= min_length:
            chains.append(chain)
    return chains


def parallel_edges(diagram: Diagram, engine: TraversalEngine) -> List[List[str]]:
    counts: Dict[tuple, int] = {}
    for edge in diagram.edges:
        if edge.source in engine and edge.target in engine:
            key = (edge.source, edge.target)
            counts[key] = counts.get(key, 0) + 1
    return [[source, target] for (source, target), count in counts.items() if count > 1]
