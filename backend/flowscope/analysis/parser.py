"""
Diagram Parser - restates a raw diagram in a structured, readable form:
categorised nodes, typed edges, process steps in traversal order and the
recurring patterns the flow is built from.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flowscope.analysis.complexity import node_complexity, sequential_chains
from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy, round_half_up
from flowscope.graph.model import Diagram, Edge, Node
from flowscope.graph.traversal import TraversalEngine
from flowscope.observers import AnalysisObserver, NullObserver


NODE_CATEGORIES = {
    "start": "entry",
    "end": "exit",
    "html-element": "ui",
    "database": "data",
    "api-call": "integration",
    "decision": "logic",
    "user-action": "interaction",
    "external-service": "integration",
}

SEMANTIC_ROLES = {
    "start": "process_initiator",
    "end": "process_terminator",
    "html-element": "user_interface",
    "database": "data_persistence",
    "api-call": "external_communication",
    "decision": "conditional_logic",
    "user-action": "user_interaction",
    "external-service": "third_party_integration",
}

STEP_DURATIONS = {
    "process_initiator": "1 minute",
    "user_interface": "2-5 minutes",
    "data_persistence": "1-3 minutes",
    "external_communication": "2-10 seconds",
    "conditional_logic": "< 1 second",
    "user_interaction": "10-60 seconds",
    "third_party_integration": "1-5 seconds",
}

# (upper bound, level, advice); anything above the last bound is "Very High"
SUMMARY_LEVELS = (
    (3, "Low", ["Process is simple and straightforward", "Good for rapid implementation"]),
    (7, "Medium", [
        "Moderate complexity",
        "Consider breaking into smaller components",
        "Good documentation recommended",
    ]),
    (12, "High", [
        "High complexity",
        "Strong testing strategy needed",
        "Consider modular architecture",
    ]),
)
TOP_SUMMARY_LEVEL = ("Very High", [
    "Very high complexity",
    "Requires careful planning",
    "Consider simplification",
    "Extensive testing essential",
])


@dataclass
class ParsedNode:
    id: Optional[str]
    type: Optional[str]
    label: str
    position: Dict[str, float]
    data: Dict[str, Any]
    category: str
    semantic_role: str
    description: str
    complexity: float


@dataclass
class EdgeCondition:
    type: str
    expression: str


@dataclass
class ParsedEdge:
    id: Optional[str]
    source: Optional[str]
    target: Optional[str]
    label: str
    semantic_type: str
    conditions: List[EdgeCondition]
    animated: bool


@dataclass
class ProcessStep:
    step_number: int
    id: str
    type: Optional[str]
    label: str
    description: str
    semantic_role: str
    dependencies: List[str]
    estimated_duration: str


@dataclass
class ComplexityFactorSummary:
    node_complexity: int
    connection_complexity: int
    branching_factor: int
    max_depth: int


@dataclass
class ComplexitySummary:
    overall_score: int
    level: str
    factors: ComplexityFactorSummary
    recommendations: List[str]


@dataclass
class DetectedPattern:
    type: str
    name: str
    description: str
    instances: List[Any]
    confidence: float


@dataclass
class BasicFlow:
    entry_points: int
    exit_points: int
    total_connections: int
    average_connections_per_node: float
    has_circular_flow: bool


@dataclass
class ParseMetadata:
    total_nodes: int
    total_edges: int
    node_types: Dict[str, int]
    processing_time_ms: float


@dataclass
class ParsedDiagram:
    id: Optional[str]
    name: Optional[str]
    description: str
    nodes: List[ParsedNode]
    edges: List[ParsedEdge]
    process_steps: List[ProcessStep]
    complexity: ComplexitySummary
    patterns: List[DetectedPattern] = field(default_factory=list)
    flow_analysis: Optional[BasicFlow] = None
    metadata: Optional[ParseMetadata] = None


def describe_node(node: Node) -> str:
    label = node.label or "Unknown"
    if node.type == "start":
        return f"Process begins: {label}"
    if node.type == "end":
        return f"Process ends: {label}"
    if node.type == "html-element":
        return f"User interface element: {label} ({node.get('elementType') or 'generic'})"
    if node.type == "database":
        return f"Database operation: {node.get('operation') or 'query'} on {node.get('table') or 'table'}"
    if node.type == "api-call":
        return f"API request: {node.get('method') or 'GET'} {node.get('endpoint') or '/api'}"
    if node.type == "decision":
        return f"Decision point: {node.get('condition') or 'conditional logic'}"
    if node.type == "user-action":
        return f"User action: {node.get('actionType') or 'interaction'} - {label}"
    if node.type == "external-service":
        return f"External service: {node.get('serviceType') or 'third-party'} integration"
    return f"Generic step: {label}"


def edge_semantic_type(edge: Edge) -> str:
    label = edge.label.lower()
    if "yes" in label or "true" in label:
        return "positive_condition"
    if "no" in label or "false" in label:
        return "negative_condition"
    if "error" in label:
        return "error_flow"
    return "default_flow"


def edge_conditions(edge: Edge) -> List[EdgeCondition]:
    if "if" in edge.label or "when" in edge.label:
        return [EdgeCondition(type="conditional", expression=edge.label)]
    return []


def summary_level(score: int):
    for bound, level, advice in SUMMARY_LEVELS:
        if score <= bound:
            return level, list(advice)
    level, advice = TOP_SUMMARY_LEVEL
    return level, list(advice)


class DiagramParser:
    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        observer: Optional[AnalysisObserver] = None,
    ):
        self.policy = policy
        self.observer = observer or NullObserver()

    def parse(
        self,
        diagram: Diagram,
        include_metadata: bool = True,
        analyze_flow: bool = True,
        extract_patterns: bool = True,
    ) -> ParsedDiagram:
        started = time.perf_counter()
        engine = TraversalEngine(diagram, limits=self.policy.limits, observer=self.observer)

        nodes = [self.parse_node(n) for n in diagram.nodes]
        edges = [self.parse_edge(e) for e in diagram.edges]

        result = ParsedDiagram(
            id=diagram.id,
            name=diagram.name,
            description=diagram.description,
            nodes=nodes,
            edges=edges,
            process_steps=self.process_steps(nodes, engine),
            complexity=self.complexity_summary(nodes, diagram, engine),
        )
        if extract_patterns:
            result.patterns = self._patterns(diagram, engine)
        if analyze_flow:
            result.flow_analysis = self.basic_flow(diagram, engine)
        if include_metadata:
            result.metadata = ParseMetadata(
                total_nodes=len(nodes),
                total_edges=len(edges),
                node_types=diagram.count_by_type(),
                processing_time_ms=round((time.perf_counter() - started) * 1000, 3),
            )
        return result

    def parse_node(self, node: Node) -> ParsedNode:
        position = node.position
        return ParsedNode(
            id=node.id,
            type=node.type,
            label=node.label or "Untitled Node",
            position={"x": position.x, "y": position.y} if position else {"x": 0, "y": 0},
            data=dict(node.data or {}),
            category=NODE_CATEGORIES.get(node.type, "other"),
            semantic_role=SEMANTIC_ROLES.get(node.type, "generic_processor"),
            description=describe_node(node),
            complexity=node_complexity(node, self.policy),
        )

    def parse_edge(self, edge: Edge) -> ParsedEdge:
        return ParsedEdge(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            label=edge.label,
            semantic_type=edge_semantic_type(edge),
            conditions=edge_conditions(edge),
            animated=edge.animated,
        )

    def process_steps(self, nodes: List[ParsedNode], engine: TraversalEngine) -> List[ProcessStep]:
        by_id: Dict[str, ParsedNode] = {}
        for node in nodes:
            if node.id and node.id not in by_id:
                by_id[node.id] = node

        steps: List[ProcessStep] = []
        for number, node_id in enumerate(engine.preorder(engine.start_like_nodes()), start=1):
            node = by_id[node_id]
            steps.append(ProcessStep(
                step_number=number,
                id=node_id,
                type=node.type,
                label=node.label,
                description=node.description,
                semantic_role=node.semantic_role,
                dependencies=[s.id for s in steps if s.semantic_role == node.semantic_role],
                estimated_duration=STEP_DURATIONS.get(node.semantic_role, "1-2 minutes"),
            ))
        return steps

    def complexity_summary(
        self, nodes: List[ParsedNode], diagram: Diagram, engine: TraversalEngine
    ) -> ComplexitySummary:
        node_total = sum(n.complexity for n in nodes)
        edge_total = len(diagram.edges) * 0.5
        branching = max([engine.out_degree(n) for n in diagram.node_ids()] + [1])
        depth = engine.max_depth()

        score = round_half_up((node_total + edge_total + branching * 2 + depth) / 10)
        level, advice = summary_level(score)
        return ComplexitySummary(
            overall_score=score,
            level=level,
            factors=ComplexityFactorSummary(
                node_complexity=round_half_up(node_total),
                connection_complexity=round_half_up(edge_total),
                branching_factor=branching,
                max_depth=depth,
            ),
            recommendations=advice,
        )

    def extract_patterns(self, diagram: Diagram) -> List[DetectedPattern]:
        engine = TraversalEngine(diagram, limits=self.policy.limits, observer=self.observer)
        return self._patterns(diagram, engine)

    def _patterns(self, diagram: Diagram, engine: TraversalEngine) -> List[DetectedPattern]:
        patterns = []

        chains = sequential_chains(diagram, engine)
        if chains:
            patterns.append(DetectedPattern(
                type="sequential",
                name="Sequential Processing",
                description="Linear flow of operations",
                instances=chains,
                confidence=0.9,
            ))

        decisions = [
            {
                "nodeId": node.id,
                "label": node.label,
                "condition": node.get("condition"),
                "outgoingPaths": engine.out_degree(node.id),
            }
            for node in diagram.nodes_of_type("decision")
            if node.id
        ]
        if decisions:
            patterns.append(DetectedPattern(
                type="decision",
                name="Decision Points",
                description="Conditional branching in the process",
                instances=decisions,
                confidence=0.85,
            ))

        forks = [
            {"forkNode": fork, "branches": engine.successors(fork)}
            for fork in engine.forks()
            if engine.node_type(fork) != "decision"
        ]
        if forks:
            patterns.append(DetectedPattern(
                type="parallel",
                name="Parallel Processing",
                description="Concurrent execution paths",
                instances=forks,
                confidence=0.8,
            ))

        loops = engine.detect_cycles()
        if loops:
            patterns.append(DetectedPattern(
                type="loop",
                name="Iterative Processing",
                description="Repetitive operations or cycles",
                instances=loops,
                confidence=0.7,
            ))

        return patterns

    def basic_flow(self, diagram: Diagram, engine: TraversalEngine) -> BasicFlow:
        n = len(diagram.nodes)
        return BasicFlow(
            entry_points=len(diagram.nodes_of_type("start")),
            exit_points=len(diagram.nodes_of_type("end")),
            total_connections=len(diagram.edges),
            average_connections_per_node=round(len(diagram.edges) / n, 2) if n else 0.0,
            has_circular_flow=engine.has_cycle(),
        )
