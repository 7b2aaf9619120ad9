"""
Diagram Facts - every count and flag a recommendation rule reads, computed
once per diagram.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy
from flowscope.graph.model import Diagram
from flowscope.graph.traversal import TraversalEngine


SCALING_NODE_TYPES = ("api-call", "database", "external-service")


@dataclass
class DiagramFacts:
    node_count: int = 0
    type_counts: Dict[str, int] = field(default_factory=dict)
    parallel_opportunities: List[Dict[str, Any]] = field(default_factory=list)
    complex_components: List[Dict[str, Any]] = field(default_factory=list)
    circular_dependencies: List[List[str]] = field(default_factory=list)
    has_error_handling: bool = False
    has_feedback: bool = False
    has_auth_service: bool = False
    form_inputs: int = 0
    poorly_documented: int = 0

    def count(self, *types: str) -> int:
        return sum(self.type_counts.get(t, 0) for t in types)

    @property
    def user_nodes(self) -> int:
        return self.count("user-action", "html-element")

    @property
    def scaling_nodes(self) -> int:
        return self.count(*SCALING_NODE_TYPES)

    @classmethod
    def collect(
        cls,
        diagram: Diagram,
        engine: TraversalEngine,
        policy: ScoringPolicy = DEFAULT_POLICY,
    ) -> "DiagramFacts":
        facts = cls(node_count=len(diagram.nodes), type_counts=diagram.count_by_type())

        for fork in engine.forks():
            branches = engine.out_degree(fork)
            facts.parallel_opportunities.append({
                "forkNode": fork,
                "parallelBranches": branches,
                "potentialSpeedup": min(branches * policy.branch_speedup, policy.max_speedup),
            })

        for node in diagram.nodes:
            if not node.id:
                continue
            score = engine.in_degree(node.id) + engine.out_degree(node.id)
            if node.type == "decision":
                score += 2
            if score > policy.complex_node_threshold:
                facts.complex_components.append({
                    "nodeId": node.id,
                    "label": node.label,
                    "type": node.type,
                    "complexity": score,
                })
        facts.complex_components.sort(key=lambda c: c["complexity"], reverse=True)

        facts.circular_dependencies = engine.detect_cycles()

        facts.has_error_handling = any(
            "error" in n.label.lower() or "error" in n.description.lower() for n in diagram.nodes
        ) or any(
            "error" in e.label.lower() or "fail" in e.label.lower() for e in diagram.edges
        )

        user_nodes = diagram.nodes_of_type("user-action", "html-element")
        facts.has_feedback = any(
            "feedback" in n.label.lower() or "confirmation" in n.label.lower() for n in user_nodes
        )
        facts.has_auth_service = any(
            n.get("serviceType") == "auth" for n in diagram.nodes_of_type("external-service")
        )
        facts.form_inputs = sum(
            1 for n in diagram.nodes_of_type("html-element") if n.get("elementType") == "form"
        )
        facts.poorly_documented = sum(1 for n in diagram.nodes if len(n.description) < 10)
        return facts
