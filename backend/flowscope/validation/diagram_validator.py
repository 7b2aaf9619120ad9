"""
Diagram Validator - Validates the structure and integrity of process diagrams.

Catches issues like:
- Missing or duplicate node and edge IDs
- Unknown node types
- Edges pointing at nodes that do not exist
- Isolated, unreachable and dead-end nodes
- Potential infinite loops
- Incomplete node specifications (database, API, decision)

Every check runs and every finding is kept; nothing fails fast.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from flowscope.analysis.policy import DEFAULT_POLICY, ScoringPolicy
from flowscope.graph.model import NODE_TYPES, Diagram, Node
from flowscope.graph.traversal import TraversalEngine
from flowscope.observers import AnalysisObserver, NullObserver


class ValidationSeverity(Enum):
    ERROR = "error"            # Diagram is structurally invalid
    WARNING = "warning"        # Diagram works but is topologically suspect
    SUGGESTION = "suggestion"  # Completeness and style nudges


@dataclass
class ValidationIssue:
    """A single validation finding"""
    type: str           # Machine-readable issue code
    message: str        # Human-readable description
    severity: ValidationSeverity
    node_id: Optional[str] = None
    edge_id: Optional[str] = None
    node_index: Optional[int] = None
    edge_index: Optional[int] = None
    cycle: Optional[List[str]] = None

    def to_dict(self) -> dict:
        result = {
            "type": self.type,
            "message": self.message,
            "severity": self.severity.value,
        }
        optional = {
            "nodeId": self.node_id,
            "edgeId": self.edge_id,
            "nodeIndex": self.node_index,
            "edgeIndex": self.edge_index,
            "cycle": self.cycle,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class DiagramValidationResult:
    """Result of diagram validation"""
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[ValidationIssue] = field(default_factory=list)
    score: int = 100
    summary: str = ""

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def issues(self) -> List[ValidationIssue]:
        return self.errors + self.warnings + self.suggestions

    def types(self, severity: ValidationSeverity) -> List[str]:
        return [i.type for i in self.issues if i.severity == severity]

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
            "suggestions": [i.to_dict() for i in self.suggestions],
            "score": self.score,
            "summary": self.summary,
        }


def validation_score(errors: int, warnings: int, suggestions: int, policy: ScoringPolicy = DEFAULT_POLICY) -> int:
    penalties = policy.validation_penalties
    score = 100
    score -= errors * penalties["error"]
    score -= warnings * penalties["warning"]
    score -= suggestions * penalties["suggestion"]
    return max(0, min(100, score))


def validation_summary(result: DiagramValidationResult) -> str:
    """Human-readable summary; depends only on the finding counts."""
    if result.is_valid and not result.warnings and not result.suggestions:
        return "Diagram is valid and well-structured with no issues detected."

    parts = []
    if not result.is_valid:
        parts.append(f"Diagram has {len(result.errors)} error(s) that must be fixed.")
    else:
        parts.append("Diagram structure is valid.")
    if result.warnings:
        parts.append(f"{len(result.warnings)} warning(s) detected that should be addressed.")
    if result.suggestions:
        parts.append(f"{len(result.suggestions)} suggestion(s) for improvement.")
    return " ".join(parts)


def _ref(node: Node) -> str:
    return node.id if node.id else f"at index {node.index}"


def _title(node: Node) -> str:
    return f"{node.id} ({node.label or 'Untitled'})"


class DiagramValidator:
    """
    Validates process diagrams for completeness and correctness.

    Usage:
        validator = DiagramValidator()
        result = validator.validate(diagram)

        if not result.is_valid:
            for issue in result.errors:
                print(f"[{issue.type}] {issue.message}")
    """

    def __init__(
        self,
        policy: ScoringPolicy = DEFAULT_POLICY,
        observer: Optional[AnalysisObserver] = None,
    ):
        self.policy = policy
        self.observer = observer or NullObserver()

    def validate(self, diagram: Diagram) -> DiagramValidationResult:
        """Validate the entire diagram."""
        result = DiagramValidationResult()
        try:
            issues: List[ValidationIssue] = []
            issues.extend(self._check_metadata(diagram))
            issues.extend(self._check_nodes(diagram))
            issues.extend(self._check_edges(diagram))
            issues.extend(self._check_flow(diagram))
            issues.extend(self._check_semantics(diagram))
        except Exception as e:
            self.observer.notify("analysis.failed", operation="validation", reason=str(e))
            result.errors.append(ValidationIssue(
                type="validation_error",
                message=f"Validation process failed: {e}",
                severity=ValidationSeverity.ERROR,
            ))
            result.score = 0
            result.summary = "Validation failed due to internal error"
            return result

        for issue in issues:
            if issue.severity == ValidationSeverity.ERROR:
                result.errors.append(issue)
            elif issue.severity == ValidationSeverity.WARNING:
                result.warnings.append(issue)
            else:
                result.suggestions.append(issue)

        result.score = validation_score(
            len(result.errors), len(result.warnings), len(result.suggestions), self.policy
        )
        result.summary = validation_summary(result)

        self.observer.notify(
            "validation.completed",
            errors=len(result.errors),
            warnings=len(result.warnings),
            suggestions=len(result.suggestions),
            score=result.score,
        )
        return result

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _check_metadata(self, diagram: Diagram) -> List[ValidationIssue]:
        issues = []
        if not diagram.id:
            issues.append(ValidationIssue(
                type="missing_id",
                message="Visualization should have an ID",
                severity=ValidationSeverity.WARNING,
            ))
        if not diagram.name or not diagram.name.strip():
            issues.append(ValidationIssue(
                type="missing_name",
                message="Visualization should have a name",
                severity=ValidationSeverity.WARNING,
            ))
        return issues

    def _check_nodes(self, diagram: Diagram) -> List[ValidationIssue]:
        issues = []
        if not diagram.nodes:
            issues.append(ValidationIssue(
                type="empty_diagram",
                message="Diagram must contain at least one node",
                severity=ValidationSeverity.ERROR,
            ))
            return issues

        seen = set()
        for node in diagram.nodes:
            if not node.id:
                issues.append(ValidationIssue(
                    type="missing_node_id",
                    message=f"Node at index {node.index} is missing an ID",
                    severity=ValidationSeverity.ERROR,
                    node_index=node.index,
                ))
            else:
                if node.id in seen:
                    issues.append(ValidationIssue(
                        type="duplicate_node_id",
                        message=f"Duplicate node ID: {node.id}",
                        severity=ValidationSeverity.ERROR,
                        node_id=node.id,
                    ))
                seen.add(node.id)

            if not node.type:
                issues.append(ValidationIssue(
                    type="missing_node_type",
                    message=f"Node {_ref(node)} is missing a type",
                    severity=ValidationSeverity.ERROR,
                    node_id=node.id,
                ))
            elif node.type not in NODE_TYPES:
                issues.append(ValidationIssue(
                    type="invalid_node_type",
                    message=f"Invalid node type: {node.type}",
                    severity=ValidationSeverity.ERROR,
                    node_id=node.id,
                ))

            if node.position is None:
                issues.append(ValidationIssue(
                    type="missing_position",
                    message=f"Node {_ref(node)} has invalid or missing position",
                    severity=ValidationSeverity.WARNING,
                    node_id=node.id,
                ))

            if node.data is None:
                issues.append(ValidationIssue(
                    type="missing_node_data",
                    message=f"Node {_ref(node)} is missing data object",
                    severity=ValidationSeverity.WARNING,
                    node_id=node.id,
                ))
            else:
                issues.extend(self._check_node_data(node))

        if not diagram.nodes_of_type("start"):
            issues.append(ValidationIssue(
                type="missing_start_node",
                message="Diagram should have at least one start node",
                severity=ValidationSeverity.WARNING,
            ))
        if not diagram.nodes_of_type("end"):
            issues.append(ValidationIssue(
                type="missing_end_node",
                message="Diagram should have at least one end node",
                severity=ValidationSeverity.WARNING,
            ))
        return issues

    def _check_node_data(self, node: Node) -> List[ValidationIssue]:
        issues = []
        if not node.get("label"):
            issues.append(ValidationIssue(
                type="missing_node_label",
                message=f"Node {_ref(node)} should have a descriptive label",
                severity=ValidationSeverity.WARNING,
                node_id=node.id,
            ))

        if node.type == "html-element" and not node.get("elementType"):
            issues.append(ValidationIssue(
                type="missing_element_type",
                message=f"HTML element node {_ref(node)} should specify element type",
                severity=ValidationSeverity.WARNING,
                node_id=node.id,
            ))
        elif node.type == "database" and not (node.get("operation") and node.get("table")):
            issues.append(ValidationIssue(
                type="incomplete_database_spec",
                message=f"Database node {_ref(node)} should specify operation and table",
                severity=ValidationSeverity.WARNING,
                node_id=node.id,
            ))
        elif node.type == "api-call" and not (node.get("method") and node.get("endpoint")):
            issues.append(ValidationIssue(
                type="incomplete_api_spec",
                message=f"API call node {_ref(node)} should specify method and endpoint",
                severity=ValidationSeverity.WARNING,
                node_id=node.id,
            ))
        elif node.type == "decision" and not node.get("condition"):
            issues.append(ValidationIssue(
                type="missing_decision_condition",
                message=f"Decision node {_ref(node)} should specify the condition",
                severity=ValidationSeverity.WARNING,
                node_id=node.id,
            ))
        return issues

    def _check_edges(self, diagram: Diagram) -> List[ValidationIssue]:
        issues = []
        if not diagram.edges:
            issues.append(ValidationIssue(
                type="no_connections",
                message="Diagram has no connections between nodes",
                severity=ValidationSeverity.WARNING,
            ))
            return issues
        if not diagram.nodes:
            # empty_diagram is the only finding for a diagram without nodes
            return issues

        node_ids = set(diagram.node_ids())
        seen = set()
        for edge in diagram.edges:
            ref = edge.id if edge.id else f"at index {edge.index}"
            if not edge.id:
                issues.append(ValidationIssue(
                    type="missing_edge_id",
                    message=f"Edge at index {edge.index} is missing an ID",
                    severity=ValidationSeverity.ERROR,
                    edge_index=edge.index,
                ))
            else:
                if edge.id in seen:
                    issues.append(ValidationIssue(
                        type="duplicate_edge_id",
                        message=f"Duplicate edge ID: {edge.id}",
                        severity=ValidationSeverity.ERROR,
                        edge_id=edge.id,
                    ))
                seen.add(edge.id)

            if not edge.source:
                issues.append(ValidationIssue(
                    type="missing_edge_source",
                    message=f"Edge {ref} is missing a source node",
                    severity=ValidationSeverity.ERROR,
                    edge_id=edge.id,
                ))
            elif edge.source not in node_ids:
                issues.append(ValidationIssue(
                    type="invalid_edge_source",
                    message=f"Edge {ref} references non-existent source node: {edge.source}",
                    severity=ValidationSeverity.ERROR,
                    edge_id=edge.id,
                ))

            if not edge.target:
                issues.append(ValidationIssue(
                    type="missing_edge_target",
                    message=f"Edge {ref} is missing a target node",
                    severity=ValidationSeverity.ERROR,
                    edge_id=edge.id,
                ))
            elif edge.target not in node_ids:
                issues.append(ValidationIssue(
                    type="invalid_edge_target",
                    message=f"Edge {ref} references non-existent target node: {edge.target}",
                    severity=ValidationSeverity.ERROR,
                    edge_id=edge.id,
                ))

            if edge.source and edge.source == edge.target:
                issues.append(ValidationIssue(
                    type="self_loop",
                    message=f"Edge {ref} creates a self-loop on node {edge.source}",
                    severity=ValidationSeverity.WARNING,
                    edge_id=edge.id,
                ))
        return issues

    def _check_flow(self, diagram: Diagram) -> List[ValidationIssue]:
        issues = []
        engine = TraversalEngine(diagram, limits=self.policy.limits, observer=self.observer)
        sources = {e.source for e in diagram.edges if e.source}
        targets = {e.target for e in diagram.edges if e.target}
        named = [n for n in diagram.nodes if n.id]

        for node in named:
            if node.id not in sources and node.id not in targets and node.type not in ("start", "end"):
                issues.append(ValidationIssue(
                    type="isolated_node",
                    message=f"Node {_title(node)} is not connected to any other nodes",
                    severity=ValidationSeverity.WARNING,
                    node_id=node.id,
                ))

        reachable = engine.reachable_from()
        for node in named:
            if node.id not in reachable and node.type != "start":
                issues.append(ValidationIssue(
                    type="unreachable_node",
                    message=f"Node {_title(node)} is not reachable from any start node",
                    severity=ValidationSeverity.WARNING,
                    node_id=node.id,
                ))

        for node in named:
            if node.id not in sources and node.type != "end":
                issues.append(ValidationIssue(
                    type="dead_end",
                    message=f"Node {_title(node)} has no outgoing connections",
                    severity=ValidationSeverity.WARNING,
                    node_id=node.id,
                ))

        for cycle in engine.detect_cycles():
            issues.append(ValidationIssue(
                type="potential_cycle",
                message=f"Potential infinite loop detected involving nodes: {' -> '.join(cycle)}",
                severity=ValidationSeverity.WARNING,
                cycle=cycle,
            ))
        return issues

    def _check_semantics(self, diagram: Diagram) -> List[ValidationIssue]:
        issues = []
        engine = TraversalEngine(diagram, limits=self.policy.limits)

        for node in diagram.nodes:
            if node.type == "decision" and node.id and engine.out_degree(node.id) < 2:
                issues.append(ValidationIssue(
                    type="insufficient_decision_branches",
                    message=f"Decision node {node.id} should have at least 2 outgoing paths",
                    severity=ValidationSeverity.WARNING,
                    node_id=node.id,
                ))

            if node.data is None:
                continue

            if node.type not in ("start", "end") and not node.description:
                issues.append(ValidationIssue(
                    type="missing_description",
                    message=f"Node {_ref(node)} would benefit from a description",
                    severity=ValidationSeverity.SUGGESTION,
                    node_id=node.id,
                ))
            if node.type == "database" and not node.get("operation"):
                issues.append(ValidationIssue(
                    type="missing_db_operation",
                    message=f"Database node {_ref(node)} should specify the operation type",
                    severity=ValidationSeverity.SUGGESTION,
                    node_id=node.id,
                ))
            if node.type == "api-call" and not (node.get("method") and node.get("endpoint")):
                issues.append(ValidationIssue(
                    type="missing_api_details",
                    message=f"API call node {_ref(node)} should document its method and endpoint",
                    severity=ValidationSeverity.SUGGESTION,
                    node_id=node.id,
                ))

        has_error_handling = any("error" in n.label.lower() for n in diagram.nodes) or any(
            "error" in e.label.lower() for e in diagram.edges
        )
        if not has_error_handling:
            issues.append(ValidationIssue(
                type="missing_error_handling",
                message="Consider adding error handling paths to the process",
                severity=ValidationSeverity.SUGGESTION,
            ))

        has_auth = any(
            n.get("serviceType") == "auth" for n in diagram.nodes_of_type("external-service")
        )
        if diagram.nodes_of_type("html-element", "user-action") and not has_auth:
            issues.append(ValidationIssue(
                type="missing_authentication",
                message="Consider adding user authentication for processes involving user input",
                severity=ValidationSeverity.SUGGESTION,
            ))
        return issues


def validate_diagram(diagram: Diagram, policy: ScoringPolicy = DEFAULT_POLICY) -> DiagramValidationResult:
    """Convenience function to validate a diagram."""
    return DiagramValidator(policy=policy).validate(diagram)


def validate_payload(payload: Dict[str, Any]) -> DiagramValidationResult:
    """Validate already-parsed JSON; raises DiagramShapeError if it is not a diagram."""
    return validate_diagram(Diagram.from_dict(payload))
