from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from flowscope.errors import DiagramShapeError


NODE_TYPES = (
    "start",
    "end",
    "html-element",
    "database",
    "api-call",
    "decision",
    "user-action",
    "external-service",
)


@dataclass(frozen=True)
class Position:
    x: float
    y: float


@dataclass
class Node:
    id: Optional[str]
    type: Optional[str]
    position: Optional[Position] = None
    data: Optional[Dict[str, Any]] = None  # None when the payload had no data object
    index: int = 0

    @property
    def label(self) -> str:
        if not self.data:
            return ""
        value = self.data.get("label")
        return value if isinstance(value, str) else ""

    @property
    def description(self) -> str:
        if not self.data:
            return ""
        value = self.data.get("description")
        return value if isinstance(value, str) else ""

    def get(self, key: str, default: Any = None) -> Any:
        if not self.data:
            return default
        return self.data.get(key, default)


@dataclass
class Edge:
    id: Optional[str]
    source: Optional[str]
    target: Optional[str]
    label: str = ""
    animated: bool = False
    index: int = 0


@dataclass
class Diagram:
    id: Optional[str] = None
    name: Optional[str] = None
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    description: str = ""

    @classmethod
    def from_dict(cls, payload: Any) -> "Diagram":
        """
        Build a diagram from already-parsed JSON.

        Only a payload that cannot be looked at (not a mapping, no node list,
        a non-list edge collection) is rejected. Everything else, including
        nodes without ids or with unknown types, is carried through so the
        validator can report it.
        """
        if not isinstance(payload, Mapping):
            raise DiagramShapeError("Visualization data must be an object")

        raw_nodes = payload.get("nodes")
        if not isinstance(raw_nodes, list):
            raise DiagramShapeError("Nodes must be an array")

        raw_edges = payload.get("edges")
        if raw_edges is None:
            raw_edges = []
        elif not isinstance(raw_edges, list):
            raise DiagramShapeError("Edges must be an array")

        return cls(
            id=_optional_str(payload.get("id")),
            name=payload.get("name") if isinstance(payload.get("name"), str) else None,
            nodes=[_parse_node(raw, i) for i, raw in enumerate(raw_nodes)],
            edges=[_parse_edge(raw, i) for i, raw in enumerate(raw_edges)],
            description=payload.get("description") or "",
        )

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes if node.id]

    def get_node(self, node_id: str) -> Optional[Node]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def nodes_of_type(self, *types: str) -> List[Node]:
        return [n for n in self.nodes if n.type in types]

    def count_by_type(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for node in self.nodes:
            key = node.type or "unknown"
            counts[key] = counts.get(key, 0) + 1
        return counts


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _parse_position(raw: Any) -> Optional[Position]:
    if not isinstance(raw, Mapping):
        return None
    x, y = raw.get("x"), raw.get("y")
    # bool is an int subclass but never a coordinate
    for value in (x, y):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
    return Position(x=x, y=y)


def _parse_node(raw: Any, index: int) -> Node:
    if not isinstance(raw, Mapping):
        raw = {}
    data = raw.get("data")
    return Node(
        id=_optional_str(raw.get("id")),
        type=_optional_str(raw.get("type")),
        position=_parse_position(raw.get("position")),
        data=dict(data) if isinstance(data, Mapping) else None,
        index=index,
    )


def _parse_edge(raw: Any, index: int) -> Edge:
    if not isinstance(raw, Mapping):
        raw = {}
    label = raw.get("label")
    return Edge(
        id=_optional_str(raw.get("id")),
        source=_optional_str(raw.get("source")),
        target=_optional_str(raw.get("target")),
        label=label if isinstance(label, str) else "",
        animated=bool(raw.get("animated", False)),
        index=index,
    )
