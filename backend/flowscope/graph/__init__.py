from flowscope.graph.model import NODE_TYPES, Diagram, Edge, Node, Position
from flowscope.graph.traversal import PathEnumeration, TraversalEngine, TraversalLimits

__all__ = [
    "NODE_TYPES",
    "Diagram",
    "Edge",
    "Node",
    "Position",
    "PathEnumeration",
    "TraversalEngine",
    "TraversalLimits",
]
