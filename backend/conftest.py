import pytest

from flowscope.graph.model import Diagram


def build_payload(nodes, edges=(), **extra):
    """
    Diagram payload from short tuples.

    nodes: (id, type) pairs or (id, type, data) triples.
    edges: (source, target) pairs or (source, target, label) triples;
    edge ids are generated as e1, e2, ...
    """
    node_list = []
    for i, entry in enumerate(nodes):
        node_id, node_type = entry[0], entry[1]
        data = entry[2] if len(entry) > 2 else {"label": f"{node_id} step"}
        node_list.append({
            "id": node_id,
            "type": node_type,
            "position": {"x": i * 100, "y": 0},
            "data": data,
        })

    edge_list = []
    for i, entry in enumerate(edges, start=1):
        edge = {"id": f"e{i}", "source": entry[0], "target": entry[1]}
        if len(entry) > 2:
            edge["label"] = entry[2]
        edge_list.append(edge)

    payload = {"id": "d1", "name": "Test diagram", "nodes": node_list, "edges": edge_list}
    payload.update(extra)
    return payload


def build_diagram(nodes, edges=(), **extra) -> Diagram:
    return Diagram.from_dict(build_payload(nodes, edges, **extra))


@pytest.fixture
def make_payload():
    return build_payload


@pytest.fixture
def make_diagram():
    return build_diagram


@pytest.fixture
def branching_payload():
    """start -> check -> (db | api) -> end"""
    return build_payload(
        [
            ("start", "start"),
            ("check", "decision"),
            ("db", "database"),
            ("api", "api-call"),
            ("end", "end"),
        ],
        [
            ("start", "check"),
            ("check", "db", "yes"),
            ("check", "api", "no"),
            ("db", "end"),
            ("api", "end"),
        ],
    )
