"""
Traversal Engine - topology questions over a diagram's node/edge lists.

All walks use explicit stacks over an index-addressed node table, so deep
chains never hit the interpreter recursion limit. Enumerations whose output
can grow exponentially (simple paths, per-branch depth and level walks) are
bounded by TraversalLimits and flag themselves as truncated instead of
running away on dense graphs.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from flowscope.graph.model import Diagram
from flowscope.observers import AnalysisObserver, NullObserver


WHITE, GRAY, BLACK = 0, 1, 2


@dataclass(frozen=True)
class TraversalLimits:
    max_paths: int = 1000
    max_steps: int = 200_000


@dataclass
class PathEnumeration:
    paths: List[List[str]] = field(default_factory=list)
    truncated: bool = False

    def __iter__(self) -> Iterator[List[str]]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __getitem__(self, item):
        return self.paths[item]


class TraversalEngine:
    """
    Read-only view of a diagram as an indexed adjacency structure.

    Edges whose source or target is not an existing node are dropped from the
    adjacency lists; queries about unknown ids return empty results.
    """

    def __init__(
        self,
        diagram: Diagram,
        limits: Optional[TraversalLimits] = None,
        observer: Optional[AnalysisObserver] = None,
    ):
        self.diagram = diagram
        self.limits = limits or TraversalLimits()
        self.observer = observer or NullObserver()
        self.truncated = False

        self._ids: List[str] = []
        self._index: Dict[str, int] = {}
        self._types: List[Optional[str]] = []
        for node in diagram.nodes:
            if node.id and node.id not in self._index:
                self._index[node.id] = len(self._ids)
                self._ids.append(node.id)
                self._types.append(node.type)

        self._out: List[List[int]] = [[] for _ in self._ids]
        self._in: List[List[int]] = [[] for _ in self._ids]
        for edge in diagram.edges:
            src = self._index.get(edge.source) if edge.source else None
            dst = self._index.get(edge.target) if edge.target else None
            if src is None or dst is None:
                continue
            self._out[src].append(dst)
            self._in[dst].append(src)

    @classmethod
    def from_payload(cls, payload, limits: Optional[TraversalLimits] = None) -> "TraversalEngine":
        return cls(Diagram.from_dict(payload), limits=limits)

    # ------------------------------------------------------------------
    # Degree queries
    # ------------------------------------------------------------------

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._index

    def node_type(self, node_id: str) -> Optional[str]:
        i = self._index.get(node_id)
        return self._types[i] if i is not None else None

    def successors(self, node_id: str) -> List[str]:
        i = self._index.get(node_id)
        if i is None:
            return []
        return [self._ids[j] for j in self._out[i]]

    def predecessors(self, node_id: str) -> List[str]:
        i = self._index.get(node_id)
        if i is None:
            return []
        return [self._ids[j] for j in self._in[i]]

    def out_degree(self, node_id: str) -> int:
        i = self._index.get(node_id)
        return len(self._out[i]) if i is not None else 0

    def in_degree(self, node_id: str) -> int:
        i = self._index.get(node_id)
        return len(self._in[i]) if i is not None else 0

    def forks(self) -> List[str]:
        return [self._ids[i] for i in range(len(self._ids)) if len(self._out[i]) > 1]

    def joins(self) -> List[str]:
        return [self._ids[i] for i in range(len(self._ids)) if len(self._in[i]) > 1]

    def entry_nodes(self) -> List[str]:
        starts = [self._ids[i] for i, t in enumerate(self._types) if t == "start"]
        if starts:
            return starts
        return [self._ids[i] for i in range(len(self._ids)) if not self._in[i]]

    def start_like_nodes(self) -> List[str]:
        """Start-typed nodes together with every node that has no incoming edge."""
        return [
            self._ids[i]
            for i in range(len(self._ids))
            if self._types[i] == "start" or not self._in[i]
        ]

    # ------------------------------------------------------------------
    # Reachability and components
    # ------------------------------------------------------------------

    def reachable_from(self, start_ids: Optional[List[str]] = None) -> Set[str]:
        if start_ids is None:
            start_ids = self.entry_nodes()

        marked = [False] * len(self._ids)
        stack = [self._index[s] for s in start_ids if s in self._index]
        while stack:
            i = stack.pop()
            if marked[i]:
                continue
            marked[i] = True
            stack.extend(j for j in self._out[i] if not marked[j])

        return {self._ids[i] for i, seen in enumerate(marked) if seen}

    def preorder(self, roots: List[str]) -> List[str]:
        """Depth-first visit order from each root in turn, successors in edge order."""
        marked = [False] * len(self._ids)
        order: List[int] = []
        for root in roots:
            r = self._index.get(root)
            if r is None or marked[r]:
                continue
            marked[r] = True
            order.append(r)
            frames = [iter(self._out[r])]
            while frames:
                nxt = next(frames[-1], None)
                if nxt is None:
                    frames.pop()
                elif not marked[nxt]:
                    marked[nxt] = True
                    order.append(nxt)
                    frames.append(iter(self._out[nxt]))
        return [self._ids[i] for i in order]

    def connected_components(self) -> List[List[str]]:
        """Weakly connected components, each in node order."""
        component = [-1] * len(self._ids)
        groups: List[List[int]] = []
        for root in range(len(self._ids)):
            if component[root] != -1:
                continue
            members = []
            stack = [root]
            component[root] = len(groups)
            while stack:
                i = stack.pop()
                members.append(i)
                for j in self._out[i] + self._in[i]:
                    if component[j] == -1:
                        component[j] = len(groups)
                        stack.append(j)
            groups.append(sorted(members))
        return [[self._ids[i] for i in members] for members in groups]

    # ------------------------------------------------------------------
    # Path enumeration
    # ------------------------------------------------------------------

    def all_simple_paths(
        self,
        source: str,
        target: str,
        max_paths: Optional[int] = None,
    ) -> PathEnumeration:
        result = PathEnumeration()
        if source not in self._index or target not in self._index:
            return result
        if source == target:
            result.paths.append([source])
            return result

        cap = self.limits.max_paths if max_paths is None else max_paths
        goal = self._index[target]
        start = self._index[source]

        path = [start]
        on_path = [False] * len(self._ids)
        on_path[start] = True
        # One iterator per path element; exhausting it pops the element.
        frames = [iter(self._out[start])]
        steps = 0

        while frames:
            nxt = next(frames[-1], None)
            if nxt is None:
                frames.pop()
                on_path[path.pop()] = False
                continue

            steps += 1
            if steps > self.limits.max_steps:
                self._mark_truncated("all_simple_paths", source=source, target=target)
                result.truncated = True
                break

            if on_path[nxt]:
                continue
            if nxt == goal:
                result.paths.append([self._ids[i] for i in path] + [target])
                if len(result.paths) >= cap:
                    # an explicit cap is the caller's own budget, not a limit hit
                    if max_paths is None:
                        self._mark_truncated("all_simple_paths", source=source, target=target)
                    result.truncated = True
                    break
                continue

            path.append(nxt)
            on_path[nxt] = True
            frames.append(iter(self._out[nxt]))

        return result

    def count_paths(self, source: str, target: str, cap: int) -> int:
        return len(self.all_simple_paths(source, target, max_paths=cap))

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    def detect_cycles(self) -> List[List[str]]:
        color = [WHITE] * len(self._ids)
        cycles: List[List[str]] = []

        for root in range(len(self._ids)):
            if color[root] != WHITE:
                continue
            path = [root]
            color[root] = GRAY
            frames = [iter(self._out[root])]
            while frames:
                nxt = next(frames[-1], None)
                if nxt is None:
                    frames.pop()
                    color[path.pop()] = BLACK
                    continue
                if color[nxt] == GRAY:
                    start = path.index(nxt)
                    cycles.append([self._ids[i] for i in path[start:]] + [self._ids[nxt]])
                elif color[nxt] == WHITE:
                    color[nxt] = GRAY
                    path.append(nxt)
                    frames.append(iter(self._out[nxt]))

        return cycles

    def has_cycle(self) -> bool:
        return bool(self.detect_cycles())

    # ------------------------------------------------------------------
    # Depth and width
    # ------------------------------------------------------------------

    def _walk_branches(self, roots: List[str]) -> Iterator[Tuple[int, int, bool]]:
        """
        Yield (node, depth, is_terminal) for every simple path prefix starting
        at a root. A node is terminal on a branch when it has no successor
        that is not already on that branch.
        """
        steps = 0
        for root in roots:
            r = self._index[root]
            on_path = [False] * len(self._ids)
            on_path[r] = True
            path = [r]
            frames = [iter(self._out[r])]
            yield r, 0, not any(not on_path[j] for j in self._out[r])

            while frames:
                nxt = next(frames[-1], None)
                if nxt is None:
                    frames.pop()
                    on_path[path.pop()] = False
                    continue
                if on_path[nxt]:
                    continue

                steps += 1
                if steps > self.limits.max_steps:
                    self._mark_truncated("branch_walk")
                    return

                path.append(nxt)
                on_path[nxt] = True
                frames.append(iter(self._out[nxt]))
                terminal = not any(not on_path[j] for j in self._out[nxt])
                yield nxt, len(path) - 1, terminal

    def max_depth(self) -> int:
        deepest = 0
        for _, depth, terminal in self._walk_branches(self.start_like_nodes()):
            if terminal and depth > deepest:
                deepest = depth
        return deepest

    def node_levels(self) -> Dict[str, int]:
        levels: Dict[int, int] = {}
        for i, depth, _ in self._walk_branches(self.entry_nodes()):
            if depth > levels.get(i, -1):
                levels[i] = depth
        return {self._ids[i]: level for i, level in sorted(levels.items())}

    def max_width(self) -> int:
        if not self._ids:
            return 0
        counts: Dict[int, int] = {}
        for level in self.node_levels().values():
            counts[level] = counts.get(level, 0) + 1
        return max(counts.values(), default=1)

    # ------------------------------------------------------------------
    # Chains
    # ------------------------------------------------------------------

    def trace_chain(self, node_id: str) -> List[str]:
        """Follow single-successor links until a branch, a leaf or a repeat."""
        if node_id not in self._index:
            return [node_id]
        seen: Set[int] = set()
        chain: List[str] = []
        i = self._index[node_id]
        while True:
            chain.append(self._ids[i])
            if i in seen:
                break
            seen.add(i)
            if len(self._out[i]) != 1:
                break
            i = self._out[i][0]
        return chain

    def _mark_truncated(self, operation: str, **fields) -> None:
        self.truncated = True
        self.observer.notify("traversal.truncated", operation=operation, **fields)
