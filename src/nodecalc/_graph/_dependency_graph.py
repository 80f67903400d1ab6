"""Immutable view of producer/consumer relationships between nodes."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._algorithms import topological_sort

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class DependencyGraph[T]:
    """A directed graph of "reads from" relationships.

    It is a snapshot: mutating the editable graph afterwards does not change
    it. It is generic over the node type T (node ids in practice).

    - producers[b] = {a} means "b reads the output of a"
    - consumers[a] = {b} means "a's output feeds b"

    Attributes:
        _producers: Mapping from node to the nodes it reads from.
        _consumers: Mapping from node to the nodes reading from it.

    """

    _producers: dict[T, frozenset[T]] = field(default_factory=dict)
    _consumers: dict[T, frozenset[T]] = field(default_factory=dict)

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[T, T]], nodes: Iterable[T] = ()) -> DependencyGraph[T]:
        """Build a graph from (producer, consumer) pairs.

        Args:
            edges: Pairs where the second node reads from the first.
            nodes: Extra nodes to include even if they have no edges.

        Returns:
            A new DependencyGraph instance.

        Example:
            >>> graph = DependencyGraph.from_edges([(1, 2), (2, 3)])
            >>> graph.producers(2)
            frozenset({1})

        """
        producers: defaultdict[T, set[T]] = defaultdict(set)
        consumers: defaultdict[T, set[T]] = defaultdict(set)

        for node in nodes:
            producers.setdefault(node, set())
            consumers.setdefault(node, set())

        for src, dst in edges:
            producers[dst].add(src)
            consumers[src].add(dst)
            producers.setdefault(src, set())
            consumers.setdefault(dst, set())

        return cls(
            _producers={k: frozenset(v) for k, v in producers.items()},
            _consumers={k: frozenset(v) for k, v in consumers.items()},
        )

    @property
    def nodes(self) -> frozenset[T]:
        """All nodes in the graph."""
        return frozenset(self._producers.keys()) | frozenset(self._consumers.keys())

    def producers(self, node: T) -> frozenset[T]:
        """Nodes whose output ``node`` reads directly."""
        return self._producers.get(node, frozenset())

    def upstream(self, node: T) -> frozenset[T]:
        """All nodes ``node`` transitively reads from.

        Args:
            node: The node to query.

        Returns:
            Set of every transitive producer, not including ``node``.

        """
        visited: set[T] = set()
        stack = list(self.producers(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.producers(current))
        return frozenset(visited)

    def topological_order(self) -> list[T]:
        """Return nodes with every producer before its consumers.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return topological_sort(dict(self._consumers))

    def evaluation_order(self, node: T) -> list[T]:
        """Return ``node`` and its upstream nodes, producers first."""
        return self.subgraph(self.upstream(node) | {node}).topological_order()

    def has_cycle(self) -> bool:
        """Check if the graph contains a cycle."""
        try:
            self.topological_order()
        except ValueError:
            return True
        return False

    def subgraph(self, nodes: frozenset[T]) -> DependencyGraph[T]:
        """Create a subgraph containing only the specified nodes.

        Edges are kept only if both endpoints are in the node set.
        """
        return DependencyGraph(
            _producers={n: self._producers.get(n, frozenset()) & nodes for n in nodes},
            _consumers={n: self._consumers.get(n, frozenset()) & nodes for n in nodes},
        )

    def validate(self) -> list[str]:
        """Validate the graph and return a list of error messages.

        Checks for cycles and for edges referencing nodes outside the graph.
        """
        errors: list[str] = []

        if self.has_cycle():
            errors.append("Graph contains a cycle")

        all_nodes = self.nodes
        for node, deps in self._producers.items():
            missing = deps - all_nodes
            if missing:
                errors.append(f"Node {node} reads from missing nodes: {sorted(missing, key=str)}")

        return errors
