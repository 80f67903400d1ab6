"""Graph algorithms over node id adjacency."""

from collections import defaultdict, deque
from collections.abc import Callable, Collection, Hashable, Iterable, Mapping


def topological_sort[T: Hashable](successors: Mapping[T, Collection[T]]) -> list[T]:
    """Sort a graph topologically (producers before consumers).

    Args:
        successors: Mapping from node to the nodes that consume its output.
            An edge (a -> b) means "b reads from a".

    Returns:
        List of nodes in topological order.

    Raises:
        ValueError: If the graph contains a cycle.

    Example:
        >>> topological_sort({1: [2], 2: [3], 3: []})
        [1, 2, 3]

    """
    indegree: defaultdict[T, int] = defaultdict(int)
    for node, consumers in successors.items():
        indegree[node] = indegree.get(node, 0)
        for consumer in consumers:
            indegree[consumer] += 1

    queue = deque([node for node, deg in indegree.items() if deg == 0])
    order: list[T] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for successor in successors.get(node, []):
            indegree[successor] -= 1
            if indegree[successor] == 0:
                queue.append(successor)

    if len(order) != len(indegree):
        msg = "Cycle detected in graph"
        raise ValueError(msg)

    return order


def is_reachable[T: Hashable](start: T, target: T, neighbors: Callable[[T], Iterable[T]]) -> bool:
    """Check whether ``target`` can be reached from ``start``.

    The walk is iterative with an explicit visited set, so it terminates on
    any graph and never visits a node twice. Reconverging paths (diamonds)
    are walked once.

    Args:
        start: Node to start walking from.
        target: Node to look for. ``start`` itself counts as reached.
        neighbors: Returns the nodes one step away from a node.

    Returns:
        True if a path from ``start`` to ``target`` exists.

    Example:
        >>> edges = {"a": ["b"], "b": ["c"], "c": []}
        >>> is_reachable("a", "c", edges.__getitem__)
        True

    """
    visited: set[T] = set()
    stack = [start]
    while stack:
        current = stack.pop()
        if current == target:
            return True
        if current in visited:
            continue
        visited.add(current)
        stack.extend(n for n in neighbors(current) if n not in visited)
    return False
