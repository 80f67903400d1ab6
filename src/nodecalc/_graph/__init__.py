"""Graph algorithms shared by the editable graph.

This module contains:
- DependencyGraph[T]: an immutable snapshot of producer/consumer edges
- topological_sort: ordering nodes so producers come first
- is_reachable: iterative reachability used by the cycle check
"""

from ._algorithms import is_reachable, topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "is_reachable", "topological_sort"]
