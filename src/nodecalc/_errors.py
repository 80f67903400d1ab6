"""Error taxonomy for graph and persistence operations."""

from __future__ import annotations

from enum import StrEnum, auto
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from pathlib import Path

    from ._values import ValueKind


class ErrorCode(StrEnum):
    """Identifies which member of the error taxonomy a failure belongs to."""

    UNKNOWN_NODE_ID = auto()
    INVALID_SLOT_INDEX = auto()
    UNKNOWN_TEMPLATE = auto()
    TYPE_MISMATCH = auto()
    CYCLE_REJECTED = auto()
    PERSISTENCE_UNAVAILABLE = auto()
    PERSISTENCE_CORRUPT = auto()


class NodecalcError(Exception):
    """Base class for all recoverable nodecalc errors."""

    code: ClassVar[ErrorCode]


class GraphError(NodecalcError):
    """A graph operation was rejected. The graph is left unchanged."""


class UnknownNodeId(GraphError):  # noqa: N818
    """An operation referenced a node id that is not in the graph."""

    code = ErrorCode.UNKNOWN_NODE_ID

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        super().__init__(f"Unknown node id {node_id}")


class InvalidSlotIndex(GraphError):  # noqa: N818
    """A slot index is out of range for the referenced node."""

    code = ErrorCode.INVALID_SLOT_INDEX

    def __init__(self, node_id: int, slot_index: int, slot_count: int) -> None:
        self.node_id = node_id
        self.slot_index = slot_index
        self.slot_count = slot_count
        super().__init__(f"Node {node_id} has no input slot {slot_index} (it has {slot_count})")


class UnknownTemplate(GraphError):  # noqa: N818
    """A node was requested from a template name that is not registered."""

    code = ErrorCode.UNKNOWN_TEMPLATE

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown node template '{name}'")


class TypeMismatch(GraphError):  # noqa: N818
    """A connection was attempted between ports of different kinds."""

    code = ErrorCode.TYPE_MISMATCH

    def __init__(self, output_kind: ValueKind, input_kind: ValueKind) -> None:
        self.output_kind = output_kind
        self.input_kind = input_kind
        super().__init__(f"Cannot connect a {output_kind} output to a {input_kind} input")


class CycleRejected(GraphError):  # noqa: N818
    """A connection would make the graph cyclic."""

    code = ErrorCode.CYCLE_REJECTED

    def __init__(self, producer_id: int, consumer_id: int) -> None:
        self.producer_id = producer_id
        self.consumer_id = consumer_id
        super().__init__(f"Connecting node {producer_id} to node {consumer_id} would create a cycle")


class PersistenceError(NodecalcError):
    """A saved graph could not be loaded or written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class PersistenceUnavailable(PersistenceError):  # noqa: N818
    """The save file is missing or cannot be read or written."""

    code = ErrorCode.PERSISTENCE_UNAVAILABLE


class PersistenceCorrupt(PersistenceError):  # noqa: N818
    """The save file exists but does not decode to a valid graph."""

    code = ErrorCode.PERSISTENCE_CORRUPT
