"""Typed computation node graphs with lazy memoized evaluation."""

__all__ = [
    "UNCONNECTED",
    "ConnectionChange",
    "CycleRejected",
    "DependencyGraph",
    "Edge",
    "Editor",
    "EditorConfig",
    "ErrorCode",
    "Graph",
    "GraphDocument",
    "GraphError",
    "InputSlot",
    "Integer",
    "InvalidSlotIndex",
    "Node",
    "NodeKind",
    "NodecalcError",
    "OperationResult",
    "OutputPort",
    "ParsedLiteral",
    "PersistenceCorrupt",
    "PersistenceError",
    "PersistenceUnavailable",
    "RestoreResult",
    "SlotSpec",
    "TemplateCatalog",
    "Text",
    "TypeMismatch",
    "UnknownNodeId",
    "UnknownTemplate",
    "Value",
    "ValueKind",
    "coerce_to_integer",
    "coerce_to_text",
    "default_catalog",
    "display_text",
    "load_graph",
    "parse_literal",
    "restore_graph",
    "save_graph",
]

from ._editor import ConnectionChange, Editor, EditorConfig, OperationResult
from ._errors import (
    CycleRejected,
    ErrorCode,
    GraphError,
    InvalidSlotIndex,
    NodecalcError,
    PersistenceCorrupt,
    PersistenceError,
    PersistenceUnavailable,
    TypeMismatch,
    UnknownNodeId,
    UnknownTemplate,
)
from ._graph import DependencyGraph
from ._graph_model import Edge, Graph
from ._io import GraphDocument, RestoreResult, load_graph, restore_graph, save_graph
from ._node import UNCONNECTED, InputSlot, Node, OutputPort
from ._templates import NodeKind, SlotSpec, TemplateCatalog, default_catalog
from ._values import (
    Integer,
    ParsedLiteral,
    Text,
    Value,
    ValueKind,
    coerce_to_integer,
    coerce_to_text,
    display_text,
    parse_literal,
)
