"""Saving and loading graphs as TOML documents."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

import tomli_w
from pydantic import BaseModel, Field, ValidationError

from ._errors import PersistenceCorrupt, PersistenceError, PersistenceUnavailable
from ._graph_model import Graph
from ._node import UNCONNECTED, InputSlot, Node, OutputPort
from ._values import ValueKind, make_value

if TYPE_CHECKING:
    from pathlib import Path

    from ._templates import TemplateCatalog

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


# =============================================================================
# Document schema
# =============================================================================


class SlotRecord(BaseModel):
    """One input slot as saved. ``value`` is the literal payload."""

    label: str
    kind: ValueKind
    producer_id: int = Field(default=UNCONNECTED, ge=0)
    value: int | str


class OutputRecord(BaseModel):
    """The output port of a node as saved."""

    kind: ValueKind


class NodeRecord(BaseModel):
    """One node as saved."""

    id: int = Field(gt=0)
    title: str
    template: str
    x: int = 0
    y: int = 0
    w: int = 0
    consumers: list[int] = Field(default_factory=list)
    output: OutputRecord
    inputs: list[SlotRecord] = Field(default_factory=list)


class GraphDocument(BaseModel):
    """Top-level layout of a saved graph.

    The memo cache is never saved. An empty document is an empty graph.
    """

    format_version: Literal[1] = FORMAT_VERSION
    current_id: int = Field(default=0, ge=0)
    nodes: list[NodeRecord] = Field(default_factory=list)


# =============================================================================
# Conversion
# =============================================================================


def graph_to_document(graph: Graph) -> GraphDocument:
    """Describe a graph as a document, nodes in id order."""
    return GraphDocument(
        current_id=graph.current_id,
        nodes=[
            NodeRecord(
                id=node.id,
                title=node.title,
                template=node.template,
                x=node.x,
                y=node.y,
                w=node.w,
                consumers=sorted(node.output.consumers),
                output=OutputRecord(kind=node.output.kind),
                inputs=[
                    SlotRecord(
                        label=slot.label,
                        kind=slot.kind,
                        producer_id=slot.producer_id,
                        value=slot.value.value,
                    )
                    for slot in node.inputs
                ],
            )
            for node in sorted(graph, key=lambda n: n.id)
        ],
    )


def _record_to_node(record: NodeRecord) -> Node:
    node = Node(
        id=record.id,
        title=record.title,
        template=record.template,
        output=OutputPort(kind=record.output.kind, consumers=set(record.consumers)),
        x=record.x,
        y=record.y,
        w=record.w,
    )
    for slot in record.inputs:
        node.inputs.append(
            InputSlot(
                label=slot.label,
                kind=slot.kind,
                value=make_value(slot.kind, slot.value),
                producer_id=slot.producer_id,
            ),
        )
    return node


def document_to_graph(document: GraphDocument, catalog: TemplateCatalog | None = None) -> Graph:
    """Rebuild a graph from a document.

    Raises:
        ValueError: If the document does not describe a consistent graph.

    """
    ids = [record.id for record in document.nodes]
    if len(ids) != len(set(ids)):
        msg = "Duplicate node ids"
        raise ValueError(msg)

    try:
        nodes = [_record_to_node(record) for record in document.nodes]
    except TypeError as e:
        raise ValueError(str(e)) from e

    graph = Graph.from_nodes(nodes, document.current_id, catalog)
    errors = graph.validate()
    if errors:
        raise ValueError("; ".join(errors))
    return graph


# =============================================================================
# Files
# =============================================================================


def save_graph(graph: Graph, path: Path) -> None:
    """Write a graph to a TOML file, creating parent directories.

    Raises:
        PersistenceUnavailable: If the file cannot be written.

    """
    data = graph_to_document(graph).model_dump(mode="json")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as f:
            tomli_w.dump(data, f)
    except OSError as e:
        raise PersistenceUnavailable(path, str(e)) from e
    logger.debug("Saved %d nodes to %s", len(graph), path)


def load_graph(path: Path, catalog: TemplateCatalog | None = None) -> Graph:
    """Read a graph from a TOML file.

    Raises:
        PersistenceUnavailable: If the file is missing or unreadable.
        PersistenceCorrupt: If the file does not decode to a valid graph.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise PersistenceUnavailable(path, "the file can not be loaded") from e
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise PersistenceCorrupt(path, f"the save file is corrupted: {e}") from e

    try:
        document = GraphDocument.model_validate(data)
        graph = document_to_graph(document, catalog)
    except (ValidationError, ValueError) as e:
        raise PersistenceCorrupt(path, f"the save file is corrupted: {e}") from e

    logger.debug("Loaded %d nodes from %s", len(graph), path)
    return graph


@dataclass(frozen=True, slots=True)
class RestoreResult:
    """A restored graph, or an empty one plus the reason restoring failed."""

    graph: Graph
    warning: PersistenceError | None = None

    @property
    def success(self) -> bool:
        """True when the file was restored."""
        return self.warning is None


def restore_graph(path: Path, catalog: TemplateCatalog | None = None) -> RestoreResult:
    """Load a graph, falling back to an empty graph if the file is unusable."""
    try:
        return RestoreResult(load_graph(path, catalog))
    except PersistenceError as e:
        logger.warning("%s; starting with an empty graph", e)
        return RestoreResult(Graph(catalog), warning=e)
