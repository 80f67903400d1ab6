"""The editable node graph: ownership, connections and evaluation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from ._errors import CycleRejected, InvalidSlotIndex, TypeMismatch, UnknownNodeId, UnknownTemplate
from ._graph import DependencyGraph, is_reachable
from ._node import UNCONNECTED, InputSlot, Node
from ._templates import TemplateCatalog, default_catalog
from ._values import parse_literal

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from ._templates import NodeKind
    from ._values import ParsedLiteral, Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, order=True)
class Edge:
    """A connection from a producer's output to one input slot of a consumer."""

    producer_id: int
    consumer_id: int
    slot_index: int


class Graph:
    """Owner of all nodes and of the edges between them.

    Every edge is recorded twice: as the producer id of the consumer's input
    slot and as a member of the producer's consumer set. Only the methods of
    this class write edges, and they always update both ends. Connections are
    type-checked and rejected when they would create a cycle, so the graph is
    always acyclic and evaluation always terminates.
    """

    def __init__(self, catalog: TemplateCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else default_catalog()
        self._nodes: dict[int, Node] = {}
        self._current_id = 0
        self._memo: dict[int, Value] = {}

    @classmethod
    def from_nodes(cls, nodes: Iterable[Node], current_id: int, catalog: TemplateCatalog | None = None) -> Graph:
        """Rebuild a graph from nodes that already carry ids and edges.

        The result is not checked; call ``validate`` before trusting it.
        """
        graph = cls(catalog)
        graph._nodes = {node.id: node for node in nodes}
        graph._current_id = current_id
        return graph

    # -- queries ---------------------------------------------------------

    @property
    def current_id(self) -> int:
        """The last id handed out. The next inserted node gets ``current_id + 1``."""
        return self._current_id

    @property
    def nodes(self) -> Mapping[int, Node]:
        """Read-only view of the node table."""
        return MappingProxyType(self._nodes)

    def node(self, node_id: int) -> Node:
        """Return the node with the given id.

        Raises:
            UnknownNodeId: If there is no such node.

        """
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeId(node_id) from None

    def slot(self, node_id: int, slot_index: int) -> InputSlot:
        """Return an input slot of a node.

        Raises:
            UnknownNodeId: If there is no such node.
            InvalidSlotIndex: If the node has no slot at that index.

        """
        node = self.node(node_id)
        if not 0 <= slot_index < len(node.inputs):
            raise InvalidSlotIndex(node_id, slot_index, len(node.inputs))
        return node.inputs[slot_index]

    def edges(self) -> list[Edge]:
        """All edges, sorted by producer, consumer and slot."""
        return sorted(
            Edge(slot.producer_id, node.id, index)
            for node in self._nodes.values()
            for index, slot in enumerate(node.inputs)
            if slot.is_connected
        )

    def dependency_graph(self) -> DependencyGraph[int]:
        """Snapshot of the current producer/consumer relationships."""
        return DependencyGraph.from_edges(
            ((edge.producer_id, edge.consumer_id) for edge in self.edges()),
            nodes=self._nodes,
        )

    def would_create_cycle(self, producer_id: int, consumer_id: int) -> bool:
        """Check whether an edge producer -> consumer would close a cycle.

        That is the case when the consumer is the producer itself or already
        feeds the producer, directly or through other nodes. The check walks
        upstream from the producer.
        """
        return is_reachable(producer_id, consumer_id, lambda n: self._nodes[n].producer_ids())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return self._current_id == other._current_id and self._nodes == other._nodes

    __hash__ = None  # type: ignore[assignment]

    # -- lifecycle -------------------------------------------------------

    def insert(self, node: Node) -> int:
        """Assign the next id to a node skeleton and store it.

        Ids are never reused, even after the node holding one is removed.
        """
        self._current_id += 1
        node.id = self._current_id
        self._nodes[node.id] = node
        logger.debug("Inserted node %d (%s)", node.id, node.title)
        return node.id

    def create(self, template_name: str) -> int:
        """Build a node from a catalog template and insert it.

        Raises:
            UnknownTemplate: If no template has that name.

        """
        kind = self.catalog.lookup(template_name)
        if kind is None:
            raise UnknownTemplate(template_name)
        return self.insert(kind.build())

    def remove(self, node_id: int) -> None:
        """Delete a node after severing every edge that touches it.

        Raises:
            UnknownNodeId: If there is no such node.

        """
        node = self.node(node_id)
        for producer_id in node.producer_ids():
            self._nodes[producer_id].output.consumers.discard(node_id)
        for consumer_id in node.output.consumers:
            consumer = self._nodes[consumer_id]
            for index in consumer.connected_slots(node_id):
                consumer.inputs[index].producer_id = UNCONNECTED
        node.output.consumers.clear()
        del self._nodes[node_id]
        logger.debug("Removed node %d", node_id)

    def set_position(self, node_id: int, x: int, y: int) -> None:
        """Move a node. Positions are only used for presentation."""
        node = self.node(node_id)
        node.x = x
        node.y = y

    def set_input_value(self, node_id: int, slot_index: int, text: str) -> ParsedLiteral:
        """Parse literal text according to the slot's kind and store it.

        The literal is kept even while the slot is connected and is used
        again once it is disconnected.

        Raises:
            UnknownNodeId: If there is no such node.
            InvalidSlotIndex: If the node has no slot at that index.

        """
        slot = self.slot(node_id, slot_index)
        parsed = parse_literal(slot.value, text)
        slot.value = parsed.value
        return parsed

    # -- edges -----------------------------------------------------------

    def connect(self, producer_id: int, consumer_id: int, slot_index: int) -> None:
        """Connect a producer's output to an input slot of a consumer.

        A slot already fed by another producer is switched over to the new
        one. Nothing changes when the connection is rejected.

        Raises:
            UnknownNodeId: If either node does not exist.
            InvalidSlotIndex: If the consumer has no slot at that index.
            CycleRejected: If the consumer already feeds the producer, or both are the same node.
            TypeMismatch: If the output kind differs from the slot kind.

        """
        producer = self.node(producer_id)
        slot = self.slot(consumer_id, slot_index)

        if self.would_create_cycle(producer_id, consumer_id):
            raise CycleRejected(producer_id, consumer_id)
        if producer.output.kind != slot.kind:
            raise TypeMismatch(producer.output.kind, slot.kind)

        if slot.producer_id == producer_id:
            return
        if slot.is_connected:
            self._detach(consumer_id, slot_index)

        slot.producer_id = producer_id
        producer.output.consumers.add(consumer_id)
        logger.debug("Connected %d -> %d[%d]", producer_id, consumer_id, slot_index)

    def disconnect(self, consumer_id: int, slot_index: int) -> int | None:
        """Clear an input slot's connection.

        Returns:
            The id of the former producer, or None if the slot was not connected.

        Raises:
            UnknownNodeId: If there is no such node.
            InvalidSlotIndex: If the node has no slot at that index.

        """
        slot = self.slot(consumer_id, slot_index)
        if not slot.is_connected:
            return None
        return self._detach(consumer_id, slot_index)

    def _detach(self, consumer_id: int, slot_index: int) -> int:
        consumer = self._nodes[consumer_id]
        slot = consumer.inputs[slot_index]
        former = slot.producer_id
        slot.producer_id = UNCONNECTED
        # the producer may still feed another slot of the same consumer
        if former not in consumer.producer_ids():
            self._nodes[former].output.consumers.discard(consumer_id)
        logger.debug("Disconnected %d -> %d[%d]", former, consumer_id, slot_index)
        return former

    # -- evaluation ------------------------------------------------------

    def evaluate(self, node_id: int) -> Value:
        """Compute the output value of a node.

        The memo cache is cleared first, so every call recomputes from the
        current literals. Within a call each node is transformed at most once,
        however many consumers read it.

        Raises:
            UnknownNodeId: If there is no such node.

        """
        self.node(node_id)
        self._memo.clear()

        order = self.dependency_graph().evaluation_order(node_id)
        logger.debug("Evaluating node %d through %d nodes", node_id, len(order))

        for current in order:
            if current in self._memo:
                continue
            node = self._nodes[current]
            inputs = [self._resolve_input(slot) for slot in node.inputs]
            result = self._kind_of(node).transform(inputs)
            self._memo[current] = result
            logger.debug("  %d (%s) = %r", current, node.title, result)

        return self._memo[node_id]

    def _resolve_input(self, slot: InputSlot) -> Value:
        if not slot.is_connected:
            return slot.value
        return self._memo[slot.producer_id]

    def _kind_of(self, node: Node) -> NodeKind:
        kind = self.catalog.lookup(node.template)
        if kind is None:
            raise UnknownTemplate(node.template)
        return kind

    # -- consistency -----------------------------------------------------

    def validate(self) -> list[str]:
        """Check the graph's invariants and return a list of problems.

        Checks ids, templates, literal kinds, both ends of every edge, edge
        kinds and acyclicity. An empty list means the graph is consistent.
        """
        errors: list[str] = []

        for node_id, node in self._nodes.items():
            if node_id != node.id:
                errors.append(f"Node stored under id {node_id} claims id {node.id}")
            if not 0 < node_id <= self._current_id:
                errors.append(f"Node id {node_id} is outside 1..{self._current_id}")
            if node.template not in self.catalog:
                errors.append(f"Node {node_id} uses unknown template '{node.template}'")

            for index, slot in enumerate(node.inputs):
                if slot.value.kind != slot.kind:
                    errors.append(f"Node {node_id} slot {index} holds a {slot.value.kind} literal, expected {slot.kind}")
                if not slot.is_connected:
                    continue
                producer = self._nodes.get(slot.producer_id)
                if producer is None:
                    errors.append(f"Node {node_id} slot {index} reads from missing node {slot.producer_id}")
                    continue
                if producer.output.kind != slot.kind:
                    errors.append(f"Node {node_id} slot {index} expects {slot.kind}, got {producer.output.kind}")
                if node_id not in producer.output.consumers:
                    errors.append(f"Node {slot.producer_id} does not list consumer {node_id}")

            for consumer_id in node.output.consumers:
                consumer = self._nodes.get(consumer_id)
                if consumer is None or not consumer.connected_slots(node_id):
                    errors.append(f"Node {node_id} lists consumer {consumer_id} which does not read from it")

        errors.extend(self.dependency_graph().validate())
        return errors
