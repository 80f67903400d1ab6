"""Node instances: input slots, output port and layout metadata."""

from __future__ import annotations

from dataclasses import dataclass, field

from ._values import Value, ValueKind

UNCONNECTED = 0
"""Producer id of an input slot with no connection. Never assigned to a node."""


@dataclass(slots=True)
class InputSlot:
    """A typed input position on a node.

    Attributes:
        label: Name shown next to the slot.
        kind: The value kind the slot accepts.
        value: Literal value used while the slot is unconnected.
        producer_id: Id of the node feeding this slot, or ``UNCONNECTED``.

    """

    label: str
    kind: ValueKind
    value: Value
    producer_id: int = UNCONNECTED

    @property
    def is_connected(self) -> bool:
        """True when a producer feeds this slot."""
        return self.producer_id != UNCONNECTED


@dataclass(slots=True)
class OutputPort:
    """A node's single typed output and the ids of nodes reading it."""

    kind: ValueKind
    consumers: set[int] = field(default_factory=set)


@dataclass(slots=True)
class Node:
    """A vertex of the graph.

    Nodes are created by a template with ``id == 0`` and receive their real id
    when inserted into a graph. Edges must only be changed through the graph,
    which keeps both ends of every edge in sync.

    Attributes:
        id: Unique id assigned by the graph.
        title: Display title.
        template: Name of the template that built the node.
        inputs: Ordered input slots.
        output: The output port.
        x: Horizontal position for presentation.
        y: Vertical position for presentation.
        w: Rendered width, maintained by the presentation layer.

    """

    title: str
    template: str
    output: OutputPort
    inputs: list[InputSlot] = field(default_factory=list)
    id: int = 0
    x: int = 0
    y: int = 0
    w: int = 0

    def add_input(self, label: str, default: Value) -> None:
        """Append an input slot whose kind is taken from ``default``."""
        self.inputs.append(InputSlot(label=label, kind=default.kind, value=default))

    def connected_slots(self, producer_id: int) -> list[int]:
        """Indices of the slots fed by ``producer_id``."""
        return [i for i, slot in enumerate(self.inputs) if slot.producer_id == producer_id]

    def producer_ids(self) -> set[int]:
        """Ids of every node feeding at least one slot."""
        return {slot.producer_id for slot in self.inputs if slot.is_connected}
