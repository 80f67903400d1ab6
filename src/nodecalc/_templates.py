"""Node templates and the catalog that creates nodes by name."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._node import Node, OutputPort
from ._values import Integer, Text, Value, ValueKind, coerce_to_integer, coerce_to_text

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 1_000_000
"""Longest text a built-in template produces.

Longer results are cut to whole repetitions, keeping at least one.
"""


@dataclass(frozen=True, slots=True)
class SlotSpec:
    """Declaration of one input slot of a template."""

    label: str
    default: Value

    @property
    def kind(self) -> ValueKind:
        """Kind of the values the slot accepts."""
        return self.default.kind


@dataclass(frozen=True, slots=True)
class NodeKind:
    """A named node template.

    A template describes the shape of a node (input slots and output kind)
    and the transform computing the output from the resolved input values.

    Attributes:
        name: Catalog name, also used as the title of built nodes.
        inputs: Input slot declarations, in slot order.
        output_kind: Kind of the single output.
        transform: Computes the output from one value per input slot.

    """

    name: str
    inputs: tuple[SlotSpec, ...]
    output_kind: ValueKind
    transform: Callable[[Sequence[Value]], Value]

    def build(self) -> Node:
        """Create an unattached node skeleton (id 0) with default inputs."""
        node = Node(title=self.name, template=self.name, output=OutputPort(self.output_kind))
        for spec in self.inputs:
            node.add_input(spec.label, spec.default)
        return node


def _new_number(inputs: Sequence[Value]) -> Value:
    return Integer(coerce_to_integer(inputs[0]))


def _repeat_string(inputs: Sequence[Value]) -> Value:
    text = coerce_to_text(inputs[0])
    count = max(coerce_to_integer(inputs[1]), 0)
    if text and len(text) * count > MAX_TEXT_LENGTH:
        limited = max(MAX_TEXT_LENGTH // len(text), 1)
        logger.warning("Repeating %d characters %d times is too long, repeating %d times", len(text), count, limited)
        count = limited
    return Text(text * count)


NEW_NUMBER = NodeKind(
    name="New number",
    inputs=(SlotSpec("number", Integer()),),
    output_kind=ValueKind.INTEGER,
    transform=_new_number,
)

REPEAT_STRING = NodeKind(
    name="Repeat string",
    inputs=(SlotSpec("string", Text()), SlotSpec("number", Integer())),
    output_kind=ValueKind.TEXT,
    transform=_repeat_string,
)


class TemplateCatalog:
    """Registry of node templates, looked up by name.

    A catalog is built once and handed to whatever needs to create nodes by
    name. There is no global registry.
    """

    def __init__(self, kinds: Sequence[NodeKind] = ()) -> None:
        self._kinds: dict[str, NodeKind] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind: NodeKind) -> None:
        """Add a template.

        Raises:
            ValueError: If a template with the same name is already registered.

        """
        if kind.name in self._kinds:
            msg = f"Template '{kind.name}' is already registered"
            raise ValueError(msg)
        self._kinds[kind.name] = kind

    def lookup(self, name: str) -> NodeKind | None:
        """Return the template called ``name``, or None if it is not registered."""
        return self._kinds.get(name)

    def names(self) -> frozenset[str]:
        """Return the names of all registered templates."""
        return frozenset(self._kinds)

    def __iter__(self) -> Iterator[NodeKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    def __contains__(self, name: object) -> bool:
        return name in self._kinds


def default_catalog() -> TemplateCatalog:
    """Build a catalog holding the built-in templates."""
    return TemplateCatalog([NEW_NUMBER, REPEAT_STRING])
