"""Editing session wrapping a graph for interactive front ends.

Every call returns an ``OperationResult`` instead of raising, so a command
layer can report rejections (unknown ids, type mismatches, cycles, unusable
save files) without any error handling of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from ._errors import GraphError, PersistenceError
from ._graph_model import Graph
from ._io import restore_graph, save_graph
from ._values import display_text

if TYPE_CHECKING:
    from ._errors import ErrorCode, NodecalcError
    from ._templates import TemplateCatalog

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_PATH = Path("auto_save.toml")
NEW_NODE_POSITION = (2, 2)


class ConnectionChange(StrEnum):
    """What a toggling ``connect`` call did to the slot."""

    CONNECTED = auto()
    DISCONNECTED = auto()
    RECONNECTED = auto()


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of an editor operation.

    Attributes:
        error: The rejection reason, or None on success.
        node_id: Id of the node created by ``create``.
        text: Display text produced by ``evaluate``.
        connection: What ``connect`` did to the slot.
        parse_fallback: True when ``set_input_value`` could not parse the
            literal and stored the kind's zero value instead.

    """

    error: NodecalcError | None = None
    node_id: int | None = None
    text: str | None = None
    connection: ConnectionChange | None = None
    parse_fallback: bool = False

    @property
    def success(self) -> bool:
        """True when the operation was applied."""
        return self.error is None

    @property
    def code(self) -> ErrorCode | None:
        """Error code of the rejection, or None on success."""
        return None if self.error is None else self.error.code


@dataclass(slots=True)
class EditorConfig:
    """Session settings.

    Attributes:
        auto_persist: Save after every connect, disconnect, remove and
            literal edit.
        autosave_path: Where automatic saves are written.

    """

    auto_persist: bool = False
    autosave_path: Path = DEFAULT_AUTOSAVE_PATH


class Editor:
    """An editing session over one graph."""

    def __init__(
        self,
        graph: Graph | None = None,
        config: EditorConfig | None = None,
        catalog: TemplateCatalog | None = None,
    ) -> None:
        self.graph = graph if graph is not None else Graph(catalog)
        self.config = config if config is not None else EditorConfig()

    @property
    def catalog(self) -> TemplateCatalog:
        """Templates available to ``create``."""
        return self.graph.catalog

    def set_auto_persist(self, *, enabled: bool) -> None:
        """Turn saving after every edit on or off."""
        self.config.auto_persist = enabled
        logger.info("Autosave %s", "enabled" if enabled else "disabled")

    def _auto_persist(self) -> None:
        if not self.config.auto_persist:
            return
        try:
            save_graph(self.graph, self.config.autosave_path)
        except PersistenceError as e:
            logger.warning("Autosave failed: %s", e)

    # -- nodes -----------------------------------------------------------

    def create(self, template_name: str) -> OperationResult:
        """Create a node from a template and place it at the default position."""
        try:
            node_id = self.graph.create(template_name)
        except GraphError as e:
            return OperationResult(error=e)
        self.graph.set_position(node_id, *NEW_NODE_POSITION)
        return OperationResult(node_id=node_id)

    def remove(self, node_id: int) -> OperationResult:
        """Delete a node and every edge touching it."""
        try:
            self.graph.remove(node_id)
        except GraphError as e:
            return OperationResult(error=e)
        self._auto_persist()
        return OperationResult()

    def set_position(self, node_id: int, x: int, y: int) -> OperationResult:
        """Move a node. Moving never autosaves."""
        try:
            self.graph.set_position(node_id, x, y)
        except GraphError as e:
            return OperationResult(error=e)
        return OperationResult()

    def set_input_value(self, node_id: int, slot_index: int, literal_text: str) -> OperationResult:
        """Parse a literal for an input slot according to the slot's kind."""
        try:
            parsed = self.graph.set_input_value(node_id, slot_index, literal_text)
        except GraphError as e:
            return OperationResult(error=e)
        self._auto_persist()
        return OperationResult(parse_fallback=parsed.fallback)

    # -- edges -----------------------------------------------------------

    def connect(self, from_node_id: int, to_node_id: int, slot_index: int) -> OperationResult:
        """Toggle a connection into an input slot.

        - If the slot is already fed by ``from_node_id``, it is disconnected.
        - If it is fed by another node, it is switched over to ``from_node_id``.
          When the new connection is rejected the old one stays.
        - Otherwise the connection is made.
        """
        try:
            self.graph.node(from_node_id)
            slot = self.graph.slot(to_node_id, slot_index)
            if slot.producer_id == from_node_id:
                self.graph.disconnect(to_node_id, slot_index)
                change = ConnectionChange.DISCONNECTED
            else:
                change = ConnectionChange.RECONNECTED if slot.is_connected else ConnectionChange.CONNECTED
                self.graph.connect(from_node_id, to_node_id, slot_index)
        except GraphError as e:
            logger.debug("Connection rejected: %s", e)
            return OperationResult(error=e)
        self._auto_persist()
        return OperationResult(connection=change)

    def disconnect(self, to_node_id: int, slot_index: int) -> OperationResult:
        """Clear an input slot. Disconnecting an unconnected slot changes nothing."""
        try:
            former = self.graph.disconnect(to_node_id, slot_index)
        except GraphError as e:
            return OperationResult(error=e)
        if former is not None:
            self._auto_persist()
        return OperationResult()

    # -- evaluation ------------------------------------------------------

    def evaluate(self, node_id: int) -> OperationResult:
        """Compute a node's value and return its display text."""
        try:
            value = self.graph.evaluate(node_id)
        except GraphError as e:
            return OperationResult(error=e)
        return OperationResult(text=display_text(value))

    # -- persistence -----------------------------------------------------

    def persist(self, path: Path) -> OperationResult:
        """Save the graph to ``path``."""
        try:
            save_graph(self.graph, path)
        except PersistenceError as e:
            logger.warning("%s", e)
            return OperationResult(error=e)
        return OperationResult()

    def restore(self, path: Path) -> OperationResult:
        """Replace the graph with one loaded from ``path``.

        An unusable file leaves the session with an empty graph, and the
        result carries the reason.
        """
        result = restore_graph(path, self.catalog)
        self.graph = result.graph
        return OperationResult(error=result.warning)
