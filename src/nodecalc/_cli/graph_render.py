"""Rich rendering utilities for graphs and templates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from nodecalc._values import ValueKind, display_text

from .config import DEFAULT_VALUE_WIDTH

if TYPE_CHECKING:
    from rich.console import Console

    from nodecalc._graph_model import Graph
    from nodecalc._node import InputSlot, Node
    from nodecalc._templates import TemplateCatalog


def clip(text: str, width: int) -> str:
    """Cut text to its first line and at most ``width`` characters.

    Cut text ends with a ``-`` marker.
    """
    line = text.split("\n", 1)[0]
    if len(line) <= width:
        return line
    if width <= 1:
        return line[:width]
    return line[: width - 1] + "-"


def _kind_label(kind: ValueKind) -> str:
    return f"[{kind.style}]{kind}[/]"


def _slot_cell(slot: InputSlot, value_width: int) -> str:
    socket = f"[{slot.kind.style}]●[/]"
    if slot.is_connected:
        return f"{socket} {escape(slot.label)} [dim]<- {slot.producer_id}[/dim]"
    literal = escape(clip(display_text(slot.value), value_width))
    return f"{socket} {escape(slot.label)} = {literal}"


def render_node_table(graph: Graph, console: Console, value_width: int = DEFAULT_VALUE_WIDTH) -> None:
    """Render every node with its inputs and output as a Rich table.

    Args:
        graph: Graph to render.
        console: Rich Console to output to.
        value_width: Maximum characters shown for a literal value.

    """
    if not len(graph):
        console.print("[dim]The graph is empty[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Id", justify="right", style="bold")
    table.add_column("Node")
    table.add_column("Inputs")
    table.add_column("Output")
    table.add_column("Pos", justify="right", style="dim")

    for node in sorted(graph, key=lambda n: n.id):
        table.add_row(*_node_row(node, value_width))

    console.print(table)


def _node_row(node: Node, value_width: int) -> tuple[str, ...]:
    inputs = "\n".join(_slot_cell(slot, value_width) for slot in node.inputs) or "[dim]-[/dim]"
    consumers = ", ".join(str(c) for c in sorted(node.output.consumers))
    output = _kind_label(node.output.kind)
    if consumers:
        output += f" [dim]-> {consumers}[/dim]"
    return (str(node.id), escape(node.title), inputs, output, f"{node.x},{node.y}")


def render_edges(graph: Graph, console: Console) -> None:
    """Render the list of connections."""
    edges = graph.edges()
    if not edges:
        console.print("[dim]No connections[/dim]")
        return

    for edge in edges:
        producer = graph.node(edge.producer_id)
        consumer = graph.node(edge.consumer_id)
        slot = consumer.inputs[edge.slot_index]
        console.print(
            f"[{slot.kind.style}]─[/] "
            f"{edge.producer_id} {escape(producer.title)} -> "
            f"{edge.consumer_id} {escape(consumer.title)}[{edge.slot_index}] ({escape(slot.label)})",
        )


def render_tree(graph: Graph, node_id: int, console: Console) -> None:
    """Render the nodes a node reads from as a Rich tree.

    A producer feeding several nodes appears once under each of them.

    Args:
        graph: Graph holding the node.
        node_id: Root of the tree.
        console: Rich Console to output to.

    """
    node = graph.node(node_id)
    rich_tree = Tree(f"[bold]{node.id} {escape(node.title)}[/bold] {_kind_label(node.output.kind)}")

    # Explicit stack so long chains do not hit the recursion limit
    stack: list[tuple[Tree, Node]] = [(rich_tree, node)]
    while stack:
        parent, current = stack.pop()
        for index, slot in enumerate(current.inputs):
            label = f"[{index}] {escape(slot.label)}"
            if not slot.is_connected:
                parent.add(f"{label} = {escape(repr(display_text(slot.value)))}")
                continue
            producer = graph.node(slot.producer_id)
            child = parent.add(f"{label} <- {producer.id} {escape(producer.title)}")
            stack.append((child, producer))

    console.print(rich_tree)


def render_templates(catalog: TemplateCatalog, console: Console) -> None:
    """Render the registered templates as a Rich table."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Template", style="bold")
    table.add_column("Inputs")
    table.add_column("Output")

    for kind in sorted(catalog, key=lambda k: k.name):
        inputs = ", ".join(f"{escape(spec.label)}: {_kind_label(spec.kind)}" for spec in kind.inputs)
        table.add_row(escape(kind.name), inputs or "[dim]-[/dim]", _kind_label(kind.output_kind))

    console.print(table)
