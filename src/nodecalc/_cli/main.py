"""Typer entry point for the nodecalc command line."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from nodecalc._editor import Editor
from nodecalc._errors import GraphError, PersistenceError
from nodecalc._io import load_graph
from nodecalc._templates import default_catalog

from .commands import HELP_TEXT, execute
from .config import ConfigError, NodecalcConfig, get_config
from .graph_render import render_edges, render_node_table, render_templates, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Nodecalc CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _load_config() -> NodecalcConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_graph_or_exit(path: Path) -> Editor:
    try:
        graph = load_graph(path, default_catalog())
    except PersistenceError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    return Editor(graph)


@app.command()
def templates() -> None:
    """List the node templates that can be created."""
    render_templates(default_catalog(), out_console)


@app.command()
def show(
    path: Annotated[Path, typer.Argument(help="Path to a saved graph (TOML)")],
) -> None:
    """Show the nodes and connections of a saved graph."""
    config = _load_config()
    editor = _load_graph_or_exit(path)

    render_node_table(editor.graph, out_console, config.value_width)
    out_console.print()
    render_edges(editor.graph, out_console)


@app.command(name="eval")
def eval_node(
    path: Annotated[Path, typer.Argument(help="Path to a saved graph (TOML)")],
    node_id: Annotated[int, typer.Argument(help="Id of the node to evaluate")],
) -> None:
    """Evaluate a node of a saved graph and print its value."""
    editor = _load_graph_or_exit(path)

    result = editor.evaluate(node_id)
    if not result.success:
        err_console.print(f"[red]✗ {escape(str(result.error))}[/red]")
        raise typer.Exit(code=1)

    # Plain output so values can be piped
    typer.echo(result.text)


@app.command()
def tree(
    path: Annotated[Path, typer.Argument(help="Path to a saved graph (TOML)")],
    node_id: Annotated[int, typer.Argument(help="Id of the root node")],
) -> None:
    """Show the nodes a node reads from, as a tree."""
    editor = _load_graph_or_exit(path)

    try:
        render_tree(editor.graph, node_id, out_console)
    except GraphError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def shell(
    path: Annotated[
        Path | None,
        typer.Argument(help="Saved graph to start from (TOML)"),
    ] = None,
    *,
    autosave: Annotated[
        bool,
        typer.Option("--autosave", help="Save after every edit, even if pyproject.toml disables it"),
    ] = False,
) -> None:
    """Edit a graph interactively.

    Type 'help' at the prompt for the list of commands.
    """
    config = _load_config()
    editor = Editor(config=config.editor_config())
    if autosave:
        editor.set_auto_persist(enabled=True)

    if path is not None:
        result = editor.restore(path)
        if not result.success:
            err_console.print(f"[yellow]⚠ {escape(str(result.error))}; starting with an empty graph[/yellow]")

    err_console.print(Panel(HELP_TEXT, title="[bold]nodecalc[/bold]", border_style="cyan"))

    while True:
        render_node_table(editor.graph, out_console, config.value_width)
        try:
            line = typer.prompt("", prompt_suffix="> ", default="", show_default=False)
        except typer.Abort:
            break

        reply = execute(editor, line)
        if reply.quit:
            break
        if reply.error:
            err_console.print(f"[red]{escape(reply.text)}[/red]")
        elif reply.text:
            out_console.print(Panel(escape(reply.text), title="Output", border_style="cyan"))


def main() -> None:
    """Run the nodecalc command line."""
    app()
