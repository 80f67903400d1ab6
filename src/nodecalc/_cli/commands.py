"""Line-oriented command dispatcher for the interactive shell.

This module is the functional core of the shell: it parses a command line,
calls the editor and describes the outcome. It does no I/O and no rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from nodecalc._editor import ConnectionChange

if TYPE_CHECKING:
    from collections.abc import Callable

    from nodecalc._editor import Editor, OperationResult

SAVE_SUFFIX = ".toml"

HELP_TEXT = """\
calc_out ID            evaluate a node and show its value
pos ID X Y             move a node
con FROM TO SLOT       connect FROM's output to TO's input SLOT (again to disconnect)
set_val ID SLOT TEXT   set the literal value of an input slot
add_node TEMPLATE      create a node from a template
del_node ID            delete a node and its connections
save NAME              save the graph to NAME.toml
load NAME              load the graph from NAME.toml
autosave on|off        save after every edit
help                   show this help
q                      quit"""


@dataclass(frozen=True, slots=True)
class CommandReply:
    """What the shell should show after a command.

    Attributes:
        text: Message or value to display. Empty when there is nothing to say.
        error: True when the command was rejected or malformed.
        quit: True when the shell should exit.

    """

    text: str = ""
    error: bool = False
    quit: bool = False


class _UsageError(Exception):
    pass


def _int_args(rest: str, usage: str, count: int) -> list[int]:
    args = rest.split()
    if len(args) != count:
        raise _UsageError(usage)
    try:
        return [int(arg) for arg in args]
    except ValueError:
        raise _UsageError(usage) from None


def save_path(name: str) -> Path:
    """Turn a save name into a file path, adding ``.toml`` when it has no suffix."""
    path = Path(name)
    return path if path.suffix else path.with_suffix(SAVE_SUFFIX)


def _failure(result: OperationResult) -> CommandReply:
    return CommandReply(text=str(result.error), error=True)


def _calc_out(editor: Editor, rest: str) -> CommandReply:
    (node_id,) = _int_args(rest, "calc_out ID", 1)
    result = editor.evaluate(node_id)
    if not result.success:
        return _failure(result)
    return CommandReply(text=result.text or "")


def _pos(editor: Editor, rest: str) -> CommandReply:
    node_id, x, y = _int_args(rest, "pos ID X Y", 3)
    result = editor.set_position(node_id, x, y)
    return CommandReply() if result.success else _failure(result)


def _con(editor: Editor, rest: str) -> CommandReply:
    from_id, to_id, slot_index = _int_args(rest, "con FROM TO SLOT", 3)
    result = editor.connect(from_id, to_id, slot_index)
    if not result.success:
        return _failure(result)
    match result.connection:
        case ConnectionChange.DISCONNECTED:
            return CommandReply(text=f"Disconnected {from_id} -> {to_id}[{slot_index}]")
        case ConnectionChange.RECONNECTED:
            return CommandReply(text=f"Reconnected {to_id}[{slot_index}] to {from_id}")
        case _:
            return CommandReply(text=f"Connected {from_id} -> {to_id}[{slot_index}]")


def _set_val(editor: Editor, rest: str) -> CommandReply:
    usage = "set_val ID SLOT TEXT"
    parts = rest.split(" ", 2)
    if len(parts) != 3:  # noqa: PLR2004
        raise _UsageError(usage)
    node_id, slot_index = _int_args(" ".join(parts[:2]), usage, 2)
    result = editor.set_input_value(node_id, slot_index, parts[2])
    if not result.success:
        return _failure(result)
    if result.parse_fallback:
        return CommandReply(text=f"Could not parse {parts[2]!r}, stored the default value instead", error=True)
    return CommandReply()


def _add_node(editor: Editor, rest: str) -> CommandReply:
    name = rest.strip()
    if not name:
        raise _UsageError("add_node TEMPLATE")
    result = editor.create(name)
    if not result.success:
        names = ", ".join(sorted(editor.catalog.names()))
        return CommandReply(text=f"{result.error} (available: {names})", error=True)
    return CommandReply(text=f"Created node {result.node_id}")


def _del_node(editor: Editor, rest: str) -> CommandReply:
    (node_id,) = _int_args(rest, "del_node ID", 1)
    result = editor.remove(node_id)
    return CommandReply(text=f"Deleted node {node_id}") if result.success else _failure(result)


def _save(editor: Editor, rest: str) -> CommandReply:
    name = rest.strip()
    if not name:
        raise _UsageError("save NAME")
    path = save_path(name)
    result = editor.persist(path)
    return CommandReply(text=f"Saved to {path}") if result.success else _failure(result)


def _load(editor: Editor, rest: str) -> CommandReply:
    name = rest.strip()
    if not name:
        raise _UsageError("load NAME")
    path = save_path(name)
    result = editor.restore(path)
    if not result.success:
        return CommandReply(text=f"{result.error}; starting with an empty graph", error=True)
    return CommandReply(text=f"Loaded {len(editor.graph)} nodes from {path}")


def _autosave(editor: Editor, rest: str) -> CommandReply:
    match rest.strip():
        case "on":
            editor.set_auto_persist(enabled=True)
            return CommandReply(text=f"Autosave on ({editor.config.autosave_path})")
        case "off":
            editor.set_auto_persist(enabled=False)
            return CommandReply(text="Autosave off")
    raise _UsageError("autosave on|off")


def _help(_editor: Editor, _rest: str) -> CommandReply:
    return CommandReply(text=HELP_TEXT)


def _quit(_editor: Editor, _rest: str) -> CommandReply:
    return CommandReply(quit=True)


COMMANDS: dict[str, Callable[[Editor, str], CommandReply]] = {
    "calc_out": _calc_out,
    "pos": _pos,
    "con": _con,
    "set_val": _set_val,
    "add_node": _add_node,
    "del_node": _del_node,
    "save": _save,
    "load": _load,
    "autosave": _autosave,
    "help": _help,
    "q": _quit,
}


def execute(editor: Editor, line: str) -> CommandReply:
    """Run one command line against an editor.

    Malformed or unknown commands produce an error reply; this function does
    not raise for bad input.
    """
    line = line.strip()
    if not line:
        return CommandReply()

    name, _, rest = line.partition(" ")
    handler = COMMANDS.get(name)
    if handler is None:
        return CommandReply(text="Unknown command, please try again. Type 'help' for a list.", error=True)

    try:
        return handler(editor, rest)
    except _UsageError as e:
        return CommandReply(text=f"Usage: {e}", error=True)
