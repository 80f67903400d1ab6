"""Tests for saving and loading graphs."""

import tomllib
from pathlib import Path

import pytest

from nodecalc._errors import PersistenceCorrupt, PersistenceUnavailable
from nodecalc._graph_model import Graph
from nodecalc._io import GraphDocument, graph_to_document, load_graph, restore_graph, save_graph
from nodecalc._values import Integer, Text


@pytest.fixture
def graph() -> Graph:
    graph = Graph()
    number = graph.create("New number")
    graph.set_input_value(number, 0, "3")
    graph.set_position(number, 4, 5)
    repeat = graph.create("Repeat string")
    graph.set_input_value(repeat, 0, 'say "hi"\n')
    graph.connect(number, repeat, 1)
    removed = graph.create("New number")
    graph.remove(removed)
    return graph


VALID = """\
format_version = 1
current_id = 2

[[nodes]]
id = 1
title = "New number"
template = "New number"
consumers = [2]
output.kind = "integer"

[[nodes.inputs]]
label = "number"
kind = "integer"
value = 3

[[nodes]]
id = 2
title = "Repeat string"
template = "Repeat string"
output.kind = "text"

[[nodes.inputs]]
label = "string"
kind = "text"
value = "ab"

[[nodes.inputs]]
label = "number"
kind = "integer"
producer_id = 1
value = 0
"""


class TestRoundTrip:
    def test_round_trip_preserves_graph(self, graph: Graph, tmp_path: Path) -> None:
        path = tmp_path / "graph.toml"
        save_graph(graph, path)
        loaded = load_graph(path)

        assert loaded == graph
        assert loaded.current_id == 3
        assert loaded.evaluate(2) == Text('say "hi"\n' * 3)

    def test_ids_continue_after_load(self, graph: Graph, tmp_path: Path) -> None:
        path = tmp_path / "graph.toml"
        save_graph(graph, path)
        assert load_graph(path).create("New number") == 4

    def test_creates_parent_directories(self, graph: Graph, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "graph.toml"
        save_graph(graph, path)
        assert path.exists()

    def test_empty_graph(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.toml"
        save_graph(Graph(), path)
        assert load_graph(path) == Graph()


class TestDocument:
    def test_layout(self, graph: Graph, tmp_path: Path) -> None:
        path = tmp_path / "graph.toml"
        save_graph(graph, path)
        with path.open("rb") as f:
            data = tomllib.load(f)

        assert data["format_version"] == 1
        assert data["current_id"] == 3
        assert [n["id"] for n in data["nodes"]] == [1, 2]
        first = data["nodes"][0]
        assert (first["x"], first["y"]) == (4, 5)
        assert first["consumers"] == [2]
        assert first["output"] == {"kind": "integer"}
        assert data["nodes"][1]["inputs"][1] == {
            "label": "number",
            "kind": "integer",
            "producer_id": 1,
            "value": 0,
        }

    def test_graph_to_document(self, graph: Graph) -> None:
        document = graph_to_document(graph)
        assert isinstance(document, GraphDocument)
        assert document.nodes[0].inputs[0].value == 3

    def test_hand_written_file(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.toml"
        path.write_text(VALID)
        graph = load_graph(path)
        assert graph.node(1).inputs[0].value == Integer(3)
        assert graph.evaluate(2) == Text("ababab")

    def test_empty_file_is_empty_graph(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.toml"
        path.write_text("")
        graph = load_graph(path)
        assert len(graph) == 0
        assert graph.current_id == 0


class TestLoadFailures:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PersistenceUnavailable, match="can not be loaded"):
            load_graph(tmp_path / "missing.toml")

    def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(PersistenceUnavailable):
            load_graph(tmp_path)

    @pytest.mark.parametrize(
        "content",
        [
            pytest.param("nodes = [", id="invalid-toml"),
            pytest.param("format_version = 2\n", id="unknown-version"),
            pytest.param("current_id = -1\n", id="negative-counter"),
            pytest.param(VALID.replace("current_id = 2", "current_id = 1"), id="id-beyond-counter"),
            pytest.param(VALID.replace("producer_id = 1", "producer_id = 9"), id="dangling-producer"),
            pytest.param(VALID.replace("consumers = [2]", "consumers = []"), id="one-sided-edge"),
            pytest.param(VALID.replace('value = "ab"', "value = 5"), id="literal-kind"),
            pytest.param(VALID.replace('template = "Repeat string"', 'template = "Add"'), id="unknown-template"),
            pytest.param(VALID.replace("\nid = 2\n", "\nid = 1\n"), id="duplicate-id"),
            pytest.param(VALID.replace('output.kind = "text"', 'output.kind = "float"'), id="unknown-kind"),
        ],
    )
    def test_corrupt(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "graph.toml"
        path.write_text(content)
        with pytest.raises(PersistenceCorrupt, match="corrupted"):
            load_graph(path)

    def test_cycle_is_corrupt(self, tmp_path: Path) -> None:
        content = """\
current_id = 2

[[nodes]]
id = 1
title = "Repeat string"
template = "Repeat string"
consumers = [2]
output.kind = "text"
inputs = [
    { label = "string", kind = "text", producer_id = 2, value = "" },
    { label = "number", kind = "integer", value = 0 },
]

[[nodes]]
id = 2
title = "Repeat string"
template = "Repeat string"
consumers = [1]
output.kind = "text"
inputs = [
    { label = "string", kind = "text", producer_id = 1, value = "" },
    { label = "number", kind = "integer", value = 0 },
]
"""
        path = tmp_path / "cycle.toml"
        path.write_text(content)
        with pytest.raises(PersistenceCorrupt, match="cycle"):
            load_graph(path)

    def test_binary_garbage(self, tmp_path: Path) -> None:
        path = tmp_path / "garbage.toml"
        path.write_bytes(b"\xff\xfe\x00\x01")
        with pytest.raises(PersistenceCorrupt):
            load_graph(path)


class TestSaveFailures:
    def test_parent_is_a_file(self, graph: Graph, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(PersistenceUnavailable):
            save_graph(graph, blocker / "graph.toml")


class TestRestore:
    def test_success(self, graph: Graph, tmp_path: Path) -> None:
        path = tmp_path / "graph.toml"
        save_graph(graph, path)
        result = restore_graph(path)
        assert result.success
        assert result.graph == graph

    def test_missing_falls_back_to_empty(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        result = restore_graph(tmp_path / "missing.toml")
        assert not result.success
        assert isinstance(result.warning, PersistenceUnavailable)
        assert len(result.graph) == 0
        assert "starting with an empty graph" in caplog.text

    def test_corrupt_falls_back_to_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "graph.toml"
        path.write_text("current_id = 'x'")
        result = restore_graph(path)
        assert isinstance(result.warning, PersistenceCorrupt)
        assert result.graph == Graph()
