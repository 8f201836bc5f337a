import pytest

from edittree.node import Node
from edittree.root import Root


class TestRoot:
    def test_boundary_ranges_span_buffer(self, stylesheet: Root) -> None:
        length = len(stylesheet.buffer)

        for name in ("full", "self", "value"):
            assert stylesheet.range(name).to_json() == [0, length]

        stylesheet.children[1].remove()

        assert stylesheet.range("value").to_json() == [0, 18]

    def test_has_no_tokens_of_its_own(self, stylesheet: Root) -> None:
        assert stylesheet.name == ""
        assert stylesheet.value == ""
        assert stylesheet.range("after") is None
        assert stylesheet.after == ""

    def test_value_is_read_only(self, stylesheet: Root) -> None:
        with pytest.raises(AttributeError):
            stylesheet.value = "a { }"

    def test_to_json_embeds_text_once(self, stylesheet: Root) -> None:
        data = stylesheet.to_json()

        assert set(data) == {"src", "t", "c"}
        assert data["src"] == "a { x: 1; y: 2; }\nb { z: 3; }"
        assert data["t"] == "root"
        assert data["c"][1]["r"]["name"] == [18, 19]
        assert "src" not in data["c"][0]

    def test_from_json_builds_plain_nodes(self) -> None:
        root = Root.from_json({"src": "k=v", "c": [{"r": {"before": [0, 0], "name": [0, 1], "value": [2, 3]}}]})
        pair = root.children[0]

        assert type(pair) is Node
        assert pair.type_ == "node"
        assert pair.parent is root
        assert pair.buffer is root.buffer
        assert root.type_ == "root"

    def test_accepts_plain_text(self) -> None:
        root = Root("x=1")

        assert str(root) == "x=1"
        assert root.children == []
        assert root.to_json() == {"src": "x=1", "t": "root", "c": []}

    def test_insert_into_empty_document(self) -> None:
        root = Root("")
        pair = Node("k=v;", {"before": [0, 0], "name": [0, 1], "between": [1, 2], "value": [2, 3], "after": [3, 4]})

        root.insert(pair)
        root.insert(pair.clone(), "last")

        assert str(root) == "k=v;k=v;"
        assert root.children[1].range("full").to_json() == [4, 8]
