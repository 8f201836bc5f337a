import typing as t

import pytest

from edittree.root import Root


Section = tuple[str, str, str, t.Union[str, list], str]


def _layout(sections: list[Section], offset: int) -> tuple[str, list[dict]]:
    text = ""
    nodes = []
    for before, name, between, body, after in sections:
        pos = offset + len(text)
        ranges = {}
        for key, part in (("before", before), ("name", name), ("between", between)):
            ranges[key] = [pos, pos + len(part)]
            pos += len(part)
        if isinstance(body, str):
            value, children = body, []
        else:
            value, children = _layout(body, pos)
        ranges["value"] = [pos, pos + len(value)]
        pos += len(value)
        ranges["after"] = [pos, pos + len(after)]
        text += before + name + between + value + after
        nodes.append({"r": ranges, "t": "section", "c": children})
    return text, nodes


def build_tree(sections: list[Section]) -> Root:
    """Lay out `(before, name, between, value, after)` tuples as a tree.

    A list in the value position holds nested sections.
    """
    text, nodes = _layout(sections, 0)
    return Root.from_json({"src": text, "t": "root", "c": nodes})


def check_containment(root: Root) -> None:
    for node in root.descendants():
        assert node.parent.range("value").contains(node.range("full")), node.dump_ranges()


STYLESHEET = [
    ("", "a", " { ", [("", "x", ": ", "1", "; "), ("", "y", ": ", "2", "; ")], "}\n"),
    ("", "b", " { ", [("", "z", ": ", "3", "; ")], "}"),
]


@pytest.fixture
def stylesheet() -> Root:
    return build_tree(STYLESHEET)
