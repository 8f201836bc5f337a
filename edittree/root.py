from __future__ import annotations

import typing as t

from edittree.buffer import Buffer
from edittree.node import Node, RangeName
from edittree.range import Range


_WHOLE_BUFFER = (RangeName.FULL, RangeName.SELF, RangeName.VALUE)


class Root(Node):
    """Top-level node of a tree.

    The root has no delimiting tokens of its own, so its `full`, `self`
    and `value` ranges always cover the whole buffer.
    """

    def __init__(
        self,
        buffer: t.Union[Buffer, str],
        ranges: t.Optional[t.Mapping[str, t.Any]] = None,
        type_: str = "root",
    ) -> None:
        super().__init__(buffer, ranges, type_)

    @property
    def name(self) -> str:
        return ""

    @property
    def value(self) -> str:
        return ""

    def range(self, name: t.Union[str, RangeName]) -> t.Optional[Range]:
        if RangeName(name) in _WHOLE_BUFFER:
            return Range(0, len(self.buffer))
        return super().range(name)

    def to_json(self) -> dict[str, t.Any]:
        return {
            "src": self.buffer.value_of(),
            "t": self.type_,
            "c": [child.to_json() for child in self.children],
        }

    @classmethod
    def from_json(cls, data: t.Mapping[str, t.Any]) -> Root:  # type: ignore[override]
        root = cls(Buffer(data["src"]), type_=data.get("t", "root"))
        for child in data.get("c", ()):
            root.attach(Node.from_json(root.buffer, child))
        return root
