from __future__ import annotations

import typing as t

import attr

from edittree.range import Range


@attr.s(slots=True, eq=False)
class Buffer:
    """Mutable text shared by every node of one tree.

    The buffer only owns the characters; it never adjusts outstanding
    `Range` objects after an update.
    """

    _text: str = attr.ib(default="")

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def value_of(self) -> str:
        return self._text

    def substring(self, range_: Range) -> str:
        return self._text[range_.start : range_.end]

    def update(self, range_: Range, text: str) -> None:
        self._text = self._text[: range_.start] + text + self._text[range_.end :]


def _to_buffer(value: t.Union[Buffer, str]) -> Buffer:
    if isinstance(value, Buffer):
        return value
    return Buffer(value)
