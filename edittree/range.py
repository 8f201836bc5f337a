from __future__ import annotations

import attr


@attr.s(slots=True, eq=False)
class Range:
    """Half-open `[start, end)` interval into a buffer.

    Instances are mutable and hashed by identity: the editing engine
    tracks which range objects it already adjusted, and two ranges with
    the same offsets are still distinct slots. Use `equal` to compare by
    value.
    """

    start: int = attr.ib()
    end: int = attr.ib()

    @classmethod
    def from_length(cls, start: int, length: int) -> Range:
        return cls(start, start + length)

    @property
    def length(self) -> int:
        return self.end - self.start

    def clone(self) -> Range:
        return Range(self.start, self.end)

    def shift(self, delta: int) -> Range:
        self.start += delta
        self.end += delta
        return self

    def equal(self, other: Range) -> bool:
        return self.start == other.start and self.end == other.end

    def contains(self, other: Range) -> bool:
        return self.start <= other.start and other.end <= self.end

    def to_json(self) -> list[int]:
        return [self.start, self.end]
