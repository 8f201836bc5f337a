"""Editable tree nodes over a shared text buffer.

Each node owns up to five stored ranges (`before`, `name`, `between`,
`value`, `after`) into the buffer of its tree, plus two derived ones
(`full` and `self`). Editing the text of any range goes through
`Node._replace_range`, which updates the buffer once and then moves every
range in the tree that sits at or after the edit.
"""

from __future__ import annotations

import enum
import logging
import typing as t
import weakref

import attr

from edittree.buffer import Buffer, _to_buffer
from edittree.errors import InsertionIndexError, UnresolvedRangeError
from edittree.range import Range


logger = logging.getLogger(__name__)


class RangeName(str, enum.Enum):
    BEFORE = "before"
    NAME = "name"
    BETWEEN = "between"
    VALUE = "value"
    AFTER = "after"
    FULL = "full"
    SELF = "self"


STORED_RANGES = (
    RangeName.BEFORE,
    RangeName.NAME,
    RangeName.BETWEEN,
    RangeName.VALUE,
    RangeName.AFTER,
)

_MISSING = object()

_NodeT = t.TypeVar("_NodeT", bound="Node")


def _to_ranges(
    ranges: t.Optional[t.Mapping[t.Union[str, RangeName], t.Any]]
) -> dict[RangeName, Range]:
    out = {}
    for key, value in (ranges or {}).items():
        if not isinstance(value, Range):
            value = Range(*value)
        out[RangeName(key)] = value
    return out


def _unique(ranges: t.Iterable[t.Optional[Range]]) -> list[Range]:
    seen: set[int] = set()
    out = []
    for r in ranges:
        if r is not None and id(r) not in seen:
            seen.add(id(r))
            out.append(r)
    return out


def _slot_property(key: RangeName) -> property:
    def fget(self: Node) -> str:
        return self.range_value(key)

    def fset(self: Node, text: str) -> None:
        self._set_range_text(key, text)

    return property(fget, fset, doc=f"Text of the `{key.value}` range.")


@attr.s(slots=True, eq=False, repr=False)
class Node:
    """Tree element holding named ranges into a buffer shared by its tree."""

    _buffer: Buffer = attr.ib(converter=_to_buffer)
    _ranges: dict[RangeName, Range] = attr.ib(factory=dict, converter=_to_ranges)
    type_: str = attr.ib(default="node")

    children: list[Node] = attr.ib(init=False, factory=list)
    _parent: t.Optional[weakref.ref[Node]] = attr.ib(init=False, default=None)
    _data: dict[str, t.Any] = attr.ib(init=False, factory=dict)

    before = _slot_property(RangeName.BEFORE)
    name = _slot_property(RangeName.NAME)
    between = _slot_property(RangeName.BETWEEN)
    value = _slot_property(RangeName.VALUE)
    after = _slot_property(RangeName.AFTER)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type_!r} children={len(self.children)}>"

    def __str__(self) -> str:
        return self.value_of()

    @property
    def parent(self) -> t.Optional[Node]:
        """The parent node or None; uses a weak reference."""
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, node: t.Optional[Node]) -> None:
        self._parent = None if node is None else weakref.ref(node)

    @property
    def root(self) -> Node:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def buffer(self) -> Buffer:
        return self._buffer

    def range(self, name: t.Union[str, RangeName]) -> t.Optional[Range]:
        """Return the named range, deriving `full`, `self` and `before`.

        A derived `before` is cached as a stored slot so that later edits
        keep it in sync. `full` and `self` are computed on every call.
        Slots that are neither stored nor derivable resolve to None.
        """
        key = RangeName(name)
        stored = self._ranges.get(key)
        if stored is not None:
            return stored

        if key is RangeName.FULL:
            return Range(
                self._require(RangeName.BEFORE).start,
                self._require(RangeName.AFTER).end,
            )
        if key is RangeName.SELF:
            return Range(
                self._require(RangeName.NAME).start,
                self._require(RangeName.AFTER).end,
            )
        if key is RangeName.BEFORE:
            parent = self.parent
            if parent is None:
                return None
            ix = parent.index_of(self)
            if ix == 0:
                if parent.parent is None:
                    # first top-level node
                    start = 0
                else:
                    start = parent._require(RangeName.BETWEEN).end
            else:
                start = parent.children[ix - 1]._require(RangeName.AFTER).end
            derived = Range(start, self._require(RangeName.NAME).start)
            self._ranges[key] = derived
            return derived
        return None

    def _require(self, name: RangeName) -> Range:
        r = self.range(name)
        if r is None:
            raise UnresolvedRangeError(name.value)
        return r

    def range_value(self, name: t.Union[str, RangeName, Range]) -> str:
        r = name if isinstance(name, Range) else self.range(name)
        if r is None:
            return ""
        return self._buffer.substring(r)

    def value_of(self, trim: bool = False) -> str:
        out = self.range_value(RangeName.FULL)
        return out.strip() if trim else out

    def data(self, key: str, value: t.Any = _MISSING) -> t.Any:
        """Get or set scratch data, used by transformers to cache state."""
        if value is not _MISSING:
            self._data[key] = value
        return self._data.get(key)

    def index_of(self, node: t.Union[Node, int, str]) -> int:
        target = self.get(node)
        for ix, child in enumerate(self.children):
            if child is target:
                return ix
        return -1

    def get(self, key: t.Union[Node, int, str]) -> t.Optional[Node]:
        """Return a child by index or by the text of its `name` range.

        Indexes count from the start only; a negative or out of range
        index gives None.
        """
        if isinstance(key, Node):
            return key
        if isinstance(key, int):
            if 0 <= key < len(self.children):
                return self.children[key]
            return None
        for child in self.children:
            if child.name == key:
                return child
        return None

    def descendants(self) -> list[Node]:
        out = []
        for child in self.children:
            out.append(child)
            out.extend(child.descendants())
        return out

    def attach(self, child: _NodeT) -> _NodeT:
        """Append an already positioned child without touching the text.

        Used when building a tree from parsed offsets; the child's ranges
        must already lie inside this node's `value` range.
        """
        self.children.append(child)
        child.parent = self
        return child

    def clone(self: _NodeT) -> _NodeT:
        """Create a detached shallow copy with its own buffer.

        The copy keeps this node's formatting and is meant to be used as a
        template for `insert`.
        """
        ranges = {}
        for key in STORED_RANGES:
            r = self.range(key)
            if r is not None:
                ranges[key] = r.clone()

        offset = min((r.start for r in ranges.values()), default=0)
        for r in ranges.values():
            r.shift(-offset)

        return type(self)(Buffer(self.value_of()), ranges, self.type_)

    def insert(
        self, node: _NodeT, at_index: t.Union[int, str, None] = 0
    ) -> _NodeT:
        """Insert `node` into the child list at `at_index`.

        `at_index` may be negative, or one of "first" and "last". A node
        that carries ranges of a different buffer is rebased onto this
        tree's buffer at the insertion point and dropped from the child
        list of its previous parent. Nothing changes when any range
        involved cannot be resolved.
        """
        index = self._resolve_index(at_index or 0)
        length = len(self.children)
        if index < 0 or index > length:
            raise InsertionIndexError(index, length)

        if index < length:
            position = self.children[index]._require(RangeName.FULL).start
        else:
            position = self._require(RangeName.VALUE).end

        text = node.value_of()
        foreign = node._buffer is not self._buffer
        if foreign:
            delta = position - node._require(RangeName.FULL).start
            moved = _unique(_subtree_ranges(node))
        growing = _unique(_container_ranges(self))
        following = _unique(_outer_ranges(self, self.children[index:]))

        if foreign:
            old_parent = node.parent
            if old_parent is not None and old_parent.index_of(node) != -1:
                old_parent.children.remove(node)
            for r in moved:
                r.shift(delta)
            for n in (node, *node.descendants()):
                n._buffer = self._buffer

        logger.debug("insert %r at index %d (offset %d)", node, index, position)
        self.children.insert(index, node)
        node.parent = self
        self._commit(Range(position, position), text, growing, following)
        return node

    def remove(self: _NodeT) -> _NodeT:
        """Remove this node and its text from the tree.

        Removing a detached node does nothing.
        """
        parent = self.parent
        if parent is None:
            return self
        ix = parent.index_of(self)
        if ix == -1:
            return self

        logger.debug("remove %r from index %d", self, ix)
        self._replace_range(self._require(RangeName.FULL), "")
        del parent.children[ix]
        self.parent = None
        return self

    def to_json(self) -> dict[str, t.Any]:
        return {
            "r": {key.value: r.to_json() for key, r in self._stored_items()},
            "t": self.type_,
            "c": [child.to_json() for child in self.children],
        }

    @classmethod
    def from_json(cls: type[_NodeT], buffer: Buffer, data: t.Mapping[str, t.Any]) -> _NodeT:
        node = cls(buffer, data.get("r"), data.get("t", "node"))
        for child in data.get("c", ()):
            node.attach(Node.from_json(node.buffer, child))
        return node

    def dump_ranges(self) -> str:
        return "\n".join(
            f'{key.value} ({r.start}:{r.end}) "{self.range_value(r)}"'
            for key, r in self._stored_items()
        )

    def _stored_items(self) -> list[tuple[RangeName, Range]]:
        return [(key, self._ranges[key]) for key in RangeName if key in self._ranges]

    def _resolve_index(self, index: t.Union[int, str]) -> int:
        length = len(self.children)
        if index == "first":
            return 0
        if index == "last":
            return length
        if not isinstance(index, int):
            raise TypeError(f"Invalid child index {index!r}")
        if index < 0:
            return index + length
        return index

    def _set_range_text(self, key: RangeName, text: str) -> None:
        r = self._require(key)
        self._replace_range(r, text, key)
        r.end = r.start + len(text)
        if key is RangeName.VALUE and self.children:
            # their text was just replaced
            logger.debug("detach %d children of %r", len(self.children), self)
            for child in self.children:
                child.parent = None
            self.children.clear()

    def _replace_range(
        self, target: Range, text: str, slot: t.Optional[RangeName] = None
    ) -> int:
        """Replace the text at `target` and move every affected range.

        `slot` names the range of this node being edited; the node's own
        ranges after it follow the edit. Without a slot the edit is one
        of this node as a whole (removal) and its own ranges are left
        alone.
        """
        growing: list[Range] = []
        following: list[Range] = []
        if len(text) != target.length:
            # deriving `before` needs pre-edit offsets and may raise, so
            # collect before the buffer changes
            growing = _unique(_growing_ranges(self, slot))
            following = _unique(_next_ranges(self, slot))
        return self._commit(target, text, growing, following)

    def _commit(
        self,
        target: Range,
        text: str,
        growing: list[Range],
        following: list[Range],
    ) -> int:
        delta = len(text) - target.length
        logger.debug(
            "replace %d:%d with %d chars (delta %d)",
            target.start,
            target.end,
            len(text),
            delta,
        )
        self._buffer.update(target, text)
        if not delta:
            return delta

        seen: set[int] = set()
        for r in growing:
            seen.add(id(r))
            r.end += delta
        for r in following:
            if id(r) in seen:
                continue
            seen.add(id(r))
            if r.start >= target.start:
                r.shift(delta)
            elif r.end >= target.start:
                r.end += delta
        return delta


def _node_ranges(node: Node) -> list[t.Optional[Range]]:
    ranges = [node.range(key) for key in STORED_RANGES]
    ranges.extend(node._ranges.get(key) for key in (RangeName.FULL, RangeName.SELF))
    return ranges


def _subtree_ranges(node: Node) -> list[t.Optional[Range]]:
    out = _node_ranges(node)
    for child in node.descendants():
        out.extend(_node_ranges(child))
    return out


def _container_ranges(node: t.Optional[Node]) -> t.Iterator[t.Optional[Range]]:
    while node is not None:
        # only materialized ranges; never derive here
        yield node._ranges.get(RangeName.VALUE)
        yield node._ranges.get(RangeName.FULL)
        yield node._ranges.get(RangeName.SELF)
        node = node.parent


def _growing_ranges(
    node: Node, slot: t.Optional[RangeName]
) -> t.Iterator[t.Optional[Range]]:
    if slot is not None:
        yield node._ranges.get(RangeName.FULL)
        if slot is not RangeName.BEFORE:
            yield node._ranges.get(RangeName.SELF)
    yield from _container_ranges(node.parent)


def _ranges_after(node: Node, slot: RangeName) -> list[t.Optional[Range]]:
    ix = STORED_RANGES.index(slot)
    return [node.range(key) for key in STORED_RANGES[ix + 1 :]]


def _next_siblings(node: Node) -> list[Node]:
    parent = node.parent
    if parent is None:
        return []
    return parent.children[parent.index_of(node) + 1 :]


def _outer_ranges(
    parent: t.Optional[Node], siblings: list[Node]
) -> t.Iterator[t.Optional[Range]]:
    """Ranges of `siblings` and of everything after them up the tree."""
    for sibling in siblings:
        yield from _subtree_ranges(sibling)

    ancestor = parent
    while ancestor is not None:
        yield from _ranges_after(ancestor, RangeName.VALUE)
        for sibling in _next_siblings(ancestor):
            yield from _subtree_ranges(sibling)
        ancestor = ancestor.parent


def _next_ranges(
    node: Node, slot: t.Optional[RangeName]
) -> t.Iterator[t.Optional[Range]]:
    if slot is not None:
        yield from _ranges_after(node, slot)
        if slot is RangeName.BEFORE:
            yield node._ranges.get(RangeName.SELF)
        if STORED_RANGES.index(slot) < STORED_RANGES.index(RangeName.VALUE):
            for child in node.descendants():
                yield from _node_ranges(child)

    yield from _outer_ranges(node.parent, _next_siblings(node))
