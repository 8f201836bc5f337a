import attr


class EditTreeError(Exception):
    """Base exception for the library."""


@attr.s(frozen=True, slots=True, auto_exc=True)
class InsertionIndexError(EditTreeError):
    """Raised when an insertion index falls outside the child list."""

    index: int = attr.ib()
    length: int = attr.ib()

    def __str__(self) -> str:
        return f"Index {self.index} is out of range"


@attr.s(frozen=True, slots=True, auto_exc=True)
class UnresolvedRangeError(EditTreeError):
    """Raised when a named range is absent and cannot be derived."""

    name: str = attr.ib()

    def __str__(self) -> str:
        return f"Range {self.name!r} cannot be resolved"
