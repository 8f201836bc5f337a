import pytest

from edittree.errors import EditTreeError, InsertionIndexError, UnresolvedRangeError


class TestErrors:
    def test_InsertionIndexError_message(self) -> None:
        error = InsertionIndexError(7, 2)

        assert str(error) == "Index 7 is out of range"
        assert isinstance(error, EditTreeError)

    def test_UnresolvedRangeError_message(self) -> None:
        with pytest.raises(EditTreeError, match="Range 'between' cannot be resolved") as excinfo:
            raise UnresolvedRangeError("between")

        assert excinfo.value.name == "between"
