"""Multi-dimensional arrays exchanged together with their dimensions."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from .archive import IArchive, OArchive, SerializationError
from .builtins import pack_items
from .scalars import Scalar

_SIZE = Scalar.UINT64
_FLAG = Scalar.BOOL


def _normalize_dims(dims: Sequence[int]) -> tuple[int, ...]:
    result = tuple(int(dim) for dim in dims)
    if not result:
        raise ValueError("a span needs at least one dimension")
    negative = [dim for dim in result if dim < 0]
    if negative:
        raise ValueError(f"a dimension cannot be negative: {negative[0]}")
    return result


class Span:
    """A view of nested sequences as an array with fixed dimensions.

    Indexing a span of several dimensions gives a span of the remaining
    ones; indexing a one-dimensional span gives the element itself.
    """

    def __init__(self, data: Sequence[Any], dims: Sequence[int]) -> None:
        self.data = data
        self.dims = _normalize_dims(dims)

    def __repr__(self) -> str:
        return f"Span(dims={self.dims!r})"

    def __len__(self) -> int:
        return self.dims[0]

    def __getitem__(self, index: int) -> Any:
        size = len(self)
        if not -size <= index < size:
            raise IndexError(f"index {index} is out of range for a dimension of {size}")
        if index < 0:
            index += size
        item = self.data[index]
        if len(self.dims) == 1:
            return item
        return Span(item, self.dims[1:])

    def __iter__(self) -> Iterator[Any]:
        for index in range(len(self)):
            yield self[index]

    def check(self) -> None:
        """Raise ValueError unless the data has exactly the dimensions of the span."""
        if not isinstance(self.data, Sequence) or isinstance(self.data, (str, bytes)):
            raise ValueError(f"expected a sequence, got {self.data!r}")
        if len(self.data) != len(self):
            raise ValueError(f"expected {len(self)} items, got {len(self.data)}")
        if len(self.dims) > 1:
            for row in self:
                row.check()

    def tolist(self) -> list[Any]:
        """Return the contents as nested lists."""
        if len(self.dims) == 1:
            return list(self)
        return [row.tolist() for row in self]


def _save(archive: OArchive, view: Span, kind: Any) -> None:
    if len(view.dims) == 1:
        pack_items(archive, list(view), kind)
        return
    for row in view:
        _save(archive, row, kind)


def _load(archive: IArchive, dims: tuple[int, ...], kind: Any) -> list[Any]:
    if len(dims) == 1:
        return list(pack_items(archive, [None] * dims[0], kind))
    return [_load(archive, dims[1:], kind) for _ in range(dims[0])]


def span(
    archive: OArchive | IArchive,
    data: Sequence[Any] | None,
    dims: Sequence[int],
    kind: Any,
) -> tuple[Any, tuple[int, ...]]:
    """Exchange a multi-dimensional array of ``kind`` items with its dimensions.

    A flag telling whether the array exists is exchanged first, then each
    dimension, then the items row by row. Returns the array and its
    dimensions. When reading, ``data`` must be None and only the number of
    entries in ``dims`` matters; an absent array comes back as None with
    ``dims`` unchanged.
    """
    if isinstance(archive, OArchive):
        if data is None:
            archive.io(False, _FLAG)
            return None, tuple(dims)
        view = Span(data, dims)
        view.check()
        archive.io(True, _FLAG)
        for dim in view.dims:
            archive.io(dim, _SIZE)
        _save(archive, view, kind)
        return data, view.dims
    if isinstance(archive, IArchive):
        if data is not None:
            raise SerializationError("the array to read into must be None")
        count = len(dims)
        if count < 1:
            raise ValueError("a span needs at least one dimension")
        if not archive.io(None, _FLAG):
            return None, tuple(dims)
        read_dims = tuple(archive.io(None, _SIZE) for _ in range(count))
        return _load(archive, read_dims, kind), read_dims
    raise TypeError(f"expected an archive, got {archive!r}")