"""Serialization kinds for containers, complex numbers, variants and owned pointers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .archive import IArchive, OArchive, SerializationError, binary
from .scalars import Scalar, is_compressible

_SIZE = Scalar.UINT64
_NPOS = (1 << 64) - 1


def _is_reading(archive: Any) -> bool:
    if isinstance(archive, IArchive):
        return True
    if isinstance(archive, OArchive):
        return False
    raise TypeError(f"expected an archive, got {archive!r}")


def _accepts(kind: Any, value: Any) -> bool:
    """Whether ``value`` can be written as ``kind``."""
    if kind is None:
        return value is None
    if isinstance(kind, Scalar):
        if kind is Scalar.BOOL:
            return isinstance(value, bool)
        if kind.is_integer:
            if isinstance(value, bool) or not isinstance(value, int):
                return False
            try:
                kind.pack(value)
            except ValueError:
                return False
            return True
        return isinstance(value, float)
    if isinstance(kind, type):
        return isinstance(value, kind)
    check = getattr(kind, "_accepts", None)
    return bool(check(value)) if callable(check) else False


def fast(archive: OArchive | IArchive, values: Sequence[Any], scalar: Scalar) -> Any:
    """Exchange ``values`` as one contiguous block of ``scalar`` values.

    When reading, the length of ``values`` tells how many values to read and
    a list of the values read is returned.
    """
    if not is_compressible(scalar):
        raise TypeError(f"{scalar!r} is not a scalar kind")
    if _is_reading(archive):
        return binary(archive, [None] * len(values), scalar)
    binary(archive, list(values), scalar)
    return values


def slow(archive: OArchive | IArchive, values: Iterable[Any], kind: Any = None) -> Any:
    """Exchange ``values`` one item at a time as ``kind``.

    When reading, each item of ``values`` is read into and a list of the
    results is returned.
    """
    if _is_reading(archive):
        return [archive.io(item, kind) for item in values]
    for item in values:
        archive.io(item, kind)
    return values


def pack_items(archive: OArchive | IArchive, values: Sequence[Any], kind: Any) -> Any:
    """Exchange ``values`` as a block when ``kind`` allows it, item by item otherwise."""
    if is_compressible(kind):
        return fast(archive, values, kind)
    return slow(archive, values, kind)


@dataclass(frozen=True)
class ArrayOf:
    """A sequence of exactly ``size`` items, stored without a length."""

    kind: Any
    size: int

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, (list, tuple)) and len(value) == self.size

    def save(self, archive: OArchive, value: Sequence[Any]) -> None:
        if len(value) != self.size:
            raise ValueError(f"expected {self.size} items, got {len(value)}")
        pack_items(archive, list(value), self.kind)

    def load(self, archive: IArchive) -> list[Any]:
        return list(pack_items(archive, [None] * self.size, self.kind))


@dataclass(frozen=True)
class ComplexOf:
    """A complex number stored as its real part followed by its imaginary part."""

    scalar: Scalar = Scalar.FLOAT64

    def _part(self, number: float) -> Any:
        return int(number) if self.scalar.is_integer else number

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, complex)

    def save(self, archive: OArchive, value: complex) -> None:
        value = complex(value)
        archive.io(self._part(value.real), self.scalar)
        archive.io(self._part(value.imag), self.scalar)

    def load(self, archive: IArchive) -> complex:
        real = archive.io(None, self.scalar)
        imag = archive.io(None, self.scalar)
        return complex(real, imag)


@dataclass(frozen=True)
class ListOf:
    """A sequence of any length, stored as its length followed by each item."""

    kind: Any

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, (list, tuple))

    def save(self, archive: OArchive, value: Iterable[Any]) -> None:
        items = list(value)
        archive.io(len(items), _SIZE)
        slow(archive, items, self.kind)

    def load(self, archive: IArchive) -> list[Any]:
        size = archive.io(None, _SIZE)
        return slow(archive, [None] * size, self.kind)


@dataclass(frozen=True)
class MapOf:
    """A mapping stored as its size followed by each key and value.

    With ``multi`` the value is a sequence of pairs whose keys may repeat;
    otherwise a dict is read, and a repeated key keeps its first value.
    """

    key_kind: Any
    value_kind: Any
    multi: bool = False

    def _accepts(self, value: Any) -> bool:
        return isinstance(value, (list, tuple)) if self.multi else isinstance(value, Mapping)

    def save(self, archive: OArchive, value: Any) -> None:
        pairs = list(value.items()) if isinstance(value, Mapping) else list(value)
        archive.io(len(pairs), _SIZE)
        for key, item in pairs:
            archive.io(key, self.key_kind)
            archive.io(item, self.value_kind)

    def load(self, archive: IArchive) -> Any:
        size = archive.io(None, _SIZE)
        pairs = []
        for _ in range(size):
            key = archive.io(None, self.key_kind)
            item = archive.io(None, self.value_kind)
            pairs.append((key, item))
        if self.multi:
            return pairs
        result: dict[Any, Any] = {}
        for key, item in pairs:
            result.setdefault(key, item)
        return result


@dataclass(frozen=True)
class SetOf:
    """A set stored as its size followed by each item.

    With ``multi`` a list is read, so repeated items are kept.
    """

    kind: Any
    multi: bool = False

    def _accepts(self, value: Any) -> bool:
        if self.multi:
            return isinstance(value, (list, tuple))
        return isinstance(value, (set, frozenset))

    def save(self, archive: OArchive, value: Iterable[Any]) -> None:
        items = list(value)
        archive.io(len(items), _SIZE)
        slow(archive, items, self.kind)

    def load(self, archive: IArchive) -> Any:
        size = archive.io(None, _SIZE)
        items = slow(archive, [None] * size, self.kind)
        return items if self.multi else set(items)


class VariantOf:
    """A value of one of several alternative kinds, stored as its index and itself.

    The first alternative that accepts a value is used. An alternative of
    None stands for an empty state and stores nothing. A None value with no
    such alternative is stored as the valueless index.
    """

    def __init__(self, *alternatives: Any) -> None:
        self.alternatives = alternatives

    def __repr__(self) -> str:
        return f"VariantOf{self.alternatives!r}"

    def _accepts(self, value: Any) -> bool:
        return value is None or any(_accepts(kind, value) for kind in self.alternatives)

    def save(self, archive: OArchive, value: Any) -> None:
        for index, kind in enumerate(self.alternatives):
            if _accepts(kind, value):
                archive.io(index, _SIZE)
                if kind is not None:
                    archive.io(value, kind)
                return
        if value is None:
            archive.io(_NPOS, _SIZE)
            return
        raise TypeError(f"{value!r} matches no alternative of {self!r}")

    def load(self, archive: IArchive) -> Any:
        index = archive.io(None, _SIZE)
        if index == _NPOS or index >= len(self.alternatives):
            return None
        kind = self.alternatives[index]
        if kind is None:
            return None
        return archive.io(None, kind)


@dataclass(frozen=True)
class AtomicOf:
    """A value shared between threads, exchanged as a snapshot of ``kind``."""

    kind: Any

    def _accepts(self, value: Any) -> bool:
        return _accepts(self.kind, value)

    def save(self, archive: OArchive, value: Any) -> None:
        archive.io(value, self.kind)

    def load(self, archive: IArchive) -> Any:
        return archive.io(None, self.kind)


@dataclass(frozen=True)
class PointerOf:
    """An owned, possibly absent object, stored through reference tracking.

    With ``cls`` the object must be an instance of that class.
    """

    cls: type | None = None

    def _accepts(self, value: Any) -> bool:
        return value is None or self.cls is None or isinstance(value, self.cls)

    def save(self, archive: OArchive, value: Any) -> None:
        if not self._accepts(value):
            raise TypeError(f"{value!r} is not a {self.cls.__qualname__}")
        archive.track(value)

    def load(self, archive: IArchive) -> Any:
        result = archive.track(None)
        if not self._accepts(result):
            raise SerializationError(
                f"read a {type(result).__qualname__}, expected a {self.cls.__qualname__}"
            )
        return result