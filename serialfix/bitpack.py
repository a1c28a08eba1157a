"""Packing of several small integer fields into a single integer value."""

from __future__ import annotations

from typing import Any

from .archive import IArchive, OArchive
from .scalars import Scalar


class BitPacker:
    """Exchanges integer fields through one shared ``scalar`` value.

    When writing, fields are collected from the lowest bit upwards and the
    packed value is written on :meth:`close`. When reading, the packed value
    is read at once and each call takes the next field from its low bits.
    """

    def __init__(self, archive: OArchive | IArchive, scalar: Scalar = Scalar.UINT32) -> None:
        if not isinstance(scalar, Scalar) or not scalar.is_integer or scalar.is_signed \
                or scalar is Scalar.BOOL:
            raise ValueError(f"a bit pack needs an unsigned integer kind, not {scalar!r}")
        if isinstance(archive, OArchive):
            self._reading = False
        elif isinstance(archive, IArchive):
            self._reading = True
        else:
            raise TypeError(f"expected an archive, got {archive!r}")
        self.archive = archive
        self.scalar = scalar
        self._mask = (1 << scalar.bits) - 1
        self._offset = 0
        self._closed = False
        self.data = archive.io(None, scalar) if self._reading else 0

    def __call__(self, field: int, bits: int) -> int:
        """Pack or unpack one field of ``bits`` bits and return its value."""
        if self._closed:
            raise ValueError("the bit pack is closed")
        if bits < 0:
            raise ValueError(f"a field cannot have {bits} bits")
        if self._reading:
            value = self.data & ((1 << bits) - 1)
            self.data >>= bits
            return value
        self.data = (self.data | (field << self._offset)) & self._mask
        self._offset += bits
        return field

    def close(self) -> None:
        """Finish the pack, writing the packed value when writing."""
        if self._closed:
            return
        self._closed = True
        if not self._reading:
            self.archive.io(self.data, self.scalar)

    def __enter__(self) -> BitPacker:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def bitpack(archive: OArchive | IArchive, scalar: Scalar = Scalar.UINT32) -> BitPacker:
    """Start a bit pack over ``archive`` using ``scalar`` as the packed value."""
    return BitPacker(archive, scalar)