"""Byte sinks and sources that archives read from and write to."""

from __future__ import annotations

from typing import BinaryIO, MutableSequence


class ByteWriter:
    """Appends written bytes to an in-memory byte storage."""

    def __init__(self, storage: bytearray | MutableSequence[int]) -> None:
        self.storage = storage

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Append ``data`` to the end of the storage."""
        self.storage.extend(bytes(data))


class ByteReader:
    """Reads bytes sequentially from an in-memory byte storage."""

    def __init__(self, storage: bytes | bytearray | MutableSequence[int]) -> None:
        self.storage = storage
        self.offset = 0

    def read(self, size: int) -> bytes:
        """Return the next ``size`` bytes and advance past them."""
        if size < 0:
            raise ValueError(f"cannot read a negative number of bytes: {size}")
        end = self.offset + size
        if end > len(self.storage):
            raise EOFError(
                f"requested {size} bytes at offset {self.offset}, "
                f"but only {len(self.storage) - self.offset} remain"
            )
        chunk = bytes(self.storage[self.offset:end])
        self.offset = end
        return chunk


class FileWriter:
    """Writes bytes to a binary file object."""

    def __init__(self, file: BinaryIO) -> None:
        self.file = file

    def write(self, data: bytes | bytearray | memoryview) -> None:
        """Write ``data`` to the file."""
        self.file.write(bytes(data))


class FileReader:
    """Reads bytes from a binary file object."""

    def __init__(self, file: BinaryIO) -> None:
        self.file = file

    def read(self, size: int) -> bytes:
        """Return exactly ``size`` bytes from the file."""
        if size < 0:
            raise ValueError(f"cannot read a negative number of bytes: {size}")
        chunk = self.file.read(size)
        if len(chunk) < size:
            raise EOFError(f"requested {size} bytes, but the file held only {len(chunk)}")
        return chunk