"""Fixed-size arithmetic value kinds and type classification helpers."""

from __future__ import annotations

import enum
import struct
import types
from typing import Any


class Scalar(enum.Enum):
    """An arithmetic value with a fixed little-endian binary layout."""

    BOOL = "?"
    INT8 = "b"
    UINT8 = "B"
    INT16 = "h"
    UINT16 = "H"
    INT32 = "i"
    UINT32 = "I"
    INT64 = "q"
    UINT64 = "Q"
    FLOAT32 = "f"
    FLOAT64 = "d"

    @property
    def _format(self) -> str:
        return "<" + self.value

    @property
    def size(self) -> int:
        """Number of bytes one value occupies."""
        return struct.calcsize(self._format)

    @property
    def bits(self) -> int:
        """Number of bits one value occupies."""
        return self.size * 8

    @property
    def is_integer(self) -> bool:
        """True for integer kinds, including BOOL."""
        return self not in (Scalar.FLOAT32, Scalar.FLOAT64)

    @property
    def is_signed(self) -> bool:
        """True for kinds that hold negative values."""
        return self.value in "bhiqfd"

    def pack(self, value: Any) -> bytes:
        """Encode ``value`` into its binary layout."""
        try:
            return struct.pack(self._format, value)
        except struct.error as exc:
            raise ValueError(f"cannot pack {value!r} as {self.name}: {exc}") from exc

    def unpack(self, data: bytes | bytearray | memoryview) -> Any:
        """Decode one value from exactly ``size`` bytes."""
        if len(data) != self.size:
            raise ValueError(
                f"{self.name} needs {self.size} bytes, got {len(data)}"
            )
        return struct.unpack(self._format, bytes(data))[0]


def is_compressible(kind: Any) -> bool:
    """Whether items of ``kind`` can be written as one contiguous block."""
    return isinstance(kind, Scalar)


_UNSUPPORTED_TYPES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.MethodDescriptorType,
    types.MemberDescriptorType,
    types.GetSetDescriptorType,
    property,
    staticmethod,
    classmethod,
)


def is_unsupported(value: Any) -> bool:
    """Whether ``value`` can never be serialized: None, functions and members."""
    return value is None or isinstance(value, _UNSUPPORTED_TYPES)