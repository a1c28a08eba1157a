import pytest

from serialfix.scalars import Scalar, is_compressible, is_unsupported


@pytest.mark.parametrize(
    "kind, value",
    [
        (Scalar.BOOL, True),
        (Scalar.BOOL, False),
        (Scalar.INT8, -128),
        (Scalar.UINT8, 255),
        (Scalar.INT16, -300),
        (Scalar.UINT16, 65535),
        (Scalar.INT32, -745),
        (Scalar.UINT32, 626126),
        (Scalar.INT64, -(2**63)),
        (Scalar.UINT64, 2**64 - 1),
        (Scalar.FLOAT32, 0.5),
        (Scalar.FLOAT64, 123.456),
    ],
)
def test_round_trip(kind, value):
    data = kind.pack(value)
    assert len(data) == kind.size
    assert kind.bits == kind.size * 8
    assert kind.unpack(data) == value


def test_little_endian_layout():
    assert Scalar.UINT32.pack(1) == b"\x01\x00\x00\x00"
    assert Scalar.UINT8.pack(14) == bytes([14])


def test_float32_loses_precision_consistently():
    value = Scalar.FLOAT32.unpack(Scalar.FLOAT32.pack(3.14))
    assert value != 3.14
    assert Scalar.FLOAT32.unpack(Scalar.FLOAT32.pack(value)) == value


@pytest.mark.parametrize(
    "kind, value",
    [(Scalar.UINT8, 256), (Scalar.UINT8, -1), (Scalar.INT8, 128), (Scalar.UINT32, "x")],
)
def test_pack_out_of_range_raises(kind, value):
    with pytest.raises(ValueError):
        kind.pack(value)


def test_unpack_wrong_length_raises():
    with pytest.raises(ValueError):
        Scalar.UINT32.unpack(b"\x00\x00")


def test_signedness_and_integer_flags():
    assert Scalar.INT16.is_signed and not Scalar.UINT16.is_signed
    assert Scalar.UINT64.is_integer and not Scalar.FLOAT64.is_integer
    assert Scalar.INT16.unpack(b"\xff\xff") == -1
    assert Scalar.UINT16.unpack(b"\xff\xff") == 65535
    with pytest.raises(ValueError):
        Scalar.UINT16.pack(-1)
    assert Scalar.INT16.pack(-1) == b"\xff\xff"


def test_is_compressible():
    assert all(is_compressible(kind) for kind in Scalar)
    assert not is_compressible(str)
    assert not is_compressible(None)


class _Sample:
    field = 1

    def method(self):
        return self.field

    @property
    def prop(self):
        return self.field


@pytest.mark.parametrize(
    "value",
    [None, len, lambda: 0, _Sample().method, _Sample.__dict__["prop"], str.upper],
)
def test_unsupported_values(value):
    assert is_unsupported(value) is True


@pytest.mark.parametrize("value", [0, "text", b"", [1], _Sample(), _Sample, 1.5])
def test_supported_values(value):
    assert is_unsupported(value) is False