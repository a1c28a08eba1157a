import enum
from dataclasses import dataclass

import pytest

from serialfix.archive import SerializationError, iarchive, oarchive, serialization
from serialfix.builtins import (
    ArrayOf,
    AtomicOf,
    ComplexOf,
    ListOf,
    MapOf,
    PointerOf,
    SetOf,
    VariantOf,
    fast,
    pack_items,
    slow,
)
from serialfix.registry import Instantiable
from serialfix.scalars import Scalar


@dataclass
class Vec:
    x: float = 0.0
    y: float = 0.0


@serialization(Vec)
def _vec(archive, vec):
    vec.x = archive.io(vec.x, Scalar.FLOAT32)
    vec.y = archive.io(vec.y, Scalar.FLOAT32)


class Node(Instantiable):
    def __init__(self, value=0):
        self.value = value


@serialization(Node)
def _node(archive, node):
    node.value = archive.io(node.value, Scalar.INT32)


class State(enum.Enum):
    FREE = 0
    BLOCKED = 1
    FORCED = 2


def round_trip(value, kind):
    storage = bytearray()
    oarchive(storage).io(value, kind)
    return iarchive(storage).io(None, kind), storage


def test_array_hello():
    s_a = [ord(c) for c in "Hello"]
    kind = ArrayOf(Scalar.INT8, 5)
    result, storage = round_trip(s_a, kind)
    assert result == s_a
    assert bytes(storage) == b"Hello"


def test_array_wrong_size():
    with pytest.raises(ValueError):
        oarchive(bytearray()).io([1, 2, 3], ArrayOf(Scalar.INT8, 5))


def test_array_of_classes():
    values = [Vec(0.5, 1.25), Vec(-2.0, 3.5)]
    result, _ = round_trip(values, ArrayOf(Vec, 2))
    assert result == values


def test_atomic():
    result, storage = round_trip(626126, AtomicOf(Scalar.UINT32))
    assert result == 626126
    assert len(storage) == 4


def test_complex():
    result, storage = round_trip(1.0 - 0.5j, ComplexOf())
    assert result == 1.0 - 0.5j
    assert len(storage) == 16


def test_complex_float32():
    result, storage = round_trip(0.25 + 2.5j, ComplexOf(Scalar.FLOAT32))
    assert result == 0.25 + 2.5j
    assert len(storage) == 8


def test_forward_list_of_enums():
    s_fl = [State.FORCED, State.BLOCKED, State.FORCED, State.FREE]
    result, storage = round_trip(s_fl, ListOf(State))
    assert result == s_fl
    assert bytes(storage[:8]) == b"\x04" + b"\x00" * 7


def test_list_layout():
    _, storage = round_trip([1, 2], ListOf(Scalar.UINT8))
    assert bytes(storage) == b"\x02" + b"\x00" * 7 + b"\x01\x02"


def test_empty_list():
    result, storage = round_trip([], ListOf(Scalar.INT32))
    assert result == []
    assert len(storage) == 8


def test_map_round_trip():
    value = {3: Vec(1.0, 2.0), 1: Vec(0.5, 0.5)}
    result, _ = round_trip(value, MapOf(Scalar.UINT8, Vec))
    assert result == value


def test_map_nested_values():
    value = {1: [10, -20], 2: []}
    result, _ = round_trip(value, MapOf(Scalar.UINT8, ListOf(Scalar.INT16)))
    assert result == value


def test_multimap_keeps_duplicates():
    pairs = [(1, 5), (1, 6), (2, 7)]
    result, _ = round_trip(pairs, MapOf(Scalar.INT32, Scalar.INT32, multi=True))
    assert result == pairs


def test_map_duplicate_keys_keep_first():
    storage = bytearray()
    kind = MapOf(Scalar.INT32, Scalar.INT32)
    MapOf(Scalar.INT32, Scalar.INT32, multi=True).save(oarchive(storage), [(1, 5), (1, 6)])
    assert iarchive(storage).io(None, kind) == {1: 5}


def test_set_round_trip():
    result, _ = round_trip({4, 8, 15}, SetOf(Scalar.INT64))
    assert result == {4, 8, 15}


def test_multiset_round_trip():
    result, _ = round_trip([2, 2, 3], SetOf(Scalar.UINT16, multi=True))
    assert result == [2, 2, 3]


def test_variant_picks_alternative():
    kind = VariantOf(Scalar.INT32, Scalar.FLOAT64, Vec)
    result, storage = round_trip(2.5, kind)
    assert result == 2.5
    assert bytes(storage[:8]) == b"\x01" + b"\x00" * 7
    result, _ = round_trip(7, kind)
    assert result == 7
    result, _ = round_trip(Vec(1.0, 2.0), kind)
    assert result == Vec(1.0, 2.0)


def test_variant_empty_alternative():
    kind = VariantOf(None, Scalar.INT32)
    result, storage = round_trip(None, kind)
    assert result is None
    assert len(storage) == 8


def test_variant_valueless():
    result, storage = round_trip(None, VariantOf(Scalar.INT32))
    assert result is None
    assert bytes(storage) == b"\xff" * 8


def test_variant_no_match():
    with pytest.raises(TypeError):
        oarchive(bytearray()).io("text", VariantOf(Scalar.INT32))


def test_pointer_round_trip_shares_objects():
    node = Node(42)
    storage = bytearray()
    ar = oarchive(storage)
    ar.io(node, PointerOf(Node))
    ar.io(node, PointerOf(Node))
    ar.io(None, PointerOf(Node))
    ir = iarchive(storage)
    first = ir.io(None, PointerOf(Node))
    second = ir.io(None, PointerOf(Node))
    third = ir.io(None, PointerOf(Node))
    assert isinstance(first, Node)
    assert first.value == 42
    assert second is first
    assert third is None


def test_pointer_wrong_class():
    with pytest.raises(TypeError):
        oarchive(bytearray()).io(Node(1), PointerOf(Vec))


def test_fast_and_slow_direct():
    storage = bytearray()
    fast(oarchive(storage), [1, -2, 3], Scalar.INT16)
    assert len(storage) == 6
    assert fast(iarchive(storage), [None] * 3, Scalar.INT16) == [1, -2, 3]

    storage = bytearray()
    slow(oarchive(storage), [Vec(1.0, 0.5)], Vec)
    assert slow(iarchive(storage), [None], Vec) == [Vec(1.0, 0.5)]


def test_fast_requires_scalar():
    with pytest.raises(TypeError):
        fast(oarchive(bytearray()), [Vec()], Vec)


def test_pack_items_matches_fast_layout():
    one, two = bytearray(), bytearray()
    pack_items(oarchive(one), [7, 8], Scalar.UINT32)
    fast(oarchive(two), [7, 8], Scalar.UINT32)
    assert one == two
    assert pack_items(iarchive(one), [None, None], Scalar.UINT32) == [7, 8]


def test_requires_archive():
    with pytest.raises(TypeError):
        slow(object(), [1], Scalar.INT8)