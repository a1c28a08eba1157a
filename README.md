# serialfix

Compact binary serialization for Python objects. Values are written through
an output archive into a `bytearray` or a binary file, and read back in the
same order, with the same kinds, through an input archive.

The package has no dependencies beyond the standard library and no
command-line tool; it is used as a library.

## Modules

- `serialfix.streams` – byte sinks and sources: `ByteWriter` and
  `ByteReader` over in-memory storage, `FileWriter` and `FileReader` over
  binary file objects. Reading past the end raises `EOFError`.
- `serialfix.scalars` – `Scalar`, the fixed-width little-endian kinds
  (`BOOL`, `INT8` … `UINT64`, `FLOAT32`, `FLOAT64`) with `pack` and
  `unpack`; `is_compressible(kind)` and `is_unsupported(value)`.
- `serialfix.archive` – `OArchive` and `IArchive` with their `io` and
  `track` methods, the factories `oarchive(storage)` and
  `iarchive(storage)`, the `serialization(cls)` decorator for user types,
  `binary(archive, data, scalar)` for raw blocks of scalars, `Tracking` and
  `SerializationError`.
- `serialfix.builtins` – kinds for containers and other values: `ArrayOf`,
  `ListOf`, `MapOf`, `SetOf`, `ComplexOf`, `VariantOf`, `AtomicOf`,
  `PointerOf`, plus the helpers `fast`, `slow` and `pack_items`.
- `serialfix.registry` – `Instantiable`, `InstantiableRegistry`,
  `AnyRegistry`, `type_key`, `serializable` and `RegistryError`, with the
  shared instances `instantiable_registry` and `any_registry`.
- `serialfix.bitpack` – `BitPacker` and `bitpack(archive, scalar)` for
  packing small integer fields into one unsigned integer.
- `serialfix.span` – `Span` and `span(archive, data, dims, kind)` for
  nested multi-dimensional arrays stored with their dimensions.

## Kinds

`archive.io(value, kind)` writes or reads one value. `kind` is one of:

- a `Scalar`;
- an `enum.Enum` subclass (stored as the member's value as `INT32`);
- a class registered with `serialization`;
- an object with `save(archive, value)` and `load(archive)` methods, such
  as the kinds in `serialfix.builtins`.

When `kind` is left out, the type of `value` is used, so plain `int`,
`float` and `str` values need an explicit kind. `OArchive.io` returns the
value unchanged; `IArchive.io` returns the value it read.

## Usage

```python
from serialfix.archive import iarchive, oarchive, serialization
from serialfix.builtins import ListOf
from serialfix.scalars import Scalar


class Vector:
    def __init__(self, x=0.0, y=0.0):
        self.x = x
        self.y = y


@serialization(Vector)
def _vector(archive, v):
    v.x = archive.io(v.x, Scalar.FLOAT32)
    v.y = archive.io(v.y, Scalar.FLOAT32)


storage = bytearray()
out = oarchive(storage)
out.io(Vector(1.5, -2.0))
out.io([1, 2, 3], ListOf(Scalar.INT32))

inp = iarchive(storage)
v = inp.io(None, Vector)
numbers = inp.io(None, ListOf(Scalar.INT32))
```

One function registered with `@serialization(cls)` serves both directions;
`@serialization(cls).save` and `@serialization(cls).load` register one
direction each. When reading, a non-None value returned by the function
replaces the object. A derived class can exchange its base's fields with
`archive.io(obj, Base)`; each base is handled once per object, even when
it is reached along several paths.

`oarchive` and `iarchive` accept a `bytearray` (or other byte storage), a
binary file object, or an existing stream wrapper.

## Reference tracking and polymorphism

`OArchive.track(obj)` writes a reference: an index, the class key and, the
first time only, the object's contents. `IArchive.track()` reads it back,
so objects shared between several references are shared again after
loading. `None` is stored as an empty reference. `IArchive.track` raises
`SerializationError` when given an object to read into.

Classes deriving from `Instantiable` register themselves when defined and
may choose their key: `class Shape(Instantiable, key="shape")`. Tracked
objects of such classes are written as their runtime class and come back
as that class; abstract classes cannot be recreated. `serializable(cls)`
registers a class (or the type of a value) in both registries and returns
its argument, so it also works as a decorator.

`InstantiableRegistry.add` ignores classes that are not `Instantiable` and
keeps the first class registered under a key. `InstantiableRegistry.fixture`
is stricter and raises `RegistryError` for a class that does not derive from
`Instantiable` or whose key is already taken. `clone`, `cast`, `save` and
`load` raise `RegistryError` for unknown keys or unregistered classes.

## Bit packing

```python
from serialfix.bitpack import bitpack
from serialfix.scalars import Scalar

with bitpack(out, Scalar.UINT8) as pack:
    pack(7, 3)
    pack(1, 1)
    pack(14, 4)

with bitpack(inp, Scalar.UINT8) as pack:
    a, b, c = pack(0, 3), pack(0, 1), pack(0, 4)
```

Fields are placed from the lowest bit upwards; the packed value is written
when the pack closes. Only unsigned integer scalars can be used.

## Spans

`span(archive, data, dims, kind)` writes a presence flag, each dimension as
`UINT64`, and then the items row by row. It returns the array and its
dimensions. When reading, `data` must be `None` and only the number of
entries in `dims` matters; the dimensions are read from the archive.

## What the package does not do

- There is no built-in kind for strings or bytes; describe them with a
  registered class or a custom kind object.
- Archives do not check that they are used in the right direction beyond
  the type of archive: an `OArchive` only writes and an `IArchive` only
  reads.
- There is no format versioning; data must be read with the same kinds,
  in the same order, as it was written.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```