"""Archives that write objects to, and read them back from, byte streams."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Any, Callable

from .registry import RegistryError, instantiable_registry, type_key
from .scalars import Scalar, is_unsupported
from .streams import ByteReader, ByteWriter, FileReader, FileWriter

_ENUM_SCALAR = Scalar.INT32
_INDEX_SCALAR = Scalar.UINT64
_KEY_SCALAR = Scalar.UINT64

Function = Callable[[Any, Any], Any]


class SerializationError(Exception):
    """Raised when an object cannot be written or read."""


@dataclass
class _Functions:
    save: Function | None = None
    load: Function | None = None


_functions: dict[type, _Functions] = {}
_classes_by_key: dict[int, type] = {}


class _Registration:
    """Decorators that attach serialization functions to one class."""

    def __init__(self, cls: type) -> None:
        self._cls = cls

    def __call__(self, function: Function) -> Function:
        """Use ``function`` both for writing and for reading."""
        self.save(function)
        self.load(function)
        return function

    def save(self, function: Function) -> Function:
        """Use ``function`` for writing."""
        _functions[self._cls].save = function
        return function

    def load(self, function: Function) -> Function:
        """Use ``function`` for reading."""
        _functions[self._cls].load = function
        return function


def serialization(cls: type) -> _Registration:
    """Return decorators that register how objects of ``cls`` are serialized.

    ``@serialization(Box)`` registers one function for both directions;
    ``@serialization(Box).save`` and ``@serialization(Box).load`` register
    one direction each. A function receives the archive and the object and
    exchanges its fields through ``archive.io``; when reading, a value it
    returns replaces the object.
    """
    if not isinstance(cls, type):
        raise TypeError(f"expected a class, got {cls!r}")
    _functions.setdefault(cls, _Functions())
    _classes_by_key.setdefault(type_key(cls), cls)
    return _Registration(cls)


def _function_for(cls: type, mode: str) -> Function:
    entry = _functions.get(cls)
    function = getattr(entry, mode) if entry is not None else None
    if function is None:
        raise SerializationError(f"{cls.__qualname__} has no {mode} serialization")
    return function


def _construct(cls: type) -> Any:
    try:
        return cls()
    except TypeError as exc:
        raise SerializationError(
            f"{cls.__qualname__} cannot be created without arguments"
        ) from exc


def _is_kind_object(kind: Any) -> bool:
    return (
        not isinstance(kind, type)
        and callable(getattr(kind, "save", None))
        and callable(getattr(kind, "load", None))
    )


def _is_enum(kind: Any) -> bool:
    return isinstance(kind, type) and issubclass(kind, enum.Enum)


def _resolve_kind(value: Any, kind: Any) -> Any:
    if kind is not None:
        return kind
    if is_unsupported(value):
        raise TypeError(f"cannot tell how to serialize {value!r}; pass a kind")
    return type(value)


@dataclass
class Tracking:
    """Objects an archive has met, so shared objects and bases are handled once."""

    indices: dict[int, tuple[int, Any]] = field(default_factory=dict)
    objects: dict[int, Any] = field(default_factory=dict)
    hierarchy: dict[int, tuple[Any, set[type]]] = field(default_factory=dict)

    def _enter_base(self, obj: Any, base: type) -> bool:
        if type(obj) is base:
            return True
        _, done = self.hierarchy.setdefault(id(obj), (obj, set()))
        if base in done:
            return False
        done.add(base)
        return True


class OArchive:
    """Writes values to a byte sink."""

    def __init__(self, stream: Any) -> None:
        self.stream = stream
        self.tracking = Tracking()

    def _write(self, kind: Scalar, value: Any) -> None:
        self.stream.write(kind.pack(value))

    def io(self, value: Any, kind: Any = None) -> Any:
        """Write ``value`` as ``kind`` and return it unchanged.

        ``kind`` is a :class:`Scalar`, an enumeration, a class with a
        registered serialization, or an object with ``save`` and ``load``
        methods; by default it is the type of ``value``.
        """
        kind = _resolve_kind(value, kind)
        if isinstance(kind, Scalar):
            self._write(kind, value)
            return value
        if _is_kind_object(kind):
            kind.save(self, value)
            return value
        if not isinstance(kind, type):
            raise TypeError(f"unknown kind {kind!r}")
        if not isinstance(value, kind):
            raise TypeError(f"{value!r} is not a {kind.__qualname__}")
        if _is_enum(kind):
            self._write(_ENUM_SCALAR, value.value)
            return value
        if not self.tracking._enter_base(value, kind):
            return value
        _function_for(kind, "save")(self, value)
        return value

    def track(self, obj: Any) -> Any:
        """Write a reference to ``obj``; its contents follow only the first time.

        Objects of instantiable classes are written as their runtime class,
        so they come back with the same type.
        """
        if obj is None:
            self._write(_INDEX_SCALAR, 0)
            return None
        known = self.tracking.indices.get(id(obj))
        if known is not None:
            self._write(_INDEX_SCALAR, known[0])
            return obj
        cls = type(obj)
        if instantiable_registry.is_instantiable(cls):
            try:
                key = instantiable_registry.key_of(obj)
            except RegistryError as exc:
                raise SerializationError(str(exc)) from exc
        else:
            _function_for(cls, "save")
            key = type_key(cls)
        index = len(self.tracking.indices) + 1
        self.tracking.indices[id(obj)] = (index, obj)
        self._write(_INDEX_SCALAR, index)
        self._write(_KEY_SCALAR, key)
        if instantiable_registry.is_instantiable(cls):
            instantiable_registry.save(self, obj)
        else:
            self.io(obj, cls)
        return obj


class IArchive:
    """Reads values from a byte source."""

    def __init__(self, stream: Any) -> None:
        self.stream = stream
        self.tracking = Tracking()

    def _read(self, kind: Scalar) -> Any:
        return kind.unpack(self.stream.read(kind.size))

    def io(self, value: Any = None, kind: Any = None) -> Any:
        """Read a value of ``kind`` and return it.

        For a class the fields are read into ``value``, or into a new object
        when ``value`` is None.
        """
        if value is None and kind is None:
            raise TypeError("a kind or a value to read into is required")
        kind = _resolve_kind(value, kind)
        if isinstance(kind, Scalar):
            return self._read(kind)
        if _is_kind_object(kind):
            return kind.load(self)
        if not isinstance(kind, type):
            raise TypeError(f"unknown kind {kind!r}")
        if _is_enum(kind):
            raw = self._read(_ENUM_SCALAR)
            try:
                return kind(raw)
            except ValueError as exc:
                raise SerializationError(
                    f"{raw} is not a value of {kind.__qualname__}"
                ) from exc
        if value is None:
            value = _construct(kind)
        elif not isinstance(value, kind):
            raise TypeError(f"{value!r} is not a {kind.__qualname__}")
        if not self.tracking._enter_base(value, kind):
            return value
        result = _function_for(kind, "load")(self, value)
        return value if result is None else result

    def _instantiate(self, key: int) -> Any:
        try:
            instance = instantiable_registry.clone(key)
        except RegistryError:
            cls = _classes_by_key.get(key)
            if cls is None:
                raise SerializationError(f"no class is known under key {key:#x}") from None
            return _construct(cls)
        if instance is None:
            raise SerializationError(f"the class under key {key:#x} is abstract")
        return instance

    def track(self, obj: Any = None) -> Any:
        """Read a reference written by :meth:`OArchive.track` and return its object.

        ``obj`` must be None: reading never overwrites an existing object.
        """
        if obj is not None:
            raise SerializationError("the object to read into must be None")
        index = self._read(_INDEX_SCALAR)
        if index == 0:
            return None
        if index in self.tracking.objects:
            return self.tracking.objects[index]
        if index != len(self.tracking.objects) + 1:
            raise SerializationError(f"tracking index {index} refers to an unknown object")
        instance = self._instantiate(self._read(_KEY_SCALAR))
        self.tracking.objects[index] = instance
        result = self.io(instance, type(instance))
        self.tracking.objects[index] = result
        return result


def oarchive(storage: Any) -> OArchive:
    """Create an archive writing to a byte storage or a binary file object."""
    if isinstance(storage, (ByteWriter, FileWriter)):
        return OArchive(storage)
    if hasattr(storage, "write"):
        return OArchive(FileWriter(storage))
    return OArchive(ByteWriter(storage))


def iarchive(storage: Any) -> IArchive:
    """Create an archive reading from a byte storage or a binary file object."""
    if isinstance(storage, (ByteReader, FileReader)):
        return IArchive(storage)
    if hasattr(storage, "read"):
        return IArchive(FileReader(storage))
    return IArchive(ByteReader(storage))


def binary(archive: OArchive | IArchive, data: Any, scalar: Scalar) -> Any:
    """Exchange ``data`` as one contiguous block of ``scalar`` values.

    ``data`` is a single value or a list or tuple of values; when reading,
    its length tells how many values to read and a value of the same shape
    is returned.
    """
    many = isinstance(data, (list, tuple))
    values = list(data) if many else [data]
    if isinstance(archive, OArchive):
        archive.stream.write(b"".join(scalar.pack(value) for value in values))
        return data
    if isinstance(archive, IArchive):
        chunk = archive.stream.read(scalar.size * len(values))
        read = [value for (value,) in struct.iter_unpack("<" + scalar.value, chunk)]
        if not many:
            return read[0]
        return tuple(read) if isinstance(data, tuple) else read
    raise TypeError(f"expected an archive, got {archive!r}")