"""Registries that recreate polymorphic objects and type-erased values by key."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Protocol

from .scalars import is_unsupported

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK = (1 << 64) - 1


class RegistryError(Exception):
    """Raised when a type or key cannot be resolved by a registry."""


class _Archive(Protocol):
    def io(self, value: Any, kind: Any) -> Any: ...


def _string_hash(text: str) -> int:
    value = _FNV_OFFSET
    for byte in text.encode("utf-8"):
        value = ((value ^ byte) * _FNV_PRIME) & _MASK
    return value


def _normalize_key(key: int | str) -> int:
    if isinstance(key, bool) or not isinstance(key, (int, str)):
        raise TypeError(f"an instantiable key must be an int or a str, not {type(key).__name__}")
    if isinstance(key, str):
        return _string_hash(key)
    return key & _MASK


def type_key(cls: type | str) -> int:
    """Return the 64-bit key of a class, or the hash of a name given as a string.

    A class exported with an explicit key answers with that key; any other
    class is keyed by the hash of its qualified name.
    """
    if isinstance(cls, str):
        return _string_hash(cls)
    if not isinstance(cls, type):
        raise TypeError(f"expected a class or a name, got {cls!r}")
    explicit = vars(cls).get("_instantiable_key")
    if explicit is not None:
        return explicit
    return _string_hash(f"{cls.__module__}.{cls.__qualname__}")


class Instantiable:
    """Base of classes whose objects can be recreated from a stored key.

    Subclasses register themselves on definition and may choose their key:
    ``class Shape(Instantiable, key="shape")``.
    """

    def __init_subclass__(cls, key: int | str | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._instantiable_key = None if key is None else _normalize_key(key)
        instantiable_registry.add(cls)


@dataclass(frozen=True)
class _Entry:
    cls: type
    key: int

    def create(self) -> Any:
        if inspect.isabstract(self.cls):
            return None
        return self.cls()


class InstantiableRegistry:
    """Maps keys and runtime types of instantiable classes to their factories."""

    def __init__(self) -> None:
        self._by_key: dict[int, _Entry] = {}
        self._by_type: dict[type, _Entry] = {}

    def is_instantiable(self, cls: Any) -> bool:
        """Whether ``cls`` is a class derived from :class:`Instantiable`."""
        return isinstance(cls, type) and issubclass(cls, Instantiable)

    def add(self, cls: type, key: int | str | None = None) -> None:
        """Register ``cls``; non-instantiable and already known classes are ignored.

        A key that is already taken keeps pointing at its first class.
        """
        if not self.is_instantiable(cls) or cls in self._by_type:
            return
        resolved = type_key(cls) if key is None else _normalize_key(key)
        entry = _Entry(cls, resolved)
        self._by_key.setdefault(resolved, entry)
        self._by_type[cls] = entry

    def fixture(self, cls: type) -> bool:
        """Register ``cls``, insisting that it is instantiable and its key is free."""
        if not self.is_instantiable(cls):
            raise RegistryError(f"{cls!r} is not derived from Instantiable")
        if type_key(cls) in self._by_key:
            raise RegistryError(f"the key of {cls.__qualname__} is already registered")
        self.add(cls)
        return True

    def _entry_of(self, cls: type) -> _Entry:
        try:
            return self._by_type[cls]
        except KeyError:
            raise RegistryError(f"{cls.__qualname__} is not registered") from None

    def _entry_for_key(self, key: int) -> _Entry:
        try:
            return self._by_key[key]
        except KeyError:
            raise RegistryError(f"no instantiable class is registered under key {key:#x}") from None

    def key_of(self, obj: Any) -> int:
        """Return the key registered for the runtime type of ``obj``."""
        return self._entry_of(type(obj)).key

    def save(self, archive: _Archive, obj: Any) -> Any:
        """Write ``obj`` through ``archive`` as its most derived registered type."""
        if obj is None:
            raise RegistryError("the object to write does not exist")
        entry = self._entry_of(type(obj))
        return archive.io(obj, entry.cls)

    def load(self, archive: _Archive, key: int) -> Any:
        """Create an object of the class under ``key`` and read it through ``archive``.

        The archive's ``io`` is called with the new object and its class, and
        its result is returned.
        """
        instance = self.clone(key)
        if instance is None:
            raise RegistryError(f"the class under key {key:#x} cannot be instantiated")
        entry = self._entry_of(type(instance))
        return archive.io(instance, entry.cls)

    def clone(self, key: int, expected: type | None = None) -> Any:
        """Return a new object of the class under ``key``.

        None is returned for an abstract class, or when the object is not an
        instance of ``expected``.
        """
        instance = self._entry_for_key(key).create()
        if instance is None:
            return None
        if expected is not None and not isinstance(instance, expected):
            return None
        return instance

    def cast(self, obj: Any, key: int) -> Any:
        """Return ``obj`` if it is an instance of the class under ``key``, else None."""
        entry = self._entry_for_key(key)
        return obj if isinstance(obj, entry.cls) else None


class AnyRegistry:
    """Maps type hashes to classes so that values of any registered type can be stored."""

    def __init__(self) -> None:
        self._by_hash: dict[int, type] = {}

    def add(self, cls: type) -> None:
        """Register ``cls`` under its type hash; the first class for a hash wins."""
        self._by_hash.setdefault(type_key(cls), cls)

    def _lookup(self, type_hash: int) -> type:
        try:
            return self._by_hash[type_hash]
        except KeyError:
            raise RegistryError(f"no type is registered under hash {type_hash:#x}") from None

    def save(self, archive: _Archive, value: Any) -> Any:
        """Write ``value`` through ``archive`` as its registered type."""
        cls = type(value)
        if self._by_hash.get(type_key(cls)) is not cls:
            raise RegistryError(f"{cls.__qualname__} is not registered")
        return archive.io(value, cls)

    def load(self, archive: _Archive, type_hash: int) -> Any:
        """Create a default value of the type under ``type_hash`` and read it."""
        cls = self._lookup(type_hash)
        return archive.io(cls(), cls)


instantiable_registry = InstantiableRegistry()
any_registry = AnyRegistry()


def serializable(cls: Any) -> Any:
    """Register a class, or the type of a given value, in both registries.

    The argument is returned unchanged, so this also works as a decorator.
    """
    if isinstance(cls, type):
        target = cls
    else:
        if is_unsupported(cls):
            raise TypeError(f"{cls!r} cannot be serialized")
        target = type(cls)
    if target is type(None):
        raise TypeError("NoneType cannot be serialized")
    instantiable_registry.add(target)
    any_registry.add(target)
    return cls