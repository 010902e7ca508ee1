"""
Process-wide keyed registry of lazily constructed objects.

Objects are stored in per-type buckets keyed by an optional name. Registering an
existing (type, name) fails instead of overwriting; emptied buckets are pruned.

Usage pattern:
    registry = Registry()
    registry.register(Counter, factory=Counter)
    counter = registry.get(Counter)

Callers are expected to pass a Registry around explicitly. ``Registry.shared()`` is the
single designated entry point for the process-wide instance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

from .errors import AlreadyRegisteredError, ConfigurationError, NotRegisteredError
from .lazy import LazyCell
from .locator_base import Locator
from .model import InstanceKey, Location

T = TypeVar("T")

logger = logging.getLogger(__name__)

NameFilter = Callable[[list[str | None]], str | None]


@dataclass
class RegistryEntry:
    key: InstanceKey
    cell: LazyCell[Any]


class UniqueKeys:
    """Idempotency keys of binding groups that are currently mounted."""

    def __init__(self) -> None:
        self._keys: set[Hashable] = set()

    def add(self, key: Hashable) -> None:
        if key in self._keys:
            raise ConfigurationError(
                f"A binding group with key {key!r} is already mounted. Keys of binding groups must be unique."
            )
        self._keys.add(key)

    def remove(self, key: Hashable) -> bool:
        if key in self._keys:
            self._keys.remove(key)
            return True
        return False

    def clear(self) -> None:
        self._keys.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)


class Registry(Locator):
    """Mapping from (type, name) to a LazyCell."""

    _shared: Registry | None = None

    def __init__(self) -> None:
        self._buckets: dict[type, dict[str | None, RegistryEntry]] = {}
        self._unique_keys = UniqueKeys()

    @property
    def unique_keys(self) -> UniqueKeys:
        """Keys of the binding groups mounted on this registry."""
        return self._unique_keys

    @classmethod
    def shared(cls) -> Registry:
        """Get the process-wide registry, creating it on first use."""
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    @classmethod
    def reset_shared(cls) -> None:
        """Forget the process-wide registry (tests call this between cases)."""
        cls._shared = None

    # Registration

    def register(
        self,
        target_type: type[T],
        *,
        instance: T | None = None,
        factory: Callable[[], T] | None = None,
        name: str | None = None,
        on_init: Callable[[T], None] | None = None,
    ) -> None:
        """
        Register an object under (target_type, name).

        Exactly one of ``instance`` or ``factory`` must be supplied. A factory makes the
        registration lazy: it runs on the first ``get``.

        Raises:
            AlreadyRegisteredError: If (target_type, name) is already registered
            ConfigurationError: If the type is missing, or both/neither of instance and factory are given
        """
        self._require_type(target_type, "register")
        if self.is_registered(target_type, name):
            raise AlreadyRegisteredError(target_type, name, Location.REGISTRY)
        cell: LazyCell[T] = LazyCell(factory=factory, instance=instance, on_init=on_init)
        self.register_cell(InstanceKey(target_type, name), cell)

    def register_by_runtime_type(self, instance: object, name: str | None = None) -> None:
        """
        Register ``instance`` keyed by its runtime type.

        Use when the caller only holds a supertype-typed reference (e.g. a base class
        registering a subclass instance).
        """
        if instance is None:
            raise ConfigurationError("register_by_runtime_type requires a non-None instance")
        self.register(type(instance), instance=instance, name=name)

    def register_cell(self, key: InstanceKey, cell: LazyCell[Any]) -> None:
        """Insert an existing cell. The key is checked before any state changes."""
        self._require_type(key.target_type, "register")
        bucket = self._buckets.get(key.target_type)
        if bucket is not None and key.name in bucket:
            raise AlreadyRegisteredError(key.target_type, key.name, Location.REGISTRY)
        if bucket is None:
            bucket = self._buckets[key.target_type] = {}
        bucket[key.name] = RegistryEntry(key, cell)
        logger.debug("Registered %s", key)

    def unregister(self, target_type: type[T] | Any, name: str | None = None, dispose: bool = True) -> None:
        """
        Remove (target_type, name) from the registry.

        Args:
            target_type: Registered type
            name: Optional name qualifier
            dispose: Whether to dispose the removed cell (only observable instances are disposed)

        Raises:
            NotRegisteredError: If (target_type, name) is not registered
        """
        entry = self._remove(InstanceKey(target_type, name))
        if dispose:
            entry.cell.dispose()

    def unregister_by_runtime_type(self, runtime_type: type, name: str | None = None, dispose: bool = True) -> None:
        """Counterpart of ``register_by_runtime_type``."""
        self.unregister(runtime_type, name, dispose)

    def _remove(self, key: InstanceKey) -> RegistryEntry:
        bucket = self._buckets.get(key.target_type)
        if bucket is None or key.name not in bucket:
            raise NotRegisteredError(
                key.target_type,
                key.name,
                detail=f"Tried to unregister an instance of type {key} but it is not registered.",
            )
        entry = bucket.pop(key.name)
        if not bucket:
            del self._buckets[key.target_type]
        logger.debug("Unregistered %s", key)
        return entry

    def clear(self, dispose: bool = False) -> None:
        """Drop every entry and group key, optionally disposing each cell."""
        entries = [entry for bucket in self._buckets.values() for entry in bucket.values()]
        self._buckets.clear()
        self._unique_keys.clear()
        if dispose:
            for entry in entries:
                entry.cell.dispose()

    # Lookup

    def get(
        self,
        target_type: type[T] | Any,
        name: str | None = None,
        filter: NameFilter | None = None,  # noqa: A002
    ) -> T:
        """
        Get a registered object, building it on first access.

        Args:
            target_type: Registered type
            name: Optional name qualifier
            filter: Alternative to ``name``: receives every name registered under the type
                and returns the one to select

        Raises:
            NotRegisteredError: If nothing is registered under the key
            ConfigurationError: If both ``name`` and ``filter`` are given
        """
        if name is not None and filter is not None:
            raise ConfigurationError("Registry.get accepts 'name' or 'filter', not both")

        bucket = self._buckets.get(target_type)
        if filter is not None:
            if bucket is None:
                raise NotRegisteredError(
                    target_type,
                    None,
                    detail=f"Tried to get an instance of type {InstanceKey(target_type)} but none are registered.",
                )
            name = filter(list(bucket))

        if bucket is None or name not in bucket:
            raise NotRegisteredError(target_type, name)
        return bucket[name].cell.resolve()  # type: ignore[no-any-return]

    def cell(self, target_type: type[T] | Any, name: str | None = None) -> LazyCell[T]:
        """Get the cell behind (target_type, name) without resolving it."""
        bucket = self._buckets.get(target_type)
        if bucket is None or name not in bucket:
            raise NotRegisteredError(target_type, name)
        return bucket[name].cell

    def is_registered(self, target_type: type[T] | Any, name: str | None = None) -> bool:
        """Pure query: never builds anything."""
        bucket = self._buckets.get(target_type)
        return bucket is not None and name in bucket

    def has(self, target_type: type[T], name: str | None = None) -> bool:
        return self.is_registered(target_type, name)

    def is_registered_by_runtime_type(self, runtime_type: type, name: str | None = None) -> bool:
        return self.is_registered(runtime_type, name)

    def names(self, target_type: type[T] | Any) -> list[str | None]:
        """Names registered under ``target_type``, in registration order."""
        return list(self._buckets.get(target_type, ()))

    def keys(self) -> list[InstanceKey]:
        return [entry.key for bucket in self._buckets.values() for entry in bucket.values()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, InstanceKey) and self.is_registered(key.target_type, key.name)

    def __iter__(self) -> Iterator[InstanceKey]:
        return iter(self.keys())

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def bucket_count(self) -> int:
        """Number of per-type buckets currently held."""
        return len(self._buckets)
