"""
Declaration DSL for groups of registry bindings.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from .errors import ConfigurationError
from .lifecycle import BindingGroup
from .model import BindingSpec, BindingType, InstanceKey, Location
from .registry import Registry, UniqueKeys

T = TypeVar("T")


class GroupDef:
    """
    A list of binding declarations that are mounted together.

    Example:
        group_def = GroupDef()
        group_def.make(Settings).using().value(Settings())
        group_def.make(Database).named("cache").no_dispose().using().func(open_cache)
        group = group_def.group(registry, key="app-services")
    """

    def __init__(self) -> None:
        self._specs: list[BindingSpec] = []

    @property
    def specs(self) -> list[BindingSpec]:
        return list(self._specs)

    def add_spec(self, spec: BindingSpec) -> None:
        """Add a binding declaration, rejecting duplicate keys within this group."""
        if any(existing.key == spec.key for existing in self._specs):
            raise ConfigurationError(f"GroupDef already declares {spec.key}")
        self._specs.append(spec)

    def make(self, target_type: type[T] | Any) -> BindingBuilder[T]:
        """Create a binding builder for the given type."""
        return BindingBuilder(target_type, self)

    def group(
        self,
        registry: Registry,
        key: Hashable | None = None,
        unique_keys: UniqueKeys | None = None,
    ) -> BindingGroup:
        """Build the BindingGroup for these declarations."""
        return BindingGroup(registry, self._specs, key, unique_keys)

    def __len__(self) -> int:
        return len(self._specs)


class BindingBuilder(Generic[T]):
    """Builder for one binding declaration."""

    def __init__(self, target_type: type[T] | Any, group_def: GroupDef):
        if target_type is None or target_type is object:
            raise ConfigurationError(f"GroupDef.make was called with {target_type!r}; pass the concrete model type")
        self._target_type = target_type
        self._group_def = group_def
        self._name: str | None = None
        self._dispose = True

    def named(self, name: str) -> BindingBuilder[T]:
        """Add a name to this binding."""
        self._name = name
        return self

    def no_dispose(self) -> BindingBuilder[T]:
        """Keep the object alive when the group unmounts."""
        self._dispose = False
        return self

    def using(self) -> UsingBuilder[T]:
        """Create a UsingBuilder for fluent binding configuration."""

        def finalize_binding(binding_type: BindingType, implementation: Any) -> None:
            key = InstanceKey(self._target_type, self._name)
            spec = BindingSpec(key, binding_type, implementation, Location.REGISTRY, self._dispose)
            self._group_def.add_spec(spec)

        return UsingBuilder(self._target_type, finalize_binding)


class UsingBuilder(Generic[T]):
    """Chooses how the bound object is produced."""

    def __init__(self, target_type: type[T], finalize_callback: Callable[[BindingType, Any], None]):
        self._target_type = target_type
        self._finalize_callback = finalize_callback

    def value(self, instance: T) -> None:
        """Bind to a specific instance value."""
        if instance is None:
            raise ConfigurationError("Cannot bind None as an instance")
        self._finalize_callback(BindingType.INSTANCE, instance)

    def type(self, cls: type[T]) -> None:
        """Bind to a class instantiated with no arguments on first access."""
        self._finalize_callback(BindingType.CLASS, cls)

    def func(self, factory: Callable[[], T]) -> None:
        """Bind to a zero-argument factory called on first access."""
        self._finalize_callback(BindingType.FACTORY, factory)
