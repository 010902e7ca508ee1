"""
Binding declarations and enums shared by the registry, the tree scope and the host layer.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .keys import InstanceKey


class Location(Enum):
    """Where a binding is published."""

    REGISTRY = "registry"
    TREE = "tree"


class BindingState(Enum):
    """Lifecycle of a tree-node binding."""

    UNBOUND = "unbound"
    BOUND = "bound"
    PROMOTED = "promoted"
    TORN_DOWN = "torn_down"


class BindingType(Enum):
    """How the bound object is produced."""

    CLASS = "class"
    INSTANCE = "instance"
    FACTORY = "factory"


@dataclass(frozen=True)
class BindingSpec:
    """A declarative binding: what to build, under which key, where, and whether to dispose it."""

    key: InstanceKey
    binding_type: BindingType
    implementation: type | Any | Callable[[], Any]
    location: Location = Location.REGISTRY
    dispose: bool = True

    @classmethod
    def of(
        cls,
        target_type: type | Any,
        *,
        instance: Any = None,
        factory: Callable[[], Any] | None = None,
        name: str | None = None,
        location: Location = Location.REGISTRY,
        dispose: bool = True,
    ) -> BindingSpec:
        """Declare a binding from either an instance or a zero-argument factory (classes count as factories)."""
        if (instance is None) == (factory is None):
            from ..errors import ConfigurationError

            raise ConfigurationError("A binding needs exactly one of 'instance' or 'factory'")
        if instance is not None:
            binding_type, implementation = BindingType.INSTANCE, instance
        elif isinstance(factory, type):
            binding_type, implementation = BindingType.CLASS, factory
        else:
            binding_type, implementation = BindingType.FACTORY, factory
        return cls(InstanceKey(target_type, name), binding_type, implementation, location, dispose)

    @property
    def is_lazy(self) -> bool:
        return self.binding_type is not BindingType.INSTANCE

    def factory(self) -> Callable[[], Any] | None:
        """Zero-argument callable that builds the object, or None for instance bindings."""
        if self.binding_type is BindingType.INSTANCE:
            return None
        return self.implementation  # type: ignore[no-any-return]

    def instance(self) -> Any:
        """The eagerly supplied object, or None for lazy bindings."""
        if self.binding_type is BindingType.INSTANCE:
            return self.implementation
        return None

    def __str__(self) -> str:
        impl_name = getattr(self.implementation, "__name__", type(self.implementation).__name__)
        return f"{self.key} -> {impl_name} ({self.binding_type.value}, {self.location.value})"
