"""
InstanceKey implementation for the registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class InstanceKey:
    """A key that identifies one registered object: exact type plus optional name.

    The type object itself is the type token, so two keys match only when they refer
    to the very same class. Subclasses get their own keys.
    """

    target_type: type
    name: str | None = None

    @classmethod
    def of(cls, target_type: type[T] | Any, name: str | None = None) -> InstanceKey:
        """Create an InstanceKey for the given type and optional name."""
        return cls(target_type, name)

    @classmethod
    def of_instance(cls, instance: object, name: str | None = None) -> InstanceKey:
        """Create an InstanceKey from the runtime type of ``instance``."""
        return cls(type(instance), name)

    def __str__(self) -> str:
        name_str = f" @{self.name}" if self.name is not None else ""
        type_name = getattr(self.target_type, "__name__", str(self.target_type))
        return f"{type_name}{name_str}"
