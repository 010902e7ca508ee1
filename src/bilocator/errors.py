"""
Error taxonomy for the bilocator engine.

Lookup errors carry the requested type, name and the location that was searched so a
caller can tell "searched the wrong place" apart from "never registered at all".
"""

from __future__ import annotations

from typing import Any

from .model.bindings import Location


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", str(target_type))


class BilocatorError(Exception):
    """Base class for all errors raised by the locator."""


class ConfigurationError(BilocatorError):
    """Raised for malformed construction or call-site arguments."""


class DisposedError(BilocatorError):
    """Raised when a disposed notifier is used."""


class _KeyedError(BilocatorError):
    """Common shape of errors that refer to a (type, name) key at a location."""

    hint: str = ""

    def __init__(self, target_type: Any, name: str | None = None, location: Location | None = None, detail: str = ""):
        self.target_type = target_type
        self.name = name
        self.location = location
        msg = detail or self._describe()
        if self.hint:
            msg += f" Possible causes:\n{self.hint}"
        super().__init__(msg)

    def _describe(self) -> str:
        raise NotImplementedError

    @property
    def type_name(self) -> str:
        return _type_name(self.target_type)


class AlreadyRegisteredError(_KeyedError):
    """Raised when (type, name) is already present in the registry."""

    hint = (
        " - Only one object with the same type/name can be stored in the registry. Give objects of the same "
        "type unique names.\n"
        " - A group of bindings was mounted twice. Give the group a unique idempotency key.\n"
    )

    def _describe(self) -> str:
        return (
            f"Tried to register an instance of type {self.type_name} with name {self.name!r} "
            f"but it is already registered."
        )


class NotRegisteredError(_KeyedError, LookupError):
    """Raised when (type, name) is absent from the registry."""

    hint = (
        " - The object was bound in the tree with Location.TREE, so it is not in the registry. "
        "Resolve it from a tree position instead, or promote it.\n"
    )

    def __init__(self, target_type: Any, name: str | None = None, detail: str = ""):
        super().__init__(target_type, name, Location.REGISTRY, detail)

    def _describe(self) -> str:
        return f"No instance of type {self.type_name} with name {self.name!r} is registered."


class NotFoundError(_KeyedError, LookupError):
    """Raised when a tree walk reaches the root without a matching binding."""

    hint = (
        " - The object was stored in the registry with Location.REGISTRY but the tree was searched. "
        "Look it up in the registry instead.\n"
        " - The position is not a descendant of the node that bound the object.\n"
    )

    def __init__(self, target_type: Any, name: str | None = None, detail: str = ""):
        super().__init__(target_type, name, Location.TREE, detail)

    def _describe(self) -> str:
        return f"No tree binding of type {self.type_name} found between the position and the root."


class CapabilityError(NotFoundError):
    """Raised when reactive resolution finds a value that is not observable."""

    hint = ""

    def _describe(self) -> str:
        return (
            f"Reactive resolution of {self.type_name} requires an observable value "
            f"(add_listener/remove_listener/dispose), but the nearest binding is not observable."
        )
