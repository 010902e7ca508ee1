"""
Abstract read-only Locator interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TypeVar

from .errors import ConfigurationError

T = TypeVar("T")


class Locator(ABC):
    """
    Read-only interface shared by the global registry and position-rooted tree views.

    A locator hands out (lazily built) instances of requested types.
    """

    @abstractmethod
    def get(self, target_type: type[T] | Any, name: str | None = None) -> T:
        """
        Get an instance of the given type.

        Args:
            target_type: The type to resolve
            name: Optional name qualifier

        Returns:
            An instance of the requested type

        Raises:
            NotRegisteredError / NotFoundError: If nothing matches
        """

    @abstractmethod
    def has(self, target_type: type[T], name: str | None = None) -> bool:
        """
        Check if an instance can be located without building it.

        Args:
            target_type: The type to check
            name: Optional name qualifier

        Returns:
            True if the type can be resolved, False otherwise
        """

    def find(self, target_type: type[T], name: str | None = None) -> T | None:
        """
        Try to get an instance, returning None if not found.

        Args:
            target_type: The type to resolve
            name: Optional name qualifier

        Returns:
            An instance of the requested type or None if not found
        """
        if not self.has(target_type, name):
            return None
        try:
            return self.get(target_type, name)
        except LookupError:
            return None

    @staticmethod
    def _require_type(target_type: Any, operation: str) -> None:
        if target_type is None or target_type is object:
            raise ConfigurationError(
                f"Missing type. '{operation}' was called with {target_type!r}; pass the concrete model type."
            )
