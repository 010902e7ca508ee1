"""
Deferred construction holder for a single object.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from .errors import ConfigurationError
from .observable import is_observable

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


class LazyCell(Generic[T]):
    """
    Holds either a pre-built instance or a zero-argument factory.

    The factory runs at most once, on the first ``resolve()``; the ``on_init`` hook then
    receives the new instance. Eagerly supplied instances never trigger the hook.
    """

    def __init__(
        self,
        factory: Callable[[], T] | None = None,
        instance: T | object = _UNSET,
        on_init: Callable[[T], None] | None = None,
    ):
        has_instance = instance is not _UNSET and instance is not None
        if (factory is not None) == has_instance:
            raise ConfigurationError(
                "LazyCell needs exactly one of 'factory' or 'instance'"
                + (" but received both." if has_instance else " but received neither.")
            )
        self._factory = factory
        self._instance: T | None = instance if has_instance else None  # type: ignore[assignment]
        self._on_init = on_init
        self._resolving = False

    @property
    def is_initialized(self) -> bool:
        return self._instance is not None

    @property
    def instance_or_none(self) -> T | None:
        """The materialized instance, without forcing construction."""
        return self._instance

    def resolve(self) -> T:
        """Return the instance, building it on first access."""
        if self._instance is not None:
            return self._instance

        if self._resolving:
            raise ConfigurationError("Circular construction detected: the factory resolved its own cell")

        assert self._factory is not None
        self._resolving = True
        try:
            instance = self._factory()
        finally:
            self._resolving = False

        if instance is None:
            raise ConfigurationError(f"Factory {getattr(self._factory, '__name__', self._factory)!r} returned None")

        self._instance = instance
        logger.debug("Lazily built %s", type(instance).__name__)
        if self._on_init is not None:
            self._on_init(instance)
        return instance

    def dispose(self) -> None:
        """Dispose the materialized instance if it is observable; never forces construction."""
        if self._instance is not None and is_observable(self._instance):
            self._instance.dispose()  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        state = type(self._instance).__name__ if self._instance is not None else "uninitialized"
        return f"LazyCell({state})"
