"""
Observable capability and the reference change-notifying value types.

The engine never requires a base class: any value exposing ``add_listener``,
``remove_listener`` and ``dispose`` is treated as observable.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, Protocol, TypeVar, runtime_checkable

from .errors import DisposedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[], None]


@runtime_checkable
class Observable(Protocol):
    """Structural capability: change notification plus explicit disposal."""

    def add_listener(self, listener: Listener) -> None: ...

    def remove_listener(self, listener: Listener) -> None: ...

    def dispose(self) -> None: ...


def is_observable(value: object) -> bool:
    """Capability query used by disposal and reactive resolution."""
    return isinstance(value, Observable)


class ChangeNotifier:
    """
    Synchronous listener list with explicit disposal.

    Delivery works on a snapshot taken when ``notify_listeners`` starts: a listener added
    during delivery is first called on the next notification, and a listener removed
    during delivery is skipped if it has not been called yet. Listener exceptions propagate.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _check_not_disposed(self) -> None:
        if self._disposed:
            raise DisposedError(f"{type(self).__name__} was used after being disposed")

    def add_listener(self, listener: Listener) -> None:
        self._check_not_disposed()
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        # Removing from a disposed notifier is allowed so teardown order does not matter.
        for i, existing in enumerate(self._listeners):
            if existing == listener:
                del self._listeners[i]
                return

    def notify_listeners(self) -> None:
        self._check_not_disposed()
        snapshot = list(self._listeners)
        for listener in snapshot:
            if listener in self._listeners:
                listener()

    def dispose(self) -> None:
        self._check_not_disposed()
        logger.debug("Disposing %s", type(self).__name__)
        self._listeners.clear()
        self._disposed = True


class ValueNotifier(ChangeNotifier, Generic[T]):
    """A ChangeNotifier holding a single value; notifies when the value changes."""

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        if self._value == new_value:
            return
        self._value = new_value
        self.notify_listeners()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"
