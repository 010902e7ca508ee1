"""
Observer helper: registry and tree lookups plus subscription bookkeeping.

Observing entities (view models, stateful widgets, controllers) hold an ``Observer``
by composition and call ``cancel_subscriptions()`` from their own teardown.
"""

from __future__ import annotations

from typing import Any, TypeVar

from .errors import CapabilityError, ConfigurationError
from .observable import Listener, Observable, is_observable
from .registry import NameFilter
from .subscriptions import SubscriptionManager
from .tree import TreeScope

T = TypeVar("T")


class Observer:
    """
    Locates objects and keeps track of the listeners an entity attached to them.

    Example:
        observer = Observer(scope)
        counter = observer.listen_to(Counter, view.mark_needs_update)
        ...
        observer.cancel_subscriptions()
    """

    def __init__(self, scope: TreeScope, subscriptions: SubscriptionManager | None = None):
        self._scope = scope
        self._subscriptions = subscriptions if subscriptions is not None else SubscriptionManager()

    @property
    def subscriptions(self) -> SubscriptionManager:
        return self._subscriptions

    def get(
        self,
        target_type: type[T],
        *,
        position: Any = None,
        name: str | None = None,
        filter: NameFilter | None = None,  # noqa: A002
    ) -> T:
        """
        Get, without listening, a registered object or the nearest tree binding.

        With no ``position`` the registry is searched by (type, name) or filter.
        With a ``position`` the tree is walked; tree bindings cannot be located by name.
        """
        if position is None:
            return self._scope.registry.get(target_type, name, filter)
        if name is not None or filter is not None:
            raise ConfigurationError("'get' was given a position and a name/filter, but tree bindings have no names")
        return self._scope.resolve_non_reactive(position, target_type)

    def listen_to(
        self,
        target_type: type[T],
        listener: Listener,
        *,
        position: Any = None,
        notifier: T | None = None,
        name: str | None = None,
        filter: NameFilter | None = None,  # noqa: A002
    ) -> T:
        """
        Locate an observable and subscribe ``listener`` to it (once per pair).

        The observable comes from the tree when ``position`` is given, is ``notifier``
        itself when given, and otherwise comes from the registry by ``name``/``filter``.

        Raises:
            ConfigurationError: If more than one of position, notifier and name/filter is given
            CapabilityError: If the located object is not observable
        """
        by_registry_key = name is not None or filter is not None
        given = sum([position is not None, notifier is not None, by_registry_key])
        if given > 1:
            raise ConfigurationError("'listen_to' accepts only one of 'position', 'notifier' or 'name'/'filter'")

        located: T
        if position is not None:
            located = self._scope.resolve_non_reactive(position, target_type)
        elif notifier is not None:
            located = notifier
        else:
            located = self._scope.registry.get(target_type, name, filter)

        if not is_observable(located):
            raise CapabilityError(target_type, name)
        self._subscriptions.subscribe(located, listener)  # type: ignore[arg-type]
        return located

    def register(self, position: Any, target_type: type[T], name: str | None = None) -> T:
        """Promote the nearest tree binding of ``target_type`` into the registry."""
        return self._scope.promote(position, target_type, name)

    def unregister(self, position: Any, target_type: type[T], name: str | None = None) -> None:
        """Demote a binding promoted with ``register``; the instance is not disposed."""
        self._scope.demote(position, target_type, name)

    def cancel_subscriptions(self) -> None:
        self._subscriptions.unsubscribe_all()

    def is_listening(self, observable: Observable, listener: Listener) -> bool:
        return self._subscriptions.is_subscribed(observable, listener)
