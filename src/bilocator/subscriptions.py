"""
Listener bookkeeping for observing entities.

An observing entity holds a SubscriptionManager by composition and releases it
explicitly; nothing is released automatically when the owner goes away.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import CapabilityError
from .observable import Listener, Observable, is_observable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Subscription:
    """An (observable, listener) pair.

    Two subscriptions are equal when they hold the very same observable and equal
    listeners (bound methods of the same object compare equal).
    """

    observable: Observable
    listener: Listener

    def subscribe(self) -> None:
        self.observable.add_listener(self.listener)

    def unsubscribe(self) -> None:
        self.observable.remove_listener(self.listener)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subscription):
            return NotImplemented
        return self.observable is other.observable and self.listener == other.listener

    def __hash__(self) -> int:
        return hash((id(self.observable), self.listener))


class SubscriptionManager:
    """Tracks subscriptions in subscription order; subscribing the same pair twice is a no-op."""

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []

    def subscribe(self, observable: Observable, listener: Listener) -> bool:
        """
        Attach ``listener`` to ``observable`` unless the pair is already tracked.

        Returns:
            True if a new subscription was made, False if it already existed

        Raises:
            CapabilityError: If ``observable`` lacks the observable capability
        """
        if not is_observable(observable):
            raise CapabilityError(
                type(observable),
                detail=f"Cannot subscribe to {type(observable).__name__}: it is not observable.",
            )
        subscription = Subscription(observable, listener)
        if subscription in self._subscriptions:
            return False
        subscription.subscribe()
        self._subscriptions.append(subscription)
        logger.debug("Subscribed to %s (%d tracked)", type(observable).__name__, len(self._subscriptions))
        return True

    def unsubscribe(self, observable: Observable, listener: Listener) -> bool:
        """Detach a single pair. Returns False if it was not tracked."""
        subscription = Subscription(observable, listener)
        if subscription not in self._subscriptions:
            return False
        self._subscriptions.remove(subscription)
        subscription.unsubscribe()
        return True

    def unsubscribe_all(self) -> None:
        """Detach every tracked listener. Safe to call repeatedly."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.unsubscribe()
        if subscriptions:
            logger.debug("Cancelled %d subscriptions", len(subscriptions))

    def is_subscribed(self, observable: Observable, listener: Listener) -> bool:
        return Subscription(observable, listener) in self._subscriptions

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)
