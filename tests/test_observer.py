#!/usr/bin/env python3
"""
Unit tests for the Observer composition helper.
"""

import unittest

from bilocator import (
    CapabilityError,
    ChangeNotifier,
    ConfigurationError,
    Node,
    NotFoundError,
    NotRegisteredError,
    Observer,
    Registry,
    TreeScope,
    ValueNotifier,
)


class Counter(ChangeNotifier):
    def __init__(self) -> None:
        super().__init__()
        self.count = 0

    def increment(self) -> None:
        self.count += 1
        self.notify_listeners()


class Settings:
    theme = "dark"


class CloudService:
    def __init__(self) -> None:
        self.current_user = ValueNotifier("nobody")


class CounterView:
    """An observing entity holding an Observer by composition."""

    def __init__(self, scope: TreeScope) -> None:
        self.observer = Observer(scope)
        self.renders = 0

    def rebuild(self) -> None:
        self.renders += 1

    def dispose(self) -> None:
        self.observer.cancel_subscriptions()


class TestObserver(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = Registry()
        self.scope = TreeScope(self.registry)
        self.root = Node("root")
        self.leaf = self.root.child("leaf")
        self.view = CounterView(self.scope)

    def test_listen_to_registered(self):
        self.registry.register(Counter, factory=Counter)

        counter = self.view.observer.listen_to(Counter, self.view.rebuild)
        self.view.observer.listen_to(Counter, self.view.rebuild)
        counter.increment()

        self.assertEqual(self.view.renders, 1)

    def test_listen_to_named(self):
        self.registry.register(Counter, factory=Counter, name="left")
        self.registry.register(Counter, factory=Counter, name="right")

        right = self.view.observer.listen_to(Counter, self.view.rebuild, name="right")
        self.registry.get(Counter, "left").increment()
        right.increment()

        self.assertEqual(self.view.renders, 1)

    def test_listen_to_with_filter(self):
        self.registry.register(Counter, factory=Counter, name="a-1")
        self.registry.register(Counter, factory=Counter, name="b-1")

        located = self.view.observer.listen_to(
            Counter, self.view.rebuild, filter=lambda names: next(n for n in names if n.startswith("b"))
        )

        self.assertIs(located, self.registry.get(Counter, "b-1"))

    def test_listen_to_tree(self):
        self.scope.bind(self.root, Counter, factory=Counter)

        counter = self.view.observer.listen_to(Counter, self.view.rebuild, position=self.leaf)
        counter.increment()

        self.assertEqual(self.view.renders, 1)
        self.assertFalse(self.registry.is_registered(Counter))

    def test_listen_to_explicit_notifier(self):
        self.registry.register(CloudService, factory=CloudService)
        cloud = self.view.observer.get(CloudService)

        user = self.view.observer.listen_to(ValueNotifier, self.view.rebuild, notifier=cloud.current_user)
        user.value = "alice"

        self.assertEqual(self.view.renders, 1)

    def test_listen_to_rejects_multiple_sources(self):
        with self.assertRaises(ConfigurationError):
            self.view.observer.listen_to(Counter, self.view.rebuild, position=self.leaf, name="x")
        with self.assertRaises(ConfigurationError):
            self.view.observer.listen_to(Counter, self.view.rebuild, notifier=Counter(), name="x")

    def test_listen_to_rejects_filter_with_tree_or_notifier(self):
        self.scope.bind(self.root, Counter, factory=Counter)
        pick_first = lambda names: names[0]  # noqa: E731

        with self.assertRaises(ConfigurationError):
            self.view.observer.listen_to(Counter, self.view.rebuild, position=self.leaf, filter=pick_first)
        with self.assertRaises(ConfigurationError):
            self.view.observer.listen_to(Counter, self.view.rebuild, notifier=Counter(), filter=pick_first)
        self.assertEqual(len(self.view.observer.subscriptions), 0)

    def test_listen_to_non_observable(self):
        self.registry.register(Settings, instance=Settings())
        with self.assertRaises(CapabilityError):
            self.view.observer.listen_to(Settings, self.view.rebuild)
        self.assertEqual(len(self.view.observer.subscriptions), 0)

    def test_cancel_subscriptions(self):
        self.registry.register(Counter, factory=Counter)
        counter = self.view.observer.listen_to(Counter, self.view.rebuild)

        self.view.dispose()
        counter.increment()

        self.assertEqual(self.view.renders, 0)
        self.assertFalse(self.view.observer.is_listening(counter, self.view.rebuild))

    def test_get_registry_and_tree(self):
        registered = Settings()
        in_tree = Settings()
        self.registry.register(Settings, instance=registered)
        self.scope.bind(self.root, Settings, instance=in_tree)

        self.assertIs(self.view.observer.get(Settings), registered)
        self.assertIs(self.view.observer.get(Settings, position=self.leaf), in_tree)

    def test_get_tree_by_name_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.view.observer.get(Settings, position=self.leaf, name="x")

    def test_wrong_location_errors_are_distinguishable(self):
        self.scope.bind(self.root, Settings, instance=Settings())
        with self.assertRaises(NotRegisteredError):
            self.view.observer.get(Settings)

        self.registry.register(Counter, factory=Counter)
        with self.assertRaises(NotFoundError):
            self.view.observer.get(Counter, position=self.leaf)

    def test_register_and_unregister_tree_model(self):
        self.scope.bind(self.root, Settings, factory=Settings)

        settings = self.view.observer.register(self.leaf, Settings, name="global")
        self.assertIs(self.view.observer.get(Settings, name="global"), settings)

        self.view.observer.unregister(self.leaf, Settings, name="global")
        self.assertFalse(self.registry.is_registered(Settings, "global"))
        self.assertIs(self.view.observer.get(Settings, position=self.leaf), settings)


if __name__ == "__main__":
    unittest.main()
