#!/usr/bin/env python3
"""
Unit tests for the keyed Registry.
"""

import unittest

from bilocator import (
    AlreadyRegisteredError,
    ChangeNotifier,
    ConfigurationError,
    InstanceKey,
    Location,
    NotRegisteredError,
    Registry,
)


class MyModel:
    def __init__(self) -> None:
        self.answer = 42


class BaseService:
    pass


class ChildService(BaseService):
    pass


class MyChangeNotifier(ChangeNotifier):
    def __init__(self, on_dispose) -> None:
        super().__init__()
        self._on_dispose = on_dispose

    def dispose(self) -> None:
        self._on_dispose()
        super().dispose()


class TestRegistry(unittest.TestCase):
    """Test register/unregister/get/is_registered."""

    def setUp(self) -> None:
        self.registry = Registry()

    def test_unnamed_instance(self):
        self.assertFalse(self.registry.is_registered(MyModel))
        self.registry.register(MyModel, instance=MyModel())
        self.assertTrue(self.registry.is_registered(MyModel))
        self.assertEqual(self.registry.get(MyModel).answer, 42)

        self.registry.unregister(MyModel)

        self.assertFalse(self.registry.is_registered(MyModel))
        with self.assertRaises(NotRegisteredError):
            self.registry.get(MyModel)
        with self.assertRaises(NotRegisteredError):
            self.registry.unregister(MyModel)

    def test_named_instance(self):
        name = "Some name"
        self.registry.register(MyModel, instance=MyModel(), name=name)

        self.assertFalse(self.registry.is_registered(MyModel))
        self.assertTrue(self.registry.is_registered(MyModel, name))
        self.assertEqual(self.registry.get(MyModel, name).answer, 42)

        self.registry.unregister(MyModel, name)

        self.assertFalse(self.registry.is_registered(MyModel, name))
        with self.assertRaises(NotRegisteredError):
            self.registry.get(MyModel, name)

    def test_factory_is_lazy_and_called_once(self):
        calls = []

        def build() -> MyModel:
            calls.append(1)
            return MyModel()

        self.registry.register(MyModel, factory=build)
        self.assertTrue(self.registry.is_registered(MyModel))
        self.assertEqual(calls, [])

        first = self.registry.get(MyModel)
        second = self.registry.get(MyModel)

        self.assertIs(first, second)
        self.assertEqual(len(calls), 1)

    def test_is_registered_never_materializes(self):
        calls = []
        self.registry.register(MyModel, factory=lambda: calls.append(1) or MyModel())

        self.registry.is_registered(MyModel)
        self.registry.has(MyModel)
        _ = InstanceKey(MyModel) in self.registry

        self.assertEqual(calls, [])
        self.assertFalse(self.registry.cell(MyModel).is_initialized)

    def test_duplicate_registration_fails_and_keeps_first(self):
        first = MyModel()
        self.registry.register(MyModel, instance=first)

        with self.assertRaises(AlreadyRegisteredError) as cm:
            self.registry.register(MyModel, instance=MyModel())

        self.assertIs(self.registry.get(MyModel), first)
        self.assertIs(cm.exception.target_type, MyModel)
        self.assertIsNone(cm.exception.name)
        self.assertEqual(cm.exception.location, Location.REGISTRY)

    def test_same_type_different_names_coexist(self):
        self.registry.register(MyModel, instance=MyModel(), name="a")
        self.registry.register(MyModel, instance=MyModel(), name="b")
        self.registry.register(MyModel, instance=MyModel())

        self.assertEqual(self.registry.names(MyModel), ["a", "b", None])
        self.assertIsNot(self.registry.get(MyModel, "a"), self.registry.get(MyModel, "b"))
        self.assertEqual(len(self.registry), 3)

    def test_empty_bucket_is_pruned(self):
        self.registry.register(MyModel, instance=MyModel(), name="a")
        self.registry.register(MyModel, instance=MyModel(), name="b")
        self.assertEqual(self.registry.bucket_count(), 1)

        self.registry.unregister(MyModel, "a")
        self.assertEqual(self.registry.bucket_count(), 1)

        self.registry.unregister(MyModel, "b")
        self.assertEqual(self.registry.bucket_count(), 0)
        self.assertEqual(self.registry.names(MyModel), [])

    def test_dispose_called(self):
        dispose_calls = []
        self.registry.register(MyChangeNotifier, instance=MyChangeNotifier(lambda: dispose_calls.append(1)))

        self.registry.unregister(MyChangeNotifier)

        self.assertEqual(dispose_calls, [1])

    def test_dispose_not_called(self):
        dispose_calls = []
        self.registry.register(MyChangeNotifier, instance=MyChangeNotifier(lambda: dispose_calls.append(1)))

        self.registry.unregister(MyChangeNotifier, dispose=False)

        self.assertEqual(dispose_calls, [])

    def test_unresolved_factory_not_built_on_dispose(self):
        calls = []
        self.registry.register(MyChangeNotifier, factory=lambda: calls.append(1) or MyChangeNotifier(lambda: None))

        self.registry.unregister(MyChangeNotifier)

        self.assertEqual(calls, [])

    def test_register_by_runtime_type(self):
        service: BaseService = ChildService()

        self.registry.register_by_runtime_type(service)

        self.assertTrue(self.registry.is_registered(ChildService))
        self.assertFalse(self.registry.is_registered(BaseService))
        self.assertTrue(self.registry.is_registered_by_runtime_type(ChildService))
        self.assertIs(self.registry.get(ChildService), service)

        with self.assertRaises(AlreadyRegisteredError):
            self.registry.register_by_runtime_type(ChildService())

        self.registry.unregister_by_runtime_type(ChildService)
        self.assertFalse(self.registry.is_registered(ChildService))

    def test_lookup_is_exact_type(self):
        """A subclass registration is not found under its base class."""
        self.registry.register(ChildService, instance=ChildService())
        with self.assertRaises(NotRegisteredError):
            self.registry.get(BaseService)

    def test_filter_selects_name(self):
        self.registry.register(MyModel, instance=MyModel(), name="alpha")
        beta = MyModel()
        self.registry.register(MyModel, instance=beta, name="beta")

        received = []

        def pick_b(names):
            received.append(list(names))
            return next(n for n in names if n and n.startswith("b"))

        self.assertIs(self.registry.get(MyModel, filter=pick_b), beta)
        self.assertEqual(received, [["alpha", "beta"]])

    def test_filter_without_registrations(self):
        with self.assertRaises(NotRegisteredError):
            self.registry.get(MyModel, filter=lambda names: names[0])

    def test_filter_returning_unknown_name(self):
        self.registry.register(MyModel, instance=MyModel(), name="alpha")
        with self.assertRaises(NotRegisteredError):
            self.registry.get(MyModel, filter=lambda names: "gamma")

    def test_filter_and_name_are_exclusive(self):
        self.registry.register(MyModel, instance=MyModel(), name="alpha")
        with self.assertRaises(ConfigurationError):
            self.registry.get(MyModel, "alpha", filter=lambda names: names[0])

    def test_missing_type_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register(object, instance=MyModel())
        with self.assertRaises(ConfigurationError):
            self.registry.register(None, instance=MyModel())  # type: ignore[arg-type]

    def test_both_instance_and_factory_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.registry.register(MyModel, instance=MyModel(), factory=MyModel)
        self.assertFalse(self.registry.is_registered(MyModel))

    def test_find_returns_none_when_absent(self):
        self.assertIsNone(self.registry.find(MyModel))
        model = MyModel()
        self.registry.register(MyModel, instance=model)
        self.assertIs(self.registry.find(MyModel), model)

    def test_keys_and_clear(self):
        self.registry.register(MyModel, instance=MyModel())
        self.registry.register(MyModel, instance=MyModel(), name="n")

        self.assertEqual(set(self.registry.keys()), {InstanceKey(MyModel), InstanceKey(MyModel, "n")})
        self.assertIn(InstanceKey(MyModel, "n"), self.registry)

        self.registry.clear()
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(list(self.registry), [])

    def test_clear_with_dispose(self):
        dispose_calls = []
        self.registry.register(MyChangeNotifier, instance=MyChangeNotifier(lambda: dispose_calls.append(1)))

        self.registry.clear(dispose=True)

        self.assertEqual(dispose_calls, [1])

    def test_not_registered_error_mentions_tree(self):
        with self.assertRaises(NotRegisteredError) as cm:
            self.registry.get(MyModel, "x")
        self.assertIn("MyModel", str(cm.exception))
        self.assertIn("Location.TREE", str(cm.exception))
        self.assertIsInstance(cm.exception, LookupError)


class TestSharedRegistry(unittest.TestCase):
    """Test the designated process-wide entry point."""

    def setUp(self) -> None:
        Registry.reset_shared()

    def tearDown(self) -> None:
        Registry.reset_shared()

    def test_shared_is_stable(self):
        self.assertIs(Registry.shared(), Registry.shared())

    def test_reset_shared_forgets_registrations(self):
        Registry.shared().register(MyModel, instance=MyModel())
        Registry.reset_shared()
        self.assertFalse(Registry.shared().is_registered(MyModel))

    def test_explicit_registries_are_independent(self):
        Registry.shared().register(MyModel, instance=MyModel())
        self.assertFalse(Registry().is_registered(MyModel))


if __name__ == "__main__":
    unittest.main()
