"""
Host binding layer: ties bindings to node mount/unmount.

The host calls ``Bilocator.on_mount`` when a node that declares a binding enters the
tree and ``Bilocator.on_unmount`` when it leaves; the engine never discovers mounts
by itself. ``BindingGroup`` is the batch form for registry-only declarations.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable
from typing import Any

from .errors import ConfigurationError, NotRegisteredError
from .model import BindingSpec, Location
from .observable import Listener, is_observable
from .registry import Registry, UniqueKeys
from .tree import TreeBinding, TreeScope

logger = logging.getLogger(__name__)


class BindingGroup:
    """
    A set of registry bindings mounted and unmounted together.

    If ``key`` is given and another mount with the same key is already live, mounting is
    skipped; unmounting then leaves the registry alone, since the entries belong to the
    group that registered them. Keys are tracked by the registry's ``unique_keys`` unless
    another set is passed in.
    """

    def __init__(
        self,
        registry: Registry,
        delegates: Iterable[BindingSpec],
        key: Hashable | None = None,
        unique_keys: UniqueKeys | None = None,
    ):
        self._registry = registry
        self._delegates = list(delegates)
        self._key = key
        self._unique_keys = unique_keys if unique_keys is not None else registry.unique_keys
        self._owns_registration = False
        for spec in self._delegates:
            if spec.location is not Location.REGISTRY:
                raise ConfigurationError(f"Binding groups only hold registry bindings, got {spec}")

    @property
    def delegates(self) -> list[BindingSpec]:
        return list(self._delegates)

    @property
    def key(self) -> Hashable | None:
        return self._key

    @property
    def is_mounted(self) -> bool:
        return self._owns_registration

    def mount(self) -> bool:
        """
        Register every delegate. All or nothing: on failure the members registered so far
        are removed again and the error propagates.

        Returns:
            True if this call registered the set, False if it was skipped
        """
        if self._owns_registration:
            logger.debug("Binding group %r already mounted", self._key)
            return False
        if self._key is not None:
            if self._key in self._unique_keys:
                logger.debug("Skipping binding group %r: key already processed", self._key)
                return False
            self._unique_keys.add(self._key)

        registered: list[BindingSpec] = []
        try:
            for spec in self._delegates:
                self._registry.register(
                    spec.key.target_type,
                    instance=spec.instance(),
                    factory=spec.factory(),
                    name=spec.key.name,
                )
                registered.append(spec)
        except Exception:
            for spec in reversed(registered):
                self._registry.unregister(spec.key.target_type, spec.key.name, dispose=False)
            if self._key is not None:
                self._unique_keys.remove(self._key)
            raise

        self._owns_registration = True
        logger.debug("Mounted binding group %r with %d bindings", self._key, len(registered))
        return True

    def unmount(self) -> bool:
        """
        Unregister every delegate with its own dispose flag.

        Returns:
            True if the set was unregistered, False if this group never registered it
        """
        if not self._owns_registration:
            return False
        missing = [spec for spec in self._delegates if spec.key not in self._registry]
        if missing:
            first = missing[0].key
            raise NotRegisteredError(
                first.target_type,
                first.name,
                detail=f"Binding group {self._key!r} cannot unmount: {', '.join(str(s.key) for s in missing)} "
                f"no longer registered.",
            )
        for spec in self._delegates:
            self._registry.unregister(spec.key.target_type, spec.key.name, dispose=spec.dispose)
        if self._key is not None:
            self._unique_keys.remove(self._key)
        self._owns_registration = False
        logger.debug("Unmounted binding group %r", self._key)
        return True


class Bilocator:
    """
    Lifecycle adapter between a host tree and a TreeScope.

    A node whose bound value is observable listens to it and is marked as needing an
    update on every change, until the node is unmounted.
    """

    def __init__(self, scope: TreeScope, unique_keys: UniqueKeys | None = None):
        self._scope = scope
        self._unique_keys = unique_keys if unique_keys is not None else scope.registry.unique_keys
        self._self_listeners: dict[Any, list[tuple[Any, Listener]]] = {}

    @property
    def scope(self) -> TreeScope:
        return self._scope

    @property
    def unique_keys(self) -> UniqueKeys:
        return self._unique_keys

    def on_mount(self, node: Hashable, spec: BindingSpec) -> TreeBinding[Any]:
        """Create the binding declared by ``spec`` at ``node``."""

        def listen(value: Any) -> None:
            if is_observable(value):
                listener: Listener = lambda: self._scope.host.mark_needs_update(node)  # noqa: E731
                value.add_listener(listener)
                self._self_listeners.setdefault(node, []).append((value, listener))

        binding = self._scope.bind_spec(node, spec, on_init=listen)
        if not spec.is_lazy:
            try:
                listen(binding.cell.resolve())
            except Exception:
                # The caller keeps ownership of an instance that could not be observed.
                binding.dispose = False
                self._scope.unbind(node, binding.target_type)
                raise
        return binding

    def on_unmount(self, node: Hashable) -> None:
        """Tear down every binding at ``node``."""
        for value, listener in self._self_listeners.pop(node, []):
            value.remove_listener(listener)
        self._scope.unmount(node)

    def unmount_subtree(self, root: Any) -> None:
        """Unmount ``root`` and its descendants, children first. ``root`` must offer ``post_order()``."""
        for node in root.post_order():
            self.on_unmount(node)

    def group(self, delegates: Iterable[BindingSpec], key: Hashable | None = None) -> BindingGroup:
        """A BindingGroup on this adapter's registry sharing its idempotency keys."""
        return BindingGroup(self._scope.registry, delegates, key, self._unique_keys)
