"""
Tree-scoped bindings resolved by walking from a position toward the root.

A binding published at a node is visible to that node and to every descendant. It can
additionally be promoted into the registry, which makes it visible everywhere until it
is demoted or the node is torn down.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from typing import Any, Generic, Protocol, TypeVar

from .errors import AlreadyRegisteredError, CapabilityError, ConfigurationError, NotFoundError, NotRegisteredError
from .host import NodeHost
from .lazy import LazyCell
from .locator_base import Locator
from .model import BindingSpec, BindingState, InstanceKey, Location
from .observable import is_observable
from .registry import Registry

T = TypeVar("T")

logger = logging.getLogger(__name__)


class TreeHost(Protocol):
    """What the engine needs from the host's tree."""

    def parent_of(self, position: Any) -> Any | None:
        """Parent of ``position``, or None at the root."""
        ...

    def mark_needs_update(self, position: Any) -> None:
        """Schedule ``position`` for re-evaluation."""
        ...


class TreeBinding(Generic[T]):
    """A LazyCell attached to one node, plus its placement and promotion state."""

    def __init__(
        self,
        node: Hashable,
        target_type: type[T],
        cell: LazyCell[T],
        location: Location,
        name: str | None = None,
        dispose: bool = True,
    ):
        self.node = node
        self.target_type = target_type
        self.cell = cell
        self.location = location
        self.name = name
        self.dispose = dispose
        self.state = BindingState.UNBOUND
        self.promoted_name: str | None = None
        self.dependents: list[Any] = []
        self.change_listener: Callable[[], None] | None = None

    @property
    def key(self) -> InstanceKey:
        return InstanceKey(self.target_type, self.name)

    @property
    def promoted_to_registry(self) -> bool:
        return self.state is BindingState.PROMOTED

    @property
    def is_tree_visible(self) -> bool:
        return self.location is Location.TREE and self.state in (BindingState.BOUND, BindingState.PROMOTED)

    def __repr__(self) -> str:
        return f"TreeBinding({self.key}, {self.location.value}, {self.state.value})"


class TreeScope:
    """
    Binds LazyCells to tree positions and resolves them by ancestor walk.

    Positions are opaque, hashable host objects; ``host`` supplies the parent relation
    and update scheduling.
    """

    def __init__(self, registry: Registry, host: TreeHost | None = None):
        self._registry = registry
        self._host: TreeHost = host if host is not None else NodeHost()
        self._bindings: dict[Any, dict[type, TreeBinding[Any]]] = {}
        self._depends_on: dict[Any, list[TreeBinding[Any]]] = {}

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def host(self) -> TreeHost:
        return self._host

    # Binding

    def bind(
        self,
        node: Hashable,
        target_type: type[T],
        *,
        factory: Callable[[], T] | None = None,
        instance: T | None = None,
        location: Location = Location.TREE,
        name: str | None = None,
        dispose: bool = True,
        on_init: Callable[[T], None] | None = None,
    ) -> TreeBinding[T]:
        """
        Attach a new LazyCell for ``target_type`` at ``node``.

        With ``Location.TREE`` the binding is found by ancestor walks from ``node`` and its
        descendants. With ``Location.REGISTRY`` the cell goes into the registry under
        (target_type, name) and the node only owns it for teardown.

        Raises:
            AlreadyRegisteredError: If ``node`` already binds ``target_type``, or the registry key is taken
            ConfigurationError: If the type is missing, or both/neither of instance and factory are given
        """
        Locator._require_type(target_type, "bind")
        if name is not None and location is Location.TREE:
            raise ConfigurationError("Tree bindings are located by type only; 'name' needs Location.REGISTRY")

        at_node = self._bindings.get(node, {})
        if target_type in at_node:
            raise AlreadyRegisteredError(
                target_type,
                name,
                Location.TREE,
                detail=f"Node {node!r} already binds an instance of type {InstanceKey(target_type)}.",
            )

        cell: LazyCell[T] = LazyCell(factory=factory, instance=instance, on_init=on_init)
        binding = TreeBinding(node, target_type, cell, location, name, dispose)
        if location is Location.REGISTRY:
            self._registry.register_cell(binding.key, cell)

        self._bindings.setdefault(node, {})[target_type] = binding
        binding.state = BindingState.BOUND
        logger.debug("Bound %s at %r", binding.key, node)
        return binding

    def bind_spec(
        self,
        node: Hashable,
        spec: BindingSpec,
        on_init: Callable[[Any], None] | None = None,
    ) -> TreeBinding[Any]:
        """Bind from a declarative BindingSpec."""
        return self.bind(
            node,
            spec.key.target_type,
            factory=spec.factory(),
            instance=spec.instance(),
            location=spec.location,
            name=spec.key.name,
            dispose=spec.dispose,
            on_init=on_init,
        )

    def binding_at(self, node: Hashable, target_type: type[T]) -> TreeBinding[T] | None:
        """The binding ``node`` itself owns for ``target_type``, if any."""
        return self._bindings.get(node, {}).get(target_type)

    def bindings_at(self, node: Hashable) -> list[TreeBinding[Any]]:
        return list(self._bindings.get(node, {}).values())

    # Resolution

    def find_binding(self, position: Any, target_type: type[T]) -> TreeBinding[T] | None:
        """Nearest tree-visible binding of exactly ``target_type``, walking from ``position`` to the root."""
        current = position
        while current is not None:
            binding = self._bindings.get(current, {}).get(target_type)
            if binding is not None and binding.is_tree_visible:
                return binding
            current = self._host.parent_of(current)
        return None

    def _require_binding(self, position: Any, target_type: type[T]) -> TreeBinding[T]:
        binding = self.find_binding(position, target_type)
        if binding is None:
            raise NotFoundError(target_type)
        return binding

    def resolve_non_reactive(self, position: Any, target_type: type[T]) -> T:
        """
        Resolve the nearest binding of ``target_type`` without recording a dependency.

        Raises:
            NotFoundError: If no ancestor (or the position itself) binds the type
        """
        return self._require_binding(position, target_type).cell.resolve()

    def resolve_reactive(self, position: Any, target_type: type[T]) -> T:
        """
        Resolve the nearest binding and make ``position`` a dependent of it.

        Every change notification of the bound value then marks ``position`` as needing
        an update. Only the first match is checked for the observable capability.

        Raises:
            NotFoundError: If no ancestor binds the type
            CapabilityError: If the nearest bound value is not observable
        """
        binding = self._require_binding(position, target_type)
        value = binding.cell.resolve()
        if not is_observable(value):
            raise CapabilityError(target_type)

        if binding.change_listener is None:
            binding.change_listener = lambda: self._notify_dependents(binding)
            value.add_listener(binding.change_listener)  # type: ignore[attr-defined]

        if not any(dep is position for dep in binding.dependents):
            binding.dependents.append(position)
            self._depends_on.setdefault(position, []).append(binding)
        return value

    def _notify_dependents(self, binding: TreeBinding[Any]) -> None:
        for dependent in list(binding.dependents):
            self._host.mark_needs_update(dependent)

    def at(self, position: Any) -> PositionLocator:
        """A read-only Locator rooted at ``position``."""
        return PositionLocator(self, position)

    # Promotion

    def promote(self, position: Any, target_type: type[T], name: str | None = None) -> T:
        """
        Make the nearest tree binding of ``target_type`` visible through the registry too.

        The value is resolved first and registered under (target_type, name) as an
        already-built instance shared with the tree binding.

        Raises:
            NotFoundError: If no ancestor binds the type
            AlreadyRegisteredError: If the binding is already promoted or the key is taken
        """
        binding = self._require_binding(position, target_type)
        if binding.state is BindingState.PROMOTED:
            raise AlreadyRegisteredError(
                target_type,
                name,
                Location.REGISTRY,
                detail=f"The tree binding of {InstanceKey(target_type)} is already promoted "
                f"as {InstanceKey(target_type, binding.promoted_name)}.",
            )
        value = binding.cell.resolve()
        self._registry.register_cell(InstanceKey(target_type, name), LazyCell(instance=value))
        binding.state = BindingState.PROMOTED
        binding.promoted_name = name
        logger.debug("Promoted %s at %r", InstanceKey(target_type, name), binding.node)
        return value

    def demote(self, position: Any, target_type: type[T], name: str | None = None) -> None:
        """
        Undo ``promote``: remove the registry entry without disposing the instance.

        Raises:
            NotFoundError: If no ancestor binds the type
            NotRegisteredError: If the binding is not promoted under ``name``
        """
        binding = self._require_binding(position, target_type)
        if binding.state is not BindingState.PROMOTED or binding.promoted_name != name:
            raise NotRegisteredError(
                target_type,
                name,
                detail=f"The tree binding of {InstanceKey(target_type)} is not promoted "
                f"under {InstanceKey(target_type, name)}.",
            )
        self._registry.unregister(target_type, name, dispose=False)
        binding.state = BindingState.BOUND
        binding.promoted_name = None
        logger.debug("Demoted %s at %r", InstanceKey(target_type, name), binding.node)

    # Teardown

    def unbind(self, node: Hashable, target_type: type[T]) -> None:
        """
        Tear down the binding ``node`` owns for ``target_type``.

        Registry-located and promoted bindings lose their registry entry without disposal;
        the cell is then disposed if the binding's dispose flag is set.
        """
        at_node = self._bindings.get(node)
        if at_node is None or target_type not in at_node:
            raise NotFoundError(
                target_type,
                detail=f"Node {node!r} does not bind an instance of type {InstanceKey(target_type)}.",
            )
        binding = at_node.pop(target_type)
        if not at_node:
            del self._bindings[node]
        self._teardown(binding)

    def unmount(self, node: Hashable) -> None:
        """
        Tear down every binding at ``node`` and drop it from all dependents lists.

        Every binding is torn down even if one of them fails; the first error is
        re-raised afterwards.
        """
        errors: list[Exception] = []
        try:
            for binding in reversed(self.bindings_at(node)):
                try:
                    self.unbind(node, binding.target_type)
                except Exception as e:
                    logger.debug("Teardown of %s at %r failed: %s", binding.key, node, e)
                    errors.append(e)
        finally:
            for binding in self._depends_on.pop(node, []):
                binding.dependents = [dep for dep in binding.dependents if dep is not node]
        if errors:
            raise errors[0]

    def _teardown(self, binding: TreeBinding[Any]) -> None:
        registry_name: str | None = None
        in_registry = False
        if binding.location is Location.REGISTRY:
            in_registry, registry_name = True, binding.name
        elif binding.state is BindingState.PROMOTED:
            in_registry, registry_name = True, binding.promoted_name

        value = binding.cell.instance_or_none
        if binding.change_listener is not None and value is not None:
            value.remove_listener(binding.change_listener)
            binding.change_listener = None
        for dependent in binding.dependents:
            remaining = [b for b in self._depends_on.get(dependent, []) if b is not binding]
            if remaining:
                self._depends_on[dependent] = remaining
            else:
                self._depends_on.pop(dependent, None)
        binding.dependents = []
        binding.state = BindingState.TORN_DOWN
        logger.debug("Tearing down %s at %r", binding.key, binding.node)

        try:
            if in_registry:
                self._registry.unregister(binding.target_type, registry_name, dispose=False)
        finally:
            if binding.dispose:
                binding.cell.dispose()


class PositionLocator(Locator):
    """Non-reactive Locator view of a TreeScope from one position."""

    def __init__(self, scope: TreeScope, position: Any):
        self._scope = scope
        self._position = position

    @property
    def position(self) -> Any:
        return self._position

    def get(self, target_type: type[T] | Any, name: str | None = None) -> T:
        if name is not None:
            raise ConfigurationError("Tree bindings cannot be located by name; use the registry for named lookups")
        return self._scope.resolve_non_reactive(self._position, target_type)

    def has(self, target_type: type[T], name: str | None = None) -> bool:
        return name is None and self._scope.find_binding(self._position, target_type) is not None
