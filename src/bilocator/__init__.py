"""
Bilocator - a dual-mode object locator for tree-shaped UI applications.

Objects are published either globally, in a keyed Registry, or at a position in a
hierarchical tree where descendants find them by walking toward the root:
- LazyCell defers construction until first use
- Registry maps (type, name) to a LazyCell, fail-fast on duplicates
- TreeScope binds cells to tree positions, with promotion into the Registry
- SubscriptionManager and Observer track listeners attached to observable values
- Bilocator and BindingGroup tie bindings to node mount/unmount
"""

from .core import BindingBuilder, GroupDef, UsingBuilder
from .errors import (
    AlreadyRegisteredError,
    BilocatorError,
    CapabilityError,
    ConfigurationError,
    DisposedError,
    NotFoundError,
    NotRegisteredError,
)
from .host import Node, NodeHost
from .lazy import LazyCell
from .lifecycle import Bilocator, BindingGroup
from .locator_base import Locator
from .model import BindingSpec, BindingState, BindingType, InstanceKey, Location
from .observable import ChangeNotifier, Observable, ValueNotifier, is_observable
from .observer import Observer
from .registry import Registry, RegistryEntry, UniqueKeys
from .subscriptions import Subscription, SubscriptionManager
from .tree import PositionLocator, TreeBinding, TreeHost, TreeScope

__all__ = [
    "AlreadyRegisteredError",
    "Bilocator",
    "BilocatorError",
    "BindingBuilder",
    "BindingGroup",
    "BindingSpec",
    "BindingState",
    "BindingType",
    "CapabilityError",
    "ChangeNotifier",
    "ConfigurationError",
    "DisposedError",
    "GroupDef",
    "InstanceKey",
    "LazyCell",
    "Location",
    "Locator",
    "Node",
    "NodeHost",
    "NotFoundError",
    "NotRegisteredError",
    "Observable",
    "Observer",
    "PositionLocator",
    "Registry",
    "RegistryEntry",
    "Subscription",
    "SubscriptionManager",
    "TreeBinding",
    "TreeHost",
    "TreeScope",
    "UniqueKeys",
    "UsingBuilder",
    "ValueNotifier",
    "is_observable",
]
