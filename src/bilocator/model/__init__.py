"""
Model subpackage containing the keys and binding declarations.

Kept free of engine imports so every other module can depend on it.
"""

from .bindings import BindingSpec, BindingState, BindingType, Location
from .keys import InstanceKey

__all__ = ["BindingSpec", "BindingState", "BindingType", "InstanceKey", "Location"]
