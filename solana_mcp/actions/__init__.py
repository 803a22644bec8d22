"""Action catalog: definitions, bundles and the built-in core bundle."""

from .base import Action, ActionBundle, action, compose_actions
from .core import CORE_BUNDLE

__all__ = [
    "Action",
    "ActionBundle",
    "action",
    "compose_actions",
    "CORE_BUNDLE",
]
