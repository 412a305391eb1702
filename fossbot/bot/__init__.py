"""Bot commands and their registry."""

from .commands import build_registry  # noqa: F401
from .registry import CommandRegistry, requires_identified  # noqa: F401

__all__ = ["CommandRegistry", "build_registry", "requires_identified"]
