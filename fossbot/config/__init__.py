"""Configuration package exports."""

from .loader import get_configuration, load_config  # noqa: F401
from .model import BotConfig, ScopedSecret

__all__ = [
    "BotConfig",
    "ScopedSecret",
    "get_configuration",
    "load_config",
]
