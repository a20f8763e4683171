"""Core package - Configuration, exceptions, permissions and access decisions."""
from .config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
