"""
Core Module - Configuration, errors and dependency injection.

Import dependency providers from finresearch.core.dependencies directly;
they wire the agents, which themselves import from this package.
"""

from finresearch.core.config import Settings, get_settings, settings

__all__ = [
    "Settings",
    "get_settings",
    "settings",
]
