"""Storage driver plugin system via pluggy.

- Base class: BaseStorageDriver with the shared store/retrieve/delete flow
- Manager: driver discovery, registration and lookup by plugin name
- Hookspecs: pluggy hook definitions
"""

from archivestore.plugins.base import MIN_FREE_BYTES, BaseStorageDriver
from archivestore.plugins.hookspecs import hookimpl, hookspec
from archivestore.plugins.manager import DriverManager

__all__ = [
    "MIN_FREE_BYTES",
    "BaseStorageDriver",
    "DriverManager",
    "hookimpl",
    "hookspec",
]
