"""pluggy hook specifications for storage driver plugins.

Plugins implement these hooks to register driver classes with the
DriverManager.

Usage (implementing a plugin):
    from archivestore.plugins.hookspecs import hookimpl

    class MyBackends:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def archivestore_get_drivers(self):
            return [MyDriver]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from archivestore.plugins.base import BaseStorageDriver

# Project name for pluggy
PROJECT_NAME = "archivestore"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ArchiveStoreDriverSpec:
    """Hook specifications for storage driver plugins."""

    @hookspec
    def archivestore_get_drivers(self) -> list[type["BaseStorageDriver"]]:  # type: ignore[empty-body]
        """Return storage driver classes.

        Returns:
            List of driver classes (not instances)
        """
