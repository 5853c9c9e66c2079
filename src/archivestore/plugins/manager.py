"""Driver manager for discovery, registration, and lookup.

Uses pluggy for hook-based registration. Drivers are keyed by their
``plugin_name``, which is also the ``backend_name`` written into every
FileHandle, so a persisted handle always leads back to its driver.
"""

from typing import Any

import pluggy

from archivestore.contracts.enums import StorageTier
from archivestore.contracts.file_handle import FileHandle
from archivestore.contracts.storage import ConfigAccessor, DriverInfo, FileMaterializer
from archivestore.plugins.base import BaseStorageDriver
from archivestore.plugins.hookspecs import PROJECT_NAME, ArchiveStoreDriverSpec

__all__ = ["DriverManager"]


class DriverManager:
    """Manages storage driver discovery, registration, and instantiation.

    Usage:
        manager = DriverManager()
        manager.register_builtin_drivers()

        driver = manager.create_driver("localdir", config)
        handle = driver.store(job_id, file, "2025/course7")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ArchiveStoreDriverSpec)

        # Map plugin_name to driver class for duplicate detection
        self._drivers: dict[str, type[BaseStorageDriver]] = {}

    def register_builtin_drivers(self) -> None:
        """Discover and register all built-in drivers.

        Call this once at startup to make built-in drivers available.
        """
        from archivestore.plugins.discovery import create_dynamic_hookimpl, discover_builtin_drivers

        self.register(create_dynamic_hookimpl(discover_builtin_drivers()))

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin instance implementing hook methods

        Raises:
            ValueError: If a driver with the same plugin_name is already registered
        """
        self._pm.register(plugin)
        try:
            self._refresh_cache()
        except ValueError:
            # Keep the manager usable with the previously registered drivers
            self._pm.unregister(plugin)
            raise

    def _refresh_cache(self) -> None:
        new_drivers: dict[str, type[BaseStorageDriver]] = {}
        for drivers in self._pm.hook.archivestore_get_drivers():
            for cls in drivers:
                name = cls.plugin_name
                if name in new_drivers:
                    raise ValueError(f"Duplicate driver plugin_name: '{name}'. Already registered by {new_drivers[name].__name__}")
                new_drivers[name] = cls

        self._drivers = new_drivers

    # === Getters ===

    def get_drivers(self) -> list[type[BaseStorageDriver]]:
        """Get all registered driver classes."""
        return list(self._drivers.values())

    def get_driver_by_name(self, plugin_name: str) -> type[BaseStorageDriver] | None:
        """Get driver class by plugin name."""
        return self._drivers.get(plugin_name)

    def get_driver_infos(self) -> list[DriverInfo]:
        """Describe every registered driver without instantiating any."""
        return [cls.info() for cls in self._drivers.values()]

    def get_drivers_by_tier(self, tier: StorageTier) -> list[type[BaseStorageDriver]]:
        """Get registered driver classes of one storage tier."""
        return [cls for cls in self._drivers.values() if cls.get_storage_tier() == tier]

    # === Instantiation ===

    def create_driver(
        self,
        plugin_name: str,
        config: ConfigAccessor,
        materializer: FileMaterializer | None = None,
    ) -> BaseStorageDriver:
        """Instantiate a registered driver.

        Raises:
            ValueError: If no driver is registered under plugin_name
        """
        cls = self._drivers.get(plugin_name)
        if cls is None:
            available = ", ".join(sorted(self._drivers)) or "none"
            raise ValueError(f"Unknown storage driver: '{plugin_name}'. Available: {available}")
        return cls(config, materializer)

    def create_driver_for_handle(
        self,
        handle: FileHandle,
        config: ConfigAccessor,
        materializer: FileMaterializer | None = None,
    ) -> BaseStorageDriver:
        """Instantiate the driver that created ``handle``."""
        return self.create_driver(handle.backend_name, config, materializer)

    def get_enabled_drivers(
        self,
        config: ConfigAccessor,
        materializer: FileMaterializer | None = None,
    ) -> list[BaseStorageDriver]:
        """Instantiate every registered driver whose ``enabled`` toggle is on."""
        drivers = [cls(config, materializer) for cls in self._drivers.values()]
        return [driver for driver in drivers if driver.is_enabled()]
