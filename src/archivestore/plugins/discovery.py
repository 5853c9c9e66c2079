"""Dynamic driver discovery by folder scanning.

Scans the built-in drivers package for classes that:
1. Inherit from BaseStorageDriver
2. Have a non-empty `plugin_name` class attribute
3. Are not abstract (no @abstractmethod methods without implementation)
"""

import importlib
import inspect
import logging
from pathlib import Path

from archivestore.plugins.base import BaseStorageDriver

logger = logging.getLogger(__name__)

DRIVERS_PACKAGE = "archivestore.plugins.drivers"

# Files that should never be scanned for drivers
EXCLUDED_FILES: frozenset[str] = frozenset({"__init__.py"})


def discover_drivers_in_directory(directory: Path, package: str) -> list[type[BaseStorageDriver]]:
    """Discover driver classes in a package directory.

    Modules are imported under their real dotted name, so discovered
    classes are the same objects a direct import would return.

    Args:
        directory: Path of the package to scan (non-recursive)
        package: Dotted name of that package

    Returns:
        List of discovered driver classes
    """
    discovered: list[type[BaseStorageDriver]] = []

    if not directory.exists():
        logger.warning("Driver directory does not exist: %s", directory)
        return discovered

    for py_file in sorted(directory.glob("*.py")):
        if py_file.name in EXCLUDED_FILES:
            continue

        # Driver code is system-owned; import errors are bugs and propagate
        module = importlib.import_module(f"{package}.{py_file.stem}")

        for name, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__:
                continue
            if not issubclass(obj, BaseStorageDriver) or obj is BaseStorageDriver:
                continue
            if inspect.isabstract(obj):
                continue
            if not getattr(obj, "plugin_name", None):
                logger.warning(
                    "Class %s in %s inherits from BaseStorageDriver but has no/empty 'plugin_name' attribute - skipping",
                    name,
                    py_file,
                )
                continue
            discovered.append(obj)

    return discovered


def discover_builtin_drivers() -> list[type[BaseStorageDriver]]:
    """Discover all built-in drivers.

    Raises:
        ValueError: If two built-in drivers share a plugin_name
    """
    drivers_root = Path(__file__).parent / "drivers"
    discovered = discover_drivers_in_directory(drivers_root, DRIVERS_PACKAGE)

    seen: dict[str, type[BaseStorageDriver]] = {}
    for cls in discovered:
        if cls.plugin_name in seen:
            raise ValueError(
                f"Duplicate driver plugin_name '{cls.plugin_name}': {seen[cls.plugin_name].__name__} and {cls.__name__}"
            )
        seen[cls.plugin_name] = cls
    return discovered


def create_dynamic_hookimpl(driver_classes: list[type[BaseStorageDriver]]) -> object:
    """Create a pluggy hookimpl object that registers ``driver_classes``.

    Returns:
        Object instance with a decorated ``archivestore_get_drivers`` method
    """
    from archivestore.plugins.hookspecs import hookimpl

    class DynamicHookImpl:
        """Dynamically generated hook implementer."""

        @hookimpl
        def archivestore_get_drivers(self) -> list[type[BaseStorageDriver]]:
            return driver_classes

    return DynamicHookImpl()
