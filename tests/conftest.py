# tests/conftest.py
"""Shared test fixtures.

Fixtures:
- storage_root: An existing directory to use as a driver's storage_path
- config: A MappingConfigAccessor pointing the localdir driver at storage_root
- localdir: A LocalDirDriver wired to that accessor
- make_source_file: Factory writing content to disk and wrapping it as a StoredFile

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from archivestore.core.config import MappingConfigAccessor
from archivestore.core.files import LocalStoredFile
from archivestore.plugins.drivers.localdir import LocalDirDriver


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def config(storage_root: Path) -> MappingConfigAccessor:
    return MappingConfigAccessor({"localdir": {"enabled": True, "storage_path": str(storage_root)}})


@pytest.fixture
def localdir(config: MappingConfigAccessor) -> LocalDirDriver:
    return LocalDirDriver(config)


@pytest.fixture
def make_source_file(tmp_path: Path) -> Callable[..., LocalStoredFile]:
    """Factory: make_source_file(filename, content, mime_type=None)."""
    source_dir = tmp_path / "source"
    source_dir.mkdir()

    def _make(filename: str = "report.pdf", content: bytes = b"archive data", mime_type: str | None = None) -> LocalStoredFile:
        path = source_dir / filename
        path.write_bytes(content)
        return LocalStoredFile(path, mime_type=mime_type)

    return _make


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
