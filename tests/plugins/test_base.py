"""Tests for the shared BaseStorageDriver flow."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fakes import BrokenVaultDriver, ColdVaultDriver

from archivestore.contracts import (
    ConfigurationError,
    DriverInfo,
    PathSafetyError,
    StorageDriver,
    StorageIOError,
    StorageTier,
    UnsupportedOperationError,
)
from archivestore.core.config import MappingConfigAccessor
from archivestore.core.files import LocalStoredFile
from archivestore.core.integrity import hash_bytes
from archivestore.plugins.base import MIN_FREE_BYTES, normalize_logical_path, validate_filename


class TestNormalizeLogicalPath:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/foo/bar/", "foo/bar"),
            ("foo/bar", "foo/bar"),
            ("///foo///", "foo"),
            ("", ""),
            ("/", ""),
            ("2025/course7", "2025/course7"),
            ("a/..b/c", "a/..b/c"),
        ],
    )
    def test_strips_separators(self, raw: str, expected: str) -> None:
        assert normalize_logical_path(raw) == expected

    @pytest.mark.parametrize("raw", ["..", "../etc", "a/../../b", "/a/..", "a\\..\\b", "a\x00b"])
    def test_rejects_traversal(self, raw: str) -> None:
        with pytest.raises(PathSafetyError):
            normalize_logical_path(raw)


class TestValidateFilename:
    @pytest.mark.parametrize("filename", ["", ".", "..", "a/b", "a\\b", "a\x00"])
    def test_rejects_unsafe_names(self, filename: str) -> None:
        with pytest.raises(PathSafetyError):
            validate_filename(filename)

    def test_accepts_plain_name(self) -> None:
        assert validate_filename("report..final.pdf") == "report..final.pdf"


class TestStaticCapabilities:
    def test_answered_without_instance(self) -> None:
        assert ColdVaultDriver.get_name() == "Cold vault"
        assert ColdVaultDriver.get_plugin_name() == "coldvault"
        assert ColdVaultDriver.get_storage_tier() == StorageTier.COLD
        assert ColdVaultDriver.supports_retrieve() is False

    def test_info_descriptor(self) -> None:
        assert ColdVaultDriver.info() == DriverInfo(
            plugin_name="coldvault",
            name="Cold vault",
            storage_tier=StorageTier.COLD,
            supports_retrieve=False,
        )

    def test_satisfies_driver_protocol(self) -> None:
        assert isinstance(ColdVaultDriver(MappingConfigAccessor()), StorageDriver)


class TestAvailability:
    def test_two_gib_free_is_available(self) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor(), free_bytes=2 * 1024 * 1024 * 1024)

        assert driver.is_available() is True

    def test_512_bytes_free_is_unavailable(self) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor(), free_bytes=512)

        assert driver.is_available() is False

    def test_exactly_threshold_is_unavailable(self) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor(), free_bytes=MIN_FREE_BYTES)

        assert driver.is_available() is False

    def test_unknown_free_space_is_unavailable(self) -> None:
        assert ColdVaultDriver(MappingConfigAccessor(), free_bytes=None).is_available() is False


class TestEnabledToggle:
    def test_unset_means_enabled(self) -> None:
        assert ColdVaultDriver(MappingConfigAccessor()).is_enabled() is True

    def test_disabled(self) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor({"coldvault": {"enabled": False}}))

        assert driver.is_enabled() is False

    def test_unreadable_config_reports_disabled(self) -> None:
        class _BrokenConfig:
            def get(self, plugin_name: str, key: str) -> object:
                raise ConfigurationError("settings file missing")

        assert ColdVaultDriver(_BrokenConfig()).is_enabled() is False

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1", True),
            ("true", True),
            ("Yes", True),
            (" ON ", True),
            ("0", False),
            ("false", False),
            ("No", False),
            ("off", False),
            ("", False),
        ],
    )
    def test_string_flags(self, value: str, expected: bool) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor({"coldvault": {"enabled": value}}))

        assert driver.is_enabled() is expected

    def test_unrecognized_string_reports_disabled(self) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor({"coldvault": {"enabled": "maybe"}}))

        assert driver.is_enabled() is False


class TestStoreFlow:
    def test_handle_built_from_source(self, make_source_file: Callable[..., LocalStoredFile]) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor())

        handle = driver.store(3, make_source_file("slides.pdf", b"slides"), "/2025/course1/")

        assert handle.backend_name == "coldvault"
        assert handle.logical_path == "2025/course1"
        assert handle.size_bytes == 6
        assert handle.checksum == hash_bytes(b"slides")
        assert handle.mime_type == "application/pdf"
        assert driver.placed == [handle]

    def test_failed_placement_returns_no_handle(self, make_source_file: Callable[..., LocalStoredFile]) -> None:
        driver = BrokenVaultDriver(MappingConfigAccessor())

        with pytest.raises(StorageIOError, match="disk on fire"):
            driver.store(3, make_source_file(), "x")

    def test_unreadable_source_is_io_error(self, tmp_path: Path) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor())

        with pytest.raises(StorageIOError, match="Cannot read source file"):
            driver.store(3, LocalStoredFile(tmp_path / "does-not-exist.bin"), "x")

        assert driver.placed == []

    def test_traversal_rejected_before_placement(self, make_source_file: Callable[..., LocalStoredFile]) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor())

        with pytest.raises(PathSafetyError):
            driver.store(3, make_source_file(), "../outside")

        assert driver.placed == []


class TestRetrieveAndDeleteFlow:
    def test_retrieve_on_write_only_backend_raises(self, make_source_file: Callable[..., LocalStoredFile], tmp_path: Path) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor())
        handle = driver.store(1, make_source_file(), "x")

        with pytest.raises(UnsupportedOperationError):
            driver.retrieve(handle, handle.retrieval_target(tmp_path))

    def test_delete_passes_strict_flag(self, make_source_file: Callable[..., LocalStoredFile]) -> None:
        driver = ColdVaultDriver(MappingConfigAccessor())
        handle = driver.store(1, make_source_file(), "x")

        driver.delete(handle, strict=True)

        assert driver.deleted == [(handle, True)]

    def test_handle_from_other_backend_rejected(self, make_source_file: Callable[..., LocalStoredFile]) -> None:
        handle = ColdVaultDriver(MappingConfigAccessor()).store(1, make_source_file(), "x")
        other = BrokenVaultDriver(MappingConfigAccessor())

        with pytest.raises(UnsupportedOperationError, match="belongs to backend 'coldvault'") as exc_info:
            other.delete(handle)

        assert exc_info.value.kind == "unsupported_operation"
