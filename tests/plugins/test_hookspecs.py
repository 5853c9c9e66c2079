"""Tests for pluggy hook specifications."""


class TestHookspecs:
    """pluggy hook specifications."""

    def test_markers_share_project_name(self) -> None:
        from archivestore.plugins.hookspecs import PROJECT_NAME, hookimpl, hookspec

        assert PROJECT_NAME == "archivestore"
        assert hookspec.project_name == PROJECT_NAME
        assert hookimpl.project_name == PROJECT_NAME

    def test_driver_hook_defined(self) -> None:
        from archivestore.plugins.hookspecs import ArchiveStoreDriverSpec

        assert hasattr(ArchiveStoreDriverSpec, "archivestore_get_drivers")
