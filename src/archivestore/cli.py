"""archivestore Command Line Interface.

Entry point for the archivestore CLI tool. Commands act as a minimal
archiving pipeline: they store files through a driver, persist the
returned FileHandle as JSON, and hand it back to retrieve or delete.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from archivestore import __version__
from archivestore.contracts import FileHandle, StorageError
from archivestore.core.config import ArchiveStoreSettings, SettingsFileConfigAccessor, load_settings

if TYPE_CHECKING:
    from archivestore.plugins.base import BaseStorageDriver
    from archivestore.plugins.manager import DriverManager

__all__ = ["app"]

# Module-level singleton for driver manager
_driver_manager_cache: DriverManager | None = None


@dataclass
class _LoggingFlags:
    verbose: bool = False
    json_logs: bool = False


_logging_flags = _LoggingFlags()


def _get_driver_manager() -> DriverManager:
    """Get initialized driver manager (singleton)."""
    global _driver_manager_cache

    from archivestore.plugins.manager import DriverManager

    if _driver_manager_cache is None:
        manager = DriverManager()
        manager.register_builtin_drivers()
        _driver_manager_cache = manager
    return _driver_manager_cache


app = typer.Typer(
    name="archivestore",
    help="archivestore: Pluggable storage backends for archived course data.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"archivestore version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """archivestore: Pluggable storage backends for archived course data."""
    from archivestore.core.logging import configure_logging

    _logging_flags.verbose = verbose
    _logging_flags.json_logs = json_logs
    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_settings_or_exit(settings_path: Path) -> ArchiveStoreSettings:
    """Load and validate settings, applying their logging section.

    Command-line logging flags take precedence over the settings file.
    """
    from archivestore.core.logging import configure_logging

    try:
        settings = load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings_path}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings_path}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    configure_logging(
        json_output=_logging_flags.json_logs or settings.logging.json_output,
        level="DEBUG" if _logging_flags.verbose else settings.logging.level,
    )
    return settings


def _create_driver_or_exit(plugin_name: str, settings_path: Path) -> BaseStorageDriver:
    manager = _get_driver_manager()
    try:
        return manager.create_driver(plugin_name, SettingsFileConfigAccessor(settings_path))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _read_handle_or_exit(handle_path: Path) -> FileHandle:
    try:
        data = json.loads(handle_path.read_text(encoding="utf-8"))
        return FileHandle.from_dict(data)
    except FileNotFoundError:
        typer.echo(f"Error: Handle file not found: {handle_path}", err=True)
        raise typer.Exit(1) from None
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        typer.echo(f"Error: Invalid handle file {handle_path}: {e}", err=True)
        raise typer.Exit(1) from None


def _exit_on_storage_error(e: StorageError) -> typer.Exit:
    typer.echo(f"Error ({e.kind}): {e}", err=True)
    return typer.Exit(1)


def _format_bytes(value: int | None) -> str:
    if value is None:
        return "unknown"
    return f"{value / (1024**3):.2f} GiB"


@app.command()
def drivers() -> None:
    """List registered storage drivers."""
    infos = _get_driver_manager().get_driver_infos()
    if not infos:
        typer.echo("(no drivers registered)")
        return

    for info in infos:
        retrieve = "yes" if info.supports_retrieve else "no"
        typer.echo(f"  {info.plugin_name:12} - {info.name} (tier: {info.storage_tier}, retrieve: {retrieve})")


@app.command()
def status(
    settings: Path = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Show enabled state, free space and availability of configured drivers."""
    config = _load_settings_or_exit(settings)
    if not config.drivers:
        typer.echo("No drivers configured.")
        return

    manager = _get_driver_manager()
    for plugin_name in config.drivers:
        if manager.get_driver_by_name(plugin_name) is None:
            typer.secho(f"  {plugin_name:12} - not a registered driver", fg=typer.colors.YELLOW)
            continue
        driver = _create_driver_or_exit(plugin_name, settings)
        typer.echo(
            f"  {plugin_name:12} - enabled: {'yes' if driver.is_enabled() else 'no'}, "
            f"free: {_format_bytes(driver.get_free_bytes())}, "
            f"available: {'yes' if driver.is_available() else 'no'}"
        )


@app.command()
def store(
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="File to store.",
    ),
    settings: Path = typer.Option(..., "--settings", "-s", help="Path to settings YAML file."),
    driver_name: str = typer.Option("localdir", "--driver", "-d", help="Plugin name of the storage driver."),
    job_id: int = typer.Option(..., "--job-id", "-j", help="Archive job the file belongs to."),
    logical_path: str = typer.Option("", "--path", "-p", help="Logical path to store the file under."),
    mime_type: str | None = typer.Option(None, "--mime-type", help="Content type (guessed from the name if omitted)."),
    handle_out: Path | None = typer.Option(
        None,
        "--handle-out",
        "-o",
        help="Write the handle JSON to this file instead of stdout.",
    ),
) -> None:
    """Store a file and emit its handle as JSON."""
    from archivestore.core.files import LocalStoredFile

    config = _load_settings_or_exit(settings)
    driver = _create_driver_or_exit(driver_name, settings)

    driver_settings = config.drivers.get(driver_name)
    if driver_settings is not None and not driver_settings.enabled:
        typer.echo(f"Error: Driver '{driver_name}' is disabled in {settings}", err=True)
        raise typer.Exit(1)

    try:
        handle = driver.store(job_id, LocalStoredFile(file, mime_type=mime_type), logical_path)
    except StorageError as e:
        raise _exit_on_storage_error(e) from None

    payload = json.dumps(handle.to_dict(), indent=2)
    if handle_out is None:
        typer.echo(payload)
    else:
        handle_out.write_text(payload + "\n", encoding="utf-8")
        typer.echo(f"Stored {handle.relative_path} ({handle.size_bytes} bytes), handle written to {handle_out}")


@app.command()
def retrieve(
    settings: Path = typer.Option(..., "--settings", "-s", help="Path to settings YAML file."),
    handle_path: Path = typer.Option(..., "--handle", "-H", help="Handle JSON written by 'store'."),
    output_dir: Path = typer.Option(..., "--output-dir", "-o", help="Directory to restore the file into."),
    verify: bool = typer.Option(False, "--verify", help="Verify the restored checksum against the handle."),
) -> None:
    """Restore a stored file into a directory."""
    from archivestore.core.integrity import verify_checksum

    _load_settings_or_exit(settings)
    handle = _read_handle_or_exit(handle_path)
    driver = _create_driver_or_exit(handle.backend_name, settings)

    try:
        restored = driver.retrieve(handle, handle.retrieval_target(output_dir))
        if verify:
            verify_checksum(handle, restored)
    except StorageError as e:
        raise _exit_on_storage_error(e) from None

    typer.echo(f"Restored {handle.relative_path} to {output_dir / restored.filename}")
    if verify:
        typer.echo(f"Checksum verified: {handle.checksum}")


@app.command()
def delete(
    settings: Path = typer.Option(..., "--settings", "-s", help="Path to settings YAML file."),
    handle_path: Path = typer.Option(..., "--handle", "-H", help="Handle JSON written by 'store'."),
    strict: bool = typer.Option(False, "--strict", help="Fail if the stored file is already absent."),
) -> None:
    """Delete a stored file."""
    _load_settings_or_exit(settings)
    handle = _read_handle_or_exit(handle_path)
    driver = _create_driver_or_exit(handle.backend_name, settings)

    try:
        driver.delete(handle, strict=strict)
    except StorageError as e:
        raise _exit_on_storage_error(e) from None

    typer.echo(f"Deleted {handle.relative_path}")
