# SPDX-License-Identifier: MIT
"""Command-line interface for the scoop-sync layer."""

import asyncio
import functools
import json
import sys
import traceback
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel

from . import __version__
from .cache import SnapshotStore
from .config import AppConfig, get_config_manager
from .enums import SyncPhase
from .gateway import BackendGateway
from .logging_config import get_status_logger, setup_logging
from .sync import SyncOrchestrator
from .transport import HttpTransport


F = TypeVar("F", bound=Callable[..., Any])
T = TypeVar("T")


def handle_cli_errors(func: F) -> F:
    """Decorator to handle common CLI error patterns.

    Logs the error through the status logger (with a traceback when
    --verbose was given) and exits with status code 1. click usage errors
    and aborted prompts pass through to click.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        status_logger = get_status_logger()
        verbose = kwargs.get("verbose", False)

        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.Abort):
            # Usage errors and declined prompts keep click's own exit codes
            raise
        except Exception as e:
            if verbose:
                status_logger.error(f"Error in {func.__name__}: {e}")
                traceback.print_exc()
            else:
                status_logger.error(f"Error: {e}")
            sys.exit(1)

    return wrapper  # type: ignore


def _create_transport(config: AppConfig) -> HttpTransport:
    return HttpTransport(config.backend.url, config.backend.timeout_seconds)


async def _with_gateway(action: Callable[[BackendGateway], Awaitable[T]]) -> T:
    config = get_config_manager().load_config()
    async with _create_transport(config) as transport:
        return await action(BackendGateway(transport))


def _run_gateway(action: Callable[[BackendGateway], Awaitable[T]]) -> T:
    return asyncio.run(_with_gateway(action))


def _emit(records: Sequence[BaseModel], output_format: str, columns: list[str]) -> None:
    """Print records as JSON or as aligned text columns."""
    if output_format == "json":
        print(
            json.dumps(
                [record.model_dump(mode="json", by_alias=True) for record in records],
                indent=2,
            )
        )
        return

    for record in records:
        values = [str(getattr(record, column)) for column in columns]
        print("  ".join(values))


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit if requested."""
    if value:
        setup_logging()
        get_status_logger().info(f"scoop-sync version {__version__}")
        ctx.exit(0)


format_option = click.option(
    "--format",
    "output_format",
    default="text",
    type=click.Choice(["text", "json"]),
    help="Output format",
)


@click.group()
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version information and exit",
)
def main() -> None:
    """scoop-sync - keep a local view of Scoop apps and buckets in sync."""
    detail_logger, _ = setup_logging()
    detail_logger.debug("CLI initialized")


@main.command()
@format_option
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@handle_cli_errors
def sync(output_format: str, verbose: bool) -> None:
    """Refresh the local snapshot from the backend."""

    async def _sync() -> tuple[SyncPhase, dict[str, Any]]:
        config = get_config_manager().load_config()
        async with _create_transport(config) as transport:
            orchestrator = SyncOrchestrator.from_config(config, transport)
            result = await orchestrator.initialize()
            # Let the fire-and-forget check reach the backend before exiting
            pending = orchestrator.background_tasks
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            return result.phase, result.model_dump(mode="json")

    phase, summary = asyncio.run(_sync())

    if output_format == "json":
        print(json.dumps(summary, indent=2))

    if phase is SyncPhase.ERRORED:
        sys.exit(1)


@main.command()
@click.option("--cached", is_flag=True, help="Read from the local snapshot only")
@format_option
@handle_cli_errors
def apps(cached: bool, output_format: str) -> None:
    """List installed apps."""
    if cached:
        installed = SnapshotStore().load().apps
    else:
        installed = _run_gateway(lambda gateway: gateway.list_installed_apps())

    _emit(installed, output_format, ["name", "version", "origin_repository"])


@main.command()
@click.option("--cached", is_flag=True, help="Read from the local snapshot only")
@format_option
@handle_cli_errors
def buckets(cached: bool, output_format: str) -> None:
    """List configured buckets."""
    if cached:
        configured = SnapshotStore().load().buckets
    else:
        configured = _run_gateway(lambda gateway: gateway.list_repositories())

    _emit(configured, output_format, ["name", "source_url"])


@main.command()
@click.argument("query")
@click.option("--local", is_flag=True, help="Search local bucket manifests only")
@format_option
@handle_cli_errors
def search(query: str, local: bool, output_format: str) -> None:
    """Search for apps.

    QUERY: Text to search for
    """
    if local:
        hits = _run_gateway(lambda gateway: gateway.search_local(query))
    else:
        hits = _run_gateway(lambda gateway: gateway.search_remote(query))

    _emit(hits, output_format, ["name", "version", "origin_repository"])


@main.command()
@click.option("--count", default=12, show_default=True, help="Number of apps")
@format_option
@handle_cli_errors
def discover(count: int, output_format: str) -> None:
    """Show a random selection of apps from local buckets."""
    found = _run_gateway(lambda gateway: gateway.discover_apps(count))
    _emit(found, output_format, ["name", "version", "origin_repository"])


@main.command()
@click.argument("app_name")
@click.argument("bucket")
@handle_cli_errors
def info(app_name: str, bucket: str) -> None:
    """Show manifest details for APP_NAME in BUCKET."""
    detail = _run_gateway(lambda gateway: gateway.get_app_detail(app_name, bucket))
    if detail is None:
        get_status_logger().error(f"No details found for {app_name} in {bucket}")
        sys.exit(1)

    print(json.dumps(detail.model_dump(mode="json", by_alias=True), indent=2))


@main.command()
@click.argument("app_name")
@click.option("--bucket", default=None, help="Bucket holding the manifest")
@handle_cli_errors
def deps(app_name: str, bucket: str | None) -> None:
    """List dependencies of APP_NAME."""
    for dependency in _run_gateway(
        lambda gateway: gateway.list_dependencies(app_name, bucket)
    ):
        print(dependency)


@main.command()
@click.argument("app_names", nargs=-1, required=True)
@handle_cli_errors
def sizes(app_names: tuple[str, ...]) -> None:
    """Show install sizes in bytes."""
    result = _run_gateway(lambda gateway: gateway.get_install_sizes(list(app_names)))
    for name, size in sorted(result.items()):
        print(f"{name}  {size}")


@main.command()
@click.argument("app_name")
@handle_cli_errors
def installed(app_name: str) -> None:
    """Exit 0 if APP_NAME is installed, 1 otherwise."""
    if not _run_gateway(lambda gateway: gateway.is_app_installed(app_name)):
        sys.exit(1)


@main.command()
@click.argument("app_name")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@handle_cli_errors
def install(app_name: str, verbose: bool) -> None:
    """Install APP_NAME."""
    message = _run_gateway(lambda gateway: gateway.install_app(app_name))
    get_status_logger().info(message)


@main.command()
@click.argument("app_name")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@handle_cli_errors
def uninstall(app_name: str, verbose: bool) -> None:
    """Uninstall APP_NAME."""
    message = _run_gateway(lambda gateway: gateway.uninstall_app(app_name))
    get_status_logger().info(message)


@main.command()
@click.argument("app_name", required=False)
@click.option("--all", "update_all", is_flag=True, help="Update every installed app")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@handle_cli_errors
def update(app_name: str | None, update_all: bool, verbose: bool) -> None:
    """Update APP_NAME, or every app with --all."""
    if update_all and app_name is None:
        message = _run_gateway(lambda gateway: gateway.update_all_apps())
    elif app_name is not None and not update_all:
        name = app_name
        message = _run_gateway(lambda gateway: gateway.update_app(name))
    else:
        raise click.UsageError("Specify either APP_NAME or --all")
    get_status_logger().info(message)


@main.command(name="update-manager")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@handle_cli_errors
def update_manager(verbose: bool) -> None:
    """Update the package manager itself."""
    message = _run_gateway(lambda gateway: gateway.update_manager())
    get_status_logger().info(message)


@main.group()
def bucket() -> None:
    """Add or remove buckets."""
    pass


@bucket.command(name="add")
@click.argument("name")
@click.argument("url", required=False)
@handle_cli_errors
def bucket_add(name: str, url: str | None) -> None:
    """Add bucket NAME, optionally from URL."""
    message = _run_gateway(lambda gateway: gateway.add_repository(name, url))
    get_status_logger().info(message)


@bucket.command(name="remove")
@click.argument("name")
@handle_cli_errors
def bucket_remove(name: str) -> None:
    """Remove bucket NAME."""
    message = _run_gateway(lambda gateway: gateway.remove_repository(name))
    get_status_logger().info(message)


@main.command()
@click.option(
    "--init",
    "init_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write a default configuration file to this path",
)
@handle_cli_errors
def config(init_path: Path | None) -> None:
    """Show the complete current configuration."""
    if init_path is not None:
        get_config_manager().create_default_config(init_path)
        get_status_logger().info(f"Default configuration written to {init_path}")
        return

    print(get_config_manager().show_config())


@main.group()
def cache() -> None:
    """Inspect or clear the local snapshot."""
    pass


@cache.command(name="show")
@handle_cli_errors
def cache_show() -> None:
    """Summarize the cached snapshot."""
    status_logger = get_status_logger()
    config = get_config_manager().load_config()
    snapshot = SnapshotStore(config.cache.resolved_db_path()).load()

    if snapshot.is_empty:
        status_logger.info("Cache is empty.")
        return

    status_logger.info(
        f"{len(snapshot.apps)} apps, {len(snapshot.buckets)} buckets "
        f"(saved: {snapshot.saved_at})"
    )
    if snapshot.is_stale(config.cache.max_age_hours):
        status_logger.info("Snapshot is stale; run 'scoop-sync sync' to refresh.")


@cache.command(name="clear")
@click.option("--confirm", is_flag=True, help="Skip confirmation prompt")
@handle_cli_errors
def cache_clear(confirm: bool) -> None:
    """Remove the cached snapshot."""
    if not confirm:
        click.confirm(
            "This will clear the cached app and bucket lists. Continue?", abort=True
        )

    if not SnapshotStore().clear():
        get_status_logger().error("Could not clear the cache.")
        sys.exit(1)

    get_status_logger().info("Cache cleared.")


if __name__ == "__main__":
    main()
