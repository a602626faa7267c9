"""mrequire CLI - run Python source packages through the module loader."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.panel import Panel

from .boot import boot
from .console import console
from .console import output
from .errors import PackageNotFoundError
from .locations import ProcessContext
from .locator import ad_hoc_entry
from .locator import find_package_location_and_module_id
from .logging_setup import enable_console_logging
from .logging_setup import init_json_logging
from .package import PackageRegistry
from .settings import load_settings
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


def _show_error(title: str, error: BaseException) -> None:
    console.print(
        Panel(
            escape_markup(format_error_message(error)),
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
            expand=False,
        )
    )


@click.group()
@click.version_option(package_name="mrequire")
@click.option("--log-path", envvar="MREQUIRE_LOG_PATH", default=None, help="JSONL log file")
@click.option("--log-level", envvar="MREQUIRE_LOG_LEVEL", default=None, help="Log level for the JSONL sink")
def cli(log_path: str | None, log_level: str | None):
    """mrequire - load packages of Python modules that require each other."""
    init_json_logging(log_path, log_level)


@cli.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.argument("entry", type=click.Path(dir_okay=False))
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--overlay", "-o", "overlays", multiple=True, help="Platform overlay to enable (repeatable)")
@click.option("--verbose", "-v", is_flag=True, help="Show loader activity")
def run(entry: str, args: tuple[str, ...], overlays: tuple[str, ...], verbose: bool):
    """Run ENTRY as the main module of the package that contains it."""
    if verbose:
        enable_console_logging()

    settings = load_settings(overlays=overlays or None)
    argv = ("mrequire", entry, *args)
    context = ProcessContext(cwd=Path.cwd(), argv=argv)
    registry = PackageRegistry(settings)

    try:
        asyncio.run(boot(argv, context, registry))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Failed to run {entry}")
        _show_error(f"Failed to run {escape_markup(entry)}", e)
        sys.exit(1)


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False))
def locate(path: str):
    """Show which package owns PATH and its module id there."""
    settings = load_settings()
    context = ProcessContext.current()

    try:
        entry = asyncio.run(
            find_package_location_and_module_id(
                path, context, descriptor=settings.descriptor, extensions=settings.extensions
            )
        )
    except PackageNotFoundError:
        entry = ad_hoc_entry(path, context, extensions=settings.extensions)
        note = f" [dim](ad hoc, no {escape_markup(settings.descriptor)})[/dim]"
    else:
        note = ""
    output.print(f"[cyan]Package[/cyan] {escape_markup(entry.location)}{note}", soft_wrap=True)
    output.print(f"[cyan]Module[/cyan]  {escape_markup(entry.id)}", soft_wrap=True)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
