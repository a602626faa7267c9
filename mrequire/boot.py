"""Program bootstrapping from a command-line entry path."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from collections.abc import Sequence
from contextlib import contextmanager
from typing import Any

from .config import PackageDescription
from .errors import PackageNotFoundError
from .errors import RequireError
from .locations import ProcessContext
from .locator import ad_hoc_entry
from .locator import find_package_location_and_module_id
from .package import PackageRegistry

logger = logging.getLogger(__name__)


@contextmanager
def program_argv(argv: Sequence[str]) -> Iterator[None]:
    """Expose ``argv`` as ``sys.argv`` for the duration of the block."""
    saved = sys.argv
    sys.argv = list(argv)
    try:
        yield
    finally:
        sys.argv = saved


async def boot(
    argv: Sequence[str] | None = None,
    context: ProcessContext | None = None,
    registry: PackageRegistry | None = None,
) -> Any:
    """Load the package owning ``argv[1]`` and run that module.

    When no package descriptor exists above the entry file, its directory is
    treated as an anonymous package with an empty description and the file
    is run by its bare name. The program sees ``argv[1:]`` as ``sys.argv``
    while it runs.

    Returns:
        The entry module's exports
    """
    context = context or ProcessContext.current()
    argv = tuple(argv if argv is not None else context.argv)
    if len(argv) < 2:
        raise RequireError("Usage: mrequire <entry module path> [args...]")
    program = argv[1]
    registry = registry or PackageRegistry()
    settings = registry.settings

    try:
        entry = await find_package_location_and_module_id(
            program, context, descriptor=settings.descriptor, extensions=settings.extensions
        )
    except PackageNotFoundError:
        entry = ad_hoc_entry(program, context, extensions=settings.extensions)
        logger.info(f"No package above {program}, running it from {entry.location} as {entry.id}")
        package = await registry.load_package(entry.location, descriptions={entry.location: PackageDescription()})
    else:
        logger.info(f"Running {entry.id} from package at {entry.location}")
        package = await registry.load_package(entry.location)

    with program_argv(argv[1:]):
        return await package.require_async(entry.id)
