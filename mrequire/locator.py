"""Upward search for the package that owns a file."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_EXTENSIONS
from .config import DESCRIPTOR_NAME
from .errors import PackageNotFoundError
from .locations import ProcessContext
from .locations import directory_path_to_location
from .locations import path_to_location
from .locations import relative_location
from .locations import resolve_location
from .locations import strip_extension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryPoint:
    """The package location owning an entry file and the file's module id."""

    location: str
    id: str


async def find_package_path(directory: str | os.PathLike[str], descriptor: str = DESCRIPTOR_NAME) -> Path:
    """Find the nearest directory at or above ``directory`` holding a descriptor file.

    A directory with the descriptor's name does not count.

    Raises:
        PackageNotFoundError: The filesystem root was reached without a match
    """
    current = Path(directory)
    while True:
        if await asyncio.to_thread((current / descriptor).is_file):
            logger.debug(f"[require:locate] {descriptor} found in {current}")
            return current
        parent = current.parent
        if parent == current:
            raise PackageNotFoundError(str(directory), f"Can't find package: no {descriptor} above {directory}")
        current = parent


async def find_package_location_and_module_id(
    path: str | os.PathLike[str],
    context: ProcessContext | None = None,
    *,
    descriptor: str = DESCRIPTOR_NAME,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> EntryPoint:
    """Resolve an entry file to its package location and package-relative module id.

    Raises:
        PackageNotFoundError: No package descriptor exists above the file
    """
    context = context or ProcessContext.current()
    absolute = Path(os.path.normpath(os.path.join(context.cwd, path)))
    try:
        package_directory = await find_package_path(absolute.parent, descriptor)
    except PackageNotFoundError as e:
        raise PackageNotFoundError(str(absolute)) from e

    module_path = absolute.relative_to(package_directory).as_posix()
    return EntryPoint(
        location=directory_path_to_location(package_directory, context),
        id=strip_extension(module_path, extensions),
    )


def ad_hoc_entry(
    path: str | os.PathLike[str],
    context: ProcessContext | None = None,
    *,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> EntryPoint:
    """Treat the directory containing ``path`` as an anonymous package."""
    location = path_to_location(path, context)
    directory = resolve_location(location, "./")
    return EntryPoint(location=directory, id=strip_extension(relative_location(location, directory), extensions))
