"""Conversion between filesystem paths and canonical locations.

A location is an absolute ``file://`` URI. Directory locations always end
with ``/``. Relative paths are interpreted against the working directory
captured in a ``ProcessContext`` rather than read ambiently.
"""

from __future__ import annotations

import os
import posixpath
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from urllib.parse import urljoin
from urllib.parse import unquote
from urllib.parse import urlparse
from urllib.request import url2pathname


@dataclass(frozen=True)
class ProcessContext:
    """Process-wide state read once at startup."""

    cwd: Path
    argv: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def current(cls) -> ProcessContext:
        """Capture the working directory and arguments of this process."""
        return cls(cwd=Path.cwd(), argv=tuple(sys.argv))

    @property
    def location(self) -> str:
        """The working directory as a directory location."""
        return current_location(self)


def _context(context: ProcessContext | None) -> ProcessContext:
    return context if context is not None else ProcessContext.current()


def current_location(context: ProcessContext | None = None) -> str:
    """Return the working directory of ``context`` as a location."""
    return directory_path_to_location(str(_context(context).cwd), context)


def path_to_location(path: str | os.PathLike[str], context: ProcessContext | None = None) -> str:
    """Convert a filesystem path to a location.

    Relative paths are joined to the context's working directory. The path is
    normalised lexically, so symlinks are not followed and the file need not
    exist. A trailing separator is kept.

    Args:
        path: Absolute or relative filesystem path
        context: Process context supplying the base directory

    Returns:
        A ``file://`` location
    """
    raw = os.fspath(path)
    is_directory = raw.endswith(("/", os.sep))
    absolute = os.path.normpath(os.path.join(_context(context).cwd, raw))
    location = Path(absolute).as_uri()
    if is_directory and not location.endswith("/"):
        location += "/"
    return location


def directory_path_to_location(path: str | os.PathLike[str], context: ProcessContext | None = None) -> str:
    """Convert a directory path to a location that always ends with ``/``."""
    raw = os.fspath(path)
    if not raw.endswith(("/", os.sep)):
        raw += "/"
    return path_to_location(raw, context)


def location_to_path(location: str) -> str:
    """Decode a location back into a filesystem path. No filesystem access."""
    return url2pathname(urlparse(location).path)


def resolve_location(base: str, reference: str) -> str:
    """Resolve ``reference`` against ``base`` using URL semantics."""
    return urljoin(base, reference)


def relative_location(location: str, base: str) -> str:
    """Return ``location`` relative to the directory location ``base``."""
    return posixpath.relpath(unquote(urlparse(location).path), unquote(urlparse(base).path))


def strip_extension(name: str, extensions: Iterable[str] = (".py",)) -> str:
    """Remove the first matching source extension from ``name``."""
    for extension in extensions:
        if extension and name.endswith(extension):
            return name[: -len(extension)]
    return name
