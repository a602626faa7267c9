"""Asynchronous text reader for locations."""

import asyncio
import logging
from pathlib import Path

from .errors import ModuleReadError
from .locations import location_to_path

logger = logging.getLogger(__name__)


async def read(location: str) -> str:
    """Read the resource at ``location`` as UTF-8 text.

    Raises:
        ModuleReadError: The resource is missing, unreadable, or not UTF-8
    """
    path = Path(location_to_path(location))
    try:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ModuleReadError(location, e) from e
    logger.debug(f"[require:read] {location} ({len(text)} chars)")
    return text
