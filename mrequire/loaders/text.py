"""Stage that reads module source text."""

import logging

from ..errors import ModuleReadError
from ..records import ModuleRecord
from .base import Load
from .base import LoaderStage

logger = logging.getLogger(__name__)


class TextLoader(LoaderStage):
    """Read ``location`` as Python source.

    A read failure is not fatal here: it means the location has no text
    form, so the request falls through to the next stage.
    """

    async def __call__(self, location: str, module: ModuleRecord, next_load: Load | None = None) -> None:
        try:
            text = await self.config.read(location)
        except (ModuleReadError, OSError) as e:
            if next_load is None:
                raise
            logger.debug(f"[require:text] {location} unreadable ({e}), falling through")
            await next_load(location, module)
            return
        module.set_source(location, text)
