"""Stage that turns a module id into a location."""

import logging

from ..errors import RequireError
from ..locations import resolve_location
from ..records import ModuleRecord
from .base import Load
from .base import LoaderStage

logger = logging.getLogger(__name__)


class PathsLoader(LoaderStage):
    """Try the id under each search path of the package, in order."""

    async def __call__(self, module_id: str, module: ModuleRecord, next_load: Load | None = None) -> None:
        if next_load is None:
            raise ValueError("PathsLoader must wrap another stage")
        last_error: Exception | None = None
        for path in self.config.paths:
            location = resolve_location(path, module_id)
            try:
                await next_load(location, module)
                return
            except RequireError as e:
                logger.debug(f"[require:paths] {module_id} not at {path}: {e}")
                last_error = e
        if last_error is None:
            raise RequireError(f"Can't load {module_id}: package {self.config.location} has no search paths")
        raise last_error
