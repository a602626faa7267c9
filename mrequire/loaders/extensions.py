"""Stage that adds source file extensions to module ids."""

import logging

from ..errors import RequireError
from ..records import ModuleRecord
from .base import Load
from .base import LoaderStage

logger = logging.getLogger(__name__)


class ExtensionsLoader(LoaderStage):
    """Try ``id + extension`` for each configured extension, then the bare id.

    Ids that already end with a configured extension are passed through.
    Only a raised error moves on to the next candidate; a recorded native
    failure counts as an outcome.
    """

    def candidates(self, module_id: str) -> list[str]:
        if not self.config.extensions or module_id.endswith(self.config.extensions):
            return [module_id]
        return [module_id + extension for extension in self.config.extensions] + [module_id]

    async def __call__(self, module_id: str, module: ModuleRecord, next_load: Load | None = None) -> None:
        if next_load is None:
            raise ValueError("ExtensionsLoader must wrap another stage")
        candidates = self.candidates(module_id)
        for candidate in candidates[:-1]:
            try:
                await next_load(candidate, module)
                return
            except RequireError as e:
                logger.debug(f"[require:extensions] {candidate} failed: {e}")
        await next_load(candidates[-1], module)
