"""Stage that loads each location at most once per package."""

import asyncio
import logging

from ..records import ModuleRecord
from .base import Load
from .base import LoaderStage

logger = logging.getLogger(__name__)


class MemoizedLoader(LoaderStage):
    """Share one load per location.

    The first request starts a task that populates a private record; every
    request, concurrent or later, awaits that task and receives a copy of
    its outcome. Failures are shared the same way.
    """

    def __init__(self, config):
        super().__init__(config)
        self._tasks: dict[str, asyncio.Task[ModuleRecord]] = {}

    async def __call__(self, location: str, module: ModuleRecord, next_load: Load | None = None) -> None:
        if next_load is None:
            raise ValueError("MemoizedLoader must wrap another stage")
        task = self._tasks.get(location)
        if task is None:
            logger.debug(f"[require:memo] miss {location}")
            task = asyncio.ensure_future(self._load(location, module.id, next_load))
            self._tasks[location] = task
        resolved = await asyncio.shield(task)
        module.absorb(resolved)

    @staticmethod
    async def _load(location: str, module_id: str, next_load: Load) -> ModuleRecord:
        record = ModuleRecord(id=module_id)
        await next_load(location, record)
        return record

    def __contains__(self, location: str) -> bool:
        return location in self._tasks
