"""Stage that redirects ids owned by mapped dependency packages."""

import logging

from ..errors import RequireError
from ..records import ModuleRecord
from .base import Load
from .base import LoaderStage

logger = logging.getLogger(__name__)


class MappingsLoader(LoaderStage):
    """Route ``name`` and ``name/...`` ids to the package mapped as ``name``.

    The mapped module is loaded by its own package; the local record only
    remembers where to find it. Its dependencies are loaded when the package
    follows the redirect.
    """

    def match(self, module_id: str) -> tuple[str, str] | None:
        """Return ``(mapping name, id within that package)`` or None."""
        for name in sorted(self.config.mappings, key=len, reverse=True):
            if module_id == name or module_id.startswith(name + "/"):
                return name, module_id[len(name) + 1 :]
        return None

    async def __call__(self, module_id: str, module: ModuleRecord, next_load: Load | None = None) -> None:
        matched = self.match(module_id)
        if matched is None:
            if next_load is None:
                raise RequireError(f"Can't load {module_id!r}: no mapping and no further loader")
            await next_load(module_id, module)
            return

        name, inner_id = matched
        if self.config.registry is None:
            raise RequireError(f"Can't follow mapping {name!r} from {self.config.location}: no package registry")
        location = self.config.mappings[name]
        logger.debug(f"[require:mappings] {module_id} -> {location} ({inner_id or 'main'})")
        package = await self.config.registry.load_package(location)
        inner_id = package.normalize_id(inner_id)
        target = await package.load_record(inner_id)
        module.redirect = package
        module.redirect_id = inner_id
        module.location = target.location
