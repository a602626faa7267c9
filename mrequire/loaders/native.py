"""Terminal stage that defers to the Python import system."""

import logging
from collections.abc import Awaitable

from ..config import NATIVE_OVERLAY
from ..config import PackageConfig
from ..errors import NativeLoadError
from ..errors import UnsupportedLocationError
from ..locations import strip_extension
from ..records import ModuleRecord
from .base import Load
from .base import LoaderStage

logger = logging.getLogger(__name__)


def native_module_id(location: str, config: PackageConfig) -> str:
    """Derive an importable dotted name from a location inside the package."""
    module_id = location.removeprefix(config.location)
    module_id = strip_extension(module_id, config.extensions)
    return module_id.strip("/").replace("/", ".")


class NativeLoader(LoaderStage):
    """Last resort for locations with no source text.

    When the package's overlays include ``python`` the module id is looked up
    in the native registry. A failed lookup is recorded on ``module.error``
    instead of being raised; callers decide whether it matters. Without the
    overlay, calling the stage raises ``UnsupportedLocationError`` at once,
    before any awaitable is produced.
    """

    def __init__(self, config: PackageConfig):
        super().__init__(config)
        self.enabled = NATIVE_OVERLAY in config.overlays

    def __call__(self, location: str, module: ModuleRecord, next_load: Load | None = None) -> Awaitable[None]:
        if not self.enabled:
            raise UnsupportedLocationError(location, self.config.name, self.config.location)
        return self._load(location, module)

    async def _load(self, location: str, module: ModuleRecord) -> None:
        module_id = native_module_id(location, self.config)
        try:
            exports = self.config.native_modules(module_id)
        except Exception as e:
            logger.debug(f"[require:native] {module_id} failed: {e}")
            error = NativeLoadError(module_id, location)
            error.__cause__ = e
            module.set_native_error(location, error)
            return
        logger.debug(f"[require:native] {location} -> {module_id}")
        module.set_native(location, exports)
