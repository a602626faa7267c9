"""Per-load module state populated by the loader pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from .compiler import ModuleFactory
    from .package import Package

PYTHON = "python"
NATIVE = "native"


class ModuleState(str, Enum):
    """Which stage of its lifecycle a record has reached."""

    UNRESOLVED = "unresolved"
    SOURCE_LOADED = "source_loaded"
    COMPILED = "compiled"
    NATIVE_LOADED = "native_loaded"
    NATIVE_FAILED = "native_failed"


@dataclass(eq=False)
class ModuleRecord:
    """Mutable state for one module within one package.

    Exactly one pipeline stage populates a record. Once it holds a factory,
    native exports or a native error it is terminal for the pipeline.
    """

    id: str
    location: str | None = None
    type: str | None = None
    text: str | None = None
    factory: ModuleFactory | None = None
    exports: Any = None
    error: BaseException | None = None
    dependencies: list[str] = field(default_factory=list)
    redirect: Package | None = None
    redirect_id: str | None = None
    executed: bool = False

    @property
    def state(self) -> ModuleState:
        if self.type == NATIVE:
            return ModuleState.NATIVE_FAILED if self.error is not None else ModuleState.NATIVE_LOADED
        if self.factory is not None:
            return ModuleState.COMPILED
        if self.text is not None:
            return ModuleState.SOURCE_LOADED
        return ModuleState.UNRESOLVED

    def set_source(self, location: str, text: str) -> None:
        self.type = PYTHON
        self.text = text
        self.location = location

    def set_native(self, location: str, exports: Any) -> None:
        self.type = NATIVE
        self.location = location
        self.exports = exports
        self.error = None

    def set_native_error(self, location: str, error: BaseException) -> None:
        self.type = NATIVE
        self.location = location
        self.error = error

    def absorb(self, other: ModuleRecord) -> None:
        """Copy the pipeline outcome of ``other`` onto this record."""
        if other is self:
            return
        self.location = other.location
        self.type = other.type
        self.text = other.text
        self.factory = other.factory
        self.error = other.error
        if other.type == NATIVE:
            self.exports = other.exports
