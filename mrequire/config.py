"""Package descriptor schema and per-package loader configuration."""

from __future__ import annotations

import importlib
from collections.abc import Awaitable
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from . import reader
from .locations import resolve_location

if TYPE_CHECKING:
    from .package import PackageRegistry

DESCRIPTOR_NAME = "package.json"
NATIVE_OVERLAY = "python"
DEFAULT_OVERLAYS: tuple[str, ...] = (NATIVE_OVERLAY,)
DEFAULT_EXTENSIONS: tuple[str, ...] = (".py",)

Reader = Callable[[str], Awaitable[str]]
NativeRegistry = Callable[[str], Any]


class MappingDescription(BaseModel):
    """A dependency package referenced by a mapping name."""

    location: str


class PackageDescription(BaseModel):
    """Parsed contents of a package descriptor.

    Unknown keys are kept so other tools can share the same file.
    """

    model_config = ConfigDict(extra="allow")

    name: str = ""
    version: str | None = None
    main: str | None = None
    mappings: dict[str, str | MappingDescription] = Field(default_factory=dict)
    overlay: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def apply_overlays(self, overlays: tuple[str, ...]) -> PackageDescription:
        """Merge the overlay sections named by ``overlays``, in order."""
        if not self.overlay:
            return self
        data = self.model_dump(exclude={"overlay"})
        for tag in overlays:
            data.update(self.overlay.get(tag, {}))
        return PackageDescription.model_validate(data)

    def mapping_locations(self, package_location: str) -> dict[str, str]:
        """Resolve every mapping to a directory location."""
        resolved = {}
        for name, mapping in self.mappings.items():
            target = mapping if isinstance(mapping, str) else mapping.location
            if not target.endswith("/"):
                target += "/"
            resolved[name] = resolve_location(package_location, target)
        return resolved


@dataclass
class PackageConfig:
    """Loader configuration shared by every stage of one package's pipeline.

    Stages hold a reference to the same instance; it must not change once
    the pipeline is assembled.
    """

    location: str
    name: str = ""
    scope: dict[str, Any] = field(default_factory=dict)
    overlays: tuple[str, ...] = DEFAULT_OVERLAYS
    read: Reader = reader.read
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    paths: list[str] = field(default_factory=list)
    mappings: dict[str, str] = field(default_factory=dict)
    native_modules: NativeRegistry = importlib.import_module
    main: str | None = None
    registry: PackageRegistry | None = None

    def __post_init__(self) -> None:
        if not self.location.endswith("/"):
            self.location += "/"
        if not self.paths:
            self.paths = [self.location]
        self.overlays = tuple(self.overlays)
        self.extensions = tuple(self.extensions)
