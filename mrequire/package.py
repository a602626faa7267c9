"""Package loading: turns a package root into a runnable package object.

A ``Package`` owns one configuration, one loader pipeline and the module
records for every id loaded from it. ``PackageRegistry`` makes sure each
package location is loaded once and reads package descriptors.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import json
import logging
import types
from collections.abc import Awaitable
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from . import reader
from .compiler import Compiler
from .config import NativeRegistry
from .config import PackageConfig
from .config import PackageDescription
from .config import Reader
from .dependencies import parse_dependencies
from .dependencies import resolve_id
from .errors import InvalidDescriptionError
from .errors import ModuleNotLoadedError
from .errors import RequireError
from .loaders import make_loader
from .locations import location_to_path
from .locations import resolve_location
from .locations import strip_extension
from .records import NATIVE
from .records import PYTHON
from .records import ModuleRecord
from .records import ModuleState
from .settings import RequireSettings

logger = logging.getLogger(__name__)

DescriptionSource = PackageDescription | Mapping[str, Any] | Awaitable[PackageDescription | Mapping[str, Any]]


class ModuleRequire:
    """The ``require`` object handed to a module's factory.

    Calling it returns the exports of an already loaded module. Ids are
    resolved relative to the requiring module.
    """

    def __init__(self, package: Package, base_id: str):
        self.package = package
        self.base_id = base_id

    def resolve(self, module_id: str) -> str:
        return resolve_id(module_id, self.base_id)

    def __call__(self, module_id: str) -> Any:
        return self.package.require(self.resolve(module_id))

    async def async_load(self, module_id: str) -> Any:
        """Load and execute a module whose id was not known ahead of time."""
        return await self.package.require_async(self.resolve(module_id))

    def __repr__(self) -> str:
        return f"<require from {self.base_id!r} in {self.package.location}>"


class Package:
    """A rooted collection of modules sharing one configuration."""

    def __init__(self, config: PackageConfig, description: PackageDescription | None = None):
        self.config = config
        self.description = description or PackageDescription(name=config.name)
        self.compile = Compiler(config.scope)
        self.load_module = make_loader(config)
        self.modules: dict[str, ModuleRecord] = {}
        self._loading: dict[str, asyncio.Task[ModuleRecord]] = {}

    @property
    def location(self) -> str:
        return self.config.location

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def main_id(self) -> str | None:
        if not self.config.main:
            return None
        return resolve_id(strip_extension(self.config.main, self.config.extensions))

    def normalize_id(self, module_id: str) -> str:
        """Map the empty id to ``main`` and drop a trailing source extension."""
        if module_id in ("", "."):
            if self.main_id is None:
                raise RequireError(f"Package {self.name or self.location} has no main module")
            return self.main_id
        return strip_extension(module_id, self.config.extensions)

    def module(self, module_id: str) -> ModuleRecord:
        """Return the record for ``module_id``, creating an empty one if needed."""
        record = self.modules.get(module_id)
        if record is None:
            record = self.modules[module_id] = ModuleRecord(id=module_id)
        return record

    async def load_record(self, module_id: str) -> ModuleRecord:
        """Run the pipeline and compiler for ``module_id`` once, without dependencies."""
        task = self._loading.get(module_id)
        if task is None:
            task = asyncio.ensure_future(self._load_record(module_id))
            self._loading[module_id] = task
        return await task

    async def _load_record(self, module_id: str) -> ModuleRecord:
        record = self.module(module_id)
        await self.load_module(module_id, record)
        self.compile(record)
        if record.type == PYTHON and record.text:
            record.dependencies = parse_dependencies(record.text, record.location or module_id)
        logger.debug(f"[require:package] {self.location} {module_id} -> {record.state.value}")
        return record

    async def load(self, module_id: str, _seen: set[tuple[str, str]] | None = None) -> ModuleRecord:
        """Load ``module_id`` and everything it literally requires.

        Dependencies load concurrently. The visited set spans packages, so
        require cycles, including cycles through mappings, terminate.
        """
        module_id = self.normalize_id(module_id)
        seen = set() if _seen is None else _seen
        record = await self.load_record(module_id)
        key = (self.location, module_id)
        if key in seen:
            return record
        seen.add(key)

        if record.redirect is not None and record.redirect_id is not None:
            await record.redirect.load(record.redirect_id, seen)
            return record

        dependencies = [resolve_id(dependency, module_id) for dependency in record.dependencies]
        await asyncio.gather(*(self.load(dependency, seen) for dependency in dependencies))
        return record

    def require(self, module_id: str) -> Any:
        """Return the exports of a loaded module, executing it on first use.

        Raises:
            ModuleNotLoadedError: The module was not loaded beforehand
            NativeLoadError: The import system could not provide the module
        """
        module_id = self.normalize_id(module_id)
        record = self.modules.get(module_id)
        if record is None or (record.redirect is None and record.state is ModuleState.UNRESOLVED):
            raise ModuleNotLoadedError(module_id, self.location)
        return self.execute(record)

    def execute(self, record: ModuleRecord) -> Any:
        if record.redirect is not None and record.redirect_id is not None:
            return record.redirect.require(record.redirect_id)
        if record.error is not None:
            raise record.error
        if record.type == NATIVE or record.executed:
            return record.exports

        exports = types.ModuleType(record.id)
        if record.location:
            exports.__file__ = location_to_path(record.location)
        record.exports = exports
        record.executed = True
        if record.factory is None:
            return record.exports
        try:
            record.factory(ModuleRequire(self, record.id), exports, record)
        except BaseException:
            record.executed = False
            record.exports = None
            raise
        return record.exports

    async def require_async(self, module_id: str) -> Any:
        """Load ``module_id`` with its dependencies, then execute it."""
        record = await self.load(module_id)
        return self.execute(record)

    def __repr__(self) -> str:
        return f"Package({self.name or '<anonymous>'} at {self.location})"


class PackageRegistry:
    """Loads each package location at most once and shares the result.

    ``descriptions`` pre-resolves descriptors by location, bypassing the
    descriptor file entirely.
    """

    def __init__(
        self,
        settings: RequireSettings | None = None,
        *,
        read: Reader | None = None,
        native_modules: NativeRegistry | None = None,
        descriptions: Mapping[str, DescriptionSource] | None = None,
    ):
        self.settings = settings or RequireSettings()
        self.read = read or reader.read
        self.native_modules = native_modules or importlib.import_module
        self.descriptions: dict[str, DescriptionSource] = dict(descriptions or {})
        self._packages: dict[str, asyncio.Task[Package]] = {}

    async def load_package(
        self,
        location: str,
        *,
        descriptions: Mapping[str, DescriptionSource] | None = None,
        scope: Mapping[str, Any] | None = None,
        overlays: tuple[str, ...] | None = None,
    ) -> Package:
        """Return the package rooted at the directory ``location``.

        ``scope`` and ``overlays`` only apply when this call creates the package.
        """
        if not location.endswith("/"):
            location += "/"
        if descriptions:
            self.descriptions.update(descriptions)
        task = self._packages.get(location)
        if task is None:
            task = asyncio.ensure_future(self._load_package(location, scope, overlays))
            self._packages[location] = task
        return await task

    async def load_description(self, location: str) -> PackageDescription:
        """Read and validate the descriptor of the package at ``location``."""
        if location in self.descriptions:
            source = self.descriptions[location]
            value = await source if inspect.isawaitable(source) else source
            try:
                return PackageDescription.model_validate(value)
            except ValidationError as e:
                raise InvalidDescriptionError(location, str(e)) from e

        descriptor = resolve_location(location, self.settings.descriptor)
        text = await self.read(descriptor)
        try:
            return PackageDescription.model_validate(json.loads(text))
        except json.JSONDecodeError as e:
            raise InvalidDescriptionError(descriptor, f"not valid JSON ({e})") from e
        except ValidationError as e:
            raise InvalidDescriptionError(descriptor, str(e)) from e

    async def _load_package(
        self,
        location: str,
        scope: Mapping[str, Any] | None,
        overlays: tuple[str, ...] | None,
    ) -> Package:
        overlays = tuple(overlays if overlays is not None else self.settings.overlays)
        description = (await self.load_description(location)).apply_overlays(overlays)
        config = PackageConfig(
            location=location,
            name=description.name,
            scope={**self.settings.scope, **(scope or {})},
            overlays=overlays,
            read=self.read,
            extensions=self.settings.extensions,
            mappings=description.mapping_locations(location),
            native_modules=self.native_modules,
            main=description.main,
            registry=self,
        )
        logger.info(f"Loaded package {description.name or '<anonymous>'} at {location}")
        return Package(config, description)

    def __contains__(self, location: str) -> bool:
        return location in self._packages


async def load_package(
    location: str,
    *,
    descriptions: Mapping[str, DescriptionSource] | None = None,
    registry: PackageRegistry | None = None,
) -> Package:
    """Load the package at ``location`` with a default registry."""
    registry = registry or PackageRegistry()
    return await registry.load_package(location, descriptions=descriptions)
