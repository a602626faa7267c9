"""Exception hierarchy for module and package loading.

Read failures are recovered by the pipeline, package lookup failures by the
bootstrapper, native failures are recorded on the module record. Only
``UnsupportedLocationError`` is raised eagerly, because it signals a
misconfigured package rather than a missing resource.
"""


class RequireError(Exception):
    """Base class for all loader errors."""

    pass


class ModuleReadError(RequireError):
    """Raised when a location cannot be read as UTF-8 text."""

    def __init__(self, location: str, cause: BaseException | None = None):
        self.location = location
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Can't read {location}{detail}")


class PackageNotFoundError(RequireError):
    """Raised when no ancestor directory contains a package descriptor."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(message or f"Can't find package: {path}")


class UnsupportedLocationError(RequireError):
    """Raised when a location falls through to native loading but the package disables it."""

    def __init__(self, location: str, package_name: str, package_location: str):
        self.location = location
        self.package_name = package_name
        self.package_location = package_location
        super().__init__(f"Can't load: {location} from package {package_name} at {package_location}")


class NativeLoadError(RequireError):
    """Recorded on a module record when the import system cannot provide a module."""

    def __init__(self, module_id: str, location: str):
        self.module_id = module_id
        self.location = location
        super().__init__(f"Can't load native module {module_id!r} for {location}")


class ModuleNotLoadedError(RequireError):
    """Raised by a synchronous require of a module that was never loaded."""

    def __init__(self, module_id: str, package_location: str):
        self.module_id = module_id
        self.package_location = package_location
        super().__init__(
            f"Can't require module {module_id!r} from package at {package_location}: "
            f"it has not been loaded (only literal require() calls are discovered ahead of time)"
        )


class InvalidDescriptionError(RequireError):
    """Raised when a package descriptor cannot be parsed or validated."""

    def __init__(self, location: str, detail: str):
        self.location = location
        super().__init__(f"Invalid package description at {location}: {detail}")
