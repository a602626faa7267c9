"""mrequire - on-demand loading of Python source packages.

Modules are plain Python files that receive ``require``, ``exports`` and
``module`` as globals and require each other by relative or
package-qualified id. Modules without source text fall back to the Python
import system.
"""

from .boot import boot
from .compiler import Compiler
from .compiler import ModuleFactory
from .config import NATIVE_OVERLAY
from .config import PackageConfig
from .config import PackageDescription
from .errors import InvalidDescriptionError
from .errors import ModuleNotLoadedError
from .errors import ModuleReadError
from .errors import NativeLoadError
from .errors import PackageNotFoundError
from .errors import RequireError
from .errors import UnsupportedLocationError
from .loaders import make_loader
from .locations import ProcessContext
from .locations import current_location
from .locations import directory_path_to_location
from .locations import location_to_path
from .locations import path_to_location
from .locator import EntryPoint
from .locator import find_package_location_and_module_id
from .locator import find_package_path
from .package import Package
from .package import PackageRegistry
from .package import load_package
from .reader import read
from .records import ModuleRecord
from .records import ModuleState

__all__ = [
    "Compiler",
    "EntryPoint",
    "InvalidDescriptionError",
    "ModuleFactory",
    "ModuleNotLoadedError",
    "ModuleReadError",
    "ModuleRecord",
    "ModuleState",
    "NATIVE_OVERLAY",
    "NativeLoadError",
    "Package",
    "PackageConfig",
    "PackageDescription",
    "PackageNotFoundError",
    "PackageRegistry",
    "ProcessContext",
    "RequireError",
    "UnsupportedLocationError",
    "boot",
    "current_location",
    "directory_path_to_location",
    "find_package_location_and_module_id",
    "find_package_path",
    "load_package",
    "location_to_path",
    "make_loader",
    "path_to_location",
    "read",
]
