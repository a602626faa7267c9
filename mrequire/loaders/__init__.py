"""Composable loader pipeline.

``make_loader`` assembles the stages in their fixed order: mapping,
extension and path resolution first, so a bare id becomes a concrete
location, then memoization directly around the two terminal stages so both
text and native loads happen at most once per location.
"""

from ..config import PackageConfig
from .base import Load
from .base import LoaderStage
from .base import compose
from .extensions import ExtensionsLoader
from .mappings import MappingsLoader
from .memoized import MemoizedLoader
from .native import NativeLoader
from .native import native_module_id
from .paths import PathsLoader
from .text import TextLoader


def build_stages(config: PackageConfig) -> list[LoaderStage]:
    """Instantiate the pipeline stages for ``config``, outermost first."""
    return [
        MappingsLoader(config),
        ExtensionsLoader(config),
        PathsLoader(config),
        MemoizedLoader(config),
        TextLoader(config),
        NativeLoader(config),
    ]


def make_loader(config: PackageConfig) -> Load:
    """Build the single entry point that resolves an id to a populated record."""
    return compose(build_stages(config))


__all__ = [
    "ExtensionsLoader",
    "Load",
    "LoaderStage",
    "MappingsLoader",
    "MemoizedLoader",
    "NativeLoader",
    "PathsLoader",
    "TextLoader",
    "build_stages",
    "compose",
    "make_loader",
    "native_module_id",
]
