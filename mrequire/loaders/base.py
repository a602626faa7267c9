"""Loader stage contract and pipeline composition.

Every stage receives the requested location (or, for the stages that run
before path resolution, a module id), the module record to populate, and
the next stage to fall back to. ``compose`` folds an ordered list of stages
into a single ``Load`` callable, outermost stage first.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import Awaitable
from collections.abc import Callable
from collections.abc import Sequence
from functools import partial

from ..config import PackageConfig
from ..records import ModuleRecord

Load = Callable[[str, ModuleRecord], Awaitable[None]]


class LoaderStage(ABC):
    """One step of a package's loader pipeline."""

    def __init__(self, config: PackageConfig):
        self.config = config

    @abstractmethod
    def __call__(self, location: str, module: ModuleRecord, next_load: Load | None = None) -> Awaitable[None]:
        """Populate ``module`` for ``location`` or delegate to ``next_load``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config.location})"


def compose(stages: Sequence[LoaderStage]) -> Load:
    """Chain ``stages`` so each one falls back to the stage after it."""
    if not stages:
        raise ValueError("A loader pipeline needs at least one stage")
    *outer, innermost = stages
    load: Load = partial(innermost, next_load=None)
    for stage in reversed(outer):
        load = partial(stage, next_load=load)
    return load
