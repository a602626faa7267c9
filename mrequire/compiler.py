"""Turns module source text into invocable factories.

A factory runs the module body in a fresh module-level namespace in which
``require``, ``exports``, ``module`` and every configured scope name are
bound. The code object is compiled with the module's location as its file
name so tracebacks point at the module, and the source is registered with
``linecache`` so those tracebacks can show the offending lines.
"""

from __future__ import annotations

import builtins
import linecache
import logging
from collections.abc import Mapping
from functools import cached_property
from types import CodeType
from typing import Any

from .locations import location_to_path
from .records import PYTHON
from .records import ModuleRecord

logger = logging.getLogger(__name__)

BASE_PARAMETERS = ("require", "exports", "module")


class ModuleFactory:
    """Compiled form of one module's source text."""

    def __init__(self, text: str, location: str, scope: Mapping[str, Any] | None = None):
        self.text = text
        self.location = location
        self.scope = dict(scope or {})
        self.parameters = BASE_PARAMETERS + tuple(self.scope)

    @cached_property
    def code(self) -> CodeType:
        """Code object for the module body, compiled on first use."""
        linecache.cache[self.location] = (
            len(self.text),
            None,
            self.text.splitlines(keepends=True),
            self.location,
        )
        return compile(self.text, self.location, "exec", dont_inherit=True)

    def __call__(self, require: Any, exports: Any, module: Any, *scope_values: Any) -> dict[str, Any]:
        """Execute the module body.

        Scope values may be passed positionally in scope-name order; when
        omitted the values configured on the compiler are injected.

        Returns:
            The module-level namespace after execution
        """
        if scope_values and len(scope_values) != len(self.scope):
            raise TypeError(
                f"{self.location} expects {len(self.scope)} scope values "
                f"({', '.join(self.scope)}), got {len(scope_values)}"
            )
        values = scope_values or tuple(self.scope.values())
        namespace: dict[str, Any] = {
            "__name__": getattr(module, "id", None) or self.location,
            "__file__": location_to_path(self.location),
            "__builtins__": builtins,
        }
        namespace.update(zip(self.parameters, (require, exports, module, *values)))
        exec(self.code, namespace)
        return namespace

    def __repr__(self) -> str:
        return f"<ModuleFactory {self.location}>"


class Compiler:
    """Attaches a factory to records that carry Python source text.

    Records that already have a factory are returned untouched, so compiling
    is idempotent.
    """

    def __init__(self, scope: Mapping[str, Any] | None = None):
        self.scope = dict(scope or {})

    @property
    def parameters(self) -> tuple[str, ...]:
        return BASE_PARAMETERS + tuple(self.scope)

    def __call__(self, module: ModuleRecord) -> ModuleRecord:
        if module.factory is not None:
            return module
        if module.type == PYTHON and module.text and module.location:
            module.factory = ModuleFactory(module.text, module.location, self.scope)
            logger.debug(f"[require:compile] {module.location}")
        return module
