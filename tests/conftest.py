"""Pytest configuration for mrequire tests."""

import json
import logging
from pathlib import Path

import pytest
from mrequire.logging_setup import JsonlHandler

# A descriptor name no real directory above the temp dir will contain, so
# "no package anywhere" scenarios don't depend on the machine running the tests.
ABSENT_DESCRIPTOR = "mrequire-test-absent-descriptor.json"


@pytest.fixture
def write_tree(tmp_path):
    """Write a ``{relative path: content}`` mapping below ``tmp_path``.

    Dict values are written as JSON, everything else as text.
    """

    def _write(files: dict[str, object], root: Path | None = None) -> Path:
        base = root or tmp_path
        for relative, content in files.items():
            target = base / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, dict):
                target.write_text(json.dumps(content), encoding="utf-8")
            else:
                target.write_text(str(content), encoding="utf-8")
        return base

    return _write


@pytest.fixture(autouse=True)
def _drop_jsonl_handlers():
    """Keep CLI logging setup from leaking file handlers between tests."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)
