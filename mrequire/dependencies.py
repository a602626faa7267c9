"""Discovery of the modules a source file requires.

Only calls of the form ``require("literal")`` are found. Dynamic ids are
left to ``require.async_load`` at run time.
"""

import ast
import logging

logger = logging.getLogger(__name__)


def parse_dependencies(text: str, filename: str = "<module>") -> list[str]:
    """Return the literal ids passed to ``require`` in ``text``, in source order.

    Source that does not parse yields no dependencies; the syntax error is
    reported when the module is executed.
    """
    try:
        tree = ast.parse(text, filename=filename)
    except SyntaxError as e:
        logger.debug(f"[require:deps] {filename} does not parse yet: {e.msg}")
        return []

    found: list[str] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call) or len(node.args) != 1 or node.keywords:
            continue
        if not (isinstance(node.func, ast.Name) and node.func.id == "require"):
            continue
        argument = node.args[0]
        if isinstance(argument, ast.Constant) and isinstance(argument.value, str):
            if argument.value not in found:
                found.append(argument.value)
    return found


def resolve_id(module_id: str, base_id: str = "") -> str:
    """Resolve ``module_id`` relative to the module ``base_id``.

    Ids that do not start with ``./`` or ``../`` are top-level and returned
    unchanged apart from collapsing ``.`` segments.

    Examples:
        >>> resolve_id("./b", "lib/a")
        'lib/b'
        >>> resolve_id("../c", "lib/sub/a")
        'lib/c'
        >>> resolve_id("json", "lib/a")
        'json'
    """
    relative = module_id in (".", "..") or module_id.startswith(("./", "../"))
    parts = base_id.split("/")[:-1] if relative else []
    for part in module_id.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        parts.append(part)
    return "/".join(parts)
