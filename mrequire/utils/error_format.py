"""Safe error message formatting utilities.

Ensures exceptions always have useful display messages, even when their
str() representation is empty, and surfaces the chained cause of loader
errors so a missing native module shows why the import failed.
"""

from __future__ import annotations

import asyncio

from rich.markup import escape as _escape_markup

# Friendly messages for specific exception types known to have empty str()
FRIENDLY_MESSAGES: dict[type, str] = {
    TimeoutError: "Operation timed out.",
    asyncio.CancelledError: "Operation was cancelled.",
    KeyboardInterrupt: "Operation interrupted by user.",
    RecursionError: "Maximum recursion depth exceeded while running a module.",
}


def format_error_message(e: BaseException, *, include_type: bool = True, include_cause: bool = True) -> str:
    """Format an exception into a useful display message.

    Args:
        e: The exception to format
        include_type: Whether to include the exception type name
        include_cause: Whether to append the explicitly chained cause

    Returns:
        A non-empty, user-friendly error message

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        message = f"{error_type}: {error_str}" if include_type and error_type not in error_str else error_str
    else:
        message = f"{error_type}: (no additional details)"
        for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
            if isinstance(e, exc_type):
                message = f"{error_type}: {friendly_msg}"
                break

    if include_cause and e.__cause__ is not None:
        message += f"\n  caused by {format_error_message(e.__cause__, include_cause=False)}"
    return message


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))
