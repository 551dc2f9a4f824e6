"""
Core utility functions
"""
import os
from pathlib import Path
from typing import Iterator, Mapping, Optional

from .exceptions import SubstitutionError
from .logging import get_logger

logger = get_logger(__name__)


# ============================================================
# Variable Substitution
# ============================================================

def _read_variable_name(chars: Iterator[str]) -> str:
    """
    Consume a ``{NAME}`` expression following an unescaped ``$``.

    Raises:
        SubstitutionError: If the expression is malformed
    """
    if next(chars, None) != "{":
        raise SubstitutionError(
            "Invalid path: unescaped '$' must be followed by a bracketed "
            "variable name, e.g. ${HOME}"
        )

    first = next(chars, None)
    if first is None or not (first.isascii() and first.isalpha() or first == "_"):
        raise SubstitutionError(
            "Invalid path: variables must start with an alphabetic character or _"
        )

    name = [first]
    for ch in chars:
        if ch == "}":
            return "".join(name)
        if not (ch.isascii() and ch.isalnum() or ch == "_"):
            raise SubstitutionError(
                "Invalid path: variables may only contain alphanumeric characters or _"
            )
        name.append(ch)

    raise SubstitutionError("Invalid path: variables must end with a closing }")


def substitute_variables(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Expand ``${NAME}`` references in a settings path.

    A backslash makes the next character literal. Undefined variables
    expand to an empty string and are reported as a warning.

    Args:
        text: Raw path string from a settings file
        environ: Variable source (defaults to os.environ)

    Returns:
        Expanded string

    Raises:
        SubstitutionError: If the string contains a malformed expression
    """
    if environ is None:
        environ = os.environ

    result = []
    chars = iter(text)
    for ch in chars:
        if ch == "\\":
            escaped = next(chars, None)
            if escaped is None:
                raise SubstitutionError("Invalid path: ends in \\")
            result.append(escaped)
        elif ch == "$":
            name = _read_variable_name(chars)
            value = environ.get(name)
            if value is None:
                logger.warning(f"{name} is not defined in the environment")
                continue
            result.append(value)
        else:
            result.append(ch)

    return "".join(result)


# ============================================================
# Path Utilities
# ============================================================

def expand_path(path: str) -> Path:
    """Resolve a user-supplied path to an absolute one, expanding ~"""
    return Path(os.path.abspath(Path(path).expanduser()))


def is_descendant(path: Path, base: Path) -> bool:
    """Check if path equals base or lives below it (both already canonical)"""
    return path == base or base in path.parents
