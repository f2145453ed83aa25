"""Utility functions and helpers for the kindctl application."""
import logging
import math
import re
import subprocess
from typing import Any, Dict, Optional, Sequence

from ..errors import CommandError

logger = logging.getLogger("kindctl.utils")

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def run_command(args: Sequence[str], stdin: Optional[str] = None) -> str:
    """Run a host command and return its combined output.

    Args:
        args: Command and arguments
        stdin: Optional text to pass on standard input

    Returns:
        The command's stdout

    Raises:
        CommandError: If the command cannot be started or exits non-zero
    """
    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(
            list(args),
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CommandError(args, -1, str(e)) from e

    if result.returncode != 0:
        raise CommandError(args, result.returncode, result.stderr or result.stdout)
    return result.stdout


def merge_dicts(base: Dict[Any, Any], override: Dict[Any, Any]) -> Dict[Any, Any]:
    """Recursively merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with values to override

    Returns:
        dict: Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def parse_duration(value: str) -> float:
    """Parse a duration such as ``30s``, ``5m`` or ``1h30m`` into seconds.

    A bare number is taken as seconds and must be finite and non-negative.
    ``0`` or an empty string means no wait.

    Raises:
        ValueError: If the value is not a valid duration
    """
    value = (value or "").strip()
    if not value:
        return 0.0
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"invalid duration {value!r}, must be a finite, non-negative number")
        return seconds

    pos = 0
    total = 0.0
    for match in _DURATION_RE.finditer(value):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(value) or not math.isfinite(total):
        raise ValueError(f"invalid duration {value!r}")
    return total
