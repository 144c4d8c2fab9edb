"""Java version parsing and compatibility matching.

Versions are reduced to a single float of the form ``major.minor``:

- legacy numbering (``1.7``, ``1.8.0_311``) keeps the minor digit, since the
  real release number lives there
- modern numbering (``11``, ``17.0.2``) is compared on the major alone
"""

from __future__ import annotations

import math
import re
from typing import Optional

from ..errors import ParseError

LEGACY_ALIAS = 8.0
LEGACY_VALUE = 1.8

_VERSION_TOKEN = re.compile(r"\s*(\d+)(?:\.(\d+))?")
_VERSION_OUTPUT = re.compile(r'version "(.*?)"')


def _alias(value: float) -> float:
    return LEGACY_VALUE if value == LEGACY_ALIAS else value


def normalize(raw: str) -> float:
    """Normalize a version token such as ``"1.8.0_311"`` or ``"17.0.2"``.

    Args:
        raw: Version token; anything after the first two dot-separated
            numeric components (patch, ``_NNN`` update, ``-ea``) is ignored

    Returns:
        Comparable float; a bare ``8`` becomes ``1.8``

    Raises:
        ParseError: If the string does not start with a version number
    """
    match = _VERSION_TOKEN.match(raw or "")
    if not match:
        raise ParseError(raw or "")

    major, minor = match.group(1), match.group(2)
    value = float(f"{int(major)}.{minor}") if minor is not None else float(int(major))
    return _alias(value)


def parse_version_output(output: str) -> float:
    """Extract and normalize the version from ``java -version`` output."""
    match = _VERSION_OUTPUT.search(output or "")
    if not match:
        raise ParseError(output or "")
    return normalize(match.group(1))


def matches(candidate: Optional[float], target: Optional[float]) -> bool:
    """Check whether a detected version satisfies the target version.

    Legacy values (below 2) must agree to one decimal place; modern values
    only need the same integer major.
    """
    if candidate is None or target is None:
        return False

    candidate = _alias(candidate)
    target = _alias(target)

    if math.floor(candidate) != math.floor(target):
        return False

    if candidate < 2 or target < 2:
        # round() absorbs float noise such as 1.8 * 10 == 18.000000000000004
        return math.floor(round(candidate * 10, 6)) == math.floor(round(target * 10, 6))

    return True
