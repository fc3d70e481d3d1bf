"""
General use constants.
"""

from __future__ import annotations
from typing import Final

SNIPPET_LENGTH: Final[int] = 20
"""The maximum amount of remaining input quoted in a failure message."""
EXHAUSTED_INPUT: Final[str] = "Exhausted input"

MAX_NATURAL: Final[int] = 2**63 - 1
"""Default upper bound for `natural()`. Matches a signed 64-bit integer."""

QUOTE: Final[str] = '"'
ESCAPE: Final[str] = "\\"

DECIMAL: Final[frozenset[str]] = frozenset({"0", "1", "2", "3", "4", "5", "6", "7", "8", "9"})
