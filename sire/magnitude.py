"""
Magnitude codes (PROPDMGEXP / CROPDMGEXP)
=========================================

The storm database stores damage as a base number plus a one-character
"magnitude" code, e.g. 25 + "K" means 25,000 US$.

Mapping used by SIRE:
- H / K / M / B (any case) -> 10^2 / 10^3 / 10^6 / 10^9
- a digit '0'..'9'          -> 10^digit
- '+', '-', '?', ''         -> 10^0 (no scaling)
- anything else             -> 10^0

Unknown codes are not an error: the base value is kept as-is.
"""

from __future__ import annotations
from typing import Optional

_LETTER_EXPONENTS = {"h": 2, "k": 3, "m": 6, "b": 9}


def exponent(code: Optional[str]) -> int:
    """Return the power-of-ten exponent for a magnitude code."""
    if not isinstance(code, str) or len(code) != 1:
        return 0
    if "0" <= code <= "9":
        return int(code)
    return _LETTER_EXPONENTS.get(code.lower(), 0)


def normalize(base: float, code: Optional[str]) -> float:
    """Convert (base, code) into an absolute amount."""
    return float(base) * (10 ** exponent(code))
