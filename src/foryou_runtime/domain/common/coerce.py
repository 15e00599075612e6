from __future__ import annotations

import math
from typing import Optional


def coerce_float(value: object) -> Optional[float]:
    """Finite numbers and numeric strings become floats; anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_count(value: object) -> int:
    number = coerce_float(value)
    if number is None or number < 0:
        return 0
    return int(number)
