from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .frame import TelemetryFrame


def compute_checksum(altitude: float, pitch: float, bank: float) -> int:
    """Rounded mean of altitude, pitch and bank.

    Ties round away from zero (2.5 -> 3, -2.5 -> -3). The mean is converted to
    Decimal exactly so values just below a half never round up, and
    ``to_integral_value`` does not depend on context precision, so any finite
    input yields an int.
    """
    mean = (altitude + pitch + bank) / 3.0
    if not math.isfinite(mean):
        # the sum overflowed; dividing first keeps each term finite
        mean = altitude / 3.0 + pitch / 3.0 + bank / 3.0
    return int(Decimal(mean).to_integral_value(rounding=ROUND_HALF_UP))


def checksum_for(frame: "TelemetryFrame") -> int:
    return compute_checksum(frame.altitude, frame.pitch, frame.bank)
