from __future__ import annotations

import math
import re
from dataclasses import dataclass

from .constants import BODY_FIELD_COUNT, BODY_SEPARATOR

# invariant decimal: optional sign, digits with optional fraction, optional exponent
_DECIMAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

_NUMERIC_FIELDS = ("accel_x", "accel_y", "accel_z", "weight", "altitude", "pitch", "bank")


class FrameParseError(ValueError):
    pass


def parse_number(text: str) -> float:
    """Parse culture-invariant decimal text, allowing ``,`` thousands separators."""
    candidate = text.strip().replace(",", "")
    if not _DECIMAL.match(candidate):
        raise FrameParseError(f'Failed to parse "{text}" as a floating-point value.')
    value = float(candidate)
    if not math.isfinite(value):
        raise FrameParseError(f'Failed to parse "{text}" as a finite floating-point value.')
    return value


def format_number(value: float) -> str:
    # shortest round-trip text; integral values drop the trailing ".0"
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


@dataclass(frozen=True, slots=True)
class TelemetryFrame:
    timestamp_raw: str
    accel_x: float
    accel_y: float
    accel_z: float
    weight: float
    altitude: float
    pitch: float
    bank: float

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp_raw, str) or not self.timestamp_raw.strip():
            raise ValueError("Timestamp cannot be empty.")
        object.__setattr__(self, "timestamp_raw", self.timestamp_raw.strip())
        for name in _NUMERIC_FIELDS:
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
            object.__setattr__(self, name, value)

    @classmethod
    def parse(cls, line: str) -> "TelemetryFrame":
        """Parse one comma-separated body line.

        At least eight fields are required; anything past the eighth is ignored.
        The first field that fails to parse is reported.
        """
        if not line or not line.strip():
            raise FrameParseError("Telemetry line is empty.")

        parts = [p.strip() for p in line.split(BODY_SEPARATOR)]
        if len(parts) < BODY_FIELD_COUNT:
            raise FrameParseError(
                f"Expected at least {BODY_FIELD_COUNT} comma-separated values, got {len(parts)}."
            )

        timestamp_raw = parts[0]
        if not timestamp_raw:
            raise FrameParseError("Timestamp field is empty.")

        values = [parse_number(text) for text in parts[1:BODY_FIELD_COUNT]]
        return cls(timestamp_raw, *values)

    def to_csv(self) -> str:
        return BODY_SEPARATOR.join(
            [self.timestamp_raw] + [format_number(getattr(self, name)) for name in _NUMERIC_FIELDS]
        )
