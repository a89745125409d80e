from __future__ import annotations

from dataclasses import dataclass

from .checksum import checksum_for
from .frame import TelemetryFrame


@dataclass(frozen=True, slots=True)
class TelemetryPacket:
    tail_number: str
    sequence_number: int
    frame: TelemetryFrame
    checksum: int

    def __post_init__(self) -> None:
        if not isinstance(self.tail_number, str) or not self.tail_number.strip():
            raise ValueError("Tail number cannot be empty.")
        if isinstance(self.sequence_number, bool) or not isinstance(self.sequence_number, int):
            raise TypeError(f"sequence number must be an int, got {self.sequence_number!r}")
        if self.sequence_number < 0:
            raise ValueError("Sequence number must be non-negative.")
        if not isinstance(self.frame, TelemetryFrame):
            raise TypeError("frame must be a TelemetryFrame")
        object.__setattr__(self, "tail_number", self.tail_number.strip())
        object.__setattr__(self, "checksum", int(self.checksum))

    @property
    def checksum_ok(self) -> bool:
        return checksum_for(self.frame) == self.checksum

    @staticmethod
    def build(tail_number: str, sequence_number: int, frame: TelemetryFrame) -> "TelemetryPacket":
        """Packet as the transmitter sends it, checksum computed from ``frame``."""
        return TelemetryPacket(
            tail_number=tail_number,
            sequence_number=sequence_number,
            frame=frame,
            checksum=checksum_for(frame),
        )

    def __str__(self) -> str:
        f = self.frame
        return (
            f"{self.tail_number} #{self.sequence_number} | Alt={f.altitude}, "
            f"Pitch={f.pitch}, Bank={f.bank}, Checksum={self.checksum}"
        )
