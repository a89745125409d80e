"""Flight Data Management System (FDMS) telemetry link

An aircraft streams telemetry frames to a ground receiver over UDP:
- one text packet per datagram, with a coarse checksum over altitude/pitch/bank
- a paced, fire-and-forget transmitter fed from a telemetry file
- a cancellable receiver that reports every datagram as valid or invalid

No retransmission, ordering or encryption; the link is best-effort by design.
"""

from .checksum import compute_checksum
from .codec import PacketDecodeError, decode, encode
from .events import InvalidPacket, InvalidReason, PacketSink, ValidPacket, validate
from .frame import FrameParseError, TelemetryFrame
from .packet import TelemetryPacket
from .receiver import Receiver
from .source import FrameSource
from .transmitter import Transmitter

__all__ = [
    "FrameParseError",
    "FrameSource",
    "InvalidPacket",
    "InvalidReason",
    "PacketDecodeError",
    "PacketSink",
    "Receiver",
    "TelemetryFrame",
    "TelemetryPacket",
    "Transmitter",
    "ValidPacket",
    "compute_checksum",
    "decode",
    "encode",
    "validate",
]
