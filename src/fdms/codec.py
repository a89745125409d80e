"""Wire syntax for telemetry packets.

One datagram carries one packet as single-byte text::

    TAIL|SEQ|TS,AX,AY,AZ,WEIGHT,ALT,PITCH,BANK|CHECKSUM

Decoding never checks the checksum; that is the receiver's job.
"""
from __future__ import annotations

import re
from typing import Optional

from .constants import BODY_SEPARATOR, FIELD_SEPARATOR, WIRE_ENCODING, WIRE_FIELD_COUNT
from .frame import FrameParseError, TelemetryFrame
from .packet import TelemetryPacket

_INTEGER = re.compile(r"^[+-]?\d+$")


class PacketDecodeError(ValueError):
    """Raised when text does not follow the wire grammar.

    ``tail_number`` and ``sequence_number`` are set when decoding got far
    enough to extract them.
    """

    def __init__(
        self,
        message: str,
        tail_number: Optional[str] = None,
        sequence_number: Optional[int] = None,
    ):
        super().__init__(message)
        self.tail_number = tail_number
        self.sequence_number = sequence_number


def _parse_int(text: str) -> Optional[int]:
    if not _INTEGER.match(text):
        return None
    return int(text)


def encode(packet: TelemetryPacket) -> str:
    if FIELD_SEPARATOR in packet.tail_number:
        raise ValueError(f"tail number may not contain {FIELD_SEPARATOR!r}: {packet.tail_number!r}")
    timestamp = packet.frame.timestamp_raw
    if FIELD_SEPARATOR in timestamp or BODY_SEPARATOR in timestamp:
        raise ValueError(f"timestamp may not contain separators: {timestamp!r}")

    return FIELD_SEPARATOR.join(
        (
            packet.tail_number,
            str(packet.sequence_number),
            packet.frame.to_csv(),
            str(packet.checksum),
        )
    )


def decode(raw_text: str) -> TelemetryPacket:
    if not raw_text or not raw_text.strip():
        raise PacketDecodeError("Packet string is empty.")

    parts = raw_text.split(FIELD_SEPARATOR)
    if len(parts) != WIRE_FIELD_COUNT:
        raise PacketDecodeError(
            f"Expected {WIRE_FIELD_COUNT} '{FIELD_SEPARATOR}' separated fields "
            f"(Tail|Seq|Body|Checksum), got {len(parts)}."
        )

    tail_number = parts[0].strip()
    sequence_text = parts[1].strip()
    body = parts[2]
    checksum_text = parts[3].strip()

    if not tail_number:
        raise PacketDecodeError("Tail number is missing or empty.")

    sequence_number = _parse_int(sequence_text)
    if sequence_number is None or sequence_number < 0:
        raise PacketDecodeError(f'Invalid sequence number: "{sequence_text}".', tail_number)

    try:
        frame = TelemetryFrame.parse(body)
    except FrameParseError as e:
        raise PacketDecodeError(
            f"Failed to parse telemetry body: {e}", tail_number, sequence_number
        ) from e

    checksum = _parse_int(checksum_text)
    if checksum is None:
        raise PacketDecodeError(
            f'Invalid checksum value: "{checksum_text}".', tail_number, sequence_number
        )

    return TelemetryPacket(tail_number, sequence_number, frame, checksum)


def to_datagram(packet: TelemetryPacket) -> bytes:
    return encode(packet).encode(WIRE_ENCODING, errors="replace")


def from_datagram(data: bytes) -> str:
    return data.decode(WIRE_ENCODING)
