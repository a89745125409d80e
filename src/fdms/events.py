"""Validation outcomes and the sinks the receiver reports them to.

Sinks are called synchronously on the receiver thread. A sink that blocks
stalls the receive loop, so slow consumers should hand work off (see
``QueueSink``).
"""
from __future__ import annotations

import enum
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Union

from .checksum import checksum_for
from .codec import PacketDecodeError, decode
from .packet import TelemetryPacket

logger = logging.getLogger(__name__)


class InvalidReason(str, enum.Enum):
    PARSE_ERROR = "ParseError"
    CHECKSUM_MISMATCH = "ChecksumMismatch"


@dataclass(frozen=True, slots=True)
class ValidPacket:
    raw_text: str
    packet: TelemetryPacket


@dataclass(frozen=True, slots=True)
class InvalidPacket:
    raw_text: str
    reason: InvalidReason
    details: str
    tail_number: Optional[str] = None
    sequence_number: Optional[int] = None
    expected_checksum: Optional[int] = None
    actual_checksum: Optional[int] = None


PacketOutcome = Union[ValidPacket, InvalidPacket]


def validate(raw_text: str) -> PacketOutcome:
    try:
        packet = decode(raw_text)
    except PacketDecodeError as e:
        return InvalidPacket(
            raw_text=raw_text,
            reason=InvalidReason.PARSE_ERROR,
            details=str(e),
            tail_number=e.tail_number,
            sequence_number=e.sequence_number,
        )

    expected = checksum_for(packet.frame)
    if expected != packet.checksum:
        return InvalidPacket(
            raw_text=raw_text,
            reason=InvalidReason.CHECKSUM_MISMATCH,
            details=f"Expected={expected}, Received={packet.checksum}",
            tail_number=packet.tail_number,
            sequence_number=packet.sequence_number,
            expected_checksum=expected,
            actual_checksum=packet.checksum,
        )

    return ValidPacket(raw_text, packet)


class PacketSink(Protocol):
    def on_valid(self, event: ValidPacket) -> None: ...

    def on_invalid(self, event: InvalidPacket) -> None: ...


def dispatch(sink: PacketSink, outcome: PacketOutcome) -> None:
    if isinstance(outcome, ValidPacket):
        sink.on_valid(outcome)
    else:
        sink.on_invalid(outcome)


class CallbackSink:
    def __init__(
        self,
        on_valid: Optional[Callable[[ValidPacket], None]] = None,
        on_invalid: Optional[Callable[[InvalidPacket], None]] = None,
    ):
        self._on_valid = on_valid
        self._on_invalid = on_invalid

    def on_valid(self, event: ValidPacket) -> None:
        if self._on_valid is not None:
            self._on_valid(event)

    def on_invalid(self, event: InvalidPacket) -> None:
        if self._on_invalid is not None:
            self._on_invalid(event)


class QueueSink:
    """Puts every outcome on a queue for a consumer on another thread."""

    def __init__(self, output_queue: "queue.Queue[PacketOutcome]"):
        self.output_queue = output_queue

    def on_valid(self, event: ValidPacket) -> None:
        self.output_queue.put(event)

    def on_invalid(self, event: InvalidPacket) -> None:
        self.output_queue.put(event)


class LoggingSink:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.valid = 0
        self.parse_errors = 0
        self.checksum_mismatches = 0

    @property
    def invalid(self) -> int:
        return self.parse_errors + self.checksum_mismatches

    def on_valid(self, event: ValidPacket) -> None:
        with self._lock:
            self.valid += 1
        logger.info("valid packet: %s", event.packet)

    def on_invalid(self, event: InvalidPacket) -> None:
        with self._lock:
            if event.reason is InvalidReason.CHECKSUM_MISMATCH:
                self.checksum_mismatches += 1
            else:
                self.parse_errors += 1
        logger.warning(
            "invalid packet (%s) tail=%s seq=%s: %s; raw=%r",
            event.reason.value,
            event.tail_number,
            event.sequence_number,
            event.details,
            event.raw_text,
        )

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "valid": self.valid,
                "invalid": self.parse_errors + self.checksum_mismatches,
                "parse_errors": self.parse_errors,
                "checksum_mismatches": self.checksum_mismatches,
            }
