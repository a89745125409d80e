from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Tuple

from .codec import to_datagram
from .constants import DEFAULT_SEND_INTERVAL_S, MIN_SLEEP_S
from .frame import TelemetryFrame
from .net import UdpEndpoint
from .packet import TelemetryPacket

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransmitMetrics:
    packets_sent: int = 0
    bytes_sent: int = 0
    send_errors: int = 0
    encode_errors: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)


@dataclass(slots=True)
class Transmitter:
    udp: UdpEndpoint
    dest: Tuple[str, int]
    tail_number: str
    send_interval_s: float = DEFAULT_SEND_INTERVAL_S

    def run(self, frames: Iterable[TelemetryFrame]) -> TransmitMetrics:
        """Send each frame as one datagram, paced from the start of the run.

        Packet n is due at ``n * send_interval_s``. A late packet goes out
        immediately and the schedule is not compressed to catch up.
        """
        metrics = TransmitMetrics()
        start = metrics.start_ts
        logger.info(
            "transmitting as %s to %s:%d every %.3fs",
            self.tail_number,
            self.dest[0],
            self.dest[1],
            self.send_interval_s,
        )

        seq = 0
        for frame in frames:
            try:
                packet = TelemetryPacket.build(self.tail_number, seq, frame)
                payload = to_datagram(packet)
            except (ValueError, ArithmeticError) as e:
                metrics.encode_errors += 1
                logger.error("cannot encode frame %s as packet #%d: %s", frame.timestamp_raw, seq, e)
            else:
                try:
                    self.udp.sendto(payload, self.dest)
                except OSError as e:
                    metrics.send_errors += 1
                    logger.error("socket error sending packet #%d: %s", seq, e)
                else:
                    metrics.packets_sent += 1
                    metrics.bytes_sent += len(payload)
                    logger.debug("sent packet #%d: %s", seq, payload)

            seq += 1
            remaining = seq * self.send_interval_s - (time.monotonic() - start)
            if remaining > 0:
                time.sleep(max(remaining, MIN_SLEEP_S))

        metrics.end_ts = time.monotonic()
        logger.info(
            "transmission complete: %d packets in %.2fs (%d send errors)",
            metrics.packets_sent,
            metrics.duration_s,
            metrics.send_errors,
        )
        return metrics
