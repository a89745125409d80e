from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .constants import DEFAULT_POLL_INTERVAL_S, DEFAULT_TAIL_NUMBER
from .events import LoggingSink
from .net import Impairment, UdpEndpoint
from .receiver import Receiver
from .source import FrameSource
from .transmitter import Transmitter


@dataclass(frozen=True, slots=True)
class LoopbackResult:
    frames_skipped: int
    packets_sent: int
    valid: int
    invalid: int
    parse_errors: int
    checksum_mismatches: int
    duration_s: float


def run_loopback(
    *,
    telemetry_file: Union[str, Path],
    tail_number: str = DEFAULT_TAIL_NUMBER,
    send_interval_s: float = 0.01,
    loss_rate: float = 0.0,
    corrupt_rate: float = 0.0,
    delay_ms: int = 0,
    settle_s: float = 0.2,
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
) -> LoopbackResult:
    """Send a telemetry file to a receiver on 127.0.0.1 and tally what arrives.

    The impairment is applied on the sending side only.
    """
    source = FrameSource(telemetry_file)
    frames = source.frames()

    sink = LoggingSink()
    receiver = Receiver.listening("127.0.0.1", 0, sink, poll_interval_s=poll_interval_s)
    impair = Impairment(loss_rate=loss_rate, delay_ms=delay_ms, corrupt_rate=corrupt_rate)

    with receiver:
        send_ep = UdpEndpoint.sending(impairment=impair)
        try:
            tx = Transmitter(send_ep, receiver.address, tail_number, send_interval_s)
            send_metrics = tx.run(frames)
        finally:
            send_ep.close()
        time.sleep(settle_s)

    tally = sink.snapshot()
    return LoopbackResult(
        frames_skipped=len(source.skipped),
        packets_sent=send_metrics.packets_sent,
        valid=tally["valid"],
        invalid=tally["invalid"],
        parse_errors=tally["parse_errors"],
        checksum_mismatches=tally["checksum_mismatches"],
        duration_s=send_metrics.duration_s,
    )
