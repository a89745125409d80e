from __future__ import annotations

import argparse
import json
import logging
import time
from dataclasses import asdict

from .config import ConfigError, ReceiverConfig, TransmitterConfig
from .constants import (
    DEFAULT_HOST,
    DEFAULT_LISTEN_HOST,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_PORT,
    DEFAULT_SEND_INTERVAL_S,
    DEFAULT_TAIL_NUMBER,
)
from .events import LoggingSink
from .loopback import run_loopback
from .net import Impairment, UdpEndpoint
from .receiver import Receiver
from .source import FrameSource
from .transmitter import Transmitter

logger = logging.getLogger(__name__)


def _impairment(args: argparse.Namespace) -> Impairment:
    return Impairment(args.loss_rate, args.delay_ms, args.corrupt_rate)


def _emit(payload: dict, as_json: bool) -> None:
    print(json.dumps(payload, indent=2) if as_json else payload)


def cmd_send(args: argparse.Namespace) -> int:
    config = TransmitterConfig.from_values(
        tail_number=args.tail,
        telemetry_file=args.file,
        dest_host=args.dest_host,
        dest_port=args.dest_port,
        send_interval_s=args.interval,
    )
    frames = FrameSource(config.telemetry_file).frames()

    udp = UdpEndpoint.sending(impairment=_impairment(args))
    try:
        tx = Transmitter(
            udp,
            (config.dest_host, config.dest_port),
            config.tail_number,
            config.send_interval_s,
        )
        metrics = tx.run(frames)
    finally:
        udp.close()

    payload = {
        "role": "transmitter",
        "tail": config.tail_number,
        "packets": metrics.packets_sent,
        "bytes": metrics.bytes_sent,
        "send_errors": metrics.send_errors,
        "seconds": metrics.duration_s,
    }
    _emit(payload, args.json)
    return 0


def cmd_recv(args: argparse.Namespace) -> int:
    config = ReceiverConfig(args.listen_host, args.listen_port, args.poll_interval)
    sink = LoggingSink()
    receiver = Receiver.listening(
        config.listen_host,
        config.listen_port,
        sink,
        poll_interval_s=config.poll_interval_s,
        impairment=_impairment(args),
    )

    with receiver:
        try:
            if args.duration is not None:
                time.sleep(args.duration)
            else:
                while True:
                    time.sleep(1.0)
        except KeyboardInterrupt:
            logger.info("interrupted; shutting down receiver")

    payload = {"role": "receiver", "datagrams": receiver.metrics.datagrams, **sink.snapshot()}
    _emit(payload, args.json)
    return 0


def cmd_loopback(args: argparse.Namespace) -> int:
    r = run_loopback(
        telemetry_file=args.file,
        tail_number=args.tail,
        send_interval_s=args.interval,
        loss_rate=args.loss_rate,
        corrupt_rate=args.corrupt_rate,
        delay_ms=args.delay_ms,
    )
    payload = {"role": "loopback", **asdict(r)}
    _emit(payload, args.json)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fdms", description="Flight telemetry over UDP (transmitter + ground receiver).")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--loss-rate", type=float, default=0.0, help="simulate datagram loss")
        x.add_argument("--corrupt-rate", type=float, default=0.0, help="simulate single-character corruption")
        x.add_argument("--delay-ms", type=int, default=0)
        x.add_argument("--json", action="store_true")

    send = sub.add_parser("send", help="transmit a telemetry file")
    add_common(send)
    send.add_argument("--tail", default=None, help=f"aircraft tail number (default {DEFAULT_TAIL_NUMBER})")
    send.add_argument("--file", default=None, help="telemetry file (default <TAIL>.txt)")
    send.add_argument("--dest-host", default=DEFAULT_HOST)
    send.add_argument("--dest-port", type=int, default=DEFAULT_PORT)
    send.add_argument("--interval", type=float, default=DEFAULT_SEND_INTERVAL_S, help="seconds between packets")
    send.set_defaults(func=cmd_send)

    recv = sub.add_parser("recv", help="receive and validate telemetry")
    add_common(recv)
    recv.add_argument("--listen-host", default=DEFAULT_LISTEN_HOST)
    recv.add_argument("--listen-port", type=int, default=DEFAULT_PORT)
    recv.add_argument("--poll-interval", type=float, default=DEFAULT_POLL_INTERVAL_S)
    recv.add_argument("--duration", type=float, default=None, help="stop after this many seconds")
    recv.set_defaults(func=cmd_recv)

    loop = sub.add_parser("loopback", help="send a file to a local receiver and report the tally")
    add_common(loop)
    loop.add_argument("--file", required=True)
    loop.add_argument("--tail", default=DEFAULT_TAIL_NUMBER)
    loop.add_argument("--interval", type=float, default=0.01)
    loop.set_defaults(func=cmd_loopback)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return int(args.func(args))
    except (ConfigError, OSError) as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
