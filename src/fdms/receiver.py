"""Ground-side receive loop.

The receiver owns one bound UDP endpoint and a background thread:

- ``start()`` spawns the thread and returns immediately
- ``stop()`` signals the thread, waits for the datagram in flight to be
  dispatched, then closes the socket
- the socket timeout bounds how long ``stop()`` waits when nothing arrives
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from .codec import from_datagram
from .constants import DEFAULT_POLL_INTERVAL_S
from .events import PacketOutcome, PacketSink, ValidPacket, dispatch, validate
from .net import Impairment, UdpEndpoint

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReceiveMetrics:
    datagrams: int = 0
    valid: int = 0
    invalid: int = 0
    receive_errors: int = 0
    sink_errors: int = 0


class Receiver:
    def __init__(
        self,
        udp: UdpEndpoint,
        sink: PacketSink,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
    ):
        if poll_interval_s <= 0:
            raise ValueError("poll interval must be positive")
        self.udp = udp
        self.sink = sink
        self.poll_interval_s = poll_interval_s
        self.metrics = ReceiveMetrics()

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._closed = False
        self._stopped_from_loop = False

    @classmethod
    def listening(
        cls,
        host: str,
        port: int,
        sink: PacketSink,
        poll_interval_s: float = DEFAULT_POLL_INTERVAL_S,
        impairment: Impairment | None = None,
    ) -> "Receiver":
        udp = UdpEndpoint.listening(host, port, timeout_s=poll_interval_s, impairment=impairment)
        try:
            return cls(udp, sink, poll_interval_s=poll_interval_s)
        except ValueError:
            udp.close()
            raise

    @property
    def address(self):
        return self.udp.address

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("receiver is closed")
            if self._thread is not None:
                raise RuntimeError("receiver is already running")

            self.udp.settimeout(self.poll_interval_s)
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name=f"Receiver-{self.udp.address[1]}",
                daemon=True,
            )
            self._thread.start()

        logger.info("receiver listening on %s:%d (UDP)", *self.udp.address)

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._stop_event.set()
            if threading.current_thread() is thread:
                # called from a sink; the loop releases the socket on exit
                self._stopped_from_loop = True
                return

        thread.join()
        with self._lock:
            if self._thread is thread:
                self._thread = None
                self._release()
        self._log_stopped()

    def _log_stopped(self) -> None:
        logger.info(
            "receiver stopped (datagrams=%d, valid=%d, invalid=%d, errors=%d)",
            self.metrics.datagrams,
            self.metrics.valid,
            self.metrics.invalid,
            self.metrics.receive_errors,
        )

    def close(self) -> None:
        self.stop()
        with self._lock:
            self._release()

    def __enter__(self) -> "Receiver":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _release(self) -> None:
        if not self._closed:
            self._closed = True
            self.udp.close()

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                data, addr = self.udp.recvfrom()
            except TimeoutError:
                continue
            except OSError as e:
                if self._stop_event.is_set():
                    break
                if self.udp.closed:
                    logger.error("socket closed under the receive loop: %s", e)
                    break
                self.metrics.receive_errors += 1
                logger.error("socket error in receive loop: %s", e)
                # back off so a persistent error does not spin
                self._stop_event.wait(self.poll_interval_s)
                continue

            try:
                self.handle_datagram(data)
            except Exception:
                logger.exception("unexpected error handling datagram from %s:%d", *addr)

        logger.debug("receive loop exiting")
        if self._stopped_from_loop:
            with self._lock:
                self._thread = None
                self._release()
            self._log_stopped()

    def handle_datagram(self, data: bytes) -> PacketOutcome:
        """Classify one datagram and report it to the sink."""
        self.metrics.datagrams += 1
        outcome = validate(from_datagram(data))
        if isinstance(outcome, ValidPacket):
            self.metrics.valid += 1
        else:
            self.metrics.invalid += 1

        try:
            dispatch(self.sink, outcome)
        except Exception:
            self.metrics.sink_errors += 1
            logger.exception("packet sink raised while handling %r", outcome.raw_text)
        return outcome
