from __future__ import annotations

import logging
import random
import socket
import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .constants import MAX_DATAGRAM

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Impairment:
    loss_rate: float = 0.0
    delay_ms: int = 0
    corrupt_rate: float = 0.0
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def active(self) -> bool:
        return self.loss_rate > 0 or self.delay_ms > 0 or self.corrupt_rate > 0

    def should_drop(self) -> bool:
        return self.loss_rate > 0 and self.rng.random() < self.loss_rate

    def sleep_if_needed(self) -> None:
        if self.delay_ms > 0:
            time.sleep(self.delay_ms / 1000.0)

    def corrupt(self, data: bytes) -> bytes:
        """Flip one character of ``data`` with probability ``corrupt_rate``."""
        if not data or self.corrupt_rate <= 0 or self.rng.random() >= self.corrupt_rate:
            return data
        buf = bytearray(data)
        i = self.rng.randrange(len(buf))
        if 0x30 <= buf[i] <= 0x39:
            digit = buf[i] - 0x30
            buf[i] = 0x30 + (digit + self.rng.randrange(1, 10)) % 10
        else:
            buf[i] = ord("#") if buf[i] != ord("#") else ord("~")
        return bytes(buf)


class UdpEndpoint:
    """One UDP socket, optionally behind a simulated lossy link."""

    def __init__(self, sock: socket.socket, impairment: Impairment | None = None):
        self.sock = sock
        self.impairment = impairment or Impairment()
        self._closed = False

    @classmethod
    def listening(
        cls,
        host: str,
        port: int,
        timeout_s: float = 0.0,
        impairment: Impairment | None = None,
    ) -> "UdpEndpoint":
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((host, port))
        except OSError:
            sock.close()
            raise
        if timeout_s > 0:
            sock.settimeout(timeout_s)
        return cls(sock, impairment)

    @classmethod
    def sending(cls, impairment: Impairment | None = None) -> "UdpEndpoint":
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        return cls(sock, impairment)

    @property
    def address(self) -> Tuple[str, int]:
        return self.sock.getsockname()

    @property
    def closed(self) -> bool:
        return self._closed

    def settimeout(self, timeout_s: Optional[float]) -> None:
        self.sock.settimeout(timeout_s)

    def sendto(self, data: bytes, addr: Tuple[str, int]) -> int:
        if self.impairment.should_drop():
            logger.debug("impairment dropped outbound datagram (%d bytes)", len(data))
            return len(data)
        self.impairment.sleep_if_needed()
        return self.sock.sendto(self.impairment.corrupt(data), addr)

    def recvfrom(self, bufsize: int = MAX_DATAGRAM) -> Tuple[bytes, Tuple[str, int]]:
        while True:
            data, addr = self.sock.recvfrom(bufsize)
            if self.impairment.should_drop():
                logger.debug("impairment dropped inbound datagram from %s", addr)
                continue
            self.impairment.sleep_if_needed()
            return self.impairment.corrupt(data), addr

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sock.close()
