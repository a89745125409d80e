from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .constants import (
    DEFAULT_HOST,
    DEFAULT_LISTEN_HOST,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_PORT,
    DEFAULT_SEND_INTERVAL_S,
    DEFAULT_TAIL_NUMBER,
    FIELD_SEPARATOR,
)


class ConfigError(ValueError):
    pass


def _check_port(port: int, allow_ephemeral: bool = False) -> None:
    low = 0 if allow_ephemeral else 1
    if isinstance(port, bool) or not isinstance(port, int) or not low <= port <= 65535:
        raise ConfigError(f"Invalid port {port!r}; expected an integer between {low} and 65535.")


def _check_interval(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{name} must be a positive number of seconds, got {value!r}.")


@dataclass(frozen=True, slots=True)
class TransmitterConfig:
    dest_host: str
    dest_port: int
    tail_number: str
    telemetry_file: Path
    send_interval_s: float = DEFAULT_SEND_INTERVAL_S

    def __post_init__(self) -> None:
        if not self.dest_host:
            raise ConfigError("Destination host is required.")
        _check_port(self.dest_port)
        if not self.tail_number or not self.tail_number.strip():
            raise ConfigError("Tail number is required.")
        if FIELD_SEPARATOR in self.tail_number:
            raise ConfigError(f"Tail number may not contain {FIELD_SEPARATOR!r}.")
        _check_interval("send interval", self.send_interval_s)

    @classmethod
    def from_values(
        cls,
        tail_number: Optional[str] = None,
        telemetry_file: Union[str, Path, None] = None,
        dest_host: str = DEFAULT_HOST,
        dest_port: int = DEFAULT_PORT,
        send_interval_s: float = DEFAULT_SEND_INTERVAL_S,
        base_dir: Union[str, Path, None] = None,
    ) -> "TransmitterConfig":
        """Fill in defaults the way the aircraft side is normally launched.

        The tail number is upper-cased and the telemetry file defaults to
        ``<TAIL>.txt``; relative paths resolve against ``base_dir`` (cwd when
        omitted).
        """
        tail = (tail_number or "").strip().upper() or DEFAULT_TAIL_NUMBER
        path = Path(telemetry_file) if telemetry_file else Path(f"{tail}.txt")
        if not path.is_absolute():
            path = Path(base_dir or Path.cwd()) / path
        return cls(
            dest_host=dest_host,
            dest_port=dest_port,
            tail_number=tail,
            telemetry_file=path,
            send_interval_s=send_interval_s,
        )


@dataclass(frozen=True, slots=True)
class ReceiverConfig:
    listen_host: str = DEFAULT_LISTEN_HOST
    listen_port: int = DEFAULT_PORT
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S

    def __post_init__(self) -> None:
        _check_port(self.listen_port, allow_ephemeral=True)
        _check_interval("poll interval", self.poll_interval_s)
