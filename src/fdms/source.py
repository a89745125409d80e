from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Union

from .frame import FrameParseError, TelemetryFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SkippedLine:
    line_number: int
    reason: str


class FrameSource:
    """Telemetry frames read lazily from a line-oriented file.

    Each call to ``frames()`` reopens the file. Lines that fail to parse are
    logged, recorded in ``skipped`` and passed over.
    """

    def __init__(self, path: Union[str, "os.PathLike[str]"]):
        self.path = Path(path)
        self.skipped: List[SkippedLine] = []

    def frames(self) -> Iterator[TelemetryFrame]:
        if not self.path.is_file():
            raise FileNotFoundError(f"Telemetry file not found: {self.path}")
        self.skipped = []
        return self._read()

    def __iter__(self) -> Iterator[TelemetryFrame]:
        return self.frames()

    def _read(self) -> Iterator[TelemetryFrame]:
        with open(self.path, "r", encoding="utf-8", errors="replace") as f:
            for line_number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    frame = TelemetryFrame.parse(line)
                except FrameParseError as e:
                    logger.warning("skipping %s line %d: %s", self.path.name, line_number, e)
                    self.skipped.append(SkippedLine(line_number, str(e)))
                    continue
                yield frame
