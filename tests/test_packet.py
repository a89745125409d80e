from __future__ import annotations

import pytest

from fdms.frame import TelemetryFrame
from fdms.packet import TelemetryPacket

FRAME = TelemetryFrame("2025-01-01T00:00:00", 0.1, 0.2, 9.8, 50000, 3, 3, 3)


def test_build_computes_checksum():
    p = TelemetryPacket.build("C-FGAX", 0, FRAME)
    assert p.checksum == 3
    assert p.checksum_ok is True


def test_carried_checksum_is_not_recomputed():
    p = TelemetryPacket("C-FGAX", 1, FRAME, 99)
    assert p.checksum == 99
    assert p.checksum_ok is False


def test_tail_number_trimmed():
    assert TelemetryPacket(" C-FGAX ", 0, FRAME, 3).tail_number == "C-FGAX"


def test_bad_tail_number():
    with pytest.raises(ValueError):
        TelemetryPacket("  ", 0, FRAME, 3)


def test_negative_sequence():
    with pytest.raises(ValueError):
        TelemetryPacket("C-FGAX", -1, FRAME, 3)


def test_str_summary():
    s = str(TelemetryPacket.build("C-FGAX", 7, FRAME))
    assert s.startswith("C-FGAX #7")
    assert "Checksum=3" in s
