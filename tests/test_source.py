from __future__ import annotations

import logging

import pytest

from fdms.source import FrameSource, SkippedLine


def _write(tmp_path, lines):
    path = tmp_path / "C-FGAX.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _good(i: int) -> str:
    return f"7_8_2018 19:34:{i:02d},-0.319754,-0.716176,1.797150,2154.670410,1643.844116,0.022278,0.033622"


def test_reads_frames_in_order(tmp_path):
    path = _write(tmp_path, [_good(i) for i in range(5)])
    frames = list(FrameSource(path).frames())
    assert [f.timestamp_raw for f in frames] == [f"7_8_2018 19:34:{i:02d}" for i in range(5)]
    assert frames[0].weight == 2154.670410


def test_malformed_line_is_skipped_with_diagnostic(tmp_path, caplog):
    lines = [_good(0), _good(1), "7_8_2018 19:34:02,oops,1,2,3,4,5,6", _good(3)]
    source = FrameSource(_write(tmp_path, lines))
    with caplog.at_level(logging.WARNING, logger="fdms.source"):
        frames = list(source)
    assert len(frames) == 3
    assert source.skipped == [SkippedLine(3, 'Failed to parse "oops" as a floating-point value.')]
    assert any("line 3" in r.getMessage() for r in caplog.records)


def test_blank_lines_are_silent(tmp_path, caplog):
    source = FrameSource(_write(tmp_path, ["", _good(0), "   ", _good(1), ""]))
    with caplog.at_level(logging.WARNING, logger="fdms.source"):
        assert len(list(source.frames())) == 2
    assert source.skipped == []
    assert not caplog.records


def test_missing_file_fails_before_iteration(tmp_path):
    with pytest.raises(FileNotFoundError):
        FrameSource(tmp_path / "nope.txt").frames()


def test_restart_by_calling_frames_again(tmp_path):
    source = FrameSource(_write(tmp_path, [_good(0), "bad", _good(1)]))
    first = list(source.frames())
    second = list(source.frames())
    assert first == second
    assert len(source.skipped) == 1


def test_lazy_and_closable(tmp_path):
    source = FrameSource(_write(tmp_path, [_good(i) for i in range(3)]))
    it = source.frames()
    assert next(it).timestamp_raw.endswith(":00")
    it.close()
    with pytest.raises(StopIteration):
        next(it)
