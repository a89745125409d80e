from __future__ import annotations

import json

from fdms.cli import main
from fdms.loopback import run_loopback


def _telemetry(tmp_path, n: int, bad: int = 0):
    lines = [f"t{i},0.1,0.2,9.8,50000,{1000 + i},3,-3" for i in range(n)]
    lines += ["t-bad,1,2,three,4,5,6,7"] * bad
    path = tmp_path / "C-FGAX.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_loopback_clean_link(tmp_path):
    r = run_loopback(telemetry_file=_telemetry(tmp_path, 10, bad=1), send_interval_s=0.005, poll_interval_s=0.05)
    assert r.frames_skipped == 1
    assert r.packets_sent == 10
    assert r.valid == 10
    assert r.invalid == 0


def test_loopback_corrupted_link_is_classified(tmp_path):
    r = run_loopback(
        telemetry_file=_telemetry(tmp_path, 10),
        send_interval_s=0.005,
        corrupt_rate=1.0,
        poll_interval_s=0.05,
    )
    assert r.packets_sent == 10
    assert r.valid + r.invalid == 10
    assert r.invalid == r.parse_errors + r.checksum_mismatches


def test_cli_loopback_json(tmp_path, capsys):
    path = _telemetry(tmp_path, 3)
    assert main(["loopback", "--file", str(path), "--interval", "0.005", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["role"] == "loopback"
    assert payload["valid"] == 3


def test_cli_send_missing_file(tmp_path):
    assert main(["send", "--file", str(tmp_path / "missing.txt"), "--interval", "0.01"]) == 2


def test_cli_send_bad_port(tmp_path):
    path = _telemetry(tmp_path, 1)
    assert main(["send", "--file", str(path), "--dest-port", "0"]) == 2


def test_cli_recv_duration(capsys):
    assert main(["recv", "--listen-host", "127.0.0.1", "--listen-port", "0", "--duration", "0.1", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["datagrams"] == 0
