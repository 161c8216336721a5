import json
import subprocess
import sys
from pathlib import Path

import pyarrow.parquet as pq


def run(args, cwd):
    return subprocess.run([sys.executable, *args], cwd=cwd, check=False, capture_output=True, text=True)


def test_generate_decode_and_export(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    cap = tmp_path / "dump_core0.bin"
    out = tmp_path / "report"

    # Clean capture
    r = run(["tools/sim_capture.py", str(cap), "--count", "8", "--seed", "3"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert cap.exists()

    r = run(["-m", "tpumsg_decode.cli", str(cap), "--json", "--export", str(out)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    summary = json.loads(r.stdout)
    assert summary["messages"] == 8
    assert summary["warnings"] == 0
    assert summary["bytes_consumed"] == summary["bytes_available"] == cap.stat().st_size
    assert pq.read_table(out / "messages.parquet").num_rows == 8

    # Text dump
    r = run(["-m", "tpumsg_decode.cli", str(cap)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "=== Message #8" in r.stdout
    assert "Done (EndOfStream). Processed 8 messages" in r.stdout

    # Cut the capture mid-payload and ensure the truncation is reported
    r = run(["scripts/truncate_capture.py", str(cap), "10"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout

    r = run(["-m", "tpumsg_decode.cli", str(cap), "--json"], cwd=repo)
    assert r.returncode == 2
    summary = json.loads(r.stdout)
    assert summary["messages"] == 8
    assert summary["halt_reason"] == "ShortPayload"
    assert summary["bytes_consumed"] == summary["bytes_available"]


def test_missing_capture_fails(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    r = run(["-m", "tpumsg_decode.cli", str(tmp_path / "nope.bin")], cwd=repo)
    assert r.returncode != 0
