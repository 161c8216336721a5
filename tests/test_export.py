import hashlib
import json

import pyarrow.parquet as pq
import pytest

from builders import message, load_lib, session

from tpumsg_core.protocol import ApiId
from tpumsg_decode.export import (
    compute_integrity_root,
    export_report,
    file_sha256,
    looks_like_parquet,
    report_frame,
)
from tpumsg_decode.stream import decode_bytes


def test_export_clean_report(tmp_path):
    blob = b"".join(session(5))
    cap = tmp_path / "dump.bin"
    cap.write_bytes(blob)
    report = decode_bytes(blob)

    out = tmp_path / "report"
    manifest = export_report(report, out, capture_path=cap)

    messages = out / "messages.parquet"
    warnings = out / "warnings.parquet"
    assert looks_like_parquet(messages)
    assert looks_like_parquet(warnings)

    table = pq.read_table(messages)
    assert table.num_rows == 5
    assert table.column("api_name").to_pylist()[:2] == ["A53LITE_LOAD_LIB", "A53LITE_GET_FUNC"]
    assert table.column("name").to_pylist()[0] == b"libtpu_kernel.so"
    assert pq.read_table(warnings).num_rows == 0

    on_disk = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert on_disk == manifest
    assert manifest["summary"]["messages"] == 5
    assert manifest["summary"]["halt_reason"] == "EndOfStream"
    assert manifest["capture"]["file"] == "dump.bin"
    assert manifest["capture"]["sha256"] == hashlib.sha256(blob).hexdigest()
    files = manifest["integrity"]["files"]
    assert manifest["integrity"]["root"] == compute_integrity_root(out, files, manifest["capture"]["sha256"])
    assert manifest["integrity"]["root"] != compute_integrity_root(out, files)


def test_integrity_root_binds_capture(tmp_path):
    blob = b"".join(session(3))
    report = decode_bytes(blob)
    cap_a = tmp_path / "a.bin"
    cap_b = tmp_path / "b.bin"
    cap_a.write_bytes(blob)
    cap_b.write_bytes(blob + b"\x00")

    man_a = export_report(report, tmp_path / "out_a", capture_path=cap_a)
    man_b = export_report(report, tmp_path / "out_b", capture_path=cap_b)

    # Same tables, different capture
    assert pq.read_table(tmp_path / "out_a" / "messages.parquet").equals(pq.read_table(tmp_path / "out_b" / "messages.parquet"))
    assert man_a["capture"]["sha256"] == file_sha256(cap_a).hex()
    assert man_a["integrity"]["root"] != man_b["integrity"]["root"]


def test_looks_like_parquet_rejects_other_files(tmp_path):
    short = tmp_path / "short.parquet"
    short.write_bytes(b"PAR1PAR")
    fake = tmp_path / "fake.parquet"
    fake.write_bytes(b"PAR1" + b"\x00" * 32)

    assert not looks_like_parquet(short)
    assert not looks_like_parquet(fake)


def test_export_records_warnings(tmp_path):
    blob = b"".join(session(2)) + message(ApiId.LOAD_LIB, load_lib())[:-8]
    with pytest.warns(UserWarning):
        report = decode_bytes(blob)

    export_report(report, tmp_path)
    rows = pq.read_table(tmp_path / "warnings.parquet").to_pylist()

    assert [r["kind"] for r in rows] == ["ShortPayload", "Truncated"]
    assert {r["message_index"] for r in rows} == {2}


def test_report_frame():
    df = report_frame(decode_bytes(b"".join(session(3))))
    assert list(df["api_seq"]) == [0, 1, 2]
    assert list(df["decoded"]) == [True, True, True]
