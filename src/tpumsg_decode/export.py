"""Write a decode report as Parquet tables plus a JSON manifest."""
from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Optional

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from tpumsg_core.protocol import READ_CHUNK_SIZE

from .payloads import GetFuncPayload, LaunchFuncPayload, LoadLibPayload, UnknownPayload
from .report import DecodedMessage, DecodeReport

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

MESSAGES_SCHEMA = pa.schema(
    [
        ("index", pa.int32()),
        ("offset", pa.int64()),
        ("api_id", pa.uint32()),
        ("api_name", pa.string()),
        ("api_size", pa.uint32()),
        ("api_handle", pa.uint64()),
        ("api_seq", pa.uint32()),
        ("duration", pa.uint32()),
        ("result", pa.uint32()),
        ("payload_bytes_read", pa.int64()),
        ("decoded", pa.bool_()),
        ("name", pa.binary()),
        ("md5", pa.string()),
        ("function_id", pa.int32()),
        ("param_size", pa.uint32()),
        ("warning_count", pa.int32()),
    ]
)

WARNINGS_SCHEMA = pa.schema(
    [
        ("message_index", pa.int32()),
        ("kind", pa.string()),
        ("message", pa.string()),
    ]
)


PARQUET_MAGIC = b"PAR1"

# Leaf name binding the source capture into the integrity root
CAPTURE_LEAF = "capture"


def file_sha256(path: Path) -> bytes:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(READ_CHUNK_SIZE), b""):
            h.update(block)
    return h.digest()


def leaf_hash(name: str, digest: bytes) -> bytes:
    """Hash of one named leaf: name, NUL, then the content digest."""
    return hashlib.sha256(name.encode("utf-8") + b"\x00" + digest).digest()


def compute_integrity_root(out_dir: Path, rel_files: list[str], capture_sha256: Optional[str] = None) -> str:
    """Root over the exported files; a capture digest, when given, is one more leaf."""
    leaves = {rel: file_sha256(Path(out_dir) / rel) for rel in rel_files}
    if capture_sha256 is not None:
        leaves[CAPTURE_LEAF] = bytes.fromhex(capture_sha256)

    acc = hashlib.sha256()
    for name in sorted(leaves):
        acc.update(leaf_hash(name, leaves[name]))
    return acc.hexdigest()


def looks_like_parquet(p: Path) -> bool:
    """Check the magic at both ends without loading the file."""
    with open(p, "rb") as f:
        if f.seek(0, os.SEEK_END) < 2 * len(PARQUET_MAGIC):
            return False
        f.seek(-len(PARQUET_MAGIC), os.SEEK_END)
        tail = f.read(len(PARQUET_MAGIC))
        f.seek(0)
        return f.read(len(PARQUET_MAGIC)) == PARQUET_MAGIC and tail == PARQUET_MAGIC


def _message_row(m: DecodedMessage) -> dict:
    h = m.header
    payload = m.payload
    row = {
        "index": m.index,
        "offset": m.offset,
        "api_id": h.api_id,
        "api_name": h.api_name,
        "api_size": h.api_size,
        "api_handle": h.api_handle,
        "api_seq": h.api_seq,
        "duration": h.duration,
        "result": h.result,
        "payload_bytes_read": m.payload_bytes_read,
        "decoded": payload is not None,
        "name": None,
        "md5": None,
        "function_id": None,
        "param_size": None,
        "warning_count": len(m.warnings),
    }
    if isinstance(payload, LoadLibPayload):
        row["name"] = payload.library_name
        row["md5"] = payload.md5.hex() if payload.md5 is not None else None
    elif isinstance(payload, GetFuncPayload):
        row["name"] = payload.func_name
        row["md5"] = payload.md5.hex()
        row["function_id"] = payload.f_id
    elif isinstance(payload, LaunchFuncPayload):
        row["function_id"] = payload.f_id
        row["param_size"] = payload.param_size
    elif isinstance(payload, UnknownPayload):
        row["decoded"] = False
    return row


def _write_table(rows: list[dict], schema: pa.Schema, path: Path) -> None:
    df = pd.DataFrame(rows, columns=schema.names)
    table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
    pq.write_table(table, path)


def report_frame(report: DecodeReport) -> pd.DataFrame:
    """One row per decoded message, columns as in MESSAGES_SCHEMA."""
    return pd.DataFrame([_message_row(m) for m in report.messages], columns=MESSAGES_SCHEMA.names)


def export_report(report: DecodeReport, out_path: Path, capture_path: Path | None = None) -> dict:
    """Write messages.parquet, warnings.parquet and manifest.json; return the manifest."""
    out_path = Path(out_path)
    out_path.mkdir(parents=True, exist_ok=True)

    _write_table(
        [_message_row(m) for m in report.messages],
        MESSAGES_SCHEMA,
        out_path / "messages.parquet",
    )
    _write_table(
        [{"message_index": idx, "kind": w.kind.value, "message": w.message}
         for idx, w in report.all_warnings()],
        WARNINGS_SCHEMA,
        out_path / "warnings.parquet",
    )

    files_rel = ["messages.parquet", "warnings.parquet"]
    capture_sha = file_sha256(Path(capture_path)).hex() if capture_path else None
    manifest = {
        "capture": {
            "file": Path(capture_path).name if capture_path else None,
            "sha256": capture_sha,
        },
        "summary": report.summary(),
        "integrity": {
            "algorithm": "sha256",
            "files": files_rel,
            "root": compute_integrity_root(out_path, files_rel, capture_sha),
        },
    }

    man_bytes = json.dumps(manifest, **CANONICAL_JSON_KW).encode("utf-8")
    (out_path / "manifest.json").write_bytes(man_bytes)
    return manifest
