"""Human-readable dump of a decode report."""
from __future__ import annotations

from typing import Iterable

from tpumsg_core.protocol import HEADER_SIZE, HEX_DISPLAY_LEN

from .payloads import GetFuncPayload, LaunchFuncPayload, LoadLibPayload, UnknownPayload
from .report import DecodedMessage, DecodeReport

RULE = "=" * 40


def format_hex(data: bytes, limit: int = HEX_DISPLAY_LEN) -> str:
    text = data[:limit].hex().upper()
    if len(data) > limit:
        text += "..."
    return f"{text} ({len(data)} bytes)"


def escape_name(raw: bytes) -> str:
    return "".join(chr(b) if 32 <= b < 127 else f"\\x{b:02X}" for b in raw)


def _payload_lines(message: DecodedMessage) -> list[str]:
    name = message.header.api_name
    payload = message.payload

    if message.header.payload_bytes == 0:
        return [">>> No payload data"]
    if isinstance(payload, UnknownPayload):
        return [
            ">>> Unknown API type",
            f"  Raw payload: {format_hex(payload.preview)}",
        ]

    lines = [f">>> {name.removeprefix('A53LITE_')} payload:"]
    if isinstance(payload, LoadLibPayload):
        lines.append(f"  Library path pointer: 0x{payload.library_path:016X}")
        lines.append(f"  Library address: 0x{payload.library_addr:016X}")
        lines.append(f"  Size: {payload.size}")
        if not payload.partial:
            lines.append(f'  Library name: "{escape_name(payload.library_name)}"')
            lines.append(f"  MD5: {format_hex(payload.md5)}")
            lines.append(f"  Current record: {payload.cur_rec}")
    elif isinstance(payload, GetFuncPayload):
        lines.append(f"  Core ID: {payload.core_id}")
        lines.append(f"  Function ID: {payload.f_id}")
        lines.append(f"  MD5: {format_hex(payload.md5)}")
        lines.append(f'  Function name: "{escape_name(payload.func_name)}"')
    elif isinstance(payload, LaunchFuncPayload):
        lines.append(f"  Function ID: {payload.f_id}")
        lines.append(f"  Parameter size: {payload.param_size} bytes")
        lines.append(f"  Available parameter data: {payload.available_param_bytes} bytes")
        if payload.available_param_bytes:
            lines.append(f"  Parameter preview: {format_hex(payload.param_preview)}")
    return lines


def render_message(message: DecodedMessage) -> str:
    h = message.header
    lines = [
        f"=== Message #{message.index + 1} (offset: 0x{message.offset:08X}) ===",
        "API header:",
        f"  API_ID: 0x{h.api_id:08X} ({h.api_name})",
        f"  API size: {h.api_size} words = {h.payload_bytes} bytes",
        f"  API handle: 0x{h.api_handle:016X}",
        f"  API sequence: {h.api_seq}",
        f"  Duration: {h.duration}",
        f"  Result: {h.result}",
    ]
    lines.extend(_payload_lines(message))
    for w in message.warnings:
        lines.append(f"  WARNING [{w.kind.value}]: {w.message}")
    lines.append(f"Processed so far: {message.offset + message.length} bytes")
    return "\n".join(lines)


def render_report(report: DecodeReport, source_name: str | None = None) -> Iterable[str]:
    """Yield the dump block by block, ending with the summary."""
    if source_name:
        yield f"Parsing file: {source_name}"
    yield f"File size: {report.bytes_available} bytes"
    yield RULE + "\n"

    for message in report.messages:
        yield render_message(message) + "\n"

    for w in report.stream_warnings:
        yield f"WARNING [{w.kind.value}]: {w.message}\n"

    yield RULE
    reason = report.halt_reason.value if report.halt_reason else "incomplete"
    yield f"Done ({reason}). Processed {report.message_count} messages"
    pct = (report.bytes_consumed / report.bytes_available * 100) if report.bytes_available else 100.0
    yield f"Bytes processed: {report.bytes_consumed}/{report.bytes_available} ({pct:.1f}%)"
    yield f"Header size: {HEADER_SIZE} bytes, warnings: {report.warning_count}"
