"""tpumsg decode - stream decoder for A53LITE API message captures."""
from .const import HaltReason, StreamDecodeWarning, WarningKind
from .header import Header, decode_header
from .payloads import (
    DecodeWarning,
    GetFuncPayload,
    LaunchFuncPayload,
    LoadLibPayload,
    UnknownPayload,
    decode_payload,
)
from .report import DecodedMessage, DecodeReport
from .stream import BufferSource, FileSource, StreamDecoder, decode_bytes, decode_file, open_capture

__all__ = [
    "BufferSource",
    "DecodeReport",
    "DecodeWarning",
    "DecodedMessage",
    "FileSource",
    "GetFuncPayload",
    "HaltReason",
    "Header",
    "LaunchFuncPayload",
    "LoadLibPayload",
    "StreamDecodeWarning",
    "StreamDecoder",
    "UnknownPayload",
    "WarningKind",
    "decode_bytes",
    "decode_file",
    "decode_header",
    "decode_payload",
    "open_capture",
]
