from __future__ import annotations

from enum import Enum


class WarningKind(str, Enum):
    TRUNCATED = "Truncated"
    SHORT_PAYLOAD = "ShortPayload"
    SIZE_MISMATCH = "SizeMismatch"
    TRUNCATED_HEADER = "TruncatedHeader"


class HaltReason(str, Enum):
    END_OF_STREAM = "EndOfStream"
    TRUNCATED_HEADER = "TruncatedHeader"
    SHORT_PAYLOAD = "ShortPayload"
    SOURCE_STALLED = "SourceStalled"


WARNINGS = {
  WarningKind.TRUNCATED: "Payload shorter than the record layout",
  WarningKind.SHORT_PAYLOAD: "Stream ended before the declared payload",
  WarningKind.SIZE_MISMATCH: "Declared parameter size exceeds available data",
  WarningKind.TRUNCATED_HEADER: "Stream ended inside a message header",
}


class StreamDecodeWarning(UserWarning):
    """Issued through `warnings.warn` when a capture stream halts early."""
