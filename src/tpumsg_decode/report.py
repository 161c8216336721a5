from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from tpumsg_core.protocol import HEADER_SIZE

from .const import HaltReason
from .header import Header
from .payloads import DecodeWarning, Payload


@dataclass(frozen=True)
class DecodedMessage:
    index: int
    offset: int
    header: Header
    payload: Optional[Payload]
    payload_bytes_read: int
    warnings: tuple[DecodeWarning, ...] = ()

    @property
    def length(self) -> int:
        """Bytes this message advanced the stream cursor by."""
        return HEADER_SIZE + self.payload_bytes_read


@dataclass
class DecodeReport:
    """Everything consumed from one capture, up to the point decoding halted.

    Filled in by the stream decoder as messages are produced; treat it as
    read-only once `halt_reason` is set.
    """

    messages: list[DecodedMessage] = field(default_factory=list)
    stream_warnings: list[DecodeWarning] = field(default_factory=list)
    bytes_available: int = 0
    bytes_consumed: int = 0
    halt_reason: Optional[HaltReason] = None

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def finished(self) -> bool:
        return self.halt_reason is not None

    @property
    def clean(self) -> bool:
        return self.halt_reason == HaltReason.END_OF_STREAM and self.warning_count == 0

    def all_warnings(self) -> list[tuple[int, DecodeWarning]]:
        """(message index, warning) pairs; stream-level warnings carry index -1."""
        out = [(m.index, w) for m in self.messages for w in m.warnings]
        out.extend((-1, w) for w in self.stream_warnings)
        return out

    @property
    def warning_count(self) -> int:
        return len(self.all_warnings())

    def counts_by_api(self) -> dict[str, int]:
        return dict(Counter(m.header.api_name for m in self.messages))

    def summary(self) -> dict:
        return {
            "messages": self.message_count,
            "warnings": self.warning_count,
            "bytes_available": self.bytes_available,
            "bytes_consumed": self.bytes_consumed,
            "halt_reason": self.halt_reason.value if self.halt_reason else None,
            "by_api": self.counts_by_api(),
        }
