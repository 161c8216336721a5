from __future__ import annotations

import io
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Protocol
from warnings import warn

from tpumsg_core.protocol import DEFAULT_BYTE_ORDER, HEADER_SIZE, READ_CHUNK_SIZE

from .const import HaltReason, StreamDecodeWarning, WarningKind
from .header import decode_header
from .payloads import DecodeWarning, decode_payload
from .report import DecodedMessage, DecodeReport


class ByteSource(Protocol):
    """What the decoder needs from a capture.

    `read(n)` returns up to n bytes. ``b""`` means the data is exhausted;
    ``None`` means nothing is available right now (non-blocking sources).
    `size` is the total byte count when known up front, else None.
    """

    size: Optional[int]

    def read(self, n: int) -> Optional[bytes]: ...


class BufferSource:
    """In-memory capture: bytes, bytearray, memoryview or a mapped file."""

    def __init__(self, data: bytes | bytearray | memoryview):
        self._view = memoryview(data)
        self._pos = 0
        self.size: Optional[int] = len(self._view)

    def read(self, n: int) -> bytes:
        chunk = bytes(self._view[self._pos:self._pos + n])
        self._pos += len(chunk)
        return chunk


class FileSource:
    """Capture read from a binary file object, starting at its current position."""

    def __init__(self, f: BinaryIO):
        self._f = f
        self.size: Optional[int] = self._remaining_size(f)

    @staticmethod
    def _remaining_size(f: BinaryIO) -> Optional[int]:
        try:
            return os.fstat(f.fileno()).st_size - f.tell()
        except (AttributeError, OSError, io.UnsupportedOperation):
            # Pipes and in-memory streams have no usable size.
            return None

    def read(self, n: int) -> Optional[bytes]:
        return self._f.read(n)


@contextmanager
def open_capture(path: Path | str) -> Iterator[FileSource]:
    with open(path, "rb") as f:
        yield FileSource(f)


class StreamDecoder:
    """Walks a capture one message at a time.

    The cursor only ever advances by bytes actually read: header plus the
    payload bytes obtained, never the declared size when the two differ.
    A truncated header or a short payload halts the scan, since there is
    no way to find the next message boundary after either.
    """

    def __init__(self, source: ByteSource, byte_order: str = DEFAULT_BYTE_ORDER):
        self._source = source
        self.byte_order = byte_order
        self.report = DecodeReport()
        self._cursor = 0
        self._bytes_read = 0
        self._started = False
        self._stalled = False
        self._sync_totals()

    @property
    def cursor(self) -> int:
        return self._cursor

    def _pull(self, count: int) -> bytes:
        """Read up to `count` bytes, stopping early when the source has no more."""
        chunks: list[bytes] = []
        got = 0
        self._stalled = False
        while got < count:
            chunk = self._source.read(min(count - got, READ_CHUNK_SIZE))
            if chunk is None:
                self._stalled = True
                break
            if not chunk:
                break
            chunks.append(chunk)
            got += len(chunk)

        self._bytes_read += got
        return b"".join(chunks)

    def _sync_totals(self) -> None:
        size = self._source.size
        self.report.bytes_available = size if size is not None else self._bytes_read
        self.report.bytes_consumed = self._cursor

    def _halt(self, reason: HaltReason) -> None:
        self.report.halt_reason = reason
        self._sync_totals()

    def messages(self) -> Iterator[DecodedMessage]:
        """Lazily decode messages; the sequence can be consumed only once."""
        if self._started:
            raise RuntimeError("StreamDecoder.messages() can only be iterated once")
        self._started = True
        return self._scan()

    def _scan(self) -> Iterator[DecodedMessage]:
        report = self.report
        index = 0

        while True:
            start_off = self._cursor
            raw = self._pull(HEADER_SIZE)

            # Nothing more yet; the next header may still arrive
            if len(raw) < HEADER_SIZE and self._stalled:
                self._halt(HaltReason.SOURCE_STALLED)
                return

            # Clean EOF
            if len(raw) == 0:
                self._halt(HaltReason.END_OF_STREAM)
                return

            # Truncated header
            if len(raw) < HEADER_SIZE:
                text = (
                    f"Truncated message header at offset {start_off}: "
                    f"need {HEADER_SIZE} bytes, got {len(raw)}"
                )
                warn(text, StreamDecodeWarning, stacklevel=2)
                report.stream_warnings.append(DecodeWarning(WarningKind.TRUNCATED_HEADER, text))
                self._halt(HaltReason.TRUNCATED_HEADER)
                return

            header = decode_header(raw, self.byte_order)
            declared = header.payload_bytes
            data = self._pull(declared)

            warnings: list[DecodeWarning] = []
            short = len(data) < declared
            if short:
                warnings.append(DecodeWarning(
                    WarningKind.SHORT_PAYLOAD,
                    f"Payload read incomplete: expected {declared} bytes, got {len(data)}",
                ))

            # A zero-word payload carries nothing to decode.
            payload = None
            if declared:
                payload, payload_warnings = decode_payload(header.api_id, data, self.byte_order)
                warnings.extend(payload_warnings)

            self._cursor += HEADER_SIZE + len(data)
            message = DecodedMessage(
                index=index,
                offset=start_off,
                header=header,
                payload=payload,
                payload_bytes_read=len(data),
                warnings=tuple(warnings),
            )
            report.messages.append(message)
            index += 1

            if short:
                warn(
                    f"Torn payload in message #{message.index} at offset {start_off}. Stopping scan.",
                    StreamDecodeWarning,
                    stacklevel=2,
                )
                self._halt(HaltReason.SHORT_PAYLOAD)
            else:
                self._sync_totals()

            yield message

            if short:
                return

    def decode(self) -> DecodeReport:
        """Drain the stream and return the finished report."""
        for _ in self.messages():
            pass
        return self.report


def decode_bytes(data: bytes | bytearray | memoryview, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeReport:
    return StreamDecoder(BufferSource(data), byte_order).decode()


def decode_file(path: Path | str, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeReport:
    with open_capture(path) as source:
        return StreamDecoder(source, byte_order).decode()
