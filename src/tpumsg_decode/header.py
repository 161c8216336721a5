from __future__ import annotations

from dataclasses import dataclass

from tpumsg_core.fields import TruncatedHeader, read_u32, read_u64
from tpumsg_core.protocol import ApiId, DEFAULT_BYTE_ORDER, HEADER_SIZE, WORD_SIZE


def api_id_to_string(api_id: int) -> str:
    try:
        return f"A53LITE_{ApiId(api_id).name}"
    except ValueError:
        return "UNKNOWN"


@dataclass(frozen=True)
class Header:
    api_id: int
    api_size: int  # payload length in 4-byte words
    api_handle: int
    api_seq: int
    duration: int
    result: int

    @property
    def payload_bytes(self) -> int:
        """Declared payload length. A claim; the stream may hold fewer bytes."""
        return self.api_size * WORD_SIZE

    @property
    def api_name(self) -> str:
        return api_id_to_string(self.api_id)


def decode_header(data: bytes, byte_order: str = DEFAULT_BYTE_ORDER) -> Header:
    """Decode the fixed message envelope from the start of `data`."""
    if len(data) < HEADER_SIZE:
        raise TruncatedHeader(f"Need {HEADER_SIZE} header bytes, got {len(data)}")
    return Header(
        api_id=read_u32(data, 0, byte_order),
        api_size=read_u32(data, 4, byte_order),
        api_handle=read_u64(data, 8, byte_order),
        api_seq=read_u32(data, 16, byte_order),
        duration=read_u32(data, 20, byte_order),
        result=read_u32(data, 24, byte_order),
    )
