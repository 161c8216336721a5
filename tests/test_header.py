import pytest

from builders import header

from tpumsg_core.fields import TruncatedHeader
from tpumsg_core.protocol import ApiId, HEADER_SIZE
from tpumsg_decode.header import api_id_to_string, decode_header


def test_header_size_is_packed():
    assert len(header(ApiId.LOAD_LIB, 27)) == HEADER_SIZE == 28


def test_decode_header_fields():
    raw = header(ApiId.LAUNCH_FUNC, 10, seq=42, handle=0xABCDEF0123456789, duration=900, result=3)
    h = decode_header(raw)

    assert h.api_id == ApiId.LAUNCH_FUNC
    assert h.api_size == 10
    assert h.payload_bytes == 40
    assert h.api_handle == 0xABCDEF0123456789
    assert h.api_seq == 42
    assert h.duration == 900
    assert h.result == 3
    assert h.api_name == "A53LITE_LAUNCH_FUNC"


def test_decode_header_ignores_trailing_bytes():
    raw = header(ApiId.GET_FUNC, 22) + b"\xaa" * 50
    assert decode_header(raw).api_size == 22


def test_decode_header_big_endian():
    raw = header(ApiId.UNLOAD_LIB, 27, seq=9, order=">")
    h = decode_header(raw, ">")
    assert h.api_id == ApiId.UNLOAD_LIB
    assert h.api_seq == 9


def test_truncated_header_raises():
    with pytest.raises(TruncatedHeader):
        decode_header(header(ApiId.LOAD_LIB, 27)[:HEADER_SIZE - 1])


def test_unknown_api_name():
    assert api_id_to_string(0x12345678) == "UNKNOWN"
    assert api_id_to_string(0x90000004) == "A53LITE_UNLOAD_LIB"
