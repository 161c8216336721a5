"""Structural decoders for A53LITE API payloads.

Each decoder takes the payload bytes actually read from the stream and
returns ``(record, warnings)``. A payload shorter than its layout never
raises; it yields a partial record or ``None`` plus a Truncated warning.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from tpumsg_core.fields import read_bytes, read_cstring, read_i32, read_u32, read_u64
from tpumsg_core.protocol import (
    ApiId,
    DEFAULT_BYTE_ORDER,
    FUNC_MAX_NAME_LEN,
    GET_FUNC_SIZE,
    LAUNCH_FUNC_FIXED_SIZE,
    LIB_MAX_NAME_LEN,
    LOAD_LIB_SIZE,
    MAX_PARAM_LEN,
    MD5SUM_LEN,
    PARAM_PREVIEW_LEN,
    PARTIAL_LIB_MIN,
    UNKNOWN_PREVIEW_LEN,
)

from .const import WARNINGS, WarningKind


@dataclass(frozen=True)
class DecodeWarning:
    kind: WarningKind
    message: str

    @property
    def description(self) -> str:
        return WARNINGS[self.kind]


@dataclass(frozen=True)
class LoadLibPayload:
    """LOAD_LIB and UNLOAD_LIB share this layout.

    Path and address are pointers in the producer's address space and are
    kept as opaque integers. On a partial decode only the first three
    fields are set.
    """

    library_path: int
    library_addr: int
    size: int
    library_name: Optional[bytes] = None
    md5: Optional[bytes] = None
    cur_rec: Optional[int] = None
    partial: bool = False


@dataclass(frozen=True)
class GetFuncPayload:
    core_id: int
    f_id: int
    md5: bytes
    func_name: bytes


@dataclass(frozen=True)
class LaunchFuncPayload:
    f_id: int
    param_size: int  # as declared by the producer
    available_param_bytes: int
    param_preview: bytes
    params: bytes


@dataclass(frozen=True)
class UnknownPayload:
    preview: bytes
    length: int


Payload = Union[LoadLibPayload, GetFuncPayload, LaunchFuncPayload, UnknownPayload]
DecodeResult = tuple[Optional[Payload], list[DecodeWarning]]


def _truncated(name: str, expected: int, actual: int) -> DecodeWarning:
    return DecodeWarning(
        WarningKind.TRUNCATED,
        f"{name} payload too short: expected {expected} bytes, got {actual}",
    )


def decode_load_lib(data: bytes, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeResult:
    if len(data) < LOAD_LIB_SIZE:
        warnings = [_truncated("LOAD_LIB", LOAD_LIB_SIZE, len(data))]
        if len(data) < PARTIAL_LIB_MIN:
            return None, warnings
        partial = LoadLibPayload(
            library_path=read_u64(data, 0, byte_order),
            library_addr=read_u64(data, 8, byte_order),
            size=read_u32(data, 16, byte_order),
            partial=True,
        )
        return partial, warnings

    name_off = 20
    md5_off = name_off + LIB_MAX_NAME_LEN
    rec_off = md5_off + MD5SUM_LEN
    return LoadLibPayload(
        library_path=read_u64(data, 0, byte_order),
        library_addr=read_u64(data, 8, byte_order),
        size=read_u32(data, 16, byte_order),
        library_name=read_cstring(data, name_off, LIB_MAX_NAME_LEN),
        md5=read_bytes(data, md5_off, MD5SUM_LEN),
        cur_rec=read_i32(data, rec_off, byte_order),
    ), []


# Same wire struct as LOAD_LIB; the protocol reuses it for unload.
decode_unload_lib = decode_load_lib


def decode_get_func(data: bytes, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeResult:
    if len(data) < GET_FUNC_SIZE:
        return None, [_truncated("GET_FUNC", GET_FUNC_SIZE, len(data))]

    return GetFuncPayload(
        core_id=read_i32(data, 0, byte_order),
        f_id=read_i32(data, 4, byte_order),
        md5=read_bytes(data, 8, MD5SUM_LEN),
        func_name=read_cstring(data, 8 + MD5SUM_LEN, FUNC_MAX_NAME_LEN),
    ), []


def decode_launch_func(data: bytes, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeResult:
    if len(data) < LAUNCH_FUNC_FIXED_SIZE:
        return None, [_truncated("LAUNCH_FUNC", LAUNCH_FUNC_FIXED_SIZE, len(data))]

    f_id = read_i32(data, 0, byte_order)
    param_size = read_u32(data, 4, byte_order)
    available = min(len(data) - LAUNCH_FUNC_FIXED_SIZE, MAX_PARAM_LEN)
    params = read_bytes(data, LAUNCH_FUNC_FIXED_SIZE, available)

    warnings: list[DecodeWarning] = []
    if param_size > available:
        warnings.append(DecodeWarning(
            WarningKind.SIZE_MISMATCH,
            f"Declared parameter size {param_size} exceeds available data {available}",
        ))

    return LaunchFuncPayload(
        f_id=f_id,
        param_size=param_size,
        available_param_bytes=available,
        param_preview=params[:PARAM_PREVIEW_LEN],
        params=params,
    ), warnings


def decode_unknown(data: bytes, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeResult:
    return UnknownPayload(preview=bytes(data[:UNKNOWN_PREVIEW_LEN]), length=len(data)), []


DECODERS: dict[ApiId, Callable[[bytes, str], DecodeResult]] = {
    ApiId.LOAD_LIB: decode_load_lib,
    ApiId.GET_FUNC: decode_get_func,
    ApiId.LAUNCH_FUNC: decode_launch_func,
    ApiId.UNLOAD_LIB: decode_unload_lib,
}


def decode_payload(api_id: int, data: bytes, byte_order: str = DEFAULT_BYTE_ORDER) -> DecodeResult:
    """Route a payload to the decoder for its API id; unknown ids get a preview."""
    try:
        decoder = DECODERS[ApiId(api_id)]
    except ValueError:
        decoder = decode_unknown
    return decoder(data, byte_order)
