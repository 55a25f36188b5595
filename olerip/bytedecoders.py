"""Little-endian integer decoding from raw byte buffers."""

from __future__ import annotations

import struct

_INT8 = struct.Struct("<b")
_UINT8 = struct.Struct("<B")
_UINT16 = struct.Struct("<H")
_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")


def _unpack(fmt: struct.Struct, data: bytes, offset: int) -> int:
    if offset < 0 or offset + fmt.size > len(data):
        raise ValueError(
            f"need {fmt.size} bytes at offset {offset}, buffer holds {len(data)}"
        )
    return fmt.unpack_from(data, offset)[0]


def get_int8(data: bytes, offset: int = 0) -> int:
    """Return the signed byte at ``offset``."""
    return _unpack(_INT8, data, offset)


def get_uint8(data: bytes, offset: int = 0) -> int:
    """Return the unsigned byte at ``offset``."""
    return _unpack(_UINT8, data, offset)


def get_int16(data: bytes, offset: int = 0) -> int:
    """Return the 16-bit little-endian value at ``offset``.

    The two bytes are combined without sign extension, so the result is
    always in the range 0..65535.
    """
    return _unpack(_UINT16, data, offset)


def get_uint16(data: bytes, offset: int = 0) -> int:
    """Return the unsigned 16-bit little-endian value at ``offset``."""
    return _unpack(_UINT16, data, offset)


def get_int32(data: bytes, offset: int = 0) -> int:
    """Return the signed 32-bit little-endian value at ``offset``."""
    return _unpack(_INT32, data, offset)


def get_uint32(data: bytes, offset: int = 0) -> int:
    """Return the unsigned 32-bit little-endian value at ``offset``."""
    return _unpack(_UINT32, data, offset)