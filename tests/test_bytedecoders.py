import struct

import pytest

from olerip.bytedecoders import (
    get_int8,
    get_int16,
    get_int32,
    get_uint8,
    get_uint16,
    get_uint32,
)


def test_int8_is_signed():
    assert get_int8(b"\xff") == -1


def test_uint8_is_unsigned():
    assert get_uint8(b"\xff") == 255


@pytest.mark.parametrize("value", [0, 1, 127, 128, 4660, 65535])
def test_uint16_round_trip(value):
    assert get_uint16(struct.pack("<H", value)) == value


@pytest.mark.parametrize("raw", [b"\x00\x00", b"\xff\xff", b"\x34\x92", b"\x01\x80"])
def test_int16_never_sign_extends(raw):
    assert get_int16(raw) == get_uint16(raw)
    assert get_int16(raw) >= 0


@pytest.mark.parametrize("value", [0, 1, -1, -2, 2**31 - 1, -(2**31), 512])
def test_int32_round_trip(value):
    assert get_int32(struct.pack("<i", value)) == value


@pytest.mark.parametrize("value", [0, 1, 2**32 - 1, 2**31, 0xFFFFFFFE])
def test_uint32_round_trip(value):
    assert get_uint32(struct.pack("<I", value)) == value


@pytest.mark.parametrize("raw", [b"\xfe\xff\xff\xff", b"\x00\x00\x00\x80", b"\x10\x20\x30\x40"])
def test_int32_and_uint32_agree_modulo_two_to_the_32(raw):
    assert get_uint32(raw) == get_int32(raw) & 0xFFFFFFFF


def test_offset_is_honoured():
    data = b"\xaa\xbb" + struct.pack("<I", 123456) + struct.pack("<H", 777)
    assert get_uint32(data, 2) == 123456
    assert get_uint16(data, 6) == 777
    assert get_uint8(data, 1) == data[1]


def test_short_buffer_raises():
    with pytest.raises(ValueError):
        get_uint32(b"\x01\x02\x03")


def test_offset_past_end_raises():
    with pytest.raises(ValueError):
        get_uint16(b"\x01\x02", 1)


def test_negative_offset_raises():
    with pytest.raises(ValueError):
        get_int8(b"\x01\x02", -1)