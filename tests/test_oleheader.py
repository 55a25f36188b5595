import struct

import pytest

from olerip.oleheader import (
    HEADER_BLOCK_SIZE,
    HEADER_FAT_SECTOR_COUNT_LIMIT,
    OLE_ID_V1,
    OLE_ID_V2,
    DirectoryEntry,
    EntryType,
    NotOleFileError,
    OleError,
    OleHeader,
    dbstosbs,
    format_sector,
    is_ole_signature,
)


def make_header(
    sector_shift=9,
    mini_shift=6,
    fat_count=1,
    dir_start=1,
    mini_cutoff=4096,
    mini_fat_start=2,
    mini_fat_count=1,
    dif_start=0xFFFFFFFE,
    dif_count=0,
    fat=(0,),
    signature=OLE_ID_V2,
):
    block = bytearray(HEADER_BLOCK_SIZE)
    block[:8] = signature
    struct.pack_into("<HHHHH", block, 0x18, 0x3E, 3, 0xFFFE, sector_shift, mini_shift)
    struct.pack_into("<I", block, 0x2C, fat_count)
    struct.pack_into("<I", block, 0x30, dir_start)
    struct.pack_into("<I", block, 0x38, mini_cutoff)
    struct.pack_into("<IIII", block, 0x3C, mini_fat_start, mini_fat_count, dif_start, dif_count)
    for i, sector in enumerate(fat):
        struct.pack_into("<I", block, 0x4C + 4 * i, sector)
    return bytes(block)


def make_entry(name="Root Entry", etype=5, colour=1, left=0xFFFFFFFF, start=3, size=640):
    raw = bytearray(128)
    encoded = name.encode("utf-16-le") + b"\0\0"
    raw[: len(encoded)] = encoded
    struct.pack_into("<HbbIII", raw, 0x40, len(encoded), etype, colour, left, 0xFFFFFFFF, 7)
    raw[0x50:0x60] = bytes(range(16))
    struct.pack_into("<I", raw, 0x60, 0)
    struct.pack_into("<II", raw, 0x74, start, size)
    return bytes(raw)


def test_signatures_recognised():
    assert is_ole_signature(OLE_ID_V2 + b"rest")
    assert is_ole_signature(OLE_ID_V1)
    assert not is_ole_signature(b"PK\x03\x04\x00\x00\x00\x00")
    assert not is_ole_signature(b"")


def test_v2_signature_bytes():
    assert is_ole_signature(bytes.fromhex("d0cf11e0a1b11ae1") + bytes(8))
    assert not is_ole_signature(bytes.fromhex("d0cf11e0a1b11ae2") + bytes(8))


def test_header_fields_round_trip():
    block = make_header(fat=(0,))
    header = OleHeader.from_block(block, 4096)
    assert header.sector_shift == 9
    assert header.sector_size == 512
    assert header.mini_sector_shift == 6
    assert header.mini_sector_size == 64
    assert header.fat_sector_count == 1
    assert header.directory_stream_start_sector == 1
    assert header.mini_cutoff_size == 4096
    assert header.mini_fat_start == 2
    assert header.mini_fat_sector_count == 1
    assert header.dif_start_sector == 0xFFFFFFFE
    assert header.dif_sector_count == 0
    assert header.byte_order == 0xFFFE
    assert header.fat == [0]


def test_last_sector_from_file_size():
    header = OleHeader.from_block(make_header(), 512 * 8)
    assert header.last_sector == 8


def test_fat_list_capped_at_header_limit():
    header = OleHeader.from_block(make_header(fat_count=200, fat=()), 512 * 400)
    assert len(header.fat) == HEADER_FAT_SECTOR_COUNT_LIMIT


def test_bad_signature_raises():
    with pytest.raises(NotOleFileError):
        OleHeader.from_block(make_header(signature=b"\0" * 8), 4096)


def test_not_ole_is_ole_error():
    with pytest.raises(OleError) as info:
        OleHeader.from_block(bytes(HEADER_BLOCK_SIZE), 4096)
    assert info.type is NotOleFileError


def test_short_block_raises():
    with pytest.raises(ValueError):
        OleHeader.from_block(OLE_ID_V2 + bytes(10), 4096)


def test_sanity_check_clean_header():
    header = OleHeader.from_block(make_header(), 512 * 8)
    assert header.sanity_check(512 * 8) == 0


def test_sanity_check_counts_each_problem():
    header = OleHeader.from_block(make_header(), 512 * 8)
    header.sector_shift = 21
    header.mini_sector_shift = 11
    assert header.sanity_check(512 * 8) == 2


def test_sanity_check_directory_beyond_file():
    header = OleHeader.from_block(make_header(dir_start=0xFFFFFFFE), 512 * 8)
    assert header.sanity_check(512 * 8) >= 1


def test_header_describe_lists_fields_and_fat():
    header = OleHeader.from_block(make_header(fat=(0,)), 4096)
    text = header.describe()
    assert "Sector size  = 512\n" in text
    assert "FAT[0] = 0\n" in text
    assert text.endswith("\n")


def test_dbstosbs_decodes_name():
    raw = "Root Entry".encode("utf-16-le") + b"\0\0"
    assert dbstosbs(raw, len(raw), 64) == "Root Entry"


def test_dbstosbs_respects_limit():
    raw = "Root Entry".encode("utf-16-le") + b"\0\0"
    assert dbstosbs(raw, len(raw), 5) == "Root"


def test_dbstosbs_drops_unprintable():
    raw = "\x01Ole10Native".encode("utf-16-le") + b"\0\0"
    assert dbstosbs(raw, len(raw), 64) == "Ole10Native"


def test_dbstosbs_zero_count():
    assert dbstosbs(b"A\0B\0", 0, 64) == ""


def test_format_sector_full_line():
    text = format_sector(b"A" * 32)
    assert text == "\n" + "41 " * 32 + "A" * 32 + "\n" + "\n"


def test_format_sector_masks_non_alnum():
    text = format_sector(b"-" * 32)
    assert "." * 32 in text
    assert "2D " in text


def test_directory_entry_round_trip():
    entry = DirectoryEntry.from_bytes(make_entry(start=3, size=640))
    assert entry.element_type == EntryType.ROOT
    assert entry.element_colour == 1
    assert entry.left_child == 0xFFFFFFFF
    assert entry.root == 7
    assert entry.start_sector == 3
    assert entry.stream_size == 640
    assert entry.class_id == bytes(range(16))
    assert dbstosbs(entry.element_name, entry.element_name_byte_count, 64) == "Root Entry"


def test_directory_entry_stream_type():
    entry = DirectoryEntry.from_bytes(make_entry(name="Data", etype=2))
    assert entry.element_type == EntryType.STREAM


def test_directory_entry_short_buffer():
    with pytest.raises(ValueError):
        DirectoryEntry.from_bytes(bytes(100))


def test_directory_entry_describe():
    text = DirectoryEntry.from_bytes(make_entry()).describe()
    assert "Element Name = Root Entry\n" in text
    assert "Left Child = -1\n" in text
    assert "Start sector = 3\n" in text