"""OLE2 compound-file header and directory-entry structures."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .bytedecoders import get_int8, get_int16, get_uint16, get_uint32

HEADER_BLOCK_SIZE = 512
"""Size of the OLE2 header block in bytes."""

HEADER_FAT_SECTOR_COUNT_LIMIT = 109
"""Number of FAT sector IDs stored directly in the header."""

DIRECTORY_ENTRY_SIZE = 128
DIRECTORY_ELEMENT_NAME_SIZE = 64
DIRECTORY_CLASS_SIZE = 16
DIRECTORY_TIMESTAMPS_SIZE = 16

SECTORID_FREE = -1
SECTORID_ENDOFCHAIN = -2
SECTORID_SAT = -3
SECTORID_MSAT = -4

OLE_ID_V2 = bytes((0xD0, 0xCF, 0x11, 0xE0, 0xA1, 0xB1, 0x1A, 0xE1))
OLE_ID_V1 = bytes((0x0E, 0x11, 0xFC, 0x0D, 0xD0, 0xCF, 0x11, 0xE0))

VERSION = "200811010143"

# Header field offsets.
_MINOR_VERSION = 0x18
_DLL_VERSION = 0x1A
_BYTE_ORDER = 0x1C
_SECTOR_SHIFT = 0x1E
_MINI_SECTOR_SHIFT = 0x20
_FAT_SECTOR_COUNT = 0x2C
_DIRECTORY_START = 0x30
_MINI_CUTOFF_SIZE = 0x38
_MINI_FAT_START = 0x3C
_MINI_FAT_SECTOR_COUNT = 0x40
_DIF_START_SECTOR = 0x44
_DIF_SECTOR_COUNT = 0x48
_FAT_SECTORS = 0x4C


class OleError(Exception):
    """Base class for failures while decoding an OLE2 file."""

    code: ClassVar[Optional[int]] = None


class NotOleFileError(OleError):
    """The data does not carry an OLE2 signature."""

    code = 102


class InsaneOleFileError(OleError):
    """The OLE2 header holds values that cannot be right."""

    code = 103


class EntryType(enum.IntEnum):
    """Kinds of directory entry."""

    INVALID = 0
    STORAGE = 1
    STREAM = 2
    LOCKBYTES = 3
    PROPERTY = 4
    ROOT = 5


def _signed32(value: int) -> int:
    if 0 <= value <= 0xFFFFFFFF and value & 0x80000000:
        return value - (1 << 32)
    return value


def is_ole_signature(block: bytes) -> bool:
    """Return True if ``block`` starts with either OLE2 signature."""
    head = bytes(block[:8])
    return head in (OLE_ID_V1, OLE_ID_V2)


def dbstosbs(raw: bytes, byte_count: int, limit: int) -> str:
    """Reduce a UTF-16LE name to its printable ASCII low bytes.

    Every second byte of the first ``byte_count - 1`` bytes is taken,
    at most ``limit - 1`` of them are examined, and only printable
    ASCII characters are kept.
    """
    low_bytes = bytes(raw)[: max(byte_count - 1, 0) : 2]
    if limit >= 1:
        low_bytes = low_bytes[: limit - 1]
    return "".join(chr(b) for b in low_bytes if 0x20 <= b <= 0x7E)


def format_sector(sector: bytes) -> str:
    """Render ``sector`` as a hex dump, 32 bytes per line with an ASCII column."""
    data = bytes(sector)
    parts = ["\n"]
    for start in range(0, len(data), 32):
        chunk = data[start : start + 32]
        parts.append("".join(f"{b:02X} " for b in chunk))
        if len(chunk) == 32:
            parts.append(
                "".join(chr(b) if chr(b).isascii() and chr(b).isalnum() else "." for b in chunk)
            )
            parts.append("\n")
    parts.append("\n")
    return "".join(parts)


@dataclass
class OleHeader:
    """Decoded fields of the 512-byte OLE2 header."""

    minor_version: int = 0
    dll_version: int = 0
    byte_order: int = 0
    sector_shift: int = 0
    sector_size: int = 0
    mini_sector_shift: int = 0
    mini_sector_size: int = 0
    fat_sector_count: int = 0
    directory_stream_start_sector: int = 0
    mini_cutoff_size: int = 0
    mini_fat_start: int = 0
    mini_fat_sector_count: int = 0
    dif_start_sector: int = 0
    dif_sector_count: int = 0
    fat: list[int] = field(default_factory=list)
    last_sector: int = 0

    @classmethod
    def from_block(cls, block: bytes, file_size: int) -> "OleHeader":
        """Decode a header block; ``file_size`` bounds the last sector."""
        hb = bytes(block)
        if len(hb) < HEADER_BLOCK_SIZE:
            raise ValueError(
                f"header block needs {HEADER_BLOCK_SIZE} bytes, got {len(hb)}"
            )
        if not is_ole_signature(hb):
            raise NotOleFileError("data is not in OLE2 format")

        sector_shift = get_uint16(hb, _SECTOR_SHIFT)
        mini_sector_shift = get_uint16(hb, _MINI_SECTOR_SHIFT)
        fat_sector_count = get_uint32(hb, _FAT_SECTOR_COUNT)
        fat_entries = min(fat_sector_count, HEADER_FAT_SECTOR_COUNT_LIMIT)
        fat = [get_uint32(hb, _FAT_SECTORS + 4 * i) for i in range(fat_entries)]

        return cls(
            minor_version=get_uint16(hb, _MINOR_VERSION),
            dll_version=get_uint16(hb, _DLL_VERSION),
            byte_order=get_uint16(hb, _BYTE_ORDER),
            sector_shift=sector_shift,
            sector_size=1 << sector_shift,
            mini_sector_shift=mini_sector_shift,
            mini_sector_size=1 << mini_sector_shift,
            fat_sector_count=fat_sector_count,
            directory_stream_start_sector=get_uint32(hb, _DIRECTORY_START),
            mini_cutoff_size=get_uint32(hb, _MINI_CUTOFF_SIZE),
            mini_fat_start=get_uint32(hb, _MINI_FAT_START),
            mini_fat_sector_count=get_uint32(hb, _MINI_FAT_SECTOR_COUNT),
            dif_start_sector=get_uint32(hb, _DIF_START_SECTOR),
            dif_sector_count=get_uint32(hb, _DIF_SECTOR_COUNT),
            fat=fat,
            last_sector=file_size >> sector_shift,
        )

    def sanity_check(self, file_size: int) -> int:
        """Return how many header values are implausible for ``file_size``."""
        max_sectors = file_size // self.sector_size if self.sector_size else 0
        checks = (
            self.sector_shift > 20,
            self.mini_sector_shift > 10,
            self.fat_sector_count < 0,
            self.fat_sector_count > max_sectors,
            self.directory_stream_start_sector > max_sectors,
        )
        return sum(checks)

    def describe(self) -> str:
        """Return a human-readable listing of the header fields."""
        lines = [
            f"Minor version = {self.minor_version}",
            f"DLL version = {self.dll_version}",
            f"Byte order = {self.byte_order}",
            "",
            f"Sector shift = {self.sector_shift}",
            f"Sector size  = {self.sector_size}",
            f"Mini Sector shift = {self.mini_sector_shift}",
            f"Mini sector size  = {self.mini_sector_size}",
            "",
            f"FAT sector count = {_signed32(self.fat_sector_count)}",
            f"First FAT sector = {_signed32(self.directory_stream_start_sector)}",
            "",
            f"Maximum ministream size = {_signed32(self.mini_cutoff_size)}",
            "",
            f"First MiniFAT sector = {_signed32(self.mini_fat_start)}",
            f"MiniFAT sector count = {_signed32(self.mini_fat_sector_count)}",
            "",
            f"First DIF sector = {_signed32(self.dif_start_sector)}",
            f"DIF sector count = {_signed32(self.dif_sector_count)}",
            "--------------------------------",
        ]
        lines.extend(
            f"FAT[{i}] = {_signed32(sector)}" for i, sector in enumerate(self.fat)
        )
        return "\n".join(lines) + "\n"


@dataclass
class DirectoryEntry:
    """One 128-byte entry of the OLE2 directory stream."""

    element_name: bytes = b""
    element_name_byte_count: int = 0
    element_type: int = 0
    element_colour: int = 0
    left_child: int = 0
    right_child: int = 0
    root: int = 0
    class_id: bytes = b""
    userflags: int = 0
    timestamps: bytes = b""
    start_sector: int = 0
    stream_size: int = 0

    @classmethod
    def from_bytes(cls, buf: bytes) -> "DirectoryEntry":
        """Decode a raw 128-byte directory entry."""
        raw = bytes(buf)
        if len(raw) < DIRECTORY_ENTRY_SIZE:
            raise ValueError(
                f"directory entry needs {DIRECTORY_ENTRY_SIZE} bytes, got {len(raw)}"
            )
        return cls(
            element_name=raw[:DIRECTORY_ELEMENT_NAME_SIZE],
            element_name_byte_count=get_int16(raw, 0x40),
            element_type=get_int8(raw, 0x42),
            element_colour=get_int8(raw, 0x43),
            left_child=get_uint32(raw, 0x44),
            right_child=get_uint32(raw, 0x48),
            root=get_uint32(raw, 0x4C),
            class_id=raw[0x50 : 0x50 + DIRECTORY_CLASS_SIZE],
            userflags=get_uint32(raw, 0x60),
            timestamps=raw[0x64 : 0x64 + DIRECTORY_TIMESTAMPS_SIZE],
            start_sector=get_uint32(raw, 0x74),
            stream_size=get_uint32(raw, 0x78),
        )

    def describe(self) -> str:
        """Return a human-readable listing of the entry fields."""
        name = dbstosbs(self.element_name, self.element_name_byte_count, 64)
        lines = [
            f"Element Name = {name}",
            f"Element type = {self.element_type}",
            f"Element colour = {self.element_colour}",
            f"Left Child = {_signed32(self.left_child)}",
            f"Right Child = {_signed32(self.right_child)}",
            f"Root = {_signed32(self.root)}",
            f"User flags = {_signed32(self.userflags)}",
            f"Start sector = {self.start_sector}",
            f"Stream Size = {_signed32(self.stream_size)}",
        ]
        return "\n".join(lines) + "\n"