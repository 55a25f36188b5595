"""Sector-level access to an OLE2 compound file: blocks, FAT and chains."""

from __future__ import annotations

import os
from typing import BinaryIO, Optional

from .bytedecoders import get_int32
from .inttree import IntTree
from .logger import log
from .oleheader import (
    HEADER_BLOCK_SIZE,
    HEADER_FAT_SECTOR_COUNT_LIMIT,
    SECTORID_ENDOFCHAIN,
    NotOleFileError,
    OleError,
    OleHeader,
)

_ENTRY_SIZE = 4


class BlockReadError(OleError):
    """A sector could not be read from the underlying file."""

    code = 42


class FatOverflowError(OleError):
    """The extended FAT lists more sectors than the header announced."""

    code = 50


def _signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _table_entry(table: bytes, index: int) -> Optional[int]:
    """Return the signed sector ID stored at ``index`` or None if out of range."""
    offset = index * _ENTRY_SIZE
    if index < 0 or offset + _ENTRY_SIZE > len(table):
        return None
    return get_int32(table, offset)


class OleContainer:
    """An open OLE2 file with its header, FAT, miniFAT and ministream.

    The ``verbose`` and ``debug`` attributes may be set after construction.
    """

    def __init__(self, stream: BinaryIO, file_size: int) -> None:
        self.stream = stream
        self.file_size = file_size
        self.verbose = False
        self.debug = False
        self.header = OleHeader(sector_size=HEADER_BLOCK_SIZE)
        self.header_block = b""
        self.last_sector = -1
        self.last_chain_size = 0
        self.fat = b""
        self.minifat = b""
        self.ministream: Optional[bytes] = None
        self.error: Optional[OleError] = None

    @classmethod
    def from_fileobj(cls, stream: BinaryIO) -> "OleContainer":
        """Wrap a seekable binary file; reject files smaller than a header."""
        stream.seek(0, os.SEEK_END)
        file_size = stream.tell()
        stream.seek(0, os.SEEK_SET)
        if file_size < HEADER_BLOCK_SIZE:
            raise NotOleFileError(
                f"file holds {file_size} bytes, less than an OLE2 header"
            )
        return cls(stream, file_size)

    def read_block(self, index: int) -> bytes:
        """Return sector ``index``; sector -1 is the header block."""
        size = self.header.sector_size
        if self.stream is None or getattr(self.stream, "closed", False):
            raise BlockReadError("OLE file is closed")
        offset = HEADER_BLOCK_SIZE + index * size
        if offset < 0:
            raise BlockReadError(f"seek failure (block={index}:{offset})")
        try:
            self.stream.seek(offset, os.SEEK_SET)
            data = self.stream.read(size)
        except (OSError, ValueError) as exc:
            raise BlockReadError(f"cannot read block {index}: {exc}") from exc
        if len(data) != size:
            if self.verbose:
                log(f"Mismatch in bytes read. Requested {size}, got {len(data)}")
            raise BlockReadError(
                f"block {index}: requested {size} bytes, got {len(data)}"
            )
        return bytes(data)

    def read_header(self) -> OleHeader:
        """Read and decode the 512-byte header block."""
        self.header = OleHeader(sector_size=HEADER_BLOCK_SIZE)
        block = self.read_block(-1)
        self.header = OleHeader.from_block(block, self.file_size)
        self.header_block = block
        self.last_sector = self.header.last_sector
        if self.debug:
            log(self.header.describe())
        return self.header

    def load_fat(self) -> bytes:
        """Load the FAT from the header's sector list and any DIF sectors."""
        header = self.header
        size = header.sector_size
        fat_size = header.fat_sector_count << header.sector_shift
        fat = bytearray(fat_size)
        position = 0

        def place(sector: int) -> None:
            nonlocal position
            if position + size > fat_size:
                raise FatOverflowError(
                    f"FAT boundary exceeded loading sector {sector}"
                )
            fat[position : position + size] = self.read_block(sector)
            position += size

        try:
            for sector in header.fat[:HEADER_FAT_SECTOR_COUNT_LIMIT]:
                place(_signed32(sector))

            current = _signed32(header.dif_start_sector)
            entries_end = size - _ENTRY_SIZE
            for i in range(header.dif_sector_count):
                dif_block = self.read_block(current)
                offset = 0
                while True:
                    import_sector = get_int32(dif_block, offset)
                    if import_sector >= 0:
                        place(import_sector)
                        offset += _ENTRY_SIZE
                    elif self.verbose:
                        log(f"sector request was negative ({import_sector})")
                    if import_sector < 0 or offset >= entries_end:
                        break
                if i < header.dif_sector_count - 1:
                    current = get_int32(dif_block, entries_end)
        finally:
            self.fat = bytes(fat)
        return self.fat

    def follow_chain(self, start: int) -> int:
        """Count the sectors of the FAT chain at ``start``; -1 on a repeat."""
        if start < 0:
            return 0
        seen = IntTree()
        current = start
        length = 0
        while True:
            next_sector = _table_entry(self.fat, current)
            if next_sector is None:
                break
            if seen.add(next_sector):
                return -1
            if next_sector == current:
                break
            current = next_sector
            length += 1
            if current < 0 or current >= self.last_sector:
                break
        return length

    def follow_minichain(self, start: int) -> int:
        """Count the mini-sectors of the miniFAT chain at ``start``."""
        if start < 0:
            return 0
        visited = IntTree([start])
        current = start
        length = 0
        while True:
            next_sector = _table_entry(self.minifat, current)
            if next_sector is None:
                return 0
            if visited.add(next_sector):
                break
            length += 1
            current = next_sector
            if current < 0 or current > self.last_sector:
                break
        return length

    def load_chain(self, start: int) -> Optional[bytes]:
        """Return the data of the FAT chain at ``start``, or None on failure."""
        self.last_chain_size = 0
        if start < 0:
            return None
        length = self.follow_chain(start)
        if length <= 0:
            return None

        total = length << self.header.sector_shift
        self.last_chain_size = total
        parts: list[bytes] = []
        current = start
        while True:
            if len(parts) == length:
                if self.verbose:
                    log("Load-chain went over memory boundary")
                return None
            try:
                parts.append(self.read_block(current))
            except BlockReadError as exc:
                self.error = exc
                return None
            next_sector = _table_entry(self.fat, current)
            if next_sector is None:
                break
            current = next_sector
            if current < 0 or current > self.last_sector:
                break
        return b"".join(parts).ljust(total, b"\0")

    def load_minichain(self, start: int) -> Optional[bytes]:
        """Return the data of the miniFAT chain at ``start``, or None if empty."""
        if start < 0:
            return None
        length = self.follow_minichain(start)
        if length == 0:
            return None

        parts: list[bytes] = []
        current = start
        while len(parts) < length:
            parts.append(self.get_miniblock(current))
            next_sector = _table_entry(self.minifat, current)
            if next_sector is None:
                break
            current = next_sector
            if (
                current == SECTORID_ENDOFCHAIN
                or current < 0
                or current > self.last_sector
            ):
                break
        return b"".join(parts).ljust(length * self.header.mini_sector_size, b"\0")

    def get_miniblock(self, index: int) -> bytes:
        """Return mini-sector ``index`` of the ministream, zero-padded."""
        if index < 0:
            raise ValueError(f"mini-sector index must not be negative: {index}")
        size = self.header.mini_sector_size
        if not self.ministream:
            return bytes(size)
        offset = index << self.header.mini_sector_shift
        return self.ministream[offset : offset + size].ljust(size, b"\0")