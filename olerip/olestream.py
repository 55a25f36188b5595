"""Unwrapping of embedded attachments found inside OLE2 streams."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, Union

from .bytedecoders import get_int32, get_uint16, get_uint32

ELEMENT_10NATIVE_STRING = "Ole10Native"
ELEMENT_DATA = "Data"

_SIGNATURES = (
    b"\x89\x50\x4e\x47",  # PNG
    b"\xff\xd8\xff",  # JPEG
)
_SIG_COMPARE_LENGTH = 3
_ESCHER_FORMAT = 100
_SEARCH_SIZE = 500
_SIZE_T_MOD = 1 << 64

PathLike = Union[str, "os.PathLike[str]"]
ReportFn = Callable[[str], object]


def sanitize_filename(name: str) -> str:
    """Replace every character that is not ASCII alphanumeric or '.' with '_'."""
    return "".join(
        ch if (ch == "." or (ch.isascii() and ch.isalnum())) and " " <= ch <= "~" else "_"
        for ch in name
    )


def search_for_file_sig(block: bytes, block_len: int) -> int:
    """Return the offset of the first PNG or JPEG signature, or -1.

    Only the first ``block_len - 4`` positions are examined, and a match
    needs the first three bytes of a signature.
    """
    data = bytes(block)
    positions = min(block_len - 4, len(data) - _SIG_COMPARE_LENGTH + 1)
    prefixes = {sig[:_SIG_COMPARE_LENGTH] for sig in _SIGNATURES}
    for pos in range(max(positions, 0)):
        if data[pos : pos + _SIG_COMPARE_LENGTH] in prefixes:
            return pos
    return -1


def _c_string(data: bytes, start: int) -> tuple[str, int]:
    """Read a NUL-terminated string at ``start``; return it and the next offset."""
    end = data.find(b"\0", start)
    if end < 0:
        end = len(data)
    return data[start:end].decode("latin-1"), end + 1


class StreamUnwrapper:
    """Recognises OLE10 native and data streams and saves their attachments."""

    def __init__(
        self,
        verbose: bool = False,
        save_unknown_streams: bool = False,
        filename_report_fn: Optional[ReportFn] = None,
    ) -> None:
        self.verbose = verbose
        self.save_unknown_streams = save_unknown_streams
        self.filename_report_fn = filename_report_fn

    def save_stream(self, name: str, output_dir: PathLike, data: bytes) -> Path:
        """Write ``data`` to ``name`` inside ``output_dir`` and return the path."""
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / os.path.basename(name)
        target.write_bytes(bytes(data))
        return target

    def decode_attachment(self, stream: bytes, output_dir: PathLike) -> Path:
        """Extract the attachment held in an OLE10 native stream and save it."""
        data = bytes(stream)
        stream_size = len(data)
        raw_size = get_int32(data, 0)
        size_1 = raw_size % _SIZE_T_MOD
        start_offset = (stream_size - size_1) % _SIZE_T_MOD
        sp = 4

        if start_offset < 4:
            cbheader = get_uint16(data, sp)
            mfpmm = get_uint16(data, sp + 2)
            data_start = sp + cbheader - 4

            if mfpmm == _ESCHER_FORMAT:
                search_size = _SEARCH_SIZE
                if stream_size < search_size + 68:
                    search_size = stream_size - 69
                image_offset = search_for_file_sig(data[data_start:], search_size)
                if image_offset >= 0:
                    data_start += image_offset

            attach_name = f"image-{raw_size}"
            attach_size = size_1
        else:
            sp += 2
            attach_name, sp = _c_string(data, sp)
            _fname_1, sp = _c_string(data, sp)
            sp += 8
            _fname_2, sp = _c_string(data, sp)
            attach_size = min(get_uint32(data, sp), stream_size)
            sp += 4
            data_start = sp

        attach_name = sanitize_filename(attach_name)
        payload = data[data_start : data_start + attach_size]
        path = self.save_stream(attach_name, output_dir, payload)

        if self.verbose and self.filename_report_fn is not None:
            self.filename_report_fn(attach_name)
        return path

    def decode_stream(
        self, element_name: str, stream: bytes, output_dir: PathLike
    ) -> bool:
        """Decode ``stream`` if its element name is known; return True if decoded."""
        if ELEMENT_10NATIVE_STRING in element_name or ELEMENT_DATA in element_name:
            self.decode_attachment(stream, output_dir)
            return True
        return False