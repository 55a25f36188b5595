# olerip

`olerip` is a library for reading OLE2 compound documents (the container
format used by older Microsoft Office files and by many e-mail attachments)
and for unwrapping the files embedded in their `Ole10Native` and `Data`
streams.

Only the Python standard library is needed at run time.

## Installation

```
pip install .
```

## Modules

- `olerip.oleheader`
  - `OleHeader.from_block(block, file_size)` decodes the 512-byte header
    block; it raises `NotOleFileError` when the signature is missing.
    `OleHeader.sanity_check(file_size)` counts implausible header values and
    `OleHeader.describe()` returns a readable listing.
  - `DirectoryEntry.from_bytes(buf)` decodes a 128-byte directory entry;
    `DirectoryEntry.describe()` lists its fields.
  - `is_ole_signature(block)`, `dbstosbs(raw, byte_count, limit)` (reduces a
    UTF-16LE name to printable ASCII) and `format_sector(sector)` (hex dump).
  - `EntryType` names the directory entry kinds; `OleError`,
    `NotOleFileError` and `InsaneOleFileError` are the error types.
- `olerip.olechain`
  - `OleContainer.from_fileobj(stream)` wraps a seekable binary file and
    rejects files smaller than a header. Its methods `read_block`,
    `read_header`, `load_fat`, `follow_chain`, `follow_minichain`,
    `load_chain`, `load_minichain` and `get_miniblock` give sector-level
    access. `BlockReadError` and `FatOverflowError` derive from `OleError`.
- `olerip.olestream`
  - `StreamUnwrapper(verbose, save_unknown_streams, filename_report_fn)`:
    `decode_stream(element_name, stream, output_dir)` returns `True` and
    saves the embedded attachment when the element name contains
    `Ole10Native` or `Data`, and returns `False` otherwise.
    `decode_attachment` and `save_stream` are the steps it uses.
  - `sanitize_filename(name)` and `search_for_file_sig(block, block_len)`
    (finds a PNG or JPEG signature).
- `olerip.bytedecoders`: little-endian integer readers such as
  `get_uint32(data, offset)`.
- `olerip.inttree`: `IntTree`, an integer set used to detect repeated
  sectors in a chain.
- `olerip.strstack`: `StringStack`, a last-in, first-out stack of strings.
- `olerip.logger`: `Logger` and `OutputMode` for sending messages to stdout,
  stderr, syslog, a log file or nowhere; `get_logger()` and `log(message)`
  use the shared instance.

## Example

```python
from olerip.olechain import OleContainer

with open("report.doc", "rb") as f:
    container = OleContainer.from_fileobj(f)
    header = container.read_header()
    print(header.describe())
    container.load_fat()
    directory = container.load_chain(header.directory_stream_start_sector)
```

## What it does not do

There is no command-line tool, and no single call that decodes a whole
document from start to finish. The caller reads the header, loads the FAT,
mini-FAT and directory with `OleContainer`, decodes entries with
`DirectoryEntry`, and passes each stream's data to
`StreamUnwrapper.decode_stream`.

## Running the tests

```
pip install .[test]
pytest
```