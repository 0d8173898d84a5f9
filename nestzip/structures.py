"""
Copyright 2025 DNAi inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
ZIP structure definitions and parsing functions.

This module defines dataclasses for the ZIP structures used by nestzip
(end of central directory record, central directory entries, writer-side
central records and per-entry extraction outcomes) together with functions
that parse them out of an in-memory buffer.
"""

from dataclasses import dataclass
from typing import Union

from .constants import (
    CENTRAL_DIR_HEADER,
    CENTRAL_DIR_HEADER_SIZE,
    END_OF_CENTRAL_DIR,
    END_OF_CENTRAL_DIR_BYTES,
    END_OF_CENTRAL_DIR_SIZE,
    LOCAL_FILE_HEADER,
    LOCAL_FILE_HEADER_SIZE,
    MAX_COMMENT_SIZE,
)
from .errors import ZipFormatError
from .utils import read_exact, read_uint16, read_uint32


@dataclass
class EndOfCentralDirectory:
    """End of Central Directory record.

    This record marks the end of the central directory and contains
    information needed to locate the central directory.
    """

    offset: int
    disk_num: int
    cd_disk: int
    cd_records_on_disk: int
    cd_records_total: int
    cd_size: int
    cd_offset: int
    comment: bytes


@dataclass
class ZipEntry:
    """ZIP entry metadata, as read from the central directory.

    Sizes come from the central directory rather than the local header so
    that entries written with a trailing data descriptor are located
    correctly.
    """

    name: str
    compression_method: int
    compressed_size: int
    uncompressed_size: int
    local_header_offset: int
    flags: int = 0
    crc32: int = 0

    @property
    def is_dir(self) -> bool:
        return self.name.endswith("/")


@dataclass
class CentralRecord:
    """Writer-side record for one emitted entry, consumed by the central directory."""

    name_bytes: bytes
    crc32: int
    compressed_size: int
    uncompressed_size: int
    local_header_offset: int
    is_dir: bool


@dataclass
class Extracted:
    """An entry whose payload was decoded."""

    name: str
    data: bytes


@dataclass
class Skipped:
    """An entry that was left out of the results, with the reason why."""

    name: str
    reason: str


EntryResult = Union[Extracted, Skipped]


def find_eocd(buffer: memoryview) -> EndOfCentralDirectory:
    """Find and parse the End of Central Directory record.

    Scans backward over the last ``min(65536 + 22, len(buffer))`` bytes; the
    signature nearest the end of the buffer wins.

    Args:
        buffer: The whole archive.

    Returns:
        EndOfCentralDirectory object.

    Raises:
        ZipFormatError: If no EOCD signature is found (not a ZIP, or ZIP64).
    """
    size = len(buffer)
    max_scan = min(MAX_COMMENT_SIZE + 1 + END_OF_CENTRAL_DIR_SIZE, size)
    start = size - max_scan
    # The record needs 22 bytes, so the last candidate starts at size - 22
    end = size - END_OF_CENTRAL_DIR_SIZE + len(END_OF_CENTRAL_DIR_BYTES)

    pos = -1
    if end > start:
        pos = bytes(buffer[start:end]).rfind(END_OF_CENTRAL_DIR_BYTES)
    if pos == -1:
        raise ZipFormatError("EOCD not found: not a ZIP archive, or a ZIP64 archive (unsupported)")

    return parse_eocd(buffer, start + pos)


def parse_eocd(buffer: memoryview, offset: int) -> EndOfCentralDirectory:
    """Parse an End of Central Directory record at *offset*.

    Raises:
        ZipFormatError: If the signature is invalid or the buffer is truncated.
    """
    signature = read_uint32(buffer, offset)
    if signature != END_OF_CENTRAL_DIR:
        raise ZipFormatError(
            f"Invalid EOCD signature: 0x{signature:08X}, "
            f"expected 0x{END_OF_CENTRAL_DIR:08X}"
        )

    comment_len = read_uint16(buffer, offset + 20)
    # A comment that claims more bytes than remain is tolerated, not read
    available = len(buffer) - offset - END_OF_CENTRAL_DIR_SIZE
    comment = read_exact(buffer, offset + END_OF_CENTRAL_DIR_SIZE, min(comment_len, available))

    return EndOfCentralDirectory(
        offset=offset,
        disk_num=read_uint16(buffer, offset + 4),
        cd_disk=read_uint16(buffer, offset + 6),
        cd_records_on_disk=read_uint16(buffer, offset + 8),
        cd_records_total=read_uint16(buffer, offset + 10),
        cd_size=read_uint32(buffer, offset + 12),
        cd_offset=read_uint32(buffer, offset + 16),
        comment=comment,
    )


def parse_central_directory_header(buffer: memoryview, offset: int) -> tuple[ZipEntry, int]:
    """Parse one central directory header at *offset*.

    Args:
        buffer: The whole archive.
        offset: Start of the header.

    Returns:
        Tuple of (ZipEntry, total header length including name, extra and comment).

    Raises:
        ZipFormatError: If the signature is invalid or the buffer is truncated.
    """
    if offset + 4 > len(buffer) or read_uint32(buffer, offset) != CENTRAL_DIR_HEADER:
        raise ZipFormatError(f"central directory corrupted at offset {offset}")

    flags = read_uint16(buffer, offset + 8)
    compression_method = read_uint16(buffer, offset + 10)
    crc32 = read_uint32(buffer, offset + 16)
    compressed_size = read_uint32(buffer, offset + 20)
    uncompressed_size = read_uint32(buffer, offset + 24)
    filename_len = read_uint16(buffer, offset + 28)
    extra_len = read_uint16(buffer, offset + 30)
    comment_len = read_uint16(buffer, offset + 32)
    local_header_offset = read_uint32(buffer, offset + 42)

    filename = read_exact(buffer, offset + CENTRAL_DIR_HEADER_SIZE, filename_len)

    entry = ZipEntry(
        name=filename.decode("utf-8", errors="replace"),
        compression_method=compression_method,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        local_header_offset=local_header_offset,
        flags=flags,
        crc32=crc32,
    )
    return entry, CENTRAL_DIR_HEADER_SIZE + filename_len + extra_len + comment_len


def parse_central_directory(buffer: memoryview, eocd: EndOfCentralDirectory) -> list[ZipEntry]:
    """Parse every central directory header between cd_offset and cd_offset + cd_size.

    Directory entries are included; callers decide what to do with them.
    """
    entries = []
    cursor = eocd.cd_offset
    end = eocd.cd_offset + eocd.cd_size
    while cursor < end:
        entry, length = parse_central_directory_header(buffer, cursor)
        entries.append(entry)
        cursor += length
    return entries


def local_data_offset(buffer: memoryview, local_header_offset: int) -> int:
    """Return the offset where an entry's payload begins.

    Raises:
        ZipFormatError: If no local file header starts at *local_header_offset*.
    """
    if (
        local_header_offset + 4 > len(buffer)
        or read_uint32(buffer, local_header_offset) != LOCAL_FILE_HEADER
    ):
        raise ZipFormatError(f"Local file header not found at offset {local_header_offset}")

    filename_len = read_uint16(buffer, local_header_offset + 26)
    extra_len = read_uint16(buffer, local_header_offset + 28)
    return local_header_offset + LOCAL_FILE_HEADER_SIZE + filename_len + extra_len
