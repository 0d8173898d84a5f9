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
Utility functions for nestzip.

This module provides helper functions for CRC32 calculation, little-endian
access to in-memory buffers, safe binary writes and archive path handling.
"""

import os
import struct
from pathlib import Path
from typing import BinaryIO, Iterable, Optional

from .errors import ZipFormatError

CRC32_POLYNOMIAL = 0xEDB88320

_CRC_TABLE: Optional[list[int]] = None


def _make_crc_table() -> list[int]:
    """Build the 256-entry lookup table for the reflected CRC-32 polynomial."""
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = CRC32_POLYNOMIAL ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return table


def crc32(data: bytes) -> int:
    """Calculate CRC32 checksum for data.

    Table driven, seeded with 0xFFFFFFFF and finalized by one's complement,
    so ``crc32(b"") == 0`` and ``crc32(b"123456789") == 0xCBF43926``.

    Args:
        data: Bytes to calculate CRC32 for.

    Returns:
        CRC32 value as unsigned 32-bit integer.
    """
    global _CRC_TABLE
    if _CRC_TABLE is None:
        _CRC_TABLE = _make_crc_table()

    table = _CRC_TABLE
    c = 0xFFFFFFFF
    for byte in data:
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF


def read_uint16(buffer: memoryview, offset: int) -> int:
    """Read a little-endian 16-bit unsigned integer at *offset*.

    Raises:
        ZipFormatError: If the value would run past the end of the buffer.
    """
    try:
        return struct.unpack_from("<H", buffer, offset)[0]
    except struct.error as e:
        raise ZipFormatError(
            f"Unexpected end of buffer reading 2 bytes at offset {offset} (buffer size: {len(buffer)})"
        ) from e


def read_uint32(buffer: memoryview, offset: int) -> int:
    """Read a little-endian 32-bit unsigned integer at *offset*.

    Raises:
        ZipFormatError: If the value would run past the end of the buffer.
    """
    try:
        return struct.unpack_from("<I", buffer, offset)[0]
    except struct.error as e:
        raise ZipFormatError(
            f"Unexpected end of buffer reading 4 bytes at offset {offset} (buffer size: {len(buffer)})"
        ) from e


def read_exact(buffer: memoryview, offset: int, size: int) -> bytes:
    """Copy exactly *size* bytes starting at *offset* out of the buffer.

    The returned bytes never alias the input buffer.

    Raises:
        ZipFormatError: If fewer than *size* bytes are available.
    """
    if offset < 0 or size < 0 or offset + size > len(buffer):
        raise ZipFormatError(
            f"Unexpected end of buffer: expected {size} bytes at offset {offset} (buffer size: {len(buffer)})"
        )
    return bytes(buffer[offset : offset + size])


def write_uint16(f: BinaryIO, value: int) -> None:
    """Write a little-endian 16-bit unsigned integer to file.

    Raises:
        ZipFormatError: If the write operation writes fewer bytes than expected.
    """
    write_bytes(f, struct.pack("<H", value & 0xFFFF))


def write_uint32(f: BinaryIO, value: int) -> None:
    """Write a little-endian 32-bit unsigned integer to file.

    Raises:
        ZipFormatError: If the write operation writes fewer bytes than expected.
    """
    write_bytes(f, struct.pack("<I", value & 0xFFFFFFFF))


def write_bytes(f: BinaryIO, data: bytes) -> None:
    """Write raw bytes to file, checking the written count."""
    written = f.write(data)
    if written != len(data):
        raise ZipFormatError(f"Write operation failed: expected to write {len(data)} bytes, wrote {written} bytes")


def group_by_folders(paths: Iterable[str]) -> tuple[set[str], list[str]]:
    """Collect every folder that appears as a strict prefix of the given paths.

    Args:
        paths: Archive paths using ``/`` as separator.

    Returns:
        Tuple of (folders without trailing slash, the paths as a list).
    """
    files = list(paths)
    folders: set[str] = set()
    for path in files:
        parts = path.split("/")
        for i in range(1, len(parts)):
            folders.add("/".join(parts[:i]))
    return folders, files


def safe_extract_path(output_dir: Path, name: str) -> Path:
    """Compute the on-disk target for an archive path inside *output_dir*.

    Args:
        output_dir: Extraction root.
        name: Archive path (``/`` separated).

    Returns:
        Resolved target path below *output_dir*.

    Raises:
        ZipFormatError: If the path is absolute or escapes *output_dir*.
    """
    if name.startswith("/") or os.path.isabs(name) or (len(name) > 1 and name[1] == ":"):
        raise ZipFormatError(f"Refusing to extract absolute path: {name}")

    root = Path(output_dir).resolve()
    target = (root / name).resolve()
    if target != root and root not in target.parents:
        raise ZipFormatError(f"Refusing to extract path outside of output directory: {name}")
    return target
