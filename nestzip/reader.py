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
ZIP archive reader implementation.

This module provides the ZipReader class and the ``unzip`` function for
reading ZIP archives held entirely in memory.
"""

import logging
from typing import Iterator, Optional, Union

from .constants import COMP_DEFLATE, COMP_STORED
from .decompress import Decompressor, inflate
from .errors import ZipFormatError
from .structures import (
    EndOfCentralDirectory,
    EntryResult,
    Extracted,
    Skipped,
    ZipEntry,
    find_eocd,
    local_data_offset,
    parse_central_directory,
)
from .utils import read_exact

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]


class ZipReader:
    """Reader for ZIP archives held in memory.

    Only the store and deflate methods are decoded. Entries using any other
    method are skipped rather than treated as errors.

    Example:
        z = ZipReader(data)
        print(z.list())
        text = z.read("file.txt")
    """

    def __init__(self, buffer: Buffer, decompressor: Optional[Decompressor] = None):
        """Initialize ZipReader and parse the central directory.

        Args:
            buffer: The complete archive.
            decompressor: Decompressor for deflated entries (defaults to zlib).

        Raises:
            ZipFormatError: If the buffer is not a valid ZIP archive.
        """
        if not isinstance(buffer, (bytes, bytearray, memoryview)):
            raise ZipFormatError(f"Expected a bytes-like buffer, got {type(buffer).__name__}")

        self._buffer = memoryview(buffer).cast("B")
        self._decompressor = decompressor
        self._eocd: EndOfCentralDirectory = find_eocd(self._buffer)
        self._entries: list[ZipEntry] = parse_central_directory(self._buffer, self._eocd)
        self._by_name: dict[str, ZipEntry] = {entry.name: entry for entry in self._entries}

        logger.debug(
            "Parsed central directory: %d entries at offset %d (%d bytes)",
            len(self._entries),
            self._eocd.cd_offset,
            self._eocd.cd_size,
        )

    @property
    def eocd(self) -> EndOfCentralDirectory:
        return self._eocd

    @property
    def entries(self) -> list[ZipEntry]:
        """Central directory entries in archive order, directories included."""
        return list(self._entries)

    def list(self) -> list[str]:
        """List all entry names in the archive (files and directories)."""
        return [entry.name for entry in self._entries]

    def get_info(self, name: str) -> Optional[ZipEntry]:
        """Get metadata for a specific entry, or None if there is no such entry."""
        return self._by_name.get(name)

    def _read_payload(self, entry: ZipEntry) -> bytes:
        """Copy an entry's raw (possibly compressed) payload out of the buffer."""
        data_offset = local_data_offset(self._buffer, entry.local_header_offset)
        return read_exact(self._buffer, data_offset, entry.compressed_size)

    def _decode(self, entry: ZipEntry) -> EntryResult:
        if entry.compression_method == COMP_STORED:
            return Extracted(entry.name, self._read_payload(entry))
        if entry.compression_method == COMP_DEFLATE:
            data = inflate(self._read_payload(entry), self._decompressor)
            return Extracted(entry.name, bytes(data))

        logger.debug(
            "Skipping %r: unsupported compression method %d", entry.name, entry.compression_method
        )
        return Skipped(entry.name, f"unsupported compression method {entry.compression_method}")

    def read(self, name: str) -> bytes:
        """Read and decode one entry.

        Raises:
            KeyError: If there is no such entry, or its compression method is unsupported.
            ZipFormatError: If the local file header is missing or truncated.
            ZipDecompressionError: If a deflated payload cannot be decompressed.
        """
        entry = self._by_name.get(name)
        if entry is None:
            raise KeyError(f"Entry not found: {name}")
        if entry.is_dir:
            return b""

        result = self._decode(entry)
        if isinstance(result, Skipped):
            raise KeyError(f"Entry {name!r} skipped: {result.reason}")
        return result.data

    def iter_results(self) -> Iterator[EntryResult]:
        """Yield an Extracted or Skipped outcome for every non-directory entry."""
        for entry in self._entries:
            if entry.is_dir:
                continue
            yield self._decode(entry)

    def extract(self) -> dict[str, bytes]:
        """Decode every supported non-directory entry into a path -> bytes mapping."""
        out: dict[str, bytes] = {}
        for result in self.iter_results():
            if isinstance(result, Extracted):
                out[result.name] = result.data
        return out


def unzip(buffer: Buffer, decompressor: Optional[Decompressor] = None) -> dict[str, bytes]:
    """Extract all supported file entries of an in-memory archive.

    Args:
        buffer: The complete archive.
        decompressor: Decompressor for deflated entries (defaults to zlib).

    Returns:
        Mapping of entry name to an independent copy of its content. Directory
        entries and entries with unsupported compression methods are absent.

    Raises:
        ZipFormatError: If the archive structure is invalid.
        ZipDecompressionError: If a deflated entry cannot be decompressed.
    """
    return ZipReader(buffer, decompressor).extract()
