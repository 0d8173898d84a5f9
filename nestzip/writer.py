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
ZIP archive writer implementation.

This module provides the ZipWriter class for creating store-only ZIP
archives, and ``zip_from_map`` which packs a path -> bytes mapping into a
self-contained archive with a directory entry for every intermediate folder.
"""

import io
import logging
from typing import BinaryIO, Mapping

from .constants import (
    CENTRAL_DIR_HEADER,
    CENTRAL_DIR_HEADER_SIZE,
    COMP_STORED,
    END_OF_CENTRAL_DIR,
    EXTERNAL_ATTR_DIRECTORY,
    EXTERNAL_ATTR_FILE,
    FLAG_UTF8,
    LOCAL_FILE_HEADER,
    LOCAL_FILE_HEADER_SIZE,
    VERSION_DEFAULT,
    VERSION_MADE_BY_DEFAULT,
)
from .errors import ZipFormatError
from .structures import CentralRecord
from .utils import crc32, write_bytes, write_uint16, write_uint32

logger = logging.getLogger(__name__)


class ZipWriter:
    """Writer for store-only ZIP archives.

    Names are written as given (UTF-8, flagged with bit 11); no validation is
    performed. Timestamps are zero and no permissions are recorded.

    Example:
        with ZipWriter("archive.zip") as z:
            z.add_directory("docs/")
            z.add_bytes("docs/hello.txt", b"Hello, World!")
    """

    def __init__(self, file: str | BinaryIO):
        """Initialize ZipWriter with a file path or file-like object.

        Args:
            file: Path to ZIP file (str or pathlib.Path) or binary file-like object opened for writing.

        Raises:
            ZipFormatError: If the file-like object cannot be written to.
        """
        # Handle Path objects
        if hasattr(file, '__fspath__'):
            file = str(file)

        if isinstance(file, str):
            self._file = open(file, "wb")
            self._should_close = True
        else:
            if not hasattr(file, 'write'):
                raise ZipFormatError("File-like object must have a write() method")
            self._file = file
            self._should_close = False

        self._central: list[CentralRecord] = []
        self._current_offset: int = 0
        self._closed: bool = False

    def _write_local_entry(self, name: str, data: bytes) -> None:
        """Write a local file header, the name and the (stored) data."""
        if self._closed:
            raise ZipFormatError("Archive is closed")

        name_bytes = name.encode("utf-8")
        is_dir = name.endswith("/")
        entry_crc32 = 0 if is_dir else crc32(data)
        size = 0 if is_dir else len(data)
        local_header_offset = self._current_offset

        # Local file header signature
        write_uint32(self._file, LOCAL_FILE_HEADER)

        # Version needed to extract
        write_uint16(self._file, VERSION_DEFAULT)

        # General purpose bit flags (UTF-8 names)
        write_uint16(self._file, FLAG_UTF8)

        # Compression method
        write_uint16(self._file, COMP_STORED)

        # Modification time and date (not recorded)
        write_uint16(self._file, 0)
        write_uint16(self._file, 0)

        # CRC32
        write_uint32(self._file, entry_crc32)

        # Compressed and uncompressed sizes (equal for stored data)
        write_uint32(self._file, size)
        write_uint32(self._file, size)

        # Filename length and extra field length
        write_uint16(self._file, len(name_bytes))
        write_uint16(self._file, 0)

        write_bytes(self._file, name_bytes)
        if not is_dir:
            write_bytes(self._file, data)

        self._current_offset += LOCAL_FILE_HEADER_SIZE + len(name_bytes) + size

        self._central.append(
            CentralRecord(
                name_bytes=name_bytes,
                crc32=entry_crc32,
                compressed_size=size,
                uncompressed_size=size,
                local_header_offset=local_header_offset,
                is_dir=is_dir,
            )
        )

    def add_directory(self, name: str) -> None:
        """Add a directory entry; a trailing slash is appended if missing."""
        if not name.endswith("/"):
            name += "/"
        self._write_local_entry(name, b"")

    def add_bytes(self, name: str, data: bytes) -> None:
        """Add a stored file entry.

        Args:
            name: Entry name (path within ZIP archive).
            data: Data to add as bytes.

        Raises:
            ZipFormatError: If the archive is closed.
        """
        self._write_local_entry(name, bytes(data))

    def _write_central_directory(self) -> tuple[int, int]:
        """Write the central directory containing all entry headers.

        Returns:
            Tuple of (cd_offset, cd_size).
        """
        cd_start_offset = self._current_offset

        for record in self._central:
            # Central directory header signature
            write_uint32(self._file, CENTRAL_DIR_HEADER)

            # Version made by, version needed to extract
            write_uint16(self._file, VERSION_MADE_BY_DEFAULT)
            write_uint16(self._file, VERSION_DEFAULT)

            # General purpose bit flags
            write_uint16(self._file, FLAG_UTF8)

            # Compression method
            write_uint16(self._file, COMP_STORED)

            # Modification time and date
            write_uint16(self._file, 0)
            write_uint16(self._file, 0)

            # CRC32
            write_uint32(self._file, record.crc32)

            # Compressed and uncompressed sizes
            write_uint32(self._file, record.compressed_size)
            write_uint32(self._file, record.uncompressed_size)

            # Filename length, extra field length, comment length
            write_uint16(self._file, len(record.name_bytes))
            write_uint16(self._file, 0)
            write_uint16(self._file, 0)

            # Disk number start, internal file attributes
            write_uint16(self._file, 0)
            write_uint16(self._file, 0)

            # External file attributes (MS-DOS directory bit)
            write_uint32(self._file, EXTERNAL_ATTR_DIRECTORY if record.is_dir else EXTERNAL_ATTR_FILE)

            # Local header offset
            write_uint32(self._file, record.local_header_offset)

            write_bytes(self._file, record.name_bytes)

            self._current_offset += CENTRAL_DIR_HEADER_SIZE + len(record.name_bytes)

        cd_size = self._current_offset - cd_start_offset
        return cd_start_offset, cd_size

    def _write_eocd(self, cd_offset: int, cd_size: int) -> None:
        """Write the End of Central Directory record.

        Args:
            cd_offset: Offset of central directory from start of file.
            cd_size: Size of central directory in bytes.
        """
        num_entries = len(self._central)

        write_uint32(self._file, END_OF_CENTRAL_DIR)
        write_uint16(self._file, 0)  # Number of this disk
        write_uint16(self._file, 0)  # Disk with start of central directory
        write_uint16(self._file, num_entries)  # Entries on this disk
        write_uint16(self._file, num_entries)  # Total entries
        write_uint32(self._file, cd_size)  # CD size
        write_uint32(self._file, cd_offset)  # CD offset
        write_uint16(self._file, 0)  # Comment length

    def close(self) -> None:
        """Write central directory and EOCD, then close the archive."""
        if self._closed:
            return

        try:
            cd_offset, cd_size = self._write_central_directory()
            self._write_eocd(cd_offset, cd_size)
            logger.debug(
                "Wrote %d entries, central directory at offset %d (%d bytes)",
                len(self._central),
                cd_offset,
                cd_size,
            )
        finally:
            if self._should_close and self._file:
                self._file.close()
                self._file = None
            self._closed = True

    def __enter__(self) -> "ZipWriter":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def synthesize_directories(paths: list[str]) -> list[str]:
    """Return every strict-prefix directory of *paths*, with trailing slash, sorted."""
    directories = set()
    for path in paths:
        parts = path.split("/")
        for i in range(1, len(parts)):
            directories.add("/".join(parts[:i]) + "/")
    return sorted(directories)


def zip_from_map(files: Mapping[str, bytes]) -> bytes:
    """Pack a path -> bytes mapping into a store-only ZIP archive.

    Directory entries are synthesized for every intermediate folder and
    written first, in sorted order, followed by the files sorted by path, so
    the same mapping always produces the same bytes.

    Args:
        files: Mapping of ``/``-separated path to content.

    Returns:
        The complete archive.
    """
    buffer = io.BytesIO()
    with ZipWriter(buffer) as z:
        for directory in synthesize_directories(list(files)):
            z.add_directory(directory)
        for name in sorted(files):
            z.add_bytes(name, files[name])
    return buffer.getvalue()
