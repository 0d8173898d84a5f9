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
Debugging utilities for nestzip.

This module provides tools for analyzing and debugging ZIP structures held
in memory.
"""

from typing import Optional

from .constants import METHOD_TO_NAME
from .reader import Buffer, ZipReader


def hex_dump(data: bytes, offset: int = 0, length: Optional[int] = None) -> str:
    """Create a hex dump of binary data.

    Args:
        data: Binary data to dump.
        offset: Starting offset for display.
        length: Maximum length to dump (None for all).

    Returns:
        Formatted hex dump string.
    """
    if length is not None:
        data = data[:length]

    lines = []
    for i in range(0, len(data), 16):
        chunk = data[i : i + 16]
        hex_part = " ".join(f"{b:02X}" for b in chunk)
        ascii_part = "".join(chr(b) if 32 <= b < 127 else "." for b in chunk)
        lines.append(f"{offset + i:08X}  {hex_part:<48}  {ascii_part}")

    return "\n".join(lines)


def describe_archive(buffer: Buffer) -> str:
    """Describe the layout of an in-memory archive.

    Lists the End of Central Directory record and one line per central
    directory entry (method, sizes, local header offset, name).

    Raises:
        ZipFormatError: If the buffer is not a valid ZIP archive.
    """
    reader = ZipReader(buffer)
    eocd = reader.eocd

    output = []
    output.append(f"Archive size: {len(buffer)} bytes")
    output.append("=" * 80)
    output.append(f"End of Central Directory: 0x{eocd.offset:08X}")
    output.append(f"  Entries: {eocd.cd_records_total}")
    output.append(f"  Central directory: offset 0x{eocd.cd_offset:08X}, {eocd.cd_size} bytes")
    if eocd.comment:
        output.append(f"  Comment: {eocd.comment.decode('utf-8', errors='replace')}")

    output.append("")
    output.append(f"{'Method':<10} {'Compressed':>12} {'Size':>12} {'Offset':>10}  Name")
    output.append("-" * 80)
    for entry in reader.entries:
        method = METHOD_TO_NAME.get(entry.compression_method, f"?{entry.compression_method}")
        output.append(
            f"{method:<10} {entry.compressed_size:>12} {entry.uncompressed_size:>12} "
            f"0x{entry.local_header_offset:08X}  {entry.name}"
        )

    return "\n".join(output)
