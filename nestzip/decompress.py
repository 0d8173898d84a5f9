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
Decompression support for deflated entries.

The reader does not call zlib directly; it goes through a ``Decompressor``
so that another implementation can be injected.
"""

import logging
import zlib
from typing import Optional, Protocol

from .constants import FORMAT_DEFLATE, FORMAT_DEFLATE_RAW
from .errors import ZipDecompressionError

logger = logging.getLogger(__name__)


class Decompressor(Protocol):
    """Decompresses a complete payload in one of the supported formats."""

    def decompress(self, data: bytes, format: str) -> bytes:
        """Return the decompressed data.

        Args:
            data: Complete compressed payload.
            format: ``"deflate-raw"`` or ``"deflate"`` (zlib-wrapped).

        Raises:
            ZipDecompressionError: If the payload cannot be decompressed.
        """
        ...


class ZlibDecompressor:
    """Decompressor backed by the standard library zlib module."""

    _WBITS = {
        FORMAT_DEFLATE_RAW: -zlib.MAX_WBITS,
        FORMAT_DEFLATE: zlib.MAX_WBITS,
    }

    def decompress(self, data: bytes, format: str) -> bytes:
        if format not in self._WBITS:
            raise ZipDecompressionError(f"Unsupported decompression format: {format}")

        try:
            decompressor = zlib.decompressobj(self._WBITS[format])
            result = decompressor.decompress(data)
            result += decompressor.flush()
        except zlib.error as e:
            raise ZipDecompressionError(f"{format} decompression failed: {e}") from e

        if not decompressor.eof:
            raise ZipDecompressionError(f"{format} decompression failed: incomplete or truncated stream")
        if decompressor.unused_data:
            raise ZipDecompressionError(f"{format} decompression failed: extra data after compressed stream")
        return result


_default_decompressor: Optional[ZlibDecompressor] = None


def default_decompressor() -> ZlibDecompressor:
    """Return the shared zlib-backed decompressor."""
    global _default_decompressor
    if _default_decompressor is None:
        _default_decompressor = ZlibDecompressor()
    return _default_decompressor


def inflate(data: bytes, decompressor: Optional[Decompressor] = None) -> bytes:
    """Inflate a deflate payload, trying raw DEFLATE and then zlib-wrapped DEFLATE.

    Args:
        data: Compressed payload of a method 8 entry.
        decompressor: Decompressor to use (defaults to zlib).

    Returns:
        Decompressed data.

    Raises:
        ZipDecompressionError: If both attempts fail.
    """
    if decompressor is None:
        decompressor = default_decompressor()

    try:
        return decompressor.decompress(data, FORMAT_DEFLATE_RAW)
    except ZipDecompressionError as e:
        logger.debug("Raw deflate failed (%s), retrying as zlib-wrapped deflate", e)

    return decompressor.decompress(data, FORMAT_DEFLATE)
