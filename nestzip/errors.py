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
Custom exception classes for nestzip.

This module defines specific exception types for different error conditions
that can occur when reading, flattening or writing ZIP archives.
"""


class ZipError(Exception):
    """Base exception class for all ZIP-related errors."""

    pass


class ZipFormatError(ZipError):
    """Raised when a ZIP buffer has an invalid format or structure.

    This exception is raised when:
    - The End of Central Directory record cannot be found
    - A central directory or local file header signature is wrong
    - A structure runs past the end of the buffer
    - An entry path would escape the extraction directory
    """

    pass


# Short name used throughout the documentation
FormatError = ZipFormatError


class ZipDecompressionError(ZipError):
    """Raised when decompression fails.

    Deflate payloads are tried as raw DEFLATE first and then as
    zlib-wrapped DEFLATE; this is raised only when both attempts fail.
    """

    pass


class ZipNestingError(ZipError):
    """Raised when nested archives go deeper than an explicit ``max_depth``."""

    pass
