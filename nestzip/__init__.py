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
NESTZIP - in-memory ZIP reader, recursive flattener and store-only writer.

Reads a ZIP archive from a byte buffer, expands any ZIP archives nested
inside it into one flat path -> bytes mapping, and packs such a mapping back
into a single archive, using only Python standard library modules.
"""

from .errors import FormatError, ZipDecompressionError, ZipError, ZipFormatError, ZipNestingError
from .flatten import Flattener, FlattenResult, flatten_archive, unzip_recursively
from .reader import ZipReader, unzip
from .structures import Extracted, Skipped
from .writer import ZipWriter, zip_from_map

__all__ = [
    "ZipReader",
    "ZipWriter",
    "Flattener",
    "FlattenResult",
    "Extracted",
    "Skipped",
    "unzip",
    "unzip_recursively",
    "flatten_archive",
    "zip_from_map",
    "ZipError",
    "ZipFormatError",
    "FormatError",
    "ZipDecompressionError",
    "ZipNestingError",
]

__version__ = "0.1.0"
