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
ZIP format constants including signatures, compression methods, flags, and version numbers.

This module defines the constants used by the in-memory reader, the
recursive flattener and the store-only writer.
"""

# ZIP file signatures (magic numbers)
LOCAL_FILE_HEADER = 0x04034B50  # "PK\x03\x04"
CENTRAL_DIR_HEADER = 0x02014B50  # "PK\x01\x02"
END_OF_CENTRAL_DIR = 0x06054B50  # "PK\x05\x06"

# Same signatures as raw bytes, for searching
END_OF_CENTRAL_DIR_BYTES = b"PK\x05\x06"

# Compression methods
COMP_STORED = 0  # No compression
COMP_DEFLATE = 8  # Deflate compression (zlib)

# Supported method names (for diagnostics)
METHOD_TO_NAME = {
    COMP_STORED: "stored",
    COMP_DEFLATE: "deflate",
}

# Decompressor formats
FORMAT_DEFLATE_RAW = "deflate-raw"
FORMAT_DEFLATE = "deflate"  # zlib-wrapped

# General purpose bit flags
FLAG_UTF8 = 0x0800  # UTF-8 encoding for filename/comment

# ZIP version constants
VERSION_DEFAULT = 20  # Version needed to extract
VERSION_MADE_BY_DEFAULT = 20  # Made by: MS-DOS, APPNOTE 2.0

# External attributes
EXTERNAL_ATTR_DIRECTORY = 0x10  # MS-DOS directory bit
EXTERNAL_ATTR_FILE = 0

# Local file header size (fixed part)
LOCAL_FILE_HEADER_SIZE = 30

# Central directory header size (fixed part, excluding filename/extra/comment)
CENTRAL_DIR_HEADER_SIZE = 46

# End of central directory size (fixed part, excluding comment)
END_OF_CENTRAL_DIR_SIZE = 22

# Maximum EOCD comment length; bounds the backward EOCD scan
MAX_COMMENT_SIZE = 0xFFFF

# Extension that marks an entry as a nested archive
NESTED_ARCHIVE_SUFFIX = ".zip"
