import io
import struct
import sys
import zipfile

import pytest

from nestzip import zip_from_map


def _build_single_entry_zip(name, payload, method, uncompressed_size=None):
    """Hand-assemble a one-entry archive with an arbitrary method and payload."""
    name_bytes = name.encode("utf-8")
    if uncompressed_size is None:
        uncompressed_size = len(payload)

    local = struct.pack(
        "<IHHHHHIIIHH",
        0x04034B50, 20, 0, method, 0, 0, 0, len(payload), uncompressed_size, len(name_bytes), 0,
    )
    central = struct.pack(
        "<IHHHHHHIIIHHHHHII",
        0x02014B50, 20, 20, 0, method, 0, 0, 0, len(payload), uncompressed_size,
        len(name_bytes), 0, 0, 0, 0, 0, 0,
    )
    local += name_bytes + payload
    central += name_bytes
    eocd = struct.pack("<IHHHHIIH", 0x06054B50, 0, 0, 1, 1, len(central), len(local), 0)
    return local + central + eocd


@pytest.fixture
def make_zip():
    """Build an archive with the standard library zipfile module."""

    def _make_zip(files, compression=zipfile.ZIP_STORED, comment=b""):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=compression) as zf:
            for name, data in files.items():
                zf.writestr(name, data)
            zf.comment = comment
        return buffer.getvalue()

    return _make_zip


@pytest.fixture
def single_entry_zip():
    return _build_single_entry_zip


@pytest.fixture
def set_first_method():
    """Rewrite the compression method of the first central directory entry."""

    def _set_first_method(data, method):
        data = bytearray(data)
        cd_offset = struct.unpack_from("<I", data, len(data) - 22 + 16)[0]
        struct.pack_into("<H", data, cd_offset + 10, method)
        return bytes(data)

    return _set_first_method


@pytest.fixture
def low_recursion_limit():
    """Lower the interpreter recursion limit so runaway nesting fails fast."""
    old_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(200)
    try:
        yield 200
    finally:
        sys.setrecursionlimit(old_limit)


@pytest.fixture
def nested_chain():
    """Build ``n.zip`` inside ``n.zip`` ... *levels* deep around one file."""

    def _nested_chain(levels):
        data = zip_from_map({"a.txt": b"x"})
        for _ in range(levels):
            data = zip_from_map({"n.zip": data})
        return data

    return _nested_chain
