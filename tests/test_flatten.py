import io
import zipfile

import pytest

from nestzip import (
    Skipped,
    ZipFormatError,
    ZipNestingError,
    ZipWriter,
    flatten_archive,
    unzip,
    unzip_recursively,
    zip_from_map,
)
from nestzip.flatten import nested_folder_name


def test_nested_archive_expands_into_folder():
    inner = zip_from_map({"a.txt": b"hi"})
    outer = zip_from_map({"inner.zip": inner})
    assert unzip_recursively(outer) == {"inner/a.txt": b"hi"}


def test_folder_name_suffix():
    inner = zip_from_map({"a.txt": b"hi"})
    outer = zip_from_map({"inner.zip": inner})
    assert unzip_recursively(outer, zip_folder_name_suffix="_extracted") == {
        "inner_extracted/a.txt": b"hi"
    }


def test_archive_without_nesting_is_unchanged(make_zip):
    data = make_zip({"a.txt": b"a", "dir/b.txt": b"b"}, compression=zipfile.ZIP_DEFLATED)
    assert unzip_recursively(data) == unzip(data)


def test_nested_archive_keeps_its_parent_directory(make_zip):
    inner = make_zip({"a.txt": b"hi", "deep/b.txt": b"b"}, compression=zipfile.ZIP_DEFLATED)
    outer = make_zip(
        {"sub/logs.ZIP": inner, "top.txt": b"top"}, compression=zipfile.ZIP_DEFLATED
    )
    assert unzip_recursively(outer) == {
        "sub/logs/a.txt": b"hi",
        "sub/logs/deep/b.txt": b"b",
        "top.txt": b"top",
    }


def test_multiple_levels():
    level2 = zip_from_map({"x.txt": b"x"})
    level1 = zip_from_map({"b.zip": level2, "y.txt": b"y"})
    root = zip_from_map({"a.zip": level1, "z.txt": b"z"})
    assert unzip_recursively(root, zip_folder_name_suffix="_unzipped") == {
        "a_unzipped/b_unzipped/x.txt": b"x",
        "a_unzipped/y.txt": b"y",
        "z.txt": b"z",
    }


def test_leading_slashes_are_stripped():
    buffer = io.BytesIO()
    with ZipWriter(buffer) as z:
        z.add_bytes("//abs.txt", b"abs")
    inner = buffer.getvalue()
    outer = zip_from_map({"nested.zip": inner, "plain.txt": b"p"})

    assert unzip_recursively(inner) == {"abs.txt": b"abs"}
    assert unzip_recursively(outer) == {"nested/abs.txt": b"abs", "plain.txt": b"p"}


def test_later_paths_overwrite_earlier_ones():
    # "x.zip" sorts before "x/a.txt", so the plain file is stored last
    nested = zip_from_map({"a.txt": b"from nested"})
    outer = zip_from_map({"x.zip": nested, "x/a.txt": b"from outer"})
    assert unzip_recursively(outer) == {"x/a.txt": b"from outer"}


def test_invalid_nested_archive_fails_whole_call():
    outer = zip_from_map({"good.txt": b"ok", "bad.zip": b"this is not a zip"})
    with pytest.raises(ZipFormatError):
        unzip_recursively(outer)


def test_skipped_entries_are_reported_with_flattened_paths(set_first_method):
    inner = set_first_method(zip_from_map({"a.txt": b"a", "b.txt": b"b"}), 99)
    outer = zip_from_map({"inner.zip": inner})

    result = flatten_archive(outer)
    assert result.files == {"inner/b.txt": b"b"}
    assert result.skipped == [Skipped("inner/a.txt", "unsupported compression method 99")]


def _three_levels():
    level2 = zip_from_map({"x.txt": b"x"})
    level1 = zip_from_map({"b.zip": level2})
    return zip_from_map({"a.zip": level1})


def test_max_depth_allows_nesting_up_to_limit():
    assert unzip_recursively(_three_levels(), max_depth=2) == {"a/b/x.txt": b"x"}


def test_max_depth_exceeded():
    with pytest.raises(ZipNestingError):
        unzip_recursively(_three_levels(), max_depth=1)


def test_max_depth_zero_rejects_any_nesting():
    assert unzip_recursively(zip_from_map({"a.txt": b"a"}), max_depth=0) == {"a.txt": b"a"}
    with pytest.raises(ZipNestingError):
        unzip_recursively(_three_levels(), max_depth=0)


@pytest.mark.parametrize(
    "name, suffix, expected",
    [
        ("logs.zip", "", "logs"),
        ("logs.ZIP", "", "logs"),
        ("sub/dir/logs.zip", "", "sub/dir/logs"),
        ("logs.zip", "_extracted", "logs_extracted"),
        ("archive.tar.zip", "", "archive.tar"),
        ("dir/.zip", "", "dir"),
    ],
)
def test_nested_folder_name(name, suffix, expected):
    assert nested_folder_name(name, suffix) == expected


def test_bare_zip_extension_expands_into_parent_directory():
    outer = zip_from_map({"dir/.zip": zip_from_map({"a.txt": b"hi"})})
    assert unzip_recursively(outer) == {"dir/a.txt": b"hi"}


def test_unbounded_nesting_ends_in_recursion_error(low_recursion_limit, nested_chain):
    chain = nested_chain(low_recursion_limit)
    with pytest.raises(RecursionError):
        unzip_recursively(chain)


def test_max_depth_stops_deep_chain_before_recursion_limit(low_recursion_limit, nested_chain):
    chain = nested_chain(low_recursion_limit)
    with pytest.raises(ZipNestingError):
        unzip_recursively(chain, max_depth=10)
