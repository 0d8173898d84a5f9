import pytest

from nestzip import unzip, zip_from_map
from nestzip.__main__ import main
from nestzip.debug import describe_archive, hex_dump


@pytest.fixture
def nested_archive(tmp_path):
    inner = zip_from_map({"a.txt": b"hi", "deep/b.txt": b"b"})
    path = tmp_path / "outer.zip"
    path.write_bytes(zip_from_map({"logs.zip": inner, "top.txt": b"top"}))
    return path


def test_list_direct_entries(nested_archive, capsys):
    main(["list", str(nested_archive)])
    assert capsys.readouterr().out.splitlines() == ["logs.zip", "top.txt"]


def test_list_recursive(nested_archive, capsys):
    main(["list", "-r", "--suffix", "_x", str(nested_archive)])
    assert capsys.readouterr().out.splitlines() == ["logs_x/a.txt", "logs_x/deep/b.txt", "top.txt"]


def test_list_recursive_tree(nested_archive, capsys):
    main(["list", "-r", "--tree", str(nested_archive)])
    assert capsys.readouterr().out.splitlines() == [
        "logs/",
        "logs/a.txt",
        "logs/deep/",
        "logs/deep/b.txt",
        "top.txt",
    ]


def test_info(nested_archive, capsys):
    main(["info", str(nested_archive)])
    out = capsys.readouterr().out
    assert "End of Central Directory" in out
    assert "logs.zip" in out


def test_extract(nested_archive, tmp_path):
    output_dir = tmp_path / "out"
    main(["extract", str(nested_archive), "-d", str(output_dir), "-q"])

    assert (output_dir / "logs" / "a.txt").read_bytes() == b"hi"
    assert (output_dir / "logs" / "deep" / "b.txt").read_bytes() == b"b"
    assert (output_dir / "top.txt").read_bytes() == b"top"


def test_flatten(nested_archive, tmp_path):
    output = tmp_path / "flat.zip"
    main(["flatten", str(nested_archive), str(output)])

    assert unzip(output.read_bytes()) == {
        "logs/a.txt": b"hi",
        "logs/deep/b.txt": b"b",
        "top.txt": b"top",
    }


def test_max_depth_error(nested_archive, tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["flatten", "--max-depth", "0", str(nested_archive), str(tmp_path / "flat.zip")])
    assert excinfo.value.code == 1
    assert "maximum depth" in capsys.readouterr().err


def test_invalid_archive(tmp_path, capsys):
    path = tmp_path / "bad.zip"
    path.write_bytes(b"definitely not a zip archive")
    with pytest.raises(SystemExit) as excinfo:
        main(["list", str(path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("nestzip: EOCD not found")


def test_missing_archive(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["info", str(tmp_path / "missing.zip")])
    assert excinfo.value.code == 2
    assert "File not found" in capsys.readouterr().err


def test_extract_refuses_traversal(tmp_path, capsys):
    path = tmp_path / "evil.zip"
    path.write_bytes(zip_from_map({"../escape.txt": b"x"}))
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(path), "-d", str(tmp_path / "out")])
    assert excinfo.value.code == 1
    assert not (tmp_path / "escape.txt").exists()


def test_describe_archive_lists_methods():
    text = describe_archive(zip_from_map({"a/b.txt": b"b"}))
    lines = text.splitlines()
    assert any(line.startswith("stored") and line.endswith("a/") for line in lines)
    assert any(line.startswith("stored") and line.endswith("a/b.txt") for line in lines)


def test_hex_dump():
    assert hex_dump(b"PK\x05\x06", offset=16) == "00000010  50 4B 05 06" + " " * 37 + "  PK.."


def test_list_recursive_accepts_max_depth(nested_archive, capsys):
    main(["list", "-r", "--max-depth", "1", str(nested_archive)])
    assert capsys.readouterr().out.splitlines() == ["logs/a.txt", "logs/deep/b.txt", "top.txt"]


def test_list_recursive_max_depth_error(nested_archive, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["list", "-r", "--max-depth", "0", str(nested_archive)])
    assert excinfo.value.code == 1
    assert "maximum depth" in capsys.readouterr().err


def test_runaway_nesting_suggests_max_depth(low_recursion_limit, nested_chain, tmp_path, capsys):
    path = tmp_path / "chain.zip"
    path.write_bytes(nested_chain(low_recursion_limit))
    with pytest.raises(SystemExit) as excinfo:
        main(["list", "-r", str(path)])
    assert excinfo.value.code == 1
    assert "--max-depth" in capsys.readouterr().err


def test_extract_file_and_folder_collision(tmp_path, capsys):
    path = tmp_path / "clash.zip"
    path.write_bytes(zip_from_map({"x": b"file", "x.zip": zip_from_map({"a.txt": b"a"})}))
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(path), "-d", str(tmp_path / "out"), "-q"])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("nestzip: Cannot write")


def test_extract_checks_every_path_before_writing(tmp_path):
    path = tmp_path / "evil.zip"
    path.write_bytes(zip_from_map({"-first.txt": b"a", "../escape.txt": b"x"}))
    output_dir = tmp_path / "out"
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(path), "-d", str(output_dir), "-q"])
    assert excinfo.value.code == 1
    assert not (output_dir / "-first.txt").exists()
    assert not (tmp_path / "escape.txt").exists()
