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

from __future__ import annotations

"""
Command-line interface for NESTZIP (``nestzip``).

This module implements a small CLI on top of the nestzip library.
It only depends on the Python standard library.

Supported commands (via ``python -m nestzip``):

- ``list``    : List entries in an archive, optionally flattened
- ``info``    : Show the archive layout (EOCD and central directory)
- ``extract`` : Flatten an archive and its nested archives into a directory
- ``flatten`` : Flatten an archive and its nested archives into a new archive

Example usages:

    # List entries, expanding nested archives
    python -m nestzip list -r archive.zip

    # Extract everything into ./output
    python -m nestzip extract archive.zip -d output

    # Re-pack archive.zip and everything nested in it as flat.zip
    python -m nestzip flatten archive.zip flat.zip --suffix _extracted
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .debug import describe_archive
from .errors import ZipError
from .flatten import FlattenResult, flatten_archive
from .reader import ZipReader
from .utils import group_by_folders, safe_extract_path
from .writer import zip_from_map

logger = logging.getLogger("nestzip")


def _print_error(message: str, exit_code: int = 1, suggestion: Optional[str] = None) -> None:
    """Print an error message to stderr and exit with the given code.

    Args:
        message: Error message to display.
        exit_code: Exit code to use.
        suggestion: Optional suggestion to help the user resolve the error.
    """
    sys.stderr.write(f"nestzip: {message}\n")
    if suggestion:
        sys.stderr.write(f"nestzip: Suggestion: {suggestion}\n")
    sys.exit(exit_code)


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _flatten(archive: Path, suffix: str, max_depth: Optional[int]) -> FlattenResult:
    result = flatten_archive(archive.read_bytes(), zip_folder_name_suffix=suffix, max_depth=max_depth)
    for skipped in result.skipped:
        logger.warning("Skipped %s: %s", skipped.name, skipped.reason)
    return result


def _cmd_list(
    archive: Path,
    recursive: bool = False,
    suffix: str = "",
    tree: bool = False,
    max_depth: Optional[int] = None,
) -> None:
    """List entries in an archive, one per line.

    With *recursive*, nested archives are expanded and the flattened paths
    are listed instead. With *tree*, synthesized folders are listed too.
    """
    if recursive:
        names = list(_flatten(archive, suffix, max_depth).files)
    else:
        names = ZipReader(archive.read_bytes()).list()

    if tree:
        folders, files = group_by_folders(names)
        names = [folder + "/" for folder in folders] + files

    for name in sorted(set(names)):
        print(name)


def _cmd_info(archive: Path) -> None:
    """Print the archive layout."""
    print(describe_archive(archive.read_bytes()))


def _cmd_extract(
    archive: Path,
    output_dir: Path,
    suffix: str = "",
    max_depth: Optional[int] = None,
    quiet: bool = False,
) -> None:
    """
    Flatten *archive* and write every resulting file into *output_dir*.

    Nested archives are expanded into folders named after them; the
    relative paths of all other files are preserved. Every target path is
    checked before the first file is written.
    """
    result = _flatten(archive, suffix, max_depth)
    targets = [
        (name, safe_extract_path(output_dir, name), data)
        for name, data in sorted(result.files.items())
    ]
    output_dir.mkdir(parents=True, exist_ok=True)

    for name, target_path, data in targets:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_bytes(data)
        if not quiet:
            print(name)

    logger.info("Extracted %d files into %s", len(result.files), output_dir)


def _cmd_flatten(
    archive: Path,
    output: Path,
    suffix: str = "",
    max_depth: Optional[int] = None,
) -> None:
    """Flatten *archive* and pack the result into the single archive *output*."""
    result = _flatten(archive, suffix, max_depth)
    output.write_bytes(zip_from_map(result.files))
    logger.info("Wrote %d files to %s", len(result.files), output)


def _add_flatten_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--suffix",
        default="",
        help="Suffix appended to the folder a nested archive expands into (default: none)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Fail if archives are nested deeper than this (default: unlimited)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nestzip",
        description="Read, flatten and re-pack nested ZIP archives.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for debug)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_list = subparsers.add_parser("list", help="List entries in an archive")
    p_list.add_argument("archive", type=Path, help="Path to the ZIP archive")
    p_list.add_argument(
        "-r", "--recursive", action="store_true", help="Expand nested archives"
    )
    p_list.add_argument("--tree", action="store_true", help="Also list intermediate folders")
    _add_flatten_options(p_list)

    p_info = subparsers.add_parser("info", help="Show the archive layout")
    p_info.add_argument("archive", type=Path, help="Path to the ZIP archive")

    p_extract = subparsers.add_parser(
        "extract", help="Extract an archive and its nested archives into a directory"
    )
    p_extract.add_argument("archive", type=Path, help="Path to the ZIP archive")
    p_extract.add_argument(
        "-d", "--directory", type=Path, default=Path("."), help="Output directory (default: .)"
    )
    p_extract.add_argument("-q", "--quiet", action="store_true", help="Do not print extracted paths")
    _add_flatten_options(p_extract)

    p_flatten = subparsers.add_parser(
        "flatten", help="Re-pack an archive and its nested archives as one archive"
    )
    p_flatten.add_argument("archive", type=Path, help="Path to the ZIP archive")
    p_flatten.add_argument("output", type=Path, help="Path of the archive to create")
    _add_flatten_options(p_flatten)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the NESTZIP CLI.

    This function is invoked when running:

        python -m nestzip ...

    or, via the console script:

        nestzip ...
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        if args.command == "list":
            _cmd_list(
                args.archive,
                recursive=args.recursive,
                suffix=args.suffix,
                tree=args.tree,
                max_depth=args.max_depth,
            )
        elif args.command == "info":
            _cmd_info(args.archive)
        elif args.command == "extract":
            _cmd_extract(
                args.archive,
                args.directory,
                suffix=args.suffix,
                max_depth=args.max_depth,
                quiet=args.quiet,
            )
        elif args.command == "flatten":
            _cmd_flatten(args.archive, args.output, suffix=args.suffix, max_depth=args.max_depth)
        else:
            parser.error(f"Unknown command: {args.command!r}")
    except ZipError as e:
        _print_error(str(e), exit_code=1)
    except RecursionError:
        _print_error(
            "Archives are nested too deeply (possibly an archive that contains itself)",
            exit_code=1,
            suggestion="Use --max-depth to limit nesting.",
        )
    except FileNotFoundError as e:
        _print_error(
            f"File not found: {e.filename}",
            exit_code=2,
            suggestion="Check that the file exists and the path is correct.",
        )
    except PermissionError as e:
        _print_error(f"Permission denied: {e.filename}", exit_code=2)
    except OSError as e:
        _print_error(f"Cannot write {e.filename}: {e.strerror}", exit_code=1)
    except KeyboardInterrupt:
        _print_error("Interrupted by user", exit_code=130)


if __name__ == "__main__":
    main()
