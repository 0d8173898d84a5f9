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
Recursive flattening of nested ZIP archives.

Every entry whose name ends in ``.zip`` is opened in turn and its contents
are placed under a folder named after the nested archive, so that
``outer.zip`` holding ``logs.zip`` holding ``a.txt`` flattens to
``{"logs/a.txt": ...}``.

Nesting is not bounded unless ``max_depth`` is given: an archive that
contains a copy of itself recurses until Python raises ``RecursionError``.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .constants import NESTED_ARCHIVE_SUFFIX
from .decompress import Decompressor
from .errors import ZipNestingError
from .reader import Buffer, ZipReader
from .structures import Skipped

logger = logging.getLogger(__name__)


@dataclass
class FlattenResult:
    """Accumulator shared by every level of one flattening call."""

    files: dict[str, bytes] = field(default_factory=dict)
    skipped: list[Skipped] = field(default_factory=list)


def join_path(base_path: str, name: str) -> str:
    """Join an archive-relative name onto a flattened base path."""
    return f"{base_path}/{name}" if base_path else name


def nested_folder_name(name: str, suffix: str = "") -> str:
    """Folder that a nested archive expands into.

    The archive's parent directory is kept, and the ``.zip`` extension of its
    final segment is replaced by *suffix*: ``"sub/logs.zip"`` becomes
    ``"sub/logs"`` (or ``"sub/logs_extracted"`` with suffix ``"_extracted"``).
    A bare ``"dir/.zip"`` expands into ``"dir"``.
    """
    parent, _, filename = name.rpartition("/")
    stem = filename[: -len(NESTED_ARCHIVE_SUFFIX)]
    return join_path(parent, stem + suffix).rstrip("/")


def is_nested_archive(name: str) -> bool:
    return name.lower().endswith(NESTED_ARCHIVE_SUFFIX)


class Flattener:
    """Expands an archive and all archives nested inside it into one mapping.

    Args:
        zip_folder_name_suffix: Appended to the folder name a nested archive
            expands into (default: no suffix).
        decompressor: Decompressor for deflated entries (defaults to zlib).
        max_depth: If set, the deepest nesting level allowed below the root
            archive; going deeper raises ZipNestingError. None means unbounded.
    """

    def __init__(
        self,
        zip_folder_name_suffix: str = "",
        decompressor: Optional[Decompressor] = None,
        max_depth: Optional[int] = None,
    ):
        self.zip_folder_name_suffix = zip_folder_name_suffix
        self.decompressor = decompressor
        self.max_depth = max_depth

    def flatten(self, buffer: Buffer) -> FlattenResult:
        """Flatten *buffer* and everything nested in it.

        Raises:
            ZipFormatError: If the root or any nested archive is invalid.
            ZipDecompressionError: If any deflated entry cannot be decompressed.
            ZipNestingError: If ``max_depth`` is exceeded.
        """
        result = FlattenResult()
        self._process(buffer, "", 0, result)
        return result

    def _process(self, buffer: Buffer, base_path: str, depth: int, result: FlattenResult) -> None:
        if self.max_depth is not None and depth > self.max_depth:
            raise ZipNestingError(
                f"Nested archive {base_path!r} exceeds maximum depth {self.max_depth}"
            )

        reader = ZipReader(buffer, self.decompressor)
        for outcome in reader.iter_results():
            name = outcome.name.lstrip("/")
            if name.endswith("/"):
                continue

            if isinstance(outcome, Skipped):
                result.skipped.append(Skipped(join_path(base_path, name), outcome.reason))
                continue

            if is_nested_archive(name):
                folder = join_path(base_path, nested_folder_name(name, self.zip_folder_name_suffix))
                logger.debug("Expanding nested archive %r into %r", name, folder)
                self._process(outcome.data, folder, depth + 1, result)
            else:
                result.files[join_path(base_path, name)] = outcome.data


def flatten_archive(
    root: Buffer,
    zip_folder_name_suffix: str = "",
    decompressor: Optional[Decompressor] = None,
    max_depth: Optional[int] = None,
) -> FlattenResult:
    """Flatten an archive, returning both the files and the skipped entries."""
    flattener = Flattener(
        zip_folder_name_suffix=zip_folder_name_suffix,
        decompressor=decompressor,
        max_depth=max_depth,
    )
    return flattener.flatten(root)


def unzip_recursively(
    root: Buffer,
    zip_folder_name_suffix: str = "",
    decompressor: Optional[Decompressor] = None,
    max_depth: Optional[int] = None,
) -> dict[str, bytes]:
    """Extract an archive and every archive nested in it into one flat mapping.

    Args:
        root: The complete root archive.
        zip_folder_name_suffix: Appended to each nested archive's folder name.
        decompressor: Decompressor for deflated entries (defaults to zlib).
        max_depth: Optional nesting limit; None (the default) is unbounded.

    Returns:
        Mapping of flattened path to file content.
    """
    return flatten_archive(root, zip_folder_name_suffix, decompressor, max_depth).files
