"""File discovery, destination keys and chunked reading for uploads."""

from __future__ import annotations

import fnmatch
import hashlib
import mimetypes
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .config import CHUNK_SIZE

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileTask:
    """One discovered file and where it goes in the bucket."""

    path: Path
    key: str
    size: int


def get_file_list(directory: Path | str) -> list[Path]:
    """
    Recursively list every file under a directory.

    Entries are visited in name order and directories are descended into where
    they appear, so the result is deterministic across runs.

    Raises:
        OSError: If a directory cannot be read
    """
    files: list[Path] = []
    with os.scandir(directory) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        if entry.is_dir(follow_symlinks=True):
            files.extend(get_file_list(entry.path))
        else:
            files.append(Path(entry.path))
    return files


def is_excluded(path: Path, patterns: Iterable[str]) -> bool:
    """Return True when the file name matches one of the exclusion patterns."""
    return any(fnmatch.fnmatch(path.name, pattern) for pattern in patterns)


def build_destination_key(file_path: Path, source_dir: Path | str, destination_dir: str) -> str:
    """
    Build the object key for a file.

    The key is the file's path relative to the source directory, joined onto
    the destination prefix. With no destination prefix the source directory as
    given becomes the prefix.

    Args:
        file_path: Path to the file being uploaded
        source_dir: Source directory (base for relative path calculation)
        destination_dir: Destination prefix, may be empty

    Returns:
        Object key using forward slashes and no leading slash
    """
    source = Path(source_dir)
    rel_posix = file_path.relative_to(source).as_posix()
    prefix = destination_dir if destination_dir else source.as_posix()
    key = posixpath.normpath(posixpath.join(prefix, rel_posix))
    return key.lstrip("/")


def discover_file_tasks(
    source_dir: Path | str,
    destination_dir: str,
    exclude_patterns: Iterable[str],
) -> list[FileTask]:
    """Enumerate the source tree into FileTasks, skipping excluded names."""
    patterns = tuple(exclude_patterns)
    tasks = []
    for file_path in get_file_list(source_dir):
        if is_excluded(file_path, patterns):
            continue
        tasks.append(
            FileTask(
                path=file_path,
                key=build_destination_key(file_path, source_dir, destination_dir),
                size=file_path.stat().st_size,
            )
        )
    return tasks


def guess_content_type(path: Path | str) -> str:
    """Resolve the content type from the file extension."""
    content_type, _ = mimetypes.guess_type(str(path))
    return content_type or DEFAULT_CONTENT_TYPE


def md5_hex(data: bytes) -> str:
    """Return the hex MD5 digest used as the object's content hash."""
    return hashlib.md5(data).hexdigest()  # noqa: S324 - matches the S3 ETag, not a security hash


def read_fixed_chunks(path: Path | str, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Read file in fixed-size chunks.

    Every chunk has exactly ``chunk_size`` bytes except the last, which holds
    the remainder. No trailing empty chunk is produced, so an empty file yields
    nothing. Each call opens its own file handle.

    Args:
        path: Path to the file to read
        chunk_size: Size of each chunk in bytes (default: 10 MiB)
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            yield chunk
