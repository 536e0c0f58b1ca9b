"""Tests for r2_upload/file_utils.py: chunk reading, enumeration and keys."""

from pathlib import Path

import pytest

from r2_upload import file_utils
from r2_upload.file_utils import (
    build_destination_key,
    discover_file_tasks,
    get_file_list,
    guess_content_type,
    is_excluded,
    md5_hex,
    read_fixed_chunks,
)
from tests.r2_upload_test_utils import write_file

CHUNK = 16


class TestReadFixedChunks:
    """Tests for the fixed-size chunk reader."""

    @pytest.mark.parametrize(
        ("size", "expected_lengths"),
        [
            (0, []),
            (5, [5]),
            (CHUNK, [CHUNK]),
            (3 * CHUNK, [CHUNK, CHUNK, CHUNK]),
            (2 * CHUNK + 7, [CHUNK, CHUNK, 7]),
        ],
    )
    def test_chunk_lengths_and_round_trip(self, tmp_path, size, expected_lengths):
        """Chunks have the fixed size except the last, and concatenate back to the file."""
        data = bytes(i % 251 for i in range(size))
        path = tmp_path / "data.bin"
        path.write_bytes(data)

        chunks = list(read_fixed_chunks(path, CHUNK))

        assert [len(chunk) for chunk in chunks] == expected_lengths
        assert b"".join(chunks) == data

    def test_reader_is_lazy(self, tmp_path):
        """Nothing is read until the generator is advanced."""
        path = write_file(tmp_path / "data.bin", 3 * CHUNK)
        chunks = read_fixed_chunks(path, CHUNK)

        assert len(next(chunks)) == CHUNK
        assert len(next(chunks)) == CHUNK

    def test_each_call_reads_from_start(self, tmp_path):
        """A new call opens a fresh handle rather than resuming."""
        path = tmp_path / "data.bin"
        path.write_bytes(b"a" * CHUNK + b"b" * CHUNK)

        first = read_fixed_chunks(path, CHUNK)
        next(first)
        second = read_fixed_chunks(path, CHUNK)

        assert next(second) == b"a" * CHUNK

    def test_default_chunk_size_is_10_mib(self):
        """The default part size is 10 MiB."""
        assert file_utils.CHUNK_SIZE == 10 * 1024 * 1024

    def test_rejects_non_positive_chunk_size(self, tmp_path):
        """Chunk size must be positive."""
        path = write_file(tmp_path / "data.bin", 1)
        with pytest.raises(ValueError, match="chunk_size"):
            list(read_fixed_chunks(path, 0))

    def test_missing_file_raises_os_error(self, tmp_path):
        """Filesystem errors propagate from the first read."""
        with pytest.raises(FileNotFoundError):
            list(read_fixed_chunks(tmp_path / "missing.bin", CHUNK))


class TestGetFileList:
    """Tests for recursive file enumeration."""

    def test_lists_nested_files_in_name_order(self, tmp_path):
        """Directories are descended where they appear in name order."""
        for rel in ("b.txt", "a/z.txt", "a/b/c.txt", "c.txt"):
            write_file(tmp_path / rel, 1)

        files = get_file_list(tmp_path)

        assert [f.relative_to(tmp_path).as_posix() for f in files] == [
            "a/b/c.txt",
            "a/z.txt",
            "b.txt",
            "c.txt",
        ]

    def test_empty_directory(self, tmp_path):
        """An empty directory yields no files."""
        assert not get_file_list(tmp_path)

    def test_missing_directory_raises(self, tmp_path):
        """Enumeration errors are not swallowed."""
        with pytest.raises(FileNotFoundError):
            get_file_list(tmp_path / "missing")


class TestBuildDestinationKey:
    """Tests for destination key computation."""

    def test_joins_relative_path_to_destination(self, tmp_path):
        """The source-relative path goes under the destination prefix."""
        source = tmp_path / "dist"
        key = build_destination_key(source / "assets" / "app.js", source, "releases/v1")
        assert key == "releases/v1/assets/app.js"

    def test_trailing_slash_in_destination(self, tmp_path):
        """A trailing slash on the prefix does not double up."""
        source = tmp_path / "dist"
        assert build_destination_key(source / "a.txt", source, "site/") == "site/a.txt"

    def test_falls_back_to_source_directory(self):
        """Without a destination prefix the source directory is the prefix."""
        source = Path("dist")
        assert build_destination_key(source / "css" / "main.css", source, "") == "dist/css/main.css"

    def test_relative_source_with_dot_prefix(self):
        """A ./ prefix on the source directory is normalised away."""
        source = Path("./build/")
        assert build_destination_key(source / "index.html", "./build/", "") == "build/index.html"

    def test_absolute_source_has_no_leading_slash(self, tmp_path):
        """Keys never start with a slash."""
        source = tmp_path / "dist"
        key = build_destination_key(source / "a.txt", source, "")
        assert not key.startswith("/")
        assert key.endswith("dist/a.txt")

    def test_same_input_same_key(self, tmp_path):
        """Key computation is deterministic."""
        source = tmp_path / "dist"
        first = build_destination_key(source / "x" / "y.bin", source, "prefix")
        second = build_destination_key(source / "x" / "y.bin", source, "prefix")
        assert first == second


class TestDiscoverFileTasks:
    """Tests for FileTask discovery."""

    def test_excludes_gitkeep(self, tmp_path):
        """Keep-marker files are not uploaded."""
        write_file(tmp_path / "a.txt", 3)
        write_file(tmp_path / "empty" / ".gitkeep", 0)

        tasks = discover_file_tasks(tmp_path, "out", (".gitkeep",))

        assert [task.key for task in tasks] == ["out/a.txt"]
        assert tasks[0].size == 3

    def test_custom_patterns(self, tmp_path):
        """Glob patterns match on the file name."""
        write_file(tmp_path / "a.txt", 1)
        write_file(tmp_path / "b.log", 1)
        write_file(tmp_path / "sub" / "c.log", 1)

        tasks = discover_file_tasks(tmp_path, "out", ("*.log",))

        assert [task.path.name for task in tasks] == ["a.txt"]

    def test_is_excluded(self):
        """is_excluded matches names only."""
        assert is_excluded(Path("x/.gitkeep"), (".gitkeep",))
        assert not is_excluded(Path(".gitkeep/file.txt"), (".gitkeep",))


class TestContentHelpers:
    """Tests for content type and hashing helpers."""

    def test_known_extension(self):
        """Known extensions resolve to their MIME type."""
        assert guess_content_type("index.html") == "text/html"

    def test_unknown_extension_falls_back(self):
        """Unknown extensions use the generic binary type."""
        assert guess_content_type("blob.unknownext") == "application/octet-stream"

    def test_md5_hex(self):
        """md5_hex returns the hex digest."""
        assert md5_hex(b"") == "d41d8cd98f00b204e9800998ecf8427e"
