"""
Upload engine: walks the source tree and uploads files one at a time.

Each file is routed by size to single-shot or multipart upload. A 412 from a
conditional put means identical content is already stored and is recorded as
a skip; any other error stops the run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import CHUNK_SIZE, PACING_DELAY_SECONDS, UploadConfig
from .errors import is_precondition_failed
from .file_utils import FileTask, discover_file_tasks
from .format_utils import BYTES_PER_MIB, format_bytes
from .multipart import MultipartUploader
from .single_put import SingleShotUploader


class RunState(Enum):
    """Engine run states"""

    IDLE = "idle"
    ENUMERATING = "enumerating"
    UPLOADING = "uploading"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


class FileOutcome(Enum):
    """Result of uploading one file"""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RunResult:
    """Summary of an upload run."""

    success: bool
    urls: dict[str, str] = field(default_factory=dict)
    uploaded: int = 0
    skipped: int = 0
    error: Optional[str] = None


def uses_multipart(size_bytes: int, multipart_size_mb: float) -> bool:
    """Files strictly larger than the threshold use multipart upload."""
    return size_bytes / BYTES_PER_MIB > multipart_size_mb


class UploadEngine:
    """Drives one upload run over a source directory."""

    def __init__(self, s3, config: UploadConfig, chunk_size: int = CHUNK_SIZE):
        self.s3 = s3
        self.config = config
        self.state = RunState.IDLE
        self.single_shot = SingleShotUploader(s3, config)
        self.multipart = MultipartUploader(s3, config, chunk_size=chunk_size)
        self.result = RunResult(success=False)

    def _upload_one(self, task: FileTask) -> FileOutcome:
        """Upload one file. Raises on anything but a failed precondition."""
        uploader = (
            self.multipart
            if uses_multipart(task.size, self.config.multipart_size_mb)
            else self.single_shot
        )
        logging.info("Uploading %s (%s) to %s", task.path, format_bytes(task.size), task.key)
        try:
            url = uploader.upload(task)
        except Exception as exc:
            if is_precondition_failed(exc):
                logging.info("Skipped %s: identical content already at %s", task.path, task.key)
                self.result.skipped += 1
                return FileOutcome.SKIPPED
            logging.error("Error while uploading %s to %s: %s", task.path, task.key, exc)
            raise
        self.result.uploaded += 1
        if self.config.output_file_url:
            self.result.urls[str(task.path)] = url
        return FileOutcome.SUCCEEDED

    def run(self) -> RunResult:
        """
        Upload every file under the source directory.

        Files are processed strictly in enumeration order with a short pacing
        delay before each one.

        Returns:
            RunResult: Counts and, when enabled, the file -> URL map

        Raises:
            Exception: The first fatal error; the remaining files are not uploaded
        """
        self.result = RunResult(success=False)
        try:
            self.state = RunState.ENUMERATING
            tasks = discover_file_tasks(
                self.config.source_dir,
                self.config.destination_dir,
                self.config.exclude_patterns,
            )
            logging.info("Found %d file(s) under %s", len(tasks), self.config.source_dir)

            self.state = RunState.UPLOADING
            for task in tasks:
                time.sleep(PACING_DELAY_SECONDS)
                self._upload_one(task)
        except Exception as exc:
            self.state = RunState.FAILED
            self.result.error = str(exc)
            raise

        self.state = RunState.REPORTING
        self.result.success = True
        logging.info(
            "Run complete: %d uploaded, %d skipped",
            self.result.uploaded,
            self.result.skipped,
        )
        self.state = RunState.DONE
        return self.result
