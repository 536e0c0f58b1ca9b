"""
Multipart upload: session lifecycle, per-part retry and part scheduling.

A MultipartUploader owns one session per file. Parts are read sequentially
from the file and uploaded either inline (sequential mode) or on a thread
pool (concurrent mode). The first part to exhaust its retries trips the
session's InterruptFlag, aborts the session and fails the file; every other
part sees the flag before its next attempt, or after its own retries run
out, and gives up without raising.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .client_factory import generate_signed_url
from .config import CHUNK_SIZE, RETRY_DELAY_SECONDS, UploadConfig
from .errors import PartUploadError
from .file_utils import FileTask, guess_content_type, read_fixed_chunks
from .format_utils import format_bytes


class InterruptFlag:
    """Write-once flag shared by the part tasks of one session.

    Reads go straight to a threading.Event. ``trip`` is test-and-set: only the
    first caller gets True, so exactly one task performs the abort.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()

    def is_set(self) -> bool:
        return self._event.is_set()

    def trip(self) -> bool:
        """Set the flag. Returns True only for the caller that set it first."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True


@dataclass(frozen=True)
class PartRecord:
    """A completed part as reported back by the store."""

    part_number: int
    etag: str

    def as_dict(self) -> dict:
        return {"PartNumber": self.part_number, "ETag": self.etag}


class MultipartSession:
    """Server-side multipart session plus the parts completed so far."""

    def __init__(self, bucket: str, key: str, upload_id: str):
        self.bucket = bucket
        self.key = key
        self.upload_id = upload_id
        self._parts: list[PartRecord] = []

    def record_part(self, record: PartRecord) -> None:
        # list.append is atomic; ordering is restored in completed_parts()
        self._parts.append(record)

    def completed_parts(self) -> list[PartRecord]:
        """Completed parts ordered by part number."""
        return sorted(self._parts, key=lambda record: record.part_number)


class UploadProgress:
    """Thread-safe running total of bytes uploaded for one file."""

    def __init__(self, total_bytes: int):
        self.total_bytes = total_bytes
        self.uploaded_bytes = 0
        self._lock = threading.Lock()

    def add(self, num_bytes: int) -> int:
        with self._lock:
            self.uploaded_bytes += num_bytes
            return self.uploaded_bytes


def abort_session(s3, session: MultipartSession) -> None:
    """
    Abort a multipart session, best effort.

    A failing abort is logged and swallowed so that it never replaces the
    error that caused the abort.
    """
    try:
        s3.abort_multipart_upload(
            Bucket=session.bucket,
            Key=session.key,
            UploadId=session.upload_id,
        )
        logging.info("Aborted multipart upload %s for %s", session.upload_id, session.key)
    except (BotoCoreError, ClientError) as exc:
        logging.warning(
            "Failed to abort multipart upload %s for %s: %s",
            session.upload_id,
            session.key,
            exc,
        )


class PartUploader:  # pylint: disable=too-few-public-methods
    """Uploads single parts of one session with bounded retries."""

    def __init__(  # pylint: disable=too-many-arguments
        self,
        s3,
        session: MultipartSession,
        source_path: Path,
        max_tries: int,
        interrupt: InterruptFlag,
        progress: UploadProgress,
    ):
        self.s3 = s3
        self.session = session
        self.source_path = source_path
        self.max_tries = max_tries
        self.interrupt = interrupt
        self.progress = progress

    def upload(self, part_number: int, body: bytes) -> Optional[PartRecord]:
        """
        Upload one part, retrying transient failures.

        Args:
            part_number: 1-based part number
            body: Part payload

        Returns:
            PartRecord on success, None if another part interrupted the session

        Raises:
            PartUploadError: If all attempts fail
        """
        retries = 0
        last_error: Exception | None = None
        while retries < self.max_tries:
            if self.interrupt.is_set():
                logging.info(
                    "Abandoning part %d of %s due to previous error",
                    part_number,
                    self.source_path,
                )
                return None
            try:
                response = self.s3.upload_part(
                    Bucket=self.session.bucket,
                    Key=self.session.key,
                    PartNumber=part_number,
                    UploadId=self.session.upload_id,
                    Body=body,
                )
            except (BotoCoreError, ClientError) as exc:
                retries += 1
                last_error = exc
                logging.error(
                    "Part %d of %s failed: %s, retrying: %d/%d",
                    part_number,
                    self.source_path,
                    exc,
                    retries,
                    self.max_tries,
                )
                if retries < self.max_tries:
                    time.sleep(RETRY_DELAY_SECONDS)
                continue

            record = PartRecord(part_number=part_number, etag=response["ETag"])
            self.session.record_part(record)
            uploaded = self.progress.add(len(body))
            logging.info(
                "Uploaded %s/%s of %s (part %d)",
                format_bytes(uploaded),
                format_bytes(self.progress.total_bytes),
                self.source_path,
                part_number,
            )
            return record

        logging.error("Retries exhausted for part %d of %s", part_number, self.source_path)
        if not self.interrupt.trip():
            # Another part already failed the session; its error is the one reported
            logging.info(
                "Abandoning part %d of %s due to previous error",
                part_number,
                self.source_path,
            )
            return None
        abort_session(self.s3, self.session)
        raise PartUploadError(self.source_path, part_number, last_error)


class MultipartUploader:
    """Uploads one file through a multipart session."""

    def __init__(self, s3, config: UploadConfig, chunk_size: int = CHUNK_SIZE):
        self.s3 = s3
        self.config = config
        self.chunk_size = chunk_size

    def upload(self, task: FileTask) -> str:
        """
        Upload a file in parts and complete the session.

        Args:
            task: File to upload

        Returns:
            Signed URL of the completed object

        Raises:
            PartUploadError: If a part exhausts its retries (session aborted)
        """
        logging.info("Using multipart upload for %s", task.key)
        created = self.s3.create_multipart_upload(
            Bucket=self.config.bucket,
            Key=task.key,
            ContentType=guess_content_type(task.path),
        )
        session = MultipartSession(self.config.bucket, task.key, created["UploadId"])
        interrupt = InterruptFlag()
        part_uploader = PartUploader(
            self.s3,
            session,
            task.path,
            self.config.max_tries,
            interrupt,
            UploadProgress(task.size),
        )

        try:
            if self.config.multipart_concurrent:
                self._upload_parts_concurrently(task, part_uploader, interrupt)
            else:
                self._upload_parts_sequentially(task, part_uploader)

            parts = session.completed_parts()
            self.s3.complete_multipart_upload(
                Bucket=session.bucket,
                Key=session.key,
                UploadId=session.upload_id,
                MultipartUpload={"Parts": [part.as_dict() for part in parts]},
            )
        except Exception:
            # A part that exhausted its retries has already aborted the session
            if interrupt.trip():
                abort_session(self.s3, session)
            raise

        logging.info("Completed multipart upload of %s to %s (%d parts)", task.path, task.key, len(parts))
        return generate_signed_url(self.s3, session.bucket, session.key, self.config.url_expires_in)

    def _upload_parts_sequentially(self, task: FileTask, part_uploader: PartUploader) -> None:
        for part_number, chunk in enumerate(read_fixed_chunks(task.path, self.chunk_size), start=1):
            part_uploader.upload(part_number, chunk)

    def _expected_parts(self, task: FileTask) -> int:
        return max(1, math.ceil(task.size / self.chunk_size))

    def _upload_parts_concurrently(
        self,
        task: FileTask,
        part_uploader: PartUploader,
        interrupt: InterruptFlag,
    ) -> None:
        max_workers = self.config.max_part_workers or self._expected_parts(task)
        # With a worker cap, also cap the chunks held in memory waiting for a worker
        in_flight = threading.BoundedSemaphore(max_workers) if self.config.max_part_workers else None
        futures: dict[Future, int] = {}

        def run_part(part_number: int, chunk: bytes):
            try:
                return part_uploader.upload(part_number, chunk)
            finally:
                if in_flight is not None:
                    in_flight.release()

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="part") as executor:
            for part_number, chunk in enumerate(read_fixed_chunks(task.path, self.chunk_size), start=1):
                if in_flight is not None:
                    in_flight.acquire()  # pylint: disable=consider-using-with
                if interrupt.is_set():
                    if in_flight is not None:
                        in_flight.release()
                    break
                futures[executor.submit(run_part, part_number, chunk)] = part_number
            wait(futures)

        errors = [future.exception() for future in futures if future.exception() is not None]
        if errors:
            # Only the part that tripped the flag raises PartUploadError
            raise next((exc for exc in errors if isinstance(exc, PartUploadError)), errors[0])
