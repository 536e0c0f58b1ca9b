"""Exception types raised by the uploader and helpers to classify store errors."""

from __future__ import annotations

from pathlib import Path

from botocore.exceptions import ClientError

PRECONDITION_FAILED_STATUS = 412
PRECONDITION_FAILED_CODES = {"PreconditionFailed", "412"}


class UploadError(Exception):
    """Base class for uploader errors."""


class PartUploadError(UploadError):
    """Raised when a multipart part exhausts its retries."""

    def __init__(self, path: Path | str, part_number: int, cause: Exception | None = None):
        self.path = Path(path)
        self.part_number = part_number
        self.cause = cause
        super().__init__(f"Failed to upload part {part_number} of {path}")


def get_http_status(exc: ClientError) -> int | None:
    """Return the HTTP status code carried by a botocore ClientError, if any."""
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def is_precondition_failed(exc: BaseException) -> bool:
    """
    Check whether an exception is the store rejecting a conditional write.

    A 412 means the If-None-Match precondition did not hold: an object with the
    same content hash already exists at the key.
    """
    if not isinstance(exc, ClientError):
        return False
    if get_http_status(exc) == PRECONDITION_FAILED_STATUS:
        return True
    error_code = exc.response.get("Error", {}).get("Code", "")
    return error_code in PRECONDITION_FAILED_CODES
