"""Single-request upload for files below the multipart threshold."""

from __future__ import annotations

import logging

from .client_factory import generate_signed_url
from .config import UploadConfig
from .file_utils import FileTask, guess_content_type, md5_hex


class SingleShotUploader:  # pylint: disable=too-few-public-methods
    """
    Uploads a whole file with one put_object call.

    The put carries ``If-None-Match: "<md5>"`` so the store refuses the write
    with 412 Precondition Failed when the object at the key already has the
    same content. The engine turns that refusal into a skip.
    """

    def __init__(self, s3, config: UploadConfig):
        self.s3 = s3
        self.config = config

    def upload(self, task: FileTask) -> str:
        """Upload the file and return a signed URL for it."""
        logging.info("Using put object upload for %s", task.key)
        body = task.path.read_bytes()
        digest = md5_hex(body)
        self.s3.put_object(
            Bucket=self.config.bucket,
            Key=task.key,
            Body=body,
            ContentLength=len(body),
            ContentType=guess_content_type(task.path),
            IfNoneMatch=f'"{digest}"',
        )
        logging.info("Uploaded %s", task.path)
        return generate_signed_url(self.s3, self.config.bucket, task.key, self.config.url_expires_in)
