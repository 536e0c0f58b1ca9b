"""
R2 directory uploader package.

Upload a local directory tree to Cloudflare R2 or another S3-compatible store
using single-shot puts for small files and multipart uploads for large ones.
"""

from . import (
    args_parser,
    cli,
    client_factory,
    config,
    engine,
    errors,
    file_utils,
    format_utils,
    multipart,
    reporting,
    single_put,
)
from .config import ConfigurationError, UploadConfig
from .engine import FileOutcome, RunResult, RunState, UploadEngine
from .errors import PartUploadError, UploadError, is_precondition_failed
from .file_utils import FileTask, read_fixed_chunks
from .multipart import InterruptFlag, MultipartSession, MultipartUploader, PartRecord, PartUploader
from .single_put import SingleShotUploader

__all__ = [
    "ConfigurationError",
    "FileOutcome",
    "FileTask",
    "InterruptFlag",
    "MultipartSession",
    "MultipartUploader",
    "PartRecord",
    "PartUploadError",
    "PartUploader",
    "RunResult",
    "RunState",
    "SingleShotUploader",
    "UploadConfig",
    "UploadEngine",
    "UploadError",
    "args_parser",
    "cli",
    "client_factory",
    "config",
    "engine",
    "errors",
    "file_utils",
    "format_utils",
    "is_precondition_failed",
    "multipart",
    "read_fixed_chunks",
    "reporting",
    "single_put",
]
