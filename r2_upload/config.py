"""
Configuration for the R2 directory uploader.

Constants that shape the upload protocol live here, together with the
immutable UploadConfig built once at startup from CLI flags, environment
variables and an optional .env file.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import UploadError

# Multipart part size (10 MiB); every part except the last has exactly this length
CHUNK_SIZE: int = 10 * 1024 * 1024

# Files strictly larger than this many MB go through multipart upload
DEFAULT_MULTIPART_SIZE_MB: int = 100

# Attempts per part before the whole file is aborted
DEFAULT_MAX_TRIES: int = 5

# Fixed delay between attempts of a failed part
RETRY_DELAY_SECONDS: float = 0.3

# Delay before each file to smooth request-rate spikes
PACING_DELAY_SECONDS: float = 0.3

# Lifetime of generated signed URLs
DEFAULT_URL_EXPIRES_IN: int = 3600

DEFAULT_REGION: str = "auto"

# Placeholder files that only exist to keep empty directories in git
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (".gitkeep",)

R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"


class ConfigurationError(UploadError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class UploadConfig:  # pylint: disable=too-many-instance-attributes
    """Immutable settings for one upload run."""

    account_id: str
    access_key_id: str
    secret_access_key: str
    bucket: str
    source_dir: str
    destination_dir: str = ""
    output_file_url: bool = False
    multipart_size_mb: float = DEFAULT_MULTIPART_SIZE_MB
    max_tries: int = DEFAULT_MAX_TRIES
    multipart_concurrent: bool = False
    max_part_workers: Optional[int] = None
    endpoint_url: Optional[str] = None
    region: str = DEFAULT_REGION
    url_expires_in: int = DEFAULT_URL_EXPIRES_IN
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS

    def resolved_endpoint(self) -> str:
        """Return the endpoint URL, defaulting to the account's R2 endpoint."""
        if self.endpoint_url:
            return self.endpoint_url
        return R2_ENDPOINT_TEMPLATE.format(account_id=self.account_id)


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be loaded.

    Priority order:
      1. Explicit parameter
      2. R2_ENV_FILE environment variable
      3. ./.env
    """
    if env_path:
        return env_path
    r2_env_file = os.environ.get("R2_ENV_FILE")
    if r2_env_file:
        return r2_env_file
    return str(Path.cwd() / ".env")


def load_env_file(env_path: Optional[str] = None) -> str:
    """Load variables from the resolved .env file without overriding the environment."""
    resolved_path = _resolve_env_path(env_path)
    load_dotenv(resolved_path, override=False)
    return resolved_path


def _pick(explicit: Optional[str], env_name: str) -> str:
    """Return the CLI value if given, otherwise the environment variable (or empty)."""
    if explicit:
        return explicit
    return os.environ.get(env_name, "")


def _validate(config: UploadConfig) -> None:
    missing = [
        flag
        for flag, value in (
            ("--account-id/R2_ACCOUNT_ID", config.account_id or config.endpoint_url),
            ("--access-key-id/R2_ACCESS_KEY_ID", config.access_key_id),
            ("--secret-access-key/R2_SECRET_ACCESS_KEY", config.secret_access_key),
            ("--bucket/R2_BUCKET", config.bucket),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
    if config.max_tries <= 0:
        raise ConfigurationError("max tries must be positive")
    if config.multipart_size_mb <= 0:
        raise ConfigurationError("multipart size must be positive")
    if config.max_part_workers is not None and config.max_part_workers <= 0:
        raise ConfigurationError("max part workers must be positive")
    source = Path(config.source_dir)
    if not source.exists():
        raise ConfigurationError(f"Source directory {source} does not exist.")
    if not source.is_dir():
        raise ConfigurationError(f"Source {source} is not a directory.")


def build_upload_config(args: argparse.Namespace) -> UploadConfig:
    """
    Build the run configuration from parsed CLI arguments.

    CLI flags win over environment variables; environment variables may come
    from a .env file loaded via python-dotenv.

    Args:
        args: Namespace produced by args_parser.parse_args

    Returns:
        UploadConfig: Validated, immutable configuration

    Raises:
        ConfigurationError: If a required value is missing or a value is invalid
    """
    load_env_file(args.env_file)
    exclude_patterns = tuple(args.exclude) if args.exclude else DEFAULT_EXCLUDE_PATTERNS
    config = UploadConfig(
        account_id=_pick(args.account_id, "R2_ACCOUNT_ID"),
        access_key_id=_pick(args.access_key_id, "R2_ACCESS_KEY_ID"),
        secret_access_key=_pick(args.secret_access_key, "R2_SECRET_ACCESS_KEY"),
        bucket=_pick(args.bucket, "R2_BUCKET"),
        source_dir=args.source_dir,
        destination_dir=args.destination_dir or "",
        output_file_url=args.output_file_url,
        multipart_size_mb=args.multipart_size,
        max_tries=args.max_tries,
        multipart_concurrent=args.multipart_concurrent,
        max_part_workers=args.max_part_workers,
        endpoint_url=_pick(args.endpoint_url, "R2_ENDPOINT_URL") or None,
        url_expires_in=args.url_expires_in,
        exclude_patterns=exclude_patterns,
    )
    _validate(config)
    return config
