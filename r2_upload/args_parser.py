"""
Argument parsing for the R2 uploader CLI.

Handles command-line argument definition, parsing, and validation.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from .config import DEFAULT_MAX_TRIES, DEFAULT_MULTIPART_SIZE_MB, DEFAULT_URL_EXPIRES_IN


def add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    """Add bucket and credential arguments. Each falls back to an R2_* environment variable."""
    parser.add_argument("--bucket", help="Destination bucket (env: R2_BUCKET).")
    parser.add_argument("--account-id", help="Cloudflare account id (env: R2_ACCOUNT_ID).")
    parser.add_argument("--access-key-id", help="Access key id (env: R2_ACCESS_KEY_ID).")
    parser.add_argument("--secret-access-key", help="Secret access key (env: R2_SECRET_ACCESS_KEY).")
    parser.add_argument(
        "--endpoint-url",
        help="Override the S3 endpoint (env: R2_ENDPOINT_URL). Defaults to the account's R2 endpoint.",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file with credentials (default: $R2_ENV_FILE or ./.env).",
    )


def add_upload_arguments(parser: argparse.ArgumentParser) -> None:
    """Add arguments that shape how files are uploaded."""
    parser.add_argument(
        "--destination-dir",
        default="",
        help="Key prefix in the bucket (default: the source directory as given).",
    )
    parser.add_argument(
        "--multipart-size",
        type=float,
        default=DEFAULT_MULTIPART_SIZE_MB,
        metavar="MB",
        help=f"Files larger than MB use multipart upload (default: {DEFAULT_MULTIPART_SIZE_MB}).",
    )
    parser.add_argument(
        "--max-tries",
        type=int,
        default=DEFAULT_MAX_TRIES,
        help=f"Attempts per multipart part before aborting (default: {DEFAULT_MAX_TRIES}).",
    )
    parser.add_argument(
        "--multipart-concurrent",
        action="store_true",
        help="Upload the parts of a file concurrently.",
    )
    parser.add_argument(
        "--max-part-workers",
        type=int,
        help="Cap concurrent parts per file (default: all parts at once).",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        metavar="PATTERN",
        help="File name pattern to skip; repeatable (default: .gitkeep).",
    )


def add_output_arguments(parser: argparse.ArgumentParser) -> None:
    """Add output and reporting arguments."""
    parser.add_argument(
        "--output-file-url",
        action="store_true",
        help="Emit a JSON map of source file -> signed URL.",
    )
    parser.add_argument("--url-map-file", type=Path, help="Optional path to write the URL map as JSON.")
    parser.add_argument(
        "--url-expires-in",
        type=int,
        default=DEFAULT_URL_EXPIRES_IN,
        metavar="SECONDS",
        help=f"Lifetime of signed URLs (default: {DEFAULT_URL_EXPIRES_IN}).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the uploader."""
    parser = argparse.ArgumentParser(
        description="Upload a directory tree to Cloudflare R2 (or any S3-compatible store).",
    )
    parser.add_argument("source_dir", help="Directory to upload.")
    add_connection_arguments(parser)
    add_upload_arguments(parser)
    add_output_arguments(parser)
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate command-line arguments."""
    parser = create_parser()
    args = parser.parse_args(argv)
    if args.max_tries <= 0:
        parser.error("--max-tries must be positive.")
    if args.multipart_size <= 0:
        parser.error("--multipart-size must be positive.")
    if args.max_part_workers is not None and args.max_part_workers <= 0:
        parser.error("--max-part-workers must be positive.")
    if args.url_expires_in <= 0:
        parser.error("--url-expires-in must be positive.")
    if args.url_map_file and not args.output_file_url:
        parser.error("--url-map-file requires --output-file-url.")
    return args
