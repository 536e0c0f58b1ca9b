"""
Command-line interface and main entry point for the R2 uploader.

Builds the configuration, runs the upload engine and publishes the results.
"""

from __future__ import annotations

import logging
import sys

from .args_parser import parse_args
from .client_factory import close_client, create_r2_client
from .config import ConfigurationError, UploadConfig, build_upload_config
from .engine import UploadEngine
from .reporting import format_url_map, print_run_summary, write_github_outputs, write_url_map

EXIT_SUCCESS = 0
EXIT_UPLOAD_FAILED = 1
EXIT_CONFIG_ERROR = 2

DEFAULT_POOL_CONNECTIONS = 10
CONCURRENT_POOL_CONNECTIONS = 50


def _pool_size(config: UploadConfig) -> int:
    """Size the HTTP connection pool for the number of parts that may be in flight."""
    if not config.multipart_concurrent:
        return DEFAULT_POOL_CONNECTIONS
    return config.max_part_workers or CONCURRENT_POOL_CONNECTIONS


def _publish(engine: UploadEngine, config: UploadConfig, url_map_file) -> None:
    result = engine.result
    print_run_summary(result)
    if config.output_file_url:
        print(format_url_map(result.urls))
        if url_map_file:
            write_url_map(result.urls, url_map_file)
    write_github_outputs(result, include_urls=config.output_file_url)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the R2 uploader CLI."""
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        config = build_upload_config(args)
    except ConfigurationError as exc:
        logging.error("%s", exc)
        return EXIT_CONFIG_ERROR

    s3 = create_r2_client(config, max_pool_connections=_pool_size(config))
    engine = UploadEngine(s3, config)
    exit_code = EXIT_SUCCESS
    try:
        engine.run()
    except Exception:  # pylint: disable=broad-exception-caught
        logging.exception("Upload failed")
        exit_code = EXIT_UPLOAD_FAILED
    finally:
        close_client(s3)

    _publish(engine, config, args.url_map_file)
    return exit_code
