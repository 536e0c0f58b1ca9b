"""
Run reporting for the R2 uploader.

Writes the file -> URL map and the overall result to stdout, an optional
JSON file and, when running inside GitHub Actions, the $GITHUB_OUTPUT file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .engine import RunResult


def format_url_map(urls: dict[str, str]) -> str:
    """Serialize the file -> URL map as JSON."""
    return json.dumps(urls, indent=2, sort_keys=True)


def write_url_map(urls: dict[str, str], path: Path) -> None:
    """Write the file -> URL map to a JSON file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(urls, f, indent=2, sort_keys=True)
    logging.info("Wrote URL map for %d file(s) to %s", len(urls), path)


def write_github_outputs(result: RunResult, include_urls: bool, path: Optional[str] = None) -> bool:
    """
    Append step outputs to the GitHub Actions output file.

    Args:
        result: Outcome of the run
        include_urls: Whether to publish the ``file-urls`` output
        path: Output file path (defaults to $GITHUB_OUTPUT)

    Returns:
        bool: True if outputs were written, False when not running in Actions
    """
    output_path = path or os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        return False
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"result={'success' if result.success else 'failure'}\n")
        if include_urls:
            f.write(f"file-urls={json.dumps(result.urls, sort_keys=True)}\n")
    return True


def print_run_summary(result: RunResult) -> None:
    """Print a short end-of-run summary."""
    print()
    print("=" * 70)
    if result.success:
        print("✓ UPLOAD COMPLETE")
    else:
        print("✗ UPLOAD FAILED")
    print("=" * 70)
    print(f"Uploaded: {result.uploaded:,} file(s)")
    print(f"Skipped:  {result.skipped:,} file(s) (unchanged)")
    if result.error:
        print(f"Error:    {result.error}")
    print("=" * 70)
