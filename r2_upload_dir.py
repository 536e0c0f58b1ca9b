#!/usr/bin/env python3
"""CLI tool to upload a local directory tree to Cloudflare R2."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the repository root is importable even when this script is run via an absolute path.
REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT) not in sys.path:  # pragma: no cover - import context dependent
    sys.path.insert(0, str(REPO_ROOT))

from r2_upload.cli import main  # noqa: E402  pylint: disable=wrong-import-position

if __name__ == "__main__":  # pragma: no cover - script entry point
    try:
        raise SystemExit(main())
    except KeyboardInterrupt as exc:
        raise SystemExit("\nAborted by user.") from exc
