"""
Serialization of catalog payloads to JSON or YAML.

Files are written atomically: a temporary sibling is written, synced and
renamed into place, so a reader never sees a half-written export.
"""

from __future__ import annotations

import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any

import structlog
import yaml

from credmap.core.errors import ConfigurationError, OutputError

logger = structlog.get_logger()

FORMATS = ("json", "yaml")
STDOUT = "-"


def render(payload: dict[str, Any], fmt: str = "json") -> str:
    """Render a payload in the requested format."""
    if fmt == "json":
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    raise ConfigurationError(f"unknown output format {fmt!r}", details={"formats": ", ".join(FORMATS)})


def write_atomic(path: str | Path, text: str, force: bool = False) -> Path:
    """
    Write text to path through a temporary file and rename.

    Args:
        path: Destination file
        text: Content to write
        force: Overwrite an existing destination

    Returns:
        The destination path

    Raises:
        OutputError: If the file exists (without force) or cannot be written
    """
    path = Path(path)
    if path.exists() and not force:
        raise OutputError(
            "output file already exists (use --force to overwrite)",
            details={"path": str(path)},
        )

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.tmp-", dir=path.parent)
    except OSError as e:
        raise OutputError(f"create temp output: {e}", details={"path": str(path)}) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.chmod(tmp_name, 0o644)
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise OutputError(f"write output: {e}", details={"path": str(path)}) from e

    logger.info("export_written", path=str(path), bytes=len(text.encode("utf-8")))
    return path


def write_output(payload: dict[str, Any], out: str, fmt: str = "json", force: bool = False) -> None:
    """Render a payload and send it to a file, or stdout for '-'."""
    text = render(payload, fmt)
    if out == STDOUT:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    write_atomic(out, text, force=force)
