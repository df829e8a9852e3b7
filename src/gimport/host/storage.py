"""Atomic file persistence for settings and project state."""

import json
import logging
from pathlib import Path
from typing import Any


def write_text_atomic(path: Path, text: str) -> None:
    """Write a text file atomically to prevent corruption during writes.

    Args:
        path: Destination file
        text: File contents
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_file = path.with_suffix(path.suffix + ".tmp")

    try:
        with open(temp_file, "w", encoding="utf-8") as f:
            f.write(text)

        # Atomic rename
        temp_file.replace(path)

    except BaseException:
        temp_file.unlink(missing_ok=True)
        raise


def write_json_atomic(path: Path, data: Any) -> None:
    """Serialize ``data`` as indented JSON and write it atomically."""
    write_text_atomic(path, json.dumps(data, indent=2) + "\n")


def read_json_safe(path: Path) -> Any | None:
    """Read a JSON file with corruption recovery.

    Returns:
        Parsed JSON, or None if the file is missing or corrupted
    """
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, ValueError) as e:
        logging.warning(f"Corrupted file ignored: {path}: {e}")
        return None
    except OSError as e:
        logging.warning(f"Failed to read {path}: {e}")
        return None
