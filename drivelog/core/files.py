"""
Atomic file helpers shared by the JSON stores.

Every write lands in a temp file in the target's directory and is then
moved over the target, so readers never observe a partial file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

TEMP_PREFIX = ".tmp-"
FILE_MODE = 0o600


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Atomically write raw bytes to ``path`` (mode 0600)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="wb", dir=str(path.parent), prefix=TEMP_PREFIX, delete=False
    ) as tf:
        temp_path = Path(tf.name)
        try:
            tf.write(data)
            tf.flush()
            os.fsync(tf.fileno())
        except BaseException:
            tf.close()
            temp_path.unlink(missing_ok=True)
            raise
    try:
        os.chmod(temp_path, FILE_MODE)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def atomic_write_json(path: Path, payload: Any) -> None:
    """Serialize ``payload`` as indented JSON and write it atomically."""
    data = json.dumps(payload, indent=2, ensure_ascii=False)
    atomic_write_bytes(path, data.encode("utf-8"))


def read_json(path: Path) -> Any:
    """Load JSON from ``path``. Raises FileNotFoundError / json.JSONDecodeError / OSError."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
