# src/lua_inline/file_io.py

import os
import tempfile
from pathlib import Path

from .constants import WRITE_CHUNK_SIZE
from .logs import get_logger


def read_source(path: Path | str) -> str:
    """Read a whole source file as UTF-8 text. Errors propagate unchanged."""
    return Path(path).read_text(encoding="utf-8")


def write_in_chunks(
    path: Path | str,
    text: str,
    chunk_size: int = WRITE_CHUNK_SIZE,
) -> Path:
    """Write `text` to `path` in fixed-size chunks, atomically.

    Data goes to a temporary file beside the target, which replaces the
    target only once every chunk is written. A failed write leaves any
    previous file untouched.
    """
    logger = get_logger()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = text.encode("utf-8")

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            for offset in range(0, len(data), chunk_size):
                handle.write(data[offset : offset + chunk_size])
        tmp_path.chmod(0o644)  # mkstemp creates 0600
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.trace("[WRITE] %d bytes → %s (chunk=%d)", len(data), path, chunk_size)
    return path
