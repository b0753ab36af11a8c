# src/lua_inline/resolver.py
"""Walk the require graph rooted at an entry file."""

from pathlib import Path

from .comments import strip_comments
from .file_io import read_source
from .logs import get_logger
from .scanner import CallSite, scan_requires


class CircularRequireError(RuntimeError):
    """A module requires itself, directly or through other modules."""

    def __init__(self, chain: list[Path]) -> None:
        self.chain = chain
        pretty = " → ".join(p.name for p in chain)
        super().__init__(f"Circular require detected: {pretty}")


def scan_file(path: Path | str) -> list[CallSite]:
    """Read one file, strip its comments, and scan it (no recursion)."""
    return scan_requires(strip_comments(read_source(path)))


def _resolve(path: Path, active: list[Path]) -> list[CallSite]:
    logger = get_logger()
    key = path.resolve()
    if key in active:
        raise CircularRequireError([*active[active.index(key) :], key])

    active.append(key)
    calls: list[CallSite] = []
    try:
        for site in scan_file(path):
            calls.append(site)

            # relative to the requiring file, not the entry file
            candidate = path.parent / site.module_path
            if candidate.exists():
                logger.trace("[RESOLVE] %s → %s", path.name, candidate)
                calls.extend(_resolve(candidate, active))
            else:
                logger.debug(
                    "Not a local module (no file at %s): %r",
                    candidate,
                    site.module_path,
                )
    finally:
        active.pop()
    return calls


def resolve_requires(entry_path: Path | str) -> list[CallSite]:
    """Return every call site reachable from `entry_path`, depth-first pre-order.

    Each module's own call sites follow it directly, before its next sibling.
    Missing files abort the walk; paths with no file behind them are
    recorded but not followed.

    Raises:
        CircularRequireError: a module (transitively) requires itself.
        OSError: a file on the walk could not be read.
    """
    return _resolve(Path(entry_path), [])


def collect_dependency_files(entry_path: Path | str) -> list[Path]:
    """Return the entry file plus every local module reachable from it."""
    entry = Path(entry_path).resolve()
    files: list[Path] = [entry]
    pending = [entry]
    while pending:
        current = pending.pop()
        for site in scan_file(current):
            candidate = (current.parent / site.module_path).resolve()
            if candidate.is_file() and candidate not in files:
                files.append(candidate)
                pending.append(candidate)
    return files
