# src/lua_inline/processing.py
"""Post-bundle code processing (formatting / minification).

The bundler hands over a finished file and a density flag; a processor
rewrites that file in place. Deeply nested dependency trees produce deeply
nested closures, so in-process processors run on a worker thread with a
large stack and a raised recursion limit.
"""

import re
import shutil
import subprocess
import sys
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from .comments import iter_segments
from .constants import PROCESS_RECURSION_LIMIT, PROCESS_STACK_SIZE
from .file_io import read_source, write_in_chunks
from .logs import get_logger
from .meta import PROGRAM_PACKAGE

T = TypeVar("T")

Processor = Callable[[Path, bool], None]

_WHITESPACE = re.compile(r"\s+")
_TRAILING_SPACE = re.compile(r"[ \t]+(?=\n)")
_BLANK_RUN = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")

# Adjacent characters that would merge into a different token
_GLUE_PAIRS = {"--", "[[", "[=", ".."}


# --------------------------------------------------------------------------- #
# stack growth
# --------------------------------------------------------------------------- #


def run_with_stack(
    func: Callable[..., T],
    *args: Any,
    stack_size: int = PROCESS_STACK_SIZE,
    recursion_limit: int = PROCESS_RECURSION_LIMIT,
) -> T:
    """Run `func(*args)` on a thread with a bigger stack; re-raise its errors."""
    result: dict[str, Any] = {}

    def target() -> None:
        try:
            result["value"] = func(*args)
        except BaseException as e:  # noqa: BLE001
            result["error"] = e

    old_limit = sys.getrecursionlimit()
    old_size = threading.stack_size(stack_size)
    sys.setrecursionlimit(max(old_limit, recursion_limit))
    try:
        worker = threading.Thread(target=target, name=f"{PROGRAM_PACKAGE}-process")
        worker.start()
        worker.join()
    finally:
        threading.stack_size(old_size)
        sys.setrecursionlimit(old_limit)

    if "error" in result:
        raise result["error"]
    return result["value"]  # type: ignore[no-any-return]


# --------------------------------------------------------------------------- #
# builtin processor
# --------------------------------------------------------------------------- #


def _is_word(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _needs_space(prev: str, nxt: str) -> bool:
    """Return True if dropping the whitespace between prev and nxt changes tokens."""
    if not prev or not nxt:
        return False
    if _is_word(prev) and _is_word(nxt):
        return True
    if prev + nxt in _GLUE_PAIRS:
        return True
    # `1 ..x` / `.. .5` would turn into malformed numbers
    return (prev.isalnum() and nxt == ".") or (prev == "." and nxt.isdigit())


def _collapse_code(code: str, prev: str, nxt: str) -> str:
    out: list[str] = []
    pos = 0
    for match in _WHITESPACE.finditer(code):
        out.append(code[pos : match.start()])
        before = code[match.start() - 1] if match.start() > 0 else prev
        after = code[match.end()] if match.end() < len(code) else nxt
        if _needs_space(before, after):
            out.append(" ")
        pos = match.end()
    out.append(code[pos:])
    return "".join(out)


def format_lua(text: str, *, minify: bool) -> str:
    """Reformat Lua source without parsing it.

    Readable: comments, trailing whitespace and repeated blank lines go.
    Dense: additionally collapses all whitespace outside strings to the
    minimum needed to keep tokens apart.
    """
    # code on both sides of a dropped comment becomes one chunk
    segments: list[tuple[str, str]] = []
    for kind, chunk in iter_segments(text):
        if kind == "comment":
            continue
        if kind == "code" and segments and segments[-1][0] == "code":
            segments[-1] = ("code", segments[-1][1] + chunk)
        else:
            segments.append((kind, chunk))

    out: list[str] = []

    for i, (kind, chunk) in enumerate(segments):
        if kind == "string":
            out.append(chunk)
            continue
        if minify:
            prev = next((c[-1] for c in reversed(out) if c), "")
            nxt = segments[i + 1][1][:1] if i + 1 < len(segments) else ""
            out.append(_collapse_code(chunk, prev, nxt))
        else:
            chunk = _TRAILING_SPACE.sub("", chunk)
            out.append(_BLANK_RUN.sub("\n\n", chunk))

    result = "".join(out).strip()
    return f"{result}\n" if result else ""


def builtin_processor(path: Path, minify: bool) -> None:
    text = read_source(path)
    formatted = run_with_stack(lambda: format_lua(text, minify=minify))
    write_in_chunks(path, formatted)


# --------------------------------------------------------------------------- #
# darklua processor
# --------------------------------------------------------------------------- #


def darklua_processor(path: Path, minify: bool) -> None:
    """Run the external `darklua` tool over `path` in place."""
    logger = get_logger()
    executable = shutil.which("darklua")
    if executable is None:
        xmsg = (
            "The 'darklua' processor needs the darklua executable on PATH. "
            "Install it, pick --processor builtin, or pass --no-process."
        )
        raise RuntimeError(xmsg)

    cmd = [
        executable,
        "process",
        str(path),
        str(path),
        "--format",
        "dense" if minify else "readable",
    ]
    logger.trace("[DARKLUA] %s", " ".join(cmd))
    try:
        subprocess.run(cmd, capture_output=True, text=True, check=True)  # noqa: S603
    except subprocess.CalledProcessError as e:
        xmsg = f"darklua failed on {path.name}: {(e.stderr or e.stdout).strip()}"
        raise RuntimeError(xmsg) from e


PROCESSORS: dict[str, Processor] = {
    "builtin": builtin_processor,
    "darklua": darklua_processor,
}


def process_code(path: Path | str, *, minify: bool, processor: str) -> None:
    """Rewrite the bundled file at `path` in place with the named processor."""
    logger = get_logger()
    if processor not in PROCESSORS:
        xmsg = (
            f"Unknown processor {processor!r}"
            f" (expected one of: {', '.join(sorted(PROCESSORS))})"
        )
        raise ValueError(xmsg)

    logger.debug(
        "Processing %s with %s (%s)",
        path,
        processor,
        "dense" if minify else "readable",
    )
    PROCESSORS[processor](Path(path), minify)
