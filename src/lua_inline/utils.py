# src/lua_inline/utils.py

import json
import re
import sys
from contextlib import suppress
from pathlib import Path
from typing import Any, TextIO, cast

# A JSON string, kept as-is, or a comment to drop
_JSONC_COMMENT = re.compile(
    r'("(?:\\.|[^"\\])*")|//[^\n]*|#[^\n]*|/\*.*?\*/', re.DOTALL
)
# A JSON string, kept as-is, or a comma right before a closing bracket
_JSONC_TRAILING_COMMA = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[}\]])')


def _keep_strings(match: re.Match[str]) -> str:
    return match.group(1) or ""


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load a JSON file that may carry comments and trailing commas.

    `//`, `#` and `/* */` comments are dropped unless they sit inside a
    string. A file holding nothing but comments loads as None.
    """
    if not path.exists():
        xmsg = f"Config file not found: {path}"
        raise FileNotFoundError(xmsg)
    if not path.is_file():
        xmsg = f"Config path is not a file: {path}"
        raise ValueError(xmsg)

    text = _JSONC_COMMENT.sub(_keep_strings, path.read_text(encoding="utf-8"))
    text = _JSONC_TRAILING_COMMA.sub(_keep_strings, text).strip()
    if not text:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004

    return cast("dict[str, Any] | list[Any]", data)


def remove_path_in_error_message(inner_msg: str, path: Path) -> str:
    """Drop a file's own path from an error message about that file.

    "Invalid JSONC syntax in /abs/config.jsonc: Expecting value"
    → "Invalid JSONC syntax: Expecting value"
    """
    for mention in (f" in {path}", str(path)):
        inner_msg = inner_msg.replace(mention, "")
    return re.sub(r" {2,}", " ", inner_msg).strip()


def plural(obj: Any) -> str:
    """Return 's' unless obj (a count or a sized container) is exactly one."""
    try:
        count = len(obj)
    except TypeError:
        count = obj if isinstance(obj, (int, float)) else 0
    return "" if count == 1 else "s"


def format_elapsed(seconds: float) -> str:
    """Render a phase duration as milliseconds below one second."""
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    return f"{seconds:.2f}s"


def safe_log(msg: str) -> None:
    """Write straight to the real stderr when the logger itself failed."""
    stream = cast("TextIO", sys.__stderr__)
    with suppress(Exception):
        stream.write(f"{msg}\n")
        stream.flush()


def get_sys_version_info() -> tuple[int, ...]:
    return tuple(sys.version_info[:3])
