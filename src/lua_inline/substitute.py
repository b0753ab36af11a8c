# src/lua_inline/substitute.py
"""Rewrite require statements into inlined, immediately-invoked closures."""

import re
from pathlib import Path

from .comments import strip_comments
from .constants import INDENT_UNIT
from .file_io import read_source
from .logs import get_logger
from .scanner import CallSite
from .utils import plural

# Placeholder brackets for long strings whose content is still growing.
# NUL never appears in Lua source text we accept.
_PENDING_OPEN = "\x00{}[\x00"
_PENDING_CLOSE = "\x00]{}\x00"


def long_string_delimiters(content: str) -> tuple[str, str]:
    """Return the lowest-level long bracket pair that can safely wrap `content`."""
    level = 0
    while f"]{'=' * level}]" in content:
        level += 1
    return f"[{'=' * level}[", f"]{'=' * level}]"


def build_closure(site: CallSite, module_text: str) -> str:
    """Wrap a module's text in a function that is called on the spot.

    `require("m.lua", a, b)` → `(function(a, b) <m.lua> end)(a, b)`;
    without forwarded arguments the closure is variadic. The call suffix is
    attached after the invocation, then the statement's own `;` if it had one.
    """
    params = site.forwarded_args or "..."
    closure = f"(function({params})\n{module_text}\nend)({site.forwarded_args})"
    closure += site.call_suffix
    if site.has_terminator:
        closure += ";"
    return closure


def indent_block(text: str, unit: str = INDENT_UNIT) -> str:
    return "\n".join(f"{unit}{line}" for line in text.split("\n"))


def _close_pending_strings(buffer: str, pending: int) -> str:
    """Swap placeholder brackets for real long brackets, innermost first.

    A long string opened by a later call site can only sit inside one opened
    earlier, so walking them newest-first sizes every string after its
    nested strings already have their final brackets.
    """
    for n in reversed(range(pending)):
        pattern = re.compile(
            re.escape(_PENDING_OPEN.format(n))
            + "(.*?)"
            + re.escape(_PENDING_CLOSE.format(n)),
            re.DOTALL,
        )

        def _wrap(match: re.Match[str]) -> str:
            opening, closing = long_string_delimiters(match.group(1))
            return f"{opening}{match.group(1)}{closing}"

        buffer = pattern.sub(_wrap, buffer)
    return buffer


def replace_requires(entry_path: Path | str, calls: list[CallSite]) -> str:
    """Inline every call site into the entry file's comment-stripped text.

    Call sites are applied in order against one accumulating buffer, so
    nested modules' statements (brought in by earlier replacements) are
    rewritten by the later entries that describe them. Each replacement
    swaps *every* occurrence of the statement's text.

    String-embedded statements become long strings whose bracket level is
    chosen once the whole buffer is inlined.

    Module files are read relative to the entry file's directory.
    """
    logger = get_logger()
    entry = Path(entry_path)
    base_dir = entry.parent
    buffer = strip_comments(read_source(entry))
    pending = 0

    for site in calls:
        module_text = read_source(base_dir / site.module_path)
        key = site.matched_text
        replacement = build_closure(site, module_text)

        if site.is_string_embedded:
            inner = key[1:-1]
            opening = _PENDING_OPEN.format(pending)
            closing = _PENDING_CLOSE.format(pending)
            pending += 1
            buffer = buffer.replace(key, f"{opening}{inner}{closing}")
            key = inner
            logger.trace("[SUBST] %s: string literal → long string", site.module_path)

        if "\n" in key:
            replacement = indent_block(replacement)

        count = buffer.count(key)
        buffer = buffer.replace(key, replacement)
        logger.debug(
            "Inlined %s (%d occurrence%s)", site.module_path, count, plural(count)
        )

    return _close_pending_strings(buffer, pending)
