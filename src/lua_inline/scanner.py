# src/lua_inline/scanner.py
"""Locate `require` statements in (comment-stripped) Lua source."""

import re
from dataclasses import dataclass

from .logs import get_logger

# Balanced parens, one level of nesting: `f(x)`, `a, (b + c)`
_PAREN_BODY = r"(?:[^()]|\([^()]*\))*"

# Quoted module path; the quotes may be backslash-escaped when the
# whole statement is itself inside a string literal.
_QUOTED_PATH = r"""\\*(?P<q>['"])(?P<path>.*?)\\*(?P=q)"""

# `.name`, `:name`, `(...)` and `[...]` links on the same line
_CALL_SUFFIX = (
    r"(?P<suffix>(?:[ \t]*(?:[.:][ \t]*[A-Za-z_]\w*"
    rf"|\({_PAREN_BODY}\)|\[[^\[\]\n]*\]))*)"
)

REQUIRE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # require("module.lua", ...) / 'require("module.lua", ...)'
    re.compile(
        r"""(?P<open>['"])?\brequire\s*\(\s*"""
        + _QUOTED_PATH
        + rf"""\s*(?:,\s*(?P<args>{_PAREN_BODY}?))?\s*\)"""
        + _CALL_SUFFIX
        + r"""(?:[ \t]*;)?(?(open)(?P=open))"""
    ),
    # require"module.lua" / 'require"module.lua"'
    re.compile(
        r"""(?P<open>['"])?\brequire\s*"""
        + _QUOTED_PATH
        + r"""(?:[ \t]*;)?(?(open)(?P=open))"""
    ),
)

# The whole statement sits inside a quoted string literal
IN_STRING_PATTERN = re.compile(r"""^(['"]).+\1$""", re.DOTALL)


@dataclass(frozen=True)
class CallSite:
    """One `require` occurrence and the pieces extracted from it."""

    matched_text: str
    module_path: str
    forwarded_args: str = ""
    call_suffix: str = ""

    @property
    def is_string_embedded(self) -> bool:
        return IN_STRING_PATTERN.match(self.matched_text) is not None

    @property
    def is_multiline(self) -> bool:
        return "\n" in self.matched_text

    @property
    def has_terminator(self) -> bool:
        text = self.matched_text
        if self.is_string_embedded:
            text = text[1:-1]
        return text.rstrip().endswith(";")


def scan_requires(text: str) -> list[CallSite]:
    """Return every `require` call site in `text`, in source order.

    Patterns are applied in priority order; a span already claimed by an
    earlier pattern is never matched again by a later one.
    """
    logger = get_logger()
    claimed: list[tuple[int, int]] = []
    found: list[tuple[int, CallSite]] = []

    for pattern in REQUIRE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < c_end and c_start < end for c_start, c_end in claimed):
                logger.trace("[SCAN] skipping overlapped match at %d", start)
                continue
            claimed.append((start, end))

            groups = match.groupdict()
            site = CallSite(
                matched_text=match.group(0).strip(),
                module_path=groups["path"].strip(),
                forwarded_args=(groups.get("args") or "").strip(),
                call_suffix=(groups.get("suffix") or "").strip(),
            )
            logger.trace("[SCAN] %r → %s", site.matched_text, site.module_path)
            found.append((start, site))

    found.sort(key=lambda item: item[0])
    return [site for _, site in found]
