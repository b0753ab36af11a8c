# src/lua_inline/comments.py
"""Comment removal for Lua source.

A single left-to-right pass that splits text into code, string and comment
segments. Quoted strings ('...' and "...") and long strings ([[...]],
[==[...]==]) are kept whole, so comment-like sequences inside them survive.
"""

import re
from collections.abc import Iterator
from typing import Literal

SegmentKind = Literal["code", "string", "comment"]

# Next position where the scanner state can change
_INTERESTING = re.compile(r"--|[\"'\[]")


def _long_bracket_level(text: str, pos: int) -> int | None:
    """Return the level of a long bracket opening at `pos`, or None.

    `[[` is level 0, `[==[` is level 2. Anything else is not a long bracket.
    """
    if not text.startswith("[", pos):
        return None
    end = pos + 1
    while end < len(text) and text[end] == "=":
        end += 1
    if end < len(text) and text[end] == "[":
        return end - pos - 1
    return None


def _long_bracket_end(text: str, start: int, level: int) -> int:
    """Return the index just past the matching `]=*]`, or end of text."""
    close = "]" + "=" * level + "]"
    idx = text.find(close, start)
    return len(text) if idx == -1 else idx + len(close)


def _quoted_string_end(text: str, start: int) -> int:
    """Return the index just past the quoted string opening at `start`."""
    quote = text[start]
    pos = start + 1
    while pos < len(text):
        ch = text[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == quote:
            return pos + 1
        if ch == "\n":
            # unterminated; Lua strings can't span raw newlines
            return pos
        pos += 1
    return len(text)


def iter_segments(text: str) -> Iterator[tuple[SegmentKind, str]]:
    """Yield (kind, chunk) pairs that concatenate back to `text`.

    Line comments end before their newline. An unterminated block comment
    or long string runs to the end of the buffer.
    """
    pos = 0
    while pos < len(text):
        match = _INTERESTING.search(text, pos)
        if match is None:
            yield "code", text[pos:]
            return

        start = match.start()
        if start > pos:
            yield "code", text[pos:start]
        token = match.group()

        if token in {'"', "'"}:
            end = _quoted_string_end(text, start)
            yield "string", text[start:end]
        elif token == "[":
            level = _long_bracket_level(text, start)
            if level is None:
                end = start + 1
                yield "code", token
            else:
                end = _long_bracket_end(text, start + level + 2, level)
                yield "string", text[start:end]
        else:
            level = _long_bracket_level(text, start + 2)
            if level is not None:
                end = _long_bracket_end(text, start + level + 4, level)
            else:
                newline = text.find("\n", start)
                end = len(text) if newline == -1 else newline
            yield "comment", text[start:end]
        pos = end


def strip_comments(text: str) -> str:
    """Return `text` with all Lua comments removed."""
    return "".join(chunk for kind, chunk in iter_segments(text) if kind != "comment")
