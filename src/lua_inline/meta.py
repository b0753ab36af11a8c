# src/lua_inline/meta.py

"""Centralized program identity constants for Lua Inline."""

from typing import NamedTuple

_BASE = "lua-inline"

# CLI script name (the console script installed by pip)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for LUA_INLINE_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "Inline Lua require() calls into a single distributable file."


class Metadata(NamedTuple):
    version: str
    commit: str
