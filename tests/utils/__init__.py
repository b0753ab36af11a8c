# tests/utils/__init__.py

from .bundleconfig import (
    make_bundle_cfg,
    make_bundle_input,
    make_meta,
    make_resolved,
)
from .config_validate import make_summary
from .lua_project import make_lua_project
from .mtime import bump_mtime

__all__ = [
    "bump_mtime",
    "make_bundle_cfg",
    "make_bundle_input",
    "make_lua_project",
    "make_meta",
    "make_resolved",
    "make_summary",
]
