# tests/utils/bundleconfig.py
"""Shared test helpers for constructing fake BundleConfig and related types."""

from __future__ import annotations

from pathlib import Path
from typing import cast

from lua_inline.types import (
    BundleConfig,
    BundleConfigResolved,
    MetaBundleConfigResolved,
    PathResolved,
)

# ---------------------------------------------------------------------------
# Factories for resolved and unresolved configs
# ---------------------------------------------------------------------------


def make_meta(root: Path) -> MetaBundleConfigResolved:
    """Minimal fake meta object for resolved configs."""
    return {"cli_root": root, "config_root": root}


def make_resolved(path: Path | str, root: Path | str) -> PathResolved:
    """Return a fake PathResolved-style dict anchored at `root`."""
    full = Path(root) / path
    return cast(PathResolved, {"path": full, "root": Path(root), "origin": "test"})


def make_bundle_cfg(
    tmp_path: Path,
    entry: str = "main.lua",
    out: str = "bundled.lua",
    *,
    minify: bool = False,
    process: bool = True,
    processor: str = "builtin",
    log_level: str = "info",
    dry_run: bool = False,
) -> BundleConfigResolved:
    """Return a fake, fully-populated BundleConfigResolved."""
    return cast(
        BundleConfigResolved,
        {
            "entry": make_resolved(entry, tmp_path),
            "out": make_resolved(out, tmp_path),
            "minify": minify,
            "process": process,
            "processor": processor,
            "log_level": log_level,
            "dry_run": dry_run,
            "__meta__": make_meta(tmp_path),
        },
    )


def make_bundle_input(
    entry: str | None = None,
    out: str | None = None,
    **extra: object,
) -> BundleConfig:
    """Convenient shorthand for constructing raw (pre-resolve) bundle inputs."""
    cfg: dict[str, object] = {}
    if entry is not None:
        cfg["entry"] = entry
    if out is not None:
        cfg["out"] = out
    cfg.update(extra)
    return cast(BundleConfig, cfg)
