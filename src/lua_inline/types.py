# src/lua_inline/types.py
from __future__ import annotations

from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired

OriginType = Literal["cli", "config", "default", "code", "test"]
ProcessorName = Literal["builtin", "darklua"]


class PathResolved(TypedDict):
    path: Path  # absolute once resolved
    root: Path  # canonical origin directory for resolution

    # meta only
    origin: OriginType  # provenance


class MetaBundleConfigResolved(TypedDict):
    # sources of parameters
    cli_root: Path
    config_root: Path


class BundleConfig(TypedDict, total=False):
    entry: str
    out: str

    # optional per-bundle override
    minify: bool
    process: bool
    processor: str
    log_level: str
    strict_config: bool


class RootConfig(TypedDict, total=False):
    bundles: list[BundleConfig]

    # Defaults that cascade into each bundle
    log_level: str
    minify: bool
    process: bool
    processor: str

    # runtime behavior
    strict_config: bool
    watch_interval: float


class BundleConfigResolved(TypedDict):
    entry: PathResolved
    out: PathResolved

    minify: bool
    process: bool
    processor: ProcessorName
    log_level: str

    # runtime flag (CLI only, not persisted in normal configs)
    dry_run: NotRequired[bool]

    # global provenance (optional, for audit/debug)
    __meta__: MetaBundleConfigResolved


class RootConfigResolved(TypedDict):
    bundles: list[BundleConfigResolved]

    # runtime behavior
    log_level: str
    strict_config: bool
    watch_interval: float
