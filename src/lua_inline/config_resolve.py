# src/lua_inline/config_resolve.py


import argparse
import os
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_MINIFY,
    DEFAULT_OUT_FILE,
    DEFAULT_PROCESS,
    DEFAULT_PROCESSOR,
    DEFAULT_WATCH_INTERVAL,
)
from .logs import get_logger
from .meta import PROGRAM_ENV
from .processing import PROCESSORS
from .types import (
    BundleConfig,
    BundleConfigResolved,
    MetaBundleConfigResolved,
    PathResolved,
    RootConfig,
    RootConfigResolved,
)
from .utils_types import cast_hint, make_pathresolved

# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def _cascade(
    key: str,
    cli_value: Any,
    bundle_cfg: BundleConfig,
    root_cfg: RootConfig | None,
    default: Any,
) -> Any:
    """Pick a value from CLI → bundle → root → default."""
    if cli_value is not None:
        return cli_value
    if key in bundle_cfg:
        return bundle_cfg[key]  # type: ignore[literal-required]
    if root_cfg and key in root_cfg:
        return root_cfg[key]  # type: ignore[literal-required]
    return default


def _resolve_path(
    cli_raw: str | None,
    cfg_raw: str | None,
    *,
    cwd: Path,
    config_dir: Path,
    default: str | None = None,
) -> PathResolved | None:
    """CLI paths are relative to cwd, config paths to the config's directory."""
    if cli_raw:
        return make_pathresolved(cli_raw, cwd, "cli")
    if cfg_raw:
        return make_pathresolved(cfg_raw, config_dir, "config")
    if default:
        return make_pathresolved(default, cwd, "default")
    return None


def _resolve_watch_interval(
    args: argparse.Namespace, root_cfg: RootConfig | None
) -> float:
    logger = get_logger()
    env_key = f"{PROGRAM_ENV}_{DEFAULT_ENV_WATCH_INTERVAL}"
    env_watch = os.getenv(env_key) or os.getenv(DEFAULT_ENV_WATCH_INTERVAL)

    # bare `--watch` (0.0) defers to env / config
    if getattr(args, "watch", None):
        return float(args.watch)
    if env_watch is not None:
        try:
            return float(env_watch)
        except ValueError:
            logger.warning(
                "Invalid %s=%r, using default.", DEFAULT_ENV_WATCH_INTERVAL, env_watch
            )
            return DEFAULT_WATCH_INTERVAL
    return float((root_cfg or {}).get("watch_interval", DEFAULT_WATCH_INTERVAL))


# --------------------------------------------------------------------------- #
# main per-bundle resolver
# --------------------------------------------------------------------------- #


def resolve_bundle_config(
    bundle_cfg: BundleConfig,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
    root_cfg: RootConfig | None = None,
) -> BundleConfigResolved:
    """Resolve a single BundleConfig into a BundleConfigResolved.

    Applies CLI overrides, normalizes paths, cascades root defaults,
    and attaches provenance metadata.
    """
    logger = get_logger()
    resolved_cfg: dict[str, Any] = dict(bundle_cfg)

    meta: MetaBundleConfigResolved = {
        "cli_root": cwd,
        "config_root": config_dir,
    }

    # ------------------------------
    # Entry / output paths
    # ------------------------------
    cli_entry = getattr(args, "entry", None) or getattr(args, "positional_entry", None)
    entry = _resolve_path(
        cli_entry, bundle_cfg.get("entry"), cwd=cwd, config_dir=config_dir
    )
    if entry is None:
        xmsg = "No entry file given (use --entry or set `entry` in the config)."
        raise ValueError(xmsg)
    if not entry["path"].is_file():
        logger.warning(
            "Entry file does not exist: %s (origin: %s)",
            entry["path"],
            entry["origin"],
        )
    resolved_cfg["entry"] = entry

    cli_out = getattr(args, "out", None) or getattr(args, "positional_out", None)
    resolved_cfg["out"] = _resolve_path(
        cli_out,
        bundle_cfg.get("out"),
        cwd=cwd,
        config_dir=config_dir,
        default=DEFAULT_OUT_FILE,
    )

    # ------------------------------
    # Processing options
    # ------------------------------
    resolved_cfg["minify"] = bool(
        _cascade(
            "minify",
            getattr(args, "minify", None),
            bundle_cfg,
            root_cfg,
            DEFAULT_MINIFY,
        )
    )
    resolved_cfg["process"] = bool(
        _cascade(
            "process",
            getattr(args, "process", None),
            bundle_cfg,
            root_cfg,
            DEFAULT_PROCESS,
        )
    )
    processor = _cascade(
        "processor",
        getattr(args, "processor", None),
        bundle_cfg,
        root_cfg,
        DEFAULT_PROCESSOR,
    )
    if processor not in PROCESSORS:
        xmsg = (
            f"Unknown processor {processor!r}"
            f" (expected one of: {', '.join(sorted(PROCESSORS))})"
        )
        raise ValueError(xmsg)
    resolved_cfg["processor"] = processor
    resolved_cfg.pop("strict_config", None)

    # ------------------------------
    # Log level
    # ------------------------------
    resolved_cfg["log_level"] = logger.determine_log_level(
        args=args,
        root_log_level=(root_cfg or {}).get("log_level"),
        bundle_log_level=bundle_cfg.get("log_level"),
    )

    # ------------------------------
    # Attach provenance
    # ------------------------------
    resolved_cfg["__meta__"] = meta
    return cast_hint(BundleConfigResolved, resolved_cfg)


# --------------------------------------------------------------------------- #
# root-level resolver
# --------------------------------------------------------------------------- #


def resolve_config(
    root_input: RootConfig,
    args: argparse.Namespace,
    config_dir: Path,
    cwd: Path,
) -> RootConfigResolved:
    """Fully resolve a loaded RootConfig into a ready-to-run RootConfigResolved."""
    logger = get_logger()
    root_cfg = cast_hint(RootConfig, dict(root_input))

    watch_interval = _resolve_watch_interval(args, root_cfg)

    #  log_level: arg -> env -> root -> default
    log_level = logger.determine_log_level(
        args=args, root_log_level=root_cfg.get("log_level")
    )
    logger.setLevel(log_level)

    bundles_input = root_cfg.get("bundles", [])
    if len(bundles_input) > 1 and (
        getattr(args, "entry", None)
        or getattr(args, "positional_entry", None)
        or getattr(args, "out", None)
        or getattr(args, "positional_out", None)
    ):
        logger.warning(
            "CLI entry/output override applies to all %d bundles.", len(bundles_input)
        )

    resolved_bundles = [
        resolve_bundle_config(b, args, config_dir, cwd, root_cfg)
        for b in bundles_input
    ]

    resolved_root: RootConfigResolved = {
        "bundles": resolved_bundles,
        "strict_config": root_cfg.get("strict_config", False),
        "watch_interval": watch_interval,
        "log_level": log_level,
    }
    return resolved_root
