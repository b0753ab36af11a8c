# src/lua_inline/config.py


import argparse
import logging
from pathlib import Path
from typing import Any, cast

from .config_validate import validate_config
from .logs import get_logger
from .meta import PROGRAM_SCRIPT
from .types import BundleConfig, RootConfig
from .utils import load_jsonc, plural, remove_path_in_error_message
from .utils_schema import ValidationSummary
from .utils_types import cast_hint, schema_from_typeddict


def can_run_configless(args: argparse.Namespace) -> bool:
    """To run without config we need at least an entry file,
    either from --entry or positionally.
    """
    return bool(
        getattr(args, "entry", None) or getattr(args, "positional_entry", None)
    )


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "error",
) -> Path | None:
    """Locate a configuration file.

    missing_level: log-level for failing to find a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. Default candidates in the current working directory:
         .{PROGRAM_SCRIPT}.jsonc, .{PROGRAM_SCRIPT}.json

    Returns the first matching path, or None if no config was found.
    """
    logger = get_logger()

    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        if not config.exists():
            # Explicit path → hard failure
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidate files ---
    candidates: list[Path] = [
        cwd / f".{PROGRAM_SCRIPT}.jsonc",
        cwd / f".{PROGRAM_SCRIPT}.json",
    ]
    found = [p for p in candidates if p.exists()]

    if not found:
        # Expected absence: soft failure (continue)
        logger.log(
            logging.getLevelNamesMapping()[missing_level.upper()],
            "No config file found in %s",
            cwd,
        )
        return None

    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        logger.warning(
            "Multiple config files detected (%s); using %s.", names, found[0].name
        )
    return found[0]


def load_config(config_path: Path) -> dict[str, Any] | list[Any] | None:
    """Load configuration data from a JSON/JSONC file.

    Returns:
        The raw object defined in the config (dict, list, or None).
        Returns None for intentionally empty configs (e.g. empty files).
    """
    try:
        return load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e


def _parse_case_list_of_dicts(raw_config: list[dict[str, Any]]) -> dict[str, Any]:
    # --- naked list of dicts (no root) → multi-bundle shorthand ---
    bundles = [dict(b) for b in raw_config]

    # Lift watch_interval from the first bundle that defines it (convenience),
    # then remove it from ALL bundles to avoid ambiguity.
    first_watch = next(
        (b.get("watch_interval") for b in bundles if "watch_interval" in b),
        None,
    )
    root: dict[str, Any] = {"bundles": bundles}
    if first_watch is not None:
        root["watch_interval"] = first_watch
        for b in bundles:
            b.pop("watch_interval", None)
    return root


def _parse_case_dict_multi_bundles(
    raw_config: dict[str, Any],
    *,
    bundle_val: Any,
) -> dict[str, Any]:
    # --- dict with "bundle(s)" key holding a list ---
    root = dict(raw_config)  # preserve all user keys

    if isinstance(bundle_val, list) and "bundles" not in raw_config:
        get_logger().warning(
            "Config key 'bundle' was a list — treating as 'bundles'."
        )
        root["bundles"] = bundle_val
        root.pop("bundle", None)

    return root


def _parse_case_dict_single_bundle(
    raw_config: dict[str, Any],
    *,
    bundles_val: Any,
) -> dict[str, Any]:
    # --- dict with "bundle(s)" key holding one object ---
    root = dict(raw_config)  # preserve all user keys

    if isinstance(bundles_val, dict):
        get_logger().warning(
            "Config key 'bundles' was an object — treating as 'bundle'."
        )
        root["bundles"] = [bundles_val]
    else:
        root["bundles"] = [dict(root.pop("bundle"))]

    return root


def _parse_case_flat_single_bundle(raw_config: dict[str, Any]) -> dict[str, Any]:
    # --- single bundle fields (hoist only shared keys) ---
    # Keys valid on both root and bundle move up to the root; bundle-only
    # fields stay inside the bundle entry.
    bundle = dict(raw_config)
    hoisted: dict[str, Any] = {}

    root_keys = set(schema_from_typeddict(RootConfig))
    bundle_keys = set(schema_from_typeddict(BundleConfig))
    for k in root_keys & bundle_keys:
        if k in bundle:
            hoisted[k] = bundle.pop(k)

    # Root-only keys (watch_interval) also belong at the root
    for k in root_keys - bundle_keys:
        if k in bundle:
            hoisted[k] = bundle.pop(k)

    root: dict[str, Any] = dict(hoisted)
    root["bundles"] = [bundle]
    return root


def parse_config(
    raw_config: dict[str, Any] | list[Any] | None,
) -> dict[str, Any] | None:
    """Normalize user config into canonical RootConfig shape (no filesystem work).

    Accepted forms:
      - [] / {} / empty file         → None (no config)
      - [{...}, {...}]               → multi-bundle list
      - {"bundles": [...]}           → multi-bundle config (returned shape)
      - {"bundle": {...}}            → single bundle with root config
      - {...}                        → single flat bundle config

    After normalization:
      - Always returns {"bundles": [ ... ]}.
      - Root-level defaults may be present:
          log_level, minify, process, processor, strict_config, watch_interval.
      - Preserves all unknown keys for later validation.
    """
    if not raw_config:  # handles None, [], {}
        return None

    if isinstance(raw_config, list):
        if all(isinstance(x, dict) for x in raw_config):
            return _parse_case_list_of_dicts(raw_config)
        xmsg = "Invalid top-level list: every element must be a bundle object."
        raise TypeError(xmsg)

    if not isinstance(raw_config, dict):  # pyright: ignore[reportUnnecessaryIsInstance]
        xmsg = (
            f"Invalid top-level value: {type(raw_config).__name__} "
            "(expected object or list of objects)"
        )
        raise TypeError(xmsg)

    bundles_val = raw_config.get("bundles")
    bundle_val = raw_config.get("bundle")

    if isinstance(bundles_val, list) or (
        isinstance(bundle_val, list) and "bundles" not in raw_config
    ):
        return _parse_case_dict_multi_bundles(raw_config, bundle_val=bundle_val)

    if isinstance(bundle_val, dict) or isinstance(bundles_val, dict):
        return _parse_case_dict_single_bundle(raw_config, bundles_val=bundles_val)

    return _parse_case_flat_single_bundle(raw_config)


def _validation_summary(
    summary: ValidationSummary,
    config_path: Path,
) -> None:
    """Pretty-print a validation summary through the logger."""
    logger = get_logger()
    mode = "strict mode" if summary.strict else "lenient mode"

    counts: list[str] = []
    if summary.errors:
        counts.append(f"{len(summary.errors)} error{plural(summary.errors)}")
    if summary.strict_warnings:
        counts.append(
            f"{len(summary.strict_warnings)} strict warning"
            f"{plural(summary.strict_warnings)}",
        )
    if summary.warnings:
        counts.append(
            f"{len(summary.warnings)} normal warning{plural(summary.warnings)}",
        )
    counts_msg = f"\nFound {', '.join(counts)}." if counts else ""

    if not summary.valid:
        logger.error(
            "Failed to validate configuration file %s (%s).%s",
            config_path.name,
            mode,
            counts_msg,
        )
    elif counts:
        logger.warning(
            "Validated configuration file %s (%s) with warnings.%s",
            config_path.name,
            mode,
            counts_msg,
        )
    else:
        logger.debug("Validated %s (%s) successfully.", config_path.name, mode)

    if summary.errors:
        logger.error("\nErrors:\n  • %s", "\n  • ".join(summary.errors))
    if summary.strict_warnings:
        logger.error(
            "\nStrict warnings (treated as errors):\n  • %s",
            "\n  • ".join(summary.strict_warnings),
        )
    if summary.warnings:
        logger.warning(
            "\nWarnings (non-fatal):\n  • %s", "\n  • ".join(summary.warnings)
        )


def load_and_validate_config(
    args: argparse.Namespace,
) -> tuple[Path, RootConfig, ValidationSummary] | None:
    """Find, load, parse, and validate the user's configuration.

    Also re-determines the effective log level once the root config's
    `log_level` is known, so logging is settled as early as possible.

    Returns:
        (config_path, root_cfg, validation_summary) if a config file was
        found and valid, or None if no config was found.
    """
    logger = get_logger()

    cwd = Path.cwd().resolve()
    missing_level = "debug" if can_run_configless(args) else "error"
    config_path = find_config(args, cwd, missing_level=missing_level)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if raw_config is None:
        return None

    # --- Early peek for log_level before parsing ---
    if isinstance(raw_config, dict):
        raw_log_level = cast("dict[str, Any]", raw_config).get("log_level")
        if isinstance(raw_log_level, str) and raw_log_level:
            logger.setLevel(
                logger.determine_log_level(args=args, root_log_level=raw_log_level)
            )

    try:
        parsed_cfg = parse_config(raw_config)
    except TypeError as e:
        xmsg = f"Could not parse config {config_path.name}: {e}"
        raise TypeError(xmsg) from e
    if parsed_cfg is None:
        return None

    validation_result = validate_config(parsed_cfg)
    _validation_summary(validation_result, config_path)
    if not validation_result.valid:
        xmsg = f"Configuration file {config_path.name} contains validation errors."
        exception = ValueError(xmsg)
        exception.silent = True  # type: ignore[attr-defined]
        exception.data = validation_result  # type: ignore[attr-defined]
        raise exception

    root_cfg: RootConfig = cast_hint(RootConfig, parsed_cfg)
    return config_path, root_cfg, validation_result
