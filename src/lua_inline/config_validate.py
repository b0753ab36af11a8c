# src/lua_inline/config_validate.py


from typing import Any

from .constants import DEFAULT_STRICT_CONFIG
from .processing import PROCESSORS
from .types import BundleConfig, RootConfig
from .utils_schema import (
    SchemaErrorAggregator,
    ValidationSummary,
    collect_msg,
    flush_schema_aggregators,
    validate_typed_dict,
    warn_keys_once,
)
from .utils_types import cast_hint

# --- constants ------------------------------------------------------

DRYRUN_KEYS = {"dry-run", "dry_run", "dryrun", "no-op", "no_op", "noop"}
DRYRUN_MSG = (
    "Ignored config key(s) {keys} {ctx}: this tool has no config option for it. "
    "Use the CLI flag '--dry-run' instead."
)

ROOT_ONLY_KEYS = {"watch_interval"}
ROOT_ONLY_MSG = "Ignored {keys} {ctx}: these options only apply at the root level."


def _check_processor(
    cfg: dict[str, Any], context: str, summary: ValidationSummary
) -> bool:
    name = cfg.get("processor")
    if name is None or not isinstance(name, str) or name in PROCESSORS:
        return True
    collect_msg(
        True,
        f"{context}: unknown processor `{name}`"
        f" (expected one of: {', '.join(sorted(PROCESSORS))})",
        summary,
        is_error=True,
    )
    return False


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    parsed_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Validate normalized config.

    strict=True  →  warnings become fatal, but still listed separately
    strict=False →  warnings remain non-fatal
    strict=None  →  use the config's own `strict_config` keys

    The `strict_config` key in the root config (and optionally in each bundle)
    controls strictness. CLI flags are not considered.

    Returns a ValidationSummary object.
    """
    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=DEFAULT_STRICT_CONFIG if strict is None else strict,
    )
    agg: SchemaErrorAggregator = {}

    def set_valid_and_return() -> ValidationSummary:
        flush_schema_aggregators(summary, agg)
        summary.valid = not summary.errors and not summary.strict_warnings
        return summary

    # --- Determine strictness from root config ---
    root_strict: bool = summary.strict
    strict_from_root: Any = parsed_cfg.get("strict_config")
    if strict is None and isinstance(strict_from_root, bool):
        root_strict = strict_from_root
    summary.strict = root_strict
    strict_config: bool = root_strict

    # --- Validate root-level keys ---
    root_ctx = "in top-level configuration"
    dry_root = warn_keys_once(
        strict_config,
        "dry-run",
        DRYRUN_KEYS,
        parsed_cfg,
        root_ctx,
        DRYRUN_MSG,
        agg=agg,
    )
    validate_typed_dict(
        strict_config,
        root_ctx,
        parsed_cfg,
        RootConfig,
        summary=summary,
        skip=dry_root | {"bundles"},
    )
    _check_processor(parsed_cfg, root_ctx, summary)

    # --- Validate bundles structure ---
    bundles_raw: Any = parsed_cfg.get("bundles", [])
    if not isinstance(bundles_raw, list):
        collect_msg(
            True, "`bundles` must be a list of bundles.", summary, is_error=True
        )
        return set_valid_and_return()

    if not bundles_raw:
        collect_msg(True, "No bundles defined.", summary, is_error=True)
        return set_valid_and_return()

    for i, b in enumerate(cast_hint(list[Any], bundles_raw)):
        context = f"in bundle #{i + 1}"
        if not isinstance(b, dict):
            collect_msg(
                True,
                f"Bundle #{i + 1} must be an object"
                " with named keys (not a list or value)",
                summary,
                is_error=True,
            )
            continue
        b = cast_hint(dict[str, Any], b)

        # inherit root strictness unless overridden below
        strict_config = root_strict
        strict_from_bundle: Any = b.get("strict_config")
        if strict is None and isinstance(strict_from_bundle, bool):
            strict_config = strict_from_bundle

        found_dry = warn_keys_once(
            strict_config, "dry-run", DRYRUN_KEYS, b, context, DRYRUN_MSG, agg=agg
        )
        found_root_only = warn_keys_once(
            strict_config,
            "root-only",
            ROOT_ONLY_KEYS,
            b,
            context,
            ROOT_ONLY_MSG,
            agg=agg,
        )

        validate_typed_dict(
            strict_config,
            context,
            b,
            BundleConfig,
            summary=summary,
            skip=found_dry | found_root_only,
        )
        _check_processor(b, context, summary)

    # --- finalize result ---
    return set_valid_and_return()
