# src/lua_inline/bundler.py
"""The bundling pipeline: resolve → substitute → write → process."""

import time
from pathlib import Path

from .constants import DEFAULT_PROCESSOR
from .file_io import write_in_chunks
from .logs import get_logger
from .processing import process_code
from .resolver import resolve_requires
from .substitute import replace_requires
from .types import BundleConfigResolved
from .utils import format_elapsed, plural


def bundle(
    entry_path: Path | str,
    output_path: Path | str,
    minify: bool = False,
    skip_processing: bool = False,
    *,
    processor: str = DEFAULT_PROCESSOR,
) -> Path:
    """Inline every require reachable from `entry_path` into `output_path`.

    With `skip_processing`, the written bundle is final; otherwise the
    chosen processor rewrites it (dense when `minify`, readable otherwise).
    Any error aborts the whole bundle and leaves no partial output.
    """
    logger = get_logger()
    entry = Path(entry_path)
    out = Path(output_path)

    start = time.perf_counter()
    calls = resolve_requires(entry)
    logger.debug("Found %d require call%s under %s", len(calls), plural(calls), entry)
    bundled = replace_requires(entry, calls)
    write_in_chunks(out, bundled)
    logger.info(
        "📦 Bundled %s in %s", entry, format_elapsed(time.perf_counter() - start)
    )

    if skip_processing:
        return out

    start = time.perf_counter()
    process_code(out, minify=minify, processor=processor)
    logger.info(
        "✨ Processed %s in %s", out, format_elapsed(time.perf_counter() - start)
    )
    return out


def _report_dry_run(entry: Path) -> None:
    logger = get_logger()
    calls = resolve_requires(entry)
    logger.info("🧪 (dry-run) %s: %d require call%s", entry, len(calls), plural(calls))
    for i, site in enumerate(calls, 1):
        extra = f" (args: {site.forwarded_args})" if site.forwarded_args else ""
        logger.info("   %02d. %s%s", i, site.module_path, extra)


def run_bundle(bundle_cfg: BundleConfigResolved) -> None:
    """Execute a single bundle task using a fully resolved config."""
    logger = get_logger()
    entry = bundle_cfg["entry"]["path"]
    out = bundle_cfg["out"]["path"]
    logger.trace("[RUN_BUNDLE] entry=%s, out=%s", entry, out)

    if bundle_cfg.get("dry_run", False):
        _report_dry_run(entry)
        logger.info("🧪 (dry-run) Would write: %s", out)
        return

    bundle(
        entry,
        out,
        bundle_cfg["minify"],
        not bundle_cfg["process"],
        processor=bundle_cfg["processor"],
    )
    logger.info("✅ Bundle completed → %s\n", out)


def run_all_bundles(
    resolved_bundles: list[BundleConfigResolved],
    *,
    dry_run: bool,
) -> None:
    logger = get_logger()
    logger.trace("[run_all_bundles] Resolved bundles: %s", resolved_bundles)

    for i, bundle_cfg in enumerate(resolved_bundles, 1):
        bundle_cfg["dry_run"] = dry_run
        with logger.use_level(bundle_cfg.get("log_level")):
            logger.info("▶️  Bundle %d/%d", i, len(resolved_bundles))
            run_bundle(bundle_cfg)

    logger.info("🎉 All bundles complete.")
