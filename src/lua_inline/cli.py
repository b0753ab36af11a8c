# src/lua_inline/cli.py

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest, watch_for_changes
from .bundler import run_all_bundles
from .config import can_run_configless, load_and_validate_config
from .config_resolve import resolve_config
from .constants import DEFAULT_HINT_CUTOFF, DEFAULT_OUT_FILE
from .logs import LEVEL_ORDER, get_logger
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .processing import PROCESSORS
from .types import RootConfig
from .utils import get_sys_version_info, plural, safe_log
from .utils_types import cast_hint

# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])

        hint_lines: list[str] = []
        # Argparse message for bad flags is typically
        # "unrecognized arguments: --minfy ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(
                    arg, known_opts, n=1, cutoff=DEFAULT_HINT_CUTOFF
                )
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        # Print usage + the original error
        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    # --- Positional shorthand arguments ---
    parser.add_argument(
        "positional_entry",
        nargs="?",
        metavar="ENTRY",
        help="Entry Lua file (shorthand for --entry).",
    )
    parser.add_argument(
        "positional_out",
        nargs="?",
        metavar="OUT",
        help="Output file (shorthand for --out).",
    )

    # --- Standard flags ---
    parser.add_argument("-e", "--entry", help="Override the entry Lua file.")
    parser.add_argument(
        "-o", "--out", help=f"Override the output file (default: {DEFAULT_OUT_FILE})."
    )
    parser.add_argument(
        "-m",
        "--minify",
        action="store_true",
        default=None,
        help="Produce dense output when processing the bundle.",
    )

    process = parser.add_mutually_exclusive_group()
    process.add_argument(
        "--process",
        dest="process",
        action="store_true",
        help="Run the processor over the bundle (default).",
    )
    process.add_argument(
        "-n",
        "--no-process",
        dest="process",
        action="store_false",
        help="Write the raw bundle without formatting or minifying it.",
    )
    process.set_defaults(process=None)

    parser.add_argument(
        "--processor",
        choices=sorted(PROCESSORS),
        default=None,
        help="Which processor rewrites the bundle (default: builtin).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve requires and report, without writing anything.",
    )
    parser.add_argument("-c", "--config", help="Path to bundle config file.")

    parser.add_argument(
        "--watch",
        nargs="?",
        type=float,
        const=0.0,
        metavar="SECONDS",
        default=None,
        help=(
            "Rebundle automatically on changes. "
            "Optionally specify interval in seconds"
            " (default: config value, or 1.0)."
        ),
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Run a built-in sanity test to verify tool correctness.",
    )
    return parser


def _normalize_positional_args(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> None:
    """Fold ENTRY / OUT positionals into --entry / --out."""
    logger = get_logger()
    entry_pos: str | None = getattr(args, "positional_entry", None)
    out_pos: str | None = getattr(args, "positional_out", None)

    # `--entry main.lua out.lua` → the lone positional is the output
    if getattr(args, "entry", None) and entry_pos and not out_pos:
        logger.trace("Interpreting positional as OUT since --entry was provided.")
        entry_pos, out_pos = None, entry_pos

    if getattr(args, "entry", None) and entry_pos:
        parser.error("Cannot mix a positional ENTRY with --entry.")
    if getattr(args, "out", None) and out_pos:
        parser.error("Cannot mix a positional OUT with --out.")

    if entry_pos:
        args.entry = entry_pos
    if out_pos:
        args.out = out_pos
    args.positional_entry = None
    args.positional_out = None

    if getattr(args, "watch", None) is not None and args.watch < 0:
        parser.error("--watch interval must not be negative.")


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:  # noqa: C901, PLR0911, PLR0912, PLR0915
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        logger.setLevel(logger.determine_log_level(args=args))
        if args.use_color is not None:
            logger.enable_color = args.use_color
        else:
            logger.enable_color = logger.determine_color_enabled()
        logger.trace("[BOOT] log-level initialized: %s", logger.level_name)

        logger.debug(
            "Runtime: Python %s (%s)\n    %s",
            platform.python_version(),
            platform.python_implementation(),
            sys.version.replace("\n", " "),
        )

        # --- Version flag ---
        if getattr(args, "version", None):
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        # --- Python version check ---
        if get_sys_version_info() < (3, 11):
            logger.error("%s requires Python 3.11 or newer.", PROGRAM_DISPLAY)
            return 1

        # --- Self-test mode ---
        if getattr(args, "selftest", None):
            return 0 if run_selftest() else 1

        # --- Normalize shorthand arguments ---
        _normalize_positional_args(args, parser)

        # --- Load configuration ---
        config_path: Path | None = None
        root_cfg: RootConfig | None = None
        config_result = load_and_validate_config(args)
        if config_result is not None:
            config_path, root_cfg, _validation_summary = config_result

        logger.trace(
            "[CONFIG] log-level re-resolved from config: %s", logger.level_name
        )

        cwd = Path.cwd().resolve()
        config_dir = config_path.parent if config_path else cwd

        # --- Configless early bailout ---
        if root_cfg is None and not can_run_configless(args):
            logger.error(
                "No bundle config found (.%s.jsonc) and no entry file provided.",
                PROGRAM_SCRIPT,
            )
            return 1

        # --- CLI-only mode fallback ---
        if root_cfg is None:
            root_cfg = cast_hint(RootConfig, {"bundles": [{}]})

        # --- Resolve config with args and defaults ---
        resolved_root = resolve_config(root_cfg, args, config_dir, cwd)
        resolved_bundles = resolved_root["bundles"]

        # --- Dry-run notice ---
        dry_run = bool(getattr(args, "dry_run", False))
        if dry_run:
            logger.info("🧪 Dry-run mode: no files will be written.\n")

        # --- Config summary ---
        if config_path:
            logger.info("🔧 Using config: %s", config_path.name)
        else:
            logger.info("🔧 Running in CLI-only mode (no config file).")
        logger.debug("📁 Config root: %s", config_dir)
        logger.debug("📂 Invoked from: %s", cwd)
        logger.info(
            "🔧 Running %d bundle%s\n",
            len(resolved_bundles),
            plural(resolved_bundles),
        )

        # --- Watch or run ---
        if getattr(args, "watch", None) is not None:
            watch_for_changes(
                lambda: run_all_bundles(resolved_bundles, dry_run=dry_run),
                resolved_bundles,
                interval=resolved_root["watch_interval"],
            )
        else:
            run_all_bundles(resolved_bundles, dry_run=dry_run)

    except (OSError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        silent = getattr(e, "silent", False)
        if not silent:
            try:
                logger.error_if_not_debug(str(e))
            except Exception:  # noqa: BLE001
                safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.critical_if_not_debug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safe_log(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    else:
        return 0
