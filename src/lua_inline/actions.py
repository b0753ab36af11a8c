# src/lua_inline/actions.py
import re
import shutil
import subprocess
import tempfile
import time
from collections.abc import Callable
from contextlib import suppress
from importlib import metadata as importlib_metadata
from pathlib import Path

from .bundler import run_bundle
from .constants import DEFAULT_WATCH_INTERVAL
from .logs import get_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .resolver import collect_dependency_files
from .types import BundleConfigResolved
from .utils_types import make_pathresolved


def _collect_watched_files(resolved_bundles: list[BundleConfigResolved]) -> list[Path]:
    """Entry files plus every local module they (transitively) require."""
    logger = get_logger()
    files: set[Path] = set()

    for b in resolved_bundles:
        entry = b["entry"]["path"]
        if not entry.is_file():
            continue
        try:
            files.update(collect_dependency_files(entry))
        except OSError as e:
            # a module vanished mid-scan; pick it up next tick
            logger.debug("Skipping unreadable dependency of %s: %s", entry, e)
            files.add(entry)

    return sorted(files)


def watch_for_changes(
    rebuild_func: Callable[[], None],
    resolved_bundles: list[BundleConfigResolved],
    interval: float = DEFAULT_WATCH_INTERVAL,
) -> None:
    """Poll file modification times and rebuild when changes are detected.

    - Watches each entry file and the local modules reachable from it.
    - Re-walks the require graph every loop to pick up new modules.
    - Ignores every bundle's own output file.
    Stops on KeyboardInterrupt.
    """
    logger = get_logger()
    logger.info(
        "👀 Watching for changes (interval=%.2fs)... Press Ctrl+C to stop.", interval
    )

    out_files: set[Path] = {b["out"]["path"].resolve() for b in resolved_bundles}

    watched = _collect_watched_files(resolved_bundles)
    logger.trace("[WATCH] initial files: %s", [str(f) for f in watched])
    mtimes: dict[Path, float] = {f: f.stat().st_mtime for f in watched if f.exists()}

    rebuild_func()  # initial build

    try:
        while True:
            time.sleep(interval)

            # 🔁 re-walk every tick so new/removed modules are tracked
            watched = _collect_watched_files(resolved_bundles)
            tracked = set(watched) | set(mtimes)

            changed: list[Path] = []
            for f in sorted(tracked):
                if f in out_files:
                    continue
                old_m = mtimes.get(f)
                if not f.exists():
                    if old_m is not None:
                        changed.append(f)
                        mtimes.pop(f, None)
                    continue
                new_m = f.stat().st_mtime
                if old_m is None or new_m > old_m:
                    changed.append(f)
                    mtimes[f] = new_m

            if changed:
                logger.info(
                    "\n🔁 Detected %d modified file(s). Rebundling...", len(changed)
                )
                logger.debug("[WATCH] changed: %s", [str(f) for f in changed])
                try:
                    rebuild_func()
                except (OSError, ValueError, RuntimeError) as e:
                    # keep watching; the next save may fix it
                    logger.error_if_not_debug("Rebundle failed: %s", e)
                # refresh timestamps after rebuild
                watched = _collect_watched_files(resolved_bundles)
                mtimes = {f: f.stat().st_mtime for f in watched if f.exists()}
    except KeyboardInterrupt:
        logger.info("\n🛑 Watch stopped.")


def get_metadata() -> Metadata:
    """Return (version, commit) tuple for this tool.

    - Source checkout → read pyproject.toml + git
    - Installed package → read the distribution metadata
    """
    logger = get_logger()
    version = "unknown"
    commit = "unknown"

    # Try pyproject.toml for version
    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace("trying to read metadata from %s", pyproject)
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)

    if version == "unknown":
        with suppress(importlib_metadata.PackageNotFoundError):
            version = importlib_metadata.version(PROGRAM_SCRIPT)

    # Try git for commit
    with suppress(OSError, subprocess.CalledProcessError):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip() or "unknown"

    logger.trace("got package version %s with commit %s", version, commit)
    return Metadata(version, commit)


SELFTEST_FILES = {
    "main.lua": (
        'local name = "world"\n'
        'local greet = require("greet.lua", name)\n'
        "return greet\n"
    ),
    "greet.lua": (
        "-- builds the greeting\n"
        'local fmt = require"fmt.lua"\n'
        "return fmt(name)\n"
    ),
    "fmt.lua": 'return function(name) return "hello " .. name end\n',
}


def run_selftest() -> bool:
    """Bundle a tiny three-file project and check the result."""
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    tmp_dir: Path | None = None
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
        for name, text in SELFTEST_FILES.items():
            (tmp_dir / name).write_text(text, encoding="utf-8")
        out = tmp_dir / "out" / "bundled.lua"

        bundle_cfg: BundleConfigResolved = {
            "entry": make_pathresolved("main.lua", tmp_dir, "code"),
            "out": make_pathresolved(out, tmp_dir, "code"),
            "minify": False,
            "process": True,
            "processor": "builtin",
            "log_level": "info",
            "dry_run": False,
            "__meta__": {"cli_root": tmp_dir, "config_root": tmp_dir},
        }

        logger.debug("[SELFTEST] using temp dir: %s", tmp_dir)

        for dry_run in (True, False):
            bundle_cfg["dry_run"] = dry_run
            run_bundle(bundle_cfg)

        text = out.read_text(encoding="utf-8") if out.exists() else ""
        if (
            "require" not in text
            and "(function(name)" in text
            and '"hello " .. name' in text
            and "--" not in text
        ):
            logger.info(
                "✅ Self-test passed — %s is working correctly.", PROGRAM_DISPLAY
            )
            return True

        logger.error("Self-test failed: output file not found or invalid.")
        return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except FileNotFoundError:
        logger.error("Self-test failed: missing file or directory.")  # noqa: TRY400
        return False
    except Exception:
        # Unexpected bug: show traceback and ask for a bug report
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False

    finally:
        if tmp_dir and tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
