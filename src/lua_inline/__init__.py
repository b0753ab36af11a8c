# src/lua_inline/__init__.py

"""Lua Inline — bundle a Lua program and its require()d modules into one file.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or plugins.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - bundle()            → Inline one entry file into one output file
    - resolve_requires()  → Walk the require graph of an entry file
    - resolve_config()    → Merge CLI args with config files
    - get_metadata()      → Retrieve version / commit info
"""

from .actions import (
    get_metadata,
    run_selftest,
    watch_for_changes,
)
from .bundler import (
    bundle,
    run_all_bundles,
    run_bundle,
)
from .cli import (
    main,
)
from .comments import iter_segments, strip_comments
from .config import (
    find_config,
    load_and_validate_config,
    load_config,
    parse_config,
)
from .config_resolve import resolve_bundle_config, resolve_config
from .config_validate import validate_config
from .constants import (
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MINIFY,
    DEFAULT_OUT_FILE,
    DEFAULT_PROCESS,
    DEFAULT_PROCESSOR,
    DEFAULT_STRICT_CONFIG,
    DEFAULT_WATCH_INTERVAL,
    WRITE_CHUNK_SIZE,
)
from .file_io import read_source, write_in_chunks
from .logs import (
    LEVEL_ORDER,
    AppLogger,
    get_logger,
)
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .processing import (
    PROCESSORS,
    builtin_processor,
    darklua_processor,
    format_lua,
    process_code,
    run_with_stack,
)
from .resolver import (
    CircularRequireError,
    collect_dependency_files,
    resolve_requires,
    scan_file,
)
from .scanner import REQUIRE_PATTERNS, CallSite, scan_requires
from .substitute import build_closure, long_string_delimiters, replace_requires
from .types import (
    BundleConfig,
    BundleConfigResolved,
    MetaBundleConfigResolved,
    OriginType,
    PathResolved,
    ProcessorName,
    RootConfig,
    RootConfigResolved,
)
from .utils import load_jsonc
from .utils_types import (
    make_pathresolved,
    safe_isinstance,
    schema_from_typeddict,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",  # version info
    "main",
    "run_selftest",
    "watch_for_changes",
    #
    # --- Bundling Engine ---
    "CallSite",
    "CircularRequireError",
    "REQUIRE_PATTERNS",
    "build_closure",
    "bundle",
    "collect_dependency_files",
    "iter_segments",
    "long_string_delimiters",
    "read_source",
    "replace_requires",
    "resolve_requires",
    "run_all_bundles",
    "run_bundle",
    "scan_file",
    "scan_requires",
    "strip_comments",
    "write_in_chunks",
    #
    # --- Processing ---
    "PROCESSORS",
    "builtin_processor",
    "darklua_processor",
    "format_lua",
    "process_code",
    "run_with_stack",
    #
    # --- Config Handling ---
    "find_config",
    "load_and_validate_config",
    "load_config",
    "parse_config",
    "resolve_bundle_config",
    "resolve_config",
    "validate_config",
    #
    # --- Constants / Metadata ---
    "DEFAULT_ENV_LOG_LEVEL",
    "DEFAULT_ENV_WATCH_INTERVAL",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_MINIFY",
    "DEFAULT_OUT_FILE",
    "DEFAULT_PROCESS",
    "DEFAULT_PROCESSOR",
    "DEFAULT_STRICT_CONFIG",
    "DEFAULT_WATCH_INTERVAL",
    "WRITE_CHUNK_SIZE",
    "Metadata",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    #
    # --- utils ---
    "AppLogger",
    "LEVEL_ORDER",
    "get_logger",
    "load_jsonc",
    "make_pathresolved",
    "safe_isinstance",
    "schema_from_typeddict",
    #
    # --- Types ---
    "BundleConfig",
    "BundleConfigResolved",
    "MetaBundleConfigResolved",
    "OriginType",
    "PathResolved",
    "ProcessorName",
    "RootConfig",
    "RootConfigResolved",
]
