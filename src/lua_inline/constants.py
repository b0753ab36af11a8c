# src/lua_inline/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_WATCH_INTERVAL: str = "WATCH_INTERVAL"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_OUT_FILE: str = "bundled.lua"
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_MINIFY: bool = False
DEFAULT_PROCESS: bool = True
DEFAULT_PROCESSOR: str = "builtin"
DEFAULT_WATCH_INTERVAL: float = 1.0  # seconds

# --- validation ---
DEFAULT_HINT_CUTOFF: float = 0.6

# --- bundling ---
WRITE_CHUNK_SIZE: int = 1024 * 1024  # bytes per write
INDENT_UNIT: str = "    "

# --- processing ---
PROCESS_STACK_SIZE: int = 32 * 1024 * 1024  # bytes
PROCESS_RECURSION_LIMIT: int = 100_000
