"""Application-wide constants for hookgate.

Constants that define gateway behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "CONFIG_FILENAME",
    "ENV_PREFIX",
    # Storage defaults
    "DEFAULT_DATA_DIR",
    "DEFAULT_LOG_DIR",
    "DEFAULT_ROUTES_FILENAME",
    "DEFAULT_HISTORY_FILENAME",
    "SYSTEM_LOG_FILENAME",
    # Server
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    # Forwarding
    "FORWARD_PATH_PREFIX",
    "FORWARD_METHODS",
    "BODYLESS_METHODS",
    "DEFAULT_FORWARD_TIMEOUT_SECONDS",
    "DEFAULT_MAX_BODY_BYTES",
    "BAD_GATEWAY_STATUS",
    "CLIENT_CLOSED_REQUEST_STATUS",
    # History
    "DEFAULT_HISTORY_MAX",
    "DEFAULT_HISTORY_LIMIT",
    # Route file watching
    "DEFAULT_WATCH_INTERVAL_SECONDS",
    # CLI
    "CLI_HTTP_TIMEOUT_SECONDS",
]

from platformdirs import user_data_dir, user_log_dir

# ============================================================================
# Application Identity
# ============================================================================

# Application name used for directory names and logger names
APP_NAME: str = "hookgate"

# Config file name inside click.get_app_dir(APP_NAME)
CONFIG_FILENAME: str = "config.json"

# Environment variables overriding config values start with this prefix
ENV_PREFIX: str = "HOOKGATE_"

# ============================================================================
# Storage
# ============================================================================

# Platform-specific paths:
# - macOS: ~/Library/Application Support/hookgate, ~/Library/Logs/hookgate
# - Linux: ~/.local/share/hookgate, ~/.local/state/hookgate/log
DEFAULT_DATA_DIR: str = user_data_dir(APP_NAME)
DEFAULT_LOG_DIR: str = user_log_dir(APP_NAME)

DEFAULT_ROUTES_FILENAME: str = "routes.json"
DEFAULT_HISTORY_FILENAME: str = "history.jsonl"
SYSTEM_LOG_FILENAME: str = "system.jsonl"

# ============================================================================
# Server
# ============================================================================

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 3030

# ============================================================================
# Forwarding
# ============================================================================

FORWARD_PATH_PREFIX: str = "/forward"

# Methods declared on the forward routes; any other method is relayed as well
FORWARD_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

# Methods that never carry a request body downstream
BODYLESS_METHODS: frozenset[str] = frozenset({"GET", "HEAD"})

# Per-phase (connect/read/write/pool) timeout for downstream calls.
# None in config disables it.
DEFAULT_FORWARD_TIMEOUT_SECONDS: float = 30.0

# Largest inbound body accepted for forwarding (25 MiB)
DEFAULT_MAX_BODY_BYTES: int = 25 * 1024 * 1024

BAD_GATEWAY_STATUS: int = 502

# Recorded in history when the caller goes away before a response arrives
CLIENT_CLOSED_REQUEST_STATUS: int = 499

# ============================================================================
# History
# ============================================================================

# In-memory entries kept per route key (oldest evicted first)
DEFAULT_HISTORY_MAX: int = 500

# Entries returned by a history query when no limit is given
DEFAULT_HISTORY_LIMIT: int = 50

# ============================================================================
# Route File Watching
# ============================================================================

# Seconds between checksum polls of the routes file (0 disables the watcher)
DEFAULT_WATCH_INTERVAL_SECONDS: float = 2.0

# ============================================================================
# CLI
# ============================================================================

CLI_HTTP_TIMEOUT_SECONDS: float = 10.0
