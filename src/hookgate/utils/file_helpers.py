"""Shared file utilities for hookgate.

Provides common utilities used by config and route storage:
- get_app_dir: OS-appropriate application directory
- compute_checksum / compute_file_checksum: SHA256 content checksums
- set_secure_permissions: Owner-only file/directory permissions
- require_file_exists / load_validated_json: Validated JSON loading
- atomic_write_text: Crash-safe whole-file rewrite
"""

from __future__ import annotations

import hashlib
import json
import os
import sys
import tempfile
from pathlib import Path
from typing import TypeVar

import click
from pydantic import BaseModel, ValidationError

from hookgate.constants import APP_NAME

# Type variable for Pydantic models
T = TypeVar("T", bound=BaseModel)

__all__ = [
    # App directory
    "get_app_dir",
    # Checksums
    "compute_checksum",
    "compute_file_checksum",
    # File operations
    "atomic_write_text",
    "set_secure_permissions",
    "require_file_exists",
    "load_validated_json",
]


def get_app_dir() -> Path:
    """Get the OS-appropriate application directory.

    Uses click.get_app_dir() which returns:
    - macOS: ~/Library/Application Support/hookgate
    - Linux: ~/.config/hookgate (XDG compliant)
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\hookgate

    Returns:
        Path to the application directory.
    """
    return Path(click.get_app_dir(APP_NAME))


def compute_checksum(content: bytes) -> str:
    """Compute SHA256 checksum of raw bytes.

    Returns:
        str: Checksum in format "sha256:<hex_digest>".
    """
    return f"sha256:{hashlib.sha256(content).hexdigest()}"


def compute_file_checksum(file_path: Path) -> str:
    """Compute SHA256 checksum of file content.

    Used by the route watcher to detect edits made outside the gateway.

    Args:
        file_path: Path to the file.

    Returns:
        str: Checksum in format "sha256:<hex_digest>".

    Raises:
        FileNotFoundError: If file doesn't exist.
        OSError: If file cannot be read.
    """
    with open(file_path, "rb") as f:
        return compute_checksum(f.read())


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Set owner-only permissions (0o700 directories, 0o600 files).

    Does nothing on Windows. Permission errors are ignored because some
    filesystems don't support mode changes.
    """
    if sys.platform == "win32":
        return

    try:
        path.chmod(0o700 if is_directory else 0o600)
    except OSError:
        pass


def atomic_write_text(path: Path, content: str, *, prefix: str = ".tmp_") -> str:
    """Replace a file's content atomically.

    Writes to a temp file in the same directory, fsyncs it, then renames it
    over the target. Readers see either the old file or the new one, never a
    partial write. Creates parent directories if they don't exist.

    Args:
        path: File to (over)write.
        content: Complete new file content.
        prefix: Temp file name prefix.

    Returns:
        str: Checksum of the written content ("sha256:<hex>").

    Raises:
        OSError: If the directory cannot be created or the write fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8")

    # Same directory keeps the rename on one filesystem (atomic)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=prefix, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, 0o600)
        os.replace(temp_path, path)

    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

    return compute_checksum(data)


def require_file_exists(
    file_path: Path,
    file_type: str = "file",
    init_hint: bool = True,
) -> None:
    """Raise FileNotFoundError with helpful message if file doesn't exist.

    Args:
        file_path: Path to check.
        file_type: Description for error message (e.g., "configuration", "routes").
        init_hint: If True, suggest running 'hookgate init'.

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if file_path.exists():
        return

    hint = f"\nRun 'hookgate init' to create a {file_type} file." if init_hint else ""
    raise FileNotFoundError(f"{file_type.capitalize()} file not found at {file_path}.{hint}")


def load_validated_json(
    file_path: Path,
    model_class: type[T],
    file_type: str = "file",
    recovery_hint: str | None = None,
) -> T:
    """Load a UTF-8 JSON file and validate it against a Pydantic model.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class to validate against.
        file_type: Description for error messages (e.g., "config", "routes").
        recovery_hint: Optional hint appended to validation errors.

    Returns:
        Validated Pydantic model instance.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If JSON is invalid or validation fails.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except FileNotFoundError:
        raise
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc or '(root)'}: {error['msg']}")

        hint = f"\n\n{recovery_hint}" if recovery_hint else ""
        raise ValueError(
            f"Invalid {file_type} file {file_path}:\n" + "\n".join(errors) + hint
        ) from e
