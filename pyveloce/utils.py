"""Utility functions for PyVeloce."""

import base64
import json
from pathlib import Path
from typing import Any, Union

# =============================================================================
# Constants
# =============================================================================

METADATA_FILE = "metadata.json"

# Number of records processed concurrently
DEFAULT_MAX_WORKERS: int = 8


# =============================================================================
# Base64 helpers for embedded sources
# =============================================================================


def decode_blob(value: str) -> bytes:
    """Decode a base64 blob to its raw bytes.

    Raises:
        binascii.Error: If the value is not valid base64
    """
    return base64.b64decode(value)


def encode_blob(data: bytes) -> str:
    """Encode raw bytes as a base64 blob."""
    return base64.b64encode(data).decode("ascii")


def from_base64(value: str) -> str:
    """Decode a base64 string holding UTF-8 text.

    Examples:
        >>> from_base64("aGVsbG8=")
        'hello'
    """
    return decode_blob(value).decode("utf-8")


def to_base64(value: str) -> str:
    """Encode UTF-8 text as a base64 string.

    Examples:
        >>> to_base64("hello")
        'aGVsbG8='
    """
    return encode_blob(value.encode("utf-8"))


# =============================================================================
# Filesystem helpers
# =============================================================================


def dump_json(data: Any) -> str:
    """Serialize data as indented JSON the way files are stored on disk."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_file_safe(directory: Path, file_name: str, content: Union[str, bytes]) -> Path:
    """Write a file, creating its directory first.

    Args:
        directory: Target directory (created if absent)
        file_name: File name inside the directory
        content: Text or bytes; existing files are truncated

    Returns:
        Path of the written file
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / file_name
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def read_json(path: Path) -> Any:
    """Read a JSON file."""
    return json.loads(path.read_text(encoding="utf-8"))
