"""Transport codec for UI definitions documents.

Documents are stored as gzip-compressed JSON rendered as base64 text.
The REST API decodes one base64 layer of a ``Body`` field on write, so
uploads carry the base64 text base64-encoded a second time. On read the
platform returns the single-layer text, which ``decode`` strips and
decompresses. Content still carrying both layers (never sent through the
platform) is accepted as well.
"""

import base64
import binascii
import gzip
import logging
import zlib
from typing import Union

from .exceptions import VeloceDecodeError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def _b64decode(data: bytes) -> bytes:
    try:
        return base64.b64decode(b"".join(data.split()), validate=True)
    except binascii.Error as e:
        raise VeloceDecodeError(f"Invalid base64 content: {e}") from e


def encode(plain: Union[str, bytes]) -> str:
    """Encode plain JSON for upload.

    Args:
        plain: JSON text

    Returns:
        Wire text: base64(base64(gzip(plain)))
    """
    if isinstance(plain, str):
        plain = plain.encode("utf-8")
    once = base64.b64encode(gzip.compress(plain))
    return base64.b64encode(once).decode("ascii")


def decode(wire: Union[str, bytes]) -> bytes:
    """Decode a downloaded document body into plain JSON bytes.

    Args:
        wire: Body as returned by the platform (one base64 layer), or the
            unmodified output of ``encode``

    Returns:
        Decompressed JSON bytes

    Raises:
        VeloceDecodeError: If the content is not valid base64/gzip
    """
    if isinstance(wire, str):
        wire = wire.encode("ascii", errors="replace")
    if not wire.strip():
        raise VeloceDecodeError("Empty document body")

    compressed = _b64decode(wire)
    if not compressed.startswith(GZIP_MAGIC):
        logger.debug("Body still carries the transport layer, stripping it")
        compressed = _b64decode(compressed)

    try:
        return gzip.decompress(compressed)
    except (OSError, EOFError, zlib.error) as e:
        raise VeloceDecodeError(f"Invalid compressed content: {e}") from e
