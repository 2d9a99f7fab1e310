"""Content codec and identifier helpers.

Host output items carry raw bytes. Text-like MIME types are decoded as UTF-8
before they reach a MIME processor; binary types (raster images) are handed
over as bytes so the image processor can re-encode them for transport.
"""

import base64
import binascii
import json
import re
import secrets
from typing import Any, Union

from .errors import ContentDecodeError

# Raster image types are binary; SVG is XML text.
_TEXTUAL_IMAGE_MIMES = {"image/svg+xml"}

_DATA_URL_PATTERN = re.compile(r"^data:[^;,]*(;[^,]*)?;base64,", re.IGNORECASE)

_UNSET = object()


def is_binary_mime(mime: str) -> bool:
    """Return True if payloads of this MIME type are not text."""
    return mime.startswith("image/") and mime not in _TEXTUAL_IMAGE_MIMES


def decode_content(data: Union[bytes, bytearray, memoryview, str], mime: str) -> Union[str, bytes]:
    """Decode a host output item payload.

    Args:
        data: Raw payload. Strings are returned unchanged.
        mime: MIME type of the payload.

    Returns:
        Decoded text, or the bytes themselves for binary MIME types.

    Raises:
        ContentDecodeError: If the payload is neither bytes-like nor valid UTF-8.
    """
    if isinstance(data, str):
        return data
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ContentDecodeError(mime, f"unsupported payload type {type(data).__name__}")

    raw = bytes(data)
    if is_binary_mime(mime):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ContentDecodeError(mime, str(e)) from e


def encode_text(value: str) -> bytes:
    """Encode text for a host output item."""
    return value.encode("utf-8")


def encode_base64(data: bytes) -> str:
    """Encode bytes as a transport-safe base64 string."""
    return base64.b64encode(data).decode("ascii")


def decode_base64(value: str) -> bytes:
    """Decode a base64 string or base64 data URL to bytes.

    Whitespace (Jupyter often stores base64 with line breaks) is ignored.

    Raises:
        ValueError: If the value is not valid base64.
    """
    stripped = _DATA_URL_PATTERN.sub("", value.strip(), count=1)
    compact = "".join(stripped.split())
    try:
        return base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 content: {e}") from e


def parse_json_safely(value: str, fallback: Any = _UNSET) -> Any:
    """Parse JSON, returning a fallback instead of raising.

    Args:
        value: JSON text.
        fallback: Value returned when parsing fails. Defaults to the input.

    Returns:
        The parsed value, or the fallback.
    """
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value if fallback is _UNSET else fallback


def generate_block_id() -> str:
    """Generate a random block id: 128 random bits as 32 lowercase hex chars."""
    return secrets.token_hex(16)


def generate_sorting_key(position: int) -> str:
    """Generate the default sorting key for a block at a zero-based position."""
    return f"a{position}"
