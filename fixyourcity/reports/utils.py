"""
Utility helpers for reports: identifiers and embedded image data.
"""

import base64
import binascii
import mimetypes
import secrets
import string
import time
from typing import Optional, Tuple

from fixyourcity.reports.exceptions import ImageReadError

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_report_id() -> str:
    """Generate a report ID: report_{epoch ms}_{7 random base36 chars}."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"report_{millis}_{suffix}"


def guess_media_type(filename: Optional[str] = None, content_type: Optional[str] = None) -> str:
    if content_type:
        return content_type
    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed
    return "application/octet-stream"


async def read_image_as_data_uri(photo) -> str:
    """Read an uploaded photo and return it as a base64 data URI."""
    try:
        content = await photo.read()
    except (OSError, ValueError) as e:
        raise ImageReadError() from e

    media_type = guess_media_type(
        getattr(photo, "filename", None), getattr(photo, "content_type", None)
    )
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Split a base64 data URI into (media type, raw bytes)."""
    if not data_uri.startswith("data:") or "," not in data_uri:
        raise ValueError("Not a data URI")
    header, payload = data_uri[5:].split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URIs are supported")
    media_type = header[: -len(";base64")] or "text/plain"
    try:
        return media_type, base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
