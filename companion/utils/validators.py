"""
Input validators for uploads.

Image uploads arrive as base64 text, optionally wrapped in a data URL
("data:image/png;base64,...."), together with a declared MIME type.
"""

from __future__ import annotations

import base64
import binascii
import re

from companion.assist.errors import UnsupportedInputError
from companion.assist.types import ImagePayload
from companion.config import MAX_IMAGE_BYTES

INVALID_IMAGE_MESSAGE = "Please select a valid image file."

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(;[\w=.+-]+)*,", re.IGNORECASE)


def strip_data_url(data: str) -> str:
    """
    Drop a data URL prefix, keeping only the encoded payload.

    Takes the segment after the first comma; when there is none (or it is
    empty) the input is returned unchanged.
    """
    parts = data.split(",")
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return data


def is_image_mime_type(mime_type: str | None) -> bool:
    return bool(mime_type) and mime_type.lower().startswith("image/")


def validate_image_upload(
    data: str,
    mime_type: str | None,
    max_bytes: int = MAX_IMAGE_BYTES,
) -> ImagePayload:
    """
    Validate an uploaded image and return it as a payload.

    The MIME type may be omitted when ``data`` is a data URL declaring one.

    Raises:
        UnsupportedInputError: Non-image MIME type, undecodable base64, or
            decoded size over ``max_bytes``
    """
    match = DATA_URL_PATTERN.match(data or "")
    if not mime_type and match and match.group("mime"):
        mime_type = match.group("mime")

    if not is_image_mime_type(mime_type):
        raise UnsupportedInputError(INVALID_IMAGE_MESSAGE)

    try:
        raw = base64.b64decode(strip_data_url(data), validate=True)
    except (binascii.Error, ValueError) as e:
        raise UnsupportedInputError(INVALID_IMAGE_MESSAGE) from e

    if not raw:
        raise UnsupportedInputError(INVALID_IMAGE_MESSAGE)

    if len(raw) > max_bytes:
        raise UnsupportedInputError(
            f"Image is too large ({len(raw)} bytes). The limit is {max_bytes} bytes."
        )

    return ImagePayload(data=data, mime_type=mime_type)
