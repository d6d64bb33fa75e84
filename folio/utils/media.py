import base64
import binascii
import re
from typing import Optional, Tuple

DATA_URI = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.DOTALL)

EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/avif": "avif",
}


def is_data_uri(value: Optional[str]) -> bool:
    return bool(value) and value.startswith("data:")


def decode_data_uri(value: str) -> Tuple[str, bytes]:
    """
    Splits a base64 image data URI into (mime type, raw bytes).
    Raises ValueError when the URI is not a decodable base64 image.
    """
    match = DATA_URI.match(value)
    if not match:
        raise ValueError("must be a base64 encoded data:image URI")
    mime = match.group(1).lower()
    payload = re.sub(r"\s+", "", match.group(2))
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("data URI payload is not valid base64")
    if not raw:
        raise ValueError("data URI payload is empty")
    return mime, raw


def extension_for(mime: str) -> str:
    return EXTENSIONS.get(mime, "bin")
