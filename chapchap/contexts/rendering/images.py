"""Image sources: local file paths and base64 data: URLs."""

import base64
import binascii
from pathlib import Path

DATA_URL_PREFIX = "data:image/"


def image_source_available(source: str) -> bool:
    """True if the source is a base64 image data: URL or an existing file."""
    if not source:
        return False
    if source.startswith(DATA_URL_PREFIX):
        return ";base64," in source
    if source.startswith(("http://", "https://")):
        return False
    return Path(source).is_file()


def read_image_bytes(source: str) -> bytes:
    """
    Raw image bytes for a source.

    Raises:
        ValueError: If the source is not a readable image reference
    """
    if source.startswith(DATA_URL_PREFIX):
        _, _, payload = source.partition(";base64,")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 image data: {e}") from e

    path = Path(source)
    if not path.is_file():
        raise ValueError(f"Image not found: {source}")
    return path.read_bytes()
