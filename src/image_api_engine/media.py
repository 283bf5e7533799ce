"""Image download helpers: turn image references into bytes and files."""

import base64
import binascii
import logging
import mimetypes
import re
import time
from pathlib import Path
from urllib.parse import unquote, urlparse

from image_api_engine.client import HttpClient
from image_api_engine.errors import ResponseParseError

logger = logging.getLogger(__name__)

UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')
DATA_URI = re.compile(r"^data:(?P<mime>[^;,]*)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def _fallback_name(extension: str = ".jpg") -> str:
    return f"image-{int(time.time() * 1000)}{extension}"


def image_file_name(reference: str) -> str:
    """Derive a safe file name for an image reference.

    URLs use the last path segment; data URIs and URLs without one get
    a timestamped name.
    """
    match = DATA_URI.match(reference)
    if match:
        extension = mimetypes.guess_extension(match.group("mime") or "") or ".jpg"
        return _fallback_name(".jpg" if extension == ".jpe" else extension)

    last = unquote(urlparse(reference).path.split("/")[-1])
    name = UNSAFE_CHARS.sub("_", last)
    return name or _fallback_name()


def decode_data_uri(reference: str) -> bytes:
    """Return the payload of a data URI.

    Raises ResponseParseError if the URI is malformed.
    """
    match = DATA_URI.match(reference)
    if not match:
        raise ResponseParseError("not a data URI")
    if not match.group("b64"):
        return unquote(match.group("data")).encode("utf-8")
    try:
        return base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as exc:
        raise ResponseParseError(f"invalid base64 payload: {exc}") from exc


async def fetch_image(client: HttpClient, reference: str) -> bytes:
    """Fetch the bytes behind an image reference (URL or data URI)."""
    if reference.startswith("data:"):
        return decode_data_uri(reference)
    response = await client.request("GET", reference)
    return response.content


def save_image(content: bytes, directory: Path, file_name: str) -> Path:
    """Write image bytes into directory, creating it when missing."""
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / file_name
    file_path.write_bytes(content)
    logger.info("Saved %s (%d bytes)", file_path, len(content))
    return file_path


async def download_image(client: HttpClient, reference: str, directory: Path) -> Path:
    """Fetch an image reference and save it under directory."""
    content = await fetch_image(client, reference)
    return save_image(content, directory, image_file_name(reference))
