"""Response extractor: raw HTTP response -> list of image references.

An image reference is either a URL or a `data:` URI, depending on the
content type declared by the config.
"""

import base64
import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from image_api_engine.engine.path import resolve_flat
from image_api_engine.engine.values import stringify
from image_api_engine.errors import ResponseParseError
from image_api_engine.parser.base import ImageDescriptor

logger = logging.getLogger(__name__)

DEFAULT_BINARY_TYPE = "image/jpeg"
# Base64 payloads are always labelled PNG; the real format is not sniffed.
BASE64_IMAGE_TYPE = "image/png"

TOKEN_SEPARATORS = re.compile(r"[\s,]+")


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ResponseParseError(f"response body is not UTF-8 text: {exc}") from exc


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _extract_binary(headers: Mapping[str, str], content: bytes) -> list[str]:
    mime = (_header(headers, "content-type") or "").split(";")[0].strip() or DEFAULT_BINARY_TYPE
    encoded = base64.b64encode(content).decode("ascii")
    return [f"data:{mime};base64,{encoded}"]


def _extract_base64(descriptor: ImageDescriptor, content: bytes) -> list[str]:
    text = _decode_text(content)
    if descriptor.path:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ResponseParseError(f"expected JSON for path {descriptor.path!r}: {exc}") from exc
        payloads = _as_list(resolve_flat(data, descriptor.path))
    else:
        payloads = [text.strip()]
    return [f"data:{BASE64_IMAGE_TYPE};base64,{item}" for item in payloads if item]


def _extract_urls(descriptor: ImageDescriptor, content: bytes) -> list[Any]:
    text = _decode_text(content)
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("URL response is not JSON, scanning plain text for links")
        return [token for token in TOKEN_SEPARATORS.split(text) if token.startswith("http")]

    if descriptor.path:
        return _as_list(resolve_flat(data, descriptor.path))
    return _as_list(data)


def _extract(descriptor: ImageDescriptor, headers: Mapping[str, str], content: bytes) -> list[Any]:
    if descriptor.content_type == "BINARY":
        return _extract_binary(headers, content)
    if descriptor.content_type == "BASE64":
        return _extract_base64(descriptor, content)
    return _extract_urls(descriptor, content)


def extract_images(descriptor: ImageDescriptor, headers: Mapping[str, str], content: bytes) -> list[str]:
    """Pull image references out of a response.

    Never raises: malformed bodies and unresolvable paths produce an
    empty list and a logged warning.
    """
    try:
        images = _extract(descriptor, headers, content)
    except Exception:
        logger.warning("Failed to extract %s images", descriptor.content_type, exc_info=True)
        return []

    result = [stringify(item) for item in images if item]
    if not result:
        logger.info("No images found in response (content_type=%s, path=%r)", descriptor.content_type, descriptor.path)
    return result
