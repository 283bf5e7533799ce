"""Directory listing parsers for the two catalog backends.

Static index servers return HTML pages whose anchors carry a `folder`
or `file` class; the GitHub contents API returns a JSON array.
"""

import html
import re
from typing import Any, Literal

from pydantic import BaseModel

ANCHOR_PATTERN = re.compile(r'<a href=.*? class="([^"]+)".*?>(.+?)</a>')


class ListingEntry(BaseModel):
    """One entry of a directory listing."""

    name: str
    type: Literal["dir", "file"]
    download_url: str | None = None


def parse_directory_listing(page: str) -> list[ListingEntry]:
    """Parse a static index HTML page into listing entries.

    Anchors whose class contains neither `folder` nor `file` are ignored.
    """
    entries = []
    for match in ANCHOR_PATTERN.finditer(page):
        classes, name = match.group(1), html.unescape(match.group(2)).strip()
        if name.endswith("/"):
            name = name[:-1]
        if not name:
            continue
        if "folder" in classes:
            entries.append(ListingEntry(name=name, type="dir"))
        elif "file" in classes:
            entries.append(ListingEntry(name=name, type="file"))
    return entries


def parse_github_listing(data: Any) -> list[ListingEntry]:
    """Parse a GitHub contents API response into listing entries.

    Symlinks and submodules are skipped.
    """
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array listing, got {type(data).__name__}")

    entries = []
    for item in data:
        if not isinstance(item, dict) or item.get("type") not in ("dir", "file"):
            continue
        if not isinstance(item.get("name"), str):
            continue
        entries.append(
            ListingEntry(
                name=item["name"],
                type=item["type"],
                download_url=item.get("download_url"),
            )
        )
    return entries
