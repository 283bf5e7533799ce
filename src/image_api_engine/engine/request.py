"""Request builder: config + value map -> concrete HTTP request.

GET/HEAD requests carry positional parameters as URL path segments and
named parameters in the query string. Every other method sends named
parameters as a JSON body.
"""

import json
from typing import Any
from urllib.parse import urlencode

from pydantic import BaseModel

from image_api_engine.engine.values import ValueMap, stringify
from image_api_engine.parser.base import DEFAULT_SPLIT_STR, ApiConfigContent, Parameter

QUERY_METHODS = ("GET", "HEAD")


class PreparedRequest(BaseModel):
    """A request description ready to hand to the HTTP transport."""

    url: str
    method: str
    body: str | None = None
    headers: dict[str, str] = {}


def _join(param: Parameter, value: Any) -> str:
    """Format a named parameter value; lists use the parameter's split_str."""
    if isinstance(value, (list, tuple)):
        separator = getattr(param, "split_str", None) or DEFAULT_SPLIT_STR
        return separator.join(stringify(item) for item in value)
    return stringify(value)


def _path_segment(value: Any) -> str:
    """Format a positional value; lists are always comma-joined."""
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return stringify(value)


def _strip_link(link: str) -> str:
    if link.endswith("/"):
        link = link[:-1]
    if link.endswith("?"):
        link = link[:-1]
    return link


def build_url(content: ApiConfigContent, values: ValueMap) -> str:
    """Build the URL of a query-style request."""
    url = _strip_link(content.link)
    path_segments: list[str] = []
    query: dict[str, str] = {}

    for idx, param in enumerate(content.parameters):
        value = values.get(idx)
        if value is None:
            continue
        if param.is_positional:
            path_segments.append(_path_segment(value))
        else:
            query[param.name] = _join(param, value)

    if path_segments:
        url += "/" + "/".join(path_segments)
    if query:
        url += "?" + urlencode(query)
    return url


def build_body(content: ApiConfigContent, values: ValueMap) -> dict[str, Any]:
    """Build the JSON payload of a body-style request.

    Positional parameters have no place in a body and are left out.
    """
    payload = {}
    for idx, param in enumerate(content.parameters):
        if param.is_positional or idx not in values:
            continue
        payload[param.name] = values[idx]
    return payload


def build_request(content: ApiConfigContent, values: ValueMap) -> PreparedRequest:
    """Turn a config and its parameter values into a request description."""
    method = content.method
    if method in QUERY_METHODS:
        return PreparedRequest(url=build_url(content, values), method=method)

    body = json.dumps(build_body(content, values), ensure_ascii=False)
    return PreparedRequest(
        url=content.link,
        method=method,
        body=body,
        headers={"Content-Type": "application/json"},
    )
