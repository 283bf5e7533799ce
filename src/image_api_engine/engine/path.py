"""Path expressions for locating image data inside a JSON response.

A path is a dot-separated list of segments. Each segment is a field
name optionally followed by bracketed index expressions:

    data.images[0].url        -> one value
    data.images[*].url        -> one value per element (fan-out)
    data.images[1:3]          -> slice with Python semantics
    data.items[*].urls[*]     -> nested fan-out

Resolution never raises: any mismatch between the path and the
document yields None. Wildcards produce nested lists which callers
flatten with `flatten` (or use `resolve_flat`).
"""

import re
from typing import Any

INDEX_PATTERN = re.compile(r"\[(.*?)\]")
DIGITS = re.compile(r"[0-9]+")

# A parsed step is either ("key", name) or ("index", expression).
Step = tuple[str, str]


def parse_path(path: str) -> list[Step]:
    """Split a path expression into key and index steps."""
    steps: list[Step] = []
    for segment in path.split("."):
        if not segment.strip():
            continue
        matches = list(INDEX_PATTERN.finditer(segment))
        if not matches:
            steps.append(("key", segment.strip()))
            continue
        field = segment[: matches[0].start()].strip()
        if field:
            steps.append(("key", field))
        for match in matches:
            steps.append(("index", match.group(1).strip()))
    return steps


def _descend(value: Any, key: str) -> tuple[bool, Any]:
    if isinstance(value, dict):
        if key in value:
            return True, value[key]
        return False, None
    if isinstance(value, list) and DIGITS.fullmatch(key):
        idx = int(key)
        if idx < len(value):
            return True, value[idx]
    return False, None


def _slice(value: list, expr: str) -> list | None:
    parts = expr.split(":")
    if len(parts) > 3:
        return None
    try:
        bounds = [int(p) if p.strip() else None for p in parts]
    except ValueError:
        return None
    bounds += [None] * (3 - len(bounds))
    start, stop, step = bounds
    if step == 0:
        return None
    return value[start:stop:step]


def _index(value: list, expr: str) -> tuple[bool, Any]:
    try:
        idx = int(expr)
    except ValueError:
        return False, None
    if idx < 0:
        idx += len(value)
    if 0 <= idx < len(value):
        return True, value[idx]
    return False, None


def _resolve(value: Any, steps: list[Step]) -> Any:
    for pos, (kind, expr) in enumerate(steps):
        if value is None:
            return None

        if kind == "key":
            found, value = _descend(value, expr)
            if not found:
                return None
            continue

        if not isinstance(value, list):
            return None
        if expr == "*":
            rest = steps[pos + 1:]
            return [_resolve(item, rest) for item in value]
        if ":" in expr:
            value = _slice(value, expr)
            if value is None:
                return None
        else:
            found, value = _index(value, expr)
            if not found:
                return None
    return value


def resolve(document: Any, path: str) -> Any:
    """Evaluate a path expression against a parsed JSON document.

    Returns the located value, a (possibly nested) list for wildcard
    paths, or None when the path does not match the document.
    """
    return _resolve(document, parse_path(path))


def flatten(value: Any) -> Any:
    """Flatten nested lists to any depth; non-list values pass through."""
    if not isinstance(value, list):
        return value
    flat = []
    for item in value:
        if isinstance(item, list):
            flat.extend(flatten(item))
        else:
            flat.append(item)
    return flat


def resolve_flat(document: Any, path: str) -> Any:
    return flatten(resolve(document, path))
