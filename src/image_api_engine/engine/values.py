"""Value maps: user-chosen parameter values keyed by parameter index.

Parameters are keyed by their position in the config because names
may be empty (positional parameters) or repeated.
"""

import re
from typing import Any

from image_api_engine.errors import ParameterValueError
from image_api_engine.parser.base import (
    ApiConfigContent,
    BooleanParameter,
    EnumParameter,
    IntegerParameter,
    ListParameter,
    Parameter,
    StringParameter,
)

ValueMap = dict[int, Any]

DIGITS = re.compile(r"[0-9]+")
TRUE_WORDS = {"1", "true", "yes", "on", "y"}
FALSE_WORDS = {"0", "false", "no", "off", "n"}


def stringify(value: Any) -> str:
    """Render a scalar the way it appears on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def default_value(param: Parameter) -> Any:
    """The value a parameter starts with before any user input."""
    if isinstance(param, EnumParameter):
        return param.value[0]
    if isinstance(param, ListParameter):
        return list(param.value)
    return param.value


def seed_values(content: ApiConfigContent) -> ValueMap:
    """Create a value map holding every parameter's default."""
    return {idx: default_value(param) for idx, param in enumerate(content.parameters)}


def find_parameter(content: ApiConfigContent, key: str) -> int:
    """Find a parameter index from a CLI key: an index or a parameter name.

    Raises ParameterValueError if nothing matches.
    """
    if DIGITS.fullmatch(key):
        idx = int(key)
        if idx < len(content.parameters):
            return idx
        raise ParameterValueError(f"parameter index {idx} out of range (0-{len(content.parameters) - 1})")
    for idx, param in enumerate(content.parameters):
        if param.name == key:
            return idx
    raise ParameterValueError(f"no parameter named {key!r}")


def coerce_value(param: Parameter, raw: str) -> Any:
    """Convert a text value into the shape the parameter expects.

    Raises ParameterValueError when the text does not fit.
    """
    label = param.name or param.friendly_name or "positional parameter"

    if isinstance(param, IntegerParameter):
        try:
            number = float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ParameterValueError(f"{label}: {raw!r} is not a number") from None
        if param.min_value is not None and number < param.min_value:
            raise ParameterValueError(f"{label}: {number} is below the minimum {param.min_value}")
        if param.max_value is not None and number > param.max_value:
            raise ParameterValueError(f"{label}: {number} is above the maximum {param.max_value}")
        return number

    if isinstance(param, BooleanParameter):
        word = raw.strip().lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
        raise ParameterValueError(f"{label}: {raw!r} is not a boolean")

    if isinstance(param, EnumParameter):
        for choice, choice_label in zip(param.value, param.labels()):
            if raw == str(choice) or raw == choice_label:
                return choice
        allowed = ", ".join(str(v) for v in param.value)
        raise ParameterValueError(f"{label}: {raw!r} is not one of {allowed}")

    if isinstance(param, ListParameter):
        return [item for item in raw.split(param.separator) if item]

    if isinstance(param, StringParameter):
        return raw

    raise ParameterValueError(f"{label}: unsupported parameter type")


def apply_overrides(content: ApiConfigContent, values: ValueMap, overrides: list[tuple[str, str]]) -> ValueMap:
    """Return a copy of values with KEY=VALUE overrides applied."""
    updated = dict(values)
    for key, raw in overrides:
        idx = find_parameter(content, key)
        updated[idx] = coerce_value(content.parameters[idx], raw)
    return updated
