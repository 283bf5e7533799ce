"""Validation and loading of API config documents.

Remote documents arrive already parsed; local files may be JSON or
YAML (JSON is read through the YAML loader, which accepts both).
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from image_api_engine.errors import ConfigValidationError
from image_api_engine.parser.base import ApiConfig, ApiConfigContent

CONFIG_SUFFIX = ".api.json"


def config_name(file_name: str) -> str:
    """Strip the `.api.json` suffix from a config file name."""
    if file_name.endswith(CONFIG_SUFFIX):
        return file_name[: -len(CONFIG_SUFFIX)]
    return Path(file_name).stem


def is_config_file(file_name: str) -> bool:
    return file_name.endswith(CONFIG_SUFFIX)


def _format_errors(exc: ValidationError) -> list[str]:
    errors = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "<root>"
        errors.append(f"{location}: {err['msg']}")
    return errors


def validate_config(data: Any) -> tuple[bool, list[str]]:
    """Check a parsed document against the config schema.

    Returns (ok, errors); errors is empty when ok is True.
    """
    if not isinstance(data, dict):
        return False, [f"<root>: expected an object, got {type(data).__name__}"]
    try:
        ApiConfigContent.model_validate(data)
    except ValidationError as exc:
        return False, _format_errors(exc)
    return True, []


def build_config(data: Any, name: str, category: str) -> ApiConfig:
    """Validate a parsed document and wrap it as an ApiConfig.

    Raises ConfigValidationError if the document does not match the schema.
    """
    if not isinstance(data, dict):
        raise ConfigValidationError(name, [f"<root>: expected an object, got {type(data).__name__}"])
    try:
        content = ApiConfigContent.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(name, _format_errors(exc)) from exc
    return ApiConfig(name=name, category=category, content=content)


def read_config_document(file_path: Path) -> Any:
    """Read a local JSON or YAML config file into Python data.

    Raises ConfigValidationError if the file is not valid JSON or YAML.
    """
    text = file_path.read_text(encoding="utf-8")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(file_path.name, [f"<root>: {exc}"]) from exc


def load_config_file(file_path: Path, category: str = "local") -> ApiConfig:
    """Load and validate a local config file."""
    data = read_config_document(file_path)
    return build_config(data, name=config_name(file_path.name), category=category)
