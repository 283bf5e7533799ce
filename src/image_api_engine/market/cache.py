"""In-memory cache of the full config catalog."""

from image_api_engine.parser.base import ApiConfig


class ConfigCache:
    """Holds the last loaded catalog until explicitly invalidated."""

    def __init__(self):
        self._configs: list[ApiConfig] | None = None

    def get(self) -> list[ApiConfig] | None:
        return list(self._configs) if self._configs is not None else None

    def set(self, configs: list[ApiConfig]) -> None:
        self._configs = list(configs)

    def invalidate(self) -> None:
        self._configs = None

    @property
    def is_loaded(self) -> bool:
        return self._configs is not None
