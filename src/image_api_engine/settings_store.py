import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from image_api_engine.config import Settings, get_settings

logger = logging.getLogger(__name__)

SETTING_KEYS = ("github_pat", "use_static_index", "github_api_url", "static_api_url", "download_path")
# Settings that change where the catalog is read from.
SOURCE_KEYS = ("github_pat", "use_static_index", "github_api_url", "static_api_url")

Listener = Callable[[str, Any], None]


class SettingsStore:
    """Persisted user overrides, stored as a flat JSON object.

    With no path the store lives in memory only.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._values: dict[str, Any] = self._load()
        self._listeners: list[Listener] = []

    def _load(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable settings file %s", self.path, exc_info=True)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2, ensure_ascii=False), encoding="utf-8")

    def all(self) -> dict[str, Any]:
        return dict(self._values)

    def get(self, key: str) -> Any:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        self._save()
        for listener in list(self._listeners):
            listener(key, value)

    def bulk_update(self, values: dict[str, Any]) -> dict[str, Any]:
        for key, value in values.items():
            self.set(key, value)
        return self.all()

    def subscribe(self, listener: Listener) -> None:
        """Call listener(key, value) after every change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


@dataclass
class RuntimeConfig:
    static_api_url: str
    github_api_url: str
    use_static_index: bool
    github_pat: str | None
    download_path: Path


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _as_dir_url(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def load_runtime_config(store: SettingsStore, defaults: Settings | None = None) -> RuntimeConfig:
    """Merge stored overrides over environment defaults."""
    env = defaults or get_settings()
    overrides = store.all()

    raw_static = overrides.get("use_static_index")
    use_static = env.use_static_index if raw_static is None else _as_bool(raw_static)

    download_path = overrides.get("download_path") or env.download_path

    return RuntimeConfig(
        static_api_url=_as_dir_url(overrides.get("static_api_url") or env.static_api_url),
        github_api_url=_as_dir_url(overrides.get("github_api_url") or env.github_api_url),
        use_static_index=use_static,
        github_pat=overrides.get("github_pat") or env.github_pat,
        download_path=Path(download_path).expanduser(),
    )
