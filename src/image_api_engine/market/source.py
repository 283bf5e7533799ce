"""Config source: discovers and fetches API configs from a remote index.

The index is either a static web server with HTML directory listings or
a GitHub repository read through the contents API. Both are laid out as
one directory per category holding `<name>.api.json` files.

Failures are isolated per unit: a bad file or an unreachable category
is logged and left out, never aborting the rest of the catalog.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

from image_api_engine.client import HttpClient
from image_api_engine.errors import ConfigValidationError, EngineError
from image_api_engine.market.cache import ConfigCache
from image_api_engine.parser.base import ApiConfig
from image_api_engine.parser.listing import ListingEntry, parse_directory_listing, parse_github_listing
from image_api_engine.parser.loader import build_config, config_name, is_config_file
from image_api_engine.settings_store import SOURCE_KEYS, RuntimeConfig, SettingsStore, load_runtime_config

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"


class StaticIndexBackend:
    """Reads a static HTML directory index."""

    def __init__(self, client: HttpClient, base_url: str):
        self.client = client
        self.base_url = base_url

    def _category_url(self, category: str) -> str:
        return f"{self.base_url}{quote(category)}/"

    async def list_categories(self) -> list[str]:
        page = await self.client.get_text(self.base_url)
        return [
            entry.name
            for entry in parse_directory_listing(page)
            if entry.type == "dir" and not entry.name.startswith(".")
        ]

    async def list_files(self, category: str) -> list[ListingEntry]:
        category_url = self._category_url(category)
        page = await self.client.get_text(category_url)
        return [
            entry.model_copy(update={"download_url": f"{category_url}{quote(entry.name)}"})
            for entry in parse_directory_listing(page)
            if entry.type == "file"
        ]

    async def fetch_document(self, url: str) -> Any:
        return await self.client.get_json(url)


class GitHubBackend:
    """Reads a GitHub repository through the contents API."""

    def __init__(self, client: HttpClient, api_url: str, token: str | None = None):
        self.client = client
        self.api_url = api_url
        self.token = token

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": GITHUB_ACCEPT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def list_categories(self) -> list[str]:
        data = await self.client.get_json(self.api_url, headers=self.headers)
        return [entry.name for entry in parse_github_listing(data) if entry.type == "dir"]

    async def list_files(self, category: str) -> list[ListingEntry]:
        data = await self.client.get_json(f"{self.api_url}{quote(category)}", headers=self.headers)
        return [entry for entry in parse_github_listing(data) if entry.type == "file" and entry.download_url]

    async def fetch_document(self, url: str) -> Any:
        return await self.client.get_json(url, headers=self.headers)


class ConfigSource:
    """Catalog of API configs with an in-memory cache.

    Every public operation is total: failures are logged and produce
    empty results.
    """

    def __init__(
        self,
        client: HttpClient | None = None,
        store: SettingsStore | None = None,
        cache: ConfigCache | None = None,
    ):
        self.client = client or HttpClient()
        self.store = store or SettingsStore()
        self.cache = cache or ConfigCache()
        self.store.subscribe(self._on_setting_changed)

    def _on_setting_changed(self, key: str, value: Any) -> None:
        if key in SOURCE_KEYS:
            logger.info("Setting %s changed, clearing config cache", key)
            self.invalidate()

    def _backend(self) -> StaticIndexBackend | GitHubBackend:
        runtime: RuntimeConfig = load_runtime_config(self.store)
        if runtime.use_static_index:
            return StaticIndexBackend(self.client, runtime.static_api_url)
        return GitHubBackend(self.client, runtime.github_api_url, runtime.github_pat)

    async def list_categories(self) -> list[str]:
        backend = self._backend()
        try:
            return await backend.list_categories()
        except (EngineError, ValueError) as exc:
            logger.error("Error fetching API categories from %s: %s", type(backend).__name__, exc)
            return []

    async def _load_file(self, backend, entry: ListingEntry, category: str) -> ApiConfig | None:
        try:
            document = await backend.fetch_document(entry.download_url)
            return build_config(document, name=config_name(entry.name), category=category)
        except ConfigValidationError as exc:
            logger.error("Invalid API config for %s: %s", entry.name, "; ".join(exc.errors))
        except (EngineError, ValueError) as exc:
            logger.error("Error processing file %s: %s", entry.name, exc)
        return None

    async def list_by_category(self, category: str) -> list[ApiConfig]:
        """Fetch and validate every config in one category."""
        backend = self._backend()
        try:
            entries = await backend.list_files(category)
        except (EngineError, ValueError) as exc:
            logger.error("Error fetching APIs for category %s: %s", category, exc)
            return []

        files = [entry for entry in entries if is_config_file(entry.name)]
        results = await asyncio.gather(*(self._load_file(backend, entry, category) for entry in files))
        return [config for config in results if config is not None]

    async def get_all(self) -> list[ApiConfig]:
        """Every config of every category, loaded once and cached."""
        cached = self.cache.get()
        if cached is not None:
            return cached

        categories = await self.list_categories()
        per_category = await asyncio.gather(*(self.list_by_category(c) for c in categories))

        configs: list[ApiConfig] = []
        seen: set[str] = set()
        for group in per_category:
            for config in group:
                if config.name in seen:
                    logger.warning("Duplicate API name %s in category %s, keeping the first", config.name, config.category)
                    continue
                seen.add(config.name)
                configs.append(config)

        self.cache.set(configs)
        return list(configs)

    async def get_by_name(self, name: str) -> ApiConfig | None:
        for config in await self.get_all():
            if config.name == name:
                return config
        return None

    def invalidate(self) -> None:
        self.cache.invalidate()

    def close(self) -> None:
        """Stop following settings changes; the store may outlive this source."""
        self.store.unsubscribe(self._on_setting_changed)
