from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATIC_API_URL = "https://acgapi.sr-studio.cn/"
DEFAULT_GITHUB_API_URL = "https://api.github.com/repos/IntelliMarkets/Wallpaper_API_Index/contents/"


class Settings(BaseSettings):
    """Default configuration parsed from environment variables.

    Values saved through the settings store override these at runtime.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="IMAGE_API_")

    static_api_url: str = Field(DEFAULT_STATIC_API_URL, description="Static directory-listing index of API configs.")
    github_api_url: str = Field(DEFAULT_GITHUB_API_URL, description="GitHub contents API URL of the config index.")
    use_static_index: bool = Field(True, description="Read the catalog from the static index instead of GitHub.")
    github_pat: str | None = Field(None, description="GitHub personal access token to raise rate limits.")
    download_path: Path = Field(Path("~/Downloads"), description="Directory for downloaded images.")
    request_timeout: float = Field(30.0, gt=0, description="Timeout in seconds for every HTTP request.")
    settings_file: Path = Field(
        Path("~/.config/image-api-engine/settings.json"),
        description="JSON file holding settings saved from the command line.",
    )

    @field_validator("download_path", "settings_file", mode="after")
    @classmethod
    def expand_path(cls, value: Path) -> Path:
        """Expand user and environment variables in paths."""
        return value.expanduser()

    @field_validator("github_pat", mode="before")
    @classmethod
    def normalize_token(cls, value: str | None) -> str | None:
        """Interpret an empty token as no token."""
        if value in (None, ""):
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance to avoid reparsing the environment."""
    return Settings()
