from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode
from typing import Annotated, List, Union
from pathlib import Path
import json


SETTINGS_FILE = Path(__file__).parent.parent.parent / "settings.json"


def load_settings_from_file() -> dict:
    """Load settings from JSON file if exists."""
    if SETTINGS_FILE.exists():
        try:
            with open(SETTINGS_FILE) as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            pass
    return {}


def save_settings_to_file(settings: dict) -> None:
    """Save settings to JSON file."""
    with open(SETTINGS_FILE, "w") as f:
        json.dump(settings, f, indent=2)


def parse_origins(raw: Union[str, List[str]]) -> List[str]:
    """CORS origins from a list, a JSON list string or a comma-separated string."""
    if isinstance(raw, list):
        return [str(o) for o in raw]
    raw = raw.strip()
    if not raw:
        return []
    if raw.startswith("["):
        try:
            return [str(o) for o in json.loads(raw)]
        except json.JSONDecodeError:
            return []
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    # Language model (OpenAI-compatible; point base_url at Ollama for local models)
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 30.0
    llm_temperature: float = 0.1

    # File operations
    search_base_path: str = "."
    download_directory: str = "./downloads"
    max_search_results: int = 100
    max_read_bytes: int = 10 * 1024 * 1024
    max_transfer_bytes: int = 2 * 1024 * 1024 * 1024

    # Dialog
    auto_confirm_single_match: bool = True

    # Server
    backend_port: int = 8000
    cors_origins: Annotated[List[str], NoDecode] = ["*"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def __init__(self, **kwargs):
        # settings.json values win over the environment; explicit kwargs win over both
        super().__init__(**{**load_settings_from_file(), **kwargs})

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        return parse_origins(value) or ["*"]

    def get_effective_settings(self) -> dict:
        """Get current effective settings (for API response)."""
        return {
            "openai_api_key": self._mask_key(self.openai_api_key),
            "openai_base_url": self.openai_base_url,
            "openai_model": self.openai_model,
            "llm_timeout_seconds": self.llm_timeout_seconds,
            "search_base_path": self.search_base_path,
            "download_directory": self.download_directory,
            "auto_confirm_single_match": self.auto_confirm_single_match,
        }

    def _mask_key(self, key: str) -> str:
        """Mask a secret key for display."""
        if not key:
            return ""
        if len(key) <= 8:
            return "*" * len(key)
        return key[:4] + "*" * (len(key) - 8) + key[-4:]


def reload_settings() -> "Settings":
    """Reload settings from file and environment."""
    global settings
    settings = Settings()
    return settings


settings = Settings()
