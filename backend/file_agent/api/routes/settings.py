from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional
import os

from file_agent.api.deps import get_llm_client, reset_agent
from file_agent.core import config
from file_agent.core.config import (
    save_settings_to_file,
    reload_settings,
    load_settings_from_file,
)

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsUpdate(BaseModel):
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: Optional[str] = None
    llm_timeout_seconds: Optional[float] = None
    search_base_path: Optional[str] = None
    download_directory: Optional[str] = None
    auto_confirm_single_match: Optional[bool] = None


class SettingsResponse(BaseModel):
    openai_api_key: str  # masked
    openai_base_url: str
    openai_model: str
    llm_timeout_seconds: float
    search_base_path: str
    download_directory: str
    auto_confirm_single_match: bool


class TestConnectionResponse(BaseModel):
    openai: bool
    errors: dict


# Environment variables mirrored on update so the next reload sees them
_ENV_NAMES = {
    "openai_api_key": "OPENAI_API_KEY",
    "openai_base_url": "OPENAI_BASE_URL",
    "openai_model": "OPENAI_MODEL",
}


@router.get("", response_model=SettingsResponse)
async def get_settings():
    """Retrieve current settings with masked sensitive values."""
    return config.settings.get_effective_settings()


@router.post("", response_model=SettingsResponse)
async def update_settings(update: SettingsUpdate):
    """Update settings, save them to the local file and rebuild the agent."""
    current = load_settings_from_file()

    if update.llm_timeout_seconds is not None and update.llm_timeout_seconds <= 0:
        raise HTTPException(
            status_code=400,
            detail="llm_timeout_seconds must be positive",
        )

    for field, value in update.model_dump(exclude_none=True).items():
        current[field] = value
        if field in _ENV_NAMES:
            os.environ[_ENV_NAMES[field]] = value

    save_settings_to_file(current)
    new_settings = reload_settings()
    await reset_agent()

    return new_settings.get_effective_settings()


@router.post("/test", response_model=TestConnectionResponse)
async def test_connections():
    """Check that the configured language model endpoint answers."""
    errors = {}
    openai_ok = False

    if not config.settings.openai_api_key and not config.settings.openai_base_url:
        errors["openai"] = "No API key or base URL configured"
    else:
        try:
            await get_llm_client().client.models.list()
            openai_ok = True
        except Exception as e:
            errors["openai"] = str(e)

    return TestConnectionResponse(openai=openai_ok, errors=errors)
