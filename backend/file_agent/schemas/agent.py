"""Pydantic schemas for intents, dialog state and agent responses."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from file_agent.schemas.files import FileInfo


class IntentType(str, Enum):
    FILE_SEARCH = "FILE_SEARCH"
    FILE_DOWNLOAD = "FILE_DOWNLOAD"
    FILE_READ = "FILE_READ"
    SYSTEM_INFO = "SYSTEM_INFO"
    GENERAL_CHAT = "GENERAL_CHAT"


# Parameter keys an intent may carry
INTENT_PARAMETER_KEYS = ("query", "url", "filePath", "targetDirectory")


class Intent(BaseModel):
    """Classified user intent with extracted string parameters."""
    model_config = ConfigDict(frozen=True)

    type: IntentType
    parameters: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def chat(cls) -> "Intent":
        return cls(type=IntentType.GENERAL_CHAT)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.parameters.get(key, default)


class PendingConfirmation(BaseModel):
    """A fuzzy download waiting for the user to pick one candidate."""
    candidates: List[FileInfo]
    targetDirectory: str
    originalQuery: str
    active: bool = True


class AgentResponse(BaseModel):
    """Uniform result of one agent turn."""
    action: str = Field(description="Discriminator such as file_search or file_download_confirm")
    message: str = Field(description="Human-readable reply")
    data: Dict[str, Any] = Field(default_factory=dict)
