"""Events emitted while the file agent handles one message."""

from enum import Enum
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid


class EventType(str, Enum):
    AGENT_STARTED = "agent_started"
    INTENT_CLASSIFIED = "intent_classified"
    CONFIRMATION_PENDING = "confirmation_pending"
    TRANSFER_STARTED = "transfer_started"
    LLM_REQUEST = "llm_request"
    LLM_RESPONSE = "llm_response"
    AGENT_COMPLETED = "agent_completed"


class AgentEvent(BaseModel):
    """One step of a turn. All events of a turn share agent_id."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: EventType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    agent_id: str
    session_id: str
    data: Dict[str, Any] = Field(default_factory=dict)
    parent_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        event_type: EventType,
        agent_id: str,
        session_id: str,
        data: Optional[Dict[str, Any]] = None,
        parent_id: Optional[str] = None,
    ) -> "AgentEvent":
        return cls(
            type=event_type,
            agent_id=agent_id,
            session_id=session_id,
            data=data or {},
            parent_id=parent_id,
        )
