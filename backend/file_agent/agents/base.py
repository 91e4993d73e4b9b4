from abc import ABC, abstractmethod
from typing import Callable, Awaitable
from file_agent.core.events import AgentEvent
from file_agent.schemas.agent import Intent

EventCallback = Callable[[AgentEvent], Awaitable[None]]


async def ignore_event(event: AgentEvent) -> None:
    return None


class IntentClassifier(ABC):
    @abstractmethod
    async def classify(self, message: str) -> Intent:
        """
        Classify a user message.

        Args:
            message: Raw user message

        Returns:
            The intent with any extracted parameters. Implementations may
            raise on failure; FallbackIntentClassifier is the one that never does.
        """
        ...
