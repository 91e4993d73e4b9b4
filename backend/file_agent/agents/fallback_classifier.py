import asyncio
import logging

from file_agent.agents.base import IntentClassifier
from file_agent.agents.regex_classifier import RegexIntentClassifier
from file_agent.schemas.agent import Intent

logger = logging.getLogger(__name__)


class FallbackIntentClassifier(IntentClassifier):
    """
    Runs the primary classifier under a timeout and falls back on any failure.

    Model output is rich but unreliable in format; patterns are shallow but
    always parse. Classification therefore never fails: if both strategies
    break, the message is treated as general chat.
    """

    def __init__(
        self,
        primary: IntentClassifier,
        fallback: IntentClassifier | None = None,
        timeout: float = 30.0,
    ):
        self.primary = primary
        self.fallback = fallback or RegexIntentClassifier()
        self.timeout = timeout

    async def classify(self, message: str) -> Intent:
        try:
            return await asyncio.wait_for(self.primary.classify(message), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Intent classification timed out after %.1fs, using fallback", self.timeout)
        except Exception as e:
            logger.warning("Intent classification failed (%s: %s), using fallback", type(e).__name__, e)

        try:
            return await self.fallback.classify(message)
        except Exception:
            logger.exception("Fallback intent classification failed for %r", message)
            return Intent.chat()
