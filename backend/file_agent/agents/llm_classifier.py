"""Intent classification by prompting the language model for JSON."""

import logging
import re
from typing import Dict

from file_agent.agents.base import IntentClassifier
from file_agent.agents.prompts import build_intent_prompt
from file_agent.schemas.agent import INTENT_PARAMETER_KEYS, Intent, IntentType
from file_agent.services.llm import LLMClient

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")
_INTENT_RE = re.compile(r'"intent"\s*:\s*"([^"]+)"')
_PARAMETER_RES = {
    key: re.compile(rf'"{key}"\s*:\s*"([^"]+)"') for key in INTENT_PARAMETER_KEYS
}
_INTENT_NAMES = {t.value for t in IntentType}


class IntentParseError(ValueError):
    """The model reply did not name one of the known intents."""


def parse_intent_response(raw: str) -> Intent:
    """
    Parse a model reply into an Intent.

    The intent name must literally equal one of the IntentType names. Each
    parameter is picked out on its own by a `"key": "value"` pattern, so a
    reply that is not strictly valid JSON still yields whatever it carries.

    Raises:
        IntentParseError: if no recognizable intent name is present
    """
    text = _FENCE_RE.sub("", raw or "").strip()

    intent_match = _INTENT_RE.search(text)
    if not intent_match:
        raise IntentParseError(f"No intent field in model reply: {text[:200]!r}")

    name = intent_match.group(1).strip()
    if name not in _INTENT_NAMES:
        raise IntentParseError(f"Unknown intent {name!r}")

    parameters: Dict[str, str] = {}
    for key, pattern in _PARAMETER_RES.items():
        match = pattern.search(text)
        if match:
            parameters[key] = match.group(1)

    return Intent(type=IntentType(name), parameters=parameters)


class LLMIntentClassifier(IntentClassifier):
    """Asks the language model to classify a message. Raises on any failure."""

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def classify(self, message: str) -> Intent:
        raw = await self.llm.complete(build_intent_prompt(message))
        intent = parse_intent_response(raw)
        logger.debug("LLM classified %r as %s %s", message, intent.type.value, intent.parameters)
        return intent
