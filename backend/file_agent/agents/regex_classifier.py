"""Deterministic keyword/pattern intent classification, used when the model is unavailable."""

import re
from typing import Optional

from file_agent.agents.base import IntentClassifier
from file_agent.schemas.agent import Intent, IntentType


def _keywords(*words: str) -> str:
    """Alternation of keywords; latin words must not be glued to other letters."""
    parts = []
    for word in words:
        if word.isascii():
            parts.append(rf"(?<![a-z]){word}(?![a-z])")
        else:
            parts.append(word)
    return "(?:" + "|".join(parts) + ")"


SEARCH_KEYWORDS = _keywords("搜索", "查找", "search", "find")
DOWNLOAD_KEYWORDS = _keywords("下载", "download")
READ_KEYWORDS = _keywords("读取", "打开", "read", "open")
SYSTEM_KEYWORDS = _keywords("系统", "内存", "system", "memory")

_SEP = r"\s*[：:]*\s*"

SEARCH_RE = re.compile(SEARCH_KEYWORDS + _SEP + r"(.+)", re.IGNORECASE)
DOWNLOAD_RE = re.compile(DOWNLOAD_KEYWORDS, re.IGNORECASE)
DOWNLOAD_URL_RE = re.compile(DOWNLOAD_KEYWORDS + _SEP + r"(https?://\S+)", re.IGNORECASE)
DOWNLOAD_TOKEN_RE = re.compile(DOWNLOAD_KEYWORDS + _SEP + r"([\w\-.]+)", re.IGNORECASE)
READ_RE = re.compile(READ_KEYWORDS + _SEP + r"(\S+)", re.IGNORECASE)
SYSTEM_RE = re.compile(SYSTEM_KEYWORDS, re.IGNORECASE)


def _is_url_like(text: str) -> bool:
    return text.lower().startswith("http")


def _classify_download(message: str) -> Optional[Intent]:
    if not DOWNLOAD_RE.search(message):
        return None

    url_match = DOWNLOAD_URL_RE.search(message)
    if url_match:
        return Intent(type=IntentType.FILE_DOWNLOAD, parameters={"url": url_match.group(1)})

    token_match = DOWNLOAD_TOKEN_RE.search(message)
    if token_match and not _is_url_like(token_match.group(1)):
        return Intent(type=IntentType.FILE_DOWNLOAD, parameters={"query": token_match.group(1)})

    # No clean token right after the keyword: take whatever follows it
    parts = DOWNLOAD_RE.split(message, maxsplit=1)
    if len(parts) > 1:
        remainder = parts[1].strip(" \t:：")
        if remainder and not _is_url_like(remainder):
            return Intent(type=IntentType.FILE_DOWNLOAD, parameters={"query": remainder})

    return None


def classify_with_patterns(message: str) -> Intent:
    """
    Classify a message with keyword patterns. First match wins:
    search, download (url, then token, then remainder), read, system, chat.
    """
    message = message or ""

    search_match = SEARCH_RE.search(message)
    if search_match and search_match.group(1).strip():
        return Intent(type=IntentType.FILE_SEARCH, parameters={"query": search_match.group(1).strip()})

    download = _classify_download(message)
    if download is not None:
        return download

    read_match = READ_RE.search(message)
    if read_match:
        return Intent(type=IntentType.FILE_READ, parameters={"filePath": read_match.group(1)})

    if SYSTEM_RE.search(message):
        return Intent(type=IntentType.SYSTEM_INFO)

    return Intent.chat()


class RegexIntentClassifier(IntentClassifier):
    """Pure pattern-based classifier; the same message always gives the same intent."""

    async def classify(self, message: str) -> Intent:
        return classify_with_patterns(message)
