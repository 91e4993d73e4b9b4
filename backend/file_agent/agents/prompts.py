"""Prompt and reply text used by the file agent."""

from typing import List

from file_agent.core.formatting import format_size
from file_agent.schemas.files import FileContentMatch, FileInfo

MAX_LISTED_FILES = 10
MAX_LISTED_CONTENT_MATCHES = 5

DEFAULT_CHAT_PROMPT = "Hello, please introduce yourself."


def build_intent_prompt(message: str) -> str:
    """
    Build the classification prompt for a user message.

    Args:
        message: The raw user message

    Returns:
        Prompt asking the model for a JSON object with intent and parameters
    """
    return f"""Analyze the intent of the following user message and return the result as JSON.

User message: {message}

Choose one of these intent types:
1. FILE_SEARCH - the user wants to search for files
2. FILE_DOWNLOAD - the user wants to download a file
3. FILE_READ - the user wants to read a file's content
4. SYSTEM_INFO - the user wants system information
5. GENERAL_CHAT - general conversation

Rules for download intents:
- A message containing "download" / "下载" followed by a file name is a download intent
- If the target starts with http or https, use the url field
- If the target is an exact file name or path, use the filePath field
- If the target is a vague file name that needs searching, use the query field

Examples:
- "download OllamaChatController" -> FILE_DOWNLOAD, query "OllamaChatController"
- "下载pom.xml" -> FILE_DOWNLOAD, query "pom.xml"
- "download https://example.com/file.txt" -> FILE_DOWNLOAD, url "https://example.com/file.txt"

Return JSON in this format:
{{
    "intent": "INTENT_TYPE",
    "parameters": {{
        "query": "search keywords",
        "url": "download URL",
        "filePath": "file path",
        "targetDirectory": "target directory"
    }}
}}

Return only the JSON, nothing else."""


SELECTION_HELP = (
    "Please reply with:\n"
    "• a number: 1, 2, 3...\n"
    "• an ordinal: first, second, 第一个, 第二个...\n"
    "• a file name: pom.xml, README.md...\n"
    "• part of a file name: pom, readme..."
)


def build_file_listing(files: List[FileInfo], limit: int = MAX_LISTED_FILES) -> str:
    lines = [
        f"{i + 1}. {f.name} ({format_size(f.size)})"
        for i, f in enumerate(files[:limit])
    ]
    if len(files) > limit:
        lines.append(f"... and {len(files) - limit} more files")
    return "\n".join(lines)


def build_search_summary(files: List[FileInfo], content_matches: List[FileContentMatch]) -> str:
    parts = ["Search results:\n"]

    if files:
        parts.append("Matching files:")
        parts.append(build_file_listing(files))

    if content_matches:
        parts.append("\nContent matches:")
        for i, match in enumerate(content_matches[:MAX_LISTED_CONTENT_MATCHES]):
            parts.append(f"{i + 1}. {match.filePath} ({len(match.matches)} matches)")
        if len(content_matches) > MAX_LISTED_CONTENT_MATCHES:
            parts.append(
                f"... and {len(content_matches) - MAX_LISTED_CONTENT_MATCHES} more files with matching content"
            )

    if not files and not content_matches:
        parts.append("No matching files or content found.")

    return "\n".join(parts)


def build_confirmation_prompt(files: List[FileInfo]) -> str:
    return (
        "Found the following matching files, which one should be downloaded?\n\n"
        f"{build_file_listing(files)}\n\n"
        f"{SELECTION_HELP}"
    )


def build_transfer_started(source: str, task_id: str, target_directory: str, status: str) -> str:
    return (
        f"Started downloading: {source}\n"
        f"Task ID: {task_id}\n"
        f"Target directory: {target_directory}\n"
        f"Status: {status}"
    )
