"""Human-readable formatting shared by the agent replies and the REST routes."""


def format_size(num_bytes: int) -> str:
    """Format a byte count using 1024-based units with one decimal above bytes."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 ** 2:
        return f"{num_bytes / 1024:.1f} KB"
    if num_bytes < 1024 ** 3:
        return f"{num_bytes / 1024 ** 2:.1f} MB"
    return f"{num_bytes / 1024 ** 3:.1f} GB"


def preview(text: str, limit: int = 500) -> str:
    """First `limit` characters of text, with an ellipsis when truncated."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text
