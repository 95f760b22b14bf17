"""Pure functions for building note list queries."""

import re
from typing import Any
from uuid import UUID


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag list, dropping blanks."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def clean_tags(tags: list[str]) -> list[str]:
    """Trim tags and drop blanks and duplicates, keeping first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        stripped = tag.strip()
        if stripped:
            seen.setdefault(stripped, None)
    return list(seen)


def build_notes_query(user_id: UUID, search: str | None = None, tags: list[str] | None = None) -> dict[str, Any]:
    """Build MongoDB filter for a user's notes.

    Args:
        user_id: Owner of the notes
        search: Case-insensitive substring matched against title or content
        tags: Notes carrying any of these tags

    Returns:
        MongoDB query document
    """
    query: dict[str, Any] = {"user_id": user_id}
    if search and search.strip():
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"content": {"$regex": pattern, "$options": "i"}},
        ]
    if tags:
        query["tags"] = {"$in": tags}
    return query
