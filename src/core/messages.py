"""
User-facing message catalog.

Routines report errors by message id; the wording lives here so that the
error list surfaced to the investigator stays consistent across routines.
"""

from __future__ import annotations

from typing import Dict

MESSAGES: Dict[str, str] = {
    # Module level
    "module.no_case": "No open case available.",
    "module.routine_crashed": "{module}: {routine} stopped unexpectedly: {error}",
    "module.post_failed": "{module}: Error posting {routine} artifacts from {file} to the blackboard.",

    # Locator
    "locator.failed": "{module}: Error getting {what} files.",

    # Bookmarks
    "bookmark.read_failed": "{module}: Unable to read bookmark URL from {file}.",
    "bookmark.artifact_failed": "{module}: Error creating bookmark artifact for {file}.",

    # Cookies
    "cookie.read_failed": "{module}: Error reading cookie file {file}.",
    "cookie.artifact_failed": "{module}: Error creating cookie artifact for {file}.",

    # History
    "history.tool_missing": "{module}: Unable to find the history parser ({tool}); history was not extracted.",
    "history.stage_failed": "{module}: Error writing temporary file {file}.",
    "history.tool_failed": "{module}: Error running the history parser on {file}.",
    "history.output_missing": "{module}: History parser output {file} was not found.",
    "history.output_unreadable": "{module}: Error reading history parser output {file}.",
    "history.record_failed": "{module}: Error creating history artifact for {file}.",
}


def format_message(key: str, **kwargs) -> str:
    """
    Render message ``key`` with ``kwargs``.

    Raises:
        KeyError: If ``key`` is not in the catalog
    """
    return MESSAGES[key].format(**kwargs)
