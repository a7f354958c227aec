"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class ArtifactType(StrEnum):
    """Artifact kinds accepted by the evidence store."""

    # Browsing
    WEB_BOOKMARK = "web_bookmark"
    WEB_COOKIE = "web_cookie"
    WEB_HISTORY = "web_history"

    # Accounts
    OS_ACCOUNT = "os_account"

    # Communications
    EMAIL_MSG = "email_msg"
    MESSAGE = "message"
    CALLLOG = "call_log"

    @classmethod
    def communication_types(cls) -> tuple["ArtifactType", ...]:
        """Return artifact kinds that take part in thread correlation."""
        return (cls.EMAIL_MSG, cls.MESSAGE, cls.CALLLOG)


class AttributeType(StrEnum):
    """Attribute types attached to artifacts."""

    URL = "url"
    DOMAIN = "domain"
    TITLE = "title"
    NAME = "name"
    VALUE = "value"
    REFERRER = "referrer"
    PROG_NAME = "prog_name"
    USER_NAME = "user_name"
    THREAD_ID = "thread_id"

    # Timestamps (integer Unix seconds)
    DATETIME = "datetime"
    DATETIME_CREATED = "datetime_created"
    DATETIME_ACCESSED = "datetime_accessed"
    DATETIME_SENT = "datetime_sent"

    @property
    def is_timestamp(self) -> bool:
        return self.value.startswith("datetime")


class RoutineStatus(StrEnum):
    """Lifecycle states of one extraction routine for one data source."""

    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RoutineStatus.COMPLETED, RoutineStatus.CANCELLED, RoutineStatus.FAILED)
