"""
Matching module - correlation of communication artifacts into threads.

Usage:
    from core.matching import group_representatives, thread_key
"""
from __future__ import annotations

from .threads import (
    UNTHREADED_ID,
    CALL_LOG_ID,
    CORRELATED_TYPES,
    thread_key,
    group_representatives,
    group_by_type,
    sorted_representatives,
)

__all__ = [
    "UNTHREADED_ID",
    "CALL_LOG_ID",
    "CORRELATED_TYPES",
    "thread_key",
    "group_representatives",
    "group_by_type",
    "sorted_representatives",
]
