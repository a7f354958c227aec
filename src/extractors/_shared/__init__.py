"""
Shared utilities for extraction routines.

This package provides common functionality used across routines:
- tool_runner: external parser process runner with cancellation
- staging: copy evidence files to a local temp path
- url_utils: domain derivation and ignorable-URL checks
- artifact_emitter: stage artifacts and post them in batches

Design Principle:
    Routines stay self-contained; these helpers only cover what more than
    one routine (or more than one tool) needs.
"""

from .tool_runner import ToolRunner, ToolRunResult
from .staging import stage_file, remove_quietly
from .url_utils import extract_domain, is_ignored_url
from .artifact_emitter import ArtifactBundle, ArtifactEmitter

__all__ = [
    "ToolRunner",
    "ToolRunResult",
    "stage_file",
    "remove_quietly",
    "extract_domain",
    "is_ignored_url",
    "ArtifactBundle",
    "ArtifactEmitter",
]
