"""
Extraction routines for recent-activity analysis.

Each routine is a self-contained module that locates its files on a data
source, parses them (directly or through an external tool) and posts
artifacts to the evidence store.

Folder Structure:
- browser/         Browser family routines (ie_legacy/)
- _shared/         Shared helpers (tool runner, staging, URL utils, artifact emitter)
"""

from .base import BaseExtractor, ExtractorMetadata, ExtractionContext, ExtractionResult
from .callbacks import ExtractorCallbacks
from .extractor_registry import ExtractorRegistry
from .exceptions import (
    ExtractorError,
    IOFailure,
    StagingError,
    ToolLaunchError,
    MissingToolError,
)

from . import browser

__all__ = [
    'BaseExtractor',
    'ExtractorMetadata',
    'ExtractionContext',
    'ExtractionResult',
    'ExtractorCallbacks',
    'ExtractorRegistry',
    'ExtractorError',
    'IOFailure',
    'StagingError',
    'ToolLaunchError',
    'MissingToolError',
    'browser',
]
