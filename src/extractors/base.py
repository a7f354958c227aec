"""
Base extractor interface for the recent-activity routines.

A routine is one extraction unit within a module (bookmarks, cookies,
history). The orchestrator holds a collection of routines and drives each
through ``process``; every call returns a fresh ``ExtractionResult``, so no
error state lives on the routine between runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .callbacks import ExtractorCallbacks
from core.app_version import get_app_version
from core.blackboard import Blackboard
from core.config import ExtractionConfig
from core.enums import RoutineStatus
from core.evidence_fs import FileLocator
from core.logging import get_logger

LOGGER = get_logger("extractors.base")

# Settings a routine may override for itself through configure()
ROUTINE_OPTION_KEYS = ("ignored_url_prefixes", "keep_tool_output")


@dataclass
class ExtractorMetadata:
    """
    Metadata about an extraction routine.

    Attributes:
        name: Internal identifier (e.g., "ie_history")
        display_name: UI display name (e.g., "IE History")
        description: Short description for UI
        category: Category for grouping ("browser")
        requires_tools: External tools needed (e.g., ["java", "pasco2"])
        order: Position of the routine within its module run
        version: Module version string
    """
    name: str
    display_name: str
    description: str
    category: str
    requires_tools: List[str]
    order: int = 100
    version: str = field(default_factory=get_app_version)


@dataclass
class ExtractionContext:
    """
    Everything a routine needs for one data source.

    Attributes:
        data_source_id: Identifier of the data source being analyzed
        locator: File enumeration service for the data source
        blackboard: Evidence store receiving posted artifacts
        temp_dir: Per-data-source staging directory (created on demand)
        module_name: Name artifacts are posted under
        tool_paths: Tool id -> path overrides
        settings: Extraction settings (ignored URL prefixes, tool output retention)
    """
    data_source_id: int
    locator: FileLocator
    blackboard: Blackboard
    temp_dir: Path
    module_name: str = "Internet Explorer"
    tool_paths: Mapping[str, Path] = field(default_factory=dict)
    settings: ExtractionConfig = field(default_factory=ExtractionConfig)


@dataclass
class ExtractionResult:
    """Per-routine outcome."""
    found_data: bool = False
    errors: List[str] = field(default_factory=list)
    status: RoutineStatus = RoutineStatus.COMPLETED

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def fail(self, message: str) -> "ExtractionResult":
        self.errors.append(message)
        self.status = RoutineStatus.FAILED
        return self

    def cancel(self) -> "ExtractionResult":
        self.status = RoutineStatus.CANCELLED
        return self


class BaseExtractor(ABC):
    """
    Base class for all extraction routines.

    Each routine is responsible for:
    1. Declaring identity and requirements (metadata)
    2. Accepting settings (configure)
    3. Locating its files, parsing them and posting artifacts (process)

    Lifecycle:
        1. Registry discovers the routine class
        2. Registry calls configure() with the routine's options from
           ``extraction.routines.<name>`` in config.yml
        3. Orchestrator calls process() once per data source

    Example:
        class MyExtractor(BaseExtractor):
            @property
            def metadata(self):
                return ExtractorMetadata(
                    name="my_routine",
                    display_name="My Routine",
                    description="Does something useful",
                    category="browser",
                    requires_tools=[],
                )

            def process(self, context, callbacks):
                result = ExtractionResult()
                files = context.locator.find_files("%.ext", "Folder")
                result.found_data = bool(files)
                ...
                return result
    """

    def __init__(self) -> None:
        self.config: Dict[str, Any] = {}

    @property
    @abstractmethod
    def metadata(self) -> ExtractorMetadata:
        """
        Return routine metadata.

        Returns:
            ExtractorMetadata describing this routine
        """
        pass

    def configure(self, config: Optional[Mapping[str, Any]] = None) -> None:
        """
        Store routine options.

        Recognized keys (``ROUTINE_OPTION_KEYS``) override the matching
        extraction setting for this routine only; other keys are kept but
        logged, since nothing reads them.
        """
        self.config = dict(config or {})
        unknown = sorted(set(self.config) - set(ROUTINE_OPTION_KEYS))
        if unknown:
            LOGGER.warning("Ignoring unknown option(s) for %s: %s", self.metadata.name, ", ".join(unknown))

    def settings_for(self, context: ExtractionContext) -> ExtractionConfig:
        """Context settings with this routine's overrides applied."""
        overrides: Dict[str, Any] = {}
        if "ignored_url_prefixes" in self.config:
            overrides["ignored_url_prefixes"] = [str(p) for p in self.config["ignored_url_prefixes"] or []]
        if "keep_tool_output" in self.config:
            overrides["keep_tool_output"] = bool(self.config["keep_tool_output"])
        return replace(context.settings, **overrides) if overrides else context.settings

    @abstractmethod
    def process(
        self,
        context: ExtractionContext,
        callbacks: ExtractorCallbacks,
    ) -> ExtractionResult:
        """
        Run the routine against one data source.

        Responsibilities:
        - Resolve candidate files through ``context.locator``
        - Check ``callbacks.is_cancelled()`` before each file
        - Post artifacts to ``context.blackboard``
        - Record recoverable failures in the returned error list

        Returns:
            ExtractionResult with found-data flag, errors and terminal status
        """
        pass
