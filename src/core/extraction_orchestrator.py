from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .enums import RoutineStatus
from .logging import get_logger
from .messages import format_message
from .timestamps import format_duration

from extractors import ExtractorRegistry
from extractors.base import BaseExtractor, ExtractionContext
from extractors.callbacks import ExtractorCallbacks

LOGGER = get_logger("core.extraction_orchestrator")


class PipelineInitError(RuntimeError):
    """Raised when a pipeline cannot start (no case store, unusable temp dir)."""


class BridgeCallbacks(ExtractorCallbacks):
    """
    Adapt plain callables to the ExtractorCallbacks protocol.

    Used by hosts without a Qt event loop (CLI runs, tests). Messages go to
    ``log_cb`` (default: the orchestrator logger).
    """

    def __init__(
        self,
        log_cb: Optional[Callable[[str], None]] = None,
        step_cb: Optional[Callable[[str], None]] = None,
        cancellation_check: Optional[Callable[[], bool]] = None,
    ):
        self.log_cb = log_cb or LOGGER.info
        self.step_cb = step_cb
        self.cancellation_check = cancellation_check
        self._cancelled = False

    def on_log(self, message: str, level: str = "info"):
        self.log_cb(message)

    def on_step(self, message: str):
        if self.step_cb:
            self.step_cb(message)

    def on_progress(self, current: int, total: int, message: str = ""):
        pass

    def on_error(self, message: str, details: str = ""):
        self.log_cb(f"ERROR: {message} {details}".rstrip())

    def is_cancelled(self) -> bool:
        if self.cancellation_check and self.cancellation_check():
            return True
        return self._cancelled

    def cancel(self):
        self._cancelled = True


@dataclass(frozen=True)
class RoutineResult:
    """Outcome of one routine within a module run."""
    name: str
    status: RoutineStatus
    found_data: bool = False
    errors: List[str] = field(default_factory=list)


@dataclass
class ModuleResult:
    """
    Aggregated outcome of all routines for one data source.

    ``found_data`` is True if any routine found candidate files; ``errors``
    keeps routine order, then each routine's own order.
    """
    module_name: str
    found_data: bool = False
    errors: List[str] = field(default_factory=list)
    routine_results: List[RoutineResult] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return any(r.status == RoutineStatus.CANCELLED for r in self.routine_results)

    @property
    def failed_routines(self) -> List[str]:
        return [r.name for r in self.routine_results if r.status == RoutineStatus.FAILED]

    def add(self, routine_result: RoutineResult) -> None:
        self.routine_results.append(routine_result)
        self.found_data = self.found_data or routine_result.found_data
        self.errors.extend(routine_result.errors)


def _prepare(context: ExtractionContext) -> None:
    if context.blackboard is None:
        raise PipelineInitError(format_message("module.no_case"))
    try:
        context.temp_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PipelineInitError(f"Unable to create temp directory {context.temp_dir}: {exc}") from exc


def run_routine(
    routine: BaseExtractor,
    context: ExtractionContext,
    callbacks: ExtractorCallbacks,
) -> RoutineResult:
    """
    Run one routine, converting an unexpected exception into ``failed``.
    """
    name = routine.metadata.name
    LOGGER.info("Running routine: %s (%s)", name, RoutineStatus.RUNNING)
    started = time.monotonic()
    try:
        outcome = routine.process(context, callbacks)
    except Exception as exc:
        LOGGER.exception("Routine %s failed unexpectedly", name)
        return RoutineResult(
            name=name,
            status=RoutineStatus.FAILED,
            errors=[format_message(
                "module.routine_crashed",
                module=context.module_name,
                routine=routine.metadata.display_name,
                error=exc,
            )],
        )

    LOGGER.info(
        "Routine %s %s in %s (found_data=%s, errors=%d)",
        name, outcome.status, format_duration(time.monotonic() - started),
        outcome.found_data, len(outcome.errors),
    )
    return RoutineResult(
        name=name,
        status=outcome.status,
        found_data=outcome.found_data,
        errors=list(outcome.errors),
    )


def run_extraction_pipeline(
    context: ExtractionContext,
    routines: Optional[Sequence[BaseExtractor]] = None,
    callbacks: Optional[ExtractorCallbacks] = None,
    module_name: Optional[str] = None,
) -> ModuleResult:
    """
    Run routines for one data source, one after another.

    Routines default to every registered routine in run order. Cancellation
    is checked before each routine; once observed, the remaining routines
    are reported as cancelled without being started. Artifacts already
    posted stay posted.

    Raises:
        PipelineInitError: If the case store is missing or the temp dir
            cannot be created. After that point failures only show up in
            the returned errors.
    """
    if module_name is not None:
        context.module_name = module_name
    if callbacks is None:
        callbacks = BridgeCallbacks()
    if routines is None:
        routines = ExtractorRegistry().create_routines(context.settings.routine_options)

    _prepare(context)
    result = ModuleResult(module_name=context.module_name)
    LOGGER.info(
        "Starting %s on data source %s with %d routine(s)",
        context.module_name, context.data_source_id, len(routines),
    )

    stopped = False
    for routine in routines:
        name = routine.metadata.name
        if stopped or callbacks.is_cancelled():
            if not stopped:
                LOGGER.info("Extraction cancelled by user")
            stopped = True
            result.add(RoutineResult(name=name, status=RoutineStatus.CANCELLED))
            continue

        routine_result = run_routine(routine, context, callbacks)
        result.add(routine_result)
        for message in routine_result.errors:
            callbacks.on_log(message, "warning")
        if routine_result.status == RoutineStatus.CANCELLED:
            stopped = True

    if result.errors:
        callbacks.on_error(
            f"{context.module_name} finished with {len(result.errors)} error(s)",
            "\n".join(result.errors),
        )
    LOGGER.info(
        "%s finished: found_data=%s, errors=%d, cancelled=%s",
        context.module_name, result.found_data, len(result.errors), result.cancelled,
    )
    return result
