"""
Qt worker thread for running a module pipeline off the UI thread.
"""

from PySide6.QtCore import QObject, Signal, QThread
from dataclasses import replace
from pathlib import Path
from typing import List, Optional
import traceback

from .base import BaseExtractor, ExtractionContext
from core.logging import get_logger

LOGGER = get_logger("extractors.workers")


class WorkerCallbacks(QObject):
    """
    Qt-compatible callbacks that emit signals AND write to the application log.

    Implements ExtractorCallbacks protocol via Qt signals.

    Signals:
        progress(int, int, str): current, total, message
        log_message(str, str): message, level
        error(str, str): error, details
        step(str): step_name

    Usage:
        callbacks = WorkerCallbacks()
        callbacks.progress.connect(progress_bar.setValue)
        callbacks.log_message.connect(log_widget.append)
    """

    progress = Signal(int, int, str)  # current, total, message
    log_message = Signal(str, str)    # message, level
    error = Signal(str, str)          # error, details
    step = Signal(str)                # step_name

    def __init__(self, parent=None, extractor_name: str = "pipeline"):
        super().__init__(parent)
        self._cancelled = False
        self._extractor_name = extractor_name

    def on_progress(self, current: int, total: int, message: str = ""):
        """Emit progress signal."""
        self.progress.emit(current, total, message)

    def on_log(self, message: str, level: str = "info"):
        """Write to the log first, then emit the UI signal."""
        log_method = getattr(LOGGER, level, LOGGER.info)
        log_method("[%s] %s", self._extractor_name, message)
        self.log_message.emit(message, level)

    def on_error(self, error: str, details: str = ""):
        LOGGER.error("[%s] %s%s", self._extractor_name, error, f": {details}" if details else "")
        self.error.emit(error, details)

    def on_step(self, step_name: str):
        LOGGER.info("[%s] %s", self._extractor_name, step_name)
        self.step.emit(step_name)

    def is_cancelled(self) -> bool:
        """Check if cancelled."""
        return self._cancelled

    def cancel(self):
        """Mark as cancelled."""
        self._cancelled = True


class PipelineWorker(QThread):
    """
    Worker thread for one data source's module pipeline.

    One worker per data source; each context carries its own temp
    directory so concurrent workers never collide on staged files.

    Signals:
        finished(object): ModuleResult
        error(str): error message (pipeline could not run at all)

    Usage:
        worker = PipelineWorker(context, case_db_path=case_db)
        worker.callbacks.progress.connect(lambda c, t, m: progress_bar.setValue(c/t*100))
        worker.finished.connect(on_pipeline_finished)
        worker.start()
    """

    finished = Signal(object)  # ModuleResult
    error = Signal(str)        # error message

    def __init__(
        self,
        context: ExtractionContext,
        routines: Optional[List[BaseExtractor]] = None,
        module_name: Optional[str] = None,
        case_db_path: Optional[Path] = None,
        parent=None,
    ):
        """
        Initialize pipeline worker.

        Args:
            context: Data source context (locator, store, temp dir)
            routines: Routines to run; defaults to every registered routine
            module_name: Overrides ``context.module_name``
            case_db_path: When set, a thread-local SQLite store is opened on
                this case database and used instead of ``context.blackboard``
            parent: Parent QObject
        """
        super().__init__(parent)
        self.context = context
        self.routines = routines
        self.module_name = module_name
        self.case_db_path = case_db_path
        self.callbacks = WorkerCallbacks(extractor_name=module_name or context.module_name)

    def run(self):
        """Run the pipeline in the background thread."""
        from core.database import SqliteBlackboard, init_db
        from core.extraction_orchestrator import run_extraction_pipeline

        LOGGER.info("PipelineWorker started for data source %s", self.context.data_source_id)
        conn = None
        try:
            context = self.context
            if self.case_db_path is not None:
                # SQLite connections are bound to the thread that opened them
                conn = init_db(self.case_db_path)
                context = replace(context, blackboard=SqliteBlackboard(conn))

            result = run_extraction_pipeline(
                context,
                routines=self.routines,
                callbacks=self.callbacks,
                module_name=self.module_name,
            )
            self.finished.emit(result)
        except Exception as e:
            error_msg = f"{type(e).__name__}: {e}\n{traceback.format_exc()}"
            LOGGER.error("PipelineWorker failed: %s", error_msg)
            self.error.emit(error_msg)
            self.finished.emit(None)
        finally:
            if conn is not None:
                conn.close()

    def cancel(self):
        """Request cancellation."""
        self.callbacks.cancel()
