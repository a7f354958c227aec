"""
Internet Explorer History Extractor

Extracts browsing history from legacy IE ``index.dat`` files (IE 4-9).

Each index.dat is staged to the data source's temp directory as
``index<file id>.dat`` and run through pasco2, which writes a tab-separated
listing to ``pasco2Result.<file id>.txt`` (stderr to ``.err``). The listing is
parsed into web history artifacts, plus one OS account artifact per distinct
user seen during the run.

pasco2 returns a negative exit code when it hits a corrupt record, but the
output written before that point is usually intact, so the listing is parsed
regardless of the exit code.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ....base import BaseExtractor, ExtractionContext, ExtractionResult, ExtractorMetadata
from ....callbacks import ExtractorCallbacks
from ....exceptions import IOFailure, MissingToolError, StagingError, ToolLaunchError
from ...._shared.artifact_emitter import ArtifactEmitter
from ...._shared.staging import remove_quietly, stage_file
from ...._shared.tool_runner import ToolRunner
from .._patterns import HISTORY_FILE_NAME, TEMP_SUBDIR
from ._parser import PascoOutputParser
from core.config import ExtractionConfig
from core.evidence_fs import FileHandle, StoreAccessError
from core.logging import get_logger
from core.messages import format_message
from core.tool_discovery import locate_tool

LOGGER = get_logger("extractors.browser.ie_legacy.history")

PASCO_MAIN_CLASS = "isi.pasco2.Main"
PASCO_INSTALL_HINT = (
    "Install pasco2 (directory containing pasco2.jar) and a Java runtime, "
    "or set tool_paths.pasco2 / tool_paths.java in config.yml."
)


def build_pasco_command(java_path: Path, pasco_home: Path) -> list[str]:
    """Argument template for ``pasco2 -T history <file>``."""
    classpath = f"{pasco_home / 'pasco2.jar'}{os.pathsep}{pasco_home / '*'}"
    return [str(java_path), "-cp", classpath, PASCO_MAIN_CLASS, "-T", "history"]


class IEHistoryExtractor(BaseExtractor):
    """
    Extract IE history from index.dat files via pasco2.

    Args:
        runner: Pre-built tool runner; when None the runner is built from
            the located java and pasco2 installations at process time
    """

    def __init__(self, runner: Optional[ToolRunner] = None):
        super().__init__()
        self.runner = runner

    @property
    def metadata(self) -> ExtractorMetadata:
        return ExtractorMetadata(
            name="ie_history",
            display_name="IE History",
            description="Extract browsing history from index.dat files using pasco2",
            category="browser",
            requires_tools=["java", "pasco2"],
            order=30,
        )

    def _resolve_runner(self, context: ExtractionContext) -> ToolRunner:
        if self.runner is not None:
            return self.runner

        pasco_home = locate_tool("pasco2", context.tool_paths)
        if pasco_home is None:
            raise MissingToolError("pasco2", PASCO_INSTALL_HINT)
        java_path = locate_tool("java", context.tool_paths)
        if java_path is None:
            raise MissingToolError("java", PASCO_INSTALL_HINT)

        LOGGER.info("pasco2 home: %s (java: %s)", pasco_home, java_path)
        return ToolRunner(build_pasco_command(java_path, pasco_home))

    def process(self, context: ExtractionContext, callbacks: ExtractorCallbacks) -> ExtractionResult:
        result = ExtractionResult()
        module = context.module_name
        callbacks.on_step("Extracting Internet Explorer history")

        try:
            runner = self._resolve_runner(context)
        except MissingToolError as exc:
            LOGGER.error("Error finding pasco program: %s", exc)
            return result.fail(format_message("history.tool_missing", module=module, tool=exc.tool_name))

        try:
            index_files = context.locator.find_files(HISTORY_FILE_NAME)
        except StoreAccessError as exc:
            LOGGER.warning("Error fetching 'index.dat' files for Internet Explorer history: %s", exc)
            return result.fail(format_message("locator.failed", module=module, what="history"))

        if not index_files:
            LOGGER.info("No InternetExplorer history files found.")
            return result

        result.found_data = True
        results_dir = context.temp_dir / TEMP_SUBDIR
        emitter = ArtifactEmitter(
            context.blackboard, module, result.errors,
            self.settings_for(context).ignored_url_prefixes,
            routine_name=self.metadata.display_name,
        )

        total = len(index_files)
        for index, handle in enumerate(index_files, start=1):
            if callbacks.is_cancelled():
                LOGGER.info("History extraction cancelled before %s", handle.path)
                return result.cancel()

            callbacks.on_progress(index, total, f"Processing {handle.path}")
            try:
                completed = self._process_file(context, runner, emitter, handle, results_dir, callbacks, result)
            except ToolLaunchError as exc:
                LOGGER.error("Unable to execute pasco2 to process Internet Explorer web history: %s", exc)
                return result.fail(format_message("history.tool_failed", module=module, file=handle.name))
            if not completed:
                return result.cancel()

        LOGGER.info(
            "IE history complete: %d file(s), %d artifact(s) posted, %d error(s)",
            total, emitter.posted_count, len(result.errors),
        )
        return result

    def _process_file(
        self,
        context: ExtractionContext,
        runner: ToolRunner,
        emitter: ArtifactEmitter,
        handle: FileHandle,
        results_dir: Path,
        callbacks: ExtractorCallbacks,
        result: ExtractionResult,
    ) -> bool:
        """
        Stage, run and parse one index.dat.

        Returns:
            False if cancellation stopped the file, True otherwise (including
            recoverable per-file failures, which land in ``result.errors``)
        """
        module = context.module_name
        dat_file = results_dir / f"index{handle.id}.dat"
        output_file = results_dir / f"pasco2Result.{handle.id}.txt"
        err_file = results_dir / f"pasco2Result.{handle.id}.txt.err"

        try:
            staged = stage_file(context.locator, handle, dat_file, callbacks.is_cancelled)
        except StagingError as exc:
            LOGGER.warning("Error while trying to write index.dat file %s: %s", dat_file, exc)
            result.add_error(format_message("history.stage_failed", module=module, file=str(dat_file)))
            return True
        if staged is None:
            return False

        LOGGER.info("Writing pasco results to: %s", output_file)
        try:
            run = runner.run(dat_file, output_file, err_file, callbacks.is_cancelled)
        except ToolLaunchError:
            raise
        except IOFailure as exc:
            LOGGER.warning("pasco execution failed on %s: %s", output_file.name, exc)
            result.add_error(format_message("history.tool_failed", module=module, file=handle.name))
            return True

        if run.cancelled:
            self._cleanup(self.settings_for(context), dat_file, output_file, err_file)
            return False

        if not output_file.exists():
            LOGGER.warning("Pasco output not found: %s", output_file)
            result.add_error(format_message("history.output_missing", module=module, file=output_file.name))
            remove_quietly(dat_file)
            return True

        parser = PascoOutputParser(source_name=handle.name)
        try:
            for record in parser.parse(output_file):
                emitter.emit_visit(record.user, record.url, record.timestamp, handle)
        except OSError as exc:
            LOGGER.warning("Unable to read the pasco file at %s: %s", output_file, exc)
            result.add_error(format_message("history.output_unreadable", module=module, file=output_file.name))

        emitter.flush()
        if parser.timestamp_failures:
            LOGGER.warning(
                "%d history timestamp(s) in %s could not be parsed",
                parser.timestamp_failures, handle.name,
            )
        self._cleanup(self.settings_for(context), dat_file, output_file, err_file)
        return True

    @staticmethod
    def _cleanup(settings: ExtractionConfig, dat_file: Path, output_file: Path, err_file: Path) -> None:
        remove_quietly(dat_file)
        if not settings.keep_tool_output:
            remove_quietly(output_file)
            remove_quietly(err_file)
