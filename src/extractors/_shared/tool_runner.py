"""
External parser process runner.

Launches a tool against one staged input file with stdout and stderr sent
straight to files. The exit code is advisory: callers parse whatever the
tool managed to write. Cancellation is polled while the child runs and ends
the whole process group.
"""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from core.logging import get_logger
from ..exceptions import IOFailure, ToolLaunchError

LOGGER = get_logger("extractors._shared.tool_runner")

TERMINATE_GRACE_SECONDS = 5.0


@dataclass(slots=True)
class ToolRunResult:
    """Outcome of one tool run."""

    exit_code: Optional[int]
    cancelled: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.cancelled


class ToolRunner:
    """
    Run ``command + [input_path]`` with output redirected to files.

    Args:
        command: Fixed argument template (tool binary and mode flags)
        poll_interval: Seconds between cancellation checks while waiting
    """

    def __init__(self, command: Sequence[str], poll_interval: float = 0.2):
        if not command:
            raise ValueError("command must not be empty")
        self.command: List[str] = [str(part) for part in command]
        self.poll_interval = poll_interval

    def build_command(self, input_path: Path) -> List[str]:
        return [*self.command, str(input_path)]

    def run(
        self,
        input_path: Path,
        output_path: Path,
        err_path: Path,
        is_cancelled: Callable[[], bool],
    ) -> ToolRunResult:
        """
        Run the tool and wait for it to exit or be cancelled.

        Returns:
            ToolRunResult; ``cancelled`` is set when the run was skipped or
            stopped because ``is_cancelled`` returned True.

        Raises:
            IOFailure: If the output files cannot be opened
            ToolLaunchError: If the process cannot be started
        """
        if is_cancelled():
            LOGGER.info("Cancelled before launching %s", self.command[0])
            return ToolRunResult(exit_code=None, cancelled=True)

        cmd = self.build_command(input_path)
        LOGGER.info("Running: %s", " ".join(cmd))

        try:
            with open(output_path, "wb") as stdout_file, open(err_path, "wb") as stderr_file:
                try:
                    process = subprocess.Popen(
                        cmd,
                        stdout=stdout_file,
                        stderr=stderr_file,
                        stdin=subprocess.DEVNULL,
                        start_new_session=(os.name == "posix"),
                    )
                except OSError as exc:
                    raise ToolLaunchError(f"Unable to start {cmd[0]}: {exc}") from exc

                return self._wait(process, is_cancelled)
        except OSError as exc:
            raise IOFailure(f"Unable to open tool output {output_path}: {exc}") from exc

    def _wait(self, process: subprocess.Popen, is_cancelled: Callable[[], bool]) -> ToolRunResult:
        while True:
            try:
                exit_code = process.wait(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                if is_cancelled():
                    LOGGER.warning("Cancellation requested; stopping pid %d", process.pid)
                    self._terminate(process)
                    return ToolRunResult(exit_code=process.returncode, cancelled=True)
                continue

            if exit_code != 0:
                LOGGER.warning("%s exited with code %d", self.command[0], exit_code)
            return ToolRunResult(exit_code=exit_code)

    def _terminate(self, process: subprocess.Popen) -> None:
        """Terminate the child and its descendants, escalating to kill."""
        self._signal_group(process, signal.SIGTERM)
        try:
            process.wait(timeout=TERMINATE_GRACE_SECONDS)
            return
        except subprocess.TimeoutExpired:
            LOGGER.warning("pid %d ignored SIGTERM; killing", process.pid)

        self._signal_group(process, getattr(signal, "SIGKILL", signal.SIGTERM))
        process.wait()

    @staticmethod
    def _signal_group(process: subprocess.Popen, sig: int) -> None:
        try:
            if os.name == "posix":
                os.killpg(process.pid, sig)
            elif sig == signal.SIGTERM:
                process.terminate()
            else:
                process.kill()
        except ProcessLookupError:
            pass
