"""
Callback interface for extractor progress reporting and cancellation.
"""

from typing import Protocol


class ExtractorCallbacks(Protocol):
    """
    Callback interface for extractor progress reporting.

    Routines call these methods to report progress, logs, and errors.
    Implementations can be synchronous (for testing) or signal-based (for Qt UI).
    """

    def on_progress(self, current: int, total: int, message: str = "") -> None:
        """
        Report progress.

        Example:
            callbacks.on_progress(2, 5, "Processing file 2/5")
        """
        ...

    def on_log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Log message
            level: "debug" | "info" | "warning" | "error"
        """
        ...

    def on_error(self, error: str, details: str = "") -> None:
        """Report an error summary to the user."""
        ...

    def on_step(self, step_name: str) -> None:
        """Report entering a new processing step."""
        ...

    def is_cancelled(self) -> bool:
        """
        Check if user cancelled the operation.

        Polled, never interrupts: routines check it between files and the
        tool runner checks it while waiting on the child process.
        """
        ...

