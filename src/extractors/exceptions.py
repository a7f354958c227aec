"""
Exceptions for extractor routines.
"""


class ExtractorError(Exception):
    """Base exception for extractor errors."""
    pass


class IOFailure(ExtractorError):
    """Raised when files cannot be staged, read or written, or a tool cannot be launched."""
    pass


class StagingError(IOFailure):
    """Raised when a source file cannot be copied to the temp directory."""
    pass


class ToolLaunchError(IOFailure):
    """Raised when the external parser process cannot be started."""
    pass


class MissingToolError(ExtractorError):
    """Raised when required external tool is not found."""

    def __init__(self, tool_name: str, install_hint: str = ""):
        self.tool_name = tool_name
        self.install_hint = install_hint
        message = f"Required tool '{tool_name}' not found"
        if install_hint:
            message += f"\n{install_hint}"
        super().__init__(message)
