from typing import Optional


class InvalidJobRequest(ValueError):
    """Client-side problem with a process request; `index` points at the bad timestamp entry."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


class ToolError(RuntimeError):
    """An external tool (yt-dlp, ffmpeg) failed or could not be started."""

    def __init__(self, tool: str, message: str, *, exit_code: Optional[int] = None, stderr: str = "") -> None:
        super().__init__(message)
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr


class JobCancelled(ToolError):
    """The job's cancel token fired while a tool was running."""
