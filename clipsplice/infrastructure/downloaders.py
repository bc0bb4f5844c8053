"""
Download source videos from external URLs (YouTube and anything else yt-dlp supports).
"""
import importlib.util
import logging
import sys
from pathlib import Path
from typing import List, Optional

from clipsplice.domain.errors import ToolError
from clipsplice.infrastructure.subprocess_runner import (
    CancelToken,
    CommandFailed,
    CommandRunner,
    run_command,
)

logger = logging.getLogger(__name__)

# Best mp4 video plus m4a audio, falling back to a single mp4 stream
VIDEO_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/mp4"
CONTAINER = "mp4"

# The yt-dlp installed alongside this package, independent of PATH
YTDLP_COMMAND = [sys.executable, "-m", "yt_dlp"]


def check_ytdlp() -> bool:
    """True if the yt_dlp package is importable by this interpreter."""
    return importlib.util.find_spec("yt_dlp") is not None


def build_download_command(
    url: str,
    output_path: Path,
    *,
    cookies_file: Optional[Path] = None,
) -> List[str]:
    argv = [
        *YTDLP_COMMAND,
        "--quiet",
        "--no-progress",
        "-f", VIDEO_FORMAT,
        "--merge-output-format", CONTAINER,
        "-o", str(output_path),
    ]
    if cookies_file and Path(cookies_file).is_file():
        argv += ["--cookies", str(cookies_file)]
    # "--" keeps a URL that starts with "-" from being read as an option
    argv += ["--", url]
    return argv


async def download_video(
    url: str,
    output_path: Path,
    *,
    cookies_file: Optional[Path] = None,
    run: CommandRunner = run_command,
    token: Optional[CancelToken] = None,
) -> Path:
    """
    Download url to output_path as a single mp4 with yt-dlp.

    If YouTube asks to "sign in to confirm you're not a bot" (common on
    datacenter IPs), point YT_COOKIES_FILE at a Netscape-format cookies file
    exported from a browser; it is passed through as cookies_file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading video: %s", url)
    argv = build_download_command(url, output_path, cookies_file=cookies_file)
    outcome = await run(argv, token, name="yt-dlp")
    if isinstance(outcome, CommandFailed):
        raise ToolError(
            "yt-dlp",
            f"yt-dlp failed (exit {outcome.exit_code}): {outcome.stderr.strip()}",
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
        )
    if not output_path.exists():
        raise ToolError("yt-dlp", f"yt-dlp did not produce {output_path.name}")
    return output_path
