import logging
import shutil
from pathlib import Path
from typing import List, Optional

import ffmpeg

from clipsplice.domain.errors import ToolError
from clipsplice.infrastructure.subprocess_runner import (
    CancelToken,
    CommandFailed,
    CommandRunner,
    run_command,
)

logger = logging.getLogger(__name__)

VIDEO_CODEC = "libx264"
AUDIO_CODEC = "aac"


def check_ffmpeg() -> bool:
    """True if an ffmpeg binary is on PATH."""
    return shutil.which("ffmpeg") is not None


def build_clip_command(input_video: Path, start: float, end: float, output_clip: Path) -> List[str]:
    """
    Cut [start, end) seconds out of input_video and re-encode it.
    Seeking is an output option, so the cut is frame accurate.
    """
    return (
        ffmpeg.input(str(input_video))
        .output(
            str(output_clip),
            ss=start,
            to=end,
            vcodec=VIDEO_CODEC,
            acodec=AUDIO_CODEC,
        )
        .overwrite_output()
        .compile()
    )


async def extract_clip(
    input_video: Path,
    start: float,
    end: float,
    output_clip: Path,
    *,
    run: CommandRunner = run_command,
    token: Optional[CancelToken] = None,
) -> Path:
    logger.info("Creating clip from %ss to %ss", start, end)
    outcome = await run(build_clip_command(input_video, start, end, output_clip), token, name="ffmpeg")
    if isinstance(outcome, CommandFailed):
        raise ToolError(
            "ffmpeg",
            f"ffmpeg failed (exit {outcome.exit_code}): {outcome.stderr.strip()[-2000:]}",
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
        )
    return output_clip
