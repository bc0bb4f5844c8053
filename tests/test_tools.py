"""Tests for the yt-dlp and ffmpeg wrappers (no real tools are run)."""

import asyncio
from pathlib import Path

import pytest

from clipsplice.domain.errors import ToolError
from clipsplice.infrastructure.downloaders import (
    VIDEO_FORMAT,
    YTDLP_COMMAND,
    build_download_command,
    download_video,
)
from clipsplice.infrastructure.ffmpeg_adapter import build_clip_command, extract_clip
from clipsplice.infrastructure.subprocess_runner import CommandSucceeded

from conftest import FakeRunner


class TestBuildDownloadCommand:
    def test_basic(self, tmp_path: Path):
        out = tmp_path / "job.mp4"
        argv = build_download_command("https://x/y", out)
        assert argv[: len(YTDLP_COMMAND)] == YTDLP_COMMAND
        assert argv[argv.index("-f") + 1] == VIDEO_FORMAT
        assert argv[argv.index("--merge-output-format") + 1] == "mp4"
        assert argv[argv.index("-o") + 1] == str(out)
        assert argv[-2:] == ["--", "https://x/y"]
        assert "--cookies" not in argv

    def test_cookies_file_passed_when_present(self, tmp_path: Path):
        cookies = tmp_path / "cookies.txt"
        cookies.write_text("# Netscape HTTP Cookie File\n")
        argv = build_download_command("https://x/y", tmp_path / "o.mp4", cookies_file=cookies)
        assert argv[argv.index("--cookies") + 1] == str(cookies)

    def test_missing_cookies_file_ignored(self, tmp_path: Path):
        argv = build_download_command("https://x/y", tmp_path / "o.mp4", cookies_file=tmp_path / "nope.txt")
        assert "--cookies" not in argv

    def test_dash_url_stays_positional(self, tmp_path: Path):
        argv = build_download_command("--exec=rm -rf /", tmp_path / "o.mp4")
        assert argv[-2:] == ["--", "--exec=rm -rf /"]


class TestDownloadVideo:
    def test_success(self, tmp_path: Path):
        runner = FakeRunner()
        out = tmp_path / "dl" / "job.mp4"
        result = asyncio.run(download_video("https://x/y", out, run=runner))
        assert result == out
        assert out.exists()
        assert len(runner.calls) == 1
        assert runner.names == ["yt-dlp"]

    def test_non_zero_exit_raises(self, tmp_path: Path):
        runner = FakeRunner(fail_at=0, stderr="ERROR: Unsupported URL")
        with pytest.raises(ToolError, match="Unsupported URL") as exc:
            asyncio.run(download_video("https://x/y", tmp_path / "job.mp4", run=runner))
        assert exc.value.tool == "yt-dlp"
        assert exc.value.exit_code == 1

    def test_no_output_file_raises(self, tmp_path: Path):
        async def silent(argv, token=None, *, name=None):
            return CommandSucceeded(output="")

        with pytest.raises(ToolError, match="did not produce"):
            asyncio.run(download_video("https://x/y", tmp_path / "job.mp4", run=silent))


class TestBuildClipCommand:
    def test_arguments(self, tmp_path: Path):
        src, out = tmp_path / "src.mp4", tmp_path / "out.mp4"
        argv = build_clip_command(src, 5, 10, out)
        assert argv[0] == "ffmpeg"
        assert argv[argv.index("-i") + 1] == str(src)
        assert argv[argv.index("-ss") + 1] == "5"
        assert argv[argv.index("-to") + 1] == "10"
        assert argv[argv.index("-vcodec") + 1] == "libx264"
        assert argv[argv.index("-acodec") + 1] == "aac"
        assert "-y" in argv
        assert str(out) in argv

    def test_seek_after_input(self, tmp_path: Path):
        argv = build_clip_command(tmp_path / "src.mp4", 1.5, 2.25, tmp_path / "out.mp4")
        assert argv.index("-ss") > argv.index("-i")
        assert argv[argv.index("-ss") + 1] == "1.5"


class TestExtractClip:
    def test_success(self, tmp_path: Path):
        runner = FakeRunner()
        out = tmp_path / "clip.mp4"
        assert asyncio.run(extract_clip(tmp_path / "src.mp4", 0, 1, out, run=runner)) == out
        assert out.exists()
        assert runner.names == ["ffmpeg"]

    def test_failure_raises_with_stderr(self, tmp_path: Path):
        runner = FakeRunner(fail_at=0, stderr="Invalid data found when processing input")
        with pytest.raises(ToolError, match="Invalid data") as exc:
            asyncio.run(extract_clip(tmp_path / "src.mp4", 0, 1, tmp_path / "c.mp4", run=runner))
        assert exc.value.tool == "ffmpeg"
