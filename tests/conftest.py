"""Shared test fixtures."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from clipsplice.config import Settings
from clipsplice.infrastructure.storage import ClipStorage
from clipsplice.infrastructure.subprocess_runner import CommandFailed, CommandSucceeded
from clipsplice.main import create_app

FAKE_VIDEO = b"fake video data"


def output_path_of(argv: list[str]) -> Path:
    """Where yt-dlp (-o) or ffmpeg (last .mp4 argument) would write."""
    if "-o" in argv:
        return Path(argv[argv.index("-o") + 1])
    return Path([a for a in argv if a.endswith(".mp4")][-1])


class FakeRunner:
    """
    Stands in for run_command: records every argv and writes a small file
    where the tool would have written its output.

    fail_at: index of the call that should fail instead (0 = the download).
    """

    def __init__(self, fail_at: int | None = None, stderr: str = "boom") -> None:
        self.calls: list[list[str]] = []
        self.names: list[str | None] = []
        self.fail_at = fail_at
        self.stderr = stderr

    async def __call__(self, argv, token=None, *, name=None):
        self.calls.append(list(argv))
        self.names.append(name)
        if self.fail_at is not None and len(self.calls) - 1 == self.fail_at:
            return CommandFailed(exit_code=1, stderr=self.stderr)
        out = output_path_of(list(argv))
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(FAKE_VIDEO)
        return CommandSucceeded(output="")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(downloads_dir=tmp_path / "downloads", clips_dir=tmp_path / "clips")


@pytest.fixture
def storage(settings: Settings) -> ClipStorage:
    s = ClipStorage(settings.downloads_dir, settings.clips_dir)
    s.ensure_directories()
    return s


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def app(settings, runner):
    return create_app(settings, runner=runner)


@pytest.fixture
def client(app):
    return TestClient(app)
