"""Tests for run_command, using the current interpreter as the child process."""

import asyncio
import sys

import pytest

from clipsplice.domain.errors import JobCancelled
from clipsplice.infrastructure.subprocess_runner import (
    EXIT_NOT_FOUND,
    CancelToken,
    CommandFailed,
    CommandSucceeded,
    run_command,
)

PY = sys.executable
SLEEP = [PY, "-c", "import time; time.sleep(30)"]


class TestOutcomes:
    def test_success_captures_stdout(self):
        outcome = asyncio.run(run_command([PY, "-c", "print('hello')"]))
        assert isinstance(outcome, CommandSucceeded)
        assert outcome.output.strip() == "hello"

    def test_failure_captures_exit_code_and_stderr(self):
        code = "import sys; sys.stderr.write('bad input'); sys.exit(3)"
        outcome = asyncio.run(run_command([PY, "-c", code]))
        assert outcome == CommandFailed(exit_code=3, stderr="bad input")

    def test_missing_binary(self):
        outcome = asyncio.run(run_command(["clipsplice-no-such-tool", "--version"]))
        assert isinstance(outcome, CommandFailed)
        assert outcome.exit_code == EXIT_NOT_FOUND
        assert "not found" in outcome.stderr

    def test_arguments_are_not_shell_interpreted(self):
        arg = '"; echo injected; "'
        outcome = asyncio.run(run_command([PY, "-c", "import sys; print(sys.argv[1])", arg]))
        assert outcome.output.strip() == arg


class TestCancellation:
    def test_token_kills_running_process(self):
        async def scenario():
            token = CancelToken()
            asyncio.get_running_loop().call_later(0.2, token.cancel, "timed out")
            await run_command(SLEEP, token)

        with pytest.raises(JobCancelled, match="timed out"):
            asyncio.run(asyncio.wait_for(scenario(), timeout=10))

    def test_already_cancelled_token_never_starts(self):
        async def scenario():
            token = CancelToken()
            token.cancel("stop")
            await run_command(SLEEP, token)

        with pytest.raises(JobCancelled, match="not started"):
            asyncio.run(scenario())

    def test_cancellation_reports_given_name(self):
        async def scenario():
            token = CancelToken()
            token.cancel("stop")
            await run_command(SLEEP, token, name="yt-dlp")

        with pytest.raises(JobCancelled) as exc:
            asyncio.run(scenario())
        assert exc.value.tool == "yt-dlp"
        assert str(exc.value) == "yt-dlp not started: stop"

    def test_token_unused_when_command_finishes(self):
        async def scenario():
            token = CancelToken()
            outcome = await run_command([PY, "-c", "pass"], token)
            return token, outcome

        token, outcome = asyncio.run(scenario())
        assert isinstance(outcome, CommandSucceeded)
        assert not token.cancelled

    def test_cancel_keeps_first_reason(self):
        async def scenario():
            token = CancelToken()
            token.cancel("first")
            token.cancel("second")
            return token

        token = asyncio.run(scenario())
        assert token.cancelled
        assert token.reason == "first"
