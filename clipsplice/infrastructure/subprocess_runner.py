"""
Run external tools as argument vectors (never through a shell) and report
the result as CommandSucceeded | CommandFailed.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Union

from clipsplice.domain.errors import JobCancelled

logger = logging.getLogger(__name__)

# Shell conventions for "not executable" and "command not found"
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandSucceeded:
    output: str


@dataclass(frozen=True)
class CommandFailed:
    exit_code: int
    stderr: str


CommandOutcome = Union[CommandSucceeded, CommandFailed]


class CancelToken:
    """
    One per job. Firing it kills whichever subprocess the job is waiting on.
    Must be created and fired on the event loop that runs the job.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


class CommandRunner(Protocol):
    """Anything with run_command's signature."""

    async def __call__(
        self, argv: Sequence[str], token: Optional[CancelToken] = None, *, name: Optional[str] = None
    ) -> CommandOutcome: ...


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode(errors="replace")


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
    await proc.wait()


async def run_command(
    argv: Sequence[str], token: Optional[CancelToken] = None, *, name: Optional[str] = None
) -> CommandOutcome:
    """
    Start argv[0] with the remaining arguments and wait for it to exit.
    name is the tool as users know it (argv[0] may be the Python interpreter);
    it is what cancellation errors report.

    Raises JobCancelled if the token fires first (the process is killed).
    A missing executable is reported as CommandFailed with exit code 127.
    """
    tool = name or argv[0]
    if token is not None and token.cancelled:
        raise JobCancelled(tool, f"{tool} not started: {token.reason}")

    logger.debug("Running: %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return CommandFailed(exit_code=EXIT_NOT_FOUND, stderr=f"{argv[0]} not found on PATH")
    except PermissionError as e:
        return CommandFailed(exit_code=EXIT_NOT_EXECUTABLE, stderr=f"{argv[0]} is not executable: {e}")

    communicate = asyncio.ensure_future(proc.communicate())
    waiter = asyncio.ensure_future(token.wait()) if token is not None else None
    try:
        if waiter is None:
            stdout, stderr = await communicate
        else:
            await asyncio.wait({communicate, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if not communicate.done():
                logger.warning("Killing %s (pid %s): %s", tool, proc.pid, token.reason)
                await _kill(proc)
                await communicate
                raise JobCancelled(tool, f"{tool} {token.reason}")
            stdout, stderr = communicate.result()
    except asyncio.CancelledError:
        await _kill(proc)
        raise
    finally:
        if waiter is not None:
            waiter.cancel()

    if proc.returncode == 0:
        return CommandSucceeded(output=_decode(stdout))
    return CommandFailed(exit_code=proc.returncode, stderr=_decode(stderr))
