"""
Git command execution for the hooksync application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import asyncio
import logging
import subprocess
from typing import NamedTuple, Optional, Tuple


logger = logging.getLogger(__name__)


class CapturedOutput(NamedTuple):
    """
    Output of a successfully completed command.
    """

    args: Tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


class VcsError(subprocess.CalledProcessError):
    """
    A version control command failed to spawn, exited non-zero, or
    ran past its timeout. ``returncode`` is None when the process
    never produced an exit status of its own.
    """

    @property
    def message(self) -> str:
        stderr = self.stderr.strip() if self.stderr else ''
        if self.returncode is None:
            status = 'did not complete'
        else:
            status = f'exited with status {self.returncode}'
        if stderr:
            return f'{stderr} ({status})'
        return status

    def __str__(self) -> str:
        return f'Command {self.cmd!r} failed: {self.message}'


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ''
    return data.decode('utf-8', errors='replace')


def _kill(process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        # already exited
        pass


async def run(*args: str, cwd: str = None, timeout: float = None) -> CapturedOutput:
    """
    Run a command with the given working directory and capture its
    output. Arguments are passed straight to the process, never
    through a shell.

    Raises VcsError on a spawn failure, a non-zero exit, or a timeout.
    """

    logger.debug(f'Running {args} in {cwd}')
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise VcsError(None, args, stderr=str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        logger.warning(f'Killing {args} in {cwd} after {timeout} seconds')
        _kill(process)
        await process.wait()
        raise VcsError(None, args, stderr=f'timeout after {timeout} seconds')
    except BaseException:
        # cancelled, or otherwise abandoned; don't leave the child running
        logger.warning(f'Killing {args} in {cwd} after cancellation')
        _kill(process)
        raise

    if process.returncode != 0:
        raise VcsError(process.returncode, args,
                       output=_decode(stdout), stderr=_decode(stderr))

    return CapturedOutput(args, process.returncode, _decode(stdout).rstrip(), _decode(stderr))


# The end.
