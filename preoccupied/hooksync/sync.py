"""
Pull orchestration for a single hook.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from .git import VcsError, run
from .guard import GuardBusy
from .resolver import resolve_state


if TYPE_CHECKING:
    from .registry import HookEntry


logger = logging.getLogger(__name__)


PULL_COMMAND = ('git', 'pull')


class SyncOutcome(str, Enum):
    SUCCESS = 'success'
    VCS_FAILURE = 'vcs_failure'
    GUARD_BUSY = 'guard_busy'


class SyncResult(BaseModel):
    """
    Outcome of a single pull attempt for a hook
    """

    hook_id: str
    outcome: SyncOutcome
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    message: Optional[str] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None
    returncode: Optional[int] = None

    model_config = {'frozen': True}


async def sync_hook(entry: 'HookEntry', refresh_state: bool = True) -> SyncResult:
    """
    Pull the repository for the given hook entry, unless a pull is
    already running for it, in which case the request is dropped with a
    GUARD_BUSY result.

    When refresh_state is set the entry's last_state is re-resolved
    after the pull completes, while the guard is still held.
    """

    try:
        with entry.guard.hold():
            result = await _pull(entry, refresh_state)

    except GuardBusy:
        logger.info(f"Pull already in progress for hook '{entry.id}', dropping trigger")
        result = SyncResult(hook_id=entry.id, outcome=SyncOutcome.GUARD_BUSY)

    entry.record(result)
    return result


async def _pull(entry: 'HookEntry', refresh_state: bool) -> SyncResult:
    logger.info(f'Executing git pull for {entry.path}')
    try:
        output = await run(*PULL_COMMAND, cwd=entry.path, timeout=entry.timeout)

    except VcsError as e:
        logger.error(f"Pull failed for hook '{entry.id}': {e.message}")
        result = SyncResult(
            hook_id=entry.id,
            outcome=SyncOutcome.VCS_FAILURE,
            message=e.message,
            stdout=e.output or None,
            stderr=e.stderr or None,
            returncode=e.returncode,
        )

    else:
        logger.info(f"Pull succeeded for hook '{entry.id}': {output.stdout}")
        result = SyncResult(
            hook_id=entry.id,
            outcome=SyncOutcome.SUCCESS,
            stdout=output.stdout,
            stderr=output.stderr or None,
            returncode=output.returncode,
        )

    if refresh_state:
        state = entry.last_state = await resolve_state(entry.path)
        logger.info(f"Hook '{entry.id}' now at {entry.path}:{state.active_branch}"
                    f" -> {state.remote_url}:{state.upstream}")

    return result


# The end.
