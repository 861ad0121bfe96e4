"""
Branch, upstream, and remote resolution for hook repositories.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
from typing import Optional

from pydantic import BaseModel

from .git import VcsError, run


logger = logging.getLogger(__name__)


_UNSET = object()


class RepoState(BaseModel):
    """
    Snapshot of the branch and tracking state of a repository
    """

    active_branch: Optional[str] = None
    upstream: Optional[str] = None
    remote_url: Optional[str] = None

    model_config = {'frozen': True}


    @property
    def remote_name(self) -> Optional[str]:
        return remote_name(self.upstream)


def remote_name(upstream: Optional[str]) -> Optional[str]:
    """
    The remote portion of an upstream reference such as origin/main
    """

    if not upstream:
        return None
    return upstream.split('/', 1)[0]


async def resolve_active_branch(path: str) -> Optional[str]:
    """
    Name of the branch checked out at path, or None if HEAD is
    detached or cannot be resolved.
    """

    try:
        result = await run('git', 'rev-parse', '--abbrev-ref', 'HEAD', cwd=path)
    except VcsError as e:
        logger.warning(f'Unable to resolve active branch for {path}: {e.message}')
        return None

    branch = result.stdout
    if not branch or branch == 'HEAD':
        return None
    return branch


async def resolve_upstream(path: str) -> Optional[str]:
    """
    The upstream tracking reference for HEAD at path, or None if no
    upstream is configured.
    """

    try:
        result = await run('git', 'rev-parse', '--abbrev-ref',
                           '--symbolic-full-name', '@{u}', cwd=path)
    except VcsError as e:
        logger.info(f'No upstream for {path}: {e.message}')
        return None

    return result.stdout or None


async def resolve_remote_url(path: str, upstream=_UNSET) -> Optional[str]:
    """
    URL of the remote that the upstream of HEAD at path belongs to.
    An already resolved upstream may be passed in to skip querying it
    a second time.
    """

    if upstream is _UNSET:
        upstream = await resolve_upstream(path)

    name = remote_name(upstream)
    if not name:
        return None

    try:
        result = await run('git', 'config', '--get', f'remote.{name}.url', cwd=path)
    except VcsError as e:
        logger.warning(f'Unable to resolve URL of remote {name!r} for {path}: {e.message}')
        return None

    return result.stdout or None


async def resolve_state(path: str) -> RepoState:
    """
    Resolve a fresh RepoState for the repository at path
    """

    branch = await resolve_active_branch(path)
    upstream = await resolve_upstream(path)
    remote_url = await resolve_remote_url(path, upstream)

    return RepoState(
        active_branch=branch,
        upstream=upstream,
        remote_url=remote_url,
    )


# The end.
