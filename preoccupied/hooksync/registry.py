"""
Registry of hook entries, built once at startup from configuration.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List, Optional

from pydantic import BaseModel, Field

from .config import RootConfig
from .guard import SyncGuard
from .resolver import RepoState, resolve_active_branch, resolve_remote_url, resolve_upstream
from .sync import SyncResult


logger = logging.getLogger(__name__)


HISTORY_SIZE = 10


class HookEntry(BaseModel):
    """
    A configured hook bound to a local working copy
    """

    id: str = Field(frozen=True)
    path: str = Field(frozen=True)
    timeout: Optional[float] = Field(default=None, frozen=True)
    guard: SyncGuard = Field(default_factory=SyncGuard, frozen=True, exclude=True)
    last_state: Optional[RepoState] = None
    history: List[SyncResult] = Field(default_factory=list)

    model_config = {'arbitrary_types_allowed': True}


    @property
    def busy(self) -> bool:
        return self.guard.locked


    def record(self, result: SyncResult) -> None:
        """
        Remember a result, keeping only the most recent HISTORY_SIZE
        """

        self.history.append(result)
        del self.history[:-HISTORY_SIZE]


class HookRegistry(Mapping):
    """
    Read-only mapping of hook id to HookEntry
    """

    def __init__(self, entries: Iterable[HookEntry] = ()):
        self._entries: Dict[str, HookEntry] = {}
        for entry in entries:
            if entry.id in self._entries:
                raise ValueError(f"Duplicate hook id '{entry.id}'")
            self._entries[entry.id] = entry


    def __getitem__(self, hook_id: str) -> HookEntry:
        return self._entries[hook_id]


    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


    def __len__(self) -> int:
        return len(self._entries)


    def __repr__(self):
        return f'<HookRegistry {list(self._entries)}>'


async def build_registry(config: RootConfig) -> HookRegistry:
    """
    Validate each configured hook and build the registry from those
    whose repository has a resolvable active branch. Hooks that fail
    validation are logged and left out.
    """

    entries = []

    for hook_id, hook in config.hooks.items():
        if not os.path.isdir(hook.path):
            logger.error(f"{hook.path} is not a directory; hook '{hook_id}' will be skipped")
            continue

        branch = await resolve_active_branch(hook.path)
        if not branch:
            logger.error(f"could not resolve active branch for {hook.path};"
                         f" hook '{hook_id}' will be skipped")
            continue

        upstream = await resolve_upstream(hook.path)
        remote_url = await resolve_remote_url(hook.path, upstream)
        state = RepoState(active_branch=branch, upstream=upstream, remote_url=remote_url)

        entries.append(HookEntry(
            id=hook_id,
            path=hook.path,
            timeout=hook.pull_timeout,
            last_state=state,
        ))

        logger.info(f'{hook_id} -> {hook.path}:{branch} -> {remote_url}:{upstream}')

    registry = HookRegistry(entries)
    logger.info(f'Registered {len(registry)} of {len(config.hooks)} hooks')
    return registry


# The end.
