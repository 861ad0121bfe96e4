"""
Webhook-triggered pulls of local git working copies.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from preoccupied.hooksync.config import ConfigError, get_config
from preoccupied.hooksync.registry import HookEntry, HookRegistry, build_registry
from preoccupied.hooksync.sync import SyncOutcome, SyncResult, sync_hook


__all__ = [
    'ConfigError', 'HookEntry', 'HookRegistry', 'SyncOutcome', 'SyncResult',
    'build_registry', 'get_config', 'sync_hook',
]


# The end.
