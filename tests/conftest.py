"""
Shared pytest fixtures for hooksync tests.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import tempfile

import pytest

from preoccupied.hooksync import config as config_module
from preoccupied.hooksync.config import GlobalConfig, HookConfig, RootConfig
from preoccupied.hooksync.git import CapturedOutput, VcsError
from preoccupied.hooksync.registry import HookEntry


def git_output(*args, stdout='', stderr=''):
    """
    Build the CapturedOutput a successful run() would return
    """

    return CapturedOutput(tuple(args), 0, stdout, stderr)


def git_failure(*args, returncode=1, stderr=''):
    """
    Build the VcsError a failed run() would raise
    """

    return VcsError(returncode, tuple(args), output='', stderr=stderr)


def fake_git(responses):
    """
    Side effect for a mocked run(), answering each git command from a
    dict keyed by the argument tuple after 'git'. Values are either
    stdout text or an exception to raise.
    """

    async def run(*args, cwd=None, timeout=None):
        response = responses[tuple(args[1:])]
        if isinstance(response, Exception):
            raise response
        return git_output(*args, stdout=response)

    return run


@pytest.fixture
def temp_dir():
    """
    Create a temporary directory for tests.
    """

    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def hook_entry():
    """
    Create a HookEntry for testing.
    """

    return HookEntry(id='test-hook', path='/tmp/test-repo')


@pytest.fixture
def mock_config(temp_dir):
    """
    Create a RootConfig with a single hook pointing at an existing
    directory.
    """

    return RootConfig(
        global_=GlobalConfig(),
        hooks={'test-hook': HookConfig(id='test-hook', path=temp_dir)}
    )


@pytest.fixture
def mock_env_vars(monkeypatch):
    """
    Clear hooksync environment variables and the cached config.
    """

    env_vars_to_clear = [
        'CONFIG_PATH',
        'HOOKSYNC_HOST',
        'HOOKSYNC_PORT',
        'HOOKSYNC_PULL_TIMEOUT',
        'HOOKSYNC_HOOK_ID',
        'HOOKSYNC_HOOK_PATH',
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    config_module.set_config(None)
    yield monkeypatch
    config_module.set_config(None)


# The end.
