"""
Unit tests for FastAPI application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from preoccupied.hooksync.app import app
from preoccupied.hooksync.config import ConfigError
from preoccupied.hooksync.registry import HookEntry, HookRegistry
from preoccupied.hooksync.resolver import RepoState
from preoccupied.hooksync.sync import SyncOutcome, SyncResult

from conftest import git_failure


@pytest.fixture
def registry(hook_entry):
    """
    Install a registry with a single hook on the app.
    """

    registry = HookRegistry([hook_entry])
    app.state.registry = registry
    yield registry
    del app.state.registry


@pytest.fixture
def client(registry):
    """
    Create a test client for the FastAPI app, without running its
    lifespan.
    """

    return TestClient(app)


class TestTriggerEndpoint:
    """
    Tests for the /hooks/{hook_id} trigger endpoint.
    """

    def test_trigger_accepted(self, client, hook_entry):
        """
        Test that a trigger is acknowledged and runs a sync.
        """

        with patch('preoccupied.hooksync.app.sync_hook', new_callable=AsyncMock) as mock_sync:
            response = client.post('/hooks/test-hook', json={'ref': 'refs/heads/main'})

        assert response.status_code == 200
        assert response.json() == {'status': 'accepted', 'hook': 'test-hook'}
        mock_sync.assert_called_once_with(hook_entry)

    def test_trigger_unknown_hook(self, client):
        """
        Test that an unregistered hook is a 404 with no sync.
        """

        with patch('preoccupied.hooksync.app.sync_hook', new_callable=AsyncMock) as mock_sync:
            response = client.post('/hooks/nonexistent', json={})

        assert response.status_code == 404
        assert "Hook 'nonexistent' not found" in response.json()['detail']
        mock_sync.assert_not_called()

    def test_trigger_without_body(self, client):
        with patch('preoccupied.hooksync.app.sync_hook', new_callable=AsyncMock) as mock_sync:
            response = client.post('/hooks/test-hook')

        assert response.status_code == 200
        mock_sync.assert_called_once()

    def test_trigger_non_json_body(self, client):
        with patch('preoccupied.hooksync.app.sync_hook', new_callable=AsyncMock) as mock_sync:
            response = client.post('/hooks/test-hook', content=b'payload=not json')

        assert response.status_code == 200
        mock_sync.assert_called_once()

    def test_trigger_ok_when_pull_fails(self, client, hook_entry):
        """
        Test that a failed pull still answers 200, and the failure is
        recorded on the hook.
        """

        failure = git_failure('git', 'pull', returncode=1, stderr='conflict')
        with patch('preoccupied.hooksync.sync.run', new_callable=AsyncMock, side_effect=failure), \
             patch('preoccupied.hooksync.sync.resolve_state',
                   new_callable=AsyncMock, return_value=RepoState()):
            response = client.post('/hooks/test-hook', json={})

        assert response.status_code == 200
        assert hook_entry.history[-1].outcome == SyncOutcome.VCS_FAILURE
        assert not hook_entry.busy

    def test_trigger_ok_when_sync_raises(self, client):
        with patch('preoccupied.hooksync.app.sync_hook', new_callable=AsyncMock,
                   side_effect=RuntimeError('boom')):
            response = client.post('/hooks/test-hook', json={})

        assert response.status_code == 200

    def test_trigger_while_busy(self, client, hook_entry):
        """
        Test that a trigger during a pull is accepted but dropped.
        """

        hook_entry.guard.try_acquire()
        with patch('preoccupied.hooksync.sync.run', new_callable=AsyncMock) as mock_run:
            response = client.post('/hooks/test-hook', json={})

        assert response.status_code == 200
        mock_run.assert_not_called()
        assert hook_entry.history[-1].outcome == SyncOutcome.GUARD_BUSY


class TestStatusEndpoints:
    """
    Tests for the diagnostic hook listing endpoints.
    """

    def test_list_hooks(self, client):
        response = client.get('/hooks')

        assert response.status_code == 200
        assert response.json() == {'test-hook': {'path': '/tmp/test-repo', 'busy': False}}

    def test_hook_status(self, client, hook_entry):
        hook_entry.last_state = RepoState(active_branch='main', upstream='origin/main',
                                          remote_url='https://example.com/r.git')
        hook_entry.record(SyncResult(hook_id='test-hook', outcome=SyncOutcome.SUCCESS))

        response = client.get('/hooks/test-hook')

        assert response.status_code == 200
        data = response.json()
        assert data['hook'] == 'test-hook'
        assert data['busy'] is False
        assert data['state']['active_branch'] == 'main'
        assert data['history'][0]['outcome'] == 'success'

    def test_hook_status_unknown(self, client):
        assert client.get('/hooks/nonexistent').status_code == 404


class TestStartupEvent:
    """
    Tests for the startup event handler.
    """

    @pytest.mark.asyncio
    async def test_startup_builds_registry(self, mock_config):
        """
        Test that startup builds the registry onto the app state.
        """

        target = FastAPI()
        registry = HookRegistry([HookEntry(id='test-hook', path='/tmp/test-repo')])

        with patch('preoccupied.hooksync.app.get_config', return_value=mock_config), \
             patch('preoccupied.hooksync.app.build_registry', new_callable=AsyncMock,
                   return_value=registry) as mock_build:

            from preoccupied.hooksync.app import app_startup
            result = await app_startup(target)

        mock_build.assert_called_once_with(mock_config)
        assert result is registry
        assert target.state.registry is registry

    @pytest.mark.asyncio
    async def test_startup_raises_on_config_load_failure(self):
        """
        Test that startup raises exception if config loading fails.
        """

        with patch('preoccupied.hooksync.app.get_config', side_effect=ConfigError('Config error')), \
             patch('preoccupied.hooksync.app.logger'):

            from preoccupied.hooksync.app import app_startup

            with pytest.raises(ConfigError, match='Config error'):
                await app_startup(FastAPI())

    def test_lifespan(self, mock_config, hook_entry):
        """
        Test that running the app's lifespan installs the registry.
        """

        registry = HookRegistry([hook_entry])

        with patch('preoccupied.hooksync.app.get_config', return_value=mock_config), \
             patch('preoccupied.hooksync.app.build_registry', new_callable=AsyncMock,
                   return_value=registry):
            with TestClient(app) as client:
                response = client.get('/hooks')

        assert response.json() == {'test-hook': {'path': '/tmp/test-repo', 'busy': False}}
        del app.state.registry


# The end.
