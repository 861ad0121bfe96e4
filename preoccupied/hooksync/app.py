"""
FastAPI webhook application for the hooksync service.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import json
import logging
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request

from .config import get_config
from .registry import HookEntry, HookRegistry, build_registry
from .sync import sync_hook


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def app_startup(app: FastAPI) -> HookRegistry:
    """
    Startup event handler for the app
    """

    # a bad configuration is fatal
    try:
        config = get_config()
    except Exception as e:
        logger.error(f'Failed to load configuration: {e}', exc_info=True)
        raise

    registry = app.state.registry = await build_registry(config)
    return registry


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """
    Lifespan event handler for the app
    """

    logger.info('Starting up...')

    await app_startup(app)

    try:
        yield
    finally:

        logger.info('Shutting down...')


app = FastAPI(lifespan=app_lifespan)


def get_registry(request: Request) -> HookRegistry:
    return getattr(request.app.state, 'registry', None) or HookRegistry()


def get_entry(request: Request, hook_id: str) -> HookEntry:
    entry = get_registry(request).get(hook_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Hook '{hook_id}' not found")
    return entry


async def run_sync(entry: HookEntry) -> None:
    """
    Background task running a single pull for a hook
    """

    try:
        await sync_hook(entry)
    except Exception as e:
        logger.error(f"Unexpected error syncing hook '{entry.id}': {e}", exc_info=True)


@app.post('/hooks/{hook_id}')
async def trigger(hook_id: str, request: Request, background_tasks: BackgroundTasks):
    """
    Trigger a pull for the hook. The pull runs after the response is
    sent, so the response says nothing of its outcome.
    """

    entry = get_entry(request, hook_id)

    body = await request.body()
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = body.decode('utf-8', errors='replace')
    logger.info(f"Trigger for hook '{hook_id}': {payload}")

    background_tasks.add_task(run_sync, entry)
    return {'status': 'accepted', 'hook': hook_id}


@app.get('/hooks')
async def list_hooks(request: Request):
    """
    List the registered hooks
    """

    return {hook_id: {'path': entry.path, 'busy': entry.busy}
            for hook_id, entry in get_registry(request).items()}


@app.get('/hooks/{hook_id}')
async def hook_status(hook_id: str, request: Request):
    """
    Status of a registered hook, including its recent results
    """

    entry = get_entry(request, hook_id)
    return {
        'hook': entry.id,
        'path': entry.path,
        'busy': entry.busy,
        'state': entry.last_state.model_dump() if entry.last_state else None,
        'history': [result.model_dump(mode='json') for result in entry.history],
    }


# The end.
