"""
Configuration models and loading for the hooksync application.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, PositiveFloat, ValidationError, model_validator


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = 'config.yaml'


_config: Optional['RootConfig'] = None


class ConfigError(Exception):
    """
    The configuration is missing or malformed
    """


class ServerConfig(BaseModel):
    """
    HTTP bind options
    """

    host: str = '127.0.0.1'
    port: int = Field(default=8080, ge=0, le=65535)


class GlobalConfig(BaseModel):
    """
    Global configuration settings
    """

    pull_timeout: Optional[PositiveFloat] = None


class HookConfig(BaseModel):
    """
    Hook configuration
    """

    id: str
    path: str
    pull_timeout: Optional[PositiveFloat] = None


class RootConfig(BaseModel):
    """
    Root configuration model
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    global_: GlobalConfig = Field(alias='global', default_factory=GlobalConfig)
    hooks: Dict[str, HookConfig] = Field(default_factory=dict)

    model_config = {'populate_by_name': True}


    @model_validator(mode='before')
    def apply_global_defaults(cls, v: Any) -> Any:
        """
        Apply global config defaults to hooks that don't have them set.
        """

        if not isinstance(v, dict):
            return v

        fixed = dict(v)
        glbl = v.get('global', v.get('global_')) or {}
        if isinstance(glbl, GlobalConfig):
            glbl = glbl.model_dump()

        hooks = fixed['hooks'] = dict(v.get('hooks') or {})
        for hook_id, hook in hooks.items():
            if not isinstance(hook, dict):
                continue
            hook = hooks[hook_id] = hook.copy()
            if hook.setdefault('id', hook_id) != hook_id:
                raise ValueError(f"Hook '{hook_id}' has mismatched id '{hook['id']}'")
            hook.setdefault('pull_timeout', glbl.get('pull_timeout'))

        return fixed


def _config_from_env() -> Dict[str, Any]:
    """
    Build configuration dictionary from HOOKSYNC_* environment variables.
    """

    server_config = {}
    pairs = (
        ('HOOKSYNC_HOST', 'host'),
        ('HOOKSYNC_PORT', 'port'))

    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            server_config[config_key] = value

    global_config = {}
    value = os.environ.get('HOOKSYNC_PULL_TIMEOUT')
    if value is not None:
        global_config['pull_timeout'] = value

    hook_config = {}
    pairs = (
        ('HOOKSYNC_HOOK_ID', 'id'),
        ('HOOKSYNC_HOOK_PATH', 'path'))

    for env_var, config_key in pairs:
        value = os.environ.get(env_var)
        if value is not None:
            hook_config[config_key] = value

    if hook_config:
        hook_config.setdefault('id', 'default')

    result = {'server': server_config, 'global': global_config}
    if hook_config:
        result['hooks'] = {hook_config['id']: hook_config}
    return result


def load_config(path: Optional[str] = None) -> 'RootConfig':
    """
    Load and validate configuration from the YAML (or JSON) file at
    path, overlaid with HOOKSYNC_* environment variables. Raises
    ConfigError if the result is unusable.
    """

    if path is None:
        path = os.environ.get('CONFIG_PATH', DEFAULT_CONFIG_PATH)

    env_config = _config_from_env()

    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f'Configuration file {path} could not be read: {e}') from e

        if not isinstance(config_data, dict):
            raise ConfigError(f'Configuration file {path} is empty or not a mapping')

        for section in ('server', 'global', 'hooks'):
            if config_data.get(section) is None:
                config_data[section] = {}
            elif not isinstance(config_data[section], dict):
                raise ConfigError(f"Configuration section '{section}' in {path} is not a mapping")
            config_data[section].update(env_config.get(section, {}))

    elif 'hooks' in env_config:
        config_data = env_config

    else:
        raise ConfigError(f'Configuration file {path} not found')

    try:
        config = RootConfig.model_validate(config_data)
    except ValidationError as e:
        raise ConfigError(f'Configuration file {path} is invalid: {e}') from e

    logger.info(f'Loaded configuration with {len(config.hooks)} hooks')
    return config


def get_config(path: Optional[str] = None) -> 'RootConfig':
    """
    Get the global config object, loading it on first use.
    """

    global _config

    if _config is None:
        _config = load_config(path)

    return _config


def set_config(config: Optional['RootConfig']) -> None:
    """
    Replace the cached global config object.
    """

    global _config
    _config = config


# The end.
