"""
Command line entry point for the hooksync service.

:author: Christopher O'Brien <obriencj@preoccupied.net>
:license: GNU General Public License v3
:ai-assistant: Auto via Cursor
"""

import logging
import sys
from argparse import ArgumentParser

import uvicorn

from .config import ConfigError, get_config


logger = logging.getLogger(__name__)


def create_parser() -> ArgumentParser:
    parser = ArgumentParser(prog='hooksync',
                            description='Pull local repositories when their webhooks fire')

    parser.add_argument('config', nargs='?', default=None,
                        help='configuration file (default: $CONFIG_PATH or config.yaml)')
    parser.add_argument('--host', default=None,
                        help='override the configured bind address')
    parser.add_argument('--port', type=int, default=None,
                        help='override the configured bind port')
    parser.add_argument('--log-level', default='info',
                        choices=('debug', 'info', 'warning', 'error'),
                        help='logging level (default: info)')

    return parser


def main(args=None) -> int:
    options = create_parser().parse_args(args)

    logging.basicConfig(level=options.log_level.upper())

    try:
        config = get_config(options.config)
    except ConfigError as e:
        logger.error(f'Configuration error - {e}')
        return 1

    host = options.host or config.server.host
    port = options.port if options.port is not None else config.server.port

    logger.info(f'App server listening at {host}:{port}')
    uvicorn.run('preoccupied.hooksync.app:app', host=host, port=port,
                log_level=options.log_level)
    return 0


if __name__ == '__main__':
    sys.exit(main())


# The end.
