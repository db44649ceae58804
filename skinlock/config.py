"""Configuration handler for skinlock"""

import os
import logging
from typing import Dict

import yaml

from .errors import ConfigError
from .lock import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

BASE_PATH_ENV = 'SKINLOCK_BASE_PATH'


class Config:
    """Configuration handler"""

    DEFAULT_CONFIG_FILE = '.skinlock.yml'

    @staticmethod
    def load_config(config_dir: str) -> Dict:
        """Load configuration from YAML file"""
        config_path = os.path.join(config_dir, Config.DEFAULT_CONFIG_FILE)
        if not os.path.exists(config_path):
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return {}

    @staticmethod
    def merge_config(file_config: Dict, cli_args: Dict) -> Dict:
        """Merge file config with CLI arguments, CLI args take precedence"""
        config = {
            'base_path': cli_args.get('base_path') or file_config.get('base-path') or os.environ.get(BASE_PATH_ENV),
            'store': cli_args.get('store') or file_config.get('store'),
            'timeout': _seconds('lock-timeout', cli_args.get('timeout'), file_config.get('lock-timeout'),
                                DEFAULT_TIMEOUT),
            'poll_interval': _seconds('poll-interval', cli_args.get('poll_interval'), file_config.get('poll-interval'),
                                      DEFAULT_POLL_INTERVAL),
            'endpoint_url': cli_args.get('endpoint_url') or file_config.get('endpoint-url'),
            'region': cli_args.get('region') or file_config.get('region'),
        }

        # Remove None values
        return {k: v for k, v in config.items() if v is not None}

    @staticmethod
    def require_base_path(config: Dict) -> str:
        """Return the base path, failing fast when it is unusable"""
        base_path = config.get('base_path')
        if not base_path:
            raise ConfigError(
                f"Skin base path must be set with --base-path, 'base-path' in "
                f"{Config.DEFAULT_CONFIG_FILE} or {BASE_PATH_ENV}"
            )
        base_path = os.path.abspath(os.path.expanduser(str(base_path)))
        if not os.path.isdir(base_path):
            raise ConfigError(f"Skin base path is not a directory: {base_path}")
        return base_path


def _seconds(key, *values):
    for value in values:
        if value is not None:
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ConfigError(f"{key} must be a number of seconds, got {value!r}") from None
    return None
