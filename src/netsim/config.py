"""
Configuration management for the network sandbox.
Centralizes configuration loading and validation.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv
from loguru import logger
from netsim.catalog import ROUTER_TYPES
from pathlib import Path
from typing import Optional


LOG_LEVELS = ('TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class NetsimConfig:
    """
    Runtime settings for the CLI and for building new sandboxes.
    """
    log_level: str = 'INFO'
    log_file: Optional[str] = None
    debug: bool = False

    # Sandbox defaults
    router_type: str = 'zyxel-router'
    default_ssid_password: str = 'cake10000'

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.log_level = (self.log_level or 'INFO').strip().upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f'log_level must be one of {", ".join(LOG_LEVELS)}')

        if self.router_type not in ROUTER_TYPES:
            raise ValueError(f'router_type must be one of {", ".join(ROUTER_TYPES)}')

        if self.debug:
            self.log_level = 'DEBUG'

        # An empty path means the default log location
        self.log_file = self.log_file.strip() if self.log_file else None
        self.log_file = self.log_file or None

    @classmethod
    def from_env(cls, env_file: str = '.env') -> 'NetsimConfig':
        """
        Load configuration from the environment, reading env_file first if it exists.

        Args:
            env_file: Path to environment file

        Returns:
            NetsimConfig instance

        Raises:
            ValueError: If an environment variable holds an invalid value
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f'Loaded environment from {env_path}')

        return cls(
            log_level=os.environ.get('NETSIM_LOG_LEVEL', 'INFO'),
            log_file=os.environ.get('NETSIM_LOG_FILE'),
            debug=os.environ.get('NETSIM_DEBUG', 'false').lower() in ('1', 'true', 'yes'),
            router_type=os.environ.get('NETSIM_ROUTER_TYPE', 'zyxel-router'),
            default_ssid_password=os.environ.get('NETSIM_DEFAULT_SSID_PASSWORD', 'cake10000'),
        )

    def to_dict(self) -> dict:
        """
        Export configuration as dictionary.

        Returns:
            Dictionary with all configuration values
        """
        return {
            'log_level': self.log_level,
            'log_file': self.log_file,
            'debug': self.debug,
            'router_type': self.router_type,
            'default_ssid_password': self.default_ssid_password,
        }
