"""Configuration management for cavectl"""

import os
import sys
from pathlib import Path
from typing import Dict, Any, Optional
import yaml
from appdirs import user_config_dir, user_data_dir
from dotenv import load_dotenv


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries.

    For nested dicts, recursively merge instead of overwriting, so that a
    user can set catalog.timeout_seconds without losing catalog.base_url.

    Args:
        base: Base configuration dict
        override: Override values to merge in

    Returns:
        Merged dictionary (base is modified in place and returned)
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def current_platform() -> str:
    """Get the catalog platform name for the running OS"""
    if sys.platform.startswith('win'):
        return 'windows'
    if sys.platform == 'darwin':
        return 'osx'
    return 'linux'


class Config:
    """Manage cavectl configuration"""

    def __init__(self, config_path: Optional[Path] = None, data_dir: Optional[Path] = None):
        # Load environment variables
        load_dotenv()

        # Setup paths
        self.app_name = "cavectl"
        self.config_dir = Path(user_config_dir(self.app_name))
        self.data_dir = Path(data_dir) if data_dir else Path(user_data_dir(self.app_name))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self.config_path = config_path or self.config_dir / "config.yaml"

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file and environment"""
        config = self._get_defaults()

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}
                _deep_merge(config, file_config)

        api_key = os.getenv('CAVECTL_API_KEY')
        if api_key:
            config['api_key'] = api_key

        catalog_url = os.getenv('CAVECTL_CATALOG_URL')
        if catalog_url:
            config['catalog']['base_url'] = catalog_url

        platform = os.getenv('CAVECTL_PLATFORM')
        if platform:
            config['install']['platform'] = platform.lower()

        return config

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'api_key': None,
            'database_path': str(self.data_dir / 'caves.db'),

            'catalog': {
                'base_url': 'https://api.itch.io',
                'timeout_seconds': 30,
                'rate_limit_seconds': 0.0,
            },

            'install': {
                'platform': current_platform(),
                'default_location': None,
                'queue_download': False,
            },

            'ui': {
                'confirm_external': True,
            },
        }

    def save(self):
        """Save configuration to file"""
        with open(self.config_path, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with dot notation support"""
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value with dot notation support"""
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self.save()

    @property
    def api_key(self) -> Optional[str]:
        """Get catalog API key from config or environment"""
        return self.get('api_key') or os.getenv('CAVECTL_API_KEY')

    @property
    def database_path(self) -> Path:
        """Get database path"""
        return Path(self.get('database_path'))

    @property
    def api_key_file(self) -> Path:
        """Get path to API key file (fallback storage)"""
        return self.config_dir / "api_key"

    # Catalog API settings
    @property
    def catalog_base_url(self) -> str:
        """Get catalog API base URL"""
        return self.get('catalog.base_url', 'https://api.itch.io')

    @property
    def catalog_timeout_seconds(self) -> int:
        """Get catalog API timeout in seconds"""
        return int(self.get('catalog.timeout_seconds', 30))

    @property
    def catalog_rate_limit_seconds(self) -> float:
        """Minimum delay between catalog requests"""
        return float(self.get('catalog.rate_limit_seconds', 0.0))

    # Install settings
    @property
    def platform(self) -> str:
        """Platform used to filter compatible uploads"""
        return self.get('install.platform') or current_platform()

    @property
    def default_install_location(self) -> Optional[str]:
        """Install location used when none is given"""
        return self.get('install.default_location')

    @property
    def queue_download(self) -> bool:
        """Whether install jobs are queued for download by default"""
        return bool(self.get('install.queue_download', False))

    @property
    def confirm_external(self) -> bool:
        """Whether to prompt before installing external uploads"""
        return bool(self.get('ui.confirm_external', True))
