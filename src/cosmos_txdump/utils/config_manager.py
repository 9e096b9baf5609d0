"""Configuration management for the transaction dump tool."""

import json
import os
import yaml
from dataclasses import asdict, fields
from typing import Dict, Any, Optional
import logging

from ..models.core import FetcherConfig, VALID_STRATEGIES


logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages loading and validation of fetcher configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[FetcherConfig] = None

    def load_config(self, force_reload: bool = False) -> FetcherConfig:
        """Load fetcher configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            FetcherConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()
        known = {f.name for f in fields(FetcherConfig)}

        try:
            self._config_cache = FetcherConfig(
                **{key: value for key, value in config_data.items() if key in known}
            )
            logger.info(f"Configuration loaded successfully from {self.config_path or 'defaults'}")
            return self._config_cache

        except (TypeError, ValueError) as e:
            logger.warning(f"Error loading configuration: {e}. Using defaults.")
            self._config_cache = FetcherConfig()
            return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.info("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations

        Returns:
            Path to configuration file or None if not found
        """
        if self.config_path:
            return self.config_path

        search_paths = [
            'txdump_config.json',
            'txdump_config.yml',
            'txdump_config.yaml',
            'config/txdump_config.json',
            'config/txdump_config.yml',
            'config/txdump_config.yaml',
            os.path.expanduser('~/.cosmos_txdump/config.json'),
            os.path.expanduser('~/.cosmos_txdump/config.yml'),
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Args:
            data: Configuration data to validate

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        for str_key in ['url', 'txs_path', 'output_directory', 'log_directory']:
            if str_key in data:
                if not isinstance(data[str_key], str):
                    raise ValueError(f"{str_key} must be a string")
                if not data[str_key].strip():
                    raise ValueError(f"{str_key} cannot be empty")

        if 'url' in data and not data['url'].startswith(('http://', 'https://')):
            raise ValueError("url must start with http:// or https://")

        for number_key in ['timeout', 'request_delay', 'backoff_factor']:
            if number_key in data:
                value = data[number_key]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"{number_key} must be a number")
                if value < 0:
                    raise ValueError(f"{number_key} cannot be negative")

        for int_key in ['max_concurrency', 'retries']:
            if int_key in data:
                value = data[int_key]
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"{int_key} must be an integer")
                if value < 0:
                    raise ValueError(f"{int_key} cannot be negative")

        if data.get('max_concurrency') == 0:
            raise ValueError("max_concurrency must be at least 1")

        if 'strategy' in data and data['strategy'] not in VALID_STRATEGIES:
            raise ValueError(f"Invalid strategy: {data['strategy']}")

    def generate_config_template(self, output_path: str, format: str = 'json') -> bool:
        """Write a configuration file populated with the defaults

        Args:
            output_path: Where to write the template
            format: "json" or "yaml"

        Returns:
            True if successful, False otherwise
        """
        template = asdict(FetcherConfig())

        try:
            directory = os.path.dirname(output_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                if format == 'yaml':
                    yaml.safe_dump(template, f, default_flow_style=False, sort_keys=False)
                else:
                    json.dump(template, f, indent=2)
            logger.info(f"Configuration template written to {output_path}")
            return True
        except OSError as e:
            logger.error(f"Error writing configuration template {output_path}: {e}")
            return False
