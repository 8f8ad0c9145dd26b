"""
Configuration management for voyagemath.

This module provides functionality for managing configuration,
including loading from environment variables, files and default values.
"""

import json
import logging
import os
import threading
from copy import deepcopy
from typing import Any, Dict, Optional

import yaml

# Set up logging
logger = logging.getLogger(__name__)


def to_int(value: Any) -> Optional[int]:
    """
    Convert a value to an integer.

    Args:
        value: Value to convert

    Returns:
        Integer value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def to_float(value: Any) -> Optional[float]:
    """
    Convert a value to a float.

    Args:
        value: Value to convert

    Returns:
        Float value, or None if conversion failed
    """
    if value is None:
        return None

    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def to_bool(value: Any) -> Optional[bool]:
    """
    Convert a value to a boolean.

    Args:
        value: Value to convert

    Returns:
        Boolean value, or None if conversion failed
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, (int, float)):
        return bool(value)

    if isinstance(value, str):
        value = value.lower().strip()
        if value in ('true', 'yes', 'y', '1', 't'):
            return True
        if value in ('false', 'no', 'n', '0', 'f'):
            return False

    return None


def read_config_file(filepath: str) -> Dict[str, Any]:
    """Read a JSON or YAML configuration file."""
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f) or {}
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported file format: {filepath}")


class Config:
    """
    Configuration manager for voyagemath.
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            overrides: Optional configuration overrides
        """
        self._lock = threading.RLock()
        self._config = {}
        self._initialized = False

        # Load configuration
        self.load_config(overrides)

    def load_config(self, overrides: Optional[Dict[str, Any]] = None) -> None:
        """
        Load configuration from all sources.

        Args:
            overrides: Optional configuration overrides
        """
        with self._lock:
            # Start with default configuration
            config = self._get_defaults()

            # Apply environment variables
            config = self._apply_env_vars(config)

            # Apply overrides
            if overrides:
                config = self._apply_overrides(config, overrides)

            # Store configuration
            self._config = config
            self._initialized = True

            logger.info("Configuration loaded")

    def _get_defaults(self) -> Dict[str, Any]:
        """
        Get default configuration values.

        Returns:
            Default configuration
        """
        return {
            # PCA
            'pca': {
                'n-components': None,   # keep every component
                'iterations': 30,       # power iterations per component
                'tolerance': None       # radians; None runs the full count
            },

            # K-means
            'kmeans': {
                'k': None,              # None picks k with evaluation.method
                'max-iterations': 100
            },

            # Cluster count selection
            'evaluation': {
                'sweep': True,
                'max-k': 10,
                'method': 'elbow',
                'silhouette-max-rows': 2000
            },

            # Cluster breakdowns
            'profiles': {
                'distribution-columns': ['Sex', 'Pclass']
            },

            # Random source shared by PCA and k-means
            'random': {
                'seed': None
            },

            # Logging
            'logging': {
                'level': 'warn'
            }
        }

    def _apply_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply environment variables to configuration.

        Args:
            config: Current configuration

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # PCA
        if 'VOYAGE_PCA_COMPONENTS' in os.environ:
            config['pca']['n-components'] = to_int(os.environ['VOYAGE_PCA_COMPONENTS'])
        config['pca']['iterations'] = to_int(os.environ.get('VOYAGE_PCA_ITERATIONS', config['pca']['iterations']))
        if 'VOYAGE_PCA_TOLERANCE' in os.environ:
            config['pca']['tolerance'] = to_float(os.environ['VOYAGE_PCA_TOLERANCE'])

        # K-means
        config['kmeans']['k'] = to_int(os.environ.get('VOYAGE_KMEANS_K', config['kmeans']['k']))
        config['kmeans']['max-iterations'] = to_int(os.environ.get('VOYAGE_KMEANS_MAX_ITERATIONS', config['kmeans']['max-iterations']))

        # Evaluation
        if 'VOYAGE_SWEEP' in os.environ:
            config['evaluation']['sweep'] = to_bool(os.environ['VOYAGE_SWEEP'])
        config['evaluation']['max-k'] = to_int(os.environ.get('VOYAGE_MAX_K', config['evaluation']['max-k']))
        config['evaluation']['method'] = os.environ.get('VOYAGE_K_METHOD', config['evaluation']['method']).lower()

        # Random
        if 'VOYAGE_SEED' in os.environ:
            config['random']['seed'] = to_int(os.environ['VOYAGE_SEED'])

        # Logging
        config['logging']['level'] = os.environ.get('LOG_LEVEL', config['logging']['level']).lower()

        return config

    def _apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides.

        Args:
            config: Current configuration
            overrides: Configuration overrides

        Returns:
            Updated configuration
        """
        # Make a copy
        config = deepcopy(config)

        # Helper function for deep update
        def deep_update(d, u):
            for k, v in u.items():
                if isinstance(v, dict) and k in d and isinstance(d[k], dict):
                    d[k] = deep_update(d[k], v)
                else:
                    d[k] = v
            return d

        # Apply overrides
        return deep_update(config, deepcopy(overrides))

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            path: Configuration path (dot-separated)
            default: Default value if not found

        Returns:
            Configuration value, or default if not found
        """
        if not self._initialized:
            self.load_config()

        value = self._config

        for component in path.split('.'):
            if isinstance(value, dict) and component in value:
                value = value[component]
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            path: Configuration path (dot-separated)
            value: Configuration value
        """
        with self._lock:
            if not self._initialized:
                self.load_config()

            components = path.split('.')
            config = self._config

            for component in components[:-1]:
                if component not in config:
                    config[component] = {}

                config = config[component]

            config[components[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration dictionary
        """
        if not self._initialized:
            self.load_config()

        return deepcopy(self._config)

    def save_to_file(self, filepath: str) -> None:
        """
        Save configuration to a file.

        Args:
            filepath: Path to save configuration
        """
        if not self._initialized:
            self.load_config()

        # Determine file format from extension
        if filepath.endswith('.json'):
            with open(filepath, 'w') as f:
                json.dump(self._config, f, indent=2)
        elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
            with open(filepath, 'w') as f:
                yaml.dump(self._config, f, default_flow_style=False)
        else:
            raise ValueError(f"Unsupported file format: {filepath}")

    def load_from_file(self, filepath: str) -> None:
        """
        Load configuration from a file.

        Args:
            filepath: Path to load configuration from
        """
        self.load_config(read_config_file(filepath))


class ConfigManager:
    """
    Singleton manager for configuration.
    """

    _instance = None
    _lock = threading.RLock()

    @classmethod
    def get_config(cls, overrides: Optional[Dict[str, Any]] = None) -> Config:
        """
        Get the configuration instance.

        Args:
            overrides: Optional configuration overrides

        Returns:
            Config instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = Config(overrides)
            elif overrides:
                cls._instance.load_config(overrides)

            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance so the next call reloads it."""
        with cls._lock:
            cls._instance = None
