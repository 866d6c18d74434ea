"""
Configuration management for FilmGrade
"""

import yaml
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def _expand_env_vars(obj: Union[Dict, Any]) -> Union[Dict, Any]:
    """
    Recursively expand environment variables in config values.
    Supports ${VAR_NAME} syntax.
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        pattern = r'\$\{([^}]+)\}'
        def replace_var(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))  # Return original if not found
        return re.sub(pattern, replace_var, obj)
    else:
        return obj


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Values missing from the file are filled in from the defaults.

    Args:
        config_path: Path to config file. If None, uses the bundled config.yaml

    Returns:
        Configuration dictionary
    """
    config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return get_default_config()

    if not isinstance(config, dict):
        logger.error(f"Config file {config_path} does not contain a mapping")
        return get_default_config()

    config = _expand_env_vars(config)
    return _merge(get_default_config(), config)


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    return {
        'preview': {
            'max_width': 1280,
            'workers': 1,
        },
        'export': {
            'jpeg_quality': 90,
            'workers': 4,
            'rows_per_chunk': 256,
            'output_suffix': '_graded',
        },
        'presets': {
            'directory': 'presets',
            'groups': [
                {
                    'label': 'Film Preset',
                    'options': [{'file': 'Film10.cube', 'label': 'Film 10'}],
                },
                {
                    'label': 'Signature Preset',
                    'options': [{'file': 'Misty.cube', 'label': 'Misty'}],
                },
            ],
        },
        'logging': {
            'level': 'INFO',
            'color': True,
        },
    }


def save_config(config: Dict[str, Any], config_path: Path) -> bool:
    """
    Save configuration to YAML file

    Args:
        config: Configuration dictionary to save
        config_path: Path where to save the config

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False, indent=2, sort_keys=False)
        logger.info(f"Saved configuration to {config_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return False


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation

    Args:
        config: Configuration dictionary
        key_path: Dot-separated key path (e.g., 'export.jpeg_quality')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default
