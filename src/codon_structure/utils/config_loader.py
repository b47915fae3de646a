"""
Configuration loader utility module.
"""

import copy
import os
import yaml
from typing import Dict, Any, List
import logging

from ..exceptions import ConfigError

logger = logging.getLogger(__name__)

SOURCE_TYPES = ('local', 'remote')
DOMAIN_CLASSIFICATIONS = ('cath', 'scop')
FRAME_POLICIES = ('warn', 'skip')
FIGURE_FORMATS = ('svg', 'pdf', 'png')


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Missing optional sections are filled from the defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Dictionary with configuration data
    """
    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML configuration: {e}")
        raise ConfigError(f"Error parsing YAML configuration: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError("Configuration must be a mapping")

    config = merge_configs(get_default_config(), config)
    validate_config(config)

    logger.info("Configuration loaded successfully")
    return config


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Raises:
        ConfigError: If configuration is invalid
    """
    logger.debug("Validating configuration")

    for key in ['genes', 'weights', 'source', 'analysis', 'output_dir']:
        if key not in config:
            raise ConfigError(f"Missing required configuration key: {key}")

    weights = config['weights']
    if not isinstance(weights, dict):
        raise ConfigError("weights configuration must be a dictionary")
    if not weights.get('species') and not weights.get('table'):
        raise ConfigError("weights configuration needs either 'species' or 'table'")

    source = config['source']
    if not isinstance(source, dict):
        raise ConfigError("source configuration must be a dictionary")
    if source.get('type') not in SOURCE_TYPES:
        raise ConfigError(f"source type must be one of {SOURCE_TYPES}, got {source.get('type')!r}")
    if source['type'] == 'local' and not source.get('data_dir'):
        raise ConfigError("A local source needs 'data_dir'")
    if source.get('domain_classification', 'cath') not in DOMAIN_CLASSIFICATIONS:
        raise ConfigError(f"domain_classification must be one of {DOMAIN_CLASSIFICATIONS}")

    analysis = config['analysis']
    if not isinstance(analysis, dict):
        raise ConfigError("analysis configuration must be a dictionary")
    if analysis.get('frame_policy') not in FRAME_POLICIES:
        raise ConfigError(f"frame_policy must be one of {FRAME_POLICIES}")

    try:
        radius = int(analysis['radius'])
        cache_size = int(source.get('cache_size', 0))
        timeout = float(source.get('timeout', 1))
    except (KeyError, ValueError, TypeError) as e:
        raise ConfigError(f"Invalid numeric values in configuration: {e}") from e

    if radius < 0:
        raise ConfigError("radius must be non-negative")
    if cache_size < 0:
        raise ConfigError("cache_size must be non-negative")
    if timeout <= 0:
        raise ConfigError("timeout must be positive")

    if config.get('figure_format', 'svg') not in FIGURE_FORMATS:
        raise ConfigError(f"figure_format must be one of {FIGURE_FORMATS}")

    logger.debug("Configuration validation passed")


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration template.

    Returns:
        Dictionary with default configuration
    """
    return {
        'genes': 'genes.txt',
        'weights': {
            'species': 'E. coli',
            'table': None
        },
        'source': {
            'type': 'local',
            'data_dir': 'data',
            'dssp': 'mkdssp',
            'cache_size': 256,
            'timeout': 60,
            'domain_classification': 'cath'
        },
        'analysis': {
            'radius': 5,
            'frame_policy': 'warn'
        },
        'output_dir': 'results',
        'figure_format': 'svg'
    }


def save_config(config: Dict[str, Any], output_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        output_path: Path to save configuration
    """
    logger.info(f"Saving configuration to {output_path}")

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, indent=2, sort_keys=False)


def merge_configs(base_config: Dict[str, Any],
                  override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration dictionary
    """
    result = copy.deepcopy(base_config)

    for key, value in override_config.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def expand_paths(config: Dict[str, Any], base_dir: str = '.') -> Dict[str, Any]:
    """
    Expand relative paths in configuration to absolute paths.

    Args:
        config: Configuration dictionary
        base_dir: Base directory for relative paths

    Returns:
        Configuration with expanded paths
    """
    expanded = copy.deepcopy(config)

    def _expand(path):
        return os.path.abspath(os.path.join(base_dir, path)) if path else path

    expanded['genes'] = _expand(expanded.get('genes'))
    expanded['output_dir'] = _expand(expanded.get('output_dir'))
    expanded['weights']['table'] = _expand(expanded['weights'].get('table'))
    expanded['source']['data_dir'] = _expand(expanded['source'].get('data_dir'))

    return expanded


def create_example_config(output_path: str) -> None:
    """
    Create an example configuration file.

    Args:
        output_path: Path to save example configuration
    """
    save_config(get_default_config(), output_path)
    logger.info("Example configuration created successfully")


def validate_file_paths(config: Dict[str, Any]) -> List[str]:
    """
    Validate that all file paths in configuration exist.

    Args:
        config: Configuration dictionary

    Returns:
        List of missing file paths
    """
    paths = [config.get('genes'), config['weights'].get('table')]
    if config['source'].get('type') == 'local':
        paths.append(config['source'].get('data_dir'))

    missing_paths = [path for path in paths if path and not os.path.exists(path)]

    if missing_paths:
        logger.warning(f"Missing file paths: {missing_paths}")
    else:
        logger.info("All file paths validated successfully")

    return missing_paths
