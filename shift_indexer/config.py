"""
Configuration loading: defaults, YAML file, .env and environment overrides.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from shift_indexer.core.handlers import ProjectionContext
from shift_indexer.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path('config/config.yaml')

NETWORK_CHAIN_IDS = {
    'base': 8453,
    'base_sepolia': 84532,
}

DEFAULT_CONFIG: Dict[str, Any] = {
    'database': {
        'url': 'sqlite:///data/shift_indexer.db',
        'create_tables': True,
        'connection': {
            'echo': False,
            'pool_size': 5,
            'max_overflow': 10,
            'pool_timeout': 30
        },
        'performance': {
            'pragma': {
                'journal_mode': 'WAL',
                'synchronous': 'NORMAL'
            }
        },
        'backup': {
            'path': 'data/backups'
        }
    },
    'indexer': {
        'network': 'base_sepolia',
        'chain_id': None,
        'community_id': None,
        'deployments_dir': 'deployments'
    },
    'logging': {
        'level': 'INFO'
    }
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_env(config: Dict[str, Any], environ: Dict[str, str]) -> None:
    if environ.get('DATABASE_URL'):
        config['database']['url'] = environ['DATABASE_URL']
    if environ.get('INDEXER_NETWORK'):
        config['indexer']['network'] = environ['INDEXER_NETWORK']
    if environ.get('INDEXER_LOG_LEVEL'):
        config['logging']['level'] = environ['INDEXER_LOG_LEVEL']

    for env_key, config_key in (('INDEXER_CHAIN_ID', 'chain_id'), ('INDEXER_COMMUNITY_ID', 'community_id')):
        if environ.get(env_key):
            try:
                config['indexer'][config_key] = int(environ[env_key])
            except ValueError as e:
                raise ConfigurationError(f"{env_key} must be an integer: {environ[env_key]!r}") from e


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
    load_env_file: bool = True
) -> Dict[str, Any]:
    """
    Load indexer configuration.

    Args:
        path: YAML config file; ``config/config.yaml`` is used when present
        environ: Environment mapping; defaults to ``os.environ``
        load_env_file: Whether to load a ``.env`` file first

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the config file cannot be read
    """
    if load_env_file:
        load_dotenv()
    environ = dict(os.environ if environ is None else environ)

    config = copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read config file {config_path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        config = _merge(config, file_config)
    elif path:
        raise ConfigurationError(f"Config file not found: {config_path}")

    _apply_env(config, environ)
    return config


def load_deployment_community_id(deployments_dir: Union[str, Path], network: str) -> Optional[int]:
    """Read ``communityId`` from ``<deployments_dir>/<network>.json`` if present."""
    deployment_path = Path(deployments_dir) / f"{network}.json"
    if not deployment_path.exists():
        return None
    try:
        with open(deployment_path) as f:
            deployment = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read deployment file {deployment_path}: {e}") from e

    community_id = deployment.get('communityId')
    return int(community_id) if community_id is not None else None


def build_context(config: Dict[str, Any]) -> ProjectionContext:
    """
    Resolve the chain id and default community id for the projector.

    Explicit values win; otherwise the chain id comes from the network table
    and the community id from the network's deployment file, falling back to 0.
    """
    indexer = config['indexer']
    network = indexer.get('network')

    chain_id = indexer.get('chain_id')
    if chain_id is None:
        if network not in NETWORK_CHAIN_IDS:
            raise ConfigurationError(f"Unknown network {network!r}; set indexer.chain_id")
        chain_id = NETWORK_CHAIN_IDS[network]

    community_id = indexer.get('community_id')
    if community_id is None:
        community_id = load_deployment_community_id(indexer.get('deployments_dir', 'deployments'), network)
        if community_id is None:
            logging.getLogger(__name__).warning(
                f"No community id configured for {network}; defaulting to 0"
            )
            community_id = 0

    return ProjectionContext(chain_id=int(chain_id), default_community_id=int(community_id))
