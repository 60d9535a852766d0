"""
Configuration management for the Firm Normalizer.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .utils.logger import get_logger
from .utils.error_handler import ConfigurationError

logger = get_logger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'knowledge_base': {
        'source': 'data/knowledge_base.json',
        'timeout': 30,
    },
    'matching': {
        'threshold': 0.4,
        'confidence_threshold': 0.35,
    },
    'batch': {
        'chunk_size': 1000,
        'max_workers': 1,
    },
    'display': {
        'max_variants': 100,
    },
    'export': {
        'filename': 'normalized_firms.csv',
    },
    'logging': {
        'level': 'INFO',
        'log_dir': None,
    },
}


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class Config:
    """
    Application settings backed by an optional JSON file.
    
    Values are addressed with dotted keys, e.g. ``matching.confidence_threshold``.
    Settings missing from the file fall back to DEFAULT_CONFIG.
    """
    
    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file else Path('config.json')
        self._config_data = copy.deepcopy(DEFAULT_CONFIG)
        self._load()
    
    def _load(self):
        if not self.config_file.exists():
            logger.debug(f"No config file at {self.config_file}, using defaults")
            return
        
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Could not read config file {self.config_file}: {e}",
                original_exception=e
            )
        
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.config_file} must contain a JSON object")
        
        _merge(self._config_data, data)
        logger.info(f"Loaded configuration from {self.config_file}")
    
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for a dotted key, or default when absent."""
        value: Any = self._config_data
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value
    
    def set(self, key: str, value: Any):
        """Set the value for a dotted key, creating intermediate sections."""
        parts = key.split('.')
        section = self._config_data
        for part in parts[:-1]:
            if not isinstance(section.get(part), dict):
                section[part] = {}
            section = section[part]
        section[parts[-1]] = value
    
    def save(self):
        """Write the current settings back to the config file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self._config_data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(
                f"Could not write config file {self.config_file}: {e}",
                original_exception=e
            )
    
    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config_data)
