"""
Configuration module for the CRM intent engine.
"""
from .settings import (
    EngineConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'EngineConfig',
    'get_config',
    'load_config',
    'reload_config'
]
