"""
GATE Core Config — Public API
===============================
"""

from core.config.engine import MAX_USAGE_CEILING, EngineConfig, load_engine_config

__all__ = [
    "MAX_USAGE_CEILING",
    "EngineConfig",
    "load_engine_config",
]
