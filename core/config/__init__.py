"""
Catalog Core Config — Public API
==================================
Engine settings and logging setup.
Doctrine: No hardcoded currency or log level in engine logic.
"""

from core.config.settings import (
    LOG_FORMAT,
    EngineSettings,
    configure_logging,
)

__all__ = [
    "EngineSettings",
    "configure_logging",
    "LOG_FORMAT",
]
