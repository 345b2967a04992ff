"""
Catalog Core Config — Engine Settings
=======================================
Deployment-level knobs for the catalog engines.
Doctrine: No hardcoded currency or log level in engine logic.

Settings are a frozen value. Production reads them from the
environment once at startup; tests construct them directly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from typing import Mapping, Optional

from core.time import resolve_timezone


_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FORMAT = "%(levelname)s %(name)s %(message)s"


# ══════════════════════════════════════════════════════════════
# ENGINE SETTINGS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EngineSettings:
    """
    Settings shared by the catalog engines.

    default_currency is applied to prices that arrive without one.
    logger_name is the root of every engine logger ("catalog.metadata", ...).
    timezone is the store's IANA zone; availability windows that recur
    daily are measured from midnight in this zone.
    """

    default_currency: str = "USD"
    log_level: str = "INFO"
    logger_name: str = "catalog"
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        if (
            not isinstance(self.default_currency, str)
            or len(self.default_currency) != 3
            or not self.default_currency.isalpha()
        ):
            raise ValueError(
                f"default_currency must be a 3-letter ISO 4217 code, "
                f"got '{self.default_currency}'."
            )
        if self.log_level not in _VALID_LEVELS:
            raise ValueError(
                f"log_level must be one of {_VALID_LEVELS}, got '{self.log_level}'."
            )
        if not self.logger_name:
            raise ValueError("logger_name must be non-empty.")
        resolve_timezone(self.timezone)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
        env = os.environ if environ is None else environ
        return cls(
            default_currency=env.get("CATALOG_DEFAULT_CURRENCY", "USD").upper(),
            log_level=env.get("CATALOG_LOG_LEVEL", "INFO").upper(),
            logger_name=env.get("CATALOG_LOGGER_NAME", "catalog"),
            timezone=env.get("CATALOG_TIMEZONE", "UTC"),
        )

    @property
    def store_tz(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    def to_dict(self) -> dict:
        return {
            "default_currency": self.default_currency,
            "log_level": self.log_level,
            "logger_name": self.logger_name,
            "timezone": self.timezone,
        }


# ══════════════════════════════════════════════════════════════
# LOGGING SETUP
# ══════════════════════════════════════════════════════════════

def configure_logging(settings: EngineSettings) -> logging.Logger:
    """
    Attach one stream handler to the settings' root logger.

    Safe to call repeatedly: an existing stream handler is reused
    and only its level is updated.
    """
    logger = logging.getLogger(settings.logger_name)
    logger.setLevel(settings.log_level)
    handler = next(
        (h for h in logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    handler.setLevel(settings.log_level)
    return logger
