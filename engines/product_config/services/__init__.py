"""
Catalog Product Config Engine — Application Service
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from core.config import EngineSettings
from core.primitives import Money
from core.time import Clock, get_default_clock, now_local
from engines.product_config.catalog import CatalogSelectors
from engines.product_config.metadata import (
    ConfiguredProduct,
    ProductConfigMetadata,
    create_product_with_metadata,
    generate_product_metadata,
)
from engines.product_config.models import Selection
from engines.product_config.pricing import compute_potential_prices


class ProductMetadataService:
    """
    Entry point for storefront and order-intake callers.

    Holds one catalog snapshot, a clock for callers that do not pass
    a service time, and the settings that name its logger.
    """

    def __init__(
        self,
        catalog: CatalogSelectors,
        clock: Optional[Clock] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._catalog = catalog
        self._clock = clock or get_default_clock()
        self._settings = settings or EngineSettings()
        self._logger = logging.getLogger(f"{self._settings.logger_name}.service")

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def _service_time(self, service_time: Optional[datetime]) -> datetime:
        if service_time is not None:
            return service_time
        return now_local(self._settings.store_tz, self._clock)

    def describe(
        self,
        product_id: str,
        selection: Selection,
        fulfillment_id: str,
        service_time: Optional[datetime] = None,
    ) -> ProductConfigMetadata:
        at = self._service_time(service_time)
        self._logger.debug("Describing product %s for %s at %s.", product_id, fulfillment_id, at)
        return generate_product_metadata(
            product_id, selection, self._catalog, at, fulfillment_id, logger=self._logger,
        )

    def potential_prices(self, metadata: ProductConfigMetadata) -> List[Money]:
        return compute_potential_prices(metadata, self._catalog, logger=self._logger)

    def configure(
        self,
        product_id: str,
        selection: Selection,
        fulfillment_id: str,
        service_time: Optional[datetime] = None,
    ) -> ConfiguredProduct:
        at = self._service_time(service_time)
        return create_product_with_metadata(
            product_id, selection, self._catalog, at, fulfillment_id, logger=self._logger,
        )
