"""
Catalog Potential-Price Enumerator
====================================
Lists every price an incomplete configuration can still end up at.

Each group that has not met its minimum contributes the set of
distinct prices of its options currently enabled for WHOLE
placement. Sets are folded pairwise into their Cartesian sums,
the configuration's current price is added, and the result is
returned ascending without duplicates.

Assumes the incomplete groups are independent single-select
groups: no enable function of one depends on another's choice.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from core.primitives import Money
from engines.product_config.catalog import CatalogSelectors
from engines.product_config.metadata import ProductConfigMetadata

logger = logging.getLogger("catalog.pricing")
_default_logger = logger


def compute_potential_prices(
    metadata: ProductConfigMetadata,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
) -> List[Money]:
    log = logger or _default_logger
    price_sets: List[Set[int]] = []
    for mtid, group in metadata.modifier_map.items():
        if group.meets_minimum:
            continue
        amounts: Set[int] = set()
        for moid, state in group.options.items():
            if not state.enable_whole.enabled:
                continue
            option = catalog.option(moid)
            if option is None:
                log.error("Unable to find option %s of modifier type %s.", moid, mtid)
                continue
            amounts.add(option.price.amount)
        price_sets.append(amounts)

    if not price_sets:
        return [metadata.price]

    while len(price_sets) >= 2:
        first, second = price_sets[0], price_sets[1]
        price_sets[0:2] = [{a + b for a in first for b in second}]

    return [metadata.price.plus_minor(amount) for amount in sorted(price_sets[0])]
