"""
Catalog Option Enablement — Placement Legality
================================================
Decides whether one option may be moved to a proposed placement
given what is already on the product.

Evaluation order (first failure wins):
    1. option cannot split and placement is LEFT / RIGHT → DISABLED_NO_SPLITTING
    2. |bake_after[L] - bake_after[R]| > bake_differential → DISABLED_SPLIT_DIFFERENTIAL
    3. bake_after on either side > bake_max                → DISABLED_WEIGHT
    4. flavor_after on either side > flavor_max            → DISABLED_FLAVORS
    5. option enable function evaluates falsy              → DISABLED_FUNCTION
    otherwise                                              → ENABLED

bake_after[side] = bake_count[side] + bake_factor * Δ[side], where Δ
is read from DELTA_MATRIX[current placement][proposed placement].
Time / availability and fulfillment gates are applied by the
metadata generator before this calculator runs.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from engines.product_config.catalog import CatalogSelectors
from engines.product_config.enums import DisableReason, OptionPlacement, ProductLocation
from engines.product_config.expressions import evaluate_function
from engines.product_config.models import (
    OPTION_ENABLED,
    Option,
    OptionEnableState,
    Product,
    Selection,
)
from engines.product_config.selection import get_placement

logger = logging.getLogger("catalog.enablement")
_default_logger = logger

LEFT = ProductLocation.LEFT
RIGHT = ProductLocation.RIGHT

# (Δleft, Δright) indexed by [current placement][proposed placement]
DELTA_MATRIX: Tuple[Tuple[Tuple[int, int], ...], ...] = (
    #  →NONE     →LEFT     →RIGHT    →WHOLE
    ((0, 0),   (1, 0),   (0, 1),   (1, 1)),    # NONE
    ((-1, 0),  (-1, 0),  (-1, 1),  (0, 1)),    # LEFT
    ((0, -1),  (1, -1),  (0, -1),  (1, 0)),    # RIGHT
    ((-1, -1), (0, -1),  (-1, 0),  (-1, -1)),  # WHOLE
)


def _after(counts: Sequence[float], factor: float, delta: Tuple[int, int]) -> Tuple[float, float]:
    return (
        counts[LEFT] + factor * delta[LEFT],
        counts[RIGHT] + factor * delta[RIGHT],
    )


def is_option_enabled(
    option: Option,
    selection: Selection,
    bake_count: Sequence[float],
    flavor_count: Sequence[float],
    location: OptionPlacement,
    product: Product,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
) -> OptionEnableState:
    """Whether `option` may take placement `location` on the configured product."""
    log = logger or _default_logger

    if not option.metadata.can_split and location != OptionPlacement.WHOLE:
        return OptionEnableState(reason=DisableReason.DISABLED_NO_SPLITTING)

    flags = product.display_flags
    current = get_placement(selection, option.modifier_type_id, option.id).placement
    delta = DELTA_MATRIX[current][location]

    bake_after = _after(bake_count, option.metadata.bake_factor, delta)
    if flags.bake_differential < abs(bake_after[LEFT] - bake_after[RIGHT]):
        return OptionEnableState(reason=DisableReason.DISABLED_SPLIT_DIFFERENTIAL)
    if bake_after[LEFT] > flags.bake_max or bake_after[RIGHT] > flags.bake_max:
        return OptionEnableState(reason=DisableReason.DISABLED_WEIGHT)

    flavor_after = _after(flavor_count, option.metadata.flavor_factor, delta)
    if flavor_after[LEFT] > flags.flavor_max or flavor_after[RIGHT] > flags.flavor_max:
        return OptionEnableState(reason=DisableReason.DISABLED_FLAVORS)

    if option.enable:
        function = catalog.product_instance_function(option.enable)
        if function is None:
            log.warning(
                "Option %s references missing enable function %s, ignoring.",
                option.id, option.enable,
            )
        elif not evaluate_function(selection, function, catalog, log):
            return OptionEnableState(
                reason=DisableReason.DISABLED_FUNCTION, function_id=option.enable,
            )

    return OPTION_ENABLED
