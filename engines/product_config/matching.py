"""
Catalog Instance Matcher — Named Configuration Lookup
=======================================================
Finds, independently for the left and right half of a product,
the most customized catalog instance the customer's selection
still matches ("Pepperoni" on the left, "Cheese" on the right).

Comparison of selection a against reference b, per modifier type:

    Single-select (min = max = 1):
        a holds exactly one option and b does not hold exactly that
        option → that option's cell is AT_LEAST on both sides and
        the pair is no longer a mirror. Otherwise all EXACT_MATCH.

    Multi-select: each member option looks up
        MATCH_MATRIX[placement in a][placement in b]
        → (left level, right level, breaks mirror)

Each side's level is the minimum over its cells (EXACT_MATCH when
there are none). Instances are scanned from the most customized
(last) to the base (first); the first non-NO_MATCH per side wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Set, Tuple

from engines.product_config.catalog import CatalogSelectors
from engines.product_config.enums import MatchLevel, OptionPlacement, ProductLocation
from engines.product_config.errors import InstanceMatchIntegrityError
from engines.product_config.models import (
    Product,
    ProductInstance,
    ProductModifierRef,
    ProductSelection,
    Selection,
)

logger = logging.getLogger("catalog.matching")
_default_logger = logger

NO_MATCH = MatchLevel.NO_MATCH
AT_LEAST = MatchLevel.AT_LEAST
EXACT = MatchLevel.EXACT_MATCH

LEFT = ProductLocation.LEFT
RIGHT = ProductLocation.RIGHT

# [placement in a][placement in b] → (left, right, breaks_mirror)
MATCH_MATRIX: Tuple[Tuple[Tuple[MatchLevel, MatchLevel, bool], ...], ...] = (
    #  b: NONE                  LEFT                    RIGHT                   WHOLE
    ((EXACT, EXACT, False),    (NO_MATCH, EXACT, True),  (EXACT, NO_MATCH, True),  (NO_MATCH, NO_MATCH, True)),   # a: NONE
    ((AT_LEAST, EXACT, True),  (EXACT, EXACT, True),     (NO_MATCH, NO_MATCH, False), (EXACT, NO_MATCH, True)),   # a: LEFT
    ((EXACT, AT_LEAST, True),  (NO_MATCH, NO_MATCH, False), (EXACT, EXACT, True),  (NO_MATCH, EXACT, True)),      # a: RIGHT
    ((AT_LEAST, AT_LEAST, True), (EXACT, AT_LEAST, True), (AT_LEAST, EXACT, True), (EXACT, EXACT, False)),        # a: WHOLE
)

# mtid → {moid → level}, in product / modifier type order
SideMatrix = Dict[str, Dict[str, MatchLevel]]


@dataclass(frozen=True)
class ProductCompareResult:
    mirror: bool
    match_matrix: Tuple[SideMatrix, SideMatrix]
    match: Tuple[MatchLevel, MatchLevel]


@dataclass(frozen=True)
class InstanceMatch:
    """Matched instance, its side matrix and its level, for each side."""

    instances: Tuple[ProductInstance, ProductInstance]
    matrices: Tuple[SideMatrix, SideMatrix]
    levels: Tuple[MatchLevel, MatchLevel]

    @property
    def left(self) -> ProductInstance:
        return self.instances[LEFT]

    @property
    def right(self) -> ProductInstance:
        return self.instances[RIGHT]


def _options_by_type(selection: Selection) -> Dict[str, tuple]:
    grouped: Dict[str, tuple] = {}
    for entry in selection:
        grouped.setdefault(entry.modifier_type_id, entry.options)
    return grouped


def _extract_match(matrix: SideMatrix) -> MatchLevel:
    return min(
        (level for cells in matrix.values() for level in cells.values()),
        default=EXACT,
    )


# ══════════════════════════════════════════════════════════════
# SELECTION COMPARISON
# ══════════════════════════════════════════════════════════════

def compare_selections(
    product_modifiers: Sequence[ProductModifierRef],
    a: Selection,
    b: Selection,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
) -> ProductCompareResult:
    """Compare selection `a` against reference selection `b` of the same product."""
    log = logger or _default_logger
    a_options = _options_by_type(a)
    b_options = _options_by_type(b)
    left: SideMatrix = {}
    right: SideMatrix = {}
    mirror = True

    for ref in product_modifiers:
        modifier_type = catalog.modifier_entry(ref.mtid)
        if modifier_type is None:
            log.error("Cannot find modifier type %s, skipping in comparison.", ref.mtid)
            continue
        left_cells = {moid: EXACT for moid in modifier_type.options}
        right_cells = dict(left_cells)
        left[ref.mtid] = left_cells
        right[ref.mtid] = right_cells
        first = a_options.get(ref.mtid, ())
        other = b_options.get(ref.mtid, ())

        if modifier_type.is_single_select:
            if len(first) == 1:
                chosen = first[0].option_id
                if len(other) != 1 or other[0].option_id != chosen:
                    if chosen in left_cells:
                        left_cells[chosen] = AT_LEAST
                        right_cells[chosen] = AT_LEAST
                        mirror = False
            continue

        first_placement = {o.option_id: o.placement for o in first}
        other_placement = {o.option_id: o.placement for o in other}
        for moid in modifier_type.options:
            cell = MATCH_MATRIX[first_placement.get(moid, OptionPlacement.NONE)][
                other_placement.get(moid, OptionPlacement.NONE)
            ]
            left_cells[moid] = cell[LEFT]
            right_cells[moid] = cell[RIGHT]
            mirror = mirror and not cell[2]

    return ProductCompareResult(
        mirror=mirror,
        match_matrix=(left, right),
        match=(_extract_match(left), _extract_match(right)),
    )


def compare_products(
    a: ProductSelection,
    b: ProductSelection,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
) -> ProductCompareResult:
    """Compare two configured products; different product ids never match."""
    product = catalog.product_entry(a.product_id)
    if a.product_id != b.product_id or product is None:
        return ProductCompareResult(mirror=False, match_matrix=({}, {}), match=(NO_MATCH, NO_MATCH))
    return compare_selections(product.modifiers, a.modifiers, b.modifiers, catalog, logger)


def products_equal(result: ProductCompareResult) -> bool:
    return result.mirror or (result.match[LEFT] == EXACT and result.match[RIGHT] == EXACT)


# ══════════════════════════════════════════════════════════════
# INSTANCE MATCHING
# ══════════════════════════════════════════════════════════════

def match_product_instances(
    product: Product,
    selection: Selection,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
) -> InstanceMatch:
    """
    Resolve the matching instance for each side of `selection`.

    Raises InstanceMatchIntegrityError when a side stays unmatched,
    which a catalog with a sane base instance never produces.
    """
    log = logger or _default_logger
    found = [None, None]
    matrices: list = [{}, {}]
    levels = [EXACT, EXACT]
    visited: Set[str] = set()

    for instance_id in reversed(product.instances):
        if found[LEFT] is not None and found[RIGHT] is not None:
            break
        if instance_id in visited:
            log.warning("Instance %s listed twice on product %s.", instance_id, product.id)
            continue
        visited.add(instance_id)
        instance = catalog.product_instance(instance_id)
        if instance is None:
            log.error("Cannot find product instance %s of product %s.", instance_id, product.id)
            continue
        result = compare_selections(product.modifiers, selection, instance.modifiers, catalog, log)
        for side in (LEFT, RIGHT):
            if found[side] is None and result.match[side] != NO_MATCH:
                found[side] = instance
                matrices[side] = result.match_matrix[side]
                levels[side] = result.match[side]

    for side in (LEFT, RIGHT):
        if found[side] is None:
            raise InstanceMatchIntegrityError(product.id, side.name.lower(), selection)

    return InstanceMatch(
        instances=(found[LEFT], found[RIGHT]),
        matrices=(matrices[LEFT], matrices[RIGHT]),
        levels=(levels[LEFT], levels[RIGHT]),
    )
