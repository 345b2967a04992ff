"""
Catalog Product Config — Selection State Helpers
==================================================
Pure functions over a customer's modifier selection.

A selection comes in two shapes:
    normalized — every option of every product modifier is present,
                 unselected ones with placement NONE (editing UIs)
    minimized  — only placed options, no empty entries (storage, APIs)

Every function returns a new tuple; inputs are never mutated.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from engines.product_config.catalog import CatalogSelectors
from engines.product_config.enums import OptionPlacement, OptionQualifier
from engines.product_config.models import (
    ModifierSelectionEntry,
    ModifierType,
    OptionInstance,
    ProductModifierRef,
    Selection,
)

logger = logging.getLogger("catalog.selection")

_UNORDERED = float("inf")


def get_placement(selection: Selection, mtid: str, moid: str) -> OptionInstance:
    """Current state of (mtid, moid); NONE / REGULAR when not selected."""
    for entry in selection:
        if entry.modifier_type_id != mtid:
            continue
        for instance in entry.options:
            if instance.option_id == moid:
                return instance
    return OptionInstance(moid, OptionPlacement.NONE, OptionQualifier.REGULAR)


# ══════════════════════════════════════════════════════════════
# NORMALIZE / MINIMIZE
# ══════════════════════════════════════════════════════════════

def normalize_selections(
    product_modifiers: Sequence[ProductModifierRef],
    catalog: CatalogSelectors,
    selection: Selection,
) -> Selection:
    """Expand to one entry per product modifier listing every member option."""
    by_type = {e.modifier_type_id: e for e in selection}
    normalized: List[ModifierSelectionEntry] = []
    for ref in product_modifiers:
        modifier_type = catalog.modifier_entry(ref.mtid)
        if modifier_type is None:
            logger.warning("Unknown modifier type %s while normalizing selection.", ref.mtid)
        member_ids = modifier_type.options if modifier_type else ()
        existing = by_type.get(ref.mtid)
        current = {o.option_id: o for o in existing.options} if existing else {}
        normalized.append(ModifierSelectionEntry(
            modifier_type_id=ref.mtid,
            options=tuple(
                current.get(moid)
                or OptionInstance(moid, OptionPlacement.NONE, OptionQualifier.REGULAR)
                for moid in member_ids
            ),
        ))
    return tuple(normalized)


def minimize_selections(selection: Selection) -> Selection:
    """Drop NONE placements and the entries they leave empty."""
    minimized = []
    for entry in selection:
        placed = tuple(o for o in entry.options if o.placement != OptionPlacement.NONE)
        if placed:
            minimized.append(ModifierSelectionEntry(entry.modifier_type_id, placed))
    return tuple(minimized)


# ══════════════════════════════════════════════════════════════
# UPDATES (minimized form)
# ══════════════════════════════════════════════════════════════

def update_radio_selection(mtid: str, moid: str, selection: Selection) -> Selection:
    """Make moid the single WHOLE / REGULAR choice of mtid."""
    chosen = (OptionInstance(moid, OptionPlacement.WHOLE, OptionQualifier.REGULAR),)
    if not any(e.modifier_type_id == mtid for e in selection):
        return tuple(selection) + (ModifierSelectionEntry(mtid, chosen),)
    return tuple(
        ModifierSelectionEntry(mtid, chosen) if e.modifier_type_id == mtid else e
        for e in selection
    )


def _sort_by_member_order(
    options: List[OptionInstance], member_ids: Sequence[str],
) -> List[OptionInstance]:
    position = {moid: i for i, moid in enumerate(member_ids)}
    return sorted(options, key=lambda o: position.get(o.option_id, _UNORDERED))


def update_checkbox_selection(
    mtid: str,
    moid: str,
    placement: OptionPlacement,
    qualifier: OptionQualifier,
    selection: Selection,
    modifier_type: ModifierType,
) -> Selection:
    """
    Set, change or clear one option of a multi-select group.

    placement NONE removes the option. In an exclusive group
    (min 0, max 1) any other choice is cleared first. Newly added
    options take their place in the modifier type's option order,
    and a group left with no options is dropped.
    """
    existing: Optional[ModifierSelectionEntry] = next(
        (e for e in selection if e.modifier_type_id == mtid), None,
    )
    options = list(existing.options) if existing else []

    if placement == OptionPlacement.NONE:
        options = [o for o in options if o.option_id != moid]
    else:
        if modifier_type.min_selected == 0 and modifier_type.max_selected == 1:
            options = []
        updated = OptionInstance(moid, placement, qualifier)
        index = next((i for i, o in enumerate(options) if o.option_id == moid), None)
        if index is None:
            options = _sort_by_member_order(options + [updated], modifier_type.options)
        else:
            options[index] = updated

    if existing is None:
        if not options:
            return tuple(selection)
        return tuple(selection) + (ModifierSelectionEntry(mtid, tuple(options)),)
    result = []
    for entry in selection:
        if entry.modifier_type_id != mtid:
            result.append(entry)
        elif options:
            result.append(ModifierSelectionEntry(mtid, tuple(options)))
    return tuple(result)


# ══════════════════════════════════════════════════════════════
# ORDERING
# ══════════════════════════════════════════════════════════════

def sort_modifiers_and_options(selection: Selection, catalog: CatalogSelectors) -> Selection:
    """Entries by modifier type ordinal, options by option ordinal."""
    type_ordinal: Dict[str, float] = {}
    for entry in selection:
        modifier_type = catalog.modifier_entry(entry.modifier_type_id)
        type_ordinal[entry.modifier_type_id] = (
            modifier_type.ordinal if modifier_type else _UNORDERED
        )

    def option_ordinal(instance: OptionInstance):
        option = catalog.option(instance.option_id)
        return option.ordinal if option else _UNORDERED

    return tuple(
        ModifierSelectionEntry(
            entry.modifier_type_id,
            tuple(sorted(entry.options, key=option_ordinal)),
        )
        for entry in sorted(selection, key=lambda e: type_ordinal[e.modifier_type_id])
    )
