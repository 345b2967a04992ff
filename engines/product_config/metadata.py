"""
Catalog Metadata Generator — Names, Prices and Option States
==============================================================
Derives everything a storefront needs to show one configured
product: display name, short name, description, price, whether
the configuration is split or incomplete, and for every option of
every modifier group whether it may currently go left, right or
whole.

Pipeline:
    1. Match catalog instances for the left and right half
    2. Sum bake / flavor per side and option prices
    3. Per modifier group (by ordinal): group gate, then per-option
       enable state for LEFT / RIGHT / WHOLE
    4. Record selected placements (exhaustive modifiers)
    5. Classify selected options beyond the matched instances
       (additional modifiers)
    6. Minimum-selection check (incomplete groups)
    7. Naming: exact instance, or instance name + additions,
       with split halves joined as "left | right"
    8. Template substitution: {Token} → the group whose
       template_string is Token

RULES:
- Deterministic and idempotent: same inputs → equal metadata
- Unknown referenced ids are logged and skipped, never fatal
- Unknown top-level product id → ProductNotFoundError
- Unresolvable instance match → InstanceMatchIntegrityError
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from core.primitives import Money
from engines.product_config.availability import disable_data_check
from engines.product_config.catalog import CatalogSelectors
from engines.product_config.enablement import is_option_enabled
from engines.product_config.enums import (
    DisableReason,
    DisplayAs,
    MatchLevel,
    OptionPlacement,
    OptionQualifier,
    ProductLocation,
)
from engines.product_config.errors import ProductNotFoundError
from engines.product_config.expressions import evaluate_function
from engines.product_config.matching import match_product_instances
from engines.product_config.models import (
    OPTION_ENABLED,
    ModifierType,
    Option,
    OptionEnableState,
    Product,
    ProductInstance,
    ProductModifierRef,
    ProductSelection,
    Selection,
)

logger = logging.getLogger("catalog.metadata")
_default_logger = logger

LEFT = ProductLocation.LEFT
RIGHT = ProductLocation.RIGHT

TEMPLATE_TOKEN = re.compile(r"\{[A-Za-z0-9]+\}")
EMPTY_SIDE = "∅"
UNDEFINED = "UNDEFINED"
NAME_SEPARATOR = " + "

# (mtid, moid); moid "" marks a group still missing a required choice
ModifierRef = Tuple[str, str]


# ══════════════════════════════════════════════════════════════
# RESULT TYPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OptionState:
    placement: OptionPlacement
    qualifier: OptionQualifier
    enable_left: OptionEnableState
    enable_right: OptionEnableState
    enable_whole: OptionEnableState

    def to_dict(self) -> dict:
        return {
            "placement": self.placement.name,
            "qualifier": self.qualifier.name,
            "enable_left": self.enable_left.to_dict(),
            "enable_right": self.enable_right.to_dict(),
            "enable_whole": self.enable_whole.to_dict(),
        }


@dataclass(frozen=True)
class ModifierTypeState:
    """
    Per-group summary.

    meets_minimum is True for a group whose minimum is unmet but
    that has nothing selectable: it cannot be completed, so it is
    not counted against the product.
    """

    has_selectable: bool
    meets_minimum: bool
    options: Dict[str, OptionState]

    def to_dict(self) -> dict:
        return {
            "has_selectable": self.has_selectable,
            "meets_minimum": self.meets_minimum,
            "options": {moid: s.to_dict() for moid, s in self.options.items()},
        }


@dataclass(frozen=True)
class ModifierDisplayList:
    left: Tuple[ModifierRef, ...] = ()
    right: Tuple[ModifierRef, ...] = ()
    whole: Tuple[ModifierRef, ...] = ()

    def to_dict(self) -> dict:
        return {
            "left": [list(x) for x in self.left],
            "right": [list(x) for x in self.right],
            "whole": [list(x) for x in self.whole],
        }


@dataclass(frozen=True)
class ProductConfigMetadata:
    name: str
    shortname: str
    description: str
    price: Money
    pi: Tuple[str, str]
    is_split: bool
    incomplete: bool
    modifier_map: Dict[str, ModifierTypeState]
    advanced_option_eligible: bool
    advanced_option_selected: bool
    additional_modifiers: ModifierDisplayList
    exhaustive_modifiers: ModifierDisplayList
    bake_count: Tuple[float, float]
    flavor_count: Tuple[float, float]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "shortname": self.shortname,
            "description": self.description,
            "price": self.price.to_dict(),
            "pi": list(self.pi),
            "is_split": self.is_split,
            "incomplete": self.incomplete,
            "modifier_map": {mtid: s.to_dict() for mtid, s in self.modifier_map.items()},
            "advanced_option_eligible": self.advanced_option_eligible,
            "advanced_option_selected": self.advanced_option_selected,
            "additional_modifiers": self.additional_modifiers.to_dict(),
            "exhaustive_modifiers": self.exhaustive_modifiers.to_dict(),
            "bake_count": list(self.bake_count),
            "flavor_count": list(self.flavor_count),
        }


@dataclass(frozen=True)
class ConfiguredProduct:
    product: ProductSelection
    metadata: ProductConfigMetadata


# ══════════════════════════════════════════════════════════════
# OPTION DISPLAY HELPERS
# ══════════════════════════════════════════════════════════════

def list_modifier_choices(modifier_type: ModifierType, catalog: CatalogSelectors) -> str:
    """Join a group's option names as 'a or b' / 'a, b, or c'."""
    choices = []
    for moid in modifier_type.options:
        option = catalog.option(moid)
        choices.append(option.display_name if option else "Undefined")
    if len(choices) < 3:
        return " or ".join(choices)
    return ", ".join(choices[:-1]) + ", or " + choices[-1]


def _option_display(ref: ModifierRef, catalog: CatalogSelectors, omit_filtered: bool) -> str:
    mtid, moid = ref
    if moid == "":
        modifier_type = catalog.modifier_entry(mtid)
        if modifier_type is not None:
            empty_as = modifier_type.display_flags.empty_display_as
            if empty_as is DisplayAs.YOUR_CHOICE_OF:
                return f"Your choice of {modifier_type.label}"
            if empty_as is DisplayAs.LIST_CHOICES:
                return list_modifier_choices(modifier_type, catalog)
            return ""
    option = catalog.option(moid)
    if omit_filtered:
        return option.display_name if option and not option.display_flags.omit_from_name else ""
    return option.display_name if option else "Undefined"


def display_options(
    exhaustive_modifiers: ModifierDisplayList, catalog: CatalogSelectors,
) -> List[Tuple[str, str]]:
    """Customer-facing ("Whole" | "Left" | "Right", "a + b") sections."""
    sections = []
    for title, refs in (
        ("Whole", exhaustive_modifiers.whole),
        ("Left", exhaustive_modifiers.left),
        ("Right", exhaustive_modifiers.right),
    ):
        if refs:
            names = [n for n in (_option_display(r, catalog, True) for r in refs) if n]
            sections.append((title, NAME_SEPARATOR.join(names)))
    return sections


def generate_shortcode(metadata: ProductConfigMetadata, catalog: CatalogSelectors) -> str:
    def shortcode(instance_id: str) -> str:
        instance = catalog.product_instance(instance_id)
        return instance.shortcode if instance else UNDEFINED

    if metadata.is_split and metadata.pi[LEFT] != metadata.pi[RIGHT]:
        return f"{shortcode(metadata.pi[LEFT])}|{shortcode(metadata.pi[RIGHT])}"
    return shortcode(metadata.pi[LEFT])


# ══════════════════════════════════════════════════════════════
# ENABLEMENT GATES
# ══════════════════════════════════════════════════════════════

def _group_enable_state(
    ref: ProductModifierRef,
    selection: Selection,
    fulfillment_id: str,
    catalog: CatalogSelectors,
    log: logging.Logger,
) -> OptionEnableState:
    if fulfillment_id in ref.service_disable:
        return OptionEnableState(
            reason=DisableReason.DISABLED_FULFILLMENT_TYPE, fulfillment_id=fulfillment_id,
        )
    if ref.enable:
        function = catalog.product_instance_function(ref.enable)
        if function is None:
            log.warning("Modifier %s references missing enable function %s.", ref.mtid, ref.enable)
        elif not evaluate_function(selection, function, catalog, log):
            return OptionEnableState(reason=DisableReason.DISABLED_FUNCTION, function_id=function.id)
    return OPTION_ENABLED


def _option_state(
    option: Option,
    gate: OptionEnableState,
    selection: Selection,
    bake_count: Tuple[float, float],
    flavor_count: Tuple[float, float],
    product: Product,
    catalog: CatalogSelectors,
    log: logging.Logger,
) -> OptionState:
    def side(location: OptionPlacement) -> OptionEnableState:
        if location != OptionPlacement.WHOLE and not option.metadata.can_split:
            return OptionEnableState(reason=DisableReason.DISABLED_NO_SPLITTING)
        if not gate.enabled:
            return gate
        return is_option_enabled(
            option, selection, bake_count, flavor_count, location, product, catalog, log,
        )

    return OptionState(
        placement=OptionPlacement.NONE,
        qualifier=OptionQualifier.REGULAR,
        enable_left=side(OptionPlacement.LEFT),
        enable_right=side(OptionPlacement.RIGHT),
        enable_whole=side(OptionPlacement.WHOLE),
    )


# ══════════════════════════════════════════════════════════════
# NAMING
# ══════════════════════════════════════════════════════════════

def _names(options: Sequence[Option]) -> List[str]:
    return [o.display_name for o in options if not o.display_flags.omit_from_name]


def _shortnames(options: Sequence[Option]) -> List[str]:
    return [o.shortcode for o in options if not o.display_flags.omit_from_shortname]


def _split_side(head: List[str], additions: List[str]) -> str:
    parts = head + ([NAME_SEPARATOR.join(additions)] if additions else [])
    if not parts:
        return EMPTY_SIDE
    text = NAME_SEPARATOR.join(parts)
    return f"( {text} )" if len(parts) > 1 or len(additions) > 1 else text


def _compose_names(
    product: Product,
    left_pi: ProductInstance,
    right_pi: ProductInstance,
    compare_to_base: Tuple[bool, bool],
    is_split: bool,
    additions: Dict[str, List[Option]],
) -> Tuple[str, str, str]:
    show_base = product.display_flags.show_name_of_base_product

    def shows_instance(side: ProductLocation) -> bool:
        return not compare_to_base[side] or show_base

    names = _names(additions["whole"])
    shortnames = _shortnames(additions["whole"])

    if not is_split or left_pi.id == right_pi.id:
        if shows_instance(LEFT):
            names.insert(0, left_pi.display_name)
            shortnames.insert(0, left_pi.shortcode)
        if is_split:
            left_names = NAME_SEPARATOR.join(_names(additions["left"])) or EMPTY_SIDE
            right_names = NAME_SEPARATOR.join(_names(additions["right"])) or EMPTY_SIDE
            names.append(f"({left_names} | {right_names})")
            left_short = NAME_SEPARATOR.join(_shortnames(additions["left"])) or EMPTY_SIDE
            right_short = NAME_SEPARATOR.join(_shortnames(additions["right"])) or EMPTY_SIDE
            shortnames.append(f"({left_short} | {right_short})")
        description = left_pi.description
    else:
        heads = {
            side: [pi.display_name] if shows_instance(side) else []
            for side, pi in ((LEFT, left_pi), (RIGHT, right_pi))
        }
        short_heads = {
            side: [pi.shortcode] if shows_instance(side) else []
            for side, pi in ((LEFT, left_pi), (RIGHT, right_pi))
        }
        split_name = (
            f"{_split_side(heads[LEFT], _names(additions['left']))} | "
            f"{_split_side(heads[RIGHT], _names(additions['right']))}"
        )
        names.append(f"( {split_name} )" if names else split_name)
        split_short = (
            f"{_split_side(short_heads[LEFT], _shortnames(additions['left']))} | "
            f"{_split_side(short_heads[RIGHT], _shortnames(additions['right']))}"
        )
        shortnames.append(f"( {split_short} )" if shortnames else split_short)
        description = (
            f"( {left_pi.description} ) | ( {right_pi.description} )"
            if left_pi.description and right_pi.description else ""
        )

    name = NAME_SEPARATOR.join(names)
    shortname = NAME_SEPARATOR.join(shortnames) if shortnames else left_pi.shortcode
    return name, shortname, description


# ══════════════════════════════════════════════════════════════
# TEMPLATING
# ══════════════════════════════════════════════════════════════

def _run_templating(
    product: Product,
    catalog: CatalogSelectors,
    name: str,
    description: str,
    exhaustive_whole: Sequence[ModifierRef],
    log: logging.Logger,
) -> Tuple[str, str]:
    if not TEMPLATE_TOKEN.search(name) and not TEMPLATE_TOKEN.search(description):
        return name, description
    values: Dict[str, str] = {}
    for ref in product.modifiers:
        modifier_type = catalog.modifier_entry(ref.mtid)
        if modifier_type is None:
            log.error("Cannot find product modifier type %s while templating.", ref.mtid)
            continue
        flags = modifier_type.display_flags
        if not flags.template_string:
            continue
        shown = [
            text for text in (
                _option_display(entry, catalog, False)
                for entry in exhaustive_whole if entry[0] == ref.mtid
            ) if text
        ]
        if shown:
            values["{" + flags.template_string + "}"] = (
                flags.non_empty_group_prefix
                + flags.multiple_item_separator.join(shown)
                + flags.non_empty_group_suffix
            )

    def substitute(match: re.Match) -> str:
        return values.get(match.group(0), "")

    return TEMPLATE_TOKEN.sub(substitute, name), TEMPLATE_TOKEN.sub(substitute, description)


# ══════════════════════════════════════════════════════════════
# GENERATOR
# ══════════════════════════════════════════════════════════════

def _cell(matrix: Dict[str, Dict[str, MatchLevel]], mtid: str, moid: str) -> MatchLevel:
    return matrix.get(mtid, {}).get(moid, MatchLevel.EXACT_MATCH)


def _addition_key(
    cells: Tuple[MatchLevel, MatchLevel],
    base_edge_case: bool,
    compare_to_base: Tuple[bool, bool],
) -> Optional[str]:
    """
    Which additions list a selected option belongs to.

    With the base name hidden, an option that exactly matches the base
    instance still has to be spelled out on that side.
    """
    exact = (
        base_edge_case and compare_to_base[LEFT] and cells[LEFT] == MatchLevel.EXACT_MATCH,
        base_edge_case and compare_to_base[RIGHT] and cells[RIGHT] == MatchLevel.EXACT_MATCH,
    )
    at_least = (cells[LEFT] == MatchLevel.AT_LEAST, cells[RIGHT] == MatchLevel.AT_LEAST)
    if (at_least[LEFT] and at_least[RIGHT]) or (exact[LEFT] and exact[RIGHT]):
        return "whole"
    if at_least[RIGHT] or exact[RIGHT]:
        return "right"
    if at_least[LEFT] or exact[LEFT]:
        return "left"
    return None


def generate_product_metadata(
    product_id: str,
    selection: Selection,
    catalog: CatalogSelectors,
    service_time: datetime,
    fulfillment_id: str,
    logger: Optional[logging.Logger] = None,
) -> ProductConfigMetadata:
    """
    Compute the metadata for `selection` on product `product_id`.

    service_time is a timezone-aware datetime used for option
    availability; fulfillment_id selects which groups are suppressed.
    """
    log = logger or _default_logger
    product = catalog.product_entry(product_id)
    if product is None:
        log.error("Cannot find product %s.", product_id)
        raise ProductNotFoundError(product_id)

    match = match_product_instances(product, selection, catalog, log)
    left_pi, right_pi = match.instances
    compare_to_base = (
        left_pi.id == product.base_instance_id,
        right_pi.id == product.base_instance_id,
    )

    # ── 2. counts and price ──
    bake = [0, 0]
    flavor = [0, 0]
    price = product.price
    is_split = False
    for entry in selection:
        for placed in entry.options:
            option = catalog.option(placed.option_id)
            if option is None:
                log.error("Unable to find selected option %s.", placed.option_id)
                continue
            if placed.placement in (OptionPlacement.LEFT, OptionPlacement.WHOLE):
                bake[LEFT] += option.metadata.bake_factor
                flavor[LEFT] += option.metadata.flavor_factor
            if placed.placement in (OptionPlacement.RIGHT, OptionPlacement.WHOLE):
                bake[RIGHT] += option.metadata.bake_factor
                flavor[RIGHT] += option.metadata.flavor_factor
            if placed.placement != OptionPlacement.NONE:
                price = price + option.price
            is_split = is_split or placed.placement in (OptionPlacement.LEFT, OptionPlacement.RIGHT)
    bake_count = (bake[LEFT], bake[RIGHT])
    flavor_count = (flavor[LEFT], flavor[RIGHT])

    # ── 3-6. per modifier group ──
    selected_by_type = {}
    for entry in selection:
        selected_by_type.setdefault(entry.modifier_type_id, entry.options)

    groups = sorted(
        ((catalog.modifier_entry(ref.mtid), ref) for ref in product.modifiers),
        key=lambda pair: pair[0].ordinal if pair[0] is not None else 0,
    )
    modifier_map: Dict[str, ModifierTypeState] = {}
    exhaustive: Dict[str, List[ModifierRef]] = {"left": [], "right": [], "whole": []}
    additional: Dict[str, List[ModifierRef]] = {"left": [], "right": [], "whole": []}
    advanced_eligible = False
    advanced_selected = False
    incomplete = False

    for modifier_type, ref in groups:
        mtid = ref.mtid
        if modifier_type is None:
            log.error("Cannot find modifier type %s of product %s.", mtid, product.id)
            continue
        gate = _group_enable_state(ref, selection, fulfillment_id, catalog, log)
        base_edge_case = (
            modifier_type.is_single_select and not product.display_flags.show_name_of_base_product
        )

        options: Dict[str, OptionState] = {}
        has_selectable = False
        for moid in modifier_type.options:
            option = catalog.option(moid)
            if option is None:
                log.error("Unable to find option %s of modifier type %s.", moid, mtid)
                continue
            option_gate = (
                disable_data_check(option.disabled, option.availability, service_time, log)
                if gate.enabled else gate
            )
            state = _option_state(
                option, option_gate, selection, bake_count, flavor_count, product, catalog, log,
            )
            options[moid] = state
            left_or_right = state.enable_left.enabled or state.enable_right.enabled
            advanced_eligible = advanced_eligible or left_or_right
            has_selectable = has_selectable or left_or_right or state.enable_whole.enabled

        num_selected = [0, 0]
        for placed in selected_by_type.get(mtid, ()):
            moid = placed.option_id
            if moid not in options:
                log.warning("Selected option %s is not part of modifier type %s.", moid, mtid)
                continue
            options[moid] = replace(options[moid], placement=placed.placement, qualifier=placed.qualifier)
            if placed.placement == OptionPlacement.NONE:
                continue
            if placed.placement == OptionPlacement.LEFT:
                exhaustive["left"].append((mtid, moid))
                num_selected[LEFT] += 1
                advanced_selected = True
            elif placed.placement == OptionPlacement.RIGHT:
                exhaustive["right"].append((mtid, moid))
                num_selected[RIGHT] += 1
                advanced_selected = True
            else:
                exhaustive["whole"].append((mtid, moid))
                num_selected[LEFT] += 1
                num_selected[RIGHT] += 1

            cells = (_cell(match.matrices[LEFT], mtid, moid), _cell(match.matrices[RIGHT], mtid, moid))
            key = _addition_key(cells, base_edge_case, compare_to_base)
            if key is not None:
                additional[key].append((mtid, moid))

        minimum = modifier_type.min_selected
        short_left = num_selected[LEFT] < minimum
        short_right = num_selected[RIGHT] < minimum
        if short_left or short_right:
            if modifier_type.display_flags.empty_display_as is not DisplayAs.OMIT and has_selectable:
                key = "whole" if short_left and short_right else ("left" if short_left else "right")
                exhaustive[key].append((mtid, ""))
            meets_minimum = not has_selectable
            incomplete = incomplete or has_selectable
        else:
            meets_minimum = True

        modifier_map[mtid] = ModifierTypeState(
            has_selectable=has_selectable, meets_minimum=meets_minimum, options=options,
        )

    # ── 7. naming ──
    if (
        not is_split
        and left_pi.id == right_pi.id
        and match.levels == (MatchLevel.EXACT_MATCH, MatchLevel.EXACT_MATCH)
    ):
        name, shortname, description = left_pi.display_name, left_pi.shortcode, left_pi.description
    else:
        addition_options = {
            key: [catalog.option(moid) for _, moid in refs]
            for key, refs in additional.items()
        }
        name, shortname, description = _compose_names(
            product, left_pi, right_pi, compare_to_base, is_split, addition_options,
        )

    # ── 8. templating ──
    name, description = _run_templating(
        product, catalog, name, description, exhaustive["whole"], log,
    )

    return ProductConfigMetadata(
        name=name,
        shortname=shortname,
        description=description,
        price=price,
        pi=(left_pi.id, right_pi.id),
        is_split=is_split,
        incomplete=incomplete,
        modifier_map=modifier_map,
        advanced_option_eligible=advanced_eligible,
        advanced_option_selected=advanced_selected,
        additional_modifiers=ModifierDisplayList(
            left=tuple(additional["left"]),
            right=tuple(additional["right"]),
            whole=tuple(additional["whole"]),
        ),
        exhaustive_modifiers=ModifierDisplayList(
            left=tuple(exhaustive["left"]),
            right=tuple(exhaustive["right"]),
            whole=tuple(exhaustive["whole"]),
        ),
        bake_count=bake_count,
        flavor_count=flavor_count,
    )


def create_product_with_metadata(
    product_id: str,
    selection: Selection,
    catalog: CatalogSelectors,
    service_time: datetime,
    fulfillment_id: str,
    logger: Optional[logging.Logger] = None,
) -> ConfiguredProduct:
    """Bundle a copy of the selection with its computed metadata."""
    snapshot = tuple(selection)
    metadata = generate_product_metadata(
        product_id, snapshot, catalog, service_time, fulfillment_id, logger,
    )
    return ConfiguredProduct(product=ProductSelection(product_id, snapshot), metadata=metadata)
