"""
Catalog Product Config — Catalog Model
========================================
Immutable read snapshots of catalog entities, the customer
selection shape, and the expression AST.

RULES:
- Every entity is a frozen dataclass; engines never mutate them
- Collections are tuples (ordered, hashable)
- Ids are opaque non-empty strings
- from_dict() accepts the catalog's JSON shape (snake_case keys)
  and raises CatalogDataError on malformed input

Expression AST (tagged union, serialized as
{"discriminator": <node name>, "expr": {...}}):
    ConstLiteral          — number / boolean / string / placement / qualifier
    IfElse                — test ? true_branch : false_branch
    Logical               — AND OR NOT EQ NE GT GE LT LE
    ModifierPlacement     — current placement of (mtid, moid)
    HasAnyOfModifierType  — any option of mtid placed
    ProductMetadata       — summed flavor/weight on one side
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from core.primitives import Money
from engines.product_config.enums import (
    ConstLiteralKind,
    DisableReason,
    DisplayAs,
    LogicalOperator,
    MetadataField,
    OptionPlacement,
    OptionQualifier,
    ProductLocation,
)
from engines.product_config.errors import CatalogDataError


DEFAULT_CURRENCY = "USD"


def _require(data: Dict[str, Any], key: str, entity: str) -> Any:
    if not isinstance(data, dict):
        raise CatalogDataError(entity, f"expected an object, got {type(data).__name__}")
    if key not in data:
        raise CatalogDataError(entity, f"missing required key '{key}'")
    return data[key]


def _enum(enum_cls, value: Any, entity: str):
    try:
        if isinstance(value, str) and not isinstance(value, enum_cls):
            return enum_cls[value]
        return enum_cls(value)
    except (KeyError, ValueError):
        raise CatalogDataError(
            entity, f"'{value}' is not a valid {enum_cls.__name__}"
        ) from None


def _money(data: Any, entity: str, default_currency: str) -> Money:
    if isinstance(data, int) and not isinstance(data, bool):
        return Money(amount=data, currency=default_currency)
    try:
        return Money.from_dict(data, default_currency=default_currency)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CatalogDataError(entity, f"invalid price: {exc}") from None


def _require_id(value: str, entity: str) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{entity} id must be a non-empty string.")


# ══════════════════════════════════════════════════════════════
# TIME-BASED DISABLING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class IntervalSpec:
    """
    Integer interval [start, end].

    As an option's disable window: epoch milliseconds, and
    start > end means disabled indefinitely.
    Inside a RecurringAvailability: epoch milliseconds (-1 for an
    open end) when the rule is empty, minutes since local midnight
    otherwise.
    """

    start: int
    end: int

    @property
    def is_blanket(self) -> bool:
        return self.start > self.end

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IntervalSpec:
        return cls(
            start=int(_require(data, "start", "IntervalSpec")),
            end=int(_require(data, "end", "IntervalSpec")),
        )


@dataclass(frozen=True)
class RecurringAvailability:
    """Availability window, optionally repeating per an RFC 5545 rule."""

    interval: IntervalSpec
    rrule: str = ""

    def to_dict(self) -> dict:
        return {"interval": self.interval.to_dict(), "rrule": self.rrule}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RecurringAvailability:
        return cls(
            interval=IntervalSpec.from_dict(_require(data, "interval", "RecurringAvailability")),
            rrule=data.get("rrule") or "",
        )


# ══════════════════════════════════════════════════════════════
# MODIFIER TYPES & OPTIONS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ModifierTypeDisplayFlags:
    empty_display_as: DisplayAs = DisplayAs.OMIT
    template_string: str = ""
    multiple_item_separator: str = " + "
    non_empty_group_prefix: str = ""
    non_empty_group_suffix: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ModifierTypeDisplayFlags:
        return cls(
            empty_display_as=_enum(
                DisplayAs, data.get("empty_display_as", "OMIT"), "ModifierTypeDisplayFlags",
            ),
            template_string=data.get("template_string", ""),
            multiple_item_separator=data.get("multiple_item_separator", " + "),
            non_empty_group_prefix=data.get("non_empty_group_prefix", ""),
            non_empty_group_suffix=data.get("non_empty_group_suffix", ""),
        )


@dataclass(frozen=True)
class ModifierType:
    """
    A group of options (e.g. "Size", "Toppings").

    min_selected == max_selected == 1 makes it single-select.
    max_selected None means unbounded.
    """

    id: str
    name: str
    display_name: str = ""
    ordinal: int = 0
    min_selected: int = 0
    max_selected: Optional[int] = None
    display_flags: ModifierTypeDisplayFlags = field(default_factory=ModifierTypeDisplayFlags)
    options: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require_id(self.id, "ModifierType")
        if self.min_selected < 0:
            raise ValueError(
                f"ModifierType '{self.id}' min_selected must be >= 0, "
                f"got {self.min_selected}."
            )
        if self.max_selected is not None and self.max_selected < self.min_selected:
            raise ValueError(
                f"ModifierType '{self.id}' max_selected ({self.max_selected}) "
                f"must be >= min_selected ({self.min_selected})."
            )

    @property
    def is_single_select(self) -> bool:
        return self.min_selected == 1 and self.max_selected == 1

    @property
    def label(self) -> str:
        return self.display_name or self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ModifierType:
        try:
            return cls(
                id=_require(data, "id", "ModifierType"),
                name=_require(data, "name", "ModifierType"),
                display_name=data.get("display_name", ""),
                ordinal=data.get("ordinal", 0),
                min_selected=data.get("min_selected", 0),
                max_selected=data.get("max_selected"),
                display_flags=ModifierTypeDisplayFlags.from_dict(data.get("display_flags") or {}),
                options=tuple(data.get("options", ())),
            )
        except (TypeError, ValueError) as exc:
            raise CatalogDataError("ModifierType", str(exc)) from None


@dataclass(frozen=True)
class OptionMetadata:
    flavor_factor: float = 0
    bake_factor: float = 0
    can_split: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OptionMetadata:
        return cls(
            flavor_factor=data.get("flavor_factor", 0),
            bake_factor=data.get("bake_factor", 0),
            can_split=bool(data.get("can_split", False)),
        )


@dataclass(frozen=True)
class OptionDisplayFlags:
    omit_from_name: bool = False
    omit_from_shortname: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OptionDisplayFlags:
        return cls(
            omit_from_name=bool(data.get("omit_from_name", False)),
            omit_from_shortname=bool(data.get("omit_from_shortname", False)),
        )


@dataclass(frozen=True)
class Option:
    """A selectable option belonging to one modifier type."""

    id: str
    modifier_type_id: str
    display_name: str
    price: Money
    description: str = ""
    shortcode: str = ""
    ordinal: int = 0
    metadata: OptionMetadata = field(default_factory=OptionMetadata)
    enable: Optional[str] = None  # ProductInstanceFunction id
    disabled: Optional[IntervalSpec] = None
    availability: Tuple[RecurringAvailability, ...] = ()
    display_flags: OptionDisplayFlags = field(default_factory=OptionDisplayFlags)

    def __post_init__(self) -> None:
        _require_id(self.id, "Option")
        _require_id(self.modifier_type_id, "Option modifier type")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_currency: str = DEFAULT_CURRENCY) -> Option:
        disabled = data.get("disabled")
        try:
            return cls(
                id=_require(data, "id", "Option"),
                modifier_type_id=_require(data, "modifier_type_id", "Option"),
                display_name=_require(data, "display_name", "Option"),
                price=_money(data.get("price", 0), "Option", default_currency),
                description=data.get("description", ""),
                shortcode=data.get("shortcode", ""),
                ordinal=data.get("ordinal", 0),
                metadata=OptionMetadata.from_dict(data.get("metadata") or {}),
                enable=data.get("enable"),
                disabled=IntervalSpec.from_dict(disabled) if disabled else None,
                availability=tuple(
                    RecurringAvailability.from_dict(a) for a in data.get("availability") or ()
                ),
                display_flags=OptionDisplayFlags.from_dict(data.get("display_flags") or {}),
            )
        except (TypeError, ValueError) as exc:
            raise CatalogDataError("Option", str(exc)) from None


# ══════════════════════════════════════════════════════════════
# PRODUCTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductModifierRef:
    """A modifier type attached to a product."""

    mtid: str
    enable: Optional[str] = None  # ProductInstanceFunction id
    service_disable: Tuple[str, ...] = ()  # fulfillment ids

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProductModifierRef:
        return cls(
            mtid=_require(data, "mtid", "ProductModifierRef"),
            enable=data.get("enable"),
            service_disable=tuple(data.get("service_disable", ())),
        )


@dataclass(frozen=True)
class ProductDisplayFlags:
    bake_max: float = 100
    flavor_max: float = 10
    bake_differential: float = 100
    show_name_of_base_product: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProductDisplayFlags:
        return cls(
            bake_max=data.get("bake_max", 100),
            flavor_max=data.get("flavor_max", 10),
            bake_differential=data.get("bake_differential", 100),
            show_name_of_base_product=bool(data.get("show_name_of_base_product", True)),
        )


@dataclass(frozen=True)
class Product:
    """
    A configurable product class.

    instances[0] is the canonical base instance; later entries
    are progressively more customized named configurations.
    """

    id: str
    price: Money
    modifiers: Tuple[ProductModifierRef, ...] = ()
    display_flags: ProductDisplayFlags = field(default_factory=ProductDisplayFlags)
    instances: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require_id(self.id, "Product")

    @property
    def base_instance_id(self) -> Optional[str]:
        return self.instances[0] if self.instances else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_currency: str = DEFAULT_CURRENCY) -> Product:
        try:
            return cls(
                id=_require(data, "id", "Product"),
                price=_money(data.get("price", 0), "Product", default_currency),
                modifiers=tuple(
                    ProductModifierRef.from_dict(m) for m in data.get("modifiers") or ()
                ),
                display_flags=ProductDisplayFlags.from_dict(data.get("display_flags") or {}),
                instances=tuple(data.get("instances", ())),
            )
        except (TypeError, ValueError) as exc:
            raise CatalogDataError("Product", str(exc)) from None


# ══════════════════════════════════════════════════════════════
# SELECTIONS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OptionInstance:
    option_id: str
    placement: OptionPlacement = OptionPlacement.WHOLE
    qualifier: OptionQualifier = OptionQualifier.REGULAR

    def to_dict(self) -> dict:
        return {
            "option_id": self.option_id,
            "placement": self.placement.name,
            "qualifier": self.qualifier.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OptionInstance:
        return cls(
            option_id=_require(data, "option_id", "OptionInstance"),
            placement=_enum(OptionPlacement, data.get("placement", "WHOLE"), "OptionInstance"),
            qualifier=_enum(OptionQualifier, data.get("qualifier", "REGULAR"), "OptionInstance"),
        )


@dataclass(frozen=True)
class ModifierSelectionEntry:
    modifier_type_id: str
    options: Tuple[OptionInstance, ...] = ()

    def to_dict(self) -> dict:
        return {
            "modifier_type_id": self.modifier_type_id,
            "options": [o.to_dict() for o in self.options],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ModifierSelectionEntry:
        return cls(
            modifier_type_id=_require(data, "modifier_type_id", "ModifierSelectionEntry"),
            options=tuple(OptionInstance.from_dict(o) for o in data.get("options") or ()),
        )


Selection = Tuple[ModifierSelectionEntry, ...]


def selection_from_list(data) -> Selection:
    """Build a Selection from its JSON list form."""
    return tuple(ModifierSelectionEntry.from_dict(e) for e in data or ())


def selection_to_list(selection: Selection) -> list:
    return [e.to_dict() for e in selection]


@dataclass(frozen=True)
class ProductInstance:
    """A named configuration of a product (e.g. "Margherita")."""

    id: str
    product_id: str
    display_name: str
    description: str = ""
    shortcode: str = ""
    modifiers: Selection = ()

    def __post_init__(self) -> None:
        _require_id(self.id, "ProductInstance")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProductInstance:
        try:
            return cls(
                id=_require(data, "id", "ProductInstance"),
                product_id=_require(data, "product_id", "ProductInstance"),
                display_name=_require(data, "display_name", "ProductInstance"),
                description=data.get("description", ""),
                shortcode=data.get("shortcode", ""),
                modifiers=selection_from_list(data.get("modifiers")),
            )
        except (TypeError, ValueError) as exc:
            raise CatalogDataError("ProductInstance", str(exc)) from None


# ══════════════════════════════════════════════════════════════
# EXPRESSION AST
# ══════════════════════════════════════════════════════════════

LiteralValue = Union[str, int, float, bool, OptionPlacement, OptionQualifier]


@dataclass(frozen=True)
class ConstLiteral:
    value: LiteralValue
    kind: ConstLiteralKind


@dataclass(frozen=True)
class IfElse:
    test: "Expression"
    true_branch: "Expression"
    false_branch: "Expression"


@dataclass(frozen=True)
class Logical:
    operator: LogicalOperator
    operand_a: "Expression"
    operand_b: Optional["Expression"] = None


@dataclass(frozen=True)
class ModifierPlacement:
    mtid: str
    moid: str


@dataclass(frozen=True)
class HasAnyOfModifierType:
    mtid: str


@dataclass(frozen=True)
class ProductMetadata:
    field: MetadataField
    location: ProductLocation


Expression = Union[
    ConstLiteral, IfElse, Logical, ModifierPlacement, HasAnyOfModifierType, ProductMetadata,
]


def _literal_from_dict(data: Dict[str, Any]) -> ConstLiteral:
    kind = _enum(ConstLiteralKind, _require(data, "discriminator", "ConstLiteral"), "ConstLiteral")
    value = _require(data, "value", "ConstLiteral")
    if kind is ConstLiteralKind.MODIFIER_PLACEMENT:
        value = _enum(OptionPlacement, value, "ConstLiteral")
    elif kind is ConstLiteralKind.MODIFIER_QUALIFIER:
        value = _enum(OptionQualifier, value, "ConstLiteral")
    elif kind is ConstLiteralKind.BOOLEAN:
        value = bool(value)
    return ConstLiteral(value=value, kind=kind)


def expression_from_dict(data: Dict[str, Any]) -> Expression:
    """Build an expression tree from its tagged JSON form."""
    node = _require(data, "discriminator", "Expression")
    body = _require(data, "expr", "Expression")
    if node == "ConstLiteral":
        return _literal_from_dict(body)
    if node == "IfElse":
        return IfElse(
            test=expression_from_dict(_require(body, "test", "IfElse")),
            true_branch=expression_from_dict(_require(body, "true_branch", "IfElse")),
            false_branch=expression_from_dict(_require(body, "false_branch", "IfElse")),
        )
    if node == "Logical":
        operand_b = body.get("operand_b")
        return Logical(
            operator=_enum(LogicalOperator, _require(body, "operator", "Logical"), "Logical"),
            operand_a=expression_from_dict(_require(body, "operand_a", "Logical")),
            operand_b=expression_from_dict(operand_b) if operand_b else None,
        )
    if node == "ModifierPlacement":
        return ModifierPlacement(
            mtid=_require(body, "mtid", "ModifierPlacement"),
            moid=_require(body, "moid", "ModifierPlacement"),
        )
    if node == "HasAnyOfModifierType":
        return HasAnyOfModifierType(mtid=_require(body, "mtid", "HasAnyOfModifierType"))
    if node == "ProductMetadata":
        return ProductMetadata(
            field=_enum(MetadataField, _require(body, "field", "ProductMetadata"), "ProductMetadata"),
            location=_enum(
                ProductLocation, _require(body, "location", "ProductMetadata"), "ProductMetadata",
            ),
        )
    raise CatalogDataError("Expression", f"unknown node '{node}'")


@dataclass(frozen=True)
class ProductInstanceFunction:
    """Named expression over a product selection."""

    id: str
    name: str
    expression: Expression

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProductInstanceFunction:
        return cls(
            id=_require(data, "id", "ProductInstanceFunction"),
            name=data.get("name", ""),
            expression=expression_from_dict(_require(data, "expression", "ProductInstanceFunction")),
        )


@dataclass(frozen=True)
class OrderInstanceFunction:
    """Named expression over an order. Only literal, if/else and logical nodes."""

    id: str
    name: str
    expression: Expression

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OrderInstanceFunction:
        return cls(
            id=_require(data, "id", "OrderInstanceFunction"),
            name=data.get("name", ""),
            expression=expression_from_dict(_require(data, "expression", "OrderInstanceFunction")),
        )


# ══════════════════════════════════════════════════════════════
# ENABLE STATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class OptionEnableState:
    """
    Outcome of an enablement check.

    Only the field that explains the reason is populated:
    function_id for DISABLED_FUNCTION, fulfillment_id for
    DISABLED_FULFILLMENT_TYPE, interval for DISABLED_TIME,
    availability for DISABLED_AVAILABILITY.
    """

    reason: DisableReason
    function_id: Optional[str] = None
    fulfillment_id: Optional[str] = None
    interval: Optional[IntervalSpec] = None
    availability: Tuple[RecurringAvailability, ...] = ()

    @property
    def enabled(self) -> bool:
        return self.reason is DisableReason.ENABLED

    def to_dict(self) -> dict:
        data: Dict[str, Any] = {"enable": self.reason.value}
        if self.function_id is not None:
            data["function_id"] = self.function_id
        if self.fulfillment_id is not None:
            data["fulfillment_id"] = self.fulfillment_id
        if self.interval is not None:
            data["interval"] = self.interval.to_dict()
        if self.availability:
            data["availability"] = [a.to_dict() for a in self.availability]
        return data


OPTION_ENABLED = OptionEnableState(reason=DisableReason.ENABLED)


# ══════════════════════════════════════════════════════════════
# CONFIGURED PRODUCT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductSelection:
    """A product id plus the customer's modifier selection."""

    product_id: str
    modifiers: Selection = ()

    def to_dict(self) -> dict:
        return {"product_id": self.product_id, "modifiers": selection_to_list(self.modifiers)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProductSelection:
        return cls(
            product_id=_require(data, "product_id", "ProductSelection"),
            modifiers=selection_from_list(data.get("modifiers")),
        )
