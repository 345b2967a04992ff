"""
Tests for catalog snapshot loading and the model's JSON shapes.
"""

import pytest

from core.primitives import Money
from engines.product_config.catalog import InMemoryCatalog
from engines.product_config.enums import (
    ConstLiteralKind,
    DisplayAs,
    LogicalOperator,
    OptionPlacement,
    OptionQualifier,
)
from engines.product_config.errors import CatalogDataError
from engines.product_config.models import (
    ConstLiteral,
    HasAnyOfModifierType,
    Logical,
    ModifierPlacement,
    ModifierType,
    OptionInstance,
    ProductSelection,
    expression_from_dict,
)

SNAPSHOT = {
    "options": [
        {
            "id": "thin", "modifier_type_id": "crust", "display_name": "Thin",
            "price": 0, "shortcode": "T",
        },
        {
            "id": "pepperoni", "modifier_type_id": "toppings", "display_name": "Pepperoni",
            "price": {"amount": 200, "currency": "EUR"},
            "metadata": {"flavor_factor": 1, "bake_factor": 1, "can_split": True},
            "disabled": {"start": 5, "end": 1},
            "availability": [{"interval": {"start": 660, "end": 840}, "rrule": "FREQ=DAILY"}],
            "enable": "has_crust",
        },
    ],
    "modifier_types": [
        {
            "id": "crust", "name": "Crust", "min_selected": 1, "max_selected": 1,
            "options": ["thin"], "display_flags": {"empty_display_as": "LIST_CHOICES"},
        },
        {"id": "toppings", "name": "Toppings", "ordinal": 1, "options": ["pepperoni"]},
    ],
    "products": [
        {
            "id": "pizza", "price": 1000,
            "modifiers": [{"mtid": "crust"}, {"mtid": "toppings", "service_disable": ["delivery"]}],
            "display_flags": {"flavor_max": 4},
            "instances": ["cheese"],
        },
    ],
    "product_instances": [
        {
            "id": "cheese", "product_id": "pizza", "display_name": "Cheese", "shortcode": "C",
            "modifiers": [
                {"modifier_type_id": "crust", "options": [{"option_id": "thin"}]},
            ],
        },
    ],
    "product_instance_functions": [
        {
            "id": "has_crust", "name": "Has crust",
            "expression": {
                "discriminator": "HasAnyOfModifierType", "expr": {"mtid": "crust"},
            },
        },
    ],
    "order_instance_functions": [
        {
            "id": "always", "name": "Always",
            "expression": {
                "discriminator": "ConstLiteral",
                "expr": {"discriminator": "BOOLEAN", "value": True},
            },
        },
    ],
}


class TestInMemoryCatalog:
    def test_from_dict(self):
        catalog = InMemoryCatalog.from_dict(SNAPSHOT)
        thin = catalog.option("thin")
        assert thin.price == Money(0, "USD")
        assert catalog.option("pepperoni").price == Money(200, "EUR")
        assert catalog.option("pepperoni").metadata.can_split
        assert catalog.option("pepperoni").disabled.is_blanket
        assert catalog.option("pepperoni").availability[0].rrule == "FREQ=DAILY"
        assert catalog.modifier_entry("crust").is_single_select
        assert catalog.modifier_entry("crust").display_flags.empty_display_as is DisplayAs.LIST_CHOICES
        product = catalog.product_entry("pizza")
        assert product.base_instance_id == "cheese"
        assert product.modifiers[1].service_disable == ("delivery",)
        assert product.display_flags.flavor_max == 4
        assert product.display_flags.bake_max == 100
        cheese = catalog.product_instance("cheese")
        assert cheese.modifiers[0].options == (OptionInstance("thin"),)
        assert catalog.product_instance_function("has_crust").expression == HasAnyOfModifierType("crust")
        assert catalog.order_instance_function("always").expression == ConstLiteral(
            True, ConstLiteralKind.BOOLEAN,
        )

    def test_default_currency(self):
        catalog = InMemoryCatalog.from_dict(SNAPSHOT, default_currency="KES")
        assert catalog.option("thin").price == Money(0, "KES")
        assert catalog.option("pepperoni").price.currency == "EUR"

    def test_unknown_ids_return_none(self):
        catalog = InMemoryCatalog.from_dict({})
        assert catalog.option("x") is None
        assert catalog.modifier_entry("x") is None
        assert catalog.product_entry("x") is None
        assert catalog.product_instance("x") is None
        assert catalog.product_instance_function("x") is None
        assert catalog.order_instance_function("x") is None


class TestMalformedData:
    def test_missing_required_key(self):
        with pytest.raises(CatalogDataError, match="missing required key 'display_name'"):
            InMemoryCatalog.from_dict({"options": [{"id": "a", "modifier_type_id": "m"}]})

    def test_invalid_bounds(self):
        data = {"modifier_types": [{"id": "m", "name": "M", "min_selected": 2, "max_selected": 1}]}
        with pytest.raises(CatalogDataError, match="ModifierType"):
            InMemoryCatalog.from_dict(data)

    def test_non_integer_bounds(self):
        data = {"modifier_types": [{"id": "m", "name": "M", "min_selected": "2"}]}
        with pytest.raises(CatalogDataError, match="ModifierType"):
            InMemoryCatalog.from_dict(data)

    def test_invalid_enum(self):
        data = {"modifier_types": [
            {"id": "m", "name": "M", "display_flags": {"empty_display_as": "SOMETIMES"}},
        ]}
        with pytest.raises(CatalogDataError, match="SOMETIMES"):
            InMemoryCatalog.from_dict(data)

    def test_invalid_price(self):
        data = {"products": [{"id": "p", "price": {"amount": 1.5, "currency": "USD"}}]}
        with pytest.raises(CatalogDataError, match="invalid price"):
            InMemoryCatalog.from_dict(data)

    def test_unknown_expression_node(self):
        with pytest.raises(CatalogDataError, match="unknown node 'Lambda'"):
            expression_from_dict({"discriminator": "Lambda", "expr": {}})

    def test_empty_id(self):
        with pytest.raises(ValueError, match="non-empty"):
            ModifierType(id="", name="Nameless")


class TestJsonShapes:
    def test_nested_expression(self):
        expr = expression_from_dict({
            "discriminator": "Logical",
            "expr": {
                "operator": "EQ",
                "operand_a": {
                    "discriminator": "ModifierPlacement",
                    "expr": {"mtid": "crust", "moid": "thin"},
                },
                "operand_b": {
                    "discriminator": "ConstLiteral",
                    "expr": {"discriminator": "MODIFIER_PLACEMENT", "value": "LEFT"},
                },
            },
        })
        assert expr == Logical(
            LogicalOperator.EQ,
            ModifierPlacement("crust", "thin"),
            ConstLiteral(OptionPlacement.LEFT, ConstLiteralKind.MODIFIER_PLACEMENT),
        )

    def test_numeric_enum_values(self):
        instance = OptionInstance.from_dict({"option_id": "a", "placement": 1, "qualifier": 2})
        assert instance.placement == OptionPlacement.LEFT
        assert instance.qualifier == OptionQualifier.HEAVY

    def test_product_selection(self):
        data = {
            "product_id": "pizza",
            "modifiers": [{
                "modifier_type_id": "toppings",
                "options": [{"option_id": "pepperoni", "placement": "RIGHT", "qualifier": "LITE"}],
            }],
        }
        selection = ProductSelection.from_dict(data)
        assert selection.modifiers[0].options[0] == OptionInstance(
            "pepperoni", OptionPlacement.RIGHT, OptionQualifier.LITE,
        )
        assert selection.to_dict() == data
