"""
Tests for the potential-price enumerator.
"""

from dataclasses import replace

from engines.product_config.metadata import generate_product_metadata
from engines.product_config.models import IntervalSpec, ModifierType, ProductModifierRef
from engines.product_config.pricing import compute_potential_prices
from pizza_catalog import NOON, entry, option, placed, usd


def with_sauce(catalog, white_price=300):
    catalog.add_option(option("red", "sauce", "Red", 0, "R"))
    catalog.add_option(option("white", "sauce", "White", white_price, "W"))
    catalog.add_modifier_type(ModifierType(
        id="sauce", name="Sauce", ordinal=3, min_selected=1, max_selected=1,
        options=("red", "white"),
    ))
    product = catalog.product_entry("pizza")
    catalog.add_product(replace(product, modifiers=product.modifiers + (ProductModifierRef("sauce"),)))
    return catalog


def prices(catalog, selection=()):
    metadata = generate_product_metadata("pizza", selection, catalog, NOON, "pickup")
    return compute_potential_prices(metadata, catalog)


class TestComputePotentialPrices:
    def test_complete_product_has_one_price(self, catalog):
        assert prices(catalog, (entry("crust", placed("thick")),)) == [usd(1150)]

    def test_single_incomplete_group(self, catalog):
        assert prices(catalog) == [usd(1000), usd(1150)]

    def test_includes_current_selection(self, catalog):
        assert prices(catalog, (entry("toppings", placed("mushroom")),)) == [usd(1100), usd(1250)]

    def test_cartesian_sum_of_groups(self, catalog):
        catalog = with_sauce(catalog)
        assert prices(catalog) == [usd(1000), usd(1150), usd(1300), usd(1450)]

    def test_duplicate_sums_collapse(self, catalog):
        catalog = with_sauce(catalog, white_price=150)
        assert prices(catalog) == [usd(1000), usd(1150), usd(1300)]

    def test_disabled_options_excluded(self, catalog):
        catalog.add_option(replace(catalog.option("thick"), disabled=IntervalSpec(start=1, end=0)))
        assert prices(catalog) == [usd(1000)]

    def test_satisfied_group_ignored(self, catalog):
        catalog = with_sauce(catalog)
        assert prices(catalog, (entry("sauce", placed("white")),)) == [usd(1300), usd(1450)]
