import pytest

from pizza_catalog import build_pizza_catalog


@pytest.fixture
def catalog():
    return build_pizza_catalog()


@pytest.fixture
def pizza(catalog):
    return catalog.product_entry("pizza")
