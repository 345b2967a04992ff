"""
Catalog Product Config — Catalog Selectors
============================================
Read-only lookup contract the configuration engines consume.

Engines never load or persist catalog data themselves. A caller
hands them a CatalogSelectors implementation that answers "give me
entity X by id" against one consistent snapshot. Every selector
returns None for an unknown id; deciding whether that is an error
is the engine's job.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Protocol

from engines.product_config.models import (
    DEFAULT_CURRENCY,
    ModifierType,
    Option,
    OrderInstanceFunction,
    Product,
    ProductInstance,
    ProductInstanceFunction,
)


# ══════════════════════════════════════════════════════════════
# SELECTOR PROTOCOL
# ══════════════════════════════════════════════════════════════

class CatalogSelectors(Protocol):
    """
    Protocol for catalog snapshot lookups.

    Implementations may back this with a database, a cache, or an
    in-memory snapshot.
    """

    def option(self, option_id: str) -> Optional[Option]:
        ...  # pragma: no cover

    def modifier_entry(self, mtid: str) -> Optional[ModifierType]:
        ...  # pragma: no cover

    def product_entry(self, product_id: str) -> Optional[Product]:
        ...  # pragma: no cover

    def product_instance(self, instance_id: str) -> Optional[ProductInstance]:
        ...  # pragma: no cover

    def product_instance_function(self, function_id: str) -> Optional[ProductInstanceFunction]:
        ...  # pragma: no cover

    def order_instance_function(self, function_id: str) -> Optional[OrderInstanceFunction]:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY CATALOG (tests / bootstrap / snapshots)
# ══════════════════════════════════════════════════════════════

class InMemoryCatalog:
    """Dictionary-backed catalog snapshot."""

    def __init__(
        self,
        options: Iterable[Option] = (),
        modifier_types: Iterable[ModifierType] = (),
        products: Iterable[Product] = (),
        product_instances: Iterable[ProductInstance] = (),
        product_instance_functions: Iterable[ProductInstanceFunction] = (),
        order_instance_functions: Iterable[OrderInstanceFunction] = (),
    ) -> None:
        self._options: Dict[str, Option] = {}
        self._modifier_types: Dict[str, ModifierType] = {}
        self._products: Dict[str, Product] = {}
        self._product_instances: Dict[str, ProductInstance] = {}
        self._product_instance_functions: Dict[str, ProductInstanceFunction] = {}
        self._order_instance_functions: Dict[str, OrderInstanceFunction] = {}
        for o in options:
            self.add_option(o)
        for mt in modifier_types:
            self.add_modifier_type(mt)
        for p in products:
            self.add_product(p)
        for pi in product_instances:
            self.add_product_instance(pi)
        for f in product_instance_functions:
            self.add_product_instance_function(f)
        for f in order_instance_functions:
            self.add_order_instance_function(f)

    # ── registration ──────────────────────────────────────────

    def add_option(self, option: Option) -> None:
        self._options[option.id] = option

    def add_modifier_type(self, modifier_type: ModifierType) -> None:
        self._modifier_types[modifier_type.id] = modifier_type

    def add_product(self, product: Product) -> None:
        self._products[product.id] = product

    def add_product_instance(self, instance: ProductInstance) -> None:
        self._product_instances[instance.id] = instance

    def add_product_instance_function(self, function: ProductInstanceFunction) -> None:
        self._product_instance_functions[function.id] = function

    def add_order_instance_function(self, function: OrderInstanceFunction) -> None:
        self._order_instance_functions[function.id] = function

    # ── selectors ─────────────────────────────────────────────

    def option(self, option_id: str) -> Optional[Option]:
        return self._options.get(option_id)

    def modifier_entry(self, mtid: str) -> Optional[ModifierType]:
        return self._modifier_types.get(mtid)

    def product_entry(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def product_instance(self, instance_id: str) -> Optional[ProductInstance]:
        return self._product_instances.get(instance_id)

    def product_instance_function(self, function_id: str) -> Optional[ProductInstanceFunction]:
        return self._product_instance_functions.get(function_id)

    def order_instance_function(self, function_id: str) -> Optional[OrderInstanceFunction]:
        return self._order_instance_functions.get(function_id)

    # ── ingestion ─────────────────────────────────────────────

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], default_currency: str = DEFAULT_CURRENCY,
    ) -> InMemoryCatalog:
        """
        Load a snapshot from its JSON shape:

            {"options": [...], "modifier_types": [...], "products": [...],
             "product_instances": [...], "product_instance_functions": [...],
             "order_instance_functions": [...]}

        Missing sections are treated as empty.
        """
        return cls(
            options=[
                Option.from_dict(o, default_currency=default_currency)
                for o in data.get("options") or ()
            ],
            modifier_types=[ModifierType.from_dict(m) for m in data.get("modifier_types") or ()],
            products=[
                Product.from_dict(p, default_currency=default_currency)
                for p in data.get("products") or ()
            ],
            product_instances=[
                ProductInstance.from_dict(pi) for pi in data.get("product_instances") or ()
            ],
            product_instance_functions=[
                ProductInstanceFunction.from_dict(f)
                for f in data.get("product_instance_functions") or ()
            ],
            order_instance_functions=[
                OrderInstanceFunction.from_dict(f)
                for f in data.get("order_instance_functions") or ()
            ],
        )
