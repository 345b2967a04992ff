"""
Catalog Product Config — Exceptions
=====================================
Structured errors for the configuration engines.

Referential gaps in catalog data (an option id that no longer
exists, a dangling enable function) are NOT errors: they are
logged as warnings and the offending reference is skipped.
The exceptions below are reserved for failures the caller
cannot recover a meaningful result from.
"""

from __future__ import annotations

from typing import Any


class ProductConfigError(Exception):
    """Base error for product configuration operations."""
    pass


class ProductNotFoundError(ProductConfigError):
    """Top-level product id does not exist in the catalog snapshot."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' not found in catalog.")


class InstanceMatchIntegrityError(ProductConfigError):
    """
    No product instance matches one side of a selection.

    A well-formed catalog always matches at least the base instance,
    so this signals corrupt catalog data.
    """

    def __init__(self, product_id: str, side: str, selection: Any):
        self.product_id = product_id
        self.side = side
        self.selection = selection
        super().__init__(
            f"Unable to determine {side} product instance for product "
            f"'{product_id}' with selection {selection!r}."
        )


class UnknownExpressionNodeError(ProductConfigError):
    """Expression tree contains a node this evaluator does not handle."""

    def __init__(self, node: Any):
        self.node = node
        super().__init__(
            f"Unhandled expression node type: {type(node).__name__}."
        )


class CatalogDataError(ProductConfigError):
    """Catalog data handed to from_dict is malformed."""

    def __init__(self, entity: str, detail: str):
        self.entity = entity
        self.detail = detail
        super().__init__(f"Malformed {entity} data: {detail}")
