"""
Catalog Product Config Engine — Configuration, Naming and Pricing
===================================================================
Given a product definition, the catalog's modifier and option
definitions, and a customer's modifier selection, this engine:

- decides for every option and placement (left / right / whole)
  whether selecting it is currently legal
- derives the configuration's display name, short name,
  description and price, including split (left ≠ right) products
- enumerates the prices an incomplete configuration can reach
- evaluates the expression language used for conditional
  enablement and per-order computed values

Pure computation over a read-only catalog snapshot.
No persistence, no transport, no wall-clock reads.
"""

from engines.product_config.availability import disable_data_check
from engines.product_config.catalog import CatalogSelectors, InMemoryCatalog
from engines.product_config.enablement import DELTA_MATRIX, is_option_enabled
from engines.product_config.errors import (
    CatalogDataError,
    InstanceMatchIntegrityError,
    ProductConfigError,
    ProductNotFoundError,
    UnknownExpressionNodeError,
)
from engines.product_config.expression_text import (
    expression_to_human_readable_string,
    expression_to_string,
)
from engines.product_config.expressions import (
    evaluate_expression,
    evaluate_expression_with_tracking,
    evaluate_function,
    evaluate_order_expression,
    evaluate_order_function,
    find_has_any_modifier_expressions,
    find_modifier_placement_expressions,
)
from engines.product_config.matching import (
    MATCH_MATRIX,
    InstanceMatch,
    ProductCompareResult,
    compare_products,
    compare_selections,
    match_product_instances,
    products_equal,
)
from engines.product_config.metadata import (
    ConfiguredProduct,
    ModifierDisplayList,
    ModifierTypeState,
    OptionState,
    ProductConfigMetadata,
    create_product_with_metadata,
    display_options,
    generate_product_metadata,
    generate_shortcode,
)
from engines.product_config.pricing import compute_potential_prices
from engines.product_config.selection import (
    get_placement,
    minimize_selections,
    normalize_selections,
    sort_modifiers_and_options,
    update_checkbox_selection,
    update_radio_selection,
)

__all__ = [
    "CatalogSelectors",
    "InMemoryCatalog",
    "disable_data_check",
    "DELTA_MATRIX",
    "is_option_enabled",
    "ProductConfigError",
    "ProductNotFoundError",
    "InstanceMatchIntegrityError",
    "UnknownExpressionNodeError",
    "CatalogDataError",
    "expression_to_string",
    "expression_to_human_readable_string",
    "evaluate_expression",
    "evaluate_function",
    "evaluate_expression_with_tracking",
    "evaluate_order_expression",
    "evaluate_order_function",
    "find_modifier_placement_expressions",
    "find_has_any_modifier_expressions",
    "MATCH_MATRIX",
    "InstanceMatch",
    "ProductCompareResult",
    "compare_selections",
    "compare_products",
    "products_equal",
    "match_product_instances",
    "ConfiguredProduct",
    "ModifierDisplayList",
    "ModifierTypeState",
    "OptionState",
    "ProductConfigMetadata",
    "generate_product_metadata",
    "create_product_with_metadata",
    "display_options",
    "generate_shortcode",
    "compute_potential_prices",
    "get_placement",
    "normalize_selections",
    "minimize_selections",
    "update_radio_selection",
    "update_checkbox_selection",
    "sort_modifiers_and_options",
]
