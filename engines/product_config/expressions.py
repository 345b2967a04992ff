"""
Catalog Expression Evaluator — Conditional Enablement Language
================================================================
Evaluates the small typed expression language attached to options
and modifier groups ("only allow extra cheese when a crust is
chosen"), and the order-level variant used for computed order values.

RULES (NON-NEGOTIABLE):
- Deterministic: same selection + same catalog → same value
- Read-only: evaluation never mutates the selection or catalog
- Every AST node type is handled explicitly; anything else raises
  UnknownExpressionNodeError instead of evaluating to a default
- AND / OR / comparisons always evaluate both operands
- Dangling option ids are logged and contribute nothing

Node semantics:
    ConstLiteral          → its value
    IfElse                → truthy(test) ? true_branch : false_branch
    Logical AND / OR      → bool(a) and/or bool(b)
    Logical NOT           → not a   (also any Logical without operand_b)
    Logical EQ NE         → raw value comparison
    Logical GT GE LT LE   → raw ordering; incomparable types log, false
    ModifierPlacement     → placement of (mtid, moid), NONE if absent
    HasAnyOfModifierType  → any option of mtid with placement != NONE
    ProductMetadata       → Σ flavor_factor / bake_factor on one side
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable, Dict, List, Optional, Tuple

from engines.product_config.catalog import CatalogSelectors
from engines.product_config.enums import (
    LogicalOperator,
    MetadataField,
    OptionPlacement,
    ProductLocation,
)
from engines.product_config.errors import UnknownExpressionNodeError
from engines.product_config.models import (
    ConstLiteral,
    Expression,
    HasAnyOfModifierType,
    IfElse,
    Logical,
    ModifierPlacement,
    OrderInstanceFunction,
    ProductInstanceFunction,
    ProductMetadata,
    Selection,
)
from engines.product_config.selection import get_placement

logger = logging.getLogger("catalog.expressions")
_default_logger = logger


_COMPARISONS: Dict[LogicalOperator, Callable[[Any, Any], bool]] = {
    LogicalOperator.EQ: operator.eq,
    LogicalOperator.NE: operator.ne,
    LogicalOperator.GT: operator.gt,
    LogicalOperator.GE: operator.ge,
    LogicalOperator.LT: operator.lt,
    LogicalOperator.LE: operator.le,
}

_SIDE_PLACEMENTS = {
    ProductLocation.LEFT: (OptionPlacement.LEFT, OptionPlacement.WHOLE),
    ProductLocation.RIGHT: (OptionPlacement.RIGHT, OptionPlacement.WHOLE),
}


def _is_unary(expr: Logical) -> bool:
    return expr.operator is LogicalOperator.NOT or expr.operand_b is None


def _combine(op: LogicalOperator, a: Any, b: Any, log: logging.Logger) -> bool:
    if op is LogicalOperator.AND:
        return bool(a) and bool(b)
    if op is LogicalOperator.OR:
        return bool(a) or bool(b)
    try:
        return _COMPARISONS[op](a, b)
    except TypeError:
        log.error(
            "Cannot apply %s to %s and %s; treating as false.",
            op.value, type(a).__name__, type(b).__name__,
        )
        return False


# ══════════════════════════════════════════════════════════════
# PRODUCT EXPRESSIONS
# ══════════════════════════════════════════════════════════════

def _has_any_of_modifier_type(selection: Selection, mtid: str) -> bool:
    for entry in selection:
        if entry.modifier_type_id == mtid:
            return any(o.placement != OptionPlacement.NONE for o in entry.options)
    return False


def _product_metadata(
    selection: Selection,
    expr: ProductMetadata,
    catalog: CatalogSelectors,
    log: logging.Logger,
):
    covering = _SIDE_PLACEMENTS[expr.location]
    total = 0
    for entry in selection:
        for instance in entry.options:
            option = catalog.option(instance.option_id)
            if option is None:
                log.warning(
                    "Missing modifier option %s in %s, skipping.",
                    instance.option_id, entry.modifier_type_id,
                )
                continue
            if instance.placement not in covering:
                continue
            if expr.field is MetadataField.FLAVOR:
                total += option.metadata.flavor_factor
            else:
                total += option.metadata.bake_factor
    return total


def evaluate_expression(
    selection: Selection,
    expr: Expression,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
):
    """
    Evaluate a product expression against a selection.

    Returns str, number, bool, OptionPlacement or OptionQualifier.
    """
    log = logger or _default_logger
    if isinstance(expr, ConstLiteral):
        return expr.value
    if isinstance(expr, IfElse):
        if evaluate_expression(selection, expr.test, catalog, log):
            return evaluate_expression(selection, expr.true_branch, catalog, log)
        return evaluate_expression(selection, expr.false_branch, catalog, log)
    if isinstance(expr, Logical):
        a = evaluate_expression(selection, expr.operand_a, catalog, log)
        if _is_unary(expr):
            return not a
        b = evaluate_expression(selection, expr.operand_b, catalog, log)
        return _combine(expr.operator, a, b, log)
    if isinstance(expr, ModifierPlacement):
        return get_placement(selection, expr.mtid, expr.moid).placement
    if isinstance(expr, HasAnyOfModifierType):
        return _has_any_of_modifier_type(selection, expr.mtid)
    if isinstance(expr, ProductMetadata):
        return _product_metadata(selection, expr, catalog, log)
    raise UnknownExpressionNodeError(expr)


def evaluate_function(
    selection: Selection,
    func: ProductInstanceFunction,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
):
    """Evaluate a named ProductInstanceFunction."""
    return evaluate_expression(selection, func.expression, catalog, logger)


# ══════════════════════════════════════════════════════════════
# TRACKED EVALUATION
# ══════════════════════════════════════════════════════════════

def evaluate_expression_with_tracking(
    selection: Selection,
    expr: Expression,
    catalog: CatalogSelectors,
    logger: Optional[logging.Logger] = None,
) -> Tuple[Any, List[Expression]]:
    """
    Evaluate and explain a falsy result.

    Returns (value, failing): failing lists the innermost
    sub-expressions that made the result falsy, and is empty
    whenever the value is truthy. Leaf value nodes (literals,
    placements, metadata sums) are never reported on their own;
    the comparison or test that consumed them is.
    """
    log = logger or _default_logger
    if isinstance(expr, (ConstLiteral, ModifierPlacement, ProductMetadata)):
        return evaluate_expression(selection, expr, catalog, log), []
    if isinstance(expr, HasAnyOfModifierType):
        value = _has_any_of_modifier_type(selection, expr.mtid)
        return value, [] if value else [expr]
    if isinstance(expr, IfElse):
        test, _ = evaluate_expression_with_tracking(selection, expr.test, catalog, log)
        branch = expr.true_branch if test else expr.false_branch
        value, failing = evaluate_expression_with_tracking(selection, branch, catalog, log)
        if value:
            return value, []
        return value, failing or [expr]
    if isinstance(expr, Logical):
        a, failing_a = evaluate_expression_with_tracking(selection, expr.operand_a, catalog, log)
        if _is_unary(expr):
            value = not a
            return value, [] if value else [expr]
        b, failing_b = evaluate_expression_with_tracking(selection, expr.operand_b, catalog, log)
        value = _combine(expr.operator, a, b, log)
        if value:
            return value, []
        if expr.operator is LogicalOperator.AND:
            if not a:
                return value, failing_a or [expr]
            return value, failing_b or [expr]
        return value, [expr]
    raise UnknownExpressionNodeError(expr)


# ══════════════════════════════════════════════════════════════
# REFERENCE FINDERS
# ══════════════════════════════════════════════════════════════

def _walk(expr: Expression):
    yield expr
    if isinstance(expr, IfElse):
        yield from _walk(expr.test)
        yield from _walk(expr.true_branch)
        yield from _walk(expr.false_branch)
    elif isinstance(expr, Logical):
        yield from _walk(expr.operand_a)
        if expr.operand_b is not None:
            yield from _walk(expr.operand_b)


def find_modifier_placement_expressions(
    expr: Expression, mtid: str,
) -> List[ModifierPlacement]:
    """Every ModifierPlacement node in the tree that references mtid."""
    return [
        node for node in _walk(expr)
        if isinstance(node, ModifierPlacement) and node.mtid == mtid
    ]


def find_has_any_modifier_expressions(
    expr: Expression, mtid: str,
) -> List[HasAnyOfModifierType]:
    """Every HasAnyOfModifierType node in the tree that references mtid."""
    return [
        node for node in _walk(expr)
        if isinstance(node, HasAnyOfModifierType) and node.mtid == mtid
    ]


# ══════════════════════════════════════════════════════════════
# ORDER EXPRESSIONS
# ══════════════════════════════════════════════════════════════

def evaluate_order_expression(order: Any, expr: Expression, catalog: CatalogSelectors):
    """
    Evaluate an order-level expression.

    Only ConstLiteral, IfElse and Logical are legal here; the order
    itself is passed through for node types that may inspect it.
    """
    if isinstance(expr, ConstLiteral):
        return expr.value
    if isinstance(expr, IfElse):
        if evaluate_order_expression(order, expr.test, catalog):
            return evaluate_order_expression(order, expr.true_branch, catalog)
        return evaluate_order_expression(order, expr.false_branch, catalog)
    if isinstance(expr, Logical):
        a = evaluate_order_expression(order, expr.operand_a, catalog)
        if _is_unary(expr):
            return not a
        b = evaluate_order_expression(order, expr.operand_b, catalog)
        return _combine(expr.operator, a, b, _default_logger)
    raise UnknownExpressionNodeError(expr)


def evaluate_order_function(order: Any, func: OrderInstanceFunction, catalog: CatalogSelectors):
    """Evaluate a named OrderInstanceFunction."""
    return evaluate_order_expression(order, func.expression, catalog)
