"""
Catalog Expression Rendering — Symbolic and Human-Readable Text
=================================================================
Turns expression trees into text for catalog editors and for
"why is this disabled?" explanations.

    expression_to_string                 (Size.Large EQ WHOLE)
    expression_to_human_readable_string  Large is selected

Both accept product and order expressions. Dangling references
never raise: they render as an empty string or UNDEFINED.
"""

from __future__ import annotations

from engines.product_config.catalog import CatalogSelectors
from engines.product_config.enums import ConstLiteralKind, LogicalOperator, OptionPlacement
from engines.product_config.errors import UnknownExpressionNodeError
from engines.product_config.models import (
    ConstLiteral,
    Expression,
    HasAnyOfModifierType,
    IfElse,
    Logical,
    ModifierPlacement,
    ProductMetadata,
)

UNDEFINED = "UNDEFINED"

OPERATOR_PHRASES = {
    LogicalOperator.AND: "and",
    LogicalOperator.OR: "or",
    LogicalOperator.NOT: "is not",
    LogicalOperator.EQ: "equals",
    LogicalOperator.NE: "does not equal",
    LogicalOperator.GT: "is greater than",
    LogicalOperator.GE: "is greater than or equal to",
    LogicalOperator.LT: "is less than",
    LogicalOperator.LE: "is less than or equal to",
}

# (placement, operator) → suffix after the option name
_PLACEMENT_PHRASES = {
    (OptionPlacement.LEFT, LogicalOperator.EQ): "is on the left",
    (OptionPlacement.LEFT, LogicalOperator.NE): "is not on the left",
    (OptionPlacement.RIGHT, LogicalOperator.EQ): "is on the right",
    (OptionPlacement.RIGHT, LogicalOperator.NE): "is not on the right",
    (OptionPlacement.WHOLE, LogicalOperator.EQ): "is selected",
    (OptionPlacement.WHOLE, LogicalOperator.NE): "is not selected",
    (OptionPlacement.NONE, LogicalOperator.EQ): "is not selected",
    (OptionPlacement.NONE, LogicalOperator.NE): "is selected",
}


def _format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _literal_text(expr: ConstLiteral, human: bool) -> str:
    if expr.kind is ConstLiteralKind.BOOLEAN:
        return "True" if expr.value else "False"
    if expr.kind is ConstLiteralKind.NUMBER:
        return _format_number(expr.value)
    if expr.kind is ConstLiteralKind.STRING:
        return str(expr.value)
    # placement / qualifier enums
    name = expr.value.name
    return name.replace("_", " ").title() if human else name


def _metadata_text(expr: ProductMetadata) -> str:
    return f":{expr.field.name}@{expr.location.name}"


def _is_placement_literal(expr: Expression) -> bool:
    return isinstance(expr, ConstLiteral) and expr.kind is ConstLiteralKind.MODIFIER_PLACEMENT


# ══════════════════════════════════════════════════════════════
# SYMBOLIC
# ══════════════════════════════════════════════════════════════

def expression_to_string(expr: Expression, catalog: CatalogSelectors) -> str:
    if isinstance(expr, ConstLiteral):
        return _literal_text(expr, human=False)
    if isinstance(expr, IfElse):
        return (
            f"IF({expression_to_string(expr.test, catalog)}) "
            f"{{ {expression_to_string(expr.true_branch, catalog)} }} "
            f"ELSE {{ {expression_to_string(expr.false_branch, catalog)} }}"
        )
    if isinstance(expr, Logical):
        a = expression_to_string(expr.operand_a, catalog)
        if expr.operator is LogicalOperator.NOT or expr.operand_b is None:
            return f"NOT ({a})"
        return f"({a} {expr.operator.value} {expression_to_string(expr.operand_b, catalog)})"
    if isinstance(expr, ModifierPlacement):
        modifier_type = catalog.modifier_entry(expr.mtid)
        option = catalog.option(expr.moid)
        if modifier_type is None or option is None:
            return ""
        return f"{modifier_type.name}.{option.display_name}"
    if isinstance(expr, HasAnyOfModifierType):
        modifier_type = catalog.modifier_entry(expr.mtid)
        return f"ANY {modifier_type.name if modifier_type else UNDEFINED}"
    if isinstance(expr, ProductMetadata):
        return _metadata_text(expr)
    raise UnknownExpressionNodeError(expr)


# ══════════════════════════════════════════════════════════════
# HUMAN READABLE
# ══════════════════════════════════════════════════════════════

def _human_logical(expr: Logical, catalog: CatalogSelectors) -> str:
    if expr.operator is LogicalOperator.NOT or expr.operand_b is None:
        if isinstance(expr.operand_a, HasAnyOfModifierType):
            modifier_type = catalog.modifier_entry(expr.operand_a.mtid)
            name = modifier_type.label if modifier_type else UNDEFINED
            return f"no {name} modifiers are selected"
        return f"not {expression_to_human_readable_string(expr.operand_a, catalog)}"

    a, b = expr.operand_a, expr.operand_b
    if expr.operator in (LogicalOperator.EQ, LogicalOperator.NE):
        if isinstance(b, ModifierPlacement) and _is_placement_literal(a):
            a, b = b, a
        if isinstance(a, ModifierPlacement) and _is_placement_literal(b):
            subject = expression_to_human_readable_string(a, catalog)
            return f"{subject} {_PLACEMENT_PHRASES[(OptionPlacement(b.value), expr.operator)]}"

    return (
        f"{expression_to_human_readable_string(a, catalog)} "
        f"{OPERATOR_PHRASES[expr.operator]} "
        f"{expression_to_human_readable_string(b, catalog)}"
    )


def expression_to_human_readable_string(expr: Expression, catalog: CatalogSelectors) -> str:
    if isinstance(expr, ConstLiteral):
        return _literal_text(expr, human=True)
    if isinstance(expr, IfElse):
        return (
            f"if {expression_to_human_readable_string(expr.test, catalog)} "
            f"then {expression_to_human_readable_string(expr.true_branch, catalog)}, "
            f"otherwise {expression_to_human_readable_string(expr.false_branch, catalog)}"
        )
    if isinstance(expr, Logical):
        return _human_logical(expr, catalog)
    if isinstance(expr, ModifierPlacement):
        option = catalog.option(expr.moid)
        return option.display_name if option else UNDEFINED
    if isinstance(expr, HasAnyOfModifierType):
        modifier_type = catalog.modifier_entry(expr.mtid)
        return f"any {modifier_type.name if modifier_type else UNDEFINED} modifiers selected"
    if isinstance(expr, ProductMetadata):
        return _metadata_text(expr)
    raise UnknownExpressionNodeError(expr)
