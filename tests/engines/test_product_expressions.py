"""
Catalog Expression Evaluator Tests
====================================
Product and order expression evaluation, tracked evaluation,
reference finders, and both text renderings.
"""

import pytest

from engines.product_config.enums import (
    ConstLiteralKind,
    LogicalOperator,
    MetadataField,
    OptionPlacement,
    ProductLocation,
)
from engines.product_config.errors import UnknownExpressionNodeError
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
from engines.product_config.models import (
    ConstLiteral,
    HasAnyOfModifierType,
    IfElse,
    Logical,
    ModifierPlacement,
    OrderInstanceFunction,
    ProductInstanceFunction,
    ProductMetadata,
)
from pizza_catalog import LEFT, RIGHT, entry, placed


def num(value):
    return ConstLiteral(value, ConstLiteralKind.NUMBER)


def boolean(value):
    return ConstLiteral(value, ConstLiteralKind.BOOLEAN)


def placement(value):
    return ConstLiteral(value, ConstLiteralKind.MODIFIER_PLACEMENT)


def logical(op, a, b=None):
    return Logical(LogicalOperator[op], a, b)


THICK_IS_WHOLE = logical(
    "EQ", ModifierPlacement("crust", "thick"), placement(OptionPlacement.WHOLE),
)


# ══════════════════════════════════════════════════════════════
# PRODUCT EXPRESSIONS
# ══════════════════════════════════════════════════════════════

class TestEvaluateExpression:
    def test_literal_returns_value(self, catalog):
        assert evaluate_expression((), num(3), catalog) == 3
        assert evaluate_expression((), boolean(False), catalog) is False

    def test_modifier_placement_of_selected_option(self, catalog):
        selection = (entry("toppings", placed("pepperoni", LEFT)),)
        expr = ModifierPlacement("toppings", "pepperoni")
        assert evaluate_expression(selection, expr, catalog) == OptionPlacement.LEFT

    def test_modifier_placement_absent_is_none(self, catalog):
        expr = ModifierPlacement("toppings", "pepperoni")
        assert evaluate_expression((), expr, catalog) == OptionPlacement.NONE

    def test_has_any_of_modifier_type(self, catalog):
        expr = HasAnyOfModifierType("toppings")
        assert evaluate_expression((entry("toppings", placed("mushroom")),), expr, catalog) is True
        assert evaluate_expression((entry("crust", placed("thin")),), expr, catalog) is False

    def test_has_any_ignores_none_placements(self, catalog):
        selection = (entry("toppings", placed("mushroom", OptionPlacement.NONE)),)
        assert evaluate_expression(selection, HasAnyOfModifierType("toppings"), catalog) is False

    def test_product_metadata_sums_side_and_whole(self, catalog):
        selection = (
            entry("toppings", placed("pepperoni", LEFT), placed("sausage"), placed("mushroom", RIGHT)),
        )
        left = ProductMetadata(MetadataField.FLAVOR, ProductLocation.LEFT)
        right = ProductMetadata(MetadataField.WEIGHT, ProductLocation.RIGHT)
        assert evaluate_expression(selection, left, catalog) == 3
        assert evaluate_expression(selection, right, catalog) == 3

    def test_product_metadata_skips_unknown_option(self, catalog, caplog):
        selection = (entry("toppings", placed("anchovy")),)
        expr = ProductMetadata(MetadataField.FLAVOR, ProductLocation.LEFT)
        assert evaluate_expression(selection, expr, catalog) == 0
        assert "anchovy" in caplog.text

    def test_if_else(self, catalog):
        expr = IfElse(HasAnyOfModifierType("toppings"), num(1), num(2))
        assert evaluate_expression((), expr, catalog) == 2
        assert evaluate_expression((entry("toppings", placed("mushroom")),), expr, catalog) == 1

    def test_placement_comparison(self, catalog):
        assert evaluate_expression((entry("crust", placed("thick")),), THICK_IS_WHOLE, catalog) is True
        assert evaluate_expression((entry("crust", placed("thin")),), THICK_IS_WHOLE, catalog) is False

    @pytest.mark.parametrize("op,a,b,expected", [
        ("AND", True, False, False),
        ("OR", True, False, True),
        ("EQ", 2, 2, True),
        ("NE", 2, 2, False),
        ("GT", 3, 2, True),
        ("GE", 2, 2, True),
        ("LT", 3, 2, False),
        ("LE", 2, 3, True),
    ])
    def test_binary_operators(self, catalog, op, a, b, expected):
        assert evaluate_expression((), logical(op, num(a), num(b)), catalog) is expected

    def test_not(self, catalog):
        assert evaluate_expression((), logical("NOT", boolean(True)), catalog) is False

    def test_missing_second_operand_is_negation(self, catalog):
        assert evaluate_expression((), logical("AND", boolean(False)), catalog) is True

    def test_incomparable_ordering_is_false(self, catalog, caplog):
        expr = logical("GT", ConstLiteral("a", ConstLiteralKind.STRING), num(1))
        assert evaluate_expression((), expr, catalog) is False
        assert "Cannot apply GT to str and int" in caplog.text

    def test_unknown_node_raises(self, catalog):
        with pytest.raises(UnknownExpressionNodeError, match="object"):
            evaluate_expression((), object(), catalog)

    def test_evaluate_function(self, catalog):
        fn = ProductInstanceFunction(id="f1", name="thick crust", expression=THICK_IS_WHOLE)
        assert evaluate_function((entry("crust", placed("thick")),), fn, catalog) is True


# ══════════════════════════════════════════════════════════════
# TRACKED EVALUATION
# ══════════════════════════════════════════════════════════════

class TestTrackedEvaluation:
    def test_truthy_reports_nothing(self, catalog):
        value, failing = evaluate_expression_with_tracking(
            (entry("crust", placed("thick")),), THICK_IS_WHOLE, catalog,
        )
        assert value is True
        assert failing == []

    def test_failing_comparison_is_reported(self, catalog):
        value, failing = evaluate_expression_with_tracking((), THICK_IS_WHOLE, catalog)
        assert value is False
        assert failing == [THICK_IS_WHOLE]

    def test_and_reports_failing_operand(self, catalog):
        has_extras = HasAnyOfModifierType("extras")
        expr = logical("AND", HasAnyOfModifierType("toppings"), has_extras)
        value, failing = evaluate_expression_with_tracking(
            (entry("toppings", placed("mushroom")),), expr, catalog,
        )
        assert value is False
        assert failing == [has_extras]

    def test_and_of_literals_reports_itself(self, catalog):
        expr = logical("AND", boolean(True), boolean(False))
        value, failing = evaluate_expression_with_tracking((), expr, catalog)
        assert value is False
        assert failing == [expr]

    def test_or_reports_itself(self, catalog):
        expr = logical("OR", HasAnyOfModifierType("toppings"), HasAnyOfModifierType("extras"))
        value, failing = evaluate_expression_with_tracking((), expr, catalog)
        assert value is False
        assert failing == [expr]

    def test_not_reports_itself(self, catalog):
        expr = logical("NOT", HasAnyOfModifierType("toppings"))
        value, failing = evaluate_expression_with_tracking(
            (entry("toppings", placed("mushroom")),), expr, catalog,
        )
        assert value is False
        assert failing == [expr]

    def test_if_else_reports_branch(self, catalog):
        has_extras = HasAnyOfModifierType("extras")
        expr = IfElse(boolean(True), has_extras, boolean(True))
        value, failing = evaluate_expression_with_tracking((), expr, catalog)
        assert value is False
        assert failing == [has_extras]

    def test_if_else_with_literal_branch_reports_itself(self, catalog):
        expr = IfElse(boolean(False), boolean(True), boolean(False))
        value, failing = evaluate_expression_with_tracking((), expr, catalog)
        assert value is False
        assert failing == [expr]


# ══════════════════════════════════════════════════════════════
# REFERENCE FINDERS
# ══════════════════════════════════════════════════════════════

class TestReferenceFinders:
    EXPR = IfElse(
        logical("AND", HasAnyOfModifierType("toppings"), THICK_IS_WHOLE),
        logical("EQ", ModifierPlacement("toppings", "sausage"), placement(OptionPlacement.LEFT)),
        logical("NOT", HasAnyOfModifierType("crust")),
    )

    def test_finds_placements_for_type(self):
        found = find_modifier_placement_expressions(self.EXPR, "crust")
        assert found == [ModifierPlacement("crust", "thick")]

    def test_finds_has_any_for_type(self):
        found = find_has_any_modifier_expressions(self.EXPR, "crust")
        assert found == [HasAnyOfModifierType("crust")]

    def test_no_references(self):
        assert find_modifier_placement_expressions(self.EXPR, "extras") == []
        assert find_has_any_modifier_expressions(self.EXPR, "extras") == []


# ══════════════════════════════════════════════════════════════
# ORDER EXPRESSIONS
# ══════════════════════════════════════════════════════════════

class TestOrderExpressions:
    def test_literal_and_logical(self, catalog):
        expr = IfElse(logical("GT", num(5), num(3)), num(10), num(0))
        assert evaluate_order_expression({"id": "o1"}, expr, catalog) == 10

    def test_order_function(self, catalog):
        fn = OrderInstanceFunction(id="tip", name="Tip", expression=num(15))
        assert evaluate_order_function({"id": "o1"}, fn, catalog) == 15

    def test_product_node_rejected(self, catalog):
        with pytest.raises(UnknownExpressionNodeError, match="HasAnyOfModifierType"):
            evaluate_order_expression({}, HasAnyOfModifierType("toppings"), catalog)


# ══════════════════════════════════════════════════════════════
# TEXT RENDERING
# ══════════════════════════════════════════════════════════════

class TestExpressionToString:
    def test_placement_comparison(self, catalog):
        assert expression_to_string(THICK_IS_WHOLE, catalog) == "(Crust.Thick EQ WHOLE)"

    def test_if_else(self, catalog):
        expr = IfElse(boolean(True), num(1), num(2.0))
        assert expression_to_string(expr, catalog) == "IF(True) { 1 } ELSE { 2 }"

    def test_not_and_any(self, catalog):
        expr = logical("NOT", HasAnyOfModifierType("toppings"))
        assert expression_to_string(expr, catalog) == "NOT (ANY Toppings)"

    def test_metadata(self, catalog):
        expr = ProductMetadata(MetadataField.FLAVOR, ProductLocation.LEFT)
        assert expression_to_string(expr, catalog) == ":FLAVOR@LEFT"

    def test_dangling_references(self, catalog):
        assert expression_to_string(ModifierPlacement("crust", "gluten_free"), catalog) == ""
        assert expression_to_string(HasAnyOfModifierType("sauces"), catalog) == "ANY UNDEFINED"


class TestHumanReadable:
    def test_whole_placement(self, catalog):
        assert expression_to_human_readable_string(THICK_IS_WHOLE, catalog) == "Thick is selected"

    def test_operands_in_either_order(self, catalog):
        expr = logical("NE", placement(OptionPlacement.LEFT), ModifierPlacement("toppings", "sausage"))
        assert expression_to_human_readable_string(expr, catalog) == "Sausage is not on the left"

    def test_none_placement(self, catalog):
        expr = logical("EQ", ModifierPlacement("toppings", "sausage"), placement(OptionPlacement.NONE))
        assert expression_to_human_readable_string(expr, catalog) == "Sausage is not selected"

    def test_no_modifiers_selected(self, catalog):
        expr = logical("NOT", HasAnyOfModifierType("toppings"))
        assert expression_to_human_readable_string(expr, catalog) == "no Toppings modifiers are selected"

    def test_comparison_phrase(self, catalog):
        expr = logical(
            "GE", ProductMetadata(MetadataField.WEIGHT, ProductLocation.RIGHT), num(4.0),
        )
        assert expression_to_human_readable_string(expr, catalog) == (
            ":WEIGHT@RIGHT is greater than or equal to 4"
        )

    def test_if_else(self, catalog):
        expr = IfElse(HasAnyOfModifierType("extras"), boolean(True), placement(OptionPlacement.WHOLE))
        assert expression_to_human_readable_string(expr, catalog) == (
            "if any Extras modifiers selected then True, otherwise Whole"
        )

    def test_unknown_option(self, catalog):
        assert expression_to_human_readable_string(
            ModifierPlacement("toppings", "anchovy"), catalog,
        ) == "UNDEFINED"
