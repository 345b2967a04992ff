"""
Catalog Product Config — Enumerations
=======================================
Closed vocabularies shared by the catalog model, the expression
language and the configuration engines.

Integer enums carry the values used by stored catalog data, so a
snapshot loaded from JSON maps straight onto them.
"""

from __future__ import annotations

from enum import Enum, IntEnum


# ══════════════════════════════════════════════════════════════
# SELECTION
# ══════════════════════════════════════════════════════════════

class OptionPlacement(IntEnum):
    NONE = 0
    LEFT = 1
    RIGHT = 2
    WHOLE = 3


class OptionQualifier(IntEnum):
    REGULAR = 0
    LITE = 1
    HEAVY = 2
    OTS = 3  # on the side


class ProductLocation(IntEnum):
    LEFT = 0
    RIGHT = 1


# ══════════════════════════════════════════════════════════════
# MATCHING
# ══════════════════════════════════════════════════════════════

class MatchLevel(IntEnum):
    """Ordered by strength: min() over cells gives the side's level."""
    NO_MATCH = 0
    AT_LEAST = 1
    EXACT_MATCH = 2


# ══════════════════════════════════════════════════════════════
# DISPLAY / ENABLEMENT
# ══════════════════════════════════════════════════════════════

class DisplayAs(Enum):
    OMIT = "OMIT"
    YOUR_CHOICE_OF = "YOUR_CHOICE_OF"
    LIST_CHOICES = "LIST_CHOICES"


class DisableReason(Enum):
    ENABLED = "ENABLED"
    DISABLED_BLANKET = "DISABLED_BLANKET"
    DISABLED_TIME = "DISABLED_TIME"
    DISABLED_WEIGHT = "DISABLED_WEIGHT"
    DISABLED_FLAVORS = "DISABLED_FLAVORS"
    DISABLED_MAXIMUM = "DISABLED_MAXIMUM"
    DISABLED_FUNCTION = "DISABLED_FUNCTION"
    DISABLED_NO_SPLITTING = "DISABLED_NO_SPLITTING"
    DISABLED_SPLIT_DIFFERENTIAL = "DISABLED_SPLIT_DIFFERENTIAL"
    DISABLED_FULFILLMENT_TYPE = "DISABLED_FULFILLMENT_TYPE"
    DISABLED_AVAILABILITY = "DISABLED_AVAILABILITY"


# ══════════════════════════════════════════════════════════════
# EXPRESSION LANGUAGE
# ══════════════════════════════════════════════════════════════

class LogicalOperator(Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    GE = "GE"
    LT = "LT"
    LE = "LE"


class MetadataField(Enum):
    FLAVOR = "FLAVOR"
    WEIGHT = "WEIGHT"


class ConstLiteralKind(Enum):
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    STRING = "STRING"
    MODIFIER_PLACEMENT = "MODIFIER_PLACEMENT"
    MODIFIER_QUALIFIER = "MODIFIER_QUALIFIER"
