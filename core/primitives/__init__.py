"""
Catalog Core Primitives — Reusable Value Objects
==================================================
Primitives are the shared, engine-agnostic building blocks that
the catalog engines consume. They are:

- Pure Python (no framework dependency)
- Immutable (frozen dataclasses)
- Deterministic (same input → same output)

Primitives:
    money — integer minor-unit monetary value
"""

from core.primitives.money import Money

__all__ = ["Money"]
