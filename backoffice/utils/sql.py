"""
SQL utilities for consistent handling of query results.

SQLModel/SQLAlchemy may return COUNT/MAX results as int, None or a 1-tuple/Row.
Use scalar_int() to safely coerce to int everywhere.
"""
from typing import Any


def scalar_int(x: Any, default: int = 0) -> int:
    """Convert COUNT/aggregate result to int. Handles int, None or 1-tuple/Row."""
    if x is None:
        return default
    try:
        x = x[0]
    except (TypeError, IndexError, KeyError):
        pass
    if x is None:
        return default
    return int(x)
