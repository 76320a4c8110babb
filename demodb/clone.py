"""
Structural deep copy for JSON-shaped server state
"""

from collections.abc import Mapping
from datetime import date
from typing import Any

def clone_deep(value: Any) -> Any:
    """Recursively copy mappings, sequences, dates and scalars"""
    # datetime is a date subclass; replace() with no arguments yields a copy
    if isinstance(value, date):
        return value.replace()

    if isinstance(value, list):
        return [clone_deep(item) for item in value]
    if isinstance(value, tuple):
        return tuple(clone_deep(item) for item in value)

    if isinstance(value, Mapping):
        return {key: clone_deep(item) for key, item in value.items()}

    return value
