"""
formatting.py — Calculator Data Formatting

Pure helpers that turn arbitrary calculator data into human-readable
line item properties and order notes.
"""

import json
import re
from typing import Any, Dict, List

from .models import NameValue

# Keys the widget adds for its own bookkeeping
RESERVED_KEYS = frozenset({"timestamp", "calculator"})

_CAPITAL = re.compile(r"([A-Z])")


def format_label(key: str) -> str:
    """
    Converts a camelCase or snake_case key into Title Case words.

    >>> format_label("binderKits")
    'Binder Kits'
    >>> format_label("total_cost")
    'Total Cost'
    """
    spaced = _CAPITAL.sub(r" \1", key or "").replace("_", " ").strip()
    return " ".join(word[:1].upper() + word[1:].lower() for word in spaced.split())


def format_value(value: Any) -> str:
    return str(value)


def calculator_properties(calculator_data: Dict[str, Any]) -> List[NameValue]:
    """One labelled property per calculator data entry, reserved keys skipped."""
    return [
        NameValue(name=format_label(key), value=format_value(value))
        for key, value in calculator_data.items()
        if key not in RESERVED_KEYS
    ]


def serialize_calculator_data(calculator_data: Dict[str, Any]) -> str:
    return json.dumps(calculator_data, indent=2, default=str, ensure_ascii=False)
