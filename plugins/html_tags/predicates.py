"""
Shape predicates used while validating plugin options.

Options arrive from YAML (strings, bools, numbers, dicts, lists) or from Python
callers (which may also pass callables), so validation works on shapes rather
than on declared types.
"""

import math
from typing import Any, Mapping

ASSET_TYPE_CSS = "css"
ASSET_TYPE_JS = "js"
ASSET_TYPES = (ASSET_TYPE_CSS, ASSET_TYPE_JS)

ATTRIBUTES_TEXT = "strings, booleans or numbers"


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_boolean(value: Any) -> bool:
    return value is True or value is False


def is_number(value: Any) -> bool:
    # bool is an int subclass; keep the two families apart.
    if is_boolean(value) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_plain_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_callable(value: Any) -> bool:
    return callable(value)


def is_callable_returning_string(value: Any) -> bool:
    """True if ``value`` is callable and returns a string when probed with ``("", "")``."""
    if not callable(value):
        return False
    try:
        return is_string(value("", ""))
    except Exception:
        return False


def is_array_of_strings(value: Any) -> bool:
    return is_array(value) and all(is_string(item) for item in value)


def is_valid_attribute_value(value: Any) -> bool:
    return is_string(value) or is_boolean(value) or is_number(value)


def is_asset_type(value: Any) -> bool:
    return value in ASSET_TYPES
