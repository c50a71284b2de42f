"""
Utility functions for string manipulations and case conversions.
"""
import re
from typing import Any, Optional


def camel_to_snake_case(name: str) -> str:
    """
    Convert a camelCase or PascalCase string to snake_case.

    Args:
        name: The camelCase or PascalCase string to convert

    Returns:
        The string in snake_case
    """
    # Replace first capital with lowercase
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    # Handle all capitals
    return re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1).lower()


def snake_to_camel_case(name: str) -> str:
    """
    Convert a snake_case string to camelCase.

    Args:
        name: The snake_case string to convert

    Returns:
        The string in camelCase
    """
    components = name.split('_')
    return components[0] + ''.join(x[:1].upper() + x[1:] for x in components[1:])


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """Safely convert a value to int, handling None and string integers"""
    if value is None:
        return default

    # Convert float values to int if they represent whole numbers
    if isinstance(value, float):
        if value == int(value):
            return int(value)
        return default

    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Safely convert a value to float, handling None and numeric strings"""
    if value is None:
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


__all__ = ['camel_to_snake_case', 'snake_to_camel_case', 'safe_int', 'safe_float']
