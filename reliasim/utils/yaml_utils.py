"""Utilities for handling YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Normalize dictionary keys from YAML parsing to plain strings.

    YAML 1.1 boolean keys (true, false, yes, no, on, off) arrive as Python
    True/False and numeric keys as int/float. Scope names, prototype names and
    host attribute names are always strings, so every key is converted with
    ``str()``; booleans become "True"/"False".

    Examples:
        >>> normalize_yaml_dict_keys({True: "vacuum", 2: "stage", "part": "LV-T30"})
        {'True': 'vacuum', '2': 'stage', 'part': 'LV-T30'}
    """
    return {str(key): value for key, value in data.items()}
