"""Utility helpers used across reliasim.

Small, self-contained utilities that do not depend on project internals.
"""

from reliasim.utils.yaml_utils import normalize_yaml_dict_keys

__all__ = ["normalize_yaml_dict_keys"]
