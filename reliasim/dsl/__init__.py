"""Scenario file loading."""

from reliasim.dsl.loader import load_scenario_yaml, validate_scenario

__all__ = ["load_scenario_yaml", "validate_scenario"]
