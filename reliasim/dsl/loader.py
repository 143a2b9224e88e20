"""YAML loader + schema validation for simulation scenarios.

Provides a single entrypoint to parse a YAML string, normalize keys where
needed, validate against the packaged JSON schema, and return a canonical
dictionary suitable for `reliasim.simulation.Simulation`.
"""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Dict

import jsonschema
import yaml

from reliasim.utils.yaml_utils import normalize_yaml_dict_keys

RECOGNIZED_KEYS = {"seed", "ticks", "dt", "scopes", "prototypes", "hosts"}


def _scenario_schema() -> Dict[str, Any]:
    try:
        with (
            resources.files("reliasim.schemas")
            .joinpath("scenario.json")
            .open("r", encoding="utf-8")
        ) as f:
            return json.load(f)
    except OSError as exc:  # pragma: no cover
        raise RuntimeError(
            "Failed to locate packaged scenario schema 'reliasim/schemas/scenario.json'."
        ) from exc


def validate_scenario(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate an already-parsed scenario mapping and return it.

    Raises:
        ValueError: On shape problems the schema cannot phrase well.
        jsonschema.ValidationError: On any other schema violation.
    """
    extra = set(data.keys()) - RECOGNIZED_KEYS
    if extra:
        raise ValueError(
            f"Unrecognized top-level key(s) in scenario: {', '.join(sorted(extra))}. "
            f"Allowed keys are {sorted(RECOGNIZED_KEYS)}"
        )

    # Early shape checks helpful for better error messages prior to schema validation
    hosts = data.get("hosts")
    if hosts is not None and not isinstance(hosts, list):
        raise ValueError("'hosts' must be a list")
    prototypes = data.get("prototypes") or {}
    if not isinstance(prototypes, dict):
        raise ValueError("'prototypes' must be a mapping")
    for host in hosts or []:
        if not isinstance(host, dict):
            raise ValueError("Each host definition must be a mapping with 'name' and 'part'")
        part = host.get("part")
        if part is not None and part not in prototypes:
            raise ValueError(
                f"Host '{host.get('name')}' references unknown prototype '{part}'"
            )

    jsonschema.validate(data, _scenario_schema())

    names = [h["name"] for h in hosts or []]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate host name(s): {', '.join(duplicates)}")

    return data


def load_scenario_yaml(yaml_str: str) -> Dict[str, Any]:
    """Load, normalize, and validate a scenario YAML string.

    Returns a canonical dictionary representation that downstream code can
    consume without worrying about YAML-specific quirks (e.g., boolean-like
    keys) and with schema shape already enforced.
    """
    data = yaml.safe_load(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")

    # Attribute maps and scope tables may carry YAML 1.1 boolean keys
    for section in ("scopes", "prototypes"):
        if isinstance(data.get(section), dict):
            data[section] = normalize_yaml_dict_keys(data[section])
    for proto in (data.get("prototypes") or {}).values():
        if isinstance(proto, dict) and isinstance(proto.get("attrs"), dict):
            proto["attrs"] = normalize_yaml_dict_keys(proto["attrs"])
    for host in data.get("hosts") or []:
        if isinstance(host, dict) and isinstance(host.get("attrs"), dict):
            host["attrs"] = normalize_yaml_dict_keys(host["attrs"])

    return validate_scenario(data)
