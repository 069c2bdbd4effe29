"""
Strict validation of a search request against its resource declaration.

Only consulted when ``filter_strict_mode`` is enabled; by default the
filter engine skips whatever it does not understand.

Checks performed:
  1. Every top-level query key is a declared filter parameter or a
     reserved endpoint parameter
  2. Declared filter parameters carry an operator key (``name[eq]=x``)
  3. Every operator key is allowed for its parameter
  4. BETWEEN / NOT BETWEEN payloads resolve to exactly two values
  5. Geo parameters are all-or-nothing and numeric
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.core.utils import to_float
from src.filters.engine import as_list, coerce_value
from src.filters.operators import RANGE_SYMBOLS, Operator, is_operator_key
from src.filters.registry import ResourceDefinition

GEO_PARAMS = ("lat", "lng", "radius")


def validate_query(resource: ResourceDefinition, params: Mapping[str, Any]) -> list[str]:
    """Return a list of validation error messages (empty list = request is valid).

    Parameters
    ----------
    resource : ResourceDefinition
        The resource being searched.
    params : Mapping
        Nested query mapping as produced by ``parse_query``.
    """
    spec = resource.filter_spec
    errors: list[str] = []

    for key, value in params.items():
        declared = key in spec.params
        reserved = key in resource.reserved_params

        if not declared and not reserved:
            errors.append(
                f"Unknown filter parameter '{key}'. "
                f"Allowed: {', '.join(list(spec.params) + list(resource.reserved_params))}"
            )
            continue

        if not declared:
            continue

        if not isinstance(value, Mapping):
            if not reserved:
                errors.append(f"Filter '{key}' needs an operator, e.g. {key}[eq]=value.")
            continue

        allowed = [op.value for op in spec.params[key]]
        for op_key, raw in value.items():
            if not spec.allows(key, op_key):
                kind = "not allowed" if is_operator_key(op_key) else "not a recognised operator"
                errors.append(
                    f"Operator '{op_key}' is {kind} for '{key}'. Allowed: {', '.join(allowed)}"
                )
                continue
            if Operator(op_key).symbol in RANGE_SYMBOLS:
                bounds = as_list(coerce_value(raw))
                if len(bounds) != 2:
                    errors.append(
                        f"Filter '{key}[{op_key}]' needs exactly two comma-separated values, "
                        f"got {len(bounds)}."
                    )

    if resource.geo is not None:
        supplied = [p for p in GEO_PARAMS if p in params and not isinstance(params[p], Mapping)]
        if supplied and len(supplied) != len(GEO_PARAMS):
            missing = [p for p in GEO_PARAMS if p not in supplied]
            errors.append(f"Location search needs lat, lng and radius; missing: {', '.join(missing)}.")
        for p in supplied:
            if to_float(params[p]) is None:
                errors.append(f"Location parameter '{p}' must be a number, got {params[p]!r}.")

    return errors
