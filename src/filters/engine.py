"""
Filter engine -- turns whitelisted query parameters into predicate clauses.

A resource declares a FilterSpec: which parameters may be filtered on and
with which operators, plus an optional column rename.  ``transform`` walks
that declaration against the nested query mapping of one request and
emits ``Clause(column, symbol, value)`` triples in declaration order.
The caller AND-combines them.

The engine never raises on request input.  Undeclared parameters,
undeclared operators and malformed ranges are skipped silently; API
clients rely on this best-effort behaviour, so strict rejection lives in
``src.filters.validator`` behind the ``filter_strict_mode`` setting.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, NamedTuple

from src.filters.operators import (
    LIKE_WILDCARD,
    LIST_SYMBOLS,
    RANGE_SYMBOLS,
    Operator,
)
from src.core.logging import get_logger

logger = get_logger(__name__)


class FilterSpecError(ValueError):
    """Raised when a resource declares an operator outside the vocabulary."""


class Clause(NamedTuple):
    column: str
    operator: str
    value: Any


# ── Per-resource declaration ─────────────────────────────

@dataclass(frozen=True)
class FilterSpec:
    """Which parameters a resource accepts, and with which operators."""

    resource: str
    params: Mapping[str, tuple[Operator, ...]]
    column_map: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Shared read-only across requests
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "column_map", MappingProxyType(dict(self.column_map)))

    @classmethod
    def from_mapping(
        cls,
        resource: str,
        params: Mapping[str, Iterable[str]],
        column_map: Mapping[str, str] | None = None,
    ) -> "FilterSpec":
        """Build a spec from plain operator-key lists, rejecting unknown keys."""
        parsed: dict[str, tuple[Operator, ...]] = {}
        for param, keys in params.items():
            ops: list[Operator] = []
            for key in keys:
                try:
                    op = Operator(key)
                except ValueError:
                    raise FilterSpecError(
                        f"Resource '{resource}' declares unknown operator '{key}' "
                        f"for parameter '{param}'"
                    ) from None
                if op not in ops:
                    ops.append(op)
            parsed[param] = tuple(ops)
        return cls(resource=resource, params=parsed, column_map=column_map or {})

    def column_for(self, param: str) -> str:
        return self.column_map.get(param, param)

    def allows(self, param: str, operator: str) -> bool:
        ops = self.params.get(param)
        return ops is not None and any(op.value == operator for op in ops)


# ── Value coercion ───────────────────────────────────────

def coerce_value(value: Any) -> Any:
    """Cast query-string leaves: booleans and null, never numbers."""
    if isinstance(value, list):
        return [coerce_value(v) for v in value]
    if isinstance(value, Mapping):
        return {k: coerce_value(v) for k, v in value.items()}
    if not isinstance(value, str):
        return value

    lowered = value.lower()
    if lowered == "true" or value == "1":
        return True
    if lowered == "false" or value == "0":
        return False
    if lowered == "null":
        return None
    return value


# ── Request -> clauses ───────────────────────────────────

def transform(spec: FilterSpec, params: Mapping[str, Any]) -> list[Clause]:
    """Return the clauses *params* requests under *spec*, in declaration order."""
    clauses: list[Clause] = []
    for param, operators in spec.params.items():
        query = params.get(param)
        if query is None:
            continue
        if not isinstance(query, Mapping):
            # field=value without an operator key
            continue

        column = spec.column_for(param)
        for op in operators:
            raw = query.get(op.value)
            if raw is None:
                continue
            clauses.append(Clause(column, op.symbol, coerce_value(raw)))

    logger.debug("%s filter produced %d clause(s)", spec.resource, len(clauses))
    return clauses


# ── Query-string parsing ─────────────────────────────────

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])+)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")


def _split_key(key: str) -> list[str]:
    m = _KEY_RE.match(key)
    if not m:
        return [key]
    return [m.group(1)] + _SEGMENT_RE.findall(m.group(2))


def _get_child(container: dict | list, segment: str) -> Any:
    if isinstance(container, list):
        if segment == "":
            return None
        return container[int(segment)] if segment.isdigit() and int(segment) < len(container) else None
    return container.get(segment)


def _set_child(container: dict | list, segment: str, value: Any) -> Any:
    if isinstance(container, list):
        container.append(value)
    elif segment == "":
        container[str(len(container))] = value
    else:
        container[segment] = value
    return value


def _assign(container: dict | list, segments: list[str], value: Any) -> None:
    head, rest = segments[0], segments[1:]
    if not rest:
        _set_child(container, head, value)
        return

    child = _get_child(container, head)
    if not isinstance(child, (dict, list)):
        child = _set_child(container, head, [] if rest[0] == "" else {})
    elif isinstance(child, list) and rest[0] != "":
        # Named key under an append-list: promote to a mapping
        promoted = {str(i): v for i, v in enumerate(child)}
        if isinstance(container, list):
            container[int(head)] = promoted
        else:
            container[head] = promoted
        child = promoted
    _assign(child, rest, value)


def parse_query(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Fold flat ``key[op][]=value`` pairs into a nested mapping.

    >>> parse_query([("price[gte]", "10"), ("tags[in][]", "a"), ("tags[in][]", "b")])
    {'price': {'gte': '10'}, 'tags': {'in': ['a', 'b']}}
    """
    result: dict[str, Any] = {}
    for key, value in items:
        _assign(result, _split_key(key), value)
    return result


# ── Downstream clause application ────────────────────────

def _scalar_text(value: Any) -> str:
    if value is True:
        return "1"
    if value is None or value is False:
        return ""
    return str(value)


def as_list(value: Any) -> list[Any]:
    """List values pass through; scalars are split on commas."""
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return list(value.values())
    return _scalar_text(value).split(",")


def like_pattern(value: Any) -> Any:
    """Wrap a bare string in wildcards; explicit wildcards are kept as given."""
    if isinstance(value, str) and LIKE_WILDCARD not in value:
        return f"{LIKE_WILDCARD}{value}{LIKE_WILDCARD}"
    return value


def prepare_clauses(clauses: Iterable[Clause]) -> list[Clause]:
    """Normalise clause values into the shape the query builder applies.

    IN / NOT IN become lists, BETWEEN / NOT BETWEEN become a (low, high)
    pair or are dropped, LIKE gets substring wildcards.
    """
    prepared: list[Clause] = []
    for column, symbol, value in clauses:
        if symbol in LIST_SYMBOLS:
            value = as_list(value)
        elif symbol in RANGE_SYMBOLS:
            bounds = as_list(value)
            if len(bounds) != 2:
                logger.debug("Dropping %s on %s: %d bound(s)", symbol, column, len(bounds))
                continue
            value = [bounds[0], bounds[1]]
        elif symbol == Operator.LIKE.symbol:
            value = like_pattern(value)
        prepared.append(Clause(column, symbol, value))
    return prepared
