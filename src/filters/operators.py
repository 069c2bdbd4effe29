"""
Operator vocabulary for structured query filters.

Query strings name operators by key (``price_per_night[gte]=100``); the
filter engine resolves each key to the SQL symbol carried on the clause.
The vocabulary is closed: a key outside this table can never produce a
clause.
"""
from __future__ import annotations

from enum import Enum


class Operator(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    LIKE = "like"
    IN = "in"
    NOT_IN = "not_in"
    BTW = "btw"
    NOT_BTW = "not_btw"

    @property
    def symbol(self) -> str:
        return OPERATOR_SYMBOLS[self]


OPERATOR_SYMBOLS: dict[Operator, str] = {
    Operator.EQ: "=",
    Operator.NE: "!=",
    Operator.LT: "<",
    Operator.LTE: "<=",
    Operator.GT: ">",
    Operator.GTE: ">=",
    Operator.LIKE: "LIKE",
    Operator.IN: "IN",
    Operator.NOT_IN: "NOT IN",
    Operator.BTW: "BETWEEN",
    Operator.NOT_BTW: "NOT BETWEEN",
}

# Symbols whose value is a list (comma-separated when given as a scalar)
LIST_SYMBOLS = {"IN", "NOT IN"}

# Symbols whose value must be exactly a (low, high) pair
RANGE_SYMBOLS = {"BETWEEN", "NOT BETWEEN"}

LIKE_WILDCARD = "%"


def operator_keys() -> list[str]:
    return [op.value for op in Operator]


def is_operator_key(key: str) -> bool:
    return key in {op.value for op in Operator}
