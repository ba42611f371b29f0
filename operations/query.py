"""
Translate ``where`` constraints into MongoDB filters.

A where is a nested dict keyed by field name, each field holding a dict of
operator -> operand (a bare value means ``equals``). ``and`` / ``or`` hold
lists of nested wheres::

    {"or": [{"and": [{"title": {"like": "post"}}, {"views": {"greater_than": 10}}]}]}

Operands coming from query strings are strings; numeric and ISO-8601 date
strings are coerced so range operators compare like with like. Equality
operators match either the raw string or its coerced value. Unknown
operators, ``$``-prefixed field names and malformed operands raise
ValidationError rather than being dropped.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from bson import ObjectId

from errors import ValidationError
from shared.datetime_utils import parse_datetime

DEFAULT_SORT = "-createdAt"

LOGICAL_OPERATORS = ("and", "or")

_RANGE = {
    "greater_than": "$gt",
    "greater_than_equal": "$gte",
    "less_than": "$lt",
    "less_than_equal": "$lte",
}

OPERATORS = frozenset(
    {
        "equals",
        "not_equals",
        "in",
        "not_in",
        "exists",
        "like",
        "contains",
        "near",
        "within",
        "intersects",
        *_RANGE,
    }
)

_NUMBER = re.compile(r"^-?\d+(\.\d+)?$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def coerce_value(value: Any) -> Any:
    """Turn a query-string operand into a bool, number or datetime when it looks like one."""
    if not isinstance(value, str):
        return value
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _NUMBER.match(value):
        return float(value) if "." in value else int(value)
    if _ISO_DATE.match(value):
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed
    return value


def parse_sort(sort: Optional[str]) -> list[tuple[str, int]]:
    """``"-createdAt,title"`` → ``[("createdAt", -1), ("title", 1)]``."""
    fields: list[tuple[str, int]] = []
    for part in (sort or DEFAULT_SORT).split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("-"):
            fields.append((part[1:], -1))
        else:
            fields.append((part, 1))
    return [("_id" if key == "id" else key, direction) for key, direction in fields]


class _FilterBuilder:
    def __init__(self, req) -> None:
        self.req = req

    def invalid(self, key: str) -> ValidationError:
        return ValidationError(
            self.req.t("error:invalidWhere"), field="where", details={"key": key}
        )

    # ── values ────────────────────────────────────────────────────────────────

    def candidates(self, field: str, value: Any) -> list[Any]:
        if field == "_id":
            if isinstance(value, str) and ObjectId.is_valid(value):
                return [ObjectId(value)]
            return [value]
        coerced = coerce_value(value)
        if type(coerced) is type(value) and coerced == value:
            return [value]
        return [value, coerced]

    def operand_list(self, field: str, value: Any) -> list[Any]:
        items = value.split(",") if isinstance(value, str) else value
        if not isinstance(items, list):
            items = [items]
        out: list[Any] = []
        for item in items:
            out.extend(self.candidates(field, item))
        return out

    def numbers(self, key: str, value: Any) -> list[float]:
        parts = value.split(",") if isinstance(value, str) else value
        if not isinstance(parts, list):
            raise self.invalid(key)
        try:
            return [float(p) for p in parts]
        except (TypeError, ValueError):
            raise self.invalid(key) from None

    def geometry(self, key: str, value: Any) -> dict:
        if not isinstance(value, dict) or "type" not in value or "coordinates" not in value:
            raise self.invalid(key)
        return {"type": value["type"], "coordinates": self._numeric(value["coordinates"])}

    def _numeric(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self._numeric(v) for v in value]
        return coerce_value(value)

    # ── conditions ────────────────────────────────────────────────────────────

    def condition(self, field: str, op: str, value: Any) -> dict[str, Any]:
        key = f"{field}.{op}"
        if op == "equals":
            values = self.candidates(field, value)
            return {field: values[0] if len(values) == 1 else {"$in": values}}
        if op == "not_equals":
            return {field: {"$nin": self.candidates(field, value)}}
        if op in _RANGE:
            return {field: {_RANGE[op]: coerce_value(value)}}
        if op == "in":
            return {field: {"$in": self.operand_list(field, value)}}
        if op == "not_in":
            return {field: {"$nin": self.operand_list(field, value)}}
        if op == "exists":
            flag = coerce_value(value)
            if not isinstance(flag, bool):
                raise self.invalid(key)
            return {field: {"$exists": flag}}
        if op == "contains":
            return {field: {"$regex": re.escape(str(value)), "$options": "i"}}
        if op == "like":
            words = str(value).split()
            if not words:
                raise self.invalid(key)
            clauses = [{field: {"$regex": re.escape(w), "$options": "i"}} for w in words]
            return clauses[0] if len(clauses) == 1 else {"$and": clauses}
        if op == "near":
            # lng,lat[,maxDistance[,minDistance]] in metres
            numbers = self.numbers(key, value)
            if len(numbers) < 2 or len(numbers) > 4:
                raise self.invalid(key)
            near: dict[str, Any] = {
                "$geometry": {"type": "Point", "coordinates": numbers[:2]}
            }
            if len(numbers) > 2:
                near["$maxDistance"] = numbers[2]
            if len(numbers) > 3:
                near["$minDistance"] = numbers[3]
            return {field: {"$near": near}}
        if op == "within":
            return {field: {"$geoWithin": {"$geometry": self.geometry(key, value)}}}
        if op == "intersects":
            return {field: {"$geoIntersects": {"$geometry": self.geometry(key, value)}}}
        raise self.invalid(key)

    def clauses(self, where: Any, path: str) -> list[dict[str, Any]]:
        if not isinstance(where, dict):
            raise self.invalid(path)
        clauses: list[dict[str, Any]] = []
        for key, value in where.items():
            if key in LOGICAL_OPERATORS:
                if not isinstance(value, list):
                    raise self.invalid(f"{path}.{key}")
                subs = [
                    self.build(sub, f"{path}.{key}.{i}") for i, sub in enumerate(value)
                ]
                if key == "or" and any(not sub for sub in subs):
                    # an empty branch matches everything
                    continue
                subs = [sub for sub in subs if sub]
                if len(subs) == 1:
                    clauses.append(subs[0])
                elif subs:
                    clauses.append({f"${key}": subs})
                continue

            if not key or key.startswith("$"):
                raise self.invalid(f"{path}.{key}")
            field = "_id" if key == "id" else key

            if isinstance(value, dict):
                if not value:
                    raise self.invalid(f"{path}.{key}")
                for op, operand in value.items():
                    if op not in OPERATORS:
                        raise self.invalid(f"{path}.{key}.{op}")
                    clauses.append(self.condition(field, op, operand))
            else:
                clauses.append(self.condition(field, "equals", value))
        return clauses

    def build(self, where: Any, path: str) -> dict[str, Any]:
        clauses = self.clauses(where, path)
        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}


def build_filter(where: Optional[dict[str, Any]], req) -> dict[str, Any]:
    """Translate *where* into a MongoDB filter; ``req`` supplies error translations."""
    return _FilterBuilder(req).build(where or {}, "where")


def combine_filters(*filters: dict[str, Any]) -> dict[str, Any]:
    """AND together the non-empty *filters*."""
    parts = [f for f in filters if f]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}
