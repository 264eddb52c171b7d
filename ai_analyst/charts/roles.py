"""
Key Role Inference

Decides which fields of a schema-less record set act as category, value or
axis. Only the first record is inspected; later records are assumed to share
its fields.
"""

from typing import Any, List, Sequence

from .models import (
    ChartSpec,
    InsufficientDimensionality,
    Record,
    Resolved,
    ResolvedScatter,
    RoleAssignment,
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def partition_keys(record: Record):
    """Split a record's field names into (string_keys, number_keys), in declaration order."""
    string_keys = [key for key, value in record.items() if isinstance(value, str)]
    number_keys = [key for key, value in record.items() if _is_number(value)]
    return string_keys, number_keys


def infer_roles(data: Sequence[Record], is_scatter: bool) -> RoleAssignment:
    """
    Infer rendering roles from the first record.

    Never raises: scatter data without two numeric fields, or data without
    any fields, yields InsufficientDimensionality.
    """
    first = data[0] if data else None
    if not first:
        return InsufficientDimensionality()

    keys: List[str] = list(first.keys())
    string_keys, number_keys = partition_keys(first)

    if is_scatter:
        if len(number_keys) < 2:
            return InsufficientDimensionality()
        return ResolvedScatter(x_key=number_keys[0], y_key=number_keys[1])

    category_key = string_keys[0] if string_keys else keys[0]
    value_key = next((key for key in number_keys if key != category_key), None)
    if value_key is None:
        value_key = next((key for key in keys if key != category_key), category_key)
    return Resolved(category_key=category_key, value_key=value_key)


def infer_roles_for_spec(spec: ChartSpec) -> RoleAssignment:
    return infer_roles(spec.data, spec.is_scatter)
