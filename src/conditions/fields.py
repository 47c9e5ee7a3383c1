"""Field-path resolution for condition evaluation.

Condition authors address client attributes by the UI's camelCase names
(``employmentType``, ``gtuCodes``). For ``Client`` rows those names are
mapped to column attributes through an accessor table built once from the
mapped schema; snake_case names work too. Further path segments
(``company.name``) walk mappings by key and objects by attribute.
"""

import re
from collections.abc import Callable, Mapping
from operator import attrgetter
from typing import Any

from sqlalchemy import inspect as sa_inspect

from src.models.client import Client

FieldAccessor = Callable[[Any], Any]

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    """Convert ``employmentType`` to ``employment_type``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    """Convert ``employment_type`` to ``employmentType``."""
    first, *rest = name.split("_")
    return first + "".join(part.title() for part in rest)


def build_field_accessors(model: type) -> dict[str, FieldAccessor]:
    """Build the name -> accessor table for a mapped model's columns.

    Args:
        model: SQLAlchemy mapped class

    Returns:
        Accessors keyed by both snake_case and camelCase attribute names
    """
    accessors: dict[str, FieldAccessor] = {}
    for column_attr in sa_inspect(model).column_attrs:
        getter = attrgetter(column_attr.key)
        accessors[column_attr.key] = getter
        accessors[snake_to_camel(column_attr.key)] = getter
    return accessors


CLIENT_FIELD_ACCESSORS: dict[str, FieldAccessor] = build_field_accessors(Client)


def resolve_field(record: Any, path: str) -> Any:
    """Resolve a dotted field path against a client record.

    Returns None when any segment is missing or an intermediate value is
    None. Never raises for unknown or private names.

    Args:
        record: ``Client`` instance, mapping, or plain object
        path: Dotted path such as ``vatStatus`` or ``company.name``

    Returns:
        The resolved value, or None
    """
    value = record
    for segment in path.split("."):
        if value is None:
            return None
        value = _lookup(value, segment)
    return value


def _lookup(value: Any, segment: str) -> Any:
    if not segment or segment.startswith("_"):
        return None

    if isinstance(value, Mapping):
        if segment in value:
            return value[segment]
        return value.get(camel_to_snake(segment))

    if isinstance(value, Client):
        accessor = CLIENT_FIELD_ACCESSORS.get(segment)
        return accessor(value) if accessor is not None else None

    for name in (segment, camel_to_snake(segment)):
        if hasattr(value, name):
            return getattr(value, name)
    return None
