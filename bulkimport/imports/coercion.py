from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from bulkimport.models import Field, TypeIdentifier


def datetime_from_iso8601(value: Any) -> str:
    # "2017-12-05T12:34:23.000Z" -> "2017-12-05 12:34:23.000 ", the form SQL stores accept.
    return str(value).replace("T", " ").replace("Z", " ")


def json_text(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


def checked_datetime(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("expected an ISO-8601 string")
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError("expected an ISO-8601 string") from exc
    return datetime_from_iso8601(value)


def coerce_list_value(field: Field, value: Any) -> Any:
    """Return the stored form of one scalar list value.

    Raises ValueError when a DateTime entry is not an ISO-8601 string.
    """
    if field.type_identifier == TypeIdentifier.DATETIME:
        return checked_datetime(value)
    if field.type_identifier == TypeIdentifier.JSON:
        return json_text(value)
    return value


def coerce_node_value(field: Field, value: Any) -> Any:
    """Check a node value against its field type and return the stored form.

    Raises ValueError when the value does not fit the field.
    """
    if value is None:
        return None
    kind = field.type_identifier
    if kind == TypeIdentifier.INT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("expected an integer")
        return value
    if kind == TypeIdentifier.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("expected a number")
        try:
            return float(value)
        except OverflowError as exc:
            raise ValueError("expected a number") from exc
    if kind == TypeIdentifier.BOOLEAN:
        if not isinstance(value, bool):
            raise ValueError("expected a boolean")
        return value
    if kind == TypeIdentifier.DATETIME:
        return checked_datetime(value)
    if kind == TypeIdentifier.JSON:
        return json_text(value)
    if not isinstance(value, str):
        raise ValueError("expected a string")
    return value
