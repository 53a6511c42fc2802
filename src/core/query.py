"""Query parameter building.

Two steps:
- `build_endpoint_params` turns a field selection and a quantity into the
  `_fields` / `per_page` pair the API understands.
- `encode_query` flattens a parameter mapping into wire strings (lists are
  comma-joined the way WordPress expects for `include`, `categories`...).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping

from core.domain.fields import field_token

FIELDS_PARAM = "_fields"
PER_PAGE_PARAM = "per_page"


def dedupe_fields(fields: Iterable[str | Enum] | str | Enum | None) -> list[str]:
    """Unique, non-empty field tokens in order of first appearance.

    A single `str` or enum member is one field, not an iterable of characters.
    """

    if isinstance(fields, (str, Enum)):
        fields = [fields]

    seen: set[str] = set()
    out: list[str] = []
    for f in fields or []:
        token = field_token(f).strip()
        if not token or token in seen:
            continue
        seen.add(token)
        out.append(token)
    return out


def build_endpoint_params(
    fields: Iterable[str | Enum] | str | Enum | None = None,
    quantity: int | None = None,
) -> dict[str, Any]:
    """Build `_fields` / `per_page` for a collection request.

    - `quantity > 0` sets `per_page`.
    - `quantity` of None, 0 or negative (-1 = "no limit") leaves the server
      default page size.
    """

    params: dict[str, Any] = {}

    tokens = dedupe_fields(fields)
    if tokens:
        params[FIELDS_PARAM] = ",".join(tokens)

    if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity > 0:
        params[PER_PAGE_PARAM] = quantity

    return params


def split_fields(value: str | None) -> list[str]:
    """Inverse of the `_fields` join."""

    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def encode_query(params: Mapping[str, Any] | None) -> dict[str, str]:
    """Wire encoding: drop None, comma-join lists/tuples, lowercase booleans."""

    encoded: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else value
            encoded[key] = ",".join(_encode_value(v) for v in items)
        else:
            encoded[key] = _encode_value(value)
    return encoded
