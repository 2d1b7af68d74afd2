"""Display-name resolution for on-chain identities."""
from __future__ import annotations

from typing import Any, Mapping


def resolve_display_name(address: str, identity: Mapping[str, Any] | None) -> str:
    """Pick the name shown for an account.

    ``parent/display`` when the identity is a sub-identity with both parts set,
    else ``display``, else the raw address.

    Examples:
        {"display_parent": "P", "display": "D"} → "P/D"
        {"display": "D"} → "D"
        {} → address
    """
    if not identity:
        return address
    parent = identity.get("display_parent") or ""
    display = identity.get("display") or ""
    if parent and display:
        return f"{parent}/{display}"
    if display:
        return display
    return address
