"""ID prefixes, validation, and generation.

Every ledger entity gets an opaque ``{prefix}_{12 hex}`` identifier.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import re
import uuid

ID_PREFIXES: dict[str, str] = {
    "user": "usr",
    "book": "bk",
    "copy": "cpy",
    "loan": "loan",
    "reservation": "res",
    "overdue_record": "ovd",
}

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    kind: re.compile(rf"^{prefix}_[0-9a-f]{{12}}$") for kind, prefix in ID_PREFIXES.items()
}


def generate_id(kind: str) -> str:
    """Generate a fresh ID for an entity of *kind*.

    Raises:
        ValueError: If *kind* is not a known entity kind.
    """
    prefix = ID_PREFIXES.get(kind)
    if prefix is None:
        msg = f"Unknown entity kind: {kind!r}. Expected one of {sorted(ID_PREFIXES)}"
        raise ValueError(msg)
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def validate_id(entity_id: str, kind: str) -> bool:
    """Check whether *entity_id* matches the expected pattern for *kind*."""
    pattern = ID_PATTERNS.get(kind)
    if pattern is None:
        return False
    return pattern.match(entity_id) is not None
