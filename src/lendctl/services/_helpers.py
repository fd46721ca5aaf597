"""Shared service-layer helper functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError

if TYPE_CHECKING:
    from pydantic import BaseModel


def dump(model: BaseModel) -> dict[str, Any]:
    """Entity as a plain dict for ``ServiceResult.data``."""
    return model.model_dump()


def violates(exc: IntegrityError, columns: str) -> bool:
    """Whether *exc* is a UNIQUE violation on exactly *columns*.

    SQLite reports partial-index violations as
    ``UNIQUE constraint failed: table.col[, table.col]``.
    """
    return str(exc.orig).endswith(f"UNIQUE constraint failed: {columns}")
