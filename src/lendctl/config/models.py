"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, lendctl.toml only contains overrides.
A fresh ledger needs no config file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, PositiveInt

from lendctl.domain.lifecycle import DEFAULT_HOLD_DAYS, DEFAULT_LOAN_DURATION_DAYS
from lendctl.domain.models import DEFAULT_LOAN_LIMIT


class LedgerConfig(BaseModel):
    """[ledger] section."""

    model_config = {"frozen": True}

    path: str = ".lendctl/ledger.db"
    busy_timeout_ms: PositiveInt = 5000


class LoansConfig(BaseModel):
    """[loans] section."""

    model_config = {"frozen": True}

    duration_days: PositiveInt = DEFAULT_LOAN_DURATION_DAYS
    default_loan_limit: PositiveInt = DEFAULT_LOAN_LIMIT


class ReservationsConfig(BaseModel):
    """[reservations] section."""

    model_config = {"frozen": True}

    hold_days: PositiveInt = DEFAULT_HOLD_DAYS


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class LendConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    loans: LoansConfig = Field(default_factory=LoansConfig)
    reservations: ReservationsConfig = Field(default_factory=ReservationsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
