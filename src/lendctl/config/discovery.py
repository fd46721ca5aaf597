"""Locate and read ``lendctl.toml``.

The file is found the way git finds ``.git/``: the nearest ``lendctl.toml``
in the working directory or one of its parents wins. ``LENDCTL_CONFIG``
pins an explicit file instead.

Only the ``[ledger]``, ``[loans]``, ``[reservations]`` and ``[plugins]``
tables are accepted at the top level. A misspelled table would otherwise be
dropped silently and the ledger would run on defaults.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import click

from lendctl.config.models import LendConfig

CONFIG_FILENAME = "lendctl.toml"
CONFIG_ENV_VAR = "LENDCTL_CONFIG"

CONFIG_SECTIONS: frozenset[str] = frozenset(LendConfig.model_fields)


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``lendctl.toml`` at or above *start* (default: cwd).

    When ``LENDCTL_CONFIG`` is set it is the only candidate; a missing file
    there means no config rather than a fallback to walk-up.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def read_config(path: Path) -> dict[str, Any]:
    """Parse *path* into section tables.

    Raises:
        click.ClickException: The file is not valid TOML, or it holds a
            top-level key that is not one of :data:`CONFIG_SECTIONS`.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc

    unknown = sorted(set(data) - CONFIG_SECTIONS)
    if unknown:
        allowed = ", ".join(f"[{name}]" for name in sorted(CONFIG_SECTIONS))
        raise click.ClickException(
            f"Unknown section(s) in {path}: {', '.join(unknown)} (expected {allowed})"
        )
    for name, value in data.items():
        if not isinstance(value, dict):
            raise click.ClickException(f"{name} in {path} must be a table, e.g. [{name}]")
    return data


def load_config(path: Path | None = None, cwd: Path | None = None) -> LendConfig:
    """Validated :class:`LendConfig` from *path*, or from the discovered file.

    Code defaults apply when there is no file at all.
    """
    path = path or find_config(cwd)
    if path is None:
        return LendConfig()
    return LendConfig.model_validate(read_config(path))
