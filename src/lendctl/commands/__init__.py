"""Subcommand modules for lendctl.

:func:`register_commands` imports each module lazily so ``lendctl --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root group."""
    # --- Groups ---
    from lendctl.commands.book import book
    from lendctl.commands.loan import loan
    from lendctl.commands.reserve import reserve
    from lendctl.commands.show import show
    from lendctl.commands.user import user

    cli.add_command(user)
    cli.add_command(book)
    cli.add_command(loan)
    cli.add_command(reserve)
    cli.add_command(show)

    # --- Standalone commands ---
    from lendctl.commands.sweep import sweep

    cli.add_command(sweep)
