"""Rich/JSON output selection.

The CLI renders ServiceResult for humans (Rich tables and styled fields)
or machines (``--json``). This module picks the mode; the per-operation
rendering lives in :mod:`lendctl.output.renderers`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lendctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from lendctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output mode flags, taken from the global CLI options."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(
    result: ServiceResult,
    *,
    settings: OutputSettings | None = None,
    json_output: bool = False,
) -> str:
    """Format a ServiceResult for display.

    ``--json`` wins over ``--quiet``, which wins over the rich rendering.
    """
    opts = settings or OutputSettings(json_output=json_output)
    if opts.json_output:
        return result.model_dump_json(indent=2)
    if opts.quiet:
        return render_quiet(result)
    return render_result(result, verbose=opts.verbose)
