"""Plugin surface for lendctl lifecycle events.

Plugins implement hooks from :class:`LendctlHookSpec` with ``@hookimpl``
and register through the ``lendctl.plugins`` entry-point group. This is
where an external notifier (mail, SMS) attaches to reservation promotions.
"""

import pluggy

hookimpl = pluggy.HookimplMarker("lendctl")

__all__ = ["hookimpl"]
