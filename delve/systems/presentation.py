"""Presentation hook for visual effects.

Actors report what they are doing (moves, attacks) so an interactive
front end can animate it. Headless runs plug in :class:`HeadlessPresentation`,
which does nothing and never advances simulation time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from delve.core.errors import PresentationUnavailableError

if TYPE_CHECKING:
    from delve.core.models import Actor


class HeadlessPresentation:
    """No-op presentation layer used by every headless episode."""

    __slots__ = ()

    def animate(self, actor: Actor, kind: str) -> None:
        return None


class MissingPresentation(HeadlessPresentation):
    """Presentation layer that is not there: every animation request fails.

    Used to exercise the scheduler's recovery path for actors that insist on
    a display.
    """

    __slots__ = ()

    def animate(self, actor: Actor, kind: str) -> None:
        raise PresentationUnavailableError(
            f"No presentation layer to play '{kind}' for {type(actor).__name__} #{actor.id}"
        )
