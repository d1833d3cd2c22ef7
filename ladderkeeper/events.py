"""Event system for decoupling reign bookkeeping from presentation.

The tracker and the reconstruction emit events through this protocol so the
backfill CLI (or a host service) can render or forward them without the core
knowing about Rich or any transport.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from ladderkeeper.models import Reign


class EventHandler(Protocol):
    """Protocol for handlers that receive championship events."""

    def on_progress(
        self,
        current: int,
        total: int,
        message: str,
        **kwargs: Any
    ) -> None:
        """Called as a batch operation advances.

        Args:
            current: Current progress value
            total: Total expected value
            message: Progress message
            **kwargs: Additional context
        """
        ...

    def on_reign_started(
        self,
        reign: "Reign",
        **kwargs: Any
    ) -> None:
        """Called when a competitor takes the top spot.

        Args:
            reign: The newly opened reign
            **kwargs: Additional context
        """
        ...

    def on_reign_closed(
        self,
        reign: "Reign",
        successor_id: int | None,
        **kwargs: Any
    ) -> None:
        """Called when a champion loses the top spot.

        Args:
            reign: The reign with its end timestamp set
            successor_id: Competitor taking over, if any
            **kwargs: Additional context
        """
        ...

    def on_reigns_replaced(
        self,
        count: int,
        at: "datetime",
        **kwargs: Any
    ) -> None:
        """Called after a reconstruction committed a new reign set.

        Args:
            count: Number of reigns written
            at: When the replacement was committed
            **kwargs: Additional context
        """
        ...


class NullEventHandler:
    """Event handler that does nothing.

    Used as the default when no event handling is needed.
    """

    def on_progress(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_reign_started(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_reign_closed(self, *args: Any, **kwargs: Any) -> None:
        pass

    def on_reigns_replaced(self, *args: Any, **kwargs: Any) -> None:
        pass
