"""Progress notifications for packaging operations.

Listeners are passed explicitly to each operation; there is no process-wide
registry.  A listener is any callable accepting a :class:`PackagingUpdate`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from aumai_packageseal.models import OperationType, PackagingUpdate, UpdateType
from aumai_packageseal.observability import get_logger

logger = get_logger(__name__)

Listener = Callable[[PackagingUpdate], None]


class Notifier:
    """Fan out updates for one operation to a fixed set of listeners.

    Every update is also written to the structured log.  Listener failures are
    logged and otherwise ignored: notifications never alter the operation.
    """

    def __init__(
        self, operation: OperationType, listeners: Iterable[Listener] = ()
    ) -> None:
        self._operation = operation
        self._listeners: tuple[Listener, ...] = tuple(listeners)

    @property
    def operation(self) -> OperationType:
        return self._operation

    def info(self, message: str) -> None:
        self._emit(UpdateType.info, message)

    def verbose(self, message: str) -> None:
        self._emit(UpdateType.verbose, message)

    def success(self, message: str) -> None:
        self._emit(UpdateType.success, message)

    def _emit(self, update_type: UpdateType, message: str) -> None:
        update = PackagingUpdate(
            operation=self._operation, type=update_type, message=message
        )
        event = f"packageseal.{self._operation.value}.{update_type.value}"
        if update_type == UpdateType.verbose:
            logger.debug(event, message=message)
        else:
            logger.info(event, message=message)

        for listener in self._listeners:
            try:
                listener(update)
            except Exception:
                logger.warning(
                    "packageseal.listener.failed",
                    operation=self._operation.value,
                    exc_info=True,
                )


__all__ = ["Listener", "Notifier"]
