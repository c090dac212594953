"""Cancellation-aware context passed through every reconciliation call."""
import logging
import threading
import time
from typing import Any, Dict, Optional

from .exceptions import ContextCancelled


class FieldsAdapter(logging.LoggerAdapter):
    """Appends ``key=value`` fields to every message."""

    def process(self, msg, kwargs):
        if self.extra:
            fields = " ".join(f"{k}={v}" for k, v in self.extra.items())
            msg = f"{msg} {fields}"
        return msg, kwargs


class ReconcileContext:
    """Carries cancellation, an optional deadline and log fields.

    Child contexts created with :meth:`with_values` share the cancellation
    state of their parent, so cancelling the root aborts every phase that
    was handed a derived context.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        fields: Optional[Dict[str, Any]] = None,
        _event: Optional[threading.Event] = None,
        _deadline: Optional[float] = None,
    ):
        self._event = _event or threading.Event()
        self._reason = "context canceled"
        if _deadline is not None:
            self._deadline = _deadline
        elif timeout is not None:
            self._deadline = time.monotonic() + timeout
        else:
            self._deadline = None
        self._logger = logger or logging.getLogger("bootstrapctl")
        self.fields: Dict[str, Any] = dict(fields or {})

    def with_values(self, **fields) -> "ReconcileContext":
        child = ReconcileContext(
            logger=self._logger,
            fields={**self.fields, **fields},
            _event=self._event,
            _deadline=self._deadline,
        )
        return child

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """Raise :class:`ContextCancelled` if the context is done."""
        if not self.cancelled:
            return
        if self._event.is_set():
            raise ContextCancelled(self._reason)
        raise ContextCancelled("context deadline exceeded")

    def logger(self, **fields) -> logging.LoggerAdapter:
        return FieldsAdapter(self._logger, {**self.fields, **fields})


def background() -> ReconcileContext:
    """Context with no deadline, for one-shot callers and tests."""
    return ReconcileContext()
