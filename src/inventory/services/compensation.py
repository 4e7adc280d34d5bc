"""Compensation log for multi-step writes without a transaction."""

import logging

logger = logging.getLogger(__name__)


class CompensationLog:
    """Ordered record of committed writes and the actions that undo them.

    Every forward write goes through ``perform`` together with its
    inverse, so the list that drove the happy path is the same list
    that rollback walks backwards.
    """

    def __init__(self, label=""):
        self.label = label
        self._undo = []

    def __len__(self):
        return len(self._undo)

    def record(self, description, undo):
        self._undo.append((description, undo))

    def perform(self, description, forward, undo=None):
        """Run ``forward``; if it succeeds remember ``undo(result)``."""
        result = forward()
        if undo is not None:
            self.record(description, lambda: undo(result))
        return result

    def rollback(self):
        """Undo everything recorded so far, newest first.

        A failing inverse is logged and skipped so the remaining ones
        still run. Returns the list of ``(description, exception)``
        pairs that could not be undone.
        """
        failures = []
        while self._undo:
            description, undo = self._undo.pop()
            try:
                undo()
            except Exception as e:
                logger.exception(
                    "Compensating action failed (%s): %s",
                    self.label or "unlabelled",
                    description,
                )
                failures.append((description, e))
        return failures
