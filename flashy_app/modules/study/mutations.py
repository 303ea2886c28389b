# File: flashy_app/modules/study/mutations.py
"""
Optimistic mutations with rollback.

The local value changes first so the learner sees it at once; the
persistence call follows, and if it fails the previous values are put back
and a short notice is returned for the client to show. There is no retry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from flashy_app.core.logging_config import get_logger

logger = get_logger('study.mutations')


@dataclass
class MutationOutcome:
    ok: bool
    values: Dict[str, Any] = field(default_factory=dict)
    notice: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'ok': self.ok, 'values': dict(self.values), 'notice': self.notice}


class PendingMutation:
    """
    Args:
        snapshot: returns the current local values of the keys in ``changes``.
        write:    applies a dict of values locally.
        changes:  the new values.
        commit:   persists ``changes``; any exception means rejection.
        label:    short description used in the notice and logs.
    """

    def __init__(
        self,
        snapshot: Callable[[], Dict[str, Any]],
        write: Callable[[Dict[str, Any]], None],
        changes: Dict[str, Any],
        commit: Callable[[Dict[str, Any]], Any],
        label: str = 'update',
    ):
        self._snapshot = snapshot
        self._write = write
        self.changes = dict(changes)
        self._commit = commit
        self.label = label
        self.previous: Optional[Dict[str, Any]] = None

    def apply(self) -> None:
        self.previous = self._snapshot()
        self._write(self.changes)

    def rollback(self) -> None:
        if self.previous is not None:
            self._write(self.previous)

    def commit(self) -> Any:
        return self._commit(self.changes)

    def run(self) -> MutationOutcome:
        """Apply, commit, and compensate when the commit is rejected."""
        self.apply()
        try:
            self.commit()
        except Exception as exc:
            self.rollback()
            logger.warning("Reverted %s after failed commit: %s", self.label, exc, exc_info=True)
            return MutationOutcome(
                ok=False,
                values=dict(self.previous or {}),
                notice=f"Could not save {self.label}. Please try again.",
            )
        return MutationOutcome(ok=True, values=dict(self.changes))
