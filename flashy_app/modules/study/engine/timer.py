"""
Per-card countdown for timed study.

The countdown is cooperative: nothing ticks in the background. The owner
asks ``expired(now)`` whenever it handles a request and advances the card
itself, then calls ``restart``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from flashy_app.core.error_handlers import ValidationError

DEFAULT_BUDGET_SECONDS = 30


@dataclass
class CardCountdown:
    budget: int = DEFAULT_BUDGET_SECONDS
    started_at: Optional[datetime] = None

    def __post_init__(self):
        # A zero budget would expire every card the moment it starts
        if not isinstance(self.budget, int) or self.budget < 1:
            raise ValidationError(
                f"Card timer must be at least 1 second, got {self.budget!r}",
                errors={'timer_budget': 'must be a positive integer'},
            )

    @property
    def running(self) -> bool:
        return self.started_at is not None

    @property
    def deadline(self) -> Optional[datetime]:
        if self.started_at is None:
            return None
        return self.started_at + timedelta(seconds=self.budget)

    def restart(self, now: datetime) -> None:
        self.started_at = now

    def cancel(self) -> None:
        self.started_at = None

    def remaining(self, now: datetime) -> Optional[int]:
        """Whole seconds left, never negative. ``None`` when not running."""
        if self.started_at is None:
            return None
        left = (self.deadline - now).total_seconds()
        return max(0, math.ceil(left))

    def expired(self, now: datetime) -> bool:
        return self.started_at is not None and now >= self.deadline

    def to_dict(self) -> dict:
        return {
            'budget': self.budget,
            'started_at': self.started_at.isoformat() if self.started_at else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'CardCountdown':
        data = data or {}
        started = data.get('started_at')
        return cls(
            budget=int(data.get('budget', DEFAULT_BUDGET_SECONDS)),
            started_at=datetime.fromisoformat(started) if started else None,
        )
