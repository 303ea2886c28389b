# File: flashy_app/modules/study/options.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from flashy_app.core.error_handlers import ValidationError

ORDER_LINEAR = 'linear'
ORDER_RANDOMIZED = 'randomized'
ORDERS = (ORDER_LINEAR, ORDER_RANDOMIZED)

# Accepted request keys -> field names
_ALIASES = {
    'timedMode': 'timed_mode',
    'continuousShuffle': 'continuous_shuffle',
    'excludeIgnored': 'exclude_ignored',
    'favoritesOnly': 'favorites_only',
}


@dataclass(frozen=True)
class StudyOptions:
    """Per-run study configuration. Never persisted."""

    timed_mode: bool = False
    continuous_shuffle: bool = False
    order: str = ORDER_RANDOMIZED
    exclude_ignored: bool = False
    favorites_only: bool = False

    def __post_init__(self):
        if self.order not in ORDERS:
            raise ValidationError(
                f"Unknown order {self.order!r}",
                errors={'order': f"expected one of {', '.join(ORDERS)}"},
            )

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'StudyOptions':
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__ or value is None:
                continue
            if name != 'order' and not isinstance(value, bool):
                raise ValidationError(
                    f"{key} must be true or false",
                    errors={key: 'boolean'},
                )
            values[name] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
