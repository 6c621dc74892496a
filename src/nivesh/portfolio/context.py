"""Per-request calculation state.

One ``CalculationContext`` is built for each summary and threaded through
every step, so all figures in that summary share one set of exchange rates
and one notion of "today".  Nothing here outlives the request.

Times are naive UTC throughout, matching how models store ``created_at``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from nivesh.core.types import RateCache

from .models import naive_utc


@dataclass
class CalculationContext:
    default_currency: str
    today: date
    now: datetime
    rate_cache: RateCache = field(default_factory=dict)

    @classmethod
    def create(cls, default_currency: str, now: datetime | None = None) -> CalculationContext:
        now = naive_utc(now or datetime.now(timezone.utc))
        return cls(default_currency=default_currency, today=now.date(), now=now)
