# core/stats.py
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from .records import CommandRecord

TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90}
POPULAR_LIMIT = 5
DAILY_DAYS = 7


@dataclass(frozen=True)
class PopularCommand:
    command: str
    count: int
    success_rate: float


@dataclass(frozen=True)
class DailyUsage:
    date: str  # YYYY-MM-DD
    count: int
    success_count: int


@dataclass(frozen=True)
class CommandStats:
    total_commands: int = 0
    success_rate: float = 0.0  # percent
    avg_processing_time_ms: float = 0.0
    popular_commands: List[PopularCommand] = field(default_factory=list)
    daily_usage: List[DailyUsage] = field(default_factory=list)


def _daily_usage(records: List[CommandRecord], now: datetime) -> List[DailyUsage]:
    # chart always covers the last week, whatever the selected range
    usage = []
    for back in range(DAILY_DAYS - 1, -1, -1):
        day = (now - timedelta(days=back)).date()
        todays = [r for r in records if r.timestamp.astimezone(now.tzinfo).date() == day]
        usage.append(DailyUsage(
            date=day.isoformat(),
            count=len(todays),
            success_count=sum(1 for r in todays if r.success),
        ))
    return usage


def compute_stats(
    records: Iterable[CommandRecord],
    time_range: str = "7d",
    now: Optional[datetime] = None,
) -> CommandStats:
    """
    Aggregate the history for the stats card.

    Daily usage is bucketed by calendar day in `now`'s timezone, which
    defaults to the local one. A naive `now` is taken as local time.
    """
    if time_range not in TIME_RANGES:
        raise ValueError(f"time_range must be one of {sorted(TIME_RANGES)}, got {time_range!r}")
    if now is None:
        now = datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    records = list(records)
    cutoff = now - timedelta(days=TIME_RANGES[time_range])
    window = [r for r in records if r.timestamp >= cutoff]
    if not window:
        return CommandStats()

    total = len(window)
    succeeded = sum(1 for r in window if r.success)

    times = [r.agent_info.processing_time_ms for r in window
             if r.agent_info and r.agent_info.processing_time_ms]
    avg_time = sum(times) / len(times) if times else 0.0

    counts: Dict[str, List[int]] = OrderedDict()
    for r in window:
        entry = counts.setdefault(r.command, [0, 0])
        entry[0] += 1
        entry[1] += 1 if r.success else 0
    popular = sorted(
        (PopularCommand(cmd, n, ok / n * 100) for cmd, (n, ok) in counts.items()),
        key=lambda p: p.count,
        reverse=True,
    )[:POPULAR_LIMIT]

    return CommandStats(
        total_commands=total,
        success_rate=succeeded / total * 100,
        avg_processing_time_ms=avg_time,
        popular_commands=popular,
        daily_usage=_daily_usage(records, now),
    )


def format_processing_time(ms: float) -> str:
    if ms >= 1000:
        return f"{ms / 1000:.1f}s"
    return f"{int(round(ms))}ms"
