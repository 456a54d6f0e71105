"""Fleet-wide statistics and the report CSV export."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pybusfleet.metrics import round_half_up, utilization
from pybusfleet.models.entities import Bus, Driver, Location, Route
from pybusfleet.models.views import DashboardStats, ReportStats

__all__ = [
    "CSV_HEADER",
    "ReportDateRange",
    "compute_dashboard_stats",
    "compute_report_stats",
    "count_active_drivers",
    "count_active_today",
    "count_assigned_buses",
    "export_report_csv",
    "local_day_bounds",
    "report_filename",
    "round_half_up",
    "utilization",
]

CSV_HEADER = ("Metric", "Value")

#: Length of the default report period, ending today.
DEFAULT_REPORT_DAYS = 30


def _local_now() -> datetime:
    return datetime.now().astimezone()


def local_day_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` of the local calendar day containing *now*.

    Naive datetimes are interpreted as local time; an aware *now* keeps its
    own timezone.
    """
    if now is not None and now.tzinfo is not None:
        day = now.date()
        return (
            datetime.combine(day, time.min, tzinfo=now.tzinfo),
            datetime.combine(day + timedelta(days=1), time.min, tzinfo=now.tzinfo),
        )
    # Each midnight gets its own UTC offset; the two differ across a DST change.
    day = (now or datetime.now()).date()
    return (
        datetime.combine(day, time.min).astimezone(),
        datetime.combine(day + timedelta(days=1), time.min).astimezone(),
    )


def count_active_today(locations: Iterable[Location], now: datetime | None = None) -> int:
    """Count drivers online with a location update during today (local time)."""
    start, end = local_day_bounds(now)
    count = 0
    for location in locations:
        if not location.is_online or location.last_updated is None:
            continue
        last_updated = location.last_updated
        if last_updated.tzinfo is None:
            last_updated = last_updated.astimezone()
        if start <= last_updated < end:
            count += 1
    return count


def count_assigned_buses(buses: Iterable[Bus]) -> int:
    return sum(1 for bus in buses if bus.assigned_driver is not None)


def count_active_drivers(drivers: Iterable[Driver], buses: Iterable[Bus]) -> int:
    """Count drivers referenced by at least one bus."""
    assigned = {bus.assigned_driver for bus in buses if bus.assigned_driver is not None}
    return sum(1 for driver in drivers if driver.id in assigned)


def compute_dashboard_stats(
    drivers: Sequence[Driver],
    buses: Sequence[Bus],
    routes: Sequence[Route],
    locations: Iterable[Location],
    now: datetime | None = None,
) -> DashboardStats:
    return DashboardStats(
        total_drivers=len(drivers),
        total_buses=len(buses),
        total_routes=len(routes),
        active_today=count_active_today(locations, now),
    )


def compute_report_stats(
    drivers: Sequence[Driver],
    buses: Sequence[Bus],
    routes: Sequence[Route],
) -> ReportStats:
    return ReportStats(
        total_drivers=len(drivers),
        total_buses=len(buses),
        total_routes=len(routes),
        active_drivers=count_active_drivers(drivers, buses),
        assigned_buses=count_assigned_buses(buses),
    )


# ------------------------------------------------------------------
# CSV export
# ------------------------------------------------------------------


class ReportDateRange(BaseModel):
    """Inclusive reporting period shown in the export."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: date
    end: date = Field(default_factory=lambda: _local_now().date())

    @model_validator(mode="after")
    def _ordered(self) -> ReportDateRange:
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self

    @classmethod
    def last_days(cls, days: int = DEFAULT_REPORT_DAYS, *, today: date | None = None) -> ReportDateRange:
        end = today or _local_now().date()
        return cls(start=end - timedelta(days=days), end=end)

    def __str__(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


def export_report_csv(
    stats: ReportStats,
    date_range: ReportDateRange | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Render report statistics as ``Metric,Value`` CSV.

    One metric per row, then a blank row, the generation date and the
    reporting period. Rows end with ``\\n``.
    """
    period = date_range or ReportDateRange.last_days()
    generated = (generated_at or _local_now()).date()

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(
        [
            ("Total Drivers", stats.total_drivers),
            ("Total Buses", stats.total_buses),
            ("Total Routes", stats.total_routes),
            ("Active Drivers", stats.active_drivers),
            ("Assigned Buses", stats.assigned_buses),
        ]
    )
    writer.writerow(())
    writer.writerow(("Report Generated", generated.isoformat()))
    writer.writerow(("Date Range", str(period)))
    return buffer.getvalue()


def report_filename(generated_at: datetime | None = None) -> str:
    generated = (generated_at or _local_now()).date()
    return f"bus-management-report-{generated.isoformat()}.csv"
