from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from backoffice.application.ports.record_store import RecordStorePort
from backoffice.application.utils.date_parser import start_of_day, start_of_month, start_of_week, start_of_year
from backoffice.application.utils.message_rules import format_amount
from backoffice.application.utils.summaries import escape_markdown
from backoffice.domain.entities.booking import Booking, BookingStatus

PERFORMANCE_STATUSES = [BookingStatus.COMPLETED, BookingStatus.CONFIRMED]


@dataclass(frozen=True)
class StaffTotals:
    bookings: int = 0
    amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class EarningsReport:
    total: Decimal
    party_a: Decimal
    party_b: Decimal
    staff: dict[str, StaffTotals] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceWindow:
    label: str
    bookings: int
    amount: Decimal


def compute_earnings(bookings: Iterable[Booking], party_a_deduction: Decimal, party_b_deduction: Decimal) -> EarningsReport:
    """
    Party A takes all of a non-shared booking and half of a shared one;
    party B takes the other half of shared bookings. Each party's fixed
    deduction is subtracted once from its total.
    """
    total = Decimal("0")
    party_a = Decimal("0")
    party_b = Decimal("0")
    staff: dict[str, StaffTotals] = {}

    for booking in bookings:
        amount = booking.amount or Decimal("0")
        total += amount
        if booking.shared:
            party_a += amount / 2
            party_b += amount / 2
        else:
            party_a += amount
        if booking.assigned_staff:
            current = staff.get(booking.assigned_staff, StaffTotals())
            staff[booking.assigned_staff] = StaffTotals(current.bookings + 1, current.amount + amount)

    return EarningsReport(
        total=total,
        party_a=party_a - party_a_deduction,
        party_b=party_b - party_b_deduction,
        staff=staff,
    )


class ReportsUseCase:
    def __init__(
        self,
        bookings: RecordStorePort,
        currency: str,
        party_a: str,
        party_b: str,
        party_a_deduction: Decimal,
        party_b_deduction: Decimal,
        party_a_deduction_label: str = "",
        party_b_deduction_label: str = "",
    ) -> None:
        self._bookings = bookings
        self._currency = currency
        self._party_a = party_a
        self._party_b = party_b
        self._party_a_deduction = party_a_deduction
        self._party_b_deduction = party_b_deduction
        self._party_a_deduction_label = party_a_deduction_label
        self._party_b_deduction_label = party_b_deduction_label

    def earnings(self, start: datetime) -> EarningsReport:
        completed = self._bookings.find({"status": BookingStatus.COMPLETED, "requested_date": {"$gte": start}})
        return compute_earnings(completed, self._party_a_deduction, self._party_b_deduction)

    def earnings_text(self, start: datetime, range_label: str) -> str:
        report = self.earnings(start)
        cur = self._currency
        lines = [
            f"*Earnings Report ({range_label})*",
            "",
            f"*Total Bookings Amount:* {format_amount(report.total)} {cur}",
            f"*{self._party_a}'s Earnings:* {format_amount(report.party_a)} {cur} "
            f"(after deducting {self._party_a_deduction_label}: {format_amount(self._party_a_deduction)} {cur})",
            f"*{self._party_b}'s Earnings:* {format_amount(report.party_b)} {cur} "
            f"(after deducting {self._party_b_deduction_label}: {format_amount(self._party_b_deduction)} {cur})",
            "",
            "*Staff Performance:*",
        ]
        for name, totals in report.staff.items():
            lines.append(f"{escape_markdown(name)}: {totals.bookings} bookings, {format_amount(totals.amount)} {cur}")
        return "\n".join(lines)

    def performance(self, staff_name: str, now: datetime) -> list[PerformanceWindow]:
        """Counts and sums over [window start, now]; all time has no bounds."""
        base = {"assigned_staff": staff_name, "status": {"$in": PERFORMANCE_STATUSES}}
        windows = [
            ("Today", start_of_day(now)),
            ("This Week", start_of_week(now)),
            ("This Month", start_of_month(now)),
            ("This Year", start_of_year(now)),
        ]
        result = []
        for label, start in windows:
            found = self._bookings.find({**base, "requested_date": {"$gte": start, "$lte": now}})
            result.append(PerformanceWindow(label, len(found), sum((b.amount for b in found), Decimal("0"))))
        everything = self._bookings.find(base)
        result.append(PerformanceWindow("All Time", len(everything), sum((b.amount for b in everything), Decimal("0"))))
        return result

    def performance_text(self, staff_name: str, now: datetime) -> str:
        lines = [f"*Performance of {escape_markdown(staff_name)}:*", ""]
        for window in self.performance(staff_name, now):
            lines.append(
                f"*{window.label}:* {window.bookings} bookings, {format_amount(window.amount)} {self._currency}"
            )
        return "\n".join(lines)
