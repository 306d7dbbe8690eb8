"""Clock-event reconciliation against the employee roster."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

from hr_payroll.calculators.types import ZERO, ClockIdentity, DailySpan, RawClockEvent

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"\D")


def normalize_device_code(raw: str | None) -> str | None:
    """Reduce a device or employee code to its canonical numeric form.

    "EMP007", "007" and " 7" all normalize to "7". Codes without digits
    normalize to None.
    """
    digits = _NON_DIGITS.sub("", raw or "")
    if not digits:
        return None
    return str(int(digits))


@dataclass(frozen=True)
class RosterEntry:
    """Minimal employee identity needed for matching."""

    employee_id: UUID
    employee_code: str
    name: str = ""


@dataclass(frozen=True)
class IdentitySummary:
    """Monthly totals of reconciled spans for one identity."""

    identity: ClockIdentity
    days: int
    total_hours: Decimal
    work_days: Decimal
    overtime_hours: Decimal


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class AttendanceReconciler:
    """Maps raw device punches to employees and per-day spans.

    Events whose device id matches no employee are kept under an unlinked
    ``finger:<id>`` identity instead of being dropped.
    """

    def __init__(self, standard_hours: Decimal = Decimal("8")):
        self.standard_hours = standard_hours

    def build_lookup(self, roster: Iterable[RosterEntry]) -> dict[str, ClockIdentity]:
        """Index every employee under its normalized and raw-digit codes."""
        lookup: dict[str, ClockIdentity] = {}
        for entry in roster:
            digits = _NON_DIGITS.sub("", entry.employee_code or "")
            if not digits:
                continue
            identity = ClockIdentity(
                key=str(entry.employee_id),
                employee_id=entry.employee_id,
                employee_code=entry.employee_code,
                name=entry.name,
            )
            lookup.setdefault(str(int(digits)), identity)
            lookup.setdefault(digits, identity)
        return lookup

    def identify(self, finger_id: str, lookup: dict[str, ClockIdentity]) -> ClockIdentity:
        normalized = normalize_device_code(finger_id)
        if normalized is not None:
            raw_digits = _NON_DIGITS.sub("", finger_id)
            match = lookup.get(normalized) or lookup.get(raw_digits)
            if match is not None:
                return match
        return ClockIdentity.unlinked(finger_id.strip())

    def reconcile(
        self,
        events: Iterable[RawClockEvent],
        roster: Iterable[RosterEntry],
        period_start: datetime,
        period_end: datetime,
    ) -> dict[tuple[str, date], DailySpan]:
        """Group events in ``[period_start, period_end)`` by identity and UTC day.

        Returns a mapping of ``(identity key, day)`` to the first and last
        punch of that day.
        """
        lookup = self.build_lookup(roster)
        start = _as_utc(period_start)
        end = _as_utc(period_end)

        identities: dict[str, ClockIdentity] = {}
        bounds: dict[tuple[str, date], tuple[datetime, datetime]] = {}
        for event in events:
            moment = _as_utc(event.check_time)
            if moment < start or moment >= end:
                continue

            identity = self.identify(event.finger_id, lookup)
            identities.setdefault(identity.key, identity)
            key = (identity.key, moment.date())
            current = bounds.get(key)
            if current is None:
                bounds[key] = (moment, moment)
            else:
                bounds[key] = (min(current[0], moment), max(current[1], moment))

        unlinked = {key for key, identity in identities.items() if not identity.linked}
        if unlinked:
            logger.info("Reconciliation found %d unlinked device ids", len(unlinked))

        return {
            key: DailySpan(
                identity=identities[key[0]],
                work_date=key[1],
                first_seen=first,
                last_seen=last,
                standard_hours=self.standard_hours,
            )
            for key, (first, last) in sorted(bounds.items())
        }

    def summarize(self, spans: dict[tuple[str, date], DailySpan]) -> list[IdentitySummary]:
        """Roll per-day spans up into one summary per identity."""
        grouped: dict[str, list[DailySpan]] = {}
        for (identity_key, _), span in spans.items():
            grouped.setdefault(identity_key, []).append(span)

        summaries = []
        for identity_key in sorted(grouped):
            day_spans = grouped[identity_key]
            summaries.append(
                IdentitySummary(
                    identity=day_spans[0].identity,
                    days=len(day_spans),
                    total_hours=sum((s.hours for s in day_spans), ZERO),
                    work_days=sum((s.work_value for s in day_spans), ZERO),
                    overtime_hours=sum((s.overtime_hours for s in day_spans), ZERO),
                )
            )
        return summaries
