from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Sequence

from .models import CandidateMember

Allocation = Literal["full", "part"]


@dataclass(frozen=True)
class CapacityMember:
    id: str
    allocation: Allocation = "full"
    hours_per_day: float = 8.0
    leave_days: float = 0.0


@dataclass(frozen=True)
class SprintCapacity:
    daily_capacity: float
    full_time_daily: float
    part_time_daily: float
    working_days: int
    raw_capacity: float
    leave_hours: float
    holiday_hours: float
    total_deductions: float
    final_capacity: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "daily_capacity": self.daily_capacity,
            "full_time_daily": self.full_time_daily,
            "part_time_daily": self.part_time_daily,
            "working_days": self.working_days,
            "raw_capacity": self.raw_capacity,
            "leave_hours": self.leave_hours,
            "holiday_hours": self.holiday_hours,
            "total_deductions": self.total_deductions,
            "final_capacity": self.final_capacity,
        }


def sprint_capacity(
    members: Sequence[CapacityMember],
    sprint_weeks: int = 2,
    working_days_per_week: int = 5,
    hours_per_day: float = 8.0,
    bank_holidays: int = 1,
) -> SprintCapacity:
    """Hours a team can commit to in one sprint.

    Full-time members contribute ``hours_per_day``; part-time members their own
    daily hours. Leave is charged at the full-day rate, bank holidays at the
    team's daily capacity.
    """
    if sprint_weeks <= 0 or working_days_per_week <= 0:
        raise ValueError("sprint length must be positive")
    if hours_per_day <= 0:
        raise ValueError("hours_per_day must be positive")
    if bank_holidays < 0:
        raise ValueError("bank_holidays must be non-negative")

    full_time = [m for m in members if m.allocation == "full"]
    part_time = [m for m in members if m.allocation == "part"]
    full_time_daily = len(full_time) * hours_per_day
    part_time_daily = sum(m.hours_per_day for m in part_time)
    daily = full_time_daily + part_time_daily

    working_days = sprint_weeks * working_days_per_week
    raw = daily * working_days
    leave_hours = sum(m.leave_days for m in members) * hours_per_day
    holiday_hours = bank_holidays * daily
    deductions = leave_hours + holiday_hours

    return SprintCapacity(
        daily_capacity=daily,
        full_time_daily=full_time_daily,
        part_time_daily=part_time_daily,
        working_days=working_days,
        raw_capacity=raw,
        leave_hours=leave_hours,
        holiday_hours=holiday_hours,
        total_deductions=deductions,
        final_capacity=max(0.0, raw - deductions),
    )


def capacity_members_from_selection(
    selection: Sequence[CandidateMember], hours_per_day: float = 8.0
) -> List[CapacityMember]:
    result: List[CapacityMember] = []
    for member in selection:
        if member.availability_pct >= 100:
            result.append(CapacityMember(id=member.id, allocation="full", hours_per_day=hours_per_day))
        else:
            result.append(
                CapacityMember(
                    id=member.id,
                    allocation="part",
                    hours_per_day=hours_per_day * member.availability_pct / 100,
                )
            )
    return result
