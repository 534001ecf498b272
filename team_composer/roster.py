from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from .io_utils import load_roster
from .models import CandidateMember


class RosterFetchError(RuntimeError):
    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Roster from {source} unavailable: {reason}")
        self.source = source
        self.reason = reason


def _is_unset(value: Optional[str]) -> bool:
    return value is None or value == "" or value == "all"


@dataclass(frozen=True)
class RosterFilter:
    search: str = ""
    role: Optional[str] = None
    experience: Optional[str] = None
    availability: Optional[str] = None

    def matches(self, member: CandidateMember) -> bool:
        term = self.search.strip().lower()
        if term and term not in member.name.lower() and not any(
            term in skill.lower() for skill in member.skills
        ):
            return False
        if not _is_unset(self.role) and member.role != self.role:
            return False
        if not _is_unset(self.experience) and member.experience != self.experience:
            return False
        if not _is_unset(self.availability) and member.availability_band() != self.availability:
            return False
        return True


def filter_candidates(
    members: Iterable[CandidateMember], roster_filter: Optional[RosterFilter] = None
) -> List[CandidateMember]:
    if roster_filter is None:
        return list(members)
    return [member for member in members if roster_filter.matches(member)]


def members_from_df(df: pd.DataFrame) -> List[CandidateMember]:
    members: List[CandidateMember] = []
    for row in df.itertuples(index=False):
        score = row.performance_score
        if score is None or (isinstance(score, float) and math.isnan(score)):
            score = None
        members.append(
            CandidateMember(
                id=str(row.id),
                name=str(row.name),
                role=str(row.role),
                skills=tuple(row.skills),
                availability_pct=float(row.availability),
                department=str(row.department),
                experience=str(row.experience),
                hourly_rate=float(row.hourly_rate),
                performance_score=float(score) if score is not None else None,
                is_team_lead=bool(row.is_team_lead),
            )
        )
    return members


class StaticRosterProvider:
    """Roster provider over an in-memory list of members."""

    def __init__(self, members: Sequence[CandidateMember]) -> None:
        self._members = list(members)

    def fetch_candidates(self, roster_filter: Optional[RosterFilter] = None) -> List[CandidateMember]:
        return filter_candidates(self._members, roster_filter)


class JsonRosterProvider:
    """Roster provider reading ``roster.json`` on every fetch."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def fetch_candidates(self, roster_filter: Optional[RosterFilter] = None) -> List[CandidateMember]:
        try:
            df = load_roster(self.path)
        except (OSError, ValueError) as exc:
            raise RosterFetchError(str(self.path), str(exc)) from exc
        return filter_candidates(members_from_df(df), roster_filter)
