from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models import CandidateMember


@dataclass(frozen=True)
class MemberDetail:
    """Read-only profile shown when a roster or team card is opened."""

    member: CandidateMember
    selected: bool
    workload_pct: Optional[float] = None
    project_count: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        payload = self.member.to_dict()
        payload.update(
            {
                "selected": self.selected,
                "workload_pct": self.workload_pct,
                "project_count": self.project_count,
                "availability_band": self.member.availability_band(),
                "experience_score": self.member.experience_score(),
            }
        )
        return payload


class DetailInspector:
    """Holds which member's detail view is open.

    The target is resolved through ``lookup`` on every read, so a member that
    disappeared from the roster while the view was open yields ``None``.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[CandidateMember]],
        is_selected: Callable[[str], bool],
    ) -> None:
        self._lookup = lookup
        self._is_selected = is_selected
        self._target_id: Optional[str] = None
        self._workload_pct: Optional[float] = None
        self._project_count: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self._target_id is not None

    @property
    def target_id(self) -> Optional[str]:
        return self._target_id

    def open(
        self,
        member_id: str,
        workload_pct: Optional[float] = None,
        project_count: Optional[int] = None,
    ) -> Optional[MemberDetail]:
        self._target_id = member_id
        self._workload_pct = workload_pct
        self._project_count = project_count
        return self.current()

    def current(self) -> Optional[MemberDetail]:
        if self._target_id is None:
            return None
        member = self._lookup(self._target_id)
        if member is None:
            return None
        return MemberDetail(
            member=member,
            selected=self._is_selected(member.id),
            workload_pct=self._workload_pct,
            project_count=self._project_count,
        )

    def close(self) -> None:
        self._target_id = None
        self._workload_pct = None
        self._project_count = None
