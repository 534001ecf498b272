from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol

from .analysis import analyze
from .drag import DragAssignCoordinator, DragState
from .inspector import DetailInspector, MemberDetail
from .membership import MembershipError, MembershipService
from .models import DEFAULT_CONFIG, AllocationAnalysis, CandidateMember, CompositionConfig, ProjectConstraints
from .recommendations import Advisory, RecommendationEngine
from .roster import RosterFetchError, RosterFilter, filter_candidates
from .selection import Selection, SelectionStore

logger = logging.getLogger(__name__)


class RosterProvider(Protocol):
    def fetch_candidates(self, roster_filter: Optional[RosterFilter] = None) -> List[CandidateMember]:
        ...


@dataclass(frozen=True)
class SelectionChange:
    """Outcome of an add/remove: the new selection plus any remote sync failure."""

    selection: Selection
    changed: bool
    sync_error: Optional[str] = None

    @property
    def synced(self) -> bool:
        return self.sync_error is None


class TeamCompositionEngine:
    """Owns the team being planned for one project and its derived analytics.

    Local changes are applied first; the membership service is called only
    when the selection actually changed, and its failures are reported in the
    returned ``SelectionChange`` without rolling the selection back.
    """

    def __init__(
        self,
        project_id: str,
        constraints: Optional[ProjectConstraints] = None,
        *,
        roster_provider: Optional[RosterProvider] = None,
        membership_service: Optional[MembershipService] = None,
        config: CompositionConfig = DEFAULT_CONFIG,
    ) -> None:
        self.project_id = project_id
        self.constraints = constraints or ProjectConstraints()
        self.config = config
        self._roster_provider = roster_provider
        self._membership = membership_service
        self._roster: List[CandidateMember] = []
        self.roster_available = roster_provider is None
        self._store = SelectionStore()
        self._coordinator = DragAssignCoordinator(self._add_from_gesture)
        self._inspector = DetailInspector(self._lookup_member, self._store.contains)
        self.last_change: Optional[SelectionChange] = None

    # roster

    @property
    def roster(self) -> List[CandidateMember]:
        return list(self._roster)

    def refresh_roster(self) -> List[CandidateMember]:
        if self._roster_provider is None:
            return self.roster
        try:
            self._roster = list(self._roster_provider.fetch_candidates())
            self.roster_available = True
        except RosterFetchError as exc:
            logger.warning("project %s: %s", self.project_id, exc)
            self._roster = []
            self.roster_available = False
        return self.roster

    def filtered_roster(self, roster_filter: Optional[RosterFilter] = None) -> List[CandidateMember]:
        return filter_candidates(self._roster, roster_filter)

    def find_candidate(self, member_id: str) -> Optional[CandidateMember]:
        return next((member for member in self._roster if member.id == member_id), None)

    def _lookup_member(self, member_id: str) -> Optional[CandidateMember]:
        return self.find_candidate(member_id) or self._store.get(member_id)

    # selection

    @property
    def selection(self) -> Selection:
        return self._store.list()

    def is_selected(self, member_id: str) -> bool:
        return self._store.contains(member_id)

    def seed(self, members: Iterable[CandidateMember]) -> Selection:
        """Load already-persisted team members without calling the membership service."""
        for member in members:
            self._store.add(member)
        return self.selection

    def add_member(self, member: CandidateMember) -> SelectionChange:
        if self._store.contains(member.id):
            return self._record(SelectionChange(self.selection, changed=False))
        selection = self._store.add(member)
        logger.debug("project %s: added %s", self.project_id, member.id)
        sync_error = None
        if self._membership is not None:
            try:
                self._membership.add_member(self.project_id, member.id, member.role, member.is_team_lead)
            except MembershipError as exc:
                logger.warning("project %s: %s", self.project_id, exc)
                sync_error = str(exc)
        return self._record(SelectionChange(selection, changed=True, sync_error=sync_error))

    def remove_member(self, member_id: str) -> SelectionChange:
        if not self._store.contains(member_id):
            return self._record(SelectionChange(self.selection, changed=False))
        selection = self._store.remove(member_id)
        logger.debug("project %s: removed %s", self.project_id, member_id)
        sync_error = None
        if self._membership is not None:
            try:
                self._membership.remove_member(self.project_id, member_id)
            except MembershipError as exc:
                logger.warning("project %s: %s", self.project_id, exc)
                sync_error = str(exc)
        return self._record(SelectionChange(selection, changed=True, sync_error=sync_error))

    def _record(self, change: SelectionChange) -> SelectionChange:
        self.last_change = change
        return change

    def _add_from_gesture(self, member: CandidateMember) -> None:
        self.add_member(member)

    # gestures

    @property
    def drag_state(self) -> DragState:
        return self._coordinator.state

    @property
    def dragged_member(self) -> Optional[CandidateMember]:
        return self._coordinator.dragged_member

    def click_member(self, member: CandidateMember) -> SelectionChange:
        self._coordinator.click(member)
        return self.last_change

    def start_drag(self, member: CandidateMember) -> None:
        self._coordinator.start_drag(member)

    def enter_drop_target(self) -> None:
        self._coordinator.enter_target()

    def leave_drop_target(self) -> None:
        self._coordinator.leave_target()

    def release_drag(self, over_target: Optional[bool] = None) -> Optional[SelectionChange]:
        if self._coordinator.release(over_target):
            return self.last_change
        return None

    def cancel_drag(self) -> None:
        self._coordinator.cancel()

    # analytics

    def analysis(self) -> AllocationAnalysis:
        return analyze(self.selection, self.constraints, self.config)

    def advisories(self) -> List[Advisory]:
        selection = self.selection
        return RecommendationEngine(selection, analyze(selection, self.constraints, self.config), self.config).analyze()

    def recommendations(self) -> List[str]:
        return [advisory.message for advisory in self.advisories()]

    def summary(self) -> Dict[str, object]:
        selection = self.selection
        analysis = analyze(selection, self.constraints, self.config)
        advisories = RecommendationEngine(selection, analysis, self.config).analyze()
        return {
            "project_id": self.project_id,
            "selection": [member.to_dict() for member in selection],
            "analysis": analysis.to_dict(),
            "advisories": [advisory.to_dict() for advisory in advisories],
            "roster_available": self.roster_available,
            "drag_state": self.drag_state,
        }

    # detail view

    @property
    def inspector_open(self) -> bool:
        return self._inspector.is_open

    def inspect(
        self,
        member_id: str,
        workload_pct: Optional[float] = None,
        project_count: Optional[int] = None,
    ) -> Optional[MemberDetail]:
        return self._inspector.open(member_id, workload_pct, project_count)

    def current_detail(self) -> Optional[MemberDetail]:
        return self._inspector.current()

    def close_inspector(self) -> None:
        self._inspector.close()

    # lifecycle

    def switch_project(self, project_id: str, constraints: Optional[ProjectConstraints] = None) -> None:
        self.teardown()
        self.project_id = project_id
        self.constraints = constraints or ProjectConstraints()

    def teardown(self) -> None:
        self._coordinator.cancel()
        self._inspector.close()
        self._store.clear()
        self.last_change = None
