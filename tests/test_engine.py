"""
Tests for the composition engine wiring roster, selection and membership sync.
"""
from __future__ import annotations

from typing import List, Tuple

import pytest

from team_composer.engine import TeamCompositionEngine
from team_composer.membership import JsonMembershipStore, MembershipError
from team_composer.models import ProjectConstraints
from team_composer.roster import RosterFetchError, RosterFilter, StaticRosterProvider


class RecordingMembership:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[Tuple] = []

    def add_member(self, project_id, user_id, role, is_team_lead):
        self.calls.append(("add", project_id, user_id, role, is_team_lead))
        if self.fail:
            raise MembershipError(project_id, user_id, "server rejected")

    def remove_member(self, project_id, user_id):
        self.calls.append(("remove", project_id, user_id))
        if self.fail:
            raise MembershipError(project_id, user_id, "server rejected")


class BrokenRoster:
    def fetch_candidates(self, roster_filter=None):
        raise RosterFetchError("http://roster", "connection refused")


@pytest.fixture
def members(make_member):
    return [
        make_member("m1", role="manager", experience="lead", hourly_rate=100, is_team_lead=True),
        make_member("d1", role="developer", experience="mid", hourly_rate=50),
        make_member("t1", role="tester", experience="junior", hourly_rate=40, availability_pct=55),
    ]


def make_engine(members, membership=None, constraints=None):
    engine = TeamCompositionEngine(
        "proj-1",
        constraints or ProjectConstraints(budget=100000, duration_days=10),
        roster_provider=StaticRosterProvider(members),
        membership_service=membership,
    )
    engine.refresh_roster()
    return engine


def test_add_then_analyze_sees_new_member(members):
    engine = make_engine(members)
    engine.add_member(members[0])
    analysis = engine.analysis()
    assert analysis.team_size == 1
    assert analysis.total_cost == pytest.approx(100 * 10 * 8)


def test_add_syncs_membership_once(members):
    membership = RecordingMembership()
    engine = make_engine(members, membership)
    first = engine.add_member(members[0])
    second = engine.add_member(members[0])
    assert first.changed and first.synced
    assert not second.changed
    assert membership.calls == [("add", "proj-1", "m1", "manager", True)]


def test_remove_absent_member_skips_remote_call(members):
    membership = RecordingMembership()
    engine = make_engine(members, membership)
    change = engine.remove_member("d1")
    assert not change.changed
    assert membership.calls == []


def test_membership_failure_is_reported_not_rolled_back(members, caplog):
    membership = RecordingMembership(fail=True)
    engine = make_engine(members, membership)
    with caplog.at_level("WARNING"):
        change = engine.add_member(members[1])
    assert change.changed
    assert not change.synced
    assert "server rejected" in change.sync_error
    assert engine.is_selected("d1")
    assert "server rejected" in caplog.text

    change = engine.remove_member("d1")
    assert change.sync_error
    assert not engine.is_selected("d1")


def test_roster_failure_degrades_to_empty(members):
    engine = TeamCompositionEngine("proj-1", roster_provider=BrokenRoster())
    assert engine.refresh_roster() == []
    assert engine.roster_available is False
    assert engine.summary()["roster_available"] is False


def test_roster_refresh_recovers(members):
    provider = BrokenRoster()
    engine = TeamCompositionEngine("proj-1", roster_provider=provider)
    engine.refresh_roster()
    engine._roster_provider = StaticRosterProvider(members)
    assert len(engine.refresh_roster()) == 3
    assert engine.roster_available is True


def test_filtered_roster(members):
    engine = make_engine(members)
    assert [m.id for m in engine.filtered_roster(RosterFilter(availability="low"))] == ["t1"]
    assert len(engine.filtered_roster(None)) == 3


def test_drag_gesture_flow(members):
    membership = RecordingMembership()
    engine = make_engine(members, membership)
    engine.start_drag(members[2])
    engine.enter_drop_target()
    change = engine.release_drag()
    assert change.changed
    assert engine.selection == (members[2],)
    assert engine.drag_state == "dropped"
    assert membership.calls[0][0] == "add"


def test_drag_cancel_leaves_selection_unchanged(members):
    engine = make_engine(members)
    engine.add_member(members[0])
    before = engine.selection
    engine.start_drag(members[1])
    assert engine.release_drag(over_target=False) is None
    assert engine.selection == before
    engine.start_drag(members[1])
    engine.cancel_drag()
    assert engine.drag_state == "idle"
    assert engine.selection == before


def test_click_member(members):
    engine = make_engine(members)
    change = engine.click_member(members[1])
    assert change.selection == (members[1],)
    assert engine.drag_state == "idle"


def test_seed_does_not_call_membership(members):
    membership = RecordingMembership()
    engine = make_engine(members, membership)
    engine.seed(members[:2])
    assert [m.id for m in engine.selection] == ["m1", "d1"]
    assert membership.calls == []


def test_inspect_vanished_member(members):
    engine = make_engine(members)
    assert engine.inspect("d1").member.id == "d1"
    engine._roster_provider = StaticRosterProvider(members[:1])
    engine.refresh_roster()
    assert engine.current_detail() is None
    assert engine.inspect("d1") is None


def test_inspect_selected_member_after_roster_refresh(members):
    engine = make_engine(members)
    engine.add_member(members[1])
    engine._roster_provider = StaticRosterProvider([])
    engine.refresh_roster()
    detail = engine.inspect("d1")
    assert detail.selected is True


def test_inspector_does_not_mutate_selection(members):
    engine = make_engine(members)
    engine.add_member(members[0])
    engine.inspect("d1")
    engine.close_inspector()
    assert [m.id for m in engine.selection] == ["m1"]
    assert engine.inspector_open is False


def test_recommendations_follow_selection(members):
    engine = make_engine(members)
    for member in members:
        engine.add_member(member)
    kinds = [a.kind for a in engine.advisories()]
    assert kinds == ["understaffed"]
    assert len(engine.recommendations()) == 1


def test_switch_project_discards_state(members):
    engine = make_engine(members)
    engine.add_member(members[0])
    engine.start_drag(members[1])
    engine.inspect("m1")
    engine.switch_project("proj-2", ProjectConstraints(budget=10))
    assert engine.project_id == "proj-2"
    assert engine.selection == ()
    assert engine.drag_state == "idle"
    assert engine.inspector_open is False
    assert engine.constraints.budget == 10


def test_summary_shape(members):
    engine = make_engine(members)
    engine.add_member(members[0])
    summary = engine.summary()
    assert summary["project_id"] == "proj-1"
    assert summary["selection"][0]["id"] == "m1"
    assert summary["analysis"]["team_size"] == 1
    assert summary["advisories"][0]["kind"] == "understaffed"


def test_filtering_does_not_shrink_the_roster(members):
    engine = make_engine(members)
    assert [m.id for m in engine.filtered_roster(RosterFilter(role="tester"))] == ["t1"]
    assert engine.find_candidate("m1") is not None
    assert len(engine.filtered_roster()) == 3


def test_membership_store_ignores_unknown_removal(tmp_path):
    store = JsonMembershipStore(tmp_path / "team_members.json")
    store.add_member("proj-1", "d1", "developer", False)
    store.remove_member("proj-1", "m1")
    assert [entry["user_id"] for entry in store.members_for("proj-1")] == ["d1"]
    with pytest.raises(MembershipError, match="already a member"):
        store.add_member("proj-1", "d1", "developer", False)
