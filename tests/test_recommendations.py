"""
Tests for the additive advisory rules.
"""
from __future__ import annotations

from team_composer.analysis import analyze
from team_composer.models import CompositionConfig, ProjectConstraints
from team_composer.recommendations import RecommendationEngine, recommend


def kinds(selection, constraints, config=CompositionConfig()):
    analysis = analyze(selection, constraints, config)
    return [a.kind for a in RecommendationEngine(selection, analysis, config).analyze()]


def over_budget_constraints(selection, pct=95.0):
    # 10 days x 8h per member
    total = sum(m.hourly_rate for m in selection) * 10 * 8
    return ProjectConstraints(budget=total / (pct / 100), duration_days=10)


def test_several_warnings_surface_together(make_member):
    selection = [make_member(str(i), role="developer", experience="mid") for i in range(5)]
    result = kinds(selection, over_budget_constraints(selection))
    assert result == ["understaffed", "missing_manager", "missing_tester", "over_budget"]


def test_low_experience_adds_its_own_warning(make_member):
    tiers = ["junior", "junior", "junior", "mid", "senior"]  # mean 1.6
    selection = [make_member(str(i), role="developer", experience=t) for i, t in enumerate(tiers)]
    result = kinds(selection, over_budget_constraints(selection))
    assert result == [
        "understaffed", "missing_manager", "missing_tester", "low_experience", "over_budget",
    ]
    assert "optimal" not in result


def test_optimal_team_gets_single_all_clear(make_member):
    roles = ["manager", "tester", "developer", "developer", "designer", "analyst", "devops"]
    selection = [make_member(str(i), role=r, experience="senior") for i, r in enumerate(roles)]
    constraints = ProjectConstraints(budget=10_000_000, duration_days=10)
    messages = recommend(selection, analyze(selection, constraints))
    assert len(messages) == 1
    assert "optimal" in messages[0]


def test_oversized_team(make_member):
    roles = ["manager", "tester"] + ["developer"] * 7
    selection = [make_member(str(i), role=r, experience="senior") for i, r in enumerate(roles)]
    assert kinds(selection, ProjectConstraints()) == ["oversized"]


def test_eight_members_is_within_target(make_member):
    roles = ["manager", "tester"] + ["developer"] * 6
    selection = [make_member(str(i), role=r, experience="mid") for i, r in enumerate(roles)]
    assert kinds(selection, ProjectConstraints()) == ["optimal"]


def test_budget_at_ninety_percent_does_not_warn(make_member):
    roles = ["manager", "tester"] + ["developer"] * 5
    rates = [10, 10, 10, 10, 10, 10, 30]  # 7200 over 10 days
    selection = [
        make_member(str(i), role=r, experience="mid", hourly_rate=rate)
        for i, (r, rate) in enumerate(zip(roles, rates))
    ]
    constraints = ProjectConstraints(budget=8000, duration_days=10)
    assert kinds(selection, constraints) == ["optimal"]


def test_empty_selection_warns_without_all_clear():
    result = kinds([], ProjectConstraints())
    assert result == ["understaffed", "missing_manager", "missing_tester", "low_experience"]


def test_team_size_target_is_configurable(make_member):
    config = CompositionConfig(optimal_team_size_min=2, optimal_team_size_max=3)
    selection = [
        make_member("a", role="manager", experience="senior"),
        make_member("b", role="tester", experience="senior"),
    ]
    assert kinds(selection, ProjectConstraints(), config) == ["optimal"]


def test_understaffed_message_names_target(make_member):
    selection = [make_member("a", role="manager", experience="lead")]
    messages = recommend(selection, analyze(selection))
    assert "7-8" in messages[0]


def test_advisory_to_dict(make_member):
    selection = [make_member("a")]
    advisory = RecommendationEngine(selection, analyze(selection)).analyze()[0]
    assert advisory.to_dict() == {
        "kind": "understaffed",
        "message": advisory.message,
        "severity": "warning",
    }
