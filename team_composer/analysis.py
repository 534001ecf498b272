from __future__ import annotations

from typing import Dict, Optional, Sequence

from .models import (
    DEFAULT_CONFIG,
    AllocationAnalysis,
    CandidateMember,
    CompositionConfig,
    ProjectConstraints,
    Role,
)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def projected_cost(
    member: CandidateMember,
    constraints: ProjectConstraints,
    config: CompositionConfig = DEFAULT_CONFIG,
) -> float:
    days = constraints.effective_duration(config.default_duration_days)
    return member.hourly_rate * days * config.hours_per_day


def role_distribution(selection: Sequence[CandidateMember]) -> Dict[Role, int]:
    counts: Dict[Role, int] = {}
    for member in selection:
        counts[member.role] = counts.get(member.role, 0) + 1
    return counts


def analyze(
    selection: Sequence[CandidateMember],
    constraints: Optional[ProjectConstraints] = None,
    config: CompositionConfig = DEFAULT_CONFIG,
) -> AllocationAnalysis:
    """Derive cost, mix and budget figures for the current selection.

    An empty selection yields the all-zero analysis. Members without a
    measured performance score count as ``config.default_performance_score``.
    """
    constraints = constraints or ProjectConstraints()
    has_budget = bool(constraints.budget)
    if not selection:
        return AllocationAnalysis(
            has_budget=has_budget,
            budget_warning_pct=config.budget_warning_pct,
            budget_caution_pct=config.budget_caution_pct,
        )

    total_cost = sum(projected_cost(member, constraints, config) for member in selection)
    experience = _mean([member.experience_score() for member in selection])
    performance = _mean(
        [
            member.performance_score
            if member.performance_score is not None
            else config.default_performance_score
            for member in selection
        ]
    )
    utilization = total_cost / constraints.budget * 100 if has_budget else 0.0

    return AllocationAnalysis(
        team_size=len(selection),
        total_cost=total_cost,
        role_distribution=role_distribution(selection),
        average_experience_score=experience,
        average_performance_score=performance,
        budget_utilization_pct=utilization,
        has_budget=has_budget,
        budget_warning_pct=config.budget_warning_pct,
        budget_caution_pct=config.budget_caution_pct,
    )
