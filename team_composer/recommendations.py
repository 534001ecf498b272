"""
Advisory rules for a proposed project team.

Every rule that applies contributes one advisory, in a fixed order:
- Team size outside the optimal range (understaffed / oversized)
- No project manager
- No tester
- Low average experience
- Projected cost close to or above the budget

When none of them fire, a single all-clear advisory is returned instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from .models import DEFAULT_CONFIG, AllocationAnalysis, CandidateMember, CompositionConfig


@dataclass
class Advisory:
    """A non-blocking recommendation about the team composition."""
    kind: str
    message: str
    severity: str  # "warning" or "info"

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message, "severity": self.severity}


class RecommendationEngine:
    """Evaluates the advisory rules for a selection and its analysis."""

    def __init__(
        self,
        selection: Sequence[CandidateMember],
        analysis: AllocationAnalysis,
        config: CompositionConfig = DEFAULT_CONFIG,
    ):
        self.selection = selection
        self.analysis = analysis
        self.config = config
        self.advisories: List[Advisory] = []

    def analyze(self) -> List[Advisory]:
        self.advisories = []
        self._check_team_size()
        self._check_role_present("manager", "missing_manager",
                                 "Consider adding a project manager for better coordination.")
        self._check_role_present("tester", "missing_tester",
                                 "Add a tester to ensure quality assurance.")
        self._check_experience()
        self._check_budget()
        if not self.advisories:
            self.advisories.append(Advisory(
                kind="optimal",
                message="Team composition looks optimal for this project.",
                severity="info",
            ))
        return list(self.advisories)

    def _check_team_size(self) -> None:
        size = len(self.selection)
        low = self.config.optimal_team_size_min
        high = self.config.optimal_team_size_max
        if size < low:
            self.advisories.append(Advisory(
                kind="understaffed",
                message=f"Team is understaffed with {size} members; aim for {low}-{high}.",
                severity="warning",
            ))
        elif size > high:
            self.advisories.append(Advisory(
                kind="oversized",
                message=f"Team is oversized with {size} members; aim for {low}-{high}.",
                severity="warning",
            ))

    def _check_role_present(self, role: str, kind: str, message: str) -> None:
        if not any(member.role == role for member in self.selection):
            self.advisories.append(Advisory(kind=kind, message=message, severity="warning"))

    def _check_experience(self) -> None:
        if self.analysis.average_experience_score < self.config.min_average_experience:
            self.advisories.append(Advisory(
                kind="low_experience",
                message="Team may benefit from more senior members for mentoring.",
                severity="warning",
            ))

    def _check_budget(self) -> None:
        if self.analysis.budget_utilization_pct > self.config.budget_warning_pct:
            self.advisories.append(Advisory(
                kind="over_budget",
                message=(
                    f"Projected cost uses {self.analysis.budget_utilization_pct:.1f}% of the budget; "
                    "consider optimizing team composition to reduce costs."
                ),
                severity="warning",
            ))


def recommend(
    selection: Sequence[CandidateMember],
    analysis: AllocationAnalysis,
    config: CompositionConfig = DEFAULT_CONFIG,
) -> List[str]:
    return [advisory.message for advisory in RecommendationEngine(selection, analysis, config).analyze()]
