from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


Role = str


ROLES: Tuple[Role, ...] = ("manager", "developer", "designer", "analyst", "tester", "devops")

EXPERIENCE_SCORES: Dict[str, int] = {"junior": 1, "mid": 2, "senior": 3, "lead": 4}

AVAILABILITY_BANDS: Tuple[str, ...] = ("high", "medium", "low")


@dataclass(frozen=True)
class CandidateMember:
    """Roster entry for a person who can be staffed onto a project."""

    id: str
    name: str
    role: Role
    skills: Tuple[str, ...]
    availability_pct: float
    department: str
    experience: str
    hourly_rate: float
    performance_score: Optional[float] = None
    is_team_lead: bool = False

    def experience_score(self) -> int:
        return EXPERIENCE_SCORES.get(self.experience, 1)

    def availability_band(self) -> str:
        if self.availability_pct >= 80:
            return "high"
        if self.availability_pct >= 60:
            return "medium"
        return "low"

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "skills": list(self.skills),
            "availability": self.availability_pct,
            "department": self.department,
            "experience": self.experience,
            "hourly_rate": self.hourly_rate,
            "performance_score": self.performance_score,
            "is_team_lead": self.is_team_lead,
        }


@dataclass(frozen=True)
class ProjectConstraints:
    budget: Optional[float] = None
    duration_days: Optional[int] = None

    def __post_init__(self) -> None:
        if self.budget is not None and self.budget < 0:
            raise ValueError("budget must be non-negative")
        if self.duration_days is not None and self.duration_days <= 0:
            raise ValueError("duration_days must be a positive integer")

    def effective_duration(self, default_days: int) -> int:
        return self.duration_days if self.duration_days else default_days


@dataclass(frozen=True)
class CompositionConfig:
    """Policy constants used by the analyzer and the advisory rules."""

    default_duration_days: int = 40
    hours_per_day: float = 8.0
    default_performance_score: float = 80.0
    optimal_team_size_min: int = 7
    optimal_team_size_max: int = 8
    min_average_experience: float = 2.0
    budget_warning_pct: float = 90.0
    budget_caution_pct: float = 75.0
    logging_level: str = "INFO"

    def is_optimal_size(self, size: int) -> bool:
        return self.optimal_team_size_min <= size <= self.optimal_team_size_max


DEFAULT_CONFIG = CompositionConfig()


@dataclass(frozen=True)
class AllocationAnalysis:
    team_size: int = 0
    total_cost: float = 0.0
    role_distribution: Dict[Role, int] = field(default_factory=dict)
    average_experience_score: float = 0.0
    average_performance_score: float = 0.0
    budget_utilization_pct: float = 0.0
    has_budget: bool = False
    budget_warning_pct: float = DEFAULT_CONFIG.budget_warning_pct
    budget_caution_pct: float = DEFAULT_CONFIG.budget_caution_pct

    @property
    def budget_status(self) -> Optional[str]:
        if not self.has_budget:
            return None
        if self.budget_utilization_pct > self.budget_warning_pct:
            return "over_budget"
        if self.budget_utilization_pct > self.budget_caution_pct:
            return "high_usage"
        return "within_budget"

    def role_count(self, role: Role) -> int:
        return self.role_distribution.get(role, 0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "team_size": self.team_size,
            "total_cost": self.total_cost,
            "role_distribution": dict(self.role_distribution),
            "average_experience_score": self.average_experience_score,
            "average_performance_score": self.average_performance_score,
            "budget_utilization_pct": self.budget_utilization_pct,
            "budget_status": self.budget_status,
        }
