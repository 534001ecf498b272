from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Dict, List

import pytest

from team_composer.models import CandidateMember


def _make_member(
    member_id: str,
    role: str = "developer",
    experience: str = "mid",
    hourly_rate: float = 100.0,
    performance_score=None,
    **overrides,
) -> CandidateMember:
    fields = {
        "id": member_id,
        "name": overrides.pop("name", f"Member {member_id}"),
        "role": role,
        "skills": overrides.pop("skills", ("Python",)),
        "availability_pct": overrides.pop("availability_pct", 100.0),
        "department": overrides.pop("department", "Engineering"),
        "experience": experience,
        "hourly_rate": hourly_rate,
        "performance_score": performance_score,
    }
    fields.update(overrides)
    return CandidateMember(**fields)


@pytest.fixture
def make_member() -> Callable[..., CandidateMember]:
    return _make_member


ROSTER: List[Dict[str, object]] = [
    {"id": "tm-1", "name": "Priya Mehta", "role": "manager", "skills": ["Agile", "Scrum"],
     "availability": 85, "department": "VNIT", "experience": "lead", "hourly_rate": 2500,
     "performance_score": 95, "is_team_lead": True},
    {"id": "tm-2", "name": "Rohit Kumar", "role": "developer", "skills": "Angular; TypeScript; Python",
     "availability": 95, "department": "VNIT", "experience": "mid", "hourly_rate": 1800},
    {"id": "tm-3", "name": "Sneha Patel", "role": "designer", "skills": ["Figma", "UX Research"],
     "availability": 70, "department": "Dinshaw", "experience": "senior", "hourly_rate": 1600,
     "performance_score": 88},
    {"id": "tm-4", "name": "Arjun Rao", "role": "tester", "skills": ["Selenium", "Python"],
     "availability": 50, "department": "Dinshaw", "experience": "junior", "hourly_rate": 900},
]


@pytest.fixture
def roster_entries() -> List[Dict[str, object]]:
    return [dict(entry) for entry in ROSTER]


@pytest.fixture
def project_dir(tmp_path: Path, roster_entries) -> Path:
    root = tmp_path / "alpha"
    input_dir = root / "input"
    input_dir.mkdir(parents=True)
    (input_dir / "roster.json").write_text(json.dumps(roster_entries))
    (input_dir / "project.json").write_text(
        json.dumps({"id": "proj-1", "name": "Alpha", "budget": 1000000, "duration_days": 10,
                    "selected_member_ids": ["tm-1"]})
    )
    return root
