from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import pandas as pd
from dateutil import parser as dateparser
from dateutil.rrule import DAILY, FR, MO, TH, TU, WE, rrule

from .models import EXPERIENCE_SCORES, ROLES, CompositionConfig, ProjectConstraints


def _parse_bool(value: object, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return False
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "t", "1", "yes", "y"}:
            return True
        if lowered in {"false", "f", "0", "no", "n", ""}:
            return False
    raise ValueError(f"cannot interpret boolean value '{value}' in '{field_name}'")


def _parse_optional_date(value: object, field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, str) and value.strip() == "":
        return None
    try:
        return dateparser.isoparse(str(value)).date()
    except (ValueError, TypeError) as exc:
        raise ValueError(f"invalid date in '{field_name}': {value}") from exc


def _parse_skill_field(value: object, field_name: str) -> Tuple[str, ...]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ()
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(";")]
    elif isinstance(value, Sequence):
        parts = [str(item).strip() for item in value]
    else:
        raise ValueError(f"unsupported value for '{field_name}': {value!r}")
    unique: Dict[str, None] = {}
    for part in parts:
        if part:
            unique.setdefault(part, None)
    return tuple(unique)


def _parse_number(value: object, field_name: str, name: str, *, low: float = 0.0,
                  high: Optional[float] = None) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number for {name}")
    number = float(value)
    if number < low or (high is not None and number > high):
        bounds = f"[{low:g}, {high:g}]" if high is not None else f">= {low:g}"
        raise ValueError(f"{field_name} must be {bounds} for {name}")
    return number


def load_roster(path: str | Path) -> pd.DataFrame:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, list):
        raise ValueError("roster file must be a JSON array")
    rows = []
    seen_ids = set()
    for entry in data:
        if not isinstance(entry, dict):
            raise ValueError("roster entries must be objects")
        member_id = entry.get("id")
        if member_id is None or str(member_id).strip() == "":
            raise ValueError("member id is required")
        member_id = str(member_id).strip()
        if member_id in seen_ids:
            raise ValueError(f"duplicate member id '{member_id}'")
        seen_ids.add(member_id)
        name = entry.get("name")
        if not name or not isinstance(name, str):
            raise ValueError(f"name is required for {member_id}")
        role = str(entry.get("role", "")).strip().lower()
        if role not in ROLES:
            raise ValueError(f"unsupported role '{role}' for {member_id}")
        experience = str(entry.get("experience", "")).strip().lower()
        if experience not in EXPERIENCE_SCORES:
            raise ValueError(f"unsupported experience '{experience}' for {member_id}")
        performance = entry.get("performance_score")
        if performance is not None:
            performance = _parse_number(performance, "performance_score", member_id, high=100.0)
        rows.append(
            {
                "id": member_id,
                "name": name.strip(),
                "role": role,
                "skills": _parse_skill_field(entry.get("skills", ()), "skills"),
                "availability": _parse_number(
                    entry.get("availability", 100), "availability", member_id, high=100.0
                ),
                "department": str(entry.get("department", "") or ""),
                "experience": experience,
                "hourly_rate": _parse_number(entry.get("hourly_rate"), "hourly_rate", member_id),
                "performance_score": performance,
                "is_team_lead": _parse_bool(entry.get("is_team_lead", False), "is_team_lead"),
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "id", "name", "role", "skills", "availability", "department",
            "experience", "hourly_rate", "performance_score", "is_team_lead",
        ],
    )


def working_days_between(start: date, end: date) -> int:
    """Count weekdays in the inclusive range ``start``..``end``."""
    if end < start:
        raise ValueError("end_date must not be earlier than start_date")
    return rrule(DAILY, dtstart=start, until=end, byweekday=(MO, TU, WE, TH, FR)).count()


@dataclass(frozen=True)
class ProjectInput:
    id: str
    constraints: ProjectConstraints
    selected_member_ids: Tuple[str, ...] = field(default_factory=tuple)
    name: str = ""


def load_project(path: str | Path) -> ProjectInput:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError("project file must be a JSON object")
    project_id = data.get("id")
    if project_id is None or str(project_id).strip() == "":
        raise ValueError("project id is required")
    project_id = str(project_id).strip()

    budget = data.get("budget")
    if budget is not None:
        budget = _parse_number(budget, "budget", project_id)

    duration = data.get("duration_days")
    start_date = _parse_optional_date(data.get("start_date"), "start_date")
    end_date = _parse_optional_date(data.get("end_date"), "end_date")
    if duration is not None:
        if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
            raise ValueError("duration_days must be a positive integer")
    elif start_date and end_date:
        duration = working_days_between(start_date, end_date)
        if duration <= 0:
            raise ValueError("project date range contains no working days")

    selected = data.get("selected_member_ids") or []
    if not isinstance(selected, list):
        raise ValueError("selected_member_ids must be an array")

    return ProjectInput(
        id=project_id,
        constraints=ProjectConstraints(budget=budget, duration_days=duration),
        selected_member_ids=tuple(str(item) for item in selected),
        name=str(data.get("name", "") or ""),
    )


def _positive_number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    if value <= 0:
        raise ValueError(f"{key} must be positive")
    return float(value)


def config_from_dict(data: dict) -> CompositionConfig:
    defaults = CompositionConfig()
    default_duration = _positive_number(data, "default_duration_days", defaults.default_duration_days)
    if int(default_duration) != default_duration:
        raise ValueError("default_duration_days must be an integer")
    hours_per_day = _positive_number(data, "hours_per_day", defaults.hours_per_day)
    if hours_per_day > 24:
        raise ValueError("hours_per_day must be at most 24")

    performance_default = data.get("default_performance_score", defaults.default_performance_score)
    if isinstance(performance_default, bool) or not isinstance(performance_default, (int, float)):
        raise ValueError("default_performance_score must be a number")
    if not (0 <= performance_default <= 100):
        raise ValueError("default_performance_score must be in [0, 100]")

    team_size = data.get("optimal_team_size", {})
    if not isinstance(team_size, dict):
        raise ValueError("optimal_team_size must be an object")
    size_min = team_size.get("min", defaults.optimal_team_size_min)
    size_max = team_size.get("max", defaults.optimal_team_size_max)
    if not isinstance(size_min, int) or not isinstance(size_max, int) or size_min < 1:
        raise ValueError("optimal_team_size min/max must be positive integers")
    if size_max < size_min:
        raise ValueError("optimal_team_size max must not be smaller than min")

    min_experience = data.get("min_average_experience", defaults.min_average_experience)
    if isinstance(min_experience, bool) or not isinstance(min_experience, (int, float)):
        raise ValueError("min_average_experience must be a number")
    if not (0 <= min_experience <= max(EXPERIENCE_SCORES.values())):
        raise ValueError("min_average_experience must be within the experience scale")

    warning_pct = _positive_number(data, "budget_warning_pct", defaults.budget_warning_pct)
    caution_pct = _positive_number(data, "budget_caution_pct", defaults.budget_caution_pct)
    if caution_pct > warning_pct:
        raise ValueError("budget_caution_pct must not exceed budget_warning_pct")

    logging_level = data.get("logging_level", defaults.logging_level)
    if not isinstance(logging_level, str):
        raise ValueError("logging_level must be a string")

    return CompositionConfig(
        default_duration_days=int(default_duration),
        hours_per_day=hours_per_day,
        default_performance_score=float(performance_default),
        optimal_team_size_min=size_min,
        optimal_team_size_max=size_max,
        min_average_experience=float(min_experience),
        budget_warning_pct=warning_pct,
        budget_caution_pct=caution_pct,
        logging_level=logging_level,
    )


def load_config(path: str | Path) -> CompositionConfig:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError("config file must be a JSON object")
    return config_from_dict(data)


def ensure_directory(path: str | Path) -> Path:
    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target


def write_csv(df: pd.DataFrame, path: str | Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
