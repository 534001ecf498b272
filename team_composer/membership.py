from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Protocol


class MembershipError(RuntimeError):
    def __init__(self, project_id: str, user_id: str, reason: str) -> None:
        super().__init__(f"Membership of {user_id} in project {project_id} rejected: {reason}")
        self.project_id = project_id
        self.user_id = user_id
        self.reason = reason


class MembershipService(Protocol):
    def add_member(self, project_id: str, user_id: str, role: str, is_team_lead: bool) -> None:
        ...

    def remove_member(self, project_id: str, user_id: str) -> None:
        ...


class JsonMembershipStore:
    """Team membership persisted as ``{project_id: [entry, ...]}`` in a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, List[Dict[str, object]]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid membership file {self.path}") from exc
        if not isinstance(data, dict):
            raise ValueError("membership file must be a JSON object")
        return data

    def _write(self, data: Dict[str, List[Dict[str, object]]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))

    def members_for(self, project_id: str) -> List[Dict[str, object]]:
        return list(self._read().get(project_id, []))

    def add_member(self, project_id: str, user_id: str, role: str, is_team_lead: bool) -> None:
        try:
            data = self._read()
        except (OSError, ValueError) as exc:
            raise MembershipError(project_id, user_id, str(exc)) from exc
        entries = data.setdefault(project_id, [])
        if any(entry.get("user_id") == user_id for entry in entries):
            raise MembershipError(project_id, user_id, "already a member")
        entries.append({"user_id": user_id, "role": role, "is_team_lead": bool(is_team_lead)})
        try:
            self._write(data)
        except OSError as exc:
            raise MembershipError(project_id, user_id, str(exc)) from exc

    def remove_member(self, project_id: str, user_id: str) -> None:
        try:
            data = self._read()
        except (OSError, ValueError) as exc:
            raise MembershipError(project_id, user_id, str(exc)) from exc
        entries = data.get(project_id, [])
        remaining = [entry for entry in entries if entry.get("user_id") != user_id]
        if len(remaining) == len(entries):
            # members seeded from project.json were never recorded here
            return
        data[project_id] = remaining
        try:
            self._write(data)
        except OSError as exc:
            raise MembershipError(project_id, user_id, str(exc)) from exc
