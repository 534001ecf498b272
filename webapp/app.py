from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

from flask import Flask, jsonify, request

from team_composer.capacity import capacity_members_from_selection, sprint_capacity
from team_composer.engine import SelectionChange, TeamCompositionEngine
from team_composer.io_utils import load_config, load_project
from team_composer.membership import JsonMembershipStore
from team_composer.models import DEFAULT_CONFIG
from team_composer.roster import JsonRosterProvider, RosterFilter

from .sessions import SessionStore

REQUIRED_INPUT_FILES = ("roster.json", "project.json")
DRAG_ACTIONS = ("start", "enter", "leave", "release", "cancel")


def _projects_root() -> Path:
    configured = os.getenv("PROJECTS_ROOT")
    if configured:
        return Path(configured).expanduser().resolve()
    return (Path(__file__).resolve().parent.parent / "projects").resolve()


def _missing_inputs(project_dir: Path) -> List[str]:
    return [name for name in REQUIRED_INPUT_FILES if not (project_dir / "input" / name).is_file()]


def _project_dir(name: str, root: Path) -> Path:
    project_dir = (root / name).resolve()
    if project_dir.parent != root:
        raise ValueError(f"project {name!r} is outside {root}")
    if not project_dir.is_dir():
        raise ValueError(f"project {name!r} not found")
    missing = _missing_inputs(project_dir)
    if missing:
        raise ValueError(f"project {name!r} is missing input files: {', '.join(missing)}")
    return project_dir


def _project_names(root: Path) -> List[str]:
    if not root.is_dir():
        return []
    return sorted(child.name for child in root.iterdir() if child.is_dir() and not _missing_inputs(child))


def build_engine(project_dir: Path) -> TeamCompositionEngine:
    """Create an engine for a project directory and seed it with the persisted team."""
    input_dir = project_dir / "input"
    project = load_project(input_dir / "project.json")
    config_path = input_dir / "config.json"
    config = load_config(config_path) if config_path.is_file() else DEFAULT_CONFIG
    membership = JsonMembershipStore(project_dir / "output" / "team_members.json")
    engine = TeamCompositionEngine(
        project.id,
        project.constraints,
        roster_provider=JsonRosterProvider(input_dir / "roster.json"),
        membership_service=membership,
        config=config,
    )
    engine.refresh_roster()
    persisted = [str(entry.get("user_id")) for entry in membership.members_for(project.id)]
    for member_id in list(project.selected_member_ids) + persisted:
        member = engine.find_candidate(member_id)
        if member is not None:
            engine.seed([member])
    return engine


def _roster_filter_from_args() -> RosterFilter:
    return RosterFilter(
        search=request.args.get("search", ""),
        role=request.args.get("role"),
        experience=request.args.get("experience"),
        availability=request.args.get("availability"),
    )


def _optional_float(name: str) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return float(raw)


def _change_payload(engine: TeamCompositionEngine, change: Optional[SelectionChange]) -> Dict[str, object]:
    payload = engine.summary()
    payload["changed"] = bool(change and change.changed)
    payload["sync_error"] = change.sync_error if change else None
    return payload


def create_app() -> Flask:
    app = Flask(__name__)
    projects_root = _projects_root()
    session_store = SessionStore()
    app.config["PROJECTS_ROOT"] = projects_root
    app.config["SESSION_STORE"] = session_store

    def _session(project_name: str):
        project_dir = _project_dir(project_name, projects_root)
        return session_store.engine(project_name, lambda: build_engine(project_dir))

    @app.errorhandler(ValueError)
    def handle_value_error(exc: ValueError):
        return jsonify({"error": str(exc)}), 400

    @app.get("/")
    def index():
        return jsonify(
            {
                "projects": _project_names(projects_root),
                "sessions": session_store.list_sessions(),
                "projects_root": projects_root.as_posix(),
            }
        )

    @app.get("/api/roster/<project_name>")
    def get_roster(project_name: str):
        roster_filter = _roster_filter_from_args()
        with _session(project_name) as engine:
            engine.refresh_roster()
            members = []
            for member in engine.filtered_roster(roster_filter):
                entry = member.to_dict()
                entry["selected"] = engine.is_selected(member.id)
                members.append(entry)
            return jsonify({"available": engine.roster_available, "members": members})

    @app.get("/api/team/<project_name>")
    def get_team(project_name: str):
        with _session(project_name) as engine:
            return jsonify(engine.summary())

    @app.delete("/api/team/<project_name>")
    def discard_team(project_name: str):
        if not session_store.discard(project_name):
            return jsonify({"error": "session not found"}), 404
        return jsonify({"success": True})

    @app.post("/api/team/<project_name>/members")
    def add_member(project_name: str):
        data = request.get_json(silent=True) or {}
        member_id = data.get("member_id")
        if not member_id:
            return jsonify({"error": "member_id is required"}), 400
        with _session(project_name) as engine:
            member = engine.find_candidate(str(member_id))
            if member is None:
                return jsonify({"error": f"member {member_id} not found in roster"}), 404
            change = engine.click_member(member)
            return jsonify(_change_payload(engine, change))

    @app.delete("/api/team/<project_name>/members/<member_id>")
    def remove_member(project_name: str, member_id: str):
        with _session(project_name) as engine:
            change = engine.remove_member(member_id)
            return jsonify(_change_payload(engine, change))

    @app.get("/api/team/<project_name>/members/<member_id>")
    def member_detail(project_name: str, member_id: str):
        workload = _optional_float("workload")
        projects = _optional_float("projects")
        with _session(project_name) as engine:
            detail = engine.inspect(
                member_id,
                workload_pct=workload,
                project_count=int(projects) if projects is not None else None,
            )
            if detail is None:
                engine.close_inspector()
                return jsonify({"error": "member not found"}), 404
            return jsonify(detail.to_dict())

    @app.post("/api/team/<project_name>/drag/<action>")
    def drag(project_name: str, action: str):
        if action not in DRAG_ACTIONS:
            return jsonify({"error": f"unknown drag action '{action}'"}), 404
        data = request.get_json(silent=True) or {}
        over_target = data.get("over_target")
        if over_target is not None and not isinstance(over_target, bool):
            return jsonify({"error": "over_target must be true, false or null"}), 400
        with _session(project_name) as engine:
            change = None
            if action == "start":
                member = engine.find_candidate(str(data.get("member_id", "")))
                if member is None:
                    return jsonify({"error": "member not found in roster"}), 404
                engine.start_drag(member)
            elif action == "enter":
                engine.enter_drop_target()
            elif action == "leave":
                engine.leave_drop_target()
            elif action == "release":
                change = engine.release_drag(over_target)
            else:
                engine.cancel_drag()
            return jsonify(_change_payload(engine, change))

    @app.get("/api/team/<project_name>/capacity")
    def capacity(project_name: str):
        sprint_weeks = int(request.args.get("sprint_weeks", 2))
        bank_holidays = int(request.args.get("bank_holidays", 1))
        with _session(project_name) as engine:
            hours_per_day = engine.config.hours_per_day
            members = capacity_members_from_selection(engine.selection, hours_per_day)
            result = sprint_capacity(
                members,
                sprint_weeks=sprint_weeks,
                hours_per_day=hours_per_day,
                bank_holidays=bank_holidays,
            )
            return jsonify(result.to_dict())

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
