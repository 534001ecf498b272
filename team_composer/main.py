from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from .engine import SelectionChange, TeamCompositionEngine
from .io_utils import ensure_directory, load_config, load_project, write_csv
from .membership import JsonMembershipStore
from .models import DEFAULT_CONFIG, AllocationAnalysis, CompositionConfig
from .recommendations import Advisory
from .roster import JsonRosterProvider

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Team composition analysis for a project (JSON in, CSV/Markdown out)."
    )
    parser.add_argument(
        "--project-dir",
        help="Project directory containing input/ and output/ subfolders",
    )
    parser.add_argument("--roster", help="Path to roster JSON input (overrides project-dir default)")
    parser.add_argument("--project", help="Path to project JSON input (overrides project-dir default)")
    parser.add_argument("--config", help="Path to configuration JSON file (optional)")
    parser.add_argument(
        "--outdir",
        default=None,
        help="Output directory for generated files (default: <project-dir>/output or ./out)",
    )
    parser.add_argument(
        "--add",
        action="append",
        default=[],
        metavar="MEMBER_ID",
        help="Add a roster member to the team (repeatable)",
    )
    parser.add_argument(
        "--remove",
        action="append",
        default=[],
        metavar="MEMBER_ID",
        help="Remove a member from the team (repeatable)",
    )
    parser.add_argument(
        "--sync",
        action="store_true",
        help="Record membership changes in <outdir>/team_members.json",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the analysis without writing output files",
    )
    return parser.parse_args(argv)


def _resolve_io_paths(args: argparse.Namespace) -> Tuple[Path, Path, Optional[Path], Path]:
    project_dir = Path(args.project_dir).resolve() if args.project_dir else None
    if project_dir and not project_dir.exists():
        raise ValueError(f"project directory not found: {project_dir}")
    input_dir = project_dir / "input" if project_dir else None

    def _pick(path_value: Optional[str], default_name: str) -> Optional[Path]:
        if path_value:
            return Path(path_value)
        if input_dir:
            return input_dir / default_name
        return None

    roster_path = _pick(args.roster, "roster.json")
    project_path = _pick(args.project, "project.json")
    config_path = _pick(args.config, "config.json")

    missing = [
        name for name, value in (("roster", roster_path), ("project", project_path)) if value is None
    ]
    if missing:
        joined = ", ".join(f"--{name}" for name in missing)
        raise ValueError(f"missing required input paths: {joined} (or provide --project-dir)")

    for label, path in (("roster", roster_path), ("project", project_path)):
        if not path.exists():
            raise ValueError(f"{label} file not found at {path}")
    if config_path is not None and not config_path.exists():
        if args.config:
            raise ValueError(f"config file not found at {config_path}")
        config_path = None

    if args.outdir:
        outdir = Path(args.outdir)
    elif project_dir:
        outdir = project_dir / "output"
    else:
        outdir = Path("out")

    return roster_path, project_path, config_path, outdir


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")


def analysis_frame(project_id: str, analysis: AllocationAnalysis) -> pd.DataFrame:
    row = analysis.to_dict()
    row.pop("role_distribution")
    row = {"project_id": project_id, **row}
    return pd.DataFrame([row])


def role_distribution_frame(analysis: AllocationAnalysis) -> pd.DataFrame:
    rows = [{"role": role, "count": count} for role, count in analysis.role_distribution.items()]
    return pd.DataFrame(rows, columns=["role", "count"])


def _print_summary(engine: TeamCompositionEngine, analysis: AllocationAnalysis,
                   advisories: List[Advisory]) -> None:
    selection = engine.selection
    if not selection:
        print("No team members selected.")
    else:
        print(f"Team for {engine.project_id} ({len(selection)} members):")
        for member in selection:
            lead = " (lead)" if member.is_team_lead else ""
            print(f"- {member.id} {member.name}: {member.role}, {member.experience}{lead}")
    print(f"\nTotal cost: {analysis.total_cost:,.2f}")
    if analysis.budget_status:
        print(f"Budget usage: {analysis.budget_utilization_pct:.1f}% ({analysis.budget_status})")
    print(f"Average experience: {analysis.average_experience_score:.2f}")
    print(f"Average performance: {analysis.average_performance_score:.0f}")
    print("\nRecommendations:")
    for advisory in advisories:
        print(f"- {advisory.message}")


def _write_recommendations_markdown(engine: TeamCompositionEngine, analysis: AllocationAnalysis,
                                    advisories: List[Advisory], outdir: Path) -> Path:
    path = outdir / "recommendations.md"
    lines: List[str] = [f"# Team Recommendations – {engine.project_id}", ""]
    lines.append(f"- Team size: {analysis.team_size}")
    lines.append(f"- Estimated cost: {analysis.total_cost:,.2f}")
    if analysis.budget_status:
        lines.append(f"- Budget usage: {analysis.budget_utilization_pct:.1f}% ({analysis.budget_status})")
    if analysis.role_distribution:
        mix = ", ".join(f"{role}: {count}" for role, count in analysis.role_distribution.items())
        lines.append(f"- Role mix: {mix}")
    lines.append("")
    for advisory in advisories:
        lines.append(f"- **{advisory.kind}**: {advisory.message}")
    path.write_text("\n".join(lines).strip() + "\n")
    return path


def _apply_changes(engine: TeamCompositionEngine, add_ids: List[str],
                   remove_ids: List[str]) -> List[str]:
    problems: List[str] = []
    for member_id in remove_ids:
        change = engine.remove_member(member_id)
        problems.extend(_change_problems(member_id, change))
    for member_id in add_ids:
        member = engine.find_candidate(member_id)
        if member is None:
            problems.append(f"{member_id}: not found in roster")
            continue
        change = engine.click_member(member)
        problems.extend(_change_problems(member_id, change))
    return problems


def _change_problems(member_id: str, change: Optional[SelectionChange]) -> List[str]:
    if change is None or change.synced:
        return []
    return [f"{member_id}: {change.sync_error}"]


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    try:
        roster_path, project_path, config_path, outdir = _resolve_io_paths(args)
        project = load_project(project_path)
        cfg: CompositionConfig = load_config(config_path) if config_path else DEFAULT_CONFIG
        membership = JsonMembershipStore(Path(outdir) / "team_members.json") if args.sync else None
        persisted_ids = (
            [str(entry.get("user_id")) for entry in membership.members_for(project.id)]
            if membership is not None
            else []
        )
    except (OSError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(2)
    _configure_logging(cfg.logging_level)

    engine = TeamCompositionEngine(
        project.id,
        project.constraints,
        roster_provider=JsonRosterProvider(roster_path),
        membership_service=membership,
        config=cfg,
    )
    engine.refresh_roster()
    if not engine.roster_available:
        print("Roster could not be loaded; no data.", file=sys.stderr)
        sys.exit(1)

    selected_ids = list(project.selected_member_ids) + persisted_ids
    seeded = [engine.find_candidate(member_id) for member_id in selected_ids]
    engine.seed(member for member in seeded if member is not None)
    unknown = [mid for mid, member in zip(selected_ids, seeded) if member is None]
    for member_id in unknown:
        logger.warning("selected member %s is not in the roster", member_id)

    problems = _apply_changes(engine, args.add, args.remove)

    analysis = engine.analysis()
    advisories = engine.advisories()

    if args.dry_run:
        _print_summary(engine, analysis, advisories)
    else:
        outdir_path = ensure_directory(outdir)
        analysis_path = outdir_path / "team_analysis.csv"
        roles_path = outdir_path / "role_distribution.csv"
        write_csv(analysis_frame(engine.project_id, analysis), analysis_path)
        write_csv(role_distribution_frame(analysis), roles_path)
        recommendations_path = _write_recommendations_markdown(engine, analysis, advisories, outdir_path)
        print(f"Wrote {analysis_path}")
        print(f"Wrote {roles_path}")
        print(f"Wrote {recommendations_path}")

    if problems:
        print("Membership changes not confirmed:", file=sys.stderr)
        for problem in problems:
            print(f"- {problem}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
