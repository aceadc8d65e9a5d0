from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .export_layout import dump_layout
from .layout import build_project_layout
from .metrics import DEFAULT_CONTAINER_WIDTH, TimelineConfigError
from .parse_phases import PhaseValidationError, load_project
from .phase_models import Project
from .render_timeline import render_timeline

logger = logging.getLogger("phase_timeline")


def _parse_date(value: str):
    import datetime as dt

    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phase_timeline",
        description="Phase timeline generator",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("project", help="Path to project YAML")
    parser.add_argument("--out", default="output/phase_timeline.svg", help="Output SVG path")
    parser.add_argument(
        "--width",
        type=float,
        default=DEFAULT_CONTAINER_WIDTH,
        help="Container width in pixels used for the timeline scale",
    )
    parser.add_argument("--today", type=_parse_date, help="Reference date for the today marker (YYYY-MM-DD)")
    parser.add_argument("--dump", help="Also write the computed layout as YAML to this path")
    parser.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=False,
        help="Best-effort open the output file after rendering",
    )
    parser.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log layout details to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    project_path = Path(args.project)

    try:
        project: Project = load_project(str(project_path))
    except (yaml.YAMLError, PhaseValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    except FileNotFoundError:
        print(f"Error: project file not found: {project_path}", file=sys.stderr)
        return 1
    except Exception as exc:  # Unexpected
        print(f"Unexpected error while loading project: {exc}", file=sys.stderr)
        return 1

    try:
        layout = build_project_layout(project, container_width=args.width, today=args.today)
    except TimelineConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    logger.info(
        "Laid out %d phase(s) in %d lane(s), %d unscheduled",
        len(layout.bars),
        layout.lane_count,
        len(layout.unscheduled),
    )

    if args.dump:
        dump_path = Path(args.dump)
        try:
            dump_path.parent.mkdir(parents=True, exist_ok=True)
            dump_path.write_text(dump_layout(layout), encoding="utf-8")
        except OSError as exc:
            print(f"Error: could not write layout dump: {exc}", file=sys.stderr)
            return 1

    try:
        render_timeline(layout, out_path=args.out, title=project.name)
    except Exception as exc:
        print(f"Unexpected error while rendering: {exc}", file=sys.stderr)
        return 1

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except webbrowser.Error as exc:
            logger.warning("Could not open %s: %s", args.out, exc)

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
