from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from typing import Any

import yaml

from .phase_models import PHASE_STATUSES, Phase, Project, RawDate


class PhaseValidationError(Exception):
    """Raised when the project document is structurally invalid."""


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like phases[0].order."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


PHASE_KEYS = {"id", "name", "start_date", "end_date", "order", "status", "description"}


class _ProjectLoader(yaml.SafeLoader):
    """SafeLoader that keeps impossible unquoted dates (2025-02-30) as plain strings."""


def _construct_timestamp(loader: _ProjectLoader, node: yaml.Node) -> Any:
    try:
        return loader.construct_yaml_timestamp(node)
    except ValueError:
        return loader.construct_scalar(node)


_ProjectLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


def load_project(path: str) -> Project:
    """Load a Project from a YAML file at the given path (no layout)."""

    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.load(fh, Loader=_ProjectLoader)

    return parse_project(raw)


def parse_project(data: Any) -> Project:
    """Build a Project from already-decoded YAML/JSON data."""
    return _parse_project(data, _Path())


def _parse_project(data: Any, path: _Path) -> Project:
    if not isinstance(data, dict):
        raise PhaseValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"project", "phases"}, path)

    project_raw = data.get("project")
    if not isinstance(project_raw, dict):
        raise PhaseValidationError(f"{path}: missing required mapping 'project'")
    _assert_allowed_keys(project_raw, {"name", "description"}, path.child("project"))
    name = _require_str(project_raw, "name", path.child("project"))
    description = _optional_str(project_raw, "description", path.child("project"))

    phases_raw = data.get("phases")
    if phases_raw is None:
        phases_raw = []
    if not isinstance(phases_raw, list):
        raise PhaseValidationError(f"{path.child('phases')}: expected list")

    ids: set[str] = set()
    phases: list[Phase] = []
    for idx, phase_raw in enumerate(phases_raw):
        phases.append(_parse_phase(phase_raw, path.child(f"phases[{idx}]"), ids, default_order=idx + 1))

    return Project(name=name, phases=phases, description=description)


def _parse_phase(data: Any, path: _Path, ids: set[str], default_order: int) -> Phase:
    if not isinstance(data, dict):
        raise PhaseValidationError(f"{path}: expected mapping for phase")

    _assert_allowed_keys(data, PHASE_KEYS, path)
    phase_id = _require_id(data, path, ids)
    name = _require_str(data, "name", path)
    description = _optional_str(data, "description", path)

    order = data.get("order", default_order)
    if isinstance(order, bool) or not isinstance(order, int):
        raise PhaseValidationError(f"{path.child('order')}: expected integer")

    status = data.get("status")
    if status is not None and status not in PHASE_STATUSES:
        raise PhaseValidationError(f"{path.child('status')}: expected one of {list(PHASE_STATUSES)}")

    return Phase(
        id=phase_id,
        name=name,
        start_date=_raw_date(data.get("start_date")),
        end_date=_raw_date(data.get("end_date")),
        order=order,
        status=status,
        description=description,
    )


def _raw_date(value: Any) -> RawDate:
    # Date values are not validated here: anything unusable becomes an
    # unscheduled phase at layout time.
    if value is None or isinstance(value, (_dt.date, str)):
        return value
    return str(value)


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(str(key) for key in set(data.keys()) - allowed)
    if extras:
        raise PhaseValidationError(f"{path}: unexpected fields {extras}")


def _require_str(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    if not isinstance(value, str) or not value.strip():
        raise PhaseValidationError(f"{path.child(key)}: expected non-empty string")
    return value


def _optional_str(data: dict[str, Any], key: str, path: _Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PhaseValidationError(f"{path.child(key)}: expected string")
    return value


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise PhaseValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _require_id(data: dict[str, Any], path: _Path, ids: set[str]) -> str:
    value = _require_value(data, "id", path)
    # Numeric ids are common in hand-written YAML; ids stay opaque strings.
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise PhaseValidationError(f"{path.child('id')}: expected non-empty string")
    if value in ids:
        raise PhaseValidationError(f"{path.child('id')}: duplicate phase id '{value}'")
    ids.add(value)
    return value
