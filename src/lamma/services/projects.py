"""Managed projects: local checkouts symlinked into a site's wp-content."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from lamma_common import ManagedProject

from lamma.errors import LammaError

log = logging.getLogger(__name__)


def load_projects(path: Path) -> list[ManagedProject]:
    """Read ``~/.woa_projects.json``. A missing file means no projects."""
    if not path.exists():
        return []
    try:
        raw = json.loads(path.read_text())
        projects = [ManagedProject.model_validate(p) for p in raw or []]
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        raise LammaError(
            f"There is an error in your {path} file. "
            f"Please ensure that no trailing commas exist in the configuration.\n{exc}"
        ) from exc
    if not projects:
        log.warning("Projects are empty in %s", path)
    return projects


def themes(projects: list[ManagedProject]) -> list[ManagedProject]:
    return [p for p in projects if p.is_theme]


def plugins(projects: list[ManagedProject]) -> list[ManagedProject]:
    return [p for p in projects if p.is_plugin]


def find(projects: list[ManagedProject], value: str, *, kind: str) -> ManagedProject | None:
    """Return the single project with ``value`` of ``kind`` (``theme`` or ``plugin``)."""
    pool = themes(projects) if kind == "theme" else plugins(projects)
    matches = [p for p in pool if p.value == value]
    return matches[0] if len(matches) == 1 else None


def link(project: ManagedProject, site_path: Path) -> Path | None:
    """Symlink a project into the site. Returns the link, or None if it already exists."""
    target = project.target_in(site_path)
    if target.exists() or target.is_symlink():
        log.info("%s already exists, not linking", target)
        return None
    target.parent.mkdir(parents=True, exist_ok=True)
    target.symlink_to(project.local_dir, target_is_directory=True)
    return target


def unlink_managed_plugins(projects: list[ManagedProject], site_path: Path) -> list[Path]:
    """Remove every managed-plugin symlink from the site. Real directories are kept."""
    removed = []
    for project in plugins(projects):
        target = project.target_in(site_path)
        if target.is_symlink():
            target.unlink()
            removed.append(target)
    return removed
