"""Active project/song/version selection and its repair rule."""

from __future__ import annotations

from dataclasses import dataclass

from songledger.models.workspace import Workspace


@dataclass(frozen=True)
class Selection:
    project_id: str | None = None
    song_id: str | None = None
    version_id: str | None = None


def _keep_or_first(selected: str | None, ids: list[str]) -> str | None:
    if selected is not None and selected in ids:
        return selected
    return ids[0] if ids else None


def repair_selection(workspace: Workspace, selection: Selection) -> Selection:
    """Point *selection* at records that still exist.

    Each level keeps its id when the parent's children still contain it and
    otherwise falls back to the parent's first child, or ``None`` when there
    are no children.  The rule cascades project, then song, then version.
    """
    project_id = _keep_or_first(selection.project_id, [p.id for p in workspace.projects])
    project = workspace.find_project(project_id) if project_id else None

    songs = project.songs if project else []
    song_id = _keep_or_first(selection.song_id, [s.id for s in songs])
    song = next((s for s in songs if s.id == song_id), None)

    versions = song.versions if song else []
    version_id = _keep_or_first(selection.version_id, [v.id for v in versions])

    repaired = Selection(project_id, song_id, version_id)
    return selection if repaired == selection else repaired
