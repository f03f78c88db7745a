"""Read-side dashboard projection over the whole ledger tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from songledger.models.workspace import ReleaseStatus, Version, Workspace

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


class ReminderLevel(StrEnum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class DashboardStats:
    projects: int
    songs: int
    versions: int


@dataclass(frozen=True)
class ProjectReadiness:
    """Project counts by release readiness.

    ``in_progress`` is the remainder ``total - ready - attention`` floored at
    zero.  A project can satisfy both the ready and the attention predicate, in
    which case it is counted twice and the remainder undercounts.
    """

    total: int
    ready: int
    attention: int
    in_progress: int


@dataclass(frozen=True)
class Reminder:
    id: str
    level: ReminderLevel
    message: str


@dataclass(frozen=True)
class UpcomingRelease:
    id: str
    song_title: str
    version_label: str
    platform: str
    release_date: str


@dataclass(frozen=True)
class Dashboard:
    stats: DashboardStats
    readiness: ProjectReadiness
    reminders: list[Reminder] = field(default_factory=list)
    upcoming: list[UpcomingRelease] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


def _qa_incomplete(version: Version) -> bool:
    return not all(version.qa_checks.values())


def compute_stats(workspace: Workspace) -> DashboardStats:
    songs = [song for project in workspace.projects for song in project.songs]
    return DashboardStats(
        projects=len(workspace.projects),
        songs=len(songs),
        versions=sum(len(song.versions) for song in songs),
    )


def compute_readiness(workspace: Workspace) -> ProjectReadiness:
    ready = 0
    attention = 0
    for project in workspace.projects:
        versions = [v for song in project.songs for v in song.versions]
        is_ready = bool(project.songs) and all(
            song.versions and all(v.final_release_url for v in song.versions)
            for song in project.songs
        )
        needs_attention = any(not v.final_release_url or _qa_incomplete(v) for v in versions)
        ready += is_ready
        attention += needs_attention
    total = len(workspace.projects)
    return ProjectReadiness(
        total=total,
        ready=ready,
        attention=attention,
        in_progress=max(total - ready - attention, 0),
    )


def compute_reminders(workspace: Workspace) -> list[Reminder]:
    """Reminders in tree order; ids are derived from the record they point at."""
    reminders: list[Reminder] = []
    for project in workspace.projects:
        for song in project.songs:
            if not song.versions:
                reminders.append(
                    Reminder(
                        id=f"reminder_{song.id}_no_versions",
                        level=ReminderLevel.INFO,
                        message=(
                            f"Create the first version for “{song.title}” in {project.name}."
                        ),
                    )
                )
                continue
            for version in song.versions:
                where = f"“{song.title}” – {version.label}"
                if not version.final_release_url:
                    reminders.append(
                        Reminder(
                            id=f"reminder_{version.id}_final_url",
                            level=ReminderLevel.WARNING,
                            message=f"Add the final release URL for {where}.",
                        )
                    )
                if _qa_incomplete(version):
                    reminders.append(
                        Reminder(
                            id=f"reminder_{version.id}_qa",
                            level=ReminderLevel.WARNING,
                            message=f"Complete QA checklist for {where}.",
                        )
                    )
                for plan in version.release_plans:
                    if plan.status == ReleaseStatus.SCHEDULED and not plan.release_date:
                        reminders.append(
                            Reminder(
                                id=f"reminder_{plan.id}_release_date",
                                level=ReminderLevel.INFO,
                                message=f"Add release date to scheduled plan for {where}.",
                            )
                        )
    return reminders


def compute_upcoming(workspace: Workspace) -> list[UpcomingRelease]:
    """Scheduled plans with a date, ascending by the date string."""
    upcoming = [
        UpcomingRelease(
            id=f"{version.id}_{plan.id}",
            song_title=song.title,
            version_label=version.label,
            platform=plan.platform,
            release_date=plan.release_date,
        )
        for project in workspace.projects
        for song in project.songs
        for version in song.versions
        for plan in version.release_plans
        if plan.status == ReleaseStatus.SCHEDULED and plan.release_date
    ]
    return sorted(upcoming, key=lambda item: item.release_date)


def build_dashboard(workspace: Workspace) -> Dashboard:
    return Dashboard(
        stats=compute_stats(workspace),
        readiness=compute_readiness(workspace),
        reminders=compute_reminders(workspace),
        upcoming=compute_upcoming(workspace),
    )
