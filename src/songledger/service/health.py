"""Per-version health and song/project headline badges."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum

from songledger.models.workspace import Project, Song, Version

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")

LUFS_RANGE = (-14.0, -10.0)
TRUE_PEAK_RANGE = (-3.0, -0.8)


class HeadlineStatus(StrEnum):
    HEALTHY = "healthy"
    PENDING = "pending"
    ISSUE = "issue"
    NO_VERSIONS = "no-versions"
    NO_SONGS = "no-songs"


HEADLINE_LABELS: dict[HeadlineStatus, str] = {
    HeadlineStatus.HEALTHY: "Ready",
    HeadlineStatus.PENDING: "In progress",
    HeadlineStatus.ISSUE: "Needs attention",
    HeadlineStatus.NO_VERSIONS: "No versions",
    HeadlineStatus.NO_SONGS: "Empty",
}


@dataclass(frozen=True)
class QaSummary:
    total: int
    completed: int
    pending: list[str]

    @property
    def all_done(self) -> bool:
        return not self.pending


@dataclass(frozen=True)
class VersionHealth:
    qa: QaSummary
    expose_status: str
    lufs: float | None
    true_peak: float | None
    lufs_out_of_range: bool
    true_peak_out_of_range: bool
    missing_final_url: bool

    @property
    def expose_issue(self) -> bool:
        return self.expose_status == "issue"

    @property
    def expose_warning(self) -> bool:
        return self.expose_status == "warning"

    @property
    def has_issues(self) -> bool:
        return (
            not self.qa.all_done
            or self.expose_issue
            or self.missing_final_url
            or self.lufs_out_of_range
            or self.true_peak_out_of_range
        )


@dataclass(frozen=True)
class Headline:
    status: HeadlineStatus
    song_counts: dict[HeadlineStatus, int] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return HEADLINE_LABELS[self.status]


def parse_numeric(value: str | None) -> float | None:
    """First number found in a meter reading such as ``"-11.6 LUFS"``."""
    if not value:
        return None
    match = _NUMBER_RE.search(value)
    return float(match.group(0)) if match else None


def qa_summary(checks: dict[str, bool]) -> QaSummary:
    return QaSummary(
        total=len(checks),
        completed=sum(1 for checked in checks.values() if checked),
        pending=[key for key, checked in checks.items() if not checked],
    )


def version_health(version: Version) -> VersionHealth:
    """Health of one version.

    Measured loudness falls back to the EXPOSE readings when the version has
    none of its own.  Out-of-range means integrated loudness outside -14..-10
    LUFS or a true peak outside -3..-0.8 dBTP; unparseable values never count.
    """
    expose = version.mastering_profile.expose
    lufs = parse_numeric(version.lufs or expose.get("lufsIntegrated"))
    true_peak = parse_numeric(version.true_peak or expose.get("truePeak"))
    return VersionHealth(
        qa=qa_summary(version.qa_checks),
        expose_status=expose.get("status", ""),
        lufs=lufs,
        true_peak=true_peak,
        lufs_out_of_range=lufs is not None and not LUFS_RANGE[0] <= lufs <= LUFS_RANGE[1],
        true_peak_out_of_range=(
            true_peak is not None and not TRUE_PEAK_RANGE[0] <= true_peak <= TRUE_PEAK_RANGE[1]
        ),
        missing_final_url=not version.final_release_url,
    )


def song_headline(song: Song) -> Headline:
    """Badge for a song, judged on its latest version."""
    if not song.versions:
        return Headline(HeadlineStatus.NO_VERSIONS)
    health = version_health(song.versions[-1])
    if not health.has_issues:
        return Headline(HeadlineStatus.HEALTHY)
    if health.expose_issue or health.missing_final_url:
        return Headline(HeadlineStatus.ISSUE)
    return Headline(HeadlineStatus.PENDING)


def project_headline(project: Project) -> Headline:
    if not project.songs:
        return Headline(HeadlineStatus.NO_SONGS)
    counts = Counter(song_headline(song).status for song in project.songs)
    song_counts = {
        status: counts.get(status, 0)
        for status in (
            HeadlineStatus.HEALTHY,
            HeadlineStatus.PENDING,
            HeadlineStatus.ISSUE,
            HeadlineStatus.NO_VERSIONS,
        )
    }
    if counts[HeadlineStatus.ISSUE]:
        status = HeadlineStatus.ISSUE
    elif counts[HeadlineStatus.PENDING] or counts[HeadlineStatus.NO_VERSIONS]:
        status = HeadlineStatus.PENDING
    else:
        status = HeadlineStatus.HEALTHY
    return Headline(status, song_counts)
