"""Core ledger records: projects, songs, versions, takes and release plans."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from songledger.catalog import default_qa_checks


def _utcnow() -> datetime:
    return datetime.now(UTC)


class WorkflowStatus(StrEnum):
    DRAFT = "draft"
    CANDIDATE = "candidate"
    APPROVED = "approved"
    REMASTERED = "remastered"
    RELEASED = "released"
    LIVESET = "liveset"


class WorkflowStage(StrEnum):
    PROMPT = "prompt"
    GENERATION = "generation"
    MASTERING = "mastering"
    RELEASE = "release"


class ReleaseStatus(StrEnum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    RELEASED = "released"
    LIVE = "live"


class LedgerModel(BaseModel):
    """Immutable record; serialised with camelCase keys, accepts both spellings."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Take(LedgerModel):
    """One generated audio candidate for a version."""

    id: str = Field(min_length=1)
    version_id: str = Field(min_length=1)
    label: str
    share_url: str | None = None
    notes: str | None = None
    selected: bool = False


class ReleasePlan(LedgerModel):
    """A planned or completed release on one platform."""

    id: str = Field(min_length=1)
    platform: str
    url: str | None = None
    release_date: str | None = None
    status: ReleaseStatus = ReleaseStatus.DRAFT
    notes: str | None = None


class IterationEntry(LedgerModel):
    """One step in a version's generation history."""

    id: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=_utcnow)
    prompt_summary: str | None = None
    suno_url: str | None = None
    seed: str | None = None
    notes: str | None = None
    enhancements: list[str] = []


class PromptSnapshot(LedgerModel):
    """A labelled copy of a prompt (and optionally lyrics) kept on a version."""

    id: str = Field(min_length=1)
    label: str
    created_at: datetime = Field(default_factory=_utcnow)
    prompt: str = Field(min_length=1)
    lyrics: str | None = None
    notes: str | None = None


class MasteringProfile(LedgerModel):
    """Mastering targets plus the chain settings and meter readings behind them."""

    target_lufs: str | None = None
    target_true_peak: str | None = None
    bandlab: dict[str, str] = {}
    expose: dict[str, str] = {}


class Version(LedgerModel):
    """A semantic-versioned generation of a song with its prompt, QA and releases."""

    id: str = Field(min_length=1)
    song_id: str = Field(min_length=1)
    label: str
    created_at: datetime = Field(default_factory=_utcnow)
    status: WorkflowStatus | WorkflowStage = WorkflowStatus.DRAFT
    seed: str | None = None
    bpm: str | None = None
    key: str | None = None
    duration: str | None = None
    structure_notes: str | None = None

    # Prompt & lyrics
    prompt: str | None = None
    final_prompt: str | None = None
    exclude: str | None = None
    meta_tags: list[str] = []
    lyric_tags: str | None = None
    lyrics: str | None = None
    final_lyrics: str | None = None
    notes: str | None = None

    # Mastering
    lufs: str | None = None
    true_peak: str | None = None
    mastering_profile: MasteringProfile = MasteringProfile()
    mastering_notes: str | None = None
    expose_log: str | None = None
    spectrum_notes: str | None = None
    qa_checks: dict[str, bool] = Field(default_factory=default_qa_checks)

    # Links
    share_url: str | None = None
    suno_url: str | None = None
    soundcloud_url: str | None = None
    final_release_url: str | None = None

    # Logs and children
    prompt_history: list[str] = []
    prompt_snapshots: list[PromptSnapshot] = []
    final_prompt_id: str | None = None
    final_lyrics_id: str | None = None
    iteration_timeline: list[IterationEntry] = []
    takes: list[Take] = []
    release_plans: list[ReleasePlan] = []


class Song(LedgerModel):
    """A song within a project; owns its versions."""

    id: str = Field(min_length=1)
    project_id: str = Field(min_length=1)
    title: str
    created_at: datetime = Field(default_factory=_utcnow)
    bpm: str | None = None
    key: str | None = None
    structure: str | None = None
    status: WorkflowStatus = WorkflowStatus.DRAFT
    references: list[str] = []
    tags: list[str] = []
    notes: str | None = None
    lyric_brief: str | None = None
    versions: list[Version] = []


class Project(LedgerModel):
    """An album or project; the top of the hierarchy."""

    id: str = Field(min_length=1)
    name: str
    description: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    release_target_date: str | None = None
    tags: list[str] = []
    songs: list[Song] = []


class Workspace(LedgerModel):
    """The whole entity tree."""

    projects: list[Project] = []

    def find_project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def find_song(self, project_id: str, song_id: str) -> Song | None:
        project = self.find_project(project_id)
        if project is None:
            return None
        return next((s for s in project.songs if s.id == song_id), None)

    def find_version(self, project_id: str, song_id: str, version_id: str) -> Version | None:
        song = self.find_song(project_id, song_id)
        if song is None:
            return None
        return next((v for v in song.versions if v.id == version_id), None)


# ---------------------------------------------------------------------------
# Drafts: caller-supplied values for create operations
# ---------------------------------------------------------------------------


class ProjectDraft(LedgerModel):
    name: str = ""
    notes: str = ""
    description: str = ""
    release_target_date: str = ""


class SongDraft(LedgerModel):
    title: str = ""
    bpm: str = ""
    key: str = ""
    structure: str = ""
    references: str = ""  # newline- or comma-separated
    notes: str = ""


class VersionDraft(LedgerModel):
    label: str = ""
    seed: str = ""
    bpm: str = ""
    key: str = ""
    duration: str = ""
    structure_notes: str = ""
    share_url: str = ""
    notes: str = ""


class TakeDraft(LedgerModel):
    label: str = ""
    share_url: str = ""
    notes: str = ""
    selected: bool = False


class ReleasePlanDraft(LedgerModel):
    platform: str = "soundcloud"
    url: str = ""
    release_date: str = ""
    status: ReleaseStatus = ReleaseStatus.DRAFT
    notes: str = ""


class SnapshotDraft(LedgerModel):
    label: str = ""
    prompt: str = ""
    lyrics: str = ""
    notes: str = ""
    mark_final: bool = False


class IterationDraft(LedgerModel):
    summary: str = ""
    suno_url: str = ""
    seed: str = ""
    enhancements: str = ""  # comma-separated
    notes: str = ""
