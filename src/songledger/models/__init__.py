"""Pydantic domain models for SongLedger."""

from songledger.models.builder import BuilderState, PromptForm, PromptMode
from songledger.models.errors import LedgerIssue, SourceSpan
from songledger.models.workspace import (
    IterationDraft,
    IterationEntry,
    MasteringProfile,
    Project,
    ProjectDraft,
    PromptSnapshot,
    ReleasePlan,
    ReleasePlanDraft,
    ReleaseStatus,
    SnapshotDraft,
    Song,
    SongDraft,
    Take,
    TakeDraft,
    Version,
    VersionDraft,
    WorkflowStage,
    WorkflowStatus,
    Workspace,
)

__all__ = [
    "BuilderState",
    "IterationDraft",
    "IterationEntry",
    "LedgerIssue",
    "MasteringProfile",
    "Project",
    "ProjectDraft",
    "PromptForm",
    "PromptMode",
    "PromptSnapshot",
    "ReleasePlan",
    "ReleasePlanDraft",
    "ReleaseStatus",
    "SnapshotDraft",
    "Song",
    "SongDraft",
    "SourceSpan",
    "Take",
    "TakeDraft",
    "Version",
    "VersionDraft",
    "WorkflowStage",
    "WorkflowStatus",
    "Workspace",
]
