"""Shared test fixtures for SongLedger."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from songledger.models import (
    BuilderState,
    ProjectDraft,
    ReleasePlanDraft,
    SongDraft,
    TakeDraft,
    VersionDraft,
    Workspace,
)
from songledger.service import mutations

BASE_TIME = datetime(2025, 1, 12, 10, 0, tzinfo=UTC)


class CountingIds:
    """Deterministic id factory: ``project_1``, ``song_2``, ..."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter)}"


class SteppingClock:
    """Returns BASE_TIME, then one minute later on every call."""

    def __init__(self, start: datetime = BASE_TIME) -> None:
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(minutes=1)
        return now


@pytest.fixture
def ids() -> CountingIds:
    return CountingIds()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def builder() -> BuilderState:
    return BuilderState()


def build_ledger(
    id_factory: Callable[[str], str], clock: Callable[[], datetime]
) -> tuple[Workspace, dict[str, str]]:
    """Project A with song X (one version, one take, two plans) and song Y (empty).

    Returns the workspace and a name -> id map.
    """
    builder = BuilderState()
    ws = Workspace()
    ws, project = mutations.add_project(
        ws, ProjectDraft(name="A"), id_factory=id_factory, clock=clock
    )
    ws, song_x = mutations.add_song(
        ws, project, SongDraft(title="X"), builder, id_factory=id_factory, clock=clock
    )
    ws, song_y = mutations.add_song(
        ws, project, SongDraft(title="Y"), builder, id_factory=id_factory, clock=clock
    )
    ws, version = mutations.add_version(
        ws, project, song_x, VersionDraft(), builder, id_factory=id_factory, clock=clock
    )
    ws, take = mutations.add_take(ws, project, song_x, version, TakeDraft(), id_factory=id_factory)
    ws, plan_late = mutations.add_release_plan(
        ws,
        project,
        song_x,
        version,
        ReleasePlanDraft(release_date="2025-02-01", status="scheduled"),
        id_factory=id_factory,
    )
    ws, plan_early = mutations.add_release_plan(
        ws,
        project,
        song_x,
        version,
        ReleasePlanDraft(platform="bandcamp", release_date="2025-01-20", status="scheduled"),
        id_factory=id_factory,
    )
    names = {
        "project": project,
        "song_x": song_x,
        "song_y": song_y,
        "version": version,
        "take": take,
        "plan_late": plan_late,
        "plan_early": plan_early,
    }
    assert all(names.values())
    return ws, names  # type: ignore[return-value]


@pytest.fixture
def ledger(ids: CountingIds, clock: SteppingClock) -> tuple[Workspace, dict[str, str]]:
    return build_ledger(ids, clock)


SAMPLE_SEED_YAML = """\
projects:
  - id: p1
    name: Demo
    songs:
      - id: s1
        projectId: p1
        title: First
        versions:
          - id: v1
            songId: s1
            label: v1.0.0
            releasePlans:
              - id: r1
                platform: soundcloud
                releaseDate: "2025-03-01"
                status: scheduled
"""
