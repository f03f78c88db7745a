"""End-to-end ledger workflows through the store, persistence and reporting."""

from __future__ import annotations

from pathlib import Path

from songledger.bootstrap import create_store
from songledger.catalog import QA_ITEM_IDS
from songledger.models import (
    ProjectDraft,
    ReleasePlanDraft,
    SnapshotDraft,
    SongDraft,
    TakeDraft,
    VersionDraft,
)
from songledger.service.export import build_export_bundle, write_export_bundle
from songledger.service.mutations import update_version
from songledger.service.store import WorkspaceStore
from songledger.settings import Settings
from songledger.storage import InMemoryKeyValueStore
from tests.conftest import CountingIds, SteppingClock


def _ids_under(store: WorkspaceStore, project_id: str) -> set[str]:
    project = store.workspace.find_project(project_id)
    if project is None:
        return set()
    found = {project.id}
    for song in project.songs:
        found.add(song.id)
        for version in song.versions:
            found.add(version.id)
            found.update(t.id for t in version.takes)
            found.update(p.id for p in version.release_plans)
    return found


class TestReadinessLifecycle:
    def test_reminder_then_attention_then_ready(self) -> None:
        store = WorkspaceStore(id_factory=CountingIds(), clock=SteppingClock())
        project_id = store.create_project(ProjectDraft(name="A"))
        song_id = store.create_song(SongDraft(title="X"))
        assert project_id and song_id

        dashboard = store.dashboard()
        no_versions = [r for r in dashboard.reminders if r.id.endswith("_no_versions")]
        assert len(no_versions) == 1
        assert "“X”" in no_versions[0].message

        version_id = store.create_version(VersionDraft())
        assert version_id
        assert store.dashboard().readiness.attention == 1
        assert store.dashboard().readiness.ready == 0

        store.update_workspace(
            lambda ws: update_version(
                ws, project_id, song_id, version_id, {"final_release_url": "https://sc/x"}
            )
        )
        for item_id in sorted(QA_ITEM_IDS):
            store.toggle_qa(item_id)
        readiness = store.dashboard().readiness
        assert (readiness.ready, readiness.attention, readiness.in_progress) == (1, 0, 0)
        assert store.dashboard().reminders == []


class TestCascade:
    def test_delete_project_leaves_no_orphans(self) -> None:
        store = WorkspaceStore(id_factory=CountingIds())
        keep = store.create_project(ProjectDraft(name="Keep"))
        store.create_song(SongDraft(title="K"))
        doomed = store.create_project(ProjectDraft(name="Doomed"))
        store.create_song(SongDraft(title="D1"))
        store.create_version(VersionDraft())
        store.create_take(TakeDraft())
        store.create_release_plan(ReleasePlanDraft(release_date="2025-05-01", status="scheduled"))
        assert doomed is not None
        removed = _ids_under(store, doomed)
        assert len(removed) == 5

        store.delete_project(doomed)

        remaining = _ids_under(store, keep)  # type: ignore[arg-type]
        assert removed.isdisjoint(remaining)
        assert store.workspace.find_project(doomed) is None
        assert store.dashboard().upcoming == []
        assert store.selection.project_id == keep


class TestPersistedSession:
    def test_session_survives_restart_and_exports(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, data_dir=tmp_path / "data")
        store = create_store(settings, id_factory=CountingIds())
        store.set_form_fields(genre="Doom", mix_notes=["a", "b", "a"])
        store.create_project(ProjectDraft(name="Album One"))
        store.create_song(SongDraft(title="Opening"))
        store.create_version(VersionDraft(label="v0.1.0"))
        store.create_release_plan(ReleasePlanDraft(release_date="2025-02-01", status="scheduled"))
        store.create_release_plan(
            ReleasePlanDraft(platform="bandcamp", release_date="2025-01-20", status="scheduled")
        )

        reopened = create_store(settings)
        assert reopened.builder.form.genre == "Doom"
        assert [u.release_date for u in reopened.dashboard().upcoming] == [
            "2025-01-20",
            "2025-02-01",
        ]
        project = reopened.workspace.projects[0]
        song = project.songs[0]
        version = song.versions[0]
        assert "[MixNotes=a, b]" in (version.prompt or "").split("\n")

        bundle = build_export_bundle(project, song, version)
        written = write_export_bundle(bundle, tmp_path / "export")
        assert {p.name for p in written} == {
            "album_one_opening_v0_1_0_PROMPT.txt",
            "album_one_opening_v0_1_0_LYRICS.txt",
            "album_one_opening_v0_1_0_META.txt",
            "album_one_opening_v0_1_0_NOTES.md",
        }

    def test_final_snapshot_drives_export(self, tmp_path: Path) -> None:
        settings = Settings(_env_file=None, data_dir=tmp_path / "data")
        store = create_store(settings, id_factory=CountingIds())
        store.create_project(ProjectDraft(name="Album One"))
        store.create_song(SongDraft(title="Opening"))
        store.create_version(VersionDraft(label="v0.1.0"))
        chosen = store.keep_snapshot(
            SnapshotDraft(label="Keeper", prompt="[Genre=Doom]", lyrics="[Verse]\nash")
        )
        store.keep_snapshot(SnapshotDraft(label="Later", prompt="[Genre=Sludge]"))
        assert chosen is not None
        store.set_final_snapshot(chosen)

        reopened = create_store(settings)
        project = reopened.workspace.projects[0]
        song = project.songs[0]
        version = song.versions[0]
        assert version.prompt == "[Genre=Sludge]"
        bundle = build_export_bundle(project, song, version)
        assert bundle.files["album_one_opening_v0_1_0_PROMPT.txt"] == "[Genre=Doom]"
        assert bundle.files["album_one_opening_v0_1_0_LYRICS.txt"] == "[Verse]\nash"

    def test_sample_seed_dashboard(self) -> None:
        settings = Settings(_env_file=None, seed_sample_workspace=True)
        store = create_store(settings, storage=InMemoryKeyValueStore())
        dashboard = store.dashboard()
        assert dashboard.readiness.ready == 1
        assert dashboard.reminders == []
        assert [u.platform for u in dashboard.upcoming] == ["bandcamp"]
