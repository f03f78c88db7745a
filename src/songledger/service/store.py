"""The workspace store: one owned aggregate state with dispatch and subscribe."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from songledger.derive.prompt import format_lyric_outline, format_style_prompt
from songledger.ids import IdFactory, new_id
from songledger.models.builder import BuilderState
from songledger.models.workspace import (
    IterationDraft,
    ProjectDraft,
    ReleasePlanDraft,
    SnapshotDraft,
    SongDraft,
    TakeDraft,
    VersionDraft,
    Workspace,
)
from songledger.service import mutations
from songledger.service.reporting import Dashboard, build_dashboard
from songledger.service.selection import Selection, repair_selection

logger = logging.getLogger("songledger.store")

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreState:
    workspace: Workspace = field(default_factory=Workspace)
    builder: BuilderState = field(default_factory=BuilderState)
    selection: Selection = field(default_factory=Selection)


Action = Callable[[StoreState], StoreState]
Listener = Callable[[StoreState], None]


# ---------------------------------------------------------------------------
# WorkspaceStore
# ---------------------------------------------------------------------------


class WorkspaceStore:
    """Holds the ledger, builder form and selection for one session.

    Every change goes through :meth:`dispatch`, which applies a pure action,
    repairs the selection against the new tree and then notifies subscribers
    in registration order.  Dispatches are serialised with a re-entrant lock,
    so a listener may dispatch again without interleaving with another caller.
    """

    def __init__(
        self,
        state: StoreState | None = None,
        *,
        id_factory: IdFactory = new_id,
        clock: mutations.Clock = mutations.utcnow,
    ) -> None:
        self._lock = threading.RLock()
        initial = state or StoreState()
        self._state = replace(
            initial, selection=repair_selection(initial.workspace, initial.selection)
        )
        self._listeners: list[Listener] = []
        self._id_factory = id_factory
        self._clock = clock

    # -- helpers -------------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def workspace(self) -> Workspace:
        return self._state.workspace

    @property
    def builder(self) -> BuilderState:
        return self._state.builder

    @property
    def selection(self) -> Selection:
        return self._state.selection

    def dashboard(self) -> Dashboard:
        return build_dashboard(self._state.workspace)

    def _require_selection(self, *levels: str) -> tuple[str, ...] | None:
        selection = self._state.selection
        ids = tuple(getattr(selection, f"{level}_id") for level in levels)
        return None if any(i is None for i in ids) else ids

    # -- subscribe / dispatch ------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; the returned callable unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> StoreState:
        """Apply *action*, repair the selection and notify listeners.

        The new state is committed before listeners run.  A listener that
        raises is logged and the remaining listeners are still notified.
        """
        with self._lock:
            previous = self._state
            state = action(previous)
            selection = repair_selection(state.workspace, state.selection)
            if selection is not state.selection:
                state = replace(state, selection=selection)
            if (
                state.workspace is previous.workspace
                and state.builder is previous.builder
                and state.selection == previous.selection
            ):
                return previous
            self._state = state
            for listener in list(self._listeners):
                try:
                    listener(state)
                except Exception:
                    logger.exception("Store listener %r failed", listener)
            return state

    def update_workspace(self, fn: Callable[[Workspace], Workspace]) -> StoreState:
        return self.dispatch(lambda s: replace(s, workspace=fn(s.workspace)))

    def update_builder(self, fn: Callable[[BuilderState], BuilderState]) -> StoreState:
        return self.dispatch(lambda s: replace(s, builder=fn(s.builder)))

    def _create(self, fn: Callable[[Workspace], tuple[Workspace, str | None]]) -> str | None:
        created: list[str | None] = [None]

        def action(state: StoreState) -> StoreState:
            workspace, new_id_ = fn(state.workspace)
            created[0] = new_id_
            return replace(state, workspace=workspace)

        self.dispatch(action)
        return created[0]

    # -- selection -----------------------------------------------------------

    def select_project(self, project_id: str | None) -> StoreState:
        return self.dispatch(lambda s: replace(s, selection=Selection(project_id=project_id)))

    def select_song(self, song_id: str | None) -> StoreState:
        return self.dispatch(
            lambda s: replace(
                s, selection=Selection(project_id=s.selection.project_id, song_id=song_id)
            )
        )

    def select_version(self, version_id: str | None) -> StoreState:
        return self.dispatch(
            lambda s: replace(s, selection=replace(s.selection, version_id=version_id))
        )

    # -- public API ----------------------------------------------------------

    def create_project(self, draft: ProjectDraft) -> str | None:
        """Create a project and make it the active selection."""
        project_id = self._create(
            lambda ws: mutations.add_project(
                ws, draft, id_factory=self._id_factory, clock=self._clock
            )
        )
        if project_id is not None:
            logger.info("Created project %s", project_id)
            self.select_project(project_id)
        return project_id

    def create_song(self, draft: SongDraft) -> str | None:
        """Create a song under the selected project and select it."""
        path = self._require_selection("project")
        if path is None:
            return None
        (project_id,) = path
        builder = self._state.builder
        song_id = self._create(
            lambda ws: mutations.add_song(
                ws, project_id, draft, builder, id_factory=self._id_factory, clock=self._clock
            )
        )
        if song_id is not None:
            self.select_song(song_id)
        return song_id

    def create_version(self, draft: VersionDraft) -> str | None:
        """Snapshot the builder into a new version of the selected song."""
        path = self._require_selection("project", "song")
        if path is None:
            return None
        project_id, song_id = path
        builder = self._state.builder
        version_id = self._create(
            lambda ws: mutations.add_version(
                ws,
                project_id,
                song_id,
                draft,
                builder,
                id_factory=self._id_factory,
                clock=self._clock,
            )
        )
        if version_id is not None:
            self.select_version(version_id)
        return version_id

    def create_take(self, draft: TakeDraft) -> str | None:
        path = self._require_selection("project", "song", "version")
        if path is None:
            return None
        return self._create(
            lambda ws: mutations.add_take(ws, *path, draft, id_factory=self._id_factory)
        )

    def create_release_plan(self, draft: ReleasePlanDraft) -> str | None:
        path = self._require_selection("project", "song", "version")
        if path is None:
            return None
        return self._create(
            lambda ws: mutations.add_release_plan(ws, *path, draft, id_factory=self._id_factory)
        )

    def log_iteration(self, draft: IterationDraft) -> str | None:
        path = self._require_selection("project", "song", "version")
        if path is None:
            return None
        return self._create(
            lambda ws: mutations.add_iteration_entry(
                ws, *path, draft, id_factory=self._id_factory, clock=self._clock
            )
        )

    def snapshot_prompt(self) -> StoreState:
        """Record the builder's current style prompt on the selected version."""
        path = self._require_selection("project", "song", "version")
        if path is None:
            return self._state
        prompt = format_style_prompt(self._state.builder.form)
        return self.update_workspace(
            lambda ws: mutations.record_prompt_snapshot(ws, *path, prompt, clock=self._clock)
        )

    def keep_snapshot(self, draft: SnapshotDraft) -> str | None:
        """Keep a labelled prompt snapshot on the selected version."""
        path = self._require_selection("project", "song", "version")
        if path is None:
            return None
        return self._create(
            lambda ws: mutations.add_prompt_snapshot(
                ws, *path, draft, id_factory=self._id_factory, clock=self._clock
            )
        )

    def set_final_snapshot(self, snapshot_id: str) -> StoreState:
        path = self._require_selection("project", "song", "version")
        if path is None:
            return self._state
        return self.update_workspace(
            lambda ws: mutations.set_final_snapshot(ws, *path, snapshot_id)
        )

    def style_prompt(self) -> str:
        return format_style_prompt(self._state.builder.form)

    def lyric_outline(self) -> str:
        return format_lyric_outline(self._state.builder.form.lyric_sections)

    def delete_project(self, project_id: str) -> StoreState:
        logger.info("Deleting project %s", project_id)
        return self.update_workspace(lambda ws: mutations.remove_project(ws, project_id))

    def delete_song(self, project_id: str, song_id: str) -> StoreState:
        return self.update_workspace(lambda ws: mutations.remove_song(ws, project_id, song_id))

    def delete_version(self, project_id: str, song_id: str, version_id: str) -> StoreState:
        return self.update_workspace(
            lambda ws: mutations.remove_version(ws, project_id, song_id, version_id)
        )

    def toggle_qa(self, item_id: str) -> StoreState:
        path = self._require_selection("project", "song", "version")
        if path is None:
            return self._state
        return self.update_workspace(lambda ws: mutations.toggle_qa_check(ws, *path, item_id))

    def set_form_fields(self, **fields: Any) -> StoreState:
        return self.update_builder(lambda b: mutations.set_form_fields(b, fields))
