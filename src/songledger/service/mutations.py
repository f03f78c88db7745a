"""Path-addressed edits of the ledger tree with structural sharing.

Every function takes a :class:`Workspace` and returns a new one.  Only the
records on the addressed path are copied; every other record (and every list
not on the path) is carried over by identity.  A path that does not resolve
returns the input workspace object unchanged.

Create functions return ``(workspace, new_id)``; ``new_id`` is ``None`` when
nothing was created (missing parent or a blank required field).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, TypeVar

from songledger.catalog import (
    QA_ITEM_IDS,
    SECTION_ORDER,
    checklist_key,
    default_qa_checks,
    get_template,
)
from songledger.derive.prompt import (
    canonical_sections,
    format_lyric_outline,
    format_meta_tags,
    format_style_prompt,
    parse_comma_list,
    parse_references,
)
from songledger.ids import IdFactory, new_id
from songledger.models.builder import BuilderState, PromptForm
from songledger.models.workspace import (
    IterationDraft,
    IterationEntry,
    LedgerModel,
    MasteringProfile,
    Project,
    ProjectDraft,
    PromptSnapshot,
    ReleasePlan,
    ReleasePlanDraft,
    SnapshotDraft,
    Song,
    SongDraft,
    Take,
    TakeDraft,
    Version,
    VersionDraft,
    WorkflowStatus,
    Workspace,
)

R = TypeVar("R", bound=LedgerModel)

Change = LedgerModel | Callable[[Any], Any] | Mapping[str, Any]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


def _blank_to_none(value: str) -> str | None:
    value = value.strip()
    return value or None


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def _replace_in(items: list[R], item_id: str, fn: Callable[[R], R | None]) -> list[R] | None:
    """Copy of *items* with the record *item_id* replaced by ``fn(record)``.

    Returns ``None`` when the id is absent or *fn* declines the edit.
    """
    for index, item in enumerate(items):
        if item.id == item_id:  # type: ignore[attr-defined]
            updated = fn(item)
            if updated is None or updated is item:
                return None
            return [*items[:index], updated, *items[index + 1 :]]
    return None


def _without(items: list[R], item_id: str) -> list[R] | None:
    remaining = [item for item in items if item.id != item_id]  # type: ignore[attr-defined]
    if len(remaining) == len(items):
        return None
    return remaining


def _edit_child(
    parent: R, field: str, child_id: str, fn: Callable[[Any], Any | None]
) -> R | None:
    items = _replace_in(getattr(parent, field), child_id, fn)
    if items is None:
        return None
    return parent.model_copy(update={field: items})


def _edit_project(
    workspace: Workspace, project_id: str, fn: Callable[[Project], Project | None]
) -> Workspace:
    projects = _replace_in(workspace.projects, project_id, fn)
    if projects is None:
        return workspace
    return workspace.model_copy(update={"projects": projects})


def _edit_song(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    fn: Callable[[Song], Song | None],
) -> Workspace:
    return _edit_project(
        workspace, project_id, lambda project: _edit_child(project, "songs", song_id, fn)
    )


def _edit_version(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    fn: Callable[[Version], Version | None],
) -> Workspace:
    return _edit_song(
        workspace,
        project_id,
        song_id,
        lambda song: _edit_child(song, "versions", version_id, fn),
    )


# Fields that change only through their own operations: child collections
# (created with generated ids and parent ids) and the final-snapshot links.
_PROJECT_OWNED = ("songs",)
_SONG_OWNED = ("versions",)
_VERSION_OWNED = (
    "takes",
    "release_plans",
    "iteration_timeline",
    "prompt_snapshots",
    "prompt_history",
    "final_prompt_id",
    "final_lyrics_id",
)


def _apply_change(
    record: R, change: Change, pinned: Iterable[str], owned: Iterable[str] = ()
) -> R:
    """Resolve *change* against *record*.

    *pinned* fields keep their value whatever the change says.  *owned* fields
    are pinned too, and naming one in a mapping is an error.
    """
    owned = tuple(owned)
    if isinstance(change, LedgerModel):
        updated = change
    elif isinstance(change, Mapping):
        fields = type(record).model_fields
        unknown = sorted(set(change) - set(fields))
        if unknown:
            raise ValueError(
                f"Unknown field(s) for {type(record).__name__}: {', '.join(unknown)}"
            )
        managed = sorted(set(change) & set(owned))
        if managed:
            raise ValueError(
                f"{type(record).__name__} field(s) {', '.join(managed)} "
                "can only be changed through their own operations"
            )
        values = {name: getattr(record, name) for name in fields}
        values.update(change)
        updated = type(record).model_validate(values)
    else:
        updated = change(record)

    pins = {
        name: getattr(record, name)
        for name in pinned
        if getattr(updated, name) != getattr(record, name)
    }
    pins.update(
        {
            name: getattr(record, name)
            for name in owned
            if getattr(updated, name) is not getattr(record, name)
        }
    )
    if pins:
        updated = updated.model_copy(update=pins)
    return updated  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def add_project(
    workspace: Workspace,
    draft: ProjectDraft,
    *,
    id_factory: IdFactory = new_id,
    clock: Clock = utcnow,
) -> tuple[Workspace, str | None]:
    name = draft.name.strip()
    if not name:
        return workspace, None
    project = Project(
        id=id_factory("project"),
        name=name,
        notes=_blank_to_none(draft.notes),
        description=_blank_to_none(draft.description),
        release_target_date=_blank_to_none(draft.release_target_date),
        created_at=clock(),
    )
    return workspace.model_copy(update={"projects": [*workspace.projects, project]}), project.id


def update_project(workspace: Workspace, project_id: str, change: Change) -> Workspace:
    return _edit_project(
        workspace, project_id, lambda p: _apply_change(p, change, ("id",), _PROJECT_OWNED)
    )


def remove_project(workspace: Workspace, project_id: str) -> Workspace:
    projects = _without(workspace.projects, project_id)
    if projects is None:
        return workspace
    return workspace.model_copy(update={"projects": projects})


# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------


def add_song(
    workspace: Workspace,
    project_id: str,
    draft: SongDraft,
    builder: BuilderState | None = None,
    *,
    id_factory: IdFactory = new_id,
    clock: Clock = utcnow,
) -> tuple[Workspace, str | None]:
    """Append a song to a project; the structure falls back to the builder's."""
    title = draft.title.strip()
    if not title or workspace.find_project(project_id) is None:
        return workspace, None
    default_structure = _blank_to_none(builder.form.structure) if builder is not None else None
    song = Song(
        id=id_factory("song"),
        project_id=project_id,
        title=title,
        created_at=clock(),
        bpm=_blank_to_none(draft.bpm),
        key=_blank_to_none(draft.key),
        structure=_blank_to_none(draft.structure) or default_structure,
        references=parse_references(draft.references),
        notes=_blank_to_none(draft.notes),
        status=WorkflowStatus.DRAFT,
    )
    updated = _edit_project(
        workspace, project_id, lambda p: p.model_copy(update={"songs": [*p.songs, song]})
    )
    return updated, song.id


def update_song(workspace: Workspace, project_id: str, song_id: str, change: Change) -> Workspace:
    return _edit_song(
        workspace,
        project_id,
        song_id,
        lambda s: _apply_change(s, change, ("id", "project_id"), _SONG_OWNED),
    )


def remove_song(workspace: Workspace, project_id: str, song_id: str) -> Workspace:
    def drop(project: Project) -> Project | None:
        songs = _without(project.songs, song_id)
        return None if songs is None else project.model_copy(update={"songs": songs})

    return _edit_project(workspace, project_id, drop)


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


def snapshot_version(
    version_id: str,
    song: Song,
    draft: VersionDraft,
    builder: BuilderState,
    created_at: datetime,
) -> Version:
    """Build a new version from the draft and the current builder state."""
    form: PromptForm = builder.form
    return Version(
        id=version_id,
        song_id=song.id,
        label=draft.label.strip() or f"v1.0.{len(song.versions)}",
        created_at=created_at,
        status=WorkflowStatus.DRAFT,
        seed=_blank_to_none(draft.seed),
        bpm=_blank_to_none(draft.bpm) or _blank_to_none(form.tempo),
        key=_blank_to_none(draft.key) or _blank_to_none(form.key),
        duration=_blank_to_none(draft.duration),
        structure_notes=_blank_to_none(draft.structure_notes) or _blank_to_none(form.structure),
        prompt=format_style_prompt(form),
        exclude=_blank_to_none(form.exclude),
        meta_tags=list(builder.meta_tags),
        lyric_tags=format_meta_tags(builder.meta_tags),
        lyrics=format_lyric_outline(form.lyric_sections),
        share_url=_blank_to_none(draft.share_url),
        notes=_blank_to_none(draft.notes),
        qa_checks=default_qa_checks(),
    )


def add_version(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    draft: VersionDraft,
    builder: BuilderState,
    *,
    id_factory: IdFactory = new_id,
    clock: Clock = utcnow,
) -> tuple[Workspace, str | None]:
    song = workspace.find_song(project_id, song_id)
    if song is None:
        return workspace, None
    version = snapshot_version(id_factory("version"), song, draft, builder, clock())
    updated = _edit_song(
        workspace,
        project_id,
        song_id,
        lambda s: s.model_copy(update={"versions": [*s.versions, version]}),
    )
    return updated, version.id


def update_version(
    workspace: Workspace, project_id: str, song_id: str, version_id: str, change: Change
) -> Workspace:
    return _edit_version(
        workspace,
        project_id,
        song_id,
        version_id,
        lambda v: _apply_change(v, change, ("id", "song_id"), _VERSION_OWNED),
    )


def remove_version(
    workspace: Workspace, project_id: str, song_id: str, version_id: str
) -> Workspace:
    def drop(song: Song) -> Song | None:
        versions = _without(song.versions, version_id)
        return None if versions is None else song.model_copy(update={"versions": versions})

    return _edit_song(workspace, project_id, song_id, drop)


def toggle_qa_check(
    workspace: Workspace, project_id: str, song_id: str, version_id: str, item_id: str
) -> Workspace:
    """Flip one QA gate.  Ids outside the fixed QA item set are ignored."""
    if item_id not in QA_ITEM_IDS:
        return workspace

    def flip(version: Version) -> Version:
        checks = {**version.qa_checks, item_id: not version.qa_checks.get(item_id, False)}
        return version.model_copy(update={"qa_checks": checks})

    return _edit_version(workspace, project_id, song_id, version_id, flip)


def _history_prompt(entry: str) -> str:
    return entry.partition(": ")[2]


def _with_history(history: list[str], prompt: str, when: datetime) -> list[str]:
    """*history* plus a ``"<iso>: <prompt>"`` entry unless *prompt* is already in it."""
    if any(_history_prompt(entry) == prompt for entry in history):
        return history
    return [*history, f"{when.isoformat()}: {prompt}"]


def record_prompt_snapshot(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    prompt: str,
    *,
    clock: Clock = utcnow,
) -> Workspace:
    """Store *prompt* on the version and append it to the prompt history.

    A prompt already present in the history is not recorded twice.
    """
    if not prompt.strip():
        return workspace
    now = clock()

    def snapshot(version: Version) -> Version:
        return version.model_copy(
            update={
                "prompt": prompt,
                "prompt_history": _with_history(version.prompt_history, prompt, now),
            }
        )

    return _edit_version(workspace, project_id, song_id, version_id, snapshot)


def _final_fields(snapshot: PromptSnapshot) -> dict[str, Any]:
    update: dict[str, Any] = {"final_prompt_id": snapshot.id, "final_prompt": snapshot.prompt}
    if snapshot.lyrics:
        update["final_lyrics_id"] = snapshot.id
        update["final_lyrics"] = snapshot.lyrics
    return update


def add_prompt_snapshot(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    draft: SnapshotDraft,
    *,
    id_factory: IdFactory = new_id,
    clock: Clock = utcnow,
) -> tuple[Workspace, str | None]:
    """Keep a labelled prompt (and optional lyrics) on the version.

    The snapshot becomes the version's working prompt; with ``mark_final`` it
    also becomes the final prompt, and the final lyrics when it carries lyrics.
    """
    prompt = draft.prompt.strip()
    if not prompt or workspace.find_version(project_id, song_id, version_id) is None:
        return workspace, None
    now = clock()
    snapshot = PromptSnapshot(
        id=id_factory("snapshot"),
        label=draft.label.strip() or f"Snapshot {now:%Y-%m-%d %H:%M}",
        created_at=now,
        prompt=prompt,
        lyrics=_blank_to_none(draft.lyrics),
        notes=_blank_to_none(draft.notes),
    )

    def add(version: Version) -> Version:
        update: dict[str, Any] = {
            "prompt_snapshots": [*version.prompt_snapshots, snapshot],
            "prompt_history": _with_history(version.prompt_history, prompt, now),
            "prompt": prompt,
        }
        if snapshot.lyrics:
            update["lyrics"] = snapshot.lyrics
        if draft.mark_final:
            update.update(_final_fields(snapshot))
        return version.model_copy(update=update)

    updated = _edit_version(workspace, project_id, song_id, version_id, add)
    return updated, snapshot.id


def set_final_snapshot(
    workspace: Workspace, project_id: str, song_id: str, version_id: str, snapshot_id: str
) -> Workspace:
    """Make a kept snapshot the version's final prompt (and lyrics, if it has any)."""

    def promote(version: Version) -> Version | None:
        snapshot = next((s for s in version.prompt_snapshots if s.id == snapshot_id), None)
        if snapshot is None:
            return None
        update = _final_fields(snapshot)
        if all(getattr(version, name) == value for name, value in update.items()):
            return version
        return version.model_copy(update=update)

    return _edit_version(workspace, project_id, song_id, version_id, promote)


def add_iteration_entry(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    draft: IterationDraft,
    *,
    id_factory: IdFactory = new_id,
    clock: Clock = utcnow,
) -> tuple[Workspace, str | None]:
    summary = _blank_to_none(draft.summary)
    suno_url = _blank_to_none(draft.suno_url)
    if summary is None and suno_url is None:
        return workspace, None
    if workspace.find_version(project_id, song_id, version_id) is None:
        return workspace, None
    entry = IterationEntry(
        id=id_factory("iteration"),
        created_at=clock(),
        prompt_summary=summary,
        suno_url=suno_url,
        seed=_blank_to_none(draft.seed),
        notes=_blank_to_none(draft.notes),
        enhancements=parse_comma_list(draft.enhancements),
    )
    updated = _edit_version(
        workspace,
        project_id,
        song_id,
        version_id,
        lambda v: v.model_copy(update={"iteration_timeline": [*v.iteration_timeline, entry]}),
    )
    return updated, entry.id


def _merge_settings(current: dict[str, str], change: Mapping[str, str]) -> dict[str, str]:
    merged = dict(current)
    for key, value in change.items():
        value = value.strip()
        if value:
            merged[key] = value
        else:
            merged.pop(key, None)
    return merged


def update_mastering_profile(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    *,
    target_lufs: str | None = None,
    target_true_peak: str | None = None,
    bandlab: Mapping[str, str] | None = None,
    expose: Mapping[str, str] | None = None,
) -> Workspace:
    """Merge mastering targets and chain settings into a version's profile.

    Arguments left as ``None`` are untouched.  A blank target clears it and a
    blank value inside *bandlab* or *expose* removes that key.
    """

    def merge(version: Version) -> Version:
        profile = version.mastering_profile
        update: dict[str, Any] = {}
        if target_lufs is not None:
            update["target_lufs"] = _blank_to_none(target_lufs)
        if target_true_peak is not None:
            update["target_true_peak"] = _blank_to_none(target_true_peak)
        if bandlab is not None:
            update["bandlab"] = _merge_settings(profile.bandlab, bandlab)
        if expose is not None:
            update["expose"] = _merge_settings(profile.expose, expose)
        new_profile: MasteringProfile = profile.model_copy(update=update)
        if new_profile == profile:
            return version
        return version.model_copy(update={"mastering_profile": new_profile})

    return _edit_version(workspace, project_id, song_id, version_id, merge)


# ---------------------------------------------------------------------------
# Takes and release plans
# ---------------------------------------------------------------------------


def add_take(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    draft: TakeDraft,
    *,
    id_factory: IdFactory = new_id,
) -> tuple[Workspace, str | None]:
    version = workspace.find_version(project_id, song_id, version_id)
    if version is None:
        return workspace, None
    take = Take(
        id=id_factory("take"),
        version_id=version_id,
        label=draft.label.strip() or f"Take {len(version.takes) + 1}",
        share_url=_blank_to_none(draft.share_url),
        notes=_blank_to_none(draft.notes),
        selected=draft.selected,
    )
    updated = _edit_version(
        workspace,
        project_id,
        song_id,
        version_id,
        lambda v: v.model_copy(update={"takes": [*v.takes, take]}),
    )
    return updated, take.id


def update_take(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    take_id: str,
    change: Change,
) -> Workspace:
    return _edit_version(
        workspace,
        project_id,
        song_id,
        version_id,
        lambda v: _edit_child(
            v, "takes", take_id, lambda t: _apply_change(t, change, ("id", "version_id"))
        ),
    )


def toggle_take_selected(
    workspace: Workspace, project_id: str, song_id: str, version_id: str, take_id: str
) -> Workspace:
    """Flip the keeper flag of one take; other takes keep theirs."""
    return update_take(
        workspace,
        project_id,
        song_id,
        version_id,
        take_id,
        lambda t: t.model_copy(update={"selected": not t.selected}),
    )


def remove_take(
    workspace: Workspace, project_id: str, song_id: str, version_id: str, take_id: str
) -> Workspace:
    def drop(version: Version) -> Version | None:
        takes = _without(version.takes, take_id)
        return None if takes is None else version.model_copy(update={"takes": takes})

    return _edit_version(workspace, project_id, song_id, version_id, drop)


def add_release_plan(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    draft: ReleasePlanDraft,
    *,
    id_factory: IdFactory = new_id,
) -> tuple[Workspace, str | None]:
    if workspace.find_version(project_id, song_id, version_id) is None:
        return workspace, None
    plan = ReleasePlan(
        id=id_factory("release"),
        platform=draft.platform.strip() or "soundcloud",
        url=_blank_to_none(draft.url),
        release_date=_blank_to_none(draft.release_date),
        status=draft.status,
        notes=_blank_to_none(draft.notes),
    )
    updated = _edit_version(
        workspace,
        project_id,
        song_id,
        version_id,
        lambda v: v.model_copy(update={"release_plans": [*v.release_plans, plan]}),
    )
    return updated, plan.id


def update_release_plan(
    workspace: Workspace,
    project_id: str,
    song_id: str,
    version_id: str,
    plan_id: str,
    change: Change,
) -> Workspace:
    return _edit_version(
        workspace,
        project_id,
        song_id,
        version_id,
        lambda v: _edit_child(
            v, "release_plans", plan_id, lambda p: _apply_change(p, change, ("id",))
        ),
    )


def remove_release_plan(
    workspace: Workspace, project_id: str, song_id: str, version_id: str, plan_id: str
) -> Workspace:
    def drop(version: Version) -> Version | None:
        plans = _without(version.release_plans, plan_id)
        return None if plans is None else version.model_copy(update={"release_plans": plans})

    return _edit_version(workspace, project_id, song_id, version_id, drop)


# ---------------------------------------------------------------------------
# Builder state
# ---------------------------------------------------------------------------


def set_form_fields(builder: BuilderState, change: Mapping[str, Any]) -> BuilderState:
    form = _apply_change(builder.form, change, ())
    if form == builder.form:
        return builder
    return builder.model_copy(update={"form": form})


def _toggle(values: list[str], value: str) -> list[str]:
    if value in values:
        return [item for item in values if item != value]
    return [*values, value]


def toggle_mix_note(builder: BuilderState, note: str) -> BuilderState:
    note = note.strip()
    if not note:
        return builder
    form = builder.form.model_copy(update={"mix_notes": _toggle(builder.form.mix_notes, note)})
    return builder.model_copy(update={"form": form})


def toggle_lyric_section(builder: BuilderState, section: str) -> BuilderState:
    """Add or remove a lyric section, keeping the canonical section order."""
    if section not in SECTION_ORDER:
        return builder
    sections = canonical_sections(_toggle(builder.form.lyric_sections, section))
    form = builder.form.model_copy(update={"lyric_sections": sections})
    return builder.model_copy(update={"form": form})


def toggle_meta_tag(builder: BuilderState, tag: str) -> BuilderState:
    tag = tag.strip()
    if not tag:
        return builder
    return builder.model_copy(update={"meta_tags": _toggle(builder.meta_tags, tag)})


def toggle_checklist_item(builder: BuilderState, section_id: str, item_id: str) -> BuilderState:
    key = checklist_key(section_id, item_id)
    checklists = {**builder.checklists, key: not builder.checklists.get(key, False)}
    return builder.model_copy(update={"checklists": checklists})


def apply_template(builder: BuilderState, template_id: str) -> BuilderState:
    """Load a sound-bible template's form values and mix notes into the builder."""
    template = get_template(template_id)
    if template is None:
        return builder
    change: dict[str, Any] = dict(template.form)
    if template.mix_notes:
        change["mix_notes"] = list(template.mix_notes)
    return set_form_fields(builder, change)
