"""Load/save of the ledger and builder state through a :class:`KeyValueStore`."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter

from songledger.models.builder import BuilderState, PromptForm
from songledger.models.workspace import Project, Workspace
from songledger.service.integrity import check_workspace
from songledger.storage.repository import KeyValueStore

if TYPE_CHECKING:
    from songledger.service.store import StoreState

logger = logging.getLogger("songledger.persistence")

T = TypeVar("T")

PROJECTS_KEY = "songledger_projects_v2"
PROMPT_FORM_KEY = "songledger_prompt_form_v2"
META_TAGS_KEY = "songledger_meta_tags_v2"
CHECKLISTS_KEY = "songledger_checklists_v2"

_projects_adapter: TypeAdapter[list[Project]] = TypeAdapter(list[Project])
_form_adapter: TypeAdapter[PromptForm] = TypeAdapter(PromptForm)
_meta_tags_adapter: TypeAdapter[list[str]] = TypeAdapter(list[str])
_checklists_adapter: TypeAdapter[dict[str, bool]] = TypeAdapter(dict[str, bool])


def _load(
    store: KeyValueStore, key: str, adapter: TypeAdapter[T], default: Callable[[], T]
) -> T:
    try:
        raw = store.read(key)
        if raw is None:
            return default()
        return adapter.validate_json(raw)
    except (OSError, ValueError) as exc:
        # ValueError covers undecodable bytes, malformed JSON and bad shapes
        logger.warning("Discarding stored value for %s: %s", key, exc)
        return default()


def _dump(adapter: TypeAdapter[Any], value: Any) -> str:
    return adapter.dump_json(value, by_alias=True, exclude_none=True).decode("utf-8")


def load_workspace(store: KeyValueStore) -> Workspace:
    """Stored projects, or an empty workspace when they are unreadable or inconsistent."""
    workspace = Workspace(projects=_load(store, PROJECTS_KEY, _projects_adapter, list))
    issues = check_workspace(workspace)
    if issues:
        logger.warning(
            "Discarding stored value for %s: %d integrity issue(s), first: %s at %s",
            PROJECTS_KEY,
            len(issues),
            issues[0].message,
            issues[0].path,
        )
        return Workspace()
    return workspace


def load_builder(store: KeyValueStore) -> BuilderState:
    defaults = BuilderState()
    return BuilderState(
        form=_load(store, PROMPT_FORM_KEY, _form_adapter, lambda: defaults.form),
        meta_tags=_load(store, META_TAGS_KEY, _meta_tags_adapter, lambda: defaults.meta_tags),
        checklists=_load(store, CHECKLISTS_KEY, _checklists_adapter, dict),
    )


def save_state(store: KeyValueStore, workspace: Workspace, builder: BuilderState) -> None:
    """Write every key unconditionally."""
    with store.session() as writer:
        writer.write(PROJECTS_KEY, _dump(_projects_adapter, workspace.projects))
        writer.write(PROMPT_FORM_KEY, _dump(_form_adapter, builder.form))
        writer.write(META_TAGS_KEY, _dump(_meta_tags_adapter, builder.meta_tags))
        writer.write(CHECKLISTS_KEY, _dump(_checklists_adapter, builder.checklists))


class PersistenceHook:
    """Store subscriber that serialises the keys whose value changed.

    Change detection is by object identity: the mutation layer only replaces
    the records it touched, so an unchanged list or form is the same object.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._last: dict[str, object] = {}

    def prime(self, state: StoreState) -> None:
        """Mark *state* as already persisted."""
        self._last = self._values(state)

    @staticmethod
    def _values(state: StoreState) -> dict[str, object]:
        return {
            PROJECTS_KEY: state.workspace.projects,
            PROMPT_FORM_KEY: state.builder.form,
            META_TAGS_KEY: state.builder.meta_tags,
            CHECKLISTS_KEY: state.builder.checklists,
        }

    def __call__(self, state: StoreState) -> None:
        adapters: dict[str, TypeAdapter[Any]] = {
            PROJECTS_KEY: _projects_adapter,
            PROMPT_FORM_KEY: _form_adapter,
            META_TAGS_KEY: _meta_tags_adapter,
            CHECKLISTS_KEY: _checklists_adapter,
        }
        current = self._values(state)
        changed = [key for key, value in current.items() if self._last.get(key) is not value]
        if not changed:
            return
        with self._store.session() as writer:
            for key in changed:
                writer.write(key, _dump(adapters[key], current[key]))
        self._last = current
        logger.debug("Persisted %s", ", ".join(changed))
