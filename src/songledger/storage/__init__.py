"""Persistence boundary: key-value stores and state load/save."""

from songledger.storage.file_store import FileKeyValueStore
from songledger.storage.persistence import (
    CHECKLISTS_KEY,
    META_TAGS_KEY,
    PROJECTS_KEY,
    PROMPT_FORM_KEY,
    PersistenceHook,
    load_builder,
    load_workspace,
    save_state,
)
from songledger.storage.repository import InMemoryKeyValueStore, KeyValueStore, KeyValueWriter

__all__ = [
    "CHECKLISTS_KEY",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "KeyValueWriter",
    "META_TAGS_KEY",
    "PROJECTS_KEY",
    "PROMPT_FORM_KEY",
    "PersistenceHook",
    "load_builder",
    "load_workspace",
    "save_state",
]
