"""Wiring: logging setup and a ready-to-use, persisted workspace store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial

from songledger.clipboard import copy_text
from songledger.ids import IdFactory, new_id
from songledger.parser.loader import SAMPLE_WORKSPACE, SeedLoader
from songledger.service.store import StoreState, WorkspaceStore
from songledger.settings import Settings
from songledger.storage.file_store import FileKeyValueStore
from songledger.storage.persistence import PersistenceHook, load_builder, load_workspace
from songledger.storage.repository import KeyValueStore

logger = logging.getLogger("songledger.bootstrap")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_store(
    settings: Settings | None = None,
    *,
    storage: KeyValueStore | None = None,
    id_factory: IdFactory = new_id,
) -> WorkspaceStore:
    """Build a :class:`WorkspaceStore` loaded from storage and persisted on change.

    The stored state is read once.  When it holds no projects and seeding is
    configured, the seed workspace is loaded instead and written back.
    """
    settings = settings or Settings()
    storage = storage or FileKeyValueStore(settings.data_dir)

    workspace = load_workspace(storage)
    builder = load_builder(storage)
    seeded = False
    if not workspace.projects:
        seed_path = settings.seed_file or (
            SAMPLE_WORKSPACE if settings.seed_sample_workspace else None
        )
        if seed_path is not None:
            workspace = SeedLoader().load(seed_path)
            seeded = True

    store = WorkspaceStore(StoreState(workspace=workspace, builder=builder), id_factory=id_factory)
    hook = PersistenceHook(storage)
    if not seeded:
        hook.prime(store.state)
    else:
        hook(store.state)
    store.subscribe(hook)
    logger.info(
        "Workspace store ready (%d projects%s)",
        len(store.workspace.projects),
        ", seeded" if seeded else "",
    )
    return store


def clipboard_copier(settings: Settings) -> Callable[[str], bool]:
    """``copy_text`` bound to the configured fallback behaviour."""
    return partial(copy_text, fallback=settings.clipboard_fallback)
