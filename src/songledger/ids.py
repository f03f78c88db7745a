"""Identifier generation."""

from __future__ import annotations

import uuid
from collections.abc import Callable

IdFactory = Callable[[str], str]


def new_id(prefix: str) -> str:
    """Return a fresh ``<prefix>_<uuid4 hex>`` identifier."""
    return f"{prefix}_{uuid.uuid4().hex}"
