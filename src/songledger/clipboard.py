"""Best-effort copy of prompt and lyric text to the system clipboard."""

from __future__ import annotations

import base64
import logging
import sys
from typing import TextIO

import pyperclip

logger = logging.getLogger("songledger.clipboard")

# Terminals that honour OSC 52 put the payload on the host clipboard.
_OSC52_TEMPLATE = "\x1b]52;c;{payload}\x07"


def osc52_sequence(text: str) -> str:
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return _OSC52_TEMPLATE.format(payload=payload)


def copy_text(text: str, *, fallback: bool = True, stream: TextIO | None = None) -> bool:
    """Copy *text*; return whether some mechanism accepted it.

    Tries the platform clipboard through pyperclip first.  When no clipboard
    mechanism is available and *fallback* is set, writes an OSC 52 selection
    escape to *stream* (stdout by default).  Empty text is a no-op.
    """
    if not text:
        return False
    try:
        pyperclip.copy(text)
        return True
    except pyperclip.PyperclipException as exc:
        logger.info("System clipboard unavailable: %s", exc)

    if not fallback:
        return False
    out = stream if stream is not None else sys.stdout
    try:
        out.write(osc52_sequence(text))
        out.flush()
    except (OSError, ValueError) as exc:
        logger.warning("Clipboard fallback failed: %s", exc)
        return False
    return True
