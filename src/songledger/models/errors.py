"""Structured issues with optional YAML source position tracking."""

from __future__ import annotations

from pydantic import BaseModel


class SourceSpan(BaseModel):
    """Points to exact location in YAML source for error reporting."""

    file: str
    line: int
    column: int


class LedgerIssue(BaseModel):
    """A structural problem found in a ledger tree or seed document."""

    code: str
    message: str
    path: str | None = None
    span: SourceSpan | None = None
