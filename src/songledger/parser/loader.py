"""Seed-workspace YAML loader with position tracking for rich error reporting."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from songledger.models.errors import LedgerIssue, SourceSpan
from songledger.models.workspace import Workspace
from songledger.service.integrity import check_workspace

logger = logging.getLogger("songledger.parser")

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 2_000_000  # characters
_MAX_NODE_COUNT = 50_000
_MAX_DEPTH = 20

# YAML anchor definitions (&name); not inside quoted strings (good-enough heuristic).
_ANCHOR_RE = re.compile(r"(?:^|[\s\-:])&(\w+)", re.MULTILINE)

_LAST_SEGMENT_RE = re.compile(r"(\.[^.\[]+|\[\d+\])$")

SAMPLE_WORKSPACE = Path(__file__).resolve().parent.parent / "data" / "sample_workspace.yaml"


class YAMLSafetyError(Exception):
    """Raised when YAML input violates safety constraints.

    Distinct from parse errors: these indicate hostile or runaway input
    (anchor bombs, excessive nesting, oversized documents).
    """


class SeedLoadError(ValueError):
    """A seed document could not be turned into a valid workspace."""

    def __init__(self, issues: list[LedgerIssue]) -> None:
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))


@dataclass
class SourceMap:
    """Maps YAML key paths to their source positions for error reporting."""

    _positions: dict[str, SourceSpan] = field(default_factory=dict)

    def add(self, path: str, span: SourceSpan) -> None:
        self._positions[path] = span

    def get(self, path: str) -> SourceSpan | None:
        return self._positions.get(path)

    def nearest(self, path: str) -> SourceSpan | None:
        """Span of *path*, or of its closest ancestor that has one."""
        while path:
            span = self._positions.get(path)
            if span is not None:
                return span
            trimmed = _LAST_SEGMENT_RE.sub("", path)
            if trimmed == path:
                break
            path = trimmed
        return self._positions.get(path)

    @property
    def paths(self) -> list[str]:
        return list(self._positions.keys())


def _loc_to_path(loc: tuple[int | str, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


class SeedLoader:
    """Loads a workspace from YAML, tracking source positions for errors.

    Uses ruamel.yaml which preserves line/column info on every parsed node.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.max_depth = _MAX_DEPTH

    # -- safety checks -------------------------------------------------------

    @staticmethod
    def _check_yaml_safety(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        if _ANCHOR_RE.search(content):
            raise YAMLSafetyError("YAML anchors/aliases are not supported in seed files")

    @staticmethod
    def _check_node_count(data: Any, limit: int = _MAX_NODE_COUNT) -> None:
        count = 0
        stack: list[Any] = [data]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise YAMLSafetyError(f"YAML document exceeds maximum node count ({limit:,})")
            if isinstance(node, dict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> Workspace:
        """Load a seed file into a validated :class:`Workspace`."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, filename=str(path))

    def load_string(self, content: str, filename: str = "<string>") -> Workspace:
        raw, source_map = self.parse(content, filename)
        try:
            workspace = Workspace.model_validate(raw)
        except ValidationError as exc:
            issues = []
            for error in exc.errors():
                path = _loc_to_path(tuple(error["loc"]))
                issues.append(
                    LedgerIssue(
                        code="INVALID_FIELD",
                        message=f"{path or '<root>'}: {error['msg']}",
                        path=path or None,
                        span=source_map.nearest(path),
                    )
                )
            raise SeedLoadError(issues) from exc

        issues = check_workspace(workspace)
        if issues:
            raise SeedLoadError(
                [
                    issue.model_copy(update={"span": source_map.nearest(issue.path or "")})
                    for issue in issues
                ]
            )
        logger.info(
            "Loaded seed workspace from %s (%d projects)", filename, len(workspace.projects)
        )
        return workspace

    def parse(self, content: str, filename: str = "<string>") -> tuple[dict[str, Any], SourceMap]:
        """Parse YAML text into a plain dict plus its source position map."""
        self._check_yaml_safety(content)
        try:
            data = self._yaml.load(content)
        except YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            span = (
                SourceSpan(file=filename, line=mark.line + 1, column=mark.column + 1)
                if mark is not None
                else None
            )
            raise SeedLoadError(
                [LedgerIssue(code="YAML_PARSE_ERROR", message=str(exc), span=span)]
            ) from exc
        if data is None:
            return {}, SourceMap()
        self._check_node_count(data)
        source_map = SourceMap()
        self._extract_positions(data, filename, "", source_map)
        plain = self._to_plain_value(data)
        if not isinstance(plain, dict):
            raise SeedLoadError(
                [LedgerIssue(code="INVALID_DOCUMENT", message="Seed document must be a mapping")]
            )
        return plain, source_map

    def _extract_positions(
        self,
        data: Any,
        filename: str,
        prefix: str,
        source_map: SourceMap,
    ) -> None:
        """Recursively extract source positions from ruamel.yaml nodes."""
        if isinstance(data, CommentedMap):
            for key in data:
                key_path = f"{prefix}.{key}" if prefix else str(key)
                try:
                    position = data.lc.key(key)
                    if position:
                        line, col = position
                        source_map.add(
                            key_path, SourceSpan(file=filename, line=line + 1, column=col + 1)
                        )
                except (AttributeError, KeyError, TypeError):
                    pass
                self._extract_positions(data[key], filename, key_path, source_map)
        elif isinstance(data, CommentedSeq):
            for i, item in enumerate(data):
                item_path = f"{prefix}[{i}]"
                try:
                    position = data.lc.item(i)
                    if position:
                        line, col = position
                        source_map.add(
                            item_path, SourceSpan(file=filename, line=line + 1, column=col + 1)
                        )
                except (AttributeError, KeyError, TypeError):
                    pass
                self._extract_positions(item, filename, item_path, source_map)

    def _to_plain_value(self, data: Any) -> Any:
        """Convert ruamel.yaml nodes to plain Python values; dates become ISO strings."""
        if isinstance(data, dict):
            return {str(k): self._to_plain_value(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._to_plain_value(item) for item in data]
        if isinstance(data, date):
            return data.isoformat()
        return data


def load_sample_workspace() -> Workspace:
    """The bundled demo workspace."""
    return SeedLoader().load(SAMPLE_WORKSPACE)
