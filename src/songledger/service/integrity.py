"""Structural validation of a whole ledger tree: unique ids, parent ids, QA keys."""

from __future__ import annotations

from songledger.catalog import QA_ITEM_IDS
from songledger.models.errors import LedgerIssue
from songledger.models.workspace import Version, Workspace


class LedgerValidator:
    """Collects structural issues; never raises."""

    def validate(self, workspace: Workspace) -> list[LedgerIssue]:
        issues: list[LedgerIssue] = []
        issues.extend(self._check_unique_ids(workspace))
        issues.extend(self._check_parent_ids(workspace))
        for path, version in self._versions(workspace):
            issues.extend(self._check_qa_keys(path, version))
            issues.extend(self._check_final_snapshots(path, version))
        return issues

    @staticmethod
    def _versions(workspace: Workspace) -> list[tuple[str, Version]]:
        return [
            (f"projects[{p}].songs[{s}].versions[{v}]", version)
            for p, project in enumerate(workspace.projects)
            for s, song in enumerate(project.songs)
            for v, version in enumerate(song.versions)
        ]

    def _check_unique_ids(self, workspace: Workspace) -> list[LedgerIssue]:
        """Every record id appears once across the whole tree."""
        issues: list[LedgerIssue] = []
        seen: dict[str, str] = {}  # id -> first path

        def _register(record_id: str, path: str) -> None:
            first = seen.get(record_id)
            if first is not None:
                issues.append(
                    LedgerIssue(
                        code="DUPLICATE_ID",
                        message=f"Id '{record_id}' is already used at {first}",
                        path=path,
                    )
                )
            else:
                seen[record_id] = path

        for p, project in enumerate(workspace.projects):
            project_path = f"projects[{p}]"
            _register(project.id, project_path)
            for s, song in enumerate(project.songs):
                song_path = f"{project_path}.songs[{s}]"
                _register(song.id, song_path)
                for v, version in enumerate(song.versions):
                    version_path = f"{song_path}.versions[{v}]"
                    _register(version.id, version_path)
                    for t, take in enumerate(version.takes):
                        _register(take.id, f"{version_path}.takes[{t}]")
                    for r, plan in enumerate(version.release_plans):
                        _register(plan.id, f"{version_path}.releasePlans[{r}]")
                    for i, entry in enumerate(version.iteration_timeline):
                        _register(entry.id, f"{version_path}.iterationTimeline[{i}]")
                    for n, snapshot in enumerate(version.prompt_snapshots):
                        _register(snapshot.id, f"{version_path}.promptSnapshots[{n}]")
        return issues

    def _check_parent_ids(self, workspace: Workspace) -> list[LedgerIssue]:
        issues: list[LedgerIssue] = []

        def _mismatch(kind: str, field: str, actual: str, expected: str, path: str) -> None:
            issues.append(
                LedgerIssue(
                    code="PARENT_MISMATCH",
                    message=f"{kind} {field} '{actual}' does not match parent '{expected}'",
                    path=path,
                )
            )

        for p, project in enumerate(workspace.projects):
            for s, song in enumerate(project.songs):
                song_path = f"projects[{p}].songs[{s}]"
                if song.project_id != project.id:
                    _mismatch("Song", "projectId", song.project_id, project.id, song_path)
                for v, version in enumerate(song.versions):
                    version_path = f"{song_path}.versions[{v}]"
                    if version.song_id != song.id:
                        _mismatch("Version", "songId", version.song_id, song.id, version_path)
                    for t, take in enumerate(version.takes):
                        if take.version_id != version.id:
                            _mismatch(
                                "Take",
                                "versionId",
                                take.version_id,
                                version.id,
                                f"{version_path}.takes[{t}]",
                            )
        return issues

    def _check_final_snapshots(self, path: str, version: Version) -> list[LedgerIssue]:
        """Final prompt/lyrics ids must name one of the version's snapshots."""
        known = {snapshot.id for snapshot in version.prompt_snapshots}
        issues: list[LedgerIssue] = []
        for field, alias in (
            ("final_prompt_id", "finalPromptId"),
            ("final_lyrics_id", "finalLyricsId"),
        ):
            value = getattr(version, field)
            if value is not None and value not in known:
                issues.append(
                    LedgerIssue(
                        code="UNKNOWN_SNAPSHOT",
                        message=f"{alias} '{value}' does not name a prompt snapshot",
                        path=f"{path}.{alias}",
                    )
                )
        return issues

    def _check_qa_keys(self, path: str, version: Version) -> list[LedgerIssue]:
        issues: list[LedgerIssue] = []
        keys = set(version.qa_checks)
        for key in sorted(keys - QA_ITEM_IDS):
            issues.append(
                LedgerIssue(
                    code="UNKNOWN_QA_ITEM",
                    message=f"QA item '{key}' is not part of the checklist",
                    path=f"{path}.qaChecks.{key}",
                )
            )
        for key in sorted(QA_ITEM_IDS - keys):
            issues.append(
                LedgerIssue(
                    code="MISSING_QA_ITEM",
                    message=f"QA item '{key}' is missing",
                    path=f"{path}.qaChecks",
                )
            )
        return issues


def check_workspace(workspace: Workspace) -> list[LedgerIssue]:
    return LedgerValidator().validate(workspace)
