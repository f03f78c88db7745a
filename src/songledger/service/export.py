"""Text export bundle (prompt, lyrics, metadata, notes) for one version."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from songledger.derive.prompt import format_meta_tags
from songledger.models.workspace import Project, Song, Version
from songledger.service.health import qa_summary, version_health

logger = logging.getLogger("songledger.export")

_SLUG_RE = re.compile(r"[^a-z0-9]+")
_MAX_SLUG_LENGTH = 60

NO_PROMPT = "// No prompt captured for this version."
NO_LYRICS = "// No lyrics captured for this version."


@dataclass(frozen=True)
class ExportBundle:
    """File name to UTF-8 text content, all names prefixed with ``base_slug``."""

    base_slug: str
    files: dict[str, str] = field(default_factory=dict)


def slugify(value: str) -> str:
    slug = _SLUG_RE.sub("_", value.lower()).strip("_")[:_MAX_SLUG_LENGTH]
    return slug or "bundle"


def _or_na(value: object) -> str:
    if value is None or value == "":
        return "n/a"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def _iso(value: datetime) -> str:
    return value.isoformat()


def _settings_lines(values: dict[str, str]) -> list[str]:
    lines = [f"- {key}: {value}" for key, value in values.items() if value]
    return lines or ["- n/a"]


def _meta_text(project: Project, song: Song, version: Version) -> str:
    qa = qa_summary(version.qa_checks)
    return "\n".join(
        [
            f"Album: {project.name}",
            f"Song: {song.title}",
            f"Version: {version.label}",
            f"Created: {_iso(version.created_at)}",
            f"Status: {version.status}",
            f"Seed: {_or_na(version.seed)}",
            f"BPM: {_or_na(version.bpm)}",
            f"Key: {_or_na(version.key)}",
            f"Meta Tags: {_or_na(format_meta_tags(version.meta_tags))}",
            f"Exclude: {_or_na(version.exclude)}",
            f"QA Completed: {qa.completed}/{qa.total}",
        ]
    )


def _notes_text(project: Project, song: Song, version: Version) -> str:
    health = version_health(version)
    qa = health.qa
    profile = version.mastering_profile

    lines = [
        f"# {song.title} – {version.label}",
        f"Album: {project.name}",
        f"Created: {_iso(version.created_at)}",
        f"Status: {version.status}",
        f"Seed: {_or_na(version.seed)}",
        f"BPM / Key: {_or_na(version.bpm)} / {_or_na(version.key)}",
        f"Final Release URL: {_or_na(version.final_release_url)}",
        f"Share URL: {_or_na(version.share_url)}",
        f"Suno URL: {_or_na(version.suno_url)}",
        f"SoundCloud URL: {_or_na(version.soundcloud_url)}",
        "",
    ]

    pending = f" (pending: {', '.join(qa.pending)})" if qa.pending else ""
    lines += [
        f"QA Checks: {qa.completed}/{qa.total}{pending}",
        f"Expose Status: {_or_na(health.expose_status)}",
        f"Measured LUFS: {_or_na(health.lufs)}",
        f"Measured True Peak: {_or_na(health.true_peak)}",
        "",
    ]

    if song.references:
        lines.append("## References")
        lines += [f"- {ref}" for ref in song.references]
        lines.append("")

    if version.iteration_timeline:
        lines.append("## Iteration Timeline")
        for entry in version.iteration_timeline:
            summary = entry.prompt_summary or "Prompt adjustment"
            enhancements = (
                f" (Enhancements: {', '.join(entry.enhancements)})" if entry.enhancements else ""
            )
            link = f" [Suno]({entry.suno_url})" if entry.suno_url else ""
            lines.append(f"- {_iso(entry.created_at)} – {summary}{enhancements}{link}")
            if entry.notes:
                lines.append(f"  - Notes: {entry.notes}")
        lines.append("")

    lines += [
        "## Mastering",
        f"Target LUFS: {_or_na(profile.target_lufs)}",
        f"Target True Peak: {_or_na(profile.target_true_peak)}",
        f"Actual LUFS: {_or_na(version.lufs)}",
        f"Actual True Peak: {_or_na(version.true_peak)}",
        "### BandLab Chain",
        *_settings_lines(profile.bandlab),
        "### EXPOSE",
        *_settings_lines(profile.expose),
    ]
    if version.mastering_notes:
        lines += ["### Mastering Notes", version.mastering_notes]
    if version.expose_log:
        lines += ["### EXPOSE Log", "```", version.expose_log, "```"]
    lines.append("")

    lines += [
        "## Spectrum & Analytics",
        f"Song Notes: {_or_na(song.notes)}",
        f"Version Spectrum Notes: {_or_na(version.spectrum_notes)}",
        "",
        "## Release Plan",
    ]
    if version.release_plans:
        lines.append("| Platform | Status | Release Date | URL | Notes |")
        lines.append("| --- | --- | --- | --- | --- |")
        for plan in version.release_plans:
            notes = (plan.notes or "").replace("\n", " ")
            lines.append(
                f"| {plan.platform} | {plan.status} | {plan.release_date or ''} "
                f"| {plan.url or ''} | {notes} |"
            )
    else:
        lines.append("No release entries recorded.")

    return "\n".join(lines)


def build_export_bundle(project: Project, song: Song, version: Version) -> ExportBundle:
    """Assemble the four export files for *version*.

    The final prompt and lyrics win over the working copies when present.
    """
    base_slug = "_".join(
        [
            slugify(project.name or "album"),
            slugify(song.title or "song"),
            slugify(version.label or "version"),
        ]
    )
    prompt = version.final_prompt or version.prompt or NO_PROMPT
    lyrics = version.final_lyrics or version.lyrics or NO_LYRICS
    return ExportBundle(
        base_slug=base_slug,
        files={
            f"{base_slug}_PROMPT.txt": prompt,
            f"{base_slug}_LYRICS.txt": lyrics,
            f"{base_slug}_META.txt": _meta_text(project, song, version),
            f"{base_slug}_NOTES.md": _notes_text(project, song, version),
        },
    )


def write_export_bundle(bundle: ExportBundle, directory: Path) -> list[Path]:
    """Write every file of *bundle* into *directory*, creating it if needed."""
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, content in bundle.files.items():
        path = directory / name
        path.write_text(content, encoding="utf-8")
        written.append(path)
    logger.info("Exported %d files for %s to %s", len(written), bundle.base_slug, directory)
    return written
