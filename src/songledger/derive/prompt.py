"""Style-prompt and lyric-outline text derived from the builder form."""

from __future__ import annotations

import re
from collections.abc import Iterable

from songledger.catalog import MODE_TAGS, SECTION_ORDER
from songledger.models.builder import PromptForm

_LINE_SPLIT_RE = re.compile(r"\n+")


def _segment(name: str, value: str, suffix: str = "") -> str:
    # multi-line values keep their lines, minus blank ones
    value = "\n".join(line.strip() for line in value.splitlines() if line.strip())
    if not value:
        return ""
    return f"[{name}={value}{suffix}]"


def unique_in_order(values: Iterable[str]) -> list[str]:
    """Trimmed, non-blank values with duplicates removed (first occurrence wins)."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in values:
        value = raw.strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def format_style_prompt(form: PromptForm) -> str:
    """Render the bracketed style prompt pasted into the generator's style field.

    One ``[Key=Value]`` segment per line in a fixed order.  Segments whose value
    is blank are dropped, so the output never holds an empty bracket or a blank
    line.  Additional directives are appended as free text.
    """
    mix_notes = unique_in_order(form.mix_notes)
    directives = [
        line.strip() for line in form.additional_directives.splitlines() if line.strip()
    ]

    segments = [
        _segment("Genre", form.genre),
        _segment("Subgenre", form.subgenre),
        _segment("Mood", form.mood),
        _segment("Energy", form.energy),
        _segment("Tempo", form.tempo, suffix="bpm"),
        _segment("Key", form.key),
        _segment("TimeSig", form.time_signature),
        _segment("Vocal", form.vocal),
        _segment("Language", form.language),
        _segment("LeadVox", form.lead_vox),
        _segment("BackingVox", form.backing_vox),
        _segment("Structure", form.structure),
        _segment("Instrumentation", form.instrumentation),
        _segment("Hooks", form.hooks),
        _segment("MixNotes", ", ".join(mix_notes)),
        MODE_TAGS.get(form.mode, ""),
        _segment("Exclude", form.exclude),
        *directives,
    ]
    return "\n".join(segment for segment in segments if segment)


def canonical_sections(sections: Iterable[str]) -> list[str]:
    """Known section names from *sections*, re-sorted into canonical order."""
    selected = set(sections)
    return [name for name in SECTION_ORDER if name in selected]


def format_lyric_outline(sections: Iterable[str]) -> str:
    """Render ``[Section]`` headings separated by blank lines, in canonical order."""
    return "\n\n".join(f"[{name}]" for name in canonical_sections(sections))


def format_meta_tags(tags: Iterable[str]) -> str:
    """Meta tags as the ``[tag] [tag]`` line placed in the lyrics field."""
    return " ".join(f"[{tag}]" for tag in unique_in_order(tags))


def parse_comma_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_lines(value: str) -> list[str]:
    return [item.strip() for item in _LINE_SPLIT_RE.split(value) if item.strip()]


def parse_references(value: str) -> list[str]:
    """Split a reference field on newlines and commas."""
    return [item.strip() for item in re.split(r"\n|,", value) if item.strip()]
