"""Tests for the PROMPT/LYRICS/META/NOTES export bundle."""

from __future__ import annotations

from pathlib import Path

import pytest

from songledger.models import Project, ReleasePlan, Song, Version
from songledger.service.export import (
    NO_LYRICS,
    NO_PROMPT,
    build_export_bundle,
    slugify,
    write_export_bundle,
)


@pytest.fixture
def records() -> tuple[Project, Song, Version]:
    version = Version(
        id="v1",
        song_id="s1",
        label="v1.2.0",
        seed="seed-2417",
        bpm="128",
        prompt="[Genre=Industrial Metal]",
        final_lyrics="[Intro]\nConcrete skies",
        meta_tags=["studio_mix", "clean_master"],
        qa_checks={"conflicts": True, "lufs": False},
        release_plans=[
            ReleasePlan(id="r1", platform="bandcamp", release_date="2025-01-20", notes="a\nb")
        ],
    )
    song = Song(
        id="s1",
        project_id="p1",
        title="Fragments of Silence",
        references=["Hybrid orchestral swells"],
        versions=[version],
    )
    project = Project(id="p1", name="UN&YA Showcase", songs=[song])
    return project, song, version


class TestSlugify:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("UN&YA Showcase", "un_ya_showcase"),
            ("  v1.2.0 ", "v1_2_0"),
            ("***", "bundle"),
            ("", "bundle"),
        ],
    )
    def test_slugify(self, raw: str, expected: str) -> None:
        assert slugify(raw) == expected

    def test_slug_is_capped(self) -> None:
        assert len(slugify("a" * 200)) == 60


class TestBuildBundle:
    def test_four_files_named_from_slug(
        self, records: tuple[Project, Song, Version]
    ) -> None:
        bundle = build_export_bundle(*records)
        assert bundle.base_slug == "un_ya_showcase_fragments_of_silence_v1_2_0"
        assert sorted(bundle.files) == sorted(
            f"{bundle.base_slug}{suffix}"
            for suffix in ("_PROMPT.txt", "_LYRICS.txt", "_META.txt", "_NOTES.md")
        )

    def test_final_lyrics_preferred(self, records: tuple[Project, Song, Version]) -> None:
        bundle = build_export_bundle(*records)
        assert bundle.files[f"{bundle.base_slug}_LYRICS.txt"] == "[Intro]\nConcrete skies"
        assert bundle.files[f"{bundle.base_slug}_PROMPT.txt"] == "[Genre=Industrial Metal]"

    def test_placeholders_when_empty(self, records: tuple[Project, Song, Version]) -> None:
        project, song, version = records
        empty = version.model_copy(update={"prompt": None, "final_lyrics": None})
        bundle = build_export_bundle(project, song, empty)
        assert bundle.files[f"{bundle.base_slug}_PROMPT.txt"] == NO_PROMPT
        assert bundle.files[f"{bundle.base_slug}_LYRICS.txt"] == NO_LYRICS

    def test_meta_lines(self, records: tuple[Project, Song, Version]) -> None:
        bundle = build_export_bundle(*records)
        meta = bundle.files[f"{bundle.base_slug}_META.txt"].split("\n")
        assert meta[0] == "Album: UN&YA Showcase"
        assert "Seed: seed-2417" in meta
        assert "Key: n/a" in meta
        assert "Meta Tags: [studio_mix] [clean_master]" in meta
        assert meta[-1] == "QA Completed: 1/2"

    def test_notes_sections(self, records: tuple[Project, Song, Version]) -> None:
        bundle = build_export_bundle(*records)
        notes = bundle.files[f"{bundle.base_slug}_NOTES.md"]
        assert notes.startswith("# Fragments of Silence – v1.2.0")
        assert "QA Checks: 1/2 (pending: lufs)" in notes
        assert "## References\n- Hybrid orchestral swells" in notes
        assert "### BandLab Chain\n- n/a" in notes
        assert "| bandcamp | draft | 2025-01-20 |  | a b |" in notes


class TestWriteBundle:
    def test_writes_utf8_files(
        self, records: tuple[Project, Song, Version], tmp_path: Path
    ) -> None:
        bundle = build_export_bundle(*records)
        written = write_export_bundle(bundle, tmp_path / "out")
        assert len(written) == 4
        for path in written:
            assert path.read_text(encoding="utf-8") == bundle.files[path.name]
