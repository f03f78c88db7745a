"""Tests for the seed-workspace YAML loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from songledger.parser import SeedLoader, SeedLoadError, YAMLSafetyError, load_sample_workspace
from tests.conftest import SAMPLE_SEED_YAML


@pytest.fixture
def loader() -> SeedLoader:
    return SeedLoader()


class TestLoadString:
    def test_valid_seed(self, loader: SeedLoader) -> None:
        ws = loader.load_string(SAMPLE_SEED_YAML)
        plan = ws.projects[0].songs[0].versions[0].release_plans[0]
        assert plan.release_date == "2025-03-01"
        assert plan.status == "scheduled"

    def test_unquoted_date_becomes_string(self, loader: SeedLoader) -> None:
        ws = loader.load_string(SAMPLE_SEED_YAML.replace('"2025-03-01"', "2025-03-01"))
        plan = ws.projects[0].songs[0].versions[0].release_plans[0]
        assert plan.release_date == "2025-03-01"

    def test_empty_document(self, loader: SeedLoader) -> None:
        assert loader.load_string("").projects == []

    def test_invalid_field_reports_position(self, loader: SeedLoader) -> None:
        bad = SAMPLE_SEED_YAML.replace("title: First", "title: [not, a, string]")
        with pytest.raises(SeedLoadError) as info:
            loader.load_string(bad, filename="seed.yaml")
        issue = info.value.issues[0]
        assert issue.code == "INVALID_FIELD"
        assert issue.path == "projects[0].songs[0].title"
        assert issue.span is not None
        assert issue.span.file == "seed.yaml"
        assert issue.span.line == 7

    def test_parent_mismatch_is_rejected(self, loader: SeedLoader) -> None:
        bad = SAMPLE_SEED_YAML.replace("songId: s1", "songId: s9")
        with pytest.raises(SeedLoadError, match="does not match parent") as info:
            loader.load_string(bad)
        assert info.value.issues[0].code == "PARENT_MISMATCH"

    def test_syntax_error(self, loader: SeedLoader) -> None:
        with pytest.raises(SeedLoadError) as info:
            loader.load_string("projects: [unclosed")
        assert info.value.issues[0].code == "YAML_PARSE_ERROR"

    def test_seed_error_is_value_error(self, loader: SeedLoader) -> None:
        with pytest.raises(ValueError):
            loader.load_string("- just\n- a list\n")


class TestSafety:
    def test_anchors_rejected(self, loader: SeedLoader) -> None:
        with pytest.raises(YAMLSafetyError, match="anchors"):
            loader.load_string("base: &b {x: 1}\nother: *b\n")

    def test_oversized_document_rejected(self, loader: SeedLoader) -> None:
        with pytest.raises(YAMLSafetyError, match="maximum size"):
            loader.load_string("x" * 2_000_001)

    def test_node_count_limit(self) -> None:
        data = {"items": list(range(10))}
        with pytest.raises(YAMLSafetyError, match="node count"):
            SeedLoader._check_node_count(data, limit=5)


class TestSampleWorkspace:
    def test_bundled_sample_loads(self) -> None:
        ws = load_sample_workspace()
        song = ws.projects[0].songs[0]
        assert ws.projects[0].name == "UN&YA Showcase"
        assert song.versions[0].takes[1].selected is True
        assert song.versions[0].final_release_url

    def test_load_from_path(self, loader: SeedLoader, tmp_path: Path) -> None:
        path = tmp_path / "seed.yaml"
        path.write_text(SAMPLE_SEED_YAML, encoding="utf-8")
        assert loader.load(path).projects[0].id == "p1"
