"""Tests for the style-prompt and lyric-outline formatters."""

from __future__ import annotations

import itertools

from songledger.catalog import SECTION_ORDER
from songledger.derive.prompt import (
    format_lyric_outline,
    format_meta_tags,
    format_style_prompt,
    parse_comma_list,
    parse_lines,
    parse_references,
    unique_in_order,
)
from songledger.models import PromptForm, PromptMode


def _blank_form(**fields: object) -> PromptForm:
    empty = {name: "" for name, info in PromptForm.model_fields.items() if info.annotation is str}
    empty.update(mix_notes=[], lyric_sections=[])
    empty.update(fields)
    return PromptForm.model_validate(empty)


class TestStylePrompt:
    def test_default_form_segments_in_order(self) -> None:
        prompt = format_style_prompt(PromptForm())
        lines = prompt.split("\n")
        assert lines[0] == "[Genre=Industrial Metal]"
        assert lines[1] == "[Subgenre=Cyber-Brutalist, Slavonic Anthemic]"
        assert "[Tempo=130bpm]" in lines
        assert lines.index("[Tempo=130bpm]") < lines.index("[Key=C minor]")
        assert lines[-1] == "[Exclude=rap, screamo, trap_hats, vinyl_crackle]"

    def test_no_blank_lines_or_empty_brackets(self) -> None:
        form = PromptForm(subgenre="  ", hooks="", lead_vox="", backing_vox="", exclude="")
        prompt = format_style_prompt(form)
        assert "\n\n" not in prompt
        assert "=]" not in prompt
        assert "Subgenre" not in prompt
        assert "Hooks" not in prompt

    def test_idempotent(self) -> None:
        form = PromptForm(additional_directives="Keep drums dry\n\n  More choir  ")
        assert format_style_prompt(form) == format_style_prompt(form)

    def test_mix_notes_deduplicated_in_first_order(self) -> None:
        prompt = format_style_prompt(PromptForm(mix_notes=["a", "b", "a"]))
        assert "[MixNotes=a, b]" in prompt.split("\n")

    def test_mix_notes_blank_items_dropped(self) -> None:
        prompt = format_style_prompt(PromptForm(mix_notes=[" ", "a ", ""]))
        assert "[MixNotes=a]" in prompt

    def test_empty_mix_notes_omitted(self) -> None:
        assert "MixNotes" not in format_style_prompt(PromptForm(mix_notes=[]))

    def test_mode_tags(self) -> None:
        assert "[Instrumental Only]" in format_style_prompt(
            PromptForm(mode=PromptMode.INSTRUMENTAL)
        )
        assert "[Add Vocals]" in format_style_prompt(PromptForm(mode=PromptMode.ADD_VOCALS))
        assert "[Add Instrumentals]" in format_style_prompt(
            PromptForm(mode="addInstrumentals")
        )
        full = format_style_prompt(PromptForm(mode=PromptMode.FULL))
        assert "Instrumental Only" not in full
        assert "Add Vocals" not in full

    def test_mode_tag_precedes_exclude(self) -> None:
        lines = format_style_prompt(PromptForm(mode=PromptMode.INSTRUMENTAL)).split("\n")
        assert lines.index("[Instrumental Only]") + 1 == lines.index(
            "[Exclude=rap, screamo, trap_hats, vinyl_crackle]"
        )

    def test_directives_appended_trimmed(self) -> None:
        form = PromptForm(additional_directives="  Keep drums dry \n\n More choir")
        lines = format_style_prompt(form).split("\n")
        assert lines[-2:] == ["Keep drums dry", "More choir"]

    def test_all_blank_form_is_empty_string(self) -> None:
        assert format_style_prompt(_blank_form()) == ""

    def test_values_are_trimmed(self) -> None:
        prompt = format_style_prompt(PromptForm(genre="  Doom  "))
        assert prompt.startswith("[Genre=Doom]")

    def test_multiline_values_lose_blank_lines(self) -> None:
        form = PromptForm(
            instrumentation="Drop-tuned guitars\n\n  hybrid orchestra \n",
            hooks="\n\nchant\r\n\r\nbell",
        )
        prompt = format_style_prompt(form)
        assert "\n\n" not in prompt
        assert "[Instrumentation=Drop-tuned guitars\nhybrid orchestra]" in prompt
        assert "[Hooks=chant\nbell]" in prompt

    def test_whitespace_only_lines_drop_the_segment(self) -> None:
        prompt = format_style_prompt(PromptForm(structure=" \n \n"))
        assert "Structure" not in prompt


class TestLyricOutline:
    def test_canonical_order_wins(self) -> None:
        assert format_lyric_outline(["Chorus", "Intro", "Verse"]) == (
            "[Intro]\n\n[Verse]\n\n[Chorus]"
        )

    def test_order_independent_for_every_permutation(self) -> None:
        subset = ["Outro", "Drop", "Verse", "Intro"]
        expected = "[Intro]\n\n[Verse]\n\n[Drop]\n\n[Outro]"
        for permutation in itertools.permutations(subset):
            assert format_lyric_outline(permutation) == expected

    def test_unknown_and_duplicate_sections_dropped(self) -> None:
        assert format_lyric_outline(["Verse", "Solo", "Verse"]) == "[Verse]"

    def test_empty_selection(self) -> None:
        assert format_lyric_outline([]) == ""

    def test_full_order(self) -> None:
        outline = format_lyric_outline(reversed(SECTION_ORDER))
        assert outline.split("\n\n") == [f"[{name}]" for name in SECTION_ORDER]


class TestTextHelpers:
    def test_meta_tag_line(self) -> None:
        assert format_meta_tags(["studio_mix", "clean_master"]) == "[studio_mix] [clean_master]"
        assert format_meta_tags([]) == ""

    def test_parse_comma_list(self) -> None:
        assert parse_comma_list(" a, ,b ,") == ["a", "b"]

    def test_parse_lines(self) -> None:
        assert parse_lines("one\n\n two \n") == ["one", "two"]

    def test_parse_references(self) -> None:
        assert parse_references("Ref A, Ref B\nRef C") == ["Ref A", "Ref B", "Ref C"]

    def test_unique_in_order(self) -> None:
        assert unique_in_order(["b", "a", " b "]) == ["b", "a"]
