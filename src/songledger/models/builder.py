"""Prompt-builder form state shared by every version created in a session."""

from __future__ import annotations

from enum import StrEnum

from songledger.catalog import DEFAULT_META_SELECTION
from songledger.models.workspace import LedgerModel


class PromptMode(StrEnum):
    FULL = "full"
    INSTRUMENTAL = "instrumental"
    ADD_VOCALS = "addVocals"
    ADD_INSTRUMENTALS = "addInstrumentals"


class PromptForm(LedgerModel):
    """Field set the style prompt and lyric outline are derived from."""

    genre: str = "Industrial Metal"
    subgenre: str = "Cyber-Brutalist, Slavonic Anthemic"
    mood: str = "Cold, Triumphant"
    energy: str = "High"
    tempo: str = "130"
    key: str = "C minor"
    time_signature: str = "4/4"
    vocal: str = "Duet(Male deep, Female ethereal)"
    language: str = "English"
    lead_vox: str = "Male deep"
    backing_vox: str = "Female ethereal"
    structure: str = "Long Intro - Verse - Pre - Chorus - Verse - Chorus - Bridge - Epic Outro"
    instrumentation: str = (
        "Drop-tuned guitars, distorted bass, glitched synths, hybrid orchestra, live drums"
    )
    hooks: str = "Choir-like synth lead doubles chorus melody"
    mix_notes: list[str] = ["warm_low_end", "tight_highs", "stereo_depth", "clear_guitar"]
    exclude: str = "rap, screamo, trap_hats, vinyl_crackle"
    additional_directives: str = ""
    mode: PromptMode = PromptMode.FULL
    lyric_sections: list[str] = ["Intro", "Verse", "Pre-Chorus", "Chorus", "Bridge", "Outro"]
    lyric_notes: str = ""
    inspire_notes: str = "Mission brief + 2 reference attributes"


class BuilderState(LedgerModel):
    """Form values, selected meta tags and SOP checklist ticks."""

    form: PromptForm = PromptForm()
    meta_tags: list[str] = list(DEFAULT_META_SELECTION)
    checklists: dict[str, bool] = {}
