"""Fixed vocabularies used by the prompt builder, QA checklists and templates."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    label: str


@dataclass(frozen=True)
class ChecklistSection:
    id: str
    title: str
    items: tuple[ChecklistItem, ...]


@dataclass(frozen=True)
class PromptTemplate:
    """A sound-bible preset: a ready style prompt plus the form values it implies."""

    id: str
    name: str
    description: str
    prompt: str
    form: dict[str, str]
    mix_notes: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Lyric sections
# ---------------------------------------------------------------------------

SECTION_ORDER: tuple[str, ...] = (
    "Intro",
    "Verse",
    "Pre-Chorus",
    "Chorus",
    "Drop",
    "Bridge",
    "Break",
    "Instrumental Hook",
    "Outro",
)

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

META_TAGS: tuple[str, ...] = (
    "high_fidelity",
    "studio_mix",
    "clean_master",
    "no_artifacts",
    "clear_vocals",
    "warm_low_end",
    "tight_highs",
    "analog_warmth",
    "dynamic_range:wide",
    "balanced_eq",
    "stereo_depth",
    "crystal_clarity",
    "true_stereo",
    "clear_guitar",
)

# Reported by users but not confirmed to steer the generator.
UNVERIFIED_META_TAGS: tuple[str, ...] = ("phase_coherent",)

DEFAULT_META_SELECTION: tuple[str, ...] = (
    "high_fidelity",
    "studio_mix",
    "clean_master",
    "no_artifacts",
    "clear_vocals",
    "warm_low_end",
    "tight_highs",
    "stereo_depth",
)

MIX_NOTE_PRESETS: tuple[str, ...] = (
    "warm_low_end",
    "tight_highs",
    "stereo_depth",
    "analog_warmth",
    "dynamic_range:wide",
    "clear_guitar",
    "crystal_clarity",
    "balanced_eq",
    "true_stereo",
)

EXCLUDE_RECOMMENDATIONS: tuple[str, ...] = (
    "rap",
    "trap_hats",
    "screamo",
    "growl",
    "guttural",
    "crowd_noise",
    "vinyl_crackle",
    "whistle",
    "ukulele",
    "kazoo",
    "slap_bass",
    "EDM supersaw",
    "voiceover",
)

# ---------------------------------------------------------------------------
# Prompt modes (keyed by PromptMode value)
# ---------------------------------------------------------------------------

MODE_TAGS: dict[str, str] = {
    "full": "",
    "instrumental": "[Instrumental Only]",
    "addVocals": "[Add Vocals]",
    "addInstrumentals": "[Add Instrumentals]",
}

MODE_LABELS: dict[str, str] = {
    "full": "Full song",
    "instrumental": "Instrumental Only",
    "addVocals": "Add Vocals",
    "addInstrumentals": "Add Instrumentals",
}

# ---------------------------------------------------------------------------
# Checklists
# ---------------------------------------------------------------------------

QA_ITEMS: tuple[ChecklistItem, ...] = (
    ChecklistItem("conflicts", "No conflicting tags (e.g. Lo-fi vs crystal clarity)"),
    ChecklistItem("bpm-key", "BPM/Key logged & file named Project_Song_vX.Y.Z_seed"),
    ChecklistItem("lufs", "-12 ±2 LUFS, <= -1 dBTP"),
    ChecklistItem("sibilance", "Sibilance/transients controlled"),
    ChecklistItem("mono", "Kick/Bass mono compatible to ~120 Hz"),
    ChecklistItem("meta-added", "Meta tags applied before remaster"),
)

QA_ITEM_IDS: frozenset[str] = frozenset(item.id for item in QA_ITEMS)


def default_qa_checks() -> dict[str, bool]:
    """Fresh QA map with every known item unchecked."""
    return {item.id: False for item in QA_ITEMS}


SOP_CHECKLISTS: tuple[ChecklistSection, ...] = (
    ChecklistSection(
        "pre-gen",
        "Pre-generation",
        (
            ChecklistItem("brief", "Brief + 2 reference attributes captured"),
            ChecklistItem("prompt", "Style prompt clean (Lyrics field free of meta)"),
            ChecklistItem("exclude", "Exclude list adjusted for project"),
        ),
    ),
    ChecklistSection(
        "generation",
        "Generate & Select",
        (
            ChecklistItem("takes", "2-4 takes generated"),
            ChecklistItem("seed", "Best seed logged"),
            ChecklistItem("variations", "<=3 variation waves on locked seed"),
            ChecklistItem("structure", "Structure confirmed or re-prompted"),
        ),
    ),
    ChecklistSection(
        "instrumental",
        "Instrumental / Stem workflow",
        (
            ChecklistItem("instrumental-tags", "Instrumental directives added"),
            ChecklistItem("hook", "Hook instrument defined"),
            ChecklistItem("cleanup", "DAW clean-up plan noted (EQ, de-reverb, M/S)"),
        ),
    ),
    ChecklistSection(
        "remaster",
        "Remaster & QA",
        (
            ChecklistItem("meta", "Meta tags inserted before remaster"),
            ChecklistItem("expose", "EXPOSE 2 run / input gain decision"),
            ChecklistItem("export", "Export 44.1/24 + naming scheme"),
        ),
    ),
)


def checklist_key(section_id: str, item_id: str) -> str:
    return f"{section_id}_{item_id}"


SOP_CHECKLIST_KEYS: frozenset[str] = frozenset(
    checklist_key(section.id, item.id) for section in SOP_CHECKLISTS for item in section.items
)

# ---------------------------------------------------------------------------
# Sound-bible templates
# ---------------------------------------------------------------------------

PROMPT_TEMPLATES: tuple[PromptTemplate, ...] = (
    PromptTemplate(
        id="brutalisk",
        name="Template A - Brutalisk Anthem",
        description="Core industrial anthem shell",
        prompt=(
            "[Genre=Industrial Metal] [Subgenre=Cyber-Brutalist, Slavonic Anthemic] "
            "[Mood=Cold, Triumphant]\n"
            "[Energy=High] [Tempo=130bpm] [Key=C minor] [TimeSig=4/4]\n"
            "[Vocal=Duet(Male deep, Female ethereal)] [Language=English]\n"
            "[Structure=Long Intro-Verse-Pre-Chorus-Verse-Chorus-Bridge-Epic Outro]\n"
            "[Instrumentation=Drop-tuned guitars, distorted bass, glitched synths, "
            "hybrid orchestra, live drums]\n"
            "[Hooks=Choir-like synth lead doubles chorus melody]\n"
            "[MixNotes=warm_low_end, tight_highs, stereo_depth, clear_guitar]\n"
            "[Exclude=rap, screamo, trap_hats, vinyl_crackle]"
        ),
        form={
            "genre": "Industrial Metal",
            "subgenre": "Cyber-Brutalist, Slavonic Anthemic",
            "mood": "Cold, Triumphant",
            "energy": "High",
            "tempo": "130",
            "key": "C minor",
            "time_signature": "4/4",
            "vocal": "Duet(Male deep, Female ethereal)",
            "language": "English",
            "structure": "Long Intro - Verse - Pre - Chorus - Verse - Chorus - Bridge - Epic Outro",
            "instrumentation": (
                "Drop-tuned guitars, distorted bass, glitched synths, hybrid orchestra, live drums"
            ),
            "hooks": "Choir-like synth lead doubles chorus melody",
            "exclude": "rap, screamo, trap_hats, vinyl_crackle",
        },
        mix_notes=("warm_low_end", "tight_highs", "stereo_depth", "clear_guitar"),
    ),
    PromptTemplate(
        id="fragments",
        name="Template B - Fragments of Silence",
        description="Slow build to orchestral metal",
        prompt=(
            "[Genre=Orchestral Industrial] [Mood=Introspective->Epic] [Energy=Rising]\n"
            "[Tempo=100->128bpm] [Key=E minor]\n"
            "[Structure=Soft Ambient Intro - Sparse Verse - Build - "
            "Grand Orchestral Metal Chorus - Sudden Cut Ending]\n"
            "[Vocal=Female lead, Male low harmonies (subtle)] [Language=English]\n"
            "[Instrumentation=Ambient pads, piano motifs, string ostinato, hybrid drums, "
            "wide guitars in chorus]\n"
            "[MixNotes=dynamic_range:wide, stereo_depth]\n"
            "[Exclude=trap_hats, growl]"
        ),
        form={
            "genre": "Orchestral Industrial",
            "subgenre": "",
            "mood": "Introspective->Epic",
            "energy": "Rising",
            "tempo": "100->128",
            "key": "E minor",
            "vocal": "Female lead, Male low harmonies (subtle)",
            "language": "English",
            "structure": (
                "Soft Ambient Intro - Sparse Verse - Build - "
                "Grand Orchestral Metal Chorus - Sudden Cut Ending"
            ),
            "instrumentation": (
                "Ambient pads, piano motifs, string ostinato, hybrid drums, wide guitars in chorus"
            ),
            "hooks": "",
            "exclude": "trap_hats, growl",
        },
        mix_notes=("dynamic_range:wide", "stereo_depth"),
    ),
)


def get_template(template_id: str) -> PromptTemplate | None:
    for template in PROMPT_TEMPLATES:
        if template.id == template_id:
            return template
    return None
