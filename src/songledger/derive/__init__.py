"""Pure text derivations for SongLedger."""

from songledger.derive.prompt import (
    canonical_sections,
    format_lyric_outline,
    format_meta_tags,
    format_style_prompt,
)

__all__ = [
    "canonical_sections",
    "format_lyric_outline",
    "format_meta_tags",
    "format_style_prompt",
]
