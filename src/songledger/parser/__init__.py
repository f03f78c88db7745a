"""Seed-workspace YAML loading."""

from songledger.parser.loader import (
    SeedLoader,
    SeedLoadError,
    SourceMap,
    YAMLSafetyError,
    load_sample_workspace,
)

__all__ = [
    "SeedLoadError",
    "SeedLoader",
    "SourceMap",
    "YAMLSafetyError",
    "load_sample_workspace",
]
