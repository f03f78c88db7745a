"""SongLedger: prompt, version and release ledger for AI-generated songs."""

__version__ = "0.3.0"
