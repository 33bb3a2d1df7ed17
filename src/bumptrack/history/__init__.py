"""Aggregate statistics over recorded logs."""

from bumptrack.history.aggregates import (
    ContractionSummary,
    KickSummary,
    persist_summary,
    summarize_contractions,
    summarize_kicks,
)

__all__ = [
    "ContractionSummary",
    "KickSummary",
    "persist_summary",
    "summarize_contractions",
    "summarize_kicks",
]
