"""Data layer: loading the submissions export, cleaning, summary tables."""

from .ingest import load_submissions, REQUIRED_COLUMNS, DATE_COLUMNS
from .preprocess import preprocess_submissions, normalize_doi
from .tables import (
    yearly_summary,
    track_summary,
    editor_summary,
    track_year_pivot,
    enrichment_summary,
)

__all__ = [
    "load_submissions",
    "REQUIRED_COLUMNS",
    "DATE_COLUMNS",
    "preprocess_submissions",
    "normalize_doi",
    "yearly_summary",
    "track_summary",
    "editor_summary",
    "track_year_pivot",
    "enrichment_summary",
]
