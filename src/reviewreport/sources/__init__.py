"""Read-only remote sources (GitHub review threads, OpenAlex citations), cached to CSV."""

from .cache import load_cache, append_cache, pending_keys
from .github import fetch_issue_comments, count_review_comments
from .openalex import fetch_citation_counts, citation_counts
from .enrich import attach_enrichment

__all__ = [
    "load_cache",
    "append_cache",
    "pending_keys",
    "fetch_issue_comments",
    "count_review_comments",
    "fetch_citation_counts",
    "citation_counts",
    "attach_enrichment",
]
