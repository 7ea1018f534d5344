import logging
from typing import Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

_DOI_PREFIXES = ("https://doi.org/", "http://doi.org/", "http://dx.doi.org/", "https://dx.doi.org/", "doi:")


def normalize_doi(doi) -> Optional[str]:
    """Lower-case a DOI and strip any resolver prefix."""
    if doi is None or (isinstance(doi, float) and np.isnan(doi)):
        return None
    doi = str(doi).strip().lower()
    for prefix in _DOI_PREFIXES:
        if doi.startswith(prefix):
            doi = doi[len(prefix):]
            break
    return doi or None


def _duration_days(end: pd.Series, start: pd.Series, label: str) -> pd.Series:
    days = (end - start).dt.total_seconds() / 86400.0
    negative = days < 0
    if negative.any():
        logger.warning("Dropping %d negative %s durations", int(negative.sum()), label)
        days = days.mask(negative)
    return days


def preprocess_submissions(df: pd.DataFrame) -> pd.DataFrame:
    """Clean the submissions table and derive durations and calendar fields."""
    n_raw = len(df)
    df = df.dropna(subset=["submitted"])
    df = df.drop_duplicates(subset=["id"], keep="first")
    df = df.sort_values("submitted", kind="mergesort").reset_index(drop=True)
    if len(df) != n_raw:
        logger.info("Dropped %d rows without submission date or with duplicate id", n_raw - len(df))

    df["track"] = df["track"].fillna("Unassigned")
    df["doi"] = df["doi"].map(normalize_doi)
    df["review_issue"] = pd.to_numeric(df["review_issue"], errors="coerce").astype("Int64")

    df["days_in_review"] = _duration_days(df["published"], df["submitted"], "review")
    df["days_to_accept"] = _duration_days(df["accepted"], df["submitted"], "acceptance")

    df["year"] = df["submitted"].dt.year
    df["published_year"] = df["published"].dt.year.astype("Int64")
    df["is_published"] = df["published"].notna()
    return df
