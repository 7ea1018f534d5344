from pathlib import Path
from typing import Optional

import pandas as pd

from ..paths import PATHS
from ..config import settings

REQUIRED_COLUMNS = [
    "id",
    "title",
    "track",
    "editor",
    "submitted",
    "accepted",
    "published",
    "repository",
    "review_issue",
    "doi",
]
DATE_COLUMNS = ["submitted", "accepted", "published"]


def load_submissions(filename: Optional[str] = None, raw_dir: Optional[Path] = None) -> pd.DataFrame:
    """Load the raw submissions export from data/raw."""
    filename = filename or settings.submissions_file
    path = Path(raw_dir or PATHS.data_raw) / filename
    if not path.exists():
        raise FileNotFoundError(f"Submissions file not found: {path}")

    df = pd.read_csv(path)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Submissions file {path.name} is missing columns: {missing}")

    for col in DATE_COLUMNS:
        df[col] = pd.to_datetime(df[col], errors="coerce")
    df = df.sort_values("submitted", kind="mergesort").reset_index(drop=True)
    return df
