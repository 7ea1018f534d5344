from pathlib import Path
from typing import Optional

import pandas as pd

from ..paths import PATHS, ProjectPaths


def save_dataframe(
    df: pd.DataFrame,
    filename: str,
    subdir: str = "processed",
    paths: Optional[ProjectPaths] = None,
) -> Path:
    """Save a DataFrame as CSV under data/processed or reports/tables."""
    paths = paths or PATHS
    if subdir == "processed":
        base = paths.data_processed
    elif subdir == "tables":
        base = paths.tables_dir
    else:
        raise ValueError(f"Unknown subdir: {subdir}")

    path = base / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path
