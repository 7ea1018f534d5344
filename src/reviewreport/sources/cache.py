from pathlib import Path
from typing import Iterable, List, Sequence

import pandas as pd


def load_cache(path: Path, columns: Sequence[str]) -> pd.DataFrame:
    """Read a CSV cache, or return an empty frame with ``columns`` if it does not exist yet."""
    path = Path(path)
    if not path.exists():
        return pd.DataFrame(columns=list(columns))

    df = pd.read_csv(path)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Cache file {path} is missing columns: {missing}")
    return df[list(columns)]


def append_cache(path: Path, rows: Iterable[dict], columns: Sequence[str]) -> int:
    """Append rows to a CSV cache, writing the header only for a new file. Returns rows written."""
    path = Path(path)
    df = pd.DataFrame(list(rows), columns=list(columns))
    if df.empty:
        return 0

    path.parent.mkdir(parents=True, exist_ok=True)
    new_file = not path.exists()
    df.to_csv(path, mode="w" if new_file else "a", header=new_file, index=False)
    return len(df)


def pending_keys(keys: Iterable, cache: pd.DataFrame, key_col: str) -> List:
    """Keys not yet present in the cache, de-duplicated, in first-seen order."""
    done = {str(k) for k in cache[key_col].dropna()} if key_col in cache.columns else set()
    seen = set()
    pending = []
    for key in keys:
        if key is None or pd.isna(key):
            continue
        marker = str(key)
        if marker in done or marker in seen:
            continue
        seen.add(marker)
        pending.append(key)
    return pending
