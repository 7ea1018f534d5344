"""Citation counts from the OpenAlex works API, looked up by DOI in batches."""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import requests
from tqdm import tqdm

from ..config import settings
from ..data.preprocess import normalize_doi
from .cache import append_cache, load_cache, pending_keys

logger = logging.getLogger(__name__)

OPENALEX_API = "https://api.openalex.org/works"
BATCH_SIZE = 50
MAX_RETRIES = 3
CITATION_CACHE_COLUMNS = ["doi", "cited_by_count"]


def _get_batch(session, params: dict, timeout: float) -> dict:
    for attempt in range(MAX_RETRIES):
        try:
            response = session.get(OPENALEX_API, params=params, timeout=timeout)
        except requests.exceptions.ConnectionError:
            if attempt == MAX_RETRIES - 1:
                raise
            time.sleep(2)
            continue

        if response.status_code == 429 and attempt < MAX_RETRIES - 1:
            time.sleep(min(2 ** (attempt + 1), 30))
            continue
        response.raise_for_status()
        return response.json()
    raise RuntimeError(f"OpenAlex request did not succeed after {MAX_RETRIES} attempts")


def fetch_citation_counts(
    dois: Iterable[str],
    session: Optional[Any] = None,
    mailto: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Dict[str, int]:
    """Map normalized DOI -> ``cited_by_count``. DOIs OpenAlex does not know are left out."""
    session = session or requests.Session()
    mailto = settings.openalex_mailto if mailto is None else mailto
    timeout = settings.http_timeout if timeout is None else timeout

    wanted: List[str] = []
    for doi in dois:
        doi = normalize_doi(doi)
        if doi and doi not in wanted:
            wanted.append(doi)

    counts: Dict[str, int] = {}
    for start in range(0, len(wanted), BATCH_SIZE):
        batch = wanted[start:start + BATCH_SIZE]
        params = {
            "filter": "doi:" + "|".join(batch),
            "select": "doi,cited_by_count",
            "per-page": BATCH_SIZE,
        }
        if mailto:
            params["mailto"] = mailto

        data = _get_batch(session, params, timeout)
        for item in data.get("results", []):
            doi = normalize_doi(item.get("doi"))
            if doi:
                counts[doi] = int(item.get("cited_by_count") or 0)
    return counts


def citation_counts(
    dois: Iterable[str],
    cache_path: Path,
    session: Optional[Any] = None,
    mailto: Optional[str] = None,
) -> pd.DataFrame:
    """
    Cached wrapper around :func:`fetch_citation_counts`.

    DOIs OpenAlex did not return are cached with an empty count so they are
    not requested again. A failed batch is logged and skipped.
    """
    cache = load_cache(cache_path, CITATION_CACHE_COLUMNS)
    normalized = [normalize_doi(d) for d in dois]
    todo = pending_keys(normalized, cache, "doi")
    logger.info("%d DOIs cached, %d to look up on OpenAlex", len(cache), len(todo))

    session = session or requests.Session()
    for start in tqdm(range(0, len(todo), BATCH_SIZE), desc="OpenAlex batches", disable=not todo):
        batch = todo[start:start + BATCH_SIZE]
        try:
            found = fetch_citation_counts(batch, session=session, mailto=mailto)
        except requests.exceptions.RequestException as e:
            logger.error("OpenAlex batch starting at %s failed: %s", batch[0], e)
            continue
        missing = [doi for doi in batch if doi not in found]
        if missing:
            logger.info("%d DOIs not found on OpenAlex", len(missing))
        append_cache(
            cache_path,
            [{"doi": doi, "cited_by_count": found.get(doi)} for doi in batch],
            CITATION_CACHE_COLUMNS,
        )
        time.sleep(0.1)

    return load_cache(cache_path, CITATION_CACHE_COLUMNS)
