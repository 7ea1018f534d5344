"""
Comment counts of the GitHub issues on which submissions were reviewed.

Requests are made one issue at a time and results appended to a CSV cache,
so an interrupted run picks up where it left off.
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import requests
from tqdm import tqdm

from ..config import settings
from .cache import append_cache, load_cache, pending_keys

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
PER_PAGE = 100
MAX_RETRIES = 3
MAX_WAIT = 30.0
COMMENT_CACHE_COLUMNS = ["review_issue", "n_comments", "fetched_at"]


def _headers(token: Optional[str]) -> Dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": "reviewreport",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _is_rate_limited(response) -> bool:
    if response.status_code == 429:
        return True
    # plain 403s are permission errors
    headers = response.headers
    return response.status_code == 403 and (
        headers.get("X-RateLimit-Remaining") == "0" or "Retry-After" in headers
    )


def _rate_limit_wait(response, attempt: int) -> float:
    """Seconds to wait: ``Retry-After``, else until ``X-RateLimit-Reset``, else exponential; capped."""
    headers = response.headers
    retry_after = headers.get("Retry-After")
    reset = headers.get("X-RateLimit-Reset")
    try:
        if retry_after is not None:
            wait = float(retry_after)
        elif reset is not None:
            wait = float(reset) - time.time()
        else:
            wait = 2 ** (attempt + 1)
    except ValueError:
        wait = 2 ** (attempt + 1)
    return min(max(wait, 0.0), MAX_WAIT)


def _get_with_retry(session, url: str, params: Optional[dict], headers: dict, timeout: float):
    for attempt in range(MAX_RETRIES):
        try:
            response = session.get(url, params=params, headers=headers, timeout=timeout)
        except requests.exceptions.ConnectionError:
            if attempt == MAX_RETRIES - 1:
                raise
            time.sleep(2)
            continue

        if _is_rate_limited(response) and attempt < MAX_RETRIES - 1:
            wait = _rate_limit_wait(response, attempt)
            logger.warning("GitHub rate limited (%s), sleeping %.0fs", response.status_code, wait)
            time.sleep(wait)
            continue
        response.raise_for_status()
        return response
    raise RuntimeError(f"GET {url} did not succeed after {MAX_RETRIES} attempts")


def fetch_issue_comments(
    repo: str,
    issue: int,
    session: Optional[Any] = None,
    token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> List[dict]:
    """All comments of ``repo``'s issue ``issue``, following ``Link: rel="next"`` pages."""
    session = session or requests.Session()
    token = settings.github_token if token is None else token
    timeout = settings.http_timeout if timeout is None else timeout
    headers = _headers(token)

    url = f"{GITHUB_API}/repos/{repo}/issues/{int(issue)}/comments"
    params: Optional[dict] = {"per_page": PER_PAGE}
    comments: List[dict] = []
    while url:
        response = _get_with_retry(session, url, params, headers, timeout)
        comments.extend(response.json())
        url = response.links.get("next", {}).get("url")
        # the next link already carries the query string
        params = None
    return comments


def count_review_comments(
    issues: Iterable[int],
    cache_path: Path,
    review_repo: Optional[str] = None,
    session: Optional[Any] = None,
    token: Optional[str] = None,
) -> pd.DataFrame:
    """
    Number of comments per review issue, cached in ``cache_path``.

    Issues already in the cache are skipped. A failed fetch is logged and left
    out of the cache so the next run retries it.
    """
    review_repo = review_repo or settings.review_repo
    cache = load_cache(cache_path, COMMENT_CACHE_COLUMNS)
    todo = pending_keys(issues, cache, "review_issue")
    logger.info("%d review issues cached, %d to fetch from %s", len(cache), len(todo), review_repo)

    session = session or requests.Session()
    for issue in tqdm(todo, desc="Review comments", disable=not todo):
        try:
            comments = fetch_issue_comments(review_repo, issue, session=session, token=token)
        except requests.exceptions.RequestException as e:
            logger.error("Could not fetch comments for issue %s: %s", issue, e)
            continue
        append_cache(
            cache_path,
            [{
                "review_issue": int(issue),
                "n_comments": len(comments),
                "fetched_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            }],
            COMMENT_CACHE_COLUMNS,
        )

    return load_cache(cache_path, COMMENT_CACHE_COLUMNS)
