from typing import Optional

import pandas as pd


def attach_enrichment(
    df: pd.DataFrame,
    comments: Optional[pd.DataFrame] = None,
    citations: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """Left-join cached comment counts (on ``review_issue``) and citation counts (on ``doi``)."""
    out = df.copy()
    if comments is not None:
        comments = comments[["review_issue", "n_comments"]].copy()
        comments["review_issue"] = pd.to_numeric(comments["review_issue"], errors="coerce").astype("Int64")
        comments = comments.drop_duplicates(subset=["review_issue"], keep="last")
        out["review_issue"] = out["review_issue"].astype("Int64")
        out = out.merge(comments, on="review_issue", how="left")
    if citations is not None:
        citations = citations[["doi", "cited_by_count"]].drop_duplicates(subset=["doi"], keep="last")
        citations = citations.astype({"doi": object})
        out = out.merge(citations, on="doi", how="left")
    return out
