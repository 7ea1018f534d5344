"""Summary tables for the report. Each function takes the preprocessed submissions frame."""

import pandas as pd


def yearly_summary(df: pd.DataFrame) -> pd.DataFrame:
    summary = (
        df.groupby("year")
        .agg(
            submitted=("id", "count"),
            published=("is_published", "sum"),
            median_days_in_review=("days_in_review", "median"),
            mean_days_in_review=("days_in_review", "mean"),
        )
        .reset_index()
    )
    summary["published"] = summary["published"].astype(int)
    summary["publish_rate"] = summary["published"] / summary["submitted"]
    return summary[
        ["year", "submitted", "published", "publish_rate", "median_days_in_review", "mean_days_in_review"]
    ]


def track_summary(df: pd.DataFrame) -> pd.DataFrame:
    summary = (
        df.groupby("track")
        .agg(
            submissions=("id", "count"),
            published=("is_published", "sum"),
            median_days_in_review=("days_in_review", "median"),
        )
        .reset_index()
    )
    summary["published"] = summary["published"].astype(int)
    summary["share"] = summary["submissions"] / summary["submissions"].sum()
    return summary.sort_values(["submissions", "track"], ascending=[False, True]).reset_index(drop=True)


def editor_summary(df: pd.DataFrame, top: int = 10) -> pd.DataFrame:
    """Editors ranked by the number of submissions they handled."""
    if top <= 0:
        raise ValueError(f"top must be positive, got {top}")
    summary = (
        df.dropna(subset=["editor"])
        .groupby("editor")
        .agg(
            handled=("id", "count"),
            published=("is_published", "sum"),
            median_days_in_review=("days_in_review", "median"),
        )
        .reset_index()
    )
    summary["published"] = summary["published"].astype(int)
    summary = summary.sort_values(["handled", "editor"], ascending=[False, True])
    return summary.head(top).reset_index(drop=True)


def track_year_pivot(df: pd.DataFrame) -> pd.DataFrame:
    """Submission counts, years x tracks, zero filled."""
    pivot = df.pivot_table(index="year", columns="track", values="id", aggfunc="count", fill_value=0)
    pivot.columns.name = "track"
    return pivot.astype(int).sort_index()


def enrichment_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Per published year medians of review comments and citations, where those columns exist."""
    value_cols = [c for c in ("n_comments", "cited_by_count") if c in df.columns]
    if not value_cols:
        return pd.DataFrame(columns=["published_year", "papers"])

    published = df[df["is_published"]]
    aggs = {"papers": ("id", "count")}
    for col in value_cols:
        aggs[f"median_{col}"] = (col, "median")
    return published.groupby("published_year").agg(**aggs).reset_index()
