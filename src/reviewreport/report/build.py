"""Build the full report: tables, charts and a Markdown index linking them."""

import argparse
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ..config import settings
from ..data import (
    editor_summary,
    enrichment_summary,
    load_submissions,
    preprocess_submissions,
    track_summary,
    track_year_pivot,
    yearly_summary,
)
from ..logging_config import setup_logging
from ..paths import PATHS, ProjectPaths
from ..sources import attach_enrichment, citation_counts, count_review_comments, load_cache
from ..sources.github import COMMENT_CACHE_COLUMNS
from ..sources.openalex import CITATION_CACHE_COLUMNS
from ..utils.io import save_dataframe
from . import charts
from .palette import DEFAULT_PALETTE, Palette

logger = logging.getLogger(__name__)

COMMENTS_CACHE = "review_comments.csv"
CITATIONS_CACHE = "citations.csv"


@dataclass
class ReportArtifacts:
    report: Optional[Path] = None
    figures: Dict[str, Path] = field(default_factory=dict)
    tables: Dict[str, Path] = field(default_factory=dict)
    processed: Optional[Path] = None


def _enrich(df: pd.DataFrame, paths: ProjectPaths, fetch: bool, session: Any) -> pd.DataFrame:
    comments_path = paths.data_cache / COMMENTS_CACHE
    citations_path = paths.data_cache / CITATIONS_CACHE

    if fetch:
        logger.info("Fetching review comments and citation counts...")
        comments = count_review_comments(df["review_issue"], comments_path, session=session)
        published_dois = df.loc[df["is_published"], "doi"]
        citations = citation_counts(published_dois, citations_path, session=session)
    else:
        comments = load_cache(comments_path, COMMENT_CACHE_COLUMNS) if comments_path.exists() else None
        citations = load_cache(citations_path, CITATION_CACHE_COLUMNS) if citations_path.exists() else None
        if comments is None and citations is None:
            logger.info("Remote fetching disabled and no caches found; skipping enrichment.")

    return attach_enrichment(df, comments=comments, citations=citations)


def _write_markdown(path: Path, artifacts: ReportArtifacts, n_submissions: int, window_days: float) -> Path:
    lines: List[str] = [
        f"# Submission report ({datetime.now():%Y-%m-%d})\n\n",
        f"Summary of {n_submissions} submissions. "
        f"Trend lines are rolling medians over a {window_days:g}-day window.\n\n",
        "## Figures\n\n",
    ]
    for name, fig_path in artifacts.figures.items():
        title = name.replace("_", " ").title()
        lines += [f"### {title}\n\n", f"![{title}]({fig_path.relative_to(path.parent).as_posix()})\n\n"]

    lines.append("## Tables\n\n")
    for name, table_path in artifacts.tables.items():
        title = name.replace("_", " ").title()
        lines.append(f"- [{title}]({table_path.relative_to(path.parent).as_posix()})\n")

    path.write_text("".join(lines), encoding="utf-8")
    return path


def build_report(
    input_file: Optional[str] = None,
    paths: Optional[ProjectPaths] = None,
    window_days: Optional[float] = None,
    fetch: Optional[bool] = None,
    palette: Optional[Palette] = None,
    session: Any = None,
) -> ReportArtifacts:
    """
    Run the whole pipeline and write every artifact under ``paths``.

    Parameters
    ----------
    input_file : str, optional
        CSV name under data/raw; defaults to ``settings.submissions_file``.
    paths : ProjectPaths, optional
        Project layout; defaults to the repository layout.
    window_days : float, optional
        Width of the rolling median window for trend lines.
    fetch : bool, optional
        Query GitHub and OpenAlex for rows not yet cached. When False,
        existing caches are still used.
    palette : Palette, optional
        Base colours; tracks missing from it get colours assigned.
    session : requests.Session-like, optional
        HTTP session used for remote fetches.
    """
    paths = paths or PATHS
    window_days = settings.trend_window_days if window_days is None else window_days
    fetch = settings.fetch_remote if fetch is None else fetch
    paths.ensure_directories()

    logger.info("Loading submissions...")
    df = preprocess_submissions(load_submissions(input_file, raw_dir=paths.data_raw))
    logger.info("Loaded %d submissions", len(df))

    df = _enrich(df, paths, fetch, session)
    palette = (palette or DEFAULT_PALETTE).with_labels(df["track"].unique())

    artifacts = ReportArtifacts()
    artifacts.processed = save_dataframe(df, "submissions_clean.csv", subdir="processed", paths=paths)

    logger.info("Building summary tables...")
    tables = {
        "yearly_summary": yearly_summary(df),
        "track_summary": track_summary(df),
        "editor_summary": editor_summary(df),
    }
    enrichment = enrichment_summary(df)
    if not enrichment.empty:
        tables["enrichment_summary"] = enrichment

    for name, table in tables.items():
        artifacts.tables[name] = save_dataframe(table, f"{name}.csv", subdir="tables", paths=paths)
        artifacts.figures[name] = charts.plot_table(
            table, paths.figures_dir / f"{name}.png", title=name.replace("_", " ").title()
        )

    logger.info("Rendering charts...")
    fig_dir = paths.figures_dir
    artifacts.figures["submissions_by_track"] = charts.plot_submissions_by_track(
        track_year_pivot(df), palette, fig_dir / "submissions_by_track.png"
    )
    artifacts.figures["yearly_counts"] = charts.plot_yearly_counts(
        tables["yearly_summary"], palette, fig_dir / "yearly_counts.png"
    )

    published = df[df["is_published"]]
    trend_charts = [
        ("review_time", "days_in_review", "Days from submission to publication", "Review time"),
        ("acceptance_time", "days_to_accept", "Days from submission to acceptance", "Time to acceptance"),
        ("review_comments", "n_comments", "Comments on review issue", "Review thread length"),
        ("citations", "cited_by_count", "Citations (OpenAlex)", "Citations per paper"),
    ]
    for name, column, ylabel, title in trend_charts:
        if column not in published.columns or published[column].notna().sum() == 0:
            logger.info("No %s data; skipping %s chart", column, name)
            continue
        artifacts.figures[name] = charts.plot_scatter_with_trend(
            published,
            x_col="published",
            y_col=column,
            palette=palette,
            output_path=fig_dir / f"{name}.png",
            window=pd.Timedelta(days=window_days),
            title=f"{title} by publication date",
            ylabel=ylabel,
            color_col="track",
            xlabel="Publication date",
        )

    artifacts.report = _write_markdown(paths.reports_dir / "report.md", artifacts, len(df), window_days)
    logger.info("Report written to %s", artifacts.report)
    return artifacts


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the journal submission report.")
    parser.add_argument("--input", default=None, help="CSV file name under data/raw.")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Project root holding data/raw; data/ and reports/ outputs go under it.")
    parser.add_argument("--window-days", type=float, default=None,
                        help="Rolling median window width in days.")
    parser.add_argument("--fetch", dest="fetch", action="store_true", default=None,
                        help="Query GitHub and OpenAlex for rows not cached yet.")
    parser.add_argument("--no-fetch", dest="fetch", action="store_false",
                        help="Only use cached remote data.")
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.log_level)

    paths = ProjectPaths.under(args.output_dir) if args.output_dir else None
    if args.window_days is not None and args.window_days <= 0:
        raise SystemExit("--window-days must be positive")

    build_report(
        input_file=args.input,
        paths=paths,
        window_days=args.window_days,
        fetch=args.fetch,
    )


if __name__ == "__main__":
    main()
