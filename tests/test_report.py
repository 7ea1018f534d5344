import os
import sys

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from reviewreport.analysis.smoothing import smooth
from reviewreport.paths import ProjectPaths
from reviewreport.report import charts
from reviewreport.report.build import build_report, parse_args
from reviewreport.report.palette import DEFAULT_PALETTE, Palette
from reviewreport.sources import append_cache
from reviewreport.sources.github import COMMENT_CACHE_COLUMNS
from reviewreport.sources.openalex import CITATION_CACHE_COLUMNS


def _submissions_frame(n=40, seed=0):
    rng = np.random.default_rng(seed)
    submitted = pd.Timestamp("2019-01-01") + pd.to_timedelta(rng.integers(0, 1000, size=n), unit="D")
    review_days = rng.integers(30, 300, size=n)
    published = submitted + pd.to_timedelta(review_days, unit="D")
    published = published.where(rng.random(n) > 0.2)
    accepted = published - pd.Timedelta(days=7)
    return pd.DataFrame(
        {
            "id": np.arange(1, n + 1),
            "title": [f"Paper {i}" for i in range(n)],
            "track": rng.choice(["Astro", "Bio", "CS"], size=n),
            "editor": rng.choice(["alice", "bob", "carol", "dan"], size=n),
            "submitted": submitted.strftime("%Y-%m-%d"),
            "accepted": accepted.strftime("%Y-%m-%d"),
            "published": published.strftime("%Y-%m-%d"),
            "repository": [f"https://github.com/org/p{i}" for i in range(n)],
            "review_issue": np.arange(1000, 1000 + n),
            "doi": [f"10.21105/joss.{i:05d}" for i in range(n)],
        }
    )


def test_palette_from_labels_is_stable_and_has_default():
    a = Palette.from_labels(["Bio", "Astro", "Bio"])
    b = Palette.from_labels(["Astro", "Bio"])
    assert a.colors == b.colors
    assert set(a.colors) == {"Astro", "Bio"}
    assert a.color_for("unknown") == a.default
    assert a.colors_for(["Astro", "nope"]) == [a.colors["Astro"], a.default]


def test_palette_with_labels_keeps_existing_colors():
    palette = DEFAULT_PALETTE.with_labels(["Astro", "published"])
    assert palette.color_for("published") == DEFAULT_PALETTE.color_for("published")
    assert "Astro" in palette.colors
    assert palette.trend == DEFAULT_PALETTE.trend


def test_trend_grid_covers_knots():
    curve = smooth([(0, 1.0), (10, 2.0), (4, 3.0)], window_width=2)
    grid = charts.trend_grid(curve, n_points=11)
    assert grid[0] == 0 and grid[-1] == 10
    assert 4 in grid
    assert not np.isnan(curve(grid)).any()


def test_plot_scatter_with_trend_writes_png(tmp_path):
    df = pd.DataFrame(
        {
            "published": pd.date_range("2021-01-01", periods=30, freq="7D"),
            "days": np.linspace(50, 120, 30),
            "track": ["Astro", "Bio"] * 15,
        }
    )
    palette = Palette.from_labels(df["track"])
    out = charts.plot_scatter_with_trend(
        df, "published", "days", palette, tmp_path / "figs" / "trend.png",
        window=pd.Timedelta(days=60), title="Trend", ylabel="Days", color_col="track",
    )
    assert out.exists()
    assert plt.get_fignums() == []


def test_plot_scatter_with_trend_requires_rows(tmp_path):
    df = pd.DataFrame({"x": [np.nan], "y": [1.0]})
    with pytest.raises(ValueError):
        charts.plot_scatter_with_trend(df, "x", "y", DEFAULT_PALETTE, tmp_path / "a.png",
                                       window=1, title="t", ylabel="y")


def test_bar_charts_and_table_write_png(tmp_path):
    pivot = pd.DataFrame({"Astro": [1, 2], "Bio": [0, 3]}, index=pd.Index([2020, 2021], name="year"))
    summary = pd.DataFrame({"year": [2020, 2021], "submitted": [3, 5], "published": [2, 4]})
    palette = DEFAULT_PALETTE.with_labels(pivot.columns)

    assert charts.plot_submissions_by_track(pivot, palette, tmp_path / "tracks.png").exists()
    assert charts.plot_yearly_counts(summary, palette, tmp_path / "years.png").exists()
    assert charts.plot_table(summary.assign(rate=[0.5, np.nan]), tmp_path / "t.png", title="T").exists()
    assert charts.plot_table(summary.iloc[0:0], tmp_path / "empty.png").exists()


def test_build_report_end_to_end_with_cached_enrichment(tmp_path):
    paths = ProjectPaths.under(tmp_path)
    paths.ensure_directories()
    df = _submissions_frame()
    df.to_csv(paths.data_raw / "subs.csv", index=False)

    append_cache(
        paths.data_cache / "review_comments.csv",
        [{"review_issue": issue, "n_comments": issue % 17, "fetched_at": "2024-01-01"} for issue in df["review_issue"]],
        COMMENT_CACHE_COLUMNS,
    )
    append_cache(
        paths.data_cache / "citations.csv",
        [{"doi": doi, "cited_by_count": i % 5} for i, doi in enumerate(df["doi"])],
        CITATION_CACHE_COLUMNS,
    )

    artifacts = build_report(input_file="subs.csv", paths=paths, window_days=120, fetch=False)

    assert artifacts.report.exists()
    assert artifacts.processed.exists()
    for name in ("review_time", "acceptance_time", "review_comments", "citations",
                 "submissions_by_track", "yearly_counts"):
        assert artifacts.figures[name].exists()
    assert set(artifacts.tables) == {"yearly_summary", "track_summary", "editor_summary", "enrichment_summary"}

    report = artifacts.report.read_text(encoding="utf-8")
    assert "figures/review_time.png" in report
    assert "tables/yearly_summary.csv" in report
    assert "120-day window" in report


def test_build_report_without_enrichment_skips_remote_charts(tmp_path):
    paths = ProjectPaths.under(tmp_path)
    paths.ensure_directories()
    _submissions_frame(n=15, seed=3).to_csv(paths.data_raw / "subs.csv", index=False)

    artifacts = build_report(input_file="subs.csv", paths=paths, window_days=90, fetch=False)

    assert "review_comments" not in artifacts.figures
    assert "citations" not in artifacts.figures
    assert "enrichment_summary" not in artifacts.tables
    assert artifacts.figures["review_time"].exists()


def test_parse_args_fetch_flags():
    assert parse_args([]).fetch is None
    assert parse_args(["--fetch"]).fetch is True
    assert parse_args(["--no-fetch", "--window-days", "30"]).fetch is False
    assert parse_args(["--window-days", "30"]).window_days == 30.0


def test_with_labels_matches_existing_colors_by_string():
    base = Palette(colors={"2020": "#000000"})
    palette = base.with_labels([2020, 2021])
    assert palette.color_for(2020) == "#000000"
    assert "2021" in palette.colors
