#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exploratory data analysis of a table.

CSV table -> per-column summary statistics -> missing-value chart ->
correlation matrix -> pairs plot of the numeric columns.
"""
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import pandas as pd

from visage.core.io import image_path, resolve_dataset, save_figure
from visage.core.logging_config import get_module_logger
from visage.plotting.charts import plot_correlation_matrix, plot_missing_values, plot_pairs
from visage.plotting.theme import apply_theme, build_caption

logger = get_module_logger(__name__)

METADATA = {
    "title": "Exploring a dataset before mapping it",
    "categories": ["eda", "statistics", "tabular"],
    "description": "Summary statistics, missing values, correlations and pairwise scatter plots of a table.",
    "data_source": "Tabular dataset",
}


def summarize_table(table: pd.DataFrame) -> pd.DataFrame:
    """
    Per-column summary of a table.

    One row per column with its type, the count and share of missing values,
    the number of distinct values and, for numeric columns, mean, standard
    deviation, minimum, median and maximum.
    """
    summary = pd.DataFrame({
        "dtype": table.dtypes.astype(str),
        "missing": table.isna().sum(),
        "missing_pct": table.isna().mean().mul(100).round(2),
        "unique": table.nunique(),
    })
    numeric = table.select_dtypes(include="number")
    if not numeric.empty:
        stats = numeric.describe().T[["mean", "std", "min", "50%", "max"]]
        summary = summary.join(stats.rename(columns={"50%": "median"}))
    return summary


def run(
    data_dir: Optional[Union[str, Path]] = None,
    topic: Optional[str] = None,
    table: str = "table.csv",
    table_url: Optional[str] = None,
    columns: Optional[Sequence[str]] = None,
    method: str = "pearson",
    max_pairs: int = 5,
    source: Optional[str] = None,
    title: Optional[str] = None,
    **options: Any
) -> List[Path]:
    """
    Render the exploratory charts of a CSV table.

    The summary statistics are written next to the images as ``summary.csv``.

    Parameters
    ----------
    table : str
        CSV file name in ``data_dir``, downloaded from ``table_url`` when absent.
    columns : sequence of str, optional
        Columns to explore, by default all of them.
    method : str, optional
        Correlation method.
    max_pairs : int, optional
        Maximum number of numeric columns in the pairs plot.
    source : str, optional
        Data credit for the captions.

    Returns
    -------
    list of Path
        Saved images.
    """
    topic = topic or "eda_summary"
    apply_theme()

    path = resolve_dataset(table, data_dir, url=table_url)
    frame = pd.read_csv(path)
    if columns:
        missing = [c for c in columns if c not in frame.columns]
        if missing:
            raise ValueError(f"Columns not found in {path.name}: {missing}")
        frame = frame[list(columns)]
    if frame.empty:
        raise ValueError(f"No rows to explore in {path.name}")

    summary = summarize_table(frame)
    logger.info(f"{len(frame)} rows, {frame.shape[1]} columns, "
                f"{int(summary['missing'].sum())} missing values")
    summary_path = image_path(topic, "summary.csv")
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    summary.to_csv(summary_path, index_label="column")
    logger.info(f"Saved summary statistics to {summary_path}")

    caption = build_caption(source or METADATA["data_source"], tools=["pandas", "matplotlib"])
    heading = title or METADATA["title"]
    outputs = [save_figure(plot_missing_values(frame, title=f"{heading}: missing values",
                                               caption=caption), topic, "missing_values")]

    n_numeric = frame.select_dtypes(include="number").shape[1]
    if n_numeric < 2:
        logger.warning(f"Only {n_numeric} numeric column(s); skipping correlation and pairs plots")
        return outputs

    outputs.append(save_figure(
        plot_correlation_matrix(frame, method=method, title=f"{heading}: correlations",
                                caption=caption),
        topic, "correlation"))
    outputs.append(save_figure(
        plot_pairs(frame, max_columns=max_pairs, title=f"{heading}: pairs", caption=caption),
        topic, "pairs"))
    return outputs
