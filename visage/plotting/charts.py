#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Statistical charts for exploring a table before mapping it.

Like the map figures, these build and return a matplotlib figure and leave
saving to ``core.io.save_figure``.
"""
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from pandas.plotting import scatter_matrix

from visage.core.config import FIGURE_CONFIG
from visage.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def _numeric_columns(table: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    if columns:
        missing = [c for c in columns if c not in table.columns]
        if missing:
            raise ValueError(f"Columns not found in table: {missing}")
        table = table[list(columns)]
    return table.select_dtypes(include="number")


def _annotate(fig: plt.Figure, title: Optional[str], caption: Optional[str]) -> None:
    if title:
        fig.suptitle(title, x=0.01, ha="left", fontweight="bold",
                     fontsize=FIGURE_CONFIG.get("title_size", 16))
    if caption:
        fig.text(0.99, 0.005, caption, ha="right", va="bottom",
                 fontsize=FIGURE_CONFIG.get("caption_size", 8), alpha=0.8)


def plot_missing_values(
    table: pd.DataFrame,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Horizontal bar chart of the share of missing values per column.

    Parameters
    ----------
    table : pd.DataFrame
        Table to inspect.
    title, caption : str, optional
        Texts drawn around the chart.
    figsize : tuple, optional
        Figure size, by default ``FIGURE_CONFIG["figsize"]``.

    Returns
    -------
    plt.Figure
        Matplotlib figure.
    """
    if table.shape[1] == 0:
        raise ValueError("Table has no columns")

    share = table.isna().mean().mul(100).sort_values()
    fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    bars = ax.barh(share.index.astype(str), share.values, color="#4c72b0")
    for bar, value in zip(bars, share.values):
        ax.text(min(value + 1, 95), bar.get_y() + bar.get_height() / 2, f"{value:.1f}%",
                va="center", fontsize=8)
    ax.set_xlim(0, 100)
    ax.set_xlabel("Missing values (%)")
    ax.spines[["top", "right"]].set_visible(False)

    _annotate(fig, title, caption)
    fig.tight_layout()
    return fig


def plot_correlation_matrix(
    table: pd.DataFrame,
    columns: Optional[Sequence[str]] = None,
    method: str = "pearson",
    max_columns: int = 20,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Plot the correlation matrix between the numeric columns of a table.

    Parameters
    ----------
    table : pd.DataFrame
        Table to inspect.
    columns : sequence of str, optional
        Columns to correlate, by default every numeric column.
    method : str, optional
        Correlation method, by default 'pearson'.
        Options: 'pearson', 'kendall', 'spearman'
    max_columns : int, optional
        Maximum number of columns to include, by default 20.
    title, caption : str, optional
        Texts drawn around the chart.
    figsize : tuple, optional
        Figure size, by default ``FIGURE_CONFIG["figsize"]``.

    Returns
    -------
    plt.Figure
        Matplotlib figure.
    """
    numeric = _numeric_columns(table, columns)
    if numeric.shape[1] < 2:
        raise ValueError("A correlation matrix needs at least two numeric columns")

    # Limit the number of columns for readability
    if numeric.shape[1] > max_columns:
        logger.warning(f"Limiting correlation matrix to {max_columns} columns")
        keep = numeric.var().sort_values(ascending=False).index[:max_columns]
        numeric = numeric[keep]

    corr = numeric.corr(method=method)
    n = len(corr)

    fig, ax = plt.subplots(figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)))
    im = ax.imshow(corr.values, cmap="coolwarm", vmin=-1, vmax=1)
    cbar = fig.colorbar(im, ax=ax, shrink=0.8)
    cbar.set_label(f"Correlation ({method})")

    # lower triangle only
    for i in range(n):
        for j in range(i):
            ax.text(j, i, f"{corr.iloc[i, j]:.2f}", ha="center", va="center", fontsize=8)

    ax.set_xticks(np.arange(n))
    ax.set_yticks(np.arange(n))
    ax.set_xticklabels(corr.columns, rotation=45, ha="right")
    ax.set_yticklabels(corr.columns)

    _annotate(fig, title, caption)
    fig.tight_layout()
    return fig


def plot_pairs(
    table: pd.DataFrame,
    columns: Optional[Sequence[str]] = None,
    max_columns: int = 5,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    figsize: Optional[Tuple[float, float]] = None
) -> plt.Figure:
    """
    Pairwise scatter plots of numeric columns with histograms on the diagonal.

    Rows with a missing value in any plotted column are left out.
    """
    numeric = _numeric_columns(table, columns)
    if numeric.shape[1] > max_columns:
        logger.info(f"Plotting pairs of the first {max_columns} numeric columns")
        numeric = numeric.iloc[:, :max_columns]
    if numeric.shape[1] < 2:
        raise ValueError("A pairs plot needs at least two numeric columns")

    complete = numeric.dropna()
    if complete.empty:
        raise ValueError("No complete rows to plot")

    axes = scatter_matrix(complete, figsize=figsize or FIGURE_CONFIG.get("figsize", (10, 8)),
                          alpha=0.6, diagonal="hist", color="#4c72b0")
    fig = axes[0, 0].get_figure()

    _annotate(fig, title, caption)
    return fig
