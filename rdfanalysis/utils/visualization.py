"""
Visualization utilities for RDFAnalysis.

This module provides plotting functions for exhaustion tables (specification
curves) and power summaries.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

__all__ = []

_FOOTER = "made in RDFAnalysis: exploring researcher degrees of freedom"


def _import_pyplot():
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib required for plotting: pip install matplotlib") from None
    return plt


def _create_power_plot(
    summary: pd.DataFrame,
    x: str,
    group: Optional[str] = None,
    target_power: float = 80.0,
    title: str = "Power Analysis",
    show: bool = True,
):
    """Create a power-vs-parameter line plot with achievement markers.

    Draws one line per value of *group* (or a single line), a horizontal
    dashed line at the target power, and annotates the first *x* value at
    which each line reaches the target.

    Args:
        summary: Output of ``ResultsProcessor.summarize_power``.
        x: Parameter column on the x-axis (e.g. ``"sample_size"``).
        group: Optional parameter column giving one line per value.
        target_power: Target power percentage (drawn as reference line).
        title: Plot title.
        show: Call ``plt.show()`` when done.

    Returns:
        The matplotlib figure.

    Raises:
        ImportError: If ``matplotlib`` is not installed.
        KeyError: If *x* or *group* is not a column of *summary*.
    """
    plt = _import_pyplot()

    for col in (x, group):
        if col is not None and col not in summary.columns:
            raise KeyError(f"Column '{col}' not found in power summary")

    groups = [(None, summary)] if group is None else list(summary.groupby(group, sort=True))

    fig, ax = plt.subplots(figsize=(12, 8))
    colors = plt.get_cmap("Set1")(np.linspace(0, 1, max(len(groups), 1)))

    for i, (value, frame) in enumerate(groups):
        frame = frame.sort_values(x)
        xs = frame[x].to_list()
        powers = frame["power"].to_list()
        label = "power" if group is None else f"{group}={value}"
        ax.plot(xs, powers, "o-", color=colors[i], label=label, linewidth=2, markersize=4)

        # Mark achievement point
        achieved = [(xv, pv) for xv, pv in zip(xs, powers) if pv >= target_power]
        if achieved:
            xv, pv = achieved[0]
            ax.plot(xv, pv, "s", color=colors[i], markersize=10, markerfacecolor="white", markeredgewidth=2, markeredgecolor=colors[i])
            ax.annotate(
                f"{x}={xv}",
                xy=(xv, pv),
                xytext=(10, 10),
                textcoords="offset points",
                bbox={"boxstyle": "round,pad=0.3", "facecolor": colors[i], "alpha": 0.3},
                arrowprops={"arrowstyle": "->", "color": colors[i]},
            )

    ax.axhline(
        y=target_power,
        color="red",
        linestyle="--",
        linewidth=2,
        label=f"Target Power ({target_power}%)",
    )

    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.set_xlabel(x, fontsize=12)
    ax.set_ylabel("Power (%)", fontsize=12)
    ax.grid(True, alpha=0.3)
    ax.legend(bbox_to_anchor=(1.05, 1), loc="upper left")
    ax.set_ylim(0, 105)

    fig.text(0.5, 0.01, _FOOTER, ha="center", fontsize=9, color="#888888")
    plt.tight_layout(rect=(0, 0.03, 1, 1))
    if show:
        plt.show()
    return fig


def _create_specification_curve(
    table: pd.DataFrame,
    choice_columns: Sequence[str],
    estimate: str = "est",
    lower: Optional[str] = "lb",
    upper: Optional[str] = "ub",
    title: str = "Specification Curve",
    show: bool = True,
):
    """Plot the estimates of every protocol, sorted, above the choices that produced them.

    The upper panel shows the sorted point estimates with their intervals;
    the lower panel marks, for every choice value, which protocols used it.
    Failed protocols are left out.

    Args:
        table: Exhaustion table.
        choice_columns: Choice columns shown in the lower panel.
        estimate: Column holding the point estimate.
        lower: Column holding the lower bound (``None`` for no intervals).
        upper: Column holding the upper bound (``None`` for no intervals).
        title: Plot title.
        show: Call ``plt.show()`` when done.

    Returns:
        The matplotlib figure.
    """
    plt = _import_pyplot()

    if estimate not in table.columns:
        raise KeyError(f"Column '{estimate}' not found in exhaustion table")

    ok = table[table["error_kind"].isna()] if "error_kind" in table.columns else table
    ok = ok.sort_values(estimate, kind="mergesort")
    positions = np.arange(len(ok))

    fig, (ax_est, ax_choice) = plt.subplots(2, 1, sharex=True, figsize=(12, 8), gridspec_kw={"height_ratios": [2, 1]})

    if lower is not None and upper is not None and lower in ok.columns and upper in ok.columns:
        est = ok[estimate].to_numpy(dtype=float)
        yerr = np.vstack([est - ok[lower].to_numpy(dtype=float), ok[upper].to_numpy(dtype=float) - est])
        ax_est.errorbar(positions, est, yerr=yerr, fmt="o", color="#377eb8", ecolor="#999999", capsize=2, markersize=4)
    else:
        ax_est.plot(positions, ok[estimate].to_numpy(dtype=float), "o", color="#377eb8", markersize=4)
    ax_est.axhline(y=0, color="black", linewidth=1)
    ax_est.set_ylabel(estimate, fontsize=12)
    ax_est.set_title(title, fontsize=14, fontweight="bold")
    ax_est.grid(True, alpha=0.3)

    labels = []
    row = 0
    for col in choice_columns:
        for value in pd.unique(table[col]):
            used = (ok[col] == value).to_numpy()
            ax_choice.plot(positions[used], np.full(used.sum(), row), "|", color="black", markersize=8)
            labels.append(f"{col}: {value}")
            row += 1
    ax_choice.set_yticks(range(len(labels)))
    ax_choice.set_yticklabels(labels)
    ax_choice.set_xlabel("Protocol (sorted by estimate)", fontsize=12)

    fig.text(0.5, 0.01, _FOOTER, ha="center", fontsize=9, color="#888888")
    plt.tight_layout(rect=(0, 0.03, 1, 1))
    if show:
        plt.show()
    return fig
