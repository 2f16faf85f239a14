"""Plotting utilities for the salary fairness analysis.

Provides standardized plotting functions using Plotly with consistent styling
taken from the visualization configuration. Every function returns the figure
and, when an output directory is given, also exports it.
"""

from typing import Optional, Union
from pathlib import Path
import pandas as pd
import plotly.graph_objects as go

from ..config.config_parser import VisualizationConfig
from ..measurement.pay_gap_metrics import FAIRNESS_STATUSES, FAIRLY_PAID, OVERPAID, UNDERPAID

DIFFERENCE_AXIS_TITLE = "Actual − Predicted Salary"


def _apply_base_layout(
    fig: go.Figure,
    viz_config: VisualizationConfig,
    title: str,
    width: int = None,
    height: int = None,
) -> go.Figure:
    """Applies the shared background, font, title and grid styling.

    Args:
        fig: Plotly figure to style
        viz_config: Visualization configuration
        title: Chart title
        width: Override default width
        height: Override default height

    Returns:
        Styled Plotly figure
    """
    fig.update_layout(
        paper_bgcolor="#FFFFFF",
        plot_bgcolor="#FFFFFF",
        font={
            "family": viz_config.fonts.family,
            "color": "#1A1E21",
            "size": viz_config.fonts.axis_size,
        },
        title={
            "text": title,
            "x": 0.5,
            "xanchor": "center",
            "font": {"size": viz_config.fonts.title_size},
        },
        height=height or viz_config.layout.height,
        width=width or viz_config.layout.width,
        margin=viz_config.layout.margins,
    )

    fig.update_xaxes(showgrid=True, gridwidth=1, gridcolor="rgba(128,128,128,0.2)")
    fig.update_yaxes(showgrid=True, gridwidth=1, gridcolor="rgba(128,128,128,0.2)")
    return fig


def save_figure(
    fig: go.Figure,
    filename: str,
    viz_config: VisualizationConfig,
    output_dir: Union[str, Path],
) -> Path:
    """Exports a figure in the configured format and returns the written path.

    HTML is written by Plotly directly; image formats use Plotly's static
    export (Kaleido) with the configured size and scale.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    export_config = viz_config.export
    fmt = export_config.default_format
    target = output_path / f"{filename}.{fmt}"

    if fmt == "html":
        fig.write_html(target, include_plotlyjs="cdn")
    else:
        fig.write_image(
            target,
            format=fmt,
            width=export_config.width,
            height=export_config.height,
            scale=export_config.scale,
        )
    return target


def _add_rmse_hlines(fig: go.Figure, rmse: float, viz_config: VisualizationConfig) -> None:
    fig.add_hline(y=0, line_dash="dash", line_color=viz_config.colors.reference)
    for y, label in [(-rmse, "−RMSE"), (rmse, "+RMSE")]:
        fig.add_hline(
            y=y,
            line_dash="dot",
            line_color=viz_config.colors.threshold,
            annotation_text=label,
            annotation_position="top right",
        )


def plot_average_salary_by_experience(
    summary: pd.DataFrame,
    viz_config: VisualizationConfig,
    title: str = "Average Salary by Years of Experience",
    output_dir: Optional[Union[str, Path]] = None,
) -> go.Figure:
    """Bar chart of mean salary per experience group.

    Args:
        summary: Output of ``summarize_by_experience`` (experience_group,
            avg_salary, count)
        viz_config: Visualization configuration
        title: Title for the plot
        output_dir: Export directory; nothing is written when None

    Returns:
        Plotly bar chart
    """
    fig = go.Figure(
        go.Bar(
            x=summary["experience_group"].astype(str),
            y=summary["avg_salary"],
            marker_color=viz_config.colors.primary,
            text=[f"{val:,.0f}" for val in summary["avg_salary"]],
            textposition="outside",
            customdata=summary["count"],
            hovertemplate="<b>%{x} years</b><br>"
            + "Average Salary: %{y:,.0f}<br>"
            + "Employees: %{customdata}<br>"
            + "<extra></extra>",
            showlegend=False,
        )
    )

    fig = _apply_base_layout(fig, viz_config, title)
    fig.update_layout(
        xaxis_title="Experience Group (Years)",
        yaxis_title="Average Salary",
        yaxis=dict(tickformat=",.0f"),
    )

    if output_dir is not None:
        save_figure(fig, "average_salary_by_experience", viz_config, output_dir)

    return fig


def plot_pay_gap_by_group(
    classified: pd.DataFrame,
    group_column: str,
    rmse: float,
    viz_config: VisualizationConfig,
    title: Optional[str] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> go.Figure:
    """Box plot of salary difference per group with zero and ±RMSE lines.

    Groups keep their categorical order when the column is categorical and are
    sorted otherwise.

    Args:
        classified: Test set with ``salary_difference``
        group_column: Column to group by (e.g. experience_group, education_level)
        rmse: Test RMSE drawn as the fairness band
        viz_config: Visualization configuration
        title: Title for the plot
        output_dir: Export directory; nothing is written when None

    Returns:
        Plotly box plot with one trace per group
    """
    if group_column not in classified.columns:
        raise ValueError(f"Unknown group column: {group_column}")

    label = group_column.replace("_", " ").title()
    title = title or f"Pay Gaps Among Employees with Similar {label}"

    column = classified[group_column]
    if isinstance(column.dtype, pd.CategoricalDtype):
        groups = [g for g in column.cat.categories if (column == g).any()]
    else:
        groups = sorted(column.unique())

    fig = go.Figure()
    for group in groups:
        fig.add_trace(
            go.Box(
                y=classified.loc[column == group, "salary_difference"],
                name=str(group),
                marker_color=viz_config.colors.primary,
                fillcolor=viz_config.colors.accent,
                boxpoints="outliers",
                showlegend=False,
            )
        )

    _add_rmse_hlines(fig, rmse, viz_config)

    fig = _apply_base_layout(fig, viz_config, title)
    fig.update_layout(
        xaxis_title=label,
        yaxis_title=DIFFERENCE_AXIS_TITLE,
        yaxis=dict(tickformat=",.0f"),
    )

    if output_dir is not None:
        save_figure(fig, f"pay_gap_by_{group_column}", viz_config, output_dir)

    return fig


def plot_pay_gap_distribution(
    classified: pd.DataFrame,
    rmse: float,
    viz_config: VisualizationConfig,
    bins: int = 40,
    title: str = "Salary Fairness Distribution",
    output_dir: Optional[Union[str, Path]] = None,
) -> go.Figure:
    """Stacked histogram of salary difference coloured by fairness status.

    All statuses share one set of bins spanning the full residual range so the
    stacked bars line up. Dashed lines mark ±RMSE.
    """
    status_colors = {
        UNDERPAID: viz_config.colors.underpaid,
        FAIRLY_PAID: viz_config.colors.fairly_paid,
        OVERPAID: viz_config.colors.overpaid,
    }

    difference = classified["salary_difference"]
    low, high = float(difference.min()), float(difference.max())
    bin_size = (high - low) / bins if high > low else 1.0

    fig = go.Figure()
    for status in FAIRNESS_STATUSES:
        values = difference[classified["fairness_status"] == status]
        if values.empty:
            continue
        fig.add_trace(
            go.Histogram(
                x=values,
                name=status,
                marker_color=status_colors[status],
                opacity=0.7,
                xbins=dict(start=low, end=high + bin_size, size=bin_size),
                hovertemplate=f"<b>{status}</b><br>"
                + "Difference: %{x}<br>"
                + "Employees: %{y}<br>"
                + "<extra></extra>",
            )
        )

    for x in (-rmse, rmse):
        fig.add_vline(x=x, line_dash="dash", line_color=viz_config.colors.threshold)

    fig = _apply_base_layout(fig, viz_config, title)
    fig.update_layout(
        barmode="stack",
        xaxis_title=DIFFERENCE_AXIS_TITLE,
        yaxis_title="Number of Employees",
        xaxis=dict(tickformat=",.0f"),
        legend=dict(title="Fairness Status", orientation="v", x=1.02, y=1),
    )

    if output_dir is not None:
        save_figure(fig, "pay_gap_distribution", viz_config, output_dir)

    return fig
