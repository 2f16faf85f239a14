"""Visualization utilities for salary fairness toolkit."""

from .plots import (
    plot_average_salary_by_experience,
    plot_pay_gap_by_group,
    plot_pay_gap_distribution,
    save_figure,
)

__all__ = [
    'plot_average_salary_by_experience',
    'plot_pay_gap_by_group',
    'plot_pay_gap_distribution',
    'save_figure',
]
