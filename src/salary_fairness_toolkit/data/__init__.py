"""Data loading and synthetic data generation."""

from .loader import load_salary_data
from .synthetic import generate_salary_data

__all__ = ["load_salary_data", "generate_salary_data"]
