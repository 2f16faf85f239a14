"""Training module for the salary regression model."""

from .salary_regressor import SalaryRegressionModel, fit_salary_model

__all__ = ["SalaryRegressionModel", "fit_salary_model"]
