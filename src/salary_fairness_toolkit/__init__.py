"""Salary Fairness Toolkit.

Regression-based pay fairness analysis: clean a salary dataset, model expected
salary from experience, job title and education, and flag employees whose actual
pay falls outside the model's error band.
"""

__version__ = "1.0.0"
__author__ = "FairML Consulting"
