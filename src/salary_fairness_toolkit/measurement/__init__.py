"""Measurement module for pay gap metrics and fairness classification."""

from .pay_gap_auditor import PayGapAuditor
from .pay_gap_metrics import PayGapMetrics, FAIRNESS_STATUSES

__all__ = ["PayGapAuditor", "PayGapMetrics", "FAIRNESS_STATUSES"]
