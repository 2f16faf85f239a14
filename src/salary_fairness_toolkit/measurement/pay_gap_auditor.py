"""Pay fairness classification and reporting functionality."""

from typing import Any, Dict, Tuple
import logging

import numpy as np
import pandas as pd
from rich.console import Console
from rich.table import Table
from rich import box

from .pay_gap_metrics import FAIRNESS_STATUSES, OVERPAID, UNDERPAID, PayGapMetrics

SAMPLE_COLUMNS = [
    "job_title",
    "education_level",
    "years_experience",
    "salary",
    "predicted_salary",
    "salary_difference",
]

STATUS_STYLES = {UNDERPAID: "red", OVERPAID: "yellow"}


class PayGapAuditor:
    """Classify test employees against the model and report the pay gaps."""

    def __init__(self, sample_rows: int = 6):
        self.sample_rows = sample_rows
        self.metrics_calculator = PayGapMetrics()
        self.logger = logging.getLogger("salary_fairness.pay_gap_auditor")
        self.console = Console(force_terminal=True, width=120)

    @staticmethod
    def audit_dataset(data: pd.DataFrame) -> Dict[str, Any]:
        """Structural summary of the cleaned analysis table."""
        salary = data["salary"]
        return {
            "dataset_shape": data.shape,
            "column_types": {col: str(dtype) for col, dtype in data.dtypes.items()},
            "missing_values": data.isnull().sum().to_dict(),
            "salary_stats": {
                "min": float(salary.min()),
                "median": float(salary.median()),
                "mean": float(salary.mean()),
                "max": float(salary.max()),
            },
            "years_experience_range": (
                float(data["years_experience"].min()),
                float(data["years_experience"].max()),
            ),
            "education_distribution": data["education_level"].value_counts().to_dict(),
            "job_title_count": int(data["job_title"].nunique()),
        }

    def classify(
        self, test: pd.DataFrame, predictions: np.ndarray
    ) -> Tuple[pd.DataFrame, float]:
        """Attach predicted salary, residual and fairness status to the test rows.

        Returns the classified copy of ``test`` and the test RMSE used as the
        fairness band half-width.
        """
        predictions = np.asarray(predictions, dtype=float)
        if len(predictions) != len(test):
            raise ValueError(
                f"Got {len(predictions)} predictions for {len(test)} test rows"
            )

        rmse = self.metrics_calculator.rmse(test["salary"].to_numpy(), predictions)

        classified = test.copy()
        classified["predicted_salary"] = predictions
        classified["salary_difference"] = self.metrics_calculator.salary_difference(
            classified["salary"].to_numpy(), predictions
        )
        classified["fairness_status"] = pd.Categorical(
            self.metrics_calculator.fairness_status(
                classified["salary_difference"].to_numpy(), rmse
            ),
            categories=FAIRNESS_STATUSES,
        )

        return classified, rmse

    def audit(self, classified: pd.DataFrame, rmse: float) -> Dict[str, Any]:
        """Summarise a classified test set."""
        metrics = self.metrics_calculator.calculate_all_metrics(
            classified["salary"].to_numpy(), classified["predicted_salary"].to_numpy()
        )

        status_counts = (
            classified["fairness_status"]
            .value_counts()
            .reindex(FAIRNESS_STATUSES, fill_value=0)
        )
        total = int(status_counts.sum())
        status_shares = {
            status: (int(count) / total if total else 0.0)
            for status, count in status_counts.items()
        }

        samples = {
            status: classified.loc[
                classified["fairness_status"] == status,
                [col for col in SAMPLE_COLUMNS if col in classified.columns],
            ].head(self.sample_rows)
            for status in FAIRNESS_STATUSES
        }

        group_gaps = {}
        for group_column in ["experience_group", "education_level"]:
            if group_column in classified.columns:
                group_gaps[group_column] = (
                    classified.groupby(group_column, observed=True)["salary_difference"]
                    .agg(["count", "mean", "median"])
                    .rename(
                        columns={"mean": "mean_difference", "median": "median_difference"}
                    )
                )

        return {
            "metrics": metrics,
            "rmse": float(rmse),
            "status_counts": {status: int(count) for status, count in status_counts.items()},
            "status_shares": status_shares,
            "samples": samples,
            "group_pay_gaps": group_gaps,
            "n_employees": total,
        }

    def print_report(self, report: Dict[str, Any], report_type: str = "pay fairness"):
        """Print and log a formatted report using Rich tables."""
        self.console.print(
            f"\n[bold blue]{report_type.upper()} REPORT[/bold blue]", style="bold blue"
        )

        if "dataset_shape" in report:
            self._print_dataset_report(report)

        if "metrics" in report:
            metrics_table = Table(
                title="Model Accuracy on Test Set",
                box=box.SIMPLE,
                show_header=True,
                header_style="bold blue",
            )
            metrics_table.add_column("Metric", style="cyan", no_wrap=True, min_width=22)
            metrics_table.add_column("Value", style="green", justify="right", min_width=12)

            for metric_name, metric_value in report["metrics"].items():
                metrics_table.add_row(
                    metric_name.replace("_", " ").upper()
                    if metric_name in ("rmse", "mae")
                    else metric_name.replace("_", " ").title(),
                    f"{metric_value:,.4f}" if metric_name == "r_squared" else f"{metric_value:,.2f}",
                )
                self.logger.info(
                    f"{metric_name}: {metric_value:.4f}",
                    extra={
                        "component": "pay_gap_auditor",
                        "metric_name": metric_name,
                        "metric_value": metric_value,
                    },
                )
            self.console.print(metrics_table)

        if "samples" in report:
            for status, sample in report["samples"].items():
                self._print_sample(status, sample)

        if "status_counts" in report:
            status_table = Table(
                title="Fairness Status",
                box=box.SIMPLE,
                show_header=True,
                header_style="bold blue",
            )
            status_table.add_column("Status", style="cyan", no_wrap=True, min_width=14)
            status_table.add_column("Employees", justify="right", min_width=10)
            status_table.add_column("Share", justify="right", min_width=8)

            for status, count in report["status_counts"].items():
                style = STATUS_STYLES.get(status, "green")
                share = report.get("status_shares", {}).get(status, 0.0)
                status_table.add_row(
                    f"[{style}]{status}[/{style}]", str(count), f"{share:.1%}"
                )
            self.console.print(status_table)

            self.logger.info(
                "Fairness status counts: "
                + ", ".join(f"{s}={c}" for s, c in report["status_counts"].items()),
                extra={
                    "component": "pay_gap_auditor",
                    "status_counts": report["status_counts"],
                },
            )

        for group_column, gaps in report.get("group_pay_gaps", {}).items():
            gap_table = Table(
                title=f"Pay Gap by {group_column.replace('_', ' ').title()}",
                box=box.SIMPLE,
                show_header=True,
                header_style="bold blue",
            )
            gap_table.add_column("Group", style="cyan", no_wrap=True, min_width=12)
            gap_table.add_column("Employees", justify="right")
            gap_table.add_column("Mean Difference", justify="right")
            gap_table.add_column("Median Difference", justify="right")
            for group, row in gaps.iterrows():
                gap_table.add_row(
                    str(group),
                    str(int(row["count"])),
                    f"{row['mean_difference']:,.0f}",
                    f"{row['median_difference']:,.0f}",
                )
            self.console.print(gap_table)

        self.console.print("")

    def _print_dataset_report(self, report: Dict[str, Any]) -> None:
        dataset_table = Table(
            title="Cleaned Data Structure",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold blue",
        )
        dataset_table.add_column("Attribute", style="cyan", no_wrap=True, min_width=22)
        dataset_table.add_column("Value", style="magenta", min_width=20)

        dataset_table.add_row("Dataset Shape", str(report["dataset_shape"]))
        for col, dtype in report.get("column_types", {}).items():
            dataset_table.add_row(f"Type: {col}", dtype)
        for stat, value in report.get("salary_stats", {}).items():
            dataset_table.add_row(f"Salary {stat}", f"{value:,.0f}")
        if "years_experience_range" in report:
            low, high = report["years_experience_range"]
            dataset_table.add_row("Experience Range", f"{low:g} - {high:g} years")
        if "job_title_count" in report:
            dataset_table.add_row("Distinct Job Titles", str(report["job_title_count"]))
        for level, count in report.get("education_distribution", {}).items():
            dataset_table.add_row(f"Education: {level}", str(count))

        self.console.print(dataset_table)

        self.logger.info(
            f"Dataset Shape: {report['dataset_shape']}",
            extra={"component": "pay_gap_auditor", "stage": "data_cleaning"},
        )

    def _print_sample(self, status: str, sample: pd.DataFrame) -> None:
        if sample.empty:
            self.console.print(f"[dim]No {status} employees in the test set[/dim]")
            return

        sample_table = Table(
            title=f"Examples: {status}",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold blue",
        )
        for col in sample.columns:
            sample_table.add_column(
                col.replace("_", " ").title(),
                justify="right" if pd.api.types.is_numeric_dtype(sample[col]) else "left",
            )
        for _, row in sample.iterrows():
            cells = []
            for col, value in row.items():
                if col == "years_experience":
                    cells.append(f"{value:g}")
                elif isinstance(value, (int, float, np.number)):
                    cells.append(f"{value:,.0f}")
                else:
                    cells.append(str(value))
            sample_table.add_row(*cells)
        self.console.print(sample_table)
