"""
Central orchestrator for the regression-based salary fairness analysis.

This module runs the analysis as an explicit sequence of stages: load, clean,
group by experience, split and filter job titles, fit the salary model, then
classify each held-out employee against the model's error band. Each stage
receives the previous stage's output as an argument. The executor adds the
console reports, figure export and optional MLflow run tracking around them.
"""

import os
import tempfile
import warnings
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import pandas as pd
import mlflow
import mlflow.sklearn
from mlflow.models.signature import infer_signature
from rich.console import Console
from rich.table import Table
from rich import box

os.environ.setdefault("MLFLOW_SUPPRESS_ENVIRONMENT_WARNINGS", "1")
warnings.filterwarnings("ignore", message=".*pip.*", module="mlflow.*")
warnings.filterwarnings("ignore", message=".*artifact_path.*", module="mlflow.*")

from .config import ConfigParser, PipelineConfig, VisualizationConfig
from .config import get_pipeline_logger, setup_logging
from .data.loader import load_salary_data
from .measurement.pay_gap_auditor import PayGapAuditor
from .pipeline.cleaning import clean_salary_data
from .pipeline.experience_grouping import add_experience_group, summarize_by_experience
from .pipeline.splitting import DatasetSplit, count_job_titles, split_and_filter
from .training.salary_regressor import SalaryRegressionModel, fit_salary_model
from .visualization.plots import (
    plot_average_salary_by_experience,
    plot_pay_gap_by_group,
    plot_pay_gap_distribution,
)

PREDICTIONS_FILENAME = "fairness_classification.csv"


class PipelineExecutor:
    """
    Runs one salary fairness analysis end to end.

    The run is a single forward pass. Any stage failure is logged with its
    error type and re-raised, so a run either completes or aborts; there are
    no retries or partial results.
    """

    def __init__(
        self,
        config: Union[Dict[str, Any], PipelineConfig],
        verbose: bool = False,
        enable_logging: bool = True,
        show_reports: bool = True,
    ):
        """
        Initialize with a configuration dict (or parsed PipelineConfig).

        Raises pydantic's ValidationError for an invalid configuration.
        """
        self.config = ConfigParser.parse(config)
        self.verbose = verbose
        self.show_reports = show_reports

        self.viz_config = self.config.visualization or VisualizationConfig.from_pyproject()
        self.auditor = PayGapAuditor(sample_rows=self.config.reporting.sample_rows)
        self.model = None
        self.run_id = None

        if enable_logging:
            log_level = "DEBUG" if verbose else "INFO"
            setup_logging(level=log_level, structured=True, console_output=verbose)

        self.logger = get_pipeline_logger("executor")
        self.console = Console(force_terminal=True, width=120)

    def execute_pipeline(self) -> Dict[str, Any]:
        """
        Execute every stage in order and return the results.

        The returned dict holds the cleaned data, experience summary, split,
        model, coefficient table, RMSE, classified test set, audit report,
        figures and any files written.
        """
        data_config = self.config.data
        self.logger.log_stage_start(
            "pipeline_execution",
            {
                "input_path": data_config.input_path,
                "random_state": data_config.random_state,
                "tracking_enabled": self.config.tracking.enabled,
            },
        )
        self.logger.start_timer("full_pipeline")

        try:
            with self._tracking_run():
                self.logger.start_timer("data_loading")
                raw = self._load_data()
                self.logger.end_timer("data_loading")

                self.logger.start_timer("data_cleaning")
                cleaned = self._clean_data(raw)
                self.logger.end_timer("data_cleaning")

                grouped, experience_summary = self._summarize_experience(cleaned)

                self.logger.start_timer("split_and_filter")
                split = self._split_and_filter(grouped)
                self.logger.end_timer("split_and_filter")

                self.logger.start_timer("model_training")
                self.model = self._fit_model(split.train)
                self.logger.end_timer("model_training")

                self.logger.start_timer("fairness_classification")
                classified, rmse, report = self._classify_test_set(split.test)
                self.logger.end_timer("fairness_classification")

                if self.show_reports:
                    self._print_frame(
                        "Appendix: Job Title Sample Sizes (Training Set)",
                        self._job_title_appendix(split.train),
                    )

                figures = self._build_figures(experience_summary, classified, rmse)
                outputs = self._write_outputs(classified)

                results = {
                    "cleaned_data": grouped,
                    "experience_summary": experience_summary,
                    "split": split,
                    "model": self.model,
                    "coefficients": self.model.coefficient_table(),
                    "rmse": rmse,
                    "classified": classified,
                    "report": report,
                    "figures": figures,
                    "outputs": outputs,
                }

                if self.config.tracking.enabled:
                    self._log_results(results)
                    results["run_id"] = self.run_id

            pipeline_duration = self.logger.end_timer("full_pipeline")
            self.logger.log_stage_complete(
                "pipeline_execution",
                {
                    "total_duration_ms": pipeline_duration,
                    "train_samples": len(split.train),
                    "test_samples": len(split.test),
                },
            )
            return results

        except Exception as e:
            abandoned = self.logger.reset_timers()
            self.logger.log_error(
                "Pipeline execution failed",
                e,
                {"input_path": data_config.input_path, "abandoned_stages": abandoned},
            )
            raise

    def _tracking_run(self):
        """MLflow run context when tracking is enabled, a no-op otherwise."""
        tracking = self.config.tracking
        if not tracking.enabled:
            return nullcontext()

        tracking_uri = tracking.tracking_uri or f"file://{(Path.cwd() / 'mlruns').absolute()}"
        mlflow.set_tracking_uri(tracking_uri)
        mlflow.set_experiment(tracking.experiment_name)

        if mlflow.active_run():
            mlflow.end_run()

        run = mlflow.start_run(run_name=tracking.run_name)
        self.run_id = run.info.run_id
        for key, value in tracking.tags.items():
            mlflow.set_tag(key, value)
        return run

    def _load_data(self) -> pd.DataFrame:
        """Read the input CSV; a missing or malformed file aborts the run."""
        data_config = self.config.data
        self.logger.log_stage_start("data_loading", {"data_path": data_config.input_path})

        raw = load_salary_data(
            data_config.input_path,
            required_columns=list(data_config.columns.as_dict()),
        )

        self.logger.log_data_info("data_loading", raw.shape)
        return raw

    def _clean_data(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Select, validate and normalise the four analysis fields."""
        cleaned = clean_salary_data(raw, self.config.data.columns.as_dict())

        self.logger.log_stage_complete(
            "data_cleaning",
            {"rows": len(cleaned), "dropped_rows": len(raw) - len(cleaned)},
        )

        if self.show_reports:
            self.auditor.print_report(
                self.auditor.audit_dataset(cleaned), "cleaned data"
            )
        return cleaned

    def _summarize_experience(
        self, cleaned: pd.DataFrame
    ) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """Add experience buckets and summarise salary per bucket."""
        grouping = self.config.grouping
        grouped = add_experience_group(
            cleaned,
            breakpoints=grouping.breakpoints,
            labels=grouping.labels,
            out_of_range=grouping.out_of_range,
        )
        summary = summarize_by_experience(grouped)

        self.logger.log_stage_complete(
            "experience_grouping", {"groups": len(summary)}
        )

        if self.show_reports:
            self._print_frame(
                "Salary Summary by Experience",
                summary,
                {"avg_salary": "{:,.0f}"},
            )
        return grouped, summary

    def _split_and_filter(self, grouped: pd.DataFrame) -> DatasetSplit:
        """Seeded train/test split followed by the job title sample size rule."""
        data_config = self.config.data
        split = split_and_filter(
            grouped,
            train_fraction=data_config.train_fraction,
            random_state=data_config.random_state,
            min_job_title_count=self.config.filtering.min_job_title_count,
        )

        self.logger.log_stage_complete("data_split", split.summary)

        if not split.valid_job_titles:
            self.logger.log_warning(
                "No job title reaches the minimum training count",
                {"min_job_title_count": split.min_job_title_count},
            )

        if self.show_reports:
            self._print_frame(
                f"Job Titles in Training Set (kept if count ≥ {split.min_job_title_count})",
                split.job_title_counts,
            )
        return split

    def _fit_model(self, train: pd.DataFrame) -> SalaryRegressionModel:
        """Fit the OLS salary model on the filtered training rows."""
        if train.empty:
            raise ValueError(
                "Training set is empty after job title filtering; "
                "lower filtering.min_job_title_count or provide more data"
            )

        model = fit_salary_model(train)
        summary = model.training_summary_

        self.logger.log_model_info(
            "SalaryRegressionModel", summary["n_observations"], summary["n_parameters"]
        )
        self.logger.log_metrics(
            {
                "train_r_squared": summary["r_squared"],
                "train_adj_r_squared": summary["adj_r_squared"],
                "residual_std_error": summary["residual_std_error"],
            },
            stage="model_training",
        )

        if self.show_reports:
            self._print_coefficients(model)
        return model

    def _classify_test_set(
        self, test: pd.DataFrame
    ) -> Tuple[pd.DataFrame, float, Dict[str, Any]]:
        """Predict the test rows and label each one against ±RMSE."""
        predictions = self.model.predict(test)
        classified, rmse = self.auditor.classify(test, predictions)
        report = self.auditor.audit(classified, rmse)

        self.logger.log_metrics(report["metrics"], stage="evaluation")
        self.logger.log_stage_complete(
            "fairness_classification",
            {"rmse": rmse, "status_counts": report["status_counts"]},
        )

        if self.show_reports:
            self.auditor.print_report(report, "pay fairness")
        return classified, rmse, report

    @staticmethod
    def _job_title_appendix(train: pd.DataFrame) -> pd.DataFrame:
        """Training counts of the modelled job titles, smallest first."""
        return count_job_titles(train).sort_values(
            ["count", "job_title"], ignore_index=True
        )

    def _build_figures(
        self, experience_summary: pd.DataFrame, classified: pd.DataFrame, rmse: float
    ) -> Dict[str, Any]:
        """Create the four report figures, exporting them when configured."""
        reporting = self.config.reporting
        output_dir = reporting.output_dir if reporting.save_plots else None

        figures = {
            "average_salary_by_experience": plot_average_salary_by_experience(
                experience_summary, self.viz_config, output_dir=output_dir
            ),
            "pay_gap_by_experience_group": plot_pay_gap_by_group(
                classified, "experience_group", rmse, self.viz_config, output_dir=output_dir
            ),
            "pay_gap_by_education_level": plot_pay_gap_by_group(
                classified, "education_level", rmse, self.viz_config, output_dir=output_dir
            ),
            "pay_gap_distribution": plot_pay_gap_distribution(
                classified,
                rmse,
                self.viz_config,
                bins=reporting.histogram_bins,
                output_dir=output_dir,
            ),
        }

        self.logger.log_stage_complete(
            "visualization", {"figures": len(figures), "exported": output_dir is not None}
        )
        return figures

    def _write_outputs(self, classified: pd.DataFrame) -> Dict[str, str]:
        """Write the classified test set when an output directory is configured."""
        reporting = self.config.reporting
        outputs = {}
        if reporting.output_dir and reporting.save_predictions:
            output_dir = Path(reporting.output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            predictions_path = output_dir / PREDICTIONS_FILENAME
            classified.to_csv(predictions_path, index_label="row_id")
            outputs["predictions"] = str(predictions_path)
            self.logger.log_stage_complete(
                "output_writing", {"predictions_path": str(predictions_path)}
            )
        return outputs

    def _log_results(self, results: Dict[str, Any]) -> None:
        """Log parameters, metrics, model and classified test set to MLflow."""
        data_config = self.config.data
        split: DatasetSplit = results["split"]

        mlflow.log_params(
            {
                "input_path": data_config.input_path,
                "train_fraction": data_config.train_fraction,
                "random_state": data_config.random_state,
                "min_job_title_count": self.config.filtering.min_job_title_count,
                "out_of_range": self.config.grouping.out_of_range,
                "job_titles_kept": len(split.valid_job_titles),
            }
        )

        metrics = dict(results["report"]["metrics"])
        metrics.update(
            {f"n_{status.lower().replace(' ', '_')}": count
             for status, count in results["report"]["status_counts"].items()}
        )
        metrics.update(
            {
                "train_rows": len(split.train),
                "test_rows": len(split.test),
                "train_r_squared": results["model"].training_summary_["r_squared"],
            }
        )
        mlflow.log_metrics({k: float(v) for k, v in metrics.items() if pd.notna(v)})

        with tempfile.TemporaryDirectory() as tmp_dir:
            predictions_path = Path(tmp_dir) / PREDICTIONS_FILENAME
            results["classified"].to_csv(predictions_path, index_label="row_id")
            mlflow.log_artifact(str(predictions_path), "predictions")

            coefficients_path = Path(tmp_dir) / "coefficients.csv"
            results["coefficients"].to_csv(coefficients_path)
            mlflow.log_artifact(str(coefficients_path), "model_summary")

        if self.config.tracking.log_model:
            model: SalaryRegressionModel = results["model"]
            features = list(model.numeric_features) + list(model.categorical_features)
            sample_features = split.train[features].head(20)
            signature = infer_signature(sample_features, model.predict(sample_features))

            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message=".*already exists.*")
                mlflow.sklearn.log_model(
                    model,
                    artifact_path="salary_model",
                    signature=signature,
                    input_example=sample_features.head(3),
                    metadata={"terms": model.terms_},
                )

        self.logger.log_stage_complete("mlflow_logging", {"run_id": self.run_id})

    def _print_frame(
        self, title: str, frame: pd.DataFrame, formats: Dict[str, str] = None
    ) -> None:
        """Render a small DataFrame as a Rich table."""
        formats = formats or {}
        table = Table(title=title, box=box.SIMPLE, show_header=True, header_style="bold blue")
        for col in frame.columns:
            table.add_column(
                str(col).replace("_", " ").title(),
                style="cyan" if col == frame.columns[0] else None,
                justify="right" if pd.api.types.is_numeric_dtype(frame[col]) else "left",
            )
        for _, row in frame.iterrows():
            table.add_row(
                *[
                    formats[col].format(value) if col in formats else str(value)
                    for col, value in row.items()
                ]
            )
        self.console.print(table)

    def _print_coefficients(self, model: SalaryRegressionModel) -> None:
        """Print the coefficient table in the layout of a regression summary."""
        table = Table(
            title="Salary Model Coefficients",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold blue",
        )
        table.add_column("Term", style="cyan", no_wrap=True, min_width=30)
        table.add_column("Estimate", justify="right")
        table.add_column("Std. Error", justify="right")
        table.add_column("t value", justify="right")
        table.add_column("Pr(>|t|)", justify="right")

        for term, row in model.coefficient_table().iterrows():
            table.add_row(
                term,
                f"{row['estimate']:,.2f}",
                f"{row['std_error']:,.2f}",
                f"{row['t_value']:.3f}",
                f"{row['p_value']:.3g}",
            )
        self.console.print(table)

        summary = model.training_summary_
        self.console.print(
            f"Residual standard error: {summary['residual_std_error']:,.1f} on "
            f"{summary['df_residual']} degrees of freedom\n"
            f"Multiple R-squared: {summary['r_squared']:.4f}, "
            f"Adjusted R-squared: {summary['adj_r_squared']:.4f}\n"
        )
