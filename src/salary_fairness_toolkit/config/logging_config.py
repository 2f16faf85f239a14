"""Configures structured JSON logging to provide consistent, machine-readable output.

This module sets up formatters and loggers so that every pipeline stage, metric
and error of a salary fairness run can be parsed and filtered afterwards. Stage
timings go to a dedicated performance logger.
"""

import logging
import json
import sys
from typing import Dict, Any
from pathlib import Path
import time


LOGGER_NAMESPACE = "salary_fairness"


class StructuredFormatter(logging.Formatter):
    """A logging formatter that outputs each record as a single JSON object.

    Core metadata is always present; pipeline context passed through ``extra``
    (component, stage, metric, duration, error type) is added when set.
    """

    CONTEXT_FIELDS = {
        "component": "component",
        "stage": "stage",
        "metric_name": "metric_name",
        "metric_value": "metric_value",
        "duration": "duration_ms",
        "error_type": "error_type",
        "rows": "rows",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for attribute, key in self.CONTEXT_FIELDS.items():
            if hasattr(record, attribute):
                log_data[key] = getattr(record, attribute)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class PerformanceLogger:
    """A dedicated logger for stage timings and scalar metrics."""

    def __init__(self, logger_name: str = f"{LOGGER_NAMESPACE}.performance"):
        self.logger = logging.getLogger(logger_name)
        self._start_times = {}

    def start_timer(self, operation_name: str) -> None:
        """Records the start time of a named operation."""
        self._start_times[operation_name] = time.perf_counter()
        self.logger.debug(
            f"Started {operation_name}",
            extra={
                "component": "performance",
                "stage": "start",
                "operation": operation_name,
            },
        )

    def end_timer(self, operation_name: str) -> float:
        """Logs and returns the duration in milliseconds of a started operation."""
        if operation_name not in self._start_times:
            self.logger.warning(f"Timer for {operation_name} was not started")
            return 0.0

        duration = (time.perf_counter() - self._start_times.pop(operation_name)) * 1000

        self.logger.info(
            f"Completed {operation_name} in {duration:.1f} ms",
            extra={
                "component": "performance",
                "stage": "complete",
                "operation": operation_name,
                "duration": duration,
            },
        )
        return duration

    @property
    def active_timers(self) -> list:
        """Names of operations started but not yet ended."""
        return list(self._start_times)

    def reset_timers(self) -> list:
        """Drop every running timer and return the abandoned operation names."""
        abandoned = list(self._start_times)
        self._start_times.clear()
        if abandoned:
            self.logger.debug(
                f"Abandoned timers: {', '.join(abandoned)}",
                extra={"component": "performance", "stage": "reset"},
            )
        return abandoned

    def log_metric(
        self, metric_name: str, metric_value: float, stage: str = "evaluation"
    ) -> None:
        """Log a metric value."""
        self.logger.info(
            f"Metric {metric_name}: {metric_value:.4f}",
            extra={
                "component": "metrics",
                "stage": stage,
                "metric_name": metric_name,
                "metric_value": metric_value,
            },
        )


def setup_logging(
    level: str = "INFO",
    log_file: str = None,
    structured: bool = True,
    console_output: bool = True,
) -> logging.Logger:
    """Initializes and configures the root logger for the entire application.

    Console and file handlers share one formatter choice (structured JSON or
    plain text). Noisy third-party libraries are raised to WARNING.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        structured: Use structured JSON logging
        console_output: Enable console output

    Returns:
        The ``salary_fairness`` namespace logger
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(numeric_level)

    if structured:
        formatter = StructuredFormatter(datefmt="%Y-%m-%d %H:%M:%S")
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handlers = []

    if console_output:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root_logger.addHandler(handler)

    pipeline_logger = logging.getLogger(LOGGER_NAMESPACE)
    pipeline_logger.setLevel(numeric_level)

    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("sklearn").setLevel(logging.WARNING)
    logging.getLogger("mlflow").setLevel(logging.WARNING)

    return pipeline_logger


class PipelineLogger:
    """A context-aware logger for pipeline stages.

    Injects component and stage information into every record and offers
    helpers for the recurring log lines of a run: stage boundaries, data
    shapes, model fits and metrics.
    """

    def __init__(self, component_name: str):
        self.logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component_name}")
        self.component = component_name
        self.perf_logger = PerformanceLogger()

    def log_stage_start(self, stage: str, details: Dict[str, Any] = None) -> None:
        """Log the start of a pipeline stage."""
        extra = {"component": self.component, "stage": stage, "status": "start"}
        if details:
            extra.update(details)

        self.logger.info(f"Starting {stage}", extra=extra)

    def log_stage_complete(self, stage: str, details: Dict[str, Any] = None) -> None:
        """Log the completion of a pipeline stage."""
        extra = {"component": self.component, "stage": stage, "status": "complete"}
        if details:
            extra.update(details)

        self.logger.info(f"Completed {stage}", extra=extra)

    def log_warning(self, message: str, details: Dict[str, Any] = None) -> None:
        """Log a warning with structured data."""
        extra = {"component": self.component}
        if details:
            extra.update(details)

        self.logger.warning(message, extra=extra)

    def log_error(
        self, message: str, error: Exception = None, details: Dict[str, Any] = None
    ) -> None:
        """Log an error with structured data."""
        extra = {"component": self.component}
        if error:
            extra["error_type"] = type(error).__name__
        if details:
            extra.update(details)

        self.logger.error(message, exc_info=error is not None, extra=extra)

    def log_data_info(self, stage: str, data_shape: tuple) -> None:
        """Log the shape of a table produced by a stage."""
        self.logger.info(
            f"{stage}: {data_shape[0]} rows x {data_shape[1]} columns",
            extra={
                "component": self.component,
                "stage": stage,
                "rows": data_shape[0],
                "columns": data_shape[1],
            },
        )

    def log_model_info(self, model_type: str, n_observations: int, n_terms: int) -> None:
        """Log model fitting information."""
        self.logger.info(
            f"Fitted {model_type} on {n_observations} rows with {n_terms} terms",
            extra={
                "component": self.component,
                "stage": "model_training",
                "model_type": model_type,
                "rows": n_observations,
                "n_terms": n_terms,
            },
        )

    def log_metrics(self, metrics: Dict[str, float], stage: str = "evaluation") -> None:
        """Log every scalar metric through the performance logger."""
        for metric_name, metric_value in metrics.items():
            self.perf_logger.log_metric(metric_name, float(metric_value), stage)

    def start_timer(self, operation: str) -> None:
        """Start performance timing."""
        self.perf_logger.start_timer(operation)

    def end_timer(self, operation: str) -> float:
        """End performance timing."""
        return self.perf_logger.end_timer(operation)

    def reset_timers(self) -> list:
        """Drop timers left running by an aborted stage."""
        return self.perf_logger.reset_timers()


def get_pipeline_logger(component_name: str) -> PipelineLogger:
    """Return a PipelineLogger named ``salary_fairness.<component_name>``."""
    return PipelineLogger(component_name)
