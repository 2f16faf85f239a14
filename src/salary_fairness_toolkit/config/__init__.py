"""Configuration management module for salary fairness toolkit."""

from .config_parser import (
    ConfigParser,
    PipelineConfig,
    VisualizationConfig,
    DEFAULT_BREAKPOINTS,
    DEFAULT_GROUP_LABELS,
)
from .logging_config import setup_logging, get_pipeline_logger, PipelineLogger, PerformanceLogger

__all__ = [
    'ConfigParser',
    'PipelineConfig',
    'VisualizationConfig',
    'DEFAULT_BREAKPOINTS',
    'DEFAULT_GROUP_LABELS',
    'setup_logging',
    'get_pipeline_logger',
    'PipelineLogger',
    'PerformanceLogger'
]
