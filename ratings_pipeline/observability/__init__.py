"""
Logging and metrics for the ratings pipeline.
"""

from .logger import configure_logging, get_logger, log_operation
from .metrics import PipelineMonitor, start_metrics_server

__all__ = [
    "configure_logging",
    "get_logger",
    "log_operation",
    "PipelineMonitor",
    "start_metrics_server",
]
