"""
Prometheus metrics collection for ratings-pipeline

This module provides metrics instrumentation for monitoring
pipeline progress, chunk commits, and transfer retries.
"""
import os
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

lines_read_total = Counter(
    name="ratings_pipeline_lines_read_total",
    documentation="Total number of source lines read by the pipeline",
    labelnames=["job_name"],
    registry=REGISTRY,
)

records_written_total = Counter(
    name="ratings_pipeline_records_written_total",
    documentation="Total number of flat records committed to the output file",
    labelnames=["job_name"],
    registry=REGISTRY,
)

chunks_committed_total = Counter(
    name="ratings_pipeline_chunks_total",
    documentation="Total number of chunks by commit status",
    labelnames=["job_name", "status"],  # status: committed, failed
    registry=REGISTRY,
)

chunk_size_records = Histogram(
    name="ratings_pipeline_chunk_size_records",
    documentation="Number of records in each committed chunk",
    labelnames=["job_name"],
    buckets=[1, 10, 50, 100, 250, 500, 1000],
    registry=REGISTRY,
)

# =======================
# TRANSFER METRICS
# =======================

transfer_attempts_total = Counter(
    name="ratings_pipeline_transfer_attempts_total",
    documentation="Total number of upload attempts",
    labelnames=["status"],  # status: success, retry, exhausted, failed
    registry=REGISTRY,
)

# =======================
# JOB METRICS
# =======================

job_runs_total = Counter(
    name="ratings_pipeline_job_runs_total",
    documentation="Total number of job runs by terminal state",
    labelnames=["state"],  # state: completed, failed
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="ratings_pipeline_stage_duration_seconds",
    documentation="Time spent in each job stage in seconds",
    labelnames=["stage", "status"],
    buckets=[0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 300.0, 900.0],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: the HTTP server is only needed when the endpoint is enabled
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """
    Observe a value in a histogram metric

    Args:
        histogram: Prometheus Histogram metric
        value: Value to observe
        **labels: Label values for the metric
    """
    histogram.labels(**labels).observe(value)


# =======================
# MONITOR CLASS
# =======================

class PipelineMonitor:
    """
    Progress collaborator for one job run.

    Forwards every event to the Prometheus registry and keeps in-process
    totals so callers can inspect progress without scraping.
    """

    def __init__(self, job_name: str = "ratings-pipeline"):
        """
        Initialize monitor.

        Args:
            job_name: Label value attached to pipeline metrics
        """
        self.job_name = job_name
        self.lines_read = 0
        self.records_written = 0
        self.chunks_committed = 0
        self.chunks_failed = 0
        self.transfer_attempts = 0

    def record_line_read(self) -> None:
        self.lines_read += 1
        increment_counter(lines_read_total, job_name=self.job_name)

    def record_chunk_committed(self, record_count: int) -> None:
        """
        Record a successful chunk commit.

        Args:
            record_count: Number of records in the chunk
        """
        self.chunks_committed += 1
        self.records_written += record_count
        increment_counter(chunks_committed_total, job_name=self.job_name, status="committed")
        increment_counter(records_written_total, record_count, job_name=self.job_name)
        observe_histogram(chunk_size_records, record_count, job_name=self.job_name)

    def record_chunk_failed(self) -> None:
        self.chunks_failed += 1
        increment_counter(chunks_committed_total, job_name=self.job_name, status="failed")

    def record_transfer_attempt(self, status: str) -> None:
        """
        Record one upload attempt.

        Args:
            status: "success", "retry", "exhausted" or "failed"
        """
        self.transfer_attempts += 1
        increment_counter(transfer_attempts_total, status=status)

    def record_stage(self, stage: str, duration_seconds: float, success: bool) -> None:
        observe_histogram(
            stage_duration_seconds,
            duration_seconds,
            stage=stage,
            status="success" if success else "failure",
        )

    def record_job_finished(self, state: str) -> None:
        increment_counter(job_runs_total, state=state)
