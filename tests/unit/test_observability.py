"""
Unit tests for logging and metrics helpers.
"""

import json

import pytest

from ratings_pipeline.observability.logger import log_operation, setup_logger
from ratings_pipeline.observability.metrics import PipelineMonitor, generate_metrics

pytestmark = pytest.mark.unit


class TestJsonLogging:

    def test_json_record_fields(self, capsys):
        logger = setup_logger("ratings_pipeline.tests.json", level="INFO", format_type="json")

        logger.info("chunk committed", extra={"records": 3})

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["message"] == "chunk committed"
        assert record["level"] == "INFO"
        assert record["logger"] == "ratings_pipeline.tests.json"
        assert record["records"] == 3

    def test_log_operation_reports_failure(self, capsys):
        logger = setup_logger("ratings_pipeline.tests.operation", level="INFO", format_type="json")

        with pytest.raises(ValueError):
            with log_operation("transfer", logger=logger, job_name="job") as operation:
                raise ValueError("boom")

        records = [json.loads(line) for line in capsys.readouterr().out.strip().splitlines()]
        assert records[-1]["status"] == "error"
        assert records[-1]["error_type"] == "ValueError"
        assert records[-1]["job_name"] == "job"
        assert operation.duration >= 0.0


class TestPipelineMonitor:

    def test_totals(self):
        monitor = PipelineMonitor("monitor-test")
        monitor.record_line_read()
        monitor.record_chunk_committed(500)
        monitor.record_chunk_committed(20)
        monitor.record_chunk_failed()
        monitor.record_transfer_attempt("retry")
        monitor.record_transfer_attempt("success")

        assert monitor.lines_read == 1
        assert monitor.records_written == 520
        assert monitor.chunks_committed == 2
        assert monitor.chunks_failed == 1
        assert monitor.transfer_attempts == 2

    def test_metrics_are_exported(self):
        PipelineMonitor("export-test").record_chunk_committed(5)

        text = generate_metrics().decode("utf-8")

        assert 'ratings_pipeline_records_written_total{job_name="export-test"} 5.0' in text
        assert "ratings_pipeline_chunk_size_records_bucket" in text
