"""
Unit tests for the upload retry loop.

Sleeps are recorded instead of taken, so the backoff schedule is checked
without waiting for it.
"""

import pytest

from ratings_pipeline.batch import TransferAgent
from ratings_pipeline.core.exceptions import TransferFailedError
from ratings_pipeline.core.models import OutputFile, RetryPolicy
from ratings_pipeline.observability.metrics import PipelineMonitor

pytestmark = pytest.mark.unit


@pytest.fixture
def output_file(tmp_path) -> OutputFile:
    path = tmp_path / "Dataset_20240101T000000000000.txt"
    path.write_text("1,1488844,3,2005-09-06\n")
    return OutputFile(path=path, byte_length=path.stat().st_size, records_written=1)


@pytest.fixture
def agent(storage_registry, recording_sleep) -> TransferAgent:
    return TransferAgent(storage_registry, sleep=recording_sleep, monitor=PipelineMonitor("test"))


class TestTransferAgent:

    def test_first_attempt_succeeds(self, agent, memory_storage, recording_sleep, output_file):
        outcome = agent.transfer(output_file, "mem://prepared")

        assert outcome.success
        assert outcome.attempts == 1
        assert outcome.last_error is None
        assert recording_sleep.delays == []
        assert memory_storage.get(outcome.object_locator) == output_file.path.read_bytes()

    def test_recovers_after_transient_failures(self, agent, memory_storage, recording_sleep, output_file):
        memory_storage.fail_writes = 2

        outcome = agent.transfer(output_file, "mem://prepared")

        assert outcome.success
        assert outcome.attempts == 3
        assert "503" in outcome.last_error
        assert recording_sleep.delays == pytest.approx([1.0, 1.5])
        assert outcome.total_delay_seconds == pytest.approx(2.5)
        assert agent.monitor.transfer_attempts == 3

    def test_gives_up_after_max_attempts(self, agent, memory_storage, recording_sleep, output_file):
        memory_storage.fail_writes = 100

        with pytest.raises(TransferFailedError) as exc_info:
            agent.transfer(output_file, "mem://prepared")

        assert memory_storage.write_attempts == 5
        assert recording_sleep.delays == pytest.approx([1.0, 1.5, 2.25, 3.375])
        assert "attempt 5" in str(exc_info.value)
        outcome = exc_info.value.outcome
        assert outcome.success is False
        assert outcome.attempts == 5
        assert outcome.total_delay_seconds == pytest.approx(8.125)
        assert memory_storage.objects == {}

    def test_delays_respect_ceiling(self, storage_registry, memory_storage, recording_sleep, output_file):
        policy = RetryPolicy(max_attempts=4, initial_delay=4.0, multiplier=2.0, max_delay=10.0)
        agent = TransferAgent(storage_registry, retry_policy=policy, sleep=recording_sleep)
        memory_storage.fail_writes = 100

        with pytest.raises(TransferFailedError):
            agent.transfer(output_file, "mem://prepared")

        assert recording_sleep.delays == pytest.approx([4.0, 8.0, 10.0])

    def test_permanent_storage_error_is_not_retried(self, agent, memory_storage, recording_sleep, output_file):
        memory_storage.missing_buckets.add("prepared")

        with pytest.raises(TransferFailedError, match="Bucket not found") as exc_info:
            agent.transfer(output_file, "mem://prepared")

        outcome = exc_info.value.outcome
        assert outcome.success is False
        assert outcome.attempts == 1
        assert outcome.last_error == "Bucket not found: prepared"
        assert memory_storage.write_attempts == 1
        assert recording_sleep.delays == []

    def test_permanent_error_after_transient_ones(self, agent, memory_storage, recording_sleep, output_file):
        memory_storage.fail_writes = 1
        original_write = memory_storage.write

        def write_then_lose_bucket(locator, data, content_type="text/plain"):
            if memory_storage.write_attempts == 1:
                memory_storage.missing_buckets.add(locator.bucket)
            return original_write(locator, data, content_type)

        memory_storage.write = write_then_lose_bucket

        with pytest.raises(TransferFailedError) as exc_info:
            agent.transfer(output_file, "mem://prepared")

        assert exc_info.value.outcome.attempts == 2
        assert exc_info.value.outcome.total_delay_seconds == pytest.approx(1.0)
        assert recording_sleep.delays == pytest.approx([1.0])

    @pytest.mark.parametrize("destination", ["s3://prepared", "gs://"])
    def test_unusable_destination(self, agent, memory_storage, output_file, destination):
        with pytest.raises(TransferFailedError) as exc_info:
            agent.transfer(output_file, destination)

        assert exc_info.value.outcome.attempts == 0
        assert memory_storage.write_attempts == 0

    def test_unreadable_file_is_not_retried(self, agent, memory_storage, recording_sleep, tmp_path):
        with pytest.raises(TransferFailedError) as exc_info:
            agent.transfer(tmp_path / "missing.txt", "mem://prepared")

        assert exc_info.value.outcome.attempts == 0
        assert memory_storage.write_attempts == 0
        assert recording_sleep.delays == []


class TestDestination:

    def test_object_goes_under_target_directory(self, agent, output_file):
        target = agent.destination_for(output_file.path, "mem://prepared")
        assert str(target) == f"mem://prepared/output/{output_file.name}"

    def test_destination_prefix_is_kept(self, agent, output_file):
        target = agent.destination_for(output_file.path, "mem://prepared/netflix")
        assert target.path == f"netflix/output/{output_file.name}"

    def test_bare_bucket_uses_default_scheme(self, storage_registry, output_file):
        agent = TransferAgent(storage_registry, default_scheme="mem")
        target = agent.destination_for(output_file.path, "prepared")
        assert str(target) == f"mem://prepared/output/{output_file.name}"

    def test_custom_target_directory(self, storage_registry, output_file):
        agent = TransferAgent(storage_registry, target_directory="")
        target = agent.destination_for(output_file.path, "mem://prepared")
        assert target.path == output_file.name
