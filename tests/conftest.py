"""
Pytest configuration and fixtures for ratings-pipeline tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
from pathlib import Path
from typing import Iterator

import pytest

from ratings_pipeline.core.config import JobConfig
from ratings_pipeline.core.exceptions import StorageError, StorageTransportError
from ratings_pipeline.core.models import RetryPolicy
from ratings_pipeline.storage import ObjectInfo, ObjectLocator, ObjectStorage, StorageRegistry


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't touch the filesystem or storage backends"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that wire several components together"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the CLI"
    )


# =======================
# STORAGE FAKES
# =======================

class InMemoryObjectStorage(ObjectStorage):
    """
    Object storage held in a dict, for the ``mem://`` scheme.

    ``fail_writes`` scripts how many of the next writes raise a transport error.
    Writes into a bucket listed in ``missing_buckets`` fail without retry.
    """

    scheme = "mem"

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.fail_writes = 0
        self.missing_buckets: set[str] = set()
        self.write_attempts = 0
        self.read_count = 0
        self.stat_count = 0

    def put(self, locator: str, content: str | bytes) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.objects[str(ObjectLocator.parse(locator))] = content

    def get(self, locator: str) -> bytes:
        return self.objects[str(ObjectLocator.parse(locator))]

    def stat(self, locator: ObjectLocator) -> ObjectInfo:
        self.stat_count += 1
        data = self.objects.get(str(locator))
        if data is None:
            return ObjectInfo(exists=False)
        return ObjectInfo(exists=True, size=len(data))

    def open_lines(self, locator: ObjectLocator, encoding: str = "utf-8") -> Iterator[str]:
        self.read_count += 1
        data = self.objects.get(str(locator))
        if data is None:
            raise StorageError(f"Object not found: {locator}")
        yield from data.decode(encoding).splitlines(keepends=True)

    def write(self, locator: ObjectLocator, data: bytes, content_type: str = "text/plain") -> ObjectLocator:
        self.write_attempts += 1
        if locator.bucket in self.missing_buckets:
            raise StorageError(f"Bucket not found: {locator.bucket}")
        if self.fail_writes > 0:
            self.fail_writes -= 1
            raise StorageTransportError(f"503 Service Unavailable (attempt {self.write_attempts})")
        self.objects[str(locator)] = data
        return locator


class RecordingSleep:
    """Stands in for time.sleep and remembers every delay."""

    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.delays)


# =======================
# FIXTURES
# =======================

@pytest.fixture
def memory_storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def storage_registry(memory_storage) -> StorageRegistry:
    return StorageRegistry([memory_storage])


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def sample_export() -> str:
    """A small export with two movies."""
    return (
        "1:\n"
        "1488844,3,2005-09-06\n"
        "822109,5,2005-05-13\n"
        "2:\n"
        "2059652,4,2005-09-05\n"
    )


@pytest.fixture
def job_config(tmp_path) -> JobConfig:
    """
    Job configuration writing into a temporary directory

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        JobConfig with default retry policy
    """
    return JobConfig(output_dir=tmp_path / "out", retry=RetryPolicy())


@pytest.fixture
def output_path(tmp_path) -> Path:
    return tmp_path / "out" / "Dataset_test.txt"
