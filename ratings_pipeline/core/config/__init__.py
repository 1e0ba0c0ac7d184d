"""
Job configuration loading.
"""

from .job_config import JobConfig, JobConfigLoader, load_job_config

__all__ = [
    "JobConfig",
    "JobConfigLoader",
    "load_job_config",
]
