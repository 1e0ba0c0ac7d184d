"""
Job configuration management.

Loads job settings from defaults, an optional YAML file and environment
variables (in increasing order of precedence).
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from ratings_pipeline.core.exceptions import ConfigError
from ratings_pipeline.core.models import DEFAULT_CHUNK_SIZE, RetryPolicy

# Environment variable -> JobConfig field
ENV_OVERRIDES = {
    "RATINGS_OUTPUT_DIR": "output_dir",
    "RATINGS_CHUNK_SIZE": "chunk_size",
    "RATINGS_TARGET_DIRECTORY": "target_directory",
    "RATINGS_DEFAULT_SCHEME": "default_scheme",
    "RATINGS_LOCAL_STORAGE_ROOT": "local_storage_root",
    "RATINGS_FAIL_ON_EMPTY_OUTPUT": "fail_on_empty_output",
    "RATINGS_STRICT_MOVIE_CONTEXT": "strict_movie_context",
}


class JobConfig(BaseModel):
    """
    Settings for one run of the ratings job.

    Attributes:
        output_dir: Local directory receiving the flat file
        file_name_prefix: Prefix of the generated file name
        file_extension: Extension of the generated file name
        chunk_size: Records per committed chunk
        target_directory: Virtual directory prepended to the uploaded object name
        default_scheme: Scheme assumed for a destination given as a bare bucket name
        local_storage_root: Filesystem root backing file:// locators
        encoding: Text encoding of the source object
        fail_on_empty_output: Treat an empty output file as a failure
        strict_movie_context: Reject data lines that precede every header
        retry: Upload retry policy
    """

    output_dir: Path = Path("/tmp/ratings-pipeline")
    file_name_prefix: str = "Dataset_"
    file_extension: str = ".txt"
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, gt=0)
    target_directory: str = "output/"
    default_scheme: str = Field("gs", min_length=1)
    local_storage_root: Path = Path("/")
    encoding: str = "utf-8"
    fail_on_empty_output: bool = False
    strict_movie_context: bool = False
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    @field_validator("target_directory")
    @classmethod
    def normalize_target_directory(cls, v: str) -> str:
        """Strip leading slashes and ensure a single trailing one."""
        v = v.strip().strip("/")
        return f"{v}/" if v else ""

    def output_file_name(self, run_at: datetime | None = None) -> str:
        run_at = run_at or datetime.now()
        return f"{self.file_name_prefix}{run_at.strftime('%Y%m%dT%H%M%S%f')}{self.file_extension}"

    def output_path(self, run_at: datetime | None = None) -> Path:
        return self.output_dir / self.output_file_name(run_at)


class JobConfigLoader:
    """
    Loads job settings from a YAML configuration file.

    Expected YAML format:
    ```yaml
    job:
      output_dir: /var/tmp/ratings
      chunk_size: 500
      target_directory: output/
      fail_on_empty_output: false
      retry:
        max_attempts: 5
        initial_delay: 1.0
        multiplier: 1.5
        max_delay: 10.0
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the job config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise ConfigError(f"Job configuration file not found: {config_path}")

    def load_settings(self) -> dict[str, Any]:
        """
        Read the ``job`` section of the YAML file.

        Returns:
            Raw settings dictionary

        Raises:
            ConfigError: If YAML is invalid or the section is missing
        """
        try:
            with open(self.config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not config or "job" not in config:
            raise ConfigError("Configuration file must contain 'job' section")

        settings = config["job"] or {}
        if not isinstance(settings, dict):
            raise ConfigError("'job' section must be a mapping")
        return settings


def settings_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    settings = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value is not None and value != "":
            settings[field_name] = value
    return settings


def load_job_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    dotenv_path: str | Path | None = None,
) -> JobConfig:
    """
    Build the job configuration.

    Args:
        config_path: Optional YAML file with a ``job`` section
        environ: Environment to read overrides from (defaults to os.environ,
            after loading a .env file if one is present)
        dotenv_path: Explicit .env file to load into os.environ (defaults to
            the nearest .env at or above the working directory)

    Returns:
        Validated JobConfig

    Raises:
        ConfigError: If any source holds invalid settings
    """
    if environ is None:
        load_dotenv(dotenv_path or find_dotenv(usecwd=True))
        environ = os.environ

    settings: dict[str, Any] = {}
    if config_path:
        settings.update(JobConfigLoader(config_path).load_settings())
    settings.update(settings_from_env(environ))

    try:
        return JobConfig(**settings)
    except ValidationError as e:
        raise ConfigError(f"Invalid job configuration: {e}") from e
