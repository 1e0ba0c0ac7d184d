"""
Command-line interface for the ratings preprocessing job.

Usage:
    ratings-pipeline <input_locator> <output_locator> [options]
    python -m ratings_pipeline.cli.batch_cli <input_locator> <output_locator> [options]
"""

import argparse
import sys

from ratings_pipeline.batch.job import JobOrchestrator
from ratings_pipeline.core.config import load_job_config
from ratings_pipeline.core.exceptions import ConfigError
from ratings_pipeline.observability.logger import configure_logging, get_logger
from ratings_pipeline.observability.metrics import start_metrics_server
from ratings_pipeline.storage import StorageRegistry, build_default_registry

EXIT_SUCCESS = 0
EXIT_FAILURE = -1

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ratings-pipeline",
        description="Flatten a movie ratings export and upload it to object storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Process an export stored in GCS and upload the result to another bucket
  ratings-pipeline gs://raw-exports/combined_data_1.txt gs://prepared-datasets

  # Local run against the filesystem
  ratings-pipeline file://tmp/exports/combined_data_1.txt file://tmp/prepared

  # Custom settings
  ratings-pipeline gs://raw-exports/combined_data_1.txt prepared-datasets \\
      --config config/job.yaml --log-format text
        """
    )
    # Optional at the argparse level so a missing path exits with -1, not 2
    parser.add_argument(
        "input_locator",
        nargs="?",
        help="Input object locator (scheme://bucket/objectPath)"
    )
    parser.add_argument(
        "output_locator",
        nargs="?",
        help="Output bucket locator (scheme://bucket[/prefix] or a bucket name)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to job configuration YAML file"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: LOG_LEVEL env var or INFO)"
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "text"],
        help="Log format (default: LOG_FORMAT env var or json)"
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Expose Prometheus metrics on this port while the job runs"
    )
    return parser


def run_job(args: argparse.Namespace, storage: StorageRegistry | None = None) -> int:
    """
    Execute the job for parsed arguments.

    Args:
        args: Command-line arguments
        storage: Storage registry (production backends if None)

    Returns:
        Process exit code
    """
    if not args.input_locator or not args.output_locator:
        logger.error("Please provide the input file path and the output bucket path")
        return EXIT_FAILURE

    try:
        config = load_job_config(args.config)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    storage = storage or build_default_registry(local_root=config.local_storage_root)
    orchestrator = JobOrchestrator(config, storage)

    logger.info(f"Input file: {args.input_locator}")
    logger.info(f"Output bucket: {args.output_locator}")
    execution = orchestrator.run(args.input_locator, args.output_locator)

    logger.info("=" * 60)
    logger.info(f"JOB {execution.state.value.upper()}")
    logger.info("=" * 60)
    if execution.pipeline_result:
        result = execution.pipeline_result
        logger.info(f"Lines read: {result.lines_read}")
        logger.info(f"Records written: {result.records_written}")
        logger.info(f"Chunks committed: {result.chunks_committed}")
        logger.info(f"Output file: {result.output_file.path} ({result.output_file.byte_length} bytes)")
    if execution.transfer_outcome:
        outcome = execution.transfer_outcome
        logger.info(f"Upload attempts: {outcome.attempts}")
        if outcome.object_locator:
            logger.info(f"Uploaded object: {outcome.object_locator}")
    if execution.failure:
        logger.error(f"Failure: {execution.failure.error_type}: {execution.failure.message}")
    logger.info("=" * 60)

    return EXIT_SUCCESS if execution.is_successful else EXIT_FAILURE


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_level or args.log_format:
        configure_logging(level=args.log_level, format_type=args.log_format)

    sys.exit(run_job(args))


if __name__ == "__main__":
    main()
