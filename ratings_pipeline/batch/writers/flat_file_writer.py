"""
Flat file writer for committed chunks.

Each record becomes one ``movieId,customerId,rating,date`` line. A chunk is
rendered in memory and appended with a single write, then flushed and
fsynced, so a chunk boundary is also a durability boundary.
"""

import os
from pathlib import Path
from typing import IO

from ratings_pipeline.core.exceptions import EmptyOutputError, WriteError
from ratings_pipeline.core.models import Chunk, FlatRecord, OutputFile
from ratings_pipeline.observability.logger import get_logger

OUTPUT_DELIMITER = ","

logger = get_logger(__name__)


class FlatFileWriter:
    """
    Appends committed chunks to a single delimited output file.

    The file is created empty by open(), appended to by write_chunk(), and
    must not be written again after close().
    """

    def __init__(
        self,
        path: str | Path,
        delimiter: str = OUTPUT_DELIMITER,
        line_terminator: str = os.linesep,
        encoding: str = "utf-8",
        fail_on_empty_output: bool = False,
    ):
        """
        Initialize flat file writer.

        Args:
            path: Output file path
            delimiter: Field delimiter
            line_terminator: Appended after every record
            encoding: Text encoding of the output
            fail_on_empty_output: Make an empty finished file a hard failure
        """
        self.path = Path(path)
        self.delimiter = delimiter
        self.line_terminator = line_terminator
        self.encoding = encoding
        self.fail_on_empty_output = fail_on_empty_output
        self.records_written = 0
        self._handle: IO[str] | None = None
        self._closed = False

    def open(self) -> "FlatFileWriter":
        """
        Create (or truncate) the output file.

        Raises:
            WriteError: If the file cannot be created
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # newline="" so line_terminator is written verbatim
            self._handle = open(self.path, "w", encoding=self.encoding, newline="")
        except OSError as e:
            raise WriteError(f"Cannot create output file {self.path}: {e}") from e
        self._closed = False
        logger.info(f"Opened output file: {self.path}")
        return self

    def format_record(self, record: FlatRecord) -> str:
        return self.delimiter.join(record.as_row()) + self.line_terminator

    def write_chunk(self, chunk: Chunk) -> int:
        """
        Append every record of a chunk and persist it.

        Args:
            chunk: Chunk to commit

        Returns:
            Number of records written

        Raises:
            WriteError: If the sink is not open or the write fails
        """
        if self._handle is None or self._closed:
            raise WriteError(f"Output file {self.path} is not open for writing")

        logger.info(f"Preparing to write {chunk.size} items to the output file.")
        if chunk.is_empty:
            logger.warning("No items to write, this might indicate an issue in the pipeline.")
            return 0

        payload = "".join(self.format_record(record) for record in chunk.records)
        try:
            self._handle.write(payload)
            self._handle.flush()
            os.fsync(self._handle.fileno())
        except OSError as e:
            logger.error(
                f"Error writing {chunk.size} items. Error message: {e}",
                extra={"chunk_sequence": chunk.sequence},
            )
            raise WriteError(f"Failed to write chunk {chunk.sequence} to {self.path}: {e}") from e

        self.records_written += chunk.size
        logger.info(f"Successfully wrote {chunk.size} items to the output file.")
        return chunk.size

    def close(self) -> None:
        if self._handle is not None:
            try:
                self._handle.close()
            except OSError as e:
                raise WriteError(f"Failed to close output file {self.path}: {e}") from e
            finally:
                self._handle = None
        self._closed = True

    def verify(self) -> OutputFile:
        """
        Post-write check on the finished file.

        Returns:
            OutputFile describing the finished artifact

        Raises:
            WriteError: If the file does not exist
            EmptyOutputError: If the file is empty and fail_on_empty_output is set
        """
        if not self.path.is_file():
            raise WriteError(f"Output file was not created: {self.path}")

        output = OutputFile(
            path=self.path,
            byte_length=self.path.stat().st_size,
            records_written=self.records_written,
        )
        if output.is_empty:
            if self.fail_on_empty_output:
                raise EmptyOutputError(f"Output file {self.path} is empty")
            logger.warning("Output file is created but appears empty. Verify if this is expected.")
        else:
            logger.info(
                "Output file is created and populated successfully.",
                extra={"byte_length": output.byte_length, "records_written": output.records_written},
            )
        return output

    def __enter__(self) -> "FlatFileWriter":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
