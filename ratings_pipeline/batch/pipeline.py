"""
Chunked batch pipeline orchestration.

Coordinates the flow: read line → parse → buffer chunk → commit chunk
"""

from contextlib import closing

from ratings_pipeline.batch.readers import ObjectLineReader
from ratings_pipeline.batch.writers import FlatFileWriter
from ratings_pipeline.core.exceptions import PipelineError
from ratings_pipeline.core.models import DEFAULT_CHUNK_SIZE, Chunk, PipelineResult
from ratings_pipeline.core.parsing import LineParser
from ratings_pipeline.observability.logger import get_logger
from ratings_pipeline.observability.metrics import PipelineMonitor

logger = get_logger(__name__)


class ChunkedPipeline:
    """
    Streams a source through the parser and commits records chunk by chunk.

    Flow:
    1. Read the next line from storage (never the whole object)
    2. Feed it to the stateful parser
    3. Buffer the resulting record in the current chunk
    4. When the chunk is full, write it in one go and flush
    5. When the source is exhausted, commit the final partial chunk

    A parse or write failure discards the chunk being built and aborts the
    run. Chunks committed before the failure stay in the file.

    A pipeline instance owns its parser state and can run only once.
    """

    def __init__(
        self,
        reader: ObjectLineReader,
        parser: LineParser,
        writer: FlatFileWriter,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        monitor: PipelineMonitor | None = None,
    ):
        """
        Initialize chunked pipeline.

        Args:
            reader: Streaming source reader
            parser: Parser owning the movie context for this run
            writer: Sink receiving committed chunks
            chunk_size: Records per chunk
            monitor: Progress collaborator
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.reader = reader
        self.parser = parser
        self.writer = writer
        self.chunk_size = chunk_size
        self.monitor = monitor or PipelineMonitor()

        self.lines_read = 0
        self.lines_committed = 0
        self.records_written = 0
        self.chunks_committed = 0
        self._started = False

    def run(self, locator: str) -> PipelineResult:
        """
        Process the whole source.

        Args:
            locator: Source object locator

        Returns:
            PipelineResult with progress counters and the finished file

        Raises:
            MalformedLineError: If a data line cannot be parsed
            ReadError: If the source cannot be streamed
            WriteError: If a chunk cannot be persisted
        """
        if self._started:
            raise RuntimeError("ChunkedPipeline instances are single-use")
        self._started = True

        logger.info(f"Starting chunked processing for: {locator}", extra={"chunk_size": self.chunk_size})

        chunk = Chunk(sequence=0, capacity=self.chunk_size)
        with self.writer:
            try:
                with closing(self.reader.read_lines(locator)) as lines:
                    for line in lines:
                        self.lines_read += 1
                        self.monitor.record_line_read()
                        logger.debug(f"Successfully read item, line no: {self.lines_read}")

                        record = self.parser.parse(line)
                        if record is None:
                            continue

                        chunk.add(record)
                        if chunk.is_full:
                            self._commit(chunk)
                            chunk = Chunk(sequence=chunk.sequence + 1, capacity=self.chunk_size)

                if not chunk.is_empty:
                    self._commit(chunk)
            except PipelineError as e:
                self.monitor.record_chunk_failed()
                logger.error(
                    f"Aborting at chunk {chunk.sequence}: {e}",
                    extra={
                        "chunk_sequence": chunk.sequence,
                        "discarded_records": chunk.size,
                        "lines_read": self.lines_read,
                        "lines_committed": self.lines_committed,
                    },
                )
                raise

        output_file = self.writer.verify()
        logger.info(
            "Chunked processing complete",
            extra={
                "lines_read": self.lines_read,
                "records_written": self.records_written,
                "chunks_committed": self.chunks_committed,
            },
        )

        return PipelineResult(
            lines_read=self.lines_read,
            records_written=self.records_written,
            chunks_committed=self.chunks_committed,
            output_file=output_file,
        )

    def _commit(self, chunk: Chunk) -> None:
        """
        Write a chunk, then advance the committed-line cursor.

        Args:
            chunk: Filled chunk
        """
        written = self.writer.write_chunk(chunk)
        self.records_written += written
        self.chunks_committed += 1
        self.lines_committed = self.lines_read
        self.monitor.record_chunk_committed(written)
        logger.info(
            f"Committed chunk {chunk.sequence}",
            extra={"records": written, "lines_committed": self.lines_committed},
        )
