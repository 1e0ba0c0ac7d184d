"""
Stateful parser turning raw export lines into flat rating records.

The export interleaves header lines naming a movie (``42:``) with data lines
(``customerId,rating,date``) that belong to the most recent header. Because
data lines do not repeat the movie id, the movie in scope has to be carried
from one call to the next, and a parse can only be reproduced by replaying
the source from its first line.
"""

from typing import Optional

from ratings_pipeline.core.exceptions import MalformedLineError, MissingMovieContextError
from ratings_pipeline.core.models import FlatRecord, ParserState
from ratings_pipeline.observability.logger import get_logger

HEADER_TERMINATOR = ":"
FIELD_DELIMITER = ","
DATA_FIELD_COUNT = 3

logger = get_logger(__name__)


def is_header(line: str) -> bool:
    return line.strip().endswith(HEADER_TERMINATOR)


def movie_id_from_header(line: str) -> str:
    """Strip the trailing terminator from a header line and trim the rest."""
    return line.strip()[: -len(HEADER_TERMINATOR)].strip()


def split_data_line(line: str, line_number: int | None = None) -> tuple[str, str, str]:
    """
    Split a data line into customer id, rating and date.

    Raises:
        MalformedLineError: If the line does not hold exactly three fields
    """
    fields = line.split(FIELD_DELIMITER)
    if len(fields) != DATA_FIELD_COUNT:
        raise MalformedLineError(
            line,
            f"expected {DATA_FIELD_COUNT} fields, found {len(fields)}",
            line_number=line_number,
        )
    return fields[0], fields[1], fields[2]


def parse_line(
    state: ParserState,
    line: str,
    line_number: int | None = None,
) -> tuple[ParserState, Optional[FlatRecord]]:
    """
    Parse one line against an explicit state without mutating it.

    Args:
        state: Movie context before this line
        line: Raw line content
        line_number: One-based position in the source, for error messages

    Returns:
        Tuple of (state after this line, record or None for header lines)
    """
    if is_header(line):
        return ParserState(current_movie_id=movie_id_from_header(line)), None

    customer_id, rating, date = split_data_line(line, line_number)
    record = FlatRecord(
        movie_id=state.current_movie_id or "",
        customer_id=customer_id,
        rating=rating,
        date=date,
    )
    return state, record


class LineParser:
    """
    Parser owning the movie context for one pipeline run.

    A data line seen before any header is emitted with an empty movie id
    unless ``strict_movie_context`` is set, in which case it is rejected.
    """

    def __init__(self, state: ParserState | None = None, strict_movie_context: bool = False):
        """
        Initialize parser.

        Args:
            state: Starting context (defaults to no movie in scope)
            strict_movie_context: Reject data lines that have no movie in scope
        """
        self.state = state or ParserState()
        self.strict_movie_context = strict_movie_context
        self.lines_parsed = 0

    def parse(self, line: str) -> Optional[FlatRecord]:
        """
        Parse the next line of the source.

        Args:
            line: Raw line content (line terminator already removed)

        Returns:
            FlatRecord for data lines, None for header lines

        Raises:
            MalformedLineError: If a data line is not exactly three fields
            MissingMovieContextError: In strict mode, for a data line
                before any header
        """
        self.lines_parsed += 1

        if not is_header(line) and not self.state.has_movie:
            if self.strict_movie_context:
                raise MissingMovieContextError(
                    line, "data line appears before any movie header", line_number=self.lines_parsed
                )
            logger.warning(
                "Data line has no movie in scope, emitting empty movie id",
                extra={"line_number": self.lines_parsed},
            )

        self.state, record = parse_line(self.state, line, line_number=self.lines_parsed)

        if record is None:
            logger.debug(
                f"Movie in scope: {self.state.current_movie_id}",
                extra={"line_number": self.lines_parsed},
            )
        return record

    @property
    def current_movie_id(self) -> str | None:
        return self.state.current_movie_id
