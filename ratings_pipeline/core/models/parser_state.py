"""
ParserState model holding the movie currently in scope.
"""

from pydantic import BaseModel


class ParserState(BaseModel):
    """
    Movie context carried from one line to the next.

    Created empty at pipeline start and replaced by every header line.
    Owned by a single parser for the duration of one job run.
    """

    current_movie_id: str | None = None

    @property
    def has_movie(self) -> bool:
        return self.current_movie_id is not None
