"""
FlatRecord model representing one flattened customer rating.
"""

from pydantic import BaseModel


class FlatRecord(BaseModel):
    """
    One rating paired with the movie that was in scope when it was read.

    Immutable once built. Field order matches the output line layout.

    Attributes:
        movie_id: Movie identifier from the most recent header line
            (empty when no header preceded the data line)
        customer_id: First field of the data line
        rating: Second field of the data line
        date: Third field of the data line
    """

    movie_id: str
    customer_id: str
    rating: str
    date: str

    def as_row(self) -> tuple[str, str, str, str]:
        return (self.movie_id, self.customer_id, self.rating, self.date)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "movie_id": "42",
                "customer_id": "1488844",
                "rating": "3",
                "date": "2005-09-06",
            }
        }
