"""
Unit tests for the stateful line parser.

Includes property-based testing with hypothesis for header and data lines.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ratings_pipeline.core.exceptions import MalformedLineError, MissingMovieContextError
from ratings_pipeline.core.models import FlatRecord, ParserState
from ratings_pipeline.core.parsing import LineParser, is_header, parse_line

pytestmark = pytest.mark.unit

field_text = st.text(
    alphabet=st.characters(exclude_characters=",:\r\n", exclude_categories=("Cs",)),
    max_size=12,
)
line_text = st.text(
    alphabet=st.characters(exclude_characters="\r\n", exclude_categories=("Cs",)),
    max_size=20,
)


class TestHeaderLines:
    """Header lines update the movie context and produce no record"""

    def test_header_suppresses_output(self):
        parser = LineParser()
        assert parser.parse("42:") is None
        assert parser.current_movie_id == "42"

    def test_header_is_trimmed(self):
        parser = LineParser()
        assert parser.parse("   17 :  ") is None
        assert parser.current_movie_id == "17"

    def test_only_trailing_terminator_is_stripped(self):
        parser = LineParser()
        parser.parse("a:b:")
        assert parser.current_movie_id == "a:b"

    def test_new_header_replaces_movie(self):
        parser = LineParser()
        parser.parse("1:")
        parser.parse("2:")
        record = parser.parse("7,5,2005-01-01")
        assert record.movie_id == "2"

    @given(line_text)
    def test_any_line_ending_in_terminator_is_a_header(self, text):
        parser = LineParser()
        assert parser.parse(text + ":") is None
        assert parser.current_movie_id == text.strip()


class TestDataLines:
    """Data lines are flattened with the movie in scope"""

    def test_data_line_flattening(self):
        parser = LineParser(ParserState(current_movie_id="42"))
        record = parser.parse("7,5,2005-01-01")
        assert record == FlatRecord(movie_id="42", customer_id="7", rating="5", date="2005-01-01")

    def test_state_persists_across_data_lines(self):
        parser = LineParser()
        parser.parse("100:")
        first = parser.parse("1,4,2020-05-01")
        second = parser.parse("2,3,2020-05-02")
        assert first.movie_id == second.movie_id == "100"

    @pytest.mark.parametrize("line", ["7,5", "7", "", "7,5,2005-01-01,extra", "7,5,2005-01-01,"])
    def test_malformed_line_fails(self, line):
        parser = LineParser(ParserState(current_movie_id="42"))
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse(line)
        assert exc_info.value.line == line
        assert exc_info.value.line_number == 1

    def test_malformed_line_reports_position(self):
        parser = LineParser()
        parser.parse("1:")
        parser.parse("1,2,3")
        with pytest.raises(MalformedLineError) as exc_info:
            parser.parse("oops")
        assert exc_info.value.line_number == 3
        assert "line 3" in str(exc_info.value)

    def test_fields_are_kept_verbatim(self):
        parser = LineParser(ParserState(current_movie_id="9"))
        record = parser.parse(" 7 , 5 ,2005-01-01")
        assert record.customer_id == " 7 "
        assert record.rating == " 5 "

    @given(field_text, field_text, field_text)
    def test_three_fields_round_into_a_record(self, customer, rating, date):
        parser = LineParser(ParserState(current_movie_id="m"))
        record = parser.parse(f"{customer},{rating},{date}")
        assert record.as_row() == ("m", customer, rating, date)


class TestMissingMovieContext:
    """Data lines before any header"""

    def test_lenient_mode_emits_empty_movie_id(self):
        parser = LineParser()
        record = parser.parse("7,5,2005-01-01")
        assert record.movie_id == ""
        assert parser.current_movie_id is None

    def test_strict_mode_rejects(self):
        parser = LineParser(strict_movie_context=True)
        with pytest.raises(MissingMovieContextError):
            parser.parse("7,5,2005-01-01")

    def test_strict_mode_error_is_a_malformed_line(self):
        parser = LineParser(strict_movie_context=True)
        with pytest.raises(MalformedLineError):
            parser.parse("7,5,2005-01-01")

    def test_strict_mode_accepts_after_header(self):
        parser = LineParser(strict_movie_context=True)
        parser.parse("3:")
        assert parser.parse("7,5,2005-01-01").movie_id == "3"

    def test_empty_header_id_still_sets_context(self):
        parser = LineParser(strict_movie_context=True)
        parser.parse(":")
        assert parser.current_movie_id == ""
        assert parser.parse("7,5,2005-01-01").movie_id == ""

    def test_has_movie_distinguishes_empty_id_from_no_header(self):
        assert not ParserState().has_movie
        assert ParserState(current_movie_id="").has_movie


class TestParseLine:
    """The functional form returns new state instead of mutating"""

    def test_header_returns_new_state(self):
        state = ParserState()
        new_state, record = parse_line(state, "42:")
        assert record is None
        assert new_state.current_movie_id == "42"
        assert state.current_movie_id is None

    def test_data_line_keeps_state(self):
        state = ParserState(current_movie_id="42")
        new_state, record = parse_line(state, "7,5,2005-01-01")
        assert new_state == state
        assert record.movie_id == "42"

    def test_is_header(self):
        assert is_header("1:")
        assert is_header("1:  ")
        assert not is_header("1,2,3")
        assert not is_header("")
