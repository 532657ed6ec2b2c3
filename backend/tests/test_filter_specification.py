"""
Tests for search filters.

Tests cover:
- SINGLE, CONCAT, OR and AND strategies
- LIKE (case-insensitive substring) and EQUALITY (exact) operations
- Empty field lists and empty search terms
- Misconfigured criteria
"""

import pytest
from sqlalchemy import select

from crud_engine.services.crud import (
    EqualsSpecification,
    FilterableFields,
    FilterCriteria,
    FilterOperation,
    FilterSpecification,
    MatchingStrategy,
    SqlAlchemyRepository,
    build_filter_specification,
)
from tests.conftest import next_id
from tests.library import Author


@pytest.fixture
def authors(db_session):
    """A handful of authors with overlapping names."""
    rows = [
        Author(id=next_id(), first_name="John", last_name="Doe", email="jd@example.com"),
        Author(id=next_id(), first_name="Jane", last_name="Doe", email="jane@example.com"),
        Author(id=next_id(), first_name="Johnny", last_name="Cash", email=None),
        Author(id=next_id(), first_name="Ada", last_name=None, email="ada@example.com"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


def matching_names(db_session, criteria, term):
    spec = build_filter_specification(criteria, term)
    found = SqlAlchemyRepository(Author, db_session).find_all(spec)
    return sorted(f"{a.first_name} {a.last_name or ''}".strip() for a in found)


class TestFilterableFields:
    """Tests for FilterableFields construction."""

    def test_single_requires_exactly_one_field(self):
        """SINGLE with zero or several fields is rejected up front."""
        with pytest.raises(ValueError):
            FilterableFields.of([], MatchingStrategy.SINGLE)
        with pytest.raises(ValueError):
            FilterableFields.of(["first_name", "last_name"], MatchingStrategy.SINGLE)

    def test_keys_keep_declaration_order(self):
        fields = FilterableFields.of(["last_name", "first_name"], MatchingStrategy.CONCAT)

        assert fields.keys == ("last_name", "first_name")

    def test_criteria_default_to_like(self):
        assert FilterCriteria.single("email").operation is FilterOperation.LIKE


class TestLikeMatching:
    """Tests for case-insensitive substring matching."""

    def test_single_field_substring(self, db_session, authors):
        """SINGLE matches anywhere in the field, ignoring case."""
        criteria = FilterCriteria.single("first_name")

        assert matching_names(db_session, criteria, "JOHN") == ["John Doe", "Johnny Cash"]

    def test_concat_matches_across_fields(self, db_session, authors):
        """CONCAT joins the fields with a space so full names match."""
        criteria = FilterCriteria.concat(["first_name", "last_name"])

        assert matching_names(db_session, criteria, "john doe") == ["John Doe"]

    def test_concat_treats_null_as_empty(self, db_session, authors):
        """A null field does not make the whole concatenation null."""
        criteria = FilterCriteria.concat(["first_name", "last_name"])

        assert matching_names(db_session, criteria, "ada") == ["Ada"]

    def test_or_matches_any_field(self, db_session, authors):
        criteria = FilterCriteria.any_of(["first_name", "email"])

        assert matching_names(db_session, criteria, "jane") == ["Jane Doe"]
        assert matching_names(db_session, criteria, "example") == ["Ada", "Jane Doe", "John Doe"]

    def test_and_requires_every_field(self, db_session, authors):
        criteria = FilterCriteria.all_of(["first_name", "email"])

        assert matching_names(db_session, criteria, "j") == ["Jane Doe", "John Doe"]
        assert matching_names(db_session, criteria, "john") == []

    def test_like_wildcards_are_not_anchored(self, db_session, authors):
        criteria = FilterCriteria.single("last_name")

        assert matching_names(db_session, criteria, "o") == ["Jane Doe", "John Doe"]


class TestEqualityMatching:
    """Tests for exact matching."""

    def test_equality_is_exact_and_case_sensitive(self, db_session, authors):
        criteria = FilterCriteria.single("first_name", FilterOperation.EQUALITY)

        assert matching_names(db_session, criteria, "John") == ["John Doe"]
        assert matching_names(db_session, criteria, "john") == []
        assert matching_names(db_session, criteria, "Joh") == []

    def test_concat_equality_compares_joined_value(self, db_session, authors):
        criteria = FilterCriteria.concat(["first_name", "last_name"], FilterOperation.EQUALITY)

        assert matching_names(db_session, criteria, "Johnny Cash") == ["Johnny Cash"]


class TestEmptyInputs:
    """Tests for empty field lists and empty terms."""

    def test_empty_concat_matches_everything(self, db_session, authors):
        criteria = FilterCriteria.concat([])

        assert len(matching_names(db_session, criteria, "zzz")) == len(authors)

    def test_empty_and_matches_everything(self, db_session, authors):
        criteria = FilterCriteria.all_of([])

        assert len(matching_names(db_session, criteria, "zzz")) == len(authors)

    def test_empty_or_matches_nothing(self, db_session, authors):
        criteria = FilterCriteria.any_of([])

        assert matching_names(db_session, criteria, "john") == []

    @pytest.mark.parametrize("term", ["", None])
    def test_empty_term_is_rejected(self, term):
        """Callers skip filtering instead of building a predicate."""
        with pytest.raises(ValueError):
            build_filter_specification(FilterCriteria.single("first_name"), term)

    def test_unknown_field_is_rejected_when_compiled(self):
        spec = FilterSpecification(FilterCriteria.single("nickname"), "x")

        with pytest.raises(ValueError, match="nickname"):
            select(Author).where(spec.to_expression(Author))


class TestComposition:
    """Filter specifications combine with other specifications."""

    def test_filter_and_equals(self, db_session, authors):
        spec = build_filter_specification(FilterCriteria.single("last_name"), "doe") & EqualsSpecification(
            "first_name", "Jane"
        )
        found = SqlAlchemyRepository(Author, db_session).find_all(spec)

        assert [a.first_name for a in found] == ["Jane"]

    def test_negated_filter(self, db_session, authors):
        spec = ~build_filter_specification(FilterCriteria.single("first_name"), "john")
        found = SqlAlchemyRepository(Author, db_session).find_all(spec)

        assert sorted(a.first_name for a in found) == ["Ada", "Jane"]
