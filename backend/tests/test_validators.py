"""
Tests for enum-backed field validators and error schemas.
"""

from enum import Enum
from typing import Annotated

import pytest
from pydantic import BaseModel, ValidationError

from crud_shared.utils.schemas import CommonFieldErrorCode, ErrorDto, ErrorInfo, FieldErrorInfo
from crud_shared.utils.validators import allowed_enum_values, enum_value, enum_values


class Status(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Article(BaseModel):
    status: Annotated[str, enum_value(Status)]
    previous: Annotated[str | None, enum_value(Status, blankable=True)] = None
    history: Annotated[list[str], enum_values(Status)] = []


class TestEnumValue:
    """Tests for enum_value()."""

    def test_allowed_values_are_upper_case_names(self):
        assert allowed_enum_values(Status) == ["DRAFT", "PUBLISHED"]

    def test_match_is_case_insensitive(self):
        assert Article(status="draft").status == "draft"
        assert Article(status="Published").status == "Published"

    def test_unknown_value(self):
        with pytest.raises(ValidationError) as exc_info:
            Article(status="archived")

        assert "must be one of the following values: DRAFT, PUBLISHED" in str(exc_info.value)

    def test_blank_rejected_unless_blankable(self):
        with pytest.raises(ValidationError):
            Article(status="")

        assert Article(status="DRAFT", previous="").previous == ""
        assert Article(status="DRAFT", previous=None).previous is None

    def test_custom_message(self):
        class Flagged(BaseModel):
            status: Annotated[str, enum_value(Status, message="pick {enum_values}")]

        with pytest.raises(ValidationError) as exc_info:
            Flagged(status="x")

        assert "pick DRAFT, PUBLISHED" in str(exc_info.value)


class TestEnumValues:
    """Tests for enum_values()."""

    def test_empty_collection_is_valid(self):
        assert Article(status="DRAFT", history=[]).history == []

    def test_invalid_positions_are_named(self):
        with pytest.raises(ValidationError) as exc_info:
            Article(status="DRAFT", history=["draft", "gone", "PUBLISHED", "lost"])

        assert "[1], [3] must be one of the following values" in str(exc_info.value)


class TestErrorSchemas:
    """Tests for ErrorInfo, FieldErrorInfo and ErrorDto."""

    def test_field_error_formats_params(self):
        error = FieldErrorInfo.of(CommonFieldErrorCode.RANGE, 12, {"min": 1, "max": 10})

        assert error.code == "RANGE"
        assert error.message == "must be between 1 and 10"
        assert error.rejected_value == 12

    def test_conflict_on_field(self):
        info = ErrorInfo.conflict_on_field("isbn", CommonFieldErrorCode.NOT_UNIQUE, "978-0")

        assert info.field_errors["isbn"].message == "must be unique"

    def test_error_dto_takes_code_and_fields_from_info(self):
        info = ErrorInfo.for_code("BOOK_LOCKED").with_params({"until": "tomorrow"})

        dto = ErrorDto.of("Book is locked", code="RESOURCE_CONFLICT").with_error_info(info)

        assert dto.code == "BOOK_LOCKED"
        assert dto.message == "Book is locked"
        assert dto.params == {"until": "tomorrow"}

    def test_error_dto_without_info(self):
        dto = ErrorDto.of("Gone", code="RESOURCE_NOT_FOUND")

        assert dto.with_error_info(None) is dto

    @pytest.mark.parametrize(
        "error_type, expected",
        [
            ("missing", CommonFieldErrorCode.REQUIRED_NOT_NULL),
            ("enum", CommonFieldErrorCode.INVALID_ENUM_VALUE),
            ("something_new", CommonFieldErrorCode.INVALID),
        ],
    )
    def test_validation_type_mapping(self, error_type, expected):
        assert CommonFieldErrorCode.from_validation_type(error_type) is expected
