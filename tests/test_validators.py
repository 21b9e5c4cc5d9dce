import pytest

from tis_intake.client.validators import (
    failing_fields,
    is_form_valid,
    valid_fields_count,
    validate_description,
    validate_er_code,
    validate_form,
    validate_model_number,
    validate_name,
    validate_product_line,
)
from tis_intake.models.submission_schema import FormData


@pytest.mark.parametrize("value", ["Jo", "Jane Doe", "A" * 100])
def test_name_accepts_letters_and_spaces(value):
    assert validate_name(value).is_valid


@pytest.mark.parametrize(
    "value, message",
    [
        ("", "Name is required"),
        ("J", "Name must be at least 2 characters"),
        ("Jane1", "Name can only contain letters and spaces"),
        ("Jane-Doe", "Name can only contain letters and spaces"),
    ],
)
def test_name_rejections(value, message):
    result = validate_name(value)
    assert result.is_valid is False
    assert result.message == message


@pytest.mark.parametrize("value", ["AB-12", "ABCD-1234", "XY-999"])
def test_product_line_accepts_pattern(value):
    assert validate_product_line(value).is_valid


@pytest.mark.parametrize("value", ["", "AB", "A-12", "ABCDE-12", "AB-1", "AB-12345", "ab-12", "AB12"])
def test_product_line_rejections(value):
    assert validate_product_line(value).is_valid is False


def test_product_line_short_value_reports_length():
    assert validate_product_line("AB").message == "Product Line must be at least 3 characters"


def test_er_code_boundaries():
    assert validate_er_code("ER123456").is_valid
    assert validate_er_code("ER12345").is_valid is False
    assert validate_er_code("ER1234567").is_valid is False
    assert validate_er_code("er123456").is_valid is False
    assert validate_er_code("").message == "ER Code is required"


def test_er_code_rejects_trailing_newline():
    assert validate_er_code("ER123456\n").is_valid is False


def test_description_length_window():
    assert validate_description("x" * 10).is_valid
    assert validate_description("x" * 500).is_valid
    assert validate_description("x" * 9).message == "Description must be at least 10 characters"
    assert validate_description("x" * 501).message == "Description must be less than 500 characters"
    assert validate_description("").is_valid is False


@pytest.mark.parametrize("value", ["AB1234", "AB1234C"])
def test_model_number_accepts_optional_suffix(value):
    assert validate_model_number(value).is_valid


@pytest.mark.parametrize("value", ["", "A1234", "AB123", "AB1234CD", "ab1234", "AB12345"])
def test_model_number_rejections(value):
    assert validate_model_number(value).is_valid is False


def test_validate_form_covers_every_field(valid_payload):
    results = validate_form(valid_payload)
    assert set(results) == {"name", "productLine", "erCode", "description", "modelNumber"}
    assert all(r.is_valid for r in results.values())


def test_form_validity_needs_every_field(valid_payload):
    assert is_form_valid(valid_payload)
    assert is_form_valid(FormData.model_validate(valid_payload))

    valid_payload["erCode"] = "ER12345"
    assert not is_form_valid(valid_payload)
    assert valid_fields_count(valid_payload) == 4
    assert failing_fields(valid_payload) == [("erCode", "Format: ER followed by 6 digits (e.g., ER123456)")]


def test_empty_form_is_invalid():
    assert not is_form_valid(FormData())
    assert valid_fields_count(FormData()) == 0
