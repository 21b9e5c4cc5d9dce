"""
Advisory field validators for the intake form.

Each validator is a pure function from the current field value to a
``ValidationResult``; the first failing rule supplies the message. These
checks only drive the UI (submit enablement, hints). The server repeats the
authoritative checks in ``tis_intake.models.submission_schema``.
"""

from typing import Any, Callable, Dict, List, Mapping, Tuple, Union

from tis_intake.models.fields import (
    NAME_PATTERN, PRODUCT_LINE_PATTERN, ER_CODE_PATTERN, MODEL_NUMBER_PATTERN,
    NAME_MIN, PRODUCT_LINE_MIN, DESCRIPTION_MIN, DESCRIPTION_MAX,
    FIELD_NAMES, matches,
)
from tis_intake.models.submission_schema import FormData, ValidationResult


def _ok(message: str) -> ValidationResult:
    return ValidationResult(is_valid=True, message=message)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, message=message)


def validate_name(value: str) -> ValidationResult:
    if not value:
        return _fail("Name is required")
    if len(value) < NAME_MIN:
        return _fail("Name must be at least 2 characters")
    if not matches(NAME_PATTERN, value):
        return _fail("Name can only contain letters and spaces")
    return _ok("Valid name format")


def validate_product_line(value: str) -> ValidationResult:
    if not value:
        return _fail("Product Line is required")
    if len(value) < PRODUCT_LINE_MIN:
        return _fail("Product Line must be at least 3 characters")
    if not matches(PRODUCT_LINE_PATTERN, value):
        return _fail("Format: XX-99 (2-4 letters, dash, 2-4 numbers)")
    return _ok("Valid product line format")


def validate_er_code(value: str) -> ValidationResult:
    if not value:
        return _fail("ER Code is required")
    if not matches(ER_CODE_PATTERN, value):
        return _fail("Format: ER followed by 6 digits (e.g., ER123456)")
    return _ok("Valid ER code format")


def validate_description(value: str) -> ValidationResult:
    if not value:
        return _fail("Description is required")
    if len(value) < DESCRIPTION_MIN:
        return _fail("Description must be at least 10 characters")
    if len(value) > DESCRIPTION_MAX:
        return _fail("Description must be less than 500 characters")
    return _ok("Valid description length")


def validate_model_number(value: str) -> ValidationResult:
    if not value:
        return _fail("Model Number is required")
    if not matches(MODEL_NUMBER_PATTERN, value):
        return _fail("Format: 2 letters + 4 digits + optional letter (e.g., AB1234C)")
    return _ok("Valid model number format")


VALIDATORS: Dict[str, Callable[[str], ValidationResult]] = {
    "name": validate_name,
    "productLine": validate_product_line,
    "erCode": validate_er_code,
    "description": validate_description,
    "modelNumber": validate_model_number,
}


def _as_wire(data: Union[FormData, Mapping[str, Any]]) -> Dict[str, str]:
    if isinstance(data, FormData):
        return data.to_wire()
    return {field: str(data.get(field) or "") for field in FIELD_NAMES}


def validate_form(data: Union[FormData, Mapping[str, Any]]) -> Dict[str, ValidationResult]:
    values = _as_wire(data)
    return {field: VALIDATORS[field](values[field]) for field in FIELD_NAMES}


def is_form_valid(data: Union[FormData, Mapping[str, Any]]) -> bool:
    values = _as_wire(data)
    results = validate_form(values)
    return all(r.is_valid for r in results.values()) and all(v.strip() for v in values.values())


def valid_fields_count(data: Union[FormData, Mapping[str, Any]]) -> int:
    return sum(1 for r in validate_form(data).values() if r.is_valid)


def failing_fields(data: Union[FormData, Mapping[str, Any]]) -> List[Tuple[str, str]]:
    return [(field, r.message) for field, r in validate_form(data).items() if not r.is_valid]
