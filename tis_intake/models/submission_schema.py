from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError
from typing import Optional, Any

from tis_intake.models.fields import (
    NAME_PATTERN, PRODUCT_LINE_PATTERN, ER_CODE_PATTERN, MODEL_NUMBER_PATTERN,
    NAME_MIN, NAME_MAX, PRODUCT_LINE_MIN, DESCRIPTION_MIN, DESCRIPTION_MAX,
    matches,
)


# camelCase on the wire, snake_case in Python; "model_number" needs the
# protected namespace lifted.
_WIRE_CONFIG = ConfigDict(populate_by_name=True, protected_namespaces=())


class SubmissionFields(BaseModel):
    model_config = _WIRE_CONFIG

    name: str
    product_line: str = Field(..., alias="productLine")
    er_code: str = Field(..., alias="erCode")
    description: str
    model_number: str = Field(..., alias="modelNumber")


class SubmissionCreate(SubmissionFields):
    """Authoritative server-side checks; any client-sent ``submittedAt`` is ignored."""

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Name is required")
        if len(v) < NAME_MIN:
            raise PydanticCustomError("too_short", "Name must be at least 2 characters")
        if len(v) > NAME_MAX:
            raise PydanticCustomError("too_long", "Name must be less than 100 characters")
        if not matches(NAME_PATTERN, v):
            raise PydanticCustomError("invalid_format", "Name can only contain letters and spaces")
        return v

    @field_validator("product_line")
    @classmethod
    def _check_product_line(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Product Line is required")
        if len(v) < PRODUCT_LINE_MIN or not matches(PRODUCT_LINE_PATTERN, v):
            raise PydanticCustomError(
                "invalid_format",
                "Product Line format must be 2-4 letters, a dash and 2-4 digits",
            )
        return v

    @field_validator("er_code")
    @classmethod
    def _check_er_code(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "ER Code is required")
        if not matches(ER_CODE_PATTERN, v):
            raise PydanticCustomError("invalid_format", "ER Code format must be ER followed by 6 digits")
        return v

    @field_validator("description")
    @classmethod
    def _check_description(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Description is required")
        if len(v) < DESCRIPTION_MIN:
            raise PydanticCustomError("too_short", "Description must be at least 10 characters")
        if len(v) > DESCRIPTION_MAX:
            raise PydanticCustomError("too_long", "Description must be less than 500 characters")
        return v

    @field_validator("model_number")
    @classmethod
    def _check_model_number(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Model Number is required")
        if not matches(MODEL_NUMBER_PATTERN, v):
            raise PydanticCustomError(
                "invalid_format",
                "Model Number format must be 2 letters + 4 digits + optional letter",
            )
        return v


class Submission(SubmissionFields):
    id: str
    submitted_at: datetime = Field(..., alias="submittedAt")

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current: int
    total: int
    has_more: bool = Field(..., alias="hasMore")


class FormData(BaseModel):
    """Client-side field map; also the draft payload."""

    model_config = _WIRE_CONFIG

    name: str = ""
    product_line: str = Field("", alias="productLine")
    er_code: str = Field("", alias="erCode")
    description: str = ""
    model_number: str = Field("", alias="modelNumber")

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class ValidationResult(BaseModel):
    is_valid: bool
    message: str


class ApiResult(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
    pagination: Optional[dict] = None
