import math
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Tuple
from pydantic import ValidationError

from tis_intake.errors import (
    InvalidSubmissionId, MalformedRequest, SubmissionNotFound, SubmissionValidationError,
)
from tis_intake.models.fields import FIELD_LABELS
from tis_intake.models.submission_schema import Pagination, Submission, SubmissionCreate, SubmissionFields
from tis_intake.services.submission_store import SubmissionStore, is_valid_submission_id, new_submission_id
from tis_intake.utils.sanitize import sanitize_payload
from tis_intake.utils.logger import get_logger


logger = get_logger("submission-service")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_WIRE_NAMES = {name: f.alias or name for name, f in SubmissionFields.model_fields.items()}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _positive_int(value: Any, default: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return n if n >= 1 else default


def parse_page_params(page: Any = None, limit: Any = None) -> Tuple[int, int]:
    return _positive_int(page, DEFAULT_PAGE), min(_positive_int(limit, DEFAULT_LIMIT), MAX_LIMIT)


def field_errors(exc: ValidationError) -> List[dict[str, str]]:
    """One ``{field, message}`` entry per failing field, in schema order."""
    errors, seen = [], set()
    for err in exc.errors():
        loc = str(err["loc"][0]) if err["loc"] else "body"
        field = _WIRE_NAMES.get(loc, loc)
        if field in seen:
            continue
        seen.add(field)
        label = FIELD_LABELS.get(field, field)
        if err["type"] == "missing":
            message = f"{label} is required"
        elif err["type"] == "string_type":
            message = f"{label} must be a string"
        else:
            message = err["msg"]
        errors.append({"field": field, "message": message})
    return errors


class SubmissionService:
    """Create/list/get/delete over an injected store."""

    def __init__(self, store: SubmissionStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or _utcnow

    def create(self, payload: Any) -> Submission:
        if not isinstance(payload, dict):
            raise MalformedRequest()
        try:
            fields = SubmissionCreate.model_validate(sanitize_payload(payload))
        except ValidationError as e:
            errors = field_errors(e)
            logger.info("Rejected submission: %s", ", ".join(err["field"] for err in errors))
            raise SubmissionValidationError(errors) from e

        submission = Submission(
            id=new_submission_id(),
            submitted_at=self.clock(),
            **fields.model_dump(),
        )
        stored = self.store.insert(submission)
        logger.info("Stored submission %s", stored.id)
        return stored

    def list_submissions(self, page: Any = None, limit: Any = None) -> Tuple[List[Submission], Pagination]:
        page, limit = parse_page_params(page, limit)
        skip = (page - 1) * limit
        records = self.store.find(skip=skip, limit=limit)
        total = self.store.count()
        pagination = Pagination(
            current=page,
            total=math.ceil(total / limit),
            has_more=skip + len(records) < total,
        )
        return records, pagination

    def get(self, submission_id: str) -> Submission:
        if not is_valid_submission_id(submission_id):
            raise InvalidSubmissionId()
        submission = self.store.find_by_id(submission_id)
        if submission is None:
            raise SubmissionNotFound()
        return submission

    def delete(self, submission_id: str) -> Submission:
        if not is_valid_submission_id(submission_id):
            raise InvalidSubmissionId()
        submission = self.store.delete_by_id(submission_id)
        if submission is None:
            raise SubmissionNotFound()
        logger.info("Deleted submission %s", submission_id)
        return submission
