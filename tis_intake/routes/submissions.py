from fastapi import APIRouter, Body, Depends, Request
from typing import Any, Callable, Optional

from tis_intake.errors import IntakeError
from tis_intake.services.submission_service import SubmissionService
from tis_intake.utils.logger import get_logger


router = APIRouter(prefix="/api/submissions", tags=["submissions"])
logger = get_logger("submissions")


def get_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


def _guarded(failure_message: str, fn: Callable, *args, **kwargs):
    """Client errors pass through; anything else is logged and answered with a fixed 500."""
    try:
        return fn(*args, **kwargs)
    except IntakeError as e:
        if e.status_code < 500:
            raise
        logger.exception(failure_message)
    except Exception:
        logger.exception(failure_message)
    raise IntakeError(failure_message)


@router.post("", status_code=201)
def create_submission(payload: Any = Body(default=None), service: SubmissionService = Depends(get_service)):
    submission = _guarded("Failed to save form submission", service.create, payload)
    return {
        "success": True,
        "message": "Form submitted successfully",
        "data": submission.to_api(),
    }


@router.get("")
def list_submissions(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    service: SubmissionService = Depends(get_service),
):
    records, pagination = _guarded("Failed to fetch submissions", service.list_submissions, page, limit)
    return {
        "success": True,
        "data": [r.to_api() for r in records],
        "pagination": pagination.model_dump(by_alias=True),
    }


@router.get("/{submission_id}")
def get_submission(submission_id: str, service: SubmissionService = Depends(get_service)):
    submission = _guarded("Failed to fetch submission", service.get, submission_id)
    return {"success": True, "data": submission.to_api()}


@router.delete("/{submission_id}")
def delete_submission(submission_id: str, service: SubmissionService = Depends(get_service)):
    _guarded("Failed to delete submission", service.delete, submission_id)
    return {"success": True, "message": "Submission deleted successfully"}
