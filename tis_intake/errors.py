"""
Error taxonomy for the submission service.

Every error renders as ``{"success": false, "message": ...}``; validation
failures add ``errors: [{field, message}]``. Unclassified faults never carry
internal detail to the caller.
"""

from typing import Any, Dict, List, Optional


class IntakeError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class SubmissionValidationError(IntakeError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @property
    def fields(self) -> List[str]:
        return [e["field"] for e in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class InvalidSubmissionId(IntakeError):
    status_code = 400
    message = "Invalid submission ID"


class SubmissionNotFound(IntakeError):
    status_code = 404
    message = "Submission not found"


class MalformedRequest(IntakeError):
    status_code = 400
    message = "Request body must be a JSON object"


class StoreError(IntakeError):
    """Backend failure inside a store; the cause stays in the server log."""

    status_code = 500
    message = "Internal server error"
